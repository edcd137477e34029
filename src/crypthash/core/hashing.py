""" Utility for message digests over bytes, strings and files. """

import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

from crypthash.config import get_settings
from crypthash.core.exceptions import CryptHashError, CryptoIOError, InvalidInputError, UnknownAlgorithmError
from crypthash.core.results import ErrorKind, HashResult
from crypthash.core.streaming import ProgressCallback, StreamProcessor
from crypthash.security.compare import hex_digest_equal


logger = logging.getLogger(__name__)

HASH_ALGORITHMS = ("md5", "sha1", "sha256", "sha384", "sha512")

Data = Union[str, bytes]


def new_hash(algorithm: str):
    name = (algorithm or "").strip().lower()
    if name not in HASH_ALGORITHMS:
        raise UnknownAlgorithmError(f"Unknown algorithm \"{algorithm}\".")
    return hashlib.new(name)


def _to_bytes(data: Data) -> bytes:
    if data is None:
        raise InvalidInputError("String to compute hash required.")
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def compute_hash(data: Data, algorithm: str = "sha256") -> HashResult:
    """Hash bytes or a UTF-8 string."""
    try:
        h = new_hash(algorithm)
        h.update(_to_bytes(data))
    except CryptHashError as e:
        return HashResult.from_error(e)
    return HashResult.ok(h.digest())


def compute_file_hash(
    file_path: Union[str, Path],
    algorithm: str = "sha256",
    chunk_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> HashResult:
    """Hash a file in chunks, reporting progress as it goes."""
    path = Path(file_path)
    try:
        h = new_hash(algorithm)
        if not path.is_file():
            raise CryptoIOError(f"File \"{path}\" not found.")
        total = path.stat().st_size
        processor = StreamProcessor(chunk_size or get_settings().chunk_size, on_progress)
        with open(path, "rb") as f:
            processor.process(f, None, h.update, total, "Computing file hash...")
    except (UnknownAlgorithmError, CryptoIOError, OSError) as e:
        logger.warning("hashing %s failed: %s", path, e)
        return HashResult.from_error(e)
    return HashResult.ok(h.digest())


def _compare(result: HashResult, expected_hex: str) -> HashResult:
    if result.failed:
        return result
    if hex_digest_equal(expected_hex, result.hash_hex):
        return HashResult.ok(result.hash_bytes, message="Hash verified.")
    return HashResult.fail(ErrorKind.INTEGRITY, "Hashes do not match.")


def verify_hash(expected_hex: str, data: Data, algorithm: str = "sha256") -> HashResult:
    """Recompute the digest of ``data`` and compare it with ``expected_hex`` (case-insensitive)."""
    return _compare(compute_hash(data, algorithm), expected_hex)


def verify_file_hash(
    expected_hex: str,
    file_path: Union[str, Path],
    algorithm: str = "sha256",
    chunk_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> HashResult:
    return _compare(compute_file_hash(file_path, algorithm, chunk_size, on_progress), expected_hex)
