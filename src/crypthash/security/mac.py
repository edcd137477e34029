"""HMAC computation and verification.

When no key is supplied a random key the size of the digest is generated and
returned in ``HMACResult.key``; without it the tag could never be checked.
"""
import hashlib
import hmac
import logging
from pathlib import Path
from typing import Optional, Union

from crypthash.config import get_settings
from crypthash.core.encoding import decode_hex
from crypthash.core.exceptions import CryptHashError, CryptoIOError, InvalidInputError, UnknownAlgorithmError
from crypthash.core.results import ErrorKind, HMACResult
from crypthash.core.streaming import ProgressCallback, StreamProcessor
from crypthash.security.compare import constant_time_equal
from crypthash.security.rng import generate_key


logger = logging.getLogger(__name__)

HMAC_ALGORITHMS = {
    "hmacmd5": "md5",
    "hmacsha1": "sha1",
    "hmacsha256": "sha256",
    "hmacsha384": "sha384",
    "hmacsha512": "sha512",
}

Data = Union[str, bytes]


def _digest_name(algorithm: str) -> str:
    name = (algorithm or "").strip().lower().replace("-", "").replace("_", "")
    if name in HMAC_ALGORITHMS:
        return HMAC_ALGORITHMS[name]
    if name in HMAC_ALGORITHMS.values():
        return name
    raise UnknownAlgorithmError(f"Unknown algorithm \"{algorithm}\".")


def _new_hmac(algorithm: str, key: Optional[bytes]):
    # Returns (hmac object, generated key or None).
    digest = _digest_name(algorithm)
    generated = None
    if key is None or len(key) == 0:
        generated = generate_key(hashlib.new(digest).digest_size)
        key = generated
    return hmac.new(bytes(key), digestmod=digest), generated


def _to_bytes(data: Data) -> bytes:
    if data is None:
        raise InvalidInputError("String to compute HMAC required.")
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def compute_hmac(data: Data, key: Optional[bytes] = None, algorithm: str = "hmacsha256") -> HMACResult:
    """Compute the HMAC of bytes or a UTF-8 string."""
    try:
        mac, generated = _new_hmac(algorithm, key)
        mac.update(_to_bytes(data))
    except CryptHashError as e:
        return HMACResult.from_error(e)
    return HMACResult.ok(mac.digest(), key=generated)


def compute_file_hmac(
    file_path: Union[str, Path],
    key: Optional[bytes] = None,
    algorithm: str = "hmacsha256",
    chunk_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> HMACResult:
    """Compute the HMAC of a file in chunks."""
    path = Path(file_path)
    try:
        mac, generated = _new_hmac(algorithm, key)
        if not path.is_file():
            raise CryptoIOError(f"File \"{path}\" not found.")
        total = path.stat().st_size
        processor = StreamProcessor(chunk_size or get_settings().chunk_size, on_progress)
        with open(path, "rb") as f:
            processor.process(f, None, mac.update, total, "Computing file HMAC...")
    except (CryptHashError, OSError) as e:
        logger.warning("HMAC of %s failed: %s", path, e)
        return HMACResult.from_error(e)
    return HMACResult.ok(mac.digest(), key=generated)


def _expected_bytes(expected: Union[str, bytes]) -> bytes:
    if isinstance(expected, str):
        return decode_hex(expected)
    return bytes(expected)


def _verify(computed: HMACResult, expected: Union[str, bytes]) -> HMACResult:
    if computed.failed:
        return computed
    try:
        tag = _expected_bytes(expected)
    except InvalidInputError as e:
        return HMACResult.from_error(e)
    if constant_time_equal(computed.hash_bytes, tag):
        return HMACResult.ok(computed.hash_bytes, message="HMAC verified.")
    return HMACResult.fail(ErrorKind.INTEGRITY, "HMACs do not match.")


def verify_hmac(
    expected: Union[str, bytes], data: Data, key: bytes, algorithm: str = "hmacsha256"
) -> HMACResult:
    """
    Recompute the HMAC of ``data`` under ``key`` and compare it with
    ``expected`` (raw bytes, or hex in any case) in constant time.
    """
    if not key:
        return HMACResult.fail(ErrorKind.INVALID_INPUT, "The HMAC key is required for verification.")
    return _verify(compute_hmac(data, key, algorithm), expected)


def verify_file_hmac(
    expected: Union[str, bytes],
    file_path: Union[str, Path],
    key: bytes,
    algorithm: str = "hmacsha256",
    chunk_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> HMACResult:
    if not key:
        return HMACResult.fail(ErrorKind.INVALID_INPUT, "The HMAC key is required for verification.")
    return _verify(compute_file_hmac(file_path, key, algorithm, chunk_size, on_progress), expected)
