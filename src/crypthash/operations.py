"""Operation dispatch by algorithm name and input type.

This is the seam a command-line driver or any other front end talks to: it
takes the loosely-typed request (``"aes256cbc"``, ``"file"`` ...) and routes it
to the right engine, always answering with a result object. Names are matched
case-insensitively.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from crypthash.core import hashing
from crypthash.core.exceptions import (
    CryptHashError,
    InvalidInputError,
    UnknownAlgorithmError,
    UnknownInputTypeError,
    UnsupportedOperationError,
)
from crypthash.core.results import DecryptionResult, EncryptionResult, ErrorKind, HashResult, HMACResult
from crypthash.core.streaming import ProgressCallback
from crypthash.security import mac, password_hash
from crypthash.security.aead import GcmEngine
from crypthash.security.cbc_hmac import CbcHmacEngine
from crypthash.security.compare import hex_digest_equal
from crypthash.security.suites import CipherSuite


logger = logging.getLogger(__name__)

INPUT_STRING = "string"
INPUT_FILE = "file"

PathLike = Union[str, Path]


def get_engine(
    suite: Union[CipherSuite, str],
    iterations: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> Union[CbcHmacEngine, GcmEngine]:
    """Return the engine for ``suite`` (a CipherSuite or its short name)."""
    if isinstance(suite, str):
        suite = CipherSuite.from_name(suite)
    if suite.is_aead:
        return GcmEngine(iterations=iterations)
    return CbcHmacEngine(suite, iterations=iterations, chunk_size=chunk_size)


def _input_type(input_type: str) -> str:
    value = (input_type or "").strip().lower()
    if value not in (INPUT_STRING, INPUT_FILE):
        raise UnknownInputTypeError(f"Unknown input type \"{input_type}\".")
    return value


def _require_output(output_path: Optional[PathLike]) -> Path:
    if not output_path:
        raise InvalidInputError("Output file path required for file input.")
    return Path(output_path)


def encrypt(
    algorithm: str,
    input_type: str,
    data: Union[str, PathLike],
    password: Optional[Union[str, bytes]] = None,
    output_path: Optional[PathLike] = None,
    associated_data: Optional[Union[str, bytes]] = None,
    key: Optional[bytes] = None,
    delete_source_file: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    iterations: Optional[int] = None,
) -> EncryptionResult:
    """
    Encrypt a string (Base64 frame in the result) or a file (written to
    ``output_path``). ``associated_data`` and ``key`` only apply to aes256gcm.
    """
    try:
        kind = _input_type(input_type)
        engine = get_engine(algorithm, iterations=iterations)
        if kind == INPUT_STRING:
            if isinstance(engine, GcmEngine):
                return engine.encrypt_string(data, password, key, associated_data)
            return engine.encrypt_string(data, password)
        if isinstance(engine, GcmEngine):
            raise UnsupportedOperationError(
                f"Algorithm \"{algorithm}\" currently not available for file encryption."
            )
        return engine.encrypt_file(
            data, _require_output(output_path), password, delete_source_file, on_progress
        )
    except CryptHashError as e:
        logger.warning("encrypt request rejected: %s", e)
        return EncryptionResult.from_error(e)


def decrypt(
    algorithm: str,
    input_type: str,
    data: Union[str, PathLike],
    password: Optional[Union[str, bytes]] = None,
    output_path: Optional[PathLike] = None,
    associated_data: Optional[Union[str, bytes]] = None,
    key: Optional[bytes] = None,
    delete_encrypted_file: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    iterations: Optional[int] = None,
) -> DecryptionResult:
    """Inverse of :func:`encrypt`."""
    try:
        kind = _input_type(input_type)
        engine = get_engine(algorithm, iterations=iterations)
        if kind == INPUT_STRING:
            if isinstance(engine, GcmEngine):
                return engine.decrypt_string(data, password, key, associated_data)
            return engine.decrypt_string(data, password)
        if isinstance(engine, GcmEngine):
            raise UnsupportedOperationError(
                f"Algorithm \"{algorithm}\" currently not available for file decryption."
            )
        return engine.decrypt_file(
            data, _require_output(output_path), password, delete_encrypted_file, on_progress
        )
    except CryptHashError as e:
        logger.warning("decrypt request rejected: %s", e)
        return DecryptionResult.from_error(e)


def _compared(result, computed_hex: str, given: str, label: str = "hash"):
    # Turns a computed digest into a match / mismatch outcome.
    if hex_digest_equal(given, computed_hex):
        return type(result).ok(
            result.hash_bytes,
            message=f"Computed {label} MATCH with given {label}: {computed_hex}",
        )
    return type(result).fail(
        ErrorKind.INTEGRITY,
        f"Computed {label} DOES NOT MATCH with given {label}.\n"
        f"Computed {label}: {computed_hex}\nGiven {label}: {given}",
    )


def compute_hash(
    algorithm: str,
    input_type: str,
    data: Union[str, bytes, PathLike],
    compare_hash: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> HashResult:
    """
    Hash a string or file with md5/sha1/sha256/sha384/sha512, or a string
    with pbkdf2. With ``compare_hash`` the result reports whether it matches.
    """
    name = (algorithm or "").strip().lower()
    try:
        kind = _input_type(input_type)
        if name == "pbkdf2":
            if kind == INPUT_FILE:
                raise UnsupportedOperationError(
                    f"Algorithm \"{algorithm}\" currently not available for file hashing."
                )
            if compare_hash:
                return password_hash.verify_pbkdf2_hash(data, compare_hash)
            return password_hash.compute_pbkdf2_hash(data)
        if name not in hashing.HASH_ALGORITHMS:
            raise UnknownAlgorithmError(f"Unknown algorithm \"{algorithm}\".")
    except CryptHashError as e:
        return HashResult.from_error(e)

    if kind == INPUT_STRING:
        result = hashing.compute_hash(data, name)
    else:
        result = hashing.compute_file_hash(data, name, on_progress=on_progress)
    if result.failed or not compare_hash:
        return result
    return _compared(result, result.hash_hex, compare_hash)


def compute_hmac(
    algorithm: str,
    input_type: str,
    data: Union[str, bytes, PathLike],
    key: Optional[Union[str, bytes]] = None,
    compare_hash: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> HMACResult:
    """
    HMAC a string or file. A missing key is generated and returned in the
    result; comparing against ``compare_hash`` needs a caller-supplied key.
    """
    if isinstance(key, str):
        key = key.encode("utf-8")
    try:
        kind = _input_type(input_type)
        if compare_hash and not key:
            raise InvalidInputError("The HMAC key parameter is required for comparison.")
    except CryptHashError as e:
        return HMACResult.from_error(e)

    if kind == INPUT_STRING:
        result = mac.compute_hmac(data, key, algorithm)
    else:
        result = mac.compute_file_hmac(data, key, algorithm, on_progress=on_progress)
    if result.failed or not compare_hash:
        return result
    return _compared(result, result.hash_hex, compare_hash, "HMAC")


def compute_argon2id(
    data: Union[str, bytes],
    salt: Optional[bytes] = None,
    iterations: Optional[int] = None,
    memory_size: Optional[int] = None,
    parallelism: Optional[int] = None,
    key_length: int = 32,
    compare_hash: Optional[str] = None,
) -> HashResult:
    """Raw Argon2id hash of a string; ``iterations`` is the Argon2 time cost."""
    result = password_hash.compute_argon2id_hash(
        data, salt, iterations, memory_size, parallelism, key_length
    )
    if result.failed or not compare_hash:
        return result
    outcome = _compared(result, result.hash_hex, compare_hash, "Argon2id hash")
    if outcome.success:
        return HashResult.ok(result.hash_bytes, message=outcome.message, salt=result.salt)
    return outcome
