"""Salted password hashes: PBKDF2-HMAC-SHA1 and Argon2id.

PBKDF2 hashes carry their salt: ``hash_hex`` is ``hex(salt || derived)``, so
verification only needs the password, the hash and the iteration count.
Argon2id hashes are raw; the salt is returned separately in ``HashResult.salt``
and must be passed back for verification.
"""
from typing import Optional, Union

from crypthash.config import get_settings
from crypthash.core.encoding import decode_hex
from crypthash.core.exceptions import CryptHashError, InvalidInputError
from crypthash.core.results import ErrorKind, HashResult
from crypthash.security.compare import constant_time_equal, hex_digest_equal
from crypthash.security.kdf import derive_argon2id_key, derive_key
from crypthash.security.rng import SALT_SIZE, generate_salt


PBKDF2_KEY_SIZE = 32

Password = Union[str, bytes]


def _require_password(password: Optional[Password]) -> None:
    if password is None or len(password) == 0:
        raise InvalidInputError("Password required.")


def compute_pbkdf2_hash(
    password: Password,
    salt: Optional[bytes] = None,
    iterations: Optional[int] = None,
    key_length: int = PBKDF2_KEY_SIZE,
) -> HashResult:
    try:
        _require_password(password)
        salt = salt if salt is not None else generate_salt()
        if len(salt) != SALT_SIZE:
            raise InvalidInputError(f"Salt must be {SALT_SIZE} bytes.")
        if iterations is None:
            iterations = get_settings().kdf_iterations
        derived = derive_key(password, salt, key_length, iterations, "sha1")
    except CryptHashError as e:
        return HashResult.from_error(e)
    return HashResult.ok(salt + derived, salt=salt)


def verify_pbkdf2_hash(password: Password, hash_hex: str, iterations: Optional[int] = None) -> HashResult:
    """Re-derive with the salt stored at the front of ``hash_hex`` and compare."""
    try:
        stored = decode_hex(hash_hex)
        if len(stored) <= SALT_SIZE:
            raise InvalidInputError("PBKDF2 hash is too short to contain a salt.")
    except CryptHashError as e:
        return HashResult.from_error(e)

    salt, expected = stored[:SALT_SIZE], stored[SALT_SIZE:]
    computed = compute_pbkdf2_hash(password, salt, iterations, len(expected))
    if computed.failed:
        return computed
    if constant_time_equal(computed.hash_bytes[SALT_SIZE:], expected):
        return HashResult.ok(computed.hash_bytes, message="Hash verified.", salt=salt)
    return HashResult.fail(ErrorKind.INTEGRITY, "Hashes do not match.")


def compute_argon2id_hash(
    password: Password,
    salt: Optional[bytes] = None,
    time_cost: Optional[int] = None,
    memory_cost: Optional[int] = None,
    parallelism: Optional[int] = None,
    key_length: int = 32,
) -> HashResult:
    """Raw Argon2id hash; a random salt is generated when none is given."""
    settings = get_settings()
    try:
        _require_password(password)
        salt = salt if salt is not None else generate_salt()
        digest = derive_argon2id_key(
            password,
            salt,
            time_cost=settings.argon2_time_cost if time_cost is None else time_cost,
            memory_cost=settings.argon2_memory_cost if memory_cost is None else memory_cost,
            parallelism=settings.argon2_parallelism if parallelism is None else parallelism,
            key_length=key_length,
        )
    except CryptHashError as e:
        return HashResult.from_error(e)
    return HashResult.ok(digest, salt=salt)


def verify_argon2id_hash(
    password: Password,
    expected_hex: str,
    salt: bytes,
    time_cost: Optional[int] = None,
    memory_cost: Optional[int] = None,
    parallelism: Optional[int] = None,
) -> HashResult:
    try:
        key_length = len(decode_hex(expected_hex))
    except CryptHashError as e:
        return HashResult.from_error(e)
    if key_length == 0:
        return HashResult.fail(ErrorKind.INVALID_INPUT, "Hash string required.")
    computed = compute_argon2id_hash(password, salt, time_cost, memory_cost, parallelism, key_length)
    if computed.failed:
        return computed
    if hex_digest_equal(expected_hex, computed.hash_hex):
        return HashResult.ok(computed.hash_bytes, message="Hash verified.", salt=salt)
    return HashResult.fail(ErrorKind.INTEGRITY, "Hashes do not match.")
