"""Password-based key derivation.

PBKDF2-HMAC (via ``cryptography``) feeds the cipher engines; Argon2id (via
``argon2-cffi``) backs the Argon2id password hash.
"""
from typing import Tuple, Union

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from crypthash.core.exceptions import KeyDerivationError


_HASHES = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}


def _to_bytes(password: Union[str, bytes]) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def derive_key(
    password: Union[str, bytes],
    salt: bytes,
    key_length: int,
    iterations: int,
    hash_name: str = "sha256",
) -> bytes:
    """
    Stretch ``password`` into exactly ``key_length`` bytes with PBKDF2-HMAC.
    Deterministic for a fixed (password, salt, key_length, iterations, hash_name).
    """
    if key_length <= 0:
        raise KeyDerivationError(f"Key length must be positive, got {key_length}.")
    if iterations <= 0:
        raise KeyDerivationError(f"Iteration count must be positive, got {iterations}.")
    try:
        algorithm = _HASHES[hash_name.lower()]()
    except KeyError:
        raise KeyDerivationError(f"Unsupported KDF hash \"{hash_name}\".")

    kdf = PBKDF2HMAC(algorithm=algorithm, length=key_length, salt=salt, iterations=iterations)
    return kdf.derive(_to_bytes(password))


def derive_split_keys(
    password: Union[str, bytes],
    salt: bytes,
    cipher_key_length: int,
    mac_key_length: int,
    iterations: int,
    hash_name: str = "sha256",
) -> Tuple[bytes, bytes]:
    """Derive ``cipher_key_length + mac_key_length`` bytes in one pass and split them."""
    if cipher_key_length <= 0 or mac_key_length <= 0:
        raise KeyDerivationError("Cipher and MAC key lengths must both be positive.")
    material = derive_key(
        password, salt, cipher_key_length + mac_key_length, iterations, hash_name
    )
    return material[:cipher_key_length], material[cipher_key_length:]


def derive_argon2id_key(
    password: Union[str, bytes],
    salt: bytes,
    time_cost: int = 3,
    memory_cost: int = 65536,
    parallelism: int = 1,
    key_length: int = 32,
) -> bytes:
    """
    Derive raw key bytes from a password using Argon2id.
    """
    if key_length <= 0:
        raise KeyDerivationError(f"Key length must be positive, got {key_length}.")
    if time_cost <= 0:
        raise KeyDerivationError(f"Iteration count must be positive, got {time_cost}.")

    try:
        return hash_secret_raw(
            secret=_to_bytes(password),
            salt=salt,
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=key_length,
            type=Type.ID,
        )
    except HashingError as e:
        raise KeyDerivationError(f"Argon2id derivation failed: {e}")
