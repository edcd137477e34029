"""Cryptographically secure random bytes for salts, IVs, nonces and keys."""
import os

SALT_SIZE = 16
IV_SIZE = 16
NONCE_SIZE = 12


def random_bytes(n: int) -> bytes:
    """Return ``n`` fresh bytes from the OS CSPRNG."""
    if n <= 0:
        raise ValueError(f"random byte count must be positive, got {n}")
    return os.urandom(n)


def generate_salt(length: int = SALT_SIZE) -> bytes:
    """Return a cryptographically secure random salt."""
    return random_bytes(length)


def generate_iv() -> bytes:
    return random_bytes(IV_SIZE)


def generate_nonce() -> bytes:
    return random_bytes(NONCE_SIZE)


def generate_key(length: int) -> bytes:
    return random_bytes(length)
