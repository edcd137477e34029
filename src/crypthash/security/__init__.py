"""Security primitives for crypthash.

This package holds:
- PBKDF2 / Argon2id key derivation
- OS-backed random salts, IVs, nonces and keys
- constant-time comparison
- the AES-CBC + HMAC (Encrypt-then-MAC) and AES-GCM (AEAD) engines
- HMAC and salted password hashes
"""

from .rng import random_bytes, generate_salt, generate_iv, generate_nonce, generate_key
from .kdf import derive_key, derive_split_keys, derive_argon2id_key
from .compare import constant_time_equal, hex_digest_equal
from .suites import CipherSuite
from .cbc_hmac import CbcHmacEngine
from .aead import GcmEngine
from .mac import compute_hmac, compute_file_hmac, verify_hmac, verify_file_hmac

__all__ = [
    "random_bytes",
    "generate_salt",
    "generate_iv",
    "generate_nonce",
    "generate_key",
    "derive_key",
    "derive_split_keys",
    "derive_argon2id_key",
    "constant_time_equal",
    "hex_digest_equal",
    "CipherSuite",
    "CbcHmacEngine",
    "GcmEngine",
    "compute_hmac",
    "compute_file_hmac",
    "verify_hmac",
    "verify_file_hmac",
]
