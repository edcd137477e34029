"""crypthash: authenticated encryption, keyed hashing and password hashing
for strings and large files, with result objects instead of exceptions."""

from crypthash.core.results import (
    ErrorKind,
    EncryptionResult,
    DecryptionResult,
    HashResult,
    HMACResult,
)
from crypthash.security import CipherSuite, CbcHmacEngine, GcmEngine
from crypthash.operations import (
    get_engine,
    encrypt,
    decrypt,
    compute_hash,
    compute_hmac,
    compute_argon2id,
)

__version__ = "0.1.0"

__all__ = [
    "ErrorKind",
    "EncryptionResult",
    "DecryptionResult",
    "HashResult",
    "HMACResult",
    "CipherSuite",
    "CbcHmacEngine",
    "GcmEngine",
    "get_engine",
    "encrypt",
    "decrypt",
    "compute_hash",
    "compute_hmac",
    "compute_argon2id",
]
