"""
Result types returned by every public crypthash operation.

A result is a tagged value: ``error_kind is None`` means success and exactly
the payload matching the input mode is populated; otherwise every payload
field is empty and ``message`` says what went wrong.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    # Failure categories carried by failed results
    UNKNOWN_ALGORITHM = "unknown_algorithm"
    UNKNOWN_INPUT_TYPE = "unknown_input_type"
    INVALID_INPUT = "invalid_input"
    KEY_DERIVATION = "key_derivation"
    INTEGRITY = "integrity"
    PADDING = "padding"
    IO = "io"
    UNSUPPORTED_OPERATION = "unsupported_operation"


@dataclass(frozen=True)
class _BaseResult:
    success: bool
    message: str = ""
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def fail(cls, kind: ErrorKind, message: str):
        """Build a failed result; the message must not be empty."""
        if not message:
            raise ValueError("failed results need a message")
        return cls(success=False, message=message, error_kind=kind)

    @classmethod
    def from_error(cls, exc) -> "_BaseResult":
        """Build a failed result from a CryptHashError (or OSError)."""
        kind = getattr(exc, "kind", ErrorKind.IO)
        return cls.fail(kind, str(exc) or exc.__class__.__name__)

    @property
    def failed(self) -> bool:
        return not self.success


@dataclass(frozen=True)
class EncryptionResult(_BaseResult):
    encrypted_bytes: bytes = b""
    encrypted_base64: Optional[str] = None

    @classmethod
    def ok(cls, encrypted_bytes: bytes = b"", encrypted_base64: Optional[str] = None, message: str = ""):
        if encrypted_bytes and encrypted_base64 is not None:
            raise ValueError("populate either encrypted_bytes or encrypted_base64, not both")
        return cls(
            success=True,
            message=message,
            encrypted_bytes=encrypted_bytes,
            encrypted_base64=encrypted_base64,
        )


@dataclass(frozen=True)
class DecryptionResult(_BaseResult):
    decrypted_bytes: bytes = b""
    decrypted_string: Optional[str] = None

    @classmethod
    def ok(cls, decrypted_bytes: bytes = b"", decrypted_string: Optional[str] = None, message: str = ""):
        if decrypted_bytes and decrypted_string is not None:
            raise ValueError("populate either decrypted_bytes or decrypted_string, not both")
        return cls(
            success=True,
            message=message,
            decrypted_bytes=decrypted_bytes,
            decrypted_string=decrypted_string,
        )


@dataclass(frozen=True)
class HashResult(_BaseResult):
    hash_bytes: bytes = b""
    hash_hex: str = ""
    # populated by salted password hashes (pbkdf2, argon2id)
    salt: Optional[bytes] = None

    @classmethod
    def ok(cls, hash_bytes: bytes, message: str = "", salt: Optional[bytes] = None):
        return cls(
            success=True,
            message=message,
            hash_bytes=hash_bytes,
            hash_hex=hash_bytes.hex(),
            salt=salt,
        )


@dataclass(frozen=True)
class HMACResult(_BaseResult):
    hash_bytes: bytes = b""
    hash_hex: str = ""
    # only set when the key was generated for the caller
    key: Optional[bytes] = None

    @classmethod
    def ok(cls, hash_bytes: bytes, key: Optional[bytes] = None, message: str = ""):
        return cls(
            success=True,
            message=message,
            hash_bytes=hash_bytes,
            hash_hex=hash_bytes.hex(),
            key=key,
        )
