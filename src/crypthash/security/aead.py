"""AES-256-GCM authenticated encryption with associated data.

Frame layout:
- password mode: salt(16) || nonce(12) || ciphertext || tag(16)
- key mode:      nonce(12) || ciphertext || tag(16)

Associated data is never stored in the frame; the caller supplies it again
on decryption and it must match byte for byte. The nonce is always drawn
fresh from the OS RNG, there is no way to pass one in.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from crypthash.config import get_settings
from crypthash.core.encoding import decode_base64, encode_base64
from crypthash.core.exceptions import (
    CryptHashError,
    IntegrityError,
    InvalidInputError,
    MalformedFrameError,
    UnsupportedOperationError,
)
from crypthash.core.results import DecryptionResult, EncryptionResult
from crypthash.security.kdf import derive_key
from crypthash.security.rng import NONCE_SIZE, SALT_SIZE, random_bytes
from crypthash.security.suites import CipherSuite


logger = logging.getLogger(__name__)

KEY_SIZE = CipherSuite.AES256_GCM.key_size
TAG_SIZE = CipherSuite.AES256_GCM.tag_size

Secret = Union[str, bytes]
AssociatedData = Optional[Union[str, bytes]]


def _ad_bytes(associated_data: AssociatedData) -> Optional[bytes]:
    if associated_data is None:
        return None
    if isinstance(associated_data, str):
        return associated_data.encode("utf-8")
    return bytes(associated_data)


class GcmEngine:
    """AES-256-GCM engine keyed either by a password (PBKDF2) or a raw 32-byte key."""

    suite = CipherSuite.AES256_GCM

    def __init__(self, iterations: Optional[int] = None, kdf_hash: Optional[str] = None):
        settings = get_settings()
        self.iterations = iterations if iterations is not None else settings.kdf_iterations
        self.kdf_hash = kdf_hash or settings.gcm_kdf_hash

    def _resolve_key(
        self, password: Optional[Secret], key: Optional[bytes], salt: Optional[bytes]
    ) -> bytes:
        if (password is None or len(password) == 0) == (key is None):
            raise InvalidInputError("Exactly one of password or key is required.")
        if key is not None:
            if len(key) != KEY_SIZE:
                raise InvalidInputError(f"Key must be {KEY_SIZE} bytes, got {len(key)}.")
            return bytes(key)
        return derive_key(password, salt, KEY_SIZE, self.iterations, self.kdf_hash)

    def encrypt_frame(
        self,
        plaintext: bytes,
        password: Optional[Secret] = None,
        key: Optional[bytes] = None,
        associated_data: AssociatedData = None,
    ) -> bytes:
        """Encrypt and return ``[salt ||] nonce || ciphertext || tag``."""
        salt = random_bytes(SALT_SIZE) if key is None else b""
        aes_key = self._resolve_key(password, key, salt)
        nonce = random_bytes(NONCE_SIZE)
        sealed = AESGCM(aes_key).encrypt(nonce, plaintext, _ad_bytes(associated_data))
        return salt + nonce + sealed

    def _split(self, frame: bytes, password_mode: bool) -> Tuple[bytes, bytes, bytes]:
        salt_size = SALT_SIZE if password_mode else 0
        if len(frame) < salt_size + NONCE_SIZE + TAG_SIZE:
            raise MalformedFrameError(f"Encrypted data is too short ({len(frame)} bytes) for aes256gcm.")
        salt = frame[:salt_size]
        nonce = frame[salt_size:salt_size + NONCE_SIZE]
        return salt, nonce, frame[salt_size + NONCE_SIZE:]

    def decrypt_frame(
        self,
        frame: bytes,
        password: Optional[Secret] = None,
        key: Optional[bytes] = None,
        associated_data: AssociatedData = None,
    ) -> bytes:
        """Verify and decrypt in one step; AESGCM releases nothing on a bad tag."""
        salt, nonce, sealed = self._split(frame, password_mode=key is None)
        aes_key = self._resolve_key(password, key, salt)
        try:
            return AESGCM(aes_key).decrypt(nonce, sealed, _ad_bytes(associated_data))
        except InvalidTag:
            raise IntegrityError(
                "Invalid authentication tag: wrong password/key, tampered data or associated data mismatch."
            )

    def encrypt_bytes(self, plaintext: bytes, password=None, key=None, associated_data=None) -> EncryptionResult:
        try:
            frame = self.encrypt_frame(plaintext, password, key, associated_data)
        except CryptHashError as e:
            return self._failed(EncryptionResult, e, "encrypt")
        logger.debug("aes256gcm encrypted %d bytes", len(plaintext))
        return EncryptionResult.ok(encrypted_bytes=frame)

    def decrypt_bytes(self, frame: bytes, password=None, key=None, associated_data=None) -> DecryptionResult:
        try:
            plaintext = self.decrypt_frame(frame, password, key, associated_data)
        except CryptHashError as e:
            return self._failed(DecryptionResult, e, "decrypt")
        return DecryptionResult.ok(decrypted_bytes=plaintext)

    def encrypt_string(self, plaintext: str, password=None, key=None, associated_data=None) -> EncryptionResult:
        try:
            if plaintext is None:
                raise InvalidInputError("String to encrypt required.")
            frame = self.encrypt_frame(plaintext.encode("utf-8"), password, key, associated_data)
        except CryptHashError as e:
            return self._failed(EncryptionResult, e, "encrypt")
        return EncryptionResult.ok(encrypted_base64=encode_base64(frame))

    def decrypt_string(self, encrypted_base64: str, password=None, key=None, associated_data=None) -> DecryptionResult:
        try:
            frame = decode_base64(encrypted_base64)
            plaintext = self.decrypt_frame(frame, password, key, associated_data)
            try:
                text = plaintext.decode("utf-8")
            except UnicodeDecodeError:
                raise InvalidInputError("Decrypted data is not valid UTF-8 text.")
        except CryptHashError as e:
            return self._failed(DecryptionResult, e, "decrypt")
        return DecryptionResult.ok(decrypted_string=text)

    # File mode would need a segmented nonce scheme; not offered.
    def encrypt_file(self, source_path: Union[str, Path], dest_path: Union[str, Path], *args, **kwargs) -> EncryptionResult:
        return EncryptionResult.from_error(
            UnsupportedOperationError("Algorithm \"aes256gcm\" currently not available for file encryption.")
        )

    def decrypt_file(self, source_path: Union[str, Path], dest_path: Union[str, Path], *args, **kwargs) -> DecryptionResult:
        return DecryptionResult.from_error(
            UnsupportedOperationError("Algorithm \"aes256gcm\" currently not available for file decryption.")
        )

    def _failed(self, result_cls, exc, action: str):
        logger.warning("aes256gcm %s failed: %s", action, exc)
        return result_cls.from_error(exc)
