"""Encrypt-then-MAC authenticated encryption: AES-CBC + HMAC-SHA2.

Frame layout (raw bytes, no magic, no version):
- 16 bytes: PBKDF2 salt
- 16 bytes: CBC IV
- N bytes: PKCS7-padded AES-CBC ciphertext
- T bytes: HMAC tag over salt || iv || ciphertext (T = 32/48/64)

Cipher and MAC keys come from one PBKDF2 run over the password and salt,
split into the AES key and an HMAC key as long as the digest. The same engine
serves the 128/192/256-bit families; only the suite parameters differ.
"""
from __future__ import annotations

import hashlib
import hmac
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from crypthash.config import get_settings
from crypthash.core.exceptions import (
    CryptHashError,
    CryptoIOError,
    IntegrityError,
    InvalidInputError,
    MalformedFrameError,
    PaddingError,
    UnknownAlgorithmError,
)
from crypthash.core.encoding import decode_base64, encode_base64
from crypthash.core.results import DecryptionResult, EncryptionResult
from crypthash.core.streaming import LimitedReader, ProgressCallback, StreamProcessor
from crypthash.security.compare import constant_time_equal
from crypthash.security.kdf import derive_split_keys
from crypthash.security.rng import IV_SIZE, SALT_SIZE, random_bytes
from crypthash.security.suites import CipherSuite


logger = logging.getLogger(__name__)

BLOCK_SIZE = 16
HEADER_SIZE = SALT_SIZE + IV_SIZE

Password = Union[str, bytes]


def _require_password(password: Optional[Password]) -> None:
    if password is None or len(password) == 0:
        raise InvalidInputError("Password required.")


class CbcHmacEngine:
    """AES-CBC + HMAC engine for one of the three CBC suites."""

    def __init__(
        self,
        suite: CipherSuite = CipherSuite.AES256_CBC_HMAC_SHA512,
        iterations: Optional[int] = None,
        chunk_size: Optional[int] = None,
    ):
        if suite.is_aead:
            raise UnknownAlgorithmError(f"{suite.name} is not a CBC-HMAC suite.")
        settings = get_settings()
        self.suite = suite
        self.iterations = iterations if iterations is not None else settings.kdf_iterations
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        if self.chunk_size <= 0:
            raise InvalidInputError(f"Chunk size must be positive, got {self.chunk_size}.")

    @property
    def tag_size(self) -> int:
        return self.suite.tag_size

    @property
    def min_frame_size(self) -> int:
        return HEADER_SIZE + self.tag_size

    # ------------------------------------------------------------------
    # Primitives (raise CryptHashError subclasses)
    # ------------------------------------------------------------------

    def _derive_keys(self, password: Password, salt: bytes) -> Tuple[bytes, bytes]:
        return derive_split_keys(
            password,
            salt,
            self.suite.key_size,
            self.suite.mac_key_size,
            self.iterations,
            self.suite.hash_name,
        )

    def _new_mac(self, mac_key: bytes):
        return hmac.new(mac_key, digestmod=getattr(hashlib, self.suite.hash_name))

    def _cipher(self, key: bytes, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(key), modes.CBC(iv))

    def encrypt_frame(self, plaintext: bytes, password: Password) -> bytes:
        """Encrypt ``plaintext`` and return ``salt || iv || ciphertext || tag``."""
        _require_password(password)
        salt = random_bytes(SALT_SIZE)
        iv = random_bytes(IV_SIZE)
        cipher_key, mac_key = self._derive_keys(password, salt)

        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = self._cipher(cipher_key, iv).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        mac = self._new_mac(mac_key)
        mac.update(salt + iv + ciphertext)
        return salt + iv + ciphertext + mac.digest()

    def decrypt_frame(self, frame: bytes, password: Password) -> bytes:
        """Verify and decrypt a frame; no plaintext leaves unless the tag matches."""
        _require_password(password)
        if len(frame) < self.min_frame_size:
            raise MalformedFrameError(
                f"Encrypted data is too short ({len(frame)} bytes) for {self.suite.algorithm_name}."
            )

        salt = frame[:SALT_SIZE]
        iv = frame[SALT_SIZE:HEADER_SIZE]
        ciphertext = frame[HEADER_SIZE:-self.tag_size]
        tag = frame[-self.tag_size:]
        cipher_key, mac_key = self._derive_keys(password, salt)

        mac = self._new_mac(mac_key)
        mac.update(frame[:-self.tag_size])
        if not constant_time_equal(mac.digest(), tag):
            raise IntegrityError("Invalid authentication tag: wrong password or tampered data.")

        if not ciphertext or len(ciphertext) % BLOCK_SIZE:
            raise PaddingError("Ciphertext length is not a multiple of the block size.")
        decryptor = self._cipher(cipher_key, iv).decryptor()
        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise PaddingError(f"Invalid padding: {e}")

    # ------------------------------------------------------------------
    # Bytes / string API (returns results)
    # ------------------------------------------------------------------

    def encrypt_bytes(self, plaintext: bytes, password: Password) -> EncryptionResult:
        try:
            frame = self.encrypt_frame(plaintext, password)
        except CryptHashError as e:
            return self._failed(EncryptionResult, e, "encrypt")
        logger.debug("%s encrypted %d bytes", self.suite.algorithm_name, len(plaintext))
        return EncryptionResult.ok(encrypted_bytes=frame)

    def decrypt_bytes(self, frame: bytes, password: Password) -> DecryptionResult:
        try:
            plaintext = self.decrypt_frame(frame, password)
        except CryptHashError as e:
            return self._failed(DecryptionResult, e, "decrypt")
        return DecryptionResult.ok(decrypted_bytes=plaintext)

    def encrypt_string(self, plaintext: str, password: Password) -> EncryptionResult:
        """Encrypt a UTF-8 string; the frame comes back Base64-encoded."""
        try:
            if plaintext is None:
                raise InvalidInputError("String to encrypt required.")
            frame = self.encrypt_frame(plaintext.encode("utf-8"), password)
        except CryptHashError as e:
            return self._failed(EncryptionResult, e, "encrypt")
        return EncryptionResult.ok(encrypted_base64=encode_base64(frame))

    def decrypt_string(self, encrypted_base64: str, password: Password) -> DecryptionResult:
        """Decrypt a Base64 frame produced by :meth:`encrypt_string`."""
        try:
            frame = decode_base64(encrypted_base64)
            plaintext = self.decrypt_frame(frame, password)
            try:
                text = plaintext.decode("utf-8")
            except UnicodeDecodeError:
                raise InvalidInputError("Decrypted data is not valid UTF-8 text.")
        except CryptHashError as e:
            return self._failed(DecryptionResult, e, "decrypt")
        return DecryptionResult.ok(decrypted_string=text)

    # ------------------------------------------------------------------
    # File API (streaming, returns results)
    # ------------------------------------------------------------------

    def encrypt_file(
        self,
        source_path: Union[str, Path],
        dest_path: Union[str, Path],
        password: Password,
        delete_source_file: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ) -> EncryptionResult:
        """
        Stream-encrypt ``source_path`` into ``dest_path``.

        Salt and IV are written first, ciphertext follows chunk by chunk while
        the HMAC absorbs it, and the tag goes last once the source is drained.
        """
        src, dst = Path(source_path), Path(dest_path)
        try:
            _require_password(password)
            total = _check_paths(src, dst)
            salt = random_bytes(SALT_SIZE)
            iv = random_bytes(IV_SIZE)
            cipher_key, mac_key = self._derive_keys(password, salt)

            padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
            encryptor = self._cipher(cipher_key, iv).encryptor()
            mac = self._new_mac(mac_key)
            mac.update(salt + iv)

            def transform(chunk: bytes) -> bytes:
                out = encryptor.update(padder.update(chunk))
                mac.update(out)
                return out

            processor = StreamProcessor(self.chunk_size, on_progress)
            with open(src, "rb") as inf, open(dst, "wb") as outf:
                outf.write(salt + iv)
                processor.process(inf, outf, transform, total, "Encrypting file...")
                tail = encryptor.update(padder.finalize()) + encryptor.finalize()
                mac.update(tail)
                outf.write(tail)
                outf.write(mac.digest())

            if delete_source_file:
                src.unlink()
        except (CryptHashError, OSError) as e:
            return self._failed(EncryptionResult, e, "encrypt file")

        logger.debug("%s encrypted %d bytes from %s", self.suite.algorithm_name, total, src)
        message = f"File \"{src}\" encrypted to \"{dst}\"."
        if delete_source_file:
            message += f" Source file \"{src}\" deleted."
        return EncryptionResult.ok(message=message)

    def decrypt_file(
        self,
        source_path: Union[str, Path],
        dest_path: Union[str, Path],
        password: Password,
        delete_encrypted_file: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ) -> DecryptionResult:
        """
        Stream-decrypt ``source_path`` into ``dest_path`` in two passes.

        The first pass (0-50%) only recomputes the HMAC; the destination file
        is not opened unless the tag matches. The second pass (50-100%)
        decrypts into a temporary file beside the destination, re-checks the tag
        in case the source changed in between, and only then moves it onto
        ``dest_path``. On any failure the temporary file is removed.
        """
        src, dst = Path(source_path), Path(dest_path)
        tmp_path: Optional[Path] = None
        try:
            _require_password(password)
            total = _check_paths(src, dst)
            if total < self.min_frame_size:
                raise MalformedFrameError(
                    f"Encrypted file is too short ({total} bytes) for {self.suite.algorithm_name}."
                )
            ct_len = total - HEADER_SIZE - self.tag_size
            processor = StreamProcessor(self.chunk_size, on_progress)

            with open(src, "rb") as inf:
                header = inf.read(HEADER_SIZE)
                salt, iv = header[:SALT_SIZE], header[SALT_SIZE:]
                cipher_key, mac_key = self._derive_keys(password, salt)

                mac = self._new_mac(mac_key)
                mac.update(header)
                processor.process(
                    LimitedReader(inf, ct_len), None, mac.update, ct_len, "Verifying file...", 0.0, 50.0
                )
                tag = inf.read(self.tag_size)
                if not constant_time_equal(mac.digest(), tag):
                    raise IntegrityError("Invalid authentication tag: wrong password or tampered data.")
                if ct_len == 0 or ct_len % BLOCK_SIZE:
                    raise PaddingError("Ciphertext length is not a multiple of the block size.")

                inf.seek(HEADER_SIZE)
                recheck = self._new_mac(mac_key)
                recheck.update(header)
                decryptor = self._cipher(cipher_key, iv).decryptor()
                unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()

                def transform(chunk: bytes) -> bytes:
                    recheck.update(chunk)
                    return unpadder.update(decryptor.update(chunk))

                # Plaintext lands on dest_path only once the re-check passes.
                with tempfile.NamedTemporaryFile(dir=dst.parent, prefix=f".{dst.name}.", delete=False) as tmpf:
                    tmp_path = Path(tmpf.name)
                    processor.process(
                        LimitedReader(inf, ct_len), tmpf, transform, ct_len, "Decrypting file...", 50.0, 100.0
                    )
                    try:
                        tmpf.write(unpadder.update(decryptor.finalize()) + unpadder.finalize())
                    except ValueError as e:
                        raise PaddingError(f"Invalid padding: {e}")
                if not constant_time_equal(recheck.digest(), tag):
                    raise IntegrityError("Encrypted file changed while it was being decrypted.")
                os.replace(tmp_path, dst)
                tmp_path = None

            if delete_encrypted_file:
                src.unlink()
        except (CryptHashError, OSError) as e:
            return self._failed(DecryptionResult, e, "decrypt file")
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        message = f"File \"{src}\" decrypted to \"{dst}\"."
        if delete_encrypted_file:
            message += f" Encrypted file \"{src}\" deleted."
        return DecryptionResult.ok(message=message)

    def _failed(self, result_cls, exc, action: str):
        logger.warning("%s %s failed: %s", self.suite.algorithm_name, action, exc)
        return result_cls.from_error(exc)


def _check_paths(src: Path, dst: Path) -> int:
    # Returns the source size; refuses to overwrite the input with the output.
    if not src.is_file():
        raise CryptoIOError(f"File \"{src}\" not found.")
    if dst.exists() and dst.resolve() == src.resolve():
        raise InvalidInputError("Source and destination must be different files.")
    return src.stat().st_size
