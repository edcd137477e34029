"""Unit tests for dispatch by algorithm name and input type."""

import hashlib

import pytest

from crypthash import operations
from crypthash.core.exceptions import InvalidInputError
from crypthash.core.results import ErrorKind
from crypthash.security.aead import GcmEngine
from crypthash.security.cbc_hmac import CbcHmacEngine
from crypthash.security.suites import CipherSuite

ITER = 1000


@pytest.mark.parametrize("name", ["aes128cbc", "aes192cbc", "AES256CBC", "aes256gcm"])
def test_string_roundtrip_per_algorithm(name):
    enc = operations.encrypt(name, "string", "This is a test string!", "Secret123", iterations=ITER)
    assert enc.success, enc.message
    dec = operations.decrypt(name, "String", enc.encrypted_base64, "Secret123", iterations=ITER)
    assert dec.decrypted_string == "This is a test string!"


def test_wrong_password_is_integrity_error():
    enc = operations.encrypt("aes256cbc", "string", "This is a test string!", "Secret123", iterations=ITER)
    dec = operations.decrypt("aes256cbc", "string", enc.encrypted_base64, "wrong", iterations=ITER)
    assert dec.error_kind is ErrorKind.INTEGRITY


def test_gcm_associated_data_is_routed():
    enc = operations.encrypt("aes256gcm", "string", "data", "pw", associated_data="ad", iterations=ITER)
    assert operations.decrypt("aes256gcm", "string", enc.encrypted_base64, "pw", associated_data="ad",
                              iterations=ITER).success
    assert operations.decrypt("aes256gcm", "string", enc.encrypted_base64, "pw", associated_data="xx",
                              iterations=ITER).error_kind is ErrorKind.INTEGRITY


def test_unknown_algorithm_and_input_type():
    assert operations.encrypt("des", "string", "x", "pw").error_kind is ErrorKind.UNKNOWN_ALGORITHM
    assert operations.decrypt("aes256cbc", "stdin", "x", "pw").error_kind is ErrorKind.UNKNOWN_INPUT_TYPE
    assert operations.compute_hash("sha256", "blob", "x").error_kind is ErrorKind.UNKNOWN_INPUT_TYPE
    assert operations.compute_hash("bcrypt", "string", "x").error_kind is ErrorKind.UNKNOWN_ALGORITHM
    assert operations.compute_hmac("hmacsha256", "nope", "x").error_kind is ErrorKind.UNKNOWN_INPUT_TYPE


def test_get_engine():
    assert isinstance(operations.get_engine("aes256gcm"), GcmEngine)
    engine = operations.get_engine(CipherSuite.AES192_CBC_HMAC_SHA384, iterations=ITER)
    assert isinstance(engine, CbcHmacEngine)
    assert engine.suite is CipherSuite.AES192_CBC_HMAC_SHA384


def test_file_roundtrip_and_delete(tmp_path):
    src = tmp_path / "doc.txt"
    src.write_bytes(b"file contents " * 1000)
    enc_path = tmp_path / "doc.enc"
    dec_path = tmp_path / "doc.out"
    progress = []

    enc = operations.encrypt("aes128cbc", "file", src, "pw", output_path=enc_path,
                             delete_source_file=True, on_progress=lambda p, m: progress.append(p),
                             iterations=ITER)
    assert enc.success, enc.message
    assert not src.exists()
    assert progress[-1] == 100

    dec = operations.decrypt("aes128cbc", "file", enc_path, "pw", output_path=dec_path, iterations=ITER)
    assert dec.success
    assert dec_path.read_bytes() == b"file contents " * 1000


def test_file_mode_needs_output_path(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("a")
    assert operations.encrypt("aes256cbc", "file", src, "pw").error_kind is ErrorKind.INVALID_INPUT


def test_gcm_file_mode_unsupported(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("a")
    result = operations.encrypt("aes256gcm", "file", src, "pw", output_path=tmp_path / "b")
    assert result.error_kind is ErrorKind.UNSUPPORTED_OPERATION
    result = operations.decrypt("aes256gcm", "file", src, "pw", output_path=tmp_path / "b")
    assert result.error_kind is ErrorKind.UNSUPPORTED_OPERATION


def test_compute_hash_with_compare():
    digest = hashlib.sha256(b"abc").hexdigest()
    assert operations.compute_hash("sha256", "string", "abc").hash_hex == digest

    match = operations.compute_hash("SHA256", "string", "abc", compare_hash=digest.upper())
    assert match.success
    assert "MATCH" in match.message

    mismatch = operations.compute_hash("sha256", "string", "abd", compare_hash=digest)
    assert mismatch.error_kind is ErrorKind.INTEGRITY
    assert "DOES NOT MATCH" in mismatch.message


def test_compute_file_hash(tmp_path):
    path = tmp_path / "f"
    path.write_bytes(b"contents")
    result = operations.compute_hash("md5", "file", path)
    assert result.hash_hex == hashlib.md5(b"contents").hexdigest()


def test_pbkdf2_string_only(tmp_path):
    result = operations.compute_hash("pbkdf2", "string", "password")
    assert result.success
    assert operations.compute_hash("pbkdf2", "string", "password", compare_hash=result.hash_hex).success
    assert operations.compute_hash("pbkdf2", "string", "nope", compare_hash=result.hash_hex).failed

    path = tmp_path / "f"
    path.write_text("x")
    assert operations.compute_hash("pbkdf2", "file", path).error_kind is ErrorKind.UNSUPPORTED_OPERATION


def test_hmac_with_generated_key_then_compare():
    result = operations.compute_hmac("hmacsha512", "string", "This is a test string!")
    assert result.key

    again = operations.compute_hmac("hmacsha512", "string", "This is a test string!",
                                    key=result.key, compare_hash=result.hash_hex)
    assert again.success

    other = operations.compute_hmac("hmacsha512", "string", "This is a test string!",
                                    key=b"x" * 64, compare_hash=result.hash_hex)
    assert other.error_kind is ErrorKind.INTEGRITY


def test_hmac_compare_requires_key():
    result = operations.compute_hmac("hmacsha256", "string", "data", compare_hash="ab")
    assert result.error_kind is ErrorKind.INVALID_INPUT


def test_hmac_string_key_is_utf8(tmp_path):
    result = operations.compute_hmac("hmacsha256", "string", "data", key="k")
    assert result.hash_bytes == operations.compute_hmac("hmacsha256", "string", "data", key=b"k").hash_bytes
    path = tmp_path / "f"
    path.write_text("data")
    assert operations.compute_hmac("hmacsha256", "file", path, key="k").hash_hex == result.hash_hex


def test_argon2id_with_compare():
    salt = b"saltsaltsaltsalt"
    result = operations.compute_argon2id("pw", salt, iterations=1, memory_size=8192)
    assert result.success
    again = operations.compute_argon2id("pw", salt, iterations=1, memory_size=8192, compare_hash=result.hash_hex)
    assert again.success and again.salt == salt
    bad = operations.compute_argon2id("pw", salt, iterations=1, memory_size=8192, compare_hash="00" * 32)
    assert bad.error_kind is ErrorKind.INTEGRITY


def test_missing_string_data_reports_failure():
    assert operations.compute_hash("sha256", "string", None).error_kind is ErrorKind.INVALID_INPUT
    assert operations.compute_hmac("hmacsha256", "string", None, key="k").error_kind is ErrorKind.INVALID_INPUT
    assert operations.compute_hash("pbkdf2", "string", None).error_kind is ErrorKind.INVALID_INPUT


def test_get_engine_rejects_zero_chunk_size():
    with pytest.raises(InvalidInputError):
        operations.get_engine("aes256cbc", chunk_size=0)
