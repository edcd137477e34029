"""Unit tests for HMAC computation and verification."""

import hashlib
import hmac

import pytest

from crypthash.core.results import ErrorKind
from crypthash.security import mac

TEST_STRING = "This is a test string!"


def test_rfc4231_vector():
    """RFC 4231 test case 2."""
    result = mac.compute_hmac(b"what do ya want for nothing?", b"Jefe", "hmacsha256")
    assert result.hash_hex == "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"
    # caller-supplied keys are never echoed back
    assert result.key is None


def test_compute_and_verify_with_generated_key():
    result = mac.compute_hmac(TEST_STRING, algorithm="hmacsha512")
    assert result.success
    assert result.key and len(result.key) == 64

    verified = mac.verify_hmac(result.hash_hex, TEST_STRING, result.key, "hmacsha512")
    assert verified.success, verified.message

    wrong = mac.verify_hmac(result.hash_hex, TEST_STRING, b"k" * 64, "hmacsha512")
    assert wrong.error_kind is ErrorKind.INTEGRITY


@pytest.mark.parametrize("algorithm,digest", [
    ("hmacmd5", "md5"),
    ("hmacsha1", "sha1"),
    ("hmacsha256", "sha256"),
    ("hmacsha384", "sha384"),
    ("HMACSHA512", "sha512"),
])
def test_algorithms_match_stdlib(algorithm, digest):
    key = b"secret-key"
    result = mac.compute_hmac(b"data", key, algorithm)
    assert result.hash_bytes == hmac.new(key, b"data", digest).digest()


def test_generated_key_matches_digest_size():
    assert len(mac.compute_hmac(b"x", algorithm="hmacsha256").key) == 32
    assert len(mac.compute_hmac(b"x", algorithm="hmacsha384").key) == 48


def test_verify_accepts_uppercase_hex_and_raw_bytes():
    key = b"abc"
    result = mac.compute_hmac(b"data", key)
    assert mac.verify_hmac(result.hash_hex.upper(), b"data", key).success
    assert mac.verify_hmac(result.hash_bytes, b"data", key).success


def test_verify_requires_key():
    result = mac.verify_hmac("00", b"data", b"")
    assert result.error_kind is ErrorKind.INVALID_INPUT


def test_verify_rejects_non_hex():
    assert mac.verify_hmac("zz-not-hex", b"data", b"k").error_kind is ErrorKind.INVALID_INPUT


def test_unknown_algorithm():
    assert mac.compute_hmac(b"x", b"k", "hmacsha3").error_kind is ErrorKind.UNKNOWN_ALGORITHM


def test_missing_data_is_invalid_input():
    result = mac.compute_hmac(None, b"k")
    assert result.error_kind is ErrorKind.INVALID_INPUT
    assert result.hash_bytes == b"" and result.key is None


def test_file_hmac(tmp_path):
    path = tmp_path / "f.bin"
    data = b"0123456789" * 10_000
    path.write_bytes(data)
    seen = []

    result = mac.compute_file_hmac(path, b"k", "hmacsha384", chunk_size=4096, on_progress=lambda p, m: seen.append(p))
    assert result.hash_bytes == hmac.new(b"k", data, hashlib.sha384).digest()
    assert seen[-1] == 100

    assert mac.verify_file_hmac(result.hash_hex, path, b"k", "hmacsha384").success
    assert mac.verify_file_hmac(result.hash_hex, path, b"other", "hmacsha384").failed


def test_file_hmac_missing_file(tmp_path):
    assert mac.compute_file_hmac(tmp_path / "missing").error_kind is ErrorKind.IO
