""" Text encodings used at the string-mode boundary. """

import base64
import binascii

from crypthash.core.exceptions import InvalidInputError


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_base64(data: str) -> bytes:
    # Strict decoding: stray characters are an input error, not silently dropped.
    if not data:
        raise InvalidInputError("Encrypted string required.")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidInputError("Encrypted string is not valid Base64.")


def decode_hex(data: str) -> bytes:
    try:
        return bytes.fromhex(data.strip())
    except ValueError:
        raise InvalidInputError("Hash string is not valid hexadecimal.")
