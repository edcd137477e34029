"""
Exceptions for crypthash
Every error raised by the engines derives from CryptHashError and carries
the ErrorKind that ends up in a failed result.
"""

from crypthash.core.results import ErrorKind


class CryptHashError(Exception):
    # general container for errors
    kind = ErrorKind.INVALID_INPUT


class UnknownAlgorithmError(CryptHashError):
    # raised when an algorithm name has no engine behind it
    kind = ErrorKind.UNKNOWN_ALGORITHM


class UnknownInputTypeError(CryptHashError):
    # raised when input type is neither "string" nor "file"
    kind = ErrorKind.UNKNOWN_INPUT_TYPE


class InvalidInputError(CryptHashError):
    # raised on bad base64, wrong key sizes, missing password/key
    kind = ErrorKind.INVALID_INPUT


class KeyDerivationError(CryptHashError):
    # raised on non-positive iteration counts or key lengths
    kind = ErrorKind.KEY_DERIVATION


class IntegrityError(CryptHashError):
    # raised on a MAC / tag mismatch
    kind = ErrorKind.INTEGRITY


class MalformedFrameError(IntegrityError):
    # raised when a frame is too short to hold salt, iv and tag
    pass


class PaddingError(CryptHashError):
    # raised when padding is malformed after the MAC check passed
    kind = ErrorKind.PADDING


class CryptoIOError(CryptHashError):
    # raised when a file can't be opened, read or written
    kind = ErrorKind.IO


class UnsupportedOperationError(CryptHashError):
    # raised for combinations that exist but are not available (e.g. GCM files)
    kind = ErrorKind.UNSUPPORTED_OPERATION
