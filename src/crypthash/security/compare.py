"""Timing-safe comparison helpers.

Tag and digest checks must never use ``==``: it returns at the first
differing byte. Only the lengths are allowed to leak.
"""
import hmac
from typing import Union


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """Return True if ``a`` and ``b`` hold the same bytes."""
    if len(a) != len(b):
        return False
    return hmac.compare_digest(bytes(a), bytes(b))


def hex_digest_equal(expected: Union[str, bytes], actual_hex: str) -> bool:
    """Compare a caller-supplied hex digest against ``actual_hex``, ignoring case."""
    if isinstance(expected, bytes):
        expected = expected.decode("ascii", errors="replace")
    left = expected.strip().lower().encode("ascii", errors="replace")
    right = actual_hex.strip().lower().encode("ascii", errors="replace")
    return constant_time_equal(left, right)
