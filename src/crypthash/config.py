"""Runtime settings for the crypthash engines.

Defaults live in :class:`CryptoSettings`; a few of them can be overridden
through environment variables so callers can opt in without code changes:

- ``CRYPTHASH_KDF_ITERATIONS``: PBKDF2 iteration count
- ``CRYPTHASH_CHUNK_SIZE``: streaming chunk size in bytes
- ``CRYPTHASH_LOG_LEVEL``: logging level name (``DEBUG``, ``INFO`` ...)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Optional
import logging
import os


DEFAULT_KDF_ITERATIONS = 100_000
DEFAULT_CHUNK_SIZE = 64 * 1024  # 64KB


@dataclass(frozen=True)
class CryptoSettings:
    """Container for tunables shared by the engines."""

    kdf_iterations: int = DEFAULT_KDF_ITERATIONS
    chunk_size: int = DEFAULT_CHUNK_SIZE
    gcm_kdf_hash: str = "sha256"
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1
    log_level: int = logging.WARNING


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _log_level(env: Mapping[str, str], default: int) -> int:
    raw = env.get("CRYPTHASH_LOG_LEVEL")
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"CRYPTHASH_LOG_LEVEL is not a logging level: {raw!r}")
    return level


def load_settings(env: Optional[Mapping[str, str]] = None) -> CryptoSettings:
    """Build settings from defaults plus environment overrides."""
    env = os.environ if env is None else env
    base = CryptoSettings()
    return replace(
        base,
        kdf_iterations=_positive_int(env, "CRYPTHASH_KDF_ITERATIONS", base.kdf_iterations),
        chunk_size=_positive_int(env, "CRYPTHASH_CHUNK_SIZE", base.chunk_size),
        log_level=_log_level(env, base.log_level),
    )


_settings: Optional[CryptoSettings] = None


def get_settings() -> CryptoSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(settings: Optional[CryptoSettings]) -> None:
    """Replace the process-wide settings (``None`` reloads from the environment)."""
    global _settings
    _settings = settings
