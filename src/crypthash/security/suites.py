"""Cipher suites supported by crypthash and the parameters that tell them apart."""

from enum import Enum
from typing import Optional

from crypthash.core.exceptions import UnknownAlgorithmError


class CipherSuite(Enum):
    # value: (cli name, AES key bytes, paired hash or None for AEAD)
    AES128_CBC_HMAC_SHA256 = ("aes128cbc", 16, "sha256")
    AES192_CBC_HMAC_SHA384 = ("aes192cbc", 24, "sha384")
    AES256_CBC_HMAC_SHA512 = ("aes256cbc", 32, "sha512")
    AES256_GCM = ("aes256gcm", 32, None)

    @property
    def algorithm_name(self) -> str:
        return self.value[0]

    @property
    def key_size(self) -> int:
        return self.value[1]

    @property
    def hash_name(self) -> Optional[str]:
        return self.value[2]

    @property
    def is_aead(self) -> bool:
        return self.hash_name is None

    @property
    def tag_size(self) -> int:
        """HMAC output size for CBC suites, GCM tag size otherwise."""
        if self.is_aead:
            return 16
        return {"sha256": 32, "sha384": 48, "sha512": 64}[self.hash_name]

    @property
    def mac_key_size(self) -> int:
        # HMAC keys are sized to the digest of the paired hash
        return 0 if self.is_aead else self.tag_size

    @classmethod
    def from_name(cls, name: str) -> "CipherSuite":
        """Look up a suite by its short name (``aes256cbc``) or enum name, ignoring case."""
        key = (name or "").strip().lower()
        for suite in cls:
            if key in (suite.algorithm_name, suite.name.lower()):
                return suite
        raise UnknownAlgorithmError(f"Unknown algorithm \"{name}\".")
