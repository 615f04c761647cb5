from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import bcrypt

from vacation_portal.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72


@runtime_checkable
class SecretHasher(Protocol):
    """Interface for one-way credential hashing."""

    def digest(self, plaintext: str) -> str:
        """Return an opaque digest of ``plaintext``."""
        ...

    def matches(self, plaintext: str, digest: str) -> bool:
        """Return True if ``plaintext`` hashes to ``digest``."""
        ...


class BcryptSecretHasher:
    """bcrypt-backed hasher."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    @staticmethod
    def _encode(plaintext: str) -> bytes:
        return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def digest(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(plaintext), salt).decode("utf-8")

    def matches(self, plaintext: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(plaintext), digest.encode("utf-8"))
        except ValueError:
            logger.warning("Stored credential digest is not a valid bcrypt hash")
            return False


_secret_hasher: SecretHasher | None = None


def get_secret_hasher() -> SecretHasher:
    """Return the configured hasher, building the bcrypt one on first use."""
    global _secret_hasher
    if _secret_hasher is None:
        _secret_hasher = BcryptSecretHasher(rounds=get_settings().bcrypt_rounds)
    return _secret_hasher


def set_secret_hasher(hasher: SecretHasher | None) -> None:
    """Override the hasher (for testing). ``None`` restores the default."""
    global _secret_hasher
    _secret_hasher = hasher
