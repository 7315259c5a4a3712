"""One-way hashing utilities for protecting stored tokens."""

from __future__ import annotations

import asyncio
import base64
import hashlib

import bcrypt

from passwordless_redis.core.config import MAX_HASH_ROUNDS, MIN_HASH_ROUNDS
from passwordless_redis.errors import CodecError, InvalidConfigurationError

# bcrypt ignores (or, in recent releases, rejects) input past this length.
_BCRYPT_MAX_INPUT = 72


def _prepare(plaintext: str) -> bytes:
    """Encode a token for bcrypt, digesting inputs bcrypt cannot take whole."""
    raw = plaintext.encode("utf-8")
    if len(raw) > _BCRYPT_MAX_INPUT or b"\x00" in raw:
        return base64.b64encode(hashlib.sha256(raw).digest())
    return raw


class TokenHasher:
    """Salted, adaptive-cost hashing of plaintext tokens with bcrypt."""

    def __init__(self, *, rounds: int = MIN_HASH_ROUNDS) -> None:
        if (
            isinstance(rounds, bool)
            or not isinstance(rounds, int)
            or not MIN_HASH_ROUNDS <= rounds <= MAX_HASH_ROUNDS
        ):
            raise InvalidConfigurationError(
                f"Invalid hash rounds value. Should be an integer between {MIN_HASH_ROUNDS} and {MAX_HASH_ROUNDS}."
            )
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash_sync(self, plaintext: str) -> str:
        """Hash ``plaintext`` with a freshly generated salt."""
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            hashed = bcrypt.hashpw(_prepare(plaintext), salt)
        except (ValueError, TypeError) as exc:
            raise CodecError("Failed to hash token.") from exc
        return hashed.decode("utf-8")

    def compare_sync(self, plaintext: str, hashed: str) -> bool:
        """Check ``plaintext`` against a hash produced by :meth:`hash_sync`."""
        try:
            return bcrypt.checkpw(_prepare(plaintext), hashed.encode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise CodecError("Failed to compare token against stored hash.") from exc

    async def hash(self, plaintext: str) -> str:
        """Hash off the event loop; bcrypt is deliberately slow."""
        return await asyncio.to_thread(self.hash_sync, plaintext)

    async def compare(self, plaintext: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.compare_sync, plaintext, hashed)


__all__ = ["TokenHasher"]
