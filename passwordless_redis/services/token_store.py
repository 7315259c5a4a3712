"""
Contract shared by every token storage backend.

A passwordless login flow only ever talks to this interface, so any backend
implementing the five coroutines below can be swapped in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, Union

# Integer ids are keyed by their decimal string, so 42 and "42" are one user.
UserId = Union[str, int]


class AuthenticationResult(NamedTuple):
    """Outcome of a token check; unpacks as ``valid, origin``."""

    valid: bool
    origin: Optional[str] = None


DENIED = AuthenticationResult(False, None)


class TokenStore(ABC):
    """Persists one hashed, expiring token per user id."""

    @abstractmethod
    async def authenticate(self, token: str, uid: UserId) -> AuthenticationResult:
        """
        Check whether ``token`` is the current, unexpired token for ``uid``.

        Returns ``(True, origin)`` on a match. A missing, expired or
        mismatching token yields ``(False, None)``; those cases are
        indistinguishable to the caller.
        """

    @abstractmethod
    async def store_or_update(
        self,
        token: str,
        uid: UserId,
        ms_to_live: float,
        origin_url: Optional[str] = None,
    ) -> None:
        """Store ``token`` for ``uid``, replacing any token the user already had."""

    @abstractmethod
    async def invalidate_user(self, uid: UserId) -> None:
        """Remove the token of ``uid``; a no-op when there is none."""

    @abstractmethod
    async def clear(self) -> None:
        """Remove every token held by this store."""

    @abstractmethod
    async def length(self) -> int:
        """Number of stored tokens, expired-but-not-yet-evicted ones included."""


__all__ = ["AuthenticationResult", "DENIED", "TokenStore", "UserId"]
