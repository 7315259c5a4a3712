"""Service layer exports."""

from .namespace import KeyNamespace
from .redis_store import RedisTokenStore
from .token_codec import TokenHasher
from .token_store import DENIED, AuthenticationResult, TokenStore, UserId

__all__ = [
    "AuthenticationResult",
    "DENIED",
    "KeyNamespace",
    "RedisTokenStore",
    "TokenHasher",
    "TokenStore",
    "UserId",
]
