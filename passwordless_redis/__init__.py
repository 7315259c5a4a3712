"""Redis token store for passwordless authentication."""

from .errors import (
    CodecError,
    InvalidArgumentError,
    InvalidConfigurationError,
    StoreError,
    TokenStoreError,
)
from .models import TokenRecord
from .services import AuthenticationResult, RedisTokenStore, TokenStore

__version__ = "0.1.0"

__all__ = [
    "AuthenticationResult",
    "CodecError",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "RedisTokenStore",
    "StoreError",
    "TokenRecord",
    "TokenStore",
    "TokenStoreError",
]
