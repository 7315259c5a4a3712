"""
Factory functions to provide the shared token store as a FastAPI dependency.
"""

from functools import lru_cache

from fastapi import Depends

from passwordless_redis.core.config import get_settings
from passwordless_redis.services import RedisTokenStore, TokenStore


@lru_cache()
def get_token_store() -> TokenStore:
    """Create a singleton Redis token store from the process settings."""
    return RedisTokenStore.from_settings(get_settings())


TokenStoreDependency = Depends(get_token_store)

__all__ = ["TokenStoreDependency", "get_token_store"]
