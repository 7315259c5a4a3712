"""Configuration and logging helpers."""

from .config import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_TOKEN_KEY_PREFIX,
    MAX_HASH_ROUNDS,
    MIN_HASH_ROUNDS,
    TokenStoreSettings,
    get_settings,
)
from .logging import configure_logging

__all__ = [
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_TOKEN_KEY_PREFIX",
    "MAX_HASH_ROUNDS",
    "MIN_HASH_ROUNDS",
    "TokenStoreSettings",
    "configure_logging",
    "get_settings",
]
