"""Exceptions raised by the token store."""

from __future__ import annotations


class TokenStoreError(Exception):
    """Base class for token store failures."""


class InvalidArgumentError(TokenStoreError, ValueError):
    """Raised when an operation or constructor receives an unusable argument."""


class InvalidConfigurationError(InvalidArgumentError):
    """Raised when the store is configured below its security floor."""


class StoreError(TokenStoreError):
    """Raised when Redis fails or returns a record that cannot be read."""


class CodecError(TokenStoreError):
    """Raised when hashing or comparing a token fails."""


__all__ = [
    "CodecError",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "StoreError",
    "TokenStoreError",
]
