"""Expose dependency helpers for FastAPI routers."""

from .clients import TokenStoreDependency, get_token_store

__all__ = ["TokenStoreDependency", "get_token_store"]
