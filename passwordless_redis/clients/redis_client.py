"""
Factory for the asyncio Redis client used by the token store.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

import redis.asyncio as redis

from passwordless_redis.core.config import TokenStoreSettings
from passwordless_redis.errors import InvalidConfigurationError


def _url_database(url: str) -> Optional[int]:
    """Database index named by a redis URL path or ``?db=`` query, if any."""
    parsed = urlparse(url)
    raw = parse_qs(parsed.query).get("db", [None])[0]
    if raw is None and parsed.scheme != "unix":
        raw = parsed.path.lstrip("/") or None
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(f"Invalid database in Redis URL: {raw!r}") from exc


def create_redis_client(settings: TokenStoreSettings, **options: Any) -> redis.Redis:
    """
    Build a Redis client for the configured server and database.

    Every pooled connection is opened on ``settings.database`` so the
    store's lazy ``SELECT`` agrees with whichever connection serves a command.
    A ``redis_url`` naming a different database is rejected, since redis-py
    lets the URL override the ``db`` argument. Extra ``options`` are forwarded
    to the client unchanged (timeouts, TLS, credentials). Creating the client
    does not open a connection.
    """
    options.setdefault("decode_responses", True)
    if settings.redis_url:
        url_database = _url_database(settings.redis_url)
        if url_database is not None and url_database != settings.database:
            raise InvalidConfigurationError(
                f"REDIS_URL selects database {url_database} but REDIS_DATABASE is "
                f"{settings.database}."
            )
        return redis.from_url(settings.redis_url, db=settings.database, **options)
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.database,
        **options,
    )


__all__ = ["create_redis_client"]
