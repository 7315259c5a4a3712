"""
Redis-backed token store.

Each user id owns a single Redis hash ``{token, origin, ttl}`` under
``prefix + uid``. Tokens are stored bcrypt-hashed, and every record carries
both a logical expiry (``ttl``, checked on each read) and a Redis key expiry
that evicts it eventually.
"""

from __future__ import annotations

import asyncio
import logging
import math
from numbers import Real
from typing import Any, Iterable, List, Optional

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from passwordless_redis.clients.redis_client import create_redis_client
from passwordless_redis.core.config import (
    DEFAULT_TOKEN_KEY_PREFIX,
    MIN_HASH_ROUNDS,
    TokenStoreSettings,
)
from passwordless_redis.errors import InvalidArgumentError, StoreError
from passwordless_redis.models.token import TokenRecord, now_ms
from passwordless_redis.services.namespace import KeyNamespace
from passwordless_redis.services.token_codec import TokenHasher
from passwordless_redis.services.token_store import (
    DENIED,
    AuthenticationResult,
    TokenStore,
    UserId,
)

logger = logging.getLogger(__name__)

_SCAN_COUNT = 500
_DELETE_BATCH_SIZE = 100


def _require_text(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{name} must be a non-empty string.")


def _require_uid(uid: Any) -> str:
    """Normalise a user id to its key form; integer ids are accepted."""
    if isinstance(uid, int) and not isinstance(uid, bool):
        return str(uid)
    _require_text("uid", uid)
    return uid


def _chunks(keys: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(keys), size):
        yield keys[start : start + size]


class RedisTokenStore(TokenStore):
    """Stores hashed, expiring passwordless tokens in Redis."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        database: int = 0,
        token_key_prefix: str = DEFAULT_TOKEN_KEY_PREFIX,
        hash_rounds: int = MIN_HASH_ROUNDS,
        clear_concurrency: int = 8,
        hasher: Optional[TokenHasher] = None,
    ) -> None:
        if isinstance(database, bool) or not isinstance(database, int) or database < 0:
            raise InvalidArgumentError(
                "database has to be a non-negative integer (if provided at all)."
            )
        if (
            isinstance(clear_concurrency, bool)
            or not isinstance(clear_concurrency, int)
            or clear_concurrency < 1
        ):
            raise InvalidArgumentError("clear_concurrency must be a positive integer.")

        self._client = client
        self._database = database
        self._namespace = KeyNamespace(token_key_prefix)
        self._hasher = hasher or TokenHasher(rounds=hash_rounds)
        self._clear_concurrency = clear_concurrency
        self._selected = False

    @classmethod
    def from_settings(
        cls, settings: TokenStoreSettings, **client_options: Any
    ) -> "RedisTokenStore":
        """Create a store together with its own Redis client."""
        return cls(
            create_redis_client(settings, **client_options),
            database=settings.database,
            token_key_prefix=settings.token_key_prefix,
            hash_rounds=settings.hash_rounds,
            clear_concurrency=settings.clear_concurrency,
        )

    @property
    def database(self) -> int:
        return self._database

    @property
    def namespace(self) -> KeyNamespace:
        return self._namespace

    async def authenticate(self, token: str, uid: UserId) -> AuthenticationResult:
        _require_text("token", token)
        uid = _require_uid(uid)

        await self._ensure_selected()
        key = self._namespace.key(uid)
        try:
            fields = await self._client.hgetall(key)
        except RedisError as exc:
            raise StoreError(f"Failed to read token record {key!r}.") from exc

        if not fields:
            return DENIED

        try:
            record = TokenRecord.from_redis(fields)
        except ValidationError as exc:
            raise StoreError(f"Token record {key!r} is malformed.") from exc

        # Redis eviction can lag behind the logical expiry.
        if record.is_expired():
            logger.debug("Token for uid %s has expired", uid)
            return DENIED

        if await self._hasher.compare(token, record.hashed_token):
            return AuthenticationResult(True, record.origin)
        return DENIED

    async def store_or_update(
        self,
        token: str,
        uid: UserId,
        ms_to_live: float,
        origin_url: Optional[str] = None,
    ) -> None:
        _require_text("token", token)
        uid = _require_uid(uid)
        if (
            isinstance(ms_to_live, bool)
            or not isinstance(ms_to_live, Real)
            or not math.isfinite(ms_to_live)
            or ms_to_live <= 0
        ):
            raise InvalidArgumentError("ms_to_live must be a positive number.")
        if origin_url is not None and not isinstance(origin_url, str):
            raise InvalidArgumentError("origin_url must be a string or None.")

        await self._ensure_selected()
        hashed_token = await self._hasher.hash(token)

        record = TokenRecord(
            hashed_token=hashed_token,
            origin=origin_url or "",
            expires_at=now_ms() + math.ceil(ms_to_live),
        )
        key = self._namespace.key(uid)
        try:
            await self._client.hset(key, mapping=record.to_redis())
        except RedisError as exc:
            raise StoreError(f"Failed to write token record {key!r}.") from exc

        # Rounded up so Redis never evicts a record that is still logically valid.
        seconds = math.ceil(ms_to_live / 1000)
        try:
            await self._client.expire(key, seconds)
        except RedisError as exc:
            logger.warning(
                "Token record %s written without a Redis expiry; "
                "only the logical ttl protects it",
                key,
            )
            raise StoreError(f"Failed to set expiry on token record {key!r}.") from exc

        logger.debug("Stored token for uid %s (expires in %ss)", uid, seconds)

    async def invalidate_user(self, uid: UserId) -> None:
        uid = _require_uid(uid)

        await self._ensure_selected()
        key = self._namespace.key(uid)
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise StoreError(f"Failed to delete token record {key!r}.") from exc

    async def clear(self) -> None:
        """
        Delete every record in this store's namespace.

        Keys are deleted in batches with at most ``clear_concurrency`` batches
        in flight. Batches already issued are allowed to finish when one
        fails; the first failure is raised afterwards.
        """
        await self._ensure_selected()
        keys = await self._matching_keys()
        if not keys:
            return

        semaphore = asyncio.Semaphore(self._clear_concurrency)

        async def delete_batch(batch: List[str]) -> None:
            async with semaphore:
                await self._client.delete(*batch)

        results = await asyncio.gather(
            *(delete_batch(batch) for batch in _chunks(keys, _DELETE_BATCH_SIZE)),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, RedisError):
                raise StoreError("Failed to clear token records.") from result
            if isinstance(result, BaseException):
                raise result

        logger.info(
            "Cleared %d token records under prefix %s", len(keys), self._namespace.prefix
        )

    async def length(self) -> int:
        await self._ensure_selected()
        return len(await self._matching_keys())

    async def aclose(self) -> None:
        """Close the underlying Redis connections."""
        await self._client.aclose()

    async def _ensure_selected(self) -> None:
        # Concurrent first callers may both SELECT; repeating it is harmless.
        if self._selected:
            return
        try:
            await self._client.select(self._database)
        except RedisError as exc:
            raise StoreError(f"Failed to select Redis database {self._database}.") from exc
        self._selected = True

    async def _matching_keys(self) -> List[str]:
        """SCAN for this namespace; cost grows with the whole database's keyspace."""
        # SCAN may report a key more than once.
        keys: dict[str, None] = {}
        try:
            async for key in self._client.scan_iter(
                match=self._namespace.pattern, count=_SCAN_COUNT
            ):
                keys[key] = None
        except RedisError as exc:
            raise StoreError("Failed to enumerate token records.") from exc
        return list(keys)


__all__ = ["RedisTokenStore"]
