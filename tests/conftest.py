"""Pytest configuration and fake Redis collaborators shared across the suite."""

from __future__ import annotations

import re
from typing import Any, AsyncIterator, Callable

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

import _bootstrap  # noqa: F401

from passwordless_redis.services import RedisTokenStore


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\" and index + 1 < len(pattern):
            parts.append(re.escape(pattern[index + 1]))
            index += 2
            continue
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "[":
            end = pattern.find("]", index)
            parts.append(pattern[index : end + 1])
            index = end + 1
            continue
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts) + r"\Z", re.DOTALL)


class FakeRedisServer:
    """Keyspace shared by every FakeRedis connected to it, split by database."""

    def __init__(self) -> None:
        self.databases: dict[int, dict[str, dict[str, str]]] = {}
        self.expirations: dict[tuple[int, str], int] = {}

    def db(self, index: int) -> dict[str, dict[str, str]]:
        return self.databases.setdefault(index, {})


class FakeRedis:
    """
    Minimal async stand-in for ``redis.asyncio.Redis``.

    Keys never expire on their own, which mimics Redis evicting lazily.
    Commands named in ``fail`` raise a connection error.
    """

    def __init__(self, server: FakeRedisServer | None = None, *, db: int = 0) -> None:
        self.server = server or FakeRedisServer()
        self.current_db = db
        self.fail: set[str] = set()
        self.calls: list[tuple[str, Any]] = []
        self.closed = False

    def _record(self, command: str, *args: Any) -> None:
        self.calls.append((command, args))
        if command in self.fail:
            raise RedisConnectionError(f"{command} failed")

    @property
    def _keyspace(self) -> dict[str, dict[str, str]]:
        return self.server.db(self.current_db)

    async def select(self, index: int) -> bool:
        self._record("select", index)
        self.current_db = index
        return True

    async def hgetall(self, key: str) -> dict[str, str]:
        self._record("hgetall", key)
        return dict(self._keyspace.get(key, {}))

    async def hset(self, key: str, mapping: dict[str, Any]) -> int:
        self._record("hset", key, mapping)
        record = self._keyspace.setdefault(key, {})
        added = len(set(mapping) - set(record))
        record.update({field: str(value) for field, value in mapping.items()})
        return added

    async def expire(self, key: str, seconds: int) -> bool:
        self._record("expire", key, seconds)
        if key not in self._keyspace:
            return False
        self.server.expirations[(self.current_db, key)] = seconds
        return True

    async def delete(self, *keys: str) -> int:
        self._record("delete", *keys)
        removed = 0
        for key in keys:
            if self._keyspace.pop(key, None) is not None:
                removed += 1
            self.server.expirations.pop((self.current_db, key), None)
        return removed

    async def scan_iter(
        self, match: str | None = None, count: int | None = None
    ) -> AsyncIterator[str]:
        self._record("scan", match)
        regex = _glob_to_regex(match or "*")
        for key in list(self._keyspace):
            if regex.match(key):
                yield key

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def redis_server() -> FakeRedisServer:
    return FakeRedisServer()


@pytest.fixture
def fake_redis(redis_server: FakeRedisServer) -> FakeRedis:
    return FakeRedis(redis_server)


@pytest.fixture
def make_store(redis_server: FakeRedisServer) -> Callable[..., RedisTokenStore]:
    """Build stores that share one fake server but own separate connections."""

    def factory(**kwargs: Any) -> RedisTokenStore:
        client = kwargs.pop("client", None) or FakeRedis(redis_server)
        return RedisTokenStore(client, **kwargs)

    return factory
