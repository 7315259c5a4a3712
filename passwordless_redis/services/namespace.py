"""Key addressing for token records."""

from __future__ import annotations

import re
from dataclasses import dataclass

from passwordless_redis.core.config import DEFAULT_TOKEN_KEY_PREFIX
from passwordless_redis.errors import InvalidArgumentError

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


@dataclass(frozen=True, slots=True)
class KeyNamespace:
    """Maps user ids to Redis keys under a fixed prefix."""

    prefix: str = DEFAULT_TOKEN_KEY_PREFIX

    def __post_init__(self) -> None:
        if not isinstance(self.prefix, str) or not self.prefix:
            raise InvalidArgumentError("Token key prefix must be a non-empty string.")

    def key(self, uid: str) -> str:
        return f"{self.prefix}{uid}"

    @property
    def pattern(self) -> str:
        """
        Glob matching every key in this namespace.

        The prefix is escaped so ``MATCH`` treats it literally. Matching runs
        over the whole keyspace of the database, so enumeration cost grows
        with every key stored there, not only with token count.
        """
        return _GLOB_SPECIAL.sub(r"\\\1", self.prefix) + "*"


__all__ = ["KeyNamespace"]
