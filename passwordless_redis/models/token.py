"""
Domain model for a persisted token record.
"""

from __future__ import annotations

import time
from typing import Dict, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def _decode(value: Union[str, bytes]) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class TokenRecord(BaseModel):
    """Represents the Redis hash stored under ``prefix + uid``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    hashed_token: str = Field(..., alias="token", min_length=1)
    origin: str = Field("", description="URL requested before authentication.")
    expires_at: int = Field(
        ...,
        alias="ttl",
        description="Absolute expiry in milliseconds since the epoch.",
    )

    @classmethod
    def from_redis(cls, fields: Mapping[Union[str, bytes], Union[str, bytes]]) -> "TokenRecord":
        """Build a record from an ``HGETALL`` reply."""
        return cls.model_validate({_decode(k): _decode(v) for k, v in fields.items()})

    def to_redis(self) -> Dict[str, Union[str, int]]:
        """Field mapping suitable for a single ``HSET``."""
        return self.model_dump(by_alias=True)

    def is_expired(self, at_ms: int | None = None) -> bool:
        """True once ``at_ms`` (default: now) is past the record's expiry."""
        current = now_ms() if at_ms is None else at_ms
        return current > self.expires_at


__all__ = ["TokenRecord", "now_ms"]
