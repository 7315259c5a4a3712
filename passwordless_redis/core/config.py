"""
Settings for the Redis token store.

Values are read from the environment (and an optional ``.env`` file) so the
store, the admin script and any host application share one configuration
surface.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Lowest bcrypt work factor the store accepts. See
# http://security.stackexchange.com/questions/3959/ for picking a higher value.
MIN_HASH_ROUNDS = 12
# Highest work factor bcrypt can encode in a salt.
MAX_HASH_ROUNDS = 31

DEFAULT_TOKEN_KEY_PREFIX = "pwdless:"

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class TokenStoreSettings(BaseSettings):
    """Connection and namespace settings for the Redis token store."""

    redis_url: Optional[str] = Field(
        None,
        validation_alias="REDIS_URL",
        description="Full redis:// URL. Takes precedence over host and port.",
    )
    redis_host: str = Field("localhost", validation_alias="REDIS_HOST")
    redis_port: int = Field(6379, validation_alias="REDIS_PORT")
    database: int = Field(
        0,
        ge=0,
        validation_alias="REDIS_DATABASE",
        description="Index of the Redis database holding the tokens.",
    )
    token_key_prefix: str = Field(
        DEFAULT_TOKEN_KEY_PREFIX,
        min_length=1,
        validation_alias="TOKEN_KEY_PREFIX",
        description="Prefix prepended to every user id to form the Redis key.",
    )
    hash_rounds: int = Field(MIN_HASH_ROUNDS, validation_alias="TOKEN_HASH_ROUNDS")
    clear_concurrency: int = Field(
        8,
        gt=0,
        validation_alias="TOKEN_CLEAR_CONCURRENCY",
        description="Maximum number of delete batches in flight during clear().",
    )
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    log_format: str = Field(
        DEFAULT_LOG_FORMAT,
        min_length=1,
        validation_alias="APP_LOG_FORMAT",
        description="logging format string used by configure_logging.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("hash_rounds")
    @classmethod
    def _check_hash_rounds(cls, value: int) -> int:
        """Refuse under-strength hashing instead of clamping it."""
        if not MIN_HASH_ROUNDS <= value <= MAX_HASH_ROUNDS:
            raise ValueError(
                f"hash rounds must be an integer between {MIN_HASH_ROUNDS} "
                f"and {MAX_HASH_ROUNDS}"
            )
        return value


@lru_cache()
def get_settings() -> TokenStoreSettings:
    """Return a cached settings object."""
    return TokenStoreSettings()


__all__ = [
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_TOKEN_KEY_PREFIX",
    "MAX_HASH_ROUNDS",
    "MIN_HASH_ROUNDS",
    "TokenStoreSettings",
    "get_settings",
]
