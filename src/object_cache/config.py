"""Runtime configuration for the object cache.

Values are read from environment variables prefixed with ``WP_REDIS_``, for
example ``WP_REDIS_DISABLED=1`` or
``WP_REDIS_CLIENT_CLASS=my_plugin.cache:RedisObjectCache``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import RedisDsn
from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_BACKEND = "memory"
DEFAULT_COMMANDS_CLASS = "object_cache.commands:RedisCommands"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class CacheSettings(BaseSettings):
    """Selects and parameterises the cache client built by ``wp_cache_init``."""

    model_config = SettingsConfigDict(
        env_prefix="WP_REDIS_",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    disabled: bool = False
    backend: str = DEFAULT_BACKEND
    client_class: Optional[str] = None
    redis_url: RedisDsn = DEFAULT_REDIS_URL
    redis_timeout: float = 1.0
    cli_enabled: bool = False
    commands_class: Optional[str] = DEFAULT_COMMANDS_CLASS
    multisite: bool = False
    blog_id: int = 1


@lru_cache(maxsize=1)
def get_settings() -> CacheSettings:
    """Load settings once; invalid values raise :class:`ConfigurationError`."""

    try:
        return CacheSettings()
    except SettingsValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise ConfigurationError(
            f"Invalid object cache settings: {', '.join(fields)}",
            context={"fields": fields},
            cause=exc,
        ) from exc


def reset_settings() -> None:
    """Drop the cached settings so the next lookup re-reads the environment."""

    get_settings.cache_clear()


__all__ = [
    "CacheSettings",
    "DEFAULT_BACKEND",
    "DEFAULT_COMMANDS_CLASS",
    "DEFAULT_REDIS_URL",
    "get_settings",
    "reset_settings",
]
