"""Command bundles exposed through the host command line.

A bundle is a class whose ``COMMANDS`` mapping names the methods callable as
``<namespace> <command>``. The object cache contributes one bundle under the
``redis`` namespace when the host CLI is active.
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, Optional, Type
from urllib.parse import urlparse

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .backends import import_object
from .config import CacheSettings, get_settings
from .errors import ConfigurationError, IntegrationError, wrap_error
from .facade import CacheRuntime, get_runtime
from .logging import get_logger, log_exception

COMMAND_NAMESPACE = "redis"

COMMAND_REGISTRY: Dict[str, Type[Any]] = {}

logger = get_logger(__name__, component="cli_commands")


def add_command(namespace: str, bundle: Type[Any]) -> None:
    """Register ``bundle`` under ``namespace``."""

    COMMAND_REGISTRY[namespace] = bundle


def register_cli_commands(settings: Optional[CacheSettings] = None) -> bool:
    """Register the configured bundle under ``redis`` if the host CLI is active.

    Returns ``True`` when a bundle was registered.
    """

    settings = settings or get_settings()
    if not settings.cli_enabled or not settings.commands_class:
        return False
    try:
        bundle = import_object(settings.commands_class, field="commands_class")
    except ConfigurationError as error:
        log_exception(logger, error, event="cli_commands_unavailable")
        return False
    add_command(COMMAND_NAMESPACE, bundle)
    logger.info(
        {"event": "cli_commands_registered", "namespace": COMMAND_NAMESPACE},
        context={"bundle": settings.commands_class},
    )
    return True


def ping_redis(url: str, *, timeout: float = 1.0) -> tuple[bool, Optional[str]]:
    """Return whether the Redis server at ``url`` answers ``PING``."""

    client = None
    try:
        client = redis.Redis.from_url(
            url,
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
        )
        client.ping()
    except (RedisConnectionError, RedisTimeoutError, OSError, ValueError) as exc:
        error = wrap_error(
            exc,
            IntegrationError,
            message="Redis server unreachable",
            context={"redis_host": urlparse(url).hostname},
        )
        log_exception(logger, error, event="redis_ping_failed")
        return False, str(exc)
    except RedisError as exc:
        return False, str(exc)
    finally:
        if client is not None:
            client.close()
    return True, None


class RedisCommands:
    """Inspect and manage the object cache."""

    COMMANDS: Dict[str, str] = {
        "status": "Show the object cache backend and Redis connectivity",
        "flush": "Remove every item from the object cache",
    }

    def __init__(self, runtime: Optional[CacheRuntime] = None) -> None:
        self.runtime = runtime or get_runtime()

    def status(self, args: argparse.Namespace) -> int:
        settings = self.runtime.settings
        if settings.disabled:
            backend = "memory (WP_REDIS_DISABLED)"
        elif settings.client_class:
            backend = settings.client_class
        else:
            backend = settings.backend

        stats = None
        if self.runtime.is_initialized:
            client = self.runtime.client
            client_name = f"{type(client).__module__}.{type(client).__qualname__}"
            stats_fn = getattr(client, "stats", None)
            if callable(stats_fn):
                stats = stats_fn()
        else:
            client_name = "-"

        reachable, detail = ping_redis(str(settings.redis_url), timeout=settings.redis_timeout)
        redis_state = "reachable" if reachable else f"unreachable ({detail})"

        print(f"Backend: {backend}")
        print(f"Initialized: {'yes' if self.runtime.is_initialized else 'no'}")
        print(f"Client: {client_name}")
        if stats is not None:
            print(
                f"Stats: hits={stats.get('hits', 0)} misses={stats.get('misses', 0)} "
                f"entries={stats.get('entries', 0)}"
            )
        print(f"Redis: {redis_state}")
        return 0

    def flush(self, args: argparse.Namespace) -> int:
        if self.runtime.flush():
            print("Success: Object cache flushed.")
            return 0
        print("Error: Object cache could not be flushed.")
        return 1


__all__ = [
    "COMMAND_NAMESPACE",
    "COMMAND_REGISTRY",
    "RedisCommands",
    "add_command",
    "ping_redis",
    "register_cli_commands",
]
