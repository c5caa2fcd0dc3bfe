"""Resolve which cache client ``wp_cache_init`` constructs.

Selection happens once, from :class:`~object_cache.config.CacheSettings`:

* ``disabled`` falls back to the process-local ``memory`` backend;
* ``client_class`` imports an external client given as ``"module:Class"``;
* otherwise ``backend`` names an entry of :data:`BACKEND_REGISTRY`.

Third-party packages can contribute backends through the
``object_cache.backends`` entry-point group.
"""

from __future__ import annotations

import importlib
from importlib.metadata import entry_points
from typing import Any, Callable, Dict

from .client import ObjectCacheClient, missing_methods
from .config import CacheSettings
from .errors import ConfigurationError, wrap_error
from .logging import get_logger, log_exception
from .memory import MemoryObjectCache

ENTRY_POINT_GROUP = "object_cache.backends"

ClientFactory = Callable[[CacheSettings], ObjectCacheClient]

BACKEND_REGISTRY: Dict[str, ClientFactory] = {}

logger = get_logger(__name__, component="backends")


def register_backend(name: str, factory: ClientFactory) -> None:
    """Register ``factory`` under ``name`` in the backend registry."""

    BACKEND_REGISTRY[name] = factory


def _memory_backend(settings: CacheSettings) -> ObjectCacheClient:
    return MemoryObjectCache(multisite=settings.multisite, blog_id=settings.blog_id)


register_backend("memory", _memory_backend)


def load_backends() -> None:
    """Register backends advertised through entry points."""

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            factory = ep.load()
        except Exception as exc:  # plugin import errors must not break init
            error = wrap_error(
                exc,
                ConfigurationError,
                message="Failed to load cache backend plugin",
                context={"entry_point": ep.name, "value": ep.value},
            )
            log_exception(logger, error, event="backend_plugin_load_failed")
            continue
        register_backend(ep.name, factory)


def import_object(path: str, *, field: str) -> Any:
    """Import ``"package.module:Attribute"`` (or dotted ``package.module.Attribute``)."""

    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ConfigurationError(
            f"Invalid import path for {field}: {path!r}",
            context={"field": field, "path": path},
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise wrap_error(
            exc,
            ConfigurationError,
            message=f"Cannot import module {module_name!r} for {field}",
            context={"field": field, "path": path},
        ) from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise wrap_error(
            exc,
            ConfigurationError,
            message=f"Module {module_name!r} has no attribute {attr!r}",
            context={"field": field, "path": path},
        ) from exc


def _class_factory(path: str) -> ClientFactory:
    client_cls = import_object(path, field="client_class")
    missing = missing_methods(client_cls)
    if missing:
        raise ConfigurationError(
            f"{path} does not implement the object cache interface",
            context={"client_class": path, "missing": missing},
        )

    def factory(settings: CacheSettings) -> ObjectCacheClient:
        return client_cls()

    return factory


def resolve_client_factory(settings: CacheSettings) -> ClientFactory:
    """Return the factory ``wp_cache_init`` should call for ``settings``."""

    if settings.disabled:
        return BACKEND_REGISTRY["memory"]
    if settings.client_class:
        return _class_factory(settings.client_class)
    factory = BACKEND_REGISTRY.get(settings.backend)
    if factory is None:
        load_backends()
        factory = BACKEND_REGISTRY.get(settings.backend)
    if factory is None:
        raise ConfigurationError(
            f"Unknown cache backend {settings.backend!r}",
            context={"backend": settings.backend, "known": sorted(BACKEND_REGISTRY)},
        )
    return factory


def build_client(settings: CacheSettings) -> ObjectCacheClient:
    """Construct the configured client.

    Configuration problems are logged and raised as
    :class:`~object_cache.errors.ConfigurationError`; anything the client's
    constructor raises propagates unchanged.
    """

    try:
        factory = resolve_client_factory(settings)
    except ConfigurationError as error:
        log_exception(logger, error, event="backend_resolution_failed")
        raise
    return factory(settings)


__all__ = [
    "BACKEND_REGISTRY",
    "ENTRY_POINT_GROUP",
    "build_client",
    "import_object",
    "load_backends",
    "register_backend",
    "resolve_client_factory",
]
