"""Object-cache API for the content platform, backed by a pluggable client."""

from __future__ import annotations

from .client import Found, ObjectCacheClient
from .errors import CacheNotInitializedError, ConfigurationError, ObjectCacheError
from .facade import (
    CacheRuntime,
    get_runtime,
    wp_cache_add,
    wp_cache_add_global_groups,
    wp_cache_add_non_persistent_groups,
    wp_cache_close,
    wp_cache_decr,
    wp_cache_delete,
    wp_cache_flush,
    wp_cache_forget,
    wp_cache_get,
    wp_cache_get_multi,
    wp_cache_incr,
    wp_cache_init,
    wp_cache_remember,
    wp_cache_replace,
    wp_cache_set,
    wp_cache_switch_to_blog,
)
from .memory import MemoryObjectCache

__all__ = [
    "CacheNotInitializedError",
    "CacheRuntime",
    "ConfigurationError",
    "Found",
    "MemoryObjectCache",
    "ObjectCacheClient",
    "ObjectCacheError",
    "get_runtime",
    "wp_cache_add",
    "wp_cache_add_global_groups",
    "wp_cache_add_non_persistent_groups",
    "wp_cache_close",
    "wp_cache_decr",
    "wp_cache_delete",
    "wp_cache_flush",
    "wp_cache_forget",
    "wp_cache_get",
    "wp_cache_get_multi",
    "wp_cache_incr",
    "wp_cache_init",
    "wp_cache_remember",
    "wp_cache_replace",
    "wp_cache_set",
    "wp_cache_switch_to_blog",
]
