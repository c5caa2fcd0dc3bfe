"""The platform's object-cache API.

Every ``wp_cache_*`` function forwards to one method of a single cache client
owned by a :class:`CacheRuntime`. ``wp_cache_init`` must run once, early in
the process, before any other function except ``wp_cache_close``.

Code that prefers explicit wiring can build its own :class:`CacheRuntime`
and pass it around instead of using the module-level functions.
"""

from __future__ import annotations

import numbers
import operator
import re
from decimal import Decimal
from threading import Lock
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .backends import build_client
from .client import CacheKey, Found, GroupNames, ObjectCacheClient
from .config import CacheSettings, get_settings
from .errors import CacheNotInitializedError
from .logging import get_logger

logger = get_logger(__name__, component="facade")

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def coerce_expire(expire: Any) -> int:
    """Return ``expire`` as whole seconds, truncating toward zero.

    Strings are read up to their first non-numeric character, so ``"60s"`` is
    ``60`` and ``"1e3"`` is ``1000``. Only values with no readable number
    (``None``, ``"soon"``, NaN, infinities) become ``0``.
    """

    if isinstance(expire, (bytes, bytearray)):
        expire = expire.decode("ascii", errors="ignore")
    if isinstance(expire, str):
        match = _LEADING_NUMBER.match(expire)
        if match is None:
            return 0
        try:
            return int(match.group(1))
        except ValueError:
            expire = float(match.group(1))
    if hasattr(type(expire), "__index__"):
        return operator.index(expire)
    if isinstance(expire, (numbers.Real, Decimal)):
        try:
            return int(expire)
        except (OverflowError, ValueError):
            return 0
    return 0


class CacheRuntime:
    """Holds the process' cache client and forwards calls to it."""

    def __init__(
        self,
        settings: Optional[CacheSettings] = None,
        *,
        factory: Optional[Callable[[CacheSettings], ObjectCacheClient]] = None,
    ) -> None:
        self._settings = settings
        self._factory = factory or build_client
        self._client: Optional[ObjectCacheClient] = None
        self._lock = Lock()

    @property
    def settings(self) -> CacheSettings:
        return self._settings if self._settings is not None else get_settings()

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> ObjectCacheClient:
        client = self._client
        if client is None:
            raise CacheNotInitializedError()
        return client

    def install(self, client: ObjectCacheClient) -> None:
        """Publish an already-built ``client`` as this runtime's singleton."""

        with self._lock:
            self._client = client

    def init(self) -> None:
        """Build and publish the client, then offer the ``redis`` CLI commands."""

        # commands imports this module
        from .commands import register_cli_commands

        settings = self.settings
        client = self._factory(settings)
        self.install(client)
        register_cli_commands(settings)
        logger.info(
            {
                "event": "object_cache_initialized",
                "client": f"{type(client).__module__}.{type(client).__qualname__}",
            }
        )

    def close(self) -> bool:
        return True

    def add(self, key: CacheKey, data: Any, group: str = "", expire: Any = 0) -> bool:
        return self.client.add(key, data, group, coerce_expire(expire))

    def decr(self, key: CacheKey, offset: int = 1, group: str = "") -> Union[int, bool]:
        return self.client.decr(key, offset, group)

    def delete(self, key: CacheKey, group: str = "") -> bool:
        return self.client.delete(key, group)

    def flush(self) -> bool:
        return self.client.flush()

    def get(
        self,
        key: CacheKey,
        group: str = "",
        force: bool = False,
        found: Optional[Found] = None,
    ) -> Any:
        return self.client.get(key, group, force, found)

    def get_multi(self, groups: Mapping[str, Iterable[CacheKey]]) -> Any:
        return self.client.get_multi(groups)

    def incr(self, key: CacheKey, offset: int = 1, group: str = "") -> Union[int, bool]:
        return self.client.incr(key, offset, group)

    def replace(self, key: CacheKey, data: Any, group: str = "", expire: Any = 0) -> bool:
        return self.client.replace(key, data, group, coerce_expire(expire))

    def set(self, key: CacheKey, data: Any, group: str = "", expire: Any = 0) -> bool:
        return self.client.set(key, data, group, coerce_expire(expire))

    def switch_to_blog(self, blog_id: int) -> None:
        self.client.switch_to_blog(blog_id)

    def add_global_groups(self, groups: GroupNames) -> None:
        self.client.add_global_groups(groups)

    def add_non_persistent_groups(self, groups: GroupNames) -> None:
        self.client.add_non_persistent_groups(groups)

    def remember(
        self,
        key: CacheKey,
        callback: Callable[[], Any],
        group: str = "",
        expire: Any = 0,
    ) -> Any:
        return self.client.remember(key, callback, group, coerce_expire(expire))

    def forget(self, key: CacheKey, group: str = "", default: Any = None) -> Any:
        return self.client.forget(key, group, default)


_runtime = CacheRuntime()


def get_runtime() -> CacheRuntime:
    """Return the process-wide runtime behind the ``wp_cache_*`` functions."""

    return _runtime


def wp_cache_add(key: CacheKey, data: Any, group: str = "", expire: Any = 0) -> bool:
    """Add ``data`` unless ``key`` already exists in ``group``."""

    return _runtime.add(key, data, group, expire)


def wp_cache_close() -> bool:
    """Kept for compatibility; the cache needs no explicit close."""

    return True


def wp_cache_decr(key: CacheKey, offset: int = 1, group: str = "") -> Union[int, bool]:
    """Decrement a numeric item; ``False`` when it is missing."""

    return _runtime.decr(key, offset, group)


def wp_cache_delete(key: CacheKey, group: str = "") -> bool:
    return _runtime.delete(key, group)


def wp_cache_flush() -> bool:
    return _runtime.flush()


def wp_cache_get(
    key: CacheKey,
    group: str = "",
    force: bool = False,
    found: Optional[Found] = None,
) -> Any:
    """Return the cached value, or ``False`` when absent.

    Pass a :class:`~object_cache.client.Found` to learn whether a ``False``
    result was stored or missing. ``force`` asks the client to bypass its
    local copy and re-read the persistent store.
    """

    return _runtime.get(key, group, force, found)


def wp_cache_get_multi(groups: Mapping[str, Iterable[CacheKey]]) -> Any:
    """Fetch keys across groups.

    ``{"group0": ["key0", "key1"], "group1": ["key0"]}`` returns a mapping
    keyed ``"group:key"``; missing entries map to ``False``.
    """

    return _runtime.get_multi(groups)


def wp_cache_incr(key: CacheKey, offset: int = 1, group: str = "") -> Union[int, bool]:
    """Increment a numeric item; ``False`` when it is missing."""

    return _runtime.incr(key, offset, group)


def wp_cache_init() -> None:
    """Construct the configured client and publish it process-wide."""

    _runtime.init()


def wp_cache_replace(key: CacheKey, data: Any, group: str = "", expire: Any = 0) -> bool:
    """Overwrite ``key``; ``False`` if it did not exist."""

    return _runtime.replace(key, data, group, expire)


def wp_cache_set(key: CacheKey, data: Any, group: str = "", expire: Any = 0) -> bool:
    """Store ``data`` regardless of whether ``key`` exists."""

    return _runtime.set(key, data, group, expire)


def wp_cache_switch_to_blog(blog_id: int) -> None:
    """Switch the site id used to build keys in blog-specific groups."""

    _runtime.switch_to_blog(blog_id)


def wp_cache_add_global_groups(groups: GroupNames) -> None:
    _runtime.add_global_groups(groups)


def wp_cache_add_non_persistent_groups(groups: GroupNames) -> None:
    _runtime.add_non_persistent_groups(groups)


def wp_cache_remember(
    key: CacheKey,
    callback: Callable[[], Any],
    group: str = "",
    expire: Any = 0,
) -> Any:
    """Return the cached value, computing and storing it with ``callback`` on a miss."""

    return _runtime.remember(key, callback, group, expire)


def wp_cache_forget(key: CacheKey, group: str = "", default: Any = None) -> Any:
    """Return and delete the cached value, or ``default`` when absent."""

    return _runtime.forget(key, group, default)


__all__ = [
    "CacheRuntime",
    "coerce_expire",
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
