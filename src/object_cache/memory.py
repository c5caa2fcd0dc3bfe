"""Process-local object cache.

This is the platform's built-in, non-persistent cache: everything lives in a
dictionary for the lifetime of the process. It backs the facade when no
external client is configured or when the Redis drop-in is disabled.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .client import CacheKey, Found, GroupNames
from .logging import get_logger

DEFAULT_GROUP = "default"
# Seconds between full scans that drop expired entries on write.
SWEEP_INTERVAL = 60.0

logger = get_logger(__name__, component="memory_cache")


@dataclass
class _Entry:
    value: Any
    expires_at: Optional[float] = None


def _normalize_groups(groups: GroupNames) -> list[str]:
    if isinstance(groups, str):
        return [groups]
    return [str(group) for group in groups]


def _as_number(value: Any) -> Union[int, float]:
    # bools are ints in Python but are not numeric cache values
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        for convert in (int, float):
            try:
                return convert(text)
            except ValueError:
                continue
    return 0


class MemoryObjectCache:
    """Dictionary-backed implementation of :class:`~object_cache.client.ObjectCacheClient`.

    Parameters
    ----------
    multisite:
        Prefix keys of non-global groups with the current blog id.
    blog_id:
        Initial blog id used for the prefix.
    clock:
        Monotonic time source used for expirations.
    """

    def __init__(
        self,
        *,
        multisite: bool = False,
        blog_id: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.multisite = multisite
        self.blog_prefix = f"{int(blog_id)}:" if multisite else ""
        self.global_groups: set[str] = set()
        self.non_persistent_groups: set[str] = set()
        self.cache_hits = 0
        self.cache_misses = 0
        self._clock = clock
        self._store: dict[str, dict[str, _Entry]] = {}
        self._next_sweep = clock() + SWEEP_INTERVAL

    # -- helpers ---------------------------------------------------------

    def _is_valid_key(self, key: Any) -> bool:
        if isinstance(key, bool):
            valid = False
        elif isinstance(key, int):
            valid = True
        else:
            valid = isinstance(key, str) and key.strip() != ""
        if not valid:
            logger.warning(
                {"event": "invalid_cache_key", "key_type": type(key).__name__},
                context={"key": key},
            )
        return valid

    def _locate(self, key: CacheKey, group: str) -> tuple[str, str]:
        group = group or DEFAULT_GROUP
        if self.multisite and group not in self.global_groups:
            return group, f"{self.blog_prefix}{key}"
        return group, str(key)

    def _deadline(self, expire: int) -> Optional[float]:
        if expire > 0:
            return self._clock() + expire
        return None

    def _lookup(self, key: CacheKey, group: str) -> Optional[_Entry]:
        bucket_name, derived = self._locate(key, group)
        bucket = self._store.get(bucket_name)
        if bucket is None:
            return None
        entry = bucket.get(derived)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            del bucket[derived]
            return None
        return entry

    def _exists(self, key: CacheKey, group: str) -> bool:
        return self._lookup(key, group) is not None

    # -- ObjectCacheClient -----------------------------------------------

    def add(self, key: CacheKey, data: Any, group: str = "", expire: int = 0) -> bool:
        if not self._is_valid_key(key):
            return False
        if self._exists(key, group):
            return False
        return self.set(key, data, group, expire)

    def replace(self, key: CacheKey, data: Any, group: str = "", expire: int = 0) -> bool:
        if not self._is_valid_key(key):
            return False
        if not self._exists(key, group):
            return False
        return self.set(key, data, group, expire)

    def set(self, key: CacheKey, data: Any, group: str = "", expire: int = 0) -> bool:
        if not self._is_valid_key(key):
            return False
        if self._clock() >= self._next_sweep:
            self.purge_expired()
        bucket_name, derived = self._locate(key, group)
        self._store.setdefault(bucket_name, {})[derived] = _Entry(data, self._deadline(expire))
        return True

    def get(
        self,
        key: CacheKey,
        group: str = "",
        force: bool = False,
        found: Optional[Found] = None,
    ) -> Any:
        # ``force`` asks for a refresh from a persistent tier; there is none here.
        if not self._is_valid_key(key):
            if found is not None:
                found.value = False
            return False
        entry = self._lookup(key, group)
        if entry is None:
            self.cache_misses += 1
            if found is not None:
                found.value = False
            return False
        self.cache_hits += 1
        if found is not None:
            found.value = True
        return entry.value

    def get_multi(self, groups: Mapping[str, Iterable[CacheKey]]) -> dict[str, Any]:
        results: dict[str, Any] = {}
        for group, keys in groups.items():
            for key in keys:
                results[f"{group}:{key}"] = self.get(key, group)
        return results

    def _offset(self, key: CacheKey, offset: int, group: str) -> Union[int, float, bool]:
        if not self._is_valid_key(key):
            return False
        entry = self._lookup(key, group)
        if entry is None:
            return False
        value = _as_number(entry.value) + offset
        if value < 0:
            value = 0
        entry.value = value
        return value

    def incr(self, key: CacheKey, offset: int = 1, group: str = "") -> Union[int, float, bool]:
        return self._offset(key, offset, group)

    def decr(self, key: CacheKey, offset: int = 1, group: str = "") -> Union[int, float, bool]:
        return self._offset(key, -offset, group)

    def delete(self, key: CacheKey, group: str = "") -> bool:
        if not self._is_valid_key(key):
            return False
        if not self._exists(key, group):
            return False
        bucket_name, derived = self._locate(key, group)
        del self._store[bucket_name][derived]
        return True

    def flush(self) -> bool:
        self._store.clear()
        return True

    def switch_to_blog(self, blog_id: int) -> None:
        self.blog_prefix = f"{int(blog_id)}:" if self.multisite else ""

    def add_global_groups(self, groups: GroupNames) -> None:
        self.global_groups.update(_normalize_groups(groups))

    def add_non_persistent_groups(self, groups: GroupNames) -> None:
        self.non_persistent_groups.update(_normalize_groups(groups))

    def remember(
        self,
        key: CacheKey,
        callback: Callable[[], Any],
        group: str = "",
        expire: int = 0,
    ) -> Any:
        found = Found()
        cached = self.get(key, group, found=found)
        if found:
            return cached
        value = callback()
        self.set(key, value, group, expire)
        return value

    def forget(self, key: CacheKey, group: str = "", default: Any = None) -> Any:
        found = Found()
        cached = self.get(key, group, found=found)
        if not found:
            return default
        self.delete(key, group)
        return cached

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""

        now = self._clock()
        self._next_sweep = now + SWEEP_INTERVAL
        removed = 0
        for group in list(self._store):
            bucket = self._store[group]
            expired = [
                key
                for key, entry in bucket.items()
                if entry.expires_at is not None and entry.expires_at <= now
            ]
            for key in expired:
                del bucket[key]
            removed += len(expired)
            if not bucket:
                del self._store[group]
        return removed

    def stats(self) -> dict[str, int]:
        self.purge_expired()
        return {
            "hits": self.cache_hits,
            "misses": self.cache_misses,
            "entries": sum(len(bucket) for bucket in self._store.values()),
            "groups": len(self._store),
        }


__all__ = ["DEFAULT_GROUP", "MemoryObjectCache"]
