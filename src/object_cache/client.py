"""The interface every cache client must satisfy to back the facade."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Union, runtime_checkable

CacheKey = Union[int, str]
GroupNames = Union[str, Iterable[str]]

REQUIRED_METHODS: tuple[str, ...] = (
    "add",
    "decr",
    "delete",
    "flush",
    "get",
    "get_multi",
    "incr",
    "replace",
    "set",
    "switch_to_blog",
    "add_global_groups",
    "add_non_persistent_groups",
    "remember",
    "forget",
)


class Found:
    """Out-parameter for ``get``: records whether the key was present.

    A stored ``False`` and a miss both make ``get`` return ``False``; the
    flag set on this holder tells them apart.
    """

    __slots__ = ("value",)

    def __init__(self, value: bool = False) -> None:
        self.value = value

    def __bool__(self) -> bool:
        return bool(self.value)

    def __repr__(self) -> str:
        return f"Found({self.value!r})"


@runtime_checkable
class ObjectCacheClient(Protocol):
    def add(self, key: CacheKey, data: Any, group: str = "", expire: int = 0) -> bool: ...

    def decr(self, key: CacheKey, offset: int = 1, group: str = "") -> Union[int, bool]: ...

    def delete(self, key: CacheKey, group: str = "") -> bool: ...

    def flush(self) -> bool: ...

    def get(
        self,
        key: CacheKey,
        group: str = "",
        force: bool = False,
        found: Optional[Found] = None,
    ) -> Any: ...

    def get_multi(self, groups: Mapping[str, Iterable[CacheKey]]) -> dict[str, Any]: ...

    def incr(self, key: CacheKey, offset: int = 1, group: str = "") -> Union[int, bool]: ...

    def replace(self, key: CacheKey, data: Any, group: str = "", expire: int = 0) -> bool: ...

    def set(self, key: CacheKey, data: Any, group: str = "", expire: int = 0) -> bool: ...

    def switch_to_blog(self, blog_id: int) -> None: ...

    def add_global_groups(self, groups: GroupNames) -> None: ...

    def add_non_persistent_groups(self, groups: GroupNames) -> None: ...

    def remember(
        self,
        key: CacheKey,
        callback: Callable[[], Any],
        group: str = "",
        expire: int = 0,
    ) -> Any: ...

    def forget(self, key: CacheKey, group: str = "", default: Any = None) -> Any: ...


def missing_methods(candidate: Any) -> list[str]:
    """Return the names from :data:`REQUIRED_METHODS` ``candidate`` lacks."""

    return [name for name in REQUIRED_METHODS if not callable(getattr(candidate, name, None))]


__all__ = [
    "CacheKey",
    "Found",
    "GroupNames",
    "ObjectCacheClient",
    "REQUIRED_METHODS",
    "missing_methods",
]
