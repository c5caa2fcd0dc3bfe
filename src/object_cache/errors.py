"""Errors raised by the cache layer and helpers to report them."""

from __future__ import annotations

from collections import Counter
from enum import Enum
from threading import Lock
from typing import Any, ClassVar, Mapping, Type


class ErrorCode(str, Enum):
    CACHE = "cache"
    CONFIG = "config"
    INTEGRATION = "integration"


# Matched as substrings of context keys, so ``redis_password`` is masked too.
_SENSITIVE_KEYS = ("password", "passwd", "secret", "token", "auth", "credential")
_REDACTED = "***REDACTED***"


def sanitize_context(context: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a copy of ``context`` with credentials masked and values made JSON-safe."""

    sanitized: dict[str, Any] = {}
    for key, value in (context or {}).items():
        name = str(key)
        if any(token in name.lower() for token in _SENSITIVE_KEYS):
            sanitized[name] = _REDACTED
        elif isinstance(value, Mapping):
            sanitized[name] = sanitize_context(value)
        elif isinstance(value, (list, tuple, set, frozenset)):
            sanitized[name] = [v if isinstance(v, (str, int, float, bool)) else repr(v) for v in value]
        elif isinstance(value, (str, int, float, bool)) or value is None:
            sanitized[name] = value
        else:
            sanitized[name] = repr(value)
    return sanitized


def describe_exception(exc: BaseException, *, max_depth: int = 3) -> dict[str, Any]:
    """Describe ``exc`` and up to ``max_depth`` explicit causes."""

    payload: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    errno = getattr(exc, "errno", None)
    if errno is not None:
        payload["errno"] = errno
    if max_depth > 0 and exc.__cause__ is not None and exc.__cause__ is not exc:
        payload["cause"] = describe_exception(exc.__cause__, max_depth=max_depth - 1)
    return payload


class ObjectCacheError(Exception):
    """Base class; subclasses pin :attr:`code`."""

    code: ClassVar[ErrorCode] = ErrorCode.CACHE

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.context = dict(context or {})
        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **context: Any) -> "ObjectCacheError":
        self.context.update({k: v for k, v in context.items() if v is not None})
        return self

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": str(self),
            "type": type(self).__name__,
        }
        if self.context:
            payload["context"] = sanitize_context(self.context)
        if self.__cause__ is not None:
            payload["cause"] = describe_exception(self.__cause__)
        return payload


class CacheError(ObjectCacheError):
    code = ErrorCode.CACHE


class CacheNotInitializedError(CacheError):
    """Raised when a cache operation runs before ``wp_cache_init``."""

    def __init__(self, message: str = "Object cache used before wp_cache_init()", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class ConfigurationError(ObjectCacheError):
    code = ErrorCode.CONFIG


class IntegrationError(ObjectCacheError):
    code = ErrorCode.INTEGRATION


def wrap_error(
    exc: BaseException,
    error_cls: Type[ObjectCacheError] = CacheError,
    *,
    message: str,
    context: Mapping[str, Any] | None = None,
) -> ObjectCacheError:
    """Wrap ``exc`` in ``error_cls``; our own errors only gain ``context``."""

    if isinstance(exc, ObjectCacheError):
        return exc.add_context(**dict(context or {}))
    return error_cls(message, context=context, cause=exc)


_error_counts: Counter[str] = Counter()
_counter_lock = Lock()


def record_error(error: ObjectCacheError) -> None:
    with _counter_lock:
        _error_counts[error.code.value] += 1


def get_error_metrics() -> dict[str, int]:
    """Snapshot of logged error counts keyed by :class:`ErrorCode` value."""

    with _counter_lock:
        return dict(_error_counts)


def reset_error_metrics() -> None:
    with _counter_lock:
        _error_counts.clear()


__all__ = [
    "CacheError",
    "CacheNotInitializedError",
    "ConfigurationError",
    "ErrorCode",
    "IntegrationError",
    "ObjectCacheError",
    "describe_exception",
    "get_error_metrics",
    "record_error",
    "reset_error_metrics",
    "sanitize_context",
    "wrap_error",
]
