"""JSON log lines carrying a redacted context."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from .errors import ObjectCacheError, record_error, sanitize_context


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Render each message as one JSON object.

    ``msg`` may be a string or a mapping of fields; a ``context=`` keyword is
    merged over the context bound when the adapter was created.
    """

    def process(self, msg: Any, kwargs: Any):  # type: ignore[override]
        context = {**(self.extra or {}), **(kwargs.pop("context", None) or {})}
        payload = dict(msg) if isinstance(msg, Mapping) else {"message": str(msg)}
        if context:
            payload.setdefault("context", {}).update(sanitize_context(context))
        payload["logger"] = self.logger.name
        return json.dumps(payload, default=repr), kwargs


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    return StructuredLoggerAdapter(logging.getLogger(name), sanitize_context(context))


def log_exception(
    logger: logging.LoggerAdapter,
    error: ObjectCacheError,
    *,
    event: str,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Log ``error`` under ``event`` and count it in the error metrics."""

    payload: dict[str, Any] = {"event": event, "error": error.to_dict()}
    combined = {**(context or {}), **error.context}
    if combined:
        payload["context"] = sanitize_context(combined)
    record_error(error)
    logger.error(payload)


__all__ = ["StructuredLoggerAdapter", "get_logger", "log_exception"]
