"""Tests for structured error payloads and log redaction."""

from __future__ import annotations

import json
import logging

from object_cache.errors import (
    CacheNotInitializedError,
    ConfigurationError,
    ErrorCode,
    IntegrationError,
    describe_exception,
    get_error_metrics,
    wrap_error,
)
from object_cache.logging import get_logger, log_exception


class DummyConnectionError(OSError):
    """Simulate a socket error carrying an errno."""


def test_describe_exception_includes_errno() -> None:
    payload = describe_exception(DummyConnectionError(111, "Connection refused"))

    assert payload["type"] == "DummyConnectionError"
    assert payload["errno"] == 111
    assert "Connection refused" in payload["message"]


def test_error_to_dict_embeds_cause_chain() -> None:
    try:
        raise DummyConnectionError(111, "Connection refused")
    except DummyConnectionError as exc:
        wrapped = IntegrationError("Redis server unreachable", cause=exc)

    payload = wrapped.to_dict()

    assert payload["code"] == "integration"
    assert payload["cause"]["type"] == "DummyConnectionError"
    assert payload["cause"]["errno"] == 111


def test_wrap_error_enriches_existing_errors() -> None:
    original = ConfigurationError("bad backend", context={"backend": "x"})

    wrapped = wrap_error(original, message="ignored", context={"field": "backend"})

    assert wrapped is original
    assert wrapped.context == {"backend": "x", "field": "backend"}


def test_not_initialized_is_a_cache_error() -> None:
    error = CacheNotInitializedError()

    assert error.code is ErrorCode.CACHE
    assert "wp_cache_init" in str(error)


def test_log_exception_redacts_and_counts(caplog) -> None:
    logger = get_logger("object_cache.tests", component="tests")
    error = ConfigurationError(
        "client construction failed",
        context={"redis_password": "hunter2", "backend": "redis"},
    )

    with caplog.at_level(logging.ERROR, logger="object_cache.tests"):
        log_exception(logger, error, event="init_failed", context={"auth_token": "abc"})

    record = json.loads(caplog.records[-1].getMessage())
    assert record["event"] == "init_failed"
    assert record["context"]["redis_password"] == "***REDACTED***"
    assert record["context"]["auth_token"] == "***REDACTED***"
    assert record["context"]["backend"] == "redis"
    assert record["context"]["component"] == "tests"
    assert "hunter2" not in caplog.text
    assert get_error_metrics() == {"config": 1}
