import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Clear ``WP_REDIS_*`` variables and process-wide registries per test."""

    from object_cache import commands, facade
    from object_cache.config import reset_settings
    from object_cache.errors import reset_error_metrics

    for name in list(os.environ):
        if name.upper().startswith("WP_REDIS_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    reset_error_metrics()
    monkeypatch.setattr(facade, "_runtime", facade.CacheRuntime())
    commands.COMMAND_REGISTRY.clear()
    yield
    commands.COMMAND_REGISTRY.clear()
    reset_settings()


@pytest.fixture
def runtime():
    from object_cache import facade

    return facade.get_runtime()
