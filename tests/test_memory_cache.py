from __future__ import annotations

import pytest

from object_cache.client import Found, ObjectCacheClient
from object_cache.memory import SWEEP_INTERVAL, MemoryObjectCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> MemoryObjectCache:
    return MemoryObjectCache(clock=clock)


def test_satisfies_client_protocol(cache):
    assert isinstance(cache, ObjectCacheClient)


def test_add_only_when_absent(cache):
    assert cache.add("k", 1, "g") is True
    assert cache.add("k", 2, "g") is False
    assert cache.get("k", "g") == 1


def test_replace_only_when_present(cache):
    assert cache.replace("k", 1) is False
    cache.set("k", 1)
    assert cache.replace("k", 2) is True
    assert cache.get("k") == 2


def test_groups_partition_keys(cache):
    cache.set("k", "posts", "posts")
    cache.set("k", "users", "users")

    assert cache.get("k", "posts") == "posts"
    assert cache.get("k", "users") == "users"


def test_empty_group_is_default_group(cache):
    cache.set("k", "v")
    assert cache.get("k", "default") == "v"


def test_int_and_str_keys_share_slot(cache):
    cache.set(5, "five")
    assert cache.get("5") == "five"


@pytest.mark.parametrize("key", ["", "   ", None, True, 1.5])
def test_invalid_keys_are_rejected(cache, key):
    found = Found(True)
    assert cache.set(key, "v") is False
    assert cache.get(key, found=found) is False
    assert found.value is False
    assert cache.delete(key) is False


def test_entries_expire(cache, clock):
    cache.set("short", "v", "g", 10)
    cache.set("forever", "v", "g", 0)

    clock.now += 9
    assert cache.get("short", "g") == "v"
    clock.now += 1
    found = Found()
    assert cache.get("short", "g", found=found) is False
    assert not found
    assert cache.get("forever", "g") == "v"


def test_add_succeeds_after_expiry(cache, clock):
    cache.set("k", "old", expire=5)
    clock.now += 5
    assert cache.add("k", "new") is True
    assert cache.get("k") == "new"


def test_incr_and_decr(cache):
    cache.set("n", 5)

    assert cache.incr("n") == 6
    assert cache.incr("n", 4) == 10
    assert cache.decr("n", 3) == 7
    assert cache.get("n") == 7


def test_decr_clamps_at_zero(cache):
    cache.set("n", 2)
    assert cache.decr("n", 5) == 0


def test_incr_missing_key_is_false(cache):
    assert cache.incr("missing") is False
    assert cache.decr("missing") is False


@pytest.mark.parametrize("stored, expected", [("7", 8), ("abc", 1), ([1], 1), (2.5, 3.5)])
def test_incr_coerces_stored_value(cache, stored, expected):
    cache.set("n", stored)
    assert cache.incr("n") == expected


def test_delete(cache):
    cache.set("k", "v")
    assert cache.delete("k") is True
    assert cache.delete("k") is False


def test_flush(cache):
    cache.set("a", 1, "g1")
    cache.set("b", 2, "g2")

    assert cache.flush() is True
    assert cache.get_multi({"g1": ["a"], "g2": ["b"]}) == {"g1:a": False, "g2:b": False}


def test_remember_and_forget(cache):
    calls = []

    def build():
        calls.append(1)
        return 42

    assert cache.remember("k", build, "g") == 42
    assert cache.remember("k", build, "g") == 42
    assert calls == [1]
    assert cache.forget("k", "g") == 42
    assert cache.forget("k", "g", default="gone") == "gone"


def test_remember_hit_on_stored_false(cache):
    cache.set("k", False)
    assert cache.remember("k", lambda: pytest.fail("generator called")) is False


def test_multisite_prefixes_blog_specific_groups():
    cache = MemoryObjectCache(multisite=True, blog_id=1)
    cache.add_global_groups(["users"])
    cache.set("k", "blog-1", "posts")
    cache.set("k", "shared", "users")

    cache.switch_to_blog(2)

    assert cache.get("k", "posts") is False
    assert cache.get("k", "users") == "shared"
    cache.set("k", "blog-2", "posts")
    cache.switch_to_blog(1)
    assert cache.get("k", "posts") == "blog-1"


def test_switch_to_blog_is_noop_without_multisite(cache):
    cache.set("k", "v", "posts")
    cache.switch_to_blog(9)
    assert cache.get("k", "posts") == "v"


def test_group_registration_accepts_string_or_iterable(cache):
    cache.add_global_groups("users")
    cache.add_global_groups(("site-options", "networks"))
    cache.add_non_persistent_groups(["counts", "plugins"])

    assert cache.global_groups == {"users", "site-options", "networks"}
    assert cache.non_persistent_groups == {"counts", "plugins"}


def test_stats_track_hits_and_misses(cache):
    cache.set("k", "v")
    cache.get("k")
    cache.get("missing")

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["entries"] == 1


def test_writes_sweep_expired_entries(cache, clock):
    cache.set("short", "v", "g", 10)
    cache.set("other", "v", "stale", 10)
    cache.set("kept", "v", "g")

    clock.now += SWEEP_INTERVAL
    cache.set("fresh", "v", "g")

    assert set(cache._store) == {"g"}
    assert set(cache._store["g"]) == {"kept", "fresh"}


def test_stats_excludes_expired_entries(cache, clock):
    cache.set("short", "v", expire=5)
    cache.set("kept", "v")

    clock.now += 5

    assert cache.stats()["entries"] == 1
    assert cache.purge_expired() == 0
