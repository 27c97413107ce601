from datetime import timedelta

from salary_api.core.cache import CacheStore


def test_make_key_normalizes_case_and_whitespace():
    assert CacheStore.make_key("salary", "Foo  ", "BAR") == CacheStore.make_key("salary", " foo", "bar ")
    assert CacheStore.make_key("company", " Acme ") == "company:acme"


def test_set_then_get_round_trip(cache):
    cache.set("salary:acme:engineer", {"median": "$100 k"}, 60)
    assert cache.get("salary:acme:engineer") == {"median": "$100 k"}


def test_get_missing_key_returns_none(cache):
    assert cache.get("job:nothing") is None


def test_expired_entry_is_absent_and_deleted(cache, clock):
    cache.set("job:engineer", ["x"], 60)
    clock.advance(60)
    assert cache.get("job:engineer") is None
    assert cache.stats()["totalEntries"] == 0


def test_entry_still_valid_just_before_expiry(cache, clock):
    cache.set("job:engineer", ["x"], 60)
    clock.advance(59.9)
    assert cache.get("job:engineer") == ["x"]


def test_set_accepts_timedelta_and_default_ttl(clock):
    cache = CacheStore(default_ttl=10, clock=clock)
    cache.set("company:a", [1])
    cache.set("company:b", [2], timedelta(days=1))
    clock.advance(11)
    assert cache.get("company:a") is None
    assert cache.get("company:b") == [2]


def test_default_ttl_is_one_day(clock):
    cache = CacheStore(clock=clock)
    cache.set("company:a", [1])
    clock.advance(24 * 60 * 60 - 1)
    assert cache.get("company:a") == [1]
    clock.advance(1)
    assert cache.get("company:a") is None


def test_set_overwrites_existing_value_and_expiry(cache, clock):
    cache.set("company:acme", [1], 10)
    clock.advance(5)
    cache.set("company:acme", [2], 10)
    clock.advance(7)
    assert cache.get("company:acme") == [2]


def test_clear_with_prefix_keeps_other_namespaces(cache):
    cache.set("company:acme", [1])
    cache.set("company:globex", [2])
    cache.set("job:x", [3])
    removed = cache.clear("company")
    assert removed == 2
    assert cache.get("job:x") == [3]
    assert cache.get("company:acme") is None


def test_clear_with_namespace_prefix_does_not_match_longer_namespace(cache):
    cache.set("company:acme", [1])
    cache.set("companyx:acme", [2])
    cache.clear(CacheStore.namespace_prefix("company"))
    assert cache.get("companyx:acme") == [2]
    assert cache.get("company:acme") is None


def test_clear_without_prefix_removes_everything(cache):
    cache.set("company:acme", [1])
    cache.set("salary:acme:engineer", {"a": 1})
    assert cache.clear() == 2
    assert len(cache) == 0


def test_stats_counts_by_namespace(cache):
    cache.set("company:acme", [1])
    cache.set("job:engineer", [1])
    cache.set("job:manager", [1])
    stats = cache.stats()
    assert stats["totalEntries"] == 3
    assert stats["byPrefix"] == {"company": 1, "job": 2}
    assert stats["memoryUsageEstimate"] == len("[1]") * 2 * 3


def test_max_entries_evicts_earliest_write(clock):
    cache = CacheStore(max_entries=2, clock=clock)
    cache.set("job:a", 1)
    cache.set("job:b", 2)
    cache.set("job:a", 3)  # rewrite moves "a" behind "b"
    cache.set("job:c", 4)
    assert cache.get("job:b") is None
    assert cache.get("job:a") == 3
    assert cache.get("job:c") == 4


def test_memory_estimate_uses_compact_unicode_json(cache):
    cache.set("salary:acme:engineer", {"low": "₹3 lakh", "n": [1, 2]})
    # {"low":"₹3 lakh","n":[1,2]} is 27 characters
    assert cache.stats()["memoryUsageEstimate"] == 27 * 2
