"""TTL cache behaviour."""

import redis

from common.cache import Cache, MemoryBackend


def test_get_or_set_loads_once():
    cache = Cache(MemoryBackend())
    calls = []

    def loader():
        calls.append(1)
        return {"items": [1, 2]}

    assert cache.get_or_set("k", 60, loader) == {"items": [1, 2]}
    assert cache.get_or_set("k", 60, loader) == {"items": [1, 2]}
    assert len(calls) == 1


def test_none_is_not_cached():
    cache = Cache(MemoryBackend())
    calls = []
    cache.get_or_set("k", 60, lambda: calls.append(1))
    cache.get_or_set("k", 60, lambda: calls.append(1))
    assert len(calls) == 2


def test_expiry(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr("common.cache.time.monotonic", lambda: now[0])
    cache = Cache(MemoryBackend())
    cache.setex("k", 10, "v")
    assert cache.get("k") == "v"
    now[0] += 10
    assert cache.get("k") is None


class BrokenBackend:
    def get(self, key):
        raise redis.ConnectionError("down")

    def setex(self, key, seconds, value):
        raise redis.ConnectionError("down")

    def delete(self, key):
        raise redis.ConnectionError("down")

    def clear(self):
        pass


def test_backend_errors_degrade_to_miss():
    cache = Cache(BrokenBackend())
    assert cache.get("k") is None
    assert cache.get_or_set("k", 60, lambda: [1]) == [1]
    cache.delete("k")
