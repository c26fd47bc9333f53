"""
Tests for the compaction result cache.
"""

import pytest

from codecompact.compact import cache as cache_module
from codecompact.compact.cache import CompactionCache
from codecompact.models.compaction import CompactRequest, CompactRequirements, CompactResult


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def time(self):
        return self.now


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(cache_module, "time", fake)
    return fake


def make_result(graph):
    return CompactResult(compacted_graph=graph, strategy="size", metadata={"no_action": True})


class TestCacheKey:
    def test_same_request_same_key(self, sample_graph):
        cache = CompactionCache()
        request = CompactRequest(graph=sample_graph, max_size=10)
        same = CompactRequest(graph=sample_graph.model_copy(deep=True), max_size=10)

        assert cache.make_key(request, "size") == cache.make_key(same, "size")

    def test_key_depends_on_every_input(self, sample_graph):
        cache = CompactionCache()
        base = CompactRequest(graph=sample_graph, max_size=10)
        keys = {
            cache.make_key(base, "size"),
            cache.make_key(base, "relevance"),
            cache.make_key(base.model_copy(update={"max_size": 11}), "size"),
            cache.make_key(
                base.model_copy(
                    update={"requirements": CompactRequirements(preserve_files=["test1.ts"])}
                ),
                "size",
            ),
        }
        assert len(keys) == 4


class TestCacheBehaviour:
    def test_miss_then_hit(self, sample_graph, clock):
        cache = CompactionCache()

        assert cache.get("k") is None
        cache.set("k", make_result(sample_graph))
        hit = cache.get("k")

        assert hit is not None
        assert hit.metadata == {"no_action": True, "cache_hit": True}
        assert cache.get_hit_rate() == 0.5

    def test_returned_results_are_independent(self, sample_graph, clock):
        cache = CompactionCache()
        original = make_result(sample_graph)
        cache.set("k", original)

        original.compacted_graph.files.clear()
        first = cache.get("k")
        first.compacted_graph.files.clear()
        second = cache.get("k")

        assert set(second.compacted_graph.files) == {"test1.ts", "test2.ts"}
        assert "cache_hit" not in original.metadata

    def test_entries_expire(self, sample_graph, clock):
        cache = CompactionCache(ttl=60)
        cache.set("k", make_result(sample_graph))

        clock.now += 61

        assert cache.get("k") is None
        assert len(cache) == 0
        assert cache.get_stats()["expirations"] == 1

    def test_least_recently_used_evicted(self, sample_graph, clock):
        cache = CompactionCache(max_size=2)
        cache.set("k1", make_result(sample_graph))
        cache.set("k2", make_result(sample_graph))
        cache.get("k1")
        cache.set("k3", make_result(sample_graph))

        assert cache.get("k2") is None
        assert cache.get("k1") is not None
        assert cache.get("k3") is not None
        assert cache.get_stats()["evictions"] == 1

    def test_zero_size_disables_storage(self, sample_graph):
        cache = CompactionCache(max_size=0)
        cache.set("k", make_result(sample_graph))
        assert len(cache) == 0

    def test_clear(self, sample_graph):
        cache = CompactionCache()
        cache.set("k", make_result(sample_graph))
        cache.clear()

        assert len(cache) == 0
        assert cache.get_stats()["size"] == 0
