"""
Tests for aggregate compaction metrics.
"""

import threading

import pytest

from codecompact.compact.metrics import CompactionMetrics


def test_first_sample_seeds_the_averages():
    metrics = CompactionMetrics()
    metrics.record_compaction("size", 10.0, 0.5, 100, 50)

    snapshot = metrics.snapshot()
    assert snapshot.total_compactions == 1
    assert snapshot.average_time_ms == 10.0
    assert snapshot.compression_ratio == 0.5
    assert snapshot.last_compaction is not None


def test_exponential_moving_average():
    metrics = CompactionMetrics()
    metrics.record_compaction("size", 10.0, 0.5, 100, 50)
    metrics.record_compaction("hybrid", 20.0, 1.0, 10, 10)

    snapshot = metrics.snapshot()
    assert snapshot.average_time_ms == pytest.approx(11.0)
    assert snapshot.compression_ratio == pytest.approx(0.55)
    assert snapshot.strategies_used == {"size": 1, "hybrid": 1}
    assert snapshot.memory_saved == 50
    assert snapshot.context_size_reduced == 50


def test_snapshot_is_a_copy():
    metrics = CompactionMetrics()
    metrics.record_compaction("size", 1.0, 1.0, 1, 1)

    snapshot = metrics.snapshot()
    snapshot.strategies_used["size"] = 99

    assert metrics.snapshot().strategies_used == {"size": 1}


def test_adaptive_triggers_and_cache_rate():
    metrics = CompactionMetrics()
    metrics.record_adaptive_trigger()
    metrics.record_adaptive_trigger()
    metrics.update_cache_hit_rate(0.25)

    snapshot = metrics.snapshot()
    assert snapshot.adaptive_triggers == 2
    assert snapshot.cache_hit_rate == 0.25


def test_reset():
    metrics = CompactionMetrics()
    metrics.record_compaction("size", 1.0, 0.5, 2, 1)
    metrics.reset()

    snapshot = metrics.snapshot()
    assert snapshot.total_compactions == 0
    assert snapshot.strategies_used == {}
    assert snapshot.last_compaction is None
    assert metrics.collector.get_metrics() == {}


def test_concurrent_updates_are_not_lost():
    metrics = CompactionMetrics()

    def worker():
        for _ in range(200):
            metrics.record_compaction("size", 1.0, 1.0, 2, 1)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = metrics.snapshot()
    assert snapshot.total_compactions == 800
    assert snapshot.strategies_used["size"] == 800
    assert snapshot.memory_saved == 800
