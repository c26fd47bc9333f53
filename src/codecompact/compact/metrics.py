"""
Compaction metrics.

Running aggregates over every compaction a controller performs. Uses the
core MetricsCollector via composition for the raw counters.
"""

import threading

from codecompact.core.logging import logger
from codecompact.core.tracing import MetricsCollector
from codecompact.core.utils.datetime_utils import utc_now
from codecompact.models.compaction import CompactMetrics

# Weight of the newest sample in the moving averages
EMA_ALPHA = 0.1


class CompactionMetrics:
    """
    Thread-safe aggregate metrics.

    Averages are exponential moving averages seeded by the first sample.
    """

    def __init__(self, alpha: float = EMA_ALPHA):
        self.alpha = alpha
        self.collector = MetricsCollector()
        self._lock = threading.Lock()
        self._state = CompactMetrics()

    def _ema(self, previous: float, sample: float, first: bool) -> float:
        if first:
            return sample
        return previous * (1 - self.alpha) + sample * self.alpha

    def record_compaction(
        self,
        strategy: str,
        execution_time_ms: float,
        compression_ratio: float,
        original_size: int,
        compacted_size: int,
    ) -> None:
        """
        Record one finished compaction.

        Args:
            strategy: Effective strategy name
            execution_time_ms: Wall time of the compaction
            compression_ratio: compacted_size / original_size
            original_size: Size before compaction
            compacted_size: Size after compaction
        """
        saved = original_size - compacted_size
        with self._lock:
            state = self._state
            first = state.total_compactions == 0
            state.total_compactions += 1
            state.average_time_ms = self._ema(state.average_time_ms, execution_time_ms, first)
            state.compression_ratio = self._ema(state.compression_ratio, compression_ratio, first)
            state.strategies_used[strategy] = state.strategies_used.get(strategy, 0) + 1
            state.memory_saved += saved
            state.context_size_reduced += saved
            state.last_compaction = utc_now()

            self.collector.increment("compact.total")
            self.collector.increment(f"compact.strategy.{strategy}")
            self.collector.gauge("compact.last_time_ms", execution_time_ms)

        logger.debug(
            "Compaction recorded",
            strategy=strategy,
            execution_time_ms=execution_time_ms,
            compression_ratio=compression_ratio,
            saved=saved,
        )

    def record_adaptive_trigger(self) -> None:
        with self._lock:
            self._state.adaptive_triggers += 1
            self.collector.increment("compact.adaptive_triggers")

    def update_cache_hit_rate(self, hit_rate: float) -> None:
        with self._lock:
            self._state.cache_hit_rate = hit_rate

    def snapshot(self) -> CompactMetrics:
        """Independent copy of the current aggregates."""
        with self._lock:
            return self._state.model_copy(deep=True)

    def reset(self) -> None:
        with self._lock:
            self._state = CompactMetrics()
            self.collector.clear()
        logger.info("Compaction metrics reset")
