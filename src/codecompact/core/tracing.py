"""
Local observability for the compaction engine.

Spans time controller operations (single requests and batches) and keep
per-span counters so slow or failing stages show up without an external
telemetry backend.
"""

import time
from contextlib import contextmanager
from typing import Dict, Any, Optional, Iterator

from codecompact.core.logging import AsyncLogger
from codecompact.core.id_generator import generate_id

# Span names used by the controller
SPAN_COMPACT = "compact.request"
SPAN_BATCH = "compact.batch"


class MetricsCollector:
    """
    Local metrics collector.

    Only for internal monitoring, without export.
    """

    def __init__(self) -> None:
        self.metrics: Dict[str, float] = {}

    def increment(self, name: str, value: float = 1.0) -> None:
        """Increments counter."""
        self.metrics[name] = self.metrics.get(name, 0) + value

    def gauge(self, name: str, value: float) -> None:
        """Sets current value."""
        self.metrics[name] = value

    def get(self, name: str, default: float = 0.0) -> float:
        """Reads a single metric."""
        return self.metrics.get(name, default)

    def get_metrics(self) -> Dict[str, float]:
        """Gets all metrics."""
        return self.metrics.copy()

    def clear(self) -> None:
        """Drops every recorded value."""
        self.metrics.clear()


class LocalTracer:
    """
    Span tracer for compaction stages.

    Every finished span is logged at DEBUG with its id, duration, status
    and attributes, and counted under "<name>.count", "<name>.errors" and
    "<name>.duration_ms" (accumulated) in the tracer's own collector.
    """

    def __init__(self, service_name: str = "codecompact") -> None:
        self.service_name = service_name
        self.logger = AsyncLogger("tracing")
        self.stats = MetricsCollector()

    @contextmanager
    def span(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[str]:
        """
        Time a compaction stage and yield its span id.

        Usage:
        ```
        with tracer.span(SPAN_COMPACT, {"strategy": "size", "max_size": 500}):
            result = await strategy.compact(request)
        ```

        Exceptions propagate; the span is recorded with status "error".
        """
        span_id = generate_id()
        start = time.perf_counter()
        status = "ok"

        try:
            yield span_id
        except BaseException:
            status = "error"
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            self.stats.increment(f"{name}.count")
            self.stats.increment(f"{name}.duration_ms", duration_ms)
            if status == "error":
                self.stats.increment(f"{name}.errors")
            self.logger.debug(
                f"Span completed: {name}",
                service=self.service_name,
                span_id=span_id,
                status=status,
                duration_ms=duration_ms,
                **(attributes or {}),
            )

    def span_summary(self, name: str) -> Dict[str, float]:
        """Count, errors and mean duration recorded for one span name."""
        count = self.stats.get(f"{name}.count")
        total_ms = self.stats.get(f"{name}.duration_ms")
        return {
            "count": count,
            "errors": self.stats.get(f"{name}.errors"),
            "avg_duration_ms": total_ms / count if count else 0.0,
        }


# Global instance
tracer = LocalTracer()
