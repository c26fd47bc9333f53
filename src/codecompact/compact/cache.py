"""
LRU cache for compaction results.

Identical requests (same graph content, strategy, size bound and
requirements) are served from memory. Entries expire after a TTL.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

from codecompact.core.logging import logger
from codecompact.core.tracing import MetricsCollector
from codecompact.models.compaction import CompactRequest, CompactResult


class CompactionCache:
    """
    LRU (Least Recently Used) cache of CompactResult objects.

    Stored and returned results are independent copies, so callers may
    mutate what they get back.
    """

    def __init__(self, max_size: int = 100, ttl: int = 3600):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached results, 0 disables caching
            ttl: Time to live in seconds (default 1 hour)
        """
        self.max_size = max_size
        self.ttl = ttl
        self.cache: "OrderedDict[str, Tuple[CompactResult, float]]" = OrderedDict()
        self.metrics = MetricsCollector()
        self._lock = threading.Lock()

        logger.debug("CompactionCache initialized", max_size=max_size, ttl=ttl)

    def make_key(self, request: CompactRequest, strategy: str) -> str:
        """
        SHA-256 fingerprint of the request.

        Args:
            request: Normalized request (graph present)
            strategy: Effective strategy name

        Returns:
            Hex digest used as cache key
        """
        digest = hashlib.sha256()
        digest.update(request.graph.to_json().encode("utf-8"))
        digest.update(f"|{strategy}|{request.max_size}|".encode("utf-8"))
        if request.requirements is not None:
            digest.update(request.requirements.model_dump_json().encode("utf-8"))
        return digest.hexdigest()

    def get(self, key: str) -> Optional[CompactResult]:
        """
        Get a cached result.

        Returns:
            Copy of the result tagged with cache_hit, or None if missing/expired
        """
        with self._lock:
            entry = self.cache.get(key)
            if entry is None:
                self.metrics.increment("compact.cache.misses")
                return None

            result, timestamp = entry
            if time.time() - timestamp > self.ttl:
                del self.cache[key]
                self.metrics.increment("compact.cache.misses")
                self.metrics.increment("compact.cache.expirations")
                logger.debug("Cache entry expired", key=key[:12])
                return None

            self.cache.move_to_end(key)
            self.metrics.increment("compact.cache.hits")

        cached = result.model_copy(deep=True)
        cached.metadata = {**cached.metadata, "cache_hit": True}
        logger.debug("Cache hit", key=key[:12], hit_rate=self.get_hit_rate())
        return cached

    def set(self, key: str, result: CompactResult) -> None:
        """Cache a copy of a result, evicting the oldest entry when full."""
        if self.max_size <= 0:
            return

        stored = result.model_copy(deep=True)
        with self._lock:
            self.cache[key] = (stored, time.time())
            self.cache.move_to_end(key)

            if len(self.cache) > self.max_size:
                oldest_key = next(iter(self.cache))
                del self.cache[oldest_key]
                self.metrics.increment("compact.cache.evictions")
                logger.debug("Evicted oldest cache entry", size=len(self.cache))

            self.metrics.gauge("compact.cache.size", len(self.cache))

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            size = len(self.cache)
            self.cache.clear()
            self.metrics.gauge("compact.cache.size", 0)
        logger.debug("Cleared cache", entries_removed=size)

    def get_hit_rate(self) -> float:
        """
        Calculate cache hit rate.

        Returns:
            Hit rate as fraction (0.0 to 1.0)
        """
        hits = self.metrics.get("compact.cache.hits")
        misses = self.metrics.get("compact.cache.misses")
        total = hits + misses
        if total == 0:
            return 0.0
        return hits / total

    def get_stats(self) -> Dict[str, Any]:
        metrics = self.metrics.get_metrics()
        return {
            "size": len(self.cache),
            "max_size": self.max_size,
            "hits": metrics.get("compact.cache.hits", 0),
            "misses": metrics.get("compact.cache.misses", 0),
            "hit_rate": self.get_hit_rate(),
            "ttl": self.ttl,
            "evictions": metrics.get("compact.cache.evictions", 0),
            "expirations": metrics.get("compact.cache.expirations", 0),
        }

    def __len__(self) -> int:
        return len(self.cache)
