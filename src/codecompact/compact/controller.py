"""
Compaction controller.

Single entry point for compacting code graphs: resolves the strategy
(explicit, configured default or adaptive override), runs it on a
normalized request and reports sizes, timing and aggregate metrics.
"""

import asyncio
import time
from typing import Iterable, List, Optional

from codecompact.core.exceptions import (
    BatchCompactionError,
    InvalidRequestError,
    StrategyExecutionError,
    UnknownStrategyError,
)
from codecompact.core.logging import PerformanceLogger, logger
from codecompact.core.tracing import SPAN_BATCH, SPAN_COMPACT, tracer
from codecompact.compact.adaptive import analyze_graph_characteristics, select_strategy_name
from codecompact.compact.base import CompactionStrategy, preserved_size
from codecompact.compact.cache import CompactionCache
from codecompact.compact.impact import analyze_impact
from codecompact.compact.metrics import CompactionMetrics
from codecompact.compact.registry import StrategyRegistry, create_default_registry
from codecompact.models.compaction import (
    CompactConfig,
    CompactionAnalysis,
    CompactMetrics,
    CompactRequest,
    CompactRequirements,
    CompactResult,
    RemovedItems,
)
from codecompact.models.graph import CodeGraph

FALLBACK_RECOMMENDATION = "hybrid"

perf_logger = PerformanceLogger()


class CompactController:
    """
    Orchestrates compaction requests.

    Usage:
    ```
    controller = CompactController()
    result = await controller.compact(CompactRequest(graph=graph, max_size=500))
    ```
    """

    def __init__(
        self,
        config: Optional[CompactConfig] = None,
        registry: Optional[StrategyRegistry] = None,
    ):
        self.config = config or CompactConfig()
        self.registry = registry or create_default_registry(self.config.strategy_config)
        self.metrics = CompactionMetrics()
        self.cache: Optional[CompactionCache] = None
        if self.config.cache_enabled:
            self.cache = CompactionCache(
                max_size=self.config.cache_size, ttl=self.config.cache_ttl_seconds
            )

        logger.info(
            "CompactController initialized",
            strategies=self.registry.names(),
            default_strategy=self.config.default_strategy,
            cache_enabled=self.cache is not None,
        )

    # Registry

    def register_strategy(self, name: str, strategy: CompactionStrategy) -> None:
        self.registry.register(name, strategy)

    def get_strategy(self, name: str) -> Optional[CompactionStrategy]:
        return self.registry.get(name)

    def list_strategies(self) -> List[str]:
        return self.registry.names()

    # Compaction

    def _normalize(self, request: CompactRequest) -> CompactRequest:
        """Copy of the request with max_size and requirements filled in."""
        update = {}
        if request.max_size <= 0:
            update["max_size"] = self.config.max_context_size
        if request.requirements is None:
            update["requirements"] = CompactRequirements()
        return request.model_copy(update=update) if update else request

    def _disabled_result(self, graph: CodeGraph) -> CompactResult:
        size = graph.size()
        return CompactResult(
            compacted_graph=graph,
            original_size=size,
            compacted_size=size,
            compression_ratio=1.0,
            strategy="none",
            execution_time_ms=0.0,
            removed_items=RemovedItems(),
            metadata={"compaction": "disabled"},
        )

    def _resolve_strategy(self, request: CompactRequest):
        """
        Pick the strategy to run.

        Returns:
            (name, strategy, characteristics or None when no adaptive override)
        """
        name = request.strategy or self.config.default_strategy
        strategy = self.registry.get(name)
        if strategy is None:
            raise UnknownStrategyError(name, self.registry.names())

        if self.config.adaptive_enabled and request.strategy in ("", "adaptive"):
            characteristics = analyze_graph_characteristics(
                request.graph, self.config.strategy_config.get("adaptive")
            )
            choice = select_strategy_name(characteristics)
            chosen = self.registry.get(choice)
            if chosen is None:
                raise UnknownStrategyError(choice, self.registry.names())
            if self.config.metrics_enabled:
                self.metrics.record_adaptive_trigger()
            logger.debug("Adaptive override", requested=name, choice=choice)
            return choice, chosen, characteristics

        return name, strategy, None

    def _collect_warnings(
        self, request: CompactRequest, result: CompactResult
    ) -> List[str]:
        warnings = []
        graph = request.graph
        requirements = request.requirements

        protected = preserved_size(graph, requirements)
        if protected > request.max_size:
            warnings.append(
                f"Preserved elements ({protected}) exceed max_size ({request.max_size}), "
                "preservation may be traded for size"
            )

        if result.compacted_size > request.max_size:
            warnings.append(
                f"Compacted size {result.compacted_size} still exceeds max_size {request.max_size}"
            )

        if requirements.required_types:
            required = set(requirements.required_types)
            lost = [
                symbol_id
                for symbol_id in result.removed_items.symbols
                if symbol_id in graph.symbols and graph.symbols[symbol_id].kind in required
            ]
            if lost:
                warnings.append(
                    f"Removed {len(lost)} symbols of required kinds: {', '.join(sorted(required))}"
                )

        return warnings

    async def compact(self, request: CompactRequest) -> CompactResult:
        """
        Compact one graph.

        Args:
            request: Compaction request, not modified

        Returns:
            CompactResult with sizes, ratio, timing and the effective strategy

        Raises:
            InvalidRequestError: The request carries no graph
            UnknownStrategyError: The strategy name is not registered
            StrategyExecutionError: The strategy failed
        """
        if request is None or request.graph is None:
            raise InvalidRequestError("Compaction request requires a graph")

        if not self.config.enable_compaction:
            return self._disabled_result(request.graph)

        start = time.perf_counter()
        request = self._normalize(request)
        name, strategy, characteristics = self._resolve_strategy(request)

        with tracer.span(SPAN_COMPACT, {"strategy": name, "max_size": request.max_size}):
            cache_key = None
            result = None
            if self.cache is not None:
                cache_key = self.cache.make_key(request, name)
                result = self.cache.get(cache_key)

            if result is None:
                try:
                    result = await strategy.compact(request)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error("Compaction failed", strategy=name, error=str(e))
                    raise StrategyExecutionError(name, e) from e

                original_size = request.graph.size()
                compacted_size = result.compacted_graph.size()
                result.original_size = original_size
                result.compacted_size = compacted_size
                result.compression_ratio = (
                    compacted_size / original_size if original_size > 0 else 0.0
                )
                result.strategy = name

                metadata = dict(result.metadata)
                if characteristics is not None:
                    metadata["adaptive_choice"] = name
                    metadata["adaptive_override"] = True
                    metadata["graph_characteristics"] = characteristics.model_dump()
                result.metadata = metadata

                if self.config.impact_analysis:
                    with perf_logger.measure("impact_analysis", strategy=name):
                        result.removed_items.impact = analyze_impact(
                            request.graph, result.compacted_graph, result.removed_items
                        )
                result.warnings = result.warnings + self._collect_warnings(request, result)

                if cache_key is not None:
                    self.cache.set(cache_key, result)

            result.execution_time_ms = (time.perf_counter() - start) * 1000

        if self.config.metrics_enabled:
            self.metrics.record_compaction(
                name,
                result.execution_time_ms,
                result.compression_ratio,
                result.original_size,
                result.compacted_size,
            )
            if self.cache is not None:
                self.metrics.update_cache_hit_rate(self.cache.get_hit_rate())

        for warning in result.warnings:
            logger.warning(warning, strategy=name)
        logger.info(
            "Compaction completed",
            strategy=name,
            original_size=result.original_size,
            compacted_size=result.compacted_size,
            compression_ratio=round(result.compression_ratio, 3),
            execution_time_ms=round(result.execution_time_ms, 2),
        )
        return result

    async def compact_multiple(self, requests: Iterable[CompactRequest]) -> List[CompactResult]:
        """
        Compact a batch of independent requests.

        Results come back in request order. With parallel processing enabled
        at most batch_size requests run concurrently.

        Raises:
            BatchCompactionError: A request failed; the rest were cancelled
        """
        requests = list(requests)
        if not requests:
            return []

        with tracer.span(SPAN_BATCH, {"requests": len(requests)}):
            if not self.config.parallel_processing or len(requests) == 1:
                results = []
                for index, request in enumerate(requests):
                    try:
                        results.append(await self.compact(request))
                    except asyncio.CancelledError:
                        raise
                    except Exception as e:
                        raise BatchCompactionError(index, e) from e
                return results

            semaphore = asyncio.Semaphore(self.config.batch_size)

            async def run(request: CompactRequest) -> CompactResult:
                async with semaphore:
                    return await self.compact(request)

            tasks = [asyncio.create_task(run(request)) for request in requests]
            try:
                done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            except asyncio.CancelledError:
                for task in tasks:
                    task.cancel()
                raise

            failed = [
                index
                for index, task in enumerate(tasks)
                if task in done and not task.cancelled() and task.exception() is not None
            ]
            if failed:
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                index = failed[0]
                cause = tasks[index].exception()
                logger.error("Batch compaction aborted", index=index, error=str(cause))
                raise BatchCompactionError(index, cause) from cause

            return [task.result() for task in tasks]

    # Analysis and metrics

    def analyze_compaction_potential(self, graph: CodeGraph) -> CompactionAnalysis:
        """
        Ask every strategy that can estimate its effect.

        The recommendation is the lowest estimated ratio; hybrid when no
        estimate beats 1.0.
        """
        if graph is None:
            raise InvalidRequestError("Analysis requires a graph")

        analysis = CompactionAnalysis(
            total_files=len(graph.files),
            total_symbols=len(graph.symbols),
            total_nodes=len(graph.nodes),
            total_edges=len(graph.edges),
        )

        best_ratio = 1.0
        best_strategy = FALLBACK_RECOMMENDATION
        for name, analyzer in sorted(self.registry.analyzers(), key=lambda item: item[0]):
            estimate = analyzer.analyze_potential(graph)
            analysis.strategies[name] = estimate
            if estimate.estimated_compression < best_ratio:
                best_ratio = estimate.estimated_compression
                best_strategy = name

        analysis.recommended_strategy = best_strategy
        analysis.max_compression_ratio = best_ratio
        analysis.estimated_savings = int(analysis.total_size * (1.0 - best_ratio))
        return analysis

    def get_metrics(self) -> CompactMetrics:
        return self.metrics.snapshot()

    def reset_metrics(self) -> None:
        self.metrics.reset()
