"""
Adaptive strategy selection.

Selection is split in two pure steps so it can be tested on its own:
graph -> GraphCharacteristics -> strategy name. AdaptiveStrategy only
looks the name up and delegates.
"""

from typing import Any, Dict, Mapping, Optional

from codecompact.core.logging import logger
from codecompact.compact.base import BaseStrategy, CompactionStrategy
from codecompact.compact.strategies import (
    DependencyStrategy,
    FrequencyStrategy,
    RelevanceStrategy,
    SizeStrategy,
)
from codecompact.models.compaction import CompactRequest, CompactResult, GraphCharacteristics
from codecompact.models.graph import CodeGraph

DEFAULT_THRESHOLDS: Dict[str, float] = {
    "connectivity_threshold": 0.1,
    "large_file_threshold": 10000,
    "unused_symbol_threshold": 0.2,
    # No usage data is available yet, so the ratio is a fixed estimate
    "unused_symbol_ratio": 0.3,
}


def analyze_graph_characteristics(
    graph: CodeGraph, thresholds: Optional[Mapping[str, Any]] = None
) -> GraphCharacteristics:
    """
    Measure the graph shape.

    Args:
        graph: Graph to inspect
        thresholds: Overrides for DEFAULT_THRESHOLDS

    Returns:
        GraphCharacteristics with ratios and flags
    """
    limits = dict(DEFAULT_THRESHOLDS)
    limits.update(thresholds or {})

    characteristics = GraphCharacteristics()

    node_count = len(graph.nodes)
    possible_edges = node_count * (node_count - 1)
    if possible_edges > 0:
        characteristics.connectivity_ratio = len(graph.edges) / possible_edges
        characteristics.has_high_connectivity = (
            characteristics.connectivity_ratio > limits["connectivity_threshold"]
        )

    if graph.files:
        total_bytes = sum(file.size for file in graph.files.values())
        characteristics.average_file_size = total_bytes / len(graph.files)
        characteristics.has_large_files = (
            characteristics.average_file_size > limits["large_file_threshold"]
        )

    characteristics.unused_symbol_ratio = float(limits["unused_symbol_ratio"])
    characteristics.has_many_unused_symbols = (
        characteristics.unused_symbol_ratio > limits["unused_symbol_threshold"]
    )

    return characteristics


def select_strategy_name(characteristics: GraphCharacteristics) -> str:
    """First matching row wins."""
    if characteristics.has_high_connectivity:
        return "dependency"
    if characteristics.has_large_files:
        return "size"
    if characteristics.has_many_unused_symbols:
        return "frequency"
    return "relevance"


class AdaptiveStrategy(BaseStrategy):
    """Picks a delegate from the graph shape and runs it."""

    def __init__(
        self,
        delegates: Optional[Mapping[str, CompactionStrategy]] = None,
        thresholds: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__("adaptive", "Dynamically selects optimal compaction approach")
        self.delegates: Dict[str, CompactionStrategy] = dict(
            delegates
            or {
                "relevance": RelevanceStrategy(),
                "frequency": FrequencyStrategy(),
                "dependency": DependencyStrategy(),
                "size": SizeStrategy(),
            }
        )
        self.thresholds: Dict[str, Any] = dict(thresholds or {})

    def choose(self, graph: CodeGraph):
        characteristics = analyze_graph_characteristics(graph, self.thresholds)
        return select_strategy_name(characteristics), characteristics

    async def compact(self, request: CompactRequest) -> CompactResult:
        choice, characteristics = self.choose(request.graph)
        delegate = self.delegates[choice]

        logger.debug("Adaptive strategy selected delegate", choice=choice)
        result = await delegate.compact(request)

        metadata = dict(result.metadata)
        metadata["adaptive_choice"] = choice
        metadata["graph_characteristics"] = characteristics.model_dump()
        result.metadata = metadata
        return result
