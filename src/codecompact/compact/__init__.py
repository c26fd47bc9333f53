"""
Compaction engine.

Reduces a code graph to a bounded size with interchangeable strategies,
orchestrated by CompactController.
"""

from codecompact.compact.base import (
    BaseStrategy,
    CompactionStrategy,
    StrategyAnalyzer,
)
from codecompact.compact.strategies import (
    DependencyStrategy,
    FrequencyStrategy,
    HybridStrategy,
    RelevanceStrategy,
    SizeStrategy,
)
from codecompact.compact.adaptive import (
    AdaptiveStrategy,
    analyze_graph_characteristics,
    select_strategy_name,
)
from codecompact.compact.registry import StrategyRegistry, create_default_registry
from codecompact.compact.impact import analyze_impact
from codecompact.compact.cache import CompactionCache
from codecompact.compact.metrics import CompactionMetrics
from codecompact.compact.presets import (
    map_level_to_strategy,
    map_task_to_strategy,
    resolve_strategy_name,
)
from codecompact.compact.controller import CompactController

__all__ = [
    # Controller
    "CompactController",
    # Strategies
    "CompactionStrategy",
    "StrategyAnalyzer",
    "BaseStrategy",
    "RelevanceStrategy",
    "FrequencyStrategy",
    "DependencyStrategy",
    "SizeStrategy",
    "HybridStrategy",
    "AdaptiveStrategy",
    "analyze_graph_characteristics",
    "select_strategy_name",
    # Registry
    "StrategyRegistry",
    "create_default_registry",
    # Supporting services
    "analyze_impact",
    "CompactionCache",
    "CompactionMetrics",
    "map_level_to_strategy",
    "map_task_to_strategy",
    "resolve_strategy_name",
]
