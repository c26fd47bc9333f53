"""
Strategy registry.
"""

import threading
from collections import OrderedDict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from codecompact.core.exceptions import ConfigurationError
from codecompact.core.logging import logger
from codecompact.compact.adaptive import DEFAULT_THRESHOLDS, AdaptiveStrategy
from codecompact.compact.base import CompactionStrategy, StrategyAnalyzer
from codecompact.compact.strategies import (
    DependencyStrategy,
    FrequencyStrategy,
    HybridStrategy,
    RelevanceStrategy,
    SizeStrategy,
)


class StrategyRegistry:
    """
    Name to strategy mapping.

    Registration may happen while compactions run, so every access goes
    through a re-entrant lock. Re-registering a name replaces the entry.
    """

    def __init__(self):
        self._strategies: "OrderedDict[str, CompactionStrategy]" = OrderedDict()
        self._lock = threading.RLock()

    def register(self, name: str, strategy: CompactionStrategy) -> None:
        if not name:
            raise ValueError("Strategy name cannot be empty")
        with self._lock:
            replaced = name in self._strategies
            self._strategies[name] = strategy
        logger.debug("Strategy registered", strategy=name, replaced=replaced)

    def get(self, name: str) -> Optional[CompactionStrategy]:
        with self._lock:
            return self._strategies.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._strategies)

    def analyzers(self) -> List[Tuple[str, StrategyAnalyzer]]:
        """Registered strategies that can estimate their own effect, in registration order."""
        with self._lock:
            items = list(self._strategies.items())
        return [(name, s) for name, s in items if isinstance(s, StrategyAnalyzer)]

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._strategies

    def __len__(self) -> int:
        with self._lock:
            return len(self._strategies)


_ALLOWED_OPTIONS = {
    "relevance": {"threshold", "base_score", "propagation_factor"},
    "frequency": {"removal_percentage"},
    "dependency": set(),
    "size": {"symbol_weight"},
    "hybrid": set(),
    "adaptive": set(DEFAULT_THRESHOLDS),
}


def _options(strategy_config: Mapping[str, Any], name: str) -> Dict[str, Any]:
    options = strategy_config.get(name) or {}
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            f"strategy_config.{name} must be a mapping", context={"strategy": name}
        )
    unknown = sorted(set(options) - _ALLOWED_OPTIONS[name])
    if unknown:
        error = ConfigurationError(
            f"Unknown options for strategy {name}: {', '.join(unknown)}",
            context={"strategy": name, "unknown": unknown},
        )
        allowed = sorted(_ALLOWED_OPTIONS[name])
        error.add_suggestion(
            f"Allowed options: {', '.join(allowed)}" if allowed else f"{name} takes no options"
        )
        raise error
    return dict(options)


def create_default_registry(
    strategy_config: Optional[Mapping[str, Any]] = None,
) -> StrategyRegistry:
    """
    Build a registry with the six built-in strategies.

    Args:
        strategy_config: Per-strategy option overrides keyed by strategy name
    """
    strategy_config = strategy_config or {}

    relevance = RelevanceStrategy(**_options(strategy_config, "relevance"))
    frequency = FrequencyStrategy(**_options(strategy_config, "frequency"))
    dependency = DependencyStrategy(**_options(strategy_config, "dependency"))
    size = SizeStrategy(**_options(strategy_config, "size"))
    _options(strategy_config, "hybrid")

    registry = StrategyRegistry()
    registry.register("relevance", relevance)
    registry.register("frequency", frequency)
    registry.register("dependency", dependency)
    registry.register("size", size)
    registry.register("hybrid", HybridStrategy([relevance, frequency, dependency]))
    registry.register(
        "adaptive",
        AdaptiveStrategy(
            delegates={
                "relevance": relevance,
                "frequency": frequency,
                "dependency": dependency,
                "size": size,
            },
            thresholds=_options(strategy_config, "adaptive"),
        ),
    )
    return registry
