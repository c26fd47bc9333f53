"""
Named presets mapped to strategies.

Levels describe how hard to compact, tasks describe what the compacted
graph is for. Both resolve to a registered strategy name.
"""

from typing import Optional

LEVEL_STRATEGIES = {
    "minimal": "relevance",
    "balanced": "hybrid",
    "aggressive": "size",
}

TASK_STRATEGIES = {
    "debugging": "dependency",
    "refactoring": "hybrid",
    "documentation": "relevance",
}

DEFAULT_PRESET_STRATEGY = "hybrid"


def map_level_to_strategy(level: Optional[str]) -> str:
    """Unknown or empty levels fall back to hybrid."""
    return LEVEL_STRATEGIES.get((level or "").lower(), DEFAULT_PRESET_STRATEGY)


def map_task_to_strategy(task: Optional[str], default: str = DEFAULT_PRESET_STRATEGY) -> str:
    """Unknown or empty tasks keep the given default."""
    return TASK_STRATEGIES.get((task or "").lower(), default)


def resolve_strategy_name(
    strategy: Optional[str] = None,
    level: Optional[str] = None,
    task: Optional[str] = None,
) -> str:
    """
    Pick the strategy for a CLI style invocation.

    An explicit strategy wins. Otherwise the level picks a base strategy
    and a known task overrides it.
    """
    if strategy:
        return strategy
    return map_task_to_strategy(task, default=map_level_to_strategy(level))
