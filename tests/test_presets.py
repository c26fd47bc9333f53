"""
Tests for level and task presets.
"""

import pytest

from codecompact.compact.presets import (
    map_level_to_strategy,
    map_task_to_strategy,
    resolve_strategy_name,
)


@pytest.mark.parametrize(
    "level,expected",
    [("minimal", "relevance"), ("balanced", "hybrid"), ("aggressive", "size"), ("AGGRESSIVE", "size"), ("extreme", "hybrid"), (None, "hybrid")],
)
def test_levels(level, expected):
    assert map_level_to_strategy(level) == expected


@pytest.mark.parametrize(
    "task,expected",
    [("debugging", "dependency"), ("refactoring", "hybrid"), ("documentation", "relevance"), ("testing", "size"), ("", "size")],
)
def test_tasks_keep_default_when_unknown(task, expected):
    assert map_task_to_strategy(task, default="size") == expected


def test_explicit_strategy_wins():
    assert resolve_strategy_name("frequency", "aggressive", "debugging") == "frequency"


def test_task_overrides_level():
    assert resolve_strategy_name(None, "aggressive", "debugging") == "dependency"
    assert resolve_strategy_name(None, "aggressive", None) == "size"
    assert resolve_strategy_name() == "hybrid"
