"""
codecompact - Bounded-size compaction of code dependency graphs.

Shrinks a large in-memory code graph down to a size budget while keeping
the files and symbols the caller marked as essential.
"""

from codecompact._version import __version__, __version_info__

# Core components
from codecompact.core import (
    logger,
    Settings,
    generate_id,
    CodeCompactError,
    ConfigurationError,
    InvalidRequestError,
    UnknownStrategyError,
    StrategyExecutionError,
    BatchCompactionError,
    PreservationError,
)

# Models
from codecompact.models import (
    SymbolKind,
    FileNode,
    Symbol,
    GraphNode,
    GraphEdge,
    GraphMetadata,
    CodeGraph,
    CompactRequirements,
    CompactRequest,
    CompactResult,
    RemovedItems,
    ImpactAnalysis,
    CompactionAnalysis,
    CompactMetrics,
    CompactConfig,
)

# Compaction engine
from codecompact.compact import (
    CompactController,
    CompactionStrategy,
    StrategyAnalyzer,
    create_default_registry,
)

__all__ = [
    # Version info
    "__version__",
    "__version_info__",
    # Core
    "logger",
    "Settings",
    "generate_id",
    # Exceptions
    "CodeCompactError",
    "ConfigurationError",
    "InvalidRequestError",
    "UnknownStrategyError",
    "StrategyExecutionError",
    "BatchCompactionError",
    "PreservationError",
    # Models
    "SymbolKind",
    "FileNode",
    "Symbol",
    "GraphNode",
    "GraphEdge",
    "GraphMetadata",
    "CodeGraph",
    "CompactRequirements",
    "CompactRequest",
    "CompactResult",
    "RemovedItems",
    "ImpactAnalysis",
    "CompactionAnalysis",
    "CompactMetrics",
    "CompactConfig",
    # Engine
    "CompactController",
    "CompactionStrategy",
    "StrategyAnalyzer",
    "create_default_registry",
    "create_controller",
]


def create_controller(config_path=None) -> CompactController:
    """
    Build a controller configured from .codecompact and the environment.

    Example:
        >>> controller = create_controller()
        >>> result = asyncio.run(controller.compact(CompactRequest(graph=graph)))
    """
    from pathlib import Path

    settings = Settings(Path(config_path) if config_path else None)
    return CompactController(CompactConfig.from_settings(settings))
