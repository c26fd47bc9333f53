"""
codecompact models.
Exports the graph and compaction models used across the package.
"""

from codecompact.models.base import CodeCompactBaseModel

# Graph
from codecompact.models.graph import (
    SymbolKind,
    Location,
    Import,
    FileNode,
    Symbol,
    GraphNode,
    GraphEdge,
    GraphMetadata,
    CodeGraph,
)

# Compaction
from codecompact.models.compaction import (
    CompactRequirements,
    CompactRequest,
    ImpactAnalysis,
    RemovedItems,
    CompactResult,
    StrategyAnalysis,
    CompactionAnalysis,
    GraphCharacteristics,
    CompactMetrics,
    CompactConfig,
)

__all__ = [
    "CodeCompactBaseModel",
    "SymbolKind",
    "Location",
    "Import",
    "FileNode",
    "Symbol",
    "GraphNode",
    "GraphEdge",
    "GraphMetadata",
    "CodeGraph",
    "CompactRequirements",
    "CompactRequest",
    "ImpactAnalysis",
    "RemovedItems",
    "CompactResult",
    "StrategyAnalysis",
    "CompactionAnalysis",
    "GraphCharacteristics",
    "CompactMetrics",
    "CompactConfig",
]
