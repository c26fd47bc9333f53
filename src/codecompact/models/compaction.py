"""
Compaction request, result and reporting models.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import Field

from codecompact.models.base import CodeCompactBaseModel
from codecompact.models.graph import CodeGraph


class CompactRequirements(CodeCompactBaseModel):
    """
    What must survive a compaction.

    Files match exactly (preserve_files) or by substring (preserve_paths);
    symbols match by exact id.
    """

    preserve_files: List[str] = Field(default_factory=list)
    preserve_paths: List[str] = Field(default_factory=list)
    preserve_symbols: List[str] = Field(default_factory=list)
    required_types: List[str] = Field(default_factory=list, description="Symbol kinds to keep")
    language_filter: List[str] = Field(default_factory=list)
    min_depth: int = Field(0, ge=0)


class CompactRequest(CodeCompactBaseModel):
    """A single compaction request."""

    graph: Optional[CodeGraph] = Field(None, description="Graph to compact")
    strategy: str = Field("", description="Strategy name, empty for the controller default")
    max_size: int = Field(0, description="Target size, <= 0 for the configured default")
    priorities: Dict[str, float] = Field(default_factory=dict)
    requirements: Optional[CompactRequirements] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class ImpactAnalysis(CodeCompactBaseModel):
    """Consequences of a removal set on the surviving graph."""

    dependent_files: List[str] = Field(default_factory=list)
    broken_references: int = 0
    isolated_symbols: int = 0
    risk_level: str = "low"
    recommendations: List[str] = Field(default_factory=list)


class RemovedItems(CodeCompactBaseModel):
    """Report of everything a compaction removed."""

    files: List[str] = Field(default_factory=list)
    symbols: List[str] = Field(default_factory=list)
    edges: List[str] = Field(default_factory=list)
    nodes: List[str] = Field(default_factory=list)
    reason: str = ""
    impact: Optional[ImpactAnalysis] = None

    def total(self) -> int:
        return len(self.files) + len(self.symbols) + len(self.edges) + len(self.nodes)


class CompactResult(CodeCompactBaseModel):
    """
    Outcome of a compaction.

    Strategies fill compacted_graph, removed_items and metadata; the
    controller adds sizes, ratio, timing and the effective strategy name.
    """

    compacted_graph: CodeGraph
    original_size: int = 0
    compacted_size: int = 0
    compression_ratio: float = 0.0
    strategy: str = ""
    execution_time_ms: float = 0.0
    removed_items: RemovedItems = Field(default_factory=RemovedItems)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)

    @property
    def no_action(self) -> bool:
        return bool(self.metadata.get("no_action", False))


class StrategyAnalysis(CodeCompactBaseModel):
    """Estimate of what a strategy could achieve on a graph."""

    estimated_compression: float = 1.0
    removable_files: int = 0
    removable_symbols: int = 0
    confidence: float = 0.0
    warnings: List[str] = Field(default_factory=list)


class CompactionAnalysis(CodeCompactBaseModel):
    """Per-strategy potential plus the overall recommendation."""

    total_files: int = 0
    total_symbols: int = 0
    total_nodes: int = 0
    total_edges: int = 0
    strategies: Dict[str, StrategyAnalysis] = Field(default_factory=dict)
    recommended_strategy: str = ""
    max_compression_ratio: float = 1.0
    estimated_savings: int = 0

    @property
    def total_size(self) -> int:
        return self.total_files + self.total_symbols + self.total_nodes + self.total_edges


class GraphCharacteristics(CodeCompactBaseModel):
    """Shape indicators the adaptive selection is based on."""

    has_high_connectivity: bool = False
    has_large_files: bool = False
    has_many_unused_symbols: bool = False
    average_file_size: float = 0.0
    connectivity_ratio: float = 0.0
    unused_symbol_ratio: float = 0.0


class CompactMetrics(CodeCompactBaseModel):
    """Running aggregates kept by the controller."""

    total_compactions: int = 0
    compression_ratio: float = 0.0
    average_time_ms: float = 0.0
    last_compaction: Optional[datetime] = None
    strategies_used: Dict[str, int] = Field(default_factory=dict)
    cache_hit_rate: float = 0.0
    memory_saved: int = 0
    context_size_reduced: int = 0
    adaptive_triggers: int = 0


class CompactConfig(CodeCompactBaseModel):
    """
    Controller configuration.

    strategy_config holds per-strategy overrides, e.g.
    {"relevance": {"threshold": 0.4}, "frequency": {"removal_percentage": 0.2}}.
    """

    enable_compaction: bool = True
    default_strategy: str = "hybrid"
    max_context_size: int = Field(10000, gt=0)
    compression_ratio: float = Field(0.7, ge=0.0, le=1.0)
    priority_threshold: float = Field(0.5, ge=0.0, le=1.0)
    cache_enabled: bool = True
    cache_size: int = Field(100, ge=0)
    cache_ttl_seconds: int = Field(3600, gt=0)
    metrics_enabled: bool = True
    strategy_config: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    adaptive_enabled: bool = True
    adaptive_threshold: float = Field(0.8, ge=0.0, le=1.0)
    batch_size: int = Field(50, gt=0)
    parallel_processing: bool = True
    impact_analysis: bool = True

    @classmethod
    def from_settings(cls, settings: Optional[Any] = None) -> "CompactConfig":
        """
        Build the configuration from the compaction section of Settings.

        Args:
            settings: Settings instance (a fresh one is loaded when None)
        """
        if settings is None:
            from codecompact.core.secure_config import Settings

            settings = Settings()
        section = settings.get("compaction", {}) or {}
        known = {k: v for k, v in section.items() if k in cls.model_fields}
        return cls(**known)
