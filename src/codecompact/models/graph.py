"""
Code graph models.

The graph is produced by an upstream analysis step and consumed read-only
by the compaction strategies, which always work on their own deep copy.
"""

from enum import Enum
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import Field

from codecompact.core.utils.datetime_utils import utc_now
from codecompact.models.base import CodeCompactBaseModel


class SymbolKind(str, Enum):
    """Kinds of code symbols tracked in the graph."""

    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    VARIABLE = "variable"
    CONSTANT = "constant"
    IMPORT = "import"
    NAMESPACE = "namespace"
    METHOD = "method"
    PROPERTY = "property"


class Location(CodeCompactBaseModel):
    """Source span of a symbol."""

    line: int = Field(0, ge=0, description="Start line")
    column: int = Field(0, ge=0, description="Start column")
    end_line: int = Field(0, ge=0, description="End line")
    end_column: int = Field(0, ge=0, description="End column")


class Import(CodeCompactBaseModel):
    """Import statement found in a file."""

    path: str = Field(..., description="Imported module or file path")
    alias: Optional[str] = Field(None, description="Local alias")
    specifiers: List[str] = Field(default_factory=list, description="Imported names")
    is_default: bool = Field(False, description="Default import")


class FileNode(CodeCompactBaseModel):
    """
    A source file and its summary counters.
    """

    path: str = Field(..., description="File path, unique key in the graph")
    language: str = Field("", description="Language tag")
    size: int = Field(0, ge=0, description="Size in bytes")
    lines: int = Field(0, ge=0, description="Line count")
    symbol_count: int = Field(0, ge=0, description="Number of symbols")
    import_count: int = Field(0, ge=0, description="Number of imports")
    is_test: bool = Field(False, description="Test file flag")
    is_generated: bool = Field(False, description="Generated file flag")
    last_modified: Optional[datetime] = Field(None, description="Last modification timestamp")
    symbols: List[str] = Field(default_factory=list, description="Ids of contained symbols")
    imports: List[Import] = Field(default_factory=list, description="Imports of the file")


class Symbol(CodeCompactBaseModel):
    """A named code element."""

    id: str = Field(..., description="Symbol id, unique key in the graph")
    name: str = Field(..., description="Symbol name")
    kind: SymbolKind = Field(SymbolKind.FUNCTION, description="Symbol kind")
    location: Location = Field(default_factory=Location, description="Source span")
    signature: str = Field("", description="Signature text")
    documentation: Optional[str] = Field(None, description="Doc comment")
    language: str = Field("", description="Language tag")


class GraphNode(CodeCompactBaseModel):
    """Generic visualization node, may stand for a file or any other entity."""

    id: str = Field(..., description="Node id")
    type: str = Field("", description="Node type tag")
    label: str = Field("", description="Display label")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")


class GraphEdge(CodeCompactBaseModel):
    """Directed relationship between two nodes."""

    id: str = Field(..., description="Edge id")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    type: str = Field("", description="Relationship type, e.g. imports")
    weight: float = Field(1.0, description="Edge weight")


class GraphMetadata(CodeCompactBaseModel):
    """Graph-level counters and provenance."""

    total_files: int = Field(0, ge=0)
    total_symbols: int = Field(0, ge=0)
    generated: datetime = Field(default_factory=utc_now, description="Generation timestamp")
    version: str = Field("", description="Graph format version")


class CodeGraph(CodeCompactBaseModel):
    """
    Complete code graph.

    Size is defined uniformly as |files| + |symbols| + |nodes| + |edges|.
    """

    files: Dict[str, FileNode] = Field(default_factory=dict)
    symbols: Dict[str, Symbol] = Field(default_factory=dict)
    nodes: Dict[str, GraphNode] = Field(default_factory=dict)
    edges: Dict[str, GraphEdge] = Field(default_factory=dict)
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)

    def size(self) -> int:
        """Uniform graph size."""
        return len(self.files) + len(self.symbols) + len(self.nodes) + len(self.edges)

    def is_empty(self) -> bool:
        return self.size() == 0

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str) -> "CodeGraph":
        return cls.model_validate_json(data)
