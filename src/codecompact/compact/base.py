"""
Compaction strategy abstraction and shared helpers.

Every strategy receives a normalized CompactRequest (graph present,
requirements present, max_size positive) and returns a partial
CompactResult: compacted_graph, removed_items and metadata. Sizes, ratio,
timing and the effective strategy name are filled in by the controller.
"""

import asyncio
import copy
from abc import ABC, abstractmethod
from typing import Iterable, Optional, Protocol, Set, runtime_checkable

from codecompact.models.compaction import (
    CompactRequest,
    CompactRequirements,
    CompactResult,
    RemovedItems,
    StrategyAnalysis,
)
from codecompact.models.graph import CodeGraph

# Inner loops yield to the event loop every this many iterations
CHECKPOINT_INTERVAL = 1024


def file_preserved(path: str, requirements: Optional[CompactRequirements]) -> bool:
    """Exact path match or substring pattern match."""
    if requirements is None:
        return False
    if path in requirements.preserve_files:
        return True
    return any(pattern and pattern in path for pattern in requirements.preserve_paths)


def symbol_preserved(symbol_id: str, requirements: Optional[CompactRequirements]) -> bool:
    if requirements is None:
        return False
    return symbol_id in requirements.preserve_symbols


def preserved_size(graph: CodeGraph, requirements: Optional[CompactRequirements]) -> int:
    """Number of files and symbols of the graph that requirements protect."""
    files = sum(1 for path in graph.files if file_preserved(path, requirements))
    symbols = sum(1 for symbol_id in graph.symbols if symbol_preserved(symbol_id, requirements))
    return files + symbols


class CompactionStrategy(ABC):
    """Base class for all compaction algorithms."""

    name: str = ""
    description: str = ""

    @abstractmethod
    async def compact(self, request: CompactRequest) -> CompactResult:
        """
        Reduce the request graph.

        Args:
            request: Normalized request, never mutated

        Returns:
            Partial result with compacted_graph, removed_items and metadata
        """
        pass


@runtime_checkable
class StrategyAnalyzer(Protocol):
    """
    Optional capability of a strategy: estimate its effect without running.

    Checked with isinstance() by the controller.
    """

    def analyze_potential(self, graph: CodeGraph) -> StrategyAnalysis: ...


class BaseStrategy(CompactionStrategy):
    """Helpers shared by the built-in strategies."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    def copy_graph(self, graph: CodeGraph) -> CodeGraph:
        """
        Deep clone a graph.

        Lists, imports, locations and metadata dicts are copied so that the
        clone can be mutated freely without touching the source graph.
        """
        files = {
            path: file.model_copy(
                update={
                    "symbols": list(file.symbols),
                    "imports": [
                        imp.model_copy(update={"specifiers": list(imp.specifiers)})
                        for imp in file.imports
                    ],
                }
            )
            for path, file in graph.files.items()
        }
        symbols = {
            symbol_id: symbol.model_copy(update={"location": symbol.location.model_copy()})
            for symbol_id, symbol in graph.symbols.items()
        }
        nodes = {
            node_id: node.model_copy(update={"metadata": copy.deepcopy(node.metadata)})
            for node_id, node in graph.nodes.items()
        }
        edges = {edge_id: edge.model_copy() for edge_id, edge in graph.edges.items()}

        return CodeGraph(
            files=files,
            symbols=symbols,
            nodes=nodes,
            edges=edges,
            metadata=graph.metadata.model_copy(),
        )

    def is_file_preserved(self, path: str, requirements: Optional[CompactRequirements]) -> bool:
        return file_preserved(path, requirements)

    def is_symbol_preserved(
        self, symbol_id: str, requirements: Optional[CompactRequirements]
    ) -> bool:
        return symbol_preserved(symbol_id, requirements)

    def cleanup_orphans(
        self,
        graph: CodeGraph,
        removed: RemovedItems,
        removed_files: Iterable[str],
        removed_symbols: Iterable[str],
    ) -> None:
        """
        Drop structure that pointed at removed files or symbols.

        Nodes go when their id is a removed file path or symbol id, or when
        their metadata names one under "file_path" or "symbol_id". Edges go
        when either endpoint is no longer a node, file or symbol of the graph.
        """
        gone_files: Set[str] = set(removed_files)
        gone_symbols: Set[str] = set(removed_symbols)
        gone: Set[str] = gone_files | gone_symbols

        for node_id in sorted(graph.nodes):
            node = graph.nodes[node_id]
            references_removed = (
                node_id in gone
                or node.metadata.get("file_path") in gone_files
                or node.metadata.get("symbol_id") in gone_symbols
            )
            if references_removed:
                del graph.nodes[node_id]
                removed.nodes.append(node_id)
                gone.add(node_id)

        def exists(endpoint: str) -> bool:
            return endpoint not in gone and (
                endpoint in graph.nodes or endpoint in graph.files or endpoint in graph.symbols
            )

        for edge_id in sorted(graph.edges):
            edge = graph.edges[edge_id]
            if not exists(edge.source) or not exists(edge.target):
                del graph.edges[edge_id]
                removed.edges.append(edge_id)

    def calculate_graph_size(self, graph: CodeGraph) -> int:
        return graph.size()

    def new_removed_items(self, reason: str) -> RemovedItems:
        return RemovedItems(reason=reason)

    async def checkpoint(self, iteration: int) -> None:
        """Cooperative cancellation point for long loops."""
        if iteration and iteration % CHECKPOINT_INTERVAL == 0:
            await asyncio.sleep(0)
