"""
Built-in compaction strategies.

Each strategy works on its own deep copy of the request graph and removes
whole files and symbols; nodes and edges follow through orphan cleanup.
Iteration is always over sorted keys so results are reproducible.
"""

from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from codecompact.core.logging import logger
from codecompact.compact.base import BaseStrategy, CompactionStrategy
from codecompact.models.compaction import (
    CompactRequest,
    CompactRequirements,
    CompactResult,
    RemovedItems,
    StrategyAnalysis,
)
from codecompact.models.graph import CodeGraph


class RelevanceStrategy(BaseStrategy):
    """
    Removes elements with a low relevance score.

    Every file and symbol starts at a base score, preserved ones are forced
    to 1.0, and one pass over the edges lets a file pass part of its score
    to the files it points at. Anything under the threshold is dropped.
    """

    def __init__(
        self,
        threshold: float = 0.3,
        base_score: float = 0.1,
        propagation_factor: float = 0.5,
    ):
        super().__init__("relevance", "Removes elements based on relevance to preserved items")
        self.threshold = threshold
        self.base_score = base_score
        self.propagation_factor = propagation_factor

    def analyze_potential(self, graph: CodeGraph) -> StrategyAnalysis:
        return StrategyAnalysis(
            estimated_compression=0.7,
            removable_files=int(len(graph.files) * 0.3),
            removable_symbols=int(len(graph.symbols) * 0.3),
            confidence=0.8,
        )

    async def calculate_scores(
        self, graph: CodeGraph, requirements: Optional[CompactRequirements]
    ) -> Tuple[Dict[str, float], Dict[str, float]]:
        """
        Compute relevance scores.

        Returns:
            (file scores by path, symbol scores by id)
        """
        file_scores = {path: self.base_score for path in graph.files}
        symbol_scores = {symbol_id: self.base_score for symbol_id in graph.symbols}

        for path in file_scores:
            if self.is_file_preserved(path, requirements):
                file_scores[path] = 1.0
        for symbol_id in symbol_scores:
            if self.is_symbol_preserved(symbol_id, requirements):
                symbol_scores[symbol_id] = 1.0

        for i, edge_id in enumerate(sorted(graph.edges)):
            await self.checkpoint(i)
            edge = graph.edges[edge_id]
            if edge.source in file_scores and edge.target in file_scores:
                file_scores[edge.target] = min(
                    1.0, file_scores[edge.target] + file_scores[edge.source] * self.propagation_factor
                )

        return file_scores, symbol_scores

    async def compact(self, request: CompactRequest) -> CompactResult:
        graph = request.graph
        requirements = request.requirements
        compacted = self.copy_graph(graph)
        removed = self.new_removed_items("relevance-based removal")

        file_scores, symbol_scores = await self.calculate_scores(graph, requirements)

        for i, path in enumerate(sorted(file_scores)):
            await self.checkpoint(i)
            if file_scores[path] < self.threshold and not self.is_file_preserved(path, requirements):
                del compacted.files[path]
                removed.files.append(path)

        for i, symbol_id in enumerate(sorted(symbol_scores)):
            await self.checkpoint(i)
            if symbol_scores[symbol_id] < self.threshold and not self.is_symbol_preserved(
                symbol_id, requirements
            ):
                del compacted.symbols[symbol_id]
                removed.symbols.append(symbol_id)

        self.cleanup_orphans(compacted, removed, removed.files, removed.symbols)

        return CompactResult(
            compacted_graph=compacted,
            removed_items=removed,
            metadata={
                "relevance_threshold": self.threshold,
                "scores_calculated": len(file_scores) + len(symbol_scores),
            },
        )


class FrequencyStrategy(BaseStrategy):
    """Removes the least referenced files and symbols."""

    def __init__(self, removal_percentage: float = 0.3):
        super().__init__("frequency", "Removes elements based on usage frequency")
        self.removal_percentage = removal_percentage

    def analyze_potential(self, graph: CodeGraph) -> StrategyAnalysis:
        return StrategyAnalysis(
            estimated_compression=0.6,
            removable_files=int(len(graph.files) * 0.4),
            removable_symbols=int(len(graph.symbols) * 0.4),
            confidence=0.9,
        )

    def calculate_frequencies(self, graph: CodeGraph) -> Tuple[Dict[str, int], Dict[str, int]]:
        """
        Count references.

        A file is referenced once per edge endpoint naming its path, a
        symbol once per file listing it.
        """
        file_counts = {path: 0 for path in graph.files}
        symbol_counts = {symbol_id: 0 for symbol_id in graph.symbols}

        for edge in graph.edges.values():
            if edge.source in file_counts:
                file_counts[edge.source] += 1
            if edge.target in file_counts:
                file_counts[edge.target] += 1

        for file in graph.files.values():
            for symbol_id in file.symbols:
                if symbol_id in symbol_counts:
                    symbol_counts[symbol_id] += 1

        return file_counts, symbol_counts

    @staticmethod
    def least_used(counts: Dict[str, int]) -> List[str]:
        """Keys ordered by (count, key) ascending."""
        return [key for key, _ in sorted(counts.items(), key=lambda item: (item[1], item[0]))]

    async def compact(self, request: CompactRequest) -> CompactResult:
        graph = request.graph
        requirements = request.requirements
        compacted = self.copy_graph(graph)
        removed = self.new_removed_items("frequency-based removal")

        file_counts, symbol_counts = self.calculate_frequencies(graph)
        ordered_files = self.least_used(file_counts)
        ordered_symbols = self.least_used(symbol_counts)

        # The window is fixed, preserved entries inside it are skipped, not replaced
        file_window = int(len(ordered_files) * self.removal_percentage)
        for i, path in enumerate(ordered_files[:file_window]):
            await self.checkpoint(i)
            if not self.is_file_preserved(path, requirements):
                del compacted.files[path]
                removed.files.append(path)

        symbol_window = int(len(ordered_symbols) * self.removal_percentage)
        for i, symbol_id in enumerate(ordered_symbols[:symbol_window]):
            await self.checkpoint(i)
            if not self.is_symbol_preserved(symbol_id, requirements):
                del compacted.symbols[symbol_id]
                removed.symbols.append(symbol_id)

        self.cleanup_orphans(compacted, removed, removed.files, removed.symbols)

        return CompactResult(
            compacted_graph=compacted,
            removed_items=removed,
            metadata={
                "removal_percentage": self.removal_percentage,
                "files_analyzed": len(ordered_files),
                "symbols_analyzed": len(ordered_symbols),
            },
        )


class DependencyStrategy(BaseStrategy):
    """
    Removes isolated files and weakly referenced symbols.

    The symbol rule needs symbol-level edges (an edge endpoint equal to a
    symbol id). Graphs that only carry file or node edges leave every
    symbol untouched.
    """

    def __init__(self):
        super().__init__("dependency", "Removes elements based on dependency analysis")

    @staticmethod
    def degrees(graph: CodeGraph, keys: Iterable[str]) -> Dict[str, List[int]]:
        """[in_degree, out_degree] per key, counting only edges that touch it."""
        table = {key: [0, 0] for key in keys}
        for edge in graph.edges.values():
            if edge.source in table:
                table[edge.source][1] += 1
            if edge.target in table:
                table[edge.target][0] += 1
        return table

    @staticmethod
    def has_symbol_edges(graph: CodeGraph) -> bool:
        return any(
            edge.source in graph.symbols or edge.target in graph.symbols
            for edge in graph.edges.values()
        )

    @staticmethod
    def dependency_depth(graph: CodeGraph) -> int:
        """Deepest BFS level over file-to-file edges, starting from files nobody points at."""
        adjacency: Dict[str, Set[str]] = {path: set() for path in graph.files}
        has_incoming: Set[str] = set()
        for edge in graph.edges.values():
            if edge.source in adjacency and edge.target in adjacency and edge.source != edge.target:
                adjacency[edge.source].add(edge.target)
                has_incoming.add(edge.target)

        roots = sorted(path for path in adjacency if path not in has_incoming and adjacency[path])
        levels: Dict[str, int] = {root: 0 for root in roots}
        queue = deque(roots)
        while queue:
            current = queue.popleft()
            for target in sorted(adjacency[current]):
                if target not in levels:
                    levels[target] = levels[current] + 1
                    queue.append(target)

        return max(levels.values(), default=0)

    def analyze_potential(self, graph: CodeGraph) -> StrategyAnalysis:
        file_degrees = self.degrees(graph, graph.files)
        isolated = sum(1 for d in file_degrees.values() if d == [0, 0])
        total = graph.size()

        warnings = []
        if graph.files and not graph.edges:
            warnings.append("Graph has no edges, every file counts as isolated")

        return StrategyAnalysis(
            estimated_compression=(total - isolated) / total if total else 1.0,
            removable_files=isolated,
            removable_symbols=0,
            confidence=0.7,
            warnings=warnings,
        )

    async def compact(self, request: CompactRequest) -> CompactResult:
        graph = request.graph
        requirements = request.requirements
        compacted = self.copy_graph(graph)
        removed = self.new_removed_items("dependency-based removal")

        file_degrees = self.degrees(graph, graph.files)
        isolated_files = 0
        for i, path in enumerate(sorted(file_degrees)):
            await self.checkpoint(i)
            if file_degrees[path] != [0, 0]:
                continue
            isolated_files += 1
            if not self.is_file_preserved(path, requirements):
                del compacted.files[path]
                removed.files.append(path)

        isolated_symbols = 0
        if self.has_symbol_edges(graph):
            symbol_degrees = self.degrees(graph, graph.symbols)
            for i, symbol_id in enumerate(sorted(symbol_degrees)):
                await self.checkpoint(i)
                in_degree, out_degree = symbol_degrees[symbol_id]
                if in_degree == 0 and out_degree == 0:
                    isolated_symbols += 1
                if in_degree <= 1 and out_degree == 0 and not self.is_symbol_preserved(
                    symbol_id, requirements
                ):
                    del compacted.symbols[symbol_id]
                    removed.symbols.append(symbol_id)

        self.cleanup_orphans(compacted, removed, removed.files, removed.symbols)

        return CompactResult(
            compacted_graph=compacted,
            removed_items=removed,
            metadata={
                "isolated_files": isolated_files,
                "isolated_symbols": isolated_symbols,
                "dependency_depth": self.dependency_depth(graph),
            },
        )


class SizeStrategy(BaseStrategy):
    """Greedily removes the most expensive files until the graph fits."""

    def __init__(self, symbol_weight: int = 10):
        super().__init__("size", "Removes elements to achieve target size")
        self.symbol_weight = symbol_weight

    def file_costs(self, graph: CodeGraph) -> Dict[str, int]:
        return {
            path: file.size + file.symbol_count * self.symbol_weight + file.lines
            for path, file in graph.files.items()
        }

    async def compact(self, request: CompactRequest) -> CompactResult:
        graph = request.graph
        requirements = request.requirements
        max_size = request.max_size
        compacted = self.copy_graph(graph)
        removed = self.new_removed_items("size-based removal")

        current_size = self.calculate_graph_size(compacted)
        if current_size <= max_size:
            return CompactResult(
                compacted_graph=compacted,
                removed_items=removed,
                metadata={"target_size": max_size, "no_action": True},
            )

        costs = self.file_costs(graph)
        candidates = sorted(
            (path for path in costs if not self.is_file_preserved(path, requirements)),
            key=lambda path: (-costs[path], path),
        )

        # Size is re-measured after each file's orphans go, cost only decides the order
        for i, path in enumerate(candidates):
            await self.checkpoint(i)
            if current_size <= max_size:
                break
            del compacted.files[path]
            removed.files.append(path)
            self.cleanup_orphans(compacted, removed, [path], [])
            current_size = self.calculate_graph_size(compacted)

        self.cleanup_orphans(compacted, removed, [], [])
        achieved = self.calculate_graph_size(compacted)
        if achieved > max_size:
            logger.debug(
                "Size target not reached", target_size=max_size, achieved_size=achieved
            )

        return CompactResult(
            compacted_graph=compacted,
            removed_items=removed,
            metadata={
                "target_size": max_size,
                "achieved_size": achieved,
                "files_removed": len(removed.files),
            },
        )


def _dedupe(values: List[str]) -> List[str]:
    seen: Set[str] = set()
    unique = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique


class HybridStrategy(BaseStrategy):
    """
    Relevance, then frequency, then dependency.

    Each stage runs on the previous stage's output graph.
    """

    def __init__(self, stages: Optional[Sequence[CompactionStrategy]] = None):
        super().__init__("hybrid", "Combines multiple compaction strategies")
        self.stages: List[CompactionStrategy] = list(
            stages or (RelevanceStrategy(), FrequencyStrategy(), DependencyStrategy())
        )

    async def compact(self, request: CompactRequest) -> CompactResult:
        current_graph = request.graph
        combined = self.new_removed_items("hybrid strategy combination")
        stage_results: Dict[str, Any] = {}

        for stage in self.stages:
            stage_request = request.model_copy(
                update={"graph": current_graph, "strategy": stage.name}
            )
            result = await stage.compact(stage_request)

            combined.files.extend(result.removed_items.files)
            combined.symbols.extend(result.removed_items.symbols)
            combined.edges.extend(result.removed_items.edges)
            combined.nodes.extend(result.removed_items.nodes)
            stage_results[stage.name] = result.metadata
            current_graph = result.compacted_graph

        final_removed = RemovedItems(
            files=_dedupe(combined.files),
            symbols=_dedupe(combined.symbols),
            edges=_dedupe(combined.edges),
            nodes=_dedupe(combined.nodes),
            reason=combined.reason,
        )

        return CompactResult(
            compacted_graph=current_graph,
            removed_items=final_removed,
            metadata={
                "strategies_applied": len(self.stages),
                "strategy_results": stage_results,
            },
        )
