"""
Removal impact analysis.

Looks at what a compaction left dangling in the surviving graph: files that
still import removed ones, edges that disappeared under a surviving node,
and symbols no surviving file lists anymore.
"""

import posixpath
from typing import Dict, Set

from codecompact.models.compaction import ImpactAnalysis, RemovedItems
from codecompact.models.graph import CodeGraph

# More dependent files than this is high risk regardless of the ratio
HIGH_RISK_DEPENDENTS = 10


def _module_key(path: str) -> str:
    """Path without leading ./ and without extension."""
    while path.startswith("./"):
        path = path[2:]
    root, _ = posixpath.splitext(path)
    return root


def _imports_removed(import_path: str, removed_keys: Dict[str, str]) -> bool:
    key = _module_key(import_path)
    if not key:
        return False
    if import_path in removed_keys or key in removed_keys:
        return True
    return any(stem.endswith("/" + key) for stem in removed_keys)


def _node_files(graph: CodeGraph) -> Dict[str, str]:
    """Node id -> file path for nodes that stand for a file."""
    mapping = {}
    for node_id, node in graph.nodes.items():
        if node_id in graph.files:
            mapping[node_id] = node_id
        elif node.metadata.get("file_path") in graph.files:
            mapping[node_id] = node.metadata["file_path"]
    return mapping


def analyze_impact(original: CodeGraph, compacted: CodeGraph, removed: RemovedItems) -> ImpactAnalysis:
    """
    Assess the consequences of a removal set.

    Args:
        original: Graph before compaction
        compacted: Graph after compaction
        removed: What the strategy reported as removed

    Returns:
        ImpactAnalysis with a low / medium / high risk level
    """
    removed_keys: Dict[str, str] = {}
    for path in removed.files:
        removed_keys[path] = path
        removed_keys[_module_key(path)] = path

    dependent: Set[str] = set()
    broken_imports = 0
    for path in sorted(compacted.files):
        for imp in compacted.files[path].imports:
            if removed.files and _imports_removed(imp.path, removed_keys):
                dependent.add(path)
                broken_imports += 1

    # Surviving files that lost an edge, directly or through their node
    node_files = _node_files(original)
    for edge_id in removed.edges:
        edge = original.edges.get(edge_id)
        if edge is None:
            continue
        for endpoint in (edge.source, edge.target):
            path = endpoint if endpoint in original.files else node_files.get(endpoint)
            if path is not None and path in compacted.files:
                dependent.add(path)

    listed: Set[str] = set()
    for file in compacted.files.values():
        listed.update(file.symbols)
    isolated_symbols = sum(1 for symbol_id in compacted.symbols if symbol_id not in listed)

    broken_references = len(removed.edges) + broken_imports
    total_references = len(original.edges) + sum(len(f.imports) for f in original.files.values())

    if (total_references and broken_references > total_references / 2) or len(
        dependent
    ) > HIGH_RISK_DEPENDENTS:
        risk_level = "high"
    elif broken_references > 0:
        risk_level = "medium"
    else:
        risk_level = "low"

    recommendations = []
    if broken_imports:
        recommendations.append(
            f"{broken_imports} surviving imports point at removed files, consider preserving them"
        )
    if isolated_symbols:
        recommendations.append(
            f"{isolated_symbols} symbols are no longer listed by any file"
        )
    if risk_level == "high":
        recommendations.append("Use a less aggressive strategy or a larger max_size")

    return ImpactAnalysis(
        dependent_files=sorted(dependent),
        broken_references=broken_references,
        isolated_symbols=isolated_symbols,
        risk_level=risk_level,
        recommendations=recommendations,
    )
