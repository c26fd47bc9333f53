"""
Shared fixtures for codecompact tests.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from codecompact.models.graph import (
    CodeGraph,
    FileNode,
    GraphEdge,
    GraphMetadata,
    GraphNode,
    Import,
    Symbol,
    SymbolKind,
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test away from any real .codecompact and env overrides."""
    for name in (
        "CODECOMPACT_DEFAULT_STRATEGY",
        "CODECOMPACT_MAX_CONTEXT_SIZE",
        "CODECOMPACT_LOG_LEVEL",
        "CODECOMPACT_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def build_graph(
    files: Iterable[Tuple[str, int, int, List[str]]] = (),
    symbols: Iterable[str] = (),
    edges: Iterable[Tuple[str, str, str]] = (),
    nodes: Optional[Dict[str, dict]] = None,
    imports: Optional[Dict[str, List[str]]] = None,
) -> CodeGraph:
    """
    Small graph builder.

    files: (path, size, lines, symbol ids)
    edges: (id, source, target)
    nodes: node id -> metadata
    imports: file path -> imported paths
    """
    imports = imports or {}
    graph = CodeGraph()
    for path, size, lines, symbol_ids in files:
        graph.files[path] = FileNode(
            path=path,
            language="python",
            size=size,
            lines=lines,
            symbol_count=len(symbol_ids),
            import_count=len(imports.get(path, [])),
            symbols=list(symbol_ids),
            imports=[Import(path=p) for p in imports.get(path, [])],
        )
    for symbol_id in symbols:
        graph.symbols[symbol_id] = Symbol(id=symbol_id, name=symbol_id)
    for edge_id, source, target in edges:
        graph.edges[edge_id] = GraphEdge(id=edge_id, source=source, target=target, type="imports")
    for node_id, metadata in (nodes or {}).items():
        graph.nodes[node_id] = GraphNode(id=node_id, type="file", label=node_id, metadata=metadata)
    return graph


@pytest.fixture
def graph_factory():
    return build_graph


@pytest.fixture
def sample_graph() -> CodeGraph:
    """Two TypeScript files, three symbols, two nodes and one edge (size 8)."""
    files = {
        "test1.ts": FileNode(
            path="test1.ts",
            language="typescript",
            size=500,
            lines=25,
            symbol_count=2,
            import_count=1,
            symbols=["symbol1", "symbol2"],
            imports=[Import(path="./test2", specifiers=["TestVariable"])],
        ),
        "test2.ts": FileNode(
            path="test2.ts",
            language="typescript",
            size=800,
            lines=40,
            symbol_count=1,
            symbols=["symbol3"],
        ),
    }
    symbols = {
        "symbol1": Symbol(id="symbol1", name="TestFunction", kind=SymbolKind.FUNCTION, language="typescript"),
        "symbol2": Symbol(id="symbol2", name="TestClass", kind=SymbolKind.CLASS, language="typescript"),
        "symbol3": Symbol(id="symbol3", name="TestVariable", kind=SymbolKind.VARIABLE, language="typescript"),
    }
    nodes = {
        "node1": GraphNode(id="node1", type="file", label="test1.ts", metadata={"language": "typescript"}),
        "node2": GraphNode(id="node2", type="file", label="test2.ts"),
    }
    edges = {
        "edge1": GraphEdge(id="edge1", source="node1", target="node2", type="imports", weight=1.0),
    }
    return CodeGraph(
        files=files,
        symbols=symbols,
        nodes=nodes,
        edges=edges,
        metadata=GraphMetadata(total_files=2, total_symbols=3, version="1.0"),
    )


@pytest.fixture
def large_graph(sample_graph) -> CodeGraph:
    """sample_graph plus file3..file100, one symbol and one node each."""
    for i in range(3, 101):
        path = f"file{i}.ts"
        symbol_id = f"symbol{i}"
        sample_graph.files[path] = FileNode(
            path=path, language="typescript", size=1000, lines=50, symbol_count=1, symbols=[symbol_id]
        )
        sample_graph.symbols[symbol_id] = Symbol(id=symbol_id, name=f"Symbol{i}")
        sample_graph.nodes[f"node{i}"] = GraphNode(id=f"node{i}", type="file", label=path)
    sample_graph.metadata.total_files = len(sample_graph.files)
    sample_graph.metadata.total_symbols = len(sample_graph.symbols)
    return sample_graph


@pytest.fixture
def two_file_graph() -> CodeGraph:
    """
    a.py imports b.py; size 6.

    2 files + 2 symbols + 1 node (pointing at a.py) + 1 file edge.
    """
    return build_graph(
        files=[("a.py", 100, 10, ["sa"]), ("b.py", 5000, 200, ["sb"])],
        symbols=["sa", "sb"],
        edges=[("e1", "a.py", "b.py")],
        nodes={"n-a": {"file_path": "a.py"}},
        imports={"a.py": ["./b"]},
    )
