"""
Tests for removal impact analysis.
"""

from codecompact.compact.impact import analyze_impact
from codecompact.models.compaction import RemovedItems


def without(graph, files=(), edges=(), symbols=()):
    compacted = graph.model_copy(deep=True)
    for path in files:
        del compacted.files[path]
    for edge_id in edges:
        del compacted.edges[edge_id]
    for symbol_id in symbols:
        del compacted.symbols[symbol_id]
    return compacted


def test_nothing_removed_is_low_risk(two_file_graph):
    impact = analyze_impact(two_file_graph, two_file_graph, RemovedItems())

    assert impact.risk_level == "low"
    assert impact.broken_references == 0
    assert impact.dependent_files == []
    assert impact.recommendations == []


def test_broken_import_and_edge_make_high_risk(two_file_graph):
    removed = RemovedItems(files=["b.py"], edges=["e1"])
    compacted = without(two_file_graph, files=["b.py"], edges=["e1"])

    impact = analyze_impact(two_file_graph, compacted, removed)

    assert impact.dependent_files == ["a.py"]
    assert impact.broken_references == 2
    assert impact.risk_level == "high"
    assert any("imports" in r for r in impact.recommendations)


def test_single_lost_edge_is_medium_risk(graph_factory):
    graph = graph_factory(
        files=[(p, 1, 1, []) for p in ("a.py", "b.py", "c.py", "d.py")],
        edges=[("e1", "a.py", "b.py"), ("e2", "b.py", "c.py"), ("e3", "c.py", "a.py"), ("e4", "c.py", "d.py")],
    )
    removed = RemovedItems(files=["d.py"], edges=["e4"])

    impact = analyze_impact(graph, without(graph, files=["d.py"], edges=["e4"]), removed)

    assert impact.risk_level == "medium"
    assert impact.broken_references == 1
    assert impact.dependent_files == ["c.py"]


def test_nested_import_paths_match_removed_file(graph_factory):
    graph = graph_factory(
        files=[("src/main.ts", 1, 1, []), ("src/utils/format.ts", 1, 1, [])],
        imports={"src/main.ts": ["./utils/format"]},
    )
    removed = RemovedItems(files=["src/utils/format.ts"])

    impact = analyze_impact(graph, without(graph, files=["src/utils/format.ts"]), removed)

    assert impact.dependent_files == ["src/main.ts"]
    assert impact.broken_references == 1


def test_isolated_symbols_counted(sample_graph):
    removed = RemovedItems(files=["test2.ts"])
    compacted = without(sample_graph, files=["test2.ts"])

    impact = analyze_impact(sample_graph, compacted, removed)

    # symbol3 survives but only test2.ts listed it
    assert impact.isolated_symbols == 1
    assert impact.dependent_files == ["test1.ts"]
    assert any("no longer listed" in r for r in impact.recommendations)


def test_many_dependents_is_high_risk(graph_factory):
    files = [("core.py", 1, 1, [])] + [(f"user{i}.py", 1, 1, []) for i in range(12)]
    graph = graph_factory(
        files=files,
        edges=[(f"e{i}", f"user{i}.py", "core.py") for i in range(12)] + [("x", "user0.py", "user1.py")],
    )
    edge_ids = [f"e{i}" for i in range(12)]
    removed = RemovedItems(files=["core.py"], edges=edge_ids)

    impact = analyze_impact(graph, without(graph, files=["core.py"], edges=edge_ids), removed)

    assert len(impact.dependent_files) == 12
    assert impact.risk_level == "high"
