"""
Tests for the codecompact command line interface.
"""

import pytest
import yaml
from click.testing import CliRunner

from codecompact.cli import cli
from codecompact.models.graph import CodeGraph


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def graph_file(tmp_path, sample_graph):
    path = tmp_path / "graph.json"
    path.write_text(sample_graph.to_json(), encoding="utf-8")
    return path


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "codecompact" in result.output


def test_strategies_lists_built_ins(runner):
    result = runner.invoke(cli, ["strategies"])

    assert result.exit_code == 0
    for name in ("adaptive", "dependency", "frequency", "hybrid", "relevance", "size"):
        assert name in result.output


def test_compact_writes_output_file(runner, graph_file, tmp_path):
    output = tmp_path / "out.json"

    result = runner.invoke(
        cli, ["compact", str(graph_file), "--strategy", "size", "--tokens", "7", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    compacted = CodeGraph.from_json(output.read_text(encoding="utf-8"))
    assert list(compacted.files) == ["test1.ts"]
    assert "Strategy: size" in result.output


def test_focus_preserves_matching_files(runner, graph_file, tmp_path):
    output = tmp_path / "out.json"

    result = runner.invoke(
        cli,
        [
            "compact",
            str(graph_file),
            "--level",
            "aggressive",
            "--tokens",
            "2",
            "--focus",
            "test1",
            "--output",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    compacted = CodeGraph.from_json(output.read_text(encoding="utf-8"))
    assert list(compacted.files) == ["test1.ts"]


def test_task_selects_strategy(runner, graph_file, tmp_path):
    output = tmp_path / "out.json"

    result = runner.invoke(
        cli, ["compact", str(graph_file), "--task", "debugging", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert "Strategy: dependency" in result.output


def test_preview_does_not_write(runner, graph_file, tmp_path):
    output = tmp_path / "out.json"

    result = runner.invoke(
        cli, ["compact", str(graph_file), "--strategy", "relevance", "--preview", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert "Compaction Preview" in result.output
    assert "relevance" in result.output
    assert not output.exists()


def test_unknown_strategy_fails(runner, graph_file):
    result = runner.invoke(cli, ["compact", str(graph_file), "--strategy", "fastest"])

    assert result.exit_code != 0
    assert "Unknown strategy: fastest" in result.output


def test_invalid_graph_file(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(cli, ["analyze", str(path)])

    assert result.exit_code != 0
    assert "Invalid graph file" in result.output


def test_analyze_reports_recommendation(runner, graph_file):
    result = runner.invoke(cli, ["analyze", str(graph_file)])

    assert result.exit_code == 0, result.output
    assert "Recommended strategy: frequency" in result.output
    assert "Estimated savings: 3 elements" in result.output


def test_config_file_option(runner, graph_file, tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text(yaml.safe_dump({"compaction": {"enable_compaction": False}}), encoding="utf-8")
    output = tmp_path / "out.json"

    result = runner.invoke(
        cli, ["--config", str(config), "compact", str(graph_file), "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert "Strategy: none" in result.output
    assert CodeGraph.from_json(output.read_text(encoding="utf-8")).size() == 8


def test_invalid_config_reported(runner, tmp_path):
    config = tmp_path / "settings.yaml"
    config.write_text(yaml.safe_dump({"compaction": {"batch_size": 0}}), encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(config), "strategies"])

    assert result.exit_code != 0
    assert "batch_size" in result.output
