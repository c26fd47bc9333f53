"""
Tests for Settings, ConfigValidator and CompactConfig.from_settings.
"""

from pathlib import Path

import pytest
import yaml

from codecompact.core.exceptions import ConfigurationError
from codecompact.core.secure_config import ConfigValidator, Settings
from codecompact.models.compaction import CompactConfig


def write_config(path: Path, data) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestSettings:
    def test_defaults_without_file(self):
        settings = Settings()

        assert settings.get("compaction.default_strategy") == "hybrid"
        assert settings.get("compaction.max_context_size") == 10000
        assert settings.get("logging.level") == "INFO"
        assert settings.get("compaction.missing", "fallback") == "fallback"

    def test_local_file_merged_over_defaults(self, tmp_path):
        write_config(
            tmp_path / ".codecompact",
            {"compaction": {"default_strategy": "size", "strategy_config": {"relevance": {"threshold": 0.4}}}},
        )

        settings = Settings()

        assert settings.get("compaction.default_strategy") == "size"
        assert settings.get("compaction.max_context_size") == 10000
        assert settings.get("compaction.strategy_config.relevance.threshold") == 0.4

    def test_explicit_path(self, tmp_path):
        config_file = write_config(tmp_path / "custom.yaml", {"compaction": {"batch_size": 5}})
        assert Settings(config_file).get("compaction.batch_size") == 5

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        write_config(tmp_path / ".codecompact", {"compaction": {"max_context_size": 200}})
        monkeypatch.setenv("CODECOMPACT_MAX_CONTEXT_SIZE", "500")
        monkeypatch.setenv("CODECOMPACT_DEFAULT_STRATEGY", "relevance")

        settings = Settings()

        assert settings.get("compaction.max_context_size") == 500
        assert settings.get("compaction.default_strategy") == "relevance"

    def test_non_numeric_env_size_rejected(self, monkeypatch):
        monkeypatch.setenv("CODECOMPACT_MAX_CONTEXT_SIZE", "lots")
        with pytest.raises(ConfigurationError):
            Settings()

    def test_broken_yaml_rejected(self, tmp_path):
        (tmp_path / ".codecompact").write_text("compaction: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            Settings()

    def test_empty_section_restored(self, tmp_path):
        write_config(tmp_path / ".codecompact", {"compaction": None})
        assert Settings().get("compaction.default_strategy") == "hybrid"

    def test_require(self):
        settings = Settings()
        assert settings.require("compaction.batch_size") == 50
        with pytest.raises(ConfigurationError):
            settings.require("compaction.nope")


class TestConfigValidator:
    @pytest.mark.parametrize(
        "section",
        [
            {"max_context_size": 0},
            {"batch_size": -3},
            {"max_context_size": True},
            {"cache_size": -1},
            {"compression_ratio": 1.2},
            {"adaptive_threshold": "high"},
            {"default_strategy": "  "},
            {"strategy_config": ["relevance"]},
        ],
    )
    def test_invalid_sections(self, section):
        with pytest.raises(ConfigurationError):
            ConfigValidator().validate_config({"compaction": section})

    def test_custom_default_strategy_allowed(self):
        ConfigValidator().validate_config({"compaction": {"default_strategy": "custom"}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError):
            ConfigValidator().validate_config({"compaction": "yes"})


class TestCompactConfigFromSettings:
    def test_reads_compaction_section(self, tmp_path):
        write_config(
            tmp_path / ".codecompact",
            {"compaction": {"cache_enabled": False, "batch_size": 4, "impact_analysis": False}},
        )

        config = CompactConfig.from_settings(Settings())

        assert config.cache_enabled is False
        assert config.batch_size == 4
        assert config.impact_analysis is False
        assert config.default_strategy == "hybrid"

    def test_unknown_keys_ignored(self, tmp_path):
        write_config(tmp_path / ".codecompact", {"compaction": {"legacy_option": 1}})
        assert CompactConfig.from_settings().max_context_size == 10000
