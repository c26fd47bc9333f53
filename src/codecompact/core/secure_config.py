"""
Configuration for codecompact.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, cast

from codecompact.core.exceptions import ConfigurationError
from codecompact.core.logging import logger


KNOWN_STRATEGIES = ("relevance", "frequency", "dependency", "size", "hybrid", "adaptive")


class ConfigValidator:
    """
    Configuration validator with rules.

    Validations:
    1. Data types
    2. Value ranges
    3. Strategy names
    """

    def validate_config(self, config: Dict[str, Any]) -> None:
        """
        Validate the compaction section.

        Key rules:
        - Sizes and batch sizes must be positive integers
        - Ratios and thresholds must lie in [0, 1]
        - The default strategy must be non-empty
        """
        compaction = config.get("compaction", {})
        if not isinstance(compaction, dict):
            raise ConfigurationError("Section 'compaction' must be a mapping")

        for key in ("max_context_size", "batch_size"):
            value = compaction.get(key)
            if value is None:
                continue
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                logger.error("Invalid compaction setting", key=key, value=value)
                raise ConfigurationError(f"Invalid {key}: {value}", context={"setting": key})

        cache_size = compaction.get("cache_size")
        if cache_size is not None and (not isinstance(cache_size, int) or cache_size < 0):
            logger.error("Invalid compaction setting", key="cache_size", value=cache_size)
            raise ConfigurationError(
                f"Invalid cache_size: {cache_size}", context={"setting": "cache_size"}
            )

        for key in ("compression_ratio", "priority_threshold", "adaptive_threshold"):
            value = compaction.get(key)
            if value is None:
                continue
            if not isinstance(value, (int, float)) or not 0.0 <= float(value) <= 1.0:
                logger.error("Invalid compaction setting", key=key, value=value)
                raise ConfigurationError(f"Invalid {key}: {value}", context={"setting": key})

        default_strategy = compaction.get("default_strategy")
        if default_strategy is not None:
            if not isinstance(default_strategy, str) or not default_strategy.strip():
                raise ConfigurationError(
                    "default_strategy must be a non-empty string",
                    context={"setting": "default_strategy"},
                )
            if default_strategy not in KNOWN_STRATEGIES:
                # Custom strategies may be registered later, so only warn
                logger.warning(
                    "default_strategy is not a built-in strategy",
                    default_strategy=default_strategy,
                )

        strategy_config = compaction.get("strategy_config", {})
        if not isinstance(strategy_config, dict):
            raise ConfigurationError(
                "strategy_config must be a mapping", context={"setting": "strategy_config"}
            )


class Settings:
    """
    Main configuration.

    Priority order:
    1. Default values
    2. .codecompact file (SOURCE OF TRUTH)
    3. Environment variables
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._explicit_path = config_path
        self.config = self._load_config()
        self._validate_config()
        self.validator = ConfigValidator()
        self.validator.validate_config(self.config)
        logger.debug(
            "Settings initialized",
            config_source=".codecompact" if self._find_config_file() else "defaults",
        )

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration.

        Returns:
            Dict[str, Any]: Default configuration
        """
        return {
            "version": "1.0",
            "logging": {"level": "INFO", "debug_mode": False},
            "compaction": {
                "enable_compaction": True,
                "default_strategy": "hybrid",
                "max_context_size": 10000,
                "compression_ratio": 0.7,
                "priority_threshold": 0.5,
                "cache_enabled": True,
                "cache_size": 100,
                "cache_ttl_seconds": 3600,
                "metrics_enabled": True,
                "strategy_config": {},
                "adaptive_enabled": True,
                "adaptive_threshold": 0.8,
                "batch_size": 50,
                "parallel_processing": True,
                "impact_analysis": True,
            },
        }

    def _find_config_file(self) -> Optional[Path]:
        """Find the .codecompact configuration file.

        Search order:
        1. Path passed to the constructor
        2. Current directory .codecompact

        Returns:
            Optional[Path]: Path to config file or None
        """
        if self._explicit_path is not None:
            return self._explicit_path if self._explicit_path.exists() else None

        local_config = Path.cwd() / ".codecompact"
        if local_config.exists():
            return local_config

        return None

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration in priority order.

        1. Defaults
        2. .codecompact file
        3. Environment variables (development overrides)
        """
        defaults = self._get_default_config()

        config_path = self._find_config_file()
        if config_path and config_path.exists():
            try:
                with open(config_path, encoding='utf-8') as f:
                    file_config = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                logger.error(
                    "Error reading configuration file", file=str(config_path), error=str(e)
                )
                raise ConfigurationError(f"Error reading configuration file: {e}", cause=e)

            if file_config:
                if not isinstance(file_config, dict):
                    raise ConfigurationError(
                        "Configuration file must contain a mapping",
                        context={"file": str(config_path)},
                    )
                self._deep_merge(defaults, file_config)
                logger.debug("Config loaded from .codecompact", keys=list(file_config.keys()))

        env_overrides = {
            "CODECOMPACT_DEFAULT_STRATEGY": ("compaction", "default_strategy"),
            "CODECOMPACT_MAX_CONTEXT_SIZE": ("compaction", "max_context_size"),
            "CODECOMPACT_LOG_LEVEL": ("logging", "level"),
        }

        for env_key, path_tuple in env_overrides.items():
            env_value = os.getenv(env_key)
            if env_value:
                value_to_set: Any = env_value
                if env_key == "CODECOMPACT_MAX_CONTEXT_SIZE":
                    try:
                        value_to_set = int(env_value)
                    except ValueError:
                        pass  # left as string, the validator rejects it
                self._set_nested(defaults, path_tuple, value_to_set)

        return defaults

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> None:
        """Deep merge of dictionaries."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(cast(Dict[str, Any], base[key]), cast(Dict[str, Any], value))
            else:
                base[key] = value

    def _set_nested(self, data: Dict[str, Any], path: tuple[str, ...], value: Any) -> None:
        """Set value at nested path."""
        current = data
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def _validate_config(self) -> None:
        """Fill in required sections that the file replaced with nothing."""
        required_sections = ["version", "logging", "compaction"]

        missing_sections = [s for s in required_sections if not self.config.get(s)]

        if missing_sections:
            logger.warning(
                f"Configuration missing required sections: {missing_sections}. "
                f"Using defaults for missing sections."
            )
            defaults = self._get_default_config()
            for section in missing_sections:
                self.config[section] = defaults[section]

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with support for dotted paths."""
        # "compaction.default_strategy", "logging.level"
        if "." in key:
            parts = key.split(".")
            current = self.config
            for part in parts:
                if isinstance(current, dict) and part in current:
                    current = current[part]
                else:
                    return default
            return current
        return self.config.get(key, default)

    def require(self, key: str) -> Any:
        """
        Get required value or raise exception.
        """
        value = self.get(key)
        if value is None:
            logger.error("Required config missing", key=key)
            raise ConfigurationError(f"Missing required config: {key}")
        return value
