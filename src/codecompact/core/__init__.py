"""
codecompact core module.

Exports the fundamental system components.
"""

# Configuration
from codecompact.core.secure_config import Settings, ConfigValidator

# Exceptions
from codecompact.core.exceptions import (
    CodeCompactError,
    ConfigurationError,
    InvalidRequestError,
    UnknownStrategyError,
    StrategyExecutionError,
    BatchCompactionError,
    PreservationError,
)

# Logging
from codecompact.core.logging import (
    AsyncLogger,
    PerformanceLogger,
    logger,  # Pre-configured global logger
)

# Tracing and metrics
from codecompact.core.tracing import SPAN_BATCH, SPAN_COMPACT, tracer, LocalTracer, MetricsCollector

# ID generator
from codecompact.core.id_generator import IDGenerator, generate_id, is_valid_id

__all__ = [
    "Settings",
    "ConfigValidator",
    "CodeCompactError",
    "ConfigurationError",
    "InvalidRequestError",
    "UnknownStrategyError",
    "StrategyExecutionError",
    "BatchCompactionError",
    "PreservationError",
    "AsyncLogger",
    "PerformanceLogger",
    "logger",
    "tracer",
    "SPAN_COMPACT",
    "SPAN_BATCH",
    "LocalTracer",
    "MetricsCollector",
    "IDGenerator",
    "generate_id",
    "is_valid_id",
]
