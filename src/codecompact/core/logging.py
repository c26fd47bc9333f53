"""
Simple asynchronous logging for codecompact.
"""

import os
import sys
import time
import yaml
from pathlib import Path
from typing import Optional
from contextlib import contextmanager
from loguru import logger as loguru_logger


class AsyncLogger:
    """
    Asynchronous logger with flat format.

    Format: timestamp | level | component | message
    Keyword context is passed straight through to loguru.
    """

    # Single file handler shared by every instance
    _handler_id = None
    _console_handler_id = None

    def __init__(self, component: str, debug_mode: bool = False):
        self.component = component
        self.debug_mode = debug_mode
        self._setup_async_handler()

    def _setup_async_handler(self):
        """
        Configure the shared file sink.

        - Non-blocking (enqueue=True)
        - Rotation at 10MB
        - Only installed when a log file is configured
        """
        if AsyncLogger._handler_id is not None:
            return

        log_file = _get_log_file()
        if not log_file:
            return

        AsyncLogger._handler_id = loguru_logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[component]} | {message}",
            rotation="10 MB",
            compression="zip",
            enqueue=True,
        )

    @classmethod
    def configure_console(cls, level: str = "INFO") -> None:
        """
        Replace loguru's default stderr sink with one filtered at level.

        Safe to call repeatedly, the previous console sink is replaced.
        """
        if cls._console_handler_id is None:
            try:
                loguru_logger.remove(0)
            except ValueError:
                pass  # default sink already gone
        else:
            loguru_logger.remove(cls._console_handler_id)

        # sys.stderr is looked up per message so redirected streams are honored
        cls._console_handler_id = loguru_logger.add(
            lambda message: sys.stderr.write(message),
            level=level.upper(),
            format="{time:HH:mm:ss} | {level} | {extra[component]} | {message}",
        )

    def log(self, level: str, message: str, **context):
        """Send message to loguru bound to this component."""
        loguru_logger.bind(component=self.component, **context).log(level, message)

    def debug(self, message: str, **context):
        """Log at DEBUG level."""
        self.log("DEBUG", message, **context)

    def info(self, message: str, **context):
        """Log at INFO level."""
        self.log("INFO", message, **context)

    def warning(self, message: str, **context):
        """Log at WARNING level."""
        self.log("WARNING", message, **context)

    def error(self, message: str, include_trace: Optional[bool] = None, **context):
        """
        Log at ERROR level with optional stack trace.

        Args:
            message: Error message
            include_trace: Include stack trace (None = follow debug_mode)
            **context: Additional context
        """
        should_include_trace = include_trace if include_trace is not None else self.debug_mode

        if should_include_trace:
            import traceback

            context["stack_trace"] = traceback.format_exc()

        self.log("ERROR", message, **context)


class PerformanceLogger:
    """
    Logger specialised for timing measurements.
    """

    def __init__(self):
        self.logger = AsyncLogger("performance")

    @contextmanager
    def measure(self, operation: str, **context):
        """
        Context manager that logs the duration of an operation.

        Usage:
        ```
        with perf_logger.measure("copy_graph", files=len(graph.files)):
            copied = strategy.copy_graph(graph)
        ```
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start
            self.logger.debug(
                "Operation completed", operation=operation, duration_ms=duration * 1000, **context
            )


def _read_logging_section() -> dict:
    """Read the logging section of .codecompact if present."""
    config_path = Path(".codecompact")
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    section = config.get("logging", {})
    return section if isinstance(section, dict) else {}


def _get_debug_mode() -> bool:
    """Get debug_mode from .codecompact or the environment."""
    section = _read_logging_section()
    if "debug_mode" in section:
        return bool(section["debug_mode"])
    return os.getenv("CODECOMPACT_DEBUG", "false").lower() == "true"


def _get_log_file() -> Optional[str]:
    """Get the log file path from the environment or .codecompact."""
    env_file = os.getenv("CODECOMPACT_LOG_FILE")
    if env_file:
        return env_file
    return _read_logging_section().get("file")


logger = AsyncLogger("codecompact", debug_mode=_get_debug_mode())
