"""
Unified exception hierarchy for codecompact.

Every failure surfaced by the compaction engine is a CodeCompactError
subclass carrying a tracking id, structured context and resolution hints.
"""

from typing import Dict, Any, Optional, List
from datetime import datetime

from codecompact.core.id_generator import generate_id
from codecompact.core.utils.datetime_utils import utc_now, format_iso


class CodeCompactError(Exception):
    """
    Base error of the codecompact system.

    Features:
    1. Structured serialization
    2. Rich context
    3. Resolution suggestions
    4. Unique ID for tracking
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.id: str = generate_id()
        self.timestamp: datetime = utc_now()
        self.message: str = message
        self.code: str = code or self.__class__.__name__
        self.context: Dict[str, Any] = context or {}
        self.cause: Optional[BaseException] = cause
        self.suggestions: List[str] = []
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to a dictionary for reports and logs.

        Returns:
            {
                "error_id": "hex32chars",
                "code": "UnknownStrategyError",
                "message": "Unknown strategy: fastest",
                "timestamp": "2024-01-20T10:30:00Z",
                "context": {...}
            }
        """
        result: Dict[str, Any] = {
            "error_id": self.id,
            "code": self.code,
            "message": self.message,
            "timestamp": format_iso(self.timestamp),
            "context": self.context,
        }

        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}

        if self.suggestions:
            result["suggestions"] = self.suggestions

        return result

    def add_suggestion(self, suggestion: str) -> None:
        """
        Add a resolution hint to the error.

        Duplicates and empty values are ignored.
        """
        if not suggestion or not isinstance(suggestion, str):
            return

        if suggestion not in self.suggestions:
            self.suggestions.append(suggestion)


class ConfigurationError(CodeCompactError):
    """Invalid or unreadable configuration."""

    pass


class InvalidRequestError(CodeCompactError):
    """Compaction request rejected before any strategy ran."""

    pass


class UnknownStrategyError(CodeCompactError):
    """Requested strategy name is not registered."""

    def __init__(self, strategy: str, available: Optional[List[str]] = None) -> None:
        available = available or []
        super().__init__(
            f"Unknown strategy: {strategy}",
            context={"strategy": strategy, "available": available},
        )
        self.strategy = strategy
        if available:
            self.add_suggestion(f"Use one of: {', '.join(available)}")


class StrategyExecutionError(CodeCompactError):
    """A strategy failed while compacting; wraps the underlying cause."""

    def __init__(self, strategy: str, cause: BaseException) -> None:
        super().__init__(
            f"Compaction failed with strategy {strategy}: {cause}",
            context={"strategy": strategy},
            cause=cause,
        )
        self.strategy = strategy


class BatchCompactionError(CodeCompactError):
    """A request inside a batch failed; the batch was aborted."""

    def __init__(self, index: int, cause: BaseException) -> None:
        super().__init__(
            f"Batch compaction failed at index {index}: {cause}",
            context={"index": index},
            cause=cause,
        )
        self.index = index


class PreservationError(CodeCompactError):
    """
    Preservation requirements cannot be honored.

    Raised by strategies that refuse to trade a preserved element for the
    requested size bound, e.g. when the preserved set alone is larger than
    max_size.
    """

    def __init__(
        self, message: str, preserved_size: int, max_size: int, context: Optional[Dict[str, Any]] = None
    ) -> None:
        merged = {"preserved_size": preserved_size, "max_size": max_size}
        merged.update(context or {})
        super().__init__(message, context=merged)
        self.preserved_size = preserved_size
        self.max_size = max_size
        self.add_suggestion("Increase max_size or reduce the preserved set")


__all__ = [
    "CodeCompactError",
    "ConfigurationError",
    "InvalidRequestError",
    "UnknownStrategyError",
    "StrategyExecutionError",
    "BatchCompactionError",
    "PreservationError",
]
