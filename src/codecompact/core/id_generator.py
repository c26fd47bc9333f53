"""
Centralized ID generation for codecompact.

Errors and cached entries are tagged with hex32 ids so they can be
correlated across log lines.
"""

import secrets
import uuid
from typing import Literal, Optional


IDFormat = Literal["hex32", "uuid4"]


class IDGenerator:
    """
    Centralized ID generator.

    - hex32 by default (compact, log friendly)
    - uuid4 available for callers that need the standard form
    """

    DEFAULT_FORMAT: IDFormat = "hex32"

    @staticmethod
    def generate(format: Optional[IDFormat] = None) -> str:
        """
        Generate an ID in the requested format.

        Examples:
            >>> len(IDGenerator.generate("hex32"))
            32
            >>> len(IDGenerator.generate("uuid4"))
            36
        """
        if format is None:
            format = IDGenerator.DEFAULT_FORMAT

        if format == "hex32":
            return secrets.token_hex(16)
        elif format == "uuid4":
            return str(uuid.uuid4())
        else:
            raise ValueError(f"Unsupported ID format: {format}")

    @staticmethod
    def is_valid_id(id_str: str) -> bool:
        """Check whether a string looks like a hex32 or uuid4 ID."""
        if not id_str:
            return False

        try:
            if "-" in id_str:
                uuid.UUID(id_str)
                return True
            return len(id_str) == 32 and all(c in "0123456789abcdef" for c in id_str.lower())
        except (ValueError, TypeError):
            return False


def generate_id(format: Optional[IDFormat] = None) -> str:
    """Convenience alias for IDGenerator.generate()."""
    return IDGenerator.generate(format)


def is_valid_id(id_str: str) -> bool:
    """Convenience alias for IDGenerator.is_valid_id()."""
    return IDGenerator.is_valid_id(id_str)
