"""
Core utilities module for codecompact.
"""

from .datetime_utils import (
    utc_now,
    ensure_utc,
    format_iso,
)

__all__ = [
    'utc_now',
    'ensure_utc',
    'format_iso',
]
