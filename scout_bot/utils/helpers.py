"""
Utility helpers
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Tuple


def append_unique(seq: Tuple[str, ...], item: str) -> Tuple[str, ...]:
    """Order-preserving set append: returns seq untouched if item is present."""
    return seq if item in seq else seq + (item,)


def remove_first(seq: Tuple[str, ...], item: str) -> Tuple[str, ...]:
    if item not in seq:
        return seq
    idx = seq.index(item)
    return seq[:idx] + seq[idx + 1:]


def parse_iso(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError):
        return None


def clean_str(value: Any) -> Optional[str]:
    """Stripped string or None for non-strings and blanks."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
