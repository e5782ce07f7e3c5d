# scout_bot/utils/__init__.py
"""
Expose helpers at package-level for convenience:

    from scout_bot.utils import append_unique
"""

from .helpers import (  # noqa: F401
    append_unique,
    clean_str,
    parse_iso,
    remove_first,
)

__all__ = [
    "append_unique",
    "clean_str",
    "parse_iso",
    "remove_first",
]
