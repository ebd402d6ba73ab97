"""CLI display and formatting utilities."""

from .formatters import (
    SUBSONIC_TIPS,
    console,
    display_apply_result,
    display_error,
    display_mismatched,
    display_missing,
    display_roots,
    display_skips,
)

__all__ = [
    "SUBSONIC_TIPS",
    "console",
    "display_apply_result",
    "display_error",
    "display_mismatched",
    "display_missing",
    "display_roots",
    "display_skips",
]
