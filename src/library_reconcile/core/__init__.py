"""Core reconciliation functionality."""

from .fetch import (
    FetchCancelledError,
    FetchError,
    InventorySource,
    StaticLibrary,
    check_stop,
    fetch_libraries,
)

__all__ = [
    "FetchCancelledError",
    "FetchError",
    "InventorySource",
    "StaticLibrary",
    "check_stop",
    "fetch_libraries",
]
