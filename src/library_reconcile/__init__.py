"""Library Reconcile.

Compares two music library inventories that describe mostly the same files,
reports tracks missing from either side and rating mismatches, and copies
ratings from a source library to a destination library within a skip budget.
"""

__version__ = "1.0.0"

from .config import Config, ConfigurationError, ReconcileOptions
from .core import FetchError, fetch_libraries
from .core.reconcile import (
    PrefixInferrer,
    ReconciliationEngine,
    ReconciliationReport,
    SkipBudgetExceededError,
    infer_roots,
    join_libraries,
    normalize_path,
)
from .models import InventoryRecord, MatchedPair, PrefixPair, RatingScale

__all__ = [
    "Config",
    "ConfigurationError",
    "FetchError",
    "InventoryRecord",
    "MatchedPair",
    "PrefixInferrer",
    "PrefixPair",
    "RatingScale",
    "ReconcileOptions",
    "ReconciliationEngine",
    "ReconciliationReport",
    "SkipBudgetExceededError",
    "fetch_libraries",
    "infer_roots",
    "join_libraries",
    "normalize_path",
]
