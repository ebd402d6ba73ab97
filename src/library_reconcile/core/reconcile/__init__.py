"""Library reconciliation engine.

Infers library roots, joins two inventories on normalized paths, reports
missing tracks and rating mismatches, and applies bounded rating writes.
"""

from .applier import (
    ApplyResult,
    ApplyState,
    MutationApplier,
    SkipBudget,
    SkipBudgetExceededError,
    rating_mutation,
)
from .engine import ReconciliationEngine, ReconciliationReport
from .matcher import filter_by_root, join_libraries
from .normalizer import normalize_path
from .prefix import PrefixInferrer, infer_roots, longest_library_prefix
from .reporter import (
    is_missing_significant,
    is_rating_mismatch,
    iter_matched,
    iter_mismatched,
    iter_missing,
    missing_percent,
)

__all__ = [
    # Engine
    "ReconciliationEngine",
    "ReconciliationReport",
    # Roots and matching
    "PrefixInferrer",
    "infer_roots",
    "longest_library_prefix",
    "normalize_path",
    "filter_by_root",
    "join_libraries",
    # Reports
    "is_missing_significant",
    "is_rating_mismatch",
    "iter_matched",
    "iter_mismatched",
    "iter_missing",
    "missing_percent",
    # Writes
    "ApplyResult",
    "ApplyState",
    "MutationApplier",
    "SkipBudget",
    "SkipBudgetExceededError",
    "rating_mutation",
]
