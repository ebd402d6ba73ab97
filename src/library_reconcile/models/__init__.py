"""Models for the library reconciliation engine."""

from .models import (
    FIVE_STAR,
    FIVE_STAR_MAX,
    ITUNES_SCALE,
    InventoryRecord,
    MatchedPair,
    PrefixPair,
    RatingScale,
    RecordId,
)

__all__ = [
    "FIVE_STAR",
    "FIVE_STAR_MAX",
    "ITUNES_SCALE",
    "InventoryRecord",
    "MatchedPair",
    "PrefixPair",
    "RatingScale",
    "RecordId",
]
