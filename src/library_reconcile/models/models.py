"""Data models for the library reconciliation engine."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

RecordId = Union[int, str]

FIVE_STAR_MAX = 5


class RatingScale(BaseModel):
    """A native rating scale that maps linearly onto 0-5 stars.

    iTunes stores ratings as 0-100 in steps of 20, Subsonic and Ampache use
    0-5 directly.
    """

    maximum: int = Field(default=FIVE_STAR_MAX, gt=0)

    model_config = ConfigDict(frozen=True)

    @property
    def step(self) -> int:
        """Native units per star."""
        return max(self.maximum // FIVE_STAR_MAX, 1)

    def to_five_star(self, native: Optional[int]) -> int:
        """Convert a native rating to the common 0-5 scale."""
        if not native:
            return 0
        return min(max(int(native) // self.step, 0), FIVE_STAR_MAX)

    def from_five_star(self, rating: int) -> int:
        """Convert a 0-5 rating back to this scale."""
        return rating * self.step


FIVE_STAR = RatingScale()
ITUNES_SCALE = RatingScale(maximum=100)


class InventoryRecord(BaseModel):
    """Read-only view of one track as reported by a library system.

    Attributes:
        id: Identifier in the reporting system (int for iTunes, str elsewhere)
        path: File location in that system's own casing and escaping
        rating: Rating on the common 0-5 scale
        title: Optional display title, only used in warnings
        played_at: Last play time, when the system reports one
        added_at: Time the track was added to the library
    """

    id: RecordId
    path: str
    rating: int = Field(default=0, ge=0, le=FIVE_STAR_MAX)
    title: Optional[str] = None
    played_at: Optional[datetime] = None
    added_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("rating", mode="before")
    @classmethod
    def validate_rating(cls, v: Optional[int]) -> int:
        """Treat a missing rating as unrated."""
        return 0 if v is None else v

    @classmethod
    def from_native(
        cls,
        id: RecordId,
        path: str,
        rating: Optional[int],
        scale: RatingScale = FIVE_STAR,
        **extra: object,
    ) -> "InventoryRecord":
        """Build a record, converting the rating from the system's native scale."""
        return cls(id=id, path=path, rating=scale.to_five_star(rating), **extra)

    @property
    def is_rated(self) -> bool:
        """Whether the track carries any rating."""
        return self.rating > 0


@dataclass
class MatchedPair:
    """Records from both inventories that share a normalized path.

    Either side is ``None`` when the track is absent from that inventory; an
    unrated but present track is a record with ``rating == 0``.
    """

    src: Optional[InventoryRecord] = None
    dst: Optional[InventoryRecord] = None

    @property
    def is_matched(self) -> bool:
        """Whether both inventories contain the track."""
        return self.src is not None and self.dst is not None

    @property
    def is_missing(self) -> bool:
        """Whether exactly one inventory contains the track."""
        return (self.src is None) != (self.dst is None)


@dataclass(frozen=True)
class PrefixPair:
    """Library roots for the source and destination inventories.

    ``None`` on a side means no candidate was ever found for it, which is
    different from an empty root (both libraries laid out identically).
    """

    src_root: Optional[str] = None
    dst_root: Optional[str] = None

    @property
    def resolved(self) -> bool:
        """Whether both roots were inferred."""
        return self.src_root is not None and self.dst_root is not None

    def or_empty(self) -> "PrefixPair":
        """Replace unresolved sides with the empty root."""
        return PrefixPair(self.src_root or "", self.dst_root or "")
