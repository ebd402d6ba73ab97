"""Tests for the reconciliation data models."""

import pytest
from pydantic import ValidationError

from library_reconcile.models import (
    FIVE_STAR,
    ITUNES_SCALE,
    InventoryRecord,
    MatchedPair,
    PrefixPair,
    RatingScale,
)


class TestRatingScale:
    """Test rating scale conversions."""

    @pytest.mark.parametrize(
        "native,expected",
        [(0, 0), (20, 1), (40, 2), (60, 3), (80, 4), (100, 5), (None, 0)],
    )
    def test_itunes_to_five_star(self, native, expected):
        """Test iTunes 0-100 ratings map onto whole stars."""
        assert ITUNES_SCALE.to_five_star(native) == expected

    def test_itunes_partial_star_rounds_down(self):
        """Test half stars are dropped like integer division."""
        assert ITUNES_SCALE.to_five_star(90) == 4

    def test_from_five_star(self):
        """Test converting stars back to the native scale."""
        assert ITUNES_SCALE.from_five_star(4) == 80
        assert FIVE_STAR.from_five_star(4) == 4

    def test_out_of_range_is_clamped(self):
        """Test native values above the maximum stay at five stars."""
        assert RatingScale(maximum=10).to_five_star(12) == 5


class TestInventoryRecord:
    """Test InventoryRecord model."""

    def test_defaults(self):
        """Test a record without a rating is unrated."""
        record = InventoryRecord(id="a1", path="/music/song.mp3")
        assert record.rating == 0
        assert not record.is_rated
        assert record.played_at is None

    def test_none_rating_is_unrated(self):
        """Test servers that send null ratings produce unrated records."""
        record = InventoryRecord(id="a1", path="/music/song.mp3", rating=None)
        assert record.rating == 0

    def test_rating_out_of_range(self):
        """Test ratings must already be on the 0-5 scale."""
        with pytest.raises(ValidationError):
            InventoryRecord(id=1, path="/music/song.mp3", rating=80)

    def test_from_native(self):
        """Test construction from a native rating scale."""
        record = InventoryRecord.from_native(
            id=7, path="/a/song.mp3", rating=60, scale=ITUNES_SCALE, title="Song"
        )
        assert record.id == 7
        assert record.rating == 3
        assert record.title == "Song"

    def test_records_are_immutable(self):
        """Test records cannot be modified after construction."""
        record = InventoryRecord(id=1, path="/a/song.mp3")
        with pytest.raises(ValidationError):
            record.rating = 3


class TestMatchedPair:
    """Test MatchedPair presence checks."""

    def test_unrated_present_record_is_not_absent(self):
        """Test presence never depends on the rating."""
        pair = MatchedPair(
            src=InventoryRecord(id=1, path="a", rating=0),
            dst=InventoryRecord(id="x", path="a", rating=0),
        )
        assert pair.is_matched
        assert not pair.is_missing

    def test_one_side_missing(self):
        """Test a pair with one side is missing."""
        pair = MatchedPair(src=InventoryRecord(id=1, path="a"))
        assert pair.is_missing
        assert not pair.is_matched


class TestPrefixPair:
    """Test PrefixPair."""

    def test_empty_roots_are_resolved(self):
        """Test empty roots are a real answer."""
        assert PrefixPair("", "").resolved

    def test_unresolved(self):
        """Test missing roots are distinguishable from empty roots."""
        pair = PrefixPair(None, "/music/")
        assert not pair.resolved
        assert pair.or_empty() == PrefixPair("", "/music/")
