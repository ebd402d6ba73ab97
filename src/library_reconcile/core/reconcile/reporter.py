"""Views over a joined library mapping.

All views are lazy and yield ``(key, pair)`` tuples in key order.
"""

from typing import Iterator, Mapping, Tuple

from ...config import DEFAULT_SIGNIFICANCE_PERCENT
from ...models import MatchedPair

KeyedPair = Tuple[str, MatchedPair]


def iter_missing(by_path: Mapping[str, MatchedPair]) -> Iterator[KeyedPair]:
    """Yield tracks present in exactly one library."""
    for key in sorted(by_path):
        pair = by_path[key]
        if pair.is_missing:
            yield key, pair


def is_rating_mismatch(pair: MatchedPair, copy_unrated: bool = False) -> bool:
    """Check whether the destination rating should be corrected.

    An unrated source means "no opinion" and is ignored unless
    ``copy_unrated`` is set, in which case the destination rating is cleared.
    """
    if pair.src is None or pair.dst is None:
        return False
    if pair.src.rating == pair.dst.rating:
        return False
    if pair.src.rating == 0 and not copy_unrated:
        return False
    return True


def iter_mismatched(
    by_path: Mapping[str, MatchedPair], copy_unrated: bool = False
) -> Iterator[KeyedPair]:
    """Yield matched tracks whose ratings differ."""
    for key in sorted(by_path):
        pair = by_path[key]
        if is_rating_mismatch(pair, copy_unrated):
            yield key, pair


def iter_matched(by_path: Mapping[str, MatchedPair]) -> Iterator[KeyedPair]:
    """Yield tracks present in both libraries."""
    for key in sorted(by_path):
        pair = by_path[key]
        if pair.is_matched:
            yield key, pair


def missing_percent(missing_count: int, total_src: int, total_dst: int) -> int:
    """Missing tracks as an integer percentage of both libraries."""
    total = total_src + total_dst
    if total == 0:
        return 0
    return missing_count * 100 // total


def is_missing_significant(
    missing_count: int,
    total_src: int,
    total_dst: int,
    threshold: int = DEFAULT_SIGNIFICANCE_PERCENT,
) -> bool:
    """Check whether so much is missing that the roots are probably wrong."""
    return missing_percent(missing_count, total_src, total_dst) > threshold
