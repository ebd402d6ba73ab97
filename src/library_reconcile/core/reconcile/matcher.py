"""Join two inventories on their normalized paths."""

import logging
from typing import Dict, Iterable, List

from ...models import InventoryRecord, MatchedPair
from .applier import SkipBudget
from .normalizer import has_root, normalize_path

logger = logging.getLogger(__name__)

LibraryMap = Dict[str, MatchedPair]


def filter_by_root(
    records: Iterable[InventoryRecord],
    root: str,
    budget: SkipBudget,
    label: str = "library",
) -> List[InventoryRecord]:
    """Drop records that do not live under an expected root.

    Every dropped record is charged to ``budget``.

    Raises:
        SkipBudgetExceededError: If too many records are outside the root
    """
    kept = []
    for record in records:
        if not has_root(record.path, root):
            budget.record_skip(
                record.path,
                f"Unusual {label} location: {record.title or record.id} "
                f"`{record.path}`",
            )
            continue
        kept.append(record)
    return kept


def join_libraries(
    src: Iterable[InventoryRecord],
    dst: Iterable[InventoryRecord],
    src_root: str = "",
    dst_root: str = "",
) -> LibraryMap:
    """Map every normalized path to the records of both libraries.

    Duplicate keys within one library keep the last record seen. The two
    sides of a pair are filled independently, so pass order does not matter.

    Args:
        src: Source library records
        dst: Destination library records
        src_root: Lower-cased source root
        dst_root: Lower-cased destination root

    Returns:
        Mapping from normalized path to matched pair
    """
    by_path: LibraryMap = {}

    for record in src:
        key = normalize_path(record.path, src_root)
        pair = by_path.get(key)
        if pair is None:
            pair = by_path[key] = MatchedPair()
        elif pair.src is not None:
            logger.debug("Duplicate source path %r", key)
        pair.src = record

    for record in dst:
        key = normalize_path(record.path, dst_root)
        pair = by_path.get(key)
        if pair is None:
            pair = by_path[key] = MatchedPair()
        elif pair.dst is not None:
            logger.debug("Duplicate destination path %r", key)
        pair.dst = record

    return by_path
