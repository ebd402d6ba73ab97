"""Library root inference.

Two libraries that hold mostly the same music usually differ only in where
that music is mounted (``file://localhost/M:/Music/`` versus ``/music/``).
The inferrer samples source tracks at random, lines each one up against every
destination track from the end of the path, and keeps the shortest leftover
prefixes it sees on each side.
"""

import logging
import random
from typing import Iterator, List, Optional, Sequence, Tuple

from ...config import DEFAULT_TRIALS
from ...models import InventoryRecord, PrefixPair

logger = logging.getLogger(__name__)

SEPARATOR = "/"


def _split(path: str) -> Tuple[str, str]:
    """Split after the final separator, keeping it on the directory part."""
    index = path.rfind(SEPARATOR)
    return path[: index + 1], path[index + 1 :]


def _trim_separator(path: str) -> str:
    if path.endswith(SEPARATOR):
        return path[: -len(SEPARATOR)]
    return path


def longest_library_prefix(a: str, b: str) -> Tuple[str, str]:
    """Return the roots that remain once the common path tail is removed.

    Both paths are walked backwards one segment at a time until a segment
    differs. If not even the file names match, the inputs come back unchanged.

    Examples:
        >>> longest_library_prefix("/music/Rush/2112.mp3", "/My/Rush/2112.mp3")
        ('/music/', '/My/')
    """
    a_dir, b_dir = a, b
    while a_dir and b_dir:
        a_head, a_tail = _split(_trim_separator(a_dir))
        b_head, b_tail = _split(_trim_separator(b_dir))

        if a_tail != b_tail:
            break

        a_dir, b_dir = a_head, b_head

    return a_dir, b_dir


class PrefixInferrer:
    """Find the most likely library roots of two overlapping inventories.

    A full comparison is quadratic in library size, so only ``trials`` source
    tracks are sampled; each is compared to the whole destination. 500 trials
    settle on the right root for libraries with tens of thousands of tracks.
    """

    def __init__(
        self, trials: int = DEFAULT_TRIALS, rng: Optional[random.Random] = None
    ) -> None:
        """Initialize the inferrer.

        Args:
            trials: Number of source tracks to sample
            rng: Random source, pass a seeded instance for reproducible runs
        """
        if trials <= 0:
            raise ValueError("trials must be positive")
        self.trials = trials
        self.rng = rng or random.Random()

    def iter_trials(
        self, src: Sequence[InventoryRecord], dst: Sequence[InventoryRecord]
    ) -> Iterator[PrefixPair]:
        """Yield the best roots found so far after each trial.

        Root lengths never grow from one yielded pair to the next.

        Raises:
            ValueError: If either inventory is empty
        """
        if not src or not dst:
            raise ValueError("cannot infer library roots from an empty inventory")

        # Lower case for systems like Windows where case can change without
        # triggering a library update.
        dst_paths: List[str] = [d.path.lower() for d in dst if d.path]
        src_root: Optional[str] = None
        dst_root: Optional[str] = None

        for _ in range(self.trials):
            src_path = self.rng.choice(src).path.lower()
            if src_path:
                for dst_path in dst_paths:
                    sp, dp = longest_library_prefix(src_path, dst_path)
                    if src_root is None or len(sp) < len(src_root):
                        src_root = sp
                    if dst_root is None or len(dp) < len(dst_root):
                        dst_root = dp

            yield PrefixPair(src_root, dst_root)

    def infer(
        self, src: Sequence[InventoryRecord], dst: Sequence[InventoryRecord]
    ) -> PrefixPair:
        """Return the inferred roots.

        Once both roots are empty no later trial can improve on them, so the
        search stops early.
        """
        best = PrefixPair()
        for best in self.iter_trials(src, dst):
            if best.src_root == "" and best.dst_root == "":
                break

        if not best.resolved:
            logger.warning("Could not infer library roots from %d samples", self.trials)
        else:
            logger.debug(
                "Inferred library roots: src=%r dst=%r", best.src_root, best.dst_root
            )
        return best


def infer_roots(
    src: Sequence[InventoryRecord],
    dst: Sequence[InventoryRecord],
    trials: int = DEFAULT_TRIALS,
    rng: Optional[random.Random] = None,
) -> PrefixPair:
    """Infer the library roots of ``src`` and ``dst``."""
    return PrefixInferrer(trials=trials, rng=rng).infer(src, dst)
