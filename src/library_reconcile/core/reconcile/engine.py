"""Library reconciliation engine.

Ties root inference, path matching, reporting and bounded writes together for
one source and one destination library. Everything runs in memory over
already fetched inventories.
"""

import logging
import random
import time
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ...config import ReconcileOptions
from ...models import (
    FIVE_STAR,
    InventoryRecord,
    MatchedPair,
    PrefixPair,
    RatingScale,
    RecordId,
)
from ...utils.progress import ProgressPhase, ProgressTracker
from .applier import (
    ApplyResult,
    KeyedPair,
    Mutation,
    MutationApplier,
    SetRating,
    SkipBudget,
    rating_mutation,
)
from .matcher import LibraryMap, filter_by_root, join_libraries
from .prefix import PrefixInferrer
from .reporter import (
    is_missing_significant,
    iter_matched,
    iter_mismatched,
    iter_missing,
    missing_percent,
)

logger = logging.getLogger(__name__)

SetPlayDate = Callable[[RecordId, datetime], None]


@dataclass
class ReconciliationReport:
    """Joined view of two libraries and the outcome of any writes."""

    roots: PrefixPair
    roots_inferred: bool
    by_path: LibraryMap
    src_count: int
    dst_count: int
    missing: List[KeyedPair] = dataclass_field(default_factory=list)
    mismatched: List[KeyedPair] = dataclass_field(default_factory=list)
    significant: bool = False
    rating_result: Optional[ApplyResult] = None
    play_date_result: Optional[ApplyResult] = None

    @property
    def missing_count(self) -> int:
        """Tracks present in only one library."""
        return len(self.missing)

    @property
    def mismatch_count(self) -> int:
        """Matched tracks whose ratings differ."""
        return len(self.mismatched)

    @property
    def matched_count(self) -> int:
        """Tracks present in both libraries."""
        return sum(1 for pair in self.by_path.values() if pair.is_matched)

    @property
    def missing_percent(self) -> int:
        """Missing tracks as a percentage of both libraries."""
        return missing_percent(self.missing_count, self.src_count, self.dst_count)


class ReconciliationEngine:
    """Compares two inventories and copies ratings from source to destination.

    A single skip budget covers the whole run: records outside a configured
    root and failed writes are both charged to it.
    """

    def __init__(
        self,
        options: ReconcileOptions,
        rng: Optional[random.Random] = None,
        progress: Optional[ProgressTracker] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the engine.

        Args:
            options: Options for this run
            rng: Random source for root inference
            progress: Optional progress tracker for write phases
            sleep: Sleep function used for the confirmation pause
        """
        self.options = options
        self.rng = rng
        self.progress = progress
        self.sleep = sleep
        self.budget = SkipBudget(options.skip_count)
        self._paused = False

    def resolve_roots(
        self, src: Sequence[InventoryRecord], dst: Sequence[InventoryRecord]
    ) -> PrefixPair:
        """Return lower-cased roots, inferring them when none are configured."""
        if self.options.roots_configured:
            return PrefixPair(
                (self.options.src_root or "").lower(),
                (self.options.dst_root or "").lower(),
            )

        if not src or not dst:
            logger.warning("Empty library, cannot infer roots")
            return PrefixPair("", "")

        inferrer = PrefixInferrer(trials=self.options.trials, rng=self.rng)
        roots = inferrer.infer(src, dst)
        if not roots.resolved:
            logger.warning("Falling back to empty library roots")
            return roots.or_empty()
        return roots

    def reconcile(
        self, src: Sequence[InventoryRecord], dst: Sequence[InventoryRecord]
    ) -> ReconciliationReport:
        """Join both libraries and derive the missing and mismatched views.

        Raises:
            SkipBudgetExceededError: If too many records lie outside a
                configured root
        """
        roots = self.resolve_roots(src, dst)
        inferred = not self.options.roots_configured

        if not inferred:
            # Configured roots are expected to hold for every record
            if roots.src_root:
                src = filter_by_root(src, roots.src_root, self.budget, "source")
            if roots.dst_root:
                dst = filter_by_root(dst, roots.dst_root, self.budget, "destination")

        by_path = join_libraries(
            src, dst, roots.src_root or "", roots.dst_root or ""
        )
        report = ReconciliationReport(
            roots=roots,
            roots_inferred=inferred,
            by_path=by_path,
            src_count=len(src),
            dst_count=len(dst),
            missing=list(iter_missing(by_path)),
            mismatched=list(iter_mismatched(by_path, self.options.copy_unrated)),
        )
        report.significant = is_missing_significant(
            report.missing_count,
            report.src_count,
            report.dst_count,
            self.options.significance_percent,
        )

        logger.info(
            "Joined %d source and %d destination tracks: %d matched, "
            "%d missing, %d rating mismatches",
            report.src_count,
            report.dst_count,
            report.matched_count,
            report.missing_count,
            report.mismatch_count,
        )
        if report.significant:
            logger.warning(
                "%d%% of tracks are missing, library roots may be wrong",
                report.missing_percent,
            )
        return report

    def _applier(self) -> MutationApplier:
        delay = 0.0 if self._paused else self.options.confirm_delay
        return MutationApplier(
            self.budget, progress=self.progress, confirm_delay=delay, sleep=self.sleep
        )

    def apply(
        self,
        items: Sequence[KeyedPair],
        mutate: Mutation,
        phase: ProgressPhase = ProgressPhase.SETTING_RATINGS,
    ) -> ApplyResult:
        """Apply ``mutate`` to ``items`` within the run's skip budget.

        Honors ``dry_run``: nothing is written, the result lists what would be.
        """
        if self.options.dry_run:
            return MutationApplier(self.budget).apply(items, mutate, dry_run=True)
        applier = self._applier()
        try:
            return applier.apply(items, mutate, phase=phase)
        finally:
            # Only a phase that actually paused counts
            self._paused = self._paused or applier.paused

    def apply_ratings(
        self,
        report: ReconciliationReport,
        set_rating: SetRating,
        scale: RatingScale = FIVE_STAR,
    ) -> ApplyResult:
        """Copy source ratings onto every mismatched destination track."""
        report.rating_result = self.apply(
            report.mismatched, rating_mutation(set_rating, scale)
        )
        return report.rating_result

    def apply_play_dates(
        self, report: ReconciliationReport, set_play_date: SetPlayDate
    ) -> ApplyResult:
        """Copy source play dates onto every matched destination track."""
        items = [
            (key, pair)
            for key, pair in iter_matched(report.by_path)
            if pair.src is not None and pair.src.played_at is not None
        ]

        def mutate(pair: MatchedPair) -> None:
            if pair.src is None or pair.dst is None or pair.src.played_at is None:
                raise ValueError("play date copy needs both records")
            set_play_date(pair.dst.id, pair.src.played_at)

        report.play_date_result = self.apply(
            items, mutate, phase=ProgressPhase.SETTING_PLAY_DATES
        )
        return report.play_date_result

    def run(
        self,
        src: Sequence[InventoryRecord],
        dst: Sequence[InventoryRecord],
        set_rating: Optional[SetRating] = None,
        scale: RatingScale = FIVE_STAR,
    ) -> ReconciliationReport:
        """Reconcile both libraries and copy mismatched ratings.

        Without ``set_rating`` the run only reports.

        Raises:
            SkipBudgetExceededError: If the skip budget is exceeded
        """
        report = self.reconcile(src, dst)
        if set_rating is not None:
            self.apply_ratings(report, set_rating, scale)
        return report
