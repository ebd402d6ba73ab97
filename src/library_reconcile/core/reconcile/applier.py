"""Bounded, one-directional writes to the destination library.

Writes are issued one at a time. Failures are tolerated up to a skip budget;
once the budget is exceeded the run stops. Writes that already succeeded stay
applied, there is no rollback.
"""

import logging
import time
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from ...models import FIVE_STAR, MatchedPair, RatingScale, RecordId
from ...utils.progress import ProgressPhase, ProgressTracker

logger = logging.getLogger(__name__)

KeyedPair = Tuple[str, MatchedPair]
Mutation = Callable[[MatchedPair], None]
SetRating = Callable[[RecordId, int], None]


class SkipBudgetExceededError(Exception):
    """Raised when more tracks were skipped than the run tolerates."""

    def __init__(self, count: int, limit: int, applied: int = 0) -> None:
        """Initialize the error.

        Args:
            count: Number of skips so far
            limit: Configured skip limit
            applied: Writes that were applied before the run stopped
        """
        super().__init__(
            f"Too many skipped tracks ({count} > {limit}). Failing out..."
        )
        self.count = count
        self.limit = limit
        self.applied = applied


class SkipBudget:
    """Counts skipped records and failed writes for one run.

    A limit of zero or less disables the check.
    """

    def __init__(self, limit: int) -> None:
        """Initialize the budget.

        Args:
            limit: Maximum tolerated skips
        """
        self.limit = limit
        self.count = 0
        self.skipped: List[Tuple[str, str]] = []

    @property
    def unlimited(self) -> bool:
        """Whether any number of skips is tolerated."""
        return self.limit <= 0

    @property
    def exceeded(self) -> bool:
        """Whether the run must stop."""
        return not self.unlimited and self.count > self.limit

    def record_skip(self, key: str, reason: str) -> None:
        """Charge one skip to the budget.

        Raises:
            SkipBudgetExceededError: If this skip exceeds the limit
        """
        self.count += 1
        self.skipped.append((key, reason))
        logger.warning("Skipping '%s': %s", key, reason)

        if self.exceeded:
            logger.error("Too many skipped tracks (%d > %d)", self.count, self.limit)
            raise SkipBudgetExceededError(self.count, self.limit)


class ApplyState(str, Enum):
    """States of a mutation run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class ApplyResult:
    """Outcome of a mutation run.

    Attributes:
        state: Final state (IDLE for dry runs)
        planned: Keys that would be, or were, written
        applied: Number of successful writes
        failures: Failed writes as (key, error message)
        dry_run: Whether writes were suppressed
    """

    state: ApplyState = ApplyState.IDLE
    planned: List[str] = dataclass_field(default_factory=list)
    applied: int = 0
    failures: List[Tuple[str, str]] = dataclass_field(default_factory=list)
    dry_run: bool = False

    @property
    def planned_count(self) -> int:
        """Number of writes the run covers."""
        return len(self.planned)

    @property
    def attempted(self) -> int:
        """Number of mutator calls issued."""
        return self.applied + len(self.failures)


class MutationApplier:
    """Applies one mutation per pair within a skip budget."""

    def __init__(
        self,
        budget: SkipBudget,
        progress: Optional[ProgressTracker] = None,
        confirm_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the applier.

        Args:
            budget: Skip budget shared with the rest of the run
            progress: Optional progress tracker
            confirm_delay: Pause before the first write so the user can abort
            sleep: Sleep function, replaced in tests
        """
        self.budget = budget
        self.progress = progress
        self.confirm_delay = confirm_delay
        self.sleep = sleep
        self.state = ApplyState.IDLE
        self.paused = False

    def apply(
        self,
        items: Iterable[KeyedPair],
        mutate: Mutation,
        dry_run: bool = False,
        phase: ProgressPhase = ProgressPhase.SETTING_RATINGS,
    ) -> ApplyResult:
        """Run ``mutate`` for every pair.

        Args:
            items: Pairs to write, as (key, pair)
            mutate: Write for a single pair; any exception counts as a failure
            dry_run: Only report what would be written
            phase: Progress phase to report under

        Returns:
            Result of the run

        Raises:
            SkipBudgetExceededError: If failures exceed the skip budget
        """
        pending = list(items)
        result = ApplyResult(planned=[key for key, _ in pending], dry_run=dry_run)

        if dry_run:
            logger.info("Dry run: %d writes skipped", len(pending))
            return result

        self.state = result.state = ApplyState.RUNNING
        if pending and self.confirm_delay > 0:
            # Pause to give the user a chance to quit.
            self.sleep(self.confirm_delay)
            self.paused = True

        if self.progress:
            self.progress.start(phase, len(pending))

        for key, pair in pending:
            try:
                mutate(pair)
            except Exception as e:
                result.failures.append((key, str(e)))
                try:
                    self.budget.record_skip(key, f"{phase.value} failed: {e}")
                except SkipBudgetExceededError as exceeded:
                    self.state = result.state = ApplyState.ABORTED
                    if self.progress:
                        self.progress.error(str(exceeded))
                    exceeded.applied = result.applied
                    raise
            else:
                result.applied += 1
            finally:
                if self.progress:
                    self.progress.advance()

        self.state = result.state = ApplyState.COMPLETED
        if self.progress:
            self.progress.complete()
        logger.info(
            "%s: %d applied, %d failed",
            phase.value,
            result.applied,
            len(result.failures),
        )
        return result


def rating_mutation(set_rating: SetRating, scale: RatingScale = FIVE_STAR) -> Mutation:
    """Copy the source rating onto the destination record."""

    def mutate(pair: MatchedPair) -> None:
        if pair.src is None or pair.dst is None:
            raise ValueError("rating copy needs both records")
        set_rating(pair.dst.id, scale.from_five_star(pair.src.rating))

    return mutate
