"""Shared reconciliation flow used by every command."""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, Sequence, Tuple

import click

from ...config import (
    DEFAULT_SKIP_COUNT,
    DEFAULT_TRIALS,
    ConfigurationError,
    ReconcileOptions,
)
from ...core import FetchError, InventorySource, fetch_libraries
from ...core.reconcile import (
    ReconciliationEngine,
    ReconciliationReport,
    SkipBudgetExceededError,
)
from ...core.reconcile.applier import SetRating
from ...models import FIVE_STAR, RatingScale
from ...services import AmpacheError, SubsonicError
from ...utils.progress import ProgressTracker, TqdmProgressReporter
from ..display import (
    display_apply_result,
    display_error,
    display_mismatched,
    display_missing,
    display_roots,
    display_skips,
)
from .init import InitializationError

logger = logging.getLogger(__name__)

FATAL_ERRORS = (
    ConfigurationError,
    InitializationError,
    FetchError,
    SkipBudgetExceededError,
    SubsonicError,
    AmpacheError,
    OSError,
)


@contextmanager
def fatal_errors(what: str) -> Iterator[None]:
    """Turn fatal run errors into a non-zero click exit."""
    try:
        yield
    except click.ClickException:
        raise
    except FATAL_ERRORS as e:
        logger.error("%s failed: %s", what, e)
        display_error(f"{what} failed: {e}")
        raise click.ClickException(str(e)) from e


def build_options(
    src_root: Optional[str],
    dst_root: Optional[str],
    dry_run: bool,
    skip_count: int,
    copy_unrated: bool,
    trials: int,
) -> ReconcileOptions:
    """Collect command options into the engine configuration."""
    return ReconcileOptions(
        src_root=src_root,
        dst_root=dst_root,
        dry_run=dry_run,
        skip_count=skip_count,
        copy_unrated=copy_unrated,
        trials=trials,
    )


def run_reconciliation(
    src: InventorySource,
    dst: InventorySource,
    options: ReconcileOptions,
    set_rating: Optional[SetRating] = None,
    scale: RatingScale = FIVE_STAR,
    dst_url: Optional[str] = None,
    tips: Sequence[str] = (),
    show_progress: bool = True,
    dst_fetched: bool = True,
) -> Tuple[ReconciliationEngine, ReconciliationReport]:
    """Fetch, report and, if a destination client exists, copy ratings.

    Args:
        src: Source library
        dst: Destination library
        options: Engine options
        set_rating: Destination rating writer; None means report only
        scale: Rating scale of the destination
        dst_url: Destination URL for the dry-run hint
        tips: Hints shown when most tracks are missing
        show_progress: Render progress bars
        dst_fetched: Whether ``dst`` is a real library rather than an empty
            stand-in for a report-only run

    Returns:
        Tuple of (engine, report) so callers can run extra write phases

    Raises:
        FetchError: If either library cannot be fetched
        SkipBudgetExceededError: If too many tracks were skipped
    """
    progress = ProgressTracker(TqdmProgressReporter(disable=not show_progress))
    src_records, dst_records = fetch_libraries(src, dst, progress)

    engine = ReconciliationEngine(options, progress=progress)
    report = engine.reconcile(src_records, dst_records)

    display_roots(report)
    display_missing(report, src.name, dst.name, tips, warn_significant=dst_fetched)
    display_mismatched(report, src.name, dst.name)

    if set_rating is not None:
        result = engine.apply_ratings(report, set_rating, scale)
        display_apply_result(result, "Ratings", dst.name, dst_url)

    display_skips(engine.budget)
    return engine, report


def reconcile_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every reconciliation command."""
    options = [
        click.option(
            "-n",
            "--dry-run/--no-dry-run",
            default=True,
            show_default=True,
            help="Only report; --no-dry-run modifies the destination library",
        ),
        click.option(
            "--skip-count",
            type=int,
            default=DEFAULT_SKIP_COUNT,
            show_default=True,
            help="Skipped tracks tolerated before refusing to continue (0 = no limit)",
        ),
        click.option(
            "--copy-unrated",
            is_flag=True,
            help="Clear the destination rating when the source track is unrated",
        ),
        click.option(
            "--trials",
            type=click.IntRange(min=1),
            default=DEFAULT_TRIALS,
            show_default=True,
            help="Random samples used to infer library roots",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func
