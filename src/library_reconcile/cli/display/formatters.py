"""Display formatters for reconciliation reports."""

import logging
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.reconcile import ApplyResult, ReconciliationReport, SkipBudget

console = Console()
logger = logging.getLogger(__name__)


def _id(record: Optional[object]) -> str:
    return "" if record is None else escape(str(getattr(record, "id", "")))


def display_roots(report: ReconciliationReport) -> None:
    """Show the library roots used for matching."""
    how = "inferred" if report.roots_inferred else "configured"
    console.print(
        f"Music library root ({how}): src='{escape(report.roots.src_root or '')}' "
        f"dst='{escape(report.roots.dst_root or '')}'"
    )


def display_missing(
    report: ReconciliationReport,
    src_label: str = "src",
    dst_label: str = "dst",
    tips: Sequence[str] = (),
    warn_significant: bool = True,
) -> None:
    """List tracks present in only one library.

    Args:
        report: Reconciliation report
        src_label: Name of the source library
        dst_label: Name of the destination library
        tips: Configuration hints shown when the missing count is significant
        warn_significant: Warn about a significant missing count; off when
            the destination was never fetched
    """
    console.print("\n[bold cyan]== Missing Tracks ==[/bold cyan]")
    for key, pair in report.missing:
        console.print(escape(key))
        console.print(
            f"\tmissing {src_label}({_id(pair.src)})\t{dst_label}({_id(pair.dst)})"
        )
    console.print()
    console.print(
        f"[bold cyan]== Missing Track Count {report.missing_count} / "
        f"({report.src_count} + {report.dst_count}) ==[/bold cyan]"
    )

    if report.significant and warn_significant:
        console.print(
            "[yellow]Warning: Missing count is significant. Tips:[/yellow]"
        )
        for tip in tips:
            console.print(f"[yellow]* {escape(tip)}[/yellow]")


def display_mismatched(
    report: ReconciliationReport, src_label: str = "src", dst_label: str = "dst"
) -> None:
    """List matched tracks whose ratings differ."""
    console.print("\n[bold cyan]== Mismatched Ratings ==[/bold cyan]")
    for key, pair in report.mismatched:
        src_rating = pair.src.rating if pair.src else 0
        dst_rating = pair.dst.rating if pair.dst else 0
        console.print(escape(key))
        console.print(
            f"\trating {src_label}({src_rating})\t{dst_label}({dst_rating})"
        )
    console.print()


def display_apply_result(
    result: ApplyResult, what: str, dst_label: str, dst_url: Optional[str] = None
) -> None:
    """Summarize a write phase.

    Args:
        result: Result of the write phase
        what: What was copied, e.g. "Ratings"
        dst_label: Name of the destination library
        dst_url: Destination URL, shown in the dry-run hint
    """
    console.print(
        f"[bold cyan]== Copy {result.planned_count} {what} To {dst_label} =="
        "[/bold cyan]"
    )
    if result.dry_run:
        target = escape(dst_url or dst_label)
        console.print(f"[yellow]Set --no-dry-run to modify {target}[/yellow]\n")
        return

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Applied", str(result.applied))
    table.add_row("Failed", str(len(result.failures)))
    console.print(table)

    for key, error in result.failures:
        console.print(f"  [red]✗ {escape(key)}: {escape(error)}[/red]")
    console.print()


def display_skips(budget: SkipBudget) -> None:
    """Summarize skipped tracks."""
    if not budget.count:
        return
    limit = "unlimited" if budget.unlimited else str(budget.limit)
    console.print(
        f"[yellow]⚠️  {budget.count} track(s) skipped (limit {limit})[/yellow]"
    )


def display_error(message: str) -> None:
    """Print a fatal error."""
    console.print(f"\n[bold red]❌ {escape(message)}[/bold red]\n")


SUBSONIC_TIPS: List[str] = [
    "Verify that the libraries are configured for the same directory",
    "Set the library root options to the correct values",
    'In Navidrome Player Settings, configure "Report Real Path"',
]
