"""Copy ratings and play dates from an iTunes library to Subsonic.

Paths are compared in lower case because iTunes on Windows does not notice
when only the casing of a file changes.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ...config import get_config
from ...core import StaticLibrary
from ...services import ItunesLibrary, SubsonicLibrary, write_created_sql
from ..display import SUBSONIC_TIPS, console, display_apply_result
from .common import build_options, fatal_errors, reconcile_options, run_reconciliation
from .init import init_subsonic

logger = logging.getLogger(__name__)


@click.command("itunes2subsonic")
@click.option(
    "--itunes-xml",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the exported iTunes Library.xml",
)
@click.option("--subsonic", "subsonic_url", help="URL of the Subsonic instance")
@click.option("--itunes-root", help="Library root in iTunes (inferred if omitted)")
@click.option("--subsonic-root", help="Library root in Subsonic (inferred if omitted)")
@click.option(
    "--update-played/--no-update-played",
    default=True,
    show_default=True,
    help="Copy the last played time",
)
@click.option(
    "--created-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Write SQL statements that set Navidrome's created time to this file",
)
@reconcile_options
def itunes2subsonic_command(
    itunes_xml: Path,
    subsonic_url: Optional[str],
    itunes_root: Optional[str],
    subsonic_root: Optional[str],
    update_played: bool,
    created_file: Optional[Path],
    dry_run: bool,
    skip_count: int,
    copy_unrated: bool,
    trials: int,
) -> None:
    r"""Compare an iTunes library with Subsonic and copy ratings.

    \b
    Credentials come from SUBSONIC_USER and SUBSONIC_PASS.
    Without --subsonic only the iTunes side is reported.

    Examples:
        library-reconcile itunes2subsonic --itunes-xml Library.xml
        library-reconcile itunes2subsonic --itunes-xml Library.xml \
            --subsonic https://music.example.com --no-dry-run
    """
    with fatal_errors("itunes2subsonic"):
        config = get_config()
        user, password = config.subsonic_credentials(subsonic_url)
        options = build_options(
            itunes_root, subsonic_root, dry_run, skip_count, copy_unrated, trials
        )

        client = None
        if subsonic_url:
            client = init_subsonic(subsonic_url, user, password, config)
            dst = SubsonicLibrary(client)
        else:
            dst = StaticLibrary("Subsonic")

        engine, report = run_reconciliation(
            ItunesLibrary(itunes_xml),
            dst,
            options,
            set_rating=client.set_rating if client else None,
            dst_url=subsonic_url,
            tips=SUBSONIC_TIPS,
            dst_fetched=client is not None,
        )

        if client and update_played:
            result = engine.apply_play_dates(report, client.scrobble)
            display_apply_result(result, "Play Dates", dst.name, subsonic_url)

        if created_file:
            with open(created_file, "w", encoding="utf-8") as f:
                count = write_created_sql(f, report.by_path)
            console.print(
                f"[green]✓ Wrote {count} created time updates to "
                f"{created_file}[/green]"
            )
