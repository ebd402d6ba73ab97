"""Copy ratings from an iTunes library to Ampache."""

import logging
from pathlib import Path
from typing import Optional

import click

from ...config import get_config
from ...core import StaticLibrary
from ...services import AmpacheLibrary, ItunesLibrary
from .common import build_options, fatal_errors, reconcile_options, run_reconciliation
from .init import init_ampache

logger = logging.getLogger(__name__)

AMPACHE_TIPS = [
    "Verify that both libraries point at the same directory",
    "Set --itunes-root and --ampache-root to the correct values",
]


@click.command("itunes2ampache")
@click.option(
    "--itunes-xml",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the exported iTunes Library.xml",
)
@click.option("--ampache", "ampache_url", help="URL of the Ampache instance")
@click.option("--itunes-root", help="Library root in iTunes (inferred if omitted)")
@click.option("--ampache-root", help="Library root in Ampache (inferred if omitted)")
@reconcile_options
def itunes2ampache_command(
    itunes_xml: Path,
    ampache_url: Optional[str],
    itunes_root: Optional[str],
    ampache_root: Optional[str],
    dry_run: bool,
    skip_count: int,
    copy_unrated: bool,
    trials: int,
) -> None:
    """Compare an iTunes library with Ampache and copy ratings.

    Credentials come from AMPACHE_USER and AMPACHE_PASS; set AMPACHE_VERBOSE=1
    to log every API request.
    """
    with fatal_errors("itunes2ampache"):
        config = get_config()
        user, password = config.ampache_credentials(ampache_url)
        options = build_options(
            itunes_root, ampache_root, dry_run, skip_count, copy_unrated, trials
        )

        client = None
        if ampache_url:
            client = init_ampache(ampache_url, user, password, config)
            dst = AmpacheLibrary(client)
        else:
            dst = StaticLibrary("Ampache")

        run_reconciliation(
            ItunesLibrary(itunes_xml),
            dst,
            options,
            set_rating=client.rate if client else None,
            dst_url=ampache_url,
            tips=AMPACHE_TIPS,
            dst_fetched=client is not None,
        )
