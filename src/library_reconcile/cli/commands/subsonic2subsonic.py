"""Copy ratings from one Subsonic server to another."""

import logging
from typing import Optional

import click

from ...config import get_config
from ...services import SubsonicLibrary
from ..display import SUBSONIC_TIPS
from .common import build_options, fatal_errors, reconcile_options, run_reconciliation
from .init import init_subsonic

logger = logging.getLogger(__name__)


@click.command("subsonic2subsonic")
@click.option(
    "--subsonic-src", "src_url", required=True, help="URL of the instance to read"
)
@click.option(
    "--subsonic-dst", "dst_url", required=True, help="URL of the instance to write"
)
@click.option("--subsonic-src-root", help="Library root on the read instance")
@click.option("--subsonic-dst-root", help="Library root on the write instance")
@reconcile_options
def subsonic2subsonic_command(
    src_url: str,
    dst_url: str,
    subsonic_src_root: Optional[str],
    subsonic_dst_root: Optional[str],
    dry_run: bool,
    skip_count: int,
    copy_unrated: bool,
    trials: int,
) -> None:
    r"""Compare two Subsonic servers and copy ratings from src to dst.

    \b
    Source credentials: SUBSONIC_SRC_USER, SUBSONIC_SRC_PASS
    Destination credentials: SUBSONIC_USER, SUBSONIC_PASS

    Library roots are inferred when neither root option is given.
    """
    with fatal_errors("subsonic2subsonic"):
        config = get_config()
        src_user, src_pass = config.subsonic_src_credentials()
        dst_user, dst_pass = config.subsonic_credentials(dst_url, required=True)
        options = build_options(
            subsonic_src_root,
            subsonic_dst_root,
            dry_run,
            skip_count,
            copy_unrated,
            trials,
        )

        src_client = init_subsonic(
            src_url, src_user, src_pass, config, password_auth=True
        )
        dst_client = init_subsonic(dst_url, dst_user, dst_pass, config)

        run_reconciliation(
            SubsonicLibrary(src_client, name="Src"),
            SubsonicLibrary(dst_client, name="Dst"),
            options,
            set_rating=dst_client.set_rating,
            dst_url=dst_url,
            tips=SUBSONIC_TIPS,
        )
