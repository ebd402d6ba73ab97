"""Command-line interface for the library reconciliation tool.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    itunes2ampache_command,
    itunes2subsonic_command,
    subsonic2subsonic_command,
)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: str, log_file: Optional[str]) -> None:
    """Library Reconcile.

    Finds tracks missing from one of two music libraries and copies ratings
    from a source library to a destination library.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()
    ctx.ensure_object(dict)


cli.add_command(itunes2subsonic_command)
cli.add_command(itunes2ampache_command)
cli.add_command(subsonic2subsonic_command)


if __name__ == "__main__":
    cli()
