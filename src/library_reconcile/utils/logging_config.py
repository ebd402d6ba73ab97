"""Logging configuration for the library reconciliation tool.

Reports are printed to stdout, so log output always goes to stderr. Colors
are only used when stderr is a terminal.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional, TextIO

PACKAGE_LOGGER = "library_reconcile"

# HTTP clients that log every request at DEBUG
NOISY_LOGGERS = ("urllib3", "requests", "charset_normalizer")

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(component)-20s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(component)s:%(lineno)d %(message)s"


class ComponentFormatter(logging.Formatter):
    """Formatter that exposes the logger name without the package prefix."""

    def format(self, record: Any) -> str:
        """Format the record with a ``component`` field."""
        name = record.name
        if name.startswith(PACKAGE_LOGGER + "."):
            name = name[len(PACKAGE_LOGGER) + 1 :]
        record.component = name
        return super().format(record)


class ColoredFormatter(ComponentFormatter):
    """Component formatter that colors the level name."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: Any) -> str:
        """Format the record with a colored level name."""
        color = self.COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        # Other handlers must still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        return super().format(record)


def _console_handler(level: int, stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    is_tty = getattr(stream, "isatty", lambda: False)()
    formatter_class = ColoredFormatter if is_tty else ComponentFormatter
    handler.setFormatter(formatter_class(fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(
    log_file: Path, level: int, max_file_size: int, backup_count: int
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        ComponentFormatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure the root logger for a command run.

    Replaces any handlers left from an earlier run in the same process.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write logs to this file, rotated by size
        console_output: Write logs to stderr
        max_file_size: Bytes per log file before rotating
        backup_count: Rotated files to keep
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)

    if console_output:
        root_logger.addHandler(_console_handler(level, sys.stderr))
    if log_file:
        root_logger.addHandler(
            _file_handler(log_file, level, max_file_size, backup_count)
        )

    logger = logging.getLogger(__name__)
    logger.debug("Logging at %s", logging.getLevelName(level))
    if log_file:
        logger.info("Writing log file %s", log_file)


def configure_third_party_loggers(level: int = logging.WARNING) -> None:
    """Keep HTTP client loggers quiet unless they have something to say."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)
