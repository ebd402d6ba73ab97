"""SQL script that copies iTunes "Date Added" into Navidrome.

Navidrome has no API for a track's creation time, so the tool writes a
script to run against its SQLite database instead.
"""

import logging
from typing import Mapping, TextIO

from ..models import MatchedPair

logger = logging.getLogger(__name__)

HEADER = """\
-- sqlite3 navidrome.db < this_file.sql
-- Or if using Docker...
-- docker run --rm -i --user 0 -v navidrome_data:/data keinos/sqlite3:latest \
sqlite3 /data/navidrome.db < this_file.sql
"""


def _quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def write_created_sql(out: TextIO, by_path: Mapping[str, MatchedPair]) -> int:
    """Write UPDATE statements for every matched track with an added date.

    Args:
        out: Text stream to write to
        by_path: Joined library mapping

    Returns:
        Number of UPDATE statements written
    """
    out.write(HEADER)
    # One transaction, otherwise sqlite commits after every statement
    out.write("BEGIN TRANSACTION;\n")

    count = 0
    for key in sorted(by_path):
        pair = by_path[key]
        if pair.src is None or pair.dst is None or pair.src.added_at is None:
            continue

        out.write(
            "UPDATE media_file SET created_at = datetime("
            f"{int(pair.src.added_at.timestamp())}, 'unixepoch') "
            f"WHERE id={_quote(str(pair.dst.id))};\n"
        )
        count += 1

    out.write("COMMIT;\n")
    logger.info("Wrote %d created_at updates", count)
    return count
