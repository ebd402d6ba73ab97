"""iTunes / Music.app library export reader.

Reads the XML property list written by "File > Library > Export Library" and
exposes its tracks as inventory records. Ratings are stored as 0-100 and
converted to stars on the way in.
"""

import logging
import plistlib
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from ..core.fetch import FetchError, check_stop
from ..models import ITUNES_SCALE, InventoryRecord
from ..utils.progress import ProgressTracker

logger = logging.getLogger(__name__)


def _as_utc(value: Any) -> Optional[datetime]:
    """Attach UTC to the naive datetimes plistlib returns."""
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def track_to_record(track: Dict[str, Any]) -> Optional[InventoryRecord]:
    """Convert one plist track entry, or return None if it has no file."""
    location = track.get("Location")
    if not location:
        return None

    return InventoryRecord.from_native(
        id=int(track["Track ID"]),
        path=unquote(location),
        rating=track.get("Rating"),
        scale=ITUNES_SCALE,
        title=track.get("Name"),
        played_at=_as_utc(track.get("Play Date UTC")),
        added_at=_as_utc(track.get("Date Added")),
    )


class ItunesLibrary:
    """Tracks from an exported iTunes library file."""

    name = "iTunes"

    def __init__(self, xml_path: Path) -> None:
        """Initialize the library reader.

        Args:
            xml_path: Path to the exported Library.xml
        """
        self.xml_path = xml_path

    def load(self) -> Dict[str, Any]:
        """Parse the export file.

        Raises:
            FetchError: If the file cannot be read or parsed
        """
        try:
            with open(self.xml_path, "rb") as f:
                return plistlib.load(f)
        except (OSError, plistlib.InvalidFileException, ValueError) as e:
            raise FetchError(f"Failed to read library {self.xml_path}: {e}") from e

    def fetch_all(
        self,
        progress: Optional[ProgressTracker] = None,
        stop: Optional[threading.Event] = None,
    ) -> List[InventoryRecord]:
        """Return every track that has a file location."""
        library = self.load()
        check_stop(stop, self.name)

        records = []
        for track in library.get("Tracks", {}).values():
            record = track_to_record(track)
            if record is None:
                logger.debug("Skipping track without a file: %s", track.get("Name"))
                continue
            records.append(record)

        if progress:
            progress.advance(len(records))
        logger.info("iTunes: track count: %d", len(records))
        return records
