"""Ampache JSON API client and library adapter."""

import hashlib
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Union

import requests

from ..core.fetch import check_stop
from ..models import InventoryRecord
from ..utils.progress import ProgressTracker

logger = logging.getLogger(__name__)

API_VERSION = "6.0.0"
SONGS_PAGE_SIZE = 2000


class AmpacheError(Exception):
    """Raised for transport failures and Ampache error responses."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        """Initialize the error.

        Args:
            message: Error description
            code: Ampache error code, if the server returned one
        """
        super().__init__(message)
        self.code = code


def passphrase(password: str, timestamp: int) -> str:
    """Build the handshake passphrase: sha256(timestamp + sha256(password))."""
    key = hashlib.sha256(password.encode("utf-8")).hexdigest()
    return hashlib.sha256(f"{timestamp}{key}".encode("utf-8")).hexdigest()


class AmpacheClient:
    """Minimal Ampache API client."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        verbose: int = 0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server URL, e.g. https://ampache.example.com
            timeout: Request timeout in seconds
            verbose: Log every request at DEBUG when greater than zero
            session: Optional requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verbose = verbose
        self.session = session or requests.Session()
        self.auth: Optional[str] = None

    @property
    def endpoint(self) -> str:
        """JSON server endpoint."""
        return f"{self.base_url}/server/json.server.php"

    def request(self, action: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Call an API action and return the decoded response.

        Raises:
            AmpacheError: On transport errors or an error response
        """
        query: Dict[str, Any] = {"action": action}
        if self.auth and action != "handshake":
            query["auth"] = self.auth
        if params:
            query.update(params)

        if self.verbose > 0:
            shown = {k: v for k, v in query.items() if k != "auth"}
            logger.debug("Ampache %s %s", action, shown)

        try:
            response = self.session.get(
                self.endpoint, params=query, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.RequestException as e:
            raise AmpacheError(f"{action} request failed: {e}") from e
        except ValueError as e:
            raise AmpacheError(f"{action} returned an invalid response") from e

        if isinstance(body, dict) and "error" in body:
            error = body["error"]
            raise AmpacheError(
                f"{action} failed: {error.get('errorMessage', 'unknown error')}",
                code=error.get("errorCode"),
            )
        return body

    def authenticate(self, user: str, password: str) -> None:
        """Perform the password handshake and keep the session token.

        Raises:
            AmpacheError: If the handshake is rejected
        """
        timestamp = int(time.time())
        body = self.request(
            "handshake",
            {
                "auth": passphrase(password, timestamp),
                "timestamp": timestamp,
                "user": user,
                "version": API_VERSION,
            },
        )
        if "auth" not in body:
            raise AmpacheError("handshake did not return a session token")
        self.auth = body["auth"]
        logger.debug("Authenticated with Ampache at %s", self.base_url)

    def songs(
        self, offset: int = 0, limit: int = SONGS_PAGE_SIZE
    ) -> List[Dict[str, Any]]:
        """Return one page of songs."""
        body = self.request("songs", {"offset": offset, "limit": limit})
        songs: List[Dict[str, Any]] = body.get("song", [])
        return songs

    def rate(self, song_id: Union[int, str], rating: int) -> None:
        """Set the rating of a song (0 clears it)."""
        self.request("rate", {"type": "song", "id": song_id, "rating": rating})


def song_to_record(song: Dict[str, Any]) -> InventoryRecord:
    """Convert an Ampache song entry into an inventory record."""
    return InventoryRecord(
        id=str(song["id"]),
        path=song.get("filename", ""),
        rating=song.get("rating"),
        title=song.get("title") or song.get("name"),
    )


class AmpacheLibrary:
    """All songs of an Ampache server."""

    name = "Ampache"

    def __init__(self, client: AmpacheClient, page_size: int = SONGS_PAGE_SIZE):
        """Initialize the library adapter.

        Args:
            client: Authenticated Ampache client
            page_size: Songs requested per page
        """
        self.client = client
        self.page_size = page_size

    def fetch_all(
        self,
        progress: Optional[ProgressTracker] = None,
        stop: Optional[threading.Event] = None,
    ) -> List[InventoryRecord]:
        """Page through the songs action until an empty page comes back."""
        records: List[InventoryRecord] = []
        offset = 0
        while True:
            check_stop(stop, self.name)
            songs = self.client.songs(offset=offset, limit=self.page_size)
            if not songs:
                break

            records.extend(song_to_record(s) for s in songs)
            offset += len(songs)
            if progress:
                progress.advance(len(songs))

        logger.info("Ampache: track count %d", len(records))
        return records
