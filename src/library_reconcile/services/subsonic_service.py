"""Subsonic API client and library adapter.

Works against any server speaking the Subsonic REST API (Navidrome, Gonic,
Airsonic). Navidrome only reports real file paths when "Report Real Path" is
enabled in the player settings.
"""

import hashlib
import logging
import secrets
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import requests

from ..core.fetch import check_stop
from ..models import InventoryRecord
from ..utils.progress import ProgressTracker

logger = logging.getLogger(__name__)

API_VERSION = "1.16.1"
DEFAULT_CLIENT_NAME = "library-reconcile"
SEARCH_PAGE_SIZE = 400
# Navidrome and most other servers treat an empty quoted query as "everything"
SEARCH_ALL = '""'


class SubsonicError(Exception):
    """Raised for transport failures and failed Subsonic responses."""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        """Initialize the error.

        Args:
            message: Error description
            code: Subsonic error code, if the server returned one
        """
        super().__init__(message)
        self.code = code


class SubsonicClient:
    """Minimal Subsonic REST client."""

    def __init__(
        self,
        base_url: str,
        user: str,
        password: str,
        client_name: str = DEFAULT_CLIENT_NAME,
        password_auth: bool = False,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server URL, e.g. https://music.example.com
            user: Subsonic user name
            password: Subsonic password
            client_name: Client identifier sent with every request
            password_auth: Send the hex-encoded password instead of a salted
                token, for servers that do not support token auth
            timeout: Request timeout in seconds
            session: Optional requests session
        """
        self.base_url = base_url.rstrip("/")
        self.user = user
        self._password = password
        self.client_name = client_name
        self.password_auth = password_auth
        self.timeout = timeout
        self.session = session or requests.Session()

    def _auth_params(self) -> Dict[str, str]:
        if self.password_auth:
            return {"p": "enc:" + self._password.encode("utf-8").hex()}

        salt = secrets.token_hex(6)
        token = hashlib.md5(  # nosec B324 - required by the Subsonic protocol
            (self._password + salt).encode("utf-8")
        ).hexdigest()
        return {"t": token, "s": salt}

    def request(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Call a Subsonic endpoint and return the response body.

        Raises:
            SubsonicError: On transport errors or a failed response
        """
        query: Dict[str, Any] = {
            "u": self.user,
            "v": API_VERSION,
            "c": self.client_name,
            "f": "json",
        }
        query.update(self._auth_params())
        if params:
            query.update(params)

        url = f"{self.base_url}/rest/{endpoint}.view"
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()["subsonic-response"]
        except requests.exceptions.RequestException as e:
            raise SubsonicError(f"{endpoint} request failed: {e}") from e
        except (KeyError, ValueError) as e:
            raise SubsonicError(f"{endpoint} returned an invalid response") from e

        if body.get("status") != "ok":
            error = body.get("error", {})
            raise SubsonicError(
                f"{endpoint} failed: {error.get('message', 'unknown error')}",
                code=error.get("code"),
            )
        return body

    def authenticate(self) -> None:
        """Check the credentials with a ping.

        Raises:
            SubsonicError: If the server rejects the credentials
        """
        self.request("ping")
        logger.debug("Authenticated with Subsonic at %s", self.base_url)

    def search3(
        self,
        query: str = SEARCH_ALL,
        song_count: int = SEARCH_PAGE_SIZE,
        song_offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Return one page of songs matching ``query``."""
        body = self.request(
            "search3",
            {
                "query": query,
                "songCount": song_count,
                "songOffset": song_offset,
                "artistCount": 0,
                "albumCount": 0,
            },
        )
        songs: List[Dict[str, Any]] = body.get("searchResult3", {}).get("song", [])
        return songs

    def set_rating(self, song_id: Union[int, str], rating: int) -> None:
        """Set the user rating (0 clears it)."""
        self.request("setRating", {"id": song_id, "rating": rating})

    def scrobble(self, song_id: Union[int, str], played_at: datetime) -> None:
        """Register a play at the given time."""
        self.request(
            "scrobble",
            {
                "id": song_id,
                "time": int(played_at.timestamp() * 1000),
                "submission": "true",
            },
        )


def song_to_record(song: Dict[str, Any]) -> InventoryRecord:
    """Convert a Subsonic song entry into an inventory record."""
    return InventoryRecord(
        id=str(song["id"]),
        path=song.get("path", ""),
        rating=song.get("userRating"),
        title=song.get("title"),
    )


class SubsonicLibrary:
    """All songs of a Subsonic server."""

    def __init__(
        self,
        client: SubsonicClient,
        name: str = "Subsonic",
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> None:
        """Initialize the library adapter.

        Args:
            client: Authenticated Subsonic client
            name: Name used in logs and reports
            page_size: Songs requested per search3 page
        """
        self.client = client
        self.name = name
        self.page_size = page_size

    def fetch_all(
        self,
        progress: Optional[ProgressTracker] = None,
        stop: Optional[threading.Event] = None,
    ) -> List[InventoryRecord]:
        """Page through search3 until the server returns an empty page."""
        records: List[InventoryRecord] = []
        offset = 0
        while True:
            check_stop(stop, self.name)
            songs = self.client.search3(song_count=self.page_size, song_offset=offset)
            if not songs:
                break

            records.extend(song_to_record(s) for s in songs)
            offset += len(songs)
            if progress:
                progress.advance(len(songs))

        logger.info("%s: track count %d", self.name, len(records))
        return records
