"""Tests for the Subsonic client and library adapter."""

import hashlib
import threading
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from library_reconcile.core.fetch import FetchCancelledError
from library_reconcile.services.subsonic_service import (
    API_VERSION,
    SubsonicClient,
    SubsonicError,
    SubsonicLibrary,
    song_to_record,
)


def ok_response(**body):
    """Mock HTTP response carrying a successful Subsonic body."""
    response = Mock()
    response.json.return_value = {"subsonic-response": {"status": "ok", **body}}
    return response


@pytest.fixture
def session():
    """Mock requests session."""
    session = Mock(spec=requests.Session)
    session.get.return_value = ok_response()
    return session


@pytest.fixture
def client(session):
    """Subsonic client using the mock session."""
    return SubsonicClient(
        "https://music.example.com/", "me", "secret", session=session
    )


class TestSubsonicClient:
    """Test SubsonicClient."""

    def test_request_url_and_common_params(self, client, session):
        """Test the endpoint URL and protocol parameters."""
        client.authenticate()

        url = session.get.call_args[0][0]
        params = session.get.call_args[1]["params"]
        assert url == "https://music.example.com/rest/ping.view"
        assert params["u"] == "me"
        assert params["v"] == API_VERSION
        assert params["f"] == "json"
        assert params["c"] == "library-reconcile"

    def test_token_auth(self, client, session):
        """Test the salted token is md5(password + salt)."""
        client.authenticate()

        params = session.get.call_args[1]["params"]
        expected = hashlib.md5(("secret" + params["s"]).encode()).hexdigest()
        assert params["t"] == expected
        assert "p" not in params

    def test_password_auth(self, session):
        """Test hex-encoded password authentication."""
        client = SubsonicClient(
            "https://x", "me", "secret", password_auth=True, session=session
        )
        client.authenticate()

        params = session.get.call_args[1]["params"]
        assert params["p"] == "enc:736563726574"
        assert "t" not in params

    def test_failed_status(self, client, session):
        """Test a failed response raises with the server's code."""
        session.get.return_value.json.return_value = {
            "subsonic-response": {
                "status": "failed",
                "error": {"code": 40, "message": "Wrong username or password"},
            }
        }
        with pytest.raises(SubsonicError, match="Wrong username") as exc_info:
            client.authenticate()
        assert exc_info.value.code == 40

    def test_http_error(self, client, session):
        """Test transport errors are wrapped."""
        session.get.return_value.raise_for_status.side_effect = (
            requests.exceptions.HTTPError("500 Server Error")
        )
        with pytest.raises(SubsonicError, match="500"):
            client.set_rating("1", 3)

    def test_invalid_body(self, client, session):
        """Test a body without the response envelope is rejected."""
        session.get.return_value.json.return_value = {"unexpected": True}
        with pytest.raises(SubsonicError, match="invalid response"):
            client.authenticate()

    def test_search3(self, client, session):
        """Test paging parameters and song extraction."""
        session.get.return_value = ok_response(
            searchResult3={"song": [{"id": "1", "path": "a.mp3"}]}
        )

        songs = client.search3(song_count=10, song_offset=20)

        params = session.get.call_args[1]["params"]
        assert params["query"] == '""'
        assert params["songCount"] == 10
        assert params["songOffset"] == 20
        assert params["artistCount"] == 0
        assert songs == [{"id": "1", "path": "a.mp3"}]

    def test_search3_empty_result(self, client, session):
        """Test an empty search result has no songs."""
        session.get.return_value = ok_response(searchResult3={})
        assert client.search3() == []

    def test_set_rating(self, client, session):
        """Test setRating parameters."""
        client.set_rating("42", 5)
        params = session.get.call_args[1]["params"]
        assert session.get.call_args[0][0].endswith("/rest/setRating.view")
        assert params["id"] == "42"
        assert params["rating"] == 5

    def test_scrobble_time_in_milliseconds(self, client, session):
        """Test the play time is sent in epoch milliseconds."""
        client.scrobble("42", datetime(2020, 1, 1, tzinfo=timezone.utc))
        params = session.get.call_args[1]["params"]
        assert params["time"] == 1577836800000
        assert params["submission"] == "true"


class TestSubsonicLibrary:
    """Test SubsonicLibrary."""

    def test_song_to_record(self):
        """Test song entries become records."""
        record = song_to_record(
            {"id": 7, "path": "Rush/2112.mp3", "userRating": 4, "title": "2112"}
        )
        assert record.id == "7"
        assert record.path == "Rush/2112.mp3"
        assert record.rating == 4

    def test_unrated_song(self):
        """Test songs without userRating are unrated."""
        assert song_to_record({"id": "1", "path": "a.mp3"}).rating == 0

    def test_pages_until_empty(self):
        """Test every page is fetched in order."""
        client = Mock()
        client.search3.side_effect = [
            [{"id": "1", "path": "a.mp3"}, {"id": "2", "path": "b.mp3"}],
            [{"id": "3", "path": "c.mp3"}],
            [],
        ]
        library = SubsonicLibrary(client, page_size=2)

        records = library.fetch_all()

        assert [r.id for r in records] == ["1", "2", "3"]
        offsets = [c[1]["song_offset"] for c in client.search3.call_args_list]
        assert offsets == [0, 2, 3]

    def test_stop_between_pages(self):
        """Test a set stop event cancels the fetch."""
        client = Mock()
        stop = threading.Event()
        stop.set()
        with pytest.raises(FetchCancelledError):
            SubsonicLibrary(client).fetch_all(stop=stop)
        client.search3.assert_not_called()
