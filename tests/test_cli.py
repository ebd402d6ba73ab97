"""Tests for the command-line interface."""

import plistlib
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from library_reconcile.cli.display import formatters
from library_reconcile.cli.main import cli
from library_reconcile.services import SubsonicError

SUBSONIC_ENV = {"SUBSONIC_USER": "me", "SUBSONIC_PASS": "secret"}


@pytest.fixture(autouse=True)
def plain_console(monkeypatch):
    """Render reports without colors or line wrapping."""
    monkeypatch.setattr(
        formatters, "console", Console(width=200, color_system=None, highlight=False)
    )


@pytest.fixture
def runner():
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def library_xml(tmp_path):
    """iTunes export with two rated tracks."""
    path = tmp_path / "Library.xml"
    tracks = {
        "1": {
            "Track ID": 1,
            "Name": "2112",
            "Location": "file://localhost/M:/Music/Rush/2112.mp3",
            "Rating": 80,
            "Play Date UTC": datetime(2023, 1, 2, 3, 4, 5),
            "Date Added": datetime(2020, 1, 1),
        },
        "2": {
            "Track ID": 2,
            "Name": "Close",
            "Location": "file://localhost/M:/Music/Yes/Close.mp3",
            "Rating": 100,
        },
    }
    with open(path, "wb") as f:
        plistlib.dump({"Tracks": tracks}, f)
    return path


@pytest.fixture
def subsonic_client():
    """Mock Subsonic client holding both tracks with lower ratings."""
    client = Mock()
    client.search3.side_effect = [
        [
            {"id": "s1", "path": "/music/Rush/2112.mp3", "userRating": 3},
            {"id": "s2", "path": "/music/Yes/Close.mp3", "userRating": 2},
        ],
        [],
    ]
    return client


class TestCli:
    """Test the command group."""

    def test_help(self, runner):
        """Test every command is registered."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("itunes2subsonic", "itunes2ampache", "subsonic2subsonic"):
            assert name in result.output


class TestItunes2Subsonic:
    """Test the itunes2subsonic command."""

    def test_report_without_server(self, runner, library_xml):
        """Test a run without a server reports every track missing."""
        result = runner.invoke(
            cli, ["itunes2subsonic", "--itunes-xml", str(library_xml)], env={}
        )

        assert result.exit_code == 0, result.output
        assert "== Missing Tracks ==" in result.output
        assert "== Missing Track Count 2 / (2 + 0) ==" in result.output
        assert "Missing count is significant" not in result.output

    def test_dry_run(self, runner, library_xml, subsonic_client):
        """Test mismatches are reported but nothing is written."""
        with patch(
            "library_reconcile.cli.commands.itunes2subsonic.init_subsonic",
            return_value=subsonic_client,
        ):
            result = runner.invoke(
                cli,
                [
                    "itunes2subsonic",
                    "--itunes-xml",
                    str(library_xml),
                    "--subsonic",
                    "https://music.example.com",
                ],
                env=SUBSONIC_ENV,
            )

        assert result.exit_code == 0, result.output
        assert "src='file://localhost/m:/' dst='/'" in result.output
        assert "== Missing Track Count 0 / (2 + 2) ==" in result.output
        assert "rating iTunes(4)" in result.output
        assert "Subsonic(3)" in result.output
        assert "Set --no-dry-run to modify https://music.example.com" in result.output
        subsonic_client.set_rating.assert_not_called()
        subsonic_client.scrobble.assert_not_called()

    def test_no_dry_run_writes(self, runner, library_xml, subsonic_client, tmp_path):
        """Test ratings, play dates and the created script are written."""
        created = tmp_path / "created.sql"
        with patch(
            "library_reconcile.cli.commands.itunes2subsonic.init_subsonic",
            return_value=subsonic_client,
        ):
            result = runner.invoke(
                cli,
                [
                    "itunes2subsonic",
                    "--itunes-xml",
                    str(library_xml),
                    "--subsonic",
                    "https://music.example.com",
                    "--no-dry-run",
                    "--created-file",
                    str(created),
                ],
                env=SUBSONIC_ENV,
            )

        assert result.exit_code == 0, result.output
        subsonic_client.set_rating.assert_any_call("s1", 4)
        subsonic_client.set_rating.assert_any_call("s2", 5)
        subsonic_client.scrobble.assert_called_once()
        assert subsonic_client.scrobble.call_args[0][0] == "s1"
        assert "WHERE id='s1';" in created.read_text()

    def test_short_dry_run_flag(self, runner, library_xml, subsonic_client):
        """Test -n turns a --no-dry-run invocation back into a dry run."""
        with patch(
            "library_reconcile.cli.commands.itunes2subsonic.init_subsonic",
            return_value=subsonic_client,
        ):
            result = runner.invoke(
                cli,
                [
                    "itunes2subsonic",
                    "--itunes-xml",
                    str(library_xml),
                    "--subsonic",
                    "https://music.example.com",
                    "--no-dry-run",
                    "-n",
                ],
                env=SUBSONIC_ENV,
            )

        assert result.exit_code == 0, result.output
        assert "Set --no-dry-run to modify" in result.output
        subsonic_client.set_rating.assert_not_called()

    def test_disjoint_server_warns(self, runner, library_xml):
        """Test a fetched server with none of the tracks shows the root tips."""
        client = Mock()
        client.search3.side_effect = [
            [{"id": "s9", "path": "/music/Other/Song.mp3", "userRating": 1}],
            [],
        ]
        with patch(
            "library_reconcile.cli.commands.itunes2subsonic.init_subsonic",
            return_value=client,
        ):
            result = runner.invoke(
                cli,
                [
                    "itunes2subsonic",
                    "--itunes-xml",
                    str(library_xml),
                    "--subsonic",
                    "https://music.example.com",
                    "--itunes-root",
                    "file://localhost/M:/Music/",
                    "--subsonic-root",
                    "/music/",
                ],
                env=SUBSONIC_ENV,
            )

        assert result.exit_code == 0, result.output
        assert "Missing count is significant" in result.output
        assert "Report Real Path" in result.output

    def test_skip_budget_exceeded(self, runner, library_xml, subsonic_client):
        """Test repeated write failures end the run with an error."""
        subsonic_client.set_rating.side_effect = SubsonicError("denied")
        with patch(
            "library_reconcile.cli.commands.itunes2subsonic.init_subsonic",
            return_value=subsonic_client,
        ):
            result = runner.invoke(
                cli,
                [
                    "itunes2subsonic",
                    "--itunes-xml",
                    str(library_xml),
                    "--subsonic",
                    "https://music.example.com",
                    "--no-dry-run",
                    "--skip-count",
                    "1",
                ],
                env=SUBSONIC_ENV,
            )

        assert result.exit_code == 1
        assert "Too many skipped tracks (2 > 1)" in result.output
        assert subsonic_client.set_rating.call_count == 2
        subsonic_client.scrobble.assert_not_called()

    def test_missing_password(self, runner, library_xml):
        """Test a server URL without credentials is refused."""
        result = runner.invoke(
            cli,
            [
                "itunes2subsonic",
                "--itunes-xml",
                str(library_xml),
                "--subsonic",
                "https://music.example.com",
            ],
            env={"SUBSONIC_USER": "me", "SUBSONIC_PASS": ""},
        )
        assert result.exit_code == 1
        assert "SUBSONIC_PASS" in result.output


class TestSubsonic2Subsonic:
    """Test the subsonic2subsonic command."""

    def test_requires_source_credentials(self, runner):
        """Test the source server needs its own credentials."""
        result = runner.invoke(
            cli,
            [
                "subsonic2subsonic",
                "--subsonic-src",
                "https://a.example.com",
                "--subsonic-dst",
                "https://b.example.com",
            ],
            env={**SUBSONIC_ENV, "SUBSONIC_SRC_USER": "", "SUBSONIC_SRC_PASS": ""},
        )
        assert result.exit_code == 1
        assert "SUBSONIC_SRC_USER" in result.output

    def test_copies_between_servers(self, runner):
        """Test ratings flow from the source server to the destination."""
        src_client = Mock()
        src_client.search3.side_effect = [
            [{"id": "a1", "path": "/srv/Rush/2112.mp3", "userRating": 5}],
            [],
        ]
        dst_client = Mock()
        dst_client.search3.side_effect = [
            [{"id": "b1", "path": "/data/Rush/2112.mp3", "userRating": 1}],
            [],
        ]
        env = {**SUBSONIC_ENV, "SUBSONIC_SRC_USER": "a", "SUBSONIC_SRC_PASS": "b"}

        with patch(
            "library_reconcile.cli.commands.subsonic2subsonic.init_subsonic",
            side_effect=[src_client, dst_client],
        ) as mock_init:
            result = runner.invoke(
                cli,
                [
                    "subsonic2subsonic",
                    "--subsonic-src",
                    "https://a.example.com",
                    "--subsonic-dst",
                    "https://b.example.com",
                    "--no-dry-run",
                ],
                env=env,
            )

        assert result.exit_code == 0, result.output
        assert mock_init.call_args_list[0][1]["password_auth"] is True
        dst_client.set_rating.assert_called_once_with("b1", 5)
        src_client.set_rating.assert_not_called()


class TestItunes2Ampache:
    """Test the itunes2ampache command."""

    def test_copies_ratings(self, runner, library_xml):
        """Test ratings are sent with the rate action."""
        client = Mock()
        client.songs.side_effect = [
            [
                {"id": 10, "filename": "/media/Rush/2112.mp3", "rating": 4},
                {"id": 11, "filename": "/media/Yes/Close.mp3", "rating": 0},
            ],
            [],
        ]
        with patch(
            "library_reconcile.cli.commands.itunes2ampache.init_ampache",
            return_value=client,
        ):
            result = runner.invoke(
                cli,
                [
                    "itunes2ampache",
                    "--itunes-xml",
                    str(library_xml),
                    "--ampache",
                    "https://ampache.example.com",
                    "--no-dry-run",
                ],
                env={"AMPACHE_USER": "me", "AMPACHE_PASS": "secret"},
            )

        assert result.exit_code == 0, result.output
        client.rate.assert_called_once_with("11", 5)
