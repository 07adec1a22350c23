"""Test the command-line interface"""

from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from playlist_converter import __version__
from playlist_converter.cli import cli
from playlist_converter.core.config import (
    Config,
    MatchingConfig,
    OutputConfig,
    SpotifyConfig,
    YouTubeConfig,
)
from playlist_converter.matching.policy import TO_SPOTIFY, TO_YOUTUBE


YOUTUBE_URL = "https://www.youtube.com/playlist?list=PL123"
SPOTIFY_URL = "https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config(tmp_path):
    return Config(
        spotify=SpotifyConfig(client_id="id", client_secret="secret"),
        youtube=YouTubeConfig(),
        matching=MatchingConfig(),
        output=OutputConfig(log_directory=tmp_path),
    )


@pytest.fixture
def app(config, tmp_path):
    """Patch every external dependency of the CLI"""
    targets = (
        "load_config",
        "setup_logging",
        "shutdown_logging",
        "SpotifyClient",
        "build_ytmusic",
        "fetch_spotify_playlist",
        "fetch_youtube_playlist",
        "SpotifySearchProvider",
        "YouTubeSearchProvider",
        "SpotifyPlaylistWriter",
        "YouTubePlaylistWriter",
    )
    patchers = {name: patch(f"playlist_converter.cli.{name}") for name in targets}
    mocks = Mock(**{name: patcher.start() for name, patcher in patchers.items()})
    mocks.load_config.return_value = config
    mocks.setup_logging.return_value = tmp_path
    yield mocks
    for patcher in patchers.values():
        patcher.stop()


class TestCliBasics:
    """Test argument handling"""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_url_shows_help(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "--url" in result.output

    def test_unknown_url(self, runner):
        result = runner.invoke(cli, ["--url", "https://example.com/playlist/1"])
        assert result.exit_code == 2

    def test_timeout_must_be_positive(self, runner):
        result = runner.invoke(cli, ["--url", YOUTUBE_URL, "--timeout", "0"])
        assert result.exit_code == 2


class TestConversion:
    """Test full runs with patched platforms"""

    def test_dry_run_to_spotify(
        self, runner, app, fake_provider_cls, youtube_source, spotify_candidate
    ):
        app.fetch_youtube_playlist.return_value = ("Mix", [youtube_source])
        app.SpotifySearchProvider.return_value = fake_provider_cls(default=[spotify_candidate])

        result = runner.invoke(cli, ["--url", YOUTUBE_URL, "--dry-run"])

        assert result.exit_code == 0, result.output
        app.SpotifyClient.from_client_credentials.assert_called_once_with("id", "secret")
        app.SpotifyClient.from_oauth.assert_not_called()
        app.SpotifyPlaylistWriter.assert_not_called()

    def test_creates_spotify_playlist(
        self, runner, app, fake_provider_cls, youtube_source, spotify_candidate
    ):
        app.fetch_youtube_playlist.return_value = ("Mix", [youtube_source])
        app.SpotifySearchProvider.return_value = fake_provider_cls(default=[spotify_candidate])
        app.SpotifyPlaylistWriter.return_value.create.return_value = "https://open.spotify.com/playlist/new"

        result = runner.invoke(cli, ["--url", YOUTUBE_URL, "--name", "Road Trip", "--private"])

        assert result.exit_code == 0, result.output
        assert "https://open.spotify.com/playlist/new" in result.output
        app.SpotifyClient.from_oauth.assert_called_once()
        name, records = app.SpotifyPlaylistWriter.return_value.create.call_args.args
        assert name == "Road Trip"
        assert records[0].best_candidate == spotify_candidate
        assert app.SpotifyPlaylistWriter.return_value.create.call_args.kwargs == {"public": False}

    def test_dry_run_to_youtube(
        self, runner, app, fake_provider_cls, spotify_source, youtube_candidate
    ):
        app.fetch_spotify_playlist.return_value = ("Mix", [spotify_source])
        app.YouTubeSearchProvider.return_value = fake_provider_cls(default=[youtube_candidate])

        result = runner.invoke(cli, ["--url", SPOTIFY_URL, "--dry-run"])

        assert result.exit_code == 0, result.output
        app.YouTubePlaylistWriter.assert_not_called()

    def test_providers_use_policy_search_limit(
        self, runner, app, fake_provider_cls, youtube_source, spotify_source, spotify_candidate, youtube_candidate
    ):
        app.fetch_youtube_playlist.return_value = ("Mix", [youtube_source])
        app.fetch_spotify_playlist.return_value = ("Mix", [spotify_source])
        app.SpotifySearchProvider.return_value = fake_provider_cls(default=[spotify_candidate])
        app.YouTubeSearchProvider.return_value = fake_provider_cls(default=[youtube_candidate])

        assert runner.invoke(cli, ["--url", YOUTUBE_URL, "--dry-run"]).exit_code == 0
        assert runner.invoke(cli, ["--url", SPOTIFY_URL, "--dry-run"]).exit_code == 0

        assert app.SpotifySearchProvider.call_args.kwargs == {"limit": TO_SPOTIFY.search_limit}
        assert app.YouTubeSearchProvider.call_args.kwargs == {"limit": TO_YOUTUBE.search_limit}

    def test_youtube_destination_needs_auth_file(self, runner, app):
        result = runner.invoke(cli, ["--url", SPOTIFY_URL])

        assert result.exit_code == 1
        app.fetch_spotify_playlist.assert_not_called()

    def test_missing_spotify_credentials(self, runner, app, config):
        app.load_config.return_value = Config(
            spotify=SpotifyConfig(),
            youtube=config.youtube,
            matching=config.matching,
            output=config.output,
        )

        result = runner.invoke(cli, ["--url", YOUTUBE_URL, "--dry-run"])

        assert result.exit_code == 1
        assert "Spotify credentials missing" in result.output

    def test_empty_playlist(self, runner, app):
        app.fetch_youtube_playlist.return_value = ("Empty", [])

        result = runner.invoke(cli, ["--url", YOUTUBE_URL, "--dry-run"])

        assert result.exit_code == 2
        app.shutdown_logging.assert_called_once()
