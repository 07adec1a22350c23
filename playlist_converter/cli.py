"""
Command-line interface for playlist-converter.

This module implements the CLI using Click, converting a playlist from
YouTube to Spotify or from Spotify to YouTube. rich-click is used for the
output colors.

Usage:
    # Spotify -> YouTube (creates the playlist, needs youtube.auth_file)
    playlist-convert --url "https://open.spotify.com/playlist/..."

    # YouTube -> Spotify (opens a browser for Spotify login once)
    playlist-convert --url "https://www.youtube.com/playlist?list=..." --name "Road Trip"

    # Match only, print the summary, create nothing
    playlist-convert --url "https://..." --dry-run

Configuration:
    Reads config.yaml from the current directory (or --config) and a .env
    file. Spotify credentials are always needed: Spotify is either the
    source or the destination of every conversion.

Exit Codes:
    0    success
    1    configuration error or unexpected error
    2    playlist or provider error
    3    matching timed out or was cancelled
    130  interrupted by user
"""

import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "playlist-convert": [
        {
            "name": "Input",
            "options": ["--url", "--config"],
        },
        {
            "name": "Output Playlist",
            "options": ["--name", "--private", "--dry-run"],
        },
        {
            "name": "Matching",
            "options": ["--timeout"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from playlist_converter import __version__
from playlist_converter.core import (
    Config,
    ConfigError,
    ConverterError,
    MatchingCancelledError,
    MatchingProgressBar,
    PlaylistError,
    ProviderError,
    SpotifyError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from playlist_converter.core.logger import format_summary_message
from playlist_converter.matching import DirectionPolicy, MatchCache, MatchRecord, SourceTrack, TrackMatcher
from playlist_converter.spotify import (
    SpotifyClient,
    SpotifyPlaylistWriter,
    SpotifySearchProvider,
    fetch_spotify_playlist,
)
from playlist_converter.utils import SPOTIFY, UNKNOWN, YOUTUBE, detect_platform
from playlist_converter.youtube import (
    YouTubePlaylistWriter,
    YouTubeSearchProvider,
    build_ytmusic,
    fetch_youtube_playlist,
)

logger = get_logger(__name__)


PLATFORM_NAMES = {SPOTIFY: "Spotify", YOUTUBE: "YouTube"}


@click.command()
@click.option(
    "--url",
    type=str,
    default=None,
    metavar="<playlist-url>",
    help="Spotify or YouTube playlist URL"
)
@click.option(
    "--name",
    type=str,
    default=None,
    metavar="<name>",
    help="Name of the created playlist (default: source name)"
)
@click.option(
    "--private",
    is_flag=True,
    help="Create the playlist as private"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Match tracks and print the summary without creating a playlist"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    metavar="<seconds>",
    help="Stop matching after this many seconds"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    url: Optional[str],
    name: Optional[str],
    private: bool,
    dry_run: bool,
    config_path: Optional[Path],
    timeout: Optional[float],
    version: bool
) -> None:
    """
    playlist-converter: Convert playlists between YouTube and Spotify.

    The direction is detected from the URL: a Spotify playlist is converted
    to YouTube, a YouTube playlist to Spotify.

    \b
    BASIC USAGE:
        playlist-convert --url "https://open.spotify.com/playlist/..."
        playlist-convert --url "https://www.youtube.com/playlist?list=..."

    \b
    OPTIONS:
        playlist-convert --url "https://..." --name "Road Trip" --private
        playlist-convert --url "https://..." --dry-run --timeout 300
    """
    if version:
        click.echo(f"playlist-converter {__version__}")
        ctx.exit(0)

    if not url:
        click.echo(ctx.get_help())
        ctx.exit(0)

    source = detect_platform(url)
    if source == UNKNOWN:
        raise click.UsageError(
            "--url must be a Spotify playlist URL (containing '/playlist/') "
            "or a YouTube playlist URL (containing 'list=')"
        )

    _run_conversion({
        "url": url,
        "source": source,
        "destination": YOUTUBE if source == SPOTIFY else SPOTIFY,
        "name": name,
        "private": private,
        "dry_run": dry_run,
        "config_path": config_path,
        "timeout": timeout,
    })


def _run_conversion(options: dict) -> None:
    """
    Execute one conversion based on CLI options.

    1. Load configuration and set up logging
    2. Build the platform clients
    3. Fetch the source playlist
    4. Match every track on the destination platform
    5. Print the summary
    6. Create the destination playlist (unless dry run)

    Raises:
        SystemExit: On fatal errors (with appropriate exit code).
    """
    try:
        config = load_config(options["config_path"])

        logs_dir = setup_logging(config.output.log_directory)
        logger.info(f"playlist-converter {__version__} starting")

        source = options["source"]
        destination = options["destination"]
        creates_playlist = not options["dry_run"]

        spotify_client = _initialize_spotify(config, user_auth=creates_playlist and destination == SPOTIFY)
        ytmusic = build_ytmusic(config.youtube.auth_file, config.youtube.language)
        youtube_authenticated = config.youtube.auth_file is not None

        if creates_playlist and destination == YOUTUBE and not youtube_authenticated:
            raise ConfigError(
                "Creating a YouTube playlist requires youtube.auth_file in config.yaml "
                "(or YTMUSIC_AUTH_FILE). Use --dry-run to match without creating."
            )

        policy = config.matching.policy_for(destination)
        if source == SPOTIFY:
            playlist_name, tracks = fetch_spotify_playlist(spotify_client, options["url"])
            provider = YouTubeSearchProvider(ytmusic, limit=policy.search_limit)
        else:
            playlist_name, tracks = fetch_youtube_playlist(ytmusic, options["url"])
            provider = SpotifySearchProvider(spotify_client, limit=policy.search_limit)

        if not tracks:
            raise PlaylistError(
                f"Playlist '{playlist_name}' has no tracks to convert",
                details={"url": options["url"]}
            )

        logger.info(
            f"Converting '{playlist_name}' ({len(tracks)} tracks) "
            f"from {PLATFORM_NAMES[source]} to {PLATFORM_NAMES[destination]}"
        )

        records, cached = _match_tracks(config, provider, policy, tracks, options["timeout"])

        found = sum(1 for record in records if record.found)
        logger.info(format_summary_message(found, len(records), cached))
        if found < len(records):
            logger.info(f"Unmatched tracks listed in {logs_dir}")

        if not creates_playlist:
            logger.info("Dry run: no playlist created")
            return
        if found == 0:
            logger.warning("No tracks matched, playlist not created")
            return

        name = options["name"] or playlist_name
        if destination == SPOTIFY:
            playlist_url = SpotifyPlaylistWriter(spotify_client).create(
                name, records, public=not options["private"]
            )
        else:
            playlist_url = YouTubePlaylistWriter(ytmusic, youtube_authenticated).create(
                name, records, privacy="PRIVATE" if options["private"] else "PUBLIC"
            )

        logger.info(f"Playlist created: {playlist_url}")
        click.echo(playlist_url)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except MatchingCancelledError as e:
        click.echo(f"Matching stopped: {e.message}", err=True)
        found = sum(1 for record in e.records if record.found)
        logger.warning(f"Stopped early: {found} matched in {len(e.records)} completed tracks")
        sys.exit(3)

    except SpotifyError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("Check your client_id and client_secret in config.yaml", err=True)
        logger.error(f"Spotify error: {e.message}", exc_info=True)
        sys.exit(2)

    except (PlaylistError, ProviderError) as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(2)

    except ConverterError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(2)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        shutdown_logging()


def _initialize_spotify(config: Config, user_auth: bool) -> SpotifyClient:
    """
    Create the Spotify client.

    Args:
        config: Configuration with Spotify credentials.
        user_auth: Log in as a user (needed to create playlists).
                   Otherwise client credentials are enough.

    Raises:
        ConfigError: Spotify credentials missing.
        SpotifyError: If authentication fails.
    """
    if not config.spotify.is_configured:
        raise ConfigError(
            "Spotify credentials missing: set spotify.client_id and "
            "spotify.client_secret in config.yaml, or SPOTIFY_CLIENT_ID and "
            "SPOTIFY_CLIENT_SECRET in the environment"
        )

    if user_auth:
        return SpotifyClient.from_oauth(
            config.spotify.client_id,
            config.spotify.client_secret,
            config.spotify.redirect_uri
        )
    return SpotifyClient.from_client_credentials(
        config.spotify.client_id,
        config.spotify.client_secret
    )


def _match_tracks(
    config: Config,
    provider,
    policy: DirectionPolicy,
    tracks: list[SourceTrack],
    timeout: float | None
) -> tuple[list[MatchRecord], int]:
    """
    Run the matcher with a progress bar.

    Returns:
        (records in playlist order, number answered from cache)
    """
    matcher = TrackMatcher(provider, policy, cache=MatchCache(config.matching.cache_size))

    with MatchingProgressBar(len(tracks), description=f"To {PLATFORM_NAMES[policy.destination]}") as progress_bar:
        records = matcher.match_all(
            tracks,
            progress_bar=progress_bar,
            timeout=timeout if timeout is not None else config.matching.timeout
        )
    return records, progress_bar.cached


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `playlist-convert` from the
    command line.
    """
    cli()


if __name__ == "__main__":
    main()
