"""
playlist-converter: Convert playlists between YouTube and Spotify.

Reads a playlist on one platform, finds each track on the other platform
with a fuzzy matching engine, and creates the converted playlist.

Architecture:
    A conversion runs in three steps:

    READ (spotify/, youtube/): Fetch the source playlist
        - Detect the platform from the URL
        - Convert playlist items to SourceTracks

    MATCH (matching/): Find each track on the destination platform
        - Clean titles, extract artist and song from video titles
        - Build prioritized search queries
        - Score candidates on title, artist, duration, popularity
        - Stop early on a confident match, back off on rate limits

    WRITE (spotify/, youtube/): Create the destination playlist
        - Found tracks only, in source order

Modules:
    core/       - Configuration, logging, progress bar, exceptions
    matching/   - Matching engine and direction policies
    spotify/    - Spotify client, search provider, playlist reader/writer
    youtube/    - YouTube Music search provider, playlist reader/writer
    utils/      - URL platform detection and playlist ID parsing
    cli.py      - Command-line interface

Usage:
    Command Line:
        playlist-convert --url "https://open.spotify.com/playlist/..."
        playlist-convert --url "https://www.youtube.com/playlist?list=..." --dry-run

    Python API:
        from playlist_converter import SourceTrack, TrackMatcher, TO_SPOTIFY
        from playlist_converter.spotify import SpotifyClient, SpotifySearchProvider

        client = SpotifyClient.from_client_credentials(client_id, client_secret)
        matcher = TrackMatcher(SpotifySearchProvider(client), TO_SPOTIFY)
        record = matcher.match_track(SourceTrack(title="Ed Sheeran - Shape of You (Official Video)"))

Dependencies:
    - spotipy: Spotify API client
    - ytmusicapi: YouTube Music API client
    - rapidfuzz: Edit-distance similarity
    - click / rich-click: CLI
    - rich: Progress bar
    - tqdm: Progress-safe console logging
    - pyyaml / python-dotenv: Configuration
"""

__version__ = "0.1.0"
__author__ = "playlist-converter"
__license__ = "MIT"

# Convenience imports for common usage
from playlist_converter.core import (
    Config,
    ConfigError,
    ConverterError,
    MatchingCancelledError,
    PlaylistError,
    ProviderError,
    SpotifyError,
    YouTubeError,
    get_logger,
    load_config,
    setup_logging,
)
from playlist_converter.matching import (
    TO_SPOTIFY,
    TO_YOUTUBE,
    CandidateResult,
    DirectionPolicy,
    MatchCache,
    MatchRecord,
    SourceTrack,
    TrackMatcher,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "ConverterError",
    "ConfigError",
    "ProviderError",
    "SpotifyError",
    "YouTubeError",
    "PlaylistError",
    "MatchingCancelledError",
    # Matching
    "SourceTrack",
    "CandidateResult",
    "MatchRecord",
    "DirectionPolicy",
    "TO_SPOTIFY",
    "TO_YOUTUBE",
    "MatchCache",
    "TrackMatcher",
]
