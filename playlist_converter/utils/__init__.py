"""
Utility functions for playlist-converter.

This module provides small helpers used by the CLI and the platform
packages:
    - Platform detection for playlist URLs
    - Spotify / YouTube playlist ID extraction
    - Duration formatting

Usage:
    from playlist_converter.utils import detect_platform, extract_youtube_playlist_id

    detect_platform("https://music.youtube.com/playlist?list=PL123")  # "youtube"
"""

from urllib.parse import parse_qs, urlparse


SPOTIFY = "spotify"
YOUTUBE = "youtube"
UNKNOWN = "unknown"

YOUTUBE_HOSTS = (
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "youtu.be",
)


def detect_platform(url: str) -> str:
    """
    Detect which platform a playlist URL belongs to.

    Args:
        url: Playlist URL (or spotify: URI) as pasted by the user.

    Returns:
        "spotify", "youtube" or "unknown".

    Examples:
        detect_platform("https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M")  # "spotify"
        detect_platform("https://www.youtube.com/playlist?list=PLx0sYbCqOb8T")  # "youtube"
        detect_platform("https://example.com")  # "unknown"
    """
    if not url:
        return UNKNOWN

    url = url.strip()
    if url.lower().startswith("spotify:playlist:"):
        return SPOTIFY

    host = (urlparse(url).hostname or "").lower()
    if host == "open.spotify.com" and "/playlist/" in url:
        return SPOTIFY
    if host in YOUTUBE_HOSTS and extract_youtube_playlist_id(url):
        return YOUTUBE
    return UNKNOWN


def extract_spotify_id(url_or_id: str) -> str:
    """
    Extract a Spotify ID from a URL or URI, or return an ID as-is.

    Handles:
        - https://open.spotify.com/playlist/ID
        - https://open.spotify.com/playlist/ID?si=xxx
        - spotify:playlist:ID
        - Just the ID

    Examples:
        extract_spotify_id("https://open.spotify.com/track/abc123?si=xyz")  # "abc123"
        extract_spotify_id("spotify:track:abc123")  # "abc123"
    """
    url_or_id = url_or_id.strip()
    if url_or_id.startswith("spotify:"):
        return url_or_id.split(":")[-1]

    if "spotify.com" in url_or_id:
        url_or_id = url_or_id.split("?")[0]
        return url_or_id.rstrip("/").split("/")[-1]

    return url_or_id


def extract_spotify_playlist_id(url: str) -> str | None:
    """
    Extract the playlist ID from a Spotify playlist URL or URI.

    Returns:
        The playlist ID, or None if `url` is not a playlist link.
    """
    if "playlist" not in url:
        return None
    playlist_id = extract_spotify_id(url)
    return playlist_id or None


def extract_youtube_playlist_id(url: str) -> str | None:
    """
    Extract the `list=` parameter from a YouTube or YouTube Music URL.

    Examples:
        extract_youtube_playlist_id("https://music.youtube.com/playlist?list=PL123")  # "PL123"
        extract_youtube_playlist_id("https://www.youtube.com/watch?v=abc&list=PL9")  # "PL9"
        extract_youtube_playlist_id("https://www.youtube.com/watch?v=abc")  # None
    """
    query = parse_qs(urlparse(url.strip()).query)
    values = query.get("list")
    if not values or not values[0].strip():
        return None
    return values[0].strip()


def format_duration(duration_ms: int | None) -> str:
    """
    Format a duration in milliseconds as "M:SS" or "H:MM:SS".

    Examples:
        format_duration(225000)   # "3:45"
        format_duration(3750000)  # "1:02:30"
        format_duration(None)     # "?:??"
    """
    if duration_ms is None:
        return "?:??"
    seconds = duration_ms // 1000
    if seconds < 3600:
        return f"{seconds // 60}:{seconds % 60:02d}"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}:{minutes:02d}:{seconds % 60:02d}"
