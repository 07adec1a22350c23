"""
YouTube integration for playlist-converter.

Components:
    - YouTubeSearchProvider: SearchProvider for converting into YouTube
    - fetch_youtube_playlist: Read a playlist as SourceTracks
    - YouTubePlaylistWriter: Create a playlist from MatchRecords
    - parse_duration / parse_view_count: ytmusicapi metadata parsing
"""

from playlist_converter.youtube.models import (
    parse_duration,
    parse_view_count,
    playlist_item_to_source,
    video_to_candidate,
)
from playlist_converter.youtube.playlist import YouTubePlaylistWriter, fetch_youtube_playlist
from playlist_converter.youtube.provider import YouTubeSearchProvider, build_ytmusic

__all__ = [
    "YouTubeSearchProvider",
    "YouTubePlaylistWriter",
    "build_ytmusic",
    "fetch_youtube_playlist",
    "parse_duration",
    "parse_view_count",
    "playlist_item_to_source",
    "video_to_candidate",
]
