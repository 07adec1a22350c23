"""
Spotify integration for playlist-converter.

Components:
    - SpotifyClient: Error-translating spotipy wrapper
    - SpotifySearchProvider: SearchProvider for converting into Spotify
    - fetch_spotify_playlist: Read a playlist as SourceTracks
    - SpotifyPlaylistWriter: Create a playlist from MatchRecords

Usage:
    from playlist_converter.spotify import SpotifyClient, SpotifySearchProvider

    client = SpotifyClient.from_client_credentials(client_id, client_secret)
    provider = SpotifySearchProvider(client)
"""

from playlist_converter.spotify.client import SpotifyClient
from playlist_converter.spotify.models import track_to_candidate, track_to_source
from playlist_converter.spotify.playlist import SpotifyPlaylistWriter, fetch_spotify_playlist
from playlist_converter.spotify.provider import SpotifySearchProvider

__all__ = [
    "SpotifyClient",
    "SpotifySearchProvider",
    "SpotifyPlaylistWriter",
    "fetch_spotify_playlist",
    "track_to_candidate",
    "track_to_source",
]
