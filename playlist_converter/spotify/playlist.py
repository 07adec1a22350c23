"""
Reading and writing Spotify playlists.

fetch_spotify_playlist() turns a playlist URL into SourceTracks for the
matcher (converting from Spotify). SpotifyPlaylistWriter creates the
destination playlist from match records (converting to Spotify).
"""

from typing import Iterable

from playlist_converter.core.exceptions import PlaylistError, SpotifyError
from playlist_converter.core.logger import get_logger
from playlist_converter.matching.models import MatchRecord, SourceTrack
from playlist_converter.spotify.client import SpotifyClient
from playlist_converter.spotify.models import track_to_source, track_uri
from playlist_converter.utils import extract_spotify_playlist_id


logger = get_logger(__name__)


DEFAULT_DESCRIPTION = "Converted with playlist-converter"


def fetch_spotify_playlist(client: SpotifyClient, url: str) -> tuple[str, list[SourceTrack]]:
    """
    Fetch a Spotify playlist as source tracks.

    Args:
        client: Spotify client. Private playlists need a user context.
        url: Playlist URL, URI or ID.

    Returns:
        (playlist name, tracks in playlist order). Removed tracks and
        podcast episodes are skipped.

    Raises:
        PlaylistError: URL has no playlist ID, or the playlist cannot be read.
    """
    playlist_id = extract_spotify_playlist_id(url) if ("/" in url or ":" in url) else url
    if not playlist_id:
        raise PlaylistError(
            f"Not a Spotify playlist URL: {url}",
            details={"url": url}
        )

    try:
        playlist_data = client.playlist(playlist_id)
        items = client.playlist_all_items(playlist_id)
    except SpotifyError as e:
        raise PlaylistError(
            f"Could not read Spotify playlist: {e.message}",
            details={"url": url, **e.details}
        ) from e

    tracks = []
    skipped = 0
    for item in items:
        track_data = (item or {}).get("track")
        track = track_to_source(track_data) if track_data else None
        if track is None:
            skipped += 1
            continue
        tracks.append(track)

    name = playlist_data.get("name") or "Spotify playlist"
    logger.info(f"Fetched {len(tracks)} tracks from Spotify playlist '{name}'")
    if skipped:
        logger.debug(f"Skipped {skipped} unavailable items or episodes")
    return name, tracks


class SpotifyPlaylistWriter:
    """
    Creates Spotify playlists from match records.

    Requires a client with a user context (OAuth or bearer token).

    Example:
        writer = SpotifyPlaylistWriter(client)
        url = writer.create("Road Trip", records, public=False)
    """

    def __init__(self, client: SpotifyClient) -> None:
        self._client = client

    def create(
        self,
        name: str,
        records: Iterable[MatchRecord],
        public: bool = True,
        description: str = DEFAULT_DESCRIPTION
    ) -> str:
        """
        Create a playlist holding every found record, in order.

        Args:
            name: Playlist name.
            records: Match records; unmatched ones are skipped.
            public: Playlist visibility.
            description: Playlist description.

        Returns:
            URL of the new playlist.

        Raises:
            PlaylistError: Creation or adding tracks failed.
        """
        uris = [
            track_uri(record.best_candidate.external_id)
            for record in records
            if record.found and record.best_candidate is not None
        ]

        try:
            playlist = self._client.create_playlist(name, public=public, description=description)
            playlist_id = playlist["id"]
            batches = self._client.add_playlist_items(playlist_id, uris)
        except SpotifyError as e:
            raise PlaylistError(
                f"Could not create Spotify playlist: {e.message}",
                details={"name": name, **e.details}
            ) from e

        url = playlist.get("external_urls", {}).get("spotify") or f"https://open.spotify.com/playlist/{playlist_id}"
        logger.info(f"Created Spotify playlist '{name}' with {len(uris)} tracks ({batches} batches)")
        return url
