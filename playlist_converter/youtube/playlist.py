"""
Reading and writing YouTube playlists through ytmusicapi.

Reading works anonymously for public playlists. Creating a playlist needs
a YTMusic client built from an auth file.
"""

from typing import Iterable

from ytmusicapi import YTMusic

from playlist_converter.core.exceptions import ConfigError, PlaylistError
from playlist_converter.core.logger import get_logger
from playlist_converter.matching.models import MatchRecord, SourceTrack
from playlist_converter.utils import extract_youtube_playlist_id
from playlist_converter.youtube.models import playlist_item_to_source
from playlist_converter.youtube.provider import YTMUSIC_ERRORS, translate_error


logger = get_logger(__name__)


YOUTUBE_PLAYLIST_URL = "https://music.youtube.com/playlist?list={playlist_id}"
DEFAULT_DESCRIPTION = "Converted with playlist-converter"
PRIVACY_STATUSES = ("PUBLIC", "PRIVATE", "UNLISTED")

# Videos per add_playlist_items request
ADD_BATCH_SIZE = 50


def fetch_youtube_playlist(ytmusic: YTMusic, url: str) -> tuple[str, list[SourceTrack]]:
    """
    Fetch a YouTube playlist as source tracks.

    Args:
        ytmusic: YTMusic client.
        url: Playlist URL with a list= parameter, or a bare playlist ID.

    Returns:
        (playlist name, tracks in playlist order). Deleted and private
        videos are skipped.

    Raises:
        PlaylistError: No playlist ID in the URL, or the playlist cannot be read.
    """
    playlist_id = extract_youtube_playlist_id(url) if "/" in url else url.strip()
    if not playlist_id:
        raise PlaylistError(
            f"Not a YouTube playlist URL: {url}",
            details={"url": url}
        )

    try:
        playlist = ytmusic.get_playlist(playlist_id, limit=None)
    except YTMUSIC_ERRORS as e:
        error = translate_error(e, "fetch playlist", {"url": url})
        raise PlaylistError(
            f"Could not read YouTube playlist: {error.message}",
            details=error.details
        ) from e

    tracks = []
    for item in playlist.get("tracks") or []:
        track = playlist_item_to_source(item)
        if track is not None:
            tracks.append(track)

    name = playlist.get("title") or "YouTube playlist"
    skipped = len(playlist.get("tracks") or []) - len(tracks)
    logger.info(f"Fetched {len(tracks)} tracks from YouTube playlist '{name}'")
    if skipped:
        logger.debug(f"Skipped {skipped} unavailable videos")
    return name, tracks


class YouTubePlaylistWriter:
    """
    Creates YouTube playlists from match records.

    Example:
        writer = YouTubePlaylistWriter(build_ytmusic("browser.json"), authenticated=True)
        url = writer.create("Road Trip", records, privacy="UNLISTED")
    """

    def __init__(self, ytmusic: YTMusic, authenticated: bool) -> None:
        self._ytmusic = ytmusic
        self._authenticated = authenticated

    def create(
        self,
        name: str,
        records: Iterable[MatchRecord],
        privacy: str = "PUBLIC",
        description: str = DEFAULT_DESCRIPTION
    ) -> str:
        """
        Create a playlist holding every found record, in order.

        Returns:
            URL of the new playlist.

        Raises:
            ConfigError: The client is anonymous or privacy is invalid.
            PlaylistError: The API refused to create or fill the playlist.
        """
        if not self._authenticated:
            raise ConfigError(
                "Creating a YouTube playlist requires a YouTube Music auth file "
                "(youtube.auth_file or YTMUSIC_AUTH_FILE)"
            )

        privacy = privacy.upper()
        if privacy not in PRIVACY_STATUSES:
            raise ConfigError(
                f"Invalid playlist privacy: {privacy}",
                details={"valid": list(PRIVACY_STATUSES)}
            )

        video_ids = [
            record.best_candidate.external_id
            for record in records
            if record.found and record.best_candidate is not None
        ]

        try:
            playlist_id = self._ytmusic.create_playlist(name, description, privacy_status=privacy)
        except YTMUSIC_ERRORS as e:
            raise PlaylistError(
                f"Could not create YouTube playlist: {e}",
                details={"name": name}
            ) from e

        # create_playlist returns the raw response instead of an ID on failure
        if not isinstance(playlist_id, str):
            raise PlaylistError(
                "YouTube Music did not return a playlist ID",
                details={"name": name, "response": playlist_id}
            )

        for start in range(0, len(video_ids), ADD_BATCH_SIZE):
            batch = video_ids[start:start + ADD_BATCH_SIZE]
            try:
                response = self._ytmusic.add_playlist_items(playlist_id, batch, duplicates=True)
            except YTMUSIC_ERRORS as e:
                raise PlaylistError(
                    f"Could not add videos to YouTube playlist: {e}",
                    details={"playlist_id": playlist_id, "offset": start}
                ) from e
            if isinstance(response, dict) and response.get("status") not in (None, "STATUS_SUCCEEDED"):
                raise PlaylistError(
                    "YouTube Music rejected the playlist update",
                    details={"playlist_id": playlist_id, "offset": start, "status": response.get("status")}
                )
            logger.debug(f"Added {len(batch)} videos to playlist {playlist_id} (offset {start})")

        logger.info(f"Created YouTube playlist '{name}' with {len(video_ids)} videos")
        return YOUTUBE_PLAYLIST_URL.format(playlist_id=playlist_id)
