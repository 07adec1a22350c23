"""
Conversions from Spotify API payloads to matching engine models.

Spotify track objects are the same shape whether they come from search
results or from playlist items, so one pair of functions covers both
directions:

    track_to_candidate: search result -> CandidateResult (converting to Spotify)
    track_to_source: playlist item -> SourceTrack (converting from Spotify)
"""

from typing import Any

from playlist_converter.matching.models import CandidateResult, SourceTrack


SPOTIFY_TRACK_URL = "https://open.spotify.com/track/{track_id}"


def track_url(track_id: str) -> str:
    return SPOTIFY_TRACK_URL.format(track_id=track_id)


def track_uri(track_id: str) -> str:
    return f"spotify:track:{track_id}"


def track_to_candidate(track_data: dict[str, Any]) -> CandidateResult | None:
    """
    Convert a Spotify track object into a CandidateResult.

    Args:
        track_data: Track object from a search response.

    Returns:
        CandidateResult, or None if the object has no ID or name
        (local files, unavailable tracks).

    Example:
        candidate = track_to_candidate(response["tracks"]["items"][0])
        candidate.url  # "https://open.spotify.com/track/7qiZfU4dY1lWllzX7mPBI3"
    """
    track_id = track_data.get("id")
    name = (track_data.get("name") or "").strip()
    if not track_id or not name:
        return None

    artists = tuple(a["name"] for a in track_data.get("artists", []) if a.get("name"))
    album = (track_data.get("album") or {}).get("name")

    return CandidateResult(
        external_id=track_id,
        url=track_data.get("external_urls", {}).get("spotify") or track_url(track_id),
        title=name,
        artists=artists,
        duration_ms=track_data.get("duration_ms") or None,
        popularity=track_data.get("popularity"),
        album=album,
    )


def track_to_source(track_data: dict[str, Any]) -> SourceTrack | None:
    """
    Convert a Spotify track object into a SourceTrack.

    Local files are kept (they have a name and artists but no ID); they are
    still worth searching for on the destination platform.

    Returns:
        SourceTrack, or None for podcast episodes and nameless items.
    """
    if track_data.get("type", "track") != "track":
        return None

    name = (track_data.get("name") or "").strip()
    if not name:
        return None

    artist_names = [a["name"] for a in track_data.get("artists", []) if a.get("name")]
    track_id = track_data.get("id")

    url = track_data.get("external_urls", {}).get("spotify")
    if url is None and track_id:
        url = track_url(track_id)

    return SourceTrack(
        title=name,
        artist=", ".join(artist_names) or None,
        album=(track_data.get("album") or {}).get("name"),
        duration_ms=track_data.get("duration_ms") or None,
        source_id=track_id,
        url=url,
    )
