"""
Conversions from ytmusicapi payloads to matching engine models.

ytmusicapi returns loosely typed dictionaries whose shape varies between
search results and playlist items, and between songs and videos. The
functions here normalize them:

    video_to_candidate: search result -> CandidateResult (converting to YouTube)
    playlist_item_to_source: playlist item -> SourceTrack (converting from YouTube)

Duration Formats:
    "3:33", "1:02:15"   ytmusicapi duration strings
    "PT3M33S"           ISO-8601, as in YouTube Data API contentDetails
    213000              integer milliseconds (Spotify style)
"""

import re
from typing import Any

from playlist_converter.matching.models import CandidateResult, SourceTrack


YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

ISO_DURATION_RE = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?$", re.IGNORECASE)

# Channel name fragments that mark an artist-owned or label channel
OFFICIAL_CHANNEL_MARKERS = ("official", "vevo", "topic", "records", "music")

# videoType of auto-generated "song" uploads; these carry real artist metadata
SONG_VIDEO_TYPE = "MUSIC_VIDEO_TYPE_ATV"


def video_url(video_id: str) -> str:
    return YOUTUBE_WATCH_URL.format(video_id=video_id)


def parse_duration(value: str | int | None) -> int | None:
    """
    Parse a duration into milliseconds.

    Args:
        value: "M:SS", "H:MM:SS", ISO-8601 "PT#H#M#S", or integer
               milliseconds.

    Returns:
        Duration in milliseconds, or None when missing or unparseable.

    Examples:
        parse_duration("3:33")      # 213000
        parse_duration("1:02:15")   # 3735000
        parse_duration("PT4M5S")    # 245000
        parse_duration(213000)      # 213000
        parse_duration("live")      # None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value if value > 0 else None

    text = value.strip()
    if not text:
        return None

    iso = ISO_DURATION_RE.match(text)
    if iso:
        if not any(iso.groups()):
            return None
        hours, minutes, seconds = (int(part or 0) for part in iso.groups())
        return (hours * 3600 + minutes * 60 + seconds) * 1000

    parts = text.split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None

    total_seconds = 0
    for number in numbers:
        total_seconds = total_seconds * 60 + number
    return total_seconds * 1000


def parse_view_count(value: str | int | None) -> int | None:
    """
    Parse a view count like "1.5M views", "12K", "3,402" or an int.

    Returns:
        View count, or None if it cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value

    text = value.lower().replace(",", "").replace("views", "").strip()
    multiplier = 1
    for suffix, factor in (("b", 1_000_000_000), ("m", 1_000_000), ("k", 1_000)):
        if text.endswith(suffix):
            text = text[:-1].strip()
            multiplier = factor
            break

    try:
        return int(float(text) * multiplier)
    except ValueError:
        return None


def is_official_channel(channel: str | None) -> bool:
    """True if the channel name looks like an artist, label or Topic channel."""
    if not channel:
        return False
    name = channel.lower()
    return any(marker in name for marker in OFFICIAL_CHANNEL_MARKERS)


def _artist_names(data: dict[str, Any]) -> tuple[str, ...]:
    artists = data.get("artists") or []
    if not isinstance(artists, list):
        return ()
    return tuple(
        a["name"].strip() for a in artists
        if isinstance(a, dict) and a.get("name") and a["name"].strip()
    )


def _duration_of(data: dict[str, Any]) -> int | None:
    duration = parse_duration(data.get("duration"))
    if duration is None and data.get("duration_seconds"):
        try:
            duration = int(data["duration_seconds"]) * 1000
        except (ValueError, TypeError):
            duration = None
    return duration


def video_to_candidate(result: dict[str, Any]) -> CandidateResult | None:
    """
    Convert a ytmusicapi video search result into a CandidateResult.

    For videos, ytmusicapi puts the uploading channel in `artists`; the first
    entry is used as the candidate's artist and for the official-channel
    check.

    Returns:
        CandidateResult, or None if the result has no videoId or title.
    """
    video_id = result.get("videoId")
    title = (result.get("title") or "").strip()
    if not video_id or not title:
        return None

    artists = _artist_names(result)
    channel = artists[0] if artists else None

    return CandidateResult(
        external_id=video_id,
        url=video_url(video_id),
        title=title,
        artists=(channel,) if channel else (),
        duration_ms=_duration_of(result),
        view_count=parse_view_count(result.get("views")),
        is_official=is_official_channel(channel),
    )


def playlist_item_to_source(item: dict[str, Any]) -> SourceTrack | None:
    """
    Convert a ytmusicapi playlist item into a SourceTrack.

    Only auto-generated song uploads get a structured artist. For regular
    videos the `artists` entry is just the uploader, so it is kept as the
    channel and the artist is extracted from the title during matching.

    Returns:
        SourceTrack, or None for deleted/private entries.
    """
    title = (item.get("title") or "").strip()
    video_id = item.get("videoId")
    if not title or not video_id:
        return None

    names = _artist_names(item)
    is_song = item.get("videoType") == SONG_VIDEO_TYPE

    album_data = item.get("album")
    album = album_data.get("name") if isinstance(album_data, dict) else None

    return SourceTrack(
        title=title,
        artist=", ".join(names) if is_song and names else None,
        album=album if is_song else None,
        duration_ms=_duration_of(item),
        channel=names[0] if names else None,
        source_id=video_id,
        url=video_url(video_id),
    )
