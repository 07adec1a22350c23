"""
YouTube search provider for the matching engine.

Wraps ytmusicapi's YTMusic.search() with filter="videos" and turns its
failures into YouTubeError. ytmusicapi does not expose HTTP status codes,
so rate limiting is recognized from the error message.
"""

from pathlib import Path

import requests
from ytmusicapi import YTMusic
from ytmusicapi.exceptions import YTMusicError

from playlist_converter.core.exceptions import YouTubeError
from playlist_converter.core.logger import get_logger
from playlist_converter.matching.models import CandidateResult
from playlist_converter.matching.provider import SearchProvider
from playlist_converter.youtube.models import video_to_candidate


logger = get_logger(__name__)


DEFAULT_SEARCH_LIMIT = 15

# Message fragments that indicate throttling rather than a hard failure
RATE_LIMIT_MARKERS = ("429", "rate limit", "ratelimit", "too many", "quota", "throttl")

# Everything a YTMusic call can raise on a failed or malformed response
YTMUSIC_ERRORS = (
    YTMusicError,
    requests.exceptions.RequestException,
    KeyError,
    ValueError,
    TypeError,
)


def is_rate_limit_message(message: str) -> bool:
    text = message.lower()
    return any(marker in text for marker in RATE_LIMIT_MARKERS)


def translate_error(error: Exception, action: str, details: dict) -> YouTubeError:
    """Convert a ytmusicapi/requests exception into a classified YouTubeError."""
    message = str(error) or type(error).__name__
    return YouTubeError(
        f"Failed to {action}: {message}",
        details=dict(details, original_error=message),
        is_rate_limit=is_rate_limit_message(message)
    )


def build_ytmusic(auth_file: str | Path | None = None, language: str = "en") -> YTMusic:
    """
    Create a YTMusic client.

    Args:
        auth_file: ytmusicapi browser/OAuth JSON. Without it the client is
                   anonymous: search and public playlists only.
        language: Interface language for result metadata.
    """
    if auth_file:
        logger.debug(f"Using YouTube Music credentials from {auth_file}")
        return YTMusic(str(auth_file), language=language)
    return YTMusic(language=language)


class YouTubeSearchProvider(SearchProvider):
    """
    Searches YouTube videos through YouTube Music.

    Example:
        provider = YouTubeSearchProvider(build_ytmusic())
        candidates = provider.search("Shape of You Ed Sheeran official")
    """

    name = "youtube"

    def __init__(self, ytmusic: YTMusic, limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self._ytmusic = ytmusic
        self._limit = limit

    def search(self, query: str) -> list[CandidateResult]:
        try:
            results = self._ytmusic.search(query, filter="videos", limit=self._limit)
        except YTMUSIC_ERRORS as e:
            raise translate_error(e, "search videos", {"query": query}) from e

        candidates = []
        for result in (results or [])[:self._limit]:
            candidate = video_to_candidate(result)
            if candidate is not None:
                candidates.append(candidate)
        return candidates
