"""Test configuration and fixtures"""

import pytest

from playlist_converter.matching.models import CandidateResult, SourceTrack
from playlist_converter.matching.provider import SearchProvider


class FakeProvider(SearchProvider):
    """
    In-memory search provider.

    `responses` maps a query to either a list of candidates or an exception
    to raise. Queries without an entry return `default`. Every call is
    recorded in `calls`.
    """

    name = "fake"

    def __init__(self, responses=None, default=None, ready_error=None):
        self.responses = dict(responses or {})
        self.default = default if default is not None else []
        self.ready_error = ready_error
        self.calls = []
        self.tokens = []

    def search(self, query):
        self.calls.append(query)
        response = self.responses.get(query, self.default)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(query)
        return list(response)

    def ensure_ready(self):
        if self.ready_error is not None:
            raise self.ready_error

    def update_credentials(self, token):
        self.tokens.append(token)


class SleepRecorder:
    """Stand-in for time.sleep that records delays instead of waiting"""

    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def youtube_source():
    """A noisy YouTube video title, as read from a YouTube playlist"""
    return SourceTrack(
        title="Ed Sheeran - Shape of You (Official Video)",
        duration_ms=263000,
        channel="Ed Sheeran",
        source_id="JGwWNGJdvx8",
        url="https://www.youtube.com/watch?v=JGwWNGJdvx8",
    )


@pytest.fixture
def spotify_source():
    """A structured Spotify track, as read from a Spotify playlist"""
    return SourceTrack(
        title="Shape of You",
        artist="Ed Sheeran",
        album="÷ (Deluxe)",
        duration_ms=233712,
        source_id="7qiZfU4dY1lWllzX7mPBI3",
        url="https://open.spotify.com/track/7qiZfU4dY1lWllzX7mPBI3",
    )


@pytest.fixture
def spotify_candidate():
    return CandidateResult(
        external_id="7qiZfU4dY1lWllzX7mPBI3",
        url="https://open.spotify.com/track/7qiZfU4dY1lWllzX7mPBI3",
        title="Shape of You",
        artists=("Ed Sheeran",),
        duration_ms=233712,
        popularity=90,
        album="÷ (Deluxe)",
    )


@pytest.fixture
def karaoke_candidate():
    return CandidateResult(
        external_id="karaoke123",
        url="https://open.spotify.com/track/karaoke123",
        title="Shape of You (Karaoke Version)",
        artists=("Sing King",),
        duration_ms=233000,
        popularity=30,
    )


@pytest.fixture
def youtube_candidate():
    return CandidateResult(
        external_id="JGwWNGJdvx8",
        url="https://www.youtube.com/watch?v=JGwWNGJdvx8",
        title="Ed Sheeran - Shape of You (Official Music Video)",
        artists=("Ed Sheeran",),
        duration_ms=263000,
        view_count=6_000_000_000,
    )


@pytest.fixture
def sample_spotify_track():
    """Track object as returned by the Spotify Web API"""
    return {
        "id": "7qiZfU4dY1lWllzX7mPBI3",
        "type": "track",
        "name": "Shape of You",
        "artists": [{"id": "6eUKZXaKkcviH0Ku9w2n3V", "name": "Ed Sheeran"}],
        "album": {"id": "3T4tUhGYeRNVUGevb0wThu", "name": "÷ (Deluxe)"},
        "duration_ms": 233712,
        "popularity": 90,
        "external_urls": {"spotify": "https://open.spotify.com/track/7qiZfU4dY1lWllzX7mPBI3"},
    }


@pytest.fixture
def sample_ytmusic_video():
    """Video search result as returned by ytmusicapi"""
    return {
        "resultType": "video",
        "videoId": "JGwWNGJdvx8",
        "title": "Ed Sheeran - Shape of You (Official Music Video)",
        "artists": [{"name": "Ed Sheeran", "id": "UC0C-w0YjGpqDXGB8IHb662A"}],
        "views": "6.2B",
        "duration": "4:24",
        "duration_seconds": 264,
    }
