"""
Spotify search provider for the matching engine.

Adapts SpotifyClient.search_tracks() to the SearchProvider contract used by
TrackMatcher when converting into Spotify.
"""

from playlist_converter.core.exceptions import ConfigError
from playlist_converter.core.logger import get_logger
from playlist_converter.matching.models import CandidateResult
from playlist_converter.matching.provider import SearchProvider
from playlist_converter.spotify.client import SpotifyClient
from playlist_converter.spotify.models import track_to_candidate


logger = get_logger(__name__)


DEFAULT_SEARCH_LIMIT = 15


class SpotifySearchProvider(SearchProvider):
    """
    Searches the Spotify catalog for tracks.

    When the client acts for a user, searches use market="from_token" so
    results are playable in the user's country.

    Example:
        provider = SpotifySearchProvider(SpotifyClient.from_token(token))
        candidates = provider.search('track:"Shape of You" artist:"Ed Sheeran"')
    """

    name = "spotify"

    def __init__(self, client: SpotifyClient, limit: int = DEFAULT_SEARCH_LIMIT) -> None:
        self._client = client
        self._limit = limit

    @property
    def client(self) -> SpotifyClient:
        return self._client

    def search(self, query: str) -> list[CandidateResult]:
        market = "from_token" if self._client.has_user_context else None
        items = self._client.search_tracks(query, limit=self._limit, market=market)

        candidates = []
        for item in items:
            candidate = track_to_candidate(item)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    def ensure_ready(self) -> None:
        """
        Raises:
            ConfigError: Token mode without a token.
        """
        if self._client.mode == "token" and not self._client.access_token:
            raise ConfigError(
                "No Spotify access token available",
                details={"provider": self.name}
            )

    def update_credentials(self, token: str) -> None:
        logger.debug("Updating Spotify access token")
        self._client.set_access_token(token)
