"""
Search provider contract.

The matcher never talks to spotipy or ytmusicapi directly. It talks to a
SearchProvider, which turns a query string into CandidateResults and
signals failures as ProviderError (with `is_rate_limit` set when the
platform is throttling). Concrete providers live in the spotify/ and
youtube/ packages; tests use in-memory fakes.
"""

from abc import ABC, abstractmethod

from playlist_converter.matching.models import CandidateResult


class SearchProvider(ABC):
    """
    Abstract destination-platform search.

    Subclasses must implement search(). ensure_ready() and
    update_credentials() have no-op defaults for providers that need no
    credentials.
    """

    #: Platform name used in log messages ("spotify", "youtube")
    name: str = "provider"

    @abstractmethod
    def search(self, query: str) -> list[CandidateResult]:
        """
        Run one search.

        Args:
            query: Query string as produced by the QueryBuilder.

        Returns:
            Candidates in the platform's relevance order. May be empty.

        Raises:
            ProviderError: The search failed. `is_rate_limit` tells the
                           matcher which backoff to use.
        """

    def ensure_ready(self) -> None:
        """
        Verify the provider can search at all.

        Called once before the first track. Raises ConfigError when a
        required credential is missing, so the run fails before any work.
        """

    def update_credentials(self, token: str) -> None:
        """Replace the access token used for subsequent searches."""
