"""
Spotify Web API client for playlist-converter.

This module wraps spotipy and translates its failures into SpotifyError,
so the rest of the application never handles spotipy or requests
exceptions directly.

Authentication:
    Three modes are supported:
    1. Bearer token (from_token): An access token obtained elsewhere, e.g.
       by a web front end. The token can be replaced mid-run with
       set_access_token() when the caller refreshes it.
    2. Client Credentials (from_client_credentials): client_id and
       client_secret only. Enough for search and public playlists, but
       cannot create playlists.
    3. User OAuth (from_oauth): Browser-based login via SpotifyOAuth.
       Needed to read private playlists and to create playlists.

Error Translation:
    HTTP 429 -> SpotifyError(is_rate_limit=True)
    HTTP 401 -> SpotifyError(is_auth_error=True)
    Network errors (requests) -> SpotifyError
    Anything else from spotipy -> SpotifyError

Usage:
    from playlist_converter.spotify.client import SpotifyClient

    client = SpotifyClient.from_client_credentials(client_id, client_secret)
    items = client.search_tracks("Shape of You Ed Sheeran", limit=15)
"""

from typing import Any

import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOAuth, SpotifyOauthError

from playlist_converter.core.exceptions import SpotifyError
from playlist_converter.core.logger import get_logger


logger = get_logger(__name__)


# Scopes needed to read private playlists and write new ones
OAUTH_SCOPE = (
    "playlist-read-private "
    "playlist-read-collaborative "
    "playlist-modify-public "
    "playlist-modify-private"
)

# Spotify API limits
PLAYLIST_PAGE_SIZE = 100
PLAYLIST_ADD_BATCH_SIZE = 100
MAX_SEARCH_LIMIT = 50

REQUESTS_TIMEOUT = 10

# Everything spotipy can raise from an API call
API_ERRORS = (
    spotipy.SpotifyException,
    SpotifyOauthError,
    requests.exceptions.RequestException,
)


class SpotifyClient:
    """
    Thin, error-translating wrapper around spotipy.Spotify.

    Use one of the from_* constructors rather than __init__.

    Attributes:
        mode: "token", "client_credentials" or "oauth".

    Thread Safety:
        spotipy keeps one requests session per instance. Reads from
        several threads work; set_access_token() should not race with
        in-flight calls.
    """

    def __init__(self, spotify: spotipy.Spotify, mode: str, access_token: str | None = None) -> None:
        self._spotify = spotify
        self.mode = mode
        self._access_token = access_token
        self._user_id: str | None = None

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_token(cls, access_token: str) -> "SpotifyClient":
        """
        Create a client from an existing bearer token.

        The token is not validated here; SpotifySearchProvider.ensure_ready()
        rejects an empty one before matching starts.
        """
        return cls(_spotipy_from_token(access_token), mode="token", access_token=access_token)

    @classmethod
    def from_client_credentials(cls, client_id: str, client_secret: str) -> "SpotifyClient":
        """
        Create a client using the client credentials flow.

        Raises:
            SpotifyError: Credentials rejected (is_auth_error=True).
        """
        try:
            auth_manager = SpotifyClientCredentials(
                client_id=client_id,
                client_secret=client_secret
            )
            spotify = spotipy.Spotify(auth_manager=auth_manager, requests_timeout=REQUESTS_TIMEOUT)
        except spotipy.SpotifyException as e:
            raise SpotifyError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        return cls(spotify, mode="client_credentials")

    @classmethod
    def from_oauth(
        cls,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        open_browser: bool = True
    ) -> "SpotifyClient":
        """
        Create a client using the user OAuth flow.

        Opens a browser on first use; spotipy caches the token afterwards.

        Raises:
            SpotifyError: Login failed (is_auth_error=True).
        """
        try:
            auth_manager = SpotifyOAuth(
                client_id=client_id,
                client_secret=client_secret,
                redirect_uri=redirect_uri,
                scope=OAUTH_SCOPE,
                open_browser=open_browser
            )
            spotify = spotipy.Spotify(auth_manager=auth_manager, requests_timeout=REQUESTS_TIMEOUT)
        except spotipy.SpotifyException as e:
            raise SpotifyError(
                f"Spotify authentication failed: {e}",
                details={"original_error": str(e)},
                is_auth_error=True
            ) from e
        return cls(spotify, mode="oauth")

    # =========================================================================
    # Credentials
    # =========================================================================

    @property
    def has_user_context(self) -> bool:
        """True if requests run on behalf of a user (token or OAuth)."""
        return self.mode in ("token", "oauth")

    @property
    def access_token(self) -> str | None:
        """The bearer token in token mode, None otherwise."""
        return self._access_token if self.mode == "token" else None

    def set_access_token(self, access_token: str) -> None:
        """
        Replace the bearer token used for subsequent requests.

        Switches the client to token mode if it was not in it.
        """
        self._spotify = _spotipy_from_token(access_token)
        self.mode = "token"
        self._access_token = access_token
        self._user_id = None

    # =========================================================================
    # Search
    # =========================================================================

    def search_tracks(self, query: str, limit: int = 15, market: str | None = None) -> list[dict[str, Any]]:
        """
        Search the Spotify catalog for tracks.

        Args:
            query: Search string. Supports field filters like
                   track:"Shape of You" artist:"Ed Sheeran".
            limit: Number of results (max 50).
            market: Market code, or "from_token" for the user's market.

        Returns:
            Raw track objects from the API, in relevance order.

        Raises:
            SpotifyError: Search failed (is_rate_limit on HTTP 429).
        """
        try:
            response = self._spotify.search(
                q=query,
                type="track",
                limit=min(limit, MAX_SEARCH_LIMIT),
                market=market
            )
        except API_ERRORS as e:
            raise _translate_error(e, "search tracks", {"query": query}) from e

        if not response:
            return []
        return [item for item in response.get("tracks", {}).get("items", []) if item]

    # =========================================================================
    # Playlists
    # =========================================================================

    def playlist(self, playlist_id_or_url: str) -> dict[str, Any]:
        """
        Get playlist metadata (name, owner, external URL).

        Raises:
            SpotifyError: Not found, private, or network error.
        """
        try:
            result = self._spotify.playlist(
                playlist_id_or_url,
                fields="id,name,description,owner,external_urls,tracks.total,uri"
            )
        except API_ERRORS as e:
            raise _translate_error(e, "fetch playlist", {"playlist_url": playlist_id_or_url}) from e

        if result is None:
            raise SpotifyError(
                f"Playlist not found: {playlist_id_or_url}",
                details={"playlist_url": playlist_id_or_url}
            )
        return result

    def playlist_items(
        self,
        playlist_id_or_url: str,
        limit: int = PLAYLIST_PAGE_SIZE,
        offset: int = 0
    ) -> dict[str, Any]:
        """
        Get one page of playlist items.

        Returns:
            Dictionary with 'items', 'total' and 'next' (None on the last page).
        """
        try:
            result = self._spotify.playlist_items(
                playlist_id_or_url,
                limit=min(limit, PLAYLIST_PAGE_SIZE),
                offset=offset,
                additional_types=["track"]
            )
        except API_ERRORS as e:
            raise _translate_error(e, "fetch playlist items", {"playlist_url": playlist_id_or_url}) from e

        if result is None:
            raise SpotifyError(
                f"Failed to fetch playlist items: {playlist_id_or_url}",
                details={"playlist_url": playlist_id_or_url}
            )
        return result

    def playlist_all_items(self, playlist_id_or_url: str) -> list[dict[str, Any]]:
        """
        Get every item of a playlist, following pagination.

        Makes one request per 100 items.
        """
        all_items: list[dict[str, Any]] = []
        offset = 0

        while True:
            response = self.playlist_items(playlist_id_or_url, offset=offset)
            all_items.extend(response.get("items", []))

            if response.get("next") is None:
                break
            offset += PLAYLIST_PAGE_SIZE

        return all_items

    def current_user_id(self) -> str:
        """
        Get the Spotify user ID of the authenticated user.

        Raises:
            SpotifyError: No user context (client credentials mode), or the
                          token was rejected.
        """
        if not self.has_user_context:
            raise SpotifyError(
                "A user login is required for this operation. "
                "Client credentials cannot act on behalf of a user.",
                is_auth_error=True
            )
        if self._user_id is None:
            try:
                self._user_id = self._spotify.current_user()["id"]
            except API_ERRORS as e:
                raise _translate_error(e, "fetch current user", {}) from e
        return self._user_id

    def create_playlist(self, name: str, public: bool = True, description: str = "") -> dict[str, Any]:
        """
        Create an empty playlist owned by the current user.

        Returns:
            The created playlist object (has 'id' and 'external_urls').
        """
        user_id = self.current_user_id()
        try:
            return self._spotify.user_playlist_create(
                user_id,
                name,
                public=public,
                description=description
            )
        except API_ERRORS as e:
            raise _translate_error(e, "create playlist", {"name": name}) from e

    def add_playlist_items(self, playlist_id: str, uris: list[str]) -> int:
        """
        Append track URIs to a playlist in batches of 100.

        Args:
            playlist_id: Target playlist ID.
            uris: "spotify:track:<id>" URIs, in playlist order.

        Returns:
            Number of batches sent.
        """
        batches = 0
        for start in range(0, len(uris), PLAYLIST_ADD_BATCH_SIZE):
            batch = uris[start:start + PLAYLIST_ADD_BATCH_SIZE]
            try:
                self._spotify.playlist_add_items(playlist_id, batch)
            except API_ERRORS as e:
                raise _translate_error(
                    e,
                    "add playlist items",
                    {"playlist_id": playlist_id, "offset": start, "batch_size": len(batch)}
                ) from e
            batches += 1
            logger.debug(f"Added {len(batch)} tracks to playlist {playlist_id} (offset {start})")
        return batches


def _spotipy_from_token(access_token: str) -> spotipy.Spotify:
    return spotipy.Spotify(auth=access_token, requests_timeout=REQUESTS_TIMEOUT)


def _translate_error(error: Exception, action: str, details: dict[str, Any]) -> SpotifyError:
    """Convert a spotipy/requests exception into a classified SpotifyError."""
    details = dict(details, original_error=str(error))

    if isinstance(error, SpotifyOauthError):
        return SpotifyError(
            f"Spotify authorization failed while trying to {action}: {error}",
            details=details,
            is_auth_error=True
        )

    if isinstance(error, spotipy.SpotifyException):
        details["http_status"] = error.http_status
        if error.http_status == 429:
            return SpotifyError(
                f"Rate limited while trying to {action}",
                details=details,
                is_rate_limit=True
            )
        if error.http_status == 401:
            return SpotifyError(
                f"Spotify rejected the access token while trying to {action}",
                details=details,
                is_auth_error=True
            )
        if error.http_status == 404:
            return SpotifyError(f"Not found while trying to {action}", details=details)

    return SpotifyError(f"Failed to {action}: {error}", details=details)
