"""
Exception classes for playlist-converter.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, and distinguishes between failure modes that stop a conversion
and failure modes the matcher absorbs.

Exception Hierarchy:
    ConverterError (base)
        ConfigError - Configuration or credential issues (fatal)
        ProviderError - Search provider failures (absorbed per query)
            SpotifyError - Spotify Web API failures
            YouTubeError - YouTube Music failures
        PlaylistError - Reading/writing playlists failed
        MatchingCancelledError - Caller timeout or cancellation
"""


class ConverterError(Exception):
    """
    Base exception for all playlist-converter errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., query, URL).

    Example:
        try:
            # some operation
        except ConverterError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'query': Search query that failed
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(ConverterError):
    """
    Raised when there's an issue with the configuration or credentials.

    This is a CRITICAL error that stops the conversion before any track
    is matched.

    Common causes:
        - config.yaml has invalid YAML syntax
        - Required fields missing (client_id, client_secret)
        - Invalid field values (e.g., negative cache size)
        - Search provider has no usable access token

    Example:
        raise ConfigError(
            "Missing required field 'client_id' in config.yaml",
            details={'file_path': '/path/to/config.yaml', 'missing_field': 'client_id'}
        )
    """
    pass


class ProviderError(ConverterError):
    """
    Raised when a search provider call fails.

    This is a NON-CRITICAL error: the matcher logs it, waits for a backoff
    interval and moves on to the next query for the same track.

    Attributes:
        is_rate_limit: True if the provider signalled throttling (HTTP 429 or
                       an equivalent message). Rate-limited failures get a
                       longer backoff than other transient failures.
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_rate_limit: Set to True if this is a rate limit error.
        """
        super().__init__(message, details)
        self.is_rate_limit = is_rate_limit


class SpotifyError(ProviderError):
    """
    Raised when there's an issue with the Spotify Web API.

    Can be CRITICAL (auth failure) or NON-CRITICAL (single search failure).

    Attributes:
        is_auth_error: True if this is an authentication error (CRITICAL).
        is_rate_limit: True if this is a rate limit error.

    Example:
        raise SpotifyError(
            "Failed to fetch playlist: playlist is private",
            details={'playlist_url': url, 'status_code': 403}
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        """
        Initialize Spotify error with additional flags.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
            is_auth_error: Set to True if this is an authentication failure.
            is_rate_limit: Set to True if this is a rate limit error.
        """
        super().__init__(message, details, is_rate_limit=is_rate_limit)
        self.is_auth_error = is_auth_error


class YouTubeError(ProviderError):
    """
    Raised when there's an issue with YouTube Music search or access.

    ytmusicapi does not expose HTTP status codes consistently, so the
    rate-limit flag is derived from the error message.
    """
    pass


class PlaylistError(ConverterError):
    """
    Raised when a source playlist cannot be read or a destination
    playlist cannot be created.

    Common causes:
        - Playlist is private and the client is not authenticated
        - Playlist URL has no recognizable ID
        - Playlist creation was rejected by the platform
    """
    pass


class MatchingCancelledError(ConverterError):
    """
    Raised when a conversion run exceeds its timeout or is cancelled.

    Cancellation happens between tracks, never in the middle of one, so
    every record in `records` is complete.

    Attributes:
        records: MatchRecords produced before cancellation, in input order.
    """

    def __init__(
        self,
        message: str,
        records: list | None = None,
        details: dict | None = None
    ) -> None:
        super().__init__(message, details)
        self.records = records or []
