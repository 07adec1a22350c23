"""
Core module for playlist-converter.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs
    - progress: Rich progress bar for the matching phase

Usage:
    from playlist_converter.core import (
        Config, load_config,
        setup_logging, get_logger,
        ConverterError, ConfigError, ProviderError
    )
"""

from playlist_converter.core.exceptions import (
    ConfigError,
    ConverterError,
    MatchingCancelledError,
    PlaylistError,
    ProviderError,
    SpotifyError,
    YouTubeError,
)
from playlist_converter.core.config import (
    Config,
    MatchingConfig,
    OutputConfig,
    SpotifyConfig,
    YouTubeConfig,
    load_config,
)
from playlist_converter.core.logger import (
    get_logger,
    log_unmatched_track,
    setup_logging,
    shutdown_logging,
)
from playlist_converter.core.progress import MatchingProgressBar

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "YouTubeConfig",
    "MatchingConfig",
    "OutputConfig",
    "load_config",
    # Exceptions
    "ConverterError",
    "ConfigError",
    "ProviderError",
    "SpotifyError",
    "YouTubeError",
    "PlaylistError",
    "MatchingCancelledError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_unmatched_track",
    "shutdown_logging",
    # Progress
    "MatchingProgressBar",
]
