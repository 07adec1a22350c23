"""
Configuration management for playlist-converter.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml, with credentials
optionally coming from the environment (or a .env file).

The configuration file contains:
    - Spotify API credentials (client_id, client_secret, redirect_uri)
    - YouTube Music auth file (needed to create playlists)
    - Matching options (cache size, timeout, per-direction tuning)
    - Log output directory

Configuration File Location:
    config.yaml in the current working directory, unless an explicit path
    is given. The file is optional: without it, defaults plus environment
    variables are used.

Environment Variables (override the file):
    SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, SPOTIFY_REDIRECT_URI,
    YTMUSIC_AUTH_FILE

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      client_secret: "your_client_secret_here"

    youtube:
      auth_file: "~/.config/playlist-converter/browser.json"

    matching:
      cache_size: 1000
      timeout: null
      to_youtube:
        query_delay: 0.3

    output:
      log_directory: "~/.playlist-converter"
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from playlist_converter.core.exceptions import ConfigError
from playlist_converter.matching.policy import (
    POLICIES,
    TUNABLE_FIELDS,
    DirectionPolicy,
    policy_for_destination,
)


# Default configuration file name (in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"
DEFAULT_LOG_DIRECTORY = "~/.playlist-converter"
DEFAULT_CACHE_SIZE = 1000

# Maps environment variables to (section, key)
ENV_OVERRIDES = {
    "SPOTIFY_CLIENT_ID": ("spotify", "client_id"),
    "SPOTIFY_CLIENT_SECRET": ("spotify", "client_secret"),
    "SPOTIFY_REDIRECT_URI": ("spotify", "redirect_uri"),
    "YTMUSIC_AUTH_FILE": ("youtube", "auth_file"),
}


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify API credentials.

    Obtained from the Spotify Developer Dashboard:
    https://developer.spotify.com/dashboard

    Attributes:
        client_id: Application client ID, or None if not configured.
        client_secret: Application client secret, or None.
        redirect_uri: OAuth redirect URI registered for the application.
    """
    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str = DEFAULT_REDIRECT_URI

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class YouTubeConfig:
    """
    YouTube Music settings.

    Attributes:
        auth_file: ytmusicapi auth JSON (browser headers or OAuth token).
                   Needed for private playlists and for creating
                   playlists. None means anonymous, read-only access.
        language: Result language passed to YTMusic.
    """
    auth_file: Path | None = None
    language: str = "en"


@dataclass(frozen=True)
class MatchingConfig:
    """
    Matching engine settings.

    Attributes:
        cache_size: Maximum entries in the match cache.
        timeout: Time budget in seconds for one conversion, or None.
        overrides: Per-direction tuning, keyed by policy name
                   ("to_spotify", "to_youtube").
    """
    cache_size: int = DEFAULT_CACHE_SIZE
    timeout: float | None = None
    overrides: dict[str, dict[str, float]] = field(default_factory=dict)

    def policy_for(self, destination: str) -> DirectionPolicy:
        """
        Return the direction policy for `destination` with overrides applied.

        Example:
            policy = config.matching.policy_for("spotify")
        """
        policy = policy_for_destination(destination)
        return policy.with_overrides(**self.overrides.get(policy.name, {}))


@dataclass(frozen=True)
class OutputConfig:
    """
    Output settings.

    Attributes:
        log_directory: Directory under which logs/ is created.
    """
    log_directory: Path


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Example:
        config = load_config()
        print(f"Logs in: {config.output.log_directory}")
        policy = config.matching.policy_for("youtube")
    """
    spotify: SpotifyConfig
    youtube: YouTubeConfig
    matching: MatchingConfig
    output: OutputConfig


def load_config(config_path: Path | None = None, env_file: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to the config file. An explicit
                     path must exist; the default CWD/config.yaml may be
                     missing, in which case defaults are used.
        env_file: Optional .env file. If None, python-dotenv searches for
                  one starting from the current directory.

    Returns:
        Config: Frozen configuration.

    Raises:
        ConfigError: File unreadable, invalid YAML, wrong types, unknown
                     matching options, or a per-direction override where
                     rate_limit_backoff is not larger than error_backoff.

    Behavior:
        1. Load .env (does not override variables already set)
        2. Read and parse YAML (if present)
        3. Apply environment overrides
        4. Validate and build each section
    """
    load_dotenv(dotenv_path=env_file)

    explicit = config_path is not None
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    raw_config: dict[str, Any] = {}
    if config_path.exists():
        raw_config = _read_yaml(config_path)
    elif explicit:
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)
    _apply_env_overrides(raw_config)

    return Config(
        spotify=_parse_spotify_config(raw_config.get("spotify") or {}),
        youtube=_parse_youtube_config(raw_config.get("youtube") or {}),
        matching=_parse_matching_config(raw_config.get("matching") or {}),
        output=_parse_output_config(raw_config.get("output") or {}),
    )


def _read_yaml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )
    return raw_config


def _validate_config(raw_config: dict[str, Any]) -> None:
    """Check that every known section present is a dictionary."""
    for section in ("spotify", "youtube", "matching", "output"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _apply_env_overrides(raw_config: dict[str, Any]) -> None:
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            raw_config.setdefault(section, {})
            if raw_config[section] is None:
                raw_config[section] = {}
            raw_config[section][key] = value


def _optional_string(section: dict[str, Any], name: str, field_name: str) -> str | None:
    value = section.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(
            f"'{field_name}' must be a string",
            details={"field": field_name}
        )
    return value.strip() or None


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse the Spotify section.

    Credentials are optional here; whether they are needed depends on the
    conversion direction, which the CLI checks.
    """
    return SpotifyConfig(
        client_id=_optional_string(spotify_section, "client_id", "spotify.client_id"),
        client_secret=_optional_string(spotify_section, "client_secret", "spotify.client_secret"),
        redirect_uri=(
            _optional_string(spotify_section, "redirect_uri", "spotify.redirect_uri")
            or DEFAULT_REDIRECT_URI
        ),
    )


def _parse_youtube_config(youtube_section: dict[str, Any]) -> YouTubeConfig:
    """
    Parse the YouTube section.

    Raises:
        ConfigError: auth_file is given but does not exist.
    """
    auth_file = None
    raw_auth = _optional_string(youtube_section, "auth_file", "youtube.auth_file")
    if raw_auth is not None:
        auth_file = Path(raw_auth).expanduser().resolve()
        if not auth_file.exists():
            raise ConfigError(
                f"YouTube Music auth file not found: {auth_file}",
                details={"field": "youtube.auth_file", "path": str(auth_file)}
            )

    language = _optional_string(youtube_section, "language", "youtube.language") or "en"
    return YouTubeConfig(auth_file=auth_file, language=language)


def _parse_matching_config(matching_section: dict[str, Any]) -> MatchingConfig:
    """
    Parse the matching section, validating every per-direction override.

    Raises:
        ConfigError: Non-positive cache_size or timeout, non-numeric or
                     unknown override, or backoff ordering violated.
    """
    cache_size = matching_section.get("cache_size", DEFAULT_CACHE_SIZE)
    if isinstance(cache_size, bool) or not isinstance(cache_size, int) or cache_size < 1:
        raise ConfigError(
            "'matching.cache_size' must be a positive integer",
            details={"field": "matching.cache_size", "value": cache_size}
        )

    timeout = matching_section.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConfigError(
                "'matching.timeout' must be a positive number or null",
                details={"field": "matching.timeout", "value": timeout}
            )
        timeout = float(timeout)

    overrides: dict[str, dict[str, float]] = {}
    for policy in POLICIES.values():
        section = matching_section.get(policy.name)
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ConfigError(
                f"'matching.{policy.name}' must be a dictionary",
                details={"field": f"matching.{policy.name}"}
            )

        values = {}
        for key, value in section.items():
            if key not in TUNABLE_FIELDS:
                raise ConfigError(
                    f"Unknown option 'matching.{policy.name}.{key}'",
                    details={"field": f"matching.{policy.name}.{key}", "allowed": list(TUNABLE_FIELDS)}
                )
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                raise ConfigError(
                    f"'matching.{policy.name}.{key}' must be a non-negative number",
                    details={"field": f"matching.{policy.name}.{key}", "value": value}
                )
            values[key] = float(value)

        # Fails early if the combination breaks the backoff ordering
        policy.with_overrides(**values)
        overrides[policy.name] = values

    return MatchingConfig(cache_size=cache_size, timeout=timeout, overrides=overrides)


def _parse_output_config(output_section: dict[str, Any]) -> OutputConfig:
    directory = _optional_string(output_section, "log_directory", "output.log_directory")
    path = Path(directory or DEFAULT_LOG_DIRECTORY).expanduser().resolve()
    return OutputConfig(log_directory=path)
