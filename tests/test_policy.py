"""Test direction policies"""

import pytest

from playlist_converter.core.exceptions import ConfigError
from playlist_converter.matching.policy import (
    TO_SPOTIFY,
    TO_YOUTUBE,
    TitleThresholds,
    policy_for_destination,
)


class TestDefaults:
    """Test the two default policies"""

    def test_to_spotify_timing(self):
        assert TO_SPOTIFY.accept_floor == 0.2
        assert TO_SPOTIFY.early_exit_score == 0.7
        assert TO_SPOTIFY.query_delay == 0.1
        assert TO_SPOTIFY.rate_limit_backoff == 3.0
        assert TO_SPOTIFY.error_backoff == 0.5

    def test_to_youtube_timing(self):
        assert TO_YOUTUBE.accept_floor == 0.25
        assert TO_YOUTUBE.early_exit_score == 0.8
        assert TO_YOUTUBE.query_delay == 0.15
        assert TO_YOUTUBE.rate_limit_backoff == 5.0
        assert TO_YOUTUBE.error_backoff == 1.0

    def test_rate_limit_backoff_is_longer(self):
        for policy in (TO_SPOTIFY, TO_YOUTUBE):
            assert policy.rate_limit_backoff > policy.error_backoff

    def test_policy_for_destination(self):
        assert policy_for_destination("spotify") is TO_SPOTIFY
        assert policy_for_destination("youtube") is TO_YOUTUBE
        with pytest.raises(ConfigError):
            policy_for_destination("deezer")


class TestOverrides:
    """Test with_overrides"""

    def test_returns_tuned_copy(self):
        tuned = TO_SPOTIFY.with_overrides(query_delay=0.5)
        assert tuned.query_delay == 0.5
        assert TO_SPOTIFY.query_delay == 0.1
        assert tuned.structured_templates == TO_SPOTIFY.structured_templates

    def test_none_values_are_ignored(self):
        assert TO_SPOTIFY.with_overrides(query_delay=None) is TO_SPOTIFY

    def test_unknown_field(self):
        with pytest.raises(ConfigError):
            TO_SPOTIFY.with_overrides(weights=None)

    def test_backoff_ordering_is_enforced(self):
        with pytest.raises(ConfigError):
            TO_SPOTIFY.with_overrides(rate_limit_backoff=0.5)
        with pytest.raises(ConfigError):
            TO_YOUTUBE.with_overrides(error_backoff=6.0)

    def test_floor_above_cutoff(self):
        with pytest.raises(ConfigError):
            TO_SPOTIFY.with_overrides(accept_floor=0.9)


class TestTitleThresholds:
    """Test title similarity thresholds"""

    def test_minimum(self):
        thresholds = TitleThresholds()
        assert thresholds.minimum(regional=False, short=False) == pytest.approx(0.3)
        assert thresholds.minimum(regional=True, short=False) == pytest.approx(0.2)
        assert thresholds.minimum(regional=False, short=True) == pytest.approx(0.25)
        assert thresholds.minimum(regional=True, short=True) == pytest.approx(0.15)
