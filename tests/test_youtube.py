"""Test the YouTube provider and playlist reader/writer"""

from unittest.mock import Mock, patch

import pytest
import requests
from ytmusicapi.exceptions import YTMusicError

from playlist_converter.core.exceptions import ConfigError, PlaylistError, YouTubeError
from playlist_converter.matching.models import CandidateResult, MatchRecord, SourceTrack
from playlist_converter.youtube.models import (
    is_official_channel,
    parse_duration,
    parse_view_count,
    playlist_item_to_source,
    video_to_candidate,
)
from playlist_converter.youtube.playlist import YouTubePlaylistWriter, fetch_youtube_playlist
from playlist_converter.youtube.provider import (
    YouTubeSearchProvider,
    build_ytmusic,
    is_rate_limit_message,
)


def _found(video_id):
    candidate = CandidateResult(
        external_id=video_id,
        url=f"https://www.youtube.com/watch?v={video_id}",
        title=video_id,
    )
    return MatchRecord.matched(SourceTrack(title=video_id), candidate, 0.9)


class TestParsing:
    """Test ytmusicapi field parsing"""

    def test_parse_duration(self):
        assert parse_duration("3:33") == 213000
        assert parse_duration("1:02:15") == 3735000
        assert parse_duration("PT4M5S") == 245000
        assert parse_duration("PT1H") == 3600000
        assert parse_duration(213000) == 213000

    def test_parse_duration_invalid(self):
        assert parse_duration(None) is None
        assert parse_duration("") is None
        assert parse_duration("live") is None
        assert parse_duration("PT") is None
        assert parse_duration(True) is None
        assert parse_duration(0) is None

    def test_parse_view_count(self):
        assert parse_view_count("1.5M views") == 1_500_000
        assert parse_view_count("12K") == 12_000
        assert parse_view_count("3,402 views") == 3402
        assert parse_view_count(42) == 42
        assert parse_view_count("no views") is None
        assert parse_view_count(None) is None

    def test_official_channel(self):
        assert is_official_channel("EdSheeranVEVO")
        assert is_official_channel("Ed Sheeran - Topic")
        assert is_official_channel("Atlantic Records")
        assert not is_official_channel("Sing King")
        assert not is_official_channel(None)


class TestConversion:
    """Test payload conversion"""

    def test_video_to_candidate(self, sample_ytmusic_video):
        candidate = video_to_candidate(sample_ytmusic_video)
        assert candidate.external_id == "JGwWNGJdvx8"
        assert candidate.url == "https://www.youtube.com/watch?v=JGwWNGJdvx8"
        assert candidate.artists == ("Ed Sheeran",)
        assert candidate.duration_ms == 264000
        assert candidate.view_count > 6_000_000_000
        assert not candidate.is_official

    def test_duration_seconds_fallback(self, sample_ytmusic_video):
        del sample_ytmusic_video["duration"]
        assert video_to_candidate(sample_ytmusic_video).duration_ms == 264000

    def test_video_without_id(self, sample_ytmusic_video):
        sample_ytmusic_video["videoId"] = None
        assert video_to_candidate(sample_ytmusic_video) is None

    def test_song_item_has_artist(self):
        item = {
            "videoId": "abc",
            "title": "Believer",
            "artists": [{"name": "Imagine Dragons"}],
            "album": {"name": "Evolve"},
            "duration": "3:24",
            "videoType": "MUSIC_VIDEO_TYPE_ATV",
        }
        track = playlist_item_to_source(item)
        assert track.artist == "Imagine Dragons"
        assert track.album == "Evolve"
        assert track.channel == "Imagine Dragons"
        assert track.duration_ms == 204000

    def test_video_item_keeps_channel_only(self):
        item = {
            "videoId": "def",
            "title": "Imagine Dragons - Believer (Official Music Video)",
            "artists": [{"name": "ImagineDragonsVEVO"}],
            "videoType": "MUSIC_VIDEO_TYPE_OMV",
        }
        track = playlist_item_to_source(item)
        assert track.artist is None
        assert track.channel == "ImagineDragonsVEVO"
        assert track.url == "https://www.youtube.com/watch?v=def"

    def test_deleted_item_is_skipped(self):
        assert playlist_item_to_source({"videoId": None, "title": "Deleted video"}) is None


class TestYouTubeSearchProvider:
    """Test the YouTube search provider"""

    def test_search(self, sample_ytmusic_video):
        ytmusic = Mock()
        ytmusic.search.return_value = [sample_ytmusic_video, {"videoId": None}]

        candidates = YouTubeSearchProvider(ytmusic, limit=5).search("Shape of You")

        assert [c.external_id for c in candidates] == ["JGwWNGJdvx8"]
        ytmusic.search.assert_called_once_with("Shape of You", filter="videos", limit=5)

    def test_results_are_capped_to_limit(self, sample_ytmusic_video):
        ytmusic = Mock()
        ytmusic.search.return_value = [sample_ytmusic_video] * 30
        assert len(YouTubeSearchProvider(ytmusic, limit=15).search("x")) == 15

    def test_rate_limit_error(self):
        ytmusic = Mock()
        ytmusic.search.side_effect = YTMusicError("Server returned HTTP 429: Too Many Requests")

        with pytest.raises(YouTubeError) as exc_info:
            YouTubeSearchProvider(ytmusic).search("x")

        assert exc_info.value.is_rate_limit
        assert exc_info.value.details["query"] == "x"

    def test_other_error(self):
        ytmusic = Mock()
        ytmusic.search.side_effect = requests.exceptions.ConnectionError("connection reset")

        with pytest.raises(YouTubeError) as exc_info:
            YouTubeSearchProvider(ytmusic).search("x")

        assert not exc_info.value.is_rate_limit

    def test_rate_limit_markers(self):
        assert is_rate_limit_message("Quota exceeded")
        assert is_rate_limit_message("request was throttled")
        # "generate" contains "rate"
        assert not is_rate_limit_message("could not generate continuation")

    def test_build_ytmusic(self, tmp_path):
        auth_file = tmp_path / "browser.json"
        with patch("playlist_converter.youtube.provider.YTMusic") as ytmusic_cls:
            build_ytmusic(auth_file, language="de")
            build_ytmusic()

        assert ytmusic_cls.call_args_list[0].args == (str(auth_file),)
        assert ytmusic_cls.call_args_list[0].kwargs == {"language": "de"}
        assert ytmusic_cls.call_args_list[1].args == ()


class TestYouTubePlaylist:
    """Test playlist reading and writing"""

    def test_fetch_playlist(self):
        ytmusic = Mock()
        ytmusic.get_playlist.return_value = {
            "title": "Workout",
            "tracks": [
                {"videoId": "a", "title": "Imagine Dragons - Believer"},
                {"videoId": None, "title": "Deleted video"},
                {"videoId": "b", "title": "Ed Sheeran - Shape of You"},
            ],
        }

        name, tracks = fetch_youtube_playlist(ytmusic, "https://music.youtube.com/playlist?list=PL123")

        assert name == "Workout"
        assert [t.source_id for t in tracks] == ["a", "b"]
        ytmusic.get_playlist.assert_called_once_with("PL123", limit=None)

    def test_fetch_without_list_parameter(self):
        with pytest.raises(PlaylistError):
            fetch_youtube_playlist(Mock(), "https://www.youtube.com/watch?v=abc")

    def test_fetch_wraps_errors(self):
        ytmusic = Mock()
        ytmusic.get_playlist.side_effect = KeyError("contents")

        with pytest.raises(PlaylistError):
            fetch_youtube_playlist(ytmusic, "PL123")

    def test_writer_requires_auth(self):
        writer = YouTubePlaylistWriter(Mock(), authenticated=False)
        with pytest.raises(ConfigError):
            writer.create("Mix", [])

    def test_writer_rejects_unknown_privacy(self):
        writer = YouTubePlaylistWriter(Mock(), authenticated=True)
        with pytest.raises(ConfigError):
            writer.create("Mix", [], privacy="friends")

    def test_writer_adds_in_batches_of_50(self):
        ytmusic = Mock()
        ytmusic.create_playlist.return_value = "PLnew"
        ytmusic.add_playlist_items.return_value = {"status": "STATUS_SUCCEEDED"}
        records = [_found(f"v{i}") for i in range(120)]
        records.insert(3, MatchRecord.unmatched(SourceTrack(title="missing")))

        url = YouTubePlaylistWriter(ytmusic, authenticated=True).create("Mix", records, privacy="unlisted")

        assert url == "https://music.youtube.com/playlist?list=PLnew"
        ytmusic.create_playlist.assert_called_once_with(
            "Mix", "Converted with playlist-converter", privacy_status="UNLISTED"
        )
        sent = [c.args[1] for c in ytmusic.add_playlist_items.call_args_list]
        assert [len(b) for b in sent] == [50, 50, 20]
        assert sum(sent, []) == [f"v{i}" for i in range(120)]

    def test_writer_rejects_non_id_response(self):
        ytmusic = Mock()
        ytmusic.create_playlist.return_value = {"error": "bad request"}

        with pytest.raises(PlaylistError):
            YouTubePlaylistWriter(ytmusic, authenticated=True).create("Mix", [_found("a")])

    def test_writer_failed_status(self):
        ytmusic = Mock()
        ytmusic.create_playlist.return_value = "PLnew"
        ytmusic.add_playlist_items.return_value = {"status": "STATUS_FAILED"}

        with pytest.raises(PlaylistError):
            YouTubePlaylistWriter(ytmusic, authenticated=True).create("Mix", [_found("a")])
