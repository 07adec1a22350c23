"""Test candidate scoring"""

from dataclasses import replace

import pytest

from playlist_converter.matching.models import CandidateResult, SourceTrack
from playlist_converter.matching.normalizer import extract_track_info
from playlist_converter.matching.policy import TO_SPOTIFY, TO_YOUTUBE
from playlist_converter.matching.ranker import CandidateRanker


def _candidate(title, artists=(), duration_ms=None, **kwargs):
    return CandidateResult(
        external_id="id",
        url="https://example.com/id",
        title=title,
        artists=tuple(artists),
        duration_ms=duration_ms,
        **kwargs
    )


class TestRankerToSpotify:
    """Test scoring of Spotify candidates for YouTube sources"""

    def test_exact_match_scores_high(self, youtube_source, spotify_candidate):
        ranker = CandidateRanker(TO_SPOTIFY)
        assert ranker.score(youtube_source, spotify_candidate) == 1.0

    def test_studio_beats_karaoke(self, youtube_source, spotify_candidate, karaoke_candidate):
        ranker = CandidateRanker(TO_SPOTIFY)
        studio = ranker.score(youtube_source, spotify_candidate)
        karaoke = ranker.score(youtube_source, karaoke_candidate)
        assert studio > karaoke
        assert karaoke <= TO_SPOTIFY.accept_floor

    def test_unrelated_title_is_rejected(self, youtube_source):
        ranker = CandidateRanker(TO_SPOTIFY)
        candidate = _candidate("Bohemian Rhapsody", ["Queen"], 354000, popularity=95)
        assert ranker.score(youtube_source, candidate) == 0.0

    def test_score_is_clamped(self, youtube_source, spotify_candidate):
        score = CandidateRanker(TO_SPOTIFY).score(youtube_source, spotify_candidate)
        assert 0.0 <= score <= 1.0


class TestRankerToYouTube:
    """Test scoring of YouTube candidates for Spotify sources"""

    def test_official_video_scores_high(self, spotify_source, youtube_candidate):
        ranker = CandidateRanker(TO_YOUTUBE)
        assert ranker.score(spotify_source, youtube_candidate) == 1.0

    def test_too_short_candidate_is_rejected(self, spotify_source):
        ranker = CandidateRanker(TO_YOUTUBE)
        candidate = _candidate("Shape of You", ["Ed Sheeran"], 20000)
        assert ranker.is_invalid_candidate(spotify_source, candidate)
        assert ranker.score(spotify_source, candidate) == 0.0

    def test_non_music_candidate_is_rejected(self, spotify_source):
        ranker = CandidateRanker(TO_YOUTUBE)
        candidate = _candidate("Shape of You REACTION", ["Some Streamer"], 600000)
        assert ranker.score(spotify_source, candidate) == 0.0

    def test_non_music_word_in_source_is_allowed(self):
        ranker = CandidateRanker(TO_YOUTUBE)
        source = SourceTrack(title="Chain Reaction", artist="Diana Ross")
        candidate = _candidate("Diana Ross - Chain Reaction", ["Diana Ross"], 230000)
        assert not ranker.is_invalid_candidate(source, candidate)

    def test_short_candidate_penalty(self, spotify_source):
        ranker = CandidateRanker(TO_YOUTUBE)
        full = _candidate("Shape of You", ["Ed Sheeran"], None)
        short = _candidate("Shape of You", ["Ed Sheeran"], 40000)
        assert ranker.score(spotify_source, short) < ranker.score(spotify_source, full)


class TestVersionMismatch:
    """Test version keyword handling"""

    def test_candidate_version_not_in_source(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        source = SourceTrack(title="Shape of You")
        assert ranker.has_version_mismatch(source, _candidate("Shape of You - Acoustic"))

    def test_matching_versions_are_not_penalized(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        source = SourceTrack(title="Shape of You (Acoustic)")
        assert not ranker.has_version_mismatch(source, _candidate("Shape of You - Acoustic"))

    def test_album_counts_as_source_text(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        source = SourceTrack(title="Shape of You", album="Acoustic Sessions")
        assert not ranker.has_version_mismatch(source, _candidate("Shape of You - Acoustic"))

    def test_keywords_match_whole_words(self):
        ranker = CandidateRanker(TO_YOUTUBE)
        source = SourceTrack(title="Credits", artist="Someone")
        # "edit" appears inside "Credits"
        assert not ranker.has_version_mismatch(source, _candidate("Credits (Audio)"))


class TestComponents:
    """Test duration and popularity components"""

    def test_duration_score(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        assert ranker.duration_score(200000, 200000) == 1.0
        assert ranker.duration_score(200000, 260000) == pytest.approx(0.5)
        assert ranker.duration_score(200000, 400000) == 0.0

    def test_duration_tolerance_grows_with_length(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        # 30% of 600s = 180s tolerance
        assert ranker.duration_score(600000, 690000) == pytest.approx(0.5)

    def test_unknown_duration_is_neutral(self):
        assert CandidateRanker(TO_SPOTIFY).duration_score(None, 200000) == 0.5
        assert CandidateRanker(TO_YOUTUBE).duration_score(200000, None) == 0.6

    def test_popularity_bonus(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        assert ranker.popularity_bonus(_candidate("x", popularity=100)) == pytest.approx(0.15)
        assert ranker.popularity_bonus(_candidate("x", popularity=0)) == 0.0

    def test_view_count_bonus(self):
        ranker = CandidateRanker(TO_YOUTUBE)
        assert ranker.popularity_bonus(_candidate("x", view_count=10_000)) == pytest.approx(0.2)
        assert ranker.popularity_bonus(_candidate("x", view_count=10**9)) == pytest.approx(0.25)
        assert ranker.popularity_bonus(_candidate("x", view_count=500)) == 0.0


class TestVersionAsymmetry:
    """Test that version penalties only apply when the source is the studio version"""

    @pytest.mark.parametrize("policy", [TO_SPOTIFY, TO_YOUTUBE], ids=lambda p: p.name)
    def test_karaoke_candidate_prefers_karaoke_source(self, policy, karaoke_candidate):
        ranker = CandidateRanker(policy)
        studio = SourceTrack(title="Shape of You", artist="Ed Sheeran")
        karaoke = SourceTrack(title="Shape of You (Karaoke Version)", artist="Sing King")

        assert ranker.has_version_mismatch(studio, karaoke_candidate)
        assert not ranker.has_version_mismatch(karaoke, karaoke_candidate)
        assert ranker.score(karaoke, karaoke_candidate) > ranker.score(studio, karaoke_candidate)


class TestWordCountPenalty:
    """Test the penalty for titles with very different word counts"""

    def test_long_candidate_title_is_penalized(self):
        source = SourceTrack(title="Shape of You", artist="Ed Sheeran")
        candidate = _candidate("Shape of You Extended Club Mix", ["Ed Sheeran"])
        lenient = CandidateRanker(replace(TO_SPOTIFY, word_count_penalty=0.0))
        strict = CandidateRanker(TO_SPOTIFY)

        difference = lenient.score(source, candidate) - strict.score(source, candidate)
        assert difference == pytest.approx(TO_SPOTIFY.word_count_penalty)

    def test_one_extra_word_is_tolerated(self):
        source = SourceTrack(title="Shape of You", artist="Ed Sheeran")
        candidate = _candidate("Shape of You Remastered", ["Ed Sheeran"])
        lenient = CandidateRanker(replace(TO_SPOTIFY, word_count_penalty=0.0))
        strict = CandidateRanker(TO_SPOTIFY)

        assert strict.score(source, candidate) == lenient.score(source, candidate)


class TestOfficialBonus:
    """Test official upload detection for YouTube candidates"""

    @pytest.fixture
    def info(self, spotify_source):
        return extract_track_info(spotify_source)

    def test_official_flag(self, info):
        candidate = _candidate("Shape of You", ["Atlantic Records"], is_official=True)
        assert CandidateRanker(TO_YOUTUBE).official_bonus(candidate, info) == TO_YOUTUBE.official_bonus

    def test_artist_named_channel(self, info):
        candidate = _candidate("Shape of You", ["Ed Sheeran - Topic"])
        assert CandidateRanker(TO_YOUTUBE).official_bonus(candidate, info) == TO_YOUTUBE.official_bonus

    def test_official_in_title_only(self, info):
        candidate = _candidate("Shape of You (Official Video)", ["Sing King"])
        assert CandidateRanker(TO_YOUTUBE).official_bonus(candidate, info) == TO_YOUTUBE.official_title_bonus

    def test_unofficial_upload(self, info):
        candidate = _candidate("Shape of You", ["Sing King"])
        assert CandidateRanker(TO_YOUTUBE).official_bonus(candidate, info) == 0.0

    def test_no_bonus_when_converting_to_spotify(self, info):
        candidate = _candidate("Shape of You", ["Ed Sheeran"], is_official=True)
        assert CandidateRanker(TO_SPOTIFY).official_bonus(candidate, info) == 0.0


class TestTitleThresholdsInScore:
    """Test the title similarity floor applied by score()"""

    def test_regional_title_gets_lower_floor(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        # One of four words shared: similarity 0.25
        candidate = _candidate("Main Street Blues")

        assert ranker.score(SourceTrack(title="Tera Yaar Hoon Main"), candidate) > 0.0
        assert ranker.score(SourceTrack(title="Walk Down Main Road"), candidate) == 0.0

    def test_short_title_gets_relief(self):
        ranker = CandidateRanker(TO_SPOTIFY)
        # Two of seven words shared: similarity ~0.29
        candidate = _candidate("Lost Main Street Blues Night Drive Home", ["Someone"])

        assert ranker.score(SourceTrack(title="Lost Main", artist="Someone"), candidate) > 0.0
        assert ranker.score(SourceTrack(title="Lost Main Avenue", artist="Someone"), candidate) == 0.0
