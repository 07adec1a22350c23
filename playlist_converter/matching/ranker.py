"""
Candidate scoring.

CandidateRanker.score() rates one destination search result against the
source track. The result is a float in [0, 1]; 0 means rejected.

Score composition:
    title_similarity * weights.title
    + artist_score * weights.artist
    + duration_score * weights.duration
    + popularity bonus (Spotify popularity or YouTube views, capped)
    + official bonus
    + exact match bonus
    - version keyword penalty
    - word count penalty
    - short candidate penalty
    clamped to [0, 1]

Hard rejections (score 0):
    - candidate shorter than policy.min_candidate_duration_ms
    - candidate title matches a non-music pattern the source does not
    - best title similarity below the policy threshold
"""

import math
import re

from playlist_converter.matching.models import (
    CandidateResult,
    ExtractedInfo,
    SourceTrack,
)
from playlist_converter.matching.normalizer import (
    clean_title,
    extract_song_info,
    extract_track_info,
    is_regional,
)
from playlist_converter.matching.policy import DirectionPolicy, TO_SPOTIFY
from playlist_converter.matching.similarity import (
    normalize_string,
    significant_words,
    similarity,
)


# View counts at or below this earn no bonus
MIN_VIEWS_FOR_BONUS = 1000

# log10(views) / VIEWS_LOG_DIVISOR, capped by policy.popularity_cap
VIEWS_LOG_DIVISOR = 20

# Thresholds for the exact match bonus
EXACT_TITLE_SIMILARITY = 0.95
EXACT_ARTIST_SIMILARITY = 0.8

# Word counts may differ by this much before the penalty applies
MAX_WORD_COUNT_DIFFERENCE = 1

OFFICIAL_TITLE_RE = re.compile(r"\bofficial\b|\bmusic video\b", re.IGNORECASE)


class CandidateRanker:
    """
    Scores destination candidates for one direction policy.

    The ranker is stateless apart from compiled patterns and can be shared
    between threads.

    Example:
        ranker = CandidateRanker(TO_SPOTIFY)
        score = ranker.score(source, candidate)
    """

    def __init__(self, policy: DirectionPolicy = TO_SPOTIFY) -> None:
        self._policy = policy
        self._version_re = _keyword_pattern(policy.version_keywords)
        self._reject_res = [re.compile(p, re.IGNORECASE) for p in policy.reject_patterns]

    @property
    def policy(self) -> DirectionPolicy:
        return self._policy

    def score(
        self,
        source: SourceTrack,
        candidate: CandidateResult,
        info: ExtractedInfo | None = None
    ) -> float:
        """
        Score a candidate against a source track.

        Args:
            source: The track being converted.
            candidate: One search result from the destination platform.
            info: Fields extracted from the source. Extracted if None.

        Returns:
            Score in [0, 1]. 0 means the candidate is rejected.
        """
        policy = self._policy
        weights = policy.weights
        if info is None:
            info = extract_track_info(source, policy.noise_words)

        if self.is_invalid_candidate(source, candidate):
            return 0.0

        title_sim, source_text, candidate_text = self._title_similarity(source, candidate, info)

        main_title = info.main_title or ""
        minimum = policy.thresholds.minimum(
            regional=is_regional(source.title, policy.regional_markers),
            short=0 < len(main_title) <= policy.thresholds.short_title_length
        )
        if title_sim < minimum:
            return 0.0

        artist_score = self._artist_score(candidate, info)
        duration_score = self.duration_score(source.duration_ms, candidate.duration_ms)

        bonus = self.popularity_bonus(candidate)
        bonus += self.official_bonus(candidate, info)
        if (
            policy.exact_match_bonus
            and title_sim > EXACT_TITLE_SIMILARITY
            and artist_score > EXACT_ARTIST_SIMILARITY
        ):
            bonus += policy.exact_match_bonus

        penalty = 0.0
        if self.has_version_mismatch(source, candidate):
            penalty += policy.version_penalty
        if _word_count_diverges(source_text, candidate_text):
            penalty += policy.word_count_penalty
        if (
            policy.short_candidate_duration_ms
            and candidate.duration_ms is not None
            and candidate.duration_ms < policy.short_candidate_duration_ms
        ):
            penalty += policy.short_candidate_penalty

        total = (
            title_sim * weights.title
            + artist_score * weights.artist
            + duration_score * weights.duration
            + bonus
            - penalty
        )
        return max(0.0, min(1.0, total))

    def is_invalid_candidate(self, source: SourceTrack, candidate: CandidateResult) -> bool:
        """Check for candidates that are too short or clearly not music."""
        policy = self._policy
        if (
            policy.min_candidate_duration_ms
            and candidate.duration_ms is not None
            and candidate.duration_ms < policy.min_candidate_duration_ms
        ):
            return True

        for pattern in self._reject_res:
            if pattern.search(candidate.title) and not pattern.search(source.title):
                return True
        return False

    def has_version_mismatch(self, source: SourceTrack, candidate: CandidateResult) -> bool:
        """
        True if the candidate is a different version of the song.

        Only penalizes in one direction: a karaoke source may match a
        karaoke candidate, a studio source must not.
        """
        if self._version_re is None:
            return False
        source_text = f"{source.title} {source.album or ''}"
        return bool(self._version_re.search(candidate.title)) and not self._version_re.search(source_text)

    def duration_score(self, source_ms: int | None, candidate_ms: int | None) -> float:
        """
        Duration agreement in [0, 1].

        Linear falloff up to max(duration_floor_ms, ratio * source duration).
        Returns the policy's neutral score when either duration is unknown.
        """
        policy = self._policy
        if not source_ms or not candidate_ms:
            return policy.unknown_duration_score
        tolerance = max(policy.duration_floor_ms, source_ms * policy.duration_tolerance_ratio)
        return max(0.0, 1.0 - abs(source_ms - candidate_ms) / tolerance)

    def popularity_bonus(self, candidate: CandidateResult) -> float:
        """Spotify popularity (linear) or YouTube views (log10), capped."""
        cap = self._policy.popularity_cap
        if candidate.popularity is not None:
            return min(cap, max(candidate.popularity, 0) / 100 * cap)
        if candidate.view_count is not None and candidate.view_count > MIN_VIEWS_FOR_BONUS:
            return min(cap, math.log10(candidate.view_count) / VIEWS_LOG_DIVISOR)
        return 0.0

    def _title_similarity(
        self,
        source: SourceTrack,
        candidate: CandidateResult,
        info: ExtractedInfo
    ) -> tuple[float, str, str]:
        """Weighted best title similarity plus the texts that produced it."""
        weights = self._policy.weights
        source_variants = [
            (source.title, weights.source_title),
            (info.main_title, weights.main_title),
            (info.song, weights.song),
        ]

        candidate_titles = [candidate.title]
        if self._policy.clean_candidate_titles:
            candidate_titles.append(clean_title(candidate.title, self._policy.noise_words))
            candidate_titles.append(extract_song_info(candidate.title, self._policy.noise_words).song)

        best = (0.0, source.title, candidate.title)
        for candidate_title in candidate_titles:
            if not candidate_title:
                continue
            for text, weight in source_variants:
                if not text:
                    continue
                value = similarity(text, candidate_title) * weight
                if value > best[0]:
                    best = (value, text, candidate_title)
        return best

    def _artist_score(self, candidate: CandidateResult, info: ExtractedInfo) -> float:
        if not info.artist:
            return 0.0

        score = max((similarity(info.artist, name) for name in candidate.artists), default=0.0)
        if self._policy.artist_in_title_weight:
            in_title = similarity(info.artist, candidate.title) * self._policy.artist_in_title_weight
            score = max(score, in_title)
        return score

    def official_bonus(self, candidate: CandidateResult, info: ExtractedInfo) -> float:
        """Bonus for official or artist-named uploads, smaller for an "Official" title alone."""
        policy = self._policy
        if not policy.official_bonus and not policy.official_title_bonus:
            return 0.0

        if candidate.is_official:
            return policy.official_bonus

        if info.artist:
            artist = normalize_string(info.artist)
            if artist and any(artist in normalize_string(name) for name in candidate.artists):
                return policy.official_bonus

        if OFFICIAL_TITLE_RE.search(candidate.title):
            return policy.official_title_bonus
        return 0.0


def _keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern | None:
    if not keywords:
        return None
    alternatives = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


def _word_count_diverges(source_text: str, candidate_text: str) -> bool:
    source_words = significant_words(source_text)
    candidate_words = significant_words(candidate_text)
    if not source_words or not candidate_words:
        return False
    return abs(len(source_words) - len(candidate_words)) > MAX_WORD_COUNT_DIFFERENCE
