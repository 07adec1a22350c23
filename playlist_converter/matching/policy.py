"""
Direction policies for the matching engine.

The engine is the same in both directions; everything that differs between
"YouTube video title -> Spotify track" and "Spotify track -> YouTube video"
lives in a DirectionPolicy: vocabularies, query templates, ranking weights,
penalties, thresholds and timing.

Policies:
    TO_SPOTIFY: Source is a noisy YouTube video title, destination is the
                Spotify catalog (field-scoped search syntax, popularity 0-100).
    TO_YOUTUBE: Source is a structured Spotify track, destination is YouTube
                videos (view counts, official channels, non-music uploads).

Tuning:
    Every constant is a field, so config.yaml overrides are applied with
    policy.with_overrides(...) instead of patching module globals.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from playlist_converter.core.exceptions import ConfigError
from playlist_converter.matching.normalizer import (
    NOISE_WORDS,
    REGIONAL_MARKERS,
)


# Fields config.yaml is allowed to override, per direction
TUNABLE_FIELDS = (
    "accept_floor",
    "early_exit_score",
    "query_delay",
    "rate_limit_backoff",
    "error_backoff",
)


@dataclass(frozen=True)
class RankingWeights:
    """
    Weights of the candidate ranker's weighted sum.

    Attributes:
        title: Weight of the title similarity component.
        artist: Weight of the artist similarity component.
        duration: Weight of the duration agreement component.
        source_title: Weight of the raw source title when picking the
                      best title similarity.
        main_title: Weight of the extracted main title.
        song: Weight of the extracted song name.
    """
    title: float
    artist: float
    duration: float
    source_title: float = 0.8
    main_title: float = 1.0
    song: float = 0.95


@dataclass(frozen=True)
class TitleThresholds:
    """
    Minimum title similarity below which a candidate is rejected outright.

    Attributes:
        default: Minimum for ordinary Latin-script titles.
        regional: Minimum for non-ASCII or regional-language titles.
        short_title_relief: Subtracted again when the main title is short.
        short_title_length: Main titles up to this many characters are short.
    """
    default: float = 0.3
    regional: float = 0.2
    short_title_relief: float = 0.05
    short_title_length: int = 10

    def minimum(self, regional: bool, short: bool) -> float:
        threshold = self.regional if regional else self.default
        if short:
            threshold -= self.short_title_relief
        return max(threshold, 0.0)


@dataclass(frozen=True)
class DirectionPolicy:
    """
    Every direction-specific constant of the matching engine.

    Attributes:
        name: Policy identifier, also the cache namespace ("to_spotify").
        destination: Destination platform ("spotify" or "youtube").

        noise_words: Tokens removed from titles before splitting.
        fragment_noise_words: Extra tokens stripped from separator fragments.
        genre_keywords: Words that raise a fragment's query priority.
        regional_markers: Words that mark a title as regional-language.
        regional_qualifiers: Suffixes appended to regional titles
                             ("bollywood", "hindi song").

        structured_templates: Query templates using {song} and {artist}.
        artist_templates: Artist-only query templates using {artist}.
        include_album_query: Add a "{song} {album}" query when the album
                             differs from the song.
        clean_candidate_titles: Compare against the cleaned candidate
                                title as well (video titles are noisy).

        version_keywords: Version markers penalized when present in the
                          candidate but absent from the source.
        reject_patterns: Candidate title patterns that mark non-music
                         uploads. Such candidates score 0.
        min_candidate_duration_ms: Candidates shorter than this score 0.
        short_candidate_duration_ms: Candidates shorter than this get
                                     short_candidate_penalty.

        thresholds: Title similarity rejection thresholds.
        weights: Ranker weights.
        duration_floor_ms: Minimum duration tolerance.
        duration_tolerance_ratio: Tolerance as a fraction of source duration.
        unknown_duration_score: Neutral score when a duration is missing.
        popularity_cap: Maximum popularity / view-count bonus.
        official_bonus: Bonus for official channels or artist-named sources.
        official_title_bonus: Bonus when only the title says "official".
        exact_match_bonus: Bonus for near-exact title and artist matches.
        artist_in_title_weight: Credit for the artist appearing in the
                                candidate title. 0 disables the check.
        version_penalty: Penalty for a version keyword mismatch.
        word_count_penalty: Penalty when word counts differ by more than one.
        short_candidate_penalty: Penalty for suspiciously short candidates.

        accept_floor: Scores at or below this are never accepted.
        early_exit_score: Stop querying once the best score exceeds this.
        query_delay: Seconds to wait between successive queries.
        rate_limit_backoff: Seconds to wait after a rate-limited query.
        error_backoff: Seconds to wait after any other failed query.
        search_limit: Number of results requested per query.
    """
    name: str
    destination: str

    noise_words: tuple[str, ...] = NOISE_WORDS
    fragment_noise_words: tuple[str, ...] = ()
    genre_keywords: tuple[str, ...] = ()
    regional_markers: tuple[str, ...] = REGIONAL_MARKERS
    regional_qualifiers: tuple[str, ...] = ()

    structured_templates: tuple[str, ...] = ()
    artist_templates: tuple[str, ...] = ()
    include_album_query: bool = False
    clean_candidate_titles: bool = False

    version_keywords: tuple[str, ...] = ()
    reject_patterns: tuple[str, ...] = ()
    min_candidate_duration_ms: int = 0
    short_candidate_duration_ms: int = 0

    thresholds: TitleThresholds = field(default_factory=TitleThresholds)
    weights: RankingWeights = field(default_factory=lambda: RankingWeights(0.45, 0.35, 0.12))
    duration_floor_ms: int = 120_000
    duration_tolerance_ratio: float = 0.3
    unknown_duration_score: float = 0.5
    popularity_cap: float = 0.15
    official_bonus: float = 0.0
    official_title_bonus: float = 0.0
    exact_match_bonus: float = 0.0
    artist_in_title_weight: float = 0.0
    version_penalty: float = 0.3
    word_count_penalty: float = 0.2
    short_candidate_penalty: float = 0.0

    accept_floor: float = 0.2
    early_exit_score: float = 0.7
    query_delay: float = 0.1
    rate_limit_backoff: float = 3.0
    error_backoff: float = 0.5
    search_limit: int = 15

    def __post_init__(self) -> None:
        if self.rate_limit_backoff <= self.error_backoff:
            raise ConfigError(
                f"Policy '{self.name}': rate_limit_backoff must be larger than error_backoff",
                details={
                    "rate_limit_backoff": self.rate_limit_backoff,
                    "error_backoff": self.error_backoff,
                }
            )
        if not 0.0 <= self.accept_floor <= self.early_exit_score:
            raise ConfigError(
                f"Policy '{self.name}': accept_floor must be between 0 and early_exit_score",
                details={
                    "accept_floor": self.accept_floor,
                    "early_exit_score": self.early_exit_score,
                }
            )

    def with_overrides(self, **values: Any) -> "DirectionPolicy":
        """
        Return a copy of this policy with some tunables replaced.

        Only TUNABLE_FIELDS may be overridden. None values are ignored, so
        config sections can pass every key through unconditionally.

        Raises:
            ConfigError: Unknown field, or the result violates the backoff
                         ordering.

        Example:
            policy = TO_SPOTIFY.with_overrides(query_delay=0.5)
        """
        unknown = set(values) - set(TUNABLE_FIELDS)
        if unknown:
            raise ConfigError(
                f"Unknown matching option(s): {', '.join(sorted(unknown))}",
                details={"policy": self.name, "allowed": list(TUNABLE_FIELDS)}
            )
        changes = {k: v for k, v in values.items() if v is not None}
        if not changes:
            return self
        return replace(self, **changes)


TO_SPOTIFY = DirectionPolicy(
    name="to_spotify",
    destination="spotify",
    noise_words=NOISE_WORDS + (
        "full song",
        "new song",
        "latest",
        "songs",
        "hindi",
        "english",
        "bollywood",
        "punjabi",
    ),
    fragment_noise_words=(
        "official",
        "video",
        "audio",
        "lyrics",
        "hd",
        "4k",
        "full song",
    ),
    genre_keywords=(
        "yaad", "piya", "aane", "lagi", "tera", "mera", "hai", "mein", "ko",
        "ki", "ka", "se", "tum", "hum", "dil", "ishq", "pyar", "saath",
        "zindagi",
    ),
    regional_qualifiers=("bollywood", "hindi song"),
    structured_templates=(
        'track:"{song}" artist:"{artist}"',
        '"{song}" "{artist}"',
    ),
    artist_templates=('artist:"{artist}"',),
    version_keywords=(
        "cover",
        "karaoke",
        "instrumental",
        "remix",
        "acoustic",
        "live",
        "piano",
    ),
    weights=RankingWeights(title=0.45, artist=0.35, duration=0.12),
    duration_floor_ms=120_000,
    unknown_duration_score=0.5,
    popularity_cap=0.15,
    exact_match_bonus=0.1,
    version_penalty=0.3,
    word_count_penalty=0.2,
    accept_floor=0.2,
    early_exit_score=0.7,
    query_delay=0.1,
    rate_limit_backoff=3.0,
    error_backoff=0.5,
)


TO_YOUTUBE = DirectionPolicy(
    name="to_youtube",
    destination="youtube",
    noise_words=NOISE_WORDS + (
        "remastered",
        "remaster",
        "radio edit",
        "single version",
        "album version",
        "mono",
        "stereo",
    ),
    fragment_noise_words=("official", "video", "audio", "lyrics"),
    genre_keywords=(
        "yaad", "piya", "aane", "lagi", "tera", "mera", "hai", "mein", "ko",
        "ki", "ka", "se", "tum", "hum", "dil", "ishq", "pyar", "saath",
        "zindagi",
    ),
    regional_qualifiers=("song",),
    structured_templates=(
        '"{song}" {artist}',
        "{song} {artist} official",
        "{song} {artist} music video",
    ),
    artist_templates=("{artist}",),
    include_album_query=True,
    clean_candidate_titles=True,
    version_keywords=(
        "cover", "remix", "karaoke", "instrumental", "acoustic", "live",
        "concert", "reaction", "tutorial", "how to", "slowed", "reverb",
        "lofi", "lo-fi", "8d", "nightcore", "bass boosted", "trap", "phonk",
        "edit", "tiktok", "shorts", "compilation", "mashup", "vs", "battle",
    ),
    reject_patterns=(
        r"\breaction\b", r"\breview\b", r"\bbreakdown\b", r"\banalysis\b",
        r"\bexplained\b", r"\btutorial\b", r"\bhow to\b", r"\bmaking of\b",
        r"\bbehind the scenes\b", r"\binterview\b", r"\bpodcast\b",
        r"\btalk show\b", r"\bnews\b", r"\btrailer\b", r"\bgameplay\b",
        r"\bgaming\b", r"\bfortnite\b", r"\bminecraft\b", r"\broblox\b",
        r"\bcrypto\b", r"\bnft\b", r"\bbitcoin\b", r"\bstock\b", r"\binvest",
    ),
    min_candidate_duration_ms=30_000,
    short_candidate_duration_ms=45_000,
    weights=RankingWeights(title=0.40, artist=0.35, duration=0.10),
    duration_floor_ms=180_000,
    unknown_duration_score=0.6,
    popularity_cap=0.25,
    official_bonus=0.2,
    official_title_bonus=0.1,
    artist_in_title_weight=0.7,
    version_penalty=0.5,
    word_count_penalty=0.2,
    short_candidate_penalty=0.3,
    accept_floor=0.25,
    early_exit_score=0.8,
    query_delay=0.15,
    rate_limit_backoff=5.0,
    error_backoff=1.0,
)


POLICIES = {
    "spotify": TO_SPOTIFY,
    "youtube": TO_YOUTUBE,
}


def policy_for_destination(destination: str) -> DirectionPolicy:
    """
    Return the default policy that converts into `destination`.

    Raises:
        ConfigError: Unknown destination platform.
    """
    try:
        return POLICIES[destination]
    except KeyError:
        raise ConfigError(
            f"Unsupported destination platform: {destination}",
            details={"destination": destination, "supported": list(POLICIES)}
        ) from None
