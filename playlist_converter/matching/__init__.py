"""
Track matching engine.

Finds, for each track of a source playlist, the best corresponding item
on the destination platform. The same engine serves both directions; a
DirectionPolicy supplies the vocabularies, thresholds and timings.

Pipeline per track:
    normalizer   title cleanup and artist/song extraction
    queries      ordered, deduplicated search queries
    provider     destination search (Spotify or YouTube)
    ranker       scoring of every candidate against the source
    cache        bounded memo of previous decisions
    matcher      orchestration, early exit, backoff, cancellation

Usage:
    from playlist_converter.matching import TrackMatcher, TO_YOUTUBE

    matcher = TrackMatcher(provider, TO_YOUTUBE)
    records = matcher.match_all(tracks)
"""

from playlist_converter.matching.cache import MatchCache
from playlist_converter.matching.matcher import TrackMatcher, match_all
from playlist_converter.matching.models import (
    CacheEntry,
    CandidateResult,
    ExtractedInfo,
    MatchRecord,
    SourceTrack,
)
from playlist_converter.matching.normalizer import (
    cache_key,
    channel_artist,
    clean_title,
    extract_song_info,
    extract_track_info,
    is_regional,
    is_south_asian,
)
from playlist_converter.matching.policy import (
    POLICIES,
    TO_SPOTIFY,
    TO_YOUTUBE,
    DirectionPolicy,
    policy_for_destination,
)
from playlist_converter.matching.provider import SearchProvider
from playlist_converter.matching.queries import QueryBuilder, build_queries, calculate_query_priority
from playlist_converter.matching.ranker import CandidateRanker
from playlist_converter.matching.similarity import normalize_string, similarity

__all__ = [
    # Models
    "SourceTrack",
    "CandidateResult",
    "ExtractedInfo",
    "CacheEntry",
    "MatchRecord",
    # Text
    "normalize_string",
    "similarity",
    "clean_title",
    "extract_song_info",
    "extract_track_info",
    "channel_artist",
    "is_regional",
    "is_south_asian",
    "cache_key",
    # Policies
    "DirectionPolicy",
    "TO_SPOTIFY",
    "TO_YOUTUBE",
    "POLICIES",
    "policy_for_destination",
    # Engine
    "QueryBuilder",
    "build_queries",
    "calculate_query_priority",
    "CandidateRanker",
    "MatchCache",
    "SearchProvider",
    "TrackMatcher",
    "match_all",
]
