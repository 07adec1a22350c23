"""
Data models for the track matching engine.

This module defines the platform-neutral dataclasses that flow through the
matcher: the source track being converted, the candidates returned by a
destination search, the fields extracted from a noisy title, and the final
match decision.

Design:
    All models are frozen. Platform-specific payloads (spotipy dicts,
    ytmusicapi dicts) are folded into these shapes by the spotify/ and
    youtube/ packages before they reach the matcher, so the scoring code
    never looks at platform field names.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceTrack:
    """
    Immutable description of an item on the platform being converted from.

    Attributes:
        title: Title as shown on the source platform.
               For YouTube this is the raw, unstructured video title.
               Example: "Ed Sheeran - Shape of You (Official Music Video)"

        artist: Structured artist string, if the source platform has one.
                Multiple artists are comma separated.
                Example: "Ed Sheeran, Stormzy"

        album: Album name, if known.

        duration_ms: Duration in milliseconds, or None if unknown.

        channel: Uploader/channel name (YouTube sources only). Stands in
                 for the artist when the title names none, unless it
                 is a label channel.

        source_id: Stable identifier on the source platform.

        url: Link to the item on the source platform.
    """

    title: str
    artist: str | None = None
    album: str | None = None
    duration_ms: int | None = None
    channel: str | None = None
    source_id: str | None = None
    url: str | None = None

    @property
    def primary_artist(self) -> str | None:
        """First artist of a comma separated artist string."""
        if not self.artist:
            return None
        first = self.artist.split(",")[0].strip()
        return first or None

    @property
    def display_name(self) -> str:
        """Human-readable "Artist - Title" label used in log messages."""
        if self.artist:
            return f"{self.artist} - {self.title}"
        return self.title


@dataclass(frozen=True)
class CandidateResult:
    """
    A single item returned by a destination-platform search.

    Attributes:
        external_id: Platform ID (Spotify track ID or YouTube video ID).
        url: Full URL of the item on the destination platform.
        title: Title of the track or video.
        artists: Artist names. For YouTube videos this is the channel.
        duration_ms: Duration in milliseconds, or None if unknown.
        popularity: Spotify popularity (0-100), None on YouTube.
        view_count: YouTube view count, None on Spotify.
        is_official: Whether the result comes from an official/verified
                     source (label channel, VEVO, "- Topic", ...).
        album: Album name if the platform reports one.
    """

    external_id: str
    url: str
    title: str
    artists: tuple[str, ...] = ()
    duration_ms: int | None = None
    popularity: int | None = None
    view_count: int | None = None
    is_official: bool = False
    album: str | None = None

    @property
    def artist_names(self) -> str:
        """Comma separated artist names."""
        return ", ".join(self.artists)


@dataclass(frozen=True)
class ExtractedInfo:
    """
    Fields recovered from a raw title by the normalizer.

    `main_title` is always populated for a non-empty title. `artist` and
    `song` are only populated when a structural separator pattern matched
    with both sides at least two characters long.
    """

    artist: str | None = None
    song: str | None = None
    main_title: str | None = None


@dataclass(frozen=True)
class CacheEntry:
    """Cached outcome for one normalized source key."""

    candidate: CandidateResult | None
    score: float = 0.0


@dataclass(frozen=True)
class MatchRecord:
    """
    Final matching decision for one source track.

    Attributes:
        source_track: The track that was matched.
        best_candidate: The chosen destination item, or None.
        found: True if best_candidate is not None.
        score: Ranker score of the chosen candidate (0.0 when not found).

    Example:
        record = matcher.match_track(track)
        if record.found:
            print(f"{record.best_candidate.url} ({record.score:.2f})")
    """

    source_track: SourceTrack
    best_candidate: CandidateResult | None
    found: bool
    score: float = 0.0

    @property
    def url(self) -> str | None:
        """Destination URL if matched."""
        return self.best_candidate.url if self.best_candidate else None

    @classmethod
    def matched(
        cls,
        source_track: SourceTrack,
        candidate: CandidateResult,
        score: float
    ) -> "MatchRecord":
        """Create a successful match record."""
        return cls(
            source_track=source_track,
            best_candidate=candidate,
            found=True,
            score=score
        )

    @classmethod
    def unmatched(cls, source_track: SourceTrack) -> "MatchRecord":
        """Create a record for a track with no acceptable candidate."""
        return cls(
            source_track=source_track,
            best_candidate=None,
            found=False,
            score=0.0
        )

    @classmethod
    def from_cache(cls, source_track: SourceTrack, entry: CacheEntry) -> "MatchRecord":
        """Rebuild a record from a cache entry."""
        if entry.candidate is None:
            return cls.unmatched(source_track)
        return cls.matched(source_track, entry.candidate, entry.score)
