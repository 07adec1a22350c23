"""
Search query generation.

A source track is turned into an ordered list of search strings, most
specific first. The matcher runs them in order and stops early once a
confident match shows up, so the order is what makes the common case cost
a single search call.

Query layers, in priority order:
    1. Structured artist + song queries (policy templates, quoted or
       field-scoped) when both parts are at least 3 characters.
    2. Natural "song artist" and "artist song" concatenations
       (plus "song album" when the policy asks for it).
    3. Fragments of the raw title split on strong separators
       ("||", "&&", "--", " | "), ranked by calculate_query_priority().
    4. The main title alone, quoted when short.
    5. Main title plus regional qualifiers for titles in an Indic script
       or with romanized South Asian words.
    6. Artist-only queries.
    7. The cleaned title, if it differs from the main title.
    8. The raw title.
"""

import re

from playlist_converter.matching.models import ExtractedInfo, SourceTrack
from playlist_converter.matching.normalizer import (
    BRACKETED_RE,
    clean_title,
    extract_track_info,
    is_south_asian,
)
from playlist_converter.matching.policy import DirectionPolicy, TO_SPOTIFY


# Separators strong enough to split a title into independent fragments
STRONG_SEPARATORS_RE = re.compile(r"\|\||&&|--|\s+\|\s+")

# Structured parts shorter than this are not worth a structured query
MIN_STRUCTURED_LENGTH = 3

# Fragments must be longer than this to become a query
MIN_FRAGMENT_LENGTH = 4

# Number of fragments kept after ranking
MAX_FRAGMENTS = 3

# Main titles up to this length are searched as an exact phrase
SHORT_QUERY_LENGTH = 15

# Album names must be longer than this to get their own query
MIN_ALBUM_LENGTH = 3

# Query priority heuristic
SWEET_SPOT_BONUS = 10
ACCEPTABLE_LENGTH_BONUS = 5
GENRE_KEYWORD_BONUS = 15
TOO_MANY_WORDS_PENALTY = 5
YEAR_PENALTY = 3
BOILERPLATE_PENALTY = 10
TITLE_CASE_BONUS = 5

BOILERPLATE_RE = re.compile(r"\b(?:channel|subscribe|like|share|comment)\b", re.IGNORECASE)
YEAR_LIKE_RE = re.compile(r"\b\d{4}\b")
TITLE_CASE_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*$")


def calculate_query_priority(query: str, genre_keywords: tuple[str, ...] = ()) -> int:
    """
    Score how promising a title fragment is as a search query.

    Args:
        query: Candidate fragment.
        genre_keywords: Words that suggest the fragment is the song name.

    Returns:
        Integer priority; higher is better. Only the relative order matters.

    Example:
        calculate_query_priority("Yaad Piya Ki Aane Lagi", genre)  # 30
        calculate_query_priority("Subscribe to my channel")  # 0
    """
    priority = 0
    length = len(query)

    if 5 <= length <= 25:
        priority += SWEET_SPOT_BONUS
    elif length <= 40:
        priority += ACCEPTABLE_LENGTH_BONUS

    if genre_keywords:
        pattern = "|".join(re.escape(k) for k in genre_keywords)
        if re.search(rf"\b(?:{pattern})\b", query, re.IGNORECASE):
            priority += GENRE_KEYWORD_BONUS

    if len(query.split()) > 6:
        priority -= TOO_MANY_WORDS_PENALTY

    if YEAR_LIKE_RE.search(query):
        priority -= YEAR_PENALTY

    if BOILERPLATE_RE.search(query):
        priority -= BOILERPLATE_PENALTY

    if TITLE_CASE_RE.match(query):
        priority += TITLE_CASE_BONUS

    return priority


class QueryBuilder:
    """
    Builds the ordered search query list for one direction.

    Example:
        builder = QueryBuilder(TO_SPOTIFY)
        builder.build(SourceTrack(title="Ed Sheeran - Shape of You"))
        # ['track:"Shape of You" artist:"Ed Sheeran"',
        #  '"Shape of You" "Ed Sheeran"',
        #  'Shape of You Ed Sheeran', ...]
    """

    def __init__(self, policy: DirectionPolicy = TO_SPOTIFY) -> None:
        self._policy = policy

    @property
    def policy(self) -> DirectionPolicy:
        return self._policy

    def build(self, track: SourceTrack, info: ExtractedInfo | None = None) -> list[str]:
        """
        Build the query list for a source track.

        Args:
            track: Track to search for.
            info: Pre-extracted fields. Extracted from `track` if None.

        Returns:
            Distinct, non-empty queries in priority order. Empty for a
            blank title with no artist.
        """
        policy = self._policy
        if info is None:
            info = extract_track_info(track, policy.noise_words)

        raw_title = " ".join(track.title.split())
        queries: list[str] = []

        song = info.song
        artist = info.artist

        # 1. Structured
        if song and artist and len(song) >= MIN_STRUCTURED_LENGTH and len(artist) >= MIN_STRUCTURED_LENGTH:
            for template in policy.structured_templates:
                queries.append(template.format(song=song, artist=artist))

        # 2. Natural
        if song and artist:
            queries.append(f"{song} {artist}")
            queries.append(f"{artist} {song}")
            album = (track.album or "").strip()
            if (
                policy.include_album_query
                and len(album) > MIN_ALBUM_LENGTH
                and album.lower() != song.lower()
            ):
                queries.append(f"{song} {artist} {album}")

        # 3. Fragments
        for fragment in self._ranked_fragments(raw_title):
            queries.append(f'"{fragment}"')
            queries.append(fragment)

        # 4. Main title
        main_title = info.main_title
        if main_title:
            if len(main_title) <= SHORT_QUERY_LENGTH:
                queries.append(f'"{main_title}"')
            else:
                queries.append(main_title)

            # 5. Regional
            if is_south_asian(raw_title, policy.regional_markers):
                for qualifier in policy.regional_qualifiers:
                    queries.append(f"{main_title} {qualifier}")

        # 6. Artist only
        if artist:
            for template in policy.artist_templates:
                queries.append(template.format(artist=artist))

        # 7. Cleaned title
        cleaned = clean_title(raw_title, policy.noise_words)
        if cleaned and cleaned != main_title:
            queries.append(cleaned)

        # 8. Raw title
        queries.append(raw_title)

        return _dedupe(queries)

    def _ranked_fragments(self, raw_title: str) -> list[str]:
        parts = STRONG_SEPARATORS_RE.split(raw_title)
        if len(parts) < 2:
            return []

        fragments = []
        for part in parts:
            fragment = _strip_fragment_noise(part, self._policy.fragment_noise_words)
            if len(fragment) > MIN_FRAGMENT_LENGTH:
                fragments.append(fragment)

        # sorted() is stable: equal priorities keep title order
        fragments = sorted(
            fragments,
            key=lambda f: calculate_query_priority(f, self._policy.genre_keywords),
            reverse=True
        )
        return fragments[:MAX_FRAGMENTS]


def _strip_fragment_noise(fragment: str, noise_words: tuple[str, ...]) -> str:
    text = BRACKETED_RE.sub(" ", fragment)
    if noise_words:
        pattern = "|".join(re.escape(w) for w in sorted(noise_words, key=len, reverse=True))
        text = re.sub(rf"\b(?:{pattern})\b", " ", text, flags=re.IGNORECASE)
    return " ".join(text.split()).strip(" -|:,.")


def _dedupe(queries: list[str]) -> list[str]:
    seen = set()
    result = []
    for query in queries:
        query = query.strip()
        if not query or query in seen:
            continue
        seen.add(query)
        result.append(query)
    return result


def build_queries(
    track: SourceTrack,
    policy: DirectionPolicy = TO_SPOTIFY,
    info: ExtractedInfo | None = None
) -> list[str]:
    """Build the query list for `track` under `policy`."""
    return QueryBuilder(policy).build(track, info)
