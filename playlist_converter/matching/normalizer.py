"""
Title normalization for the matching engine.

Video titles are unstructured ("Pillu - Official Video | Sanju Rathod |
G-SPXRK"), track titles carry their own decorations ("Song - Remastered
2011"). This module strips the noise and recovers whatever structure the
title has, so the query builder and ranker can work on the parts that
actually name the song.

Functions:
    clean_title: Remove noise tokens, bracketed annotations, years and
                 trailing "- Official Video" style tails.
    extract_song_info: Split a raw title into artist / song / main title.
    extract_track_info: Same, but prefers structured metadata when the
                        source platform provides an artist.
    channel_artist: Derive an artist name from an uploader channel.
    is_regional: Detect non-ASCII or regional-language titles.
    is_south_asian: Detect Indic-script or romanized South Asian titles.
    is_boilerplate: Detect channel boilerplate segments.
    cache_key: Normalized key used by the match cache.

All functions are pure and deterministic.
"""

import re

from playlist_converter.matching.models import ExtractedInfo, SourceTrack


# Version/quality markers removed from titles before matching
NOISE_WORDS = (
    "official music video",
    "official video",
    "official audio",
    "music video",
    "lyric video",
    "full song",
    "full video",
    "official",
    "video",
    "audio",
    "lyrics",
    "lyric",
    "visualizer",
    "mv",
    "hd",
    "hq",
    "4k",
    "remix",
    "cover",
    "karaoke",
)

# Segments that describe the channel rather than the song
BOILERPLATE_WORDS = (
    "official",
    "subscribe",
    "channel",
    "like",
    "share",
    "comment",
    "follow",
)

# Language names and function words common in romanized South Asian titles
REGIONAL_MARKERS = (
    "bollywood",
    "hindi",
    "punjabi",
    "tamil",
    "telugu",
    "marathi",
    "bengali",
    "gujarati",
    "mein",
    "hai",
    "ko",
    "ki",
    "ka",
    "se",
    "kya",
    "tera",
    "mera",
    "yaad",
    "piya",
    "aasman",
    "badal",
)

# Minimum length of each side of a structural split
MIN_SIDE_LENGTH = 2

# "Stand by Me" is a song, not "Stand" by "Me"
MIN_BY_ARTIST_LENGTH = 3

# Channel names containing these belong to labels or distributors
LABEL_CHANNEL_WORDS = (
    "records",
    "music",
    "entertainment",
    "films",
    "studios",
    "label",
)

BRACKETED_RE = re.compile(r"[\(\[\{][^\)\]\}]*[\)\]\}]")
YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
NON_ASCII_RE = re.compile(r"[^\x00-\x7F]")
# Devanagari through Sinhala
INDIC_SCRIPT_RE = re.compile(r"[\u0900-\u0DFF]")
TOPIC_SUFFIX_RE = re.compile(r"\s*-\s*topic$", re.IGNORECASE)
VEVO_SUFFIX_RE = re.compile(r"vevo$", re.IGNORECASE)
CAMEL_CASE_RE = re.compile(r"(?<=[a-z])(?=[A-Z])")
DANGLING_SEPARATORS_RE = re.compile(r"(?:\s*[-–—|:]){2,}\s*")
SEPARATOR_CHARS = " -–—|:,."

# Structural patterns with the minimum artist length each accepts, tried in
# order. The 3-part pattern is a specialization of "A - B" and must run first.
SPLIT_PATTERNS = (
    (re.compile(r"^(?P<movie>.+?)\s+[-–—]\s+(?P<song>.+?)\s+\|\s+(?P<artist>.+?)(?:\s+\|\s+.*)?$"), MIN_SIDE_LENGTH),
    (re.compile(r"^(?P<artist>.+?)\s+[-–—]\s+(?P<song>.+?)(?:\s+[-–—|]\s+.*)?$"), MIN_SIDE_LENGTH),
    (re.compile(r"^(?P<song>.+?)\s+\|\s+(?P<artist>.+?)(?:\s+\|\s+.*)?$"), MIN_SIDE_LENGTH),
    (re.compile(r"^(?P<artist>[^:]+?):\s+(?P<song>.+)$"), MIN_SIDE_LENGTH),
    (re.compile(r"^(?P<song>.+?)\s+by\s+(?P<artist>.+)$", re.IGNORECASE), MIN_BY_ARTIST_LENGTH),
)


def _word_pattern(words: tuple[str, ...]) -> str:
    # Longest first so "official video" wins over "official"
    ordered = sorted(words, key=len, reverse=True)
    return "|".join(re.escape(w) for w in ordered)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def strip_noise(raw_title: str, noise_words: tuple[str, ...] = NOISE_WORDS) -> str:
    """
    Remove bracketed annotations, noise tokens and years, keeping separators.

    Separators left without content on one side are merged, so
    "Pillu - Official Video | Sanju Rathod" becomes "Pillu | Sanju Rathod".
    """
    title = BRACKETED_RE.sub(" ", raw_title)
    if noise_words:
        title = re.sub(rf"\b(?:{_word_pattern(noise_words)})\b", " ", title, flags=re.IGNORECASE)
    title = YEAR_RE.sub(" ", title)
    title = DANGLING_SEPARATORS_RE.sub(lambda m: f" {m.group(0).strip()[-1]} ", title)
    return _collapse(title).strip(SEPARATOR_CHARS)


def clean_title(raw_title: str, noise_words: tuple[str, ...] = NOISE_WORDS) -> str:
    """
    Clean a title down to its most likely song name.

    Args:
        raw_title: Title as shown on the source platform.
        noise_words: Vocabulary of tokens to remove (case-insensitive).

    Returns:
        Cleaned title. May be empty if the title was nothing but noise.

    Examples:
        clean_title("Shape of You (Official Music Video)")  # "Shape of You"
        clean_title("Pillu - Official Video | Sanju Rathod")  # "Pillu"
        clean_title("Song - Remastered 2011")  # "Song - Remastered"
    """
    title = _collapse(raw_title)
    if noise_words:
        # "- Official Video | whatever" tails carry no song information
        title = re.sub(
            rf"\s+[-–—|]\s*(?:{_word_pattern(noise_words)})\b.*$",
            "",
            title,
            flags=re.IGNORECASE,
        )
    return strip_noise(title, noise_words)


def is_boilerplate(segment: str) -> bool:
    """Check whether a title segment is channel boilerplate."""
    return re.search(rf"\b(?:{_word_pattern(BOILERPLATE_WORDS)})\b", segment, re.IGNORECASE) is not None


def is_regional(text: str, markers: tuple[str, ...] = REGIONAL_MARKERS) -> bool:
    """
    Check whether a title is non-ASCII or uses regional-language words.

    Example:
        is_regional("Tera Yaar Hoon Main")  # True ("tera")
        is_regional("Shape of You")  # False
    """
    if NON_ASCII_RE.search(text):
        return True
    if not markers:
        return False
    return re.search(rf"\b(?:{_word_pattern(markers)})\b", text, re.IGNORECASE) is not None


def is_south_asian(text: str, markers: tuple[str, ...] = REGIONAL_MARKERS) -> bool:
    """
    Check whether a title is in an Indic script or uses regional-language words.

    Narrower than is_regional(): other non-ASCII scripts do not count.

    Example:
        is_south_asian("साथिया")  # True
        is_south_asian("夜に駆ける")  # False
    """
    if INDIC_SCRIPT_RE.search(text):
        return True
    return is_regional(NON_ASCII_RE.sub(" ", text), markers)


def channel_artist(channel: str | None) -> str | None:
    """
    Derive an artist name from an uploader channel.

    "- Topic" and VEVO suffixes are stripped, glued VEVO names are split
    on case changes. Label and boilerplate channels give no artist.

    Examples:
        channel_artist("Ed Sheeran - Topic")  # "Ed Sheeran"
        channel_artist("ImagineDragonsVEVO")  # "Imagine Dragons"
        channel_artist("Sony Music India")  # None
    """
    if not channel:
        return None

    name = TOPIC_SUFFIX_RE.sub("", _collapse(channel))
    if VEVO_SUFFIX_RE.search(name):
        name = CAMEL_CASE_RE.sub(" ", VEVO_SUFFIX_RE.sub("", name)).strip()

    if len(name) < MIN_SIDE_LENGTH or is_boilerplate(name):
        return None
    if re.search(rf"\b(?:{_word_pattern(LABEL_CHANNEL_WORDS)})\b", name, re.IGNORECASE):
        return None
    return name


def extract_song_info(raw_title: str, noise_words: tuple[str, ...] = NOISE_WORDS) -> ExtractedInfo:
    """
    Extract artist, song and main title from an unstructured title.

    Args:
        raw_title: Raw title, typically a YouTube video title.
        noise_words: Vocabulary of tokens to remove before splitting.

    Returns:
        ExtractedInfo. `main_title` is set for any non-empty title;
        `artist` and `song` only when a separator pattern matched.

    Pattern conventions:
        "Movie - Song | Artist" -> song, artist (movie dropped)
        "Artist - Song"         -> artist, song
        "Song | Artist"         -> song, artist
        "Artist: Song"          -> artist, song
        "Song by Artist"        -> song, artist

    Examples:
        extract_song_info("Ed Sheeran - Shape of You (Official Video)")
        # ExtractedInfo(artist="Ed Sheeran", song="Shape of You", main_title="Shape of You")

        extract_song_info("Despacito")
        # ExtractedInfo(main_title="Despacito")
    """
    title = _collapse(raw_title)
    if not title:
        return ExtractedInfo()

    cleaned = strip_noise(title, noise_words)

    for pattern, min_artist_length in SPLIT_PATTERNS:
        match = pattern.match(cleaned)
        if not match:
            continue
        artist = match.group("artist").strip(SEPARATOR_CHARS)
        song = match.group("song").strip(SEPARATOR_CHARS)
        if len(artist) >= min_artist_length and len(song) >= MIN_SIDE_LENGTH:
            return ExtractedInfo(artist=artist, song=song, main_title=song)

    # Separators glued to words ("Pillu-Sanju Rathod")
    parts = [p.strip() for p in re.split(r"[|\-–—]", cleaned)]
    if len(parts) > 1:
        main = next((p for p in parts if len(p) >= MIN_SIDE_LENGTH), None)
        if main is not None:
            rest = parts[parts.index(main) + 1:]
            second = rest[0] if rest else ""
            if len(second) >= MIN_SIDE_LENGTH and not is_boilerplate(second):
                return ExtractedInfo(artist=second, song=main, main_title=main)
            return ExtractedInfo(main_title=main)

    return ExtractedInfo(main_title=cleaned if len(cleaned) >= MIN_SIDE_LENGTH else title)


def extract_track_info(track: SourceTrack, noise_words: tuple[str, ...] = NOISE_WORDS) -> ExtractedInfo:
    """
    Extract matching fields from a source track.

    Tracks with structured artist metadata (Spotify, YouTube Music songs)
    use it directly; only the title is cleaned. Everything else goes
    through extract_song_info(); when the title names no artist, an
    artist-named uploader channel fills in.
    """
    artist = track.primary_artist
    if not artist:
        info = extract_song_info(track.title, noise_words)
        if info.artist is None and info.main_title:
            fallback = channel_artist(track.channel)
            if fallback:
                return ExtractedInfo(artist=fallback, song=info.main_title, main_title=info.main_title)
        return info

    title = _collapse(track.title)
    if not title:
        return ExtractedInfo(artist=artist)

    song = clean_title(title, noise_words) or title
    return ExtractedInfo(artist=artist, song=song, main_title=song)


def cache_key(track: SourceTrack, namespace: str = "") -> str:
    """
    Build the normalized cache key for a source track.

    Lowercases title and artist (or the artist-named channel) and drops everything that is not a word
    character, so "Shape of You!" and "shape of you" share an entry.
    """
    artist = track.artist or channel_artist(track.channel) or ""
    raw = f"{track.title}-{artist}".lower()
    key = re.sub(r"\W", "", raw)
    return f"{namespace}:{key}" if namespace else key
