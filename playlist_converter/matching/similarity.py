"""
Fuzzy string similarity used by the candidate ranker.

The score is a word-overlap measure: each significant word of the first
string earns full credit when it is contained in (or contains) a word of
the second string, and half credit when it is merely close by edit
distance ("Ratte" vs "Ratate"). Edit distance comes from rapidfuzz.

Argument order matters. Callers always pass the source-side string first
and the candidate-side string second.
"""

import re

from rapidfuzz.distance import Levenshtein


# Words of this length or shorter are ignored ("of", "ft", "a")
MIN_WORD_LENGTH = 3

# Words must be at least this long to earn partial (edit distance) credit
PARTIAL_MATCH_MIN_LENGTH = 4

# Edit similarity needed for partial credit, and the credit awarded
PARTIAL_MATCH_THRESHOLD = 0.7
PARTIAL_MATCH_CREDIT = 0.5


def normalize_string(text: str) -> str:
    """
    Lowercase, replace punctuation with spaces and collapse whitespace.

    Example:
        normalize_string("Shape Of You (Live!)")  # "shape of you live"
    """
    text = re.sub(r"[^\w\s]", " ", text.lower())
    return " ".join(text.split())


def significant_words(text: str) -> list[str]:
    """Split normalized text into words longer than two characters."""
    return [w for w in normalize_string(text).split(" ") if len(w) >= MIN_WORD_LENGTH]


def edit_similarity(a: str, b: str) -> float:
    """
    Normalized edit similarity between two strings.

    Returns:
        1 - levenshtein(a, b) / max(len(a), len(b)).
        Identical strings (including two empty strings) give 1.0.

    Examples:
        edit_similarity("abcd", "abcd")  # 1.0
        edit_similarity("abcd", "wxyz")  # 0.0
        edit_similarity("ratte", "ratate")  # ~0.83
    """
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / max_length


def similarity(a: str, b: str) -> float:
    """
    Word-overlap similarity of `a` against `b`, in [0, 1].

    Args:
        a: Source-side string (supplies the outer loop).
        b: Candidate-side string.

    Returns:
        (full matches + partial credits) / max(len(words_a), len(words_b)),
        or 0.0 when either side has no significant words.

    Example:
        similarity("Shape of You", "Shape of You")         # 1.0
        similarity("Shape of You", "Shape of You Karaoke")  # ~0.67
    """
    a_words = significant_words(a)
    b_words = significant_words(b)

    if not a_words or not b_words:
        return 0.0

    matches = 0
    partial = 0.0

    for word in a_words:
        if any(word in other or other in word for other in b_words):
            matches += 1
            continue

        if len(word) < PARTIAL_MATCH_MIN_LENGTH:
            continue

        for other in b_words:
            if len(other) >= PARTIAL_MATCH_MIN_LENGTH and edit_similarity(word, other) >= PARTIAL_MATCH_THRESHOLD:
                partial += PARTIAL_MATCH_CREDIT
                break

    return (matches + partial) / max(len(a_words), len(b_words))
