"""Test string similarity"""

import pytest

from playlist_converter.matching.similarity import (
    edit_similarity,
    normalize_string,
    significant_words,
    similarity,
)


class TestNormalize:
    """Test normalization helpers"""

    def test_normalize_string(self):
        assert normalize_string("Shape Of You (Live!)") == "shape of you live"
        assert normalize_string("  a   b  ") == "a b"

    def test_significant_words_drop_short_words(self):
        assert significant_words("Ed Sheeran - Shape of You") == ["sheeran", "shape", "you"]


class TestEditSimilarity:
    """Test rapidfuzz-backed edit similarity"""

    def test_identical(self):
        assert edit_similarity("abcd", "abcd") == 1.0
        assert edit_similarity("", "") == 1.0

    def test_disjoint(self):
        assert edit_similarity("abcd", "wxyz") == 0.0

    def test_one_insertion(self):
        assert edit_similarity("ratte", "ratate") == pytest.approx(1 - 1 / 6)


class TestSimilarity:
    """Test word-overlap similarity"""

    def test_identical_titles(self):
        assert similarity("Shape of You", "Shape of You") == 1.0

    def test_extra_words_lower_the_score(self):
        assert similarity("Shape of You", "Shape of You Karaoke") == pytest.approx(2 / 3)

    def test_containment_counts_as_match(self):
        assert similarity("Believer", "Believers") == 1.0

    def test_partial_credit_for_typos(self):
        assert similarity("Ratte", "Ratate") == pytest.approx(0.5)

    def test_no_significant_words(self):
        assert similarity("", "Shape of You") == 0.0
        assert similarity("of a", "Shape of You") == 0.0

    def test_unrelated(self):
        assert similarity("Shape of You", "Bohemian Rhapsody") == 0.0

    def test_range(self):
        value = similarity("Tum Hi Ho Arijit Singh", "Tum Hi Ho")
        assert 0.0 <= value <= 1.0
