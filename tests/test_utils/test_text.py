"""
Unit tests for text post-processing helpers.

These helpers enforce every hard length limit in metagen, so the tests focus on
boundary behavior: exact fits, word-boundary cuts, hard cuts and budgets too
small to hold a marker.

Test Categories:
    - Truncation: truncate_at_word and truncate_content
    - Cleanup: quotes, redundant phrases, trailing periods
    - Filenames: fallback alt text from upload names
    - Brand suffix and keyword parsing

Python Learning Notes:
    - @pytest.mark.parametrize runs one test body with many inputs
    - Pure functions need no fixtures or mocks
"""

import pytest

from metagen.utils.text import (
    apply_brand_suffix,
    clean_alt_text,
    clean_filename_for_alt,
    parse_keywords,
    strip_wrapping_quotes,
    truncate_at_word,
    truncate_content,
)


class TestTruncateAtWord:
    """Tests for word-boundary truncation of generated text."""

    def test_text_that_fits_is_unchanged(self):
        assert truncate_at_word("Short alt text", 125) == "Short alt text"

    def test_cuts_at_last_space_in_final_fifth(self):
        """
        The last space (index 15) lies beyond 80% of the 18 character window,
        so the cut backs off to it.
        """
        assert truncate_at_word("Sunset over the quiet harbor", 18) == "Sunset over the"

    def test_hard_cut_when_space_is_too_early(self):
        # Only space is at index 2, far before 80% of 10
        assert truncate_at_word("ab cdefghijklmnop", 10) == "ab cdefghi"

    def test_hard_cut_without_spaces(self):
        assert truncate_at_word("abcdefghijklmnop", 8) == "abcdefgh"

    def test_exact_length_is_kept(self):
        assert truncate_at_word("abcde", 5) == "abcde"

    @pytest.mark.parametrize("max_length", [0, -5])
    def test_non_positive_limit_returns_empty(self, max_length):
        assert truncate_at_word("anything", max_length) == ""

    def test_result_never_exceeds_limit(self):
        text = "word " * 100
        for limit in range(1, 60):
            assert len(truncate_at_word(text, limit)) <= limit


class TestTruncateContent:
    """Tests for bounding analyzed document text to a character budget."""

    def test_short_content_is_unchanged(self):
        assert truncate_content("Hello world", max_tokens=100) == "Hello world"

    def test_word_boundary_cut_with_marker(self):
        """
        Budget is 5 tokens * 4 = 20 characters; the window before the marker
        is 17 characters and the last space in it (index 14) is past 80%.
        """
        content = "word " * 10
        result = truncate_content(content, max_tokens=5)

        assert result == "word word word..."
        assert len(result) <= 20

    def test_hard_cut_with_marker(self):
        result = truncate_content("x" * 50, max_tokens=5)

        assert result == "x" * 17 + "..."
        assert len(result) == 20

    def test_absolute_ceiling_applies(self):
        result = truncate_content("a" * 20000, max_tokens=10000)

        assert len(result) == 10000
        assert result.endswith("...")

    def test_budget_smaller_than_marker(self):
        assert truncate_content("abcdef", max_tokens=0) == ""

    def test_custom_marker(self):
        result = truncate_content("x" * 50, max_tokens=5, marker=" [more]")

        assert result.endswith(" [more]")
        assert len(result) == 20


class TestCleanup:
    """Tests for quote stripping and alt text normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ('"Hello"', "Hello"),
            ("'Hello'", "Hello"),
            ('  "Padded"  ', "Padded"),
            ('"Mismatched\'', '"Mismatched\''),
            ('"', '"'),
        ],
    )
    def test_strip_wrapping_quotes(self, raw, expected):
        assert strip_wrapping_quotes(raw) == expected

    def test_clean_alt_text_removes_lead_in_and_period(self):
        raw = '"a photo of golden retriever puppies on grass."'
        assert clean_alt_text(raw) == "Golden retriever puppies on grass"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Image of a cat on a sofa", "A cat on a sofa"),
            ("PICTURE SHOWING two hikers", "Two hikers"),
            ("This shows a red bicycle...", "A red bicycle"),
            ("Here is a mountain lake", "A mountain lake"),
            ("Red barn in snow", "Red barn in snow"),
        ],
    )
    def test_clean_alt_text_variants(self, raw, expected):
        assert clean_alt_text(raw) == expected


class TestCleanFilenameForAlt:
    """Tests for deriving fallback alt text from upload filenames."""

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("My_Great-Photo_02.jpg", "My Great Photo"),
            ("2024-team-retreat.png", "Team Retreat"),
            ("sunset.jpeg", "Sunset"),
            ("IMG_1234.JPG", "Img"),
            ("no_extension", "No Extension"),
        ],
    )
    def test_cleaned_names(self, filename, expected):
        assert clean_filename_for_alt(filename) == expected


class TestApplyBrandSuffix:
    """Tests for appending the brand to SEO titles."""

    def test_appends_brand(self):
        assert apply_brand_suffix("Pricing Plans", "Acme", 60) == "Pricing Plans | Acme"

    def test_existing_brand_is_not_duplicated(self):
        assert apply_brand_suffix("Acme Pricing Plans", "Acme", 60) == "Acme Pricing Plans"

    @pytest.mark.parametrize("brand", [None, ""])
    def test_no_brand_configured(self, brand):
        assert apply_brand_suffix("Pricing Plans", brand, 60) == "Pricing Plans"

    def test_long_title_is_shortened_to_fit_suffix(self):
        title = "Affordable website design packages for growing small businesses"
        result = apply_brand_suffix(title, "Acme", 60)

        assert result.endswith(" | Acme")
        assert len(result) <= 60

    def test_suffix_that_cannot_fit_is_skipped(self):
        brand = "B" * 70
        assert apply_brand_suffix("Short", brand, 60) == "Short"

    @pytest.mark.parametrize("title", ["", "   "])
    def test_blank_title_stays_blank(self, title):
        assert apply_brand_suffix(title, "Acme", 60) == ""


class TestParseKeywords:
    """Tests for parsing editor-entered keyword lists."""

    def test_commas_and_newlines(self):
        assert parse_keywords("SEO, seo\nweb design") == ["SEO", "web design"]

    def test_blank_entries_are_dropped(self):
        assert parse_keywords(" , \n ,") == []

    @pytest.mark.parametrize("value", [None, "", 42])
    def test_non_text_input(self, value):
        assert parse_keywords(value) == []
