"""
Normalizer Tests
----------------
Trim, lowercase and whitespace collapse behave as total functions.
"""

import pytest

from commands.normalizer import coerce_text, collapse_whitespace, normalize, normalize_phrase


class TestNormalize:
    """Tests for normalize()."""

    def test_trims_and_lowercases(self):
        assert normalize("  /STILI  ") == "/stili"

    def test_empty_string(self):
        assert normalize("") == ""

    def test_whitespace_only(self):
        assert normalize(" \t\n  ") == ""

    def test_none_is_empty(self):
        assert normalize(None) == ""

    def test_interior_whitespace_kept(self):
        """normalize() alone does not collapse interior runs."""
        assert normalize("Mostra  Gallery") == "mostra  gallery"

    def test_multiline_text(self):
        assert normalize("\nShow\nGallery\n") == "show\ngallery"


class TestCollapseWhitespace:
    """Tests for collapse_whitespace()."""

    @pytest.mark.parametrize("text", [
        "mostra  gallery",
        "mostra\tgallery",
        "mostra \t\n gallery",
        "mostra gallery",
    ])
    def test_runs_become_single_space(self, text):
        assert collapse_whitespace(text) == "mostra gallery"

    def test_single_spaces_untouched(self):
        assert collapse_whitespace("apri galleria") == "apri galleria"


class TestNormalizePhrase:

    def test_full_pipeline(self):
        assert normalize_phrase("  Show \t  STYLES \n") == "show styles"

    def test_coerces_non_strings(self):
        assert coerce_text(42) == "42"
        assert normalize_phrase(None) == ""
