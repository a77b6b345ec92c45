"""
Text normalization tests
"""

from expense_tracker.utils.normalization import normalize_description, normalize_label


class TestNormalizeDescription:
    def test_trims_and_collapses(self):
        assert normalize_description("  Netflix   subscription ") == "Netflix subscription"
        assert normalize_description("Rent\n\tJune") == "Rent June"

    def test_empty(self):
        assert normalize_description("") == ""
        assert normalize_description(None) == ""
        assert normalize_description("   ") == ""


class TestNormalizeLabel:
    def test_case_and_space_insensitive(self):
        assert normalize_label(" Other ") == "other"
        assert normalize_label("Eat Out") == normalize_label("eatout")

    def test_unicode_normalization(self):
        """Full-width forms fold to ASCII (NFKC)"""
        assert normalize_label("ＯＴＨＥＲ") == "other"

    def test_empty(self):
        assert normalize_label(None) == ""
