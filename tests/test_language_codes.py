"""Tests for locale code <-> grid column id conversion."""

import pytest

from gridly_sync.language_codes import (
    extract_base_language,
    format_language_code,
    get_language_name,
    unformat_language_code,
)


class TestFormatLanguageCode:
    """Locale codes become column ids without separators."""

    @pytest.mark.parametrize(
        ("locale", "column_id"),
        [("en-US", "enUS"), ("fr-FR", "frFR"), ("de", "de"), ("zh-Hans-CN", "zhHansCN")],
    )
    def test_removes_dashes(self, locale, column_id):
        assert format_language_code(locale) == column_id


class TestUnformatLanguageCode:
    """Only the four-letter xxYY shape gets its dash back."""

    def test_restores_region_dash(self):
        assert unformat_language_code("deDE") == "de-DE"

    @pytest.mark.parametrize("column_id", ["de", "meta_id", "ENUS", "enus", "zhHansCN", "en_US"])
    def test_other_ids_unchanged(self, column_id):
        assert unformat_language_code(column_id) == column_id

    @pytest.mark.parametrize("locale", ["en-US", "fr-FR", "pt-BR", "de", "sv"])
    def test_inverse_of_format_for_supported_shapes(self, locale):
        assert unformat_language_code(format_language_code(locale)) == locale


class TestLanguageNames:
    def test_known_codes(self):
        assert get_language_name("de") == "German"
        assert get_language_name("fr-FR") == "French (France)"

    def test_unknown_region_falls_back_to_base_name(self):
        assert get_language_name("sv-FI") == "Swedish (FI)"

    def test_unknown_language(self):
        assert get_language_name("xx") is None
        assert get_language_name("") is None

    def test_extract_base_language(self):
        assert extract_base_language("de-DE") == "de"
        assert extract_base_language("fr") == "fr"
