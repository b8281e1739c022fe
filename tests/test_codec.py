"""Tests for the record codec."""

from gridly_sync.content.codec import (
    METADATA_COLUMN_IDS,
    build_record_id,
    build_record_path,
    convert_to_richtext_blocks,
    decode_value,
    encode_record,
    get_cell_value,
    is_translated_cell,
)
from gridly_sync.content.fields import TranslatableField, extract_text_from_blocks


ENTRY = {
    "id": 42,
    "title": "Hello",
    "locale": "en",
    "createdAt": "2024-01-01T00:00:00+00:00",
    "updatedAt": "2024-02-01T00:00:00+00:00",
}


class TestEncodeRecord:
    def test_identity_and_path(self):
        assert build_record_id("api::article.article", 42, "title") == "api::article.article_42_title"
        assert build_record_path("api::article.article", "Hello", "title") == "api::article.article/Hello/title"

    def test_cells(self):
        field = TranslatableField(name="title", value="Hello", type="title", encoding="text")
        record = encode_record(field, "api::article.article", 42, ENTRY, "Hello", "en-US")

        assert record["id"] == "api::article.article_42_title"
        assert record["path"] == "api::article.article/Hello/title"
        assert record["cells"][0] == {"columnId": "enUS", "value": "Hello"}
        assert get_cell_value(record, "meta_id") == "42"
        assert get_cell_value(record, "meta_content_type") == "api::article.article"
        assert get_cell_value(record, "meta_field_name") == "title"
        assert get_cell_value(record, "meta_field_type") == "text"
        assert get_cell_value(record, "meta_entry_title") == "Hello"
        assert get_cell_value(record, "meta_created_at") == ENTRY["createdAt"]
        assert get_cell_value(record, "meta_updated_at") == ENTRY["updatedAt"]
        assert get_cell_value(record, "meta_base_locale") == "en"

    def test_every_metadata_column_is_populated(self):
        field = TranslatableField(name="title", value="Hello", type="title")
        record = encode_record(field, "api::article.article", 42, ENTRY, "Hello", "en")
        column_ids = {cell["columnId"] for cell in record["cells"]}
        assert set(METADATA_COLUMN_IDS) <= column_ids

    def test_missing_timestamps_use_fallback(self):
        field = TranslatableField(name="title", value="Hello", type="title")
        record = encode_record(field, "ct", 1, {"id": 1}, "Hello", "de", timestamp="2024-03-01T00:00:00Z")
        assert get_cell_value(record, "meta_created_at") == "2024-03-01T00:00:00Z"
        assert get_cell_value(record, "meta_base_locale") == "de"


class TestTranslatedCell:
    def test_up_to_date_non_empty(self):
        assert is_translated_cell({"columnId": "frFR", "value": "Bonjour", "dependencyStatus": "upToDate"})

    def test_outdated_or_missing_status(self):
        assert not is_translated_cell({"columnId": "frFR", "value": "Bonjour", "dependencyStatus": "outOfDate"})
        assert not is_translated_cell({"columnId": "frFR", "value": "Bonjour"})

    def test_blank_value(self):
        assert not is_translated_cell({"columnId": "frFR", "value": "   ", "dependencyStatus": "upToDate"})
        assert not is_translated_cell({"columnId": "frFR", "value": None, "dependencyStatus": "upToDate"})
        assert not is_translated_cell(None)


class TestDecodeValue:
    def test_plain_encodings_stay_strings(self):
        assert decode_value("title", "Bonjour", "text") == "Bonjour"
        assert decode_value("title", "Bonjour", "title") == "Bonjour"

    def test_ckeditor_keeps_html(self):
        assert decode_value("intro", "<p>Bonjour</p>", "ckeditor") == "<p>Bonjour</p>"

    def test_richtext_becomes_single_paragraph(self):
        assert decode_value("content", "Bonjour", "richtext") == [
            {"type": "paragraph", "children": [{"type": "text", "text": "Bonjour"}]}
        ]

    def test_unknown_encoding_uses_field_name(self):
        assert isinstance(decode_value("mainBody", "Texte", None), list)
        assert decode_value("caption", "Texte", None) == "Texte"

    def test_block_round_trip_preserves_flattened_text(self):
        source = [
            {"type": "paragraph", "children": [{"type": "text", "text": "First."}]},
            {"type": "paragraph", "children": [{"type": "text", "text": "Second."}]},
        ]
        flattened = extract_text_from_blocks(source)
        decoded = decode_value("content", flattened, "richtext")
        assert extract_text_from_blocks(decoded) == flattened

    def test_convert_empty_text(self):
        assert convert_to_richtext_blocks("") == []
