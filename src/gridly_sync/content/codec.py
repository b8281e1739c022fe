"""
Record Codec

Converts content fields to remote grid records and translated grid cells
back to content field values.

A record is identified by ``{contentType}_{entryId}_{fieldName}``; that id
is the join key between the content store and the grid and must stay stable.
"""

from typing import Any, Dict, List, Optional

from gridly_sync.content.fields import TranslatableField, extract_text_from_blocks
from gridly_sync.language_codes import format_language_code

UP_TO_DATE = "upToDate"

META_ID = "meta_id"
META_CONTENT_TYPE = "meta_content_type"
META_FIELD_NAME = "meta_field_name"
META_ENTRY_TITLE = "meta_entry_title"
META_CREATED_AT = "meta_created_at"
META_UPDATED_AT = "meta_updated_at"
META_BASE_LOCALE = "meta_base_locale"
META_FIELD_TYPE = "meta_field_type"

# Columns provisioned on every view, in creation order
METADATA_COLUMNS = [
    {"id": META_ID, "name": "Entry ID", "description": "Content entry identifier"},
    {"id": META_CONTENT_TYPE, "name": "Content Type", "description": "Content type identifier"},
    {"id": META_FIELD_NAME, "name": "Field Name", "description": "Name of the translated field"},
    {"id": META_ENTRY_TITLE, "name": "Entry Title", "description": "Display title of the entry"},
    {"id": META_CREATED_AT, "name": "Created At", "description": "Entry creation timestamp"},
    {"id": META_UPDATED_AT, "name": "Updated At", "description": "Entry last update timestamp"},
    {"id": META_BASE_LOCALE, "name": "Base Locale", "description": "Locale of the source entry"},
]
METADATA_COLUMN_IDS = [column["id"] for column in METADATA_COLUMNS]

# Cells a record must carry to be attributed to a content field
REQUIRED_IDENTITY_CELLS = (META_ID, META_CONTENT_TYPE, META_FIELD_NAME)

PLAIN_ENCODINGS = ("title", "text", "string")
BLOCK_ENCODINGS = ("richtext", "blocks", "content")


def build_record_id(content_type: str, entry_id: Any, field_name: str) -> str:
    return f"{content_type}_{entry_id}_{field_name}"


def build_record_path(content_type: str, entry_title: str, field_name: str) -> str:
    return f"{content_type}/{entry_title}/{field_name}"


def encode_record(translatable_field: TranslatableField, content_type: str, entry_id: Any,
                  entry: Dict[str, Any], entry_title: str, source_language: str,
                  timestamp: str = None) -> Dict[str, Any]:
    """
    Build the remote record for one field.

    Args:
        translatable_field: Field produced by the classifier; its value is already flattened text.
        content_type: Content type identifier.
        entry_id: Id of the source entry.
        entry: The source entry (for timestamps and locale).
        entry_title: Display title used in the record path.
        source_language: Project source language, e.g. "en-US".
        timestamp: Fallback for missing entry timestamps.

    Returns:
        Record dict with ``id``, ``path`` and ``cells``.
    """
    value = translatable_field.value
    if isinstance(value, list):
        value = extract_text_from_blocks(value)

    return {
        "id": build_record_id(content_type, entry_id, translatable_field.name),
        "path": build_record_path(content_type, entry_title, translatable_field.name),
        "cells": [
            {"columnId": format_language_code(source_language), "value": value.strip()},
            {"columnId": META_ID, "value": str(entry_id)},
            {"columnId": META_CONTENT_TYPE, "value": content_type},
            {"columnId": META_FIELD_NAME, "value": translatable_field.name},
            {"columnId": META_FIELD_TYPE, "value": translatable_field.encoding},
            {"columnId": META_ENTRY_TITLE, "value": entry_title},
            {"columnId": META_CREATED_AT, "value": entry.get("createdAt") or timestamp},
            {"columnId": META_UPDATED_AT, "value": entry.get("updatedAt") or timestamp},
            {"columnId": META_BASE_LOCALE, "value": entry.get("locale") or source_language},
        ],
    }


def get_cell(record: Dict[str, Any], column_id: str) -> Optional[Dict[str, Any]]:
    for cell in record.get("cells") or []:
        if cell.get("columnId") == column_id:
            return cell
    return None


def get_cell_value(record: Dict[str, Any], column_id: str) -> Optional[Any]:
    cell = get_cell(record, column_id)
    return cell.get("value") if cell else None


def is_translated_cell(cell: Optional[Dict[str, Any]]) -> bool:
    """A cell counts as translated only when up to date and non-empty."""
    if not cell or cell.get("dependencyStatus") != UP_TO_DATE:
        return False
    value = cell.get("value")
    if value is None:
        return False
    return bool(str(value).strip())


def convert_to_richtext_blocks(text: str) -> List[Dict[str, Any]]:
    """Wrap plain text into a single-paragraph block list."""
    if not isinstance(text, str) or not text:
        return []
    return [{"type": "paragraph", "children": [{"type": "text", "text": text}]}]


def decode_value(field_name: str, value: Any, encoding: Optional[str]) -> Any:
    """
    Reconstruct a content field value from translated cell text.

    Plain encodings and raw HTML are returned as strings; block encodings are
    wrapped in a paragraph. Unknown encodings fall back to the field name:
    names containing "content" or "body" get a block tree.
    """
    if encoding in PLAIN_ENCODINGS:
        if isinstance(value, list):
            return extract_text_from_blocks(value)
        return value
    if encoding == "ckeditor":
        return value
    if encoding in BLOCK_ENCODINGS:
        return convert_to_richtext_blocks(value)

    lowered = field_name.lower()
    if "content" in lowered or "body" in lowered:
        return convert_to_richtext_blocks(value)
    return value
