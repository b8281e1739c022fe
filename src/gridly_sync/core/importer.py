"""
Translation import.

Reads finished translations from the grid and writes them back to the
content store: into the original entry when the translation is for the
entry's own locale, otherwise into a localized sibling that is created and
linked on first import.
"""

import re
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gridly_sync.content.codec import (
    META_BASE_LOCALE,
    META_CONTENT_TYPE,
    META_ENTRY_TITLE,
    META_FIELD_NAME,
    META_FIELD_TYPE,
    META_ID,
    decode_value,
    get_cell_value,
    is_translated_cell,
)
from gridly_sync.content.fields import detect_field_encoding
from gridly_sync.content.store import ContentStore
from gridly_sync.core.progress import fetch_all_records
from gridly_sync.gridly.client import GridlyClient
from gridly_sync.gridly.exceptions import ContentSchemaError, GridlySyncError
from gridly_sync.language_codes import format_language_code, unformat_language_code
from gridly_sync.logger import get_logger

logger = get_logger(__name__)

# Fields the content store refuses on updates of an existing localization
PROTECTED_UPDATE_FIELDS = ("slug", "Slug", "locale")


@dataclass
class EntryTranslations:
    """Translated field values of one source entry, by locale."""

    content_type: str
    entry_id: Any
    entry_title: Optional[str] = None
    source_locale: Optional[str] = None
    translations: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    field_types: Dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.content_type}_{self.entry_id}"


@dataclass
class ImportResult:
    results: List[Dict[str, Any]] = field(default_factory=list)
    total_records: int = 0

    @property
    def updated_entries(self) -> int:
        return sum(1 for result in self.results if result.get("success"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "results": self.results,
            "totalRecords": self.total_records,
            "updatedEntries": self.updated_entries,
        }


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower())
    return slug.strip("-") or "entry"


def _parse_entry_id(value: str) -> Any:
    return int(value) if value.isascii() and value.isdigit() else value


def group_records_by_entry(records: List[Dict[str, Any]], target_languages: List[str],
                           store: ContentStore = None) -> Dict[str, EntryTranslations]:
    """
    Group translated cells by source entry.

    Only cells under a requested target language that are up to date and
    non-empty are kept. Values are decoded with the encoding declared by the
    content store schema when available, else the encoding recorded on the grid.

    Returns:
        Mapping of ``{contentType}_{entryId}`` to EntryTranslations.
    """
    target_columns = {format_language_code(language) for language in target_languages}
    schemas: Dict[str, Optional[Dict[str, Any]]] = {}
    entries: Dict[str, EntryTranslations] = {}

    for record in records:
        entry_id = get_cell_value(record, META_ID)
        content_type = get_cell_value(record, META_CONTENT_TYPE)
        field_name = get_cell_value(record, META_FIELD_NAME)
        if not entry_id or not content_type or not field_name:
            continue

        key = f"{content_type}_{entry_id}"
        group = entries.get(key)
        if group is None:
            group = EntryTranslations(
                content_type=content_type,
                entry_id=_parse_entry_id(str(entry_id)),
                entry_title=get_cell_value(record, META_ENTRY_TITLE),
                source_locale=get_cell_value(record, META_BASE_LOCALE),
            )
            entries[key] = group

        encoding = get_cell_value(record, META_FIELD_TYPE)
        if store is not None:
            if content_type not in schemas:
                schemas[content_type] = store.get_schema(content_type)
            if schemas[content_type]:
                encoding = detect_field_encoding(schemas[content_type], field_name)

        for cell in record.get("cells") or []:
            column_id = cell.get("columnId")
            if column_id not in target_columns or not is_translated_cell(cell):
                continue
            locale = unformat_language_code(column_id)
            group.field_types[field_name] = encoding
            group.translations.setdefault(locale, {})[field_name] = decode_value(field_name, cell["value"], encoding)

    return entries


def _has_slug_attribute(schema: Optional[Dict[str, Any]]) -> Optional[str]:
    attributes = (schema or {}).get("attributes") or {}
    for name, attribute in attributes.items():
        if attribute.get("type") == "uid":
            return name
    for name in ("slug", "Slug"):
        if name in attributes:
            return name
    return None


def _build_slug(title: str, entry_id: Any, locale: str) -> str:
    return f"{slugify(title)}-{entry_id}-{locale.lower()}-{secrets.token_hex(3)}"


def _is_published(entry: Optional[Dict[str, Any]]) -> bool:
    return bool(entry and entry.get("publishedAt"))


def create_or_update_localization(store: ContentStore, group: EntryTranslations, locale: str,
                                  data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Write translations into the sibling of the original entry for ``locale``.

    An existing sibling is updated without slug or locale. A missing sibling
    is created, linked to the original and every other sibling in both
    directions, and published when the original is.
    """
    original = store.get_entry(group.content_type, group.entry_id, populate_localizations=True)
    if not original:
        raise ContentSchemaError(f"Original entry {group.entry_id} not found", code="ENTRY_NOT_FOUND")

    siblings = original.get("localizations") or []
    existing = next((sibling for sibling in siblings if sibling.get("locale") == locale), None)

    if existing:
        payload = {key: value for key, value in data.items() if key not in PROTECTED_UPDATE_FIELDS}
        updated = store.update_entry(
            group.content_type,
            existing["id"],
            payload,
            publication_state="live" if _is_published(existing) else None,
        )
        return {"action": "updated", "entryId": updated["id"]}

    sibling_ids = [sibling["id"] for sibling in siblings]
    create_data = {
        **data,
        "locale": locale,
        "localizations": [original["id"], *sibling_ids],
    }
    if _is_published(original):
        create_data["publishedAt"] = original["publishedAt"]

    slug_field = _has_slug_attribute(store.get_schema(group.content_type))
    if slug_field:
        title = data.get("title") or data.get("Title") or group.entry_title or original.get("title") or ""
        create_data[slug_field] = _build_slug(title, group.entry_id, locale)

    created = store.create_entry(group.content_type, create_data)
    new_id = created["id"]

    store.set_localizations(group.content_type, original["id"], [*sibling_ids, new_id])
    for sibling_id in sibling_ids:
        others = [other for other in sibling_ids if other != sibling_id]
        store.set_localizations(group.content_type, sibling_id, [original["id"], *others, new_id])

    logger.info(f"Created {locale} localization {new_id} for {group.key}")
    return {"action": "created", "entryId": new_id}


def apply_entry_translations(store: ContentStore, group: EntryTranslations) -> Dict[str, Any]:
    """Write every locale of one group; failures are recorded per locale."""
    results = []
    for locale, translations in group.translations.items():
        try:
            if locale == group.source_locale:
                original = store.get_entry(group.content_type, group.entry_id)
                if not original:
                    raise ContentSchemaError(f"Entry {group.entry_id} not found", code="ENTRY_NOT_FOUND")
                updated = store.update_entry(
                    group.content_type,
                    group.entry_id,
                    translations,
                    publication_state="live" if _is_published(original) else None,
                )
                results.append({"success": True, "locale": locale, "action": "updated", "entryId": updated["id"]})
            else:
                outcome = create_or_update_localization(store, group, locale, translations)
                results.append({"success": True, "locale": locale, **outcome})
        except GridlySyncError as e:
            logger.error(f"Error updating {locale} for entry {group.key}: {e.message}")
            results.append({"success": False, "locale": locale, "error": e.message})

    return {"success": True, "entryKey": group.key, "results": results}


def import_translations(store: ContentStore, client: GridlyClient,
                        target_languages: List[str]) -> ImportResult:
    """
    Import every finished translation of the view into the content store.

    Raises:
        GridlyAPIError: Records could not be fetched.
    """
    records = fetch_all_records(client)
    groups = group_records_by_entry(records, target_languages, store)
    logger.info(f"Importing {len(groups)} entries from {len(records)} records")

    result = ImportResult(total_records=len(records))
    for key, group in groups.items():
        try:
            result.results.append(apply_entry_translations(store, group))
        except GridlySyncError as e:
            logger.error(f"Error updating entry {key}: {e.message}")
            result.results.append({"success": False, "entryKey": key, "error": e.message})

    logger.info(f"Import completed: {result.updated_entries}/{len(groups)} entries processed")
    return result
