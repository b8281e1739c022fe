"""
Push Pipeline

Builds grid records for a project's selected content and uploads them in
ordered batches. Each batch is awaited before the next one is sent; a failed
batch aborts the push and leaves the earlier batches on the remote.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from gridly_sync import config
from gridly_sync.content.codec import encode_record
from gridly_sync.content.fields import (
    DEFAULT_POLICY,
    FieldPolicy,
    TranslatableField,
    extract_translatable_fields,
    translatable_field_names,
)
from gridly_sync.content.store import ContentStore
from gridly_sync.gridly.client import GridlyClient
from gridly_sync.gridly.exceptions import ContentSchemaError, GridlyAPIError, GridlySyncError
from gridly_sync.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ContentRef:
    """One selected entry of a project."""

    content_type: str
    entry_id: Any
    fields: List[str] = field(default_factory=list)
    title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentRef":
        """Read a stored content reference; ``id`` and ``entryId`` are accepted for ``itemId``."""
        if not isinstance(data, dict):
            raise ContentSchemaError(f"Invalid content reference: {data!r}", code="INVALID_CONTENT_REF")
        content_type = data.get("contentTypeUid") or data.get("contentType")
        entry_id = data.get("itemId", data.get("id", data.get("entryId")))
        if not content_type or entry_id is None:
            raise ContentSchemaError(f"Invalid content reference: {data}", code="INVALID_CONTENT_REF")

        fields = []
        for item in data.get("fields") or []:
            name = item.get("name") if isinstance(item, dict) else item
            if name:
                fields.append(name)
        return cls(content_type=content_type, entry_id=entry_id, fields=fields, title=data.get("title"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contentTypeUid": self.content_type,
            "itemId": self.entry_id,
            "fields": self.fields,
            "title": self.title,
        }


@dataclass
class LocalField:
    """A translatable field together with the entry it was read from."""

    ref: ContentRef
    entry: Dict[str, Any]
    entry_title: str
    field: TranslatableField

    @property
    def record_id(self) -> str:
        return f"{self.ref.content_type}_{self.ref.entry_id}_{self.field.name}"


@dataclass
class PushResult:
    records_count: int = 0
    batch_responses: List[Any] = field(default_factory=list)

    @property
    def batch_count(self) -> int:
        return len(self.batch_responses)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "recordsCount": self.records_count,
            "batches": self.batch_count,
            "data": self.batch_responses,
        }


def resolve_entry_title(ref: ContentRef, entry: Dict[str, Any]) -> str:
    if ref.title:
        return ref.title
    for key in ("title", "Title", "name", "Name"):
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return f"Entry {ref.entry_id}"


def collect_local_fields(store: ContentStore, ref: ContentRef,
                         policy: FieldPolicy = DEFAULT_POLICY) -> List[LocalField]:
    """
    Read the current translatable fields of one selected entry.

    Raises:
        ContentSchemaError: The content type or the entry does not exist.
    """
    schema = store.get_schema(ref.content_type)
    if schema is None:
        raise ContentSchemaError(f"Content type not found: {ref.content_type}", code="UNKNOWN_CONTENT_TYPE")

    entry = store.get_entry(ref.content_type, ref.entry_id, publication_state="preview")
    if not entry:
        raise ContentSchemaError(f"Entry not found: {ref.content_type}:{ref.entry_id}", code="ENTRY_NOT_FOUND")

    field_names = ref.fields or translatable_field_names(schema, policy) or None
    title = resolve_entry_title(ref, entry)
    return [
        LocalField(ref=ref, entry=entry, entry_title=title, field=translatable_field)
        for translatable_field in extract_translatable_fields(entry, schema, field_names, policy)
    ]


def encode_local_fields(local_fields: List[LocalField], source_language: str) -> List[Dict[str, Any]]:
    """Encode collected local fields as grid records."""
    return [
        encode_record(
            local_field.field,
            local_field.ref.content_type,
            local_field.ref.entry_id,
            local_field.entry,
            local_field.entry_title,
            source_language,
        )
        for local_field in local_fields
    ]


def build_records(store: ContentStore, content_refs: List[Any], source_language: str,
                  policy: FieldPolicy = DEFAULT_POLICY) -> List[Dict[str, Any]]:
    """
    Build one record per translatable field of every selected entry.

    Items whose content type or entry cannot be found are skipped and logged.
    """
    records = []
    for raw_ref in content_refs:
        try:
            ref = raw_ref if isinstance(raw_ref, ContentRef) else ContentRef.from_dict(raw_ref)
            local_fields = collect_local_fields(store, ref, policy)
        except ContentSchemaError as e:
            logger.warning(f"Skipping content item {raw_ref}: {e.message}")
            continue

        if not local_fields:
            logger.warning(f"No translatable content found for {ref.content_type}:{ref.entry_id}")
            continue

        records.extend(encode_local_fields(local_fields, source_language))

    logger.info(f"Prepared {len(records)} records from {len(content_refs)} content items")
    return records


def push_records(client: GridlyClient, records: List[Dict[str, Any]],
                 batch_size: int = None) -> PushResult:
    """
    Upload records in sequential batches.

    Args:
        client: Client bound to the target view.
        records: Records produced by build_records.
        batch_size: Records per request, 1000 unless overridden.

    Returns:
        PushResult with the number of records and one response per batch.

    Raises:
        GridlyAPIError: A batch was rejected; later batches are not sent.
    """
    batch_size = batch_size or config.RECORD_BATCH_SIZE
    result = PushResult(records_count=len(records))
    total_batches = (len(records) + batch_size - 1) // batch_size

    for index, start in enumerate(range(0, len(records), batch_size), start=1):
        batch = records[start:start + batch_size]
        logger.info(f"Sending batch {index}/{total_batches} ({len(batch)} records)")
        try:
            response = client.create_records(batch)
        except GridlyAPIError as e:
            logger.error(f"Batch {index}/{total_batches} failed: {e.message}")
            raise
        result.batch_responses.append(response)

    logger.info(f"Sent {result.records_count} records in {result.batch_count} batches")
    return result


def push_content(client: GridlyClient, store: ContentStore, content_refs: List[Any],
                 source_language: str) -> PushResult:
    """Build and upload the records of the given content in one call."""
    records = build_records(store, content_refs, source_language)
    if not records:
        raise GridlySyncError("No translatable content found to send", code="NO_CONTENT")
    return push_records(client, records)
