"""
Diff Engine

Decides which selected fields of a project need to be pushed again: fields
with no record on the grid yet, fields whose source text changed, and fields
whose entry was updated since the last push.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gridly_sync import config
from gridly_sync.content.codec import META_UPDATED_AT, get_cell
from gridly_sync.content.store import ContentStore
from gridly_sync.core.progress import fetch_all_records
from gridly_sync.core.push import ContentRef, LocalField, collect_local_fields
from gridly_sync.gridly.client import GridlyClient
from gridly_sync.gridly.exceptions import ContentSchemaError
from gridly_sync.language_codes import format_language_code
from gridly_sync.logger import get_logger

logger = get_logger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a stored ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable timestamp: {value!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def in_cooldown(last_sync: Any, now: datetime = None, cooldown_seconds: int = None) -> bool:
    """True when the previous sync finished less than the cooldown ago."""
    last = parse_timestamp(last_sync)
    if last is None:
        return False
    now = now or datetime.now(timezone.utc)
    cooldown_seconds = config.SYNC_COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
    return (now - last).total_seconds() < cooldown_seconds


def has_changed(local_field: LocalField, record: Dict[str, Any], source_column_id: str) -> bool:
    source_cell = get_cell(record, source_column_id)
    if source_cell is None:
        return True

    remote_text = str(source_cell.get("value") or "").strip()
    if remote_text != local_field.field.value:
        return True

    local_updated_at = local_field.entry.get("updatedAt")
    if local_updated_at:
        updated_cell = get_cell(record, META_UPDATED_AT)
        if updated_cell is None or updated_cell.get("value") != local_updated_at:
            return True
    return False


def items_needing_sync(project: Dict[str, Any], store: ContentStore, client: GridlyClient,
                       now: datetime = None, cooldown_seconds: int = None) -> List[LocalField]:
    """
    Return the project's local fields that differ from the grid.

    Args:
        project: Project row with ``selected_content``, ``source_language`` and ``last_sync``.
        store: Content store to read current values from.
        client: Client bound to the project's view.
        now: Reference time for the cooldown check.
        cooldown_seconds: Override of the 30 second cooldown.

    Returns:
        Dirty fields, empty when there is no selected content or the project
        was synced within the cooldown.
    """
    selected_content = project.get("selected_content") or []
    if not selected_content:
        return []
    if in_cooldown(project.get("last_sync"), now, cooldown_seconds):
        logger.debug(f"Project {project.get('id')} synced recently, skipping diff")
        return []

    remote_records = {record.get("id"): record for record in fetch_all_records(client)}
    source_column_id = format_language_code(project["source_language"])

    dirty: List[LocalField] = []
    for raw_ref in selected_content:
        try:
            ref = ContentRef.from_dict(raw_ref)
            local_fields = collect_local_fields(store, ref)
        except ContentSchemaError as e:
            logger.warning(f"Cannot evaluate content item {raw_ref}: {e.message}")
            continue

        for local_field in local_fields:
            record = remote_records.get(local_field.record_id)
            if record is None or has_changed(local_field, record, source_column_id):
                dirty.append(local_field)

    logger.info(f"Project {project.get('id')}: {len(dirty)} fields need sync")
    return dirty
