"""
Schema Provisioner

Makes sure a Gridly view has the metadata columns, one language column per
project language, and a dependency edge from the source column to every
target column. Safe to call repeatedly: existing columns and edges are
detected by membership, so a second call creates nothing.

Check-then-create is serialised per view inside this process. Two processes
provisioning the same view at once can still race; the remote rejects the
duplicate and the error surfaces to the caller.
"""

import threading
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, List

from gridly_sync.content.codec import METADATA_COLUMNS
from gridly_sync.gridly.client import GridlyClient
from gridly_sync.gridly.exceptions import GridlyAPIError
from gridly_sync.language_codes import format_language_code, get_language_name
from gridly_sync.logger import get_logger

logger = get_logger(__name__)

# Entries disappear once no provisioning call holds the view's lock.
_view_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_view_locks_guard = threading.Lock()


def _lock_for_view(view_id: str) -> threading.Lock:
    with _view_locks_guard:
        lock = _view_locks.get(view_id)
        if lock is None:
            lock = threading.Lock()
            _view_locks[view_id] = lock
        return lock


@dataclass
class ProvisionResult:
    """Columns and dependency edges created by one ensure_schema call."""

    created_columns: List[Dict[str, Any]] = field(default_factory=list)
    created_dependencies: List[Dict[str, Any]] = field(default_factory=list)
    total_columns: int = 0

    @property
    def message(self) -> str:
        if not self.created_columns and not self.created_dependencies:
            return "All required columns already exist"
        return (f"Created {len(self.created_columns)} columns and "
                f"{len(self.created_dependencies)} dependencies")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "createdColumns": self.created_columns,
            "createdDependencies": self.created_dependencies,
            "totalColumns": self.total_columns,
        }


def _metadata_column_payload(column: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": column["id"],
        "editable": True,
        "name": column["name"],
        "type": "singleLine",
        "description": column["description"],
    }


def _language_column_payload(language: str, source_language: str) -> Dict[str, Any]:
    column_id = format_language_code(language)
    is_source = language == source_language
    return {
        "id": column_id,
        "name": get_language_name(language) or language,
        "type": "language",
        "languageCode": column_id,
        "isSource": is_source,
        "isTarget": not is_source,
        "localizationType": "sourceLanguage" if is_source else "targetLanguage",
    }


def _create_column(client: GridlyClient, payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        response = client.create_column(payload)
    except GridlyAPIError as e:
        logger.error(f"Failed to create column {payload['id']}: {e.message}")
        raise
    logger.info(f"Created column: {payload['id']}")
    return response if isinstance(response, dict) else payload


def ensure_dependencies(client: GridlyClient, source_column_id: str,
                        target_column_ids: List[str]) -> List[Dict[str, Any]]:
    """
    Create the missing source -> target dependency edges.

    Args:
        client: Client bound to the view.
        source_column_id: Formatted source-language column id.
        target_column_ids: Formatted target-language column ids.

    Returns:
        The edges created by this call (empty when all existed).
    """
    existing = client.get_dependencies()
    existing_targets = {
        dependency.get("targetColumnId")
        for dependency in existing
        if dependency.get("sourceColumnId") == source_column_id
    }

    created = []
    for target_column_id in dict.fromkeys(target_column_ids):
        if target_column_id == source_column_id or target_column_id in existing_targets:
            continue
        try:
            response = client.create_dependency(source_column_id, target_column_id)
        except GridlyAPIError as e:
            logger.error(f"Failed to create dependency {source_column_id} -> {target_column_id}: {e.message}")
            raise
        logger.info(f"Created dependency: {source_column_id} -> {target_column_id}")
        created.append(response if isinstance(response, dict) else {
            "sourceColumnId": source_column_id,
            "targetColumnId": target_column_id,
        })
    return created


def ensure_schema(client: GridlyClient, source_language: str, target_languages: List[str],
                  include_dependencies: bool = True) -> ProvisionResult:
    """
    Provision metadata columns, language columns and dependency edges.

    Args:
        client: Client bound to the view.
        source_language: Project source locale, e.g. "en-US".
        target_languages: Target locales.
        include_dependencies: Also ensure source -> target dependency edges.

    Returns:
        ProvisionResult listing what was created.

    Raises:
        GridlyAPIError: Any fetch or create call failed; nothing after it is attempted.
    """
    with _lock_for_view(client.view_id):
        columns = client.get_columns()
        existing_ids = {column.get("id") for column in columns}
        result = ProvisionResult()

        for column in METADATA_COLUMNS:
            if column["id"] not in existing_ids:
                result.created_columns.append(_create_column(client, _metadata_column_payload(column)))
                existing_ids.add(column["id"])

        languages = list(dict.fromkeys([source_language, *target_languages]))
        for language in languages:
            column_id = format_language_code(language)
            if column_id not in existing_ids:
                result.created_columns.append(
                    _create_column(client, _language_column_payload(language, source_language))
                )
                existing_ids.add(column_id)

        if include_dependencies:
            result.created_dependencies = ensure_dependencies(
                client,
                format_language_code(source_language),
                [format_language_code(language) for language in target_languages],
            )

        result.total_columns = len(existing_ids)

    logger.info(f"Schema ensured for view {client.view_id}: {result.message}")
    return result
