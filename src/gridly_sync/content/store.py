"""
Content Store Interface

The sync engine never talks to a CMS directly. Everything it needs from the
host content system goes through ContentStore: reading entries and their
attribute schema, writing entries, and maintaining the localization links
between an original entry and its localized siblings.

Entries are plain dicts. An entry carries at least ``id``, ``locale``,
``createdAt`` and ``updatedAt``; a published entry has a non-null
``publishedAt``. Schemas are dicts with an ``attributes`` mapping of
attribute name to ``{"type": ..., ...}``.
"""

import copy
import itertools
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from gridly_sync.gridly.exceptions import ContentSchemaError


class ContentStore(ABC):
    """Narrow interface onto the host content-management system."""

    @abstractmethod
    def get_entry(self, content_type: str, entry_id: Any, publication_state: str = "preview",
                  populate_localizations: bool = False) -> Optional[Dict[str, Any]]:
        """
        Read one entry.

        Args:
            content_type: Content type identifier.
            entry_id: Entry identifier.
            publication_state: "preview" includes drafts, "live" only published entries.
            populate_localizations: Replace the ``localizations`` id list with sibling entries.

        Returns:
            The entry dict, or None when not found.
        """

    @abstractmethod
    def get_schema(self, content_type: str) -> Optional[Dict[str, Any]]:
        """Return the attribute schema of a content type, or None if unknown."""

    @abstractmethod
    def create_entry(self, content_type: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create an entry and return it with its new id."""

    @abstractmethod
    def update_entry(self, content_type: str, entry_id: Any, data: Dict[str, Any],
                     publication_state: str = None) -> Dict[str, Any]:
        """Update an entry in place and return it."""

    @abstractmethod
    def delete_entry(self, content_type: str, entry_id: Any) -> None:
        """Delete an entry."""

    @abstractmethod
    def list_localizations(self, content_type: str, entry_id: Any) -> List[Dict[str, Any]]:
        """Return the localized siblings linked to an entry."""

    @abstractmethod
    def set_localizations(self, content_type: str, entry_id: Any, localization_ids: List[Any]) -> None:
        """Replace the list of sibling ids linked to an entry."""

    @abstractmethod
    def find_entries(self, content_type: str, filters: Dict[str, Any] = None) -> List[Dict[str, Any]]:
        """Return entries whose fields equal every value in ``filters``."""

    @abstractmethod
    def list_content_types(self) -> List[Dict[str, Any]]:
        """Return the content types available for translation."""

    @abstractmethod
    def list_locales(self) -> List[Dict[str, Any]]:
        """Return the locales configured in the content system."""


class InMemoryContentStore(ContentStore):
    """
    Dict-backed ContentStore.

    Used for embedding the engine without a CMS and throughout the test suite.
    Ids are integers allocated from a single counter shared by all content types.
    """

    def __init__(self, locales: List[Dict[str, Any]] = None):
        self._schemas: Dict[str, Dict[str, Any]] = {}
        self._entries: Dict[str, Dict[Any, Dict[str, Any]]] = {}
        self._locales = locales or [{"code": "en", "name": "English (en)", "isDefault": True}]
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def register_content_type(self, content_type: str, schema: Dict[str, Any]) -> None:
        with self._lock:
            self._schemas[content_type] = copy.deepcopy(schema)
            self._entries.setdefault(content_type, {})

    def _require_type(self, content_type: str) -> Dict[Any, Dict[str, Any]]:
        if content_type not in self._schemas:
            raise ContentSchemaError(f"Unknown content type: {content_type}", code="UNKNOWN_CONTENT_TYPE")
        return self._entries[content_type]

    def _find(self, content_type: str, entry_id: Any) -> Optional[Dict[str, Any]]:
        entries = self._require_type(content_type)
        entry = entries.get(entry_id)
        if entry is None and isinstance(entry_id, str) and entry_id.isascii() and entry_id.isdigit():
            entry = entries.get(int(entry_id))
        return entry

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def get_entry(self, content_type, entry_id, publication_state="preview", populate_localizations=False):
        with self._lock:
            entry = self._find(content_type, entry_id)
            if entry is None:
                return None
            if publication_state == "live" and not entry.get("publishedAt"):
                return None
            result = copy.deepcopy(entry)
            if populate_localizations:
                result["localizations"] = self.list_localizations(content_type, entry["id"])
            return result

    def get_schema(self, content_type):
        schema = self._schemas.get(content_type)
        return copy.deepcopy(schema) if schema is not None else None

    def create_entry(self, content_type, data):
        with self._lock:
            entries = self._require_type(content_type)
            now = self._now()
            entry = copy.deepcopy(data)
            entry["id"] = next(self._ids)
            entry.setdefault("locale", self._default_locale())
            entry.setdefault("createdAt", now)
            entry.setdefault("updatedAt", now)
            entry.setdefault("publishedAt", None)
            entry["localizations"] = [self._ref_id(item) for item in entry.get("localizations") or []]
            entries[entry["id"]] = entry
            return copy.deepcopy(entry)

    def update_entry(self, content_type, entry_id, data, publication_state=None):
        with self._lock:
            entry = self._find(content_type, entry_id)
            if entry is None:
                raise ContentSchemaError(f"Entry not found: {content_type}:{entry_id}", code="ENTRY_NOT_FOUND")
            changes = copy.deepcopy(data)
            changes.pop("id", None)
            if "localizations" in changes:
                changes["localizations"] = [self._ref_id(item) for item in changes["localizations"] or []]
            entry.update(changes)
            if publication_state == "live" and not entry.get("publishedAt"):
                entry["publishedAt"] = self._now()
            entry["updatedAt"] = self._now()
            return copy.deepcopy(entry)

    def delete_entry(self, content_type, entry_id):
        with self._lock:
            entry = self._find(content_type, entry_id)
            if entry is None:
                return
            del self._entries[content_type][entry["id"]]
            for other in self._entries[content_type].values():
                if entry["id"] in other.get("localizations", []):
                    other["localizations"].remove(entry["id"])

    def list_localizations(self, content_type, entry_id):
        with self._lock:
            entry = self._find(content_type, entry_id)
            if entry is None:
                return []
            siblings = []
            for sibling_id in entry.get("localizations", []):
                sibling = self._entries[content_type].get(sibling_id)
                if sibling is not None:
                    siblings.append(copy.deepcopy(sibling))
            return siblings

    def set_localizations(self, content_type, entry_id, localization_ids):
        with self._lock:
            entry = self._find(content_type, entry_id)
            if entry is None:
                raise ContentSchemaError(f"Entry not found: {content_type}:{entry_id}", code="ENTRY_NOT_FOUND")
            entry["localizations"] = [self._ref_id(item) for item in localization_ids if self._ref_id(item) != entry["id"]]

    def find_entries(self, content_type, filters=None):
        filters = filters or {}
        with self._lock:
            entries = self._require_type(content_type)
            return [
                copy.deepcopy(entry)
                for entry in entries.values()
                if all(entry.get(key) == value for key, value in filters.items())
            ]

    def list_content_types(self):
        return [
            {
                "uid": uid,
                "displayName": schema.get("displayName") or schema.get("info", {}).get("displayName") or uid,
                "attributes": copy.deepcopy(schema.get("attributes", {})),
            }
            for uid, schema in self._schemas.items()
        ]

    def list_locales(self):
        return copy.deepcopy(self._locales)

    def _default_locale(self) -> str:
        for locale in self._locales:
            if locale.get("isDefault"):
                return locale["code"]
        return self._locales[0]["code"] if self._locales else "en"

    @staticmethod
    def _ref_id(item: Any) -> Any:
        return item["id"] if isinstance(item, dict) else item
