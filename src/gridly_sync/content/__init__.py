"""
Content module - content store access and field handling

This module provides:
- ContentStore / InMemoryContentStore: access to the host content system
- Field classification (which fields are translatable, how they are encoded)
- Record codec (content field <-> grid record)
"""

from gridly_sync.content.store import ContentStore, InMemoryContentStore
from gridly_sync.content.fields import (
    DEFAULT_POLICY,
    FieldPolicy,
    TranslatableField,
    detect_field_encoding,
    extract_text_from_blocks,
    extract_translatable_fields,
    translatable_field_names,
)
