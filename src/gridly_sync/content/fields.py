"""
Field Classifier

Decides which fields of a content entry are sent for translation and how
each field is encoded (plain text, rich-text block tree, raw HTML).

Two independent questions are answered here:
- inclusion/semantic type: extract_translatable_fields() and translatable_field_names()
- storage encoding: detect_field_encoding(), which drives the Record Codec
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional


@dataclass(frozen=True)
class FieldPolicy:
    """
    Name and type tables used by the classifier.

    The defaults follow the conventions of the supported content systems;
    pass a customised instance to adapt to other naming schemes.
    """

    title_names: FrozenSet[str] = frozenset({"title", "name", "headline", "label"})
    content_names: FrozenSet[str] = frozenset({"content", "body", "description", "text", "summary"})
    excluded_names: FrozenSet[str] = frozenset({
        "id", "documentId", "slug", "Slug", "locale", "localizations",
        "createdAt", "updatedAt", "publishedAt",
        "createdBy", "updatedBy", "publishedBy",
    })
    identifier_types: FrozenSet[str] = frozenset({"uid", "relation"})
    excluded_types: FrozenSet[str] = frozenset({
        "uid", "relation", "media", "component", "dynamiczone",
        "boolean", "integer", "biginteger", "float", "decimal",
        "date", "datetime", "time", "timestamp", "enumeration", "email", "password",
    })
    translatable_types: FrozenSet[str] = frozenset({"string", "text", "richtext", "blocks", "json"})
    ckeditor_fields: FrozenSet[str] = frozenset({"plugin::ckeditor5.CKEditor", "plugin::ckeditor.CKEditor"})
    block_editor_fields: FrozenSet[str] = frozenset({"plugin::editorjs.editorjs"})
    richtext_components: FrozenSet[str] = frozenset({"default.richtext"})


DEFAULT_POLICY = FieldPolicy()


@dataclass
class TranslatableField:
    """A field selected for translation. Derived on demand, never stored."""

    name: str
    value: str
    type: str  # title|content|other
    encoding: str = "text"
    raw: Any = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value, "type": self.type, "encoding": self.encoding}


def extract_text_from_blocks(blocks: Any) -> str:
    """
    Flatten a rich-text block array to plain text.

    The text children of each block are concatenated and blocks are joined
    with a single space. Non-list input yields an empty string.
    """
    if not isinstance(blocks, list):
        return ""

    paragraphs = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        text = "".join(
            child["text"] for child in block.get("children") or []
            if isinstance(child, dict) and child.get("type", "text") == "text" and child.get("text")
        )
        if text:
            paragraphs.append(text)
    return " ".join(paragraphs)


def _attributes(schema: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not schema:
        return {}
    return schema.get("attributes") or {}


def is_excluded_field(name: str, schema: Optional[Dict[str, Any]] = None,
                      policy: FieldPolicy = DEFAULT_POLICY) -> bool:
    """Return True for identifiers, slugs, locale/relation fields and system fields."""
    if name in policy.excluded_names or name.lower() == "slug":
        return True
    attribute = _attributes(schema).get(name)
    if attribute and attribute.get("type") in policy.identifier_types:
        return True
    if attribute and attribute.get("type") in policy.excluded_types:
        # Custom fields (e.g. rich-text editors) are declared with a base type; only their customField counts.
        return not attribute.get("customField")
    return False


def extract_translatable_fields(entry: Dict[str, Any], schema: Optional[Dict[str, Any]] = None,
                                field_names: Optional[List[str]] = None,
                                policy: FieldPolicy = DEFAULT_POLICY) -> List[TranslatableField]:
    """
    Return the ordered translatable fields of an entry.

    Title-like fields come first, then body-like fields, then any other
    non-empty string field. Each field appears at most once.

    Args:
        entry: Entry dict as returned by the content store.
        schema: Content type schema; enables uid/relation exclusion and encoding detection.
        field_names: Optional explicit selection; only these fields are considered.
        policy: Name and type tables.

    Returns:
        List of TranslatableField with stripped plain-text values.
    """
    if not entry:
        return []

    allowed = set(field_names) if field_names else None
    candidates = [
        name for name in entry.keys()
        if not is_excluded_field(name, schema, policy) and (allowed is None or name in allowed)
    ]

    fields: List[TranslatableField] = []
    seen = set()

    def add(name: str, text: str, semantic_type: str):
        fields.append(TranslatableField(
            name=name,
            value=text,
            type=semantic_type,
            encoding=detect_field_encoding(schema, name, policy) if schema else "text",
            raw=entry[name],
        ))
        seen.add(name)

    for name in candidates:
        value = entry[name]
        if name.lower() in policy.title_names and isinstance(value, str) and value.strip():
            add(name, value.strip(), "title")

    for name in candidates:
        if name in seen or name.lower() not in policy.content_names:
            continue
        value = entry[name]
        if isinstance(value, list):
            text = extract_text_from_blocks(value).strip()
        elif isinstance(value, str):
            text = value.strip()
        else:
            continue
        if text:
            add(name, text, "content")

    for name in candidates:
        if name in seen:
            continue
        value = entry[name]
        if isinstance(value, str) and value.strip():
            add(name, value.strip(), "other")
        elif isinstance(value, list) and allowed is not None:
            # Explicitly selected block fields with a non-canonical name
            text = extract_text_from_blocks(value).strip()
            if text:
                add(name, text, "other")

    return fields


def translatable_field_names(schema: Optional[Dict[str, Any]],
                             policy: FieldPolicy = DEFAULT_POLICY) -> List[str]:
    """List the schema attributes whose type can carry translatable text."""
    names = []
    for name, attribute in _attributes(schema).items():
        if is_excluded_field(name, schema, policy):
            continue
        if attribute.get("type") in policy.translatable_types or attribute.get("customField"):
            names.append(name)
    return names


def detect_field_encoding(schema: Optional[Dict[str, Any]], field_name: str,
                          policy: FieldPolicy = DEFAULT_POLICY) -> str:
    """
    Determine how a field stores its value.

    Returns:
        "ckeditor" for raw-HTML editors, "richtext" for block trees, "text"
        for plain strings, "title" for an untyped title field, otherwise the
        declared attribute type ("string" when the field is unknown).
    """
    attribute = _attributes(schema).get(field_name)
    if not attribute:
        return "string"

    custom_field = attribute.get("customField")
    field_type = attribute.get("type")

    if custom_field in policy.ckeditor_fields:
        return "ckeditor"
    if custom_field in policy.block_editor_fields:
        return "richtext"
    if (field_type in ("richtext", "blocks")
            or attribute.get("component") in policy.richtext_components
            or (field_type == "json" and "content" in field_name.lower())):
        return "richtext"
    if field_type in ("text", "string"):
        return "text"
    if field_name.lower() == "title":
        return "title"
    return field_type or "string"
