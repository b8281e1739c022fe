"""Content browsing routes - locales, content types and their entries."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from gridly_sync.content.fields import translatable_field_names
from gridly_sync.core.push import resolve_entry_title, ContentRef
from gridly_sync.gridly.exceptions import ContentSchemaError
from gridly_sync.language_codes import get_language_name
from gridly_sync.logger import get_logger

from ..extensions import error_response, get_content_store

content_bp = Blueprint("content", __name__)
logger = get_logger(__name__)


@content_bp.get("/languages")
def list_languages():
    """Return the locales configured in the content store."""
    locales = get_content_store().list_locales()
    languages = [
        {
            "code": locale["code"],
            "name": locale.get("name") or get_language_name(locale["code"]) or locale["code"],
            "isDefault": bool(locale.get("isDefault")),
        }
        for locale in locales
    ]
    return jsonify({"languages": languages})


@content_bp.get("/content-types")
def list_content_types():
    """Return content types that have at least one translatable attribute."""
    store = get_content_store()
    content_types = []
    for content_type in store.list_content_types():
        fields = translatable_field_names({"attributes": content_type.get("attributes", {})})
        if not fields:
            continue
        content_types.append({
            "uid": content_type["uid"],
            "displayName": content_type.get("displayName") or content_type["uid"],
            "fields": fields,
        })
    return jsonify({"content_types": content_types})


@content_bp.get("/content-types/<path:content_type>/entries")
def list_entries(content_type: str):
    """Return entries of a content type, optionally restricted to one locale."""
    store = get_content_store()
    locale = request.args.get("locale")
    try:
        entries = store.find_entries(content_type, {"locale": locale} if locale else None)
    except ContentSchemaError as e:
        return error_response(e)

    items = [
        {
            "id": entry["id"],
            "title": resolve_entry_title(ContentRef(content_type, entry["id"]), entry),
            "locale": entry.get("locale"),
            "publishedAt": entry.get("publishedAt"),
            "updatedAt": entry.get("updatedAt"),
        }
        for entry in entries
    ]
    logger.debug("Listed %s entries for %s", len(items), content_type)
    return jsonify({"entries": items})
