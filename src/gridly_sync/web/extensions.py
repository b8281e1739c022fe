"""Access to the content store and grid client factory attached to the Flask app."""

from __future__ import annotations

from typing import Any, Dict, Tuple

from flask import current_app, jsonify

from gridly_sync.content.store import ContentStore
from gridly_sync.core.projects import ClientFactory
from gridly_sync.gridly.exceptions import GridlySyncError

EXTENSION_KEY = "gridly_sync"

NOT_FOUND_CODES = {"PROJECT_NOT_FOUND", "GRID_CONFIG_NOT_FOUND", "MISSING_GRID_CONFIG"}


def init_extension(app, content_store: ContentStore, client_factory: ClientFactory) -> None:
    app.extensions[EXTENSION_KEY] = {
        "content_store": content_store,
        "client_factory": client_factory,
    }


def get_content_store() -> ContentStore:
    return current_app.extensions[EXTENSION_KEY]["content_store"]


def get_client_factory() -> ClientFactory:
    return current_app.extensions[EXTENSION_KEY]["client_factory"]


def status_for(error: GridlySyncError) -> int:
    return 404 if error.code in NOT_FOUND_CODES else 400


def error_response(error: GridlySyncError) -> Tuple[Any, int]:
    """Structured ``{error, message, details}`` response for a sync error."""
    return jsonify(error.to_dict()), status_for(error)


def json_error(message: str, status: int, details: Any = None) -> Tuple[Any, int]:
    payload: Dict[str, Any] = {"error": message, "message": message, "details": details or message}
    return jsonify(payload), status
