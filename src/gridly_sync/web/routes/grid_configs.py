"""Grid configuration API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from gridly_sync.core import database as db
from gridly_sync.core import projects as project_service
from gridly_sync.gridly.exceptions import GridlySyncError
from gridly_sync.logger import get_logger

from ..extensions import error_response, get_client_factory, json_error

grid_configs_bp = Blueprint("grid_configs", __name__)
logger = get_logger(__name__)


def _public(grid_config: Dict[str, Any]) -> Dict[str, Any]:
    """Hide all but the last four characters of the API key."""
    api_key = grid_config.get("api_key") or ""
    return {**grid_config, "api_key": f"****{api_key[-4:]}" if api_key else ""}


@grid_configs_bp.get("/")
def list_grid_configs():
    configs = db.get_all_grid_configs()
    return jsonify({"grid_configs": [_public(item) for item in configs]})


@grid_configs_bp.post("/")
def create_grid_config():
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    missing_fields = [name for name in ("name", "api_key", "view_id") if not data.get(name)]
    if missing_fields:
        return json_error("Missing required fields", 400, {"missing_fields": missing_fields})

    config_id = db.create_grid_config(
        name=data["name"],
        api_key=data["api_key"],
        view_id=data["view_id"],
        description=data.get("description", ""),
        is_active=data.get("is_active", True),
        created_by=data.get("created_by"),
    )
    logger.info("Created grid config %s", config_id)
    return jsonify({"grid_config": _public(db.get_grid_config_by_id(config_id))}), 201


@grid_configs_bp.put("/<int:config_id>")
def update_grid_config(config_id: int):
    if not db.get_grid_config_by_id(config_id):
        return json_error("Gridly configuration not found", 404)

    data: Dict[str, Any] = request.get_json(silent=True) or {}
    changes = {key: data[key] for key in db.GRID_CONFIG_UPDATABLE_COLUMNS if key in data}
    db.update_grid_config(config_id, **changes)
    logger.info("Updated grid config %s", config_id)
    return jsonify({"grid_config": _public(db.get_grid_config_by_id(config_id))})


@grid_configs_bp.delete("/<int:config_id>")
def delete_grid_config(config_id: int):
    if not db.get_grid_config_by_id(config_id):
        return json_error("Gridly configuration not found", 404)
    db.delete_grid_config(config_id)
    logger.info("Deleted grid config %s", config_id)
    return jsonify({"status": "deleted"})


@grid_configs_bp.get("/<int:config_id>/test-connection")
def connection_check(config_id: int):
    try:
        return jsonify(project_service.check_connection(config_id, get_client_factory()))
    except GridlySyncError as e:
        return error_response(e)


@grid_configs_bp.post("/<int:config_id>/validate-columns")
def validate_columns(config_id: int):
    """Create missing metadata and language columns (and dependencies) on the view."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    if not data.get("source_language"):
        return json_error("source_language is required", 400)
    try:
        result = project_service.validate_columns(
            config_id,
            data["source_language"],
            data.get("target_languages") or [],
            get_client_factory(),
        )
    except GridlySyncError as e:
        return error_response(e)
    return jsonify(result.to_dict())


@grid_configs_bp.post("/<int:config_id>/validate-dependencies")
def validate_dependencies(config_id: int):
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    if not data.get("source_language"):
        return json_error("source_language is required", 400)
    try:
        created = project_service.validate_dependencies(
            config_id,
            data["source_language"],
            data.get("target_languages") or [],
            get_client_factory(),
        )
    except GridlySyncError as e:
        return error_response(e)

    message = f"Created {len(created)} dependencies" if created else "All dependencies already exist"
    return jsonify({"success": True, "message": message, "createdDependencies": len(created), "dependencies": created})
