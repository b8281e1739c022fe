"""Project API routes - CRUD, push, sync, progress and import."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from gridly_sync.core import database as db
from gridly_sync.core import projects as project_service
from gridly_sync.gridly.exceptions import GridlySyncError
from gridly_sync.logger import get_logger

from ..extensions import error_response, get_client_factory, get_content_store, json_error

projects_bp = Blueprint("projects", __name__)
logger = get_logger(__name__)

EDITABLE_FIELDS = ("name", "source_language", "selected_content", "grid_config_id")


@projects_bp.get("/")
def list_projects():
    """Return all projects with their subprojects."""
    projects = db.get_all_projects()
    for project in projects:
        project["subprojects"] = db.get_subprojects_for_project(project["id"])
    logger.debug("Projects listed: %s", len(projects))
    return jsonify({"projects": projects})


@projects_bp.get("/<int:project_id>")
def get_project(project_id: int):
    project = db.get_project_by_id(project_id)
    if not project:
        logger.warning("Project %s not found", project_id)
        return json_error("Project not found", 404)
    return jsonify({"project": project})


@projects_bp.post("/")
def create_project():
    """Create a project; content is pushed immediately when a grid configuration is given."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}

    missing_fields = [name for name in ("name", "source_language") if not data.get(name)]
    if missing_fields:
        logger.warning("Missing required project fields: %s", missing_fields)
        return json_error("Missing required fields", 400, {"missing_fields": missing_fields})

    try:
        project = project_service.create_project(
            name=data["name"],
            source_language=data["source_language"],
            target_languages=data.get("target_languages") or [],
            selected_content=data.get("selected_content") or [],
            grid_config_id=data.get("grid_config_id"),
            store=get_content_store(),
            client_factory=get_client_factory(),
        )
    except GridlySyncError as e:
        logger.warning("Project creation failed: %s", e.message)
        return error_response(e)

    return jsonify({"project": project}), 201


@projects_bp.put("/<int:project_id>")
def update_project(project_id: int):
    """Update editable project fields. Progress and sync bookkeeping cannot be set here."""
    project = db.get_project_by_id(project_id)
    if not project:
        logger.warning("Attempted to update missing project %s", project_id)
        return json_error("Project not found", 404)

    data: Dict[str, Any] = request.get_json(silent=True) or {}
    changes = {key: data[key] for key in EDITABLE_FIELDS if key in data}
    if "name" in changes and not changes["name"]:
        return json_error("Project name is required", 400)
    selected_content = changes.get("selected_content")
    if selected_content is not None and (
        not isinstance(selected_content, list) or not all(isinstance(item, dict) for item in selected_content)
    ):
        return json_error("selected_content must be a list of objects", 400)

    db.update_project(project_id, **changes)
    logger.info("Updated project %s", project_id)
    return jsonify({"project": db.get_project_by_id(project_id)})


@projects_bp.delete("/<int:project_id>")
def delete_project(project_id: int):
    project = db.get_project_by_id(project_id)
    if not project:
        logger.warning("Attempted to delete missing project %s", project_id)
        return json_error("Project not found", 404)

    db.delete_project(project_id)
    logger.info("Deleted project %s", project_id)
    return jsonify({"status": "deleted"})


@projects_bp.post("/<int:project_id>/send")
def send_content(project_id: int):
    """Push the given content (or the project's selection) to the grid."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        result = project_service.send_content(
            project_id,
            get_content_store(),
            selected_content=data.get("selected_content"),
            source_language=data.get("source_language"),
            client_factory=get_client_factory(),
        )
    except GridlySyncError as e:
        return error_response(e)

    return jsonify({
        "success": True,
        "message": f"Successfully sent {result.records_count} records to Gridly",
        "data": result.to_dict(),
    })


@projects_bp.post("/<int:project_id>/sync")
def sync_project(project_id: int):
    """Provision the view, push the project's content and refresh progress."""
    try:
        result = project_service.sync_project(project_id, get_content_store(), get_client_factory())
    except GridlySyncError as e:
        return error_response(e)
    return jsonify(result)


@projects_bp.post("/<int:project_id>/progress")
def update_progress(project_id: int):
    try:
        report = project_service.refresh_progress(project_id, get_client_factory())
    except GridlySyncError as e:
        return error_response(e)
    return jsonify({
        "success": True,
        "message": f"Successfully updated progress. Overall: {report.overall}%",
        "data": report.to_dict(),
    })


@projects_bp.post("/<int:project_id>/import")
def import_translations(project_id: int):
    """Import finished translations into the content store."""
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    try:
        result = project_service.import_project(
            project_id,
            get_content_store(),
            target_languages=data.get("target_languages"),
            client_factory=get_client_factory(),
        )
    except GridlySyncError as e:
        return error_response(e)

    return jsonify({
        "success": True,
        "message": f"Successfully imported {result.updated_entries} entries from Gridly",
        "data": result.to_dict(),
    })
