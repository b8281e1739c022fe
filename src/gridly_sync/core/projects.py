"""
Project operations.

Orchestrates the sync engine for the controller layer: project creation with
its first push, manual send/sync, progress refresh, translation import and
grid configuration checks. Every operation raises GridlySyncError subclasses;
callers turn them into ``{error, message, details}`` payloads.
"""

from typing import Any, Callable, Dict, List, Optional

from gridly_sync.content.store import ContentStore
from gridly_sync.core import database as db
from gridly_sync.core.importer import ImportResult, import_translations
from gridly_sync.core.progress import ProgressReport, update_project_progress
from gridly_sync.core.provisioner import ProvisionResult, ensure_dependencies, ensure_schema
from gridly_sync.core.push import PushResult, push_content
from gridly_sync.gridly.client import GridlyClient, create_client
from gridly_sync.gridly.exceptions import ConfigurationError, GridlySyncError
from gridly_sync.language_codes import format_language_code
from gridly_sync.logger import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[[Dict[str, Any]], GridlyClient]


def get_project_or_raise(project_id: int) -> Dict[str, Any]:
    project = db.get_project_by_id(project_id)
    if not project:
        raise GridlySyncError(f"Project {project_id} not found", code="PROJECT_NOT_FOUND")
    return project


def get_grid_config_or_raise(config_id: int) -> Dict[str, Any]:
    grid_config = db.get_grid_config_by_id(config_id)
    if not grid_config:
        raise ConfigurationError("Gridly configuration not found", code="GRID_CONFIG_NOT_FOUND")
    return grid_config


def resolve_grid_config(project: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """The project's own grid configuration if set and found, else the first active one."""
    config_id = project.get("grid_config_id")
    if config_id:
        grid_config = db.get_grid_config_by_id(config_id)
        if grid_config:
            return grid_config
        logger.warning(f"Grid config {config_id} of project {project.get('id')} not found, using first active")

    active = db.get_all_grid_configs(active_only=True)
    return active[0] if active else None


def target_languages_of(project: Dict[str, Any]) -> List[str]:
    return [subproject["target_language"] for subproject in project.get("subprojects") or []]


def _client_for(project: Dict[str, Any], client_factory: ClientFactory) -> GridlyClient:
    grid_config = resolve_grid_config(project)
    if not grid_config:
        raise ConfigurationError(
            "No Gridly configuration found. Please create a Gridly configuration first.",
            code="MISSING_GRID_CONFIG",
        )
    return client_factory(grid_config)


def record_push_success(project: Dict[str, Any], records_count: int, records_sent: int = None) -> None:
    """
    Store the outcome of a successful push.

    ``total_records`` counts translation tasks (records x target languages);
    every subproject's record count is reset to the number of records.
    ``records_sent`` defaults to ``records_count`` when the whole selection was pushed.
    """
    target_count = len(project.get("subprojects") or [])
    db.update_project(
        project["id"],
        last_sync=db.utc_now(),
        sync_status="completed",
        sync_error=None,
        records_sent=records_count if records_sent is None else records_sent,
        total_records=records_count * target_count if target_count else records_count,
    )
    for subproject in project.get("subprojects") or []:
        db.update_subproject(subproject["id"], number_of_records=records_count)


def record_push_failure(project_id: int, error: GridlySyncError) -> None:
    db.update_project(project_id, last_sync=db.utc_now(), sync_status="failed", sync_error=error.message)


def create_project(name: str, source_language: str, target_languages: List[str] = None,
                   selected_content: List[Dict[str, Any]] = None, grid_config_id: int = None,
                   store: ContentStore = None, client_factory: ClientFactory = create_client) -> Dict[str, Any]:
    """
    Create a project with one subproject per target language.

    When a grid configuration and content are given, the view is provisioned
    and the content pushed right away. If either step fails the new project
    is deleted and the error re-raised.

    Returns:
        The stored project (with subprojects).
    """
    if not name or not source_language:
        raise GridlySyncError("Project name and source language are required", code="INVALID_PROJECT")

    target_languages = list(dict.fromkeys(lang for lang in target_languages or [] if lang != source_language))
    selected_content = selected_content or []

    grid_config = None
    if grid_config_id:
        grid_config = get_grid_config_or_raise(grid_config_id)

    project_id = db.create_project(name, source_language, selected_content, grid_config_id)
    for language in target_languages:
        db.create_subproject(project_id, language)
    logger.info(f"Created project {project_id} '{name}' ({source_language} -> {', '.join(target_languages) or 'none'})")

    if grid_config and selected_content:
        if store is None:
            db.delete_project(project_id)
            raise ConfigurationError("A content store is required to send content", code="MISSING_CONTENT_STORE")
        try:
            with client_factory(grid_config) as client:
                ensure_schema(client, source_language, target_languages)
                result = push_content(client, store, selected_content, source_language)
        except GridlySyncError as e:
            logger.error(f"Initial push for project {project_id} failed, removing project: {e.message}")
            db.delete_project(project_id)
            raise
        record_push_success(db.get_project_by_id(project_id), result.records_count)

    return db.get_project_by_id(project_id)


def send_content(project_id: int, store: ContentStore, selected_content: List[Dict[str, Any]] = None,
                 source_language: str = None, client_factory: ClientFactory = create_client) -> PushResult:
    """Push the given content (default: the project's selection) without provisioning."""
    project = get_project_or_raise(project_id)
    selected_content = selected_content if selected_content is not None else project["selected_content"]
    source_language = source_language or project["source_language"]

    try:
        with _client_for(project, client_factory) as client:
            result = push_content(client, store, selected_content, source_language)
    except GridlySyncError as e:
        record_push_failure(project_id, e)
        raise

    db.update_project(
        project_id,
        last_sync=db.utc_now(),
        sync_status="completed",
        sync_error=None,
        records_sent=result.records_count,
    )
    return result


def sync_project(project_id: int, store: ContentStore,
                 client_factory: ClientFactory = create_client) -> Dict[str, Any]:
    """
    Full manual sync: provision the view, push the selected content, store
    the record counts and refresh progress.

    A progress refresh failure is logged and reported, not raised.
    """
    project = get_project_or_raise(project_id)
    if not project["selected_content"]:
        raise GridlySyncError("Project has no selected content", code="NO_CONTENT")
    target_languages = target_languages_of(project)

    try:
        with _client_for(project, client_factory) as client:
            provision = ensure_schema(client, project["source_language"], target_languages)
            result = push_content(client, store, project["selected_content"], project["source_language"])
            record_push_success(project, result.records_count)

            try:
                progress = {"success": True, **update_project_progress(project_id, client).to_dict()}
            except GridlySyncError as e:
                logger.warning(f"Failed to update progress for project {project_id}: {e.message}")
                progress = {"success": False, "error": e.message}
    except GridlySyncError as e:
        record_push_failure(project_id, e)
        raise

    return {
        "success": True,
        "message": f"Successfully synced {result.records_count} records to Gridly and updated progress",
        "recordsCount": result.records_count,
        "schema": provision.to_dict(),
        "progressUpdate": progress,
    }


def refresh_progress(project_id: int, client_factory: ClientFactory = create_client) -> ProgressReport:
    project = get_project_or_raise(project_id)
    with _client_for(project, client_factory) as client:
        return update_project_progress(project_id, client)


def import_project(project_id: int, store: ContentStore, target_languages: List[str] = None,
                   client_factory: ClientFactory = create_client) -> ImportResult:
    """Import finished translations for the given languages (default: all subprojects)."""
    project = get_project_or_raise(project_id)
    target_languages = target_languages or target_languages_of(project)

    try:
        with _client_for(project, client_factory) as client:
            result = import_translations(store, client, target_languages)
    except GridlySyncError as e:
        db.update_project(project_id, last_import=db.utc_now(), import_status="failed", import_error=e.message)
        raise

    db.update_project(
        project_id,
        last_import=db.utc_now(),
        import_status="completed",
        import_error=None,
        entries_imported=result.updated_entries,
    )
    return result


def validate_columns(config_id: int, source_language: str, target_languages: List[str],
                     client_factory: ClientFactory = create_client) -> ProvisionResult:
    grid_config = get_grid_config_or_raise(config_id)
    with client_factory(grid_config) as client:
        return ensure_schema(client, source_language, target_languages or [])


def validate_dependencies(config_id: int, source_language: str, target_languages: List[str],
                          client_factory: ClientFactory = create_client) -> List[Dict[str, Any]]:
    grid_config = get_grid_config_or_raise(config_id)
    with client_factory(grid_config) as client:
        return ensure_dependencies(
            client,
            format_language_code(source_language),
            [format_language_code(language) for language in target_languages or []],
        )


def check_connection(config_id: int, client_factory: ClientFactory = create_client) -> Dict[str, Any]:
    """Fetch the configured view to check credentials and view id."""
    grid_config = get_grid_config_or_raise(config_id)
    with client_factory(grid_config) as client:
        view = client.get_view()
    columns = view.get("columns") or []
    return {
        "success": True,
        "message": "Successfully connected to Gridly",
        "viewId": grid_config["view_id"],
        "viewName": view.get("name"),
        "columns": [{"id": column.get("id"), "name": column.get("name")} for column in columns],
    }
