"""
Database CRUD Operations Module

This module handles all database CRUD operations for:
- Projects
- Subprojects (one per project and target language)
- Grid Configurations
- App Config

For table creation, see core/schema.py
"""

import json
import os
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, List, Dict, Any

DB_FILE = Path(os.environ.get("GRIDLY_SYNC_DB", Path.cwd() / "gridly_sync.db"))

PROJECT_UPDATABLE_COLUMNS = {
    "name",
    "source_language",
    "selected_content",
    "grid_config_id",
    "last_sync",
    "last_import",
    "sync_status",
    "sync_error",
    "import_status",
    "import_error",
    "records_sent",
    "total_records",
    "entries_imported",
    "overall_progress",
    "last_progress_update",
}

GRID_CONFIG_UPDATABLE_COLUMNS = {"name", "api_key", "view_id", "description", "is_active"}


def get_connection():
    """Get a database connection."""
    return sqlite3.connect(DB_FILE)


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string, the format used for every stored timestamp."""
    return datetime.now(timezone.utc).isoformat()


def _decode_project(row: sqlite3.Row) -> Dict[str, Any]:
    project = dict(row)
    try:
        project["selected_content"] = json.loads(project.get("selected_content") or "[]")
    except json.JSONDecodeError:
        project["selected_content"] = []
    return project


def _decode_grid_config(row: sqlite3.Row) -> Dict[str, Any]:
    grid_config = dict(row)
    grid_config["is_active"] = bool(grid_config.get("is_active"))
    return grid_config


# ============================================================
# Project CRUD Operations
# ============================================================

def create_project(name: str, source_language: str,
                   selected_content: List[Dict[str, Any]] = None,
                   grid_config_id: int = None) -> int:
    """Create a new project."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO projects (name, source_language, selected_content, grid_config_id, created_at)
            VALUES (?, ?, ?, ?, ?)
        """, (name, source_language, json.dumps(selected_content or []), grid_config_id, utc_now()))
        conn.commit()
        return cursor.lastrowid


def get_all_projects() -> List[Dict[str, Any]]:
    """Get all projects."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM projects ORDER BY id")
        return [_decode_project(row) for row in cursor.fetchall()]


def get_project_by_id(project_id: int) -> Optional[Dict[str, Any]]:
    """Get a project by ID, with its subprojects attached."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM projects WHERE id = ?", (project_id,))
        row = cursor.fetchone()
        if not row:
            return None
        project = _decode_project(row)
    project["subprojects"] = get_subprojects_for_project(project_id)
    return project


def update_project(project_id: int, **fields):
    """
    Update a project.

    Only columns in PROJECT_UPDATABLE_COLUMNS can be written; ``selected_content``
    is serialized to JSON.
    """
    unknown = set(fields) - PROJECT_UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Cannot update project columns: {', '.join(sorted(unknown))}")

    updates = []
    params = []
    for column, value in fields.items():
        if column == "selected_content":
            value = json.dumps(value or [])
        updates.append(f"{column} = ?")
        params.append(value)

    if not updates:
        return

    with get_connection() as conn:
        cursor = conn.cursor()
        params.append(project_id)
        cursor.execute(f"UPDATE projects SET {', '.join(updates)} WHERE id = ?", params)
        conn.commit()


def delete_project(project_id: int):
    """Delete a project and its subprojects."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM subprojects WHERE project_id = ?", (project_id,))
        cursor.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        conn.commit()


# ============================================================
# Subproject CRUD Operations
# ============================================================

def create_subproject(project_id: int, target_language: str,
                      progress: int = 0, number_of_records: int = 0) -> int:
    """Create a subproject for one target language."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO subprojects (project_id, target_language, progress, number_of_records)
            VALUES (?, ?, ?, ?)
        """, (project_id, target_language, progress, number_of_records))
        conn.commit()
        return cursor.lastrowid


def get_subprojects_for_project(project_id: int) -> List[Dict[str, Any]]:
    """Get all subprojects of a project, in creation order."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM subprojects WHERE project_id = ? ORDER BY id", (project_id,))
        return [dict(row) for row in cursor.fetchall()]


def get_subproject_by_id(subproject_id: int) -> Optional[Dict[str, Any]]:
    """Get a subproject by ID."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM subprojects WHERE id = ?", (subproject_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def update_subproject(subproject_id: int, progress: int = None,
                      number_of_records: int = None, last_progress_update: str = None):
    """Update a subproject's progress figures."""
    with get_connection() as conn:
        cursor = conn.cursor()
        updates = []
        params = []

        if progress is not None:
            updates.append("progress = ?")
            params.append(progress)
        if number_of_records is not None:
            updates.append("number_of_records = ?")
            params.append(number_of_records)
        if last_progress_update is not None:
            updates.append("last_progress_update = ?")
            params.append(last_progress_update)

        if updates:
            params.append(subproject_id)
            cursor.execute(f"UPDATE subprojects SET {', '.join(updates)} WHERE id = ?", params)
            conn.commit()


# ============================================================
# Grid Configuration CRUD Operations
# ============================================================

def create_grid_config(name: str, api_key: str, view_id: str, description: str = "",
                       is_active: bool = True, created_by: str = None) -> int:
    """Create a new grid configuration."""
    now = utc_now()
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO grid_configs (name, api_key, view_id, description, is_active, created_by, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """, (name, api_key, view_id, description, 1 if is_active else 0, created_by, now, now))
        conn.commit()
        return cursor.lastrowid


def get_all_grid_configs(active_only: bool = False) -> List[Dict[str, Any]]:
    """Get all grid configurations, oldest first."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        if active_only:
            cursor.execute("SELECT * FROM grid_configs WHERE is_active = 1 ORDER BY id")
        else:
            cursor.execute("SELECT * FROM grid_configs ORDER BY id")
        return [_decode_grid_config(row) for row in cursor.fetchall()]


def get_grid_config_by_id(config_id: int) -> Optional[Dict[str, Any]]:
    """Get a grid configuration by ID."""
    with get_connection() as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM grid_configs WHERE id = ?", (config_id,))
        row = cursor.fetchone()
        return _decode_grid_config(row) if row else None


def update_grid_config(config_id: int, **fields):
    """Update a grid configuration."""
    unknown = set(fields) - GRID_CONFIG_UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Cannot update grid config columns: {', '.join(sorted(unknown))}")
    if not fields:
        return

    updates = []
    params = []
    for column, value in fields.items():
        if column == "is_active":
            value = 1 if value else 0
        updates.append(f"{column} = ?")
        params.append(value)
    updates.append("updated_at = ?")
    params.append(utc_now())

    with get_connection() as conn:
        cursor = conn.cursor()
        params.append(config_id)
        cursor.execute(f"UPDATE grid_configs SET {', '.join(updates)} WHERE id = ?", params)
        conn.commit()


def delete_grid_config(config_id: int):
    """Delete a grid configuration and detach it from projects."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("UPDATE projects SET grid_config_id = NULL WHERE grid_config_id = ?", (config_id,))
        cursor.execute("DELETE FROM grid_configs WHERE id = ?", (config_id,))
        conn.commit()


# ============================================================
# App Config CRUD Operations
# ============================================================

def get_app_config(key: str) -> Optional[str]:
    """Get a configuration value by key."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM app_config WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None


def set_app_config(key: str, value: str):
    """Set a configuration value."""
    with get_connection() as conn:
        cursor = conn.cursor()
        # Ensure app_config table exists
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        cursor.execute("""
            INSERT OR REPLACE INTO app_config (key, value, updated_at)
            VALUES (?, ?, ?)
        """, (key, value, utc_now()))
        conn.commit()
