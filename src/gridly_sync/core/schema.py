"""
Database Schema Module

This module creates the database tables when they do not exist yet.
For CRUD operations, see core/database.py
"""

# Import database module to use DB_FILE and get_connection dynamically
# This ensures monkeypatching in tests works correctly
import gridly_sync.core.database as db


def get_connection():
    """Get a database connection using the database module's DB_FILE."""
    return db.get_connection()


def initialize_database():
    """Creates the tables if they are missing."""
    from gridly_sync.logger import get_logger
    logger = get_logger(__name__)

    if db.DB_FILE.parent and not db.DB_FILE.parent.exists():
        db.DB_FILE.parent.mkdir(parents=True, exist_ok=True)

    with get_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
        CREATE TABLE IF NOT EXISTS grid_configs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            api_key TEXT NOT NULL,
            view_id TEXT NOT NULL,
            description TEXT DEFAULT '',
            is_active INTEGER DEFAULT 1,
            created_by TEXT,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        )
        """)

        cursor.execute("""
        CREATE TABLE IF NOT EXISTS projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            source_language TEXT NOT NULL,
            selected_content TEXT DEFAULT '[]',
            grid_config_id INTEGER,
            created_at TIMESTAMP,
            last_sync TIMESTAMP,
            last_import TIMESTAMP,
            overall_progress INTEGER DEFAULT 0,
            total_records INTEGER DEFAULT 0,
            records_sent INTEGER DEFAULT 0,
            sync_status TEXT,
            sync_error TEXT,
            import_status TEXT,
            import_error TEXT,
            entries_imported INTEGER DEFAULT 0,
            last_progress_update TIMESTAMP,
            FOREIGN KEY (grid_config_id) REFERENCES grid_configs (id)
        )
        """)

        cursor.execute("""
        CREATE TABLE IF NOT EXISTS subprojects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            project_id INTEGER NOT NULL,
            target_language TEXT NOT NULL,
            progress INTEGER DEFAULT 0,
            number_of_records INTEGER DEFAULT 0,
            last_progress_update TIMESTAMP,
            FOREIGN KEY (project_id) REFERENCES projects (id) ON DELETE CASCADE,
            UNIQUE (project_id, target_language)
        )
        """)

        cursor.execute("""
        CREATE TABLE IF NOT EXISTS app_config (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """)

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_subprojects_project_id ON subprojects(project_id)")

        conn.commit()

    logger.debug(f"Database ready at {db.DB_FILE}")
