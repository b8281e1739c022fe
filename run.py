"""Project root entry point for launching the API and the background sync."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _bootstrap_path() -> None:
    """Ensure the src/ directory is importable when running from project root."""
    project_root = Path(__file__).resolve().parent
    src_dir = project_root / "src"
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


def main():
    _bootstrap_path()
    from gridly_sync.config import get_sync_settings
    from gridly_sync.core.scheduler import BackgroundSync
    from gridly_sync.web import create_app

    app = create_app()
    store = app.extensions["gridly_sync"]["content_store"]

    sync_settings = get_sync_settings()
    background_sync = None
    if sync_settings.get("enabled", True):
        background_sync = BackgroundSync(
            store,
            interval_seconds=sync_settings.get("interval_seconds"),
            warmup_seconds=sync_settings.get("warmup_seconds"),
            cooldown_seconds=sync_settings.get("cooldown_seconds"),
        )
        background_sync.start()

    try:
        app.run(host="0.0.0.0", port=int(os.environ.get("GRIDLY_SYNC_PORT", 5500)), debug=False)
    finally:
        if background_sync:
            background_sync.stop()


if __name__ == "__main__":
    main()
