"""
Background sync.

A daemon thread that periodically pushes changed content of every project to
its grid. Each project is reconciled independently; a failure is logged and
never stops the other projects or the loop.
"""

import threading
from datetime import datetime
from typing import Any, Dict, Optional

from gridly_sync import config
from gridly_sync.content.store import ContentStore
from gridly_sync.core import database as db
from gridly_sync.core.diff import items_needing_sync
from gridly_sync.core.projects import ClientFactory, record_push_success, resolve_grid_config, target_languages_of
from gridly_sync.core.provisioner import ensure_schema
from gridly_sync.core.push import build_records, encode_local_fields, push_records
from gridly_sync.events import emit_background_sync_completed
from gridly_sync.gridly.client import create_client
from gridly_sync.logger import get_logger

logger = get_logger(__name__)


def sync_project_silently(project: Dict[str, Any], store: ContentStore,
                          client_factory: ClientFactory = create_client,
                          now: datetime = None, sender: Any = None,
                          cooldown_seconds: float = None) -> int:
    """
    Push the fields of one project that differ from its grid.

    Returns:
        Number of records sent (0 when nothing changed or the project was skipped).
    """
    if not project.get("selected_content"):
        return 0

    grid_config = resolve_grid_config(project)
    if not grid_config:
        logger.debug(f"No Gridly configuration for project {project['id']}, skipping")
        return 0

    with client_factory(grid_config) as client:
        dirty = items_needing_sync(project, store, client, now=now, cooldown_seconds=cooldown_seconds)
        if not dirty:
            return 0

        ensure_schema(client, project["source_language"], target_languages_of(project))
        records = encode_local_fields(dirty, project["source_language"])
        push_records(client, records)

    # Record counts cover the whole selection, not only the fields pushed now.
    records_count = len(build_records(store, project["selected_content"], project["source_language"]))
    if "subprojects" not in project:
        project["subprojects"] = db.get_subprojects_for_project(project["id"])
    record_push_success(project, records_count, records_sent=len(records))
    timestamp = db.get_project_by_id(project["id"])["last_sync"]
    logger.info(f"Background sync pushed {len(records)} records for project {project['id']}")
    emit_background_sync_completed(sender, project_id=project["id"], records_sent=len(records), timestamp=timestamp)
    return len(records)


class BackgroundSync:
    """
    Periodic reconciliation of every project.

    Usage:
        sync = BackgroundSync(store)
        sync.start()
        ...
        sync.stop()
    """

    def __init__(self, store: ContentStore, client_factory: ClientFactory = create_client,
                 interval_seconds: float = None, warmup_seconds: float = None,
                 cooldown_seconds: float = None):
        self.store = store
        self.client_factory = client_factory
        self.interval_seconds = config.SYNC_INTERVAL_SECONDS if interval_seconds is None else interval_seconds
        self.warmup_seconds = config.SYNC_WARMUP_SECONDS if warmup_seconds is None else warmup_seconds
        self.cooldown_seconds = cooldown_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        with self._lock:
            if self.running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, name="gridly-background-sync", daemon=True)
            self._thread.start()
        logger.info(f"Background sync started (every {self.interval_seconds}s)")

    def stop(self, timeout: float = None):
        """Prevent further ticks. A tick already running finishes first."""
        self._stop_event.set()
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Background sync stopped")

    def _run(self):
        if self._stop_event.wait(self.warmup_seconds):
            return
        while not self._stop_event.is_set():
            self.run_once()
            if self._stop_event.wait(self.interval_seconds):
                break

    def run_once(self) -> Dict[int, int]:
        """
        Run a single tick synchronously.

        Returns:
            Records sent per project id; projects that failed are absent.
        """
        sent: Dict[int, int] = {}
        try:
            projects = db.get_all_projects()
        except Exception as e:
            logger.error(f"Background sync could not list projects: {e}")
            return sent

        for project in projects:
            if self._stop_event.is_set():
                break
            try:
                project["subprojects"] = db.get_subprojects_for_project(project["id"])
                sent[project["id"]] = sync_project_silently(
                    project,
                    self.store,
                    self.client_factory,
                    sender=self,
                    cooldown_seconds=self.cooldown_seconds,
                )
            except Exception as e:
                logger.error(f"Background sync failed for project {project['id']}: {e}")
        return sent
