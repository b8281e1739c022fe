"""
Sync events.

Observers subscribe with ``background_sync_completed.connect(handler)``; the
handler receives the sender plus ``project_id``, ``records_sent`` and
``timestamp`` keyword arguments. Delivery is fire-and-forget.
"""

from blinker import Namespace

from gridly_sync.logger import get_logger

logger = get_logger(__name__)

sync_signals = Namespace()

background_sync_completed = sync_signals.signal("background-sync-completed")


def emit_background_sync_completed(sender, project_id: int, records_sent: int, timestamp: str):
    """Notify subscribers that a background push succeeded."""
    logger.debug(f"Emitting background-sync-completed for project {project_id} ({records_sent} records)")
    background_sync_completed.send(
        sender,
        project_id=project_id,
        records_sent=records_sent,
        timestamp=timestamp,
    )
