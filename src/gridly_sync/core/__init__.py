# Core module - persistence and the sync engine
# Engine modules (provisioner, push, diff, progress, importer, scheduler, projects)
# are imported directly to avoid circular imports with gridly_sync.config
from . import database
from . import schema
