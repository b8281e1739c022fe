
import copy
import json
import os
from typing import Dict, Any

from gridly_sync.core import database as db
from gridly_sync.core.schema import initialize_database
from gridly_sync.logger import get_logger

logger = get_logger(__name__)

# Remote grid constants
GRIDLY_API_BASE_URL = os.environ.get("GRIDLY_API_BASE_URL", "https://api.gridly.com")
RECORD_BATCH_SIZE = 1000  # Maximum records per upload request
RECORDS_PAGE_LIMIT = 2000  # Page size when paginating records

HTTP_TIMEOUT = {
    "connect": 10.0,
    "write": 60.0,
    "read": 120.0,
    "pool": 10.0,
}

# Background sync constants
SYNC_INTERVAL_SECONDS = 60
SYNC_WARMUP_SECONDS = 2
SYNC_COOLDOWN_SECONDS = 30

LOG_LEVELS = ["error", "warn", "info", "debug", "off"]

# Default configuration template
DEFAULT_CONFIG = {
    "log_level": "info",
    "log_to_file": False,
    "gridly": {
        "api_base_url": GRIDLY_API_BASE_URL,
        "timeout": HTTP_TIMEOUT,
    },
    "sync": {
        "enabled": True,
        "interval_seconds": SYNC_INTERVAL_SECONDS,
        "warmup_seconds": SYNC_WARMUP_SECONDS,
        "cooldown_seconds": SYNC_COOLDOWN_SECONDS,
    },
}


def initialize_app():
    """
    Initialize the application.
    Creates the database tables and stores the default configuration
    when none exists yet.
    """
    logger.info("Initializing application...")

    initialize_database()
    logger.info("Database initialized")

    try:
        existing_config = db.get_app_config('config')
        if not existing_config:
            logger.info("No config in database, initializing default config")
            save_config(DEFAULT_CONFIG)
        else:
            logger.debug("Config already exists in database")
    except Exception as e:
        logger.error(f"Failed to check/initialize config in database: {e}")
        logger.warning("Application will use in-memory default configuration")

    logger.info("Application initialization complete")


def _merge_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in any keys missing from a stored config with their defaults."""
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def load_config() -> Dict[str, Any]:
    """Load the configuration from database, falling back to defaults."""
    try:
        config_json = db.get_app_config('config')
    except Exception as e:
        logger.error(f"Failed to load config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not config_json:
        logger.debug("No config in database, using defaults")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        config = json.loads(config_json)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse config from database: {e}")
        logger.warning("Using default configuration")
        return copy.deepcopy(DEFAULT_CONFIG)

    logger.debug("Configuration loaded from database")
    return _merge_defaults(config)


def save_config(config: Dict[str, Any]):
    """Save the configuration to database."""
    if config.get("log_level") not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
    try:
        config_json = json.dumps(config, ensure_ascii=False)
        db.set_app_config('config', config_json)
        logger.info("Configuration saved to database")
    except Exception as e:
        logger.error(f"Failed to save config to database: {e}")
        raise


def get_gridly_settings() -> Dict[str, Any]:
    """Return the 'gridly' section of the current configuration."""
    return load_config()["gridly"]


def get_sync_settings() -> Dict[str, Any]:
    """Return the 'sync' section of the current configuration."""
    return load_config()["sync"]
