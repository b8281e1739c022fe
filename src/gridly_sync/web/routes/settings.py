"""Settings management API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

import gridly_sync.config as config
from gridly_sync.logger import get_logger, clear_log_settings_cache

from ..extensions import json_error

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)


@settings_bp.get("/")
def get_settings():
    """Return the current configuration with defaults merged in."""
    return jsonify({"config": config.load_config(), "meta": {"log_levels": config.LOG_LEVELS}})


@settings_bp.put("/")
def update_settings():
    """Update the stored configuration."""
    data = request.get_json(silent=True)
    if not data or "config" not in data or not isinstance(data["config"], dict):
        return json_error("Configuration missing", 400)

    current_config = config.load_config()
    new_config: Dict[str, Any] = data["config"]
    for key, value in new_config.items():
        if isinstance(value, dict) and isinstance(current_config.get(key), dict):
            current_config[key].update(value)
        else:
            current_config[key] = value

    try:
        config.save_config(current_config)
    except ValueError as e:
        return json_error(str(e), 400)

    clear_log_settings_cache()
    logger.info("Settings updated")
    return jsonify({"config": current_config})
