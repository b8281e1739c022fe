import json
import logging
import os
from pathlib import Path

LOG_DIR = Path(os.environ.get("GRIDLY_SYNC_LOG_DIR", Path.cwd() / "logs"))
LOG_FILE = LOG_DIR / "gridly-sync.log"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

LEVELS = {
    'error': logging.ERROR,
    'warn': logging.WARNING,
    'info': logging.INFO,
    'debug': logging.DEBUG,
    'off': logging.CRITICAL + 1,
}

# Cache for log settings to avoid repeated config reads
_log_settings_cache = None


def _get_log_settings():
    """Return (level_name, log_to_file) from the environment or stored config."""
    global _log_settings_cache
    if _log_settings_cache is not None:
        return _log_settings_cache

    level_name = 'info'
    log_to_file = False

    try:
        from gridly_sync.core import database as db
        if db.DB_FILE.exists():
            stored = db.get_app_config('config')
            if stored:
                config = json.loads(stored)
                level_name = str(config.get('log_level', level_name)).lower()
                log_to_file = bool(config.get('log_to_file', False))
    except Exception:
        # Config not readable yet; keep defaults
        pass

    env_level = os.environ.get('GRIDLY_LOG_LEVEL')
    if env_level and env_level.lower() in LEVELS:
        level_name = env_level.lower()

    if level_name not in LEVELS:
        level_name = 'info'

    _log_settings_cache = (level_name, log_to_file)
    return _log_settings_cache


def _apply_settings(logger: logging.Logger, level_name: str, log_to_file: bool) -> None:
    level = LEVELS[level_name]
    logger.setLevel(level)

    has_file_handler = any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    if log_to_file and level_name != 'off' and not has_file_handler:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        f_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        f_handler.setLevel(logging.DEBUG)
        f_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(f_handler)
    elif (not log_to_file or level_name == 'off') and has_file_handler:
        for handler in [h for h in logger.handlers if isinstance(h, logging.FileHandler)]:
            handler.close()
            logger.removeHandler(handler)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)


def clear_log_settings_cache():
    """Clear the cached settings and re-apply them to every logger created by get_logger."""
    global _log_settings_cache
    _log_settings_cache = None

    level_name, log_to_file = _get_log_settings()
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        if not logger_name.startswith('gridly_sync'):
            continue
        logger = logging.getLogger(logger_name)
        if logger.handlers:
            _apply_settings(logger, level_name, log_to_file)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    level_name, log_to_file = _get_log_settings()

    # Prevent duplicate handlers if logger already configured
    if not logger.handlers:
        c_handler = logging.StreamHandler()
        c_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(c_handler)

    _apply_settings(logger, level_name, log_to_file)
    return logger
