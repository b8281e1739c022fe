"""Tests for the sqlite store, stored configuration and logging settings."""

import logging

import pytest

from gridly_sync import config
from gridly_sync import logger as logger_module
from gridly_sync.core import database as db
from gridly_sync.logger import clear_log_settings_cache, get_logger


class TestDatabase:
    def test_project_round_trip(self, temp_db):
        content = [{"contentTypeUid": "api::article.article", "itemId": 1, "fields": ["title"]}]
        project_id = db.create_project("Site", "en", content)
        db.create_subproject(project_id, "de")

        project = db.get_project_by_id(project_id)
        assert project["selected_content"] == content
        assert project["overall_progress"] == 0
        assert [sub["target_language"] for sub in project["subprojects"]] == ["de"]

    def test_update_rejects_unknown_columns(self, temp_db):
        project_id = db.create_project("Site", "en")
        with pytest.raises(ValueError):
            db.update_project(project_id, id=5)
        with pytest.raises(ValueError):
            db.update_grid_config(1, created_at="now")

    def test_delete_project_removes_subprojects(self, temp_db):
        project_id = db.create_project("Site", "en")
        subproject_id = db.create_subproject(project_id, "de")
        db.delete_project(project_id)
        assert db.get_project_by_id(project_id) is None
        assert db.get_subproject_by_id(subproject_id) is None

    def test_delete_grid_config_detaches_projects(self, temp_db):
        config_id = db.create_grid_config("Main", "key", "view")
        project_id = db.create_project("Site", "en", grid_config_id=config_id)
        db.delete_grid_config(config_id)
        assert db.get_project_by_id(project_id)["grid_config_id"] is None

    def test_active_filter(self, temp_db):
        db.create_grid_config("Off", "key", "view", is_active=False)
        active_id = db.create_grid_config("On", "key", "view")
        assert [item["id"] for item in db.get_all_grid_configs(active_only=True)] == [active_id]
        assert len(db.get_all_grid_configs()) == 2


class TestConfig:
    def test_defaults_without_stored_config(self, temp_db):
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_stored_config_is_merged_with_defaults(self, temp_db):
        db.set_app_config("config", '{"log_level": "debug", "sync": {"enabled": false}}')
        loaded = config.load_config()
        assert loaded["log_level"] == "debug"
        assert config.get_sync_settings()["enabled"] is False
        assert config.get_sync_settings()["interval_seconds"] == config.SYNC_INTERVAL_SECONDS
        assert config.get_gridly_settings()["timeout"] == config.HTTP_TIMEOUT

    def test_corrupt_config_falls_back_to_defaults(self, temp_db):
        db.set_app_config("config", "{not json")
        assert config.load_config() == config.DEFAULT_CONFIG

    def test_invalid_log_level(self, temp_db):
        with pytest.raises(ValueError):
            config.save_config({"log_level": "verbose"})

    def test_initialize_app_stores_defaults_once(self, temp_db):
        config.initialize_app()
        config.save_config({**config.DEFAULT_CONFIG, "log_level": "warn"})
        config.initialize_app()
        assert config.load_config()["log_level"] == "warn"


class TestLogSettings:
    @pytest.fixture(autouse=True)
    def reset_log_settings(self, temp_db, monkeypatch, tmp_path):
        monkeypatch.delenv("GRIDLY_LOG_LEVEL", raising=False)
        monkeypatch.setattr(logger_module, "LOG_DIR", tmp_path / "logs")
        monkeypatch.setattr(logger_module, "LOG_FILE", tmp_path / "logs" / "gridly-sync.log")
        yield
        config.save_config(config.DEFAULT_CONFIG)
        clear_log_settings_cache()

    def test_stored_level_applies_after_cache_clear(self):
        config.save_config({**config.DEFAULT_CONFIG, "log_level": "error"})
        clear_log_settings_cache()
        assert get_logger("gridly_sync.tests.level").level == logging.ERROR

    def test_environment_overrides_stored_level(self, monkeypatch):
        config.save_config({**config.DEFAULT_CONFIG, "log_level": "error"})
        monkeypatch.setenv("GRIDLY_LOG_LEVEL", "debug")
        clear_log_settings_cache()
        assert get_logger("gridly_sync.tests.env").level == logging.DEBUG

    def test_file_handler_follows_log_to_file(self, tmp_path):
        config.save_config({**config.DEFAULT_CONFIG, "log_to_file": True})
        clear_log_settings_cache()
        log = get_logger("gridly_sync.tests.file")
        assert any(isinstance(handler, logging.FileHandler) for handler in log.handlers)
        log.info("written to file")
        assert (tmp_path / "logs" / "gridly-sync.log").exists()

        config.save_config({**config.DEFAULT_CONFIG, "log_to_file": False})
        clear_log_settings_cache()
        assert not any(isinstance(handler, logging.FileHandler) for handler in log.handlers)

    def test_off_disables_file_logging(self):
        config.save_config({**config.DEFAULT_CONFIG, "log_level": "off", "log_to_file": True})
        clear_log_settings_cache()
        log = get_logger("gridly_sync.tests.off")
        assert log.level > logging.CRITICAL
        assert not any(isinstance(handler, logging.FileHandler) for handler in log.handlers)
