"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from flask import Flask, jsonify

from gridly_sync.content.store import ContentStore
from gridly_sync.core.projects import ClientFactory
from gridly_sync.gridly.exceptions import GridlySyncError
from gridly_sync.logger import get_logger

from .extensions import error_response, init_extension, json_error
from .routes import content_bp, grid_configs_bp, projects_bp, settings_bp

logger = get_logger(__name__)


def build_app(content_store: ContentStore, client_factory: ClientFactory) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False

    init_extension(app, content_store, client_factory)
    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(projects_bp, url_prefix="/api/projects")
    app.register_blueprint(grid_configs_bp, url_prefix="/api/grid-configs")
    app.register_blueprint(content_bp, url_prefix="/api")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_default_routes(app: Flask) -> None:
    """Register the health route and JSON error handlers."""

    @app.get("/api/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.errorhandler(GridlySyncError)
    def sync_error(e):
        logger.warning("Unhandled sync error: %s", e.message)
        return error_response(e)

    @app.errorhandler(404)
    def page_not_found(e):
        return json_error("Not found", 404)

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return json_error("An unexpected error occurred", 500)
