"""Route blueprints for the web application."""

from .projects import projects_bp
from .grid_configs import grid_configs_bp
from .content import content_bp
from .settings import settings_bp

__all__ = [
    "projects_bp",
    "grid_configs_bp",
    "content_bp",
    "settings_bp",
]
