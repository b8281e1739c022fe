"""Web application package for gridly-sync."""

from flask import Flask

from gridly_sync.config import initialize_app
from gridly_sync.content.store import ContentStore, InMemoryContentStore
from gridly_sync.gridly.client import create_client


def create_app(content_store: ContentStore = None, client_factory=None) -> Flask:
    """
    Application factory for the JSON API.

    Args:
        content_store: Content system adapter; an empty in-memory store when omitted.
        client_factory: Builds a GridlyClient from a grid configuration row.
    """
    initialize_app()

    from .app import build_app  # Import here to avoid circular imports

    return build_app(content_store or InMemoryContentStore(), client_factory or create_client)


__all__ = ["create_app"]
