"""Shared fixtures: temporary database, in-memory content store and a fake Gridly API."""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from gridly_sync.content.store import InMemoryContentStore
from gridly_sync.core import database as db
from gridly_sync.core.schema import initialize_database
from gridly_sync.gridly.client import GridlyClient

API_KEY = "test-api-key"
VIEW_ID = "view-123"
BASE_URL = "https://api.gridly.test"

ARTICLE = "api::article.article"
ARTICLE_SCHEMA = {
    "displayName": "Article",
    "attributes": {
        "title": {"type": "string"},
        "slug": {"type": "uid", "targetField": "title"},
        "body": {"type": "text"},
        "cover": {"type": "media"},
        "views": {"type": "integer"},
    },
}

PAGE = "api::page.page"
PAGE_SCHEMA = {
    "displayName": "Page",
    "attributes": {
        "title": {"type": "string"},
        "content": {"type": "blocks"},
        "intro": {"type": "richtext", "customField": "plugin::ckeditor5.CKEditor"},
    },
}


class FakeGridly:
    """
    In-memory implementation of the Gridly v1 view endpoints.

    Records are upserted by id, pagination honours limit/offset, and any
    request can be made to fail with ``fail()``.
    """

    def __init__(self, api_key: str = API_KEY, view_id: str = VIEW_ID):
        self.api_key = api_key
        self.view_id = view_id
        self.columns: List[Dict[str, Any]] = []
        self.records: Dict[str, Dict[str, Any]] = {}
        self.dependencies: List[Dict[str, Any]] = []
        self.batches: List[int] = []
        self.requests: List[Tuple[str, str]] = []
        self._failures: Dict[Tuple[str, str], Tuple[int, Any]] = {}

    # -- test helpers -------------------------------------------------

    def fail(self, method: str, path: str, status: int, body: Any):
        """Make every ``method`` request to the view sub-path ``path`` fail."""
        self._failures[(method, path)] = (status, body)

    def clear_failures(self):
        self._failures.clear()

    def add_column(self, column_id: str, **extra):
        self.columns.append({"id": column_id, "name": column_id, **extra})

    def set_cell(self, record_id: str, column_id: str, value: Any, status: Optional[str] = "upToDate"):
        record = self.records[record_id]
        cell = {"columnId": column_id, "value": value}
        if status is not None:
            cell["dependencyStatus"] = status
        record["cells"] = [c for c in record["cells"] if c["columnId"] != column_id] + [cell]

    def cell(self, record_id: str, column_id: str) -> Optional[Dict[str, Any]]:
        for cell in self.records[record_id]["cells"]:
            if cell["columnId"] == column_id:
                return cell
        return None

    def count(self, method: str, path: str) -> int:
        return sum(1 for item in self.requests if item == (method, path))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> GridlyClient:
        return GridlyClient(self.api_key, self.view_id, base_url=BASE_URL, transport=self.transport)

    def factory(self, grid_config: Dict[str, Any]) -> GridlyClient:
        return GridlyClient.from_grid_config(grid_config, base_url=BASE_URL, transport=self.transport)

    # -- request handling ---------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.headers.get("Authorization") != f"ApiKey {self.api_key}":
            return httpx.Response(401, json={"message": "Invalid API key"})

        prefix = f"/v1/views/{self.view_id}"
        if not request.url.path.startswith(prefix):
            return httpx.Response(404, json={"message": "View not found"})

        path = request.url.path[len(prefix):]
        method = request.method
        self.requests.append((method, path))

        failure = self._failures.get((method, path))
        if failure:
            status, body = failure
            if isinstance(body, str):
                return httpx.Response(status, text=body)
            return httpx.Response(status, json=body)

        body = json.loads(request.content) if request.content else None

        if method == "GET" and path == "":
            return httpx.Response(200, json={"id": self.view_id, "name": "Test view", "columns": self.columns})

        if method == "POST" and path == "/columns":
            if any(column["id"] == body["id"] for column in self.columns):
                return httpx.Response(409, json={"message": f"Column {body['id']} already exists"})
            self.columns.append(body)
            return httpx.Response(201, json=body)

        if method == "GET" and path == "/records":
            limit = int(request.url.params.get("limit", 100))
            offset = int(request.url.params.get("offset", 0))
            return httpx.Response(200, json=list(self.records.values())[offset:offset + limit])

        if method == "POST" and path == "/records":
            self.batches.append(len(body))
            for record in body:
                existing = self.records.get(record["id"])
                if existing is None:
                    self.records[record["id"]] = {"id": record["id"], "path": record.get("path"), "cells": list(record["cells"])}
                    continue
                incoming = {cell["columnId"] for cell in record["cells"]}
                existing["cells"] = [c for c in existing["cells"] if c["columnId"] not in incoming] + list(record["cells"])
            return httpx.Response(200, json=body)

        if method == "GET" and path == "/dependencies":
            return httpx.Response(200, json=self.dependencies)

        if method == "POST" and path == "/dependencies":
            self.dependencies.append(body)
            return httpx.Response(201, json={"id": len(self.dependencies), **body})

        return httpx.Response(404, json={"message": f"No route for {method} {path}"})


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the database module at a fresh file and create the tables."""
    monkeypatch.setattr(db, "DB_FILE", tmp_path / "gridly_sync_test.db")
    initialize_database()
    return db.DB_FILE


@pytest.fixture
def gridly():
    return FakeGridly()


@pytest.fixture
def store():
    content_store = InMemoryContentStore(locales=[
        {"code": "en", "name": "English (en)", "isDefault": True},
        {"code": "fr-FR", "name": "French (France) (fr-FR)"},
        {"code": "de", "name": "German (de)"},
    ])
    content_store.register_content_type(ARTICLE, ARTICLE_SCHEMA)
    content_store.register_content_type(PAGE, PAGE_SCHEMA)
    return content_store


@pytest.fixture
def article(store):
    return store.create_entry(ARTICLE, {
        "title": "Hello world",
        "slug": "hello-world",
        "body": "Body text",
        "views": 3,
        "locale": "en",
        "publishedAt": "2024-01-01T00:00:00+00:00",
    })


@pytest.fixture
def grid_config(temp_db):
    config_id = db.create_grid_config("Main grid", API_KEY, VIEW_ID)
    return db.get_grid_config_by_id(config_id)


def article_ref(entry: Dict[str, Any], **extra) -> Dict[str, Any]:
    return {"contentTypeUid": ARTICLE, "itemId": entry["id"], "title": entry.get("title"), **extra}
