"""Tests for the in-memory content store."""

import pytest

from gridly_sync.gridly.exceptions import ContentSchemaError

from conftest import ARTICLE


class TestInMemoryContentStore:
    def test_create_assigns_defaults(self, store):
        entry = store.create_entry(ARTICLE, {"title": "Draft"})
        assert entry["locale"] == "en"
        assert entry["publishedAt"] is None
        assert entry["createdAt"] == entry["updatedAt"]
        assert entry["localizations"] == []

    def test_live_state_hides_drafts(self, store):
        entry = store.create_entry(ARTICLE, {"title": "Draft"})
        assert store.get_entry(ARTICLE, entry["id"], publication_state="live") is None
        assert store.get_entry(ARTICLE, str(entry["id"]))["title"] == "Draft"

    def test_live_update_publishes(self, store):
        entry = store.create_entry(ARTICLE, {"title": "Draft"})
        updated = store.update_entry(ARTICLE, entry["id"], {"title": "Final"}, publication_state="live")
        assert updated["publishedAt"]
        assert updated["title"] == "Final"

    def test_localizations(self, store, article):
        french = store.create_entry(ARTICLE, {"title": "Bonjour", "locale": "fr-FR", "localizations": [article]})
        store.set_localizations(ARTICLE, article["id"], [french["id"], article["id"]])

        populated = store.get_entry(ARTICLE, article["id"], populate_localizations=True)
        assert [item["id"] for item in populated["localizations"]] == [french["id"]]
        assert store.get_entry(ARTICLE, french["id"])["localizations"] == [article["id"]]

        store.delete_entry(ARTICLE, french["id"])
        assert store.list_localizations(ARTICLE, article["id"]) == []

    def test_unknown_content_type(self, store):
        with pytest.raises(ContentSchemaError):
            store.create_entry("api::nope.nope", {})
        assert store.get_schema("api::nope.nope") is None

    def test_update_missing_entry(self, store):
        with pytest.raises(ContentSchemaError):
            store.update_entry(ARTICLE, 999, {"title": "x"})

    def test_entries_are_copies(self, store, article):
        fetched = store.get_entry(ARTICLE, article["id"])
        fetched["title"] = "Changed"
        assert store.get_entry(ARTICLE, article["id"])["title"] == "Hello world"
