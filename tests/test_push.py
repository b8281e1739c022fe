"""Tests for record building and batched upload."""

import pytest

from gridly_sync.core.push import ContentRef, build_records, push_content, push_records
from gridly_sync.gridly.exceptions import ContentSchemaError, GridlyAPIError, GridlySyncError

from conftest import ARTICLE, article_ref


def make_records(count):
    return [{"id": f"ct_{index}_title", "cells": [{"columnId": "en", "value": f"Text {index}"}]} for index in range(count)]


class TestContentRef:
    def test_accepts_alternative_keys(self):
        ref = ContentRef.from_dict({"contentType": ARTICLE, "id": 5, "fields": ["title", {"name": "body"}]})
        assert ref.content_type == ARTICLE
        assert ref.entry_id == 5
        assert ref.fields == ["title", "body"]

    def test_invalid_reference(self):
        with pytest.raises(ContentSchemaError):
            ContentRef.from_dict({"itemId": 5})

    def test_non_mapping_reference(self):
        with pytest.raises(ContentSchemaError):
            ContentRef.from_dict("garbage")


class TestBuildRecords:
    def test_one_record_per_translatable_field(self, store, article):
        records = build_records(store, [article_ref(article)], "en")
        assert [record["id"] for record in records] == [
            f"{ARTICLE}_{article['id']}_title",
            f"{ARTICLE}_{article['id']}_body",
        ]
        assert records[0]["path"] == f"{ARTICLE}/Hello world/title"

    def test_explicit_field_selection(self, store, article):
        records = build_records(store, [article_ref(article, fields=["body"])], "en")
        assert [record["id"] for record in records] == [f"{ARTICLE}_{article['id']}_body"]

    def test_missing_items_are_skipped(self, store, article):
        refs = [
            {"contentTypeUid": "api::missing.missing", "itemId": 1},
            {"contentTypeUid": ARTICLE, "itemId": 999},
            article_ref(article),
        ]
        assert len(build_records(store, refs, "en")) == 2

    def test_malformed_items_are_skipped(self, store, article):
        assert len(build_records(store, ["garbage", None, article_ref(article)], "en")) == 2

    def test_title_falls_back_to_entry(self, store, article):
        records = build_records(store, [{"contentTypeUid": ARTICLE, "itemId": article["id"]}], "en")
        assert records[0]["path"] == f"{ARTICLE}/Hello world/title"


class TestPushRecords:
    def test_batches_of_one_thousand_in_order(self, gridly):
        records = make_records(2500)
        result = push_records(gridly.client(), records)

        assert gridly.batches == [1000, 1000, 500]
        assert result.records_count == 2500
        assert result.batch_count == 3
        assert list(gridly.records) == [record["id"] for record in records]

    def test_failed_batch_stops_the_push(self, gridly):
        client = gridly.client()
        push_records(client, make_records(1000))
        gridly.fail("POST", "/records", 413, {"error": "Payload too large"})

        with pytest.raises(GridlyAPIError) as exc_info:
            push_records(client, make_records(2500))

        assert exc_info.value.message == "Payload too large"
        assert gridly.count("POST", "/records") == 2

    def test_push_content_without_records(self, gridly, store):
        with pytest.raises(GridlySyncError) as exc_info:
            push_content(gridly.client(), store, [], "en")
        assert exc_info.value.code == "NO_CONTENT"
        assert gridly.count("POST", "/records") == 0

    def test_repeated_push_upserts(self, gridly, store, article):
        client = gridly.client()
        push_content(client, store, [article_ref(article)], "en")
        push_content(client, store, [article_ref(article)], "en")
        assert len(gridly.records) == 2
