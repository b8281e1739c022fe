"""Tests for record pagination and progress computation."""

from gridly_sync.core import database as db
from gridly_sync.core.progress import compute_progress, fetch_all_records, to_percent, update_project_progress


def record(record_id, *cells, identity=True):
    base = []
    if identity:
        base = [
            {"columnId": "meta_id", "value": "1"},
            {"columnId": "meta_content_type", "value": "api::article.article"},
            {"columnId": "meta_field_name", "value": record_id},
        ]
    return {"id": record_id, "cells": base + list(cells)}


def translated(column_id, value="Texte"):
    return {"columnId": column_id, "value": value, "dependencyStatus": "upToDate"}


def pending(column_id, value=""):
    return {"columnId": column_id, "value": value, "dependencyStatus": "outOfDate"}


class TestFetchAllRecords:
    def test_pages_until_short_page(self, gridly):
        for index in range(4500):
            gridly.records[f"r{index}"] = {"id": f"r{index}", "cells": []}

        records = fetch_all_records(gridly.client())

        assert len(records) == 4500
        assert gridly.count("GET", "/records") == 3

    def test_exact_multiple_needs_empty_page(self, gridly):
        for index in range(40):
            gridly.records[f"r{index}"] = {"id": f"r{index}", "cells": []}

        assert len(fetch_all_records(gridly.client(), limit=20)) == 40
        assert gridly.count("GET", "/records") == 3

    def test_empty_view(self, gridly):
        assert fetch_all_records(gridly.client()) == []


class TestComputeProgress:
    def test_all_translated(self):
        records = [record("title", translated("frFR")), record("body", translated("frFR"))]
        report = compute_progress(records, ["fr-FR"])

        assert report.languages["fr-FR"].translated == 2
        assert report.languages["fr-FR"].percentage == 100
        assert report.overall == 100

    def test_quarter_translated(self):
        records = [
            record("a", translated("de")),
            record("b", pending("de", "Entwurf")),
            record("c", pending("de")),
            record("d", translated("de", "   ")),
        ]
        report = compute_progress(records, ["de"])
        assert report.languages["de"].percentage == 25
        assert report.overall == 25

    def test_ten_records_two_languages(self):
        done = [record(f"r{i}", translated("frFR"), translated("de")) for i in range(10)]
        assert compute_progress(done, ["fr-FR", "de"]).overall == 100

        partial = [
            record(f"r{i}", translated("frFR") if i < 5 else pending("frFR"), pending("de"))
            for i in range(10)
        ]
        report = compute_progress(partial, ["fr-FR", "de"])
        assert report.completed_tasks == 5
        assert report.total_tasks == 20
        assert report.overall == 25

    def test_overall_weights_languages_by_task_count(self):
        records = [
            record("a", translated("frFR"), pending("de")),
            record("b", pending("de")),
            record("c", pending("de")),
        ]
        report = compute_progress(records, ["fr-FR", "de"])

        assert report.languages["fr-FR"].percentage == 100
        assert report.languages["de"].percentage == 0
        assert report.total_tasks == 4
        assert report.completed_tasks == 1
        assert report.overall == 25

    def test_records_without_identity_are_skipped(self):
        records = [record("a", translated("de")), record("b", translated("de"), identity=False)]
        report = compute_progress(records, ["de"])
        assert report.skipped_records == 1
        assert report.languages["de"].total == 1

    def test_no_target_languages(self):
        report = compute_progress([record("a")], [])
        assert report.overall == 0
        assert report.to_dict()["progressByLanguage"] == {}

    def test_half_rounds_up(self):
        assert to_percent(1, 8) == 13
        assert to_percent(1, 3) == 33
        assert to_percent(0, 0) == 0

    def test_to_dict(self):
        report = compute_progress([record("a", translated("de"))], ["de"])
        assert report.to_dict() == {
            "overallProgress": 100,
            "totalTranslationTasks": 1,
            "totalCompletedTasks": 1,
            "progressByLanguage": {"de": {"language": "de", "translated": 1, "total": 1, "percentage": 100}},
        }


class TestUpdateProjectProgress:
    def test_persists_project_and_subproject_progress(self, temp_db, gridly):
        project_id = db.create_project("Site", "en")
        fr_id = db.create_subproject(project_id, "fr-FR")
        de_id = db.create_subproject(project_id, "de")
        for item in (
            record("a", translated("frFR"), translated("de")),
            record("b", translated("frFR"), pending("de")),
        ):
            gridly.records[item["id"]] = item

        report = update_project_progress(project_id, gridly.client())

        assert report.overall == 75
        project = db.get_project_by_id(project_id)
        assert project["overall_progress"] == 75
        assert project["last_progress_update"]
        assert db.get_subproject_by_id(fr_id)["progress"] == 100
        assert db.get_subproject_by_id(de_id)["progress"] == 50
