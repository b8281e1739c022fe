"""
Translation progress from the remote grid.

Progress is measured per target language over the records that carry the
identity metadata cells. The overall figure weighs every language by its
number of tasks: sum(translated) / sum(total), not the mean of the
per-language percentages.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

from gridly_sync import config
from gridly_sync.content.codec import REQUIRED_IDENTITY_CELLS, get_cell, get_cell_value, is_translated_cell
from gridly_sync.core import database as db
from gridly_sync.gridly.client import GridlyClient
from gridly_sync.gridly.exceptions import GridlySyncError
from gridly_sync.language_codes import format_language_code
from gridly_sync.logger import get_logger

logger = get_logger(__name__)


def fetch_all_records(client: GridlyClient, limit: int = None) -> List[Dict[str, Any]]:
    """
    Fetch every record of the view.

    Pages are requested with an offset/limit cursor until a page comes back
    shorter than the limit.
    """
    limit = limit or config.RECORDS_PAGE_LIMIT
    records: List[Dict[str, Any]] = []
    offset = 0

    while True:
        page = client.list_records(limit=limit, offset=offset)
        records.extend(page)
        logger.debug(f"Fetched {len(page)} records at offset {offset}")
        if len(page) < limit:
            break
        offset += limit

    logger.info(f"Fetched {len(records)} records from view {client.view_id}")
    return records


def to_percent(done: int, total: int) -> int:
    return int(done * 100 / total + 0.5) if total > 0 else 0


@dataclass
class LanguageProgress:
    language: str
    translated: int = 0
    total: int = 0

    @property
    def percentage(self) -> int:
        return to_percent(self.translated, self.total)


@dataclass
class ProgressReport:
    """Per-language and overall translation progress."""

    languages: Dict[str, LanguageProgress] = field(default_factory=dict)
    skipped_records: int = 0

    @property
    def total_tasks(self) -> int:
        return sum(item.total for item in self.languages.values())

    @property
    def completed_tasks(self) -> int:
        return sum(item.translated for item in self.languages.values())

    @property
    def overall(self) -> int:
        return to_percent(self.completed_tasks, self.total_tasks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallProgress": self.overall,
            "totalTranslationTasks": self.total_tasks,
            "totalCompletedTasks": self.completed_tasks,
            "progressByLanguage": {
                language: {**asdict(item), "percentage": item.percentage}
                for language, item in self.languages.items()
            },
        }


def compute_progress(records: List[Dict[str, Any]], target_languages: List[str]) -> ProgressReport:
    """
    Count translated and total cells per target language.

    Args:
        records: All records of the view.
        target_languages: Target locales, e.g. ["fr-FR", "de"].

    Returns:
        ProgressReport keyed by locale.
    """
    report = ProgressReport()
    columns = {}
    for language in target_languages:
        report.languages[language] = LanguageProgress(language=language)
        columns[language] = format_language_code(language)

    for record in records:
        if not all(get_cell_value(record, column_id) for column_id in REQUIRED_IDENTITY_CELLS):
            report.skipped_records += 1
            logger.debug(f"Skipping record with missing metadata: {record.get('id')}")
            continue

        for language, column_id in columns.items():
            cell = get_cell(record, column_id)
            if cell is None:
                continue
            report.languages[language].total += 1
            if is_translated_cell(cell):
                report.languages[language].translated += 1

    return report


def update_project_progress(project_id: int, client: GridlyClient) -> ProgressReport:
    """
    Recompute progress from the grid and persist it.

    The project's overall figure and each subproject's figure are written,
    together with ``last_progress_update``.
    """
    project = db.get_project_by_id(project_id)
    if not project:
        raise GridlySyncError(f"Project {project_id} not found", code="PROJECT_NOT_FOUND")

    subprojects = project.get("subprojects") or []
    target_languages = [subproject["target_language"] for subproject in subprojects]

    records = fetch_all_records(client)
    report = compute_progress(records, target_languages)
    now = db.utc_now()

    db.update_project(project_id, overall_progress=report.overall, last_progress_update=now)
    for subproject in subprojects:
        language_progress = report.languages.get(subproject["target_language"])
        if language_progress is None:
            continue
        db.update_subproject(subproject["id"], progress=language_progress.percentage, last_progress_update=now)
        logger.debug(
            f"Subproject {subproject['id']} ({subproject['target_language']}): "
            f"{language_progress.translated}/{language_progress.total}"
        )

    logger.info(f"Project {project_id} progress: {report.overall}% "
                f"({report.completed_tasks}/{report.total_tasks} tasks)")
    return report
