"""View data loaders: pure projections of the report into view content.

Every loader is idempotent and reads only its arguments, so any view can be
reloaded at any time without side effects.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

from tf_reconcile_reader.config import CONFIG_ENV_PREFIXES, CONFIG_KNOWN_KEYS
from tf_reconcile_reader.models import (
    BACKUP_FIELDS,
    NO_LOGS_PLACEHOLDER,
    RESULT_CATEGORIES,
    BackupEntry,
    BackupPaths,
    CategoryEntry,
    ConfigEntry,
    ExecutionLog,
    Report,
    ResultItem,
)
from tf_reconcile_reader.parsing import derive_remote_backup_path

MAIN_TITLE_TEMPLATE = "Execution Logs ({count})"
BACKUP_TITLE = "Backup File Paths"
CATEGORY_TITLE = "Result Categories"
RESULTS_TITLE_TEMPLATE = "Results: {category} ({count})"
CONFIG_TITLE = "Environment Configuration"


def load_main_rows(report: Report) -> tuple[str, list[ExecutionLog]]:
    """Return (title, rows) for the main view; one placeholder row when empty."""
    logs = report.execution_logs
    title = MAIN_TITLE_TEMPLATE.format(count=len(logs))
    if not logs:
        return title, [ExecutionLog(command=NO_LOGS_PLACEHOLDER)]
    return title, list(logs)


def load_backup_rows(backup: BackupPaths) -> tuple[str, list[BackupEntry]]:
    """Walk the backup record in its fixed field order."""
    rows = [BackupEntry(key=label, value=getattr(backup, attr)) for label, attr in BACKUP_FIELDS]
    return BACKUP_TITLE, rows


def load_category_rows(report: Report) -> tuple[str, list[CategoryEntry]]:
    """Count items per category in the fixed category order."""
    rows = [
        CategoryEntry(name=category, count=len(report.results.get_category(category)))
        for category in RESULT_CATEGORIES
    ]
    return CATEGORY_TITLE, rows


def load_result_rows(report: Report, category: str) -> tuple[str, list[ResultItem]]:
    """Return one category's items in report order."""
    items = list(report.results.get_category(category))
    return RESULTS_TITLE_TEMPLATE.format(category=category, count=len(items)), items


def load_config_rows(environ: Mapping[str, str]) -> tuple[str, list[ConfigEntry]]:
    """Collect the known keys plus every prefixed variable, sorted by key."""
    values: dict[str, str] = {key: environ.get(key, "") for key in CONFIG_KNOWN_KEYS}
    for key, value in environ.items():
        if key.startswith(CONFIG_ENV_PREFIXES):
            values[key] = value
    rows = [ConfigEntry(key=key, value=values[key]) for key in sorted(values)]
    return CONFIG_TITLE, rows


# ============================================================================
# Detail text
# ============================================================================
#
# Detail composers return plain text sections. The render layer maps
# ``body_style`` onto the style table.


class DetailSection(NamedTuple):
    heading: str
    body: str
    body_style: str = "text"


def compose_backup_detail(
    entry: BackupEntry,
    state_path: str,
    path_exists: bool,
) -> list[DetailSection]:
    """Backup entry detail, plus the derived remote path when applicable."""
    sections: list[DetailSection] = [DetailSection(entry.key, entry.value, "value")]
    remote = derive_remote_backup_path(entry.value, state_path, path_exists)
    if remote:
        sections.append(DetailSection("Derived S3 Path:", remote, "value"))
    return sections


def compose_result_detail(item: ResultItem) -> list[DetailSection]:
    """Resource detail for one result item."""
    sections: list[DetailSection] = [
        DetailSection("Resource:", item.resource),
        DetailSection("Kind:", item.kind),
        DetailSection("Terraform ID:", item.tf_id),
        DetailSection("AWS ID:", item.aws_id),
        DetailSection("Message:", item.message),
    ]
    if item.command:
        sections.append(DetailSection("Suggested Command:", item.command, "code"))
    return sections


def compose_execution_log_detail(log: ExecutionLog) -> list[DetailSection]:
    """Command, exit code and captured streams of one execution log."""
    sections: list[DetailSection] = [
        DetailSection("Command:", log.command, "code"),
        DetailSection(f"Exit Code: {log.exit_code}", ""),
        DetailSection("STDOUT:", log.stdout),
        DetailSection("STDERR:", log.stderr, "error"),
    ]
    if log.error:
        sections.insert(2, DetailSection("Error:", log.error, "error"))
    return sections


def flatten_detail(sections: list[DetailSection]) -> list[tuple[str, str]]:
    """Flatten sections into (text, style) lines; a blank line separates sections."""
    lines: list[tuple[str, str]] = []
    for section in sections:
        if lines:
            lines.append(("", "text"))
        lines.append((section.heading, "title"))
        if section.body:
            lines.extend((line, section.body_style) for line in section.body.splitlines())
    return lines


__all__ = [
    "BACKUP_TITLE",
    "CATEGORY_TITLE",
    "CONFIG_TITLE",
    "DetailSection",
    "compose_backup_detail",
    "compose_execution_log_detail",
    "compose_result_detail",
    "flatten_detail",
    "load_backup_rows",
    "load_category_rows",
    "load_config_rows",
    "load_main_rows",
    "load_result_rows",
]
