"""Data models and constants for the reconciliation report reader."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

# Application identity, also used for platformdirs config paths
CONFIG_APP_NAME = "tf-reconcile-reader"
APP_NAME = "tf-reconcile-reader"

# Consistent order for iterating through result types
RESULT_CATEGORIES: tuple[str, ...] = (
    "INFO",
    "OK",
    "POTENTIAL_IMPORT",
    "REGION_MISMATCH",
    "WARNING",
    "ERROR",
    "DANGEROUS",
)

# Common terraform error strings to look for in execution logs
COMMON_TERRAFORM_ERRORS: tuple[str, ...] = (
    "Error:",
    "failed:",
    "timed out",
    "no such host",
    "permission denied",
    "not found",
    "InvalidClientTokenId",
    "unauthorized",
)

SOURCE_LOCAL = "LOCAL"
SOURCE_CI = "GITHUB ACTIONS"

NO_LOGS_PLACEHOLDER = "No execution logs found in this report."


class ViewState(IntEnum):
    """Every screen the navigator can show. Exactly one is active."""

    MAIN = 0
    BACKUP = 1
    BACKUP_DETAIL = 2
    RESULTS_CATEGORY = 3
    RESULTS_LIST = 4
    RESULTS_DETAIL = 5
    CONFIG = 6
    CONFIG_EDIT = 7
    DELETE_CONFIRM = 8
    RUNNING_COMMAND = 9
    EXECUTION_LOG_DETAIL = 10
    COMMAND_RUNNER = 11


# Views backed by a ListModel
LIST_VIEWS = frozenset(
    {
        ViewState.MAIN,
        ViewState.BACKUP,
        ViewState.RESULTS_CATEGORY,
        ViewState.RESULTS_LIST,
        ViewState.CONFIG,
    }
)

# Views backed by the scrollable detail text
DETAIL_VIEWS = frozenset(
    {
        ViewState.BACKUP_DETAIL,
        ViewState.RESULTS_DETAIL,
        ViewState.EXECUTION_LOG_DETAIL,
    }
)


@dataclass(slots=True)
class ExecutionLog:
    """Result of a single executed command."""

    command: str
    stdout: str = ""
    stderr: str = ""
    error: str = ""
    exit_code: int = 0
    source: str = ""
    terraform_address: str = ""


@dataclass(slots=True)
class BackupPaths:
    """Paths and checksums for the backup artifacts created by a run."""

    original_path: str = ""
    original_checksum: str = ""
    new_path: str = ""
    new_checksum: str = ""
    report_path: str = ""
    report_checksum: str = ""
    json_report_path: str = ""
    json_report_checksum: str = ""


# Explicit (label, accessor) walk over BackupPaths; order is the display order.
BACKUP_FIELDS: tuple[tuple[str, str], ...] = (
    ("original_path", "original_path"),
    ("original_checksum", "original_checksum"),
    ("new_path", "new_path"),
    ("new_checksum", "new_checksum"),
    ("report_path", "report_path"),
    ("report_checksum", "report_checksum"),
    ("json_report_path", "json_report_path"),
    ("json_report_checksum", "json_report_checksum"),
)


@dataclass(slots=True)
class ResultItem:
    """One finding of the reconciliation run."""

    resource: str
    kind: str = ""
    tf_id: str = ""
    aws_id: str = ""
    message: str = ""
    command: str = ""

    @property
    def title(self) -> str:
        return self.resource

    @property
    def description(self) -> str:
        return self.command or self.message


@dataclass(slots=True)
class Results:
    """Findings grouped by the seven fixed categories."""

    by_category: dict[str, list[ResultItem]] = field(default_factory=dict)

    def get_category(self, name: str) -> list[ResultItem]:
        """Return the items recorded for ``name`` (empty for unknown names)."""
        if name not in RESULT_CATEGORIES:
            return []
        return self.by_category.get(name, [])


@dataclass(slots=True)
class Report:
    """Decoded reconciliation report.

    Read-only for a session except for ``execution_logs``, which only grows.
    """

    state: str = ""
    state_checksum: str = ""
    region: str = ""
    local_statefile: str = ""
    tf_version: str = ""
    state_version: int = 0
    concurrency: int = 0
    backup: BackupPaths = field(default_factory=BackupPaths)
    execution_logs: list[ExecutionLog] = field(default_factory=list)
    results: Results = field(default_factory=Results)
    arguments: list[str] = field(default_factory=list)
    version: str = ""
    application_error: str = ""

    def append_execution_log(self, log: ExecutionLog) -> None:
        self.execution_logs.append(log)


@dataclass(slots=True)
class BackupEntry:
    """A key/value row of the backup view."""

    key: str
    value: str


@dataclass(slots=True)
class CategoryEntry:
    """A row of the results category view."""

    name: str
    count: int


@dataclass(slots=True)
class ConfigEntry:
    """An environment variable shown in the config view."""

    key: str
    value: str


__all__ = [
    "APP_NAME",
    "BACKUP_FIELDS",
    "COMMON_TERRAFORM_ERRORS",
    "CONFIG_APP_NAME",
    "DETAIL_VIEWS",
    "LIST_VIEWS",
    "NO_LOGS_PLACEHOLDER",
    "RESULT_CATEGORIES",
    "SOURCE_CI",
    "SOURCE_LOCAL",
    "BackupEntry",
    "BackupPaths",
    "CategoryEntry",
    "ConfigEntry",
    "ExecutionLog",
    "Report",
    "ResultItem",
    "Results",
    "ViewState",
]
