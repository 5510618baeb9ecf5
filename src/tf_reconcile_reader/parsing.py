"""Report ingestion and remote path helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from tf_reconcile_reader.models import (
    RESULT_CATEGORIES,
    BackupPaths,
    ExecutionLog,
    Report,
    ResultItem,
    Results,
)

logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"
BACKUPS_SEGMENT = "backups/"
REMOTE_BACKUP_PREFIX = "state-backups/"


class ReportLoadError(Exception):
    """Raised when the report file cannot be found, read or decoded."""


# ============================================================================
# Decoding
# ============================================================================
#
# Decoding is lenient: a missing key or a value of the wrong type falls back to
# the field default instead of failing the whole report.


def _safe_get(data: dict, key: str, default: Any, expected_type: type | tuple[type, ...]) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if isinstance(value, bool) and expected_type is int:
        return default
    if not isinstance(value, expected_type):
        return default
    return value


def _parse_execution_log(data: Any) -> ExecutionLog | None:
    if not isinstance(data, dict):
        return None
    return ExecutionLog(
        command=_safe_get(data, "command", "", str),
        stdout=_safe_get(data, "stdout", "", str),
        stderr=_safe_get(data, "stderr", "", str),
        error=_safe_get(data, "error", "", str),
        exit_code=_safe_get(data, "exit_code", 0, int),
        source=_safe_get(data, "source", "", str),
        terraform_address=_safe_get(data, "terraform_address", "", str),
    )


def _parse_result_item(data: Any) -> ResultItem | None:
    if not isinstance(data, dict):
        return None
    return ResultItem(
        resource=_safe_get(data, "resource", "", str),
        kind=_safe_get(data, "kind", "", str),
        tf_id=_safe_get(data, "tf_id", "", str),
        aws_id=_safe_get(data, "aws_id", "", str),
        message=_safe_get(data, "message", "", str),
        command=_safe_get(data, "command", "", str),
    )


def _parse_results(data: Any) -> Results:
    results = Results()
    if not isinstance(data, dict):
        return results
    for category in RESULT_CATEGORIES:
        raw_items = data.get(category)
        if not isinstance(raw_items, list):
            continue
        items = [item for item in map(_parse_result_item, raw_items) if item is not None]
        results.by_category[category] = items
    return results


def _parse_backup(data: Any) -> BackupPaths:
    if not isinstance(data, dict):
        return BackupPaths()
    return BackupPaths(
        original_path=_safe_get(data, "original_path", "", str),
        original_checksum=_safe_get(data, "original_checksum", "", str),
        new_path=_safe_get(data, "new_path", "", str),
        new_checksum=_safe_get(data, "new_checksum", "", str),
        report_path=_safe_get(data, "report_path", "", str),
        report_checksum=_safe_get(data, "report_checksum", "", str),
        json_report_path=_safe_get(data, "json_report_path", "", str),
        json_report_checksum=_safe_get(data, "json_report_checksum", "", str),
    )


def report_from_dict(data: dict[str, Any]) -> Report:
    """Build a Report from decoded JSON, defaulting anything malformed."""
    raw_logs = data.get("execution_logs")
    logs: list[ExecutionLog] = []
    if isinstance(raw_logs, list):
        logs = [log for log in map(_parse_execution_log, raw_logs) if log is not None]
    arguments = _safe_get(data, "arguments", [], list)
    return Report(
        state=_safe_get(data, "state", "", str),
        state_checksum=_safe_get(data, "state_checksum", "", str),
        region=_safe_get(data, "region", "", str),
        local_statefile=_safe_get(data, "local_statefile", "", str),
        tf_version=_safe_get(data, "tf_version", "", str),
        state_version=_safe_get(data, "state_version", 0, int),
        concurrency=_safe_get(data, "concurrency", 0, int),
        backup=_parse_backup(data.get("backup")),
        execution_logs=logs,
        results=_parse_results(data.get("results")),
        arguments=[arg for arg in arguments if isinstance(arg, str)],
        version=_safe_get(data, "version", "", str),
        application_error=_safe_get(data, "application_error", "", str),
    )


def execution_log_to_dict(log: ExecutionLog) -> dict[str, Any]:
    """Serialize an ExecutionLog using the report's key names."""
    data: dict[str, Any] = {}
    if log.terraform_address:
        data["terraform_address"] = log.terraform_address
    data["command"] = log.command
    data["stdout"] = log.stdout
    data["stderr"] = log.stderr
    if log.error:
        data["error"] = log.error
    data["exit_code"] = log.exit_code
    if log.source:
        data["source"] = log.source
    return data


def _result_item_to_dict(item: ResultItem) -> dict[str, Any]:
    data: dict[str, Any] = {"resource": item.resource}
    if item.command:
        data["command"] = item.command
    data.update(
        {
            "kind": item.kind,
            "tf_id": item.tf_id,
            "aws_id": item.aws_id,
            "message": item.message,
        }
    )
    return data


def report_to_dict(report: Report) -> dict[str, Any]:
    """Serialize a Report to a JSON-compatible dictionary."""
    backup = report.backup
    data: dict[str, Any] = {
        "state": report.state,
        "state_checksum": report.state_checksum,
        "region": report.region,
        "local_statefile": report.local_statefile,
        "tf_version": report.tf_version,
        "state_version": report.state_version,
        "concurrency": report.concurrency,
        "backup": {
            "original_path": backup.original_path,
            "original_checksum": backup.original_checksum,
            "new_path": backup.new_path,
            "new_checksum": backup.new_checksum,
            "report_path": backup.report_path,
            "report_checksum": backup.report_checksum,
            "json_report_path": backup.json_report_path,
            "json_report_checksum": backup.json_report_checksum,
        },
        "execution_logs": [execution_log_to_dict(log) for log in report.execution_logs],
        "results": {
            category: [
                _result_item_to_dict(item) for item in report.results.get_category(category)
            ]
            for category in RESULT_CATEGORIES
        },
        "arguments": list(report.arguments),
        "version": report.version,
    }
    if report.application_error:
        data["application_error"] = report.application_error
    return data


def load_report(path: Path) -> Report:
    """Read and decode the report at ``path``.

    Raises:
        ReportLoadError: if the file is missing, unreadable or not valid JSON.
    """
    if not path.exists():
        raise ReportLoadError(f"input file not found: {path}")
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ReportLoadError(f"could not read input file: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ReportLoadError(f"could not parse JSON from input file: {e}") from e
    if not isinstance(data, dict):
        raise ReportLoadError("could not parse JSON from input file: top level is not an object")
    report = report_from_dict(data)
    logger.debug(
        "Loaded report %s: %d execution logs, tf %s",
        path,
        len(report.execution_logs),
        report.tf_version,
    )
    return report


# ============================================================================
# Remote paths
# ============================================================================


def parse_s3_path(s3_path: str) -> tuple[str, str]:
    """Split an ``s3://bucket/key`` path into bucket and key."""
    if not s3_path.startswith(S3_SCHEME):
        raise ValueError("invalid S3 path: must start with s3://")
    bucket, _, key = s3_path[len(S3_SCHEME) :].partition("/")
    if not bucket or not key:
        raise ValueError(f"invalid S3 path format: {s3_path}")
    return bucket, key


def derive_remote_backup_path(path: str, state_path: str, path_exists: bool) -> str | None:
    """Return the remote copy of a backup path that is missing locally.

    ``s3://<state bucket>/state-backups/<everything after "backups/">``, or
    None when the path exists locally, the state is not remote, or the path
    has no ``backups/`` segment.
    """
    if path_exists or not state_path.startswith(S3_SCHEME):
        return None
    index = path.find(BACKUPS_SEGMENT)
    if index == -1:
        return None
    try:
        bucket, _ = parse_s3_path(state_path)
    except ValueError:
        logger.debug("Cannot derive remote path from state %r", state_path)
        return None
    suffix = path[index + len(BACKUPS_SEGMENT) :]
    return f"{S3_SCHEME}{bucket}/{REMOTE_BACKUP_PREFIX}{suffix}"


__all__ = [
    "ReportLoadError",
    "derive_remote_backup_path",
    "execution_log_to_dict",
    "load_report",
    "parse_s3_path",
    "report_from_dict",
    "report_to_dict",
]
