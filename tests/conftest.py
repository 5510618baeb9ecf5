"""Shared test fixtures for the report navigator tests."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

import pytest

from tf_reconcile_reader.config import AppConfig
from tf_reconcile_reader.models import (
    BackupPaths,
    ExecutionLog,
    Report,
    ResultItem,
    Results,
)

# ── Factories ────────────────────────────────────────────────────────────────


@pytest.fixture
def make_log():
    """Factory fixture for ExecutionLog instances."""

    def _make(
        command: str = "terraform import aws_s3_bucket.logs logs-bucket",
        stdout: str = "Import successful!",
        stderr: str = "",
        error: str = "",
        exit_code: int = 0,
        source: str = "LOCAL",
    ) -> ExecutionLog:
        return ExecutionLog(
            command=command,
            stdout=stdout,
            stderr=stderr,
            error=error,
            exit_code=exit_code,
            source=source,
        )

    return _make


@pytest.fixture
def make_result():
    """Factory fixture for ResultItem instances."""

    def _make(
        resource: str = "aws_s3_bucket.logs",
        kind: str = "aws_s3_bucket",
        tf_id: str = "logs-bucket",
        aws_id: str = "arn:aws:s3:::logs-bucket",
        message: str = "Resource exists in AWS but not in state",
        command: str = "",
    ) -> ResultItem:
        return ResultItem(
            resource=resource,
            kind=kind,
            tf_id=tf_id,
            aws_id=aws_id,
            message=message,
            command=command,
        )

    return _make


@pytest.fixture
def make_report():
    """Factory fixture for Report instances with optional categories and logs."""

    def _make(
        logs: list[ExecutionLog] | None = None,
        results: dict[str, list[ResultItem]] | None = None,
        backup: BackupPaths | None = None,
        state: str = "s3://bucket/env/terraform.tfstate",
        **kwargs: Any,
    ) -> Report:
        return Report(
            state=state,
            tf_version=kwargs.pop("tf_version", "1.7.5"),
            version=kwargs.pop("version", "v1.2.0"),
            backup=backup or BackupPaths(),
            execution_logs=list(logs or []),
            results=Results(by_category=dict(results or {})),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_config(tmp_path):
    """Factory fixture for AppConfig with an isolated environment snapshot."""

    def _make(environ: dict[str, str] | None = None, **kwargs: Any) -> AppConfig:
        kwargs.setdefault("input_file", tmp_path / "report.dev.json")
        kwargs.setdefault("save_dir", tmp_path / "workspace")
        return AppConfig(environ=MappingProxyType(dict(environ or {})), **kwargs)

    return _make


@pytest.fixture
def report_payload() -> dict[str, Any]:
    """A report in the on-disk JSON layout."""
    return {
        "state": "s3://bucket/env/terraform.tfstate",
        "state_checksum": "abc123",
        "region": "us-east-1",
        "local_statefile": "/tmp/terraform.tfstate",
        "tf_version": "1.7.5",
        "state_version": 4,
        "concurrency": 8,
        "backup": {
            "original_path": "/work/backups/dev/original.tfstate",
            "original_checksum": "sum-1",
            "new_path": "/work/backups/dev/new.tfstate",
            "new_checksum": "sum-2",
            "report_path": "/work/report.txt",
            "report_checksum": "sum-3",
            "json_report_path": "/work/report.dev.json",
            "json_report_checksum": "sum-4",
        },
        "execution_logs": [
            {
                "command": "terraform import aws_s3_bucket.logs logs-bucket",
                "stdout": "Import successful!%0ADone.",
                "stderr": "",
                "exit_code": 0,
                "source": "LOCAL",
            },
            {
                "terraform_address": "aws_iam_role.ci",
                "command": "terraform import aws_iam_role.ci ci-role",
                "stdout": "",
                "stderr": "Error: permission denied",
                "error": "exit status 1",
                "exit_code": 1,
                "source": "GITHUB ACTIONS",
            },
        ],
        "results": {
            "INFO": [],
            "OK": [
                {
                    "resource": "aws_vpc.main",
                    "kind": "aws_vpc",
                    "tf_id": "vpc-1",
                    "aws_id": "vpc-1",
                    "message": "in sync",
                }
            ],
            "POTENTIAL_IMPORT": [],
            "REGION_MISMATCH": [],
            "WARNING": [],
            "ERROR": [
                {
                    "resource": "aws_s3_bucket.logs",
                    "command": "terraform import aws_s3_bucket.logs logs-bucket",
                    "kind": "aws_s3_bucket",
                    "tf_id": "logs-bucket",
                    "aws_id": "logs-bucket",
                    "message": "missing from state",
                }
            ],
            "DANGEROUS": [],
        },
        "arguments": ["-region", "us-east-1"],
        "version": "v1.2.0",
    }


@pytest.fixture
def report_file(tmp_path: Path, report_payload: dict[str, Any]) -> Path:
    """Write ``report_payload`` to ``report.dev.json`` and return its path."""
    path = tmp_path / "report.dev.json"
    path.write_text(json.dumps(report_payload), encoding="utf-8")
    return path
