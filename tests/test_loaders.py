"""Tests for the pure view loaders and detail composers."""

from __future__ import annotations

from tf_reconcile_reader.loaders import (
    DetailSection,
    compose_backup_detail,
    compose_execution_log_detail,
    compose_result_detail,
    flatten_detail,
    load_backup_rows,
    load_category_rows,
    load_config_rows,
    load_main_rows,
    load_result_rows,
)
from tf_reconcile_reader.models import (
    NO_LOGS_PLACEHOLDER,
    RESULT_CATEGORIES,
    BackupEntry,
    BackupPaths,
)


class TestMainRows:
    def test_placeholder_when_no_logs(self, make_report):
        title, rows = load_main_rows(make_report())
        assert title == "Execution Logs (0)"
        assert len(rows) == 1
        assert rows[0].command == NO_LOGS_PLACEHOLDER

    def test_rows_follow_report_order(self, make_report, make_log):
        logs = [make_log(command="first"), make_log(command="second")]
        title, rows = load_main_rows(make_report(logs=logs))
        assert title == "Execution Logs (2)"
        assert [row.command for row in rows] == ["first", "second"]


class TestBackupRows:
    def test_fixed_field_order(self):
        backup = BackupPaths(
            original_path="/a",
            original_checksum="1",
            new_path="/b",
            new_checksum="2",
            report_path="/c",
            report_checksum="3",
            json_report_path="/d",
            json_report_checksum="4",
        )
        title, rows = load_backup_rows(backup)
        assert title == "Backup File Paths"
        assert [(row.key, row.value) for row in rows] == [
            ("original_path", "/a"),
            ("original_checksum", "1"),
            ("new_path", "/b"),
            ("new_checksum", "2"),
            ("report_path", "/c"),
            ("report_checksum", "3"),
            ("json_report_path", "/d"),
            ("json_report_checksum", "4"),
        ]

    def test_reload_is_idempotent(self):
        backup = BackupPaths(original_path="/a")
        assert load_backup_rows(backup) == load_backup_rows(backup)


class TestResultRows:
    def test_category_counts_in_fixed_order(self, make_report, make_result):
        report = make_report(results={"ERROR": [make_result()] * 3, "OK": [make_result()]})
        _, rows = load_category_rows(report)
        assert [row.name for row in rows] == list(RESULT_CATEGORIES)
        counts = {row.name: row.count for row in rows}
        assert counts["ERROR"] == 3
        assert counts["OK"] == 1
        assert counts["DANGEROUS"] == 0

    def test_error_category_with_three_items(self, make_report, make_result):
        items = [make_result(resource=f"aws_s3_bucket.b{i}") for i in range(3)]
        title, rows = load_result_rows(make_report(results={"ERROR": items}), "ERROR")
        assert title == "Results: ERROR (3)"
        assert [row.resource for row in rows] == [
            "aws_s3_bucket.b0",
            "aws_s3_bucket.b1",
            "aws_s3_bucket.b2",
        ]

    def test_unknown_category_is_empty(self, make_report):
        title, rows = load_result_rows(make_report(), "NOPE")
        assert rows == []
        assert title == "Results: NOPE (0)"


class TestConfigRows:
    def test_known_keys_and_prefixes_sorted(self):
        environ = {
            "OLLAMA_HOST": "localhost",
            "FIGS_TF_STATE": "/state",
            "HOME": "/root",
            "FIGS_GITHUB": "true",
        }
        title, rows = load_config_rows(environ)
        assert title == "Environment Configuration"
        assert [(row.key, row.value) for row in rows] == [
            ("FIGS_GITHUB", "true"),
            ("FIGS_TF_DIR", ""),
            ("FIGS_TF_STATE", "/state"),
            ("OLLAMA_HOST", "localhost"),
        ]


class TestDetailComposers:
    def test_backup_detail_with_derived_remote_path(self):
        entry = BackupEntry("original_path", "/nonexistent/backups/x/state")
        sections = compose_backup_detail(entry, "s3://bucket/env/backups/x/state", False)
        assert sections[0] == DetailSection("original_path", entry.value, "value")
        assert sections[1].heading == "Derived S3 Path:"
        assert sections[1].body == "s3://bucket/state-backups/x/state"

    def test_backup_detail_for_existing_path(self):
        entry = BackupEntry("original_path", "/work/backups/x/state")
        assert len(compose_backup_detail(entry, "s3://bucket/env", True)) == 1

    def test_result_detail_includes_command_only_when_present(self, make_result):
        without = compose_result_detail(make_result())
        with_command = compose_result_detail(make_result(command="terraform import a b"))
        assert [s.heading for s in without][-1] == "Message:"
        expected = DetailSection("Suggested Command:", "terraform import a b", "code")
        assert with_command[-1] == expected

    def test_execution_log_detail(self, make_log):
        log = make_log(stdout="out", stderr="err", error="exit status 2", exit_code=2)
        headings = [s.heading for s in compose_execution_log_detail(log)]
        assert headings == ["Command:", "Exit Code: 2", "Error:", "STDOUT:", "STDERR:"]

    def test_flatten_detail_separates_sections(self):
        lines = flatten_detail(
            [DetailSection("A:", "one\ntwo"), DetailSection("B:", "", "value")]
        )
        assert lines == [
            ("A:", "title"),
            ("one", "text"),
            ("two", "text"),
            ("", "text"),
            ("B:", "title"),
        ]
