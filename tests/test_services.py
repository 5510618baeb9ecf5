"""Tests for the shell, editor and clipboard services."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from tf_reconcile_reader.messages import CopyFinished
from tf_reconcile_reader.services.clipboard_service import (
    copy_to_clipboard,
    get_clipboard_command_plan,
    write_clipboard,
)
from tf_reconcile_reader.services.editor_service import build_editor_argv, edit_text
from tf_reconcile_reader.services.shell_service import (
    describe_exit,
    prepare_command,
    resolve_workdir,
    run_command,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


# ============================================================================
# Shell runner
# ============================================================================


class TestPrepareCommand:
    def test_injects_state_after_first_terraform(self):
        assert (
            prepare_command("terraform import a b && terraform plan", "/s/state")
            == "terraform -state=/s/state import a b && terraform plan"
        )

    def test_keeps_explicit_state(self):
        command = "terraform import -state=/other a b"
        assert prepare_command(command, "/s/state") == command

    def test_no_state_configured(self):
        assert prepare_command("terraform plan", "") == "terraform plan"


def test_resolve_workdir(tmp_path):
    assert resolve_workdir(str(tmp_path)) == str(tmp_path)
    assert resolve_workdir(str(tmp_path / "missing")) is None
    assert resolve_workdir("") is None


def test_describe_exit():
    assert describe_exit(2) == "exit status 2"
    assert describe_exit(-9) == "signal: 9"


@posix_only
@pytest.mark.asyncio
async def test_run_command_captures_failure():
    result = await run_command("echo out; echo permission denied >&2; exit 2")
    assert result.stdout == "out\n"
    assert result.stderr == "permission denied\n"
    assert result.exit_code == 2
    assert result.error == "exit status 2"


@posix_only
@pytest.mark.asyncio
async def test_run_command_killed_by_signal():
    result = await run_command("kill -9 $$")
    assert result.exit_code == -1
    assert result.error == "signal: 9"


@posix_only
@pytest.mark.asyncio
async def test_run_command_success_in_workdir(tmp_path):
    started = []
    result = await run_command("pwd", tf_dir=str(tmp_path), on_start=started.append)
    assert result.error is None
    assert result.exit_code == 0
    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()
    assert len(started) == 1


@posix_only
@pytest.mark.asyncio
async def test_run_command_records_original_command():
    result = await run_command("echo terraform", tf_state="/s/state")
    assert result.command == "echo terraform"
    assert result.stdout == "terraform -state=/s/state\n"


@pytest.mark.asyncio
async def test_run_command_spawn_error():
    with patch(
        "tf_reconcile_reader.services.shell_service.asyncio.create_subprocess_shell",
        new=AsyncMock(side_effect=OSError("no shell")),
    ):
        result = await run_command("terraform plan")
    assert result.error == "no shell"
    assert result.exit_code == 0
    assert result.stdout == ""


# ============================================================================
# Editor
# ============================================================================


def test_build_editor_argv():
    assert build_editor_argv("code --wait", "/tmp/x.sh") == ["code", "--wait", "/tmp/x.sh"]
    assert build_editor_argv("vim", "/tmp/x.sh") == ["vim", "/tmp/x.sh"]


class TestEditText:
    def test_returns_trimmed_edit_and_removes_file(self):
        seen: list[Path] = []

        def fake_run(argv, check):
            path = Path(argv[-1])
            seen.append(path)
            assert path.read_text(encoding="utf-8") == "terraform plan"
            assert path.name.startswith("command-")
            assert path.suffix == ".sh"
            path.write_text("  terraform plan -out=tfplan \n", encoding="utf-8")

        result = edit_text("terraform plan", editor="nano", run=fake_run)

        assert result.error is None
        assert result.text == "terraform plan -out=tfplan"
        assert not seen[0].exists()

    def test_editor_failure(self):
        seen: list[Path] = []

        def fake_run(argv, check):
            seen.append(Path(argv[-1]))
            raise subprocess.CalledProcessError(1, argv)

        result = edit_text("terraform plan", editor="nano", run=fake_run)

        assert result.text == ""
        assert result.error.startswith("editor command failed:")
        assert not seen[0].exists()

    def test_missing_editor(self):
        def fake_run(argv, check):
            raise FileNotFoundError(2, "No such file or directory", argv[0])

        result = edit_text("x", editor="no-such-editor", run=fake_run)
        assert result.error.startswith("editor command failed:")

    def test_temp_file_creation_failure(self):
        with patch(
            "tf_reconcile_reader.services.editor_service.tempfile.mkstemp",
            side_effect=OSError("read-only"),
        ):
            result = edit_text("x", editor="vim")
        assert result.error == "could not create temp file: read-only"


# ============================================================================
# Clipboard
# ============================================================================


class TestClipboardPlan:
    def test_linux_has_fallback(self):
        commands, encoding = get_clipboard_command_plan("Linux")
        assert commands[0][0] == "xclip"
        assert commands[1][0] == "xsel"
        assert encoding == "utf-8"

    def test_windows_uses_utf16(self):
        assert get_clipboard_command_plan("Windows") == ([["clip"]], "utf-16")

    def test_unknown_platform(self):
        assert get_clipboard_command_plan("Plan9") is None


class TestCopyToClipboard:
    def test_unsupported_platform(self):
        assert copy_to_clipboard("x", system="Plan9") == "unsupported platform Plan9"

    def test_falls_back_to_second_tool(self):
        calls = []

        def fake_run(command, **kwargs):
            calls.append(command[0])
            if command[0] == "xclip":
                raise FileNotFoundError("xclip")

        assert copy_to_clipboard("hello", system="Linux", run=fake_run) is None
        assert calls == ["xclip", "xsel"]

    def test_reports_last_failure(self):
        def fake_run(command, **kwargs):
            raise FileNotFoundError(command[0])

        assert copy_to_clipboard("hello", system="Linux", run=fake_run) == "xsel"

    def test_payload_is_encoded(self):
        payloads = []

        def fake_run(command, **kwargs):
            payloads.append(kwargs["input"])

        copy_to_clipboard("hé", system="Darwin", run=fake_run)
        assert payloads == ["hé".encode()]

    def test_timeout_is_reported(self):
        def fake_run(command, **kwargs):
            raise subprocess.TimeoutExpired(command, kwargs["timeout"])

        error = copy_to_clipboard("x", system="Darwin", run=fake_run)
        assert "timed out" in error


@pytest.mark.asyncio
async def test_write_clipboard_wraps_error():
    with patch(
        "tf_reconcile_reader.services.clipboard_service.copy_to_clipboard",
        return_value="boom",
    ):
        assert await write_clipboard("x") == CopyFinished(error="boom")
