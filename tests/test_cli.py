"""Tests for CLI argument handling and startup flow."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from tf_reconcile_reader import __version__
from tf_reconcile_reader.cli import _run_interactive, build_parser, main
from tf_reconcile_reader.config import FileSettings


def _no_logging(_debug: bool) -> None:
    return None


def _run(argv, *, tty=True, session=(None, None), environ=None, seen=None):
    def run_interactive(config, report):
        if seen is not None:
            seen.append((config, report))
        return session

    return main(
        argv,
        environ=environ or {},
        load_file_settings_fn=lambda _path: FileSettings(),
        configure_logging_fn=_no_logging,
        validate_interactive_tty_fn=lambda: tty,
        run_interactive_fn=run_interactive,
    )


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.input is None
    assert args.contains == ""
    assert not args.json
    assert not args.non_interactive


def test_version(capsys):
    assert _run(["--version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_rejects_bad_input_path(capsys, tmp_path):
    assert _run(["-i", str(tmp_path / "report.yaml"), "--save", str(tmp_path / "ws")]) == 1
    err = capsys.readouterr().err
    assert "Could not use input file" in err
    assert "Next step:" in err


def test_missing_report(capsys, tmp_path):
    argv = ["-i", str(tmp_path / "report.prod.json"), "--save", str(tmp_path / "ws")]
    assert _run(argv) == 1
    assert "input file not found" in capsys.readouterr().err


def test_creates_save_dir(report_file, tmp_path):
    workspace = tmp_path / "nested" / "ws"
    assert _run(["-i", str(report_file), "--save", str(workspace)]) == 0
    assert workspace.is_dir()


def test_non_interactive_text(capsys, report_file, tmp_path):
    argv = ["-i", str(report_file), "--save", str(tmp_path / "ws"), "--non-interactive"]
    assert _run([*argv, "-c", "aws_iam_role"]) == 0
    captured = capsys.readouterr()
    assert "NON INTERACTIVE MODE ENABLED" in captured.err
    assert captured.out.startswith("FILTER: aws_iam_role\n")
    assert "terraform import aws_iam_role.ci ci-role" in captured.out
    assert "aws_s3_bucket" not in captured.out


def test_non_interactive_json(capsys, report_file, tmp_path):
    argv = ["-i", str(report_file), "--save", str(tmp_path / "ws"), "--non-interactive", "-j"]
    assert _run(argv) == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data["results"]) == 2
    assert data["results"][0]["stdout"] == "Import successful!\nDone."


def test_requires_tty(capsys, report_file, tmp_path):
    assert _run(["-i", str(report_file), "--save", str(tmp_path / "ws")], tty=False) == 2
    assert "interactive TTY" in capsys.readouterr().err


def test_session_message_is_printed(capsys, report_file, tmp_path):
    code = _run(
        ["-i", str(report_file), "--save", str(tmp_path / "ws")],
        session=('export FIGS_TF_DIR="/w"', None),
    )
    assert code == 0
    assert capsys.readouterr().out == 'export FIGS_TF_DIR="/w"\n'


def test_session_error_exits_one(capsys, report_file, tmp_path):
    code = _run(["-i", str(report_file), "--save", str(tmp_path / "ws")], session=(None, "boom"))
    assert code == 1
    assert "An error occurred: boom" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("argv", "environ", "vim", "github"),
    [
        ([], {}, False, False),
        (["--vi", "--github"], {}, True, True),
        ([], {"FIGS_VIM_MODE": "true", "FIGS_GITHUB": "1"}, True, True),
    ],
)
def test_flags_reach_config(report_file, tmp_path, argv, environ, vim, github):
    seen = []
    base = ["-i", str(report_file), "--save", str(tmp_path / "ws")]
    assert _run([*base, *argv], environ=environ, seen=seen) == 0
    config, report = seen[0]
    assert config.vim_enabled is vim
    assert config.github is github
    assert report.tf_version == "1.7.5"


class _StubApp:
    """Stands in for the Textual app; ``run`` ends with a preset outcome."""

    return_code: int | None = 0
    result: str | None = None
    fatal: str | None = None

    def __init__(self, config, report, *, navigator):
        self.navigator = navigator

    def run(self):
        if self.fatal is not None:
            self.navigator.error = self.fatal
        return self.result


def _stub_app(**attrs):
    return type("StubApp", (_StubApp,), attrs)


def test_run_interactive_clean_exit(make_config, make_report):
    with patch("tf_reconcile_reader.app.ReportNavigatorApp", _stub_app(result="bye")):
        assert _run_interactive(make_config(), make_report()) == ("bye", None)


def test_run_interactive_handler_crash_is_fatal(make_config, make_report):
    with patch("tf_reconcile_reader.app.ReportNavigatorApp", _stub_app(return_code=1)):
        message, error = _run_interactive(make_config(), make_report())
    assert message is None
    assert error == "the interface stopped unexpectedly (return code 1)"


def test_run_interactive_prefers_recorded_error(make_config, make_report):
    stub = _stub_app(return_code=1, fatal="clipboard exploded")
    with patch("tf_reconcile_reader.app.ReportNavigatorApp", stub):
        assert _run_interactive(make_config(), make_report()) == (None, "clipboard exploded")


def test_handler_crash_exits_one(capsys, report_file, tmp_path):
    argv = ["-i", str(report_file), "--save", str(tmp_path / "ws")]
    with patch("tf_reconcile_reader.app.ReportNavigatorApp", _stub_app(return_code=1)):
        code = main(
            argv,
            environ={},
            load_file_settings_fn=lambda _path: FileSettings(),
            configure_logging_fn=_no_logging,
            validate_interactive_tty_fn=lambda: True,
            run_interactive_fn=_run_interactive,
        )
    assert code == 1
    assert "An error occurred: the interface stopped unexpectedly" in capsys.readouterr().err
