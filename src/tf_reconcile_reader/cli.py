"""CLI/bootstrap helpers for the report navigator."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import os
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

from platformdirs import user_config_dir

from tf_reconcile_reader import __version__
from tf_reconcile_reader.action_messages import build_actionable_error
from tf_reconcile_reader.analysis import aggregate_errors
from tf_reconcile_reader.batch import run_batch
from tf_reconcile_reader.config import (
    AppConfig,
    FileSettings,
    build_app_config,
    get_config_path,
    load_file_settings,
    validate_input_path,
)
from tf_reconcile_reader.models import CONFIG_APP_NAME, Report
from tf_reconcile_reader.navigator import Navigator
from tf_reconcile_reader.parsing import ReportLoadError, load_report

logger = logging.getLogger(__name__)

# (quit message, fatal error) of a finished interactive session
SessionOutcome = tuple[str | None, str | None]


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _run_interactive(config: AppConfig, report: Report) -> SessionOutcome:
    """Run the TUI until it exits and report how the session ended."""
    from tf_reconcile_reader.app import ReportNavigatorApp

    navigator = Navigator(
        config,
        report,
        error_counts=aggregate_errors(report.execution_logs),
    )
    app = ReportNavigatorApp(config, report, navigator=navigator)
    message = app.run()
    if navigator.error is not None:
        return message, navigator.error
    # Textual sets a non-zero return code when a handler raised
    return_code = app.return_code or 0
    if return_code != 0:
        logger.error("Interactive session ended with return code %d", return_code)
        return message, f"the interface stopped unexpectedly (return code {return_code})"
    return message, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tf-reconcile-reader",
        description="Browse a JSON Terraform reconciliation report in a TUI",
    )
    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        default=None,
        help="Path to input file (report.<env>.json; default: ./report.dev.json)",
    )
    parser.add_argument(
        "-c",
        "--contains",
        type=str,
        default="",
        help="Substring search of executed commands, used with --non-interactive",
    )
    parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Format --non-interactive output as JSON",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Print matching execution logs instead of starting the TUI",
    )
    parser.add_argument(
        "--save",
        type=Path,
        default=None,
        help="Workspace directory for downloaded files (default: ./tf-state-man-workspace)",
    )
    parser.add_argument(
        "--vi",
        action="store_true",
        help="Enable vim-style keys (h to go back, j/k to move)",
    )
    parser.add_argument(
        "--github",
        action="store_true",
        help="Mark commands run in this session as run from GitHub Actions",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Print the version and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/tf-reconcile-reader/debug.log)",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    load_file_settings_fn: Callable[[Path], FileSettings] = load_file_settings,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    run_interactive_fn: Callable[[AppConfig, Report], SessionOutcome] = _run_interactive,
) -> int:
    """Main entry point. Returns exit code."""
    args = build_parser().parse_args(argv)
    if args.version:
        print(__version__)
        return 0

    configure_logging_fn(args.debug)
    logger.debug("tf-reconcile-reader starting, cwd=%s", Path.cwd())

    env = os.environ if environ is None else environ
    config = build_app_config(
        environ=env,
        file_settings=load_file_settings_fn(get_config_path(env)),
        input_file=args.input,
        save_dir=args.save,
        vim_enabled=True if args.vi else None,
        github=True if args.github else None,
    )

    problem = validate_input_path(config.input_file)
    if problem is not None:
        print(
            build_actionable_error(
                f"use input file {config.input_file}",
                why=problem,
                next_step="pass -i with a path such as ./report.dev.json",
            ),
            file=sys.stderr,
        )
        return 1

    try:
        config.save_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(
            build_actionable_error(
                f"create the workspace directory {config.save_dir}",
                why=str(e),
                next_step="pass --save with a writable directory",
            ),
            file=sys.stderr,
        )
        return 1

    try:
        report = load_report(config.input_file)
    except ReportLoadError as e:
        print(
            build_actionable_error(
                "load the report",
                why=str(e),
                next_step="check the -i path points at a report.<env>.json file",
            ),
            file=sys.stderr,
        )
        return 1

    if args.non_interactive:
        print("NON INTERACTIVE MODE ENABLED", file=sys.stderr)
        return run_batch(report, contains=args.contains, as_json=args.json, out=sys.stdout)

    if not validate_interactive_tty_fn():
        print(
            "Error: tf-reconcile-reader requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run tf-reconcile-reader directly in a terminal session", file=sys.stderr)
        print("  - Use --non-interactive (optionally with -j) for plain output", file=sys.stderr)
        return 2

    message, error = run_interactive_fn(config, report)
    if error is not None:
        print(f"An error occurred: {error}", file=sys.stderr)
        return 1
    if message:
        print(message)
    return 0


__all__ = [
    "_configure_logging",
    "_run_interactive",
    "_validate_interactive_tty",
    "build_parser",
    "main",
]
