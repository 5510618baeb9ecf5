"""Non-interactive mode: filter execution logs and print them."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TextIO

from tf_reconcile_reader.models import ExecutionLog, Report
from tf_reconcile_reader.parsing import execution_log_to_dict

logger = logging.getLogger(__name__)

# Reports written by CI runners encode newlines in captured output
ENCODED_NEWLINE = "%0A"
ENTRY_SEPARATOR = "---"


def decode_output(log: ExecutionLog) -> ExecutionLog:
    """Return a copy of ``log`` with encoded newlines restored."""
    return replace(
        log,
        stdout=log.stdout.replace(ENCODED_NEWLINE, "\n"),
        stderr=log.stderr.replace(ENCODED_NEWLINE, "\n"),
    )


def filter_logs(logs: Iterable[ExecutionLog], contains: str = "") -> list[ExecutionLog]:
    """Decode and keep logs whose command or output contains ``contains``.

    An empty ``contains`` keeps everything.
    """
    selected: list[ExecutionLog] = []
    for log in map(decode_output, logs):
        if not contains or any(contains in text for text in (log.command, log.stdout, log.stderr)):
            selected.append(log)
    return selected


def format_text(logs: Iterable[ExecutionLog]) -> str:
    blocks: list[str] = []
    for log in logs:
        lines = ["COMMAND:", log.command]
        if log.exit_code != 0:
            status = f"Exit Code: {log.exit_code}"
            if log.error:
                status += f" | Error: {log.error}"
            lines.append(status)
        lines.extend(["", "STDOUT:", log.stdout, "STDERR:", log.stderr, ENTRY_SEPARATOR])
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


def format_json(logs: Iterable[ExecutionLog]) -> str:
    return json.dumps({"results": [execution_log_to_dict(log) for log in logs]}, indent=2)


def run_batch(report: Report, *, contains: str, as_json: bool, out: TextIO) -> int:
    """Print the matching logs as text blocks or JSON. Returns an exit code."""
    logs = filter_logs(report.execution_logs, contains)
    logger.debug("Batch mode matched %d of %d logs", len(logs), len(report.execution_logs))
    if as_json:
        print(format_json(logs), file=out)
        return 0
    print(f"FILTER: {contains}", file=out)
    if logs:
        print(format_text(logs), file=out)
    return 0


__all__ = [
    "decode_output",
    "filter_logs",
    "format_json",
    "format_text",
    "run_batch",
]
