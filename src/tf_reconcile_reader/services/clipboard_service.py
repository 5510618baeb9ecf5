"""System clipboard writer."""

from __future__ import annotations

import asyncio
import logging
import platform
import subprocess
from collections.abc import Callable
from typing import Any

from tf_reconcile_reader.messages import CopyFinished

logger = logging.getLogger(__name__)

# Subprocess timeout in seconds for clipboard tools
SUBPROCESS_TIMEOUT = 5


def get_clipboard_command_plan(system: str) -> tuple[list[list[str]], str] | None:
    """Return clipboard command candidates and input encoding for a platform."""
    if system == "Darwin":
        return ([["pbcopy"]], "utf-8")
    if system == "Linux":
        return ([["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]], "utf-8")
    if system == "Windows":
        return ([["clip"]], "utf-16")
    return None


def copy_to_clipboard(
    text: str,
    *,
    system: str | None = None,
    run: Callable[..., Any] = subprocess.run,
) -> str | None:
    """Copy text to the system clipboard. Returns None on success, else the error.

    Candidates are tried in order; the last candidate's failure is reported.
    """
    system = system or platform.system()
    plan = get_clipboard_command_plan(system)
    if plan is None:
        logger.warning("Clipboard copy failed: unsupported platform %s", system)
        return f"unsupported platform {system}"
    commands, encoding = plan
    payload = text.encode(encoding)
    try:
        for index, command in enumerate(commands):
            try:
                run(  # nosec B603
                    command,
                    input=payload,
                    check=True,
                    shell=False,
                    timeout=SUBPROCESS_TIMEOUT,
                )
                break
            except (FileNotFoundError, subprocess.CalledProcessError):
                if index == len(commands) - 1:
                    raise
    except (subprocess.SubprocessError, OSError) as e:
        logger.warning("Clipboard copy failed: %s", e)
        return str(e)
    return None


async def write_clipboard(text: str) -> CopyFinished:
    """Copy off the event loop and wrap the outcome as a result message."""
    error = await asyncio.to_thread(copy_to_clipboard, text)
    return CopyFinished(error=error)


__all__ = [
    "SUBPROCESS_TIMEOUT",
    "copy_to_clipboard",
    "get_clipboard_command_plan",
    "write_clipboard",
]
