"""External editor launcher for recorded commands."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from collections.abc import Callable
from typing import Any

from tf_reconcile_reader.messages import CommandEdited

logger = logging.getLogger(__name__)

TEMP_PREFIX = "command-"
TEMP_SUFFIX = ".sh"


def build_editor_argv(editor: str, path: str) -> list[str]:
    """Split the editor setting (``code --wait`` style values allowed) and append the file."""
    try:
        argv = shlex.split(editor)
    except ValueError:
        argv = [editor]
    return [*(argv or [editor]), path]


def edit_text(
    text: str,
    *,
    editor: str,
    run: Callable[..., Any] = subprocess.run,
) -> CommandEdited:
    """Edit ``text`` in ``editor`` and return the trimmed result.

    The caller must have released the terminal: the editor inherits stdin,
    stdout and stderr. The temporary file is removed on every path. A failure
    at any step stops the remaining steps and is reported as the error.
    """
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
    except OSError as e:
        logger.warning("Could not create temp file for editing: %s", e)
        return CommandEdited(error=f"could not create temp file: {e}")

    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.warning("Could not write temp file %s: %s", tmp_path, e)
            return CommandEdited(error=f"could not write to temp file: {e}")

        argv = build_editor_argv(editor, tmp_path)
        try:
            run(argv, check=True)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Editor %r failed: %s", editor, e, exc_info=True)
            return CommandEdited(error=f"editor command failed: {e}")

        try:
            with open(tmp_path, encoding="utf-8") as f:
                edited = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read back %s: %s", tmp_path, e)
            return CommandEdited(error=f"could not read back temp file: {e}")
        return CommandEdited(text=edited.strip())
    finally:
        try:
            os.unlink(tmp_path)
        except OSError:
            logger.debug("Temp file %s already removed", tmp_path)


__all__ = [
    "build_editor_argv",
    "edit_text",
]
