"""Shell command runner for recorded remediation commands."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable

from tf_reconcile_reader.messages import CommandFinished

logger = logging.getLogger(__name__)

STATE_FLAG = "-state="
TERRAFORM_PROGRAM = "terraform"


def prepare_command(command: str, tf_state: str) -> str:
    """Inject ``-state=<tf_state>`` after the first ``terraform`` unless one is given."""
    if not tf_state or STATE_FLAG in command:
        return command
    return command.replace(TERRAFORM_PROGRAM, f"{TERRAFORM_PROGRAM} {STATE_FLAG}{tf_state}", 1)


def resolve_workdir(tf_dir: str) -> str | None:
    """Return ``tf_dir`` when it names an existing directory, else None."""
    if tf_dir and os.path.isdir(tf_dir):
        return tf_dir
    return None


def describe_exit(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status {returncode}"


async def run_command(
    command: str,
    *,
    tf_dir: str = "",
    tf_state: str = "",
    on_start: Callable[[asyncio.subprocess.Process], None] | None = None,
) -> CommandFinished:
    """Run ``command`` through the shell and capture its outcome.

    Never raises for process failures: a spawn error or a non-zero exit is
    reported in the returned message. The process runs in its own session so
    the caller can kill the whole process group. ``on_start`` receives the
    process as soon as it is spawned.
    """
    prepared = prepare_command(command, tf_state)
    cwd = resolve_workdir(tf_dir)
    logger.debug("Running %r in %s", prepared, cwd or os.getcwd())
    try:
        proc = await asyncio.create_subprocess_shell(
            prepared,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            start_new_session=True,
        )
    except OSError as e:
        logger.warning("Could not start command %r: %s", prepared, e, exc_info=True)
        return CommandFinished(command=command, stdout="", stderr="", error=str(e))

    if on_start is not None:
        on_start(proc)
    stdout, stderr = await proc.communicate()
    returncode = proc.returncode if proc.returncode is not None else 0
    result = CommandFinished(
        command=command,
        stdout=(stdout or b"").decode("utf-8", errors="replace"),
        stderr=(stderr or b"").decode("utf-8", errors="replace"),
        error=describe_exit(returncode) if returncode != 0 else None,
        # A signal-terminated process has no exit status of its own
        exit_code=-1 if returncode < 0 else returncode,
    )
    if returncode != 0:
        logger.info("Command %r failed: %s", prepared, result.error)
    return result


__all__ = [
    "describe_exit",
    "prepare_command",
    "resolve_workdir",
    "run_command",
]
