"""Messages consumed by the navigator and effect requests it produces.

Both are tagged unions of frozen dataclasses. The navigator never performs I/O
itself: it returns effect requests, the app runtime executes them and feeds the
outcome back as exactly one result message per effect.
"""

from __future__ import annotations

from dataclasses import dataclass

# ============================================================================
# Input and result messages
# ============================================================================


@dataclass(frozen=True, slots=True)
class KeyPressed:
    """A key press. ``key`` is the Textual key name, ``character`` the printable text."""

    key: str
    character: str | None = None


@dataclass(frozen=True, slots=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class NotificationExpired:
    """Fired by the expiry timer scheduled for notification ``token``."""

    token: int


@dataclass(frozen=True, slots=True)
class CopyFinished:
    error: str | None = None


@dataclass(frozen=True, slots=True)
class CommandFinished:
    """Outcome of a shell command. Failures are data, never exceptions."""

    command: str
    stdout: str
    stderr: str
    error: str | None = None
    exit_code: int = 0
    # Id of the RunCommand that started it
    run_id: int = 0


@dataclass(frozen=True, slots=True)
class CommandEdited:
    text: str = ""
    error: str | None = None


@dataclass(frozen=True, slots=True)
class FatalError:
    """An unrecoverable error surfaced from the runtime."""

    error: str


Message = (
    KeyPressed
    | Resized
    | NotificationExpired
    | CopyFinished
    | CommandFinished
    | CommandEdited
    | FatalError
)

# ============================================================================
# Effect requests
# ============================================================================


@dataclass(frozen=True, slots=True)
class RunCommand:
    """Run ``command`` in the shell. ``run_id`` is echoed back on the result."""

    command: str
    run_id: int = 0


@dataclass(frozen=True, slots=True)
class EditCommand:
    """Suspend the screen, edit ``command`` in an external editor, resume."""

    command: str


@dataclass(frozen=True, slots=True)
class CopyToClipboard:
    text: str


@dataclass(frozen=True, slots=True)
class ScheduleExpiry:
    delay: float
    token: int


@dataclass(frozen=True, slots=True)
class Quit:
    """End the session. ``message`` is printed after the screen is released."""

    message: str | None = None


Effect = RunCommand | EditCommand | CopyToClipboard | ScheduleExpiry | Quit


__all__ = [
    "CommandEdited",
    "CommandFinished",
    "CopyFinished",
    "CopyToClipboard",
    "EditCommand",
    "Effect",
    "FatalError",
    "KeyPressed",
    "Message",
    "NotificationExpired",
    "Quit",
    "Resized",
    "RunCommand",
    "ScheduleExpiry",
]
