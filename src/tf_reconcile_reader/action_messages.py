"""User-facing copy builders for notifications and CLI errors."""

from __future__ import annotations

from pathlib import Path


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_copy_success_notification() -> str:
    return "Copied to clipboard!"


def build_copy_error_notification(error: str) -> str:
    return f"Error copying: {error}"


def build_editor_error_notification(error: str) -> str:
    return f"Editor error: {error}"


def build_missing_path_notification(path: str) -> str:
    return f"Local path not found: {path}"


def build_stat_error_notification(error: str) -> str:
    return f"Could not stat file: {error}"


def build_no_command_notification() -> str:
    return "No command to execute for this item."


def build_export_message(key: str, value: str) -> str:
    """Build the shell assignment printed after a config edit is confirmed."""
    return f'export {key}="{value}"'


def build_file_details(
    *,
    name: str,
    size: int,
    permissions: str,
    modified: str,
) -> str:
    """Build the stat summary shown for a local backup file."""
    return (
        f"File: {Path(name).name}\n"
        f"Size: {size} bytes\n"
        f"Permissions: {permissions}\n"
        f"Modified: {modified}"
    )


__all__ = [
    "build_actionable_error",
    "build_copy_error_notification",
    "build_copy_success_notification",
    "build_editor_error_notification",
    "build_export_message",
    "build_file_details",
    "build_missing_path_notification",
    "build_next_step_hint",
    "build_no_command_notification",
    "build_stat_error_notification",
]
