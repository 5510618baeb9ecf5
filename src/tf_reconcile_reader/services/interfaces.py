"""Service interfaces + default adapters for app-level dependency injection."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tf_reconcile_reader.messages import CommandEdited, CommandFinished, CopyFinished
from tf_reconcile_reader.services import clipboard_service as _clipboard
from tf_reconcile_reader.services import editor_service as _editor
from tf_reconcile_reader.services import shell_service as _shell


@runtime_checkable
class ShellService(Protocol):
    """Interface for running recorded commands."""

    async def run_command(
        self,
        command: str,
        *,
        tf_dir: str,
        tf_state: str,
        on_start: Callable[[asyncio.subprocess.Process], None] | None = None,
    ) -> CommandFinished:
        """Run a shell command and return its captured outcome."""
        ...


@runtime_checkable
class EditorService(Protocol):
    """Interface for editing text in an external editor."""

    def edit_text(self, text: str, *, editor: str) -> CommandEdited:
        """Edit text synchronously while the terminal is released."""
        ...


@runtime_checkable
class ClipboardService(Protocol):
    """Interface for writing the system clipboard."""

    async def write_clipboard(self, text: str) -> CopyFinished:
        """Copy text and report success or the error."""
        ...


class DefaultShellService:
    """Default adapter that delegates to the function-based shell runner."""

    async def run_command(
        self,
        command: str,
        *,
        tf_dir: str,
        tf_state: str,
        on_start: Callable[[asyncio.subprocess.Process], None] | None = None,
    ) -> CommandFinished:
        return await _shell.run_command(
            command,
            tf_dir=tf_dir,
            tf_state=tf_state,
            on_start=on_start,
        )


class DefaultEditorService:
    """Default adapter that delegates to the function-based editor launcher."""

    def edit_text(self, text: str, *, editor: str) -> CommandEdited:
        return _editor.edit_text(text, editor=editor)


class DefaultClipboardService:
    """Default adapter that delegates to the function-based clipboard writer."""

    async def write_clipboard(self, text: str) -> CopyFinished:
        return await _clipboard.write_clipboard(text)


@dataclass(slots=True)
class AppServices:
    """Aggregated service interfaces consumed by the app layer."""

    shell: ShellService
    editor: EditorService
    clipboard: ClipboardService


def build_default_app_services() -> AppServices:
    """Build default app services backed by the function-based modules."""
    return AppServices(
        shell=DefaultShellService(),
        editor=DefaultEditorService(),
        clipboard=DefaultClipboardService(),
    )


__all__ = [
    "AppServices",
    "ClipboardService",
    "EditorService",
    "ShellService",
    "build_default_app_services",
]
