"""Textual runtime for the report navigator.

The app owns no UI state of its own. Key and resize events become navigator
messages; effect requests returned by the navigator are executed here as
tracked asyncio tasks, timers or a suspended-terminal editor session, and each
outcome is fed back to the navigator as exactly one message. The screen is
repainted from :func:`~tf_reconcile_reader.render.render_frame` after every
update.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from dataclasses import replace
from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.css.query import NoMatches
from textual.events import Key, Resize
from textual.widgets import Static

from tf_reconcile_reader.config import AppConfig
from tf_reconcile_reader.messages import (
    CommandEdited,
    CopyToClipboard,
    EditCommand,
    Effect,
    FatalError,
    KeyPressed,
    Message,
    NotificationExpired,
    Quit,
    Resized,
    RunCommand,
    ScheduleExpiry,
)
from tf_reconcile_reader.models import APP_NAME, Report
from tf_reconcile_reader.navigator import Navigator
from tf_reconcile_reader.render import render_frame
from tf_reconcile_reader.services.interfaces import AppServices, build_default_app_services
from tf_reconcile_reader.themes import StyleTable
from tf_reconcile_reader.ui_constants import APP_BINDINGS, APP_CSS

logger = logging.getLogger(__name__)


class ReportNavigatorApp(App[str | None]):
    """Interactive navigator over one reconciliation report.

    ``run()`` returns the message to print once the terminal is released
    (the export line after a config edit), or None.
    """

    TITLE = APP_NAME
    CSS = APP_CSS
    BINDINGS = APP_BINDINGS
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        config: AppConfig,
        report: Report,
        *,
        navigator: Navigator | None = None,
        services: AppServices | None = None,
        styles: StyleTable | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.navigator = navigator or Navigator(config, report)
        self._services: AppServices = services or build_default_app_services()
        self._styles = styles or StyleTable()

        # Background task tracking (prevent GC of fire-and-forget tasks)
        self._background_tasks: set[asyncio.Task[None]] = set()
        # Shell processes still running, killed by process group on shutdown
        self._processes: set[asyncio.subprocess.Process] = set()

    def compose(self) -> ComposeResult:
        yield Static("", id="header")
        yield Static("", id="body")
        yield Static("", id="footer")

    def on_mount(self) -> None:
        self.apply_message(Resized(self.size.width, self.size.height))

    async def on_unmount(self) -> None:
        """Kill running commands and cancel tracked tasks."""
        self._kill_processes()
        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=0.5)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()

    # ========================================================================
    # Events -> messages
    # ========================================================================

    def on_key(self, event: Key) -> None:
        event.stop()
        event.prevent_default()
        self.apply_message(KeyPressed(event.key, event.character))

    def on_resize(self, event: Resize) -> None:
        self.apply_message(Resized(event.size.width, event.size.height))

    def action_force_quit(self) -> None:
        self.apply_message(KeyPressed("ctrl+c"))

    def apply_message(self, message: Message) -> None:
        """Dispatch one message, start its effects and repaint."""
        effects = self.navigator.dispatch(message)
        for effect in effects:
            self._start_effect(effect)
        self._repaint()

    def _repaint(self) -> None:
        frame = render_frame(self.navigator, self._styles)
        try:
            header = self.query_one("#header", Static)
            body = self.query_one("#body", Static)
            footer = self.query_one("#footer", Static)
        except NoMatches:
            return
        header.update(Text.from_markup(frame.header))
        body.update(Text.from_markup(frame.body))
        footer.update(Text.from_markup(frame.footer))

    # ========================================================================
    # Effect runtime
    # ========================================================================

    def _start_effect(self, effect: Effect) -> None:
        if isinstance(effect, RunCommand):
            self._track_task(self._run_command(effect.command, effect.run_id))
        elif isinstance(effect, EditCommand):
            self._track_task(self._edit_command(effect.command))
        elif isinstance(effect, CopyToClipboard):
            self._track_task(self._copy(effect.text))
        elif isinstance(effect, ScheduleExpiry):
            token = effect.token
            self.set_timer(effect.delay, lambda: self.apply_message(NotificationExpired(token)))
        elif isinstance(effect, Quit):
            logger.debug("Quitting session")
            self.exit(result=effect.message)

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        """Turn an exception escaping an effect task into a fatal error."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)
            self.apply_message(FatalError(str(exc) or type(exc).__name__))

    async def _run_command(self, command: str, run_id: int) -> None:
        result = await self._services.shell.run_command(
            command,
            tf_dir=self.config.tf_dir,
            tf_state=self.config.tf_state,
            on_start=self._processes.add,
        )
        finished = {proc for proc in self._processes if proc.returncode is not None}
        self._processes.difference_update(finished)
        self.apply_message(replace(result, run_id=run_id))

    async def _edit_command(self, command: str) -> None:
        try:
            with self.suspend():
                result = self._services.editor.edit_text(command, editor=self.config.editor)
        except SuspendNotSupported as e:
            logger.warning("Cannot suspend the terminal for the editor: %s", e)
            result = CommandEdited(error=f"terminal cannot be suspended: {e}")
        self.apply_message(result)

    async def _copy(self, text: str) -> None:
        self.apply_message(await self._services.clipboard.write_clipboard(text))

    def _kill_processes(self) -> None:
        """Best-effort kill of still-running command process groups."""
        for proc in list(self._processes):
            if proc.returncode is not None:
                continue
            try:
                if hasattr(os, "killpg"):
                    os.killpg(proc.pid, signal.SIGKILL)
                else:
                    proc.kill()
            except (ProcessLookupError, PermissionError) as e:
                logger.debug("Could not kill process %d: %s", proc.pid, e)
        self._processes.clear()


__all__ = ["ReportNavigatorApp"]
