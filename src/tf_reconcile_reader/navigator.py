"""View stack controller for the report navigator.

The :class:`Navigator` owns every piece of UI state: the view stack, one
:class:`~tf_reconcile_reader.lists.ListModel` per list view, the stashed
selections of the detail views, the config edit buffer, the command runner
state and the live notification. :meth:`Navigator.dispatch` folds one message
into that state and returns the effect requests the runtime must execute.
Nothing in here performs terminal, process or clipboard I/O; filesystem
checks for backup paths are injected.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tf_reconcile_reader.action_messages import (
    build_copy_error_notification,
    build_copy_success_notification,
    build_editor_error_notification,
    build_export_message,
    build_file_details,
    build_missing_path_notification,
    build_no_command_notification,
    build_stat_error_notification,
)
from tf_reconcile_reader.analysis import tally_log_errors
from tf_reconcile_reader.config import AppConfig
from tf_reconcile_reader.lists import ListModel
from tf_reconcile_reader.loaders import (
    DetailSection,
    compose_backup_detail,
    compose_execution_log_detail,
    compose_result_detail,
    flatten_detail,
    load_backup_rows,
    load_category_rows,
    load_config_rows,
    load_main_rows,
    load_result_rows,
)
from tf_reconcile_reader.messages import (
    CommandEdited,
    CommandFinished,
    CopyFinished,
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
from tf_reconcile_reader.models import (
    DETAIL_VIEWS,
    LIST_VIEWS,
    BackupEntry,
    CategoryEntry,
    ConfigEntry,
    ExecutionLog,
    Report,
    ResultItem,
    ViewState,
)

logger = logging.getLogger(__name__)

# Seconds a notification stays on screen
NOTIFICATION_DELAY = 2.0
ERROR_NOTIFICATION_DELAY = 3.0

# Rows taken by header, list title and footer
CHROME_HEIGHT = 4
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24

FORCE_QUIT_KEY = "ctrl+c"
BACK_KEYS = frozenset({"q", "escape"})
VIM_BACK_KEY = "h"
FILTER_KEY = "slash"
EXECUTE_KEYS = frozenset({"X", "shift+x"})

_UP_KEYS = frozenset({"up", "k"})
_DOWN_KEYS = frozenset({"down", "j"})
_HOME_KEYS = frozenset({"home", "g"})
_END_KEYS = frozenset({"end", "G", "shift+g"})

# Text each list view filters on
_FILTER_VALUES: dict[ViewState, Callable[[Any], str]] = {
    ViewState.MAIN: lambda log: log.command,
    ViewState.BACKUP: lambda entry: f"{entry.key} {entry.value}",
    ViewState.RESULTS_CATEGORY: lambda entry: entry.name,
    ViewState.RESULTS_LIST: lambda item: f"{item.title} {item.description}",
    ViewState.CONFIG: lambda entry: f"{entry.key} {entry.value}",
}


@dataclass(slots=True)
class Notification:
    """The single live status message. ``token`` ties it to its expiry timer."""

    message: str
    is_error: bool = False
    token: int = 0


@dataclass(slots=True)
class CommandRunnerState:
    command: str = ""
    stdout: str = ""
    stderr: str = ""
    error: str = ""
    exit_code: int = 0
    running: bool = False
    run_id: int = 0


def _format_modified(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).astimezone().strftime("%a, %d %b %Y %H:%M:%S %Z")


class Navigator:
    """View stack controller: ``dispatch(message) -> effects``."""

    def __init__(
        self,
        config: AppConfig,
        report: Report,
        *,
        error_counts: Mapping[str, int] | None = None,
        path_exists: Callable[[str], bool] = os.path.lexists,
        stat_path: Callable[[str], os.stat_result] = os.stat,
    ) -> None:
        self.config = config
        self.report = report
        self.error_counts: dict[str, int] = dict(error_counts or {})
        self._path_exists = path_exists
        self._stat_path = stat_path

        self.view_stack: list[ViewState] = [ViewState.MAIN]
        self.lists: dict[ViewState, ListModel] = {
            view: ListModel(filter_value=_FILTER_VALUES[view]) for view in LIST_VIEWS
        }
        self.detail_sections: list[DetailSection] = []
        self.detail_offset = 0

        # Stashed selections, valid while their detail view is on the stack
        self.active_backup: BackupEntry | None = None
        self.active_category = ""
        self.active_result: ResultItem | None = None
        self.active_config: ConfigEntry | None = None
        self.active_log: ExecutionLog | None = None

        self.edit_buffer = ""
        self.command_runner: CommandRunnerState | None = None
        self._run_counter = 0
        self.notification: Notification | None = None
        self._notification_token = 0

        self.width = DEFAULT_WIDTH
        self.height = DEFAULT_HEIGHT
        self.quit_message: str | None = None
        self.error: str | None = None

        self._reload_main()

    # ========================================================================
    # View stack
    # ========================================================================

    @property
    def active_view(self) -> ViewState:
        return self.view_stack[-1]

    def push(self, view: ViewState) -> ViewState:
        self.view_stack.append(view)
        logger.debug("Pushed %s (depth %d)", view.name, len(self.view_stack))
        return view

    def pop(self) -> ViewState:
        """Pop the active view. The root view is never popped."""
        if len(self.view_stack) > 1:
            self.view_stack.pop()
        return self.active_view

    def active_list(self) -> ListModel | None:
        return self.lists.get(self.active_view)

    @property
    def page_size(self) -> int:
        return max(1, self.height - CHROME_HEIGHT)

    # ========================================================================
    # Notifications
    # ========================================================================

    def set_notification(self, message: str, is_error: bool = False) -> ScheduleExpiry:
        """Replace the live notification and return its expiry request.

        Each call gets a fresh token; an expiry carrying an older token is
        ignored, so a newer notification is never cleared early.
        """
        self._notification_token += 1
        self.notification = Notification(message, is_error, self._notification_token)
        delay = ERROR_NOTIFICATION_DELAY if is_error else NOTIFICATION_DELAY
        return ScheduleExpiry(delay=delay, token=self._notification_token)

    # ========================================================================
    # Dispatch
    # ========================================================================

    def dispatch(self, message: Message) -> list[Effect]:
        """Fold one message into the state and return the effects to run."""
        if isinstance(message, KeyPressed):
            return self._on_key(message)
        if isinstance(message, Resized):
            self.width, self.height = message.width, message.height
            self._clamp_detail_offset()
            return []
        if isinstance(message, NotificationExpired):
            if self.notification is not None and self.notification.token == message.token:
                self.notification = None
            return []
        if isinstance(message, CopyFinished):
            if message.error:
                return [self.set_notification(build_copy_error_notification(message.error), True)]
            return [self.set_notification(build_copy_success_notification())]
        if isinstance(message, CommandFinished):
            self._record_command(message)
            return []
        if isinstance(message, CommandEdited):
            if message.error:
                notice = build_editor_error_notification(message.error)
                return [self.set_notification(notice, True)]
            return [CopyToClipboard(message.text)]
        if isinstance(message, FatalError):
            logger.error("Fatal error: %s", message.error)
            self.error = message.error
            return [Quit()]
        logger.debug("Ignoring unknown message %r", message)
        return []

    def _record_command(self, message: CommandFinished) -> None:
        runner = self.command_runner
        # Only the latest launch drives the runner view; older results are still logged
        if runner is not None and runner.run_id == message.run_id:
            runner.stdout = message.stdout
            runner.stderr = message.stderr
            runner.error = message.error or ""
            runner.exit_code = message.exit_code
            runner.running = False
        log = ExecutionLog(
            command=message.command,
            stdout=message.stdout,
            stderr=message.stderr,
            error=message.error or "",
            exit_code=message.exit_code,
            source=self.config.execution_source,
        )
        self.report.append_execution_log(log)
        for pattern, count in tally_log_errors(log).items():
            self.error_counts[pattern] = self.error_counts.get(pattern, 0) + count
        self._reload_main()
        logger.debug("Recorded command %r (exit %d)", message.command, message.exit_code)

    # ========================================================================
    # Keys
    # ========================================================================

    def _on_key(self, message: KeyPressed) -> list[Effect]:
        key = message.key
        if key == FORCE_QUIT_KEY:
            return [Quit()]
        if self.error is not None:
            return []

        view = self.active_view
        model = self.active_list()
        if model is not None and model.filtering:
            self._filter_key(model, message)
            return []
        if view == ViewState.CONFIG_EDIT:
            return self._config_edit_key(message)

        if key == "escape" and model is not None and model.filter_text:
            model.clear_filter()
            return []
        if view != ViewState.MAIN and self._is_back_key(key):
            self.pop()
            return []

        if model is not None and self._list_key(model, key):
            return []
        if view in DETAIL_VIEWS and self._scroll_key(key):
            return []

        handler = self._VIEW_HANDLERS.get(view)
        if handler is None:
            return []
        return handler(self, key)

    def _is_back_key(self, key: str) -> bool:
        if key in BACK_KEYS:
            return True
        return self.config.vim_enabled and key == VIM_BACK_KEY

    def _filter_key(self, model: ListModel, message: KeyPressed) -> None:
        key = message.key
        if key == "escape":
            model.clear_filter()
        elif key == "enter":
            model.accept_filter()
        elif key == "backspace":
            model.backspace_filter()
        elif key in ("up", "down"):
            model.move(-1 if key == "up" else 1)
        elif message.character and message.character.isprintable():
            model.type_filter(message.character)

    def _config_edit_key(self, message: KeyPressed) -> list[Effect]:
        key = message.key
        if key == "escape":
            self.pop()
            return []
        if key == "enter":
            entry = self.active_config
            name = entry.key if entry is not None else ""
            self.quit_message = build_export_message(name, self.edit_buffer)
            return [Quit(self.quit_message)]
        if key == "backspace":
            self.edit_buffer = self.edit_buffer[:-1]
        elif key == "ctrl+u":
            self.edit_buffer = ""
        elif message.character and message.character.isprintable():
            self.edit_buffer += message.character
        return []

    def _list_key(self, model: ListModel, key: str) -> bool:
        if key in _UP_KEYS:
            model.move(-1)
        elif key in _DOWN_KEYS:
            model.move(1)
        elif key in _HOME_KEYS:
            model.home()
        elif key in _END_KEYS:
            model.end()
        elif key == "pageup":
            model.move(-self.page_size)
        elif key == "pagedown":
            model.move(self.page_size)
        elif key == FILTER_KEY:
            model.start_filter()
        else:
            return False
        return True

    def _scroll_key(self, key: str) -> bool:
        if key in _UP_KEYS:
            self.detail_offset -= 1
        elif key in _DOWN_KEYS:
            self.detail_offset += 1
        elif key in _HOME_KEYS:
            self.detail_offset = 0
        elif key in _END_KEYS:
            self.detail_offset = len(flatten_detail(self.detail_sections))
        elif key == "pageup":
            self.detail_offset -= self.page_size
        elif key == "pagedown":
            self.detail_offset += self.page_size
        else:
            return False
        self._clamp_detail_offset()
        return True

    def _clamp_detail_offset(self) -> None:
        line_count = len(flatten_detail(self.detail_sections))
        upper = max(0, line_count - self.page_size)
        self.detail_offset = max(0, min(self.detail_offset, upper))

    def _show_detail(self, view: ViewState, sections: list[DetailSection]) -> None:
        self.detail_sections = sections
        self.detail_offset = 0
        self.push(view)

    def _open_list(self, view: ViewState, title: str, rows: list[Any]) -> None:
        self.lists[view].set_items(rows, title)
        self.push(view)

    def _reload_main(self) -> None:
        title, rows = load_main_rows(self.report)
        self.lists[ViewState.MAIN].set_items(rows, title)

    # ========================================================================
    # Per-view handlers
    # ========================================================================

    def _main_key(self, key: str) -> list[Effect]:
        if key == "q":
            return [Quit()]
        if key == "b":
            self._open_list(ViewState.BACKUP, *load_backup_rows(self.report.backup))
        elif key == "r":
            self._open_list(ViewState.RESULTS_CATEGORY, *load_category_rows(self.report))
        elif key == "c":
            self._open_list(ViewState.CONFIG, *load_config_rows(self.config.environ))
        elif key in ("s", "l", "enter"):
            log = self.lists[ViewState.MAIN].selected
            if log is not None:
                self.active_log = log
                self._show_detail(ViewState.EXECUTION_LOG_DETAIL, compose_execution_log_detail(log))
        return []

    def _backup_key(self, key: str) -> list[Effect]:
        if key != "enter":
            return []
        entry = self.lists[ViewState.BACKUP].selected
        if entry is None:
            return []
        self.active_backup = entry
        exists = self._path_exists(entry.value)
        sections = compose_backup_detail(entry, self.report.state, exists)
        self._show_detail(ViewState.BACKUP_DETAIL, sections)
        return []

    def _backup_detail_key(self, key: str) -> list[Effect]:
        entry = self.active_backup
        if entry is None:
            return []
        if key == "c":
            return [CopyToClipboard(entry.value)]
        if key != "enter":
            return []
        path = entry.value
        if not self._path_exists(path):
            return [self.set_notification(build_missing_path_notification(path), True)]
        try:
            info = self._stat_path(path)
        except OSError as e:
            logger.warning("Could not stat %s: %s", path, e)
            return [self.set_notification(build_stat_error_notification(str(e)), True)]
        details = build_file_details(
            name=path,
            size=info.st_size,
            permissions=stat.filemode(info.st_mode),
            modified=_format_modified(info.st_mtime),
        )
        self.detail_sections = [DetailSection(entry.key, details, "value")]
        self.detail_offset = 0
        return []

    def _results_category_key(self, key: str) -> list[Effect]:
        if key != "enter":
            return []
        entry: CategoryEntry | None = self.lists[ViewState.RESULTS_CATEGORY].selected
        if entry is None:
            return []
        self.active_category = entry.name
        self._open_list(ViewState.RESULTS_LIST, *load_result_rows(self.report, entry.name))
        return []

    def _results_list_key(self, key: str) -> list[Effect]:
        if key != "enter":
            return []
        item = self.lists[ViewState.RESULTS_LIST].selected
        if item is None:
            return []
        self.active_result = item
        self._show_detail(ViewState.RESULTS_DETAIL, compose_result_detail(item))
        return []

    def _results_detail_key(self, key: str) -> list[Effect]:
        if key not in EXECUTE_KEYS:
            return []
        item = self.active_result
        if item is None or not item.command:
            return [self.set_notification(build_no_command_notification(), True)]
        self._run_counter += 1
        run_id = self._run_counter
        self.command_runner = CommandRunnerState(command=item.command, running=True, run_id=run_id)
        self.push(ViewState.COMMAND_RUNNER)
        return [RunCommand(item.command, run_id=run_id)]

    def _config_key(self, key: str) -> list[Effect]:
        if key != "enter":
            return []
        entry = self.lists[ViewState.CONFIG].selected
        if entry is None:
            return []
        self.active_config = entry
        self.edit_buffer = entry.value
        self.push(ViewState.CONFIG_EDIT)
        return []

    def _execution_log_detail_key(self, key: str) -> list[Effect]:
        log = self.active_log
        if log is None:
            return []
        if key == "c":
            return [CopyToClipboard(log.command)]
        if key == "e":
            return [EditCommand(log.command)]
        return []

    def _command_runner_key(self, key: str) -> list[Effect]:
        if key == "enter":
            self.pop()
        return []

    _VIEW_HANDLERS: dict[ViewState, Callable[[Navigator, str], list[Effect]]] = {
        ViewState.MAIN: _main_key,
        ViewState.BACKUP: _backup_key,
        ViewState.BACKUP_DETAIL: _backup_detail_key,
        ViewState.RESULTS_CATEGORY: _results_category_key,
        ViewState.RESULTS_LIST: _results_list_key,
        ViewState.RESULTS_DETAIL: _results_detail_key,
        ViewState.CONFIG: _config_key,
        ViewState.EXECUTION_LOG_DETAIL: _execution_log_detail_key,
        ViewState.COMMAND_RUNNER: _command_runner_key,
    }


__all__ = [
    "CHROME_HEIGHT",
    "ERROR_NOTIFICATION_DELAY",
    "NOTIFICATION_DELAY",
    "CommandRunnerState",
    "Navigator",
    "Notification",
]
