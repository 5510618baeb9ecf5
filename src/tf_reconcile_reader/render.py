"""Pure render function: navigator state -> header, body and footer markup.

The output is Rich console markup. Every piece of report or user text is
escaped before it is wrapped in a style tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rich.cells import cell_len
from rich.markup import escape

from tf_reconcile_reader import __version__
from tf_reconcile_reader.help_ui import FILTER_HELP, build_view_help
from tf_reconcile_reader.lists import ListModel
from tf_reconcile_reader.loaders import flatten_detail
from tf_reconcile_reader.models import APP_NAME, DETAIL_VIEWS, ViewState
from tf_reconcile_reader.navigator import Navigator
from tf_reconcile_reader.themes import StyleTable

# Width of the key column in backup and category rows
KEY_COLUMN_WIDTH = 25
EDIT_CURSOR = "█"
EMPTY_LIST_TEXT = "No items."
COMMAND_RUNNER_HINT = "Press Enter to return to the previous view."
CONFIG_EDIT_HINT = "(esc to cancel, enter to save and quit)"


@dataclass(frozen=True, slots=True)
class Frame:
    header: str
    body: str
    footer: str


def _styled(text: str, role: str, styles: StyleTable) -> str:
    return f"[{styles.get(role)}]{escape(text)}[/]"


def _first_line(text: str) -> str:
    return text.split("\n", 1)[0]


# ============================================================================
# Header and footer
# ============================================================================


def render_header(nav: Navigator, styles: StyleTable) -> str:
    report = nav.report
    title = f"{APP_NAME}: {nav.config.input_file}"
    versions = f"tf v{report.tf_version} | btfsm {report.version} | bsmr {__version__}   "
    spacer = " " * max(1, nav.width - cell_len(title) - cell_len(versions))
    return _styled(title + spacer + versions, "title", styles)


def render_footer(nav: Navigator, styles: StyleTable) -> str:
    notification = nav.notification
    if notification is not None:
        role = "notification_error" if notification.is_error else "notification"
        return _styled(f" {notification.message} ", role, styles)
    model = nav.active_list()
    if model is not None and model.filtering:
        entries = FILTER_HELP
    else:
        entries = build_view_help(nav.active_view, vim_enabled=nav.config.vim_enabled)
    separator = _styled(" | ", "help", styles)
    return separator.join(
        f"{_styled(key, 'key', styles)}{_styled(f': {description}', 'help', styles)}"
        for key, description in entries
    )


# ============================================================================
# Body
# ============================================================================


def _row_text(view: ViewState, item: Any) -> str:
    if view == ViewState.MAIN:
        return _first_line(item.command)
    if view == ViewState.BACKUP:
        return f"{item.key:<{KEY_COLUMN_WIDTH}} = {item.value}"
    if view == ViewState.RESULTS_CATEGORY:
        return f"{item.name:<{KEY_COLUMN_WIDTH}} {item.count} items"
    if view == ViewState.RESULTS_LIST:
        return _first_line(item.title)
    if view == ViewState.CONFIG:
        return f"{item.key} = {item.value}"
    return str(item)


def _render_error_summary(nav: Navigator, styles: StyleTable) -> list[str]:
    if not nav.error_counts:
        return []
    summary = " | ".join(f"{pattern} {count}" for pattern, count in nav.error_counts.items())
    return [_styled(f"Common errors: {summary}", "error", styles)]


def render_list(nav: Navigator, model: ListModel, styles: StyleTable) -> str:
    view = nav.active_view
    lines = [_styled(model.title, "title", styles)]
    if view == ViewState.MAIN:
        lines.extend(_render_error_summary(nav, styles))
    if model.filtering or model.filter_text:
        cursor = EDIT_CURSOR if model.filtering else ""
        lines.append(_styled(f"Filter: {model.filter_text}{cursor}", "prompt", styles))

    visible = model.visible_items
    if not visible:
        lines.append(_styled(EMPTY_LIST_TEXT, "help", styles))
        return "\n".join(lines)

    page = max(1, nav.page_size - (len(lines) - 1))
    index = min(model.index, len(visible) - 1)
    start = max(0, index - page + 1)
    for offset, item in enumerate(visible[start : start + page], start=start):
        text = _row_text(view, item)
        if offset == index:
            lines.append(_styled(f"> {text}", "selected", styles))
        else:
            lines.append(_styled(f"  {text}", "item", styles))
    return "\n".join(lines)


def render_detail(nav: Navigator, styles: StyleTable) -> str:
    lines = flatten_detail(nav.detail_sections)
    window = lines[nav.detail_offset : nav.detail_offset + nav.page_size]
    return "\n".join(_styled(text, role, styles) if text else "" for text, role in window)


def render_config_edit(nav: Navigator, styles: StyleTable) -> str:
    key = nav.active_config.key if nav.active_config is not None else ""
    return "\n".join(
        [
            f"Editing {_styled(key, 'key', styles)}:",
            "",
            _styled(f"> {nav.edit_buffer}{EDIT_CURSOR}", "text", styles),
            "",
            _styled(CONFIG_EDIT_HINT, "help", styles),
        ]
    )


def render_command_runner(nav: Navigator, styles: StyleTable) -> str:
    runner = nav.command_runner
    if runner is None:
        return _styled(COMMAND_RUNNER_HINT, "help", styles)
    lines = [
        _styled("Executing Command:", "title", styles),
        _styled(runner.command, "code", styles),
    ]
    if runner.running:
        lines.extend(["", _styled("Running...", "prompt", styles)])
    else:
        lines.extend(["", _styled(f"Exit Code: {runner.exit_code}", "title", styles)])
        if runner.error:
            lines.append(_styled(runner.error, "error", styles))
    lines.extend(["", _styled("STDOUT:", "title", styles), escape(runner.stdout)])
    lines.extend([_styled("STDERR:", "title", styles), _styled(runner.stderr, "error", styles)])
    lines.extend(["", _styled(COMMAND_RUNNER_HINT, "help", styles)])
    return "\n".join(lines)


def render_body(nav: Navigator, styles: StyleTable) -> str:
    view = nav.active_view
    model = nav.active_list()
    if model is not None:
        return render_list(nav, model, styles)
    if view in DETAIL_VIEWS:
        return render_detail(nav, styles)
    if view == ViewState.CONFIG_EDIT:
        return render_config_edit(nav, styles)
    if view == ViewState.COMMAND_RUNNER:
        return render_command_runner(nav, styles)
    return _styled(f"Unknown view {int(view)}", "help", styles)


def render_frame(nav: Navigator, styles: StyleTable | None = None) -> Frame:
    """Render the whole screen. Pure: reads ``nav`` and never mutates it."""
    styles = styles or StyleTable()
    if nav.error is not None:
        return Frame(
            header="",
            body=_styled(f"\nAn error occurred: {nav.error}\n", "error", styles),
            footer="",
        )
    return Frame(
        header=render_header(nav, styles),
        body=render_body(nav, styles),
        footer=render_footer(nav, styles),
    )


__all__ = [
    "Frame",
    "render_body",
    "render_footer",
    "render_frame",
    "render_header",
]
