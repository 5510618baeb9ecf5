"""Footer key hints for each view."""

from __future__ import annotations

from tf_reconcile_reader.models import ViewState

_BACK = ("q/esc", "Back")

VIEW_HELP: dict[ViewState, list[tuple[str, str]]] = {
    ViewState.MAIN: [
        ("↑/↓", "Navigate"),
        ("enter", "Details"),
        ("b", "Backups"),
        ("r", "Results"),
        ("c", "Configs"),
        ("/", "Filter"),
        ("q", "Quit"),
    ],
    ViewState.BACKUP: [("↑/↓", "Navigate"), ("enter", "Details"), ("/", "Filter"), _BACK],
    ViewState.BACKUP_DETAIL: [
        ("↑/↓", "Scroll"),
        ("c", "Copy Path"),
        ("enter", "Stat File"),
        _BACK,
    ],
    ViewState.RESULTS_CATEGORY: [
        ("↑/↓", "Navigate"),
        ("enter", "View Items"),
        ("/", "Filter"),
        _BACK,
    ],
    ViewState.RESULTS_LIST: [("↑/↓", "Navigate"), ("enter", "Details"), ("/", "Filter"), _BACK],
    ViewState.RESULTS_DETAIL: [("↑/↓", "Scroll"), ("X", "Execute Command"), _BACK],
    ViewState.CONFIG: [("↑/↓", "Navigate"), ("enter", "Edit"), ("/", "Filter"), _BACK],
    ViewState.CONFIG_EDIT: [("enter", "Save and Quit"), ("esc", "Back")],
    ViewState.COMMAND_RUNNER: [("enter", "Back")],
    ViewState.EXECUTION_LOG_DETAIL: [
        ("↑/↓", "Scroll"),
        ("c", "Copy"),
        ("e", "Edit & Copy"),
        _BACK,
    ],
}

FALLBACK_HELP: list[tuple[str, str]] = [("q/esc", "Back"), ("ctrl+c", "Quit")]

FILTER_HELP: list[tuple[str, str]] = [
    ("enter", "Apply Filter"),
    ("esc", "Clear Filter"),
    ("backspace", "Delete"),
]


def build_view_help(view: ViewState, *, vim_enabled: bool = False) -> list[tuple[str, str]]:
    """Return (key, description) hints for ``view``."""
    entries = list(VIEW_HELP.get(view, FALLBACK_HELP))
    if vim_enabled and view != ViewState.MAIN and _BACK in entries:
        entries[entries.index(_BACK)] = ("q/esc/h", "Back")
    return entries


__all__ = [
    "FALLBACK_HELP",
    "FILTER_HELP",
    "VIEW_HELP",
    "build_view_help",
]
