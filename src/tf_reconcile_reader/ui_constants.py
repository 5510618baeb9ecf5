"""Internal UI constants for the report navigator app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $background;
}

#header {
    height: 1;
    padding: 0 1;
}

#body {
    height: 1fr;
    padding: 1 1 0 1;
}

#footer {
    dock: bottom;
    height: 1;
    padding: 0 1;
}
"""

# Every other key is routed to the navigator through App.on_key. ctrl+q replaces
# the inherited Textual quit so it also ends the session through the navigator.
APP_BINDINGS: list[BindingType] = [
    Binding("ctrl+c", "force_quit", "Quit", show=False, priority=True),
    Binding("ctrl+q", "force_quit", "Quit", show=False, priority=True),
]

__all__ = [
    "APP_BINDINGS",
    "APP_CSS",
]
