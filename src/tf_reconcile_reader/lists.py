"""Cursor and text-filter state for list-bearing views."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from rapidfuzz import fuzz

# Minimum fuzzy score (0-100) for an item to survive a filter
FUZZY_SCORE_CUTOFF = 60


def filter_matches(query: str, value: str) -> bool:
    """Return True when ``value`` matches ``query`` (substring or fuzzy)."""
    if not query:
        return True
    q = query.lower()
    v = value.lower()
    if q in v:
        return True
    return fuzz.partial_ratio(q, v) >= FUZZY_SCORE_CUTOFF


@dataclass(slots=True)
class ListModel:
    """Items of a list view plus its cursor and filter.

    ``index`` points into :attr:`visible_items`. ``filtering`` is True while the
    user is typing a filter; ``filter_text`` stays applied afterwards until
    cleared with escape.
    """

    filter_value: Callable[[Any], str] = str
    title: str = ""
    items: list[Any] = field(default_factory=list)
    index: int = 0
    filter_text: str = ""
    filtering: bool = False

    def set_items(self, items: Sequence[Any], title: str | None = None) -> None:
        """Replace the collection; the cursor and filter reset."""
        self.items = list(items)
        if title is not None:
            self.title = title
        self.index = 0
        self.filter_text = ""
        self.filtering = False

    @property
    def visible_items(self) -> list[Any]:
        if not self.filter_text:
            return self.items
        query = self.filter_text
        return [item for item in self.items if filter_matches(query, self.filter_value(item))]

    @property
    def selected(self) -> Any | None:
        visible = self.visible_items
        if not visible:
            return None
        return visible[min(self.index, len(visible) - 1)]

    def move(self, delta: int) -> None:
        count = len(self.visible_items)
        if count == 0:
            self.index = 0
            return
        self.index = max(0, min(self.index + delta, count - 1))

    def home(self) -> None:
        self.index = 0

    def end(self) -> None:
        self.index = max(0, len(self.visible_items) - 1)

    def start_filter(self) -> None:
        self.filtering = True

    def type_filter(self, text: str) -> None:
        self.filter_text += text
        self.index = 0

    def backspace_filter(self) -> None:
        self.filter_text = self.filter_text[:-1]
        self.index = 0

    def accept_filter(self) -> None:
        self.filtering = False
        self.index = 0

    def clear_filter(self) -> None:
        self.filtering = False
        self.filter_text = ""
        self.index = 0


__all__ = [
    "FUZZY_SCORE_CUTOFF",
    "ListModel",
    "filter_matches",
]
