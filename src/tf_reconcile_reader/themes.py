"""Style table: Rich style strings for every role the render function paints."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Role -> Rich style (256-color palette)
DEFAULT_STYLES: Mapping[str, str] = MappingProxyType(
    {
        "title": "bold color(205)",
        "item": "default",
        "selected": "color(170)",
        "notification": "color(228) on color(63)",
        "notification_error": "color(228) on color(196)",
        "help": "color(241)",
        "key": "color(208)",
        "value": "color(78)",
        "error": "color(196)",
        "code": "color(202) on color(236)",
        "prompt": "bold color(220)",
        "text": "default",
        "bold": "bold",
    }
)


@dataclass(frozen=True, slots=True)
class StyleTable:
    """Read-only role -> style lookup handed to the render function."""

    styles: Mapping[str, str] = field(default_factory=lambda: DEFAULT_STYLES)

    def get(self, role: str) -> str:
        """Return the style for ``role``; unknown roles render unstyled."""
        return self.styles.get(role, "default")


def build_style_table(overrides: Mapping[str, str] | None = None) -> StyleTable:
    """Build a style table, layering ``overrides`` over the defaults."""
    if not overrides:
        return StyleTable()
    merged = dict(DEFAULT_STYLES)
    merged.update(overrides)
    return StyleTable(MappingProxyType(merged))


__all__ = [
    "DEFAULT_STYLES",
    "StyleTable",
    "build_style_table",
]
