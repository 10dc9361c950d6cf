"""Fixed colour palettes for the canvas."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Literal, Union

__all__ = ["ThemeName", "ThemePalette", "THEMES", "DEFAULT_THEME", "resolve_theme"]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

ThemeName = Literal["light", "dark", "blue"]


@dataclass(frozen=True)
class ThemePalette:
    """Four-colour palette used by the scene builder."""

    background: str
    grid: str
    axis: str
    text: str


THEMES: Dict[str, ThemePalette] = {
    "light": ThemePalette(background="#ffffff", grid="#e0e0e0", axis="#666666", text="#333333"),
    "dark": ThemePalette(background="#1a1a1a", grid="#333333", axis="#999999", text="#eeeeee"),
    "blue": ThemePalette(background="#0f1420", grid="#3b4557", axis="#0066cc", text="#003366"),
}

DEFAULT_THEME = "light"


def resolve_theme(theme: Union[ThemeName, str, ThemePalette, None]) -> ThemePalette:
    """Return the palette for ``theme``.

    A :class:`ThemePalette` passes through unchanged. Unknown names fall back
    to the light palette with a warning in the log.
    """
    if isinstance(theme, ThemePalette):
        return theme
    if theme is None:
        return THEMES[DEFAULT_THEME]
    palette = THEMES.get(str(theme).lower())
    if palette is None:
        logger.warning("Unknown theme %r; falling back to %r", theme, DEFAULT_THEME)
        return THEMES[DEFAULT_THEME]
    return palette
