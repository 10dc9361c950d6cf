"""Rendering metrics and equation-style contracts.

This module centralizes the pixel metrics used by the scene builder (label
spacing, tick sizes, fonts, sampling density) and the discoverable equation
style keywords with their alias rules. Keeping them outside the renderer
gives tests a single place to lock layout semantics.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, Optional, Tuple, Union

__all__ = [
    "RenderStyle",
    "EQUATION_STYLE_OPTIONS",
    "LINE_STYLES",
    "DEFAULT_COLOR",
    "DEFAULT_LINE_WIDTH",
    "resolve_line_style",
    "resolve_style_aliases",
]

DEFAULT_COLOR = "#1E88E5"
DEFAULT_LINE_WIDTH = 2.0

# Equation line style -> Plotly dash pattern.
LINE_STYLES: Dict[str, str] = {
    "solid": "solid",
    "dashed": "dash",
    "dotted": "dot",
}

EQUATION_STYLE_OPTIONS: Dict[str, str] = {
    "color": "Line color. Accepts CSS-like names (e.g., red), hex (#RRGGBB), or rgb()/rgba() strings.",
    "line_width": "Line width in pixels. Larger values draw thicker lines.",
    "width": "Alias for line_width.",
    "line_style": "Line pattern. Supported values: solid, dashed, dotted.",
    "visible": "Whether the curve is drawn and takes part in tangent hit-testing.",
}


def resolve_line_style(line_style: str) -> str:
    """Return the Plotly dash pattern for an equation ``line_style``.

    Raises
    ------
    ValueError
        If ``line_style`` is not one of ``solid``, ``dashed`` or ``dotted``.
    """
    try:
        return LINE_STYLES[line_style]
    except (KeyError, TypeError):
        raise ValueError(
            f"line_style must be one of {sorted(LINE_STYLES)}, got {line_style!r}"
        ) from None


def resolve_style_aliases(
    *,
    line_width: Union[int, float, None],
    width: Union[int, float, None],
) -> Optional[Union[int, float]]:
    """Resolve ``width=`` into the canonical ``line_width=``.

    Raises
    ------
    ValueError
        If both are provided with different values.
    """
    if width is not None:
        if line_width is not None and width != line_width:
            raise ValueError(
                "add_equation() received both line_width= and width= with different values; use only one."
            )
        line_width = width if line_width is None else line_width
    return line_width


@dataclass(frozen=True)
class RenderStyle:
    """Pixel metrics and sampling constants for scene construction.

    Parameters
    ----------
    min_label_spacing_px:
        Minimum pixel distance between adjacent axis ticks.
    label_padding_px:
        Extra horizontal room an x label needs beyond its measured width.
    y_label_min_gap_px:
        Minimum vertical gap between y labels.
    tick_half_length_px:
        Tick marks extend this far on each side of an axis.
    x_label_offset_px, y_label_offset_px:
        Distance of tick labels from their axis.
    axis_font_size, axis_font_family:
        Tick label font (drawn bold).
    char_width_ratio:
        Average glyph advance as a fraction of the font size, used to measure
        label widths without a text backend.
    grid_line_width, axis_line_width:
        Stroke widths in pixels.
    curve_base_step:
        Sampling step at zoom 1; divided by the zoom factor.
    curve_margin:
        Graph units sampled beyond each horizontal edge.
    tangent_half_length:
        Graph-space length of the tangent on each side of the anchor.
    tangent_line_width, tangent_dot_radius_px, tangent_font_size:
        Tangent overlay metrics.
    tangent_label_offset_px:
        ``(dx, dy)`` from the anchor to the tangent label.
    tangent_label_padding_px:
        Padding of the box drawn behind the tangent label.
    """

    min_label_spacing_px: float = 60.0
    label_padding_px: float = 10.0
    y_label_min_gap_px: float = 20.0
    tick_half_length_px: float = 5.0
    x_label_offset_px: float = 20.0
    y_label_offset_px: float = 10.0
    axis_font_size: float = 12.0
    axis_font_family: str = "monospace"
    char_width_ratio: float = 0.6
    grid_line_width: float = 0.5
    axis_line_width: float = 2.0
    curve_base_step: float = 0.02
    curve_margin: float = 1.0
    tangent_half_length: float = 5.0
    tangent_line_width: float = 2.0
    tangent_dot_radius_px: float = 4.0
    tangent_font_size: float = 16.0
    tangent_label_offset_px: Tuple[float, float] = (10.0, -10.0)
    tangent_label_padding_px: float = 5.0

    def __post_init__(self) -> None:
        """Validate that all metrics are usable."""
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("axis_font_family", "tangent_label_offset_px"):
                continue
            if f.name == "curve_margin":
                if value < 0:
                    raise ValueError("curve_margin must be >= 0")
                continue
            if not value > 0:
                raise ValueError(f"{f.name} must be > 0, got {value!r}")

    def measure_text(self, text: str, font_size: Optional[float] = None) -> float:
        """Estimated rendered width of ``text`` in pixels (monospace metrics)."""
        size = self.axis_font_size if font_size is None else font_size
        return len(text) * size * self.char_width_ratio
