"""Adaptive axis tick spacing and label culling.

Tick spacing starts from a power of two tied to the zoom factor and widens
until adjacent ticks are at least ``min_label_spacing_px`` apart, so ticks
never crowd at any zoom level. Labels are then culled individually when the
pixel gap to the next tick cannot fit them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from .render_style import RenderStyle
from .viewport import Bounds, PixelSize, graph_to_pixel

__all__ = [
    "AxisTick",
    "base_tick_step",
    "tick_step",
    "tick_values",
    "label_decimals",
    "format_tick_label",
    "compute_x_ticks",
    "compute_y_ticks",
]

_MAX_DECIMALS = 6


@dataclass(frozen=True)
class AxisTick:
    """One tick on an axis.

    ``position`` is the pixel coordinate along the axis (x for the horizontal
    axis, y for the vertical one).
    """

    value: float
    position: float
    label: str
    label_visible: bool


def base_tick_step(zoom: float) -> float:
    """Nearest power of two not above ``zoom``."""
    return 2.0 ** math.floor(math.log2(zoom))


def tick_step(zoom: float, span: float, pixel_extent: float, min_label_spacing: float = 60.0) -> float:
    """Tick spacing in graph units for an axis covering ``span`` over ``pixel_extent`` pixels."""
    return max(base_tick_step(zoom), span * min_label_spacing / pixel_extent)


def tick_values(lower: float, upper: float, step: float) -> List[float]:
    """Multiples of ``step`` inside ``[lower, upper]``.

    Values are computed as ``k * step`` for integer ``k`` so they do not drift.
    """
    if not step > 0:
        raise ValueError(f"Tick step must be positive, got {step!r}")
    first = math.ceil(lower / step - 1e-9)
    last = math.floor(upper / step + 1e-9)
    return [k * step for k in range(first, last + 1)]


def label_decimals(step: float) -> int:
    """Fewest decimals (up to 6) that print ``step`` exactly."""
    for decimals in range(_MAX_DECIMALS + 1):
        if abs(round(step, decimals) - step) <= 1e-9 * max(1.0, abs(step)):
            return decimals
    return _MAX_DECIMALS


def format_tick_label(value: float, step: float) -> str:
    """Format a tick value with the precision implied by ``step``.

    >>> format_tick_label(3.0, 1.5)
    '3'
    >>> format_tick_label(4.5, 1.5)
    '4.5'
    """
    text = f"{value:.{label_decimals(step)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def compute_x_ticks(bounds: Bounds, pixel_size: PixelSize, zoom: float, style: RenderStyle) -> List[AxisTick]:
    """Ticks along the horizontal axis with width-based label culling."""
    step = tick_step(zoom, bounds.width, pixel_size.width, style.min_label_spacing_px)
    gap = step / bounds.width * pixel_size.width
    ticks = []
    for value in tick_values(bounds.x_min, bounds.x_max, step):
        label = format_tick_label(value, step)
        position = graph_to_pixel((value, 0.0), bounds, pixel_size).x
        fits = gap > style.measure_text(label) + style.label_padding_px
        ticks.append(AxisTick(value, position, label, fits))
    return ticks


def compute_y_ticks(bounds: Bounds, pixel_size: PixelSize, zoom: float, style: RenderStyle) -> List[AxisTick]:
    """Ticks along the vertical axis with a fixed minimum label gap."""
    step = tick_step(zoom, bounds.height, pixel_size.height, style.min_label_spacing_px)
    gap = step / bounds.height * pixel_size.height
    ticks = []
    for value in tick_values(bounds.y_min, bounds.y_max, step):
        label = format_tick_label(value, step)
        position = graph_to_pixel((0.0, value), bounds, pixel_size).y
        ticks.append(AxisTick(value, position, label, gap > style.y_label_min_gap_px))
    return ticks
