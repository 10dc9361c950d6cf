"""Click hit-testing against sampled curves and tangent construction.

A click selects the sampled curve point nearest to it (in graph space) across
all visible equations. If that point is close enough, the numeric derivative
there defines the tangent shown by the renderer.

Ties keep the earliest candidate: equations are scanned in list order and
samples left to right, and only a strictly smaller distance replaces the
current best.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .equation import Equation
from .numeric_operations import derivative
from .sampling import generate_points

__all__ = [
    "TangentPoint",
    "find_tangent_point",
    "tangent_segment",
    "HIT_WINDOW",
    "HIT_STEP",
    "HIT_MAX_DISTANCE",
]

HIT_WINDOW = 0.1
HIT_STEP = 0.01
HIT_MAX_DISTANCE = 0.5


@dataclass(frozen=True)
class TangentPoint:
    """Anchor of a displayed tangent line.

    Parameters
    ----------
    x, y : float
        Graph-space anchor on the curve.
    derivative : float
        Slope of the curve at ``x``.
    source_expression : str
        Expression the anchor belongs to.
    color : str
        Color of the source equation.
    """

    x: float
    y: float
    derivative: float
    source_expression: str
    color: str

    @property
    def intercept(self) -> float:
        return self.y - self.derivative * self.x

    def equation_label(self) -> str:
        """Tangent line as ``y = m x + b`` with two decimals."""
        m = self.derivative
        b = self.intercept
        sign = "-" if b < 0 and round(abs(b), 2) != 0 else "+"
        return f"y = {m:.2f}x {sign} {abs(b):.2f}"


def find_tangent_point(
    equations: Iterable[Equation],
    click: Tuple[float, float],
    *,
    window: float = HIT_WINDOW,
    step: float = HIT_STEP,
    max_distance: float = HIT_MAX_DISTANCE,
) -> Optional[TangentPoint]:
    """Return the tangent anchor nearest to ``click``, if any.

    Parameters
    ----------
    equations : iterable of Equation
        Candidate equations; hidden ones are skipped.
    click : (float, float)
        Click position in graph coordinates.
    window : float, optional
        Half-width of the x-range resampled around the click.
    step : float, optional
        Sampling step inside the window.
    max_distance : float, optional
        A nearest point at or beyond this distance selects nothing.

    Returns
    -------
    TangentPoint or None
        ``None`` when nothing is close enough or the derivative at the anchor
        is unavailable.
    """
    cx, cy = click
    best: Optional[Tuple[float, float, Equation]] = None
    best_distance = math.inf

    for eq in equations:
        if not eq.visible:
            continue
        for point in generate_points(eq.expression, cx - window, cx + window, step):
            if point.is_break:
                continue
            distance = math.hypot(point.x - cx, point.y - cy)
            if distance < best_distance:
                best_distance = distance
                best = (point.x, point.y, eq)

    if best is None or not best_distance < max_distance:
        return None

    x, y, eq = best
    slope = derivative(eq.expression, x)
    if slope is None:
        return None
    return TangentPoint(x=x, y=y, derivative=slope, source_expression=eq.expression, color=eq.color)


def tangent_segment(
    tangent: TangentPoint, half_length: float = 5.0
) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Graph-space end points of the tangent, ``half_length`` each side of the anchor."""
    m = tangent.derivative
    dx = half_length / math.sqrt(1.0 + m * m)
    dy = m * dx
    return (tangent.x - dx, tangent.y - dy), (tangent.x + dx, tangent.y + dy)
