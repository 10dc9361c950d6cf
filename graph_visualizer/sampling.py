"""Discontinuity-aware sampling of expressions into polyline points.

:func:`generate_points` walks ``[x_min, x_max]`` at a fixed step and returns
the points a renderer connects into a polyline. Two kinds of samples end a
segment:

- invalid samples (``NaN`` or ``|y| > DISCONTINUITY_THRESHOLD``) are dropped,
  and a single break marker at the first dropped ``x`` is emitted before the
  next valid point;
- a jump larger than the threshold between two consecutive valid values emits
  a break marker at the current ``x`` before the point itself.

A break marker is a :class:`SamplePoint` whose ``y`` is ``NaN``. Markers are
never the first or last element of the result.

Important gotchas
-----------------
- The output is capped at ``MAX_POINTS`` points (markers included). Very small
  steps over wide ranges therefore truncate the right end of the curve.
- Evaluation itself is bounded by ``max_samples`` so an expression that is
  invalid almost everywhere cannot stall a render pass.
"""

from __future__ import annotations

import logging
import math
from typing import List, NamedTuple, Optional

import numpy as np

from .ParseExpression import ExpressionParseError
from .numeric_operations import compile_expression

__all__ = [
    "SamplePoint",
    "generate_points",
    "split_segments",
    "MAX_POINTS",
    "DISCONTINUITY_THRESHOLD",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

MAX_POINTS = 1000
DISCONTINUITY_THRESHOLD = 1e6
# Relative slack so that x_max is still sampled after float rounding.
_RANGE_TOLERANCE = 1e-9


class SamplePoint(NamedTuple):
    """One sampled ``(x, y)`` pair; ``y`` is ``NaN`` for a break marker."""

    x: float
    y: float

    @property
    def is_break(self) -> bool:
        return math.isnan(self.y)


def _sample_count(x_min: float, x_max: float, step: float, limit: int) -> int:
    """Number of grid positions in ``[x_min, x_max]``, at most ``limit``."""
    # The span of two finite floats can overflow to inf.
    intervals = (x_max - x_min) / step + _RANGE_TOLERANCE
    if not math.isfinite(intervals) or intervals >= limit:
        return limit
    return min(int(math.floor(intervals)) + 1, limit)


def generate_points(
    expression: str,
    x_min: float,
    x_max: float,
    step: float,
    *,
    max_points: int = MAX_POINTS,
    max_samples: Optional[int] = None,
    threshold: float = DISCONTINUITY_THRESHOLD,
) -> List[SamplePoint]:
    """Sample ``expression`` over ``[x_min, x_max]`` with breaks at discontinuities.

    Parameters
    ----------
    expression : str
        Expression in ``x``. Empty or whitespace-only input yields ``[]``.
    x_min, x_max : float
        Inclusive sampling range.
    step : float
        Distance between samples. Non-positive steps yield ``[]``.
    max_points : int, optional
        Cap on the number of returned points, markers included.
    max_samples : int or None, optional
        Cap on the number of evaluated samples. Defaults to
        ``100 * max_points``.
    threshold : float, optional
        Magnitude above which a value, or a jump between two values, counts
        as a discontinuity.

    Returns
    -------
    list[SamplePoint]
        Points in non-decreasing ``x`` order.

    Examples
    --------
    >>> [tuple(p) for p in generate_points("x^2", -2, 2, 1)]
    [(-2.0, 4.0), (-1.0, 1.0), (0.0, 0.0), (1.0, 1.0), (2.0, 4.0)]
    """
    if not isinstance(expression, str) or not expression.strip():
        return []
    if max_points < 1:
        raise ValueError(f"max_points must be >= 1, got {max_points!r}")
    try:
        x_min, x_max, step = float(x_min), float(x_max), float(step)
    except (TypeError, ValueError):
        return []
    if not (math.isfinite(x_min) and math.isfinite(x_max) and math.isfinite(step)):
        return []
    if step <= 0 or x_min > x_max:
        return []

    try:
        compiled = compile_expression(expression)
    except ExpressionParseError as exc:
        logger.debug("Cannot sample %r: %s", expression, exc)
        return []

    budget = max_samples if max_samples is not None else 100 * max_points
    total = _sample_count(x_min, x_max, step, budget)

    points: List[SamplePoint] = []
    previous_y: Optional[float] = None
    pending_break: Optional[float] = None

    for start in range(0, total, max_points):
        indices = np.arange(start, min(start + max_points, total), dtype=float)
        with np.errstate(over="ignore"):
            xs = x_min + indices * step
        ys = compiled(xs)
        for x, y in zip(xs.tolist(), ys.tolist()):
            if math.isnan(y) or abs(y) > threshold:
                if previous_y is not None:
                    pending_break = x
                previous_y = None
                continue

            break_x = pending_break
            if break_x is None and previous_y is not None and abs(y - previous_y) > threshold:
                break_x = x

            needed = 2 if break_x is not None else 1
            if len(points) + needed > max_points:
                return points
            if break_x is not None:
                points.append(SamplePoint(break_x, math.nan))
            points.append(SamplePoint(x, y))
            previous_y = y
            pending_break = None

    return points


def split_segments(points: List[SamplePoint]) -> List[List[SamplePoint]]:
    """Split ``points`` at break markers into connected runs.

    Empty runs are dropped, so the result contains only drawable segments.
    """
    segments: List[List[SamplePoint]] = []
    current: List[SamplePoint] = []
    for point in points:
        if point.is_break:
            if current:
                segments.append(current)
            current = []
        else:
            current.append(point)
    if current:
        segments.append(current)
    return segments
