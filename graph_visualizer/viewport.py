"""Viewport state and graph/pixel coordinate transforms.

Purpose
-------
A :class:`Viewport` is the pan/zoom state of the canvas: the graph-space point
at the canvas center and a zoom factor. Everything else (visible bounds, pixel
positions) is derived from it together with the canvas :class:`PixelSize` on
every render and never stored.

Concepts
--------
- Visible width is ``BASE_VIEW_WIDTH / zoom`` graph units; visible height
  follows the canvas aspect ratio.
- Pixel ``x`` grows to the right, pixel ``y`` grows downwards, so graph ``y``
  is inverted when projected.
- Zoom is clamped to ``[MIN_ZOOM, MAX_ZOOM]`` by the constructor and by every
  helper that returns a new viewport.

All helpers are pure: they return new frozen objects and never mutate their
inputs.

Examples
--------
>>> vp = Viewport()
>>> b = compute_bounds(vp, PixelSize(800, 600))
>>> (b.x_min, b.x_max, b.y_min, b.y_max)
(-10.0, 10.0, -7.5, 7.5)
>>> graph_to_pixel(GraphPoint(0, 0), b, PixelSize(800, 600))
PixelPoint(x=400.0, y=300.0)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import NamedTuple, Tuple, Union

from .InputConvert import InputConvert

__all__ = [
    "GraphPoint",
    "PixelPoint",
    "PixelSize",
    "Bounds",
    "Viewport",
    "MIN_ZOOM",
    "MAX_ZOOM",
    "DEFAULT_ZOOM",
    "BASE_VIEW_WIDTH",
    "ZOOM_STEP",
    "clamp_zoom",
    "compute_bounds",
    "graph_to_pixel",
    "pixel_to_graph",
    "pan",
    "with_zoom",
    "zoom_by",
    "zoom_at",
]

MIN_ZOOM = 0.5
MAX_ZOOM = 2.0
DEFAULT_ZOOM = 1.0
BASE_VIEW_WIDTH = 20.0
ZOOM_STEP = 0.1

NumberLike = Union[int, float, str]


class GraphPoint(NamedTuple):
    x: float
    y: float


class PixelPoint(NamedTuple):
    x: float
    y: float


class PixelSize(NamedTuple):
    """Canvas size in CSS pixels."""

    width: float
    height: float

    @classmethod
    def coerce(cls, value: Union["PixelSize", Tuple[NumberLike, NumberLike]]) -> "PixelSize":
        """Return ``value`` as a validated ``PixelSize``.

        Raises
        ------
        ValueError
            If either dimension is not a positive finite number.
        """
        width, height = value
        size = cls(InputConvert(width, float), InputConvert(height, float))
        if not (size.width > 0 and size.height > 0):
            raise ValueError(f"Canvas size must be positive, got {tuple(size)!r}")
        if not (math.isfinite(size.width) and math.isfinite(size.height)):
            raise ValueError(f"Canvas size must be finite, got {tuple(size)!r}")
        return size


class Bounds(NamedTuple):
    """Visible rectangle of graph space."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def contains_x(self, x: float) -> bool:
        return self.x_min <= x <= self.x_max

    def contains_y(self, y: float) -> bool:
        return self.y_min <= y <= self.y_max


def clamp_zoom(zoom: NumberLike) -> float:
    """Clamp ``zoom`` into ``[MIN_ZOOM, MAX_ZOOM]``."""
    value = InputConvert(zoom, float)
    if math.isnan(value):
        raise ValueError("Zoom must be a number, got NaN")
    return min(MAX_ZOOM, max(MIN_ZOOM, value))


@dataclass(frozen=True)
class Viewport:
    """Pan/zoom state of the canvas.

    Parameters
    ----------
    center : GraphPoint
        Graph-space point shown at the canvas center.
    zoom : float
        Zoom factor; clamped to ``[MIN_ZOOM, MAX_ZOOM]`` on construction.
    """

    center: GraphPoint = field(default_factory=lambda: GraphPoint(0.0, 0.0))
    zoom: float = DEFAULT_ZOOM

    def __post_init__(self) -> None:
        cx, cy = self.center
        object.__setattr__(
            self, "center", GraphPoint(InputConvert(cx, float), InputConvert(cy, float))
        )
        object.__setattr__(self, "zoom", clamp_zoom(self.zoom))

    @property
    def view_width(self) -> float:
        return BASE_VIEW_WIDTH / self.zoom


def compute_bounds(viewport: Viewport, pixel_size: PixelSize) -> Bounds:
    """Return the visible graph rectangle for ``viewport`` on a canvas of ``pixel_size``."""
    width, height = pixel_size
    view_width = viewport.view_width
    view_height = view_width * (height / width)
    cx, cy = viewport.center
    return Bounds(
        x_min=cx - view_width / 2,
        x_max=cx + view_width / 2,
        y_min=cy - view_height / 2,
        y_max=cy + view_height / 2,
    )


def graph_to_pixel(point: Tuple[float, float], bounds: Bounds, pixel_size: PixelSize) -> PixelPoint:
    """Project a graph-space point to pixel space (y axis inverted)."""
    gx, gy = point
    width, height = pixel_size
    px = (gx - bounds.x_min) / bounds.width * width
    py = height - (gy - bounds.y_min) / bounds.height * height
    return PixelPoint(px, py)


def pixel_to_graph(point: Tuple[float, float], bounds: Bounds, pixel_size: PixelSize) -> GraphPoint:
    """Exact inverse of :func:`graph_to_pixel`."""
    px, py = point
    width, height = pixel_size
    gx = bounds.x_min + (px / width) * bounds.width
    gy = bounds.y_max - (py / height) * bounds.height
    return GraphPoint(gx, gy)


def pan(viewport: Viewport, delta: Tuple[float, float], pixel_size: PixelSize) -> Viewport:
    """Shift ``viewport`` by a pixel drag of ``delta = (dx, dy)``.

    The graph point under the cursor when the drag started stays under the
    cursor: the center moves by the drag distance converted to graph units,
    opposite to the drag horizontally and along it vertically (pixel ``y``
    points down). Zoom is unchanged.
    """
    dx, dy = delta
    width, _height = pixel_size
    # Graph units per pixel; identical on both axes since height follows aspect.
    scale = viewport.view_width / width
    cx, cy = viewport.center
    return replace(viewport, center=GraphPoint(cx - dx * scale, cy + dy * scale))


def with_zoom(viewport: Viewport, zoom: NumberLike) -> Viewport:
    """Return ``viewport`` with ``zoom`` (clamped)."""
    return replace(viewport, zoom=clamp_zoom(zoom))


def zoom_by(viewport: Viewport, delta: float = ZOOM_STEP) -> Viewport:
    """Add ``delta`` to the zoom factor, clamping the result."""
    # Round so repeated +/-0.1 steps land on the slider grid.
    return with_zoom(viewport, round(viewport.zoom + delta, 10))


def zoom_at(
    viewport: Viewport,
    zoom: NumberLike,
    pixel: Tuple[float, float],
    pixel_size: PixelSize,
) -> Viewport:
    """Zoom to ``zoom`` keeping the graph point under ``pixel`` in place."""
    before = compute_bounds(viewport, pixel_size)
    anchor = pixel_to_graph(pixel, before, pixel_size)
    zoomed = with_zoom(viewport, zoom)
    after = compute_bounds(zoomed, pixel_size)
    moved = pixel_to_graph(pixel, after, pixel_size)
    cx, cy = zoomed.center
    return replace(
        zoomed, center=GraphPoint(cx + anchor.x - moved.x, cy + anchor.y - moved.y)
    )
