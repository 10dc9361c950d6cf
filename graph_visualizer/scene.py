"""Backend-neutral scene construction for one render pass.

Purpose
-------
:func:`build_scene` turns the host state (equations, viewport, canvas size,
grid flag, theme, tangent) into a flat display list of pixel-space primitives.
It performs all layout work: bounds, grid, axes with adaptive ticks and label
culling, curve sampling and the tangent overlay. Painting the list is the job
of :mod:`graph_visualizer.renderer`.

Architecture notes
------------------
The builder is stateless and side-effect free, so the same inputs always
produce an equal scene. Items are appended in paint order (background, grid,
axes, curves, tangent) and carry a ``role`` tag that tests and backends use to
select them.

Examples
--------
>>> from graph_visualizer.equation import Equation
>>> from graph_visualizer.viewport import PixelSize, Viewport
>>> scene = build_scene([Equation("x^2")], Viewport(), PixelSize(800, 600))
>>> len(scene.items_by_role("curve"))
1
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .axis_ticks import compute_x_ticks, compute_y_ticks
from .equation import Equation
from .hit_testing import TangentPoint, tangent_segment
from .render_style import RenderStyle
from .sampling import MAX_POINTS, generate_points
from .themes import ThemePalette, resolve_theme
from .viewport import Bounds, PixelSize, Viewport, compute_bounds, graph_to_pixel

__all__ = [
    "Rect",
    "Line",
    "Polyline",
    "Text",
    "Circle",
    "Scene",
    "SceneItem",
    "build_scene",
    "curve_sample_range",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    role: str = "background"


@dataclass(frozen=True)
class Line:
    x0: float
    y0: float
    x1: float
    y1: float
    color: str
    width: float
    role: str
    dash: str = "solid"


@dataclass(frozen=True)
class Polyline:
    """Connected pixel-space path; ``NaN`` coordinates break the path."""

    xs: Tuple[float, ...]
    ys: Tuple[float, ...]
    color: str
    width: float
    dash: str = "solid"
    role: str = "curve"
    source_id: str = ""


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    color: str
    font_size: float
    font_family: str
    role: str
    bold: bool = False
    align: str = "center"  # "left", "center", "right"
    baseline: str = "middle"  # "top", "middle", "bottom"


@dataclass(frozen=True)
class Circle:
    x: float
    y: float
    radius: float
    fill: str
    role: str


SceneItem = Union[Rect, Line, Polyline, Text, Circle]


@dataclass
class Scene:
    """Display list for one render pass.

    Parameters
    ----------
    pixel_size : PixelSize
        Canvas size the coordinates refer to.
    bounds : Bounds
        Visible graph rectangle used for the projection.
    palette : ThemePalette
        Colours the scene was built with.
    items : list
        Primitives in paint order.
    """

    pixel_size: PixelSize
    bounds: Bounds
    palette: ThemePalette
    items: List[SceneItem] = field(default_factory=list)

    def add(self, item: SceneItem) -> None:
        self.items.append(item)

    def items_by_role(self, role: str) -> List[SceneItem]:
        return [item for item in self.items if item.role == role]


def curve_sample_range(bounds: Bounds, zoom: float, style: RenderStyle) -> Tuple[float, float, float]:
    """Return ``(x_min, x_max, step)`` used to sample curves for ``bounds``.

    The step is the zoom-scaled base step, widened when needed so the whole
    range fits in the sampler's point cap.
    """
    x_lo = bounds.x_min - style.curve_margin
    x_hi = bounds.x_max + style.curve_margin
    step = max(style.curve_base_step / zoom, (x_hi - x_lo) / (MAX_POINTS - 1))
    return x_lo, x_hi, step


def _add_grid(scene: Scene, style: RenderStyle) -> None:
    bounds, size, color = scene.bounds, scene.pixel_size, scene.palette.grid
    for gx in range(math.ceil(bounds.x_min), math.floor(bounds.x_max) + 1):
        px = graph_to_pixel((gx, 0.0), bounds, size).x
        scene.add(Line(px, 0.0, px, size.height, color, style.grid_line_width, "grid"))
    for gy in range(math.ceil(bounds.y_min), math.floor(bounds.y_max) + 1):
        py = graph_to_pixel((0.0, gy), bounds, size).y
        scene.add(Line(0.0, py, size.width, py, color, style.grid_line_width, "grid"))


def _add_axes(scene: Scene, zoom: float, style: RenderStyle) -> None:
    bounds, size, palette = scene.bounds, scene.pixel_size, scene.palette
    half = style.tick_half_length_px

    def _label(x: float, y: float, text: str, align: str) -> Text:
        return Text(
            x, y, text, palette.text, style.axis_font_size, style.axis_font_family,
            "tick_label", bold=True, align=align,
        )

    if bounds.contains_y(0.0):
        y0 = graph_to_pixel((0.0, 0.0), bounds, size).y
        scene.add(Line(0.0, y0, size.width, y0, palette.axis, style.axis_line_width, "axis"))
        for tick in compute_x_ticks(bounds, size, zoom, style):
            scene.add(Line(tick.position, y0 - half, tick.position, y0 + half,
                           palette.axis, style.axis_line_width, "tick"))
            if tick.label_visible:
                scene.add(_label(tick.position, y0 + style.x_label_offset_px, tick.label, "center"))

    if bounds.contains_x(0.0):
        x0 = graph_to_pixel((0.0, 0.0), bounds, size).x
        scene.add(Line(x0, 0.0, x0, size.height, palette.axis, style.axis_line_width, "axis"))
        for tick in compute_y_ticks(bounds, size, zoom, style):
            scene.add(Line(x0 - half, tick.position, x0 + half, tick.position,
                           palette.axis, style.axis_line_width, "tick"))
            if tick.label_visible:
                scene.add(_label(x0 - style.y_label_offset_px, tick.position, tick.label, "right"))


def _add_curve(scene: Scene, eq: Equation, sample_range: Tuple[float, float, float]) -> None:
    points = generate_points(eq.expression, *sample_range)
    if len(points) < 2:
        return
    xs: List[float] = []
    ys: List[float] = []
    for point in points:
        if point.is_break:
            xs.append(math.nan)
            ys.append(math.nan)
            continue
        px, py = graph_to_pixel(point, scene.bounds, scene.pixel_size)
        xs.append(px)
        ys.append(py)
    scene.add(Polyline(tuple(xs), tuple(ys), eq.color, eq.line_width, eq.dash, source_id=eq.id))


def _add_tangent(scene: Scene, tangent: TangentPoint, style: RenderStyle) -> None:
    bounds, size = scene.bounds, scene.pixel_size
    start, end = tangent_segment(tangent, style.tangent_half_length)
    p0 = graph_to_pixel(start, bounds, size)
    p1 = graph_to_pixel(end, bounds, size)
    scene.add(Line(p0.x, p0.y, p1.x, p1.y, tangent.color, style.tangent_line_width, "tangent", dash="dot"))

    anchor = graph_to_pixel((tangent.x, tangent.y), bounds, size)
    scene.add(Circle(anchor.x, anchor.y, style.tangent_dot_radius_px, tangent.color, "tangent_point"))

    label = tangent.equation_label()
    font = style.tangent_font_size
    pad = style.tangent_label_padding_px
    dx, dy = style.tangent_label_offset_px
    tx, ty = anchor.x + dx, anchor.y + dy
    text_width = style.measure_text(label, font)
    scene.add(Rect(tx - pad, ty - font - pad, text_width + 2 * pad, font + 2 * pad,
                   scene.palette.background, role="tangent_label_box"))
    scene.add(Text(tx, ty, label, tangent.color, font, style.axis_font_family,
                   "tangent_label", align="left", baseline="bottom"))


def build_scene(
    equations: Sequence[Equation],
    viewport: Viewport,
    pixel_size: Union[PixelSize, Tuple[float, float]],
    *,
    grid_enabled: bool = True,
    theme: Union[str, ThemePalette, None] = "light",
    tangent: Optional[TangentPoint] = None,
    style: Optional[RenderStyle] = None,
) -> Scene:
    """Lay out one frame.

    Parameters
    ----------
    equations : sequence of Equation
        Equations in paint order; hidden ones are skipped.
    viewport : Viewport
        Current pan/zoom state.
    pixel_size : PixelSize or (width, height)
        Canvas size in CSS pixels.
    grid_enabled : bool, optional
        Draw unit grid lines.
    theme : str or ThemePalette, optional
        Palette name (``light``, ``dark``, ``blue``) or explicit palette.
    tangent : TangentPoint or None, optional
        Tangent overlay to draw. Ignored when ``equations`` is empty.
    style : RenderStyle or None, optional
        Pixel metrics; defaults to ``RenderStyle()``.

    Returns
    -------
    Scene
        Display list in paint order.
    """
    style = style or RenderStyle()
    size = PixelSize.coerce(pixel_size)
    bounds = compute_bounds(viewport, size)
    scene = Scene(pixel_size=size, bounds=bounds, palette=resolve_theme(theme))

    scene.add(Rect(0.0, 0.0, size.width, size.height, scene.palette.background))
    if grid_enabled:
        _add_grid(scene, style)
    _add_axes(scene, viewport.zoom, style)

    sample_range = curve_sample_range(bounds, viewport.zoom, style)
    for eq in equations:
        if eq.visible:
            _add_curve(scene, eq, sample_range)

    if tangent is not None and equations:
        _add_tangent(scene, tangent, style)

    logger.debug(
        "scene built: bounds=%s items=%d equations=%d", tuple(bounds), len(scene.items), len(equations)
    )
    return scene
