"""Paint scenes with Plotly and export them as PNG.

Purpose
-------
:func:`scene_to_figure` converts a :class:`~graph_visualizer.scene.Scene` into
a ``plotly.graph_objects.Figure`` whose data coordinates are canvas pixels:
both axes are hidden, margins are zero, and the y range is inverted so pixel
``y`` grows downwards exactly like the scene coordinates.

:class:`Renderer` wraps scene construction and painting for one canvas and
adds rate-limited render logging and PNG export.

Important gotchas
-----------------
- Curves keep ``NaN`` gaps and are drawn with ``connectgaps=False``; Plotly
  serialises ``NaN`` as ``null``, which breaks the line.
- PNG export relies on Plotly's static image support (the ``kaleido``
  package, installed with the ``export`` extra). Without it
  :meth:`Renderer.export_png` raises :class:`ExportError`.

Logging
-------
Render passes are logged at INFO (at most once per second) and the visible
bounds at DEBUG (at most twice per second).
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import plotly.graph_objects as go

from .equation import Equation
from .hit_testing import TangentPoint
from .render_style import RenderStyle
from .scene import Circle, Line, Polyline, Rect, Scene, Text, build_scene
from .themes import ThemePalette
from .viewport import PixelSize, Viewport

__all__ = ["ExportError", "Renderer", "scene_to_figure", "figure_to_png"]

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

# Roles painted underneath the curves; everything else goes on top.
_BELOW_ROLES = frozenset({"background", "grid", "axis", "tick"})

_VALIGN = {"top": "top", "middle": "middle", "bottom": "bottom"}


class ExportError(RuntimeError):
    """Raised when the current raster cannot be exported as an image."""


def _layer(role: str) -> str:
    return "below" if role in _BELOW_ROLES else "above"


def _shape_for(item: Union[Rect, Line, Circle]) -> Dict[str, Any]:
    if isinstance(item, Line):
        return dict(
            type="line", xref="x", yref="y",
            x0=item.x0, y0=item.y0, x1=item.x1, y1=item.y1,
            line=dict(color=item.color, width=item.width, dash=item.dash),
            layer=_layer(item.role),
            name=item.role,
        )
    if isinstance(item, Rect):
        return dict(
            type="rect", xref="x", yref="y",
            x0=item.x, y0=item.y, x1=item.x + item.width, y1=item.y + item.height,
            fillcolor=item.fill, line=dict(width=0),
            layer=_layer(item.role),
            name=item.role,
        )
    return dict(
        type="circle", xref="x", yref="y",
        x0=item.x - item.radius, y0=item.y - item.radius,
        x1=item.x + item.radius, y1=item.y + item.radius,
        fillcolor=item.fill, line=dict(color=item.fill, width=0),
        layer=_layer(item.role),
        name=item.role,
    )


def _annotation_for(item: Text) -> Dict[str, Any]:
    text = f"<b>{item.text}</b>" if item.bold else item.text
    return dict(
        x=item.x, y=item.y, xref="x", yref="y",
        text=text, showarrow=False,
        xanchor=item.align, yanchor=_VALIGN.get(item.baseline, "middle"),
        font=dict(color=item.color, size=item.font_size, family=item.font_family),
        name=item.role,
    )


def _trace_for(item: Polyline) -> go.Scatter:
    return go.Scatter(
        x=list(item.xs),
        y=list(item.ys),
        mode="lines",
        line=dict(color=item.color, width=item.width, dash=item.dash),
        connectgaps=False,
        hoverinfo="skip",
        name=item.source_id or item.role,
        showlegend=False,
    )


def scene_to_figure(scene: Scene) -> go.Figure:
    """Paint ``scene`` onto a new Plotly figure sized to the canvas."""
    width, height = scene.pixel_size
    shapes: List[Dict[str, Any]] = []
    annotations: List[Dict[str, Any]] = []
    traces: List[go.Scatter] = []

    for item in scene.items:
        if isinstance(item, Polyline):
            traces.append(_trace_for(item))
        elif isinstance(item, Text):
            annotations.append(_annotation_for(item))
        else:
            shapes.append(_shape_for(item))

    fig = go.Figure(data=traces)
    fig.update_layout(
        width=width,
        height=height,
        autosize=False,
        margin=dict(l=0, r=0, t=0, b=0, pad=0),
        paper_bgcolor=scene.palette.background,
        plot_bgcolor=scene.palette.background,
        showlegend=False,
        dragmode=False,
        xaxis=dict(range=[0, width], visible=False, fixedrange=True),
        yaxis=dict(range=[height, 0], visible=False, fixedrange=True),
        shapes=shapes,
        annotations=annotations,
    )
    return fig


def figure_to_png(fig: go.Figure, *, device_pixel_ratio: float = 1.0) -> bytes:
    """Return ``fig`` as PNG bytes scaled by ``device_pixel_ratio``.

    Raises
    ------
    ExportError
        If static image export is unavailable or fails.
    """
    if not device_pixel_ratio > 0:
        raise ValueError(f"device_pixel_ratio must be > 0, got {device_pixel_ratio!r}")
    try:
        return fig.to_image(
            format="png",
            width=fig.layout.width,
            height=fig.layout.height,
            scale=device_pixel_ratio,
        )
    except (ImportError, ValueError, RuntimeError) as exc:
        raise ExportError(f"Could not export graph: {exc}") from exc


class Renderer:
    """Build and paint frames for one canvas.

    Parameters
    ----------
    style : RenderStyle or None, optional
        Pixel metrics shared by every frame.
    """

    def __init__(self, style: Optional[RenderStyle] = None) -> None:
        self.style = style or RenderStyle()
        self.render_count = 0
        self._render_info_last_log_t = 0.0
        self._render_debug_last_log_t = 0.0

    def build_scene(
        self,
        equations: Sequence[Equation],
        viewport: Viewport,
        pixel_size: Union[PixelSize, Tuple[float, float]],
        *,
        grid_enabled: bool = True,
        theme: Union[str, ThemePalette, None] = "light",
        tangent: Optional[TangentPoint] = None,
        reason: str = "manual",
    ) -> Scene:
        """Lay out one frame with this renderer's style."""
        scene = build_scene(
            equations, viewport, pixel_size,
            grid_enabled=grid_enabled, theme=theme, tangent=tangent, style=self.style,
        )
        self.render_count += 1
        self._log_render(reason, scene, len(equations))
        return scene

    def render(
        self,
        equations: Sequence[Equation],
        viewport: Viewport,
        pixel_size: Union[PixelSize, Tuple[float, float]],
        *,
        grid_enabled: bool = True,
        theme: Union[str, ThemePalette, None] = "light",
        tangent: Optional[TangentPoint] = None,
        reason: str = "manual",
    ) -> go.Figure:
        """Lay out and paint one frame.

        Returns
        -------
        plotly.graph_objects.Figure
            Figure sized to ``pixel_size`` in CSS pixels.
        """
        scene = self.build_scene(
            equations, viewport, pixel_size,
            grid_enabled=grid_enabled, theme=theme, tangent=tangent, reason=reason,
        )
        return scene_to_figure(scene)

    def export_png(self, fig: go.Figure, *, device_pixel_ratio: float = 1.0) -> bytes:
        """Export a figure produced by :meth:`render` as PNG bytes."""
        return figure_to_png(fig, device_pixel_ratio=device_pixel_ratio)

    def _log_render(self, reason: str, scene: Scene, n_equations: int) -> None:
        """Log render information with rate-limiting."""
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info(f"render(reason={reason}) equations={n_equations}")

        if logger.isEnabledFor(logging.DEBUG) and (now - self._render_debug_last_log_t) > 0.5:
            self._render_debug_last_log_t = now
            logger.debug(f"bounds={tuple(scene.bounds)} items={len(scene.items)}")
