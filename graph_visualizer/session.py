"""Host-side state for one graph canvas.

Purpose
-------
``GraphSession`` is the single owner of mutable plotting state: the equation
list, the viewport, canvas size, grid flag, theme and the current tangent. UI
events are routed through its methods, which delegate every computation to
the pure core (validation, viewport transforms, hit-testing, scene building)
and report viewport changes to registered callbacks.

Important gotchas
-----------------
- Any change to the equation list clears the current tangent.
- Dragging pans relative to the viewport captured by :meth:`begin_drag`, so
  each move event is independent of the previous one.
- Viewport callbacks that raise are reported with :func:`warnings.warn` and do
  not abort the update.

Examples
--------
>>> session = GraphSession((800, 600))
>>> result, eq = session.add_equation("x^2")
>>> result.is_valid
True
>>> session.zoom = 3.0
>>> session.zoom
2.0
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union, cast

import plotly.graph_objects as go

from .InputConvert import InputConvert
from .equation import Equation
from .expression_validation import ValidationResult, validate_expression
from .hit_testing import TangentPoint, find_tangent_point
from .render_style import DEFAULT_COLOR, EQUATION_STYLE_OPTIONS, RenderStyle, resolve_style_aliases
from .renderer import Renderer
from .scene import Scene
from .themes import THEMES, ThemeName
from .viewport import (
    ZOOM_STEP,
    PixelPoint,
    PixelSize,
    Viewport,
    compute_bounds,
    pan,
    pixel_to_graph,
    with_zoom,
    zoom_at,
    zoom_by,
)

__all__ = ["GraphSession", "ViewportCallback", "default_export_filename"]

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

ViewportCallback = Callable[[Viewport], None]
PixelLike = Tuple[float, float]


@dataclass(frozen=True)
class _DragState:
    start: PixelPoint
    start_viewport: Viewport


def default_export_filename(now: Optional[datetime] = None) -> str:
    """Return ``graph-export-<ISO timestamp>.png``."""
    stamp = (now or datetime.now()).isoformat(timespec="seconds").replace(":", "-")
    return f"graph-export-{stamp}.png"


class GraphSession:
    """Mutable state of one graph canvas.

    Parameters
    ----------
    pixel_size : (width, height), optional
        Canvas size in CSS pixels.
    theme : {"light", "dark", "blue"}, optional
        Palette name.
    grid_enabled : bool, optional
        Draw unit grid lines.
    device_pixel_ratio : float, optional
        Raster scale used by :meth:`export_png`.
    on_viewport_change : callable or None, optional
        Called with the new :class:`Viewport` after every pan/zoom/reset.
    style : RenderStyle or None, optional
        Pixel metrics for rendering.
    """

    def __init__(
        self,
        pixel_size: Union[PixelSize, PixelLike] = (800, 600),
        *,
        theme: ThemeName = "dark",
        grid_enabled: bool = True,
        device_pixel_ratio: float = 1.0,
        on_viewport_change: Optional[ViewportCallback] = None,
        style: Optional[RenderStyle] = None,
    ) -> None:
        self._pixel_size = PixelSize.coerce(pixel_size)
        self._viewport = Viewport()
        self._equations: List[Equation] = []
        self._tangent: Optional[TangentPoint] = None
        self._drag: Optional[_DragState] = None
        self._viewport_callbacks: List[ViewportCallback] = []
        self._renderer = Renderer(style)
        self._theme: ThemeName = "dark"
        self.theme = theme
        self.grid_enabled = bool(grid_enabled)
        self.device_pixel_ratio = device_pixel_ratio
        if on_viewport_change is not None:
            self.add_viewport_callback(on_viewport_change)

    # ------------------------------------------------------------------
    # Simple state
    # ------------------------------------------------------------------

    @property
    def equations(self) -> Tuple[Equation, ...]:
        """Current equations in paint order (read-only view)."""
        return tuple(self._equations)

    @property
    def tangent(self) -> Optional[TangentPoint]:
        return self._tangent

    @property
    def pixel_size(self) -> PixelSize:
        return self._pixel_size

    @property
    def renderer(self) -> Renderer:
        return self._renderer

    @property
    def theme(self) -> ThemeName:
        return self._theme

    @theme.setter
    def theme(self, value: str) -> None:
        key = str(value).lower()
        if key not in THEMES:
            raise ValueError(f"theme must be one of {sorted(THEMES)}, got {value!r}")
        self._theme = cast(ThemeName, key)

    @property
    def device_pixel_ratio(self) -> float:
        return self._device_pixel_ratio

    @device_pixel_ratio.setter
    def device_pixel_ratio(self, value: Union[int, float, str]) -> None:
        ratio = InputConvert(value, float)
        if not ratio > 0:
            raise ValueError(f"device_pixel_ratio must be > 0, got {value!r}")
        self._device_pixel_ratio = ratio

    def resize(self, width: Union[int, float], height: Union[int, float]) -> None:
        """Update the canvas size (e.g. after the container was resized)."""
        self._pixel_size = PixelSize.coerce((width, height))

    # ------------------------------------------------------------------
    # Equations
    # ------------------------------------------------------------------

    @staticmethod
    def equation_style_options() -> Dict[str, str]:
        """Return the style keywords accepted by :meth:`add_equation`.

        Returns
        -------
        dict[str, str]
            Mapping of option names to short descriptions.
        """
        return dict(EQUATION_STYLE_OPTIONS)

    def add_equation(
        self,
        expression: str,
        *,
        color: str = DEFAULT_COLOR,
        line_width: Optional[Union[int, float]] = None,
        width: Optional[Union[int, float]] = None,
        line_style: str = "solid",
        visible: bool = True,
    ) -> Tuple[ValidationResult, Optional[Equation]]:
        """Validate ``expression`` and append it to the equation list.

        Returns
        -------
        (ValidationResult, Equation or None)
            The validation outcome and, when valid, the new equation. Invalid
            input leaves the session unchanged.
        """
        result = validate_expression(expression)
        if not result.is_valid:
            logger.info("Rejected equation %r: %s", expression, result.error)
            return result, None

        line_width = resolve_style_aliases(line_width=line_width, width=width)
        kwargs = {} if line_width is None else {"line_width": line_width}
        equation = Equation(
            expression, color=color, visible=visible, line_style=line_style, **kwargs
        )
        self._equations.append(equation)
        self._tangent = None
        return result, equation

    def _index_of(self, equation_id: str) -> int:
        for index, eq in enumerate(self._equations):
            if eq.id == equation_id:
                return index
        raise KeyError(f"Unknown equation: {equation_id}")

    def get_equation(self, equation_id: str) -> Equation:
        return self._equations[self._index_of(equation_id)]

    def remove_equation(self, equation_id: str) -> Equation:
        """Remove and return the equation with ``equation_id``."""
        removed = self._equations.pop(self._index_of(equation_id))
        self._tangent = None
        return removed

    def clear_equations(self) -> None:
        self._equations.clear()
        self._tangent = None

    def set_visible(self, equation_id: str, visible: bool) -> None:
        self.get_equation(equation_id).visible = bool(visible)
        self._tangent = None

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def add_viewport_callback(self, callback: ViewportCallback) -> None:
        if not callable(callback):
            raise TypeError("Viewport callback must be callable")
        self._viewport_callbacks.append(callback)

    def remove_viewport_callback(self, callback: ViewportCallback) -> None:
        self._viewport_callbacks.remove(callback)

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @viewport.setter
    def viewport(self, value: Viewport) -> None:
        if not isinstance(value, Viewport):
            raise TypeError(f"Expected a Viewport, got {type(value).__name__}")
        self._set_viewport(value)

    def _set_viewport(self, value: Viewport) -> None:
        if value == self._viewport:
            return
        self._viewport = value
        for callback in list(self._viewport_callbacks):
            try:
                callback(value)
            except Exception as e:  # callback boundary
                warnings.warn(f"Viewport callback {callback!r} failed: {e}")

    @property
    def zoom(self) -> float:
        return self._viewport.zoom

    @zoom.setter
    def zoom(self, value: Union[int, float, str]) -> None:
        self._set_viewport(with_zoom(self._viewport, value))

    def zoom_in(self, step: float = ZOOM_STEP) -> None:
        self._set_viewport(zoom_by(self._viewport, step))

    def zoom_out(self, step: float = ZOOM_STEP) -> None:
        self._set_viewport(zoom_by(self._viewport, -step))

    def zoom_at(self, zoom: Union[int, float, str], pixel: PixelLike) -> None:
        """Zoom keeping the graph point under ``pixel`` fixed."""
        self._set_viewport(zoom_at(self._viewport, zoom, pixel, self._pixel_size))

    def reset_view(self) -> None:
        """Return to the default center and zoom."""
        self._drag = None
        self._set_viewport(Viewport())

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    def begin_drag(self, pixel: PixelLike) -> None:
        self._drag = _DragState(PixelPoint(*pixel), self._viewport)

    def drag_to(self, pixel: PixelLike) -> None:
        """Pan so the point grabbed at :meth:`begin_drag` follows the cursor."""
        if self._drag is None:
            return
        px, py = pixel
        delta = (px - self._drag.start.x, py - self._drag.start.y)
        start = self._drag.start_viewport
        # Zoom may have changed mid-drag; pan with the current one.
        base = with_zoom(start, self._viewport.zoom)
        self._set_viewport(pan(base, delta, self._pixel_size))

    def end_drag(self) -> None:
        self._drag = None

    def click(self, pixel: PixelLike) -> Optional[TangentPoint]:
        """Select (or clear) the tangent nearest to the clicked pixel."""
        bounds = compute_bounds(self._viewport, self._pixel_size)
        graph = pixel_to_graph(pixel, bounds, self._pixel_size)
        self._tangent = find_tangent_point(self._equations, graph)
        return self._tangent

    def clear_tangent(self) -> None:
        self._tangent = None

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def scene(self, reason: str = "manual") -> Scene:
        """Lay out the current frame without painting it."""
        return self._renderer.build_scene(
            self._equations, self._viewport, self._pixel_size,
            grid_enabled=self.grid_enabled, theme=self._theme,
            tangent=self._tangent, reason=reason,
        )

    def render(self, reason: str = "manual") -> go.Figure:
        """Lay out and paint the current frame."""
        return self._renderer.render(
            self._equations, self._viewport, self._pixel_size,
            grid_enabled=self.grid_enabled, theme=self._theme,
            tangent=self._tangent, reason=reason,
        )

    def export_png(self, path: Optional[Union[str, Path]] = None) -> bytes:
        """Render the current frame as PNG bytes, optionally writing them to ``path``.

        If ``path`` is a directory, the file is named by
        :func:`default_export_filename`.

        Raises
        ------
        ExportError
            If static image export is unavailable.
        """
        data = self._renderer.export_png(
            self.render(reason="export"), device_pixel_ratio=self._device_pixel_ratio
        )
        if path is not None:
            target = Path(path)
            if target.is_dir():
                target = target / default_export_filename()
            target.write_bytes(data)
            logger.info("Exported graph to %s", target)
        return data
