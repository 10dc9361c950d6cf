"""Caller-owned equation records.

An :class:`Equation` pairs an expression string with its display attributes.
The numeric core only reads ``expression`` and ``visible``; colour and stroke
attributes are passed through to the renderer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from .InputConvert import InputConvert
from .render_style import DEFAULT_COLOR, DEFAULT_LINE_WIDTH, resolve_line_style

__all__ = ["Equation", "new_equation_id"]


def new_equation_id() -> str:
    """Return a fresh random equation identifier."""
    return uuid.uuid4().hex


@dataclass
class Equation:
    """One plotted expression and its style.

    Parameters
    ----------
    expression : str
        Expression in ``x``; stored stripped.
    color : str
        Line color (CSS-like string).
    visible : bool
        Hidden equations are neither drawn nor hit-tested.
    line_width : float
        Stroke width in pixels (> 0).
    line_style : {"solid", "dashed", "dotted"}
        Stroke pattern.
    id : str
        Stable identifier; generated when omitted.
    """

    expression: str
    color: str = DEFAULT_COLOR
    visible: bool = True
    line_width: float = DEFAULT_LINE_WIDTH
    line_style: str = "solid"
    id: str = field(default_factory=new_equation_id)

    def __post_init__(self) -> None:
        if not isinstance(self.expression, str):
            raise TypeError(f"expression must be a string, got {type(self.expression).__name__}")
        self.expression = self.expression.strip()
        self.line_width = InputConvert(self.line_width, float)
        if not self.line_width > 0:
            raise ValueError(f"line_width must be > 0, got {self.line_width!r}")
        resolve_line_style(self.line_style)
        self.visible = bool(self.visible)

    @property
    def dash(self) -> str:
        """Plotly dash pattern for :attr:`line_style`."""
        return resolve_line_style(self.line_style)
