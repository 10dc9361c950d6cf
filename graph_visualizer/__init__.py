"""Top-level public API for the ``graph_visualizer`` package.

This module re-exports the expression, sampling, viewport and rendering
surface so hosts can import from a single namespace, for example:

>>> from graph_visualizer import GraphSession, evaluate, generate_points  # doctest: +SKIP

The pure core (``evaluate``, ``generate_points``, the viewport transforms,
``derivative``, ``find_tangent_point``, ``build_scene``) never holds state
between calls; ``GraphSession`` is the optional stateful host wrapper.
"""

from .InputConvert import InputConvert
from .ParseExpression import (
    ExpressionParseError,
    UndefinedSymbolError,
    parse_expression,
)
from .axis_ticks import AxisTick, base_tick_step, format_tick_label, tick_step
from .equation import Equation
from .expression_tree import BinaryFn, BinaryOp, Const, Neg, Node, UnaryFn, Var, format_expression
from .expression_validation import ValidationResult, validate_expression
from .hit_testing import TangentPoint, find_tangent_point, tangent_segment
from .numeric_operations import compile_expression, derivative, evaluate, evaluate_array
from .render_style import EQUATION_STYLE_OPTIONS, RenderStyle
from .renderer import ExportError, Renderer, figure_to_png, scene_to_figure
from .sampling import DISCONTINUITY_THRESHOLD, MAX_POINTS, SamplePoint, generate_points, split_segments
from .scene import Scene, build_scene
from .session import GraphSession
from .symbolic import EXAMPLE_EXPRESSIONS, expression_latex, polynomial_coefficients, polynomial_degree, to_sympy
from .themes import THEMES, ThemeName, ThemePalette, resolve_theme
from .viewport import (
    MAX_ZOOM,
    MIN_ZOOM,
    Bounds,
    GraphPoint,
    PixelPoint,
    PixelSize,
    Viewport,
    clamp_zoom,
    compute_bounds,
    graph_to_pixel,
    pan,
    pixel_to_graph,
    with_zoom,
    zoom_at,
    zoom_by,
)

__version__ = "0.1.0"
