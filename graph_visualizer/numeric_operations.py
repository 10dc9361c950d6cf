"""Numeric evaluation of plotting expressions.

Includes scalar and vectorised evaluation and the central-difference
derivative used for tangent lines.

Every function here encodes failure in its return value: a malformed
expression, an undefined symbol or a domain error yields ``NaN`` (or ``None``
for :func:`derivative`) and is logged at DEBUG level. Nothing in this module
raises on bad user input.

Logging
-------
This module is silent by default. To see evaluation failures:

>>> import logging
>>> logging.basicConfig(level=logging.DEBUG)
>>> logging.getLogger("graph_visualizer.numeric_operations").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Union

import numpy as np

from .ParseExpression import ExpressionParseError, parse_expression_cached
from .expression_tree import Node

__all__ = [
    "evaluate",
    "evaluate_array",
    "compile_expression",
    "derivative",
    "DEFAULT_DERIVATIVE_STEP",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

DEFAULT_DERIVATIVE_STEP = 1e-4

ArrayLike = Union[float, np.ndarray]


def _evaluate_tree(tree: Node, x: np.ndarray) -> np.ndarray:
    """Walk ``tree`` over ``x`` and return a float array shaped like ``x``.

    Complex and non-finite results are mapped to ``NaN``.
    """
    with np.errstate(all="ignore"):
        raw = np.asarray(tree.evaluate(x))
    if np.iscomplexobj(raw):
        raw = np.where(np.imag(raw) == 0, np.real(raw), np.nan)
    values = np.asarray(raw, dtype=float)
    if values.shape != x.shape:
        values = np.full(x.shape, values, dtype=float)
    return np.where(np.isfinite(values), values, np.nan)


def compile_expression(expression: str) -> Callable[[ArrayLike], np.ndarray]:
    """Return a vectorised callable for ``expression``.

    Raises
    ------
    ExpressionParseError
        If ``expression`` cannot be parsed. Evaluation of the returned
        callable never raises for numeric inputs.

    Examples
    --------
    >>> f = compile_expression("x^2")
    >>> f(np.array([1.0, 2.0, 3.0]))
    array([1., 4., 9.])
    """
    if not isinstance(expression, str):
        raise TypeError(f"Expression must be a string, got {type(expression).__name__}")
    tree = parse_expression_cached(expression.strip())

    def _compiled(x: ArrayLike) -> np.ndarray:
        return _evaluate_tree(tree, np.asarray(x, dtype=float))

    _compiled.__name__ = "compiled_expression"
    _compiled.__doc__ = f"Vectorised evaluation of {expression!r}."
    return _compiled


def evaluate_array(expression: str, x_values: ArrayLike) -> np.ndarray:
    """Evaluate ``expression`` at every value of ``x_values``.

    Returns an all-``NaN`` array when the expression cannot be parsed.
    """
    x_arr = np.asarray(x_values, dtype=float)
    try:
        compiled = compile_expression(expression)
    except (ExpressionParseError, TypeError) as exc:
        logger.debug("Evaluation error for %r: %s", expression, exc)
        return np.full(x_arr.shape, np.nan)
    return compiled(x_arr)


def evaluate(expression: str, x: float) -> float:
    """Evaluate ``expression`` with ``x`` bound to the given value.

    Parameters
    ----------
    expression : str
        Expression in the variable ``x``.
    x : float
        Value bound to ``x``.

    Returns
    -------
    float
        The result, or ``NaN`` when parsing fails, a symbol is undefined or
        the value is not a finite real number.

    Examples
    --------
    >>> evaluate("2x + 1", 3)
    7.0
    >>> math.isnan(evaluate("1/x", 0))
    True
    """
    try:
        compiled = compile_expression(expression)
    except (ExpressionParseError, TypeError) as exc:
        logger.debug("Evaluation error for %r at x=%r: %s", expression, x, exc)
        return math.nan
    try:
        return float(compiled(float(x)))
    except (TypeError, ValueError, OverflowError) as exc:
        logger.debug("Evaluation error for %r at x=%r: %s", expression, x, exc)
        return math.nan


def derivative(
    expression: str, x: float, h: float = DEFAULT_DERIVATIVE_STEP
) -> Optional[float]:
    """Estimate ``d/dx expression`` at ``x`` by central difference.

    Returns
    -------
    float or None
        ``(f(x+h) - f(x-h)) / (2h)``, or ``None`` when either evaluation fails
        or the quotient is not finite. ``None`` means "no tangent can be
        displayed" and is distinct from a numeric result.
    """
    if not h > 0:
        raise ValueError(f"Derivative step must be positive, got {h!r}")
    y_plus = evaluate(expression, x + h)
    y_minus = evaluate(expression, x - h)
    if math.isnan(y_plus) or math.isnan(y_minus):
        logger.debug("Derivative unavailable for %r at x=%r", expression, x)
        return None
    slope = (y_plus - y_minus) / (2 * h)
    if not math.isfinite(slope):
        return None
    return slope
