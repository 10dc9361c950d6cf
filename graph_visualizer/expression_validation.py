"""Pre-flight validation for expressions entered by the user.

Validation runs before an equation is accepted into a session. It uses the
same parser as evaluation, so anything that validates also evaluates (and
vice versa, modulo domain errors at individual points).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .ParseExpression import ExpressionParseError, UndefinedSymbolError, parse_expression

__all__ = ["ValidationResult", "validate_expression", "CHECK_POINTS"]

# Points at which a freshly parsed tree is evaluated once as a smoke test.
CHECK_POINTS = (-2.0, -1.0, 0.0, 1.0, 2.0)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_expression`.

    Parameters
    ----------
    is_valid : bool
        Whether the expression can be plotted.
    error : str or None
        User-facing message when ``is_valid`` is False.
    """

    is_valid: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid


def validate_expression(expression: str) -> ValidationResult:
    """Check that ``expression`` parses and evaluates.

    Examples
    --------
    >>> validate_expression("x^2+1")
    ValidationResult(is_valid=True, error=None)
    >>> validate_expression("")
    ValidationResult(is_valid=False, error='Empty expression')
    >>> validate_expression("y + 1").error
    "Invalid symbol: 'y'"
    """
    if not isinstance(expression, str) or not expression.strip():
        return ValidationResult(False, "Empty expression")

    try:
        tree = parse_expression(expression.strip())
    except UndefinedSymbolError as exc:
        return ValidationResult(False, f"Invalid symbol: {exc.symbol!r}")
    except ExpressionParseError as exc:
        return ValidationResult(False, f"Invalid syntax: {exc}")

    try:
        with np.errstate(all="ignore"):
            for x in CHECK_POINTS:
                tree.evaluate(x)
    except (ArithmeticError, TypeError, ValueError) as exc:
        return ValidationResult(False, f"Evaluation failed: {exc}")

    return ValidationResult(True)
