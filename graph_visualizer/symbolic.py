"""SymPy views of parsed expressions.

Numeric evaluation never goes through SymPy; this module only provides
symbolic *presentation* helpers for hosts: LaTeX for the equation list and
the polynomial helpers (which ``x^k`` terms appear, and the degree).
"""

from __future__ import annotations

from typing import Dict, List, Optional, TypedDict

import sympy as sp

from .ParseExpression import ExpressionParseError, parse_expression
from .expression_tree import (
    BinaryFn,
    BinaryOp,
    Const,
    Neg,
    Node,
    UnaryFn,
    Var,
    fold_tree,
    iter_nodes,
)

__all__ = [
    "X",
    "to_sympy",
    "expression_latex",
    "polynomial_coefficients",
    "polynomial_degree",
    "EXAMPLE_EXPRESSIONS",
]

X = sp.Symbol("x", real=True)

_SYMPY_CONSTANTS = {"e": sp.E, "pi": sp.pi}

_SYMPY_UNARY = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "abs": sp.Abs,
    "sqrt": sp.sqrt,
    "exp": sp.exp,
    "log": sp.log,
    "ln": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "log2": lambda arg: sp.log(arg, 2),
    "floor": sp.floor,
    "ceil": sp.ceiling,
    "sign": sp.sign,
}


def _number(value: float) -> sp.Expr:
    if float(value).is_integer():
        return sp.Integer(int(value))
    return sp.Float(value)


def _sympy_node(node: Node, args: List[sp.Expr]) -> sp.Expr:
    if isinstance(node, Const):
        if node.name:
            return _SYMPY_CONSTANTS[node.name]
        return _number(node.value)
    if isinstance(node, Var):
        return X
    if isinstance(node, Neg):
        return -args[0]
    if isinstance(node, UnaryFn):
        return _SYMPY_UNARY[node.name](args[0])
    if isinstance(node, BinaryFn):
        # Only log(value, base) is defined.
        return sp.log(args[0], args[1])
    if isinstance(node, BinaryOp):
        left, right = args
        if node.op == "+":
            return left + right
        if node.op == "-":
            return left - right
        if node.op == "*":
            return left * right
        if node.op == "/":
            return left / right
        return left**right
    raise TypeError(f"Unsupported node type: {type(node).__name__}")


def to_sympy(node: Node) -> sp.Expr:
    """Convert an expression tree to a SymPy expression in :data:`X`."""
    return fold_tree(node, _sympy_node)


def expression_latex(expression: str) -> str:
    """LaTeX for ``expression``; falls back to the raw text when it does not parse."""
    try:
        tree = parse_expression(expression.strip())
    except ExpressionParseError:
        return expression
    return sp.latex(to_sympy(tree))


def polynomial_coefficients(expression: str) -> Optional[Dict[str, int]]:
    """Return the ``x^k`` terms written in ``expression``.

    Every ``x ^ <constant>`` sub-expression contributes a key ``"x^k"`` with
    value 1, mirroring how the expression was typed rather than its expanded
    form. Returns ``None`` if the expression does not parse.

    >>> polynomial_coefficients("x^4 - 3x^2 + 1")
    {'x^4': 1, 'x^2': 1}
    """
    try:
        tree = parse_expression(expression.strip())
    except ExpressionParseError:
        return None
    coefficients: Dict[str, int] = {}
    for node in iter_nodes(tree):
        if (
            isinstance(node, BinaryOp)
            and node.op == "^"
            and isinstance(node.left, Var)
            and isinstance(node.right, Const)
            and not node.right.name
        ):
            exponent = node.right.value
            key = f"x^{int(exponent) if float(exponent).is_integer() else exponent}"
            coefficients[key] = 1
    return coefficients


def polynomial_degree(expression: str) -> int:
    """Highest integer exponent among :func:`polynomial_coefficients` terms (0 if none)."""
    coefficients = polynomial_coefficients(expression)
    if not coefficients:
        return 0
    degrees: List[int] = []
    for key in coefficients:
        exponent = float(key.split("^", 1)[1])
        degrees.append(int(exponent))
    return max(degrees)


class ExampleExpression(TypedDict):
    label: str
    value: str
    hint: str


EXAMPLE_EXPRESSIONS: List[ExampleExpression] = [
    {"label": "Quadratic", "value": "x^2", "hint": "Parabola"},
    {"label": "Cubic", "value": "x^3 - 2x", "hint": "Inflection point"},
    {"label": "Quartic", "value": "x^4 - 3x^2 + 1", "hint": "W-shaped curve"},
    {"label": "Linear", "value": "2x + 1", "hint": "Straight line"},
    {"label": "Absolute Value", "value": "abs(x)", "hint": "V-shape"},
    {"label": "Rational", "value": "1/(x+0.1)", "hint": "Hyperbola"},
    {"label": "Exponential", "value": "e^x", "hint": "Growth curve"},
    {"label": "Trigonometric", "value": "sin(x) + cos(2x)", "hint": "Wave pattern"},
]
