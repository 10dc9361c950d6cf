"""Immutable expression trees for one-variable plotting expressions.

Purpose
-------
Defines the tagged node variants produced by
:func:`graph_visualizer.ParseExpression.parse_expression` and the tree-walk
evaluator that turns a node into numbers.

Concepts and structure
----------------------
Every node is a frozen dataclass:

- ``Const``: numeric literal or named constant (``e``, ``pi``),
- ``Var``: the free variable ``x``,
- ``Neg``: unary minus,
- ``BinaryOp``: ``+ - * / ^``,
- ``UnaryFn``: one-argument function call (``sin(x)``),
- ``BinaryFn``: two-argument function call (``log(x, 2)``).

Evaluation uses NumPy ufuncs, so ``node.evaluate(x)`` accepts a Python float
or a NumPy array and broadcasts accordingly. Floating-point warnings are the
caller's concern; :mod:`graph_visualizer.numeric_operations` wraps calls in
``numpy.errstate``.

Examples
--------
>>> from graph_visualizer.ParseExpression import parse_expression
>>> tree = parse_expression("2x^2 + 1")
>>> format_expression(tree)
'2*x^2 + 1'
>>> float(tree.evaluate(3.0))
19.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Sequence, Tuple, TypeVar, Union

import numpy as np

__all__ = [
    "Node",
    "Const",
    "Var",
    "Neg",
    "BinaryOp",
    "UnaryFn",
    "BinaryFn",
    "BINARY_OPERATORS",
    "CONSTANTS",
    "UNARY_FUNCTIONS",
    "BINARY_FUNCTIONS",
    "fold_tree",
    "format_expression",
    "iter_nodes",
]

ArrayOrFloat = Union[float, np.ndarray]
T = TypeVar("T")


def _log_base(value: ArrayOrFloat, base: ArrayOrFloat) -> ArrayOrFloat:
    return np.log(value) / np.log(base)


CONSTANTS: Dict[str, float] = {
    "e": float(np.e),
    "pi": float(np.pi),
}

UNARY_FUNCTIONS: Dict[str, Callable[[Any], Any]] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "abs": np.abs,
    "sqrt": np.sqrt,
    "exp": np.exp,
    "log": np.log,
    "ln": np.log,
    "log10": np.log10,
    "log2": np.log2,
    "floor": np.floor,
    "ceil": np.ceil,
    "sign": np.sign,
}

BINARY_FUNCTIONS: Dict[str, Callable[[Any, Any], Any]] = {
    "log": _log_base,
}

BINARY_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.true_divide,
    "^": np.power,
}

# Binding strength used when printing; higher binds tighter.
_PRECEDENCE = {"+": 1, "-": 1, "*": 2, "/": 2, "^": 4}
_NEG_PRECEDENCE = 3


class Node:
    """Base class for expression tree nodes.

    Subclasses implement :meth:`apply`, which combines the already computed
    values of their children. :meth:`evaluate` drives it with
    :func:`fold_tree`, so evaluation depth is not bounded by the Python stack
    (a 1000-term sum is a 1000-deep left-leaning tree).
    """

    __slots__ = ()

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:  # pragma: no cover - abstract
        raise NotImplementedError

    def evaluate(self, x: ArrayOrFloat) -> ArrayOrFloat:
        return fold_tree(self, lambda node, args: node.apply(x, args))

    def children(self) -> Tuple["Node", ...]:
        return ()

    def __str__(self) -> str:
        return format_expression(self)


@dataclass(frozen=True)
class Const(Node):
    """Numeric literal. ``name`` is set for named constants such as ``pi``."""

    value: float
    name: str = ""

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:
        return self.value


@dataclass(frozen=True)
class Var(Node):
    """The free variable of the expression."""

    name: str = "x"

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:
        return x


@dataclass(frozen=True)
class Neg(Node):
    operand: Node

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:
        return np.negative(args[0])

    def children(self) -> Tuple[Node, ...]:
        return (self.operand,)


@dataclass(frozen=True)
class BinaryOp(Node):
    """Arithmetic operator applied to two sub-trees.

    ``implicit`` records whether a ``*`` came from adjacency (``2x``) rather
    than an explicit operator. It only affects printing.
    """

    op: str
    left: Node
    right: Node
    implicit: bool = False

    def __post_init__(self) -> None:
        if self.op not in BINARY_OPERATORS:
            raise ValueError(f"Unknown binary operator: {self.op!r}")

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:
        return BINARY_OPERATORS[self.op](args[0], args[1])

    def children(self) -> Tuple[Node, ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class UnaryFn(Node):
    name: str
    argument: Node

    def __post_init__(self) -> None:
        if self.name not in UNARY_FUNCTIONS:
            raise ValueError(f"Unknown function: {self.name!r}")

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:
        return UNARY_FUNCTIONS[self.name](args[0])

    def children(self) -> Tuple[Node, ...]:
        return (self.argument,)


@dataclass(frozen=True)
class BinaryFn(Node):
    name: str
    first: Node
    second: Node

    def __post_init__(self) -> None:
        if self.name not in BINARY_FUNCTIONS:
            raise ValueError(f"Unknown two-argument function: {self.name!r}")

    def apply(self, x: ArrayOrFloat, args: Sequence[ArrayOrFloat]) -> ArrayOrFloat:
        return BINARY_FUNCTIONS[self.name](args[0], args[1])

    def children(self) -> Tuple[Node, ...]:
        return (self.first, self.second)


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def fold_tree(node: Node, visit: Callable[[Node, List[T]], T]) -> T:
    """Combine ``node`` bottom-up with an explicit stack.

    ``visit(n, values)`` receives each node together with the results for its
    children (in order) and returns the node's own result.

    >>> from graph_visualizer.ParseExpression import parse_expression
    >>> fold_tree(parse_expression("x + 2x"), lambda n, values: 1 + sum(values))
    5
    """
    results: List[T] = []
    stack: List[Tuple[Node, bool]] = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        if not expanded:
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(current.children()))
            continue
        count = len(current.children())
        values = results[len(results) - count:]
        del results[len(results) - count:]
        results.append(visit(current, values))
    return results[0]


def _format_number(value: float) -> str:
    if float(value).is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def _precedence(node: Node) -> int:
    if isinstance(node, BinaryOp):
        return _PRECEDENCE[node.op]
    if isinstance(node, Neg):
        return _NEG_PRECEDENCE
    if isinstance(node, Const) and not node.name and node.value < 0:
        return _NEG_PRECEDENCE
    return 5


def _wrap(text: str, needs_parens: bool) -> str:
    return f"({text})" if needs_parens else text


def _format_node(node: Node, parts: List[str]) -> str:
    if isinstance(node, Const):
        return node.name or _format_number(node.value)
    if isinstance(node, Var):
        return node.name
    if isinstance(node, Neg):
        return "-" + _wrap(parts[0], _precedence(node.operand) < _NEG_PRECEDENCE)
    if isinstance(node, UnaryFn):
        return f"{node.name}({parts[0]})"
    if isinstance(node, BinaryFn):
        return f"{node.name}({parts[0]}, {parts[1]})"
    if isinstance(node, BinaryOp):
        prec = _PRECEDENCE[node.op]
        if node.op == "^":
            # Right associative: the base needs parentheses at equal precedence.
            left = _wrap(parts[0], _precedence(node.left) <= prec)
            right = _wrap(parts[1], _precedence(node.right) < _NEG_PRECEDENCE)
            return f"{left}^{right}"
        left = _wrap(parts[0], _precedence(node.left) < prec)
        right_needs = _precedence(node.right) < prec or (
            _precedence(node.right) == prec and node.op in ("-", "/")
        )
        right = _wrap(parts[1], right_needs)
        if node.op in ("*", "/"):
            return f"{left}{node.op}{right}"
        return f"{left} {node.op} {right}"
    raise TypeError(f"Unsupported node type: {type(node).__name__}")


def format_expression(node: Node) -> str:
    """Return a canonical, fully explicit string form of ``node``.

    Implicit multiplication is printed as ``*`` and only the parentheses
    needed to preserve the tree structure are emitted, so the result parses
    back to an equivalent tree.
    """
    return fold_tree(node, _format_node)
