"""Recursive-descent parser for one-variable plotting expressions.

The accepted grammar is a small arithmetic language:

- numbers (``3``, ``2.5``, ``.5``, ``1e-3``), the variable ``x`` and the
  constants ``e`` and ``pi``,
- ``+ - * / ^`` with the usual precedence (``**`` is a synonym of ``^``),
- function calls such as ``sin(x)`` or ``log(x, 2)``,
- implicit multiplication by adjacency: ``2x``, ``3(x+1)``, ``(x+1)(x-1)``,
  ``2 sin(x)``.

Implicit multiplication has the same precedence as ``*``, so ``1/2x`` is
``(1/2)*x``. ``x2`` is *not* rewritten to ``x^2``; it is an undefined symbol.

Parsed trees are immutable, so :func:`parse_expression_cached` can share them
between callers.
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Optional

from .expression_tree import (
    BINARY_FUNCTIONS,
    CONSTANTS,
    UNARY_FUNCTIONS,
    BinaryFn,
    BinaryOp,
    Const,
    Neg,
    Node,
    UnaryFn,
    Var,
)

__all__ = [
    "ExpressionParseError",
    "UndefinedSymbolError",
    "Token",
    "tokenize",
    "parse_expression",
    "parse_expression_cached",
    "VARIABLE_NAME",
    "MAX_NESTING_DEPTH",
]

VARIABLE_NAME = "x"
# Parentheses, call arguments, unary signs and exponents each open one level.
MAX_NESTING_DEPTH = 100


class ExpressionParseError(ValueError):
    """Raised when an expression string does not follow the grammar.

    Parameters
    ----------
    message : str
        Human readable description.
    position : int or None
        Character offset of the offending token, when known.
    """

    def __init__(self, message: str, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position


class UndefinedSymbolError(ExpressionParseError):
    """Raised for identifiers that are neither ``x``, a constant nor a function."""

    def __init__(self, symbol: str, position: Optional[int] = None) -> None:
        super().__init__(f"Undefined symbol {symbol!r}", position)
        self.symbol = symbol


@dataclass(frozen=True)
class Token:
    kind: str  # "number", "name", "op", "lparen", "rparen", "comma", "end"
    text: str
    position: int


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op>\*\*|[-+*/^])
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<comma>,)
    """,
    re.VERBOSE,
)


def tokenize(text: str) -> List[Token]:
    """Split ``text`` into tokens, ending with an ``end`` token.

    Raises
    ------
    ExpressionParseError
        On a character that cannot start any token.
    """
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ExpressionParseError(
                f"Unexpected character {text[pos]!r} at position {pos}", pos
            )
        kind = match.lastgroup or ""
        if kind != "ws":
            value = match.group()
            if kind == "op" and value == "**":
                value = "^"
            tokens.append(Token(kind, value, pos))
        pos = match.end()
    tokens.append(Token("end", "", len(text)))
    return tokens


# Tokens that may start an implicitly multiplied factor.
_IMPLICIT_START = ("number", "name", "lparen")


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "end":
            self.index += 1
        return token

    def expect(self, kind: str, description: str) -> Token:
        token = self.current
        if token.kind != kind:
            raise self.error(f"expected {description}", token)
        return self.advance()

    @contextmanager
    def nested(self, token: Token) -> Iterator[None]:
        if self.depth >= MAX_NESTING_DEPTH:
            raise ExpressionParseError(
                f"Expression nested too deeply (more than {MAX_NESTING_DEPTH} levels) "
                f"at position {token.position}",
                token.position,
            )
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def error(self, message: str, token: Token) -> ExpressionParseError:
        found = "end of input" if token.kind == "end" else repr(token.text)
        return ExpressionParseError(
            f"{message}, found {found} at position {token.position}", token.position
        )

    def parse(self) -> Node:
        if self.current.kind == "end":
            raise ExpressionParseError("Empty expression", 0)
        node = self.parse_sum()
        if self.current.kind != "end":
            raise self.error("Unexpected token", self.current)
        return node

    def parse_sum(self) -> Node:
        node = self.parse_term()
        while self.current.kind == "op" and self.current.text in ("+", "-"):
            op = self.advance().text
            node = BinaryOp(op, node, self.parse_term())
        return node

    def parse_term(self) -> Node:
        node = self.parse_signed()
        while True:
            token = self.current
            if token.kind == "op" and token.text in ("*", "/"):
                self.advance()
                node = BinaryOp(token.text, node, self.parse_signed())
            elif token.kind in _IMPLICIT_START:
                node = BinaryOp("*", node, self.parse_power(), implicit=True)
            else:
                return node

    def parse_signed(self) -> Node:
        token = self.current
        if token.kind == "op" and token.text in ("+", "-"):
            self.advance()
            with self.nested(token):
                operand = self.parse_signed()
            return Neg(operand) if token.text == "-" else operand
        return self.parse_power()

    def parse_power(self) -> Node:
        base = self.parse_primary()
        token = self.current
        if token.kind == "op" and token.text == "^":
            self.advance()
            # Exponent may carry its own sign and chains to the right.
            with self.nested(token):
                exponent = self.parse_signed()
            return BinaryOp("^", base, exponent)
        return base

    def parse_primary(self) -> Node:
        token = self.current
        if token.kind == "number":
            self.advance()
            return Const(float(token.text))
        if token.kind == "lparen":
            self.advance()
            with self.nested(token):
                inner = self.parse_sum()
            self.expect("rparen", "')'")
            return inner
        if token.kind == "name":
            self.advance()
            # ``x(x+1)`` and ``pi(x)`` multiply; only real functions are calls.
            is_value_name = token.text == VARIABLE_NAME or token.text in CONSTANTS
            if self.current.kind == "lparen" and not is_value_name:
                return self.parse_call(token)
            if token.text == VARIABLE_NAME:
                return Var(VARIABLE_NAME)
            if token.text in CONSTANTS:
                return Const(CONSTANTS[token.text], name=token.text)
            raise UndefinedSymbolError(token.text, token.position)
        raise self.error("Unexpected token", token)

    def parse_call(self, name_token: Token) -> Node:
        name = name_token.text
        if name not in UNARY_FUNCTIONS and name not in BINARY_FUNCTIONS:
            raise UndefinedSymbolError(name, name_token.position)
        opening = self.expect("lparen", "'('")
        with self.nested(opening):
            args = [self.parse_sum()]
            while self.current.kind == "comma":
                self.advance()
                args.append(self.parse_sum())
        self.expect("rparen", "')'")

        if len(args) == 1 and name in UNARY_FUNCTIONS:
            return UnaryFn(name, args[0])
        if len(args) == 2 and name in BINARY_FUNCTIONS:
            return BinaryFn(name, args[0], args[1])
        raise ExpressionParseError(
            f"Wrong number of arguments for {name}(): got {len(args)}",
            name_token.position,
        )


def parse_expression(text: str) -> Node:
    """Parse ``text`` into an expression tree.

    Parameters
    ----------
    text : str
        Expression in the variable ``x``.

    Returns
    -------
    Node
        Root of the immutable expression tree.

    Raises
    ------
    UndefinedSymbolError
        If an identifier is not ``x``, a known constant or a known function.
    ExpressionParseError
        For any other syntax problem, including an empty string.

    Examples
    --------
    >>> parse_expression("2x")
    BinaryOp(op='*', left=Const(value=2.0, name=''), right=Var(name='x'), implicit=True)
    """
    if not isinstance(text, str):
        raise TypeError(f"Expression must be a string, got {type(text).__name__}")
    return _Parser(text).parse()


@lru_cache(maxsize=256)
def parse_expression_cached(text: str) -> Node:
    """Cached variant of :func:`parse_expression` for hot evaluation paths."""
    return parse_expression(text)
