from __future__ import annotations

import math

import pytest

from graph_visualizer.ParseExpression import (
    MAX_NESTING_DEPTH,
    ExpressionParseError,
    UndefinedSymbolError,
    parse_expression,
    tokenize,
)
from graph_visualizer.expression_tree import BinaryOp, Const, Neg, UnaryFn, Var, format_expression


def _value(text: str, x: float) -> float:
    return float(parse_expression(text).evaluate(x))


def test_tokenize_splits_implicit_product_and_normalizes_double_star() -> None:
    kinds = [(t.kind, t.text) for t in tokenize("2x**3")]
    assert kinds == [
        ("number", "2"),
        ("name", "x"),
        ("op", "^"),
        ("number", "3"),
        ("end", ""),
    ]


def test_adjacent_number_and_variable_is_implicit_product() -> None:
    assert parse_expression("2x") == BinaryOp("*", Const(2.0), Var("x"), implicit=True)


def test_unary_minus_binds_looser_than_power() -> None:
    tree = parse_expression("-x^2")
    assert isinstance(tree, Neg)
    assert _value("-x^2", 3.0) == -9.0


@pytest.mark.parametrize(
    ("text", "x", "expected"),
    [
        ("2^3^2", 0.0, 512.0),
        ("2^-1", 0.0, 0.5),
        ("x**2", 3.0, 9.0),
        ("1/2x", 4.0, 2.0),
        ("(x+1)(x-1)", 3.0, 8.0),
        ("x(x+1)", 2.0, 6.0),
        ("3(x+1)", 1.0, 6.0),
        ("2 sin(x)", math.pi / 2, 2.0),
        ("x e^x", 1.0, math.e),
        ("2e", 0.0, 2 * math.e),
        ("1e-3x", 1000.0, 1.0),
        (".5x", 4.0, 2.0),
        ("log(8, 2)", 0.0, 3.0),
        ("ln(e)", 0.0, 1.0),
        ("2x^2 + 3x - 4", 2.0, 10.0),
        ("10 - 4 - 3", 0.0, 3.0),
        ("24 / 4 / 3", 0.0, 2.0),
        ("pi", 0.0, math.pi),
        ("abs(x - 5)", 2.0, 3.0),
    ],
)
def test_precedence_and_implicit_multiplication(text: str, x: float, expected: float) -> None:
    assert _value(text, x) == pytest.approx(expected)


def test_function_call_produces_unary_node() -> None:
    tree = parse_expression("sin(x)")
    assert tree == UnaryFn("sin", Var("x"))


@pytest.mark.parametrize(("text", "symbol"), [("x2", "x2"), ("y + 1", "y"), ("foo(x)", "foo")])
def test_undefined_symbols_are_reported_by_name(text: str, symbol: str) -> None:
    with pytest.raises(UndefinedSymbolError) as info:
        parse_expression(text)
    assert info.value.symbol == symbol


@pytest.mark.parametrize("text", ["", "   ", "(x+1", "x +", "3 $ 4", "sin(x, 2)", "log(x, 2, 3)", "*x", "sin x"])
def test_malformed_expressions_raise_parse_error(text: str) -> None:
    with pytest.raises(ExpressionParseError):
        parse_expression(text)


def test_parse_error_carries_position() -> None:
    with pytest.raises(ExpressionParseError) as info:
        parse_expression("x + $")
    assert info.value.position == 4


def test_non_string_input_is_rejected() -> None:
    with pytest.raises(TypeError):
        parse_expression(3)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2x^2+1", "2*x^2 + 1"),
        ("x - (x - 1)", "x - (x - 1)"),
        ("(x+1)(x-1)", "(x + 1)*(x - 1)"),
        ("-(2x)", "-(2*x)"),
        ("(-x)^2", "(-x)^2"),
        ("2^3^2", "2^3^2"),
        ("(2^3)^2", "(2^3)^2"),
        ("log(x, 2)", "log(x, 2)"),
        ("e^x", "e^x"),
    ],
)
def test_format_expression_is_explicit_and_minimal(text: str, expected: str) -> None:
    assert format_expression(parse_expression(text)) == expected


@pytest.mark.parametrize("text", ["2x^2+1", "x - (x - 1)", "(x+1)(x-1)", "-x^2", "1/2x", "2^-x", "sin(x)cos(x)"])
def test_formatted_expression_parses_back_to_same_values(text: str) -> None:
    tree = parse_expression(text)
    reparsed = parse_expression(format_expression(tree))
    for x in (-1.5, 0.25, 2.0):
        assert float(reparsed.evaluate(x)) == pytest.approx(float(tree.evaluate(x)))


def test_long_sum_parses_evaluates_and_prints() -> None:
    tree = parse_expression("+".join(["x"] * 1000))
    assert float(tree.evaluate(1.0)) == 1000.0
    assert format_expression(tree).count("x") == 1000


def test_nesting_up_to_the_limit_is_accepted() -> None:
    depth = MAX_NESTING_DEPTH
    assert _value("(" * depth + "x" + ")" * depth, 2.0) == 2.0


@pytest.mark.parametrize(
    "text",
    [
        "(" * 2000 + "x" + ")" * 2000,
        "-" * 3000 + "x",
        "2^" * 500 + "2",
        "sin(" * 500 + "x" + ")" * 500,
    ],
    ids=["parentheses", "unary-minus", "power-chain", "calls"],
)
def test_excessive_nesting_is_a_parse_error(text: str) -> None:
    with pytest.raises(ExpressionParseError, match="nested too deeply"):
        parse_expression(text)
