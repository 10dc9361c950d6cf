from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from graph_visualizer.ParseExpression import ExpressionParseError
from graph_visualizer.numeric_operations import (
    compile_expression,
    derivative,
    evaluate,
    evaluate_array,
)


def test_evaluate_binds_x() -> None:
    assert evaluate("x^2", 3) == 9.0
    assert evaluate("2x + 1", 3) == 7.0


@pytest.mark.parametrize(
    ("expression", "x"),
    [
        ("1/x", 0.0),
        ("sqrt(x)", -1.0),
        ("log(x)", 0.0),
        ("asin(x)", 2.0),
        ("y", 1.0),
        ("x2", 1.0),
        ("", 1.0),
        ("(x", 1.0),
    ],
)
def test_evaluate_returns_nan_instead_of_raising(expression: str, x: float) -> None:
    assert math.isnan(evaluate(expression, x))


def test_evaluate_non_string_expression_is_nan() -> None:
    assert math.isnan(evaluate(None, 1.0))  # type: ignore[arg-type]


def test_evaluate_is_deterministic() -> None:
    first = [evaluate("sin(x) / x", v) for v in (-1.0, 0.0, 1.0)]
    second = [evaluate("sin(x) / x", v) for v in (-1.0, 0.0, 1.0)]
    assert first[0] == second[0]
    assert first[2] == second[2]
    assert math.isnan(first[1]) and math.isnan(second[1])


def test_evaluate_logs_failures_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="graph_visualizer.numeric_operations"):
        evaluate("y + 1", 1.0)
    assert "Evaluation error" in caplog.text


def test_evaluate_array_is_vectorised() -> None:
    result = evaluate_array("x^2", [1.0, 2.0, 3.0])
    np.testing.assert_allclose(result, [1.0, 4.0, 9.0])


def test_evaluate_array_maps_invalid_entries_to_nan() -> None:
    result = evaluate_array("1/x", [-1.0, 0.0, 1.0])
    assert result[0] == -1.0
    assert math.isnan(result[1])
    assert result[2] == 1.0


def test_evaluate_array_unparseable_expression_is_all_nan() -> None:
    result = evaluate_array("sin(", [0.0, 1.0])
    assert result.shape == (2,)
    assert np.isnan(result).all()


def test_compile_expression_broadcasts_constants() -> None:
    f = compile_expression("5")
    np.testing.assert_array_equal(f(np.array([1.0, 2.0])), [5.0, 5.0])


def test_compile_expression_raises_for_bad_syntax() -> None:
    with pytest.raises(ExpressionParseError):
        compile_expression("x +")


def test_derivative_of_square() -> None:
    assert derivative("x^2", 2.0) == pytest.approx(4.0, abs=1e-3)


@pytest.mark.parametrize(
    ("expression", "x", "expected"),
    [
        ("sin(x)", 0.0, 1.0),
        ("e^x", 1.0, math.e),
        ("3x - 7", 10.0, 3.0),
        ("abs(x)", 0.0, 0.0),
    ],
)
def test_derivative_matches_known_slopes(expression: str, x: float, expected: float) -> None:
    assert derivative(expression, x) == pytest.approx(expected, abs=1e-3)


@pytest.mark.parametrize(("expression", "x"), [("sqrt(x)", 0.0), ("log(x)", 0.0), ("y", 1.0)])
def test_derivative_is_none_when_unavailable(expression: str, x: float) -> None:
    assert derivative(expression, x) is None


def test_derivative_rejects_non_positive_step() -> None:
    with pytest.raises(ValueError):
        derivative("x", 0.0, h=0.0)


def test_long_sums_and_deep_nesting_never_raise() -> None:
    long_sum = "+".join(["x"] * 1000)
    deep = "(" * 2000 + "x" + ")" * 2000
    assert evaluate(long_sum, 1.0) == 1000.0
    assert math.isnan(evaluate(deep, 1.0))
    assert math.isnan(evaluate("-" * 3000 + "x", 1.0))
    assert np.isnan(evaluate_array(deep, [0.0, 1.0])).all()
    assert derivative(deep, 1.0) is None
