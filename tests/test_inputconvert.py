import math

import numpy as np
import pytest

from graph_visualizer.InputConvert import InputConvert


def test_plain_numbers_and_strings() -> None:
    assert InputConvert(3) == 3.0
    assert InputConvert("2.5") == 2.5
    assert InputConvert(np.float64(1.5)) == 1.5
    assert InputConvert(np.int32(7), int) == 7


def test_constant_expression_strings() -> None:
    assert InputConvert("pi/2") == pytest.approx(math.pi / 2)
    assert InputConvert("2sqrt(4)") == 4.0
    assert InputConvert("2^10", int) == 1024


def test_int_truncation_rules() -> None:
    assert InputConvert("3.9", int) == 3
    assert InputConvert(3.0, int, truncate=False) == 3
    with pytest.raises(ValueError, match="exact integer"):
        InputConvert("2.5", int, truncate=False)


@pytest.mark.parametrize("value", ["", "   ", True, "x + 1", "1/0", "hello", object()])
def test_invalid_inputs_raise_value_error(value) -> None:
    with pytest.raises(ValueError):
        InputConvert(value)


def test_expression_depending_on_x_is_reported() -> None:
    with pytest.raises(ValueError, match="depends on x"):
        InputConvert("2x")


def test_unsupported_destination_type() -> None:
    with pytest.raises(NotImplementedError):
        InputConvert(3, complex)  # type: ignore[arg-type]


def test_deeply_nested_constant_expression_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        InputConvert("(" * 2000 + "1" + ")" * 2000)
