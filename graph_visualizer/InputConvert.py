# === SECTION: InputConvert [id: InputConvert]===
from __future__ import annotations

import math
from typing import Any, Type, TypeVar

import numpy as np

from .ParseExpression import ExpressionParseError, parse_expression
from .expression_tree import Var, iter_nodes

T = TypeVar("T", int, float)


def InputConvert(obj: Any, dest_type: Type[T] = float, truncate: bool = True) -> T:
    """
    Convert `obj` to `dest_type`.

    Supported destination types:
    - float
    - int

    Rules:
    - If `obj` is a number: cast via dest_type(obj).
    - If `obj` is a string:
        1) try float(s)
        2) else parse it as a constant plotting expression (e.g. "pi/2",
           "2sqrt(2)") and evaluate it. The expression must not contain `x`.

    Truncation Rules (`truncate`):
    - When converting Float -> Int:
        - If `truncate=True`: Truncate decimal part (e.g., 3.9 -> 3).
        - If `truncate=False`: Require exact integer (e.g., 3.0 -> 3, 3.1 -> Error).

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ValueError
        If conversion fails or violates truncation rules.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    def _coerce_real(r_val: float) -> T:
        if dest_type is float:
            return float(r_val)  # type: ignore[return-value]

        if not math.isfinite(r_val):
            raise ValueError(f"Could not convert {r_val!r} to int: value is not finite.")
        if not float(r_val).is_integer():
            if not truncate:
                raise ValueError(
                    f"Could not convert {r_val!r} to int: value is not an exact integer."
                )
            # If truncate=True, int() truncates towards zero
        return int(r_val)  # type: ignore[return-value]

    if isinstance(obj, bool):
        raise ValueError(f"Could not convert boolean {obj!r} to {dest_type.__name__}.")

    # Fast path: real numeric types (Python and NumPy scalars)
    if isinstance(obj, (int, float, np.integer, np.floating)):
        return _coerce_real(float(obj))

    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError(f"Cannot convert empty string to {dest_type.__name__}.")

        # 1) Plain native conversion
        try:
            return _coerce_real(float(s))
        except ValueError:
            pass

        # 2) Constant expression path
        try:
            tree = parse_expression(s)
        except ExpressionParseError as e:
            raise ValueError(
                f"Could not convert {obj!r} to {dest_type.__name__} (neither directly nor as an expression)."
            ) from e
        if any(isinstance(node, Var) for node in iter_nodes(tree)):
            raise ValueError(f"Could not convert {obj!r}: expression depends on x.")
        with np.errstate(all="ignore"):
            value = float(tree.evaluate(0.0))
        if not math.isfinite(value):
            raise ValueError(f"Could not convert {obj!r}: expression is not a finite number.")
        return _coerce_real(value)

    # Fallback: anything float() understands (e.g. 0-d arrays, Decimal)
    try:
        return _coerce_real(float(obj))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Could not convert {obj!r} to {dest_type.__name__}.") from e

# === END OF SECTION: InputConvert [id: InputConvert]===
