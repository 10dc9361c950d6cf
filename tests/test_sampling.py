from __future__ import annotations

import math

import pytest

from graph_visualizer.sampling import MAX_POINTS, SamplePoint, generate_points, split_segments


def _pairs(points):
    return [(p.x, None if p.is_break else p.y) for p in points]


def test_square_on_integer_grid() -> None:
    points = generate_points("x^2", -2, 2, 1)
    assert [tuple(p) for p in points] == [
        (-2.0, 4.0),
        (-1.0, 1.0),
        (0.0, 0.0),
        (1.0, 1.0),
        (2.0, 4.0),
    ]


def test_reciprocal_breaks_at_pole() -> None:
    points = generate_points("1/x", -1, 1, 0.5)
    breaks = [p for p in points if p.is_break]
    assert len(breaks) == 1
    assert breaks[0].x == pytest.approx(0.0)

    segments = split_segments(points)
    assert len(segments) == 2
    assert all(p.x < 0 for p in segments[0])
    assert all(p.x > 0 for p in segments[1])


def test_single_marker_at_first_rejected_sample() -> None:
    points = generate_points("sqrt(x^2 - 4)", -3, 3, 1)
    assert _pairs(points) == [
        (-3.0, math.sqrt(5)),
        (-2.0, 0.0),
        (-1.0, None),
        (2.0, 0.0),
        (3.0, math.sqrt(5)),
    ]


def test_no_leading_or_trailing_markers() -> None:
    leading = generate_points("sqrt(x)", -2, 2, 1)
    assert _pairs(leading) == [(0.0, 0.0), (1.0, 1.0), (2.0, math.sqrt(2))]

    trailing = generate_points("sqrt(-x)", -1, 1, 1)
    assert _pairs(trailing) == [(-1.0, 1.0), (0.0, 0.0)]
    assert not trailing[-1].is_break


def test_large_jump_between_valid_samples_breaks() -> None:
    points = generate_points("sign(x) * 900000", -1, 1, 2)
    assert _pairs(points) == [(-1.0, -900000.0), (1.0, None), (1.0, 900000.0)]


def test_values_beyond_threshold_are_dropped() -> None:
    assert generate_points("1e7", -1, 1, 0.5) == []
    assert generate_points("1e7", -1, 1, 0.5, threshold=1e8) != []


@pytest.mark.parametrize(
    ("expression", "x_min", "x_max", "step"),
    [
        ("", -1, 1, 0.1),
        ("   ", -1, 1, 0.1),
        ("x", -1, 1, 0),
        ("x", -1, 1, -0.1),
        ("x", 1, -1, 0.1),
        ("x", -1, math.inf, 0.1),
        ("x", -1, 1, math.nan),
        ("y", -1, 1, 0.1),
        ("x +", -1, 1, 0.1),
    ],
)
def test_degenerate_inputs_return_empty(expression, x_min, x_max, step) -> None:
    assert generate_points(expression, x_min, x_max, step) == []


def test_single_sample_when_range_is_a_point() -> None:
    assert generate_points("x + 1", 2, 2, 0.5) == [SamplePoint(2.0, 3.0)]


def test_output_is_capped() -> None:
    points = generate_points("x", 0, 10000, 0.001)
    assert len(points) == MAX_POINTS
    assert points[-1].x == pytest.approx(0.999)


def test_cap_counts_break_markers() -> None:
    points = generate_points("1/x", -1, 1, 0.5, max_points=3)
    assert len(points) <= 3
    assert not points[-1].is_break


def test_evaluation_budget_bounds_work() -> None:
    assert len(generate_points("x", 0, 100, 1, max_samples=10)) == 10
    assert generate_points("sqrt(-1 - x^2)", 0, 1e9, 1, max_samples=50) == []


def test_invalid_max_points() -> None:
    with pytest.raises(ValueError):
        generate_points("x", 0, 1, 0.1, max_points=0)


def test_x_is_non_decreasing() -> None:
    points = generate_points("tan(x)", -10, 10, 0.05)
    xs = [p.x for p in points]
    assert xs == sorted(xs)


def test_upper_bound_is_sampled_despite_rounding() -> None:
    points = generate_points("x", 0, 1, 0.1)
    assert len(points) == 11
    assert points[-1].x == pytest.approx(1.0)


def test_split_segments_drops_empty_runs() -> None:
    nan = math.nan
    points = [SamplePoint(0, 1), SamplePoint(1, nan), SamplePoint(1, nan), SamplePoint(2, 3)]
    assert split_segments(points) == [[SamplePoint(0, 1)], [SamplePoint(2, 3)]]
    assert split_segments([]) == []


def test_extreme_finite_range_is_bounded_by_budget() -> None:
    assert generate_points("x", -1e308, 1e308, 1.0) == []
    points = generate_points("0*x + 1", -1e308, 1e308, 1.0)
    assert len(points) == MAX_POINTS
    assert all(p.y == 1.0 for p in points)


def test_long_sum_is_sampled() -> None:
    points = generate_points("+".join(["x"] * 1000), -1, 1, 1)
    assert [tuple(p) for p in points] == [(-1.0, -1000.0), (0.0, 0.0), (1.0, 1000.0)]
