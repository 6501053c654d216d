"""Unit tests for the least-squares line fit."""

import math

import pytest

from zipf_pipes.statistics import linear_regression


def test_exact_line_is_recovered() -> None:
    fit = linear_regression([0.0, 1.0, 2.0, 3.0], [1.0, 3.0, 5.0, 7.0])
    assert fit is not None
    assert fit.slope == pytest.approx(2.0)
    assert fit.intercept == pytest.approx(1.0)
    assert fit.r_squared == pytest.approx(1.0)


def test_inverse_rank_law_has_slope_minus_one() -> None:
    ranks = range(1, 101)
    xs = [math.log10(r) for r in ranks]
    ys = [math.log10(5000 / r) for r in ranks]

    fit = linear_regression(xs, ys)

    assert fit is not None
    assert fit.slope == pytest.approx(-1.0, abs=1e-6)
    assert fit.intercept == pytest.approx(math.log10(5000), abs=1e-6)
    assert fit.r_squared == pytest.approx(1.0, abs=1e-6)


def test_constant_y_is_a_perfect_fit() -> None:
    fit = linear_regression([0.0, 0.5, 1.0], [2.0, 2.0, 2.0])
    assert fit is not None
    assert fit.slope == 0.0
    assert fit.r_squared == 1.0


def test_noisy_data_has_r_squared_below_one() -> None:
    fit = linear_regression([0.0, 1.0, 2.0, 3.0], [0.0, 2.0, 1.0, 3.0])
    assert fit is not None
    assert 0.0 < fit.r_squared < 1.0


def test_needs_two_points() -> None:
    assert linear_regression([], []) is None
    assert linear_regression([1.0], [1.0]) is None


def test_identical_x_has_no_slope() -> None:
    assert linear_regression([1.0, 1.0], [1.0, 2.0]) is None


def test_rejects_mismatched_lengths() -> None:
    with pytest.raises(ValueError):
        linear_regression([1.0, 2.0], [1.0])
