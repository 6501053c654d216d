"""Statistical functions for text analysis.

This module provides reusable statistical functions for fitting word
frequency distributions, with no project-specific dependencies.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LinearFit:
    """Result of an ordinary least-squares line fit.

    Attributes:
        slope: Slope of the fitted line
        intercept: Value of the line at x = 0
        r_squared: Coefficient of determination (1.0 when y has no variance)
    """
    slope: float
    intercept: float
    r_squared: float


def linear_regression(xs: list[float], ys: list[float]) -> LinearFit | None:
    """Fit a straight line to paired observations by ordinary least squares.

    The closed form is used directly:

        m = (n·Σxy − Σx·Σy) / (n·Σx² − (Σx)²)
        c = (Σy − m·Σx) / n

    R² is computed as 1 − SSres/SStot. When every y is identical SStot is
    zero and the line explains the data perfectly, so R² is defined as
    exactly 1 rather than dividing by zero.

    Args:
        xs: Independent values
        ys: Dependent values, same length as xs

    Returns:
        A LinearFit, or None if there are fewer than two points or all x
        values are identical (the slope is undefined).

    Raises:
        ValueError: If xs and ys differ in length.

    Example:
        >>> fit = linear_regression([0.0, 1.0, 2.0], [1.0, 3.0, 5.0])
        >>> fit.slope, fit.intercept, fit.r_squared
        (2.0, 1.0, 1.0)
    """
    if len(xs) != len(ys):
        raise ValueError(f"Got {len(xs)} x values but {len(ys)} y values")

    n = len(xs)
    if n < 2:
        return None

    sum_x = 0.0
    sum_y = 0.0
    sum_xy = 0.0
    sum_xx = 0.0
    for x, y in zip(xs, ys):
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_res = 0.0
    ss_tot = 0.0
    for x, y in zip(xs, ys):
        predicted = slope * x + intercept
        ss_res += (y - predicted) ** 2
        ss_tot += (y - y_mean) ** 2

    # SStot may be a rounding residue rather than 0 when every y is equal
    if ss_tot == 0 or min(ys) == max(ys):
        r_squared = 1.0
    else:
        r_squared = 1 - ss_res / ss_tot

    return LinearFit(slope=slope, intercept=intercept, r_squared=r_squared)
