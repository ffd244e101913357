"""
Numeric primitives shared by every analytics service.

Descriptive statistics use the *population* formulas (divide by N). The
Welch t-test is the one place that uses the *sample* variance (divide by
N - 1). Its p-value comes from the standard normal distribution, via the
Abramowitz-Stegun erf polynomial, rather than from Student's t with
Welch-Satterthwaite degrees of freedom. It is an approximation and is
reported as such.
"""

from __future__ import annotations

import math
import statistics
from collections.abc import Sequence

from domain.exceptions import DegenerateInputError, InsufficientDataError
from domain.models.analysis import RegressionResult

P_VALUE_FLOOR: float = 0.0001
P_VALUE_CEILING: float = 1.0

# Abramowitz & Stegun 7.1.26
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429
_ERF_P = 0.3275911


def mean(values: Sequence[float]) -> float:
    if not values:
        raise InsufficientDataError("mean", required=1, actual=0)
    return statistics.fmean(values)


def stddev(values: Sequence[float], mu: float | None = None) -> float:
    """Population standard deviation; ``0.0`` for an empty sequence."""
    if not values:
        return 0.0
    return statistics.pstdev(values, mu)


def variance(values: Sequence[float]) -> float:
    return stddev(values) ** 2


def sample_variance(values: Sequence[float], mu: float | None = None) -> float:
    if len(values) < 2:
        raise InsufficientDataError("sample variance", required=2, actual=len(values))
    return statistics.variance(values, mu)


def coefficient_of_variation(std: float, mu: float) -> float:
    """``std / mu``, or ``0.0`` when the mean is not positive."""
    return std / mu if mu > 0 else 0.0


def linear_regression(xs: Sequence[float], ys: Sequence[float]) -> RegressionResult:
    """Closed-form ordinary least squares fit of ``ys`` against ``xs``."""
    n = len(xs)
    if n != len(ys):
        raise DegenerateInputError(f"x and y lengths differ ({n} != {len(ys)})")
    if n < 2:
        raise DegenerateInputError(f"regression needs at least 2 points, got {n}")
    if len(set(xs)) == 1:
        raise DegenerateInputError("all x values are equal")

    x_mean = statistics.fmean(xs)
    y_mean = statistics.fmean(ys)
    s_xx = math.fsum((x - x_mean) ** 2 for x in xs)
    s_xy = math.fsum((x - x_mean) * (y - y_mean) for x, y in zip(xs, ys))

    slope = s_xy / s_xx
    intercept = y_mean - slope * x_mean

    ss_total = math.fsum((y - y_mean) ** 2 for y in ys)
    ss_residual = math.fsum((y - (slope * x + intercept)) ** 2 for x, y in zip(xs, ys))
    # A flat series is fit exactly by a flat line.
    r_squared = 1.0 if ss_total == 0 else 1.0 - ss_residual / ss_total

    return RegressionResult(slope=slope, intercept=intercept, r_squared=r_squared)


def erf(x: float) -> float:
    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)
    t = 1.0 / (1.0 + _ERF_P * x)
    y = 1.0 - (
        ((((_ERF_A5 * t + _ERF_A4) * t) + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1
    ) * t * math.exp(-x * x)
    return sign * y


def normal_cdf(x: float) -> float:
    return 0.5 * (1.0 + erf(x / math.sqrt(2.0)))


def welch_t_test(sample_a: Sequence[float], sample_b: Sequence[float]) -> tuple[float, float]:
    """Return ``(t, p)`` for the difference of means of two samples.

    ``p`` is the two-sided normal approximation, clamped to
    [``P_VALUE_FLOOR``, ``P_VALUE_CEILING``].
    """
    for sample in (sample_a, sample_b):
        if len(sample) < 2:
            raise InsufficientDataError("Welch t-test", required=2, actual=len(sample))

    mean_a = statistics.fmean(sample_a)
    mean_b = statistics.fmean(sample_b)
    var_a = sample_variance(sample_a, mean_a)
    var_b = sample_variance(sample_b, mean_b)

    standard_error = math.sqrt(var_a / len(sample_a) + var_b / len(sample_b))
    if standard_error == 0:
        if mean_a == mean_b:
            return 0.0, P_VALUE_CEILING
        return math.copysign(math.inf, mean_a - mean_b), P_VALUE_FLOOR

    t_statistic = (mean_a - mean_b) / standard_error
    p_value = 2.0 * (1.0 - normal_cdf(abs(t_statistic)))
    return t_statistic, max(P_VALUE_FLOOR, min(P_VALUE_CEILING, p_value))
