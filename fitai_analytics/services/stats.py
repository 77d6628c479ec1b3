"""
Statistics Helpers
Regression, variability and smoothing routines shared by the analyzers.

Degenerate input (empty series, a single point, all x values equal, zero mean)
yields neutral values instead of NaN or infinity.
"""

from typing import Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression

from ..models import LinearTrend


def mean(values: Iterable[float], default: float = 0.0) -> float:
    """Arithmetic mean, or `default` for an empty series"""
    values = list(values)
    if not values:
        return default
    return float(np.mean(values))


def calculate_linear_regression(points: Sequence[Tuple[float, float]]) -> LinearTrend:
    """
    Ordinary least squares fit of y against x.

    Args:
        points: (x, y) pairs

    Returns:
        LinearTrend with slope, intercept and R² clamped to [0, 1]
    """
    if len(points) < 2:
        intercept = float(points[0][1]) if points else 0.0
        return LinearTrend(intercept=intercept)

    x = np.array([p[0] for p in points], dtype=float).reshape(-1, 1)
    y = np.array([p[1] for p in points], dtype=float)

    # Vertical line: slope is undefined
    if np.ptp(x) == 0:
        return LinearTrend(intercept=float(y.mean()))

    model = LinearRegression()
    model.fit(x, y)

    slope = float(model.coef_[0])
    intercept = float(model.intercept_)

    ss_res = float(np.sum((y - model.predict(x)) ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return LinearTrend(
        slope=slope,
        intercept=intercept,
        r_squared=min(1.0, max(0.0, r_squared)),
    )


def calculate_trend(values: Sequence[float]) -> LinearTrend:
    """Fit a trend line to a series using its position as x"""
    return calculate_linear_regression([(i, v) for i, v in enumerate(values)])


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation divided by the mean"""
    if len(values) < 2:
        return 0.0

    series = np.array(values, dtype=float)
    series_mean = series.mean()
    if series_mean == 0:
        return 0.0

    return float(series.std() / series_mean)


def moving_average(values: Sequence[float], window: int = 3) -> List[float]:
    """
    Trailing moving average of a series.

    The first positions average whatever prefix is available, so the output
    has the same length as the input.
    """
    if len(values) == 0:
        return []

    rolling = pd.Series(values, dtype=float).rolling(window=max(1, window), min_periods=1)
    return [round(v, 2) for v in rolling.mean().tolist()]
