"""
Ordinary least squares line fitting via the closed-form normal equations.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class RegressionResult:
    slope: float
    intercept: float
    n: int

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def _as_arrays(points: Sequence[Tuple[float, float]]) -> tuple[np.ndarray, np.ndarray]:
    arr = np.asarray(points, dtype=float).reshape(-1, 2)
    return arr[:, 0], arr[:, 1]


def linear_regression(points: Sequence[Tuple[float, float]]) -> RegressionResult:
    """Fit ``y = slope * x + intercept`` to ``points``.

    Expects at least two points with distinct x. With fewer the denominator is
    zero and both coefficients come back as NaN; callers guard against that.
    """
    x, y = _as_arrays(points)
    n = len(x)
    sum_x = np.sum(x)
    sum_y = np.sum(y)
    sum_xy = np.sum(x * y)
    sum_xx = np.sum(x * x)

    with np.errstate(divide="ignore", invalid="ignore"):
        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
        intercept = (sum_y - slope * sum_x) / np.float64(n)

    return RegressionResult(slope=float(slope), intercept=float(intercept), n=n)


def r_squared(points: Sequence[Tuple[float, float]], fit: RegressionResult) -> float:
    x, y = _as_arrays(points)
    predicted = fit.slope * x + fit.intercept
    ss_res = np.sum((y - predicted) ** 2)
    ss_tot = np.sum((y - np.mean(y)) ** 2) if len(y) else 0.0
    # a flat series is fitted exactly by a flat line
    if ss_tot <= 0:
        return 1.0 if ss_res == 0 else 0.0
    return float(1.0 - ss_res / ss_tot)
