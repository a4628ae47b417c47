"""
Forecasting logic: closed-form linear regression over cumulative monthly totals and literal extrapolation of the fitted line into future months.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""


from engine.forecast.regression import RegressionResult, linear_regression, r_squared
from engine.forecast.projection import CumulativePoint, ProjectionSeries, build_series, project, validate_window

__all__ = [
    "RegressionResult",
    "linear_regression",
    "r_squared",
    "CumulativePoint",
    "ProjectionSeries",
    "build_series",
    "project",
    "validate_window",
]
