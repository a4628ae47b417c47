"""
Projection engine combining the monthly aggregator with the regression fitter to produce a cumulative historical + forecast series.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from itertools import accumulate
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config import MIN_HISTORY_MONTHS, settings
from datasources.base import FootprintSource
from engine.aggregation import aggregate_monthly
from engine.aggregation.calendar import add_months, month_key
from engine.enums import MetricKind
from engine.errors import InvalidArgument
from engine.forecast.regression import RegressionResult, linear_regression, r_squared

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CumulativePoint:
    month: str
    cumulative: float
    is_projected: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"month": self.month, "cumulative": self.cumulative, "isProjected": self.is_projected}


@dataclass(frozen=True)
class ProjectionSeries:
    organization_id: str
    metric: MetricKind
    points: List[CumulativePoint]
    fit: RegressionResult
    r_squared: float

    @property
    def historical(self) -> List[CumulativePoint]:
        return [p for p in self.points if not p.is_projected]

    @property
    def projected(self) -> List[CumulativePoint]:
        return [p for p in self.points if p.is_projected]


@dataclass(frozen=True)
class ProjectionWindow:
    organization_id: str
    metric: MetricKind
    history_months: int
    projection_months: int


def validate_window(
    organization_id: str,
    metric: "str | MetricKind",
    history_months: Optional[int] = None,
    projection_months: Optional[int] = None,
) -> ProjectionWindow:
    if history_months is None:
        history_months = settings.default_history_months
    if projection_months is None:
        projection_months = settings.default_projection_months

    org = str(organization_id or "").strip()
    if not org:
        raise InvalidArgument("organization id is required")
    kind = MetricKind.parse(metric)
    if history_months < MIN_HISTORY_MONTHS:
        raise InvalidArgument(
            f"history_months must be at least {MIN_HISTORY_MONTHS} to fit a trend, got {history_months}"
        )
    if history_months > settings.max_history_months:
        raise InvalidArgument(f"history_months must be at most {settings.max_history_months}, got {history_months}")
    if projection_months < 0:
        raise InvalidArgument(f"projection_months must not be negative, got {projection_months}")
    if projection_months > settings.max_projection_months:
        raise InvalidArgument(
            f"projection_months must be at most {settings.max_projection_months}, got {projection_months}"
        )
    return ProjectionWindow(org, kind, history_months, projection_months)


def build_series(
    months: Sequence[date],
    totals: Sequence[float],
    projection_months: int,
) -> Tuple[List[CumulativePoint], RegressionResult, float]:
    """Cumulative history for ``months`` followed by ``projection_months`` points on the fitted line."""
    if len(months) != len(totals):
        raise InvalidArgument("months and totals must be the same length")
    if len(totals) < MIN_HISTORY_MONTHS:
        raise InvalidArgument(f"at least {MIN_HISTORY_MONTHS} monthly totals are required to fit a trend")

    cumulative = list(accumulate(float(t) for t in totals))
    points = [
        CumulativePoint(month=month_key(m), cumulative=c, is_projected=False)
        for m, c in zip(months, cumulative)
    ]

    xy = [(float(i), c) for i, c in enumerate(cumulative)]
    fit = linear_regression(xy)
    fit_r2 = r_squared(xy, fit)

    last_x = len(cumulative) - 1
    window_start = months[0]
    for j in range(1, projection_months + 1):
        x = last_x + j
        points.append(CumulativePoint(
            month=month_key(add_months(window_start, x)),
            cumulative=fit.predict(x),
            is_projected=True,
        ))
    return points, fit, fit_r2


async def project(
    source: FootprintSource,
    organization_id: str,
    metric: "str | MetricKind",
    history_months: Optional[int] = None,
    projection_months: Optional[int] = None,
    now: Optional[datetime] = None,
) -> ProjectionSeries:
    window = validate_window(organization_id, metric, history_months, projection_months)

    monthly = await aggregate_monthly(source, window.organization_id, window.metric, window.history_months, now=now)
    points, fit, fit_r2 = build_series(
        [m.month for m in monthly],
        [m.total for m in monthly],
        window.projection_months,
    )

    log.info(
        "projection org=%s metric=%s history=%d projection=%d slope=%.4f intercept=%.4f",
        window.organization_id, window.metric.value, window.history_months,
        window.projection_months, fit.slope, fit.intercept,
    )
    return ProjectionSeries(
        organization_id=window.organization_id,
        metric=window.metric,
        points=points,
        fit=fit,
        r_squared=fit_r2,
    )
