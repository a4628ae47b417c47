"""
Response models for API endpoints.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from engine.enums import MetricKind
from engine.forecast import ProjectionSeries


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CumulativePointModel(CamelModel):

    month: str
    cumulative: float
    is_projected: bool


class FitModel(CamelModel):

    slope: float
    intercept: float
    r_squared: float


class TimelineResponse(CamelModel):

    organization_id: str
    metric: MetricKind
    unit: str
    history_months: int
    projection_months: int
    points: List[CumulativePointModel]
    fit: FitModel

    @classmethod
    def from_series(cls, series: ProjectionSeries) -> TimelineResponse:
        return cls(
            organization_id=series.organization_id,
            metric=series.metric,
            unit=series.metric.unit,
            history_months=len(series.historical),
            projection_months=len(series.projected),
            points=[
                CumulativePointModel(month=p.month, cumulative=p.cumulative, is_projected=p.is_projected)
                for p in series.points
            ],
            fit=FitModel(slope=series.fit.slope, intercept=series.fit.intercept, r_squared=series.r_squared),
        )


class DashboardEntry(CamelModel):

    success: bool
    timeline: Optional[TimelineResponse] = None
    error: Optional[str] = None


class DashboardResponse(CamelModel):

    organization_id: str
    metrics: Dict[str, DashboardEntry]
