"""
Timeline routes returning cumulative historical + projected monthly series per metric.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from api.requests import TimelineRequest
from api.responses import DashboardEntry, DashboardResponse, TimelineResponse
from api.routes.common import get_source, raise_for_result
from api.routes.exception import handle_exceptions
from api.security import InternalContext, enforce_organization, get_request_context
from datasources.base import FootprintSource
from services.projection_service import ERROR_NOT_FOUND, get_dashboard, get_timeline

router = APIRouter(tags=["Timeline"])


def _coerce_query_value(value: Any) -> Optional[int]:
    # Allow direct unit-test invocation without FastAPI Query parsing.
    raw = value.default if hasattr(value, "default") else value
    return None if raw is None else int(raw)


@router.post("/timeline", response_model=TimelineResponse, summary="Cumulative monthly timeline with projection")
@handle_exceptions
async def timeline(
    req: TimelineRequest,
    ctx: InternalContext = Depends(get_request_context),
    source: FootprintSource = Depends(get_source),
) -> TimelineResponse:
    organization_id = enforce_organization(ctx, req.organization_id)
    result = await get_timeline(source, organization_id, req.metric, req.history_months, req.projection_months)
    raise_for_result(result)
    return TimelineResponse.from_series(result.data)


@router.get(
    "/organizations/{organization_id}/timeline/{metric}",
    response_model=TimelineResponse,
    summary="Cumulative monthly timeline for one metric",
)
@handle_exceptions
async def organization_timeline(
    organization_id: str,
    metric: str,
    history_months: Optional[int] = Query(default=None),
    projection_months: Optional[int] = Query(default=None),
    ctx: InternalContext = Depends(get_request_context),
    source: FootprintSource = Depends(get_source),
) -> TimelineResponse:
    organization_id = enforce_organization(ctx, organization_id)
    result = await get_timeline(
        source,
        organization_id,
        metric,
        _coerce_query_value(history_months),
        _coerce_query_value(projection_months),
    )
    raise_for_result(result)
    return TimelineResponse.from_series(result.data)


@router.get(
    "/organizations/{organization_id}/dashboard",
    response_model=DashboardResponse,
    summary="Timelines for every metric of an organization",
)
@handle_exceptions
async def organization_dashboard(
    organization_id: str,
    history_months: Optional[int] = Query(default=None),
    projection_months: Optional[int] = Query(default=None),
    ctx: InternalContext = Depends(get_request_context),
    source: FootprintSource = Depends(get_source),
) -> DashboardResponse:
    organization_id = enforce_organization(ctx, organization_id)
    results = await get_dashboard(
        source,
        organization_id,
        _coerce_query_value(history_months),
        _coerce_query_value(projection_months),
    )
    # an unknown organization fails every metric identically
    missing = [r for r in results.values() if r.error_code == ERROR_NOT_FOUND]
    if len(missing) == len(results):
        raise_for_result(missing[0])

    metrics = {}
    for kind, result in results.items():
        metrics[kind.value] = DashboardEntry(
            success=result.success,
            timeline=TimelineResponse.from_series(result.data) if result.success else None,
            error=result.error,
        )
    return DashboardResponse(organization_id=organization_id, metrics=metrics)
