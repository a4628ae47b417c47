"""
Projection service: the caller-facing timeline action wrapping the projection engine, returning either the series or a short error message.

Copyright (c) 2026 Stefan Kumarasinghe
Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from config import settings
from datasources.base import FootprintSource
from datasources.exceptions import DataSourceError
from engine.enums import MetricKind
from engine.errors import NotFound
from engine.forecast import ProjectionSeries, project, validate_window

log = logging.getLogger(__name__)

ERROR_NOT_FOUND = "not_found"
ERROR_DATA_SOURCE = "data_source"


@dataclass(frozen=True)
class ActionResult:
    success: bool
    data: Optional[ProjectionSeries] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, data: ProjectionSeries) -> ActionResult:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, code: str) -> ActionResult:
        return cls(success=False, error=message, error_code=code)


async def get_timeline(
    source: FootprintSource,
    organization_id: str,
    metric: "str | MetricKind",
    history_months: Optional[int] = None,
    projection_months: Optional[int] = None,
    now: Optional[datetime] = None,
) -> ActionResult:
    """Compute one metric's cumulative timeline for ``organization_id``.

    Argument problems raise :class:`InvalidArgument` before anything is
    fetched. A missing organization or a failing store is reported through
    the returned result instead; no partial series is ever returned.
    """
    window = validate_window(organization_id, metric, history_months, projection_months)
    try:
        series = await project(
            source,
            window.organization_id,
            window.metric,
            window.history_months,
            window.projection_months,
            now=now,
        )
    except NotFound as exc:
        log.info("timeline org=%s metric=%s: %s", window.organization_id, window.metric.value, exc)
        return ActionResult.fail(str(exc), ERROR_NOT_FOUND)
    except DataSourceError as exc:
        log.error("timeline org=%s metric=%s failed: %s", window.organization_id, window.metric.value, exc)
        return ActionResult.fail(str(exc), ERROR_DATA_SOURCE)
    return ActionResult.ok(series)


async def get_dashboard(
    source: FootprintSource,
    organization_id: str,
    history_months: Optional[int] = None,
    projection_months: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Dict[MetricKind, ActionResult]:
    for kind in MetricKind:
        validate_window(organization_id, kind, history_months, projection_months)

    sem = asyncio.Semaphore(max(1, int(settings.max_parallel_metric_queries)))

    async def _one(kind: MetricKind) -> ActionResult:
        async with sem:
            return await get_timeline(source, organization_id, kind, history_months, projection_months, now=now)

    kinds = list(MetricKind)
    results = await asyncio.gather(*[_one(k) for k in kinds])
    return dict(zip(kinds, results))
