"""
Monthly aggregator: buckets an organization's footprint sums into one total per calendar month.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Dict, List, Optional

from datasources.base import FootprintSource, FootprintSum
from engine.aggregation.calendar import add_months, month_key, month_start, month_window
from engine.aggregation.units import to_metric_units
from engine.enums import MetricKind
from engine.errors import InvalidArgument, NotFound

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyMetric:
    organization_id: str
    metric: MetricKind
    month: date
    total: float

    @property
    def key(self) -> str:
        return month_key(self.month)


def _load(
    source: FootprintSource,
    organization_id: str,
    metric: MetricKind,
    start: datetime,
    end: datetime,
) -> List[FootprintSum]:
    if not source.organization_exists(organization_id):
        raise NotFound(f"Organization {organization_id!r} not found")
    return source.monthly_sums(organization_id, metric, start, end)


async def aggregate_monthly(
    source: FootprintSource,
    organization_id: str,
    metric: MetricKind,
    history_months: int,
    now: Optional[datetime] = None,
) -> List[MonthlyMetric]:
    if not organization_id:
        raise InvalidArgument("organization id is required")
    if history_months < 1:
        raise InvalidArgument(f"history_months must be positive, got {history_months}")

    months = month_window(history_months, now)
    start = datetime.combine(months[0], time.min)
    end = datetime.combine(add_months(months[-1], 1), time.min)

    rows = await asyncio.to_thread(_load, source, organization_id, metric, start, end)

    totals: Dict[date, float] = {m: 0.0 for m in months}
    for row in rows:
        bucket = month_start(row.period_start)
        if bucket not in totals:
            log.debug("aggregate_monthly: dropping row outside window period=%s", row.period_start)
            continue
        totals[bucket] += to_metric_units(metric, row.total, row.region)

    log.debug(
        "aggregate_monthly org=%s metric=%s months=%d rows=%d",
        organization_id, metric.value, history_months, len(rows),
    )
    return [MonthlyMetric(organization_id, metric, m, totals[m]) for m in months]
