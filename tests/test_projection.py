"""
Test cases for the projection engine: series length, historical prefix, partitioning, literal extrapolation and argument validation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from datetime import date, datetime
from itertools import accumulate

import pytest

from config import settings
from datasources.base import FootprintSum
from engine.enums import MetricKind
from engine.errors import InvalidArgument, NotFound
from engine.forecast import build_series, project, validate_window

NOW = datetime(2026, 3, 15, 12, 0, 0)


def _months(n, start=date(2025, 1, 1)):
    return [date(start.year + (start.month - 1 + i) // 12, (start.month - 1 + i) % 12 + 1, 1) for i in range(n)]


def test_constant_monthly_totals_project_on_the_line():
    points, fit, r2 = build_series(_months(4), [5, 5, 5, 5], 2)

    assert [p.cumulative for p in points] == [5, 10, 15, 20, 25, 30]
    assert [p.is_projected for p in points] == [False] * 4 + [True] * 2
    assert fit.slope == 5.0 and fit.intercept == 5.0
    assert r2 == pytest.approx(1.0)
    assert [p.month for p in points] == ["2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06"]


@pytest.mark.parametrize("history,projection", [(2, 0), (3, 1), (12, 6), (24, 12)])
def test_length_and_partition(history, projection):
    totals = [float(i % 4) for i in range(history)]
    points, _, _ = build_series(_months(history), totals, projection)

    assert len(points) == history + projection
    assert all(not p.is_projected for p in points[:history])
    assert all(p.is_projected for p in points[history:])


def test_historical_prefix_is_running_sum():
    totals = [1.25, 0.0, 3.5, 2.0, 7.75, 0.5]
    points, _, _ = build_series(_months(len(totals)), totals, 3)
    assert [p.cumulative for p in points[:6]] == list(accumulate(totals))


def test_history_is_monotone_for_non_negative_totals():
    totals = [3.0, 0.0, 0.0, 9.0, 1.0, 0.0, 4.0]
    points, _, _ = build_series(_months(len(totals)), totals, 0)
    values = [p.cumulative for p in points]
    assert values == sorted(values)


def test_projection_lies_on_fitted_line():
    totals = [10.0, 15.0, 20.0]
    points, fit, _ = build_series(_months(3), totals, 4)
    for j, point in enumerate(points[3:], start=1):
        assert point.cumulative == fit.slope * (2 + j) + fit.intercept


def test_projection_is_not_clamped_below_zero():
    # a refund-like negative month drags the cumulative trend downward
    points, fit, _ = build_series(_months(3), [30.0, -20.0, -20.0], 6)
    assert fit.slope < 0
    assert points[-1].cumulative < 0


def test_zero_history_projects_zero():
    points, fit, _ = build_series(_months(12), [0.0] * 12, 6)
    assert fit.slope == 0.0 and fit.intercept == 0.0
    assert all(p.cumulative == 0.0 for p in points)


def test_projected_months_continue_across_year_end():
    points, _, _ = build_series(_months(3, start=date(2025, 10, 1)), [1, 1, 1], 3)
    assert [p.month for p in points[3:]] == ["2026-01", "2026-02", "2026-03"]


def test_build_series_rejects_single_point():
    with pytest.raises(InvalidArgument):
        build_series(_months(1), [4.0], 2)


@pytest.mark.parametrize("kwargs", [
    {"history_months": 1},
    {"history_months": 0},
    {"projection_months": -1},
    {"metric": "ai_compute"},
    {"organization_id": "  "},
])
def test_validate_window_rejects(kwargs):
    args = {"organization_id": "org-1", "metric": "emissions", "history_months": 12, "projection_months": 6}
    args.update(kwargs)
    with pytest.raises(InvalidArgument):
        validate_window(**args)


def test_validate_window_limits_and_defaults(monkeypatch):
    monkeypatch.setattr(settings, "default_history_months", 9)
    monkeypatch.setattr(settings, "default_projection_months", 3)
    monkeypatch.setattr(settings, "max_projection_months", 4)

    window = validate_window(" org-1 ", "Water")
    assert window.organization_id == "org-1"
    assert window.metric is MetricKind.water
    assert (window.history_months, window.projection_months) == (9, 3)

    with pytest.raises(InvalidArgument):
        validate_window("org-1", "water", 12, 5)


@pytest.mark.asyncio
async def test_project_end_to_end(static_source):
    # 0.005 t/month -> 5 kg/month for each of the last four months
    source = static_source(sums=[
        FootprintSum(datetime(2025, 12, 1), 0.005),
        FootprintSum(datetime(2026, 1, 1), 0.005),
        FootprintSum(datetime(2026, 2, 1), 0.005),
        FootprintSum(datetime(2026, 3, 1), 0.005),
    ])
    series = await project(source, "org-1", "emissions", 4, 2, now=NOW)

    assert series.metric is MetricKind.emissions
    assert [p.cumulative for p in series.historical] == pytest.approx([5, 10, 15, 20])
    assert [p.cumulative for p in series.projected] == pytest.approx([25, 30])
    assert [p.month for p in series.projected] == ["2026-04", "2026-05"]
    assert series.fit.slope == pytest.approx(5.0)
    assert series.fit.intercept == pytest.approx(5.0)


@pytest.mark.asyncio
async def test_project_validates_before_fetching(static_source):
    source = static_source()
    with pytest.raises(InvalidArgument):
        await project(source, "org-1", "emissions", 1, 6, now=NOW)
    assert source.calls == []


@pytest.mark.asyncio
async def test_project_unknown_organization(static_source):
    with pytest.raises(NotFound):
        await project(static_source(organizations=()), "ghost", "energy", 12, 6, now=NOW)


@pytest.mark.asyncio
async def test_project_reports_unrounded_r_squared(static_source):
    # monthly 1, 4, 2, 7 MWh -> cumulative 1, 5, 7, 14
    source = static_source(sums=[
        FootprintSum(datetime(2025, 12, 1), 1000.0),
        FootprintSum(datetime(2026, 1, 1), 4000.0),
        FootprintSum(datetime(2026, 2, 1), 2000.0),
        FootprintSum(datetime(2026, 3, 1), 7000.0),
    ])
    series = await project(source, "org-1", "energy", 4, 0, now=NOW)

    assert series.r_squared == pytest.approx(420.25 / 443.75, rel=1e-12)
    assert series.r_squared != round(series.r_squared, 4)
