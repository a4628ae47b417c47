"""
SQLAlchemy-backed footprint source reading organizations, active cloud connections and their footprint rows.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from database import get_db_session
from datasources.base import FootprintSource, FootprintSum
from datasources.exceptions import DataSourceError, DataSourceUnavailable, QueryTimeout
from db_models import CloudConnection, CloudFootprint, Organization
from engine.enums import MetricKind

log = logging.getLogger(__name__)


def _translate(exc: Exception) -> DataSourceError:
    if isinstance(exc, PoolTimeoutError):
        return QueryTimeout(f"Footprint store timed out: {exc}")
    if isinstance(exc, OperationalError):
        return DataSourceUnavailable(f"Footprint store unavailable: {exc}")
    return DataSourceError(f"Footprint query failed: {exc}")


@contextmanager
def _session() -> Iterator[Session]:
    try:
        with get_db_session() as db:
            yield db
    except RuntimeError as exc:
        # raised by get_db_session before init_database has run
        raise DataSourceUnavailable(f"Footprint store unavailable: {exc}") from exc
    except SQLAlchemyError as exc:
        raise _translate(exc) from exc


class SqlFootprintSource(FootprintSource):

    def organization_exists(self, organization_id: str) -> bool:
        with _session() as db:
            found = db.scalar(select(Organization.id).where(Organization.id == organization_id))
        return found is not None

    def monthly_sums(
        self,
        organization_id: str,
        metric: MetricKind,
        start: datetime,
        end: datetime,
    ) -> List[FootprintSum]:
        value_col = CloudFootprint.co2e if metric is MetricKind.emissions else CloudFootprint.kilowatt_hours
        group_cols = [CloudFootprint.period_start_date]
        if metric is MetricKind.water:
            group_cols.append(CloudFootprint.region)

        stmt = (
            select(*group_cols, func.sum(value_col).label("total"))
            .join(CloudConnection, CloudConnection.id == CloudFootprint.cloud_connection_id)
            .where(
                CloudConnection.organization_id == organization_id,
                CloudConnection.is_active.is_(True),
                CloudFootprint.period_start_date >= start,
                CloudFootprint.period_start_date < end,
            )
            .group_by(*group_cols)
            .order_by(CloudFootprint.period_start_date)
        )
        if metric is not MetricKind.emissions:
            stmt = stmt.where(value_col.is_not(None))

        try:
            with _session() as db:
                rows = db.execute(stmt).all()
        except DataSourceError as exc:
            log.warning("monthly_sums org=%s metric=%s failed: %s", organization_id, metric.value, exc)
            raise

        log.debug("monthly_sums org=%s metric=%s rows=%d", organization_id, metric.value, len(rows))
        return [
            FootprintSum(
                period_start=row.period_start_date,
                total=float(row.total or 0.0),
                region=row.region if metric is MetricKind.water else None,
            )
            for row in rows
        ]
