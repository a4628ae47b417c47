import os
import sys
from datetime import datetime

import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import database
from db_models import CloudConnection, CloudFootprint, Organization


@pytest.fixture
def db():
    """Fresh in-memory SQLite schema per test."""
    database.dispose_database()
    database.init_database("sqlite://")
    database.init_db()
    yield database
    database.dispose_database()


@pytest.fixture
def seed(db):
    """Insert an organization with one active connection and return helpers for adding rows."""

    def _organization(org_id: str = "org-1", active: bool = True) -> str:
        with database.get_db_session() as session:
            session.add(Organization(id=org_id, name=f"{org_id} ltd"))
            session.add(CloudConnection(id=f"{org_id}-conn", organization_id=org_id, is_active=active))
        return f"{org_id}-conn"

    def _footprint(
        connection_id: str,
        period_start: datetime,
        co2e: float = 0.0,
        kwh: float | None = None,
        region: str = "us-east-1",
        service: str = "ec2",
    ) -> None:
        with database.get_db_session() as session:
            session.add(CloudFootprint(
                cloud_connection_id=connection_id,
                period_start_date=period_start,
                period_end_date=period_start.replace(day=28),
                region=region,
                service_name=service,
                co2e=co2e,
                kilowatt_hours=kwh,
            ))

    class Seed:
        organization = staticmethod(_organization)
        footprint = staticmethod(_footprint)

    return Seed


class StaticSource:
    """Footprint source returning fixed per-month sums without touching a database."""

    def __init__(self, sums=None, organizations=("org-1",), error=None):
        self.sums = list(sums or [])
        self.organizations = set(organizations)
        self.error = error
        self.calls = []

    def organization_exists(self, organization_id):
        self.calls.append(("exists", organization_id))
        if self.error is not None:
            raise self.error
        return organization_id in self.organizations

    def monthly_sums(self, organization_id, metric, start, end):
        self.calls.append(("sums", organization_id, metric, start, end))
        return [s for s in self.sums if start <= s.period_start < end]


@pytest.fixture
def static_source():
    return StaticSource
