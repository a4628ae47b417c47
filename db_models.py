"""
Relational models for organizations, their cloud connections and the monthly footprint rows those connections report.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    connections: Mapped[List["CloudConnection"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )


class CloudConnection(Base):
    __tablename__ = "cloud_connections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    organization_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    provider: Mapped[str] = mapped_column(String(24), nullable=False, default="aws")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    organization: Mapped[Organization] = relationship(back_populates="connections")
    footprints: Mapped[List["CloudFootprint"]] = relationship(
        back_populates="connection", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_cloud_connections_org_active", "organization_id", "is_active"),
    )


class CloudFootprint(Base):
    __tablename__ = "cloud_footprints"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    cloud_connection_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cloud_connections.id", ondelete="CASCADE"), nullable=False
    )
    period_start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    period_end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    region: Mapped[str] = mapped_column(String(64), nullable=False)
    service_name: Mapped[str] = mapped_column(String(128), nullable=False)
    # metric tonnes CO2e
    co2e: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    kilowatt_hours: Mapped[float | None] = mapped_column(Float, nullable=True)

    connection: Mapped[CloudConnection] = relationship(back_populates="footprints")

    __table_args__ = (
        Index("ix_cloud_footprints_connection_period", "cloud_connection_id", "period_start_date"),
    )
