"""Incident model - Unified incidents aggregated from every data source."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlmodel import Field, Column, Relationship, Text
from sqlalchemy import Index, UniqueConstraint
from .base import JSONType
from .mixins import UUIDMixin, utc_now


class Incident(UUIDMixin, table=True):
    """Unified incident, keyed by (external_id, data_source_id)."""

    __tablename__ = "incident"

    external_id: str = Field(nullable=False)
    data_source_id: UUID = Field(foreign_key="data_source.id", nullable=False, index=True)
    system_name: str = Field(nullable=False)
    title: str = Field(sa_column=Column(Text, nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    status: str = Field(nullable=False)  # investigating, identified, monitoring, resolved
    severity: str = Field(nullable=False)  # critical, high, medium, low
    impact: Optional[str] = Field(default=None)  # provider string, preserved as-is
    started_at: Optional[datetime] = Field(default=None)
    resolved_at: Optional[datetime] = Field(default=None)
    # Provider's own last-modified time
    external_updated_at: Optional[datetime] = Field(default=None)
    # Refreshed on every upsert
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)
    synced_at: datetime = Field(default_factory=utc_now, nullable=False)
    external_url: Optional[str] = Field(default=None)
    affected_services: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSONType))
    meta: dict = Field(default_factory=dict, sa_column=Column(JSONType))
    is_active: bool = Field(default=True)

    # Relationships
    data_source: Optional["DataSource"] = Relationship()  # type: ignore
    updates: List["IncidentUpdate"] = Relationship(back_populates="incident")  # type: ignore

    __table_args__ = (
        # Identity key for upserts
        UniqueConstraint("external_id", "data_source_id", name="uq_incident_external_source"),
        Index("ix_incident_status", "status"),
        Index("ix_incident_severity", "severity"),
        Index("ix_incident_started_at", "started_at"),
    )


# Import at the bottom to avoid circular imports
from .data_source import DataSource  # noqa: E402
from .incident_update import IncidentUpdate  # noqa: E402
