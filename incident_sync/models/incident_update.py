"""IncidentUpdate model - Append-only timeline entries for an incident."""

from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlmodel import Field, Column, Relationship, Text
from sqlalchemy import Index
from .base import JSONType
from .mixins import UUIDMixin, utc_now


class IncidentUpdate(UUIDMixin, table=True):
    """Timeline entry for an incident, fetched on demand from its provider."""

    __tablename__ = "incident_update"

    incident_id: UUID = Field(foreign_key="incident.id", nullable=False)
    update_type: str = Field(nullable=False)  # status_change, new_update, resolved
    previous_status: Optional[str] = Field(default=None)
    new_status: Optional[str] = Field(default=None)
    message: Optional[str] = Field(default=None, sa_column=Column(Text))
    timestamp: datetime = Field(default_factory=utc_now, nullable=False)
    meta: dict = Field(default_factory=dict, sa_column=Column(JSONType))

    # Relationships
    incident: Optional["Incident"] = Relationship(back_populates="updates")  # type: ignore

    __table_args__ = (
        Index("ix_incident_update_incident", "incident_id"),
        Index("ix_incident_update_timestamp", "timestamp"),
    )


# Import at the bottom to avoid circular imports
from .incident import Incident  # noqa: E402
