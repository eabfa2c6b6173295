"""ServiceComponent model - Provider components and their current status."""

from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlmodel import Field, Column, Relationship, Text
from sqlalchemy import UniqueConstraint
from .base import JSONType
from .mixins import UUIDMixin, utc_now


class ServiceComponent(UUIDMixin, table=True):
    """Service component, keyed by (external_id, data_source_id)."""

    __tablename__ = "service_component"

    external_id: str = Field(nullable=False)
    data_source_id: UUID = Field(foreign_key="data_source.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    status: str = Field(nullable=False, index=True)  # operational, degraded_performance, ...
    group: Optional[str] = Field(default=None)
    position: Optional[int] = Field(default=None)
    show_uptime: bool = Field(default=False)
    meta: dict = Field(default_factory=dict, sa_column=Column(JSONType))
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)
    synced_at: datetime = Field(default_factory=utc_now, nullable=False)

    # Relationships
    data_source: Optional["DataSource"] = Relationship()  # type: ignore

    __table_args__ = (
        UniqueConstraint(
            "external_id", "data_source_id", name="uq_service_component_external_source"
        ),
    )


# Import at the bottom to avoid circular imports
from .data_source import DataSource  # noqa: E402
