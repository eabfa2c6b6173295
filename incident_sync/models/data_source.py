"""DataSource model - External providers polled by the sync engine."""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column, Text
from .base import JSONType
from .mixins import UUIDMixin, TimestampMixin


class DataSource(UUIDMixin, TimestampMixin, table=True):
    """External providers (status pages, issue trackers) polled every pass."""

    __tablename__ = "data_source"

    name: str = Field(unique=True, nullable=False, index=True)
    type: str = Field(nullable=False)  # statuspage, github-status, azure-status, jira
    base_url: str = Field(nullable=False)
    # Opaque credential blob, interpreted per connector type
    oauth_config: Optional[dict] = Field(default=None, sa_column=Column(JSONType))
    is_active: bool = Field(default=True, index=True)
    # Advisory unless SYNC_RESPECT_SOURCE_INTERVALS is enabled
    sync_interval_seconds: int = Field(default=300)

    # Sync bookkeeping, written after every pass
    last_sync_at: Optional[datetime] = Field(default=None)
    retry_count: int = Field(default=0, nullable=False)
    last_error: Optional[str] = Field(default=None, sa_column=Column(Text))

    meta: dict = Field(default_factory=dict, sa_column=Column(JSONType))
