"""Normalized records produced by every connector.

Connectors return these plain dataclasses; the sync service turns them into
database models. Vocabulary fields (status, severity) always hold values of
the unified enumerations in incident_sync.models.enums.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID


@dataclass
class IncidentData:
    """One provider incident in the unified shape."""

    external_id: str
    data_source_id: UUID
    system_name: str
    title: str
    status: str  # investigating, identified, monitoring, resolved
    severity: str  # critical, high, medium, low
    description: str = ""
    impact: Optional[str] = None  # raw provider string
    started_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None  # provider's last-modified time
    external_url: Optional[str] = None
    affected_services: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True


@dataclass
class ComponentData:
    """One provider component (or project) in the unified shape."""

    external_id: str
    data_source_id: UUID
    name: str
    status: str
    description: Optional[str] = None
    group: Optional[str] = None
    position: Optional[int] = None
    show_uptime: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class IncidentUpdateData:
    """One timeline entry of a provider incident."""

    incident_external_id: str
    update_type: str  # status_change, new_update
    timestamp: datetime
    new_status: Optional[str] = None
    previous_status: Optional[str] = None
    message: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
