"""Persistence boundary used by the sync engine.

SyncStore is the contract the sync service and scheduler depend on;
SQLModelSyncStore implements it with the domain operations, running every
call in its own transaction so one failing write never poisons the session
used for the next data source.
"""

from datetime import datetime
from typing import List, Optional, Protocol
from uuid import UUID

from incident_sync.db import SessionFactory, session_scope
from incident_sync.models import DataSource, Incident, IncidentUpdate, ServiceComponent
from .data_source_operations import DataSourceOperations
from .incident_operations import IncidentOperations
from .incident_update_operations import IncidentUpdateOperations
from .service_component_operations import ServiceComponentOperations


class SyncStore(Protocol):
    """Persistence operations required by the sync engine."""

    def list_data_sources(self) -> List[DataSource]: ...

    def get_data_source(self, data_source_id: UUID) -> Optional[DataSource]: ...

    def create_data_source(self, data_source: DataSource) -> DataSource: ...

    def upsert_incident(
        self,
        external_id: str,
        data_source_id: UUID,
        incident: Incident,
        synced_at: Optional[datetime] = None,
    ) -> Incident: ...

    def upsert_service_component(
        self,
        component: ServiceComponent,
        synced_at: Optional[datetime] = None,
    ) -> ServiceComponent: ...

    def record_sync_outcome(
        self,
        data_source_id: UUID,
        error: Optional[str] = None,
        synced_at: Optional[datetime] = None,
    ) -> Optional[DataSource]: ...

    def get_incident(self, external_id: str, data_source_id: UUID) -> Optional[Incident]: ...

    def append_incident_updates(self, incident_id: UUID, updates: List[IncidentUpdate]) -> int: ...


class SQLModelSyncStore:
    """SyncStore backed by SQLModel sessions.

    Example:
        from incident_sync.db import get_session_factory

        store = SQLModelSyncStore(get_session_factory())
        sources = store.list_data_sources()
    """

    def __init__(self, session_factory: SessionFactory):
        """Initialize store.

        Args:
            session_factory: Callable returning a new Session
        """
        self.session_factory = session_factory

    def list_data_sources(self) -> List[DataSource]:
        """All known data sources, ordered by name."""
        with session_scope(self.session_factory) as session:
            return DataSourceOperations.get_all(session)

    def get_data_source(self, data_source_id: UUID) -> Optional[DataSource]:
        with session_scope(self.session_factory) as session:
            return DataSourceOperations.get_by_id(session, data_source_id)

    def create_data_source(self, data_source: DataSource) -> DataSource:
        with session_scope(self.session_factory) as session:
            return DataSourceOperations.create(session, data_source)

    def upsert_incident(
        self,
        external_id: str,
        data_source_id: UUID,
        incident: Incident,
        synced_at: Optional[datetime] = None,
    ) -> Incident:
        """Insert or update an incident keyed on (external_id, data_source_id).

        The key arguments win over whatever the incident model carries.
        """
        incident.external_id = external_id
        incident.data_source_id = data_source_id

        with session_scope(self.session_factory) as session:
            return IncidentOperations.upsert(session, incident, synced_at=synced_at)

    def upsert_service_component(
        self,
        component: ServiceComponent,
        synced_at: Optional[datetime] = None,
    ) -> ServiceComponent:
        with session_scope(self.session_factory) as session:
            return ServiceComponentOperations.upsert(session, component, synced_at=synced_at)

    def record_sync_outcome(
        self,
        data_source_id: UUID,
        error: Optional[str] = None,
        synced_at: Optional[datetime] = None,
    ) -> Optional[DataSource]:
        with session_scope(self.session_factory) as session:
            return DataSourceOperations.record_sync_outcome(
                session, data_source_id, error=error, synced_at=synced_at
            )

    def get_incident(self, external_id: str, data_source_id: UUID) -> Optional[Incident]:
        with session_scope(self.session_factory) as session:
            return IncidentOperations.get_by_external_id(session, external_id, data_source_id)

    def append_incident_updates(self, incident_id: UUID, updates: List[IncidentUpdate]) -> int:
        with session_scope(self.session_factory) as session:
            return IncidentUpdateOperations.append(session, incident_id, updates)
