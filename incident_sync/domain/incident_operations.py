"""Domain operations for Incident model - Shared CRUD operations."""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from sqlmodel import Session, select
from incident_sync.models import Incident, IncidentStatus, utc_now
from .dialect import insert_for

# Columns rewritten from the incoming row when the key already exists
_MUTABLE_COLUMNS = (
    "system_name",
    "title",
    "description",
    "status",
    "severity",
    "impact",
    "started_at",
    "resolved_at",
    "external_updated_at",
    "external_url",
    "affected_services",
    "tags",
    "meta",
    "is_active",
    "updated_at",
    "synced_at",
)


class IncidentOperations:
    """Core CRUD operations for Incident model.

    Keep this class focused on data access only - no business logic.
    """

    @staticmethod
    def get_by_id(session: Session, incident_id: UUID) -> Optional[Incident]:
        """Get incident by UUID."""
        return session.get(Incident, incident_id)

    @staticmethod
    def get_by_external_id(
        session: Session,
        external_id: str,
        data_source_id: UUID
    ) -> Optional[Incident]:
        """Get incident by its identity key (external_id, data_source_id).

        Args:
            session: Database session
            external_id: Provider's incident identifier
            data_source_id: Owning DataSource UUID

        Returns:
            Incident if found, None otherwise
        """
        stmt = select(Incident).where(
            Incident.external_id == external_id,
            Incident.data_source_id == data_source_id
        )
        return session.exec(stmt).first()

    @staticmethod
    def get_by_data_source(session: Session, data_source_id: UUID) -> List[Incident]:
        """Get all incidents for a data source, most recently started first."""
        stmt = (
            select(Incident)
            .where(Incident.data_source_id == data_source_id)
            .order_by(Incident.started_at.desc())
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def get_active(session: Session) -> List[Incident]:
        """Get active incidents that are not resolved, most recent first."""
        stmt = (
            select(Incident)
            .where(
                Incident.is_active == True,  # noqa: E712
                Incident.status != IncidentStatus.RESOLVED.value
            )
            .order_by(Incident.started_at.desc())
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def upsert(
        session: Session,
        incident: Incident,
        synced_at: Optional[datetime] = None,
        commit: bool = True
    ) -> Incident:
        """Create new incident or update existing by identity key.

        Uses ON CONFLICT on (external_id, data_source_id), so repeated
        upserts of the same provider incident never create a second row.
        updated_at and synced_at are refreshed on every call.

        Args:
            session: Database session
            incident: Incident model with data
            synced_at: Timestamp for updated_at/synced_at (default: now)
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created or updated incident
        """
        now = synced_at or utc_now()
        table = Incident.__table__
        insert = insert_for(session)

        values = {
            "id": incident.id,
            "external_id": incident.external_id,
            "data_source_id": incident.data_source_id,
            "system_name": incident.system_name,
            "title": incident.title,
            "description": incident.description,
            "status": incident.status,
            "severity": incident.severity,
            "impact": incident.impact,
            "started_at": incident.started_at,
            "resolved_at": incident.resolved_at,
            "external_updated_at": incident.external_updated_at,
            "external_url": incident.external_url,
            "affected_services": list(incident.affected_services or []),
            "tags": list(incident.tags or []),
            "meta": incident.meta or {},
            "is_active": incident.is_active,
            "updated_at": now,
            "synced_at": now,
        }

        stmt = insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["external_id", "data_source_id"],
            set_={column: stmt.excluded[column] for column in _MUTABLE_COLUMNS},
        )

        session.execute(stmt)

        if commit:
            session.commit()

        stored = IncidentOperations.get_by_external_id(
            session,
            incident.external_id,
            incident.data_source_id
        )
        session.refresh(stored)
        return stored

    @staticmethod
    def count(session: Session, data_source_id: Optional[UUID] = None) -> int:
        """Count incidents with optional data source filter."""
        stmt = select(Incident)

        if data_source_id:
            stmt = stmt.where(Incident.data_source_id == data_source_id)

        return len(session.exec(stmt).all())
