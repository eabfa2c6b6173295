"""Domain operations for ServiceComponent model - Shared CRUD operations."""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from sqlmodel import Session, select
from incident_sync.models import ServiceComponent, utc_now
from .dialect import insert_for

_MUTABLE_COLUMNS = (
    "name",
    "description",
    "status",
    "group",
    "position",
    "show_uptime",
    "meta",
    "updated_at",
    "synced_at",
)


class ServiceComponentOperations:
    """Core CRUD operations for ServiceComponent model.

    Keep this class focused on data access only - no business logic.
    """

    @staticmethod
    def get_by_external_id(
        session: Session,
        external_id: str,
        data_source_id: UUID
    ) -> Optional[ServiceComponent]:
        """Get component by its identity key (external_id, data_source_id)."""
        stmt = select(ServiceComponent).where(
            ServiceComponent.external_id == external_id,
            ServiceComponent.data_source_id == data_source_id
        )
        return session.exec(stmt).first()

    @staticmethod
    def get_all(
        session: Session,
        data_source_id: Optional[UUID] = None
    ) -> List[ServiceComponent]:
        """Get components ordered by position then name.

        Args:
            session: Database session
            data_source_id: Optional filter by data source

        Returns:
            List of components
        """
        stmt = select(ServiceComponent)

        if data_source_id:
            stmt = stmt.where(ServiceComponent.data_source_id == data_source_id)

        stmt = stmt.order_by(ServiceComponent.position, ServiceComponent.name)
        return list(session.exec(stmt).all())

    @staticmethod
    def upsert(
        session: Session,
        component: ServiceComponent,
        synced_at: Optional[datetime] = None,
        commit: bool = True
    ) -> ServiceComponent:
        """Create new component or update existing by identity key.

        Uses ON CONFLICT on (external_id, data_source_id).

        Args:
            session: Database session
            component: ServiceComponent model with data
            synced_at: Timestamp for updated_at/synced_at (default: now)
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created or updated component
        """
        now = synced_at or utc_now()
        table = ServiceComponent.__table__
        insert = insert_for(session)

        values = {
            "id": component.id,
            "external_id": component.external_id,
            "data_source_id": component.data_source_id,
            "name": component.name,
            "description": component.description,
            "status": component.status,
            "group": component.group,
            "position": component.position,
            "show_uptime": component.show_uptime,
            "meta": component.meta or {},
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

        stored = ServiceComponentOperations.get_by_external_id(
            session,
            component.external_id,
            component.data_source_id
        )
        session.refresh(stored)
        return stored

    @staticmethod
    def count(session: Session, data_source_id: Optional[UUID] = None) -> int:
        """Count components with optional data source filter."""
        stmt = select(ServiceComponent)

        if data_source_id:
            stmt = stmt.where(ServiceComponent.data_source_id == data_source_id)

        return len(session.exec(stmt).all())
