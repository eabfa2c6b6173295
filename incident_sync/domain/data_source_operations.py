"""Domain operations for DataSource model - Shared CRUD operations."""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from sqlmodel import Session, select
from sqlalchemy import update
from incident_sync.models import DataSource, utc_now


class DataSourceOperations:
    """Core CRUD operations for DataSource model.

    Keep this class focused on data access only - no business logic.
    """

    @staticmethod
    def get_by_id(session: Session, data_source_id: UUID) -> Optional[DataSource]:
        """Get data source by UUID.

        Args:
            session: Database session
            data_source_id: DataSource UUID

        Returns:
            DataSource if found, None otherwise
        """
        return session.get(DataSource, data_source_id)

    @staticmethod
    def get_by_name(session: Session, name: str) -> Optional[DataSource]:
        """Get data source by its unique name."""
        stmt = select(DataSource).where(DataSource.name == name)
        return session.exec(stmt).first()

    @staticmethod
    def get_all(session: Session) -> List[DataSource]:
        """Get every data source, ordered by name."""
        stmt = select(DataSource).order_by(DataSource.name)
        return list(session.exec(stmt).all())

    @staticmethod
    def get_active(session: Session) -> List[DataSource]:
        """Get data sources with is_active set, ordered by name."""
        stmt = (
            select(DataSource)
            .where(DataSource.is_active == True)  # noqa: E712
            .order_by(DataSource.name)
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def create(session: Session, data_source: DataSource, commit: bool = True) -> DataSource:
        """Create a new data source.

        Args:
            session: Database session
            data_source: DataSource model to create
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Created data source with populated ID

        Raises:
            IntegrityError: If the name is already taken
        """
        session.add(data_source)

        if commit:
            session.commit()
            session.refresh(data_source)
        else:
            session.flush()

        return data_source

    @staticmethod
    def record_sync_outcome(
        session: Session,
        data_source_id: UUID,
        error: Optional[str] = None,
        synced_at: Optional[datetime] = None,
        commit: bool = True,
    ) -> Optional[DataSource]:
        """Write sync bookkeeping for one data source after a pass.

        Always sets last_sync_at. With an error, stores it in last_error and
        increments retry_count in the database; without one, clears
        last_error and resets retry_count to 0.

        Args:
            session: Database session
            data_source_id: DataSource UUID
            error: Failure message, or None on success
            synced_at: Timestamp to record (default: now)
            commit: If True, commit immediately. If False, caller must commit.

        Returns:
            Updated DataSource, or None if it no longer exists
        """
        now = synced_at or utc_now()

        values = {
            "last_sync_at": now,
            "updated_at": now,
            "last_error": error,
            "retry_count": DataSource.retry_count + 1 if error else 0,
        }

        stmt = update(DataSource).where(DataSource.id == data_source_id).values(**values)
        session.execute(stmt)

        if commit:
            session.commit()

        data_source = session.get(DataSource, data_source_id)
        if data_source is not None:
            session.refresh(data_source)
        return data_source

    @staticmethod
    def count(session: Session, active_only: bool = False) -> int:
        """Count data sources."""
        stmt = select(DataSource)

        if active_only:
            stmt = stmt.where(DataSource.is_active == True)  # noqa: E712

        return len(session.exec(stmt).all())
