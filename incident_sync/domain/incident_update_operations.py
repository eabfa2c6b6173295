"""Domain operations for IncidentUpdate model - Append-only timeline."""

from typing import Hashable, List
from uuid import UUID
from sqlmodel import Session, select
from incident_sync.models import IncidentUpdate

# Provider identifiers for a timeline entry, checked in order
_PROVIDER_ID_KEYS = ("change_id", "update_id")


def dedup_key(update: IncidentUpdate) -> Hashable:
    """Identity of a timeline entry for de-duplication.

    The provider's own entry id when the connector recorded one, otherwise
    (timestamp, new_status, message).
    """
    meta = update.meta or {}
    for key in _PROVIDER_ID_KEYS:
        if meta.get(key) is not None:
            return (key, str(meta[key]))
    return (update.timestamp, update.new_status, update.message)


class IncidentUpdateOperations:
    """Append and read operations for IncidentUpdate model.

    Updates are never modified or deleted once written.
    """

    @staticmethod
    def get_for_incident(session: Session, incident_id: UUID) -> List[IncidentUpdate]:
        """Get the timeline of an incident, newest first."""
        stmt = (
            select(IncidentUpdate)
            .where(IncidentUpdate.incident_id == incident_id)
            .order_by(IncidentUpdate.timestamp.desc())
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def append(
        session: Session,
        incident_id: UUID,
        updates: List[IncidentUpdate],
        commit: bool = True
    ) -> int:
        """Append updates to an incident's timeline, skipping ones already stored.

        An update counts as already stored when an entry with the same
        dedup_key exists for the incident, so fetching the same changelog
        twice appends nothing the second time.

        Args:
            session: Database session
            incident_id: Incident UUID the updates belong to
            updates: IncidentUpdate models (incident_id is overwritten)
            commit: If True, commit at the end. If False, caller must commit.

        Returns:
            Number of updates appended
        """
        existing = {
            dedup_key(u)
            for u in IncidentUpdateOperations.get_for_incident(session, incident_id)
        }

        appended = 0
        for update in updates:
            key = dedup_key(update)
            if key in existing:
                continue

            update.incident_id = incident_id
            session.add(update)
            existing.add(key)
            appended += 1

        if commit:
            session.commit()
        else:
            session.flush()

        return appended
