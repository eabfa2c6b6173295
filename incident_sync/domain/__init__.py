"""Domain layer - Shared CRUD operations for all models.

This layer provides pure data access functions (no business logic) plus the
SyncStore boundary the sync engine persists through.

Usage:
    from incident_sync.domain import DataSourceOperations, IncidentOperations

    with session_scope(get_session_factory()) as session:
        source = DataSourceOperations.get_by_name(session, "GitHub Status")
        incidents = IncidentOperations.get_by_data_source(session, source.id)
"""

from .data_source_operations import DataSourceOperations
from .incident_operations import IncidentOperations
from .incident_update_operations import IncidentUpdateOperations
from .service_component_operations import ServiceComponentOperations
from .store import SyncStore, SQLModelSyncStore

__all__ = [
    "DataSourceOperations",
    "IncidentOperations",
    "IncidentUpdateOperations",
    "ServiceComponentOperations",
    "SyncStore",
    "SQLModelSyncStore",
]
