"""SQLModel exports for all database tables."""

# Catalog Tables
from .data_source import DataSource

# Synced Data Tables
from .incident import Incident
from .incident_update import IncidentUpdate
from .service_component import ServiceComponent

# Vocabularies
from .enums import ConnectorType, IncidentSeverity, IncidentStatus
from .mixins import utc_now

__all__ = [
    # Catalog
    "DataSource",
    # Data
    "Incident",
    "IncidentUpdate",
    "ServiceComponent",
    # Vocabularies
    "ConnectorType",
    "IncidentSeverity",
    "IncidentStatus",
    "utc_now",
]
