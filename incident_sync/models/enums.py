"""Unified vocabularies shared by every connector."""

from enum import Enum


class IncidentStatus(str, Enum):
    """Lifecycle status of a unified incident."""

    INVESTIGATING = "investigating"
    IDENTIFIED = "identified"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


class IncidentSeverity(str, Enum):
    """Severity of a unified incident."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConnectorType(str, Enum):
    """Discriminator stored in DataSource.type."""

    STATUSPAGE = "statuspage"
    GITHUB_STATUS = "github-status"
    AZURE_STATUS = "azure-status"
    JIRA = "jira"
