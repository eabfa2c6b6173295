"""Provider connectors - One class per external incident source.

- statuspage: Any Atlassian Statuspage public page
- github_status: GitHub's status page
- azure_status: Azure service health
- jira: Jira Cloud issues (OAuth bearer token)
- factory: DataSource.type -> connector class
"""

from .base import (
    ConnectorError,
    ConnectorConfigurationError,
    ConnectorResponseError,
    UnsupportedConnectorError,
    IncidentConnector,
    map_vocabulary,
    parse_timestamp,
)
from .records import (
    IncidentData,
    ComponentData,
    IncidentUpdateData,
)
from .statuspage import StatusPageConnector
from .github_status import GitHubStatusConnector
from .azure_status import AzureStatusConnector
from .jira import JiraConnector
from .factory import ConnectorFactory

__all__ = [
    # Errors
    "ConnectorError",
    "ConnectorConfigurationError",
    "ConnectorResponseError",
    "UnsupportedConnectorError",
    # Contract and helpers
    "IncidentConnector",
    "map_vocabulary",
    "parse_timestamp",
    # Records
    "IncidentData",
    "ComponentData",
    "IncidentUpdateData",
    # Connectors
    "StatusPageConnector",
    "GitHubStatusConnector",
    "AzureStatusConnector",
    "JiraConnector",
    "ConnectorFactory",
]
