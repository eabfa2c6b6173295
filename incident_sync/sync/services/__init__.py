"""Sync services - Individual provider integrations.

Services layer contains files that execute single-responsibility tasks:
- http_client: Shared HTTP client with timeouts and standardized errors
- connectors: One connector per provider, plus the connector factory
"""

from .http_client import (
    HTTPClient,
    HTTPClientError,
    RateLimitError,
    APIError,
)
from .connectors import (
    ConnectorError,
    ConnectorConfigurationError,
    ConnectorResponseError,
    UnsupportedConnectorError,
    IncidentConnector,
    IncidentData,
    ComponentData,
    IncidentUpdateData,
    StatusPageConnector,
    GitHubStatusConnector,
    AzureStatusConnector,
    JiraConnector,
    ConnectorFactory,
)

__all__ = [
    # HTTP client
    "HTTPClient",
    "HTTPClientError",
    "RateLimitError",
    "APIError",
    # Connector errors
    "ConnectorError",
    "ConnectorConfigurationError",
    "ConnectorResponseError",
    "UnsupportedConnectorError",
    # Connectors
    "IncidentConnector",
    "IncidentData",
    "ComponentData",
    "IncidentUpdateData",
    "StatusPageConnector",
    "GitHubStatusConnector",
    "AzureStatusConnector",
    "JiraConnector",
    "ConnectorFactory",
]
