"""Connector Factory - Resolves DataSource.type to a connector class."""

from types import MappingProxyType
from typing import Mapping

from incident_sync.models import ConnectorType, DataSource
from ..http_client import HTTPClient
from .azure_status import AzureStatusConnector
from .base import IncidentConnector, UnsupportedConnectorError
from .github_status import GitHubStatusConnector
from .jira import JiraConnector
from .statuspage import StatusPageConnector

_REGISTRY: Mapping[str, type] = MappingProxyType({
    ConnectorType.STATUSPAGE.value: StatusPageConnector,
    ConnectorType.GITHUB_STATUS.value: GitHubStatusConnector,
    ConnectorType.AZURE_STATUS.value: AzureStatusConnector,
    ConnectorType.JIRA.value: JiraConnector,
})


class ConnectorFactory:
    """Builds the connector for a data source.

    Example:
        connector = ConnectorFactory.create(data_source, http_client)
        incidents = connector.fetch_incidents()
    """

    @staticmethod
    def create(data_source: DataSource, http_client: HTTPClient) -> IncidentConnector:
        """Construct the connector registered for data_source.type.

        Raises:
            UnsupportedConnectorError: If the type is not registered
        """
        source_type = data_source.type
        if isinstance(source_type, ConnectorType):
            source_type = source_type.value

        connector_class = _REGISTRY.get(source_type)
        if connector_class is None:
            raise UnsupportedConnectorError(f"Unsupported connector type: {data_source.type}")
        return connector_class(data_source, http_client)

    @staticmethod
    def supported_types() -> list[str]:
        return list(_REGISTRY)
