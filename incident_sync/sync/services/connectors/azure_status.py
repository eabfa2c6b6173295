"""Azure Status Connector - Microsoft Azure service health.

A single endpoint, {base_url}/api/v2/status.json, carries both the active
issues (incidents) and the per-service health list (components).

Payload shape:
{
    "issues": [
        {"id": "...", "title": "...", "summary": "...", "status": "Active",
         "severity": "Warning", "startTime": "...", "endTime": null,
         "lastUpdateTime": "...", "link": "...", "services": [...],
         "region": "..."}
    ],
    "services": [{"id": "...", "name": "...", "displayName": "...", "health": "..."}]
}
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping

from incident_sync.models import DataSource, IncidentSeverity, IncidentStatus
from ..http_client import HTTPClient
from .base import map_vocabulary, normalize_items, parse_timestamp, require_list
from .records import ComponentData, IncidentData, IncidentUpdateData

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://status.azure.com"
SYSTEM_NAME = "Microsoft Azure"
COMPONENT_GROUP = "Azure Services"

_STATUS_MAP: Mapping[str, str] = MappingProxyType({
    "Active": IncidentStatus.INVESTIGATING.value,
    "Resolved": IncidentStatus.RESOLVED.value,
    "Information": IncidentStatus.MONITORING.value,
})
_STATUS_DEFAULT = IncidentStatus.INVESTIGATING.value

_SEVERITY_MAP: Mapping[str, str] = MappingProxyType({
    "Error": IncidentSeverity.CRITICAL.value,
    "Warning": IncidentSeverity.HIGH.value,
    "Information": IncidentSeverity.MEDIUM.value,
})
_SEVERITY_DEFAULT = IncidentSeverity.MEDIUM.value


class AzureStatusConnector:
    """Connector for the Azure status page."""

    SOURCE_TAG = "azure-status"

    def __init__(self, data_source: DataSource, http_client: HTTPClient):
        self.data_source = data_source
        self.client = http_client

    @property
    def status_url(self) -> str:
        base_url = (self.data_source.base_url or DEFAULT_BASE_URL).rstrip("/")
        return f"{base_url}/api/v2/status.json"

    def fetch_incidents(self) -> list[IncidentData]:
        data = self.client.get(self.status_url)
        items = require_list(data, "issues", self.data_source.name, optional=True)

        def normalize(_: int, issue: dict[str, Any]) -> IncidentData:
            severity = issue.get("severity")
            return IncidentData(
                external_id=str(issue["id"]),
                data_source_id=self.data_source.id,
                system_name=SYSTEM_NAME,
                title=issue.get("title") or "Azure service issue",
                description=issue.get("summary") or "",
                status=map_vocabulary(_STATUS_MAP, issue.get("status"), _STATUS_DEFAULT),
                severity=map_vocabulary(_SEVERITY_MAP, severity, _SEVERITY_DEFAULT),
                impact=severity,
                started_at=parse_timestamp(issue.get("startTime")),
                resolved_at=parse_timestamp(issue.get("endTime")),
                updated_at=parse_timestamp(issue.get("lastUpdateTime")),
                external_url=issue.get("link"),
                affected_services=list(issue.get("services") or []),
                tags=[t for t in ["azure", severity] if t],
                metadata={
                    "source": self.SOURCE_TAG,
                    "issue_id": issue.get("id"),
                    "region": issue.get("region"),
                },
            )

        incidents = normalize_items(items, normalize, self.data_source.name, "issue")
        logger.info(f"Fetched {len(incidents)} incidents from {self.data_source.name}")
        return incidents

    def fetch_components(self) -> list[ComponentData]:
        data = self.client.get(self.status_url)
        items = require_list(data, "services", self.data_source.name, optional=True)

        def normalize(index: int, service: dict[str, Any]) -> ComponentData:
            return ComponentData(
                external_id=str(service.get("id") or service["name"]),
                data_source_id=self.data_source.id,
                name=service["name"],
                description=service.get("displayName"),
                status=service.get("health") or "operational",
                group=COMPONENT_GROUP,
                position=index,
                show_uptime=True,
                metadata={
                    "source": self.SOURCE_TAG,
                    "service_id": service.get("id"),
                },
            )

        components = normalize_items(items, normalize, self.data_source.name, "service")
        logger.info(f"Fetched {len(components)} components from {self.data_source.name}")
        return components

    def fetch_incident_updates(self, external_id: str) -> list[IncidentUpdateData]:
        # Azure exposes no per-issue history
        return []
