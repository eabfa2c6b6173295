"""GitHub Status Connector - githubstatus.com (a Statuspage v2 page).

GitHub embeds incident updates inside each incident, so this connector has
no separate changelog fetch.
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping

from incident_sync.models import DataSource, IncidentSeverity, IncidentStatus
from ..http_client import HTTPClient
from .base import normalize_items, require_list
from .records import ComponentData, IncidentData, IncidentUpdateData
from .statuspage import normalize_component, normalize_incident

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://kctbh9vrtdwd.statuspage.io"
SYSTEM_NAME = "GitHub"
COMPONENT_GROUP = "GitHub Services"

_STATUS_MAP: Mapping[str, str] = MappingProxyType({
    "investigating": IncidentStatus.INVESTIGATING.value,
    "identified": IncidentStatus.IDENTIFIED.value,
    "monitoring": IncidentStatus.MONITORING.value,
    "resolved": IncidentStatus.RESOLVED.value,
})

_SEVERITY_MAP: Mapping[str, str] = MappingProxyType({
    "critical": IncidentSeverity.CRITICAL.value,
    "major": IncidentSeverity.HIGH.value,
    "minor": IncidentSeverity.MEDIUM.value,
    "none": IncidentSeverity.LOW.value,
})


class GitHubStatusConnector:
    """Connector for GitHub's status page."""

    SOURCE_TAG = "github-status"

    def __init__(self, data_source: DataSource, http_client: HTTPClient):
        self.data_source = data_source
        self.client = http_client

    @property
    def base_url(self) -> str:
        return (self.data_source.base_url or DEFAULT_BASE_URL).rstrip("/")

    def fetch_incidents(self) -> list[IncidentData]:
        data = self.client.get(f"{self.base_url}/api/v2/incidents.json")
        items = require_list(data, "incidents", self.data_source.name)

        def normalize(_: int, raw: dict[str, Any]) -> IncidentData:
            return normalize_incident(
                raw,
                data_source_id=self.data_source.id,
                system_name=SYSTEM_NAME,
                status_map=_STATUS_MAP,
                severity_map=_SEVERITY_MAP,
                tags=["github"],
                metadata={
                    "source": self.SOURCE_TAG,
                    "incident_id": raw.get("id"),
                },
            )

        incidents = normalize_items(items, normalize, self.data_source.name, "incident")
        logger.info(f"Fetched {len(incidents)} incidents from {self.data_source.name}")
        return incidents

    def fetch_components(self) -> list[ComponentData]:
        data = self.client.get(f"{self.base_url}/api/v2/components.json")
        items = require_list(data, "components", self.data_source.name)

        def normalize(_: int, raw: dict[str, Any]) -> ComponentData:
            return normalize_component(
                raw,
                data_source_id=self.data_source.id,
                # Any grouped component is reported under one fixed group
                group_names={},
                default_group=COMPONENT_GROUP,
                metadata={
                    "source": self.SOURCE_TAG,
                    "component_id": raw.get("id"),
                },
            )

        components = normalize_items(items, normalize, self.data_source.name, "component")
        logger.info(f"Fetched {len(components)} components from {self.data_source.name}")
        return components

    def fetch_incident_updates(self, external_id: str) -> list[IncidentUpdateData]:
        # Updates are embedded in the incidents payload
        return []
