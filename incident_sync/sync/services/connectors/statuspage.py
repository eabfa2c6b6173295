"""StatusPage Connector - Public status pages hosted on Atlassian Statuspage.

Endpoints (relative to DataSource.base_url):
- /api/v2/incidents.json: recent incidents, newest first
- /api/v2/components.json: components and their current status
- /api/v2/incidents/{id}.json: one incident with its full update list

The normalize_* functions are shared with other connectors that speak the
same Statuspage v2 schema; each connector passes its own vocabulary tables.
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional
from uuid import UUID

from incident_sync.models import DataSource, IncidentSeverity, IncidentStatus
from ..http_client import HTTPClient
from .base import (
    ConnectorResponseError,
    map_vocabulary,
    normalize_items,
    parse_timestamp,
    require_list,
)
from .records import ComponentData, IncidentData, IncidentUpdateData

logger = logging.getLogger(__name__)

_STATUS_MAP: Mapping[str, str] = MappingProxyType({
    "investigating": IncidentStatus.INVESTIGATING.value,
    "identified": IncidentStatus.IDENTIFIED.value,
    "monitoring": IncidentStatus.MONITORING.value,
    "resolved": IncidentStatus.RESOLVED.value,
    "postmortem": IncidentStatus.RESOLVED.value,
})
_STATUS_DEFAULT = IncidentStatus.INVESTIGATING.value

# Severity is derived from the incident's impact
_SEVERITY_MAP: Mapping[str, str] = MappingProxyType({
    "critical": IncidentSeverity.CRITICAL.value,
    "major": IncidentSeverity.HIGH.value,
    "minor": IncidentSeverity.MEDIUM.value,
    "none": IncidentSeverity.LOW.value,
})
_SEVERITY_DEFAULT = IncidentSeverity.MEDIUM.value

COMPONENT_STATUS_DEFAULT = "operational"


def normalize_incident(
    raw: dict[str, Any],
    data_source_id: UUID,
    system_name: str,
    status_map: Mapping[str, str],
    severity_map: Mapping[str, str],
    tags: list[str],
    metadata: dict[str, Any],
) -> IncidentData:
    """Build an IncidentData from a Statuspage v2 incident object."""
    updates = raw.get("incident_updates") or []
    description = (updates[0].get("body") if updates else None) or ""
    impact = raw.get("impact")
    status = raw.get("status")

    return IncidentData(
        external_id=str(raw["id"]),
        data_source_id=data_source_id,
        system_name=system_name,
        title=raw.get("name") or "Untitled incident",
        description=description,
        status=map_vocabulary(status_map, status, _STATUS_DEFAULT),
        severity=map_vocabulary(severity_map, impact, _SEVERITY_DEFAULT),
        impact=impact,
        started_at=parse_timestamp(raw.get("created_at")),
        resolved_at=parse_timestamp(raw.get("resolved_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        external_url=raw.get("shortlink"),
        affected_services=[c["name"] for c in raw.get("components") or [] if c.get("name")],
        tags=[t for t in [*tags, impact, status] if t],
        metadata=metadata,
    )


def normalize_component(
    raw: dict[str, Any],
    data_source_id: UUID,
    group_names: Mapping[str, str],
    default_group: Optional[str],
    metadata: dict[str, Any],
) -> ComponentData:
    """Build a ComponentData from a Statuspage v2 component object."""
    group_id = raw.get("group_id")
    group = group_names.get(group_id, default_group) if group_id else None

    return ComponentData(
        external_id=str(raw["id"]),
        data_source_id=data_source_id,
        name=raw["name"],
        description=raw.get("description"),
        status=raw.get("status") or COMPONENT_STATUS_DEFAULT,
        group=group,
        position=raw.get("position"),
        show_uptime=bool(raw.get("showcase", False)),
        metadata=metadata,
    )


def component_group_names(components: list[dict[str, Any]]) -> dict[str, str]:
    """Map group component ids to their names (groups are components too)."""
    return {
        str(c["id"]): c.get("name", "")
        for c in components
        if isinstance(c, dict) and c.get("group") and c.get("id")
    }


def normalize_updates(
    incident_external_id: str,
    updates: list[dict[str, Any]],
    status_map: Mapping[str, str],
    source_tag: str,
) -> list[IncidentUpdateData]:
    """Build IncidentUpdateData entries from a newest-first update list.

    previous_status is taken from the next older update, so the oldest
    entry has none.
    """
    results: list[IncidentUpdateData] = []
    for index, update in enumerate(updates):
        older = updates[index + 1] if index + 1 < len(updates) else None
        previous = (
            map_vocabulary(status_map, older.get("status"), _STATUS_DEFAULT)
            if older
            else None
        )
        new_status = map_vocabulary(status_map, update.get("status"), _STATUS_DEFAULT)
        timestamp = parse_timestamp(update.get("created_at"))
        if timestamp is None:
            raise KeyError("created_at")

        results.append(IncidentUpdateData(
            incident_external_id=incident_external_id,
            update_type="status_change" if previous != new_status else "new_update",
            timestamp=timestamp,
            new_status=new_status,
            previous_status=previous,
            message=update.get("body"),
            metadata={
                "source": source_tag,
                "update_id": update.get("id"),
                "display_at": update.get("display_at"),
            },
        ))
    return results


class StatusPageConnector:
    """Connector for any Statuspage-hosted public status page.

    Example:
        connector = StatusPageConnector(data_source, HTTPClient())
        incidents = connector.fetch_incidents()
    """

    SOURCE_TAG = "statuspage"

    def __init__(self, data_source: DataSource, http_client: HTTPClient):
        """Initialize connector.

        Args:
            data_source: DataSource whose base_url is the status page root
            http_client: Shared HTTP client
        """
        self.data_source = data_source
        self.client = http_client

    @property
    def base_url(self) -> str:
        return self.data_source.base_url.rstrip("/")

    def fetch_incidents(self) -> list[IncidentData]:
        """Fetch recent incidents from /api/v2/incidents.json.

        Raises:
            HTTPClientError: On API request failure
            ConnectorResponseError: On unexpected payload shape
        """
        data = self.client.get(f"{self.base_url}/api/v2/incidents.json")
        items = require_list(data, "incidents", self.data_source.name)

        def normalize(_: int, raw: dict[str, Any]) -> IncidentData:
            return normalize_incident(
                raw,
                data_source_id=self.data_source.id,
                system_name=self.data_source.name,
                status_map=_STATUS_MAP,
                severity_map=_SEVERITY_MAP,
                tags=[],
                metadata={
                    "source": self.SOURCE_TAG,
                    "monitoring_at": raw.get("monitoring_at"),
                    "resolving_at": raw.get("resolving_at"),
                    "component_ids": raw.get("component_ids"),
                },
            )

        incidents = normalize_items(items, normalize, self.data_source.name, "incident")
        logger.info(f"Fetched {len(incidents)} incidents from {self.data_source.name}")
        return incidents

    def fetch_components(self) -> list[ComponentData]:
        """Fetch components from /api/v2/components.json."""
        data = self.client.get(f"{self.base_url}/api/v2/components.json")
        items = require_list(data, "components", self.data_source.name)
        group_names = component_group_names(items)

        def normalize(_: int, raw: dict[str, Any]) -> ComponentData:
            return normalize_component(
                raw,
                data_source_id=self.data_source.id,
                group_names=group_names,
                default_group=None,
                metadata={
                    "source": self.SOURCE_TAG,
                    "only_show_if_degraded": raw.get("only_show_if_degraded"),
                },
            )

        components = normalize_items(items, normalize, self.data_source.name, "component")
        logger.info(f"Fetched {len(components)} components from {self.data_source.name}")
        return components

    def fetch_incident_updates(self, external_id: str) -> list[IncidentUpdateData]:
        """Fetch the update list of one incident from /api/v2/incidents/{id}.json."""
        data = self.client.get(f"{self.base_url}/api/v2/incidents/{external_id}.json")
        incident = data.get("incident") if isinstance(data, dict) else None
        updates = require_list(incident, "incident_updates", self.data_source.name)

        try:
            return normalize_updates(external_id, updates, _STATUS_MAP, self.SOURCE_TAG)
        except (KeyError, TypeError, AttributeError) as e:
            raise ConnectorResponseError(
                f"[{self.data_source.name}] Malformed incident update for {external_id}: {e!r}"
            ) from e
