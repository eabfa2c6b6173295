"""Jira Connector - Open Jira Cloud issues as incidents, projects as components.

Requires an OAuth access token in DataSource.oauth_config["access_token"];
token acquisition happens outside the sync engine.

Endpoints (relative to DataSource.base_url):
- /rest/api/3/search: open issues, most recently updated first (one page)
- /rest/api/3/project: visible projects
- /rest/api/3/issue/{id}/changelog: issue history
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from incident_sync.models import DataSource, IncidentSeverity, IncidentStatus
from ..http_client import HTTPClient, HTTPClientError
from .base import (
    ConnectorConfigurationError,
    ConnectorResponseError,
    map_vocabulary,
    normalize_items,
    parse_timestamp,
    require_list,
)
from .records import ComponentData, IncidentData, IncidentUpdateData

logger = logging.getLogger(__name__)

SYSTEM_NAME = "Jira"
COMPONENT_GROUP = "Jira Projects"
SEARCH_JQL = (
    'project in (projectsWhereUserHasPermission("BROWSE_PROJECTS")) '
    "AND status != Done ORDER BY updated DESC"
)
MAX_RESULTS = 100
DEFAULT_PRIORITY = "Medium"

_STATUS_MAP: Mapping[str, str] = MappingProxyType({
    "To Do": IncidentStatus.INVESTIGATING.value,
    "In Progress": IncidentStatus.INVESTIGATING.value,
    "Open": IncidentStatus.INVESTIGATING.value,
    "In Review": IncidentStatus.MONITORING.value,
    "Blocked": IncidentStatus.IDENTIFIED.value,
    "Done": IncidentStatus.RESOLVED.value,
    "Resolved": IncidentStatus.RESOLVED.value,
    "Closed": IncidentStatus.RESOLVED.value,
})
_STATUS_DEFAULT = IncidentStatus.INVESTIGATING.value

# Severity from issue priority
_SEVERITY_MAP: Mapping[str, str] = MappingProxyType({
    "Highest": IncidentSeverity.CRITICAL.value,
    "Critical": IncidentSeverity.CRITICAL.value,
    "High": IncidentSeverity.HIGH.value,
    "Major": IncidentSeverity.HIGH.value,
    "Medium": IncidentSeverity.MEDIUM.value,
    "Minor": IncidentSeverity.MEDIUM.value,
    "Low": IncidentSeverity.LOW.value,
    "Lowest": IncidentSeverity.LOW.value,
    "Trivial": IncidentSeverity.LOW.value,
})
_SEVERITY_DEFAULT = IncidentSeverity.MEDIUM.value

# Impact from issue priority, in status-page impact terms
_IMPACT_MAP: Mapping[str, str] = MappingProxyType({
    "Highest": "major_outage",
    "Critical": "major_outage",
    "High": "partial_outage",
    "Major": "partial_outage",
    "Medium": "degraded_performance",
    "Minor": "degraded_performance",
    "Low": "operational",
    "Lowest": "operational",
    "Trivial": "operational",
})
_IMPACT_DEFAULT = "operational"


def _adf_to_text(node: Any) -> str:
    """Flatten an Atlassian Document Format node (or plain string) to text."""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(_adf_to_text(child) for child in node)
    if isinstance(node, dict):
        if node.get("type") == "text":
            return node.get("text", "")
        text = _adf_to_text(node.get("content"))
        if node.get("type") in ("paragraph", "heading", "listItem", "codeBlock"):
            return f"{text}\n"
        return text
    return str(node)


def _display_name(person: Optional[dict[str, Any]]) -> Optional[str]:
    return person.get("displayName") if person else None


class JiraConnector:
    """Connector for a Jira Cloud site."""

    SOURCE_TAG = "jira"

    def __init__(self, data_source: DataSource, http_client: HTTPClient):
        self.data_source = data_source
        self.client = http_client

    @property
    def base_url(self) -> str:
        return self.data_source.base_url.rstrip("/")

    def _auth_headers(self) -> dict[str, str]:
        """Build the bearer header, failing fast when no token is configured.

        Raises:
            ConnectorConfigurationError: If oauth_config has no access_token
        """
        oauth_config = self.data_source.oauth_config or {}
        token = oauth_config.get("access_token") if isinstance(oauth_config, dict) else None
        if not token:
            raise ConnectorConfigurationError(
                f"Jira OAuth token not found for data source '{self.data_source.name}'"
            )
        return {"Authorization": f"Bearer {token}"}

    def fetch_incidents(self) -> list[IncidentData]:
        headers = self._auth_headers()
        data = self.client.get(
            f"{self.base_url}/rest/api/3/search",
            params={"jql": SEARCH_JQL, "maxResults": MAX_RESULTS},
            headers=headers,
        )
        items = require_list(data, "issues", self.data_source.name, optional=True)

        def normalize(_: int, issue: dict[str, Any]) -> IncidentData:
            fields = issue["fields"]
            status_name = fields["status"]["name"]
            priority = (fields.get("priority") or {}).get("name") or DEFAULT_PRIORITY
            issue_type = (fields.get("issuetype") or {}).get("name")
            project = fields.get("project") or {}

            return IncidentData(
                external_id=str(issue["id"]),
                data_source_id=self.data_source.id,
                system_name=SYSTEM_NAME,
                title=fields.get("summary") or issue.get("key", ""),
                description=_adf_to_text(fields.get("description")).strip(),
                status=map_vocabulary(_STATUS_MAP, status_name, _STATUS_DEFAULT),
                severity=map_vocabulary(_SEVERITY_MAP, priority, _SEVERITY_DEFAULT),
                impact=map_vocabulary(_IMPACT_MAP, priority, _IMPACT_DEFAULT),
                started_at=parse_timestamp(fields.get("created")),
                resolved_at=parse_timestamp(fields.get("resolutiondate")),
                updated_at=parse_timestamp(fields.get("updated")),
                external_url=f"{self.base_url}/browse/{issue['key']}",
                affected_services=[project["name"]] if project.get("name") else [],
                tags=[t for t in ["jira", issue_type, status_name] if t],
                metadata={
                    "source": self.SOURCE_TAG,
                    "issue_key": issue["key"],
                    "project_key": project.get("key"),
                    "issue_type": issue_type,
                    "priority": priority,
                    "reporter": _display_name(fields.get("reporter")),
                    "assignee": _display_name(fields.get("assignee")),
                },
            )

        incidents = normalize_items(items, normalize, self.data_source.name, "issue")
        logger.info(f"Fetched {len(incidents)} issues from {self.data_source.name}")
        return incidents

    def fetch_components(self) -> list[ComponentData]:
        headers = self._auth_headers()
        data = self.client.get(f"{self.base_url}/rest/api/3/project", headers=headers)
        if data is None:
            data = []
        if not isinstance(data, list):
            raise ConnectorResponseError(
                f"[{self.data_source.name}] Expected a list of projects, got {type(data).__name__}"
            )

        def normalize(index: int, project: dict[str, Any]) -> ComponentData:
            return ComponentData(
                external_id=str(project["id"]),
                data_source_id=self.data_source.id,
                name=project["name"],
                description=project.get("description") or f"Jira project: {project['key']}",
                status="operational",
                group=COMPONENT_GROUP,
                position=index,
                show_uptime=False,
                metadata={
                    "source": self.SOURCE_TAG,
                    "project_key": project.get("key"),
                    "project_type": project.get("projectTypeKey"),
                },
            )

        components = normalize_items(data, normalize, self.data_source.name, "project")
        logger.info(f"Fetched {len(components)} projects from {self.data_source.name}")
        return components

    def fetch_incident_updates(self, external_id: str) -> list[IncidentUpdateData]:
        """Fetch the changelog of one issue.

        Best-effort: a transport or API error is logged and yields [].
        Missing credentials still raise.
        """
        headers = self._auth_headers()

        try:
            data = self.client.get(
                f"{self.base_url}/rest/api/3/issue/{external_id}/changelog",
                headers=headers,
            )
        except HTTPClientError as e:
            logger.error(
                f"Error fetching Jira changelog for {external_id} "
                f"({self.data_source.name}): {e}"
            )
            return []

        items = require_list(data, "values", self.data_source.name, optional=True)

        def normalize(_: int, change: dict[str, Any]) -> IncidentUpdateData:
            status_item = next(
                (item for item in change.get("items") or [] if item.get("field") == "status"),
                None,
            )
            author = _display_name(change.get("author")) or "unknown"
            timestamp = parse_timestamp(change.get("created"))
            if timestamp is None:
                raise KeyError("created")

            if status_item:
                previous = map_vocabulary(_STATUS_MAP, status_item.get("fromString"), _STATUS_DEFAULT)
                new_status = map_vocabulary(_STATUS_MAP, status_item.get("toString"), _STATUS_DEFAULT)
            else:
                previous = new_status = None

            return IncidentUpdateData(
                incident_external_id=external_id,
                update_type="status_change" if status_item else "new_update",
                timestamp=timestamp,
                new_status=new_status,
                previous_status=previous,
                message=f"Updated by {author}",
                metadata={
                    "source": self.SOURCE_TAG,
                    "change_id": change.get("id"),
                    "author": author,
                    "items": change.get("items") or [],
                },
            )

        return normalize_items(items, normalize, self.data_source.name, "changelog entry")
