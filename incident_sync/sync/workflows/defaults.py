"""Default data sources created on first start and by the seed script."""

from typing import Any

from incident_sync.models import ConnectorType, DataSource

DEFAULT_DATA_SOURCES: list[dict[str, Any]] = [
    {
        "name": "GitHub Status",
        "type": ConnectorType.GITHUB_STATUS.value,
        "base_url": "https://kctbh9vrtdwd.statuspage.io",
        "sync_interval_seconds": 300,
        "is_active": True,
        "meta": {
            "description": "GitHub service status and incidents",
            "publicPage": "https://githubstatus.com",
        },
    },
    {
        "name": "Discord Status",
        "type": ConnectorType.STATUSPAGE.value,
        "base_url": "https://discordstatus.com",
        "sync_interval_seconds": 300,
        "is_active": True,
        "meta": {
            "description": "Discord service status and incidents",
            "publicPage": "https://discordstatus.com",
        },
    },
    {
        "name": "Slack Status",
        "type": ConnectorType.STATUSPAGE.value,
        "base_url": "https://status.slack.com",
        "sync_interval_seconds": 300,
        "is_active": True,
        "meta": {
            "description": "Slack service status and incidents",
            "publicPage": "https://status.slack.com",
        },
    },
    {
        "name": "Vercel Status",
        "type": ConnectorType.STATUSPAGE.value,
        "base_url": "https://www.vercel-status.com",
        "sync_interval_seconds": 300,
        "is_active": True,
        "meta": {
            "description": "Vercel platform status and incidents",
            "publicPage": "https://www.vercel-status.com",
        },
    },
    {
        "name": "Cloudflare Status",
        "type": ConnectorType.STATUSPAGE.value,
        "base_url": "https://www.cloudflarestatus.com",
        "sync_interval_seconds": 300,
        "is_active": True,
        "meta": {
            "description": "Cloudflare service status and incidents",
            "publicPage": "https://www.cloudflarestatus.com",
        },
    },
    {
        "name": "Azure Status",
        "type": ConnectorType.AZURE_STATUS.value,
        "base_url": "https://status.azure.com",
        "sync_interval_seconds": 600,
        "is_active": True,
        "meta": {
            "description": "Microsoft Azure service status and incidents",
            "publicPage": "https://status.azure.com",
        },
    },
]


def build_data_source(definition: dict[str, Any]) -> DataSource:
    """Build a fresh DataSource row from a definition dict."""
    return DataSource(**{**definition, "meta": dict(definition.get("meta") or {})})
