"""Connector contract, errors and the helpers every connector shares.

A connector turns one provider's native schema into the unified records.
Connectors are independent classes satisfying IncidentConnector; each one
closes over its DataSource and the shared HTTPClient and keeps no other
state between calls.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

from .records import ComponentData, IncidentData, IncidentUpdateData

logger = logging.getLogger(__name__)

T = TypeVar("T")

_COMPACT_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")
_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:\d{2}$|$)")


class ConnectorError(Exception):
    """Base exception for connector failures scoped to one data source."""

    pass


class ConnectorConfigurationError(ConnectorError):
    """Raised when a data source lacks the credentials its connector needs."""

    pass


class ConnectorResponseError(ConnectorError):
    """Raised when a provider response does not have the expected shape."""

    pass


class UnsupportedConnectorError(ConnectorError, ValueError):
    """Raised when DataSource.type does not name a known connector."""

    pass


class IncidentConnector(Protocol):
    """Operations every provider connector implements."""

    def fetch_incidents(self) -> list[IncidentData]:
        """Fetch incidents in provider order (typically newest first)."""
        ...

    def fetch_components(self) -> list[ComponentData]:
        """Fetch service components."""
        ...

    def fetch_incident_updates(self, external_id: str) -> list[IncidentUpdateData]:
        """Fetch the timeline of one incident; [] when the provider has none."""
        ...


def map_vocabulary(table: Mapping[str, str], value: Any, default: str) -> str:
    """Map a native vocabulary value onto the unified one.

    Exact match first, then case-insensitive; anything else (including
    None) maps to ``default``. Never raises.

    Args:
        table: Native value -> unified value
        value: Native value from the provider payload
        default: Unified value for unknown input

    Returns:
        Unified vocabulary value
    """
    if value is None:
        return default

    key = str(value).strip()
    if key in table:
        return table[key]

    folded = key.casefold()
    for native, unified in table.items():
        if native.casefold() == folded:
            return unified

    return default


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Accepts "Z" suffixes, compact offsets ("+0000", as sent by Jira) and
    fractional seconds of any precision (Azure sends seven digits; they are
    truncated to microseconds). Values without an offset are taken as UTC.
    Returns None for missing or unparseable values.
    """
    if not raw:
        return None

    cleaned = str(raw).strip().replace("Z", "+00:00")
    cleaned = _COMPACT_OFFSET_RE.sub(r"\1:\2", cleaned)
    cleaned = _FRACTION_RE.sub(_pad_fraction, cleaned)

    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        logger.warning(f"Unparseable timestamp: {raw!r}")
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _pad_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def require_list(payload: Any, key: str, source_name: str, optional: bool = False) -> list:
    """Extract a list from a JSON object payload.

    Args:
        payload: Decoded JSON body
        key: Key holding the list
        source_name: DataSource name, for error messages
        optional: If True, a missing/null key yields []

    Returns:
        The list under ``key``

    Raises:
        ConnectorResponseError: If the payload is not an object or the value
            is not a list
    """
    if not isinstance(payload, dict):
        raise ConnectorResponseError(
            f"[{source_name}] Expected a JSON object, got {type(payload).__name__}"
        )

    value = payload.get(key)
    if value is None and optional:
        return []
    if not isinstance(value, list):
        raise ConnectorResponseError(
            f"[{source_name}] Expected '{key}' to be a list, got {type(value).__name__}"
        )
    return value


def normalize_items(
    items: list,
    normalize: Callable[[int, dict[str, Any]], T],
    source_name: str,
    kind: str,
) -> list[T]:
    """Apply ``normalize(index, item)`` to every item of a provider list.

    Missing keys or wrong types inside an item surface as a
    ConnectorResponseError naming the data source and the item position.
    """
    results: list[T] = []
    for index, item in enumerate(items):
        try:
            results.append(normalize(index, item))
        except (KeyError, TypeError, AttributeError) as e:
            raise ConnectorResponseError(
                f"[{source_name}] Malformed {kind} at position {index}: {e!r}"
            ) from e
    return results
