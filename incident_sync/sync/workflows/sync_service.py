"""Sync Service Workflow - Drives one poll cycle across every data source.

This workflow coordinates a sync pass:
1. Loads data sources from the store and keeps the active ones
2. Builds each source's connector and fetches incidents and components
3. Persists results via the store (idempotent upserts)
4. Records the per-source outcome (last_sync_at, last_error, retry_count)

A failure in one source never stops the others: every exception raised
while syncing a source is caught at the source boundary, logged and
recorded on that source.

Does NOT contain:
- API call logic (delegates to connectors)
- Database CRUD logic (delegates to the store)
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional
from uuid import UUID

from incident_sync.core.config import settings
from incident_sync.domain import SyncStore
from incident_sync.models import (
    DataSource,
    Incident,
    IncidentUpdate,
    ServiceComponent,
    utc_now,
)
from incident_sync.sync.services import (
    ComponentData,
    ConnectorFactory,
    HTTPClient,
    IncidentData,
    IncidentUpdateData,
)

logger = logging.getLogger(__name__)


@dataclass
class SourceSyncResult:
    """Result of syncing one data source."""

    data_source_id: UUID
    name: str
    success: bool = False
    skipped: bool = False
    incidents: int = 0
    components: int = 0
    error: Optional[str] = None
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "data_source_id": str(self.data_source_id),
            "name": self.name,
            "success": self.success,
            "skipped": self.skipped,
            "incidents": self.incidents,
            "components": self.components,
            "error": self.error,
            "duration_seconds": round(self.duration_seconds, 2),
        }


@dataclass
class SyncPassResult:
    """Result of a full sync pass."""

    started_at: datetime
    sources: List[SourceSyncResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.sources)

    @property
    def succeeded(self) -> int:
        return sum(1 for s in self.sources if s.success)

    @property
    def failed(self) -> int:
        return sum(1 for s in self.sources if not s.success and not s.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for s in self.sources if s.skipped)

    @property
    def incidents(self) -> int:
        return sum(s.incidents for s in self.sources)

    @property
    def components(self) -> int:
        return sum(s.components for s in self.sources)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "started_at": self.started_at.isoformat(),
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "incidents": self.incidents,
            "components": self.components,
            "duration_seconds": round(self.duration_seconds, 2),
            "sources": [s.to_dict() for s in self.sources],
        }


def default_http_client_factory() -> HTTPClient:
    """HTTPClient configured from settings."""
    return HTTPClient(
        timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
        user_agent=settings.HTTP_USER_AGENT,
    )


def incident_from_record(record: IncidentData) -> Incident:
    """Convert a connector record into an Incident model."""
    return Incident(
        external_id=record.external_id,
        data_source_id=record.data_source_id,
        system_name=record.system_name,
        title=record.title,
        description=record.description,
        status=record.status,
        severity=record.severity,
        impact=record.impact,
        started_at=record.started_at,
        resolved_at=record.resolved_at,
        external_updated_at=record.updated_at,
        external_url=record.external_url,
        affected_services=list(record.affected_services),
        tags=list(record.tags),
        meta=dict(record.metadata),
        is_active=record.is_active,
    )


def component_from_record(record: ComponentData) -> ServiceComponent:
    """Convert a connector record into a ServiceComponent model."""
    return ServiceComponent(
        external_id=record.external_id,
        data_source_id=record.data_source_id,
        name=record.name,
        description=record.description,
        status=record.status,
        group=record.group,
        position=record.position,
        show_uptime=record.show_uptime,
        meta=dict(record.metadata),
    )


def update_from_record(record: IncidentUpdateData, incident_id: UUID) -> IncidentUpdate:
    """Convert a connector record into an IncidentUpdate model."""
    return IncidentUpdate(
        incident_id=incident_id,
        update_type=record.update_type,
        previous_status=record.previous_status,
        new_status=record.new_status,
        message=record.message,
        timestamp=record.timestamp,
        meta=dict(record.metadata),
    )


class SyncService:
    """Runs sync passes over every active data source.

    Usage:
        from incident_sync.db import get_session_factory
        from incident_sync.domain import SQLModelSyncStore

        store = SQLModelSyncStore(get_session_factory())
        service = SyncService(store)

        result = service.run_pass()
        print(result.to_dict())
    """

    def __init__(
        self,
        store: SyncStore,
        http_client_factory: Optional[Callable[[], HTTPClient]] = None,
        connector_factory: Any = ConnectorFactory,
        clock: Callable[[], datetime] = utc_now,
        respect_source_intervals: bool = False,
        failure_warn_threshold: Optional[int] = None,
    ):
        """Initialize sync service.

        Args:
            store: Persistence boundary
            http_client_factory: Builds the HTTP client for one source (default: from settings)
            connector_factory: Object with create(data_source, http_client)
            clock: Returns the current time as an aware UTC datetime
            respect_source_intervals: Skip sources synced less than
                sync_interval_seconds ago
            failure_warn_threshold: Consecutive failures before a warning
                (default from settings)
        """
        self.store = store
        self.http_client_factory = http_client_factory or default_http_client_factory
        self.connector_factory = connector_factory
        self.clock = clock
        self.respect_source_intervals = respect_source_intervals
        self.failure_warn_threshold = (
            failure_warn_threshold
            if failure_warn_threshold is not None
            else settings.SYNC_FAILURE_WARN_THRESHOLD
        )

    def _is_due(self, data_source: DataSource, now: datetime) -> bool:
        if not self.respect_source_intervals or data_source.last_sync_at is None:
            return True
        next_due = data_source.last_sync_at + timedelta(seconds=data_source.sync_interval_seconds)
        return next_due <= now

    def _record_outcome(self, data_source: DataSource, error: Optional[str], now: datetime) -> None:
        """Write the source's sync outcome; a failure here is logged, not raised."""
        try:
            updated = self.store.record_sync_outcome(data_source.id, error=error, synced_at=now)
        except Exception as e:
            logger.error(f"Failed to record sync outcome for {data_source.name}: {e}")
            return

        if error and updated is not None and updated.retry_count >= self.failure_warn_threshold:
            logger.warning(
                f"Data source {data_source.name} has failed {updated.retry_count} "
                f"consecutive syncs (last error: {error})"
            )

    def sync_source(self, data_source: DataSource) -> SourceSyncResult:
        """Sync one data source and record its outcome.

        Never raises: every failure ends up in the returned result and in
        the source's last_error.
        """
        result = SourceSyncResult(data_source_id=data_source.id, name=data_source.name)
        start = time.monotonic()
        now = self.clock()

        try:
            with self.http_client_factory() as http_client:
                connector = self.connector_factory.create(data_source, http_client)

                incidents = connector.fetch_incidents()
                for record in incidents:
                    self.store.upsert_incident(
                        record.external_id,
                        data_source.id,
                        incident_from_record(record),
                        synced_at=now,
                    )
                result.incidents = len(incidents)

                components = connector.fetch_components()
                for record in components:
                    self.store.upsert_service_component(
                        component_from_record(record),
                        synced_at=now,
                    )
                result.components = len(components)

            result.success = True
            logger.info(
                f"Synced {data_source.name}: {result.incidents} incidents, "
                f"{result.components} components"
            )
        except Exception as e:
            result.error = str(e) or e.__class__.__name__
            logger.error(f"Error syncing data source {data_source.name}: {result.error}")
            logger.debug(f"Sync failure detail for {data_source.name}", exc_info=True)

        self._record_outcome(data_source, result.error, now)
        result.duration_seconds = time.monotonic() - start
        return result

    def run_pass(self) -> SyncPassResult:
        """Run one sync pass over every active data source.

        Returns:
            SyncPassResult with per-source results

        Raises:
            Exception: Only if the data source list itself cannot be loaded
        """
        started_at = self.clock()
        start = time.monotonic()
        result = SyncPassResult(started_at=started_at)

        sources = [s for s in self.store.list_data_sources() if s.is_active]
        logger.info(f"Starting sync pass for {len(sources)} active data sources")

        for data_source in sources:
            if not self._is_due(data_source, started_at):
                logger.debug(f"Skipping {data_source.name}: sync interval not elapsed")
                result.sources.append(SourceSyncResult(
                    data_source_id=data_source.id,
                    name=data_source.name,
                    skipped=True,
                ))
                continue

            result.sources.append(self.sync_source(data_source))

        result.duration_seconds = time.monotonic() - start
        logger.info(
            f"Sync pass completed in {result.duration_seconds:.1f}s: "
            f"{result.succeeded} succeeded, {result.failed} failed, {result.skipped} skipped"
        )
        return result

    def sync_incident_updates(self, data_source_id: UUID, external_id: str) -> int:
        """Fetch one incident's timeline from its provider and append new entries.

        Args:
            data_source_id: Owning DataSource UUID
            external_id: Provider's incident identifier

        Returns:
            Number of updates appended

        Raises:
            LookupError: If the data source or incident is unknown
        """
        data_source = self.store.get_data_source(data_source_id)
        if data_source is None:
            raise LookupError(f"Data source {data_source_id} not found")

        incident = self.store.get_incident(external_id, data_source_id)
        if incident is None:
            raise LookupError(
                f"Incident {external_id} not found for data source {data_source.name}"
            )

        with self.http_client_factory() as http_client:
            connector = self.connector_factory.create(data_source, http_client)
            records = connector.fetch_incident_updates(external_id)

        updates = [update_from_record(r, incident.id) for r in records]
        appended = self.store.append_incident_updates(incident.id, updates) if updates else 0
        logger.info(
            f"Appended {appended} of {len(records)} updates for incident "
            f"{external_id} ({data_source.name})"
        )
        return appended
