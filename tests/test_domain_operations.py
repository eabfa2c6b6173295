"""Tests for domain operations and the SQLModel-backed store."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import make_data_source
from incident_sync.domain import (
    DataSourceOperations,
    IncidentOperations,
    IncidentUpdateOperations,
    ServiceComponentOperations,
)
from incident_sync.models import Incident, IncidentUpdate, ServiceComponent

T0 = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_incident(data_source_id, external_id="inc-1", title="API errors", **kwargs) -> Incident:
    fields = {
        "system_name": "Acme Status",
        "status": "investigating",
        "severity": "medium",
        "impact": "minor",
        "tags": ["minor"],
        "affected_services": ["API"],
        "meta": {"source": "statuspage"},
    }
    fields.update(kwargs)
    return Incident(external_id=external_id, data_source_id=data_source_id, title=title, **fields)


@pytest.fixture
def source(store):
    return store.create_data_source(make_data_source())


class TestIncidentUpsert:
    def test_identical_upserts_keep_one_row(self, session, source) -> None:
        IncidentOperations.upsert(session, make_incident(source.id), synced_at=T0)
        second = IncidentOperations.upsert(
            session, make_incident(source.id), synced_at=T0 + timedelta(minutes=5)
        )

        assert IncidentOperations.count(session, source.id) == 1
        assert second.updated_at == T0 + timedelta(minutes=5)
        assert second.synced_at == T0 + timedelta(minutes=5)

    def test_upsert_overwrites_mutable_fields(self, session, source) -> None:
        first = IncidentOperations.upsert(session, make_incident(source.id), synced_at=T0)
        second = IncidentOperations.upsert(
            session,
            make_incident(source.id, title="API errors resolved", status="resolved", tags=[]),
            synced_at=T0,
        )

        assert second.id == first.id
        assert second.title == "API errors resolved"
        assert second.status == "resolved"
        assert second.tags == []

    def test_same_external_id_in_two_sources_is_two_rows(self, session, store, source) -> None:
        other = store.create_data_source(make_data_source(name="Other Status"))

        IncidentOperations.upsert(session, make_incident(source.id))
        IncidentOperations.upsert(session, make_incident(other.id))

        assert IncidentOperations.count(session) == 2

    def test_get_active_excludes_resolved(self, session, source) -> None:
        IncidentOperations.upsert(session, make_incident(source.id, external_id="a"))
        IncidentOperations.upsert(session, make_incident(source.id, external_id="b", status="resolved"))

        assert [i.external_id for i in IncidentOperations.get_active(session)] == ["a"]


class TestServiceComponentUpsert:
    def test_identical_upserts_keep_one_row(self, session, source) -> None:
        component = dict(external_id="cmp-1", data_source_id=source.id, name="API", status="operational")

        ServiceComponentOperations.upsert(session, ServiceComponent(**component), synced_at=T0)
        updated = ServiceComponentOperations.upsert(
            session,
            ServiceComponent(**{**component, "status": "major_outage"}),
            synced_at=T0 + timedelta(minutes=1),
        )

        assert ServiceComponentOperations.count(session, source.id) == 1
        assert updated.status == "major_outage"
        assert updated.updated_at == T0 + timedelta(minutes=1)


class TestDataSourceOperations:
    def test_name_is_unique(self, session) -> None:
        DataSourceOperations.create(session, make_data_source(name="Dup"))

        with pytest.raises(IntegrityError):
            DataSourceOperations.create(session, make_data_source(name="Dup"))

    def test_failure_increments_retry_count(self, session, source) -> None:
        DataSourceOperations.record_sync_outcome(session, source.id, error="boom", synced_at=T0)
        updated = DataSourceOperations.record_sync_outcome(session, source.id, error="boom again", synced_at=T0)

        assert updated.retry_count == 2
        assert updated.last_error == "boom again"
        assert updated.last_sync_at == T0

    def test_success_resets_retry_count(self, session, source) -> None:
        DataSourceOperations.record_sync_outcome(session, source.id, error="boom")
        updated = DataSourceOperations.record_sync_outcome(session, source.id, synced_at=T0)

        assert updated.retry_count == 0
        assert updated.last_error is None
        assert updated.last_sync_at == T0

    def test_get_active_filters_inactive(self, session) -> None:
        DataSourceOperations.create(session, make_data_source(name="On"))
        DataSourceOperations.create(session, make_data_source(name="Off", is_active=False))

        assert [s.name for s in DataSourceOperations.get_active(session)] == ["On"]
        assert DataSourceOperations.count(session) == 2


class TestIncidentUpdateAppend:
    def test_duplicates_are_skipped(self, session, source) -> None:
        incident = IncidentOperations.upsert(session, make_incident(source.id))

        def updates():
            return [
                IncidentUpdate(incident_id=incident.id, update_type="new_update",
                               new_status="investigating", message="Looking", timestamp=T0),
                IncidentUpdate(incident_id=incident.id, update_type="status_change",
                               previous_status="investigating", new_status="resolved",
                               message="Fixed", timestamp=T0 + timedelta(hours=1)),
            ]

        assert IncidentUpdateOperations.append(session, incident.id, updates()) == 2
        assert IncidentUpdateOperations.append(session, incident.id, updates()) == 0

        timeline = IncidentUpdateOperations.get_for_incident(session, incident.id)
        assert [u.message for u in timeline] == ["Fixed", "Looking"]

    def test_distinct_changes_in_the_same_second_are_kept(self, session, source) -> None:
        incident = IncidentOperations.upsert(session, make_incident(source.id))

        def updates():
            return [
                IncidentUpdate(incident_id=incident.id, update_type="new_update",
                               message="Updated by Ada", timestamp=T0,
                               meta={"source": "jira", "change_id": change_id})
                for change_id in ("10001", "10002")
            ]

        assert IncidentUpdateOperations.append(session, incident.id, updates()) == 2
        assert IncidentUpdateOperations.append(session, incident.id, updates()) == 0


class TestTimestampStorage:
    def test_stored_timestamps_are_aware_utc(self, session, source) -> None:
        stored = IncidentOperations.upsert(session, make_incident(source.id, started_at=T0), synced_at=T0)
        outcome = DataSourceOperations.record_sync_outcome(session, source.id, synced_at=T0)

        for value in (stored.started_at, stored.synced_at, outcome.last_sync_at, source.created_at):
            assert value.utcoffset() == timedelta(0)

    def test_default_created_at_is_aware(self, store) -> None:
        created = store.create_data_source(make_data_source(name="Fresh"))

        assert created.created_at.tzinfo is not None
        assert store.get_data_source(created.id).created_at.utcoffset() == timedelta(0)


class TestSQLModelSyncStore:
    def test_upsert_incident_uses_key_arguments(self, store, source) -> None:
        incident = make_incident(None, external_id="ignored")

        stored = store.upsert_incident("inc-9", source.id, incident, synced_at=T0)

        assert stored.external_id == "inc-9"
        assert stored.data_source_id == source.id
        assert store.get_incident("inc-9", source.id).id == stored.id

    def test_list_data_sources_is_ordered_by_name(self, store) -> None:
        store.create_data_source(make_data_source(name="Zeta"))
        store.create_data_source(make_data_source(name="Alpha"))

        assert [s.name for s in store.list_data_sources()] == ["Alpha", "Zeta"]

    def test_record_sync_outcome_for_missing_source_returns_none(self, store) -> None:
        from uuid import uuid4

        assert store.record_sync_outcome(uuid4(), error="gone") is None
