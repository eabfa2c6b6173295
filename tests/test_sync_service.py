"""Tests for the sync pass orchestrator."""

import logging
from uuid import uuid4

import pytest

from conftest import (
    FakeHTTPClient,
    make_data_source,
    statuspage_components,
    statuspage_incident,
)
from incident_sync.db import session_scope
from incident_sync.domain import IncidentOperations, IncidentUpdateOperations, ServiceComponentOperations
from incident_sync.models import ConnectorType
from incident_sync.sync.services import HTTPClientError
from incident_sync.sync.workflows import SyncService


def statuspage_routes(base_url: str, incidents=None, components=None) -> dict:
    return {
        f"{base_url}/api/v2/incidents.json": {
            "incidents": incidents if incidents is not None else [statuspage_incident()]
        },
        f"{base_url}/api/v2/components.json": components or statuspage_components(),
    }


@pytest.fixture
def three_sources(store):
    return [
        store.create_data_source(make_data_source(name=f"Source {n}", base_url=f"https://s{n}.test"))
        for n in (1, 2, 3)
    ]


def make_service(store, client, clock, **kwargs) -> SyncService:
    return SyncService(store, http_client_factory=lambda: client, clock=clock, **kwargs)


class TestRunPass:
    def test_failing_source_does_not_stop_the_others(self, store, session_factory, clock, three_sources) -> None:
        client = FakeHTTPClient({
            **statuspage_routes("https://s1.test"),
            "https://s2.test/api/v2/incidents.json": HTTPClientError(
                "Request timed out after 30s: https://s2.test/api/v2/incidents.json"
            ),
            **statuspage_routes("https://s3.test"),
        })
        before = {s.id: s for s in three_sources}

        result = make_service(store, client, clock).run_pass()

        assert result.total == 3
        assert result.succeeded == 2
        assert result.failed == 1

        sources = {s.name: s for s in store.list_data_sources()}
        for name in ("Source 1", "Source 3"):
            assert sources[name].last_sync_at == clock.now
            assert sources[name].last_error is None
            assert sources[name].retry_count == 0

        failed = sources["Source 2"]
        assert "timed out" in failed.last_error
        assert failed.retry_count == before[failed.id].retry_count + 1

        with session_scope(session_factory) as session:
            assert IncidentOperations.count(session, sources["Source 1"].id) == 1
            assert IncidentOperations.count(session, sources["Source 3"].id) == 1
            assert ServiceComponentOperations.count(session, sources["Source 3"].id) == 2
            assert IncidentOperations.count(session, failed.id) == 0

    def test_unsupported_type_is_recorded_per_source(self, store, clock) -> None:
        store.create_data_source(make_data_source(name="Mystery", type="pagerduty"))
        good = store.create_data_source(make_data_source(name="Good", base_url="https://good.test"))
        client = FakeHTTPClient(statuspage_routes("https://good.test"))

        result = make_service(store, client, clock).run_pass()

        by_name = {r.name: r for r in result.sources}
        assert by_name["Good"].success is True
        assert by_name["Mystery"].success is False
        assert "Unsupported connector type: pagerduty" in by_name["Mystery"].error
        assert store.get_data_source(good.id).last_error is None

    def test_missing_jira_token_is_recorded(self, store, clock) -> None:
        jira = store.create_data_source(
            make_data_source(name="Jira", type=ConnectorType.JIRA.value, base_url="https://acme.atlassian.net")
        )
        client = FakeHTTPClient()

        make_service(store, client, clock).run_pass()

        stored = store.get_data_source(jira.id)
        assert stored.last_error == "Jira OAuth token not found for data source 'Jira'"
        assert stored.retry_count == 1
        assert client.calls == []

    def test_inactive_sources_are_ignored(self, store, clock) -> None:
        inactive = store.create_data_source(make_data_source(name="Off", is_active=False))
        client = FakeHTTPClient()

        result = make_service(store, client, clock).run_pass()

        assert result.total == 0
        assert store.get_data_source(inactive.id).last_sync_at is None

    def test_title_change_updates_the_same_row(self, store, session_factory, clock) -> None:
        source = store.create_data_source(make_data_source(base_url="https://acme.test"))
        client = FakeHTTPClient(statuspage_routes("https://acme.test", incidents=[statuspage_incident(name="Old title")]))
        service = make_service(store, client, clock)

        service.run_pass()
        first_updated_at = store.get_incident("inc-1", source.id).updated_at

        client.responses.update(
            statuspage_routes("https://acme.test", incidents=[statuspage_incident(name="New title")])
        )
        clock.advance(300)
        service.run_pass()

        with session_scope(session_factory) as session:
            assert IncidentOperations.count(session, source.id) == 1
        incident = store.get_incident("inc-1", source.id)
        assert incident.title == "New title"
        assert incident.updated_at > first_updated_at

    def test_recovery_resets_retry_count(self, store, clock) -> None:
        source = store.create_data_source(make_data_source(base_url="https://acme.test"))
        client = FakeHTTPClient()
        service = make_service(store, client, clock)

        service.run_pass()
        service.run_pass()
        assert store.get_data_source(source.id).retry_count == 2

        client.responses.update(statuspage_routes("https://acme.test"))
        service.run_pass()

        stored = store.get_data_source(source.id)
        assert stored.retry_count == 0
        assert stored.last_error is None

    def test_chronic_failure_logs_warning(self, store, clock, caplog) -> None:
        store.create_data_source(make_data_source(name="Flaky", base_url="https://flaky.test"))
        service = make_service(store, FakeHTTPClient(), clock, failure_warn_threshold=2)

        with caplog.at_level(logging.WARNING, logger="incident_sync.sync.workflows.sync_service"):
            service.run_pass()
            assert not any("consecutive" in r.message for r in caplog.records)
            service.run_pass()

        assert any("Flaky has failed 2 consecutive syncs" in r.message for r in caplog.records)

    def test_outcome_write_failure_does_not_abort_pass(self, store, clock, three_sources, monkeypatch) -> None:
        client = FakeHTTPClient({
            **statuspage_routes("https://s1.test"),
            **statuspage_routes("https://s2.test"),
            **statuspage_routes("https://s3.test"),
        })
        original = store.record_sync_outcome

        def flaky_record(data_source_id, error=None, synced_at=None):
            if data_source_id == three_sources[0].id:
                raise RuntimeError("database unavailable")
            return original(data_source_id, error=error, synced_at=synced_at)

        monkeypatch.setattr(store, "record_sync_outcome", flaky_record)

        result = make_service(store, client, clock).run_pass()

        assert result.total == 3
        assert store.get_data_source(three_sources[2].id).last_sync_at == clock.now

    def test_result_to_dict(self, store, clock) -> None:
        store.create_data_source(make_data_source(base_url="https://acme.test"))
        client = FakeHTTPClient(statuspage_routes("https://acme.test"))

        summary = make_service(store, client, clock).run_pass().to_dict()

        assert summary["total"] == 1
        assert summary["succeeded"] == 1
        assert summary["incidents"] == 1
        assert summary["components"] == 2
        assert summary["sources"][0]["name"] == "Acme Status"


class TestSourceIntervals:
    def test_recently_synced_sources_are_skipped_when_enabled(self, store, clock) -> None:
        source = store.create_data_source(
            make_data_source(base_url="https://acme.test", sync_interval_seconds=600)
        )
        client = FakeHTTPClient(statuspage_routes("https://acme.test"))
        service = make_service(store, client, clock, respect_source_intervals=True)

        service.run_pass()
        clock.advance(300)
        second = service.run_pass()
        clock.advance(300)
        third = service.run_pass()

        assert second.skipped == 1
        assert third.succeeded == 1
        assert store.get_data_source(source.id).last_sync_at == clock.now

    def test_intervals_are_ignored_by_default(self, store, clock) -> None:
        store.create_data_source(make_data_source(base_url="https://acme.test", sync_interval_seconds=600))
        client = FakeHTTPClient(statuspage_routes("https://acme.test"))
        service = make_service(store, client, clock)

        service.run_pass()
        clock.advance(60)

        assert service.run_pass().succeeded == 1


class TestSyncIncidentUpdates:
    def test_updates_are_appended_once(self, store, session_factory, clock) -> None:
        source = store.create_data_source(make_data_source(base_url="https://acme.test"))
        incident = statuspage_incident(status="monitoring")
        client = FakeHTTPClient({
            **statuspage_routes("https://acme.test", incidents=[incident]),
            "https://acme.test/api/v2/incidents/inc-1.json": {"incident": incident},
        })
        service = make_service(store, client, clock)
        service.run_pass()

        assert service.sync_incident_updates(source.id, "inc-1") == 2
        assert service.sync_incident_updates(source.id, "inc-1") == 0

        stored = store.get_incident("inc-1", source.id)
        with session_scope(session_factory) as session:
            timeline = IncidentUpdateOperations.get_for_incident(session, stored.id)
        assert [u.new_status for u in timeline] == ["monitoring", "investigating"]

    def test_unknown_source_raises_lookup_error(self, store, clock) -> None:
        service = make_service(store, FakeHTTPClient(), clock)

        with pytest.raises(LookupError):
            service.sync_incident_updates(uuid4(), "inc-1")

    def test_unknown_incident_raises_lookup_error(self, store, clock) -> None:
        source = store.create_data_source(make_data_source())
        service = make_service(store, FakeHTTPClient(), clock)

        with pytest.raises(LookupError):
            service.sync_incident_updates(source.id, "missing")
