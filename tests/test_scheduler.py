"""Tests for the sync scheduler lifecycle and bootstrap."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from conftest import make_data_source
from incident_sync.sync.workflows import (
    DEFAULT_DATA_SOURCES,
    SchedulerState,
    SyncScheduler,
)


def wait_for(condition, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


@pytest.fixture
def sync_service():
    return MagicMock()


class TestBootstrap:
    def test_empty_store_gets_the_default_set_once(self, store, sync_service) -> None:
        scheduler = SyncScheduler(store, sync_service)

        assert scheduler.bootstrap_defaults() == len(DEFAULT_DATA_SOURCES)
        assert scheduler.bootstrap_defaults() == 0

        names = sorted(s.name for s in store.list_data_sources())
        assert names == sorted(d["name"] for d in DEFAULT_DATA_SOURCES)

    def test_non_empty_store_is_left_alone(self, store, sync_service) -> None:
        store.create_data_source(make_data_source(name="Existing"))

        SyncScheduler(store, sync_service).bootstrap_defaults()

        assert [s.name for s in store.list_data_sources()] == ["Existing"]

    def test_default_set_contents(self, store, sync_service) -> None:
        SyncScheduler(store, sync_service).bootstrap_defaults()

        sources = {s.name: s for s in store.list_data_sources()}
        assert sources["GitHub Status"].type == "github-status"
        assert sources["GitHub Status"].base_url == "https://kctbh9vrtdwd.statuspage.io"
        assert sources["Azure Status"].type == "azure-status"
        assert sources["Azure Status"].sync_interval_seconds == 600
        assert {sources[n].type for n in ("Discord Status", "Slack Status", "Vercel Status", "Cloudflare Status")} == {"statuspage"}

    def test_failed_create_is_skipped(self, sync_service) -> None:
        store = MagicMock()
        store.list_data_sources.return_value = []
        failing = DEFAULT_DATA_SOURCES[1]["name"]

        def create(data_source):
            if data_source.name == failing:
                raise RuntimeError("duplicate key")
            return data_source

        store.create_data_source.side_effect = create

        created = SyncScheduler(store, sync_service).bootstrap_defaults()

        assert created == len(DEFAULT_DATA_SOURCES) - 1
        assert store.create_data_source.call_count == len(DEFAULT_DATA_SOURCES)

    def test_empty_default_list_disables_bootstrap(self, store, sync_service) -> None:
        assert SyncScheduler(store, sync_service, default_sources=[]).bootstrap_defaults() == 0
        assert store.list_data_sources() == []


class TestLifecycle:
    def test_start_runs_immediately_then_on_interval(self, store, sync_service) -> None:
        scheduler = SyncScheduler(store, sync_service, interval_seconds=0.05)

        scheduler.start()
        try:
            assert scheduler.state == SchedulerState.RUNNING
            assert scheduler.is_running
            assert sync_service.run_pass.call_count >= 1
            assert wait_for(lambda: sync_service.run_pass.call_count >= 3)
        finally:
            scheduler.stop(timeout=2)

        assert scheduler.state == SchedulerState.STOPPED
        assert not scheduler.is_running

    def test_stop_is_idempotent(self, store, sync_service) -> None:
        scheduler = SyncScheduler(store, sync_service, interval_seconds=60)

        scheduler.stop()
        scheduler.start()
        scheduler.stop(timeout=2)
        scheduler.stop(timeout=2)

        assert scheduler.state == SchedulerState.STOPPED

    def test_no_passes_after_stop(self, store, sync_service) -> None:
        scheduler = SyncScheduler(store, sync_service, interval_seconds=0.02)
        scheduler.start()
        scheduler.stop(timeout=2)

        calls = sync_service.run_pass.call_count
        time.sleep(0.1)

        assert sync_service.run_pass.call_count == calls

    def test_second_start_is_ignored(self, store, sync_service) -> None:
        scheduler = SyncScheduler(store, sync_service, interval_seconds=60)
        scheduler.start()
        try:
            scheduler.start()
            assert sync_service.run_pass.call_count == 1
        finally:
            scheduler.stop(timeout=2)

    def test_failing_initial_pass_still_starts_timer(self, store, sync_service) -> None:
        sync_service.run_pass.side_effect = RuntimeError("database unavailable")
        scheduler = SyncScheduler(store, sync_service, interval_seconds=0.02)

        scheduler.start()
        try:
            assert scheduler.is_running
            assert wait_for(lambda: sync_service.run_pass.call_count >= 3)
        finally:
            scheduler.stop(timeout=2)

    def test_bootstrap_listing_failure_propagates(self, sync_service) -> None:
        store = MagicMock()
        store.list_data_sources.side_effect = RuntimeError("connection refused")
        scheduler = SyncScheduler(store, sync_service, interval_seconds=60)

        with pytest.raises(RuntimeError, match="connection refused"):
            scheduler.start()

        assert scheduler.state == SchedulerState.STOPPED
        sync_service.run_pass.assert_not_called()


class TestTrigger:
    def test_returns_pass_result(self, store, sync_service) -> None:
        sync_service.run_pass.return_value = "result"

        assert SyncScheduler(store, sync_service).trigger() == "result"

    def test_exception_is_swallowed(self, store, sync_service) -> None:
        sync_service.run_pass.side_effect = RuntimeError("boom")
        scheduler = SyncScheduler(store, sync_service)

        assert scheduler.trigger() is None
        # The guard is released after a failure
        sync_service.run_pass.side_effect = None
        sync_service.run_pass.return_value = "ok"
        assert scheduler.trigger() == "ok"

    def test_overlapping_tick_is_skipped(self, store, sync_service) -> None:
        entered = threading.Event()
        release = threading.Event()

        def slow_pass():
            entered.set()
            release.wait(2)
            return "slow"

        sync_service.run_pass.side_effect = slow_pass
        scheduler = SyncScheduler(store, sync_service)

        worker = threading.Thread(target=scheduler.trigger)
        worker.start()
        try:
            assert entered.wait(2)
            assert scheduler.trigger() is None
        finally:
            release.set()
            worker.join(2)

        assert sync_service.run_pass.call_count == 1
