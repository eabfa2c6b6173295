"""Sync Scheduler - Runs sync passes forever on a fixed interval.

Lifecycle: STOPPED -> STARTING -> RUNNING -> STOPPED.

start() seeds the default data sources into an empty store, runs one pass
immediately, then hands off to a daemon timer thread. A pass that raises
is logged and the timer keeps firing; a tick that arrives while a pass is
still running is skipped.
"""

import logging
import threading
from enum import Enum
from typing import Any, Optional

from incident_sync.domain import SyncStore
from .defaults import DEFAULT_DATA_SOURCES, build_data_source
from .sync_service import SyncPassResult, SyncService

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


class SyncScheduler:
    """Owns the timer that drives SyncService.run_pass().

    Usage:
        scheduler = SyncScheduler(store, SyncService(store), interval_seconds=300)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        store: SyncStore,
        sync_service: SyncService,
        interval_seconds: float = 300,
        default_sources: Optional[list[dict[str, Any]]] = None,
    ):
        """Initialize scheduler.

        Args:
            store: Persistence boundary (used for bootstrap)
            sync_service: Service whose run_pass() is called every tick
            interval_seconds: Seconds between passes
            default_sources: Definitions created when the store is empty
                (default: DEFAULT_DATA_SOURCES; pass [] to disable)
        """
        self.store = store
        self.sync_service = sync_service
        self.interval_seconds = interval_seconds
        self.default_sources = (
            DEFAULT_DATA_SOURCES if default_sources is None else default_sources
        )

        self._state = SchedulerState.STOPPED
        self._state_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    def bootstrap_defaults(self) -> int:
        """Create the default data sources if the store has none.

        Each creation failure is logged and skipped. A failure to list the
        existing sources propagates.

        Returns:
            Number of data sources created
        """
        if self.store.list_data_sources():
            return 0

        logger.info("Initializing default data sources...")
        created = 0
        for definition in self.default_sources:
            try:
                self.store.create_data_source(build_data_source(definition))
                created += 1
                logger.info(f"Created data source: {definition['name']}")
            except Exception as e:
                logger.error(f"Failed to create data source {definition.get('name')}: {e}")

        logger.info(f"Default data sources initialized ({created} created)")
        return created

    def start(self) -> None:
        """Bootstrap, run one pass, and start the timer thread.

        Calling start() on a scheduler that is not stopped does nothing.

        Raises:
            Exception: If bootstrap cannot list data sources or the timer
                thread cannot be started; the scheduler stays STOPPED
        """
        with self._state_lock:
            if self._state != SchedulerState.STOPPED:
                logger.warning(f"Scheduler start ignored (state: {self._state.value})")
                return
            self._state = SchedulerState.STARTING

        try:
            self.bootstrap_defaults()

            # Initial pass; failures must not prevent the timer from starting
            self.trigger()

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop,
                name="sync-scheduler",
                daemon=True,
            )
            self._thread.start()
        except Exception:
            self._thread = None
            with self._state_lock:
                self._state = SchedulerState.STOPPED
            raise

        with self._state_lock:
            self._state = SchedulerState.RUNNING
        logger.info(f"Sync scheduler started with {self.interval_seconds}s interval")

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.trigger()

    def trigger(self) -> Optional[SyncPassResult]:
        """Run one pass now unless one is already in progress.

        Returns:
            The pass result, or None if the pass was skipped or failed
        """
        if not self._pass_lock.acquire(blocking=False):
            logger.warning("Sync pass already in progress, skipping this tick")
            return None

        try:
            return self.sync_service.run_pass()
        except Exception:
            logger.exception("Scheduled sync failed")
            return None
        finally:
            self._pass_lock.release()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the timer thread. Safe to call more than once."""
        self._stop_event.set()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

        with self._state_lock:
            was_running = self._state != SchedulerState.STOPPED
            self._state = SchedulerState.STOPPED

        if was_running:
            logger.info("Sync scheduler stopped")
