"""Host process - Runs the sync scheduler until SIGINT/SIGTERM.

Usage:
    incident-sync
    python -m incident_sync.main
"""

import logging
import signal
import sys
import threading

from incident_sync.core.config import settings
from incident_sync.db import create_db_and_tables, get_engine, get_session_factory
from incident_sync.domain import SQLModelSyncStore
from incident_sync.sync.workflows import SyncScheduler, SyncService

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_scheduler() -> SyncScheduler:
    """Wire store, sync service and scheduler from settings."""
    store = SQLModelSyncStore(get_session_factory())
    service = SyncService(
        store,
        respect_source_intervals=settings.SYNC_RESPECT_SOURCE_INTERVALS,
    )
    return SyncScheduler(
        store,
        service,
        interval_seconds=settings.SYNC_INTERVAL_SECONDS,
        default_sources=None if settings.SYNC_BOOTSTRAP_DEFAULTS else [],
    )


def main() -> int:
    """Main entry point."""
    setup_logging()
    logger.info(f"Starting {settings.PROJECT_NAME}")

    shutdown_requested = threading.Event()

    def handle_shutdown(signum, frame):
        logger.info(f"Shutdown signal received ({signal.Signals(signum).name})")
        shutdown_requested.set()

    # A signal during the initial pass is handled once start() returns
    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    try:
        create_db_and_tables(get_engine())
        scheduler = build_scheduler()
        scheduler.start()
    except Exception:
        logger.exception("Failed to start sync scheduler")
        return 1

    try:
        # Short waits keep the main thread responsive to signals
        while not shutdown_requested.wait(1.0):
            pass
    finally:
        scheduler.stop(timeout=30)

    logger.info(f"{settings.PROJECT_NAME} stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
