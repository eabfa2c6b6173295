"""Sync workflows - Orchestration of multi-source sync passes.

Workflows coordinate services and the store to accomplish higher-level tasks:
- sync_service: One sync pass over every active data source
- scheduler: Runs passes on a fixed interval with bootstrap and overlap guard
- defaults: Data sources created on first start
"""

from .defaults import (
    DEFAULT_DATA_SOURCES,
    build_data_source,
)
from .sync_service import (
    SyncService,
    SyncPassResult,
    SourceSyncResult,
)
from .scheduler import (
    SyncScheduler,
    SchedulerState,
)

__all__ = [
    "DEFAULT_DATA_SOURCES",
    "build_data_source",
    "SyncService",
    "SyncPassResult",
    "SourceSyncResult",
    "SyncScheduler",
    "SchedulerState",
]
