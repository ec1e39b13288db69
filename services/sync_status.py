from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable

from datetime_utils import utc_now
from models.sync_status import SyncStatus


class SyncStatusTracker:
    """Read-only view of sync state for the rest of the app.

    Only the orchestrator calls ``begin``/``finish``; ``set_pending`` follows
    enqueue and clear.
    """

    def __init__(self, pending_count: int = 0) -> None:
        self._lock = threading.Lock()
        self._status = SyncStatus(pending_count=pending_count)

    def get(self) -> SyncStatus:
        with self._lock:
            return self._status

    def begin(self) -> None:
        with self._lock:
            self._status = replace(self._status, is_syncing=True)

    def finish(self, pending_count: int, errors: Iterable[str]) -> None:
        with self._lock:
            self._status = SyncStatus(
                is_syncing=False,
                pending_count=pending_count,
                last_sync_at=utc_now(),
                errors=tuple(errors),
            )

    def set_pending(self, pending_count: int) -> None:
        with self._lock:
            self._status = replace(self._status, pending_count=pending_count)


__all__ = ["SyncStatusTracker"]
