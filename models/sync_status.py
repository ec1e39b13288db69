"""Snapshot types describing the state of offline synchronisation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from models.queued_operation import QueuedOperation


@dataclass(frozen=True)
class SyncStatus:
    is_syncing: bool = False
    pending_count: int = 0
    last_sync_at: Optional[datetime] = None
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one pass over the queue."""

    succeeded: Tuple[str, ...] = ()
    failed: Tuple[QueuedOperation, ...] = ()
    dropped: Tuple[QueuedOperation, ...] = ()
    errors: Tuple[str, ...] = ()
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed


__all__ = ["SyncResult", "SyncStatus"]
