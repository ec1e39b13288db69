"""Data types exposed by the SIGDMUS offline client."""
from .cached_partitura import CachedPartitura
from .kv_entry import KeyValueEntry
from .queued_operation import QueuedOperation
from .sync_status import SyncResult, SyncStatus

__all__ = ["CachedPartitura", "KeyValueEntry", "QueuedOperation", "SyncResult", "SyncStatus"]
