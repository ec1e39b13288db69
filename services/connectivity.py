from __future__ import annotations

import threading
from typing import Callable, Set, TYPE_CHECKING

from services.sync_log import ensure_logger

if TYPE_CHECKING:  # pragma: no cover
    from services.offline_sync import OfflineSyncService


ONLINE = "online"
OFFLINE = "offline"


class ConnectivityMonitor:
    """Network-status source. Emits ``online``/``offline`` on transitions only."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._lock = threading.Lock()
        self._listeners: Set[Callable[[str], None]] = set()
        self.logger = ensure_logger("sigdmus.sync")

    @property
    def is_online(self) -> bool:
        return self._online

    def subscribe(self, callback: Callable[[str], None]) -> None:
        self._listeners.add(callback)

    def unsubscribe(self, callback: Callable[[str], None]) -> None:
        self._listeners.discard(callback)

    def set_online(self, online: bool) -> None:
        with self._lock:
            if self._online == online:
                return
            self._online = online
        self._emit(ONLINE if online else OFFLINE)

    def _emit(self, event: str) -> None:
        self.logger.info("Network status changed: %s", event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                self.logger.exception("Connectivity listener failed on %s", event)


class ConnectivityTrigger:
    """Starts a sync pass when the monitor goes back online with pending work."""

    def __init__(self, monitor: ConnectivityMonitor, service: "OfflineSyncService") -> None:
        self.monitor = monitor
        self.service = service
        monitor.subscribe(self._on_event)

    def _on_event(self, event: str) -> None:
        if event != ONLINE:
            return
        if self.service.status().pending_count > 0:
            self.service.sync()

    def detach(self) -> None:
        self.monitor.unsubscribe(self._on_event)


__all__ = ["ConnectivityMonitor", "ConnectivityTrigger", "OFFLINE", "ONLINE"]
