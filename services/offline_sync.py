from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Any, List, Mapping, Optional

from core.settings import OFFLINE_SYNC
from models.queued_operation import QueuedOperation
from models.sync_status import SyncResult, SyncStatus
from services.connectivity import ConnectivityMonitor
from services.notifications import LogNotifier, Notifier
from services.operation_processor import OperationProcessor, ReplayError
from services.operation_queue import OperationQueue
from services.sync_log import ensure_logger
from services.sync_status import SyncStatusTracker


class OfflineSyncService:
    """Owns the offline queue and drains it against the archive API.

    One instance is built at application start and handed to whatever needs
    to queue work or trigger a pass.
    """

    def __init__(
        self,
        processor: OperationProcessor,
        queue: Optional[OperationQueue] = None,
        notifier: Optional[Notifier] = None,
        monitor: Optional[ConnectivityMonitor] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        self.processor = processor
        self.queue = queue or OperationQueue()
        self.notifier = notifier or LogNotifier()
        self.monitor = monitor
        self.max_retries = max_retries if max_retries is not None else OFFLINE_SYNC.max_retries
        self.tracker = SyncStatusTracker(pending_count=self.queue.count())
        self.logger = ensure_logger()
        self._inflight: Optional[Future] = None
        self._inflight_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    def status(self) -> SyncStatus:
        return self.tracker.get()

    def pending(self) -> List[QueuedOperation]:
        return self.queue.load()

    def sync(self) -> SyncResult:
        """Run one pass, or wait for the pass already in flight and share its result."""

        with self._inflight_lock:
            inflight = self._inflight
            owner = inflight is None
            if owner:
                inflight = Future()
                self._inflight = inflight

        if not owner:
            self.logger.debug("Sync pass already running, waiting for it")
            return inflight.result()

        try:
            result = self._run_pass()
        except Exception as exc:  # pragma: no cover - defensive
            self.logger.exception("Sync pass crashed")
            inflight.set_exception(exc)
            raise
        else:
            inflight.set_result(result)
        finally:
            with self._inflight_lock:
                self._inflight = None
        return result

    def submit(self, kind: str, resource: str, payload: Optional[Mapping[str, Any]] = None) -> bool:
        """Apply a mutation now, falling back to the offline queue.

        Returns ``True`` when the API accepted it, ``False`` when it was queued.
        """

        operation = QueuedOperation.new(kind, resource, payload)
        if self.monitor is None or self.monitor.is_online:
            try:
                self.processor.process(operation)
                return True
            except ReplayError as exc:
                self.logger.warning("Direct %s on %s failed, deferring: %s", operation.kind, resource, exc)
        self._defer(operation)
        return False

    def save_offline(self, kind: str, resource: str, payload: Optional[Mapping[str, Any]] = None) -> QueuedOperation:
        operation = QueuedOperation.new(kind, resource, payload)
        self._defer(operation)
        return operation

    def save_partitura_offline(self, partitura: Mapping[str, Any], kind: str) -> QueuedOperation:
        return self.save_offline(kind, "partituras", partitura)

    def save_performance_offline(self, performance: Mapping[str, Any], kind: str) -> QueuedOperation:
        return self.save_offline(kind, "performances", performance)

    def clear(self) -> None:
        self.queue.clear()
        self.tracker.set_pending(0)
        self._notify(
            "Operações offline limpas",
            "Todas as operações pendentes foram removidas.",
        )

    # ------------------------------------------------------------------
    def _notify(self, title: str, message: str, level: str = "info") -> None:
        try:
            self.notifier.notify(title, message, level=level)
        except Exception:
            self.logger.exception("Notification failed: %s", title)

    def _defer(self, operation: QueuedOperation) -> bool:
        queue = self.queue.append(operation)
        self.tracker.set_pending(len(queue))
        if not any(op.id == operation.id for op in queue):
            self._notify(
                "Erro ao salvar offline",
                "Não foi possível guardar a operação neste dispositivo.",
                level="error",
            )
            return False
        self._notify(
            "Operação salva offline",
            "Será sincronizada quando você estiver online.",
        )
        return True

    def _run_pass(self) -> SyncResult:
        snapshot = self.queue.load()
        if not snapshot:
            return SyncResult(skipped=True)

        self.tracker.begin()
        self.logger.info("Sync pass started with %d operations", len(snapshot))

        succeeded: List[str] = []
        failed: List[QueuedOperation] = []
        errors: List[str] = []

        for operation in snapshot:
            try:
                self.processor.process(operation)
            except ReplayError as exc:
                self.logger.warning("Replay failed: %s", exc)
            except Exception:
                self.logger.exception("Replay of %s crashed", operation.id)
            else:
                succeeded.append(operation.id)
                continue
            failed.append(operation.with_retry())
            errors.append(f"Erro ao sincronizar {operation.resource}")

        survivors = [op for op in failed if op.retry_count < self.max_retries]
        dropped = [op for op in failed if op.retry_count >= self.max_retries]
        for op in dropped:
            self.logger.warning(
                "Dropping %s %s (%s) after %d attempts",
                op.kind,
                op.resource,
                op.id,
                op.retry_count,
            )

        snapshot_ids = {op.id for op in snapshot}
        with self.queue.lock:
            # keep work queued while this pass was running
            added = [op for op in self.queue.load() if op.id not in snapshot_ids]
            remaining = survivors + added
            self.queue.save(remaining)

        self.tracker.finish(len(remaining), errors)
        self.logger.info(
            "Sync pass finished: %d ok, %d failed, %d dropped, %d pending",
            len(succeeded),
            len(failed),
            len(dropped),
            len(remaining),
        )

        if succeeded:
            self._notify(
                "Sincronização concluída",
                f"{len(succeeded)} operações sincronizadas com sucesso.",
            )
        if failed:
            self._notify(
                "Erros na sincronização",
                f"{len(failed)} operações falharam. Tentaremos novamente.",
                level="error",
            )

        return SyncResult(
            succeeded=tuple(succeeded),
            failed=tuple(failed),
            dropped=tuple(dropped),
            errors=tuple(errors),
        )


__all__ = ["OfflineSyncService"]
