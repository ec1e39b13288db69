from __future__ import annotations

import json
import threading
from typing import Any, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from core.settings import OFFLINE_SYNC
from models.queued_operation import QueuedOperation
from services.sync_log import ensure_logger
from storage.kv import KeyValueStore


class OperationQueue:
    """Pending mutations persisted as one JSON document in the key-value store.

    The whole list is read on every ``load`` and rewritten on every change.
    ``lock`` guards read-modify-write sequences inside this process.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, key: str | None = None) -> None:
        self.store = store or KeyValueStore()
        self.key = key or OFFLINE_SYNC.storage_key
        self.lock = threading.RLock()
        self.logger = ensure_logger("sigdmus.queue")

    def load(self) -> List[QueuedOperation]:
        try:
            raw = self.store.get(self.key)
        except SQLAlchemyError as exc:
            self.logger.error("Failed to read offline queue: %s", exc)
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            self.logger.error("Offline queue is corrupted, starting empty: %s", exc)
            return []
        if not isinstance(data, list):
            self.logger.error("Offline queue has unexpected shape: %s", type(data).__name__)
            return []

        result: List[QueuedOperation] = []
        seen = set()
        for item in data:
            if not isinstance(item, dict):
                self.logger.warning("Skipping malformed queue entry: %r", item)
                continue
            try:
                op = QueuedOperation.from_dict(item)
            except (KeyError, TypeError, ValueError) as exc:
                self.logger.warning("Skipping invalid queue entry: %s", exc)
                continue
            if op.id in seen:
                self.logger.warning("Skipping duplicate queue entry %s", op.id)
                continue
            seen.add(op.id)
            result.append(op)
        return result

    def save(self, queue: Sequence[QueuedOperation]) -> bool:
        payload = json.dumps([op.to_dict() for op in queue], ensure_ascii=False)
        with self.lock:
            try:
                self.store.set(self.key, payload)
            except SQLAlchemyError as exc:
                self.logger.error("Failed to persist offline queue (%d ops): %s", len(queue), exc)
                return False
        return True

    def enqueue(
        self,
        kind: str,
        resource: str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> List[QueuedOperation]:
        return self.append(QueuedOperation.new(kind, resource, payload))

    def append(self, operation: QueuedOperation) -> List[QueuedOperation]:
        with self.lock:
            queue = self.load()
            if any(op.id == operation.id for op in queue):
                raise ValueError(f"Operation {operation.id} is already queued")
            updated = queue + [operation]
            if not self.save(updated):
                self.logger.error("Operation %s was not queued", operation.id)
                return queue
        self.logger.info("Queued %s %s (%s)", operation.kind, operation.resource, operation.id)
        return updated

    def clear(self) -> None:
        with self.lock:
            try:
                self.store.remove(self.key)
            except SQLAlchemyError as exc:
                self.logger.error("Failed to clear offline queue: %s", exc)
                return
        self.logger.info("Offline queue cleared")

    def count(self) -> int:
        return len(self.load())


__all__ = ["OperationQueue"]
