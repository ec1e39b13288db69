from __future__ import annotations

from models.queued_operation import QueuedOperation
from services.archive_api import ApiError, ArchiveApiClient


class ReplayError(RuntimeError):
    """A queued operation could not be applied on the remote side."""

    def __init__(self, operation: QueuedOperation, reason: str) -> None:
        super().__init__(f"{operation.kind} {operation.resource} ({operation.id}): {reason}")
        self.operation = operation
        self.reason = reason


class OperationProcessor:
    """Replays exactly one queued operation. Never retries and never touches the queue."""

    def __init__(self, api: ArchiveApiClient) -> None:
        self.api = api

    def process(self, operation: QueuedOperation) -> None:
        try:
            self._dispatch(operation)
        except ApiError as exc:
            raise ReplayError(operation, str(exc)) from exc

    def _dispatch(self, operation: QueuedOperation) -> None:
        kind = operation.kind
        payload = operation.payload

        if kind == "create":
            self.api.create(operation.resource, payload)
            return

        record_id = operation.target_id
        if record_id is None or record_id == "":
            raise ReplayError(operation, "payload has no id")

        if kind == "update":
            self.api.update(operation.resource, record_id, payload)
            return

        if kind == "delete":
            self.api.delete(operation.resource, record_id)
            return

        raise ReplayError(operation, f"unsupported kind {kind!r}")


__all__ = ["OperationProcessor", "ReplayError"]
