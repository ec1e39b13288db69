"""Pending archive mutation waiting to be replayed against the API."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from datetime_utils import now_ms


VALID_KINDS = ("create", "update", "delete")
_KIND_ALIASES = {"insert": "create"}


def normalize_kind(kind: str) -> str:
    value = (kind or "").strip().lower()
    value = _KIND_ALIASES.get(value, value)
    if value not in VALID_KINDS:
        raise ValueError(f"Unsupported operation kind: {kind}")
    return value


@dataclass(frozen=True)
class QueuedOperation:
    id: str
    kind: str
    resource: str
    payload: Dict[str, Any]
    enqueued_at: int
    retry_count: int = 0

    @classmethod
    def new(cls, kind: str, resource: str, payload: Optional[Mapping[str, Any]] = None) -> "QueuedOperation":
        if not resource:
            raise ValueError("Operation resource is required")
        return cls(
            id=str(uuid.uuid4()),
            kind=normalize_kind(kind),
            resource=resource,
            payload=dict(payload or {}),
            enqueued_at=now_ms(),
            retry_count=0,
        )

    @property
    def target_id(self) -> Optional[Any]:
        return self.payload.get("id")

    def with_retry(self) -> "QueuedOperation":
        return replace(self, retry_count=self.retry_count + 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "resource": self.resource,
            "payload": self.payload,
            "enqueuedAt": self.enqueued_at,
            "retryCount": self.retry_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "QueuedOperation":
        payload = data.get("payload")
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValueError("Operation payload must be an object")
        op_id = data.get("id")
        resource = data.get("resource")
        if not op_id or not resource:
            raise ValueError("Operation id and resource are required")
        return cls(
            id=str(op_id),
            kind=normalize_kind(str(data.get("kind", ""))),
            resource=str(resource),
            payload=payload,
            enqueued_at=int(data.get("enqueuedAt") or 0),
            retry_count=int(data.get("retryCount") or 0),
        )


__all__ = ["QueuedOperation", "VALID_KINDS", "normalize_kind"]
