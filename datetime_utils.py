from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


UTC = timezone.utc


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_epoch_ms(dt: datetime) -> int:
    """Epoch milliseconds; naive datetimes are taken as UTC."""

    return int(ensure_utc(dt).timestamp() * 1000)


def now_ms() -> int:
    return to_epoch_ms(utc_now())


__all__ = ["UTC", "ensure_utc", "now_ms", "to_epoch_ms", "utc_now"]
