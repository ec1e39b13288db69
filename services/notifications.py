"""User-facing notification sinks."""
from __future__ import annotations

import logging
from typing import Protocol

from services.sync_log import ensure_logger


class Notifier(Protocol):
    def notify(self, title: str, message: str, level: str = "info") -> None:
        ...


class LogNotifier:
    """Writes notifications to the sync log when no UI is attached."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or ensure_logger("sigdmus.notify")

    def notify(self, title: str, message: str, level: str = "info") -> None:
        log_level = logging.WARNING if level == "error" else logging.INFO
        self.logger.log(log_level, "%s: %s", title, message)


__all__ = ["LogNotifier", "Notifier"]
