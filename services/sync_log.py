from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from core.settings import LOG_PATH


SYNC_LOG_PATH = LOG_PATH


def ensure_logger(name: str = "sigdmus.sync") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        Path(SYNC_LOG_PATH).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(SYNC_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


def read_sync_log(lines: int = 100) -> str:
    try:
        with open(SYNC_LOG_PATH, "r", encoding="utf-8") as fh:
            content = fh.readlines()
    except FileNotFoundError:
        return "Log de sincronização ainda não foi criado."
    content = [line.rstrip("\n") for line in content[-lines:]]
    return "\n".join(content)


__all__ = ["SYNC_LOG_PATH", "ensure_logger", "read_sync_log"]
