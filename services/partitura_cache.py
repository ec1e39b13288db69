"""Offline copies of score PDFs with least-recently-accessed eviction."""

from __future__ import annotations

import json
import os
import shutil
import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from core.settings import PARTITURA_CACHE
from models.cached_partitura import CachedPartitura
from services.archive_api import ApiError, ArchiveApiClient
from services.notifications import LogNotifier, Notifier
from services.sync_log import ensure_logger
from storage.kv import KeyValueStore


@dataclass(frozen=True)
class CacheStats:
    total_size: int
    item_count: int
    available_space: int


def _safe_name(partitura_id: str) -> str:
    cleaned = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in partitura_id)
    return f"{cleaned or 'partitura'}.pdf"


class PartituraCache:
    def __init__(
        self,
        api: ArchiveApiClient,
        store: Optional[KeyValueStore] = None,
        *,
        directory: Path | str | None = None,
        max_bytes: Optional[int] = None,
        notifier: Optional[Notifier] = None,
        key: Optional[str] = None,
    ) -> None:
        self.api = api
        self.store = store or KeyValueStore()
        self.directory = Path(directory or PARTITURA_CACHE.directory)
        self.max_bytes = max_bytes if max_bytes is not None else PARTITURA_CACHE.max_bytes
        self.notifier = notifier or LogNotifier()
        self.key = key or PARTITURA_CACHE.storage_key
        self.logger = ensure_logger("sigdmus.cache")
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # metadata persistence
    def _load(self) -> List[CachedPartitura]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            self.logger.error("Score cache index is corrupted: %s", exc)
            return []
        items: List[CachedPartitura] = []
        for entry in data if isinstance(data, list) else []:
            try:
                items.append(CachedPartitura.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                self.logger.warning("Skipping invalid cache entry: %s", exc)
        return items

    def _save(self, items: List[CachedPartitura]) -> None:
        self.store.set(self.key, json.dumps([item.to_dict() for item in items], ensure_ascii=False))

    def _path_for(self, partitura_id: str) -> Path:
        return self.directory / _safe_name(partitura_id)

    # ------------------------------------------------------------------
    def entries(self) -> List[CachedPartitura]:
        return self._load()

    def stats(self) -> CacheStats:
        items = self._load()
        total = sum(item.size for item in items)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            disk_free = shutil.disk_usage(self.directory).free
        except OSError:
            disk_free = 0
        available = max(0, min(self.max_bytes - total, disk_free))
        return CacheStats(total_size=total, item_count=len(items), available_space=available)

    def is_cached(self, partitura_id: str) -> bool:
        return any(item.id == partitura_id and item.is_downloaded for item in self._load())

    def cache(self, partitura: Mapping[str, Any]) -> bool:
        entry = CachedPartitura.from_dict(partitura)
        with self._lock:
            items = self._load()
            for index, item in enumerate(items):
                if item.id == entry.id:
                    items[index] = item.touched()
                    self._save(items)
                    return True

            target = self._path_for(entry.id)
            tmp = target.with_suffix(".tmp")
            try:
                content = self.api.download(entry.pdf_url)
            except ApiError as exc:
                return self._fail(entry.id, exc)
            if len(content) > self.max_bytes:
                return self._fail(entry.id, f"{len(content)} bytes exceed the budget of {self.max_bytes}")
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                tmp.write_bytes(content)
            except OSError as exc:
                self._discard(tmp)
                return self._fail(entry.id, exc)

            # budget is checked against the bytes actually downloaded
            total = sum(item.size for item in items)
            if total + len(content) > self.max_bytes:
                items = self._evict(items, total + len(content) - self.max_bytes)
                self._save(items)

            try:
                os.replace(tmp, target)
            except OSError as exc:
                self._discard(tmp)
                return self._fail(entry.id, exc)

            stored = replace(entry, size=len(content), is_downloaded=True).touched()
            items.append(stored)
            self._save(items)

        self.logger.info("Cached score %s (%d bytes)", stored.id, stored.size)
        self.notifier.notify("Partitura em cache", f"{stored.title} foi salva para uso offline.")
        return True

    def get(self, partitura_id: str) -> Optional[bytes]:
        with self._lock:
            items = self._load()
            match = next((item for item in items if item.id == partitura_id), None)
            if match is None or not match.is_downloaded:
                return None
            try:
                content = self._path_for(partitura_id).read_bytes()
            except OSError as exc:
                self.logger.warning("Cached file for %s is missing: %s", partitura_id, exc)
                return None
            self._save([item.touched() if item.id == partitura_id else item for item in items])
        return content

    def remove(self, partitura_id: str) -> bool:
        with self._lock:
            items = self._load()
            remaining = [item for item in items if item.id != partitura_id]
            if len(remaining) == len(items):
                return False
            self._unlink(partitura_id)
            self._save(remaining)
        return True

    def clear(self) -> None:
        with self._lock:
            for item in self._load():
                self._unlink(item.id)
            self.store.remove(self.key)
        self.notifier.notify("Cache limpo", "Todas as partituras offline foram removidas.")

    def _fail(self, partitura_id: str, reason: object) -> bool:
        self.logger.error("Failed to cache score %s: %s", partitura_id, reason)
        self.notifier.notify(
            "Erro ao salvar partitura",
            "Não foi possível salvar para uso offline.",
            level="error",
        )
        return False

    # ------------------------------------------------------------------
    def _evict(self, items: List[CachedPartitura], required: int) -> List[CachedPartitura]:
        freed = 0
        evicted: Dict[str, CachedPartitura] = {}
        for item in sorted(items, key=lambda entry: entry.last_accessed):
            if freed >= required:
                break
            evicted[item.id] = item
            freed += item.size
        for partitura_id in evicted:
            self._unlink(partitura_id)
            self.logger.info("Evicted score %s from cache", partitura_id)
        return [item for item in items if item.id not in evicted]

    def _unlink(self, partitura_id: str) -> None:
        self._discard(self._path_for(partitura_id))

    def _discard(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            self.logger.warning("Could not delete cached file %s: %s", path, exc)


__all__ = ["CacheStats", "PartituraCache"]
