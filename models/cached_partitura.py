"""Metadata for a score PDF kept on disk for offline reading."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping

from datetime_utils import now_ms


@dataclass(frozen=True)
class CachedPartitura:
    id: str
    title: str
    pdf_url: str
    size: int = 0
    composer: str = ""
    instrument: str = ""
    last_accessed: int = 0
    is_downloaded: bool = False

    def touched(self) -> "CachedPartitura":
        return replace(self, last_accessed=now_ms())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "composer": self.composer,
            "instrument": self.instrument,
            "pdfUrl": self.pdf_url,
            "lastAccessed": self.last_accessed,
            "size": self.size,
            "isDownloaded": self.is_downloaded,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CachedPartitura":
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            composer=str(data.get("composer") or ""),
            instrument=str(data.get("instrument") or ""),
            pdf_url=str(data.get("pdfUrl") or ""),
            last_accessed=int(data.get("lastAccessed") or 0),
            size=int(data.get("size") or 0),
            is_downloaded=bool(data.get("isDownloaded")),
        )


__all__ = ["CachedPartitura"]
