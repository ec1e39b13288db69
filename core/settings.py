"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``."""

    platform_id = (platform or sys.platform).lower()
    environ = dict(os.environ if env is None else env)
    home_dir = Path(home or Path.home())
    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    override = environ.get("SIGDMUS_DATA_DIR")
    if override:
        return Path(override).expanduser()

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return (base.expanduser() / sanitized)


APP_NAME = "SIGDMUS"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"
CACHE_DIR = DATA_DIR / "partituras"

for _dir in (DATA_DIR, LOG_DIR, CACHE_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "offline.db"
CONFIG_PATH = DATA_DIR / "config.json"
LOG_PATH = LOG_DIR / "sync.log"


@dataclass(frozen=True)
class ApiSettings:
    development_url: str = "http://localhost:4000"
    production_url: str = "https://sigdmus.com"
    environment: str = os.environ.get("SIGDMUS_ENV", "production")
    # None keeps the transport default (no explicit timeout)
    request_timeout: Optional[float] = None

    def base_url(self, environment: Optional[str] = None) -> str:
        env = (environment or self.environment or "").lower()
        if env in {"dev", "development"}:
            return self.development_url
        return self.production_url


API = ApiSettings()


def _default_endpoints() -> Dict[str, str]:
    return {
        "partituras": "/api/partituras",
        "performances": "/api/performances",
        "usuarios": "/api/usuarios",
    }


@dataclass(frozen=True)
class OfflineSyncSettings:
    enabled: bool = True
    storage_key: str = "sigdmus-offline-api"
    token_key: str = "token"
    max_retries: int = 3
    endpoints: Dict[str, str] = field(default_factory=_default_endpoints)


OFFLINE_SYNC = OfflineSyncSettings()


@dataclass(frozen=True)
class PartituraCacheSettings:
    storage_key: str = "sigdmus-partitura-cache"
    directory: Path = CACHE_DIR
    max_bytes: int = 500 * 1024 * 1024


PARTITURA_CACHE = PartituraCacheSettings()


@dataclass(frozen=True)
class UISettings:
    app_title: str = "SIGDMUS - Acervo"
    theme_mode: str = "system"
    color_scheme_seed: str = "#7C3AED"
    window_min_width: int = 720
    window_min_height: int = 520
    log_lines: int = 100


UI = UISettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "CACHE_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "LOG_PATH",
    "API",
    "OFFLINE_SYNC",
    "PARTITURA_CACHE",
    "UI",
    "ApiSettings",
    "OfflineSyncSettings",
    "PartituraCacheSettings",
    "get_default_data_dir",
]
