# ui/app_shell.py
from __future__ import annotations

import flet as ft

from core.settings import OFFLINE_SYNC, UI
from services.archive_api import ArchiveApiClient
from services.connectivity import ConnectivityMonitor, ConnectivityTrigger
from services.offline_sync import OfflineSyncService
from services.operation_processor import OperationProcessor
from services.operation_queue import OperationQueue
from services.partitura_cache import PartituraCache
from services.sync_log import read_sync_log
from storage.config import load_config
from storage.kv import KeyValueStore

from .pages.sync import SyncPage


class SnackBarNotifier:
    def __init__(self, page: ft.Page):
        self.page = page

    def notify(self, title: str, message: str, level: str = "info") -> None:
        color = ft.Colors.ERROR if level == "error" else None
        self.page.snack_bar = ft.SnackBar(
            ft.Column([ft.Text(title, weight=ft.FontWeight.BOLD), ft.Text(message)], tight=True),
            bgcolor=color,
        )
        self.page.snack_bar.open = True
        self.page.update()


class AppShell:
    def __init__(self, page: ft.Page):
        self.page = page
        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START

        config = load_config()
        self.store = KeyValueStore()
        self.notifier = SnackBarNotifier(page)
        self.api = ArchiveApiClient(
            config.resolve_api_url(),
            token_provider=lambda: self.store.get(OFFLINE_SYNC.token_key),
        )
        self.monitor = ConnectivityMonitor(online=True)
        self.sync_service = OfflineSyncService(
            OperationProcessor(self.api),
            OperationQueue(self.store),
            notifier=self.notifier,
            monitor=self.monitor,
        )
        self.trigger = ConnectivityTrigger(self.monitor, self.sync_service)
        self.cache = PartituraCache(self.api, self.store, notifier=self.notifier)

        self._sync_page = SyncPage(self)
        self.root = ft.Container(self._sync_page.view, expand=True)

    def mount(self):
        self.page.controls.clear()
        self.page.add(self.root)
        self.page.update()

    # ---------- utilitários para as páginas ----------
    def sync_now(self) -> None:
        if not OFFLINE_SYNC.enabled:
            return
        self.sync_service.sync()

    def set_online(self, online: bool) -> None:
        self.monitor.set_online(online)

    def clear_pending(self) -> None:
        self.sync_service.clear()

    def read_sync_log(self) -> str:
        return read_sync_log(UI.log_lines)
