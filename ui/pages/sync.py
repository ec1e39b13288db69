# ui/pages/sync.py
from datetime import timezone
import flet as ft


class SyncPage:
    def __init__(self, app):
        self.app = app

        self.status_text = ft.Text()
        self.pending_text = ft.Text()
        self.last_sync_text = ft.Text()
        self.errors_view = ft.Column(spacing=2)
        self.cache_text = ft.Text()

        self.online_switch = ft.Switch(
            label="Online",
            value=app.monitor.is_online,
            on_change=self.toggle_online,
        )
        self.sync_btn = ft.ElevatedButton(
            "Sincronizar agora",
            icon=ft.Icons.SYNC,
            on_click=self.sync_now,
        )
        self.clear_btn = ft.OutlinedButton(
            "Limpar pendências",
            icon=ft.Icons.DELETE_SWEEP_OUTLINED,
            on_click=self.clear_pending,
        )
        self.refresh_log_btn = ft.TextButton(
            "Atualizar log",
            icon=ft.Icons.ARTICLE,
            on_click=self.refresh_log,
        )
        self.log_view = ft.Text("", selectable=True)

        content = ft.Column(
            controls=[
                ft.Text("Sincronização offline", size=24, weight=ft.FontWeight.BOLD),
                self.online_switch,
                self.status_text,
                self.pending_text,
                self.last_sync_text,
                self.cache_text,
                self.errors_view,
                ft.Row([self.sync_btn, self.clear_btn], spacing=12),
                ft.Column([
                    ft.Text("Log de sincronização", size=18, weight=ft.FontWeight.W_600),
                    ft.Container(self.log_view, height=200, padding=10),
                    self.refresh_log_btn,
                ], spacing=8),
            ],
            expand=True,
            spacing=16,
            scroll=ft.ScrollMode.AUTO,
        )

        self.view = ft.Container(content=content, expand=True, padding=20)
        self.refresh_status()

    def _format_dt(self, value) -> str:
        if not value:
            return "—"
        if getattr(value, "tzinfo", None) is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone().strftime("%d/%m/%Y %H:%M:%S")

    def refresh_status(self):
        status = self.app.sync_service.status()
        self.status_text.value = "Sincronizando..." if status.is_syncing else "Ocioso"
        self.pending_text.value = f"Operações pendentes: {status.pending_count}"
        self.last_sync_text.value = "Última sincronização: " + self._format_dt(status.last_sync_at)
        stats = self.app.cache.stats()
        self.cache_text.value = (
            f"Partituras offline: {stats.item_count} ({stats.total_size / (1024 * 1024):.1f} MB)"
        )
        self.errors_view.controls = [ft.Text(err, color=ft.Colors.ERROR) for err in status.errors]
        self.log_view.value = self.app.read_sync_log()

    def toggle_online(self, e):
        self.app.set_online(bool(e.control.value))
        self.refresh_status()
        self.app.page.update()

    def sync_now(self, _):
        self.sync_btn.disabled = True
        self.app.page.update()
        try:
            self.app.sync_now()
        finally:
            self.sync_btn.disabled = False
            self.refresh_status()
            self.app.page.update()

    def clear_pending(self, _):
        self.app.clear_pending()
        self.refresh_status()
        self.app.page.update()

    def refresh_log(self, _):
        self.log_view.value = self.app.read_sync_log()
        self.app.page.update()
