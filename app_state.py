# app_state.py
import logging
from dataclasses import dataclass
from typing import Optional

from config import APP_NAME, Settings, load_settings
from domain.record_store import RecordStore
from services import analytics_service
from services.local_store import LocalStore
from services.remote_store import RemoteStore
from services.sync_service import SyncBridge
from services.web_app_service import WebAppRemote, is_web_app_url
from utils.formatting import format_amount

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_remote(settings: Settings) -> Optional[RemoteStore]:
    """
    The remote store selected by REMOTE_BACKEND, or None (local mode) when no
    backend is selected or the selected one is missing its settings.
    """
    backend = settings.remote_backend

    if not backend:
        return None

    if backend == "web_app":
        if not is_web_app_url(settings.web_app_url):
            logger.warning("WEB_APP_URL is not an Apps Script URL, running in local mode")
            return None
        return WebAppRemote(settings.web_app_url)

    if backend == "sheets":
        if not settings.spreadsheet_id:
            logger.warning("SPREADSHEET_ID is not set, running in local mode")
            return None
        from services.sheets_service import SheetsRemote

        return SheetsRemote(settings.spreadsheet_id)

    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            logger.warning("SUPABASE_URL / SUPABASE_KEY not set, running in local mode")
            return None
        from data_integrator import SupabaseRemote

        return SupabaseRemote(settings.supabase_url, settings.supabase_key, settings.supabase_schema)

    logger.warning("Unknown REMOTE_BACKEND %r, running in local mode", backend)
    return None


@dataclass
class AppState:
    """
    The session's single owner of the record store and its sync bridge.
    """
    store: RecordStore
    bridge: SyncBridge

    @classmethod
    def start(cls, settings: Optional[Settings] = None, remote: Optional[RemoteStore] = None) -> "AppState":
        settings = settings or load_settings()
        if remote is None:
            remote = build_remote(settings)

        bridge = SyncBridge(
            remote,
            LocalStore(settings.local_data_dir),
            delay_seconds=settings.sync_debounce_seconds,
        )
        snapshot = bridge.load()
        store = RecordStore(snapshot.orders, snapshot.batch_costs)
        bridge.attach(store)

        logger.info(
            "%s started (%s, %d orders)",
            APP_NAME, bridge.status.value, len(snapshot.orders),
        )
        return cls(store=store, bridge=bridge)

    def refresh(self) -> None:
        self.bridge.refresh(self.store)

    def dashboard(self):
        return analytics_service.dashboard_stats(self.store.orders, self.store.batch_costs)

    def close(self) -> None:
        self.bridge.close()


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)

    state = AppState.start(settings)
    stats = state.dashboard()
    logger.info(
        "orders=%d revenue=%s outstanding=%s expenses=%s net=%s",
        stats.total_orders,
        format_amount(stats.total_revenue),
        format_amount(stats.total_outstanding),
        format_amount(stats.total_expenses),
        format_amount(stats.net_profit),
    )
    state.close()
