# services/sync_service.py
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional

from domain.models import BatchCost, Order
from services.local_store import LocalStore
from services.remote_store import RemoteStore, StoreSnapshot

logger = logging.getLogger(__name__)


class SyncStatus(str, Enum):
    SYNCED = "Cloud Synchronized"
    SYNCING = "Syncing..."
    PENDING = "Cloud Sync Pending"
    LOCAL = "Local Mode"


class SyncBridge:
    """
    Keeps the remote store (or the local fallback) in step with the record
    store.

    Mutations are applied in memory first; this class only persists copies.
    Each schedule() replaces the pending snapshot and restarts the debounce
    timer, so a burst of edits produces one write of the final state. Writes
    are serialized and every write picks up the newest pending snapshot when
    it starts, so an older state can never land after a newer one.
    Failures are logged and reported through `status`; nothing is rolled back
    and nothing is retried until the next mutation.
    """

    def __init__(
            self,
            remote: Optional[RemoteStore],
            local: LocalStore,
            *,
            delay_seconds: float = 2.0,
            timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.remote = remote
        self.local = local
        self.delay_seconds = delay_seconds
        self._timer_factory = timer_factory

        self._lock = threading.Lock()  # guards _pending and _timer
        self._write_lock = threading.Lock()  # one write in flight
        self._pending: Optional[StoreSnapshot] = None
        self._timer = None

        self.status = SyncStatus.LOCAL if remote is None else SyncStatus.SYNCED
        self.last_error: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return self.remote is not None

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------
    def load(self, fallback_to_local: bool = True) -> Optional[StoreSnapshot]:
        """
        Load from the remote store.

        With `fallback_to_local` (startup), an unconfigured or unreachable
        remote yields the local copy and this never raises. Without it, a
        failed remote load returns None and leaves `status`/`last_error` set.
        """
        if self.remote is None:
            self.status = SyncStatus.LOCAL
            return self.local.load() if fallback_to_local else None

        try:
            snapshot = self.remote.load()
        except Exception as e:
            self.last_error = str(e)
            if not fallback_to_local:
                logger.warning("Reloading from %s failed, keeping current data: %s", self.remote.name, e)
                self.status = SyncStatus.PENDING if self.has_pending else SyncStatus.LOCAL
                return None
            logger.warning("Loading from %s failed, using local data: %s", self.remote.name, e)
            self.status = SyncStatus.LOCAL
            return self.local.load()

        logger.info(
            "Loaded %d orders and %d batch costs from %s",
            len(snapshot.orders), len(snapshot.batch_costs), self.remote.name,
        )
        self.status = SyncStatus.SYNCED
        self.last_error = None
        return snapshot

    def refresh(self, store) -> Optional[StoreSnapshot]:
        """
        Reload from the remote store and replace the store's records.

        On failure the store and the pending write are left untouched and
        None is returned. On success the pending write is dropped.
        """
        snapshot = self.load(fallback_to_local=False)
        if snapshot is None:
            return None

        with self._write_lock:
            with self._lock:
                self._pending = None
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
            store.replace_all(snapshot.orders, snapshot.batch_costs)
            try:
                self.local.save(snapshot.orders, snapshot.batch_costs)
            except OSError:
                logger.exception("Writing local copy failed")
        return snapshot

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------
    def attach(self, store) -> None:
        store.subscribe(self._on_change)

    def detach(self, store) -> None:
        store.unsubscribe(self._on_change)

    def _on_change(self, store) -> None:
        self.schedule(store.orders, store.batch_costs)

    def schedule(self, orders: List[Order], batch_costs: List[BatchCost]) -> None:
        snapshot = StoreSnapshot(orders=list(orders), batch_costs=list(batch_costs))
        with self._lock:
            self._pending = snapshot
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self._timer_factory(self.delay_seconds, self._run_timer)
            self._timer.daemon = True
            self._timer.start()

    def _run_timer(self) -> None:
        try:
            self.flush()
        except Exception:
            # timer thread: nothing above us to catch it
            logger.exception("Unexpected error during background sync")

    def flush(self) -> bool:
        """
        Write the pending snapshot now. Returns False when the remote write
        failed, True otherwise (including when there was nothing to write).
        """
        with self._write_lock:
            with self._lock:
                snapshot = self._pending
                self._pending = None
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None

            if snapshot is None:
                return True
            return self._write(snapshot)

    def _write(self, snapshot: StoreSnapshot) -> bool:
        ok = True
        if self.remote is not None:
            self.status = SyncStatus.SYNCING
            try:
                self.remote.save_orders(snapshot.orders)
                self.remote.save_batch_costs(snapshot.batch_costs)
            except Exception as e:
                logger.exception("Sync to %s failed", self.remote.name)
                self.status = SyncStatus.PENDING
                self.last_error = str(e)
                ok = False
            else:
                self.status = SyncStatus.SYNCED
                self.last_error = None

        try:
            self.local.save(snapshot.orders, snapshot.batch_costs)
        except OSError:
            logger.exception("Writing local copy failed")

        return ok

    def close(self) -> None:
        """Cancel the timer and write whatever is still pending."""
        self.flush()
