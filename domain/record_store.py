# domain/record_store.py

import logging
import time
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from domain.models import BatchCost, CustomerKey, Order, OrderDraft
from utils.batch_names import current_batch_name, latest_batch_name

logger = logging.getLogger(__name__)

Listener = Callable[["RecordStore"], None]


class OrderNotFoundError(KeyError):
    pass


def generate_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def _key(order_id) -> str:
    # ids coming back from the sheet may carry stray whitespace
    return str(order_id if order_id is not None else "").strip()


class RecordStore:
    """
    In-memory orders and batch costs for one session.

    Orders are kept most recent first. Every mutation notifies the registered
    listeners (the sync bridge among them) after it has been applied.
    No business validation happens here; callers validate before mutating.
    """

    def __init__(
            self,
            orders: Optional[Iterable[Order]] = None,
            batch_costs: Optional[Iterable[BatchCost]] = None,
            *,
            id_factory: Callable[[], str] = generate_id,
            clock: Callable[[], int] = now_ms,
    ):
        self._orders: List[Order] = list(orders or [])
        self._batch_costs: List[BatchCost] = list(batch_costs or [])
        self._listeners: List[Listener] = []
        self._id_factory = id_factory
        self._clock = clock

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def batch_costs(self) -> List[BatchCost]:
        return list(self._batch_costs)

    def get_order(self, order_id: str) -> Optional[Order]:
        wanted = _key(order_id)
        return next((o for o in self._orders if _key(o.id) == wanted), None)

    def get_batch_cost(self, batch_name: str) -> Optional[BatchCost]:
        return next((c for c in self._batch_costs if c.batch_name == batch_name), None)

    def batch_names(self) -> List[str]:
        seen = {}
        for o in self._orders:
            seen.setdefault(o.batch_name, None)
        return list(seen)

    def suggest_batch_name(self, now: Optional[datetime] = None) -> str:
        """
        Default batch for a new entry: the latest existing batch, or batch 01
        of the current month when there are no orders yet.
        """
        return latest_batch_name(self.batch_names()) or current_batch_name(now)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------
    def create_order(self, draft: OrderDraft) -> Order:
        order = Order.from_draft(draft, id=self._id_factory(), created_at=self._clock())
        self._orders.insert(0, order)
        logger.info("Order created (id=%s, batch=%s)", order.id, order.batch_name)
        self._notify()
        return order

    def create_order_group(self, drafts: List[OrderDraft]) -> List[Order]:
        """
        Create the line items of one multi-item submission. They share a
        group_id and are prepended in submission order.
        """
        if not drafts:
            return []

        group_id = self._id_factory()
        created = [
            Order.from_draft(d, id=self._id_factory(), created_at=self._clock(), group_id=group_id)
            for d in drafts
        ]
        self._orders = created + self._orders
        logger.info("Order group created (group_id=%s, items=%d)", group_id, len(created))
        self._notify()
        return created

    def bulk_insert_orders(self, orders: Iterable[Order]) -> None:
        """
        Append already-built records (ids and timestamps kept), e.g. from an
        import of older data.
        """
        self._orders.extend(orders)
        self._notify()

    def _index_of(self, order_id: str) -> int:
        wanted = _key(order_id)
        for idx, o in enumerate(self._orders):
            if _key(o.id) == wanted:
                return idx
        raise OrderNotFoundError(order_id)

    def update_order(self, order_id: str, draft: OrderDraft) -> Order:
        idx = self._index_of(order_id)
        existing = self._orders[idx]
        updated = Order.from_draft(
            draft,
            id=existing.id,
            created_at=existing.created_at,
            group_id=existing.group_id,
        )
        self._orders[idx] = updated
        logger.info("Order updated (id=%s)", existing.id)
        self._notify()
        return updated

    def update_order_group(self, order_id: str, drafts: List[OrderDraft]) -> List[Order]:
        """
        Edit an order into a multi-item submission.

        The first draft replaces the edited record in place (id, created_at
        and group_id kept; a group id is assigned if it had none). The other
        drafts become new records in the same group, prepended.
        """
        if not drafts:
            raise ValueError("update_order_group needs at least one item")

        idx = self._index_of(order_id)
        existing = self._orders[idx]
        group_id = existing.group_id or self._id_factory()

        first = Order.from_draft(
            drafts[0],
            id=existing.id,
            created_at=existing.created_at,
            group_id=group_id,
        )
        self._orders[idx] = first

        extra = [
            Order.from_draft(d, id=self._id_factory(), created_at=self._clock(), group_id=group_id)
            for d in drafts[1:]
        ]
        self._orders = extra + self._orders
        logger.info(
            "Order group updated (id=%s, group_id=%s, added=%d)",
            existing.id, group_id, len(extra),
        )
        self._notify()
        return [first] + extra

    def bulk_update_orders(self, updated: Iterable[Order]) -> int:
        """
        Replace stored orders by id with the given records. Unknown ids are
        ignored. Returns how many records were replaced.
        """
        updates = {_key(o.id): o for o in updated}
        replaced = 0
        next_orders = []
        for o in self._orders:
            new = updates.get(_key(o.id))
            if new is not None:
                replaced += 1
                next_orders.append(new)
            else:
                next_orders.append(o)
        self._orders = next_orders
        logger.info("Bulk update replaced %d orders", replaced)
        self._notify()
        return replaced

    def set_full_payment(self, order_ids: Iterable[str], received: bool = True) -> int:
        wanted = {_key(i) for i in order_ids}
        changed = [
            replace(o, is_full_payment_received=received)
            for o in self._orders
            if _key(o.id) in wanted
        ]
        return self.bulk_update_orders(changed)

    def delete_orders(self, order_ids: Iterable[str] | str) -> int:
        if isinstance(order_ids, str):
            order_ids = [order_ids]
        kill = {_key(i) for i in order_ids}

        before = len(self._orders)
        self._orders = [o for o in self._orders if _key(o.id) not in kill]
        removed = before - len(self._orders)

        logger.info("Deleted %d orders", removed)
        self._notify()
        return removed

    def delete_customer_orders(self, key: CustomerKey) -> int:
        ids = [o.id for o in self._orders if CustomerKey.from_order(o) == key]
        return self.delete_orders(ids)

    # ------------------------------------------------------------------
    # Batch costs
    # ------------------------------------------------------------------
    def upsert_batch_cost(self, cost: BatchCost) -> BatchCost:
        for idx, existing in enumerate(self._batch_costs):
            if existing.batch_name == cost.batch_name:
                self._batch_costs[idx] = cost
                break
        else:
            self._batch_costs.append(cost)

        logger.info("Batch cost saved (batch=%s)", cost.batch_name)
        self._notify()
        return cost

    # ------------------------------------------------------------------
    # Load / refresh
    # ------------------------------------------------------------------
    def replace_all(self, orders: Iterable[Order], batch_costs: Iterable[BatchCost]) -> None:
        """
        Swap in freshly loaded records. Listeners are not notified, so a load
        never echoes back to the remote store.
        """
        self._orders = list(orders)
        self._batch_costs = list(batch_costs)
