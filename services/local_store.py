# services/local_store.py
import json
import logging
from pathlib import Path
from typing import Any, List

from config import COSTS_KEY, ORDERS_KEY
from domain.models import BatchCost, Order
from services.remote_store import StoreSnapshot
from utils.row_codec import (
    cost_to_record,
    order_to_record,
    record_to_cost,
    record_to_order,
)

logger = logging.getLogger(__name__)


class LocalStore:
    """
    Local fallback: the two record sets as JSON text under two fixed keys,
    one file per key inside `data_dir`.
    """

    def __init__(self, data_dir: str | Path = "data"):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> List[Any]:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Local cache %s unreadable, ignoring it: %s", path, e)
            return []
        if not isinstance(data, list):
            return []
        return [r for r in data if isinstance(r, dict)]

    def _write(self, key: str, records: List[dict]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False)
        tmp.replace(path)

    def load(self) -> StoreSnapshot:
        orders = [o for o in map(record_to_order, self._read(ORDERS_KEY)) if o is not None]
        costs = [c for c in map(record_to_cost, self._read(COSTS_KEY)) if c is not None]
        return StoreSnapshot(orders=orders, batch_costs=costs)

    def save(self, orders: List[Order], batch_costs: List[BatchCost]) -> None:
        self._write(ORDERS_KEY, [order_to_record(o) for o in orders])
        self._write(COSTS_KEY, [cost_to_record(c) for c in batch_costs])
