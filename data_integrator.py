import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from domain.models import BatchCost, Order
from services.remote_store import RemoteStore, RemoteStoreError, StoreSnapshot
from utils.data_migrator import chunked
from utils.row_codec import (
    cost_to_record,
    order_to_record,
    record_to_cost,
    record_to_order,
)

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"
# orders keep their in-memory order through this integer column
POSITION_COL = "position"
COSTS_TABLE = "batch_costs"
PAGE_SIZE = 1000
BATCH_SIZE = 500


def get_client(url: str, key: str) -> Client:
    if not url or not key:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(url, key)


def fetch_all(supabase: Client, schema: str, table_name: str, order_col: str) -> List[Dict[str, Any]]:
    """
    Fetch every row of a table, paging past the 1000-row response limit.
    """
    rows: List[Dict[str, Any]] = []
    offset = 0
    while True:
        resp = (
            supabase.schema(schema)
            .table(table_name)
            .select("*")
            .order(order_col)
            .range(offset, offset + PAGE_SIZE - 1)
            .execute()
        )
        if getattr(resp, "error", None):
            raise RemoteStoreError(f"Fetch {table_name} failed: {resp.error}")

        batch = resp.data or []
        rows.extend(batch)
        if len(batch) < PAGE_SIZE:
            break
        offset += PAGE_SIZE
    return rows


def replace_rows(
        supabase: Client,
        schema: str,
        table_name: str,
        key_col: str,
        rows: List[Dict[str, Any]],
) -> int:
    """
    Clear the table, then insert `rows` in chunks.
    Returns how many rows were inserted.
    """
    resp = (
        supabase.schema(schema)
        .table(table_name)
        .delete()
        .neq(key_col, "")
        .execute()
    )
    if getattr(resp, "error", None):
        raise RemoteStoreError(f"Clear {table_name} failed: {resp.error}")

    total = 0
    for batch in chunked(rows, BATCH_SIZE):
        resp = (
            supabase.schema(schema)
            .table(table_name)
            .insert(batch)
            .execute()
        )
        if getattr(resp, "error", None):
            raise RemoteStoreError(f"Insert into {table_name} failed: {resp.error}")
        total += len(batch)

    return total


class SupabaseRemote(RemoteStore):
    """
    Orders and batch costs in two Supabase tables whose columns are named
    after the record fields (see utils.row_codec.ORDER_COLUMNS / COST_COLUMNS).
    The orders table also has an integer `position` column holding the row
    index, so a load returns records in the order they were saved, as the
    sheet backends do.
    """

    name = "supabase"

    def __init__(
            self,
            url: str = "",
            key: str = "",
            schema: str = "public",
            client: Optional[Client] = None,
    ):
        self.url = url
        self.key = key
        self.schema = schema
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_client(self.url, self.key)
        return self._client

    def load(self) -> StoreSnapshot:
        try:
            order_rows = fetch_all(self.client, self.schema, ORDERS_TABLE, POSITION_COL)
            cost_rows = fetch_all(self.client, self.schema, COSTS_TABLE, "batch_name")
        except RemoteStoreError:
            raise
        except Exception as e:
            raise RemoteStoreError(f"Unexpected error: {e}") from e

        orders = [o for o in map(record_to_order, order_rows) if o is not None]
        costs = [c for c in map(record_to_cost, cost_rows) if c is not None]
        return StoreSnapshot(orders=orders, batch_costs=costs)

    def save_orders(self, orders: List[Order]) -> None:
        try:
            n = replace_rows(
                self.client, self.schema, ORDERS_TABLE, "id",
                [dict(order_to_record(o), **{POSITION_COL: i}) for i, o in enumerate(orders)],
            )
        except RemoteStoreError:
            raise
        except Exception as e:
            raise RemoteStoreError(f"Unexpected error: {e}") from e
        logger.info("Replaced %s.%s with %d rows", self.schema, ORDERS_TABLE, n)

    def save_batch_costs(self, batch_costs: List[BatchCost]) -> None:
        try:
            n = replace_rows(
                self.client, self.schema, COSTS_TABLE, "batch_name",
                [cost_to_record(c) for c in batch_costs],
            )
        except RemoteStoreError:
            raise
        except Exception as e:
            raise RemoteStoreError(f"Unexpected error: {e}") from e
        logger.info("Replaced %s.%s with %d rows", self.schema, COSTS_TABLE, n)
