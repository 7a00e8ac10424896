import csv
import logging
from typing import Dict, Iterable, List, Optional

from domain.models import Order
from utils.row_codec import ORDER_COLUMNS, ORDER_HEADERS, record_to_order

logger = logging.getLogger(__name__)

# "Customer Name" and "customer_name" both map to customer_name
_HEADER_TO_COLUMN = {h.strip().lower(): c for h, c in zip(ORDER_HEADERS, ORDER_COLUMNS)}
_HEADER_TO_COLUMN.update({c: c for c in ORDER_COLUMNS})


def chunked(items: List, size: int) -> Iterable[List]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def read_csv(file_name: str) -> List[Dict[str, Optional[str]]]:
    """
    Read a headered CSV export of the Orders sheet into column-keyed records.
    Headers may be the sheet titles ("Batch Name") or column names
    ("batch_name"). Unknown headers are ignored; blank values become None.
    """
    with open(file_name, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise ValueError("CSV has no header row. Export the Orders sheet with its header.")

        mapping = {}
        for name in reader.fieldnames:
            column = _HEADER_TO_COLUMN.get((name or "").strip().lower())
            if column:
                mapping[name] = column

        if "id" not in mapping.values():
            raise ValueError(f"CSV has no ID column. Found: {reader.fieldnames}")

        records = []
        for r in reader:
            record = {}
            for header, column in mapping.items():
                val = r.get(header)
                val = val.strip() if isinstance(val, str) else val
                record[column] = val if val != "" else None
            records.append(record)

    return records


def import_orders_csv(file_name: str, store) -> List[Order]:
    """
    Add the orders of a CSV export to `store`, skipping rows without an id
    and ids the store already holds. Returns the imported orders.
    """
    seen = {o.id for o in store.orders}
    fresh: List[Order] = []

    for record in read_csv(file_name):
        order = record_to_order(record)
        if order is None or order.id in seen:
            continue
        seen.add(order.id)
        fresh.append(order)

    if not fresh:
        logger.info("No new orders in %s", file_name)
        return []

    store.bulk_insert_orders(fresh)
    logger.info("Imported %d orders from %s", len(fresh), file_name)
    return fresh
