# utils/row_codec.py
"""
Positional row layout shared by every remote store.

Field order is the schema; there is no header or version. Orders:

    id, groupId, createdAt, batchName, customerName, address, phoneNumber,
    productName, sellingPrice, quantity, advancePaid, transportMode,
    isFullPaymentReceived, note

Batch costs:

    batchName, totalCostPrice, oatInputValue, deliveryFeeQuantity
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence

from domain.models import BatchCost, Order, TransportMode

logger = logging.getLogger(__name__)

ORDER_COLUMNS = [
    "id",
    "group_id",
    "created_at",
    "batch_name",
    "customer_name",
    "address",
    "phone_number",
    "product_name",
    "selling_price",
    "quantity",
    "advance_paid",
    "transport_mode",
    "is_full_payment_received",
    "note",
]

COST_COLUMNS = [
    "batch_name",
    "total_cost_price",
    "oat_input_value",
    "delivery_fee_quantity",
]

ORDER_HEADERS = [
    "ID", "Group ID", "Created At", "Batch Name", "Customer Name",
    "Address", "Phone Number", "Product Name", "Selling Price",
    "Quantity", "Advance Paid", "Transport Mode",
    "Is Full Payment Received", "Note",
]

COST_HEADERS = ["Batch Name", "Total Cost Price", "Oat Input", "Delivery Qty"]


def _text(val: Any) -> str:
    return "" if val is None else str(val).strip()


def _number(val: Any) -> float:
    if val is None or val == "":
        return 0
    try:
        num = float(val)
    except (TypeError, ValueError):
        return 0
    return int(num) if num.is_integer() else num


def _cell(row: Sequence[Any], idx: int) -> Any:
    return row[idx] if idx < len(row) else None


def parse_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    if val == 1:
        return True
    return _text(val).upper() in ("TRUE", "YES", "1")


def parse_created_at(val: Any) -> int:
    try:
        return int(float(val))
    except (TypeError, ValueError):
        return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

def order_to_row(o: Order) -> List[Any]:
    return [
        _text(o.id),
        _text(o.group_id),
        o.created_at or int(time.time() * 1000),
        _text(o.batch_name),
        _text(o.customer_name),
        _text(o.address),
        _text(o.phone_number),
        _text(o.product_name),
        _number(o.selling_price),
        _number(o.quantity),
        _number(o.advance_paid),
        TransportMode.parse(o.transport_mode).value,
        bool(o.is_full_payment_received),
        _text(o.note),
    ]


def row_to_order(row: Sequence[Any]) -> Optional[Order]:
    """
    Decode one sheet row. Rows without an id are malformed and return None.
    """
    if not row or not _text(row[0]):
        return None

    note = _text(_cell(row, 13))
    return Order(
        id=_text(row[0]),
        group_id=_text(_cell(row, 1)) or None,
        created_at=parse_created_at(_cell(row, 2)),
        batch_name=_text(_cell(row, 3)),
        customer_name=_text(_cell(row, 4)),
        address=_text(_cell(row, 5)),
        phone_number=_text(_cell(row, 6)),
        product_name=_text(_cell(row, 7)),
        selling_price=_number(_cell(row, 8)),
        quantity=int(_number(_cell(row, 9))),
        advance_paid=_number(_cell(row, 10)),
        transport_mode=TransportMode.parse(_cell(row, 11)),
        is_full_payment_received=parse_bool(_cell(row, 12)),
        note=note or None,
    )


def rows_to_orders(rows: Iterable[Sequence[Any]]) -> List[Order]:
    orders = []
    for row in rows or []:
        order = row_to_order(row)
        if order is None:
            logger.debug("Dropping order row without id: %r", row)
            continue
        orders.append(order)
    return orders


# ---------------------------------------------------------------------------
# Batch costs
# ---------------------------------------------------------------------------

def cost_to_row(c: BatchCost) -> List[Any]:
    return [
        _text(c.batch_name),
        _number(c.total_cost_price),
        _number(c.oat_input_value),
        _number(c.delivery_fee_quantity) if c.delivery_fee_quantity is not None else "",
    ]


def row_to_cost(row: Sequence[Any]) -> Optional[BatchCost]:
    if not row or not _text(row[0]):
        return None

    qty = _cell(row, 3)
    return BatchCost(
        batch_name=_text(row[0]),
        total_cost_price=_number(_cell(row, 1)),
        oat_input_value=_number(_cell(row, 2)),
        delivery_fee_quantity=_number(qty) if qty is not None and _text(qty) != "" else None,
    )


def rows_to_costs(rows: Iterable[Sequence[Any]]) -> List[BatchCost]:
    costs = []
    for row in rows or []:
        cost = row_to_cost(row)
        if cost is None:
            logger.debug("Dropping cost row without batch name: %r", row)
            continue
        costs.append(cost)
    return costs


# ---------------------------------------------------------------------------
# Column-keyed records (Supabase tables, local JSON, CSV)
# ---------------------------------------------------------------------------

def order_to_record(o: Order) -> Dict[str, Any]:
    return dict(zip(ORDER_COLUMNS, order_to_row(o)))


def record_to_order(record: Dict[str, Any]) -> Optional[Order]:
    return row_to_order([record.get(c) for c in ORDER_COLUMNS])


def cost_to_record(c: BatchCost) -> Dict[str, Any]:
    record = dict(zip(COST_COLUMNS, cost_to_row(c)))
    if record["delivery_fee_quantity"] == "":
        record["delivery_fee_quantity"] = None
    return record


def record_to_cost(record: Dict[str, Any]) -> Optional[BatchCost]:
    return row_to_cost([record.get(c) for c in COST_COLUMNS])
