# services/analytics_service.py

from collections import OrderedDict
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from config import ALL_BATCHES_LABEL, DELIVERY_FEE_PER_ITEM, OAT_RATE
from domain.models import (
    BatchCost,
    BatchSummary,
    CustomerKey,
    CustomerTotals,
    CustomerTrend,
    DashboardStats,
    Order,
    UnitCosts,
)

# Every function here is a pure projection of (orders, batch_costs).
# Nothing is cached; callers recompute on every read.


def month_year(created_at_ms: int, tz: Optional[tzinfo] = None) -> str:
    d = datetime.fromtimestamp(created_at_ms / 1000, tz)
    return f"{d.year}-{d.month:02d}"


def _cost_index(batch_costs: Iterable[BatchCost]) -> Dict[str, BatchCost]:
    # first entry wins, same as a linear find over the list
    index: Dict[str, BatchCost] = {}
    for c in batch_costs:
        index.setdefault(c.batch_name, c)
    return index


def _group_by_batch(orders: Iterable[Order]) -> "OrderedDict[str, List[Order]]":
    groups: "OrderedDict[str, List[Order]]" = OrderedDict()
    for o in orders:
        groups.setdefault(o.batch_name, []).append(o)
    return groups


def _items_by_batch(orders: Iterable[Order]) -> Dict[str, int]:
    items: Dict[str, int] = {}
    for o in orders:
        items[o.batch_name] = items.get(o.batch_name, 0) + o.quantity
    return items


def batch_expenses(
        cost: Optional[BatchCost],
        total_items: int,
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
) -> tuple[float, float, float, float]:
    """
    Returns (cost_price, oat_payment, delivery_fee, delivery_qty) for a batch.
    Without a cost record only the default delivery fee applies.
    """
    cost_price = (cost.total_cost_price or 0) if cost else 0
    oat_payment = ((cost.oat_input_value or 0) if cost else 0) * oat_rate
    if cost is not None and cost.delivery_fee_quantity is not None:
        delivery_qty = cost.delivery_fee_quantity
    else:
        delivery_qty = total_items
    return cost_price, oat_payment, delivery_qty * delivery_rate, delivery_qty


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def dashboard_stats(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
) -> DashboardStats:
    total_revenue = sum(o.total for o in orders)
    total_outstanding = sum(o.due for o in orders)
    total_items = sum(o.quantity for o in orders)

    costs = _cost_index(batch_costs)
    total_expenses = 0
    for batch_name, items in _items_by_batch(orders).items():
        cost_price, oat_payment, delivery_fee, _ = batch_expenses(
            costs.get(batch_name), items, oat_rate, delivery_rate,
        )
        total_expenses += cost_price + oat_payment + delivery_fee

    return DashboardStats(
        total_orders=len(orders),
        total_revenue=total_revenue,
        total_outstanding=total_outstanding,
        total_items=total_items,
        total_expenses=total_expenses,
        net_profit=total_revenue - total_expenses,
    )


# ---------------------------------------------------------------------------
# Batch / month reports
# ---------------------------------------------------------------------------

def batch_summaries(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
        tz: Optional[tzinfo] = None,
) -> List[BatchSummary]:
    """
    One row per batch name found in orders, newest month first.

    The month of a batch is taken from the first of its orders in record
    order, not from the latest one.
    """
    costs = _cost_index(batch_costs)
    rows: List[BatchSummary] = []

    for name, batch_orders in _group_by_batch(orders).items():
        cost = costs.get(name)
        total_items = sum(o.quantity for o in batch_orders)
        total_sales = sum(o.total for o in batch_orders)
        cost_price, oat_payment, delivery_fee, delivery_qty = batch_expenses(
            cost, total_items, oat_rate, delivery_rate,
        )

        rows.append(
            BatchSummary(
                batch_name=name,
                month_year=month_year(batch_orders[0].created_at, tz),
                order_count=len(batch_orders),
                total_items=total_items,
                total_sales=total_sales,
                delivery_fee=delivery_fee,
                oat_payment=oat_payment,
                total_cost_price=cost_price,
                net_profit=total_sales - (delivery_fee + oat_payment + cost_price),
                oat_input_value=(cost.oat_input_value or 0) if cost else 0,
                delivery_fee_quantity=delivery_qty,
            )
        )

    # sorted() is stable, so batches of the same month keep record order
    return sorted(rows, key=lambda r: r.month_year, reverse=True)


def monthly_summaries(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
        tz: Optional[tzinfo] = None,
) -> List[BatchSummary]:
    months: Dict[str, BatchSummary] = {}
    for batch in batch_summaries(orders, batch_costs, oat_rate, delivery_rate, tz):
        m = months.get(batch.month_year)
        if m is None:
            m = months[batch.month_year] = BatchSummary(
                batch_name=ALL_BATCHES_LABEL,
                month_year=batch.month_year,
            )
        m.order_count += batch.order_count
        m.total_items += batch.total_items
        m.total_sales += batch.total_sales
        m.delivery_fee += batch.delivery_fee
        m.oat_payment += batch.oat_payment
        m.total_cost_price += batch.total_cost_price
        m.net_profit += batch.net_profit

    return sorted(months.values(), key=lambda r: r.month_year, reverse=True)


def batch_performance(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
) -> List[BatchSummary]:
    """Batch summaries ordered by net profit, best first."""
    rows = batch_summaries(orders, batch_costs, oat_rate, delivery_rate)
    return sorted(rows, key=lambda r: r.net_profit, reverse=True)


# ---------------------------------------------------------------------------
# Customer trends
# ---------------------------------------------------------------------------

def batch_unit_costs(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
) -> Dict[str, UnitCosts]:
    """
    Batch-level costs spread evenly over every item in the batch, whoever
    bought it. Batches without items get zero unit costs.
    """
    items = _items_by_batch(orders)
    costs = _cost_index(batch_costs)

    names = list(items)
    names += [n for n in costs if n not in items]

    result: Dict[str, UnitCosts] = {}
    for name in names:
        total_items = items.get(name, 0)
        if total_items == 0:
            result[name] = UnitCosts()
            continue

        cost_price, oat_payment, delivery_fee, _ = batch_expenses(
            costs.get(name), total_items, oat_rate, delivery_rate,
        )
        result[name] = UnitCosts(
            cost_price=cost_price / total_items,
            oat=oat_payment / total_items,
            delivery=delivery_fee / total_items,
        )
    return result


def trend_key(order: Order) -> str:
    """Phone number when present, otherwise the lower-cased trimmed name."""
    phone = (order.phone_number or "").strip()
    return phone if phone else (order.customer_name or "").strip().lower()


def customer_trends(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        oat_rate: float = OAT_RATE,
        delivery_rate: float = DELIVERY_FEE_PER_ITEM,
) -> List[CustomerTrend]:
    unit_costs = batch_unit_costs(orders, batch_costs, oat_rate, delivery_rate)
    customers: Dict[str, CustomerTrend] = {}

    for order in orders:
        key = trend_key(order)
        c = customers.get(key)
        if c is None:
            c = customers[key] = CustomerTrend(
                phone_number=order.phone_number,
                customer_name=order.customer_name,
                primary_address=order.address,
            )

        sales = order.total
        unit = unit_costs.get(order.batch_name) or UnitCosts()
        order_cost = unit.cost_price * order.quantity
        order_oat = unit.oat * order.quantity
        order_delivery = unit.delivery * order.quantity

        c.total_orders += 1
        c.total_sales += sales
        c.total_cost_price += order_cost
        c.total_oat += order_oat
        c.total_delivery += order_delivery
        c.net_profit += sales - (order_cost + order_oat + order_delivery)
        c.last_order_date = max(c.last_order_date, order.created_at)

    return sorted(customers.values(), key=lambda c: c.total_sales, reverse=True)


# ---------------------------------------------------------------------------
# Order list helpers
# ---------------------------------------------------------------------------

def group_orders_by_customer(orders: Iterable[Order]) -> "OrderedDict[CustomerKey, List[Order]]":
    """
    Orders grouped by CustomerKey. Groups come most recently active first,
    and orders inside a group newest first.
    """
    groups: Dict[CustomerKey, List[Order]] = {}
    for o in orders:
        groups.setdefault(CustomerKey.from_order(o), []).append(o)

    ordered = sorted(
        groups.items(),
        key=lambda kv: max(o.created_at for o in kv[1]),
        reverse=True,
    )
    return OrderedDict(
        (key, sorted(group, key=lambda o: o.created_at, reverse=True))
        for key, group in ordered
    )


def customer_totals(orders: Iterable[Order]) -> CustomerTotals:
    totals = CustomerTotals()
    for o in orders:
        totals.total_qty += o.quantity
        totals.total_sales += o.total
        totals.total_advance += o.advance_paid
        totals.total_remaining += o.due
    return totals


def customer_notes(orders: Iterable[Order]) -> List[str]:
    notes: List[str] = []
    for o in orders:
        note = (o.note or "").strip()
        if note and note not in notes:
            notes.append(note)
    return notes


def filter_orders(
        orders: Iterable[Order],
        search: str = "",
        batch_name: str = "all",
        status: str = "all",
) -> List[Order]:
    """
    status is "all", "paid" (full payment received) or "pending".
    search matches name, address and product case-insensitively and the
    phone number as typed.
    """
    term = (search or "").lower()
    result = []
    for o in orders:
        matches_search = (
            term in (o.customer_name or "").lower()
            or (search or "") in (o.phone_number or "")
            or term in (o.address or "").lower()
            or term in (o.product_name or "").lower()
        )
        matches_batch = batch_name == "all" or o.batch_name == batch_name
        matches_status = (
            status == "all"
            or (status == "paid" and o.is_full_payment_received)
            or (status == "pending" and not o.is_full_payment_received)
        )
        if matches_search and matches_batch and matches_status:
            result.append(o)
    return result
