# services/order_entry_service.py

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from config import FIXED_CHARGE
from domain.models import OrderDraft, TransportMode


class OrderFormError(ValueError):
    pass


@dataclass
class LineItem:
    """
    One row of the entry form, priced before the fixed service charge.
    """
    product_name: str
    base_price: float
    quantity: int = 1

    @property
    def selling_price(self) -> float:
        return (self.base_price or 0) + FIXED_CHARGE

    @property
    def subtotal(self) -> float:
        return self.selling_price * self.quantity


@dataclass
class CustomerDetails:
    batch_name: str
    customer_name: str
    address: str = ""
    phone_number: str = ""
    transport_mode: TransportMode = TransportMode.KEEP_AT_SHOP
    note: Optional[str] = None


@dataclass
class EntrySummary:
    total_selling_price: float
    total_quantity: int
    remaining_balance: float


def allocate_advance(
        subtotals: Sequence[float],
        advance: float,
        is_full_payment_received: bool = False,
) -> List[float]:
    """
    Split one advance payment across line items in proportion to their
    subtotals.

    Every item but the last gets floor(advance * share); the last gets what
    is left, so the parts add up to exactly `advance`. With full payment each
    item is simply paid its own subtotal. A zero total allocates nothing.
    """
    if is_full_payment_received:
        return list(subtotals)

    total = sum(subtotals)
    if total <= 0:
        return [0 for _ in subtotals]

    allocations: List[float] = []
    distributed = 0
    last = len(subtotals) - 1
    for idx, subtotal in enumerate(subtotals):
        if idx == last:
            allocations.append(advance - distributed)
        else:
            part = math.floor(advance * (subtotal / total))
            distributed += part
            allocations.append(part)

    return allocations


def summarize_entry(
        items: Sequence[LineItem],
        advance: float = 0,
        is_full_payment_received: bool = False,
) -> EntrySummary:
    total_sell = sum(i.subtotal for i in items)
    total_qty = sum(i.quantity for i in items)
    remaining = 0 if is_full_payment_received else max(0, total_sell - (advance or 0))
    return EntrySummary(
        total_selling_price=total_sell,
        total_quantity=total_qty,
        remaining_balance=remaining,
    )


def build_order_drafts(
        customer: CustomerDetails,
        items: Sequence[LineItem],
        advance: float = 0,
        is_full_payment_received: bool = False,
) -> List[OrderDraft]:
    """
    Turn one entry-form submission into order drafts, one per line item,
    with the advance distributed by allocate_advance.
    """
    if not (customer.customer_name or "").strip():
        raise OrderFormError("Customer name is required")
    if not items:
        raise OrderFormError("At least one item is required")

    allocations = allocate_advance(
        [i.subtotal for i in items],
        advance or 0,
        is_full_payment_received,
    )

    note = customer.note.strip() if customer.note and customer.note.strip() else None

    drafts: List[OrderDraft] = []
    for item, item_advance in zip(items, allocations):
        drafts.append(
            OrderDraft(
                batch_name=customer.batch_name,
                customer_name=customer.customer_name,
                address=customer.address,
                phone_number=customer.phone_number,
                product_name=item.product_name,
                selling_price=item.selling_price,
                quantity=item.quantity,
                advance_paid=item_advance,
                transport_mode=customer.transport_mode,
                note=note,
                is_full_payment_received=is_full_payment_received,
            )
        )
    return drafts


def line_item_from_order_price(product_name: str, selling_price: float, quantity: int) -> LineItem:
    """
    Rebuild a form row from a stored order when it is opened for editing.
    """
    return LineItem(
        product_name=product_name,
        base_price=selling_price - FIXED_CHARGE,
        quantity=quantity,
    )
