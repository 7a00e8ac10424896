# domain/models.py

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TransportMode(str, Enum):
    BUS = "Bus"
    TAXI = "Taxi"
    POST = "Post"
    KEEP_AT_SHOP = "Keep at Shop"

    @classmethod
    def parse(cls, value) -> "TransportMode":
        """
        Map a stored value back to a mode. Blank or unknown values fall back
        to Keep at Shop.
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for mode in cls:
            if mode.value.lower() == text.lower():
                return mode
        return cls.KEEP_AT_SHOP


@dataclass
class OrderDraft:
    """
    What the entry form produces: an order without id, created_at or group_id.
    """
    batch_name: str
    customer_name: str
    address: str
    phone_number: str
    product_name: str
    selling_price: float  # per unit, FIXED_CHARGE already included
    quantity: int
    advance_paid: float
    transport_mode: TransportMode = TransportMode.KEEP_AT_SHOP
    note: Optional[str] = None
    is_full_payment_received: bool = False


@dataclass
class Order:
    """
    One line item of a customer transaction.
    """
    id: str
    created_at: int  # epoch milliseconds
    batch_name: str
    customer_name: str
    address: str
    phone_number: str
    product_name: str
    selling_price: float
    quantity: int
    advance_paid: float
    transport_mode: TransportMode = TransportMode.KEEP_AT_SHOP
    note: Optional[str] = None
    is_full_payment_received: bool = False
    group_id: Optional[str] = None

    @property
    def total(self) -> float:
        return self.selling_price * self.quantity

    @property
    def due(self) -> float:
        if self.is_full_payment_received:
            return 0
        return max(0, self.total - self.advance_paid)

    @classmethod
    def from_draft(
            cls,
            draft: OrderDraft,
            *,
            id: str,
            created_at: int,
            group_id: Optional[str] = None,
    ) -> "Order":
        return cls(
            id=id,
            created_at=created_at,
            group_id=group_id,
            batch_name=draft.batch_name,
            customer_name=draft.customer_name,
            address=draft.address,
            phone_number=draft.phone_number,
            product_name=draft.product_name,
            selling_price=draft.selling_price,
            quantity=draft.quantity,
            advance_paid=draft.advance_paid,
            transport_mode=draft.transport_mode,
            note=draft.note,
            is_full_payment_received=draft.is_full_payment_received,
        )


@dataclass
class BatchCost:
    batch_name: str
    total_cost_price: float = 0
    oat_input_value: float = 0  # quantity, multiplied by OAT_RATE
    delivery_fee_quantity: Optional[float] = None  # None -> batch item count


@dataclass(frozen=True)
class CustomerKey:
    """
    Identity used to group a customer's orders: lower-cased trimmed name plus
    trimmed phone.

    There is no stronger key. Two different people with the same name and a
    blank phone number share a key and are treated as one customer.
    """
    name: str
    phone: str

    @classmethod
    def from_order(cls, order: Order) -> "CustomerKey":
        return cls(
            name=(order.customer_name or "").strip().lower(),
            phone=(order.phone_number or "").strip(),
        )

    def __str__(self) -> str:
        return f"{self.name}_{self.phone}"


@dataclass
class DashboardStats:
    total_orders: int
    total_revenue: float
    total_outstanding: float
    total_items: int
    total_expenses: float
    net_profit: float


@dataclass
class BatchSummary:
    """
    Per batch, or per month when batch_name is the "All Batches" label.
    """
    batch_name: str
    month_year: str  # "YYYY-MM"
    order_count: int = 0
    total_items: int = 0
    total_sales: float = 0
    delivery_fee: float = 0
    oat_payment: float = 0
    total_cost_price: float = 0
    net_profit: float = 0
    oat_input_value: float = 0
    delivery_fee_quantity: float = 0


@dataclass
class UnitCosts:
    cost_price: float = 0
    oat: float = 0
    delivery: float = 0


@dataclass
class CustomerTrend:
    phone_number: str
    customer_name: str
    primary_address: str
    total_orders: int = 0
    total_sales: float = 0
    total_cost_price: float = 0
    total_oat: float = 0
    total_delivery: float = 0
    net_profit: float = 0
    last_order_date: int = 0


@dataclass
class CustomerTotals:
    total_qty: int = 0
    total_sales: float = 0
    total_advance: float = 0
    total_remaining: float = 0
