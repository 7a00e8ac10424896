"""Shared pytest fixtures for the order ledger tests."""

from datetime import datetime
from typing import List

import pytest

from domain.models import BatchCost, Order, OrderDraft, TransportMode
from services.remote_store import RemoteStore, RemoteStoreError, StoreSnapshot


def ms(year: int, month: int, day: int = 15) -> int:
    """Epoch milliseconds for noon local time, safely inside the month."""
    return int(datetime(year, month, day, 12, 0).timestamp() * 1000)


def make_order(id: str = "o1", **overrides) -> Order:
    fields = dict(
        id=id,
        created_at=ms(2024, 3),
        batch_name="BATCH-202403-01",
        customer_name="Karma",
        address="Thimphu",
        phone_number="17000001",
        product_name="Shoes",
        selling_price=250,
        quantity=1,
        advance_paid=0,
        transport_mode=TransportMode.BUS,
        note=None,
        is_full_payment_received=False,
        group_id=None,
    )
    fields.update(overrides)
    return Order(**fields)


def make_draft(**overrides) -> OrderDraft:
    fields = dict(
        batch_name="BATCH-202403-01",
        customer_name="Karma",
        address="Thimphu",
        phone_number="17000001",
        product_name="Shoes",
        selling_price=250,
        quantity=1,
        advance_paid=0,
    )
    fields.update(overrides)
    return OrderDraft(**fields)


class FakeTimer:
    """Stands in for threading.Timer; tests fire it by hand."""

    created: List["FakeTimer"] = []

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False
        self.daemon = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


class FakeRemote(RemoteStore):
    name = "fake"

    def __init__(self, snapshot: StoreSnapshot = None):
        self.snapshot = snapshot or StoreSnapshot()
        self.fail_load = False
        self.fail_save = False
        self.saved_orders: List[List[Order]] = []
        self.saved_costs: List[List[BatchCost]] = []

    def load(self) -> StoreSnapshot:
        if self.fail_load:
            raise RemoteStoreError("offline")
        return self.snapshot

    def save_orders(self, orders):
        if self.fail_save:
            raise RemoteStoreError("offline")
        self.saved_orders.append(list(orders))

    def save_batch_costs(self, batch_costs):
        if self.fail_save:
            raise RemoteStoreError("offline")
        self.saved_costs.append(list(batch_costs))


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    yield FakeTimer
    FakeTimer.created = []


@pytest.fixture
def fake_remote():
    return FakeRemote()
