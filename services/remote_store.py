# services/remote_store.py
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from domain.models import BatchCost, Order


class RemoteStoreError(RuntimeError):
    """Any failure talking to the remote store, transient or not."""


@dataclass
class StoreSnapshot:
    orders: List[Order] = field(default_factory=list)
    batch_costs: List[BatchCost] = field(default_factory=list)


class RemoteStore(ABC):
    """
    Interface every remote backend implements.

    Saves overwrite the whole remote collection (clear then rewrite); there is
    no merge and no concurrency token. Loads return records in stored order.
    """

    name = "remote"

    @abstractmethod
    def load(self) -> StoreSnapshot:
        ...

    @abstractmethod
    def save_orders(self, orders: List[Order]) -> None:
        ...

    @abstractmethod
    def save_batch_costs(self, batch_costs: List[BatchCost]) -> None:
        ...
