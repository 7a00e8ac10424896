# services/web_app_service.py
import json
import logging
import time
from typing import Any, List, Optional

import requests

from config import WEB_APP_URL_PREFIX
from domain.models import BatchCost, Order
from services.remote_store import RemoteStore, RemoteStoreError, StoreSnapshot
from utils.row_codec import cost_to_row, order_to_row, rows_to_costs, rows_to_orders

logger = logging.getLogger(__name__)


def is_web_app_url(url: str) -> bool:
    return bool(url) and url.startswith(WEB_APP_URL_PREFIX)


class WebAppRemote(RemoteStore):
    """
    Apps Script web app bridging to the spreadsheet.

    GET returns {"orders": [...rows], "costs": [...rows]} without header rows.
    POST takes {"action": "syncOrders" | "syncCosts", "data": rows} and
    rewrites the whole tab.
    """

    name = "web_app"

    def __init__(
            self,
            url: str,
            *,
            session: Optional[requests.Session] = None,
            timeout_seconds: int = 20,
    ):
        if not is_web_app_url(url):
            raise ValueError(f"Not an Apps Script web app URL: {url!r}")
        self.url = url
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

    def load(self) -> StoreSnapshot:
        try:
            resp = self.session.get(
                self.url,
                # cache buster
                params={"t": int(time.time() * 1000)},
                timeout=self.timeout_seconds,
                allow_redirects=True,
            )
            resp.raise_for_status()
            result = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise RemoteStoreError(f"Cloud access failed: {e}") from e

        return StoreSnapshot(
            orders=rows_to_orders(result.get("orders") or []),
            batch_costs=rows_to_costs(result.get("costs") or []),
        )

    def _post(self, action: str, rows: List[List[Any]]) -> None:
        try:
            resp = self.session.post(
                self.url,
                data=json.dumps({"action": action, "data": rows}),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout_seconds,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise RemoteStoreError(f"{action} failed: {e}") from e

        logger.info("%s sent %d rows", action, len(rows))

    def save_orders(self, orders: List[Order]) -> None:
        self._post("syncOrders", [order_to_row(o) for o in orders])

    def save_batch_costs(self, batch_costs: List[BatchCost]) -> None:
        self._post("syncCosts", [cost_to_row(c) for c in batch_costs])
