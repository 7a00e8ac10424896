# services/sheets_service.py
import logging
from typing import Any, List, Optional

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from domain.models import BatchCost, Order
from services.remote_store import RemoteStore, RemoteStoreError, StoreSnapshot
from utils.row_codec import cost_to_row, order_to_row, rows_to_costs, rows_to_orders

logger = logging.getLogger(__name__)

ORDERS_SHEET = "Orders"
COSTS_SHEET = "BatchCosts"
ORDERS_RANGE = f"{ORDERS_SHEET}!A2:N"
COSTS_RANGE = f"{COSTS_SHEET}!A2:D"


def get_values(sheets: Resource, spreadsheet_id: str, cell_range: str) -> List[List[Any]]:
    # raw cell values; display formatting ("1,500") would not parse back
    resp = sheets.spreadsheets().values().get(
        spreadsheetId=spreadsheet_id,
        range=cell_range,
        valueRenderOption="UNFORMATTED_VALUE",
    ).execute()
    return resp.get("values", [])


def rewrite_values(
        sheets: Resource,
        spreadsheet_id: str,
        sheet_name: str,
        cell_range: str,
        rows: List[List[Any]],
) -> None:
    """
    Clear everything below the header row, then write `rows` from A2.
    """
    sheets.spreadsheets().values().clear(
        spreadsheetId=spreadsheet_id,
        range=cell_range,
        body={},
    ).execute()

    if not rows:
        return

    sheets.spreadsheets().values().update(
        spreadsheetId=spreadsheet_id,
        range=f"{sheet_name}!A2",
        valueInputOption="RAW",
        body={"values": rows},
    ).execute()


class SheetsRemote(RemoteStore):
    """
    Orders and batch costs kept in two tabs of one Google spreadsheet, one
    positional row per record under a header row.
    """

    name = "sheets"

    def __init__(self, spreadsheet_id: str, sheets: Optional[Resource] = None):
        self.spreadsheet_id = spreadsheet_id
        self._sheets = sheets

    @property
    def sheets(self) -> Resource:
        if self._sheets is None:
            from google_client import get_sheets_service

            self._sheets = get_sheets_service()
        return self._sheets

    def load(self) -> StoreSnapshot:
        try:
            order_rows = get_values(self.sheets, self.spreadsheet_id, ORDERS_RANGE)
        except HttpError as e:
            raise RemoteStoreError(f"Loading orders failed: {e}") from e

        try:
            cost_rows = get_values(self.sheets, self.spreadsheet_id, COSTS_RANGE)
        except HttpError as e:
            # the BatchCosts tab may not exist yet on a fresh spreadsheet
            logger.warning("BatchCosts tab not readable, assuming no costs: %s", e)
            cost_rows = []

        return StoreSnapshot(
            orders=rows_to_orders(order_rows),
            batch_costs=rows_to_costs(cost_rows),
        )

    def save_orders(self, orders: List[Order]) -> None:
        try:
            rewrite_values(
                self.sheets,
                self.spreadsheet_id,
                ORDERS_SHEET,
                ORDERS_RANGE,
                [order_to_row(o) for o in orders],
            )
        except HttpError as e:
            raise RemoteStoreError(f"Saving orders failed: {e}") from e

    def save_batch_costs(self, batch_costs: List[BatchCost]) -> None:
        try:
            rewrite_values(
                self.sheets,
                self.spreadsheet_id,
                COSTS_SHEET,
                COSTS_RANGE,
                [cost_to_row(c) for c in batch_costs],
            )
        except HttpError as e:
            raise RemoteStoreError(f"Saving batch costs failed: {e}") from e
