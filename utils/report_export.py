# utils/report_export.py
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd

from domain.models import BatchCost, BatchSummary, CustomerTrend, Order
from services import analytics_service
from utils.formatting import format_amount

BATCH_COLUMNS = {
    "batch_name": "Batch",
    "month_year": "Month",
    "order_count": "Orders",
    "total_items": "Items",
    "total_sales": "Sales",
    "delivery_fee": "Delivery Fee",
    "oat_payment": "Oat Payment",
    "total_cost_price": "Cost Price",
    "net_profit": "Net Profit",
}

TREND_COLUMNS = {
    "customer_name": "Customer",
    "phone_number": "Phone",
    "primary_address": "Address",
    "total_orders": "Orders",
    "total_sales": "Sales",
    "total_cost_price": "Cost Price",
    "total_oat": "Oat",
    "total_delivery": "Delivery",
    "net_profit": "Net Profit",
    "last_order_date": "Last Order",
}

MONEY_COLUMNS = {"Sales", "Delivery Fee", "Oat Payment", "Cost Price", "Oat", "Delivery", "Net Profit"}


def _frame(rows: List[dict], columns: Dict[str, str], display: bool) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=list(columns))
    df = df.rename(columns=columns)
    if display:
        for col in df.columns:
            if col in MONEY_COLUMNS:
                df[col] = df[col].apply(lambda x: format_amount(x) if pd.notnull(x) else "-")
    return df


def batch_frame(summaries: Sequence[BatchSummary], display: bool = False) -> pd.DataFrame:
    return _frame([asdict(s) for s in summaries], BATCH_COLUMNS, display)


def trend_frame(trends: Sequence[CustomerTrend], display: bool = False) -> pd.DataFrame:
    rows = []
    for t in trends:
        row = asdict(t)
        row["last_order_date"] = (
            datetime.fromtimestamp(t.last_order_date / 1000).strftime("%Y-%m-%d")
            if t.last_order_date else ""
        )
        rows.append(row)
    return _frame(rows, TREND_COLUMNS, display)


def build_report_frames(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        display: bool = False,
) -> Dict[str, pd.DataFrame]:
    return {
        "batches": batch_frame(analytics_service.batch_summaries(orders, batch_costs), display),
        "months": batch_frame(analytics_service.monthly_summaries(orders, batch_costs), display),
        "customers": trend_frame(analytics_service.customer_trends(orders, batch_costs), display),
    }


def export_reports(
        orders: Sequence[Order],
        batch_costs: Sequence[BatchCost],
        output_dir: str | Path,
) -> Dict[str, str]:
    """
    Write batch, monthly and customer reports as CSV files.

    Returns:
      {"batches": "/abs/path/batches-20240301-120000.csv", ...}
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")

    paths = {}
    for name, df in build_report_frames(orders, batch_costs).items():
        path = output_dir / f"{name}-{timestamp}.csv"
        df.to_csv(path, index=False)
        paths[name] = str(path.resolve())
    return paths
