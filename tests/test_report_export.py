"""Tests for the report DataFrames and CSV export."""

import pandas as pd

from conftest import make_order, ms
from domain.models import BatchCost
from utils.report_export import build_report_frames, export_reports


def _data():
    orders = [
        make_order("a", batch_name="B1", selling_price=1250, quantity=4, created_at=ms(2024, 3)),
        make_order("b", batch_name="B1", selling_price=250, quantity=6, created_at=ms(2024, 3)),
    ]
    return orders, [BatchCost("B1", total_cost_price=500, oat_input_value=10)]


class TestReportFrames:
    def test_batch_frame(self):
        frames = build_report_frames(*_data())
        batches = frames["batches"]

        assert list(batches.columns) == [
            "Batch", "Month", "Orders", "Items", "Sales", "Delivery Fee",
            "Oat Payment", "Cost Price", "Net Profit",
        ]
        row = batches.iloc[0]
        assert row["Batch"] == "B1"
        assert row["Month"] == "2024-03"
        assert row["Sales"] == 6500
        assert row["Net Profit"] == 6500 - 500 - 280 - 1000

    def test_display_formats_money(self):
        frames = build_report_frames(*_data(), display=True)
        assert frames["batches"].iloc[0]["Sales"] == "6,500"
        assert frames["months"].iloc[0]["Batch"] == "All Batches"
        assert frames["customers"].iloc[0]["Last Order"].startswith("2024-03")

    def test_empty_data_has_headers(self):
        frames = build_report_frames([], [])
        assert frames["batches"].empty
        assert "Customer" in frames["customers"].columns


class TestExportReports:
    def test_writes_csv_files(self, tmp_path):
        paths = export_reports(*_data(), tmp_path / "reports")

        assert set(paths) == {"batches", "months", "customers"}
        df = pd.read_csv(paths["batches"])
        assert df.loc[0, "Batch"] == "B1"
        assert df.loc[0, "Items"] == 10
