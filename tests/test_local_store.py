"""Tests for the JSON local fallback."""

import json

from conftest import make_order
from domain.models import BatchCost
from services.local_store import LocalStore


class TestLocalStore:
    def test_missing_files_load_empty(self, tmp_path):
        snapshot = LocalStore(tmp_path / "nothing-here").load()
        assert snapshot.orders == []
        assert snapshot.batch_costs == []

    def test_save_then_load(self, tmp_path):
        local = LocalStore(tmp_path)
        orders = [make_order("b", note="gift"), make_order("a", group_id="g")]
        local.save(orders, [BatchCost("B1", 500, 10, 4)])

        snapshot = local.load()
        assert snapshot.orders == orders
        assert snapshot.batch_costs == [BatchCost("B1", 500, 10, 4)]

    def test_files_use_fixed_keys(self, tmp_path):
        LocalStore(tmp_path).save([make_order("a")], [])
        assert (tmp_path / "nn_orders.json").exists()
        assert (tmp_path / "nn_costs.json").exists()
        assert not list(tmp_path.glob("*.tmp"))

    def test_corrupt_file_is_ignored(self, tmp_path):
        (tmp_path / "nn_orders.json").write_text("{not json", encoding="utf-8")
        assert LocalStore(tmp_path).load().orders == []

    def test_malformed_records_are_dropped(self, tmp_path):
        records = [{"id": "", "customer_name": "x"}, "junk", {"id": "ok"}]
        (tmp_path / "nn_orders.json").write_text(json.dumps(records), encoding="utf-8")
        (tmp_path / "nn_costs.json").write_text(json.dumps({"not": "a list"}), encoding="utf-8")

        snapshot = LocalStore(tmp_path).load()
        assert [o.id for o in snapshot.orders] == ["ok"]
        assert snapshot.batch_costs == []
