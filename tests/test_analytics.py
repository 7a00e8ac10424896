"""Tests for the aggregation functions."""

from conftest import make_order, ms
from domain.models import BatchCost, CustomerKey
from services import analytics_service as analytics


def _ten_item_batch():
    """Two orders, ten items, sales 2500."""
    orders = [
        make_order("a", batch_name="B1", selling_price=250, quantity=4),
        make_order("b", batch_name="B1", selling_price=250, quantity=6),
    ]
    costs = [BatchCost("B1", total_cost_price=500, oat_input_value=10)]
    return orders, costs


class TestDashboardStats:
    def test_totals(self):
        orders = [
            make_order("a", selling_price=250, quantity=2, advance_paid=100),
            make_order("b", selling_price=100, quantity=1, is_full_payment_received=True),
        ]
        stats = analytics.dashboard_stats(orders, [])

        assert stats.total_orders == 2
        assert stats.total_revenue == 600
        assert stats.total_outstanding == 400
        assert stats.total_items == 3
        # no cost record: only the default delivery fee on 3 items
        assert stats.total_expenses == 300
        assert stats.net_profit == 300

    def test_expenses_use_override(self):
        orders, costs = _ten_item_batch()
        costs[0].delivery_fee_quantity = 2
        stats = analytics.dashboard_stats(orders, costs)
        assert stats.total_expenses == 500 + 280 + 200

    def test_cost_for_batch_without_orders_is_ignored(self):
        orders, costs = _ten_item_batch()
        costs.append(BatchCost("GHOST", total_cost_price=10_000))
        stats = analytics.dashboard_stats(orders, costs)
        assert stats.total_expenses == 500 + 280 + 1000

    def test_empty(self):
        stats = analytics.dashboard_stats([], [])
        assert stats.total_orders == 0
        assert stats.net_profit == 0


class TestBatchSummaries:
    def test_ten_item_batch(self):
        orders, costs = _ten_item_batch()
        [row] = analytics.batch_summaries(orders, costs)

        assert row.batch_name == "B1"
        assert row.order_count == 2
        assert row.total_items == 10
        assert row.total_sales == 2500
        assert row.delivery_fee == 1000
        assert row.oat_payment == 280
        assert row.total_cost_price == 500
        assert row.net_profit == 2500 - (500 + 280 + 1000)
        assert row.oat_input_value == 10
        assert row.delivery_fee_quantity == 10

    def test_zero_override_is_respected(self):
        orders, costs = _ten_item_batch()
        costs[0].delivery_fee_quantity = 0
        [row] = analytics.batch_summaries(orders, costs)
        assert row.delivery_fee == 0

    def test_month_from_first_order_in_record_order(self):
        orders = [
            make_order("a", batch_name="B1", created_at=ms(2024, 2)),
            make_order("b", batch_name="B1", created_at=ms(2024, 5)),
        ]
        [row] = analytics.batch_summaries(orders, [])
        assert row.month_year == "2024-02"

    def test_sorted_newest_month_first(self):
        orders = [
            make_order("a", batch_name="JAN", created_at=ms(2024, 1)),
            make_order("b", batch_name="MAR", created_at=ms(2024, 3)),
            make_order("c", batch_name="FEB", created_at=ms(2024, 2)),
        ]
        rows = analytics.batch_summaries(orders, [])
        assert [r.batch_name for r in rows] == ["MAR", "FEB", "JAN"]

    def test_idempotent(self):
        orders, costs = _ten_item_batch()
        assert analytics.batch_summaries(orders, costs) == analytics.batch_summaries(orders, costs)
        assert analytics.customer_trends(orders, costs) == analytics.customer_trends(orders, costs)

    def test_batch_performance_sorted_by_profit(self):
        orders = [
            make_order("a", batch_name="LOW", selling_price=100),
            make_order("b", batch_name="HIGH", selling_price=1000),
        ]
        rows = analytics.batch_performance(orders, [])
        assert [r.batch_name for r in rows] == ["HIGH", "LOW"]


class TestMonthlySummaries:
    def test_sums_batches_of_a_month(self):
        orders = [
            make_order("a", batch_name="B1", created_at=ms(2024, 3, 2), selling_price=300),
            make_order("b", batch_name="B2", created_at=ms(2024, 3, 20), selling_price=500),
            make_order("c", batch_name="B3", created_at=ms(2024, 4), selling_price=700),
        ]
        costs = [BatchCost("B1", total_cost_price=50)]
        rows = analytics.monthly_summaries(orders, costs)

        assert [r.month_year for r in rows] == ["2024-04", "2024-03"]
        march = rows[1]
        assert march.batch_name == "All Batches"
        assert march.order_count == 2
        assert march.total_sales == 800
        assert march.total_cost_price == 50
        assert march.delivery_fee == 200
        assert march.net_profit == 800 - 50 - 200


class TestCustomerTrends:
    def test_unit_costs_spread_per_item(self):
        orders, costs = _ten_item_batch()
        units = analytics.batch_unit_costs(orders, costs)
        assert units["B1"].cost_price == 50
        assert units["B1"].oat == 28
        assert units["B1"].delivery == 100

    def test_batch_without_items_gets_zero(self):
        units = analytics.batch_unit_costs([], [BatchCost("EMPTY", 500, 10)])
        assert units["EMPTY"].cost_price == 0
        assert units["EMPTY"].delivery == 0

    def test_net_profit_per_customer(self):
        orders = [
            make_order("a", batch_name="B1", phone_number="1", customer_name="Karma",
                       selling_price=250, quantity=4, created_at=ms(2024, 3, 1)),
            make_order("b", batch_name="B1", phone_number="2", customer_name="Dorji",
                       selling_price=250, quantity=6, created_at=ms(2024, 3, 2)),
            make_order("c", batch_name="B1", phone_number="1", customer_name="Karma",
                       selling_price=100, quantity=0, created_at=ms(2024, 3, 9)),
        ]
        costs = [BatchCost("B1", total_cost_price=500, oat_input_value=10)]
        trends = analytics.customer_trends(orders, costs)

        assert [t.customer_name for t in trends] == ["Dorji", "Karma"]
        karma = trends[1]
        assert karma.total_orders == 2
        assert karma.total_sales == 1000
        assert karma.total_cost_price == 200
        assert karma.total_oat == 112
        assert karma.total_delivery == 400
        assert karma.net_profit == 1000 - (200 + 112 + 400)
        assert karma.last_order_date == ms(2024, 3, 9)

    def test_key_falls_back_to_name(self):
        orders = [
            make_order("a", phone_number="", customer_name="Pema "),
            make_order("b", phone_number=" ", customer_name="pema"),
        ]
        trends = analytics.customer_trends(orders, [])
        assert len(trends) == 1
        assert trends[0].total_orders == 2


class TestOrderListHelpers:
    def test_group_by_customer_most_recent_first(self):
        orders = [
            make_order("a", customer_name="Karma", phone_number="1", created_at=1),
            make_order("b", customer_name="Dorji", phone_number="2", created_at=5),
            make_order("c", customer_name="karma", phone_number="1", created_at=3),
        ]
        groups = analytics.group_orders_by_customer(orders)

        keys = list(groups)
        assert keys == [CustomerKey("dorji", "2"), CustomerKey("karma", "1")]
        assert [o.id for o in groups[CustomerKey("karma", "1")]] == ["c", "a"]

    def test_customer_totals_and_notes(self):
        orders = [
            make_order("a", selling_price=100, quantity=2, advance_paid=50, note="call first"),
            make_order("b", selling_price=100, quantity=1, is_full_payment_received=True, note="call first"),
            make_order("c", selling_price=100, quantity=1, note=" gift "),
        ]
        totals = analytics.customer_totals(orders)
        assert totals.total_qty == 4
        assert totals.total_sales == 400
        assert totals.total_advance == 50
        assert totals.total_remaining == 150 + 0 + 100
        assert analytics.customer_notes(orders) == ["call first", "gift"]

    def test_filter_orders(self):
        orders = [
            make_order("a", customer_name="Karma", batch_name="B1"),
            make_order("b", customer_name="Dorji", batch_name="B2", is_full_payment_received=True),
            make_order("c", customer_name="Tashi", product_name="Kira", batch_name="B2"),
        ]
        assert [o.id for o in analytics.filter_orders(orders, search="kar")] == ["a"]
        assert [o.id for o in analytics.filter_orders(orders, search="kira")] == ["c"]
        assert [o.id for o in analytics.filter_orders(orders, batch_name="B2")] == ["b", "c"]
        assert [o.id for o in analytics.filter_orders(orders, status="paid")] == ["b"]
        assert [o.id for o in analytics.filter_orders(orders, status="pending")] == ["a", "c"]
