"""
Tests for core.aggregation module.
"""
import copy

import pytest

from core.aggregation import aggregate_orders, order_of, payment_method_of
from core.exceptions import OCAPIDataError


class TestAggregateOrders:
    """Tests for aggregate_orders."""

    def test_customer_breakdown_overlaps(self, sample_hits):
        """Every guest counts as new and unregistered, everyone else as returning and registered."""
        result = aggregate_orders(sample_hits)
        assert result.customer_breakdown.to_dict() == {
            "new": 4,
            "unregistered": 4,
            "returning": 6,
            "registered": 6,
        }

    def test_kpis(self, sample_hits):
        kpis = aggregate_orders(sample_hits).kpis
        assert kpis.total_orders == 10
        assert kpis.total_revenue == pytest.approx(950.0)
        assert kpis.total_units == 25
        assert kpis.avg_order_value == pytest.approx(95.0)
        assert kpis.avg_units_per_transaction == pytest.approx(2.5)

    def test_daily_metrics(self, sample_hits):
        daily = aggregate_orders(sample_hits).daily_metrics
        assert sorted(daily) == ["2025-06-01", "2025-06-02"]
        assert daily["2025-06-01"].to_dict() == {"orders": 6, "revenue": pytest.approx(450.0), "units": 15}
        assert daily["2025-06-02"].to_dict() == {"orders": 4, "revenue": pytest.approx(500.0), "units": 10}

    def test_day_taken_as_reported(self):
        """No timezone conversion: the date part of the timestamp is used verbatim."""
        hit = {"data": {"creation_date": "2025-06-01T23:30:00+05:00", "order_total": 10, "product_items": []}}
        assert list(aggregate_orders([hit]).daily_metrics) == ["2025-06-01"]

    def test_payment_method_filter(self, sample_hits):
        result = aggregate_orders(sample_hits, payment_method="PAYPAL")
        assert result.kpis.total_orders == 2
        assert result.kpis.total_revenue == pytest.approx(180.0)
        assert result.kpis.total_units == 6
        assert result.customer_breakdown.new == 1
        assert result.customer_breakdown.returning == 1

    def test_blank_payment_method_is_no_filter(self, sample_hits):
        assert aggregate_orders(sample_hits, payment_method="  ").kpis.total_orders == 10

    def test_orders_without_payment_instruments_filtered_out(self):
        hit = {"data": {"creation_date": "2025-06-01T00:00:00Z", "order_total": 5, "payment_instruments": []}}
        assert aggregate_orders([hit], payment_method="PAYPAL").kpis.total_orders == 0

    def test_empty_input_has_zero_averages(self):
        result = aggregate_orders([])
        assert result.kpis.total_orders == 0
        assert result.kpis.avg_order_value == 0
        assert result.kpis.avg_units_per_transaction == 0
        assert result.daily_metrics == {}

    def test_filter_matching_nothing_has_zero_averages(self, sample_hits):
        kpis = aggregate_orders(sample_hits, payment_method="GIFT_CERTIFICATE").kpis
        assert kpis.avg_order_value == 0
        assert kpis.avg_units_per_transaction == 0

    def test_idempotent(self, sample_hits):
        assert aggregate_orders(sample_hits) == aggregate_orders(sample_hits)

    def test_input_not_mutated(self, sample_hits):
        before = copy.deepcopy(sample_hits)
        aggregate_orders(sample_hits, payment_method="PAYPAL")
        assert sample_hits == before

    def test_to_dict_shape(self, sample_hits):
        payload = aggregate_orders(sample_hits).to_dict()
        assert set(payload) == {"dailyMetrics", "customerBreakdown", "kpis"}
        assert set(payload["kpis"]) == {
            "totalOrders",
            "totalRevenue",
            "totalUnits",
            "avgOrderValue",
            "avgUnitsPerTransaction",
        }


class TestHelpers:
    """Tests for record accessors."""

    def test_order_of_unwraps_hit(self):
        assert order_of({"data": {"order_no": "1"}}) == {"order_no": "1"}

    def test_order_of_accepts_bare_order(self):
        assert order_of({"order_no": "1"}) == {"order_no": "1"}

    def test_payment_method_of_first_instrument(self):
        order = {"payment_instruments": [{"payment_method_id": "PAYPAL"}, {"payment_method_id": "GC"}]}
        assert payment_method_of(order) == "PAYPAL"
        assert payment_method_of({}) is None


class TestMalformedRecords:
    """Records without the shape of an order are reported as data errors."""

    def test_hit_not_object(self):
        with pytest.raises(OCAPIDataError) as exc_info:
            aggregate_orders(["00000001"])
        assert exc_info.value.expected == "dict"

    def test_payment_instrument_not_object(self):
        hit = {"data": {"creation_date": "2025-06-01T00:00:00Z", "payment_instruments": ["PAYPAL"]}}
        with pytest.raises(OCAPIDataError):
            aggregate_orders([hit], payment_method="PAYPAL")

    def test_product_item_not_object(self):
        hit = {"data": {"creation_date": "2025-06-01T00:00:00Z", "product_items": [3]}}
        with pytest.raises(OCAPIDataError):
            aggregate_orders([hit])

    def test_total_not_numeric(self):
        hit = {"data": {"creation_date": "2025-06-01T00:00:00Z", "order_total": {"amount": 10}}}
        with pytest.raises(OCAPIDataError) as exc_info:
            aggregate_orders([hit])
        assert exc_info.value.got == "dict"

    def test_numeric_strings_accepted(self):
        hit = {"data": {
            "creation_date": "2025-06-01T00:00:00Z",
            "order_total": "19.90",
            "product_items": [{"quantity": "2"}],
        }}
        kpis = aggregate_orders([hit]).kpis
        assert kpis.total_revenue == pytest.approx(19.9)
        assert kpis.total_units == 2
