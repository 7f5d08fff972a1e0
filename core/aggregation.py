"""
Dashboard aggregation over raw order_search hits.

Customer segmentation is overlapping, not exclusive: a guest order counts
toward both ``new`` and ``unregistered``; a registered customer's order counts
toward both ``returning`` and ``registered``. The dashboard shows the two
pairs as separate charts, so every order appears once in each pair.

Records that do not have the shape of an OCAPI order raise OCAPIDataError.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from core.exceptions import OCAPIDataError


def _malformed(what: str, expected: str, value: Any) -> OCAPIDataError:
    return OCAPIDataError(f"Malformed order record: {what}", expected=expected, got=type(value).__name__)


def _number(value: Any, what: str) -> float:
    if value is None:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise _malformed(what, "number", value)


def order_of(hit: Dict[str, Any]) -> Dict[str, Any]:
    """OCAPI wraps each order in a hit under 'data'; accept bare orders too."""
    if not isinstance(hit, dict):
        raise _malformed("hit", "dict", hit)
    data = hit.get("data")
    return data if isinstance(data, dict) else hit


def payment_method_of(order: Dict[str, Any]) -> Optional[str]:
    instruments = order.get("payment_instruments") or []
    if not isinstance(instruments, list):
        raise _malformed("payment_instruments", "list", instruments)
    if not instruments:
        return None
    if not isinstance(instruments[0], dict):
        raise _malformed("payment instrument", "dict", instruments[0])
    return instruments[0].get("payment_method_id")


def order_units(order: Dict[str, Any]) -> float:
    items = order.get("product_items") or []
    if not isinstance(items, list):
        raise _malformed("product_items", "list", items)
    units = 0
    for item in items:
        if not isinstance(item, dict):
            raise _malformed("product item", "dict", item)
        units += _number(item.get("quantity"), "quantity")
    return units


def order_day(order: Dict[str, Any]) -> str:
    """YYYY-MM-DD as reported; no timezone conversion."""
    return str(order.get("creation_date", "")).split("T")[0]


@dataclass
class DailyMetrics:
    orders: int = 0
    revenue: float = 0
    units: float = 0

    def to_dict(self) -> dict:
        return {"orders": self.orders, "revenue": self.revenue, "units": self.units}


@dataclass
class CustomerBreakdown:
    new: int = 0
    returning: int = 0
    registered: int = 0
    unregistered: int = 0

    def to_dict(self) -> dict:
        return {
            "new": self.new,
            "returning": self.returning,
            "registered": self.registered,
            "unregistered": self.unregistered,
        }


@dataclass
class KPIs:
    total_orders: int = 0
    total_revenue: float = 0
    total_units: float = 0
    avg_order_value: float = 0
    avg_units_per_transaction: float = 0

    def to_dict(self) -> dict:
        return {
            "totalOrders": self.total_orders,
            "totalRevenue": self.total_revenue,
            "totalUnits": self.total_units,
            "avgOrderValue": self.avg_order_value,
            "avgUnitsPerTransaction": self.avg_units_per_transaction,
        }


@dataclass
class AggregateResult:
    """Display-ready metrics; recomputed on every read, never cached."""
    daily_metrics: Dict[str, DailyMetrics] = field(default_factory=dict)
    customer_breakdown: CustomerBreakdown = field(default_factory=CustomerBreakdown)
    kpis: KPIs = field(default_factory=KPIs)

    def to_dict(self) -> dict:
        """Camel-cased payload consumed by the dashboard."""
        return {
            "dailyMetrics": {day: m.to_dict() for day, m in self.daily_metrics.items()},
            "customerBreakdown": self.customer_breakdown.to_dict(),
            "kpis": self.kpis.to_dict(),
        }


def aggregate_orders(
    hits: Iterable[Dict[str, Any]],
    payment_method: Optional[str] = None,
) -> AggregateResult:
    """
    Reduce order hits to per-day metrics, customer breakdown and KPIs.

    Args:
        hits: Raw order_search hits (never mutated)
        payment_method: Keep only orders whose first payment instrument
            has this payment_method_id; blank means no filter

    Returns:
        AggregateResult
    """
    payment_method = (payment_method or "").strip()
    result = AggregateResult()
    breakdown = result.customer_breakdown
    total_orders = 0
    total_revenue = 0
    total_units = 0

    for hit in hits:
        order = order_of(hit)
        if payment_method and payment_method_of(order) != payment_method:
            continue

        revenue = _number(order.get("order_total"), "order_total")
        units = order_units(order)

        day = result.daily_metrics.setdefault(order_day(order), DailyMetrics())
        day.orders += 1
        day.revenue += revenue
        day.units += units

        total_orders += 1
        total_revenue += revenue
        total_units += units

        if order.get("guest"):
            breakdown.new += 1
            breakdown.unregistered += 1
        else:
            breakdown.returning += 1
            breakdown.registered += 1

    result.kpis = KPIs(
        total_orders=total_orders,
        total_revenue=total_revenue,
        total_units=total_units,
        avg_order_value=total_revenue / total_orders if total_orders > 0 else 0,
        avg_units_per_transaction=total_units / total_orders if total_orders > 0 else 0,
    )
    return result
