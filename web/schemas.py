"""
Pydantic request/response models for API endpoints.

Provides type-safe models with automatic validation and documentation.
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# ORDER QUERIES
# ═══════════════════════════════════════════════════════════════════════════════

class OrderQueryRequest(BaseModel):
    """
    Order query body.

    Dates are optional at the schema level so a missing bound produces the
    dashboard's 400 message instead of a 422. Dynamic filter fields
    (orderType, ...) arrive as extra keys.
    """
    model_config = ConfigDict(extra="allow")

    startDate: Optional[str] = Field(None, description="Range start (ISO-8601)")
    endDate: Optional[str] = Field(None, description="Range end (ISO-8601)")
    environment: Optional[str] = Field(None, description="DEV or PRD (default DEV)")


class OrderSummaryRequest(OrderQueryRequest):
    """Order query body with an optional payment method filter."""
    paymentMethod: Optional[str] = Field(
        None, description="Keep orders whose first payment instrument uses this method"
    )


class OrdersResponse(BaseModel):
    """Raw order_search hits for client-side processing."""
    hits: List[Dict[str, Any]]


class DailyMetricsModel(BaseModel):
    orders: int
    revenue: float
    units: float


class CustomerBreakdownModel(BaseModel):
    """Overlapping tallies: new == unregistered, returning == registered."""
    new: int
    returning: int
    registered: int
    unregistered: int


class KPIModel(BaseModel):
    totalOrders: int
    totalRevenue: float
    totalUnits: float
    avgOrderValue: float
    avgUnitsPerTransaction: float


class OrderSummaryResponse(BaseModel):
    """Pre-aggregated dashboard metrics."""
    dailyMetrics: Dict[str, DailyMetricsModel]
    customerBreakdown: CustomerBreakdownModel
    kpis: KPIModel


# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

class FilterFieldModel(BaseModel):
    name: str = Field(description="Request-side key, e.g. orderType")
    field: str = Field(description="Remote OCAPI field, e.g. c_smartOrderType")
    label: str
    values: List[str] = Field(description="Permitted values for the selector")
    default: Optional[str] = None


class FilterFieldsResponse(BaseModel):
    fields: List[FilterFieldModel]


class EnvironmentStatus(BaseModel):
    name: str
    configured: bool


class EnvironmentsResponse(BaseModel):
    default: str
    environments: List[EnvironmentStatus]


# ═══════════════════════════════════════════════════════════════════════════════
# CACHE MANAGEMENT
# ═══════════════════════════════════════════════════════════════════════════════

class CacheStatsResponse(BaseModel):
    keys: int = Field(description="Entries currently held")
    hits: int
    misses: int
    sets: int = 0
    expirations: int = 0
    invalidations: int = 0
    hit_rate_percent: float = 0.0
    ttl_seconds: float


class CacheClearResponse(BaseModel):
    message: str
    removed: int


class CacheDeleteResponse(BaseModel):
    message: str
    key: str
    deleted: bool


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status")
    message: str = "Sales Dashboard API is running"
    version: str = Field(description="Application version")
    timestamp: str
    uptime_seconds: int = Field(description="Uptime in seconds")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
