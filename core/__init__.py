"""
Core shared library for the Sales Dashboard API.

This package contains the order query pipeline used by the web package:
- exceptions: Custom exception hierarchy
- config: Environment and filter field configuration
- tokens: Per-environment bearer token cache
- query / pagination: OCAPI order_search construction and paging
- aggregation: Daily metrics, customer breakdown and KPIs
- cache: In-memory response cache
"""

# Import in dependency order
from core.exceptions import (
    OCAPIError,
    TokenAcquisitionError,
    OrderFetchError,
    OCAPIDataError,
    ValidationError,
)

from core.config import (
    config,
    EnvironmentConfig,
    FilterField,
    get_environment_config,
    get_filter_fields,
)

from core.aggregation import AggregateResult, aggregate_orders
from core.cache import ResponseCache, build_cache_key
from core.pagination import OrderSearchPaginator
from core.query import build_term_queries
from core.tokens import TokenCache, TokenState, TokenStatus

__all__ = [
    # Exceptions
    "OCAPIError",
    "TokenAcquisitionError",
    "OrderFetchError",
    "OCAPIDataError",
    "ValidationError",
    # Config
    "config",
    "EnvironmentConfig",
    "FilterField",
    "get_environment_config",
    "get_filter_fields",
    # Pipeline
    "AggregateResult",
    "aggregate_orders",
    "ResponseCache",
    "build_cache_key",
    "OrderSearchPaginator",
    "build_term_queries",
    "TokenCache",
    "TokenState",
    "TokenStatus",
]
