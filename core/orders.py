"""
Order query pipeline: validation → cache → token → query → pagination.

Usage:
    service = OrderService(TokenCache(client), ResponseCache(), client)
    request = service.build_request(body)
    raw = await service.fetch_orders(request)          # {"hits": [...]}
    summary = await service.summarize_orders(request)  # AggregateResult
"""
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.aggregation import AggregateResult, aggregate_orders
from core.cache import ResponseCache, build_cache_key
from core.config import (
    EnvironmentConfig,
    FilterField,
    config,
    get_environment_config,
    get_filter_fields,
)
from core.observability import get_logger, Timer
from core.pagination import OrderSearchPaginator
from core.query import build_search_query, build_term_queries
from core.tokens import TokenCache
from core.validators import FilterRequest, validate_order_query

logger = get_logger(__name__)


class OrderService:
    """Serves raw and aggregated order data, caching raw fetch results."""

    def __init__(
        self,
        token_cache: TokenCache,
        cache: ResponseCache,
        client,
        fields_resolver: Callable[[], List[FilterField]] = get_filter_fields,
        config_resolver: Callable[[str], EnvironmentConfig] = get_environment_config,
        page_size: int = None,
    ):
        self.token_cache = token_cache
        self.cache = cache
        self.client = client
        self.fields_resolver = fields_resolver
        self.config_resolver = config_resolver
        self.page_size = page_size or config.api.page_size

    def filter_fields(self) -> List[FilterField]:
        return self.fields_resolver()

    def build_request(self, payload: Mapping[str, Any]) -> FilterRequest:
        """Validate a request body against the configured filter fields."""
        return validate_order_query(payload, self.filter_fields())

    def cache_key(self, request: FilterRequest) -> str:
        return build_cache_key(
            request.environment,
            request.start_date,
            request.end_date,
            request.filters,
        )

    async def fetch_orders(self, request: FilterRequest) -> Dict[str, Any]:
        """
        Return every order matching the request as ``{"hits": [...]}``.

        A cached result short-circuits both token refresh and search.

        Raises:
            TokenAcquisitionError: Credential exchange failed
            OrderFetchError: A page request failed; nothing is cached
        """
        key = self.cache_key(request)
        cached = self.cache.get(key)
        if cached is not None:
            logger.info(
                f"Serving {len(cached['hits'])} cached orders",
                extra={"cache_key": key},
            )
            return cached

        logger.info(
            f"Order query - Environment: {request.environment}",
            extra={"filters": request.filters},
        )
        env_config = self.config_resolver(request.environment)
        token = await self.token_cache.get_token(request.environment)

        query = build_search_query(
            request.start_date,
            request.end_date,
            build_term_queries(request.filters, self.filter_fields()),
        )

        async def fetch_page(payload: Dict[str, Any]) -> Dict[str, Any]:
            return await self.client.search_orders(env_config, token, payload)

        paginator = OrderSearchPaginator(fetch_page, page_size=self.page_size)
        with Timer("order_fetch", logger):
            hits = await paginator.fetch_all(query)

        result = {"hits": hits}
        self.cache.set(key, result)
        logger.info(
            f"Total orders fetched: {len(hits)}",
            extra={"cache_key": key, "environment": request.environment},
        )
        return result

    async def summarize_orders(
        self,
        request: FilterRequest,
        payment_method: Optional[str] = None,
    ) -> AggregateResult:
        """Aggregate the (possibly cached) raw hits for the dashboard."""
        raw = await self.fetch_orders(request)
        summary = aggregate_orders(raw["hits"], payment_method)
        if payment_method:
            logger.info(
                f"Filtered {summary.kpis.total_orders} orders out of {len(raw['hits'])} "
                f"for payment method: {payment_method}"
            )
        return summary
