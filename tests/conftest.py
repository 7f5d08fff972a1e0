"""
Pytest configuration and shared fixtures.
"""
import pytest
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock

from core.cache import ResponseCache
from core.config import EnvironmentConfig, FilterField
from core.orders import OrderService
from core.tokens import TokenCache


class FakeClock:
    """Manually advanced clock for TTL and token expiry tests."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_order(
    number: int,
    creation_date: str = "2025-06-01T10:00:00.000Z",
    total: float = 100.0,
    quantities: List[int] = (1,),
    guest: bool = False,
    payment_method: str = "CREDIT_CARD",
) -> Dict[str, Any]:
    """OCAPI order_search hit."""
    return {
        "_type": "order_search_hit",
        "data": {
            "order_no": f"{number:08d}",
            "creation_date": creation_date,
            "order_total": total,
            "guest": guest,
            "status": "new",
            "product_items": [{"quantity": q} for q in quantities],
            "payment_instruments": [{"payment_method_id": payment_method}],
        },
    }


def search_responder(total: int) -> Callable:
    """Async fake of OCAPIClient.search_orders serving ``total`` hits by offset."""
    hits = [make_order(i) for i in range(total)]

    async def search_orders(env_config, token, payload):
        start, count = payload["start"], payload["count"]
        return {"hits": hits[start:start + count], "total": total, "start": start}

    return search_orders


@pytest.fixture
def page_fetcher() -> Callable:
    """Factory: page_fetcher(total) -> async fetch_page(payload) for the paginator."""
    def factory(total: int) -> Callable:
        search_orders = search_responder(total)

        async def fetch_page(payload):
            return await search_orders(None, None, payload)

        return fetch_page

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_hits() -> List[Dict[str, Any]]:
    """Ten orders over two days; orders 0-3 are guest checkouts."""
    return [
        make_order(
            i,
            creation_date="2025-06-01T09:15:00.000Z" if i < 6 else "2025-06-02T18:40:00.000Z",
            total=50.0 + i * 10,
            quantities=[1, 1] if i % 2 == 0 else [3],
            guest=i < 4,
            payment_method="PAYPAL" if i in (1, 7) else "CREDIT_CARD",
        )
        for i in range(10)
    ]


@pytest.fixture
def order_type_field() -> FilterField:
    return FilterField(
        name="orderType",
        remote_field="c_smartOrderType",
        values=["Prepaid", "COD"],
        label="Order Type",
    )


@pytest.fixture
def ocapi_environ() -> Dict[str, str]:
    return {
        "API_BASE_URL_DEV": "https://dev.example.com/s/-",
        "CLIENT_ID_DEV": "dev-client",
        "AUTH_HEADER_DEV": "Basic ZGV2OnNlY3JldA==",
        "API_BASE_URL_PRD": "https://www.example.com/s/-",
        "CLIENT_ID_PRD": "prd-client",
        "AUTH_HEADER_PRD": "Basic cHJkOnNlY3JldA==",
        "FILTER_ORDER_TYPE_FIELD": "c_smartOrderType",
        "FILTER_ORDER_TYPE_VALUES": "Prepaid,COD",
        "FILTER_ORDER_TYPE_LABEL": "Order Type",
    }


@pytest.fixture
def mock_ocapi_client():
    """Mock OCAPI client: token exchange succeeds, 450 orders available."""
    client = AsyncMock()
    client.request_token = AsyncMock(
        return_value={"access_token": "token-1", "expires_in": 1800, "token_type": "BEARER"}
    )
    client.search_orders = AsyncMock(side_effect=search_responder(450))
    return client


@pytest.fixture
def order_service(mock_ocapi_client, clock, order_type_field, ocapi_environ):
    """OrderService wired to fakes: mock client, fake clock, fixed config."""
    def resolve(name: str) -> EnvironmentConfig:
        return EnvironmentConfig(
            name=name,
            base_url=ocapi_environ.get(f"API_BASE_URL_{name}", ""),
            client_id=ocapi_environ.get(f"CLIENT_ID_{name}", ""),
            auth_header=ocapi_environ.get(f"AUTH_HEADER_{name}", ""),
        )

    tokens = TokenCache(mock_ocapi_client, ["DEV", "PRD"], config_resolver=resolve, clock=clock)
    cache = ResponseCache(ttl=1800, clock=clock)
    return OrderService(
        tokens,
        cache,
        mock_ocapi_client,
        fields_resolver=lambda: [order_type_field],
        config_resolver=resolve,
        page_size=200,
    )
