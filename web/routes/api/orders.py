"""Order query endpoints: raw hits and pre-aggregated dashboard metrics."""
from fastapi import APIRouter, Depends

from core.orders import OrderService
from web.schemas import (
    OrderQueryRequest,
    OrderSummaryRequest,
    OrdersResponse,
    OrderSummaryResponse,
)
from ._deps import get_logger, get_order_service

router = APIRouter()
logger = get_logger(__name__)


@router.post("/orders", response_model=OrdersResponse)
async def query_orders(
    body: OrderQueryRequest,
    service: OrderService = Depends(get_order_service),
):
    """
    Fetch every order matching the date range and filters.

    Returns raw hits for client-side processing. ValidationError (400) and
    OCAPIError (500) are turned into responses by the app's exception handlers.
    """
    request = service.build_request(body.model_dump())
    return await service.fetch_orders(request)


@router.post("/orders/summary", response_model=OrderSummaryResponse)
async def summarize_orders(
    body: OrderSummaryRequest,
    service: OrderService = Depends(get_order_service),
):
    """Daily metrics, customer breakdown and KPIs, optionally for one payment method."""
    payload = body.model_dump()
    payment_method = payload.pop("paymentMethod", None)
    request = service.build_request(payload)
    summary = await service.summarize_orders(request, payment_method)
    return summary.to_dict()
