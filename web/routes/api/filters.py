"""Configuration endpoints used to populate the dashboard selectors."""
from fastapi import APIRouter, Depends

from core.config import config, get_environment_config
from core.orders import OrderService
from web.schemas import FilterFieldsResponse, EnvironmentsResponse
from ._deps import get_order_service

router = APIRouter()


@router.get("/config/fields", response_model=FilterFieldsResponse)
async def get_filter_fields(service: OrderService = Depends(get_order_service)):
    """Advertised filter fields; fields without a values list are never listed."""
    return {"fields": [f.to_dict() for f in service.filter_fields()]}


@router.get("/config/environments", response_model=EnvironmentsResponse)
async def get_environments():
    """Supported environments and whether their credentials are set."""
    return {
        "default": config.default_environment,
        "environments": [
            {"name": name, "configured": get_environment_config(name).is_complete}
            for name in config.environments
        ],
    }
