"""
API routes split by domain.

Each sub-module defines its own APIRouter which is composed
into the top-level router exposed by this package.
"""
from fastapi import APIRouter

from .health import router as health_router
from .orders import router as orders_router
from .cache import router as cache_router
from .filters import router as filters_router

router = APIRouter(tags=["api"])

router.include_router(health_router)
router.include_router(orders_router)
router.include_router(cache_router)
router.include_router(filters_router)
