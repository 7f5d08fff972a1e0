"""Response cache management: stats, flush, single-key removal."""
from fastapi import APIRouter, Depends, HTTPException

from core.cache import ResponseCache
from web.schemas import CacheStatsResponse, CacheClearResponse, CacheDeleteResponse
from ._deps import get_logger, get_response_cache

router = APIRouter()
logger = get_logger(__name__)


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(cache: ResponseCache = Depends(get_response_cache)):
    """Hit/miss counters since process start and current key count."""
    return cache.stats()


@router.delete("/cache/clear", response_model=CacheClearResponse)
async def clear_cache(cache: ResponseCache = Depends(get_response_cache)):
    """Flush every cached order result."""
    removed = cache.clear_all()
    return {"message": f"Cleared {removed} cache entries", "removed": removed}


@router.delete("/cache/clear/{key:path}", response_model=CacheDeleteResponse)
async def clear_cache_key(key: str, cache: ResponseCache = Depends(get_response_cache)):
    """Remove one cached result by its exact key."""
    if not cache.clear_one(key):
        raise HTTPException(status_code=404, detail=f"Cache key not found: {key}")
    return {"message": "Cache entry cleared", "key": key, "deleted": True}
