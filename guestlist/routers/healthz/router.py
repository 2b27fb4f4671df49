from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from guestlist.cache.service import CacheService, get_cache_service

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    version: str = "0.1.0"
    cache: str


class CacheStatsResponse(BaseModel):
    connected: bool
    stats: dict[str, Any] | None = None
    keyspace: dict[str, Any] | None = None


@router.get("/", response_model=HealthCheckResponse)
async def health_check(cache: CacheService = Depends(get_cache_service)) -> HealthCheckResponse:
    """
    Health check endpoint to verify the API is running.
    An unavailable cache degrades performance but not health.
    """
    connected = await cache.ping()
    return HealthCheckResponse(status="healthy", cache="connected" if connected else "disconnected")


@router.get("/cache", response_model=CacheStatsResponse)
async def cache_stats(cache: CacheService = Depends(get_cache_service)) -> CacheStatsResponse:
    stats = await cache.get_stats()
    if stats is None:
        return CacheStatsResponse(connected=False)
    return CacheStatsResponse(**stats)
