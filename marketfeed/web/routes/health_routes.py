"""
Health check routes
"""

import time

from fastapi import APIRouter, Request
from loguru import logger

from marketfeed import __version__
from marketfeed.core.models import Market
from marketfeed.web.models import APIResponse, CacheStats, HealthStatus
from marketfeed.web.utils import get_client

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("/health", response_model=APIResponse)
async def health_check(request: Request) -> APIResponse:
    """
    Basic health check

    Reports uptime, cache statistics and which markets are in session
    """
    client = get_client(request)
    components = {"cache": "healthy" if client is not None else "unavailable"}
    data: dict = {}
    if client is not None:
        stats = client.cache_stats()
        if stats:
            data["cache"] = CacheStats(**stats).model_dump()
        data["markets_open"] = {market.value: client.is_market_open(market) for market in Market}
        data["relays"] = len(client.chain.rotator)

    health = HealthStatus(
        status="healthy" if client is not None else "degraded",
        version=__version__,
        uptime=time.monotonic() - _STARTED_AT,
        components=components,
    )
    logger.info("Health check completed: {}", health.status)
    return APIResponse(
        success=client is not None,
        data={**health.model_dump(mode="json"), **data},
        message="Health check completed",
    )
