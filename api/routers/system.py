"""
System API router.

Root endpoint, health checks, detailed status and Prometheus metrics.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from api.health import get_detailed_status, perform_full_health_check, perform_liveness_check
from api.middleware import get_request_id, metrics_collector
from passage import __version__

router = APIRouter(tags=["System"])

logger = logging.getLogger(__name__)


@router.get("/")
async def root():
    """API name, version and endpoint map."""
    return {
        "name": "PASSAGE API",
        "version": __version__,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "optimize": "/api/routes/optimize",
            "weather": "/api/routes/weather",
            "health": "/api/health",
            "status": "/api/status",
            "metrics": "/api/metrics",
        },
    }


@router.get("/api/health")
async def health_check():
    """
    Health check for load balancers and orchestrators.

    Returns:
        - status: Overall health status (healthy/degraded/unhealthy)
        - timestamp: Current UTC timestamp
        - version: API version
        - components: land_mask, redis and weather
    """
    result = await perform_full_health_check()
    result["request_id"] = get_request_id()
    return result


@router.get("/api/health/live")
async def liveness_check():
    """Liveness check."""
    return await perform_liveness_check()


@router.get("/api/status")
async def detailed_status():
    """
    Detailed system status.

    Includes the land mask description, circuit breaker states, rate
    limiting configuration and in-memory request metrics.
    """
    return await get_detailed_status()


@router.get("/api/metrics", response_class=PlainTextResponse)
async def get_metrics():
    """Prometheus exposition format."""
    return metrics_collector.get_prometheus_metrics()


@router.get("/api/metrics/json")
async def get_metrics_json():
    return metrics_collector.get_metrics()
