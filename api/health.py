"""
Health checks for the PASSAGE API.

Covers the static routing data (land rules and the transit table), Redis
and the marine weather circuit breaker. Suitable for liveness checks and
load balancer checks.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

import redis

from api.config import settings
from api.middleware import metrics_collector
from api.rate_limit import get_rate_limit_status
from api.resilience import get_all_circuit_breaker_status, marine_weather_breaker
from passage import __version__
from passage.data.basins import validate_transit_points
from passage.data.land_mask import find_overlapping_rules, get_land_mask_status

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""
    name: str
    status: HealthStatus
    latency_ms: Optional[float] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def check_land_mask_health() -> ComponentHealth:
    """
    Check the land rules and transit table are self-consistent.

    Overlapping region boxes or a transit point on land make the
    corridor planner untrustworthy, so either one is UNHEALTHY.

    Returns:
        ComponentHealth with land mask status
    """
    start = time.perf_counter()
    overlaps = find_overlapping_rules()
    failed = [r for r in validate_transit_points() if not r["passed"]]
    latency_ms = (time.perf_counter() - start) * 1000

    if overlaps or failed:
        logger.error(f"Land mask self-check failed: overlaps={overlaps} transit_failures={len(failed)}")
        return ComponentHealth(
            name="land_mask",
            status=HealthStatus.UNHEALTHY,
            latency_ms=round(latency_ms, 2),
            message="Routing data inconsistent",
            details={"overlapping_regions": overlaps, "transit_failures": len(failed)},
        )

    return ComponentHealth(
        name="land_mask",
        status=HealthStatus.HEALTHY,
        latency_ms=round(latency_ms, 2),
        message="Region rules disjoint, transit table clear",
    )


def check_redis_health() -> ComponentHealth:
    """
    Check Redis connectivity.

    Redis only backs rate limiting, so a failure degrades the service
    rather than taking it down.

    Returns:
        ComponentHealth with Redis status
    """
    if not settings.redis_enabled:
        return ComponentHealth(
            name="redis",
            status=HealthStatus.HEALTHY,
            message="Redis disabled (not required)",
        )

    start = time.perf_counter()
    try:
        client = redis.from_url(
            settings.redis_url,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        client.ping()
        return ComponentHealth(
            name="redis",
            status=HealthStatus.HEALTHY,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            message="Redis connected",
        )
    except redis.RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return ComponentHealth(
            name="redis",
            status=HealthStatus.DEGRADED,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            message=f"Connection failed: {type(e).__name__}",
        )


def check_weather_health() -> ComponentHealth:
    """
    Report the configured weather source and its circuit breaker.

    Returns:
        ComponentHealth with weather status
    """
    source = settings.weather_source
    if source != "live":
        return ComponentHealth(
            name="weather",
            status=HealthStatus.HEALTHY,
            message=f"Weather source: {source}",
        )

    if marine_weather_breaker.is_open:
        return ComponentHealth(
            name="weather",
            status=HealthStatus.DEGRADED,
            message="Marine weather circuit open; optimizing without live weather",
            details=marine_weather_breaker.get_status(),
        )
    return ComponentHealth(
        name="weather",
        status=HealthStatus.HEALTHY,
        message="Marine weather reachable",
    )


async def perform_full_health_check() -> Dict[str, Any]:
    """
    Perform comprehensive health check of all components.

    Returns:
        Dict with overall status and component details
    """
    start = time.perf_counter()
    components = [check_land_mask_health(), check_redis_health(), check_weather_health()]

    if any(c.status == HealthStatus.UNHEALTHY for c in components):
        overall_status = HealthStatus.UNHEALTHY
    elif any(c.status == HealthStatus.DEGRADED for c in components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    return {
        "status": overall_status.value,
        "timestamp": _utc_now_iso(),
        "version": __version__,
        "check_duration_ms": round((time.perf_counter() - start) * 1000, 2),
        "components": {
            c.name: {
                "status": c.status.value,
                "latency_ms": c.latency_ms,
                "message": c.message,
                **({"details": c.details} if c.details else {}),
            }
            for c in components
        },
    }


async def perform_liveness_check() -> Dict[str, Any]:
    """Liveness only: the process answers. Dependencies are not checked."""
    return {
        "status": "alive",
        "timestamp": _utc_now_iso(),
    }


async def get_detailed_status() -> Dict[str, Any]:
    """
    Health plus land mask description, breakers, rate limiting and metrics.

    Returns:
        Dict with comprehensive system information
    """
    health = await perform_full_health_check()
    return {
        **health,
        "environment": settings.environment,
        "land_mask": get_land_mask_status(),
        "circuit_breakers": get_all_circuit_breaker_status(),
        "rate_limit": get_rate_limit_status(),
        "metrics": metrics_collector.get_metrics(),
        "config": {
            "weather_source": settings.weather_source,
            "optimization_timeout_s": settings.optimization_timeout_s,
        },
    }
