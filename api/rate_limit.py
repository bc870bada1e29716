"""
Request throttling for the PASSAGE API.

SlowAPI counts requests per caller in Redis so limits hold across
workers. Only routes decorated with ``@limiter.limit`` are throttled:
the optimize and weather endpoints, at ``OPTIMIZE_RATE_LIMIT``. Health
checks and metrics are never limited. With no reachable Redis the limiter is
switched off.
"""
import logging
from typing import Optional

import redis
from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.config import settings

logger = logging.getLogger(__name__)

THROTTLED_ROUTES = ("/api/routes/optimize", "/api/routes/weather")


def connect_redis(timeout_s: float = 5.0) -> Optional[redis.Redis]:
    """Ping ``REDIS_URL``; None when Redis is disabled or unreachable."""
    if not settings.redis_enabled:
        return None
    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=timeout_s,
            socket_timeout=timeout_s,
        )
        client.ping()
    except redis.RedisError as e:
        logger.warning(f"Redis unreachable at startup ({type(e).__name__}: {e}); throttling off")
        return None
    logger.info("Rate-limit storage: Redis")
    return client


redis_client = connect_redis()


def get_client_identifier(request: Request) -> str:
    """
    Throttling key for a request.

    Args:
        request: Incoming request

    Returns:
        ``key:<first 8 chars>`` for callers sending an API key,
        ``ip:<address>`` otherwise
    """
    api_key = request.headers.get(settings.api_key_header)
    if api_key:
        return f"key:{api_key[:8]}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_client_identifier,
    enabled=settings.rate_limit_enabled and redis_client is not None,
    storage_uri=settings.redis_url if redis_client is not None else None,
    strategy="fixed-window",
)


def get_rate_limit_status() -> dict:
    return {
        "enabled": limiter.enabled,
        "storage": "redis" if redis_client is not None else None,
        "routes": {path: settings.optimize_rate_limit for path in THROTTLED_ROUTES},
    }
