"""
Shared pytest fixtures for PASSAGE tests.

Environment variables are set before any ``api.*`` import so the cached
API settings, the rate limiter and the Redis client are built for an
isolated test run: no Redis, no rate limiting, no live weather.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY api.* imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("WEATHER_SOURCE", "none")

from passage.routes.models import (  # noqa: E402
    AvoidancePolicy,
    Coordinate,
    HazardKind,
    HazardZone,
    OptimizationRequest,
    Severity,
    VesselProfile,
)

CREATED_AT = datetime(2025, 3, 1, 6, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Section 2: Client fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """FastAPI TestClient with fresh metrics and a closed weather breaker."""
    from api.main import app
    from api.middleware import metrics_collector
    from api.resilience import marine_weather_breaker

    marine_weather_breaker.reset()
    metrics_collector.reset()
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Section 3: Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def vessel():
    """A Gulf supply vessel at 10 knots with no explicit fuel rate."""
    return VesselProfile(
        id="v-001",
        name="Al Bahr Supply",
        type="supply_vessel",
        speed_knots=10.0,
    )


def make_zone(
    zone_id="zone-1",
    center=Coordinate(lat=10.0, lng=61.0),
    radius_nm=25.0,
    severity=Severity.SEVERE,
    avoidance=AvoidancePolicy.MANDATORY,
    kind=HazardKind.STORM,
    valid_from=CREATED_AT - timedelta(hours=6),
    valid_to=CREATED_AT + timedelta(hours=48),
    **kwargs,
):
    """HazardZone with sensible defaults; override any field by keyword."""
    return HazardZone(
        id=zone_id,
        kind=kind,
        severity=severity,
        center=center,
        radius_nm=radius_nm,
        valid_from=valid_from,
        valid_to=valid_to,
        avoidance=avoidance,
        **kwargs,
    )


def make_request(vessel, origin, destination, **kwargs):
    kwargs.setdefault("created_at", CREATED_AT)
    return OptimizationRequest(vessel=vessel, origin=origin, destination=destination, **kwargs)


@pytest.fixture
def zone_factory():
    return make_zone


@pytest.fixture
def request_factory():
    return make_request


@pytest.fixture
def api_payload():
    """Minimal camelCase optimize request in open water (Arabian Sea)."""
    return {
        "vessel": {
            "id": "v-001",
            "name": "Al Bahr Supply",
            "type": "supply_vessel",
            "speedKnots": 10.0,
        },
        "origin": {"lat": 10.0, "lng": 60.0, "name": "Point A"},
        "destination": {"lat": 10.0, "lng": 62.0, "name": "Point B"},
        "hazardZones": [],
    }
