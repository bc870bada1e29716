"""
Route optimization API router.

Converts the camelCase wire request into a ``passage`` request, resolves
hazard zones (caller-supplied, live marine weather, seeded mock or none),
runs the optimizer off the event loop under a request-scoped timeout and
returns the serialized result.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional, Tuple

from fastapi import APIRouter, HTTPException, Request

from api.config import settings
from api.middleware import metrics_collector
from api.rate_limit import limiter
from api.schemas import (
    HazardZoneModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    RouteWeatherRequest,
    RouteWeatherResponse,
)
from api.weather_service import fetch_hazard_zones
from passage.optimization.route_optimizer import optimize_route
from passage.routes.models import (
    AvoidancePolicy,
    Coordinate,
    HazardKind,
    HazardZone,
    OptimizationRequest,
    OptimizationResult,
    Priority,
    Severity,
    VesselProfile,
    WeatherStatus,
)
from passage.validation import ValidationError, validate_coordinate
from passage.weather.mock_zones import generate_mock_zones
from passage.weather.zones import summarize_route_weather

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Optimization"])


def _zone_from_model(model: HazardZoneModel) -> HazardZone:
    return HazardZone(
        id=model.id,
        kind=HazardKind(model.kind),
        severity=Severity(model.severity),
        center=Coordinate(lat=model.center.lat, lng=model.center.lng),
        radius_nm=model.radius_nm,
        wind_speed_knots=model.wind_speed_knots,
        wave_height_m=model.wave_height_m,
        valid_from=model.valid_from,
        valid_to=model.valid_to,
        avoidance=AvoidancePolicy(model.avoidance),
        name=model.name,
    )


def resolve_hazard_zones(
    body: OptimizeRouteRequest,
    origin: Coordinate,
    destination: Coordinate,
    now: datetime,
) -> Tuple[Optional[Tuple[HazardZone, ...]], Optional[WeatherStatus]]:
    """Caller-supplied zones win; otherwise consult the configured source."""
    if body.hazard_zones is not None:
        return tuple(_zone_from_model(z) for z in body.hazard_zones), None

    source = settings.weather_source
    if source == "live":
        fetched = fetch_hazard_zones(origin, destination, observed_at=now)
        return tuple(fetched.zones), fetched.status
    if source == "mock":
        zones = generate_mock_zones(origin, destination, now, seed=settings.mock_weather_seed)
        return tuple(zones), WeatherStatus(source="mock")
    return None, None


def build_request(body: OptimizeRouteRequest, now: datetime) -> OptimizationRequest:
    origin = validate_coordinate(Coordinate(lat=body.origin.lat, lng=body.origin.lng), "origin")
    destination = validate_coordinate(
        Coordinate(lat=body.destination.lat, lng=body.destination.lng), "destination"
    )
    zones, status = resolve_hazard_zones(body, origin, destination, now)

    vessel = body.vessel
    return OptimizationRequest(
        vessel=VesselProfile(
            id=vessel.id,
            name=vessel.name,
            type=vessel.type,
            speed_knots=vessel.speed_knots,
            max_speed_knots=vessel.max_speed_knots,
            economic_speed_knots=vessel.economic_speed_knots,
            fuel_consumption_rate_l_per_nm=vessel.fuel_consumption_rate_l_per_nm,
        ),
        origin=origin,
        destination=destination,
        origin_name=body.origin.name or "Origin",
        destination_name=body.destination.name or "Destination",
        hazard_zones=zones,
        preference=Priority(body.preferences.prioritize),
        departure_time=body.departure_time,
        weather_status=status,
        created_at=now,
    )


def _optimize_sync(body: OptimizeRouteRequest) -> OptimizationResult:
    start = time.perf_counter()
    result = optimize_route(build_request(body, datetime.now(timezone.utc)))
    metrics_collector.record_optimization(result.recommendation.value, time.perf_counter() - start)
    return result


@router.post("/api/routes/optimize", response_model=OptimizeRouteResponse)
@limiter.limit(settings.optimize_rate_limit)
async def optimize(request: Request, body: OptimizeRouteRequest):
    """
    Compare the direct route with a hazard-routed alternative.

    Returns both routes, the avoided zones, per-zone detour costs, a
    recommendation (use_optimized / use_original / review_required) and
    a confidence score. Out-of-range coordinates or a non-positive speed
    are rejected with 400.
    """
    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(_optimize_sync, body),
            timeout=settings.optimization_timeout_s,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"field": e.field, "message": str(e)})
    except asyncio.TimeoutError:
        logger.error(f"Route optimization exceeded {settings.optimization_timeout_s}s")
        raise HTTPException(status_code=504, detail="Route optimization timed out")

    return OptimizeRouteResponse(success=True, result=result.to_dict())


@router.post("/api/routes/weather", response_model=RouteWeatherResponse)
@limiter.limit(settings.optimize_rate_limit)
async def route_weather(request: Request, body: RouteWeatherRequest):
    """Live marine hazard zones and a risk summary along the direct track."""
    try:
        origin = validate_coordinate(Coordinate(lat=body.origin.lat, lng=body.origin.lng), "origin")
        destination = validate_coordinate(
            Coordinate(lat=body.destination.lat, lng=body.destination.lng), "destination"
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"field": e.field, "message": str(e)})

    fetched = await asyncio.to_thread(
        fetch_hazard_zones, origin, destination, datetime.now(timezone.utc)
    )
    return RouteWeatherResponse(
        zones=[zone.to_dict() for zone in fetched.zones],
        summary=summarize_route_weather(fetched.zones).to_dict(),
        status=fetched.status.to_dict(),
    )
