"""
Direct vs hazard-routed comparison and recommendation.

``optimize_route`` assembles the direct route (coastal corridor only) and
the hazard-routed route (corridor plus avoidance), derives the deltas,
grades the safety benefit and applies an ordered rule table to choose a
recommendation. The computation is pure: identifiers are a fingerprint
of the request and timestamps come from the request, so identical input
yields an identical result.
"""

import hashlib
import json
import logging
from dataclasses import asdict
from typing import List, Optional, Sequence, Tuple

from passage.optimization.coastal_router import plan_corridor
from passage.optimization.hazard_avoidance import AVOIDANCE_LAND_NOTE, plan_avoidance, zones_on_legs
from passage.optimization.route_assembler import assemble_route
from passage.optimization.vessel_profile import resolve_fuel_rate
from passage.routes.formatting import format_currency, format_distance, format_duration, format_fuel
from passage.routes.models import (
    HazardZone,
    OptimizationRequest,
    OptimizationResult,
    Priority,
    Recommendation,
    RouteKind,
    RouteSummary,
    SafetyImprovement,
    Severity,
    WeatherStatus,
)
from passage.validation import validate_coordinate, validate_vessel

logger = logging.getLogger(__name__)

NEGLIGIBLE_DETOUR_NM = 10.0

# Confidence, before any weather-data penalty
CONFIDENCE_BASE = 80
CONFIDENCE_NO_ZONES = 95
CONFIDENCE_NONE_INTERSECTED = 90
CONFIDENCE_SIGNIFICANT = 85

WEATHER_UNAVAILABLE_PENALTY = 20
FAILED_SAMPLE_PENALTY = 5
MAX_FAILED_SAMPLE_PENALTY = 15


def request_fingerprint(request: OptimizationRequest) -> str:
    """Stable short hash of everything that influences the result."""
    payload = {
        "vessel": asdict(request.vessel),
        "origin": request.origin.to_dict(),
        "destination": request.destination.to_dict(),
        "names": [request.origin_name, request.destination_name],
        "zones": (
            None if request.hazard_zones is None
            else [zone.to_dict() for zone in request.hazard_zones]
        ),
        "preference": request.preference.value,
        "departure": request.departure_time.isoformat() if request.departure_time else None,
        "created_at": request.created_at.isoformat(),
        "weather": request.weather_status.to_dict() if request.weather_status else None,
    }
    encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha1(encoded).hexdigest()[:16]


def classify_safety(avoided: Sequence[HazardZone]) -> Tuple[SafetyImprovement, str]:
    severe = sum(1 for z in avoided if z.severity == Severity.SEVERE)
    moderate = sum(1 for z in avoided if z.severity == Severity.MODERATE)

    if severe:
        return SafetyImprovement.SIGNIFICANT, f"Avoids {severe} severe hazard zone(s)."
    if moderate:
        return SafetyImprovement.MODERATE, f"Avoids {moderate} moderate hazard zone(s)."
    if avoided:
        return SafetyImprovement.MINOR, f"Avoids {len(avoided)} advisory zone(s)."
    return SafetyImprovement.NONE, "No hazard zones on the direct track."


def recommend(
    avoided_count: int,
    safety: SafetyImprovement,
    preference: Priority,
    distance_delta_nm: float,
    direct_distance_nm: float,
    uses_corridor: bool,
    unavoided_count: int = 0,
    detour_crosses_land: bool = False,
) -> Tuple[Recommendation, str]:
    """
    Ordered rule table, first match wins.

    ``distance_delta_nm`` is direct minus optimized, so a detour is negative.
    ``unavoided_count`` counts zones on the coastal corridor legs, which the
    avoidance pass cannot move.
    """
    detour_nm = abs(distance_delta_nm)

    if unavoided_count > 0:
        return Recommendation.REVIEW_REQUIRED, (
            f"{unavoided_count} hazard zone(s) lie on the fixed coastal corridor and cannot be "
            "routed around. Manual review recommended before departure."
        )

    if avoided_count == 0:
        if uses_corridor:
            return Recommendation.USE_ORIGINAL, (
                f"Route follows the standard offshore corridor around modeled land. "
                f"No weather hazards detected. Distance: {direct_distance_nm:.0f}nm."
            )
        return Recommendation.USE_ORIGINAL, (
            "No weather hazards detected on route. Direct route is optimal."
        )

    if detour_crosses_land:
        return Recommendation.REVIEW_REQUIRED, (
            f"Weather avoidance detour of {format_distance(detour_nm)} crosses modeled land. "
            "Verify the avoidance waypoints against charts; manual review recommended."
        )

    if safety == SafetyImprovement.SIGNIFICANT:
        return Recommendation.USE_OPTIMIZED, (
            f"Optimized route avoids {avoided_count} hazardous zone(s) including severe "
            f"conditions. Additional {format_distance(detour_nm)} is justified for crew and "
            f"vessel safety."
        )

    if preference == Priority.SAFETY:
        return Recommendation.USE_OPTIMIZED, (
            f"Safety-prioritized routing avoids {avoided_count} weather zone(s). "
            f"{format_distance(detour_nm)} additional distance for improved safety margins."
        )

    if preference == Priority.TIME and -distance_delta_nm > 0:
        return Recommendation.REVIEW_REQUIRED, (
            f"Time-priority conflicts with weather avoidance. Direct route is "
            f"{format_distance(detour_nm)} shorter but passes through weather. "
            f"Manual review recommended."
        )

    if detour_nm < NEGLIGIBLE_DETOUR_NM:
        return Recommendation.USE_OPTIMIZED, (
            f"Minimal distance difference ({format_distance(detour_nm)}) with improved safety. "
            f"Optimized route recommended."
        )

    return Recommendation.REVIEW_REQUIRED, (
        f"Trade-off between {format_distance(detour_nm)} extra distance and weather avoidance. "
        f"Review based on weather severity and schedule flexibility."
    )


def weather_penalty(status: Optional[WeatherStatus]) -> int:
    if status is None:
        return 0
    if not status.available:
        return WEATHER_UNAVAILABLE_PENALTY
    return min(MAX_FAILED_SAMPLE_PENALTY, FAILED_SAMPLE_PENALTY * status.failed_samples)


def compute_confidence(
    zone_count: int,
    avoided_count: int,
    safety: SafetyImprovement,
    status: Optional[WeatherStatus] = None,
    unavoided_count: int = 0,
    detour_crosses_land: bool = False,
) -> int:
    if zone_count == 0:
        confidence = CONFIDENCE_NO_ZONES
    elif avoided_count == 0 and unavoided_count == 0:
        confidence = CONFIDENCE_NONE_INTERSECTED
    elif safety == SafetyImprovement.SIGNIFICANT and not detour_crosses_land:
        confidence = CONFIDENCE_SIGNIFICANT
    else:
        confidence = CONFIDENCE_BASE
    return max(0, min(100, confidence - weather_penalty(status)))


def optimize_route(request: OptimizationRequest) -> OptimizationResult:
    """
    Compare the direct and hazard-routed voyages for one request.

    Raises:
        ValidationError: on out-of-range coordinates or a non-positive speed
    """
    validate_coordinate(request.origin, "origin")
    validate_coordinate(request.destination, "destination")
    validate_vessel(request.vessel)
    for zone in request.hazard_zones or ():
        validate_coordinate(zone.center, f"hazardZones[{zone.id}].center")

    fingerprint = request_fingerprint(request)
    fuel = resolve_fuel_rate(request.vessel)
    corridor = plan_corridor(request.origin, request.destination)
    destination_notes = corridor.note if corridor.degraded and not corridor.waypoints else None

    route_args = dict(
        vessel=request.vessel,
        origin=request.origin,
        destination=request.destination,
        fuel_rate_l_per_nm=fuel.rate_l_per_nm,
        created_at=request.created_at,
        corridor=corridor.waypoints,
        origin_name=request.origin_name,
        destination_name=request.destination_name,
        destination_notes=destination_notes,
    )
    direct = assemble_route(
        route_id=f"route-direct-{fingerprint}", route_kind=RouteKind.DIRECT, **route_args
    )

    zones = tuple(request.hazard_zones or ())
    # Avoidance only moves the open-water run after the corridor; zones on the
    # corridor legs are reported instead
    unavoided: Tuple[HazardZone, ...] = ()
    if corridor.waypoints:
        unavoided = tuple(zones_on_legs(
            [request.origin, *corridor.waypoints], zones, request.departure_time,
        ))
    unavoided_ids = {zone.id for zone in unavoided}

    start = corridor.waypoints[-1] if corridor.waypoints else request.origin
    avoidance = plan_avoidance(
        start,
        request.destination,
        [zone for zone in zones if zone.id not in unavoided_ids],
        speed_knots=request.vessel.speed_knots,
        fuel_rate_l_per_nm=fuel.rate_l_per_nm,
        departure_time=request.departure_time,
        origin=request.origin,
    )

    if avoidance.avoided_zones:
        optimized = assemble_route(
            route_id=f"route-optimized-{fingerprint}",
            route_kind=RouteKind.WEATHER_ROUTED,
            avoidance=avoidance.waypoints,
            **route_args,
        )
    else:
        optimized = direct

    summary_safety, safety_reasoning = classify_safety(avoidance.avoided_zones)
    summary = RouteSummary(
        distance_delta_nm=direct.total_distance_nm - optimized.total_distance_nm,
        time_delta_hours=direct.estimated_duration_hours - optimized.estimated_duration_hours,
        fuel_delta_liters=direct.estimated_fuel_liters - optimized.estimated_fuel_liters,
        cost_delta_usd=direct.estimated_cost_usd - optimized.estimated_cost_usd,
        safety_improvement=summary_safety,
        safety_reasoning=safety_reasoning,
    )

    recommendation, reasoning = recommend(
        avoided_count=len(avoidance.avoided_zones),
        safety=summary_safety,
        preference=request.preference,
        distance_delta_nm=summary.distance_delta_nm,
        direct_distance_nm=direct.total_distance_nm,
        uses_corridor=bool(corridor.waypoints),
        unavoided_count=len(unavoided),
        detour_crosses_land=avoidance.degraded,
    )

    status = request.weather_status
    weather_degraded = status is not None and (not status.available or status.failed_samples > 0)

    warnings: List[str] = []
    if fuel.note:
        warnings.append(fuel.note)
    if corridor.degraded and corridor.note:
        warnings.append(corridor.note)
    for zone in unavoided:
        warnings.append(
            f"Hazard zone {zone.id} ({zone.display_name}, {zone.severity.value}) "
            "lies on the coastal corridor and is not avoided."
        )
    if avoidance.degraded:
        warnings.append(AVOIDANCE_LAND_NOTE)
    if weather_degraded:
        if not status.available:
            warnings.append(
                f"Weather source '{status.source}' unavailable; clear weather assumed."
            )
        else:
            warnings.append(
                f"{status.failed_samples} of {status.requested_samples} weather samples "
                f"failed; hazards near those points may be missing."
            )

    confidence = compute_confidence(
        zone_count=len(zones),
        avoided_count=len(avoidance.avoided_zones),
        safety=summary_safety,
        status=status,
        unavoided_count=len(unavoided),
        detour_crosses_land=avoidance.degraded,
    )

    logger.info(
        f"Optimized {request.vessel.id}: "
        f"direct={format_distance(direct.total_distance_nm)}/"
        f"{format_duration(direct.estimated_duration_hours)}/"
        f"{format_fuel(direct.estimated_fuel_liters)} "
        f"optimized={format_distance(optimized.total_distance_nm)}/"
        f"{format_duration(optimized.estimated_duration_hours)}/"
        f"{format_fuel(optimized.estimated_fuel_liters)} "
        f"extra cost={format_currency(-summary.cost_delta_usd)} "
        f"avoided={len(avoidance.avoided_zones)} unavoided={len(unavoided)} "
        f"-> {recommendation.value} ({confidence}%)"
    )

    return OptimizationResult(
        id=f"opt-result-{fingerprint}",
        direct_route=direct,
        optimized_route=optimized,
        avoided_zones=avoidance.avoided_zones,
        optimizations=avoidance.optimizations,
        summary=summary,
        recommendation=recommendation,
        reasoning=" ".join([reasoning, *warnings]),
        confidence=confidence,
        fuel_rate_l_per_nm=fuel.rate_l_per_nm,
        fuel_rate_source=fuel.source,
        weather_degraded=weather_degraded,
        corridor_degraded=corridor.degraded,
        avoidance_degraded=avoidance.degraded,
        unavoided_zones=unavoided,
        weather_status=status,
        warnings=tuple(warnings),
    )
