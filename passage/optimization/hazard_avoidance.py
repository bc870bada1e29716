"""
Single-waypoint avoidance of circular hazard zones.

Zones are handled nearest the voyage origin first. If the remaining track from the current
point to the destination passes through a zone, one waypoint is placed
beside the zone, on the side opposite its centre, at 1.25x its radius;
the track then continues from that waypoint. This suits isolated,
roughly circular hazards. Elongated or heavily overlapping fields can be
under-avoided, since each zone only ever contributes one waypoint, and a
waypoint can land on the far side of a coastline. The finished detour is
re-checked against the land mask and flagged, not repaired.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from passage.data.land_mask import does_segment_cross_land
from passage.routes.geodesy import bearing_deg, destination_point, distance_nm, normalize_bearing
from passage.routes.models import (
    AvoidancePolicy,
    Coordinate,
    HazardZone,
    Optimization,
    Severity,
    Waypoint,
    WaypointKind,
)

logger = logging.getLogger(__name__)

BUFFER_FACTOR = 1.25
DEFAULT_CHECK_POINTS = 10

AVOIDANCE_LAND_NOTE = "Avoidance detour crosses modeled land; verify against charts before use."


@dataclass(frozen=True)
class AvoidancePlan:
    waypoints: Tuple[Waypoint, ...] = ()
    avoided_zones: Tuple[HazardZone, ...] = ()
    optimizations: Tuple[Optimization, ...] = ()
    degraded: bool = False


def is_point_in_zone(point: Coordinate, zone: HazardZone) -> bool:
    return distance_nm(point, zone.center) <= zone.radius_nm


def does_segment_intersect_zone(
    start: Coordinate,
    end: Coordinate,
    zone: HazardZone,
    check_points: int = DEFAULT_CHECK_POINTS,
) -> bool:
    """Test both endpoints and ``check_points - 1`` interior great-circle points."""
    if is_point_in_zone(start, zone) or is_point_in_zone(end, zone):
        return True

    bearing = bearing_deg(start, end)
    total = distance_nm(start, end)
    for i in range(1, check_points):
        point = destination_point(start, total * i / check_points, bearing)
        if is_point_in_zone(point, zone):
            return True
    return False


def active_zones(
    zones: Iterable[HazardZone],
    departure_time: Optional[datetime] = None,
) -> List[HazardZone]:
    """Zones eligible for avoidance: never ``optional`` ones, and only those valid at departure."""
    active = []
    for zone in zones:
        if zone.avoidance == AvoidancePolicy.OPTIONAL:
            continue
        if departure_time is not None and not zone.is_valid_at(departure_time):
            logger.debug(f"Zone {zone.id} not valid at {departure_time.isoformat()}, skipped")
            continue
        active.append(zone)
    return active


def zones_on_legs(
    points: Sequence[Coordinate],
    zones: Iterable[HazardZone],
    departure_time: Optional[datetime] = None,
    check_points: int = DEFAULT_CHECK_POINTS,
) -> List[HazardZone]:
    """Active zones crossed by any leg of the polyline ``points``, in input order."""
    legs = list(zip(points, points[1:]))
    return [
        zone for zone in active_zones(zones, departure_time)
        if any(does_segment_intersect_zone(a, b, zone, check_points) for a, b in legs)
    ]


def avoidance_waypoint(current: Coordinate, destination: Coordinate, zone: HazardZone) -> Waypoint:
    """
    Place one waypoint beside ``zone``, opposite the side it lies on.

    The zone counts as right of track when the bearing to its centre is
    0-180 degrees clockwise from the direct bearing; the waypoint is then
    projected from the centre at ``direct - 90``, otherwise ``direct + 90``.
    """
    buffer_nm = zone.radius_nm * BUFFER_FACTOR
    direct = bearing_deg(current, destination)
    diff = normalize_bearing(bearing_deg(current, zone.center) - direct)
    zone_on_right = 0 < diff < 180

    offset = normalize_bearing(direct - 90 if zone_on_right else direct + 90)
    point = destination_point(zone.center, buffer_nm, offset)

    return Waypoint(
        lat=point.lat,
        lng=point.lng,
        id=f"avoid-{zone.id}",
        kind=WaypointKind.WEATHER_AVOIDANCE,
        name=f"Avoid {zone.display_name}",
        notes=f"Routing around {zone.kind.value}: {zone.severity.value} severity",
    )


def _reasoning(zone: HazardZone, extra_nm: float) -> str:
    wind = f"{zone.wind_speed_knots:g}" if zone.wind_speed_knots else "high"
    waves = f"{zone.wave_height_m:g}" if zone.wave_height_m else "significant"
    policy = (
        "Mandatory avoidance required."
        if zone.avoidance == AvoidancePolicy.MANDATORY
        else "Recommended for crew safety and cargo protection."
    )
    return (
        f"Route deviation of {extra_nm:.1f}nm to avoid {zone.kind.value} with "
        f"{wind} knot winds and {waves} meter waves. {policy}"
    )


def flag_land_crossings(
    start: Coordinate,
    destination: Coordinate,
    waypoints: Sequence[Waypoint],
) -> Tuple[Tuple[Waypoint, ...], int]:
    """
    Re-check every leg of start + avoidance waypoints + destination against land.

    Returns:
        The waypoints, with AVOIDANCE_LAND_NOTE on each one that begins or
        ends a crossing leg, and the number of crossing legs
    """
    if not waypoints:
        return (), 0

    points: List[Coordinate] = [start, *waypoints, destination]
    flagged = list(waypoints)
    crossings = 0

    for i in range(len(points) - 1):
        if not does_segment_cross_land(points[i], points[i + 1]):
            continue
        crossings += 1
        logger.warning(
            f"Avoidance leg {i} ({points[i].lat:.3f}, {points[i].lng:.3f}) -> "
            f"({points[i + 1].lat:.3f}, {points[i + 1].lng:.3f}) crosses modeled land"
        )
        for idx in (i - 1, i):
            if 0 <= idx < len(flagged):
                flagged[idx] = replace(flagged[idx], notes=AVOIDANCE_LAND_NOTE)

    return tuple(flagged), crossings


def plan_avoidance(
    start: Coordinate,
    destination: Coordinate,
    zones: Iterable[HazardZone],
    speed_knots: float,
    fuel_rate_l_per_nm: float,
    departure_time: Optional[datetime] = None,
    check_points: int = DEFAULT_CHECK_POINTS,
    origin: Optional[Coordinate] = None,
) -> AvoidancePlan:
    """
    Walk active zones nearest-first and detour around each one still in the way.

    Args:
        start: Where the open-water run begins (origin or last corridor point)
        destination: Final destination
        zones: Candidate hazard zones
        speed_knots: Vessel speed, for the per-zone time impact
        fuel_rate_l_per_nm: Consumption rate, for the per-zone fuel impact
        departure_time: When set, zones not valid at this instant are ignored
        check_points: Sampling density of the intersection test
        origin: Voyage origin the zones are ordered from (defaults to ``start``)

    Returns:
        AvoidancePlan with one waypoint and one Optimization per avoided zone;
        ``degraded`` is set when the detour crosses modeled land
    """
    candidates = sorted(
        active_zones(zones, departure_time),
        key=lambda z: (distance_nm(origin or start, z.center), z.id),
    )

    waypoints: List[Waypoint] = []
    avoided: List[HazardZone] = []
    optimizations: List[Optimization] = []
    current = start

    for zone in candidates:
        if not does_segment_intersect_zone(current, destination, zone, check_points):
            continue

        waypoint = avoidance_waypoint(current, destination, zone)
        direct_nm = distance_nm(current, destination)
        detour_nm = distance_nm(current, waypoint) + distance_nm(waypoint, destination)
        extra_nm = detour_nm - direct_nm

        logger.debug(
            f"Avoiding zone {zone.id} ({zone.severity.value}) via "
            f"({waypoint.lat:.3f}, {waypoint.lng:.3f}), +{extra_nm:.1f}nm"
        )

        waypoints.append(waypoint)
        avoided.append(zone)
        optimizations.append(Optimization(
            id=f"opt-avoid-{zone.id}",
            description=f"Avoid {zone.display_name} ({zone.severity.value})",
            distance_change_nm=extra_nm,
            time_change_hours=extra_nm / speed_knots,
            fuel_change_liters=extra_nm * fuel_rate_l_per_nm,
            safety_benefit=(
                "Avoids dangerous conditions"
                if zone.severity == Severity.SEVERE
                else "Reduces weather-related risks"
            ),
            reasoning=_reasoning(zone, extra_nm),
            affected_waypoints=(waypoint.id,),
        ))
        current = waypoint

    flagged, crossings = flag_land_crossings(start, destination, waypoints)
    return AvoidancePlan(
        waypoints=flagged,
        avoided_zones=tuple(avoided),
        optimizations=tuple(optimizations),
        degraded=crossings > 0,
    )
