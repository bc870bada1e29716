"""
Route assembly: origin + corridor + avoidance + destination.

One linear pass fills ``distance_from_previous`` and
``cumulative_distance`` and produces a leg per consecutive pair. Totals
come from the final cumulative distance; duration uses the vessel's
speed and fuel uses the resolved consumption rate.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence

from passage.optimization.vessel_profile import FUEL_COST_USD_PER_LITER
from passage.routes.geodesy import bearing_deg, distance_nm
from passage.routes.models import (
    Coordinate,
    Route,
    RouteKind,
    RouteLeg,
    VesselProfile,
    Waypoint,
    WaypointKind,
)

logger = logging.getLogger(__name__)


def assemble_route(
    route_id: str,
    vessel: VesselProfile,
    origin: Coordinate,
    destination: Coordinate,
    fuel_rate_l_per_nm: float,
    created_at: datetime,
    route_kind: RouteKind,
    corridor: Sequence[Waypoint] = (),
    avoidance: Sequence[Waypoint] = (),
    origin_name: Optional[str] = None,
    destination_name: Optional[str] = None,
    destination_notes: Optional[str] = None,
) -> Route:
    """
    Build an immutable Route.

    Args:
        route_id: Identifier stamped on the route
        vessel: Vessel sailing the route
        origin: Departure position
        destination: Arrival position
        fuel_rate_l_per_nm: Consumption rate already resolved for the vessel
        created_at: Timestamp supplied by the caller
        route_kind: direct, weather_routed or custom
        corridor: Coastal waypoints, in order
        avoidance: Hazard-avoidance waypoints, in order
        origin_name: Display name for the origin
        destination_name: Display name for the destination
        destination_notes: Optional remark attached to the destination

    Returns:
        Route with cumulative distances, legs and voyage totals
    """
    sequence: List[Waypoint] = [
        Waypoint(lat=origin.lat, lng=origin.lng, id="origin",
                 kind=WaypointKind.ORIGIN, name=origin_name),
        *corridor,
        *avoidance,
        Waypoint(lat=destination.lat, lng=destination.lng, id="destination",
                 kind=WaypointKind.DESTINATION, name=destination_name,
                 notes=destination_notes),
    ]

    waypoints: List[Waypoint] = [
        replace(sequence[0], distance_from_previous=0.0, cumulative_distance=0.0)
    ]
    legs: List[RouteLeg] = []
    cumulative = 0.0

    for previous, waypoint in zip(sequence, sequence[1:]):
        leg_nm = distance_nm(previous, waypoint)
        cumulative += leg_nm
        waypoints.append(
            replace(waypoint, distance_from_previous=leg_nm, cumulative_distance=cumulative)
        )
        legs.append(RouteLeg(
            start_id=previous.id,
            end_id=waypoint.id,
            distance_nm=leg_nm,
            bearing_deg=bearing_deg(previous, waypoint),
            duration_hours=leg_nm / vessel.speed_knots,
            fuel_liters=leg_nm * fuel_rate_l_per_nm,
        ))

    fuel = cumulative * fuel_rate_l_per_nm
    logger.debug(
        f"Assembled {route_kind.value} route {route_id}: "
        f"{len(waypoints)} waypoints, {cumulative:.1f}nm"
    )

    return Route(
        id=route_id,
        vessel_id=vessel.id,
        vessel_name=vessel.name,
        vessel_type=vessel.type,
        origin=waypoints[0],
        destination=waypoints[-1],
        waypoints=tuple(waypoints),
        legs=tuple(legs),
        total_distance_nm=cumulative,
        estimated_duration_hours=cumulative / vessel.speed_knots,
        estimated_fuel_liters=fuel,
        estimated_cost_usd=fuel * FUEL_COST_USD_PER_LITER,
        created_at=created_at,
        route_kind=route_kind,
    )
