"""
Offshore corridor synthesis.

When the direct track between two points crosses a modeled coastline, or
joins two different basins, the router substitutes a short chain of
``coastal_waypoint`` entries:

1. a tabled transit chain between the two basins, trimmed to the voyage, or
2. a generated offshore arc of up to three points, chained greedily so
   that no leg crosses land.

Neither heuristic guarantees a land-free path outside the regions the
tables cover. When they fail the router still returns its best attempt,
annotates the affected waypoints and logs a warning instead of raising.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from passage.data.basins import Basin, TransitPoint, basin_of, find_transit
from passage.data.land_mask import does_segment_cross_land
from passage.routes.geodesy import (
    bearing_deg,
    destination_point,
    interpolate,
    signed_angle_deg,
)
from passage.routes.models import Coordinate, Waypoint, WaypointKind

logger = logging.getLogger(__name__)

# Fallback arc geometry
ARC_ENDPOINT_OFFSET_NM = 25.0
ARC_MIDPOINT_OFFSET_NM = 30.0
ARC_TURN_DEG = 45.0

# Approach points further than this from the voyage's latitude span are dropped
TRANSIT_LAT_MARGIN_DEG = 1.0

BEST_EFFORT_NOTE = (
    "Best-effort offshore waypoint: no land-free chain was found against the "
    "modeled coastline. Verify this leg against charts before sailing."
)
UNCOVERED_NOTE = (
    "Direct track crosses modeled land outside any known basin; no corridor "
    "could be generated. Verify against charts before sailing."
)


@dataclass(frozen=True)
class CorridorPlan:
    """Corridor waypoints plus whether the router had to settle for a best effort."""
    waypoints: Tuple[Waypoint, ...] = ()
    method: str = "none"  # none | transit | arc | uncovered
    degraded: bool = False
    note: Optional[str] = None


def needs_corridor(origin: Coordinate, destination: Coordinate) -> bool:
    """True if the points lie in different basins or the direct track hits land."""
    origin_basin = basin_of(origin)
    destination_basin = basin_of(destination)
    if (origin_basin is not None and destination_basin is not None
            and origin_basin.name != destination_basin.name):
        return True
    return does_segment_cross_land(origin, destination)


def build_corridor(origin: Coordinate, destination: Coordinate) -> List[Waypoint]:
    """Ordered corridor waypoints; empty when the direct track is usable."""
    return list(plan_corridor(origin, destination).waypoints)


def plan_corridor(origin: Coordinate, destination: Coordinate) -> CorridorPlan:
    if not needs_corridor(origin, destination):
        return CorridorPlan()

    origin_basin = basin_of(origin)
    destination_basin = basin_of(destination)

    chain = None
    if origin_basin and destination_basin and origin_basin.name != destination_basin.name:
        chain = find_transit(origin_basin.name, destination_basin.name)

    if chain:
        plan = _plan_from_transit(origin, destination, chain)
    else:
        basin = (origin_basin or destination_basin
                 or basin_of(interpolate(origin, destination, 0.5)))
        if basin is None:
            logger.warning(
                f"Track ({origin.lat:.3f}, {origin.lng:.3f}) -> "
                f"({destination.lat:.3f}, {destination.lng:.3f}) crosses land "
                f"outside every modeled basin; no corridor generated"
            )
            return CorridorPlan(method="uncovered", degraded=True, note=UNCOVERED_NOTE)
        plan = _plan_from_arc(origin, destination, basin)

    return _verify_corridor(origin, destination, plan)


# ---------------------------------------------------------------------------
# Transit table
# ---------------------------------------------------------------------------

def _plan_from_transit(
    origin: Coordinate,
    destination: Coordinate,
    chain: Sequence[TransitPoint],
) -> CorridorPlan:
    lat_lo = min(origin.lat, destination.lat) - TRANSIT_LAT_MARGIN_DEG
    lat_hi = max(origin.lat, destination.lat) + TRANSIT_LAT_MARGIN_DEG
    kept = [p for p in chain if p.gate or lat_lo <= p.lat <= lat_hi]

    # Enter as deep into the chain as the origin can reach directly
    entry = None
    for i, point in enumerate(kept):
        if not does_segment_cross_land(origin, point.coordinate):
            entry = i
    # Leave at the first point with a clear run to the destination
    exit_ = None
    for j in range(entry or 0, len(kept)):
        if not does_segment_cross_land(kept[j].coordinate, destination):
            exit_ = j
            break

    degraded = entry is None or exit_ is None
    selected = kept[(entry or 0):(len(kept) if exit_ is None else exit_ + 1)]
    logger.debug(
        f"Transit corridor: kept {len(kept)}/{len(chain)} points, "
        f"entry={entry}, exit={exit_}, selected={[p.id for p in selected]}"
    )

    waypoints = tuple(
        Waypoint(
            lat=p.lat,
            lng=p.lng,
            id=p.id,
            kind=WaypointKind.COASTAL_WAYPOINT,
            name=p.name,
            notes=BEST_EFFORT_NOTE if degraded else "Pre-validated transit point",
        )
        for p in selected
    )
    return CorridorPlan(
        waypoints=waypoints,
        method="transit",
        degraded=degraded,
        note=BEST_EFFORT_NOTE if degraded else None,
    )


# ---------------------------------------------------------------------------
# Generated offshore arc
# ---------------------------------------------------------------------------

def offshore_arc(origin: Coordinate, destination: Coordinate, basin: Basin) -> List[Coordinate]:
    """
    Up to three synthetic points biased toward the basin's open water.

    The first leaves the origin on the offshore bearing turned 45 degrees
    toward the destination, the second pushes the track midpoint offshore
    and clamps it into the open-water band, the third mirrors the first
    at the destination.
    """
    offshore = basin.offshore_bearing_deg

    outbound = bearing_deg(origin, destination)
    turn_out = ARC_TURN_DEG if signed_angle_deg(offshore, outbound) >= 0 else -ARC_TURN_DEG
    first = destination_point(origin, ARC_ENDPOINT_OFFSET_NM, offshore + turn_out)

    middle = basin.clamp_to_open_water(
        destination_point(interpolate(origin, destination, 0.5), ARC_MIDPOINT_OFFSET_NM, offshore)
    )

    inbound = bearing_deg(destination, origin)
    turn_in = ARC_TURN_DEG if signed_angle_deg(offshore, inbound) >= 0 else -ARC_TURN_DEG
    last = destination_point(destination, ARC_ENDPOINT_OFFSET_NM, offshore + turn_in)

    return [first, middle, last]


def _plan_from_arc(origin: Coordinate, destination: Coordinate, basin: Basin) -> CorridorPlan:
    candidates = offshore_arc(origin, destination, basin)

    chain: List[Coordinate] = []
    current = origin
    for candidate in candidates:
        if not does_segment_cross_land(current, destination):
            break
        if does_segment_cross_land(current, candidate):
            continue
        chain.append(candidate)
        current = candidate

    reached = not does_segment_cross_land(current, destination)
    if not reached:
        logger.warning(
            f"Offshore arc in {basin.name} could not clear land "
            f"({len(chain)}/{len(candidates)} points chained); returning best effort"
        )
        if not chain:
            chain = candidates

    waypoints = tuple(
        Waypoint(
            lat=point.lat,
            lng=point.lng,
            id=f"coastal-{i + 1}",
            kind=WaypointKind.COASTAL_WAYPOINT,
            name=f"{basin.name} Offshore {i + 1}",
            notes="Offshore routing waypoint" if reached else BEST_EFFORT_NOTE,
        )
        for i, point in enumerate(chain)
    )
    return CorridorPlan(
        waypoints=waypoints,
        method="arc",
        degraded=not reached,
        note=None if reached else BEST_EFFORT_NOTE,
    )


# ---------------------------------------------------------------------------
# Post-construction check
# ---------------------------------------------------------------------------

def _verify_corridor(
    origin: Coordinate,
    destination: Coordinate,
    plan: CorridorPlan,
) -> CorridorPlan:
    """Re-check every leg of origin + corridor + destination."""
    points: List[Coordinate] = [origin, *plan.waypoints, destination]
    waypoints = list(plan.waypoints)
    crossings = 0

    for i in range(len(points) - 1):
        if not does_segment_cross_land(points[i], points[i + 1]):
            continue
        crossings += 1
        logger.warning(
            f"Corridor leg {i} ({points[i].lat:.3f}, {points[i].lng:.3f}) -> "
            f"({points[i + 1].lat:.3f}, {points[i + 1].lng:.3f}) crosses modeled land"
        )
        # Flag the corridor waypoint that ends the leg, or the one that starts it
        # when the leg ends at the destination
        idx = i if i < len(waypoints) else i - 1
        if 0 <= idx < len(waypoints):
            waypoints[idx] = replace(waypoints[idx], notes=BEST_EFFORT_NOTE)

    if crossings == 0:
        return plan
    return replace(
        plan,
        waypoints=tuple(waypoints),
        degraded=True,
        note=plan.note or BEST_EFFORT_NOTE,
    )
