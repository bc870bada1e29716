"""
Named maritime basins and the pre-validated transit chains between them.

A transit chain is stored once, ordered from ``basin_a`` to ``basin_b``;
lookups in the other direction get it reversed. Gate points sit in the
strait itself and are always kept; the others are approach points the
router may drop when they fall outside the voyage's latitude span.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from passage.data.land_mask import Box, does_segment_cross_land, is_over_land
from passage.routes.models import Coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Basin:
    """A named body of water with its offshore direction."""
    name: str
    bounds: Box
    offshore_bearing_deg: float  # Heading from the modeled coast toward open water
    open_water_lat: Tuple[float, float]  # Latitude band kept clear of coasts

    def contains(self, point: Coordinate) -> bool:
        return self.bounds.contains(point.lat, point.lng)

    def clamp_to_open_water(self, point: Coordinate) -> Coordinate:
        lo, hi = self.open_water_lat
        return Coordinate(lat=min(max(point.lat, lo), hi), lng=point.lng)


@dataclass(frozen=True)
class TransitPoint:
    id: str
    name: str
    lat: float
    lng: float
    gate: bool = False  # Inside the strait proper; never dropped

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


@dataclass(frozen=True)
class TransitRoute:
    basin_a: str
    basin_b: str
    points: Tuple[TransitPoint, ...]  # Ordered basin_a -> basin_b


ARABIAN_GULF = "Arabian Gulf"
GULF_OF_OMAN = "Gulf of Oman"

BASINS: Tuple[Basin, ...] = (
    Basin(
        name=ARABIAN_GULF,
        bounds=Box(47.5, 56.0, 23.0, 30.5),
        offshore_bearing_deg=0.0,
        open_water_lat=(25.0, 26.5),
    ),
    Basin(
        name=GULF_OF_OMAN,
        bounds=Box(56.0, 61.0, 22.0, 27.0),
        offshore_bearing_deg=90.0,
        open_water_lat=(23.5, 25.5),
    ),
)

BASIN_BY_NAME: Dict[str, Basin] = {b.name: b for b in BASINS}


# ---------------------------------------------------------------------------
# Transit chains. Every point is water and every consecutive pair is
# land-free under the rules in land_mask (see validate_transit_points).
# ---------------------------------------------------------------------------
TRANSIT_ROUTES: Tuple[TransitRoute, ...] = (
    TransitRoute(
        basin_a=ARABIAN_GULF,
        basin_b=GULF_OF_OMAN,
        points=(
            TransitPoint("dubai-offshore", "Dubai Offshore", 25.45, 55.10),
            TransitPoint("rak-offshore", "RAK Offshore", 25.95, 55.85),
            TransitPoint("musandam-west", "Musandam West", 26.35, 56.05, gate=True),
            TransitPoint("strait-hormuz", "Strait of Hormuz", 26.55, 56.30, gate=True),
            TransitPoint("musandam-east", "Musandam East", 26.30, 56.55, gate=True),
            TransitPoint("dibba-offshore", "Dibba Offshore", 25.70, 56.55),
            TransitPoint("khor-fakkan", "Khor Fakkan Approach", 25.35, 56.45),
            TransitPoint("fujairah-anchorage", "Fujairah Anchorage", 25.10, 56.45),
        ),
    ),
)


def basin_of(point: Coordinate) -> Optional[Basin]:
    """Basin containing the point, or None outside every modeled basin."""
    for basin in BASINS:
        if basin.contains(point):
            return basin
    return None


def find_transit(from_basin: str, to_basin: str) -> Optional[Tuple[TransitPoint, ...]]:
    """Transit chain ordered in the direction of travel, if one is tabled."""
    for route in TRANSIT_ROUTES:
        if (route.basin_a, route.basin_b) == (from_basin, to_basin):
            return route.points
        if (route.basin_b, route.basin_a) == (from_basin, to_basin):
            return tuple(reversed(route.points))
    return None


def validate_transit_points() -> List[dict]:
    """Check every tabled point is water and each consecutive pair is clear.

    Returns list of validation results. Useful for testing.
    """
    results = []
    for route in TRANSIT_ROUTES:
        label = f"{route.basin_a}->{route.basin_b}"
        for i, point in enumerate(route.points):
            results.append({
                "transit": label,
                "point": point.id,
                "check": "is_water",
                "passed": not is_over_land(point.coordinate),
            })

        for i in range(len(route.points) - 1):
            first, second = route.points[i], route.points[i + 1]
            results.append({
                "transit": label,
                "segment": (first.id, second.id),
                "check": "segment_clear",
                "passed": not does_segment_cross_land(first.coordinate, second.coordinate),
            })

    failed = [r for r in results if not r["passed"]]
    if failed:
        logger.warning(f"{len(failed)} transit table checks failed: {failed}")
    return results
