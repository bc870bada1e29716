"""
Banded land/water classification for the Arabian Gulf and Gulf of Oman.

This is an approximation, not a vector coastline. Each region is a
longitude/latitude box holding a piecewise-linear coastal latitude
(evaluated with ``numpy.interp``); inside the box a point is land when it
lies on the landward side of that line, unless a carve-out (an offshore
island or dredged port basin) says otherwise. Boxes never overlap, so at
most one rule applies to any point. Positions outside every box are water.

Adding a covered region means adding a ``RegionRule``; the control flow
does not change.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

import numpy as np

from passage.routes.geodesy import interpolate
from passage.routes.models import Coordinate

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT_SAMPLES = 20


@dataclass(frozen=True)
class Box:
    """Half-open lng/lat rectangle: [lng_min, lng_max) x [lat_min, lat_max)."""
    lng_min: float
    lng_max: float
    lat_min: float
    lat_max: float

    def contains(self, lat: float, lng: float) -> bool:
        return (self.lng_min <= lng < self.lng_max
                and self.lat_min <= lat < self.lat_max)

    def overlaps(self, other: "Box") -> bool:
        return (self.lng_min < other.lng_max and other.lng_min < self.lng_max
                and self.lat_min < other.lat_max and other.lat_min < self.lat_max)


@dataclass(frozen=True)
class RegionRule:
    """
    One banded coastline.

    ``coast`` holds (lng, lat) breakpoints sorted by longitude; ``landward``
    is "south" when land lies below the line and "north" when above.
    Carve-out boxes are closed on every side.
    """
    name: str
    bounds: Box
    coast: Tuple[Tuple[float, float], ...]
    landward: str = "south"
    exceptions: Tuple[Box, ...] = ()

    def coast_latitude(self, lng: float) -> float:
        xs = [p[0] for p in self.coast]
        ys = [p[1] for p in self.coast]
        return float(np.interp(lng, xs, ys))

    def _in_exception(self, lat: float, lng: float) -> bool:
        return any(
            b.lng_min <= lng <= b.lng_max and b.lat_min <= lat <= b.lat_max
            for b in self.exceptions
        )

    def is_land(self, lat: float, lng: float) -> bool:
        if not self.bounds.contains(lat, lng):
            return False
        if self._in_exception(lat, lng):
            return False
        threshold = self.coast_latitude(lng)
        if self.landward == "north":
            return lat > threshold
        return lat < threshold


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------
REGION_RULES: Tuple[RegionRule, ...] = (
    RegionRule(
        name="Saudi Arabia / Bahrain coast",
        bounds=Box(49.0, 50.5, 24.0, 27.5),
        coast=((49.0, 26.0), (50.5, 26.45)),
    ),
    RegionRule(
        name="Qatar peninsula",
        bounds=Box(50.75, 51.65, 24.4, 26.25),
        coast=((50.75, 26.25), (51.65, 26.25)),
    ),
    RegionRule(
        name="UAE Gulf coast",
        bounds=Box(51.65, 56.3, 22.5, 25.5),
        coast=(
            (51.5, 24.0), (52.5, 24.1), (53.5, 24.3), (54.5, 24.6),
            (55.0, 25.0), (55.5, 25.3), (56.0, 25.45), (56.3, 25.5),
        ),
        # Khalifa Port basin and its dredged approach
        exceptions=(Box(54.5, 54.9, 24.6, 25.0),),
    ),
    RegionRule(
        name="Musandam peninsula",
        bounds=Box(56.0, 56.4, 25.5, 26.4),
        coast=((56.0, 26.05), (56.2, 26.3), (56.4, 26.35)),
    ),
    RegionRule(
        name="Iranian coast (Strait of Hormuz)",
        bounds=Box(54.0, 57.5, 26.4, 28.0),
        coast=(
            (54.0, 26.75), (55.0, 26.55), (55.8, 26.65), (56.2, 26.95),
            (56.5, 26.9), (57.0, 26.55), (57.5, 26.4),
        ),
        landward="north",
    ),
    RegionRule(
        name="Oman Batinah coast",
        bounds=Box(56.3, 58.5, 22.5, 25.0),
        coast=((56.3, 25.0), (56.45, 24.8), (56.75, 24.4), (57.5, 23.8), (58.5, 23.6)),
    ),
)


def rule_for(lat: float, lng: float) -> Optional[RegionRule]:
    """Region whose box contains the point, if any."""
    for rule in REGION_RULES:
        if rule.bounds.contains(lat, lng):
            return rule
    return None


@lru_cache(maxsize=100_000)
def _is_land(lat: float, lng: float) -> bool:
    rule = rule_for(lat, lng)
    return rule is not None and rule.is_land(lat, lng)


def is_over_land(point: Coordinate) -> bool:
    """True if the point falls on the landward side of a modeled coast."""
    return _is_land(point.lat, point.lng)


def does_segment_cross_land(
    a: Coordinate,
    b: Coordinate,
    samples: int = DEFAULT_SEGMENT_SAMPLES,
) -> bool:
    """
    Sample ``samples + 1`` evenly spaced points from ``a`` to ``b``.

    A sliver of land narrower than the sample spacing can be missed;
    raise ``samples`` for long legs near thin features.

    Args:
        a: Segment start
        b: Segment end
        samples: Number of intervals between a and b

    Returns:
        True if any sampled point is over land
    """
    samples = max(1, samples)
    for t in np.linspace(0.0, 1.0, samples + 1):
        if is_over_land(interpolate(a, b, float(t))):
            return True
    return False


def find_overlapping_rules() -> List[Tuple[str, str]]:
    """Pairs of rules whose boxes overlap (expected to be empty)."""
    overlaps = []
    for i, first in enumerate(REGION_RULES):
        for second in REGION_RULES[i + 1:]:
            if first.bounds.overlaps(second.bounds):
                overlaps.append((first.name, second.name))
    return overlaps


def get_land_mask_status() -> Dict[str, object]:
    """Describe the classifier in use."""
    return {
        "method": "banded regional coastline rules",
        "vector_coastline": False,
        "regions": [rule.name for rule in REGION_RULES],
        "segment_samples": DEFAULT_SEGMENT_SAMPLES,
        "cache_size": _is_land.cache_info().currsize,
    }
