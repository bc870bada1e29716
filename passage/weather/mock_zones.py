"""
Demo hazard zones for exercising the optimizer without a weather feed.

Not used on the production path. The layout matches the demo scenario
(a storm near the track midpoint, a wind advisory at 70% of the way);
``seed`` adds a reproducible jitter to the centres so repeated demos can
show different but repeatable geometry.
"""

from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from passage.routes.geodesy import distance_nm
from passage.routes.models import (
    AvoidancePolicy,
    Coordinate,
    HazardKind,
    HazardZone,
    Severity,
)

STORM_MIN_ROUTE_NM = 30.0
WIND_MIN_ROUTE_NM = 60.0
MAX_JITTER_DEG = 0.05


def generate_mock_zones(
    origin: Coordinate,
    destination: Coordinate,
    now: datetime,
    seed: Optional[int] = None,
) -> List[HazardZone]:
    """
    Args:
        origin: Route start
        destination: Route end
        now: Reference time for validity windows
        seed: When given, centres are jittered by up to 0.05 degrees using
            a generator seeded with this value; None gives the fixed layout

    Returns:
        Zero, one or two zones depending on route length
    """
    route_nm = distance_nm(origin, destination)
    jitter = np.zeros((2, 2))
    if seed is not None:
        rng = np.random.default_rng(seed)
        jitter = rng.uniform(-MAX_JITTER_DEG, MAX_JITTER_DEG, size=(2, 2))

    zones: List[HazardZone] = []

    if route_nm > STORM_MIN_ROUTE_NM:
        mid_lat = (origin.lat + destination.lat) / 2
        mid_lng = (origin.lng + destination.lng) / 2
        zones.append(HazardZone(
            id="storm-1",
            kind=HazardKind.STORM,
            severity=Severity.SEVERE,
            center=Coordinate(
                lat=mid_lat + 0.1 + float(jitter[0, 0]),
                lng=mid_lng - 0.1 + float(jitter[0, 1]),
            ),
            radius_nm=min(25.0, route_nm * 0.2),
            wind_speed_knots=45.0,
            wave_height_m=4.5,
            valid_from=now - timedelta(hours=6),
            valid_to=now + timedelta(hours=48),
            avoidance=AvoidancePolicy.MANDATORY,
            name="Low Pressure System",
        ))

    if route_nm > WIND_MIN_ROUTE_NM:
        zones.append(HazardZone(
            id="wind-1",
            kind=HazardKind.HIGH_WIND,
            severity=Severity.MODERATE,
            center=Coordinate(
                lat=origin.lat + (destination.lat - origin.lat) * 0.7 + float(jitter[1, 0]),
                lng=origin.lng + (destination.lng - origin.lng) * 0.7 + 0.15 + float(jitter[1, 1]),
            ),
            radius_nm=15.0,
            wind_speed_knots=32.0,
            wave_height_m=2.8,
            valid_from=now - timedelta(hours=12),
            valid_to=now + timedelta(hours=24),
            avoidance=AvoidancePolicy.RECOMMENDED,
            name="Shamal Wind Advisory",
        ))

    return zones
