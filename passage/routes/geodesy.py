"""
Great-circle primitives on a spherical Earth.

Coordinates are stored in decimal degrees; radians only appear inside
the trigonometry below. Callers validate latitude/longitude ranges
before calling (see ``passage.validation``).
"""

import math

from passage.routes.models import Coordinate

EARTH_RADIUS_NM = 3440.065


def distance_nm(a: Coordinate, b: Coordinate) -> float:
    """Great circle distance in nautical miles (Haversine)."""
    dlat = math.radians(b.lat - a.lat)
    dlon = math.radians(b.lng - a.lng)
    h = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat))
         * math.sin(dlon / 2) ** 2)
    return EARTH_RADIUS_NM * 2 * math.asin(min(1.0, math.sqrt(h)))


def bearing_deg(origin: Coordinate, target: Coordinate) -> float:
    """Initial bearing from ``origin`` to ``target`` in [0, 360)."""
    dlon = math.radians(target.lng - origin.lng)
    x = math.sin(dlon) * math.cos(math.radians(target.lat))
    y = (math.cos(math.radians(origin.lat)) * math.sin(math.radians(target.lat))
         - math.sin(math.radians(origin.lat)) * math.cos(math.radians(target.lat))
         * math.cos(dlon))
    return normalize_bearing(math.degrees(math.atan2(x, y)))


def destination_point(origin: Coordinate, distance: float, bearing: float) -> Coordinate:
    """
    Project a point along a great circle.

    Args:
        origin: Start point
        distance: Distance to travel in nautical miles
        bearing: Initial bearing in degrees

    Returns:
        Coordinate reached, longitude normalised to [-180, 180)
    """
    angular = distance / EARTH_RADIUS_NM
    theta = math.radians(bearing)
    lat1 = math.radians(origin.lat)
    lon1 = math.radians(origin.lng)

    sin_lat2 = (math.sin(lat1) * math.cos(angular)
                + math.cos(lat1) * math.sin(angular) * math.cos(theta))
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(theta) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )

    lng = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    return Coordinate(lat=math.degrees(lat2), lng=lng)


def interpolate(a: Coordinate, b: Coordinate, fraction: float) -> Coordinate:
    """Linear lat/lng interpolation; adequate for the short legs sampled here."""
    return Coordinate(
        lat=a.lat + (b.lat - a.lat) * fraction,
        lng=a.lng + (b.lng - a.lng) * fraction,
    )


def normalize_bearing(bearing: float) -> float:
    """Wrap any angle into [0, 360)."""
    wrapped = bearing % 360.0
    # -1e-17 % 360 rounds up to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def signed_angle_deg(from_bearing: float, to_bearing: float) -> float:
    """Smallest signed rotation from one bearing to another, in (-180, 180]."""
    diff = normalize_bearing(to_bearing - from_bearing)
    return diff - 360.0 if diff > 180.0 else diff
