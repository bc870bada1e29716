"""Route value types, geodesy and display helpers."""

from .models import (
    Coordinate,
    HazardZone,
    OptimizationRequest,
    OptimizationResult,
    Route,
    VesselProfile,
    Waypoint,
    WaypointKind,
)
from .geodesy import bearing_deg, destination_point, distance_nm

__all__ = [
    "Coordinate",
    "HazardZone",
    "OptimizationRequest",
    "OptimizationResult",
    "Route",
    "VesselProfile",
    "Waypoint",
    "WaypointKind",
    "bearing_deg",
    "destination_point",
    "distance_nm",
]
