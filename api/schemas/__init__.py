"""
PASSAGE API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import Position, OptimizeRouteRequest, ...
"""

# Common
from .common import CamelModel, NamedPosition, Position  # noqa: F401

# Optimization
from .optimization import (  # noqa: F401
    HazardZoneModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    PreferencesModel,
    RouteWeatherRequest,
    RouteWeatherResponse,
    VesselModel,
)
