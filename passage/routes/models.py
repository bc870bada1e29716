"""
Value types for voyage routing.

Every entity here is created per optimization request and never mutated
afterwards: dataclasses are frozen and sequences are tuples. ``to_dict``
renders the camelCase wire shape used by the HTTP layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class WaypointKind(Enum):
    """Closed set of roles a waypoint can play in a route."""
    ORIGIN = "origin"
    DESTINATION = "destination"
    WEATHER_AVOIDANCE = "weather_avoidance"
    COASTAL_WAYPOINT = "coastal_waypoint"
    WAYPOINT = "waypoint"


class HazardKind(Enum):
    STORM = "storm"
    HIGH_WIND = "high_wind"
    FOG = "fog"
    HIGH_SEAS = "high_seas"
    SANDSTORM = "sandstorm"


class Severity(Enum):
    SEVERE = "severe"
    MODERATE = "moderate"
    ADVISORY = "advisory"


class AvoidancePolicy(Enum):
    MANDATORY = "mandatory"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


class RouteKind(Enum):
    DIRECT = "direct"
    WEATHER_ROUTED = "weather_routed"
    CUSTOM = "custom"


class Priority(Enum):
    """Operator preference used by the recommendation rules."""
    TIME = "time"
    FUEL = "fuel"
    SAFETY = "safety"
    BALANCED = "balanced"


class SafetyImprovement(Enum):
    SIGNIFICANT = "significant"
    MODERATE = "moderate"
    MINOR = "minor"
    NONE = "none"


class Recommendation(Enum):
    USE_OPTIMIZED = "use_optimized"
    USE_ORIGINAL = "use_original"
    REVIEW_REQUIRED = "review_required"


class FuelRateSource(Enum):
    VESSEL = "vessel"
    TABLE = "table"
    DEFAULT = "default"


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class Coordinate:
    """A position in decimal degrees."""
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Waypoint(Coordinate):
    """A named, typed point along a route."""
    id: str = ""
    kind: WaypointKind = WaypointKind.WAYPOINT
    name: Optional[str] = None
    distance_from_previous: Optional[float] = None
    cumulative_distance: Optional[float] = None
    notes: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "name": self.name,
            "kind": self.kind.value,
            "distanceFromPrevious": self.distance_from_previous,
            "cumulativeDistance": self.cumulative_distance,
            "notes": self.notes,
        }


# =============================================================================
# Hazards and vessels (supplied by callers)
# =============================================================================

@dataclass(frozen=True)
class HazardZone:
    """A circular region of elevated risk with a validity window [from, to)."""
    id: str
    kind: HazardKind
    severity: Severity
    center: Coordinate
    radius_nm: float
    valid_from: datetime
    valid_to: datetime
    avoidance: AvoidancePolicy
    wind_speed_knots: Optional[float] = None
    wave_height_m: Optional[float] = None
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.kind.value

    def is_valid_at(self, when: datetime) -> bool:
        return self.valid_from <= when < self.valid_to

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "center": self.center.to_dict(),
            "radiusNm": self.radius_nm,
            "windSpeedKnots": self.wind_speed_knots,
            "waveHeightM": self.wave_height_m,
            "validFrom": self.valid_from.isoformat(),
            "validTo": self.valid_to.isoformat(),
            "avoidance": self.avoidance.value,
            "name": self.name,
        }


@dataclass(frozen=True)
class VesselProfile:
    """Vessel descriptor; the fuel rate overrides the type table when set."""
    id: str
    name: str
    type: str
    speed_knots: float
    max_speed_knots: Optional[float] = None
    economic_speed_knots: Optional[float] = None
    fuel_consumption_rate_l_per_nm: Optional[float] = None


@dataclass(frozen=True)
class WeatherStatus:
    """How the hazard list was obtained when the caller did not supply one."""
    source: str
    available: bool = True
    requested_samples: int = 0
    failed_samples: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "available": self.available,
            "requestedSamples": self.requested_samples,
            "failedSamples": self.failed_samples,
        }


@dataclass(frozen=True)
class OptimizationRequest:
    """
    Input to ``optimize_route``.

    ``hazard_zones`` of None means the caller supplied no list; pair it with
    ``weather_status`` when a live or mock source was consulted instead.
    ``created_at`` is stamped on both routes so results are reproducible.
    """
    vessel: VesselProfile
    origin: Coordinate
    destination: Coordinate
    created_at: datetime
    origin_name: str = "Origin"
    destination_name: str = "Destination"
    hazard_zones: Optional[Tuple[HazardZone, ...]] = None
    preference: Priority = Priority.BALANCED
    departure_time: Optional[datetime] = None
    weather_status: Optional[WeatherStatus] = None


# =============================================================================
# Routes and results
# =============================================================================

@dataclass(frozen=True)
class RouteLeg:
    """One leg between consecutive waypoints."""
    start_id: str
    end_id: str
    distance_nm: float
    bearing_deg: float
    duration_hours: float
    fuel_liters: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.start_id,
            "to": self.end_id,
            "distanceNm": self.distance_nm,
            "bearingDeg": self.bearing_deg,
            "durationHours": self.duration_hours,
            "fuelLiters": self.fuel_liters,
        }


@dataclass(frozen=True)
class Route:
    id: str
    vessel_id: str
    vessel_name: str
    vessel_type: str
    origin: Waypoint
    destination: Waypoint
    waypoints: Tuple[Waypoint, ...]
    legs: Tuple[RouteLeg, ...]
    total_distance_nm: float
    estimated_duration_hours: float
    estimated_fuel_liters: float
    estimated_cost_usd: float
    created_at: datetime
    route_kind: RouteKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "vessel": {
                "id": self.vessel_id,
                "name": self.vessel_name,
                "type": self.vessel_type,
            },
            "origin": self.origin.to_dict(),
            "destination": self.destination.to_dict(),
            "waypoints": [wp.to_dict() for wp in self.waypoints],
            "legs": [leg.to_dict() for leg in self.legs],
            "totalDistanceNm": self.total_distance_nm,
            "estimatedDurationHours": self.estimated_duration_hours,
            "estimatedFuelLiters": self.estimated_fuel_liters,
            "estimatedCostUSD": self.estimated_cost_usd,
            "createdAt": self.created_at.isoformat(),
            "routeKind": self.route_kind.value,
        }


@dataclass(frozen=True)
class Optimization:
    """One avoided hazard and what the detour costs."""
    id: str
    description: str
    distance_change_nm: float
    time_change_hours: float
    fuel_change_liters: float
    safety_benefit: str
    reasoning: str
    affected_waypoints: Tuple[str, ...] = ()
    kind: str = "weather_avoidance"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "description": self.description,
            "impact": {
                "distanceChangeNm": self.distance_change_nm,
                "timeChangeHours": self.time_change_hours,
                "fuelChangeLiters": self.fuel_change_liters,
                "safetyBenefit": self.safety_benefit,
            },
            "reasoning": self.reasoning,
            "affectedWaypoints": list(self.affected_waypoints),
        }


@dataclass(frozen=True)
class RouteSummary:
    """Aggregate deltas, always direct minus optimized."""
    distance_delta_nm: float
    time_delta_hours: float
    fuel_delta_liters: float
    cost_delta_usd: float
    safety_improvement: SafetyImprovement
    safety_reasoning: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distanceDeltaNm": self.distance_delta_nm,
            "timeDeltaHours": self.time_delta_hours,
            "fuelDeltaLiters": self.fuel_delta_liters,
            "costDeltaUSD": self.cost_delta_usd,
            "safetyImprovement": self.safety_improvement.value,
            "safetyReasoning": self.safety_reasoning,
        }


@dataclass(frozen=True)
class OptimizationResult:
    id: str
    direct_route: Route
    optimized_route: Route
    avoided_zones: Tuple[HazardZone, ...]
    optimizations: Tuple[Optimization, ...]
    summary: RouteSummary
    recommendation: Recommendation
    reasoning: str
    confidence: int
    fuel_rate_l_per_nm: float
    fuel_rate_source: FuelRateSource
    weather_degraded: bool = False
    corridor_degraded: bool = False
    avoidance_degraded: bool = False
    unavoided_zones: Tuple[HazardZone, ...] = ()
    weather_status: Optional[WeatherStatus] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "directRoute": self.direct_route.to_dict(),
            "optimizedRoute": self.optimized_route.to_dict(),
            "avoidedZones": [zone.to_dict() for zone in self.avoided_zones],
            "optimizations": [opt.to_dict() for opt in self.optimizations],
            "summary": self.summary.to_dict(),
            "recommendation": self.recommendation.value,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
            "fuelRateLPerNm": self.fuel_rate_l_per_nm,
            "fuelRateSource": self.fuel_rate_source.value,
            "weatherDegraded": self.weather_degraded,
            "corridorDegraded": self.corridor_degraded,
            "avoidanceDegraded": self.avoidance_degraded,
            "unavoidedZones": [zone.to_dict() for zone in self.unavoided_zones],
            "weatherStatus": self.weather_status.to_dict() if self.weather_status else None,
            "warnings": list(self.warnings),
        }
