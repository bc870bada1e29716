"""Route optimization API schemas."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from .common import CamelModel, NamedPosition, Position


class VesselModel(CamelModel):
    """Vessel descriptor as sent by the planning UI."""
    id: str
    name: str
    type: str = Field(..., description="dredger, tugboat, supply_vessel, ...")
    speed_knots: float = Field(..., allow_inf_nan=False)
    max_speed_knots: Optional[float] = None
    economic_speed_knots: Optional[float] = None
    fuel_consumption_rate_l_per_nm: Optional[float] = Field(
        None, description="Overrides the per-type table when set"
    )


class HazardZoneModel(CamelModel):
    """A circular hazard valid over [validFrom, validTo)."""
    id: str
    kind: Literal["storm", "high_wind", "fog", "high_seas", "sandstorm"]
    severity: Literal["severe", "moderate", "advisory"]
    center: Position
    radius_nm: float = Field(..., gt=0, le=1000)
    wind_speed_knots: Optional[float] = Field(None, ge=0)
    wave_height_m: Optional[float] = Field(None, ge=0)
    valid_from: datetime
    valid_to: datetime
    avoidance: Literal["mandatory", "recommended", "optional"]
    name: Optional[str] = None

    @field_validator("valid_from", "valid_to")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def check_window(self):
        if self.valid_to <= self.valid_from:
            raise ValueError("validTo must be after validFrom")
        return self


class PreferencesModel(CamelModel):
    prioritize: Literal["time", "fuel", "safety", "balanced"] = "balanced"


class OptimizeRouteRequest(CamelModel):
    """
    Route optimization request.

    Omit ``hazardZones`` to let the server consult its configured weather
    source; send an empty list to assert clear weather.
    """
    vessel: VesselModel
    origin: NamedPosition
    destination: NamedPosition
    hazard_zones: Optional[List[HazardZoneModel]] = None
    preferences: PreferencesModel = Field(default_factory=PreferencesModel)
    departure_time: Optional[datetime] = None

    @field_validator("departure_time")
    @classmethod
    def departure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("hazard_zones")
    @classmethod
    def unique_zone_ids(cls, v):
        if v is not None:
            ids = [z.id for z in v]
            if len(ids) != len(set(ids)):
                raise ValueError("hazard zone ids must be unique")
        return v


class OptimizeRouteResponse(CamelModel):
    success: bool = True
    result: Dict[str, Any]


class RouteWeatherRequest(CamelModel):
    origin: Position
    destination: Position


class RouteWeatherResponse(CamelModel):
    zones: List[Dict[str, Any]]
    summary: Dict[str, Any]
    status: Dict[str, Any]
