"""Input checks applied before any routing math runs."""

import math
from typing import Optional

from passage.routes.models import Coordinate, VesselProfile


class ValidationError(ValueError):
    """Raised for inputs the router refuses to work with. Never clamped."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_coordinate(point: Coordinate, field: str = "coordinate") -> Coordinate:
    """Reject non-finite or out-of-range positions."""
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise ValidationError(f"{field}: latitude/longitude must be finite", field)
    if abs(point.lat) > 90:
        raise ValidationError(f"{field}: latitude {point.lat} outside [-90, 90]", field)
    if abs(point.lng) > 180:
        raise ValidationError(f"{field}: longitude {point.lng} outside [-180, 180]", field)
    return point


def validate_vessel(vessel: VesselProfile) -> VesselProfile:
    if not math.isfinite(vessel.speed_knots) or vessel.speed_knots <= 0:
        raise ValidationError(
            f"vessel.speedKnots must be a positive number, got {vessel.speed_knots}",
            "vessel.speedKnots",
        )
    rate = vessel.fuel_consumption_rate_l_per_nm
    if rate is not None and (not math.isfinite(rate) or rate < 0):
        raise ValidationError(
            f"vessel.fuelConsumptionRateLPerNm must be >= 0, got {rate}",
            "vessel.fuelConsumptionRateLPerNm",
        )
    return vessel
