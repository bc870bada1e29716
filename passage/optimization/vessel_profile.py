"""Fuel consumption rates by vessel type (liters per nautical mile)."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from passage.routes.models import FuelRateSource, VesselProfile

logger = logging.getLogger(__name__)

FUEL_COST_USD_PER_LITER = 0.85
DEFAULT_FUEL_RATE_L_PER_NM = 40.0

FUEL_RATES_L_PER_NM: Dict[str, float] = {
    "dredger": 85.0,
    "hopper_dredger": 90.0,
    "csd": 80.0,  # cutter suction dredger
    "crane_barge": 45.0,
    "supply_vessel": 35.0,
    "supply": 35.0,
    "tugboat": 25.0,
    "tug": 25.0,
    "survey_vessel": 20.0,
    "survey": 20.0,
    "jack_up": 0.0,  # towed, burns nothing under way
    "pipelay_barge": 50.0,
    "derrick_barge": 55.0,
}


@dataclass(frozen=True)
class FuelRate:
    rate_l_per_nm: float
    source: FuelRateSource
    note: Optional[str] = None


def normalize_vessel_type(vessel_type: str) -> str:
    """'Hopper Dredger' / 'hopper-dredger' -> 'hopper_dredger'."""
    return "_".join(vessel_type.strip().lower().replace("-", " ").split())


def resolve_fuel_rate(vessel: VesselProfile) -> FuelRate:
    """Explicit vessel rate first, then the type table, then the default."""
    if vessel.fuel_consumption_rate_l_per_nm is not None:
        return FuelRate(vessel.fuel_consumption_rate_l_per_nm, FuelRateSource.VESSEL)

    key = normalize_vessel_type(vessel.type)
    if key in FUEL_RATES_L_PER_NM:
        return FuelRate(FUEL_RATES_L_PER_NM[key], FuelRateSource.TABLE)

    logger.warning(
        f"Unknown vessel type '{vessel.type}' for {vessel.id}, "
        f"using default {DEFAULT_FUEL_RATE_L_PER_NM:g} L/nm"
    )
    return FuelRate(
        DEFAULT_FUEL_RATE_L_PER_NM,
        FuelRateSource.DEFAULT,
        note=(
            f"Vessel type '{vessel.type}' has no fuel profile; estimates use the "
            f"default {DEFAULT_FUEL_RATE_L_PER_NM:g} L/nm."
        ),
    )
