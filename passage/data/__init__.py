"""Static geography: modeled coastlines, basins and transit chains."""

from .land_mask import REGION_RULES, does_segment_cross_land, is_over_land
from .basins import BASINS, TRANSIT_ROUTES, basin_of

__all__ = [
    "REGION_RULES",
    "BASINS",
    "TRANSIT_ROUTES",
    "basin_of",
    "does_segment_cross_land",
    "is_over_land",
]
