"""Corridor synthesis, hazard avoidance and route comparison."""

from .coastal_router import build_corridor, needs_corridor, plan_corridor
from .hazard_avoidance import does_segment_intersect_zone, plan_avoidance
from .route_assembler import assemble_route
from .route_optimizer import optimize_route

__all__ = [
    "assemble_route",
    "build_corridor",
    "does_segment_intersect_zone",
    "needs_corridor",
    "optimize_route",
    "plan_avoidance",
    "plan_corridor",
]
