"""
Hazard zones derived from sampled marine conditions.

Severity follows wave height on the Douglas sea scale: 4.0 m and above is
severe (very rough), 2.5 m and above is moderate, anything calmer does not
produce a zone. Overlapping zones along a track are merged so the
avoidance step sees one circle per weather system.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from passage.routes.geodesy import bearing_deg, destination_point, distance_nm
from passage.routes.models import (
    AvoidancePolicy,
    Coordinate,
    HazardKind,
    HazardZone,
    Severity,
)

logger = logging.getLogger(__name__)

SEVERE_WAVE_M = 4.0
MODERATE_WAVE_M = 2.5
SEVERE_RADIUS_NM = 15.0
MODERATE_RADIUS_NM = 10.0
ZONE_VALIDITY_HOURS = 24
MIN_SAMPLED_ROUTE_NM = 20.0

_SEVERITY_RANK = {Severity.ADVISORY: 0, Severity.MODERATE: 1, Severity.SEVERE: 2}


@dataclass(frozen=True)
class MarineSample:
    """Conditions at one point for the current forecast hour."""
    point: Coordinate
    wave_height_m: float = 0.0
    wave_direction_deg: float = 0.0
    wave_period_s: float = 0.0
    wind_wave_height_m: float = 0.0
    swell_height_m: float = 0.0
    swell_direction_deg: float = 0.0


@dataclass(frozen=True)
class RouteWeatherSummary:
    max_wave_height_m: float
    avg_wave_height_m: float
    overall_risk: str  # low | medium | high
    hazard_count: int

    def to_dict(self) -> dict:
        return {
            "maxWaveHeight": self.max_wave_height_m,
            "avgWaveHeight": self.avg_wave_height_m,
            "overallRisk": self.overall_risk,
            "hazardCount": self.hazard_count,
        }


def sample_points(origin: Coordinate, destination: Coordinate, count: int) -> List[Coordinate]:
    """
    Interior points at i / (count + 1) along the great circle.

    Returns an empty list for tracks shorter than MIN_SAMPLED_ROUTE_NM.
    """
    total = distance_nm(origin, destination)
    if total < MIN_SAMPLED_ROUTE_NM:
        return []
    bearing = bearing_deg(origin, destination)
    return [
        destination_point(origin, total * i / (count + 1), bearing)
        for i in range(1, count + 1)
    ]


def classify_sea_state(wave_height_m: float, wind_wave_height_m: float) -> Optional[Severity]:
    """Severity of the sea state, or None when it is too calm to matter."""
    height = max(wave_height_m, wind_wave_height_m)
    if height >= SEVERE_WAVE_M:
        return Severity.SEVERE
    if height >= MODERATE_WAVE_M:
        return Severity.MODERATE
    return None


def avoidance_for(severity: Severity) -> AvoidancePolicy:
    if severity == Severity.SEVERE:
        return AvoidancePolicy.MANDATORY
    if severity == Severity.MODERATE:
        return AvoidancePolicy.RECOMMENDED
    return AvoidancePolicy.OPTIONAL


def zone_from_sample(sample: MarineSample, observed_at: datetime) -> Optional[HazardZone]:
    """Build a zone around a rough sample; None when seas are below moderate."""
    severity = classify_sea_state(sample.wave_height_m, sample.wind_wave_height_m)
    if severity is None:
        return None

    severe = severity == Severity.SEVERE
    wave = sample.wave_height_m
    return HazardZone(
        id=f"weather-{sample.point.lat:.2f}-{sample.point.lng:.2f}",
        kind=HazardKind.STORM if severe else HazardKind.HIGH_WIND,
        severity=severity,
        center=sample.point,
        radius_nm=SEVERE_RADIUS_NM if severe else MODERATE_RADIUS_NM,
        # Rough estimate; the marine feed carries no wind
        wind_speed_knots=float(round(wave * 10)),
        wave_height_m=wave,
        valid_from=observed_at,
        valid_to=observed_at + timedelta(hours=ZONE_VALIDITY_HOURS),
        avoidance=avoidance_for(severity),
        name=(
            f"High Seas Warning ({wave:.1f}m waves)" if severe
            else f"Wave Advisory ({wave:.1f}m)"
        ),
    )


def zones_from_samples(samples: Sequence[Optional[MarineSample]], observed_at: datetime) -> List[HazardZone]:
    """Zones for every rough sample (missing samples skipped), merged."""
    zones = []
    for sample in samples:
        if sample is None:
            continue
        zone = zone_from_sample(sample, observed_at)
        if zone is not None:
            zones.append(zone)
    return merge_nearby_zones(zones)


def merge_nearby_zones(zones: Sequence[HazardZone]) -> List[HazardZone]:
    """
    Fold overlapping zones into the first zone of each overlapping group.

    The merged zone takes the more severe member's kind, name and policy
    and moves its centre to the midpoint of the two centres. Its radius is
    then the smallest one, about that new centre, that still contains both
    original circles.
    """
    if len(zones) <= 1:
        return list(zones)

    merged: List[HazardZone] = []
    used = set()

    for i, first in enumerate(zones):
        if i in used:
            continue
        zone = first
        for j in range(i + 1, len(zones)):
            if j in used:
                continue
            other = zones[j]
            gap = distance_nm(zone.center, other.center)
            if gap >= zone.radius_nm + other.radius_nm:
                continue

            if _SEVERITY_RANK[other.severity] > _SEVERITY_RANK[zone.severity]:
                zone = replace(
                    zone,
                    severity=other.severity,
                    kind=other.kind,
                    name=other.name,
                    avoidance=other.avoidance,
                )
            center = Coordinate(
                lat=(zone.center.lat + other.center.lat) / 2,
                lng=(zone.center.lng + other.center.lng) / 2,
            )
            zone = replace(
                zone,
                wave_height_m=max(zone.wave_height_m or 0.0, other.wave_height_m or 0.0),
                radius_nm=max(
                    distance_nm(center, zone.center) + zone.radius_nm,
                    distance_nm(center, other.center) + other.radius_nm,
                ),
                center=center,
            )
            used.add(j)
            logger.debug(f"Merged zone {other.id} into {zone.id}")
        merged.append(zone)

    return merged


def summarize_route_weather(zones: Sequence[HazardZone]) -> RouteWeatherSummary:
    waves = [z.wave_height_m or 0.0 for z in zones]
    if any(z.severity == Severity.SEVERE for z in zones):
        risk = "high"
    elif any(z.severity == Severity.MODERATE for z in zones):
        risk = "medium"
    else:
        risk = "low"
    return RouteWeatherSummary(
        max_wave_height_m=max(waves) if waves else 0.0,
        avg_wave_height_m=sum(waves) / len(waves) if waves else 0.0,
        overall_risk=risk,
        hazard_count=len(zones),
    )
