"""
Unit tests for sea-state hazard zones and the seeded demo generator.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from passage.routes.geodesy import distance_nm
from passage.routes.models import AvoidancePolicy, Coordinate, HazardKind, Severity
from passage.weather.mock_zones import generate_mock_zones
from passage.weather.zones import (
    MIN_SAMPLED_ROUTE_NM,
    MarineSample,
    classify_sea_state,
    merge_nearby_zones,
    sample_points,
    summarize_route_weather,
    zone_from_sample,
    zones_from_samples,
)

NOW = datetime(2025, 3, 1, 6, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# §1 – Sampling and classification
# ---------------------------------------------------------------------------
class TestSampling:

    def test_interior_points_evenly_spaced(self):
        origin, destination = Coordinate(10.0, 60.0), Coordinate(10.0, 62.0)
        points = sample_points(origin, destination, 5)
        total = distance_nm(origin, destination)
        assert len(points) == 5
        for i, point in enumerate(points, start=1):
            assert distance_nm(origin, point) == pytest.approx(total * i / 6, rel=1e-6)

    def test_short_route_not_sampled(self):
        origin = Coordinate(25.0, 55.0)
        destination = Coordinate(25.0 + (MIN_SAMPLED_ROUTE_NM - 1) / 60.04, 55.0)
        assert sample_points(origin, destination, 5) == []

    @pytest.mark.parametrize(
        "wave,wind_wave,expected",
        [
            (1.0, 0.5, None),
            (2.5, 0.0, Severity.MODERATE),
            (1.0, 3.0, Severity.MODERATE),
            (4.0, 0.0, Severity.SEVERE),
        ],
        ids=["calm", "moderate-swell", "moderate-wind-sea", "severe"],
    )
    def test_classify_sea_state(self, wave, wind_wave, expected):
        assert classify_sea_state(wave, wind_wave) == expected


# ---------------------------------------------------------------------------
# §2 – Zone construction and merging
# ---------------------------------------------------------------------------
class TestZones:

    def test_severe_sample_zone(self):
        sample = MarineSample(point=Coordinate(25.5, 56.7), wave_height_m=4.4)
        zone = zone_from_sample(sample, NOW)
        assert zone.id == "weather-25.50-56.70"
        assert zone.kind == HazardKind.STORM
        assert zone.severity == Severity.SEVERE
        assert zone.avoidance == AvoidancePolicy.MANDATORY
        assert zone.radius_nm == 15.0
        assert zone.wind_speed_knots == 44.0
        assert zone.valid_to - zone.valid_from == timedelta(hours=24)
        assert zone.name == "High Seas Warning (4.4m waves)"

    def test_moderate_sample_zone(self):
        zone = zone_from_sample(MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=2.8), NOW)
        assert zone.kind == HazardKind.HIGH_WIND
        assert zone.avoidance == AvoidancePolicy.RECOMMENDED
        assert zone.radius_nm == 10.0
        assert zone.name == "Wave Advisory (2.8m)"

    def test_calm_sample_yields_nothing(self):
        assert zone_from_sample(MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=1.0), NOW) is None

    def test_overlapping_zones_merge_to_most_severe(self):
        a = zone_from_sample(MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=2.8), NOW)
        b = zone_from_sample(MarineSample(point=Coordinate(25.0, 57.2), wave_height_m=4.5), NOW)
        gap = distance_nm(a.center, b.center)
        assert gap < a.radius_nm + b.radius_nm

        merged = merge_nearby_zones([a, b])
        assert len(merged) == 1
        zone = merged[0]
        assert zone.id == a.id
        assert zone.severity == Severity.SEVERE
        assert zone.avoidance == AvoidancePolicy.MANDATORY
        assert zone.wave_height_m == 4.5
        assert zone.center.lat == pytest.approx(25.0)
        assert zone.center.lng == pytest.approx(57.1)
        assert zone.radius_nm == pytest.approx(max(
            distance_nm(zone.center, a.center) + a.radius_nm,
            distance_nm(zone.center, b.center) + b.radius_nm,
        ))

    @pytest.mark.parametrize(
        "radius_a,radius_b",
        [(10.0, 15.0), (40.0, 5.0), (5.0, 40.0), (12.0, 12.0)],
        ids=["second-larger", "first-dominates", "second-dominates", "equal"],
    )
    def test_merged_zone_contains_both_circles(self, radius_a, radius_b):
        a = replace(
            zone_from_sample(MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=4.5), NOW),
            radius_nm=radius_a,
        )
        b = replace(
            zone_from_sample(MarineSample(point=Coordinate(25.0, 57.2), wave_height_m=4.5), NOW),
            radius_nm=radius_b,
        )
        (zone,) = merge_nearby_zones([a, b])
        for member in (a, b):
            reach = distance_nm(zone.center, member.center) + member.radius_nm
            assert reach <= zone.radius_nm + 1e-9, (
                f"{member.id} reaches {reach:.2f} nm from the merged centre, "
                f"beyond its {zone.radius_nm:.2f} nm radius"
            )

    def test_distant_zones_kept_apart(self):
        a = zone_from_sample(MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=2.8), NOW)
        b = zone_from_sample(MarineSample(point=Coordinate(24.0, 59.0), wave_height_m=2.8), NOW)
        assert merge_nearby_zones([a, b]) == [a, b]

    def test_missing_samples_skipped(self):
        samples = [None, MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=3.0), None]
        zones = zones_from_samples(samples, NOW)
        assert [z.id for z in zones] == ["weather-25.00-57.00"]

    def test_summary(self):
        a = zone_from_sample(MarineSample(point=Coordinate(25.0, 57.0), wave_height_m=3.0), NOW)
        b = zone_from_sample(MarineSample(point=Coordinate(23.0, 60.0), wave_height_m=5.0), NOW)
        summary = summarize_route_weather([a, b])
        assert summary.overall_risk == "high"
        assert summary.max_wave_height_m == 5.0
        assert summary.avg_wave_height_m == pytest.approx(4.0)
        assert summary.to_dict()["hazardCount"] == 2
        assert summarize_route_weather([]).overall_risk == "low"


# ---------------------------------------------------------------------------
# §3 – Demo generator
# ---------------------------------------------------------------------------
class TestMockZones:

    ORIGIN = Coordinate(24.0, 58.0)
    DESTINATION = Coordinate(24.0, 60.0)

    def test_fixed_layout_without_seed(self):
        zones = generate_mock_zones(self.ORIGIN, self.DESTINATION, NOW)
        assert [z.id for z in zones] == ["storm-1", "wind-1"]
        storm, wind = zones
        assert storm.center.lat == pytest.approx(24.1)
        assert storm.center.lng == pytest.approx(58.9)
        assert storm.radius_nm == pytest.approx(0.2 * distance_nm(self.ORIGIN, self.DESTINATION))
        assert storm.is_valid_at(NOW)
        assert wind.severity == Severity.MODERATE
        assert wind.name == "Shamal Wind Advisory"

    def test_short_routes_get_fewer_zones(self):
        short = Coordinate(24.0, 58.0 + 45 / 54.85)  # ~45 nm east
        zones = generate_mock_zones(self.ORIGIN, short, NOW)
        assert [z.id for z in zones] == ["storm-1"]
        assert generate_mock_zones(self.ORIGIN, Coordinate(24.2, 58.0), NOW) == []

    def test_seed_is_reproducible(self):
        first = generate_mock_zones(self.ORIGIN, self.DESTINATION, NOW, seed=7)
        second = generate_mock_zones(self.ORIGIN, self.DESTINATION, NOW, seed=7)
        other = generate_mock_zones(self.ORIGIN, self.DESTINATION, NOW, seed=8)
        assert first == second
        assert first != other

    def test_seeded_jitter_is_bounded(self):
        fixed = generate_mock_zones(self.ORIGIN, self.DESTINATION, NOW)
        jittered = generate_mock_zones(self.ORIGIN, self.DESTINATION, NOW, seed=123)
        for a, b in zip(fixed, jittered):
            assert abs(a.center.lat - b.center.lat) <= 0.05 + 1e-9
            assert abs(a.center.lng - b.center.lng) <= 0.05 + 1e-9
