"""
Unit tests for single-waypoint hazard avoidance.
"""

from datetime import timedelta

import pytest

from passage.optimization.hazard_avoidance import (
    AVOIDANCE_LAND_NOTE,
    BUFFER_FACTOR,
    active_zones,
    avoidance_waypoint,
    does_segment_intersect_zone,
    flag_land_crossings,
    is_point_in_zone,
    plan_avoidance,
    zones_on_legs,
)
from passage.routes.geodesy import bearing_deg, destination_point, distance_nm
from passage.routes.models import AvoidancePolicy, Coordinate, Severity, Waypoint, WaypointKind

ORIGIN = Coordinate(10.0, 60.0)
DESTINATION = Coordinate(10.0, 62.0)


def _on_track(fraction):
    total = distance_nm(ORIGIN, DESTINATION)
    return destination_point(ORIGIN, total * fraction, bearing_deg(ORIGIN, DESTINATION))


# ---------------------------------------------------------------------------
# §1 – Geometry tests
# ---------------------------------------------------------------------------
class TestIntersection:

    def test_point_on_radius_is_inside(self, zone_factory):
        zone = zone_factory(center=ORIGIN, radius_nm=10.0)
        edge = destination_point(ORIGIN, 10.0 - 1e-9, 45.0)
        assert is_point_in_zone(edge, zone)
        assert not is_point_in_zone(destination_point(ORIGIN, 10.1, 45.0), zone)

    def test_zone_on_midpoint_intersects(self, zone_factory):
        zone = zone_factory(center=_on_track(0.5), radius_nm=25.0)
        assert does_segment_intersect_zone(ORIGIN, DESTINATION, zone)

    def test_distant_zone_does_not_intersect(self, zone_factory):
        zone = zone_factory(center=Coordinate(11.5, 61.0), radius_nm=20.0)
        assert not does_segment_intersect_zone(ORIGIN, DESTINATION, zone)

    def test_endpoint_inside_zone(self, zone_factory):
        zone = zone_factory(center=DESTINATION, radius_nm=5.0)
        assert does_segment_intersect_zone(ORIGIN, DESTINATION, zone)

    def test_sparse_sampling_can_miss_small_zone(self, zone_factory):
        """A 3 nm zone between samples is missed at 2 check points, caught at 40."""
        zone = zone_factory(center=_on_track(0.3), radius_nm=3.0)
        assert not does_segment_intersect_zone(ORIGIN, DESTINATION, zone, check_points=2)
        assert does_segment_intersect_zone(ORIGIN, DESTINATION, zone, check_points=40)


# ---------------------------------------------------------------------------
# §2 – Zone eligibility
# ---------------------------------------------------------------------------
class TestActiveZones:

    def test_optional_zones_never_active(self, zone_factory):
        zones = [
            zone_factory("a", avoidance=AvoidancePolicy.MANDATORY),
            zone_factory("b", avoidance=AvoidancePolicy.RECOMMENDED),
            zone_factory("c", avoidance=AvoidancePolicy.OPTIONAL),
        ]
        assert [z.id for z in active_zones(zones)] == ["a", "b"]

    def test_validity_window_is_half_open(self, zone_factory):
        zone = zone_factory()
        assert active_zones([zone], zone.valid_from) == [zone]
        assert active_zones([zone], zone.valid_to) == []
        assert active_zones([zone], zone.valid_from - timedelta(seconds=1)) == []

    def test_zones_on_any_leg_of_polyline(self, zone_factory):
        west = Coordinate(10.0, 58.0)
        points = [west, ORIGIN, DESTINATION]
        first_leg = zone_factory("first-leg", center=Coordinate(10.0, 59.0), radius_nm=10.0)
        second_leg = zone_factory("second-leg", center=_on_track(0.5), radius_nm=10.0)
        clear = zone_factory("clear", center=Coordinate(11.5, 59.0), radius_nm=10.0)
        ignored = zone_factory(
            "optional", center=Coordinate(10.0, 58.5), radius_nm=10.0, avoidance=AvoidancePolicy.OPTIONAL,
        )

        found = zones_on_legs(points, [second_leg, clear, ignored, first_leg])
        assert [z.id for z in found] == ["second-leg", "first-leg"]
        assert zones_on_legs([west, ORIGIN], [second_leg]) == []
        assert zones_on_legs([west], [first_leg]) == []


# ---------------------------------------------------------------------------
# §3 – Waypoint placement
# ---------------------------------------------------------------------------
class TestAvoidanceWaypoint:

    def test_waypoint_sits_at_buffered_radius(self, zone_factory):
        zone = zone_factory(center=_on_track(0.5), radius_nm=25.0)
        waypoint = avoidance_waypoint(ORIGIN, DESTINATION, zone)
        assert waypoint.kind == WaypointKind.WEATHER_AVOIDANCE
        assert waypoint.id == "avoid-zone-1"
        assert distance_nm(waypoint, zone.center) == pytest.approx(25.0 * BUFFER_FACTOR, rel=1e-6)

    def test_zone_left_of_track_pushes_waypoint_right(self, zone_factory):
        """Heading east with the zone to the north, the detour goes south."""
        zone = zone_factory(center=Coordinate(10.2, 61.0), radius_nm=20.0)
        waypoint = avoidance_waypoint(ORIGIN, DESTINATION, zone)
        assert waypoint.lat < 10.0

    def test_zone_right_of_track_pushes_waypoint_left(self, zone_factory):
        zone = zone_factory(center=Coordinate(9.8, 61.0), radius_nm=20.0)
        waypoint = avoidance_waypoint(ORIGIN, DESTINATION, zone)
        assert waypoint.lat > 10.0


# ---------------------------------------------------------------------------
# §4 – plan_avoidance
# ---------------------------------------------------------------------------
class TestPlanAvoidance:

    def test_single_severe_zone(self, zone_factory):
        zone = zone_factory(center=_on_track(0.5), radius_nm=25.0, wind_speed_knots=45.0)
        plan = plan_avoidance(ORIGIN, DESTINATION, [zone], speed_knots=10.0, fuel_rate_l_per_nm=35.0)

        assert plan.avoided_zones == (zone,)
        assert len(plan.waypoints) == 1
        opt = plan.optimizations[0]
        assert opt.id == "opt-avoid-zone-1"
        assert opt.safety_benefit == "Avoids dangerous conditions"
        assert opt.distance_change_nm > 0
        assert opt.time_change_hours == pytest.approx(opt.distance_change_nm / 10.0)
        assert opt.fuel_change_liters == pytest.approx(opt.distance_change_nm * 35.0)
        assert opt.affected_waypoints == ("avoid-zone-1",)
        assert "Mandatory avoidance required." in opt.reasoning
        assert "45 knot winds" in opt.reasoning

    def test_moderate_zone_benefit_text(self, zone_factory):
        zone = zone_factory(
            center=_on_track(0.5), radius_nm=10.0,
            severity=Severity.MODERATE, avoidance=AvoidancePolicy.RECOMMENDED,
        )
        plan = plan_avoidance(ORIGIN, DESTINATION, [zone], 10.0, 35.0)
        opt = plan.optimizations[0]
        assert opt.safety_benefit == "Reduces weather-related risks"
        assert "Recommended for crew safety" in opt.reasoning
        assert "high knot winds" in opt.reasoning

    def test_off_track_zone_ignored(self, zone_factory):
        zone = zone_factory(center=Coordinate(11.5, 61.0), radius_nm=20.0, severity=Severity.MODERATE)
        plan = plan_avoidance(ORIGIN, DESTINATION, [zone], 10.0, 35.0)
        assert plan.waypoints == ()
        assert plan.avoided_zones == ()

    def test_zones_handled_nearest_first(self, zone_factory):
        near = zone_factory("near", center=_on_track(0.25), radius_nm=10.0)
        far = zone_factory("far", center=_on_track(0.75), radius_nm=10.0)
        plan = plan_avoidance(ORIGIN, DESTINATION, [far, near], 10.0, 35.0)
        assert [z.id for z in plan.avoided_zones] == ["near", "far"]
        assert [w.id for w in plan.waypoints] == ["avoid-near", "avoid-far"]

    def test_zone_not_valid_at_departure_is_skipped(self, zone_factory):
        zone = zone_factory(center=_on_track(0.5), radius_nm=25.0)
        plan = plan_avoidance(
            ORIGIN, DESTINATION, [zone], 10.0, 35.0,
            departure_time=zone.valid_to + timedelta(hours=1),
        )
        assert plan.avoided_zones == ()

    def test_avoided_zones_subset_and_never_optional(self, zone_factory):
        zones = [
            zone_factory("opt", center=_on_track(0.5), radius_nm=25.0, avoidance=AvoidancePolicy.OPTIONAL),
            zone_factory("rec", center=_on_track(0.2), radius_nm=8.0, avoidance=AvoidancePolicy.RECOMMENDED),
        ]
        plan = plan_avoidance(ORIGIN, DESTINATION, zones, 10.0, 35.0)
        assert set(plan.avoided_zones) <= set(zones)
        assert all(z.avoidance != AvoidancePolicy.OPTIONAL for z in plan.avoided_zones)
        assert [z.id for z in plan.avoided_zones] == ["rec"]

    def test_zones_ordered_from_voyage_origin(self, zone_factory):
        """
        Two overlapping zones just past ``start``: ``p2`` is nearer the start,
        ``p1`` nearer the voyage origin further west. Detouring around ``p1``
        first drops the waypoint inside ``p2``, so both are avoided.
        """
        voyage_origin = Coordinate(10.0, 58.0)
        p1 = zone_factory("p1", center=Coordinate(10.333, 60.338), radius_nm=22.0)
        p2 = zone_factory("p2", center=Coordinate(10.0, 60.423), radius_nm=22.0)
        assert distance_nm(ORIGIN, p2.center) < distance_nm(ORIGIN, p1.center)
        assert distance_nm(voyage_origin, p1.center) < distance_nm(voyage_origin, p2.center)

        from_origin = plan_avoidance(ORIGIN, DESTINATION, [p2, p1], 10.0, 35.0, origin=voyage_origin)
        assert [z.id for z in from_origin.avoided_zones] == ["p1", "p2"]
        assert is_point_in_zone(from_origin.waypoints[0], p2)

        from_start = plan_avoidance(ORIGIN, DESTINATION, [p2, p1], 10.0, 35.0)
        assert from_start.avoided_zones[0].id == "p2"

    def test_open_water_detour_not_degraded(self, zone_factory):
        zone = zone_factory(center=_on_track(0.5), radius_nm=25.0)
        plan = plan_avoidance(ORIGIN, DESTINATION, [zone], 10.0, 35.0)
        assert not plan.degraded
        assert plan.waypoints[0].notes.startswith("Routing around storm")


# ---------------------------------------------------------------------------
# §5 – Land re-check of the detour
# ---------------------------------------------------------------------------
class TestFlagLandCrossings:

    START = Coordinate(25.9, 56.6)        # Gulf of Oman, east of Musandam
    DESTINATION = Coordinate(25.3, 57.0)

    @staticmethod
    def _waypoint(name, lat, lng):
        return Waypoint(
            lat=lat, lng=lng, id=f"avoid-{name}", kind=WaypointKind.WEATHER_AVOIDANCE,
            notes="Routing around storm: severe severity",
        )

    def test_no_waypoints(self):
        assert flag_land_crossings(self.START, self.DESTINATION, []) == ((), 0)

    def test_clear_detour_untouched(self):
        waypoints = [self._waypoint("sea", 25.6, 56.7)]
        flagged, crossings = flag_land_crossings(self.START, self.DESTINATION, waypoints)
        assert crossings == 0
        assert flagged == tuple(waypoints)

    def test_waypoints_on_crossing_legs_flagged(self):
        on_land = self._waypoint("musandam", 25.8, 56.2)
        beside = self._waypoint("beside", 25.5, 56.8)
        far = self._waypoint("far", 25.4, 56.9)

        flagged, crossings = flag_land_crossings(self.START, self.DESTINATION, [on_land, beside, far])
        assert crossings == 2, "start -> musandam and musandam -> beside cross land"
        assert [w.notes for w in flagged] == [
            AVOIDANCE_LAND_NOTE, AVOIDANCE_LAND_NOTE, far.notes,
        ]
        assert [w.id for w in flagged] == ["avoid-musandam", "avoid-beside", "avoid-far"]
