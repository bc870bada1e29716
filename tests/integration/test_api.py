"""
Integration tests for the PASSAGE API.

Fixtures (client, api_payload) provided by tests/conftest.py. The default
test environment has no Redis, no rate limiting and no weather source.
"""
from datetime import datetime, timezone

import pytest

from api.config import settings
from api.weather_service import WeatherFetch
from passage import __version__
from passage.routes.models import (
    AvoidancePolicy,
    Coordinate,
    HazardKind,
    HazardZone,
    Severity,
    WeatherStatus,
)


def _storm_payload(**overrides):
    zone = {
        "id": "storm-1",
        "kind": "storm",
        "severity": "severe",
        "center": {"lat": 10.0, "lng": 61.0},
        "radiusNm": 25.0,
        "validFrom": "2020-01-01T00:00:00Z",
        "validTo": "2100-01-01T00:00:00Z",
        "avoidance": "mandatory",
        "name": "Cyclone Test",
    }
    zone.update(overrides)
    return zone


# ============================================================================
# System Endpoint Tests
# ============================================================================

def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "PASSAGE API"
    assert data["version"] == __version__
    assert data["status"] == "operational"
    assert data["endpoints"]["optimize"] == "/api/routes/optimize"


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["timestamp"].endswith("Z")
    assert set(data["components"]) == {"land_mask", "redis", "weather"}
    assert data["components"]["land_mask"]["status"] == "healthy"


def test_liveness(client):
    response = client.get("/api/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_detailed_status(client):
    data = client.get("/api/status").json()
    assert data["config"]["weather_source"] == "none"
    assert "marine_weather" in data["circuit_breakers"]


def test_rate_limit_status_lists_throttled_routes(client):
    rate_limit = client.get("/api/status").json()["rate_limit"]
    assert rate_limit["routes"] == {
        "/api/routes/optimize": settings.optimize_rate_limit,
        "/api/routes/weather": settings.optimize_rate_limit,
    }
    assert "default_per_minute" not in rate_limit


def test_request_id_header_echoed(client):
    response = client.get("/api/health/live", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


# ============================================================================
# Route Optimization Tests
# ============================================================================

def test_optimize_clear_weather(client, api_payload):
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    result = body["result"]
    assert result["recommendation"] == "use_original"
    assert result["confidence"] == 95
    assert result["directRoute"]["origin"]["name"] == "Point A"
    assert result["directRoute"]["waypoints"][-1]["kind"] == "destination"
    assert result["fuelRateSource"] == "table"


def test_optimize_avoids_storm(client, api_payload):
    api_payload["hazardZones"] = [_storm_payload()]
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["recommendation"] == "use_optimized"
    assert [z["id"] for z in result["avoidedZones"]] == ["storm-1"]
    assert result["summary"]["distanceDeltaNm"] < 0
    assert result["optimizedRoute"]["routeKind"] == "weather_routed"
    kinds = [w["kind"] for w in result["optimizedRoute"]["waypoints"]]
    assert kinds.count("weather_avoidance") == 1


def test_optimize_records_metrics(client, api_payload):
    client.post("/api/routes/optimize", json=api_payload)
    text = client.get("/api/metrics").text
    assert 'passage_optimizations_total{recommendation="use_original"} 1' in text


@pytest.mark.parametrize(
    "section,field,value",
    [
        ("origin", "lat", 95.0),
        ("destination", "lng", -181.0),
    ],
    ids=["origin-lat", "destination-lng"],
)
def test_out_of_range_coordinate_is_400(client, api_payload, section, field, value):
    api_payload[section][field] = value
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["field"] == section
    assert section in detail["message"]


def test_zero_speed_is_400(client, api_payload):
    api_payload["vessel"]["speedKnots"] = 0
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "vessel.speedKnots"


def test_missing_vessel_is_422(client, api_payload):
    del api_payload["vessel"]
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 422


def test_inverted_zone_window_is_422(client, api_payload):
    api_payload["hazardZones"] = [
        _storm_payload(validFrom="2025-03-02T00:00:00Z", validTo="2025-03-01T00:00:00Z")
    ]
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 422


def test_duplicate_zone_ids_are_422(client, api_payload):
    api_payload["hazardZones"] = [_storm_payload(), _storm_payload()]
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 422


def test_mock_weather_source(client, api_payload, monkeypatch):
    monkeypatch.setattr(settings, "weather_source", "mock")
    del api_payload["hazardZones"]
    response = client.post("/api/routes/optimize", json=api_payload)
    assert response.status_code == 200
    result = response.json()["result"]
    assert result["weatherStatus"]["source"] == "mock"
    assert "storm-1" in [z["id"] for z in result["avoidedZones"]]


def test_no_weather_source_means_no_zones(client, api_payload):
    del api_payload["hazardZones"]
    result = client.post("/api/routes/optimize", json=api_payload).json()["result"]
    assert result["avoidedZones"] == []
    assert result["weatherStatus"] is None


# ============================================================================
# Route Weather Tests
# ============================================================================

def test_route_weather(client, monkeypatch):
    zone = HazardZone(
        id="weather-10.00-61.00",
        kind=HazardKind.STORM,
        severity=Severity.SEVERE,
        center=Coordinate(10.0, 61.0),
        radius_nm=15.0,
        valid_from=datetime(2025, 3, 1, tzinfo=timezone.utc),
        valid_to=datetime(2025, 3, 2, tzinfo=timezone.utc),
        avoidance=AvoidancePolicy.MANDATORY,
        wave_height_m=4.8,
    )
    status = WeatherStatus("live", requested_samples=5, failed_samples=1)

    def fake_fetch(origin, destination, observed_at):
        return WeatherFetch(zones=[zone], status=status)

    monkeypatch.setattr("api.routers.optimization.fetch_hazard_zones", fake_fetch)
    response = client.post(
        "/api/routes/weather",
        json={"origin": {"lat": 10.0, "lng": 60.0}, "destination": {"lat": 10.0, "lng": 62.0}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["zones"][0]["id"] == "weather-10.00-61.00"
    assert data["summary"]["overallRisk"] == "high"
    assert data["status"]["failedSamples"] == 1


def test_route_weather_rejects_bad_position(client):
    response = client.post(
        "/api/routes/weather",
        json={"origin": {"lat": 10.0, "lng": 200.0}, "destination": {"lat": 10.0, "lng": 62.0}},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["field"] == "origin"
