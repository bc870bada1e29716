"""
Live hazard zones from the Open-Meteo marine API.

Samples evenly spaced points along the great circle, fetches them in
parallel (one request per point, each with its own timeout), then joins
the results in sample order. A failed sample is logged and skipped; it
never aborts the others. The counts of requested and failed samples are
returned so the optimizer can lower its confidence.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from api.resilience import CircuitBreaker, CircuitOpenError, marine_weather_breaker, with_retry
from passage.config import settings as core_settings
from passage.routes.models import Coordinate, HazardZone, WeatherStatus
from passage.weather.zones import MarineSample, sample_points, zones_from_samples

logger = logging.getLogger(__name__)

HOURLY_FIELDS = (
    "wave_height,wave_direction,wave_period,"
    "wind_wave_height,swell_wave_height,swell_wave_direction"
)

FETCH_ERRORS = (requests.RequestException, CircuitOpenError, KeyError, IndexError, TypeError, ValueError)


@dataclass
class WeatherFetch:
    zones: List[HazardZone] = field(default_factory=list)
    status: WeatherStatus = field(default_factory=lambda: WeatherStatus(source="live"))


def _first(hourly: Dict[str, Any], key: str) -> float:
    """Current-hour value; the feed uses null for missing data."""
    values = hourly.get(key) or []
    return float(values[0]) if values and values[0] is not None else 0.0


def parse_marine_response(point: Coordinate, payload: Dict[str, Any]) -> MarineSample:
    hourly = payload["hourly"]
    return MarineSample(
        point=point,
        wave_height_m=_first(hourly, "wave_height"),
        wave_direction_deg=_first(hourly, "wave_direction"),
        wave_period_s=_first(hourly, "wave_period"),
        wind_wave_height_m=_first(hourly, "wind_wave_height"),
        swell_height_m=_first(hourly, "swell_wave_height"),
        swell_direction_deg=_first(hourly, "swell_wave_direction"),
    )


class MarineWeatherClient:
    """Thin requests-based client for one point of marine conditions."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        breaker: Optional[CircuitBreaker] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url or core_settings.marine_api_url
        self.timeout_s = timeout_s or core_settings.weather_timeout_s
        self.breaker = breaker or marine_weather_breaker
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": core_settings.weather_user_agent,
            "Accept": "application/json",
        })

    @with_retry(
        max_attempts=core_settings.weather_retry_attempts,
        exceptions=(requests.ConnectionError, requests.Timeout),
    )
    def _get_json(self, params: Dict[str, str]) -> Dict[str, Any]:
        response = self.session.get(self.base_url, params=params, timeout=self.timeout_s)
        response.raise_for_status()
        return response.json()

    def fetch_sample(self, point: Coordinate) -> MarineSample:
        params = {
            "latitude": f"{point.lat:.4f}",
            "longitude": f"{point.lng:.4f}",
            "hourly": HOURLY_FIELDS,
            "forecast_days": "1",
        }
        payload = self.breaker.call(self._get_json, params)
        return parse_marine_response(point, payload)

    def close(self):
        self.session.close()

    def __enter__(self) -> "MarineWeatherClient":
        return self

    def __exit__(self, *exc_info):
        self.close()


def fetch_hazard_zones(
    origin: Coordinate,
    destination: Coordinate,
    observed_at: datetime,
    client: Optional[MarineWeatherClient] = None,
    sample_count: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> WeatherFetch:
    """
    Fan out one fetch per sample point and fan the results back in.

    Args:
        origin: Route start
        destination: Route end
        observed_at: Start of each zone's validity window
        client: Marine client; when omitted a fresh one is opened and closed
            around this call
        sample_count: Points to sample (defaults to WEATHER_SAMPLE_POINTS)
        max_workers: Thread pool size (defaults to WEATHER_MAX_WORKERS)

    Returns:
        WeatherFetch with merged zones and sample counts; ``available`` is
        False when every sample failed or the breaker was already open
    """
    points = sample_points(origin, destination, sample_count or core_settings.weather_sample_points)
    if not points:
        return WeatherFetch(status=WeatherStatus(source="live", available=True))

    if client is not None:
        return _fan_out(client, points, observed_at, max_workers)
    with MarineWeatherClient() as owned:
        return _fan_out(owned, points, observed_at, max_workers)


def _fan_out(
    client: MarineWeatherClient,
    points: List[Coordinate],
    observed_at: datetime,
    max_workers: Optional[int],
) -> WeatherFetch:
    if client.breaker.is_open:
        logger.warning("Marine weather breaker open; assuming clear weather")
        return WeatherFetch(status=WeatherStatus(
            source="live", available=False,
            requested_samples=len(points), failed_samples=len(points),
        ))

    workers = min(len(points), max_workers or core_settings.weather_max_workers)
    samples: List[Optional[MarineSample]] = []
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="marine-wx") as pool:
        futures = [pool.submit(client.fetch_sample, point) for point in points]
        for point, future in zip(points, futures):
            try:
                samples.append(future.result())
            except FETCH_ERRORS as e:
                logger.warning(
                    f"Marine weather sample ({point.lat:.3f}, {point.lng:.3f}) failed: "
                    f"{type(e).__name__}: {e}"
                )
                samples.append(None)

    failed = sum(1 for s in samples if s is None)
    zones = zones_from_samples(samples, observed_at)
    logger.info(
        f"Marine weather: {len(points) - failed}/{len(points)} samples, {len(zones)} hazard zones"
    )
    return WeatherFetch(
        zones=zones,
        status=WeatherStatus(
            source="live",
            available=failed < len(points),
            requested_samples=len(points),
            failed_samples=failed,
        ),
    )
