"""
Fetch Orchestrator for Superior Surf

Fans out one short-lived task per provider call, waits for every task to
settle, and hands the surviving observations to the blender.

PROVIDERS PER REQUEST:
- NDBC wave buoys: up to 2 nearest within the search radius
- NDBC weather stations: up to 3 nearest within the search radius
- NWS marine forecast (GLFLS bulletin, zone forecast fallback)
- Windy GFS + GFS Wave (only with WINDY_API_KEY, rate limited)
- NOAA CO-OPS water temperature and water level (nearest station)

Each call gets its own timeout; a failure or timeout contributes nothing
and never cancels its siblings. The Windy rate limiter is the only state
that survives between requests, and this orchestrator is its sole owner.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx

from superior_surf.bucketizer import ForecastBucketizer, buoy_context_note
from superior_surf.conditions import ConditionsAssembler
from superior_surf.config import Settings
from superior_surf.models import ForecastBucket, Observation, Quantity
from superior_surf.providers.marine_forecast import MarineForecastProvider
from superior_surf.providers.ndbc import NDBCProvider
from superior_surf.providers.tides import TidesProvider, WaterLevel
from superior_surf.providers.windy import WindyProvider
from superior_surf.resilience import RateLimiter, settle
from superior_surf.spots import SpotConfig, get_spot
from superior_surf.stations import (
    MAX_WAVE_BUOYS,
    MAX_WEATHER_STATIONS,
    WATER_STATIONS,
    WAVE_BUOYS,
    WEATHER_STATIONS,
    nearest_stations,
)

logger = logging.getLogger(__name__)


def nearest_step(observations: List[Observation], now: datetime) -> List[Observation]:
    """For each source, keep only the samples at the time step closest to now."""
    by_source: Dict[str, datetime] = {}
    for o in observations:
        best = by_source.get(o.source)
        if best is None or abs(o.timestamp - now) < abs(best - now):
            by_source[o.source] = o.timestamp
    return [o for o in observations if o.timestamp == by_source[o.source]]


class FetchOrchestrator:
    """
    Concurrent, timeout-bounded, rate-limited fetching for one spot at a time.

    Pass an httpx.AsyncClient to share a connection pool (or a MockTransport
    in tests); otherwise a client is opened per request.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        assembler: Optional[ConditionsAssembler] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.client = client
        self.assembler = assembler or ConditionsAssembler()
        self.bucketizer = ForecastBucketizer(self.assembler)
        self.windy_limiter = RateLimiter(self.settings.windy_min_interval, name="Windy")
        logger.info(f"[FetchOrchestrator] Initialized (windy={'on' if self.settings.windy_api_key else 'off'}, "
                    f"radius={self.settings.station_radius_miles:.0f}mi)")

    @asynccontextmanager
    async def _session(self, timeout: float) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            yield client

    # ------------------------------------------------------------------
    # Provider calls, each returning a plain list of observations
    # ------------------------------------------------------------------

    async def _buoy(self, ndbc: NDBCProvider, station_id: str, distance: float, now: datetime) -> List[Observation]:
        reading = await ndbc.fetch_buoy(station_id, distance_miles=distance, now=now)
        return reading.observations() if reading else []

    async def _weather_station(
        self, ndbc: NDBCProvider, station_id: str, distance: float, now: datetime
    ) -> List[Observation]:
        reading = await ndbc.fetch_weather_station(station_id, distance_miles=distance, now=now)
        return reading.observations() if reading else []

    async def _marine(
        self, marine: MarineForecastProvider, spot: SpotConfig, now: datetime, current: bool
    ) -> List[Observation]:
        periods = await marine.fetch_periods(spot.latitude, spot.longitude, now=now)
        if not periods:
            return []
        if current:
            periods = [min(periods, key=lambda p: abs(p.timestamp - now))]
        return [o for p in periods for o in p.observations()]

    def _sensor_tasks(self, client: httpx.AsyncClient, spot: SpotConfig, now: datetime):
        """(name, coroutine) pairs for every buoy, station and water-temperature call."""
        ndbc = NDBCProvider(client)
        tides = TidesProvider(client, tz=self.settings.timezone)
        radius = self.settings.station_radius_miles
        tasks = []

        for station, distance in nearest_stations(spot.latitude, spot.longitude, WAVE_BUOYS, MAX_WAVE_BUOYS, radius):
            tasks.append((f"buoy {station.id}", self._buoy(ndbc, station.id, distance, now)))

        for station, distance in nearest_stations(
            spot.latitude, spot.longitude, WEATHER_STATIONS, MAX_WEATHER_STATIONS, radius
        ):
            tasks.append((f"station {station.id}", self._weather_station(ndbc, station.id, distance, now)))

        for station, distance in nearest_stations(spot.latitude, spot.longitude, WATER_STATIONS, 1, radius):
            tasks.append((f"water temp {station.id}",
                          tides.fetch_water_temperature(station.id, distance_miles=distance, now=now)))

        return tasks

    async def _run(self, tasks, timeout: float) -> List[Observation]:
        """Fan out, wait for everything to settle, flatten."""
        if not tasks:
            return []
        results = await asyncio.gather(*(settle(name, coro, timeout, []) for name, coro in tasks))
        for (name, _), result in zip(tasks, results):
            logger.debug(f"[FetchOrchestrator] {name}: {len(result)} observations")
        return [o for result in results for o in result]

    async def _water_level(self, client: httpx.AsyncClient, spot: SpotConfig, now: datetime,
                           timeout: float) -> Optional[WaterLevel]:
        nearest = nearest_stations(spot.latitude, spot.longitude, WATER_STATIONS, 1,
                                   self.settings.station_radius_miles)
        if not nearest:
            return None
        tides = TidesProvider(client, tz=self.settings.timezone)
        return await settle(f"water level {nearest[0][0].id}",
                            tides.fetch_water_level(nearest[0][0].id, now=now), timeout, None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def collect_current(
        self, spot: SpotConfig, now: Optional[datetime] = None
    ) -> Tuple[List[Observation], Optional[WaterLevel]]:
        """All current-conditions observations for a spot, plus the latest water level."""
        now = now or datetime.now(timezone.utc)
        timeout = self.settings.request_timeout

        async with self._session(timeout) as client:
            tasks = self._sensor_tasks(client, spot, now)

            marine = MarineForecastProvider(client, tz=self.settings.timezone)
            tasks.append(("marine forecast", self._marine(marine, spot, now, current=True)))

            if self.settings.windy_api_key:
                windy = WindyProvider(client, self.settings.windy_api_key, self.windy_limiter)
                tasks.append(("windy", self._windy_current(windy, spot, now)))
            else:
                logger.debug("[FetchOrchestrator] Skipping Windy (no API key)")

            observations, water_level = await asyncio.gather(
                self._run(tasks, timeout),
                self._water_level(client, spot, now, timeout),
            )

        logger.info(f"[FetchOrchestrator] {spot.id}: {len(observations)} current observations "
                    f"from {len({o.source for o in observations})} sources")
        return observations, water_level

    async def _windy_current(self, windy: WindyProvider, spot: SpotConfig, now: datetime) -> List[Observation]:
        return nearest_step(await windy.fetch(spot.latitude, spot.longitude), now)

    async def fetch_current(self, spot_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Current-conditions record for a spot. Never raises for provider trouble."""
        spot = get_spot(spot_id)
        now = now or datetime.now(timezone.utc)
        observations, water_level = await self.collect_current(spot, now)

        assessment = self.assembler.assess(
            observations,
            spot,
            timestamp=now,
            water_level=water_level.to_dict() if water_level else None,
        )
        logger.info(f"[FetchOrchestrator] {spot.id}: {assessment.likelihood.value} "
                    f"(rating {assessment.record['rating']})")
        return assessment.record

    async def forecast_buckets(
        self, spot_id: str, hours: int = 168, now: Optional[datetime] = None
    ) -> List[ForecastBucket]:
        """Per-timestamp buckets for the next `hours` hours."""
        spot = get_spot(spot_id)
        now = now or datetime.now(timezone.utc)
        timeout = self.settings.forecast_timeout

        async with self._session(timeout) as client:
            sensor_tasks = self._sensor_tasks(client, spot, now)

            marine = MarineForecastProvider(client, tz=self.settings.timezone)
            forecast_tasks = [("marine forecast", self._marine(marine, spot, now, current=False))]

            if self.settings.windy_api_key:
                windy = WindyProvider(client, self.settings.windy_api_key, self.windy_limiter)
                forecast_tasks.append((
                    "windy forecast",
                    windy.fetch(spot.latitude, spot.longitude, min_interval=self.settings.windy_forecast_interval),
                ))

            sensors, forecast = await asyncio.gather(
                self._run(sensor_tasks, timeout),
                self._run(forecast_tasks, timeout),
            )

        samples = self.bucketizer.window(forecast, now, hours)

        # Water temperature changes slowly: the current reading is assigned to every bucket
        water = [o for o in sensors if o.quantity == Quantity.WATER_TEMP]
        context = buoy_context_note(sensors)

        buckets = self.bucketizer.bucketize(
            samples + [replace(o, timestamp=ts) for ts in sorted({s.timestamp for s in samples}) for o in water],
            spot,
            extra_notes=[context] if context else [],
        )
        logger.info(f"[FetchOrchestrator] {spot.id}: {len(buckets)} forecast buckets over {hours}h")
        return buckets

    async def fetch_forecast(
        self, spot_id: str, hours: int = 168, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """Ordered forecast records, same shape as the current-conditions record."""
        return [b.to_dict() for b in await self.forecast_buckets(spot_id, hours, now)]

