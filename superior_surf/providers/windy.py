"""
Windy Point Forecast Provider for Superior Surf

Queries the Windy point-forecast API twice per spot: once against the GFS
atmospheric model for wind/temperature, once against GFS Wave for waves.
Both answers are parallel arrays keyed by a shared `ts` array:

    {"ts": [1697500800000, ...],
     "units": {...},
     "wind_u-surface": [...], "wind_v-surface": [...],
     "temp-surface": [...]}

    {"ts": [...], "waves_height-surface": [...],
     "waves_period-surface": [...], "waves_direction-surface": [...]}

Wind speed is the magnitude of the u/v vector (m/s -> mph), direction the
meteorological "from" angle of that vector. Heights are meters -> feet.

Windy throttles aggressively. Calls wait on the orchestrator's RateLimiter
and a 429 raises RateLimitedError so the whole provider is dropped for the
cycle (never retried inside the request).
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from superior_surf.compass import degrees_to_compass, vector_to_degrees
from superior_surf.models import Observation, Quantity, SourceKind
from superior_surf.resilience import RateLimitedError, RateLimiter

logger = logging.getLogger(__name__)

MS_TO_MPH = 2.23694
METERS_TO_FEET = 3.28084

WIND_MODEL = "gfs"
WAVE_MODEL = "gfsWave"
WIND_SOURCE = "windy-gfs"
WAVE_SOURCE = "windy-gfsWave"

# Windy stamps in milliseconds; anything below this is seconds
_MS_THRESHOLD = 100_000_000_000


def _to_datetime(stamp: Any) -> Optional[datetime]:
    try:
        value = float(stamp)
    except (TypeError, ValueError):
        return None
    if value > _MS_THRESHOLD:
        value /= 1000.0
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _at(series: Optional[List[Any]], i: int) -> Optional[float]:
    if not series or i >= len(series) or series[i] is None:
        return None
    try:
        value = float(series[i])
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def _obs(quantity, value, source, ts, label=None) -> Observation:
    return Observation(
        quantity=quantity,
        value=value,
        source=source,
        confidence=SourceKind.GRIDDED_MODEL.confidence,
        timestamp=ts,
        kind=SourceKind.GRIDDED_MODEL,
        label=label,
    )


def parse_windy_wind(payload: Dict[str, Any], source: str = WIND_SOURCE) -> List[Observation]:
    """Wind speed, direction and air temperature for every time step."""
    if not isinstance(payload, dict):
        return []

    stamps = payload.get("ts") or []
    u_series = payload.get("wind_u-surface")
    v_series = payload.get("wind_v-surface")
    temp_series = payload.get("temp-surface")

    if not stamps or not u_series or not v_series:
        logger.warning("[parse_windy_wind] Response missing ts or wind components")
        return []

    obs = []
    for i, stamp in enumerate(stamps):
        ts = _to_datetime(stamp)
        if ts is None:
            continue

        u, v = _at(u_series, i), _at(v_series, i)
        if u is not None and v is not None:
            degrees = vector_to_degrees(u, v)
            obs.append(_obs(Quantity.WIND_SPEED, math.hypot(u, v) * MS_TO_MPH, source, ts))
            obs.append(_obs(Quantity.WIND_DIRECTION, degrees, source, ts, degrees_to_compass(degrees)))

        kelvin = _at(temp_series, i)
        if kelvin is not None:
            obs.append(_obs(Quantity.AIR_TEMP, (kelvin - 273.15) * 9 / 5 + 32, source, ts))

    logger.debug(f"[parse_windy_wind] {len(stamps)} steps -> {len(obs)} observations")
    return obs


def parse_windy_waves(payload: Dict[str, Any], source: str = WAVE_SOURCE) -> List[Observation]:
    """Wave height, period and direction for every time step."""
    if not isinstance(payload, dict):
        return []

    stamps = payload.get("ts") or []
    heights = payload.get("waves_height-surface")
    if not stamps or not heights:
        logger.warning("[parse_windy_waves] Response missing ts or wave heights")
        return []

    periods = payload.get("waves_period-surface")
    directions = payload.get("waves_direction-surface")

    obs = []
    for i, stamp in enumerate(stamps):
        ts = _to_datetime(stamp)
        if ts is None:
            continue

        height = _at(heights, i)
        if height is not None and height >= 0:
            obs.append(_obs(Quantity.WAVE_HEIGHT, height * METERS_TO_FEET, source, ts))

        period = _at(periods, i)
        if period is not None and period > 0:
            obs.append(_obs(Quantity.WAVE_PERIOD, period, source, ts))

        direction = _at(directions, i)
        if direction is not None:
            obs.append(_obs(Quantity.WAVE_DIRECTION, direction, source, ts, degrees_to_compass(direction)))

    logger.debug(f"[parse_windy_waves] {len(stamps)} steps -> {len(obs)} observations")
    return obs


class WindyProvider:
    """Provider for the Windy point-forecast v2 API (GFS + GFS Wave)."""

    API_URL = "https://api.windy.com/api/point-forecast/v2"

    def __init__(self, client: httpx.AsyncClient, api_key: str, rate_limiter: RateLimiter):
        self.client = client
        self.api_key = api_key
        self.rate_limiter = rate_limiter

    async def _post(self, body: Dict[str, Any], min_interval: Optional[float] = None) -> Dict[str, Any]:
        await self.rate_limiter.wait(min_interval)
        resp = await self.client.post(self.API_URL, json={**body, "key": self.api_key})
        if resp.status_code == 429:
            raise RateLimitedError("Windy")
        resp.raise_for_status()
        return resp.json()

    async def fetch(
        self, latitude: float, longitude: float, min_interval: Optional[float] = None
    ) -> List[Observation]:
        """Every wind and wave time step the two models return for the point."""
        logger.info(f"[WindyProvider] Fetching point forecast for {latitude:.3f}, {longitude:.3f}...")
        point = {"lat": latitude, "lon": longitude, "levels": ["surface"]}

        wind = await self._post(
            {**point, "model": WIND_MODEL, "parameters": ["wind", "temp", "pressure"]}, min_interval
        )
        waves = await self._post(
            {**point, "model": WAVE_MODEL, "parameters": ["waves"]}, min_interval
        )

        obs = parse_windy_wind(wind) + parse_windy_waves(waves)
        logger.info(f"[WindyProvider] Retrieved {len(obs)} observations")
        return obs
