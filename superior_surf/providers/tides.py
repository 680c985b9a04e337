"""
NOAA CO-OPS Provider for Superior Surf

Water temperature and water level from the Lake Superior water stations
(9099064 Duluth, 9099090 Grand Marais) via the tidesandcurrents datagetter.

Responses look like {"metadata": {...}, "data": [{"t": "2025-10-17 14:06", "v": "47.1"}, ...]}
or {"error": {"message": "No data was found..."}}. Times are local standard/daylight
time (time_zone=lst_ldt); values are Fahrenheit and feet (units=english, IGLD datum).
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import httpx

from superior_surf.config import USER_AGENT
from superior_surf.models import Observation, Quantity, SourceKind

logger = logging.getLogger(__name__)

TREND_THRESHOLD_FT = 0.01


@dataclass
class WaterLevel:
    timestamp: datetime
    level_ft: float
    trend: str  # "rising", "falling" or "stable"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": round(self.level_ft, 2),
            "unit": "ft",
            "trend": self.trend,
            "date": self.timestamp.date().isoformat(),
        }


def _rows(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    if payload.get("error"):
        logger.warning(f"[tides] CO-OPS error: {payload['error']}")
        return []
    return payload.get("data") or []


def _parse_row(row: Dict[str, Any], zone: ZoneInfo) -> Optional[tuple]:
    try:
        value = float(row["v"])
        local = datetime.strptime(row["t"], "%Y-%m-%d %H:%M").replace(tzinfo=zone)
    except (KeyError, TypeError, ValueError):
        return None
    return local.astimezone(timezone.utc), value


def parse_water_temperature(
    payload: Dict[str, Any],
    station_id: str,
    tz: str = "America/Chicago",
    distance_miles: Optional[float] = None,
) -> Optional[Observation]:
    """Latest valid water temperature reading as an Observation, or None."""
    zone = ZoneInfo(tz)
    for row in reversed(_rows(payload)):
        parsed = _parse_row(row, zone)
        if parsed is None:
            continue
        ts, value = parsed
        return Observation(
            quantity=Quantity.WATER_TEMP,
            value=value,
            source=f"coops-{station_id}",
            confidence=SourceKind.TIDE_STATION.confidence,
            timestamp=ts,
            kind=SourceKind.TIDE_STATION,
            distance_miles=distance_miles,
        )
    return None


def parse_water_levels(payload: Dict[str, Any], tz: str = "America/Chicago") -> List[WaterLevel]:
    """Every valid water level with its trend against the previous valid reading."""
    zone = ZoneInfo(tz)
    levels: List[WaterLevel] = []
    for row in _rows(payload):
        parsed = _parse_row(row, zone)
        if parsed is None:
            continue
        ts, value = parsed

        trend = "stable"
        if levels:
            previous = levels[-1].level_ft
            if value > previous + TREND_THRESHOLD_FT:
                trend = "rising"
            elif value < previous - TREND_THRESHOLD_FT:
                trend = "falling"
        levels.append(WaterLevel(ts, value, trend))
    return levels


class TidesProvider:
    """Provider for NOAA CO-OPS water temperature and water level."""

    API_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"

    HEADERS = {"User-Agent": USER_AGENT}

    def __init__(self, client: httpx.AsyncClient, tz: str = "America/Chicago"):
        self.client = client
        self.tz = tz

    async def _get(self, station_id: str, product: str, days: int, now: Optional[datetime]) -> Dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        params = {
            "begin_date": (now - timedelta(days=days)).strftime("%Y%m%d"),
            "end_date": now.strftime("%Y%m%d"),
            "station": station_id,
            "product": product,
            "datum": "IGLD",
            "time_zone": "lst_ldt",
            "units": "english",
            "format": "json",
        }
        resp = await self.client.get(self.API_URL, params=params, headers=self.HEADERS)
        resp.raise_for_status()
        return resp.json()

    async def fetch_water_temperature(
        self, station_id: str, distance_miles: Optional[float] = None, now: Optional[datetime] = None
    ) -> List[Observation]:
        logger.info(f"[TidesProvider] Fetching water temperature for {station_id}...")
        payload = await self._get(station_id, "water_temperature", 1, now)
        obs = parse_water_temperature(payload, station_id, tz=self.tz, distance_miles=distance_miles)
        return [obs] if obs else []

    async def fetch_water_level(
        self, station_id: str, days: int = 1, now: Optional[datetime] = None
    ) -> Optional[WaterLevel]:
        logger.info(f"[TidesProvider] Fetching water level for {station_id}...")
        payload = await self._get(station_id, "water_level", days, now)
        levels = parse_water_levels(payload, tz=self.tz)
        return levels[-1] if levels else None
