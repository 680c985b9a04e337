"""
NDBC Realtime Provider for Superior Surf

Fetches the realtime2 standard meteorological feed for Lake Superior wave
buoys (45001, 45027, 45028) and shore weather stations (KGNA, DULM5, ROAM4).

FEED FORMAT (whitespace separated, newest line first, '#' header lines):
    #YY  MM DD hh mm WDIR WSPD GST  WVHT   DPD   APD MWD   PRES  ATMP  WTMP  DEWP  VIS PTDY  TIDE
    2025 10 17 14 50 230  5.0  7.0  0.6    5     3.9 220 1012.3  10.1  11.2   6.4   MM   MM    MM

Units as delivered: m/s, meters, seconds, degrees, Celsius. Missing values
are "MM". Everything is converted to mph / feet / Fahrenheit here.

The parsers never raise: a line that does not decode is skipped.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import httpx

from superior_surf.compass import compass_to_degrees, normalize_direction
from superior_surf.config import USER_AGENT
from superior_surf.models import Observation, Quantity, SourceKind

logger = logging.getLogger(__name__)

METERS_TO_FEET = 3.28084
MS_TO_MPH = 2.23694

MIN_WAVE_FT = 0.05
MAX_WAVE_FT = 15.0
MIN_WATER_C = 0.0
MAX_WATER_C = 25.0
MAX_WIND_MS = 100.0

RECENT_HOURS = 48
SCAN_LINES = 20
MIN_TOKENS = 15

MISSING_TOKENS = {"MM", "N/A", ""}
# Fill values NDBC uses in some archives
MISSING_VALUES = {99.0, 999.0, 9999.0}

# Column positions
YY, MO, DD, HH, MI = 0, 1, 2, 3, 4
WDIR, WSPD, GST, WVHT, DPD, APD, MWD, PRES, ATMP, WTMP = range(5, 15)


@dataclass
class BuoyReading:
    """Decoded contents of one accepted NDBC line."""
    station_id: str
    timestamp: datetime
    kind: SourceKind
    distance_miles: Optional[float] = None
    wave_height_ft: Optional[float] = None
    wave_period_s: Optional[float] = None
    wave_direction: Optional[str] = None
    wind_speed_mph: Optional[float] = None
    wind_gust_mph: Optional[float] = None
    wind_direction: Optional[str] = None
    air_temp_f: Optional[float] = None
    water_temp_f: Optional[float] = None

    @property
    def source(self) -> str:
        return f"ndbc-{self.station_id}"

    def observations(self) -> List[Observation]:
        """Flatten the reading into Observations, one per populated quantity."""
        conf = self.kind.confidence
        obs = []

        def add(quantity, value, label=None):
            if value is None:
                return
            obs.append(Observation(
                quantity=quantity,
                value=float(value),
                source=self.source,
                confidence=conf,
                timestamp=self.timestamp,
                kind=self.kind,
                label=label,
                distance_miles=self.distance_miles,
            ))

        add(Quantity.WAVE_HEIGHT, self.wave_height_ft)
        add(Quantity.WAVE_PERIOD, self.wave_period_s)
        if self.wave_direction:
            add(Quantity.WAVE_DIRECTION, compass_to_degrees(self.wave_direction), self.wave_direction)
        add(Quantity.WIND_SPEED, self.wind_speed_mph)
        add(Quantity.WIND_GUST, self.wind_gust_mph)
        if self.wind_direction:
            add(Quantity.WIND_DIRECTION, compass_to_degrees(self.wind_direction), self.wind_direction)
        add(Quantity.AIR_TEMP, self.air_temp_f)
        add(Quantity.WATER_TEMP, self.water_temp_f)
        return obs


def _num(token: str) -> Optional[float]:
    """Parse one column, dropping the missing-value sentinels."""
    if token in MISSING_TOKENS:
        return None
    try:
        value = float(token)
    except ValueError:
        return None
    if value in MISSING_VALUES:
        return None
    return value


def _c_to_f(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def _line_time(parts: List[str]) -> Optional[datetime]:
    try:
        year = int(parts[YY])
        if year < 100:
            year += 2000
        return datetime(year, int(parts[MO]), int(parts[DD]), int(parts[HH]), int(parts[MI]),
                        tzinfo=timezone.utc)
    except ValueError:
        return None


def _is_recent(ts: datetime, now: datetime) -> bool:
    """Within 48h of now, or failing that, on the current UTC calendar day."""
    hours_old = (now - ts).total_seconds() / 3600
    if hours_old <= RECENT_HOURS:
        return True
    return ts.date() == now.astimezone(timezone.utc).date()


def _data_lines(text: str) -> List[List[str]]:
    rows = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        rows.append(stripped.split())
        if len(rows) >= SCAN_LINES:
            break
    return rows


def _direction(token: str) -> Optional[str]:
    if token in MISSING_TOKENS:
        return None
    value = _num(token)
    if value is not None:
        return normalize_direction(value)
    return normalize_direction(token)


def _water_temp_f(token: str) -> Optional[float]:
    celsius = _num(token)
    if celsius is None:
        return None
    return _c_to_f(min(max(celsius, MIN_WATER_C), MAX_WATER_C))


def _wind_mph(token: str) -> Optional[float]:
    speed = _num(token)
    if speed is None or speed < 0 or speed > MAX_WIND_MS:
        return None
    return speed * MS_TO_MPH


def parse_buoy_text(
    text: str,
    station_id: str,
    now: Optional[datetime] = None,
    distance_miles: Optional[float] = None,
) -> Optional[BuoyReading]:
    """
    Decode the newest usable line of a wave buoy feed.

    A line is usable when it is recent, carries at least one of wave
    height / dominant period / wind speed, and any wave height it has is
    within the physical bounds for the lake. Returns None when no line
    in the scan window qualifies.
    """
    now = now or datetime.now(timezone.utc)

    for parts in _data_lines(text or ""):
        if len(parts) < MIN_TOKENS:
            continue

        ts = _line_time(parts)
        if ts is None:
            continue

        wave_m = _num(parts[WVHT])
        period = _num(parts[DPD])
        wind = _wind_mph(parts[WSPD])
        if wave_m is None and period is None and wind is None:
            continue

        if not _is_recent(ts, now):
            logger.debug(f"[parse_buoy_text] {station_id}: skipping stale line {ts.isoformat()}")
            continue

        wave_ft = wave_m * METERS_TO_FEET if wave_m is not None else None
        if wave_ft is not None and not (MIN_WAVE_FT <= wave_ft <= MAX_WAVE_FT):
            logger.debug(f"[parse_buoy_text] {station_id}: unrealistic wave height {wave_ft:.2f}ft")
            continue

        air_c = _num(parts[ATMP])
        reading = BuoyReading(
            station_id=station_id,
            timestamp=ts,
            kind=SourceKind.WAVE_BUOY,
            distance_miles=distance_miles,
            wave_height_ft=wave_ft,
            wave_period_s=period if period is not None and period > 0 else None,
            wave_direction=_direction(parts[MWD]),
            wind_speed_mph=wind,
            wind_gust_mph=_wind_mph(parts[GST]),
            wind_direction=_direction(parts[WDIR]),
            air_temp_f=_c_to_f(air_c) if air_c is not None else None,
            water_temp_f=_water_temp_f(parts[WTMP]),
        )
        logger.debug(f"[parse_buoy_text] {station_id}: accepted line {ts.isoformat()}")
        return reading

    logger.info(f"[parse_buoy_text] {station_id}: no recent valid data")
    return None


def parse_weather_station_text(
    text: str,
    station_id: str,
    now: Optional[datetime] = None,
    distance_miles: Optional[float] = None,
) -> Optional[BuoyReading]:
    """
    Decode the newest usable line of a shore weather station feed.

    Only wind speed, wind direction, gust and air temperature are taken;
    waves are never emitted. A WTMP value, when the station has a water
    sensor, is kept as a secondary water temperature.
    """
    now = now or datetime.now(timezone.utc)

    for parts in _data_lines(text or ""):
        if len(parts) < MIN_TOKENS:
            continue

        ts = _line_time(parts)
        if ts is None:
            continue

        wind = _wind_mph(parts[WSPD])
        if wind is None:
            continue

        if not _is_recent(ts, now):
            continue

        air_c = _num(parts[ATMP])
        return BuoyReading(
            station_id=station_id,
            timestamp=ts,
            kind=SourceKind.WEATHER_STATION,
            distance_miles=distance_miles,
            wind_speed_mph=wind,
            wind_gust_mph=_wind_mph(parts[GST]),
            wind_direction=_direction(parts[WDIR]),
            air_temp_f=_c_to_f(air_c) if air_c is not None else None,
            water_temp_f=_water_temp_f(parts[WTMP]),
        )

    logger.info(f"[parse_weather_station_text] {station_id}: no recent wind data")
    return None


class NDBCProvider:
    """
    Provider for NDBC realtime2 text feeds.

    HTTP errors propagate to the caller (the orchestrator settles them);
    decoding problems never do.
    """

    BASE_URL = "https://www.ndbc.noaa.gov/data/realtime2/{station_id}.txt"

    HEADERS = {
        "User-Agent": USER_AGENT,
        "Accept": "text/plain",
    }

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch_text(self, station_id: str) -> str:
        url = self.BASE_URL.format(station_id=station_id)
        logger.info(f"[NDBCProvider] Fetching {station_id}...")
        resp = await self.client.get(url, headers=self.HEADERS)
        resp.raise_for_status()
        return resp.text

    async def fetch_buoy(
        self, station_id: str, distance_miles: Optional[float] = None, now: Optional[datetime] = None
    ) -> Optional[BuoyReading]:
        text = await self.fetch_text(station_id)
        reading = parse_buoy_text(text, station_id, now=now, distance_miles=distance_miles)
        if reading:
            logger.info(f"[NDBCProvider] {station_id}: waves={reading.wave_height_ft} ft "
                        f"period={reading.wave_period_s}s wind={reading.wind_speed_mph} mph")
        return reading

    async def fetch_weather_station(
        self, station_id: str, distance_miles: Optional[float] = None, now: Optional[datetime] = None
    ) -> Optional[BuoyReading]:
        text = await self.fetch_text(station_id)
        reading = parse_weather_station_text(text, station_id, now=now, distance_miles=distance_miles)
        if reading:
            logger.info(f"[NDBCProvider] {station_id}: wind={reading.wind_speed_mph:.1f} mph "
                        f"from {reading.wind_direction}")
        return reading
