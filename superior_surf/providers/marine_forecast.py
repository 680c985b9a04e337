"""
NWS Marine Forecast Provider for Superior Surf

Fetches the Lake Superior open-lakes forecast (GLFLS, issued by NWS Duluth)
from api.weather.gov and reads wind and waves out of the prose.

The bulletin is segmented by ALL-CAPS period markers:

    .TONIGHT...Northeast winds 10 to 20 knots. Waves 2 to 4 feet.
    .FRIDAY...East winds 5 to 15 knots. Waves 1 foot or less.

Prose parsing is a prioritized list of independent regex attempts per
field; the first hit wins. New phrasings get a new entry in the list and
nothing downstream has to change.

UNITS:
- Knots are converted to mph (x1.15078), ranges use their midpoint
- Wave ranges are kept as {min, max}, "N feet or less" becomes {0, N}
- There is no period in the prose, so an estimate of clamp(2 x height, 4, 8)s
  is emitted at low confidence
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

import httpx

from superior_surf.compass import VARIABLE, compass_to_degrees, normalize_direction
from superior_surf.config import USER_AGENT
from superior_surf.models import Observation, Quantity, SourceKind

logger = logging.getLogger(__name__)

KNOTS_TO_MPH = 1.15078
ESTIMATED_PERIOD_CONFIDENCE = 0.4
MAX_PROSE_WIND_MPH = 60.0

DAY_HOUR = 12
NIGHT_HOUR = 21

WEEKDAYS = ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"]

# GLF bulletins label later periods ".SAT...", ".SAT NIGHT..."
WEEKDAY_INDEX = {name: i for i, name in enumerate(WEEKDAYS)}
WEEKDAY_INDEX.update({name[:3]: i for i, name in enumerate(WEEKDAYS)})
WEEKDAY_INDEX.update({"TUES": 1, "WEDS": 2, "THUR": 3, "THURS": 3})

DAY_PERIODS = {"TODAY", "THIS MORNING", "THIS AFTERNOON", "REST OF TODAY"}
NIGHT_PERIODS = {"TONIGHT", "THIS EVENING", "REST OF TONIGHT", "OVERNIGHT", "LATE TONIGHT"}

# Longest alternatives first so "northeast" wins over "north"
_DIR = (r"northeast|northwest|southeast|southwest|north|south|east|west|"
        r"nne|nnw|ene|ese|sse|ssw|wsw|wnw|ne|nw|se|sw|n|s|e|w")
_DIR_WORDS = (r"northeast|northwest|southeast|southwest|north|south|east|west|"
              r"nne|nnw|ene|ese|sse|ssw|wsw|wnw")
_SPEED = r"(?P<lo>\d+)(?:\s+to\s+(?P<hi>\d+))?\s+(?P<unit>knots?|kts?|mph)"
_FT = r"(?:feet|foot|ft)"

WIND_SPEED_PATTERNS = [
    # "Northeast winds 10 to 20 knots"
    re.compile(rf"\b(?:{_DIR})\s+winds?\s+{_SPEED}", re.I),
    # "Winds northeast 10 knots"
    re.compile(rf"\bwinds?\s+(?:{_DIR})\s+{_SPEED}", re.I),
    # "Variable winds 10 knots or less"
    re.compile(r"\bvariable\s+winds?\s+(?P<hi>\d+)\s+(?P<unit>knots?|kts?|mph)\s+or\s+less", re.I),
    # "Winds 10 knots or less"
    re.compile(r"\bwinds?\s+(?P<hi>\d+)\s+(?P<unit>knots?|kts?|mph)\s+or\s+less", re.I),
    # "SW 5 to 15 knots"
    re.compile(rf"\b(?:{_DIR_WORDS}|ne|nw|se|sw)\s+{_SPEED}", re.I),
    # bare "15 to 25 knots"
    re.compile(rf"\b{_SPEED}", re.I),
]

WIND_DIRECTION_PATTERNS = [
    re.compile(rf"\b(?P<dir>{_DIR})\s+winds?\b", re.I),
    re.compile(rf"\bwinds?\s+(?P<dir>{_DIR})\b", re.I),
    re.compile(r"\b(?P<var>variable)\b", re.I),
    re.compile(rf"\bbecoming\s+(?P<dir>{_DIR_WORDS}|ne|nw|se|sw)\b", re.I),
    re.compile(rf"\b(?P<dir>{_DIR_WORDS})\b", re.I),
]

# (pattern, shape): shape is "or_less", "range" or "single"
WAVE_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(rf"\bwaves?\s+(?P<hi>\d+)\s+{_FT}\s+or\s+less", re.I), "or_less"),
    (re.compile(rf"\bwaves?\s+(?P<lo>\d+)\s+to\s+(?P<hi>\d+)\s+{_FT}", re.I), "range"),
    (re.compile(rf"\bwaves?\s+(?P<lo>\d+)\s+{_FT}", re.I), "single"),
    (re.compile(rf"\b(?P<lo>\d+)\s*(?:-|to)\s*(?P<hi>\d+)\s+{_FT}", re.I), "range"),
    (re.compile(rf"\b(?P<hi>\d+)\s+{_FT}\s+or\s+less", re.I), "or_less"),
    (re.compile(rf"\b(?P<lo>\d+)\s+{_FT}\b", re.I), "single"),
]

_PERIOD_MARKER = re.compile(r"(?:^|\n)\s*\.(?P<name>[A-Z][A-Z ]*?)\.\.\.", re.M)


@dataclass
class WaveRange:
    min: float
    max: float

    @property
    def mid(self) -> float:
        return (self.min + self.max) / 2


@dataclass
class MarineForecastPeriod:
    """One named period of the bulletin, pinned to an absolute time."""
    name: str
    timestamp: datetime
    text: str
    wind_speed_mph: Optional[float] = None
    wind_direction: Optional[str] = None
    waves: Optional[WaveRange] = None
    source: str = "nws-marine"

    @property
    def estimated_period_s(self) -> Optional[float]:
        if self.waves is None or self.waves.mid <= 0:
            return None
        return max(4.0, min(8.0, self.waves.mid * 2))

    def observations(self) -> List[Observation]:
        conf = SourceKind.MARINE_FORECAST.confidence
        base = dict(source=self.source, timestamp=self.timestamp, kind=SourceKind.MARINE_FORECAST)
        obs = []

        if self.wind_speed_mph is not None:
            obs.append(Observation(Quantity.WIND_SPEED, self.wind_speed_mph, confidence=conf, **base))

        if self.wind_direction:
            degrees = compass_to_degrees(self.wind_direction)
            obs.append(Observation(
                Quantity.WIND_DIRECTION,
                degrees if degrees is not None else math.nan,
                confidence=conf,
                label=self.wind_direction,
                **base,
            ))

        if self.waves is not None:
            obs.append(Observation(
                Quantity.WAVE_HEIGHT, self.waves.mid, confidence=conf,
                low=self.waves.min, high=self.waves.max, **base,
            ))
            period = self.estimated_period_s
            if period is not None:
                obs.append(Observation(
                    Quantity.WAVE_PERIOD, period, confidence=ESTIMATED_PERIOD_CONFIDENCE, **base,
                ))

        return obs


def extract_wind_speed(text: str) -> Optional[float]:
    """Wind speed in mph from the first matching phrasing, or None."""
    for pattern in WIND_SPEED_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue

        groups = match.groupdict()
        hi = float(groups["hi"]) if groups.get("hi") else None
        lo = float(groups["lo"]) if groups.get("lo") else 0.0
        speed = (lo + hi) / 2 if hi is not None else lo

        if groups["unit"].lower().startswith("k"):
            speed *= KNOTS_TO_MPH

        if 0 <= speed <= MAX_PROSE_WIND_MPH:
            return round(speed, 1)
        logger.debug(f"[extract_wind_speed] Discarding implausible speed {speed:.1f} mph")
    return None


def extract_wind_direction(text: str) -> Optional[str]:
    """Compass point, VARIABLE, or None."""
    for pattern in WIND_DIRECTION_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        if match.groupdict().get("var"):
            return VARIABLE
        direction = normalize_direction(match.group("dir"))
        if direction:
            return direction
    return None


def extract_wave_range(text: str) -> Optional[WaveRange]:
    """Wave height range in feet, preserving "N to M" as-is."""
    for pattern, shape in WAVE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue

        if shape == "or_less":
            return WaveRange(0.0, float(match.group("hi")))
        if shape == "range":
            lo, hi = float(match.group("lo")), float(match.group("hi"))
            return WaveRange(min(lo, hi), max(lo, hi))
        value = float(match.group("lo"))
        return WaveRange(value, value)
    return None


def period_timestamp(name: str, reference: datetime) -> Optional[datetime]:
    """
    Pin a period name to an absolute UTC time.

    TODAY-like names map to noon and TONIGHT-like names to 21:00 on the
    reference date. A weekday (full or abbreviated, "SAT") maps to its next
    occurrence (1-7 days out) at noon, "<WEEKDAY> NIGHT" to 21:00 that day. `reference` must be an
    aware datetime in the forecast's local zone.
    """
    key = " ".join(name.upper().split())

    if key in DAY_PERIODS:
        day, hour = reference.date(), DAY_HOUR
    elif key in NIGHT_PERIODS:
        day, hour = reference.date(), NIGHT_HOUR
    else:
        words = key.split(" ")
        weekday = WEEKDAY_INDEX.get(words[0])
        if weekday is None:
            return None
        if len(words) == 1:
            hour = DAY_HOUR
        elif words[1:] == ["NIGHT"]:
            hour = NIGHT_HOUR
        else:
            return None
        days_ahead = (weekday - reference.weekday()) % 7
        if days_ahead == 0:
            days_ahead = 7
        day = reference.date() + timedelta(days=days_ahead)

    local = datetime(day.year, day.month, day.day, hour, tzinfo=reference.tzinfo)
    return local.astimezone(timezone.utc)


def split_periods(text: str) -> List[Tuple[str, str]]:
    """(period name, body) pairs in bulletin order."""
    text = (text or "").split("$$")[0]
    markers = list(_PERIOD_MARKER.finditer(text))
    periods = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        body = " ".join(text[marker.end():end].split())
        periods.append((marker.group("name").strip(), body))
    return periods


def parse_marine_forecast(
    text: str,
    issued: Optional[datetime] = None,
    tz: str = "America/Chicago",
    source: str = "nws-marine",
) -> List[MarineForecastPeriod]:
    """
    Parse a marine text bulletin into timed periods.

    Periods whose name has no calendar mapping, or that carry neither wind
    nor waves, are skipped. Never raises.
    """
    zone = ZoneInfo(tz)
    reference = (issued or datetime.now(timezone.utc)).astimezone(zone)

    results = []
    for name, body in split_periods(text):
        ts = period_timestamp(name, reference)
        if ts is None:
            logger.debug(f"[parse_marine_forecast] Skipping unmapped period '{name}'")
            continue

        period = MarineForecastPeriod(
            name=name,
            timestamp=ts,
            text=body,
            wind_speed_mph=extract_wind_speed(body),
            wind_direction=extract_wind_direction(body),
            waves=extract_wave_range(body),
            source=source,
        )
        if period.wind_speed_mph is None and period.waves is None:
            logger.debug(f"[parse_marine_forecast] No wind or waves in period '{name}'")
            continue
        results.append(period)

    logger.info(f"[parse_marine_forecast] Parsed {len(results)} periods")
    return results


def parse_zone_forecast(payload: Dict[str, Any], source: str = "nws-zone") -> List[MarineForecastPeriod]:
    """
    Parse an api.weather.gov zone forecast (properties.periods[]).

    These periods already carry a startTime, so no calendar rule is needed.
    """
    results = []
    periods = (payload or {}).get("properties", {}).get("periods", []) or []
    for raw in periods:
        try:
            ts = datetime.fromisoformat(raw["startTime"]).astimezone(timezone.utc)
        except (KeyError, TypeError, ValueError):
            continue
        body = raw.get("detailedForecast") or ""
        period = MarineForecastPeriod(
            name=raw.get("name", ""),
            timestamp=ts,
            text=body,
            wind_speed_mph=extract_wind_speed(body),
            wind_direction=extract_wind_direction(body),
            waves=extract_wave_range(body),
            source=source,
        )
        if period.wind_speed_mph is None and period.waves is None:
            continue
        results.append(period)
    return results


def marine_zone_for(latitude: float, longitude: float) -> str:
    """NWS marine zone covering a spot."""
    if 46.0 <= latitude <= 47.5 and -87.5 <= longitude <= -85.5:
        return "GLZ042"
    return "GLZ043"


def product_text(payload: Dict[str, Any]) -> Optional[str]:
    """Pull the bulletin out of the JSON envelope variants api.weather.gov returns."""
    if not isinstance(payload, dict):
        return None
    if payload.get("productText"):
        return payload["productText"]
    features = payload.get("features") or []
    if features:
        return (features[0].get("properties") or {}).get("productText")
    return None


class MarineForecastProvider:
    """
    Provider for the NWS Lake Superior marine forecast.

    Product list -> latest product -> productText, with the zone period
    forecast as a fallback when the bulletin yields nothing.
    """

    PRODUCT_URL = "https://api.weather.gov/products/types/GLFLS/locations/{office}"
    ZONE_URL = "https://api.weather.gov/zones/forecast/{zone}/forecast"
    OFFICE = "DLH"

    HEADERS = {
        "User-Agent": USER_AGENT,
        "Accept": "application/geo+json",
    }

    def __init__(self, client: httpx.AsyncClient, tz: str = "America/Chicago"):
        self.client = client
        self.tz = tz

    async def _get_json(self, url: str) -> Dict[str, Any]:
        resp = await self.client.get(url, headers=self.HEADERS)
        resp.raise_for_status()
        return resp.json()

    async def fetch_bulletin(self) -> Optional[str]:
        logger.info("[MarineForecastProvider] Fetching GLFLS product list...")
        listing = await self._get_json(self.PRODUCT_URL.format(office=self.OFFICE))

        text = product_text(listing)
        if text:
            return text

        graph = listing.get("@graph") or []
        if not graph or not graph[0].get("@id"):
            logger.warning("[MarineForecastProvider] No GLFLS products listed")
            return None

        product = await self._get_json(graph[0]["@id"])
        return product_text(product)

    async def fetch_periods(
        self, latitude: float, longitude: float, now: Optional[datetime] = None
    ) -> List[MarineForecastPeriod]:
        """All parsable periods, bulletin first, zone forecast as fallback."""
        text = await self.fetch_bulletin()
        periods = parse_marine_forecast(text, issued=now, tz=self.tz) if text else []
        if periods:
            return periods

        zone = marine_zone_for(latitude, longitude)
        logger.info(f"[MarineForecastProvider] Bulletin empty, trying zone {zone}")
        payload = await self._get_json(self.ZONE_URL.format(zone=zone))
        return parse_zone_forecast(payload)
