"""
Sensor station catalog for western Lake Superior.

NDBC wave buoys, NDBC/C-MAN weather stations and NOAA CO-OPS water
stations, plus great-circle helpers that pick the ones near a spot.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

EARTH_RADIUS_MILES = 3959.0

DEFAULT_RADIUS_MILES = 250.0
MAX_WAVE_BUOYS = 2
MAX_WEATHER_STATIONS = 3


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    latitude: float
    longitude: float


WAVE_BUOYS = [
    Station("45001", "Mid-Superior", 47.345, -87.323),
    Station("45027", "McQuade Harbor", 46.775, -92.093),
    Station("45028", "Western Lake Superior", 47.020, -91.670),
]

WEATHER_STATIONS = [
    Station("KGNA", "Grand Marais Airport", 47.750, -90.334),
    Station("DULM5", "Duluth", 46.775, -92.093),
    Station("ROAM4", "Rock of Ages", 47.345, -87.323),
]

WATER_STATIONS = [
    Station("9099064", "Duluth", 46.775, -92.093),
    Station("9099090", "Grand Marais", 47.748, -90.341),
]


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in statute miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def nearest_stations(
    latitude: float,
    longitude: float,
    stations: Sequence[Station],
    limit: int,
    radius_miles: float = DEFAULT_RADIUS_MILES,
) -> List[Tuple[Station, float]]:
    """Up to `limit` stations within the radius, nearest first, with their distances."""
    ranked = sorted(
        ((s, haversine_miles(latitude, longitude, s.latitude, s.longitude)) for s in stations),
        key=lambda pair: pair[1],
    )
    return [(s, d) for s, d in ranked if d <= radius_miles][:limit]
