"""
Lake Superior spot table and per-spot directional profiles.

Each surf break answers to wind in its own way. North Shore breaks need a
NE/E fetch across the whole lake, South Shore breaks need W/NW. The profile
records which compass sectors build rideable swell (ideal / marginal),
which are strong offshores that kill it (blocked), and which local wind is
light enough to groom the face (clean).

PROFILE FIELDS:
- ideal_swell_sectors: wind sectors with enough fetch to build swell
- marginal_swell_sectors: may work with enough fetch and duration
- blocked_local_wind_sectors: offshore/cross flow that chops or flattens
- clean_local_wind_sectors: wind that stays clean at the break when light
- confidence_tier: how well the profile is known ("high"/"medium"/"low")

Unknown spot ids resolve to the Duluth fallback profile.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional

from superior_surf.compass import COMPASS_POINTS

logger = logging.getLogger(__name__)

FALLBACK_SPOT_ID = "duluth"


@dataclass(frozen=True)
class DirectionalProfile:
    name: str
    ideal_swell_sectors: FrozenSet[str]
    marginal_swell_sectors: FrozenSet[str]
    blocked_local_wind_sectors: FrozenSet[str]
    clean_local_wind_sectors: FrozenSet[str]
    confidence_tier: str
    is_fallback: bool = False

    @property
    def favorable_swell_sectors(self) -> FrozenSet[str]:
        return self.ideal_swell_sectors | self.marginal_swell_sectors


@dataclass(frozen=True)
class SpotConfig:
    id: str
    name: str
    latitude: float
    longitude: float
    difficulty: str
    profile: DirectionalProfile


def _profile(
    name: str,
    ideal: Iterable[str],
    marginal: Iterable[str],
    blocked: Iterable[str],
    confidence: str,
    clean: Optional[Iterable[str]] = None,
    is_fallback: bool = False,
) -> DirectionalProfile:
    """Build and validate a profile. Light wind from an ideal sector counts as clean."""
    ideal = frozenset(ideal)
    marginal = frozenset(marginal)
    blocked = frozenset(blocked)
    clean = frozenset(clean) if clean is not None else ideal

    invalid = sorted(d for d in ideal | marginal | blocked | clean if d not in COMPASS_POINTS)
    if invalid:
        raise ValueError(f"Invalid wind directions for {name}: {', '.join(invalid)}")

    if confidence not in ("high", "medium", "low"):
        raise ValueError(f"Invalid confidence tier for {name}: {confidence}")

    overlaps = sorted(ideal & (marginal | blocked))
    if overlaps:
        logger.warning(f"[_profile] Overlapping wind directions for {name}: {', '.join(overlaps)}")

    return DirectionalProfile(
        name=name,
        ideal_swell_sectors=ideal,
        marginal_swell_sectors=marginal,
        blocked_local_wind_sectors=blocked,
        clean_local_wind_sectors=clean,
        confidence_tier=confidence,
        is_fallback=is_fallback,
    )


PROFILES: Dict[str, DirectionalProfile] = {
    # North Shore
    "stoneypoint": _profile("Stoney Point", ["NE", "ENE", "E", "NNE"], ["N"], ["SW", "W", "NW"], "high"),
    "boulders": _profile("Boulders", ["NE", "ENE", "E"], ["N"], ["W", "SW"], "low"),
    "guardrails": _profile("Guardrails", ["NE", "ENE", "E"], ["NNE"], ["SW", "W", "NW"], "low"),
    "lesterriver": _profile("Lester River", ["NE", "E", "ENE"], ["NNE", "SE"], ["NW", "W", "SW"], "high"),
    "brightonbeach": _profile("Brighton Beach", ["E", "NE"], ["NNE", "ENE"], ["SW", "W"], "high"),
    "frenchriver": _profile("French River", ["NE", "ENE"], ["E"], ["SW", "W", "NW"], "high"),
    "parkpoint": _profile("Park Point", ["E", "SE", "S"], ["ENE", "SSE", "SW"], ["NW", "N"], "high"),
    "floodbay": _profile("Flood Bay", ["NE", "E"], ["ENE"], ["SW", "W"], "medium"),
    "beaverbay": _profile("Beaver Bay", ["E", "NE", "ENE"], ["NNE"], ["SW", "W", "NW"], "medium"),
    "grandmaraismn": _profile("Grand Marais, MN", ["E", "SE"], ["S"], ["W", "NW"], "high"),
    # South Shore
    "marquette": _profile("Marquette", ["W", "WNW"], ["NW"], ["E", "NE", "SE"], "high"),
    "ashland": _profile("Ashland", ["WNW", "NW"], ["W"], ["E", "NE", "SE"], "medium"),
    "cornucopia": _profile("Cornucopia", ["NW", "WNW"], ["W"], ["E", "NE", "SE"], "medium"),
    "grandmaraismi": _profile("Grand Marais, MI", ["W", "WNW"], ["NW"], ["E", "NE", "SE"], "high"),
    FALLBACK_SPOT_ID: _profile(
        "Duluth Area (Fallback)", ["NE", "E"], ["NNE", "ENE"], ["SW", "W", "NW"], "medium",
        is_fallback=True,
    ),
}

# (name, latitude, longitude, difficulty)
_LOCATIONS = {
    "stoneypoint": ("Stoney Point", 46.9419, -91.8061, "intermediate"),
    "parkpoint": ("Park Point", 46.7825, -92.0856, "beginner"),
    "lesterriver": ("Lester River", 46.8331, -92.0217, "advanced"),
    "brightonbeach": ("Brighton Beach", 46.82, -92.0, "beginner"),
    "frenchriver": ("French River", 46.89, -91.88, "intermediate"),
    "boulders": ("Boulders", 46.85, -91.95, "advanced"),
    "guardrails": ("Guardrails", 46.87, -91.92, "intermediate"),
    "superiorentry": ("Superior Entry", 46.7156, -92.0595, "expert"),
    "floodbay": ("Flood Bay", 47.02, -91.75, "intermediate"),
    "beaverbay": ("Beaver Bay", 47.05, -91.70, "intermediate"),
    "grandmaraismn": ("Grand Marais, MN", 47.75, -90.33, "intermediate"),
    "marquette": ("Marquette", 46.54, -87.40, "intermediate"),
    "ashland": ("Ashland", 46.59, -90.88, "intermediate"),
    "cornucopia": ("Cornucopia", 46.85, -91.10, "intermediate"),
    "grandmaraismi": ("Grand Marais, MI", 46.67, -85.98, "intermediate"),
}

# Duluth harbor, used when the spot id is unknown
FALLBACK_LOCATION = ("Duluth", 46.7867, -92.1005, "intermediate")


def get_profile(spot_id: Optional[str]) -> DirectionalProfile:
    """Directional profile for a spot, falling back to the Duluth profile."""
    key = (spot_id or "").lower()
    profile = PROFILES.get(key)
    if profile is None:
        logger.warning(f"[get_profile] Unknown wind configuration for spot '{spot_id}', using fallback")
        return PROFILES[FALLBACK_SPOT_ID]
    return profile


def get_spot(spot_id: Optional[str]) -> SpotConfig:
    """Full spot record. Never raises: unknown ids get the fallback location."""
    key = (spot_id or "").lower()
    name, lat, lon, difficulty = _LOCATIONS.get(key, FALLBACK_LOCATION)
    if key not in _LOCATIONS:
        logger.warning(f"[get_spot] Unknown spot '{spot_id}', using {name} coordinates")
    return SpotConfig(
        id=key or FALLBACK_SPOT_ID,
        name=name,
        latitude=lat,
        longitude=lon,
        difficulty=difficulty,
        profile=get_profile(key),
    )


def all_spot_ids() -> List[str]:
    return list(_LOCATIONS.keys())
