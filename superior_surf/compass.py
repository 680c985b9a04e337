"""
Compass helpers shared by the parsers and the likelihood engine.

Directions travel through the pipeline as one of the 16 canonical points
("N", "NNE", ... "NNW") or the VARIABLE sentinel used by marine prose.
"""

import logging
import math
import re
from typing import Optional, Union

logger = logging.getLogger(__name__)

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

VARIABLE = "VAR"

# Spelled-out forms that show up in NWS text products
_WORDS = {
    "NORTH": "N",
    "NORTHEAST": "NE",
    "EAST": "E",
    "SOUTHEAST": "SE",
    "SOUTH": "S",
    "SOUTHWEST": "SW",
    "WEST": "W",
    "NORTHWEST": "NW",
}

_VARIABLE_TOKENS = {"VAR", "VRB", "VARIABLE", "VARIABLE WINDS"}


def degrees_to_compass(degrees: float) -> str:
    """Map an angle to the nearest of the 16 compass points (45 -> "NE")."""
    index = int(math.floor((degrees % 360) / 22.5 + 0.5)) % 16
    return COMPASS_POINTS[index]


def compass_to_degrees(point: str) -> Optional[float]:
    """Center angle of a compass point, or None for anything unrecognized."""
    normalized = normalize_direction(point)
    if normalized is None or normalized == VARIABLE:
        return None
    return COMPASS_POINTS.index(normalized) * 22.5


def normalize_direction(token: Union[str, float, int, None]) -> Optional[str]:
    """
    Normalize a direction token to a canonical compass point.

    Accepts abbreviations ("ne"), spelled words ("north-east", "Northeast"),
    numeric degrees (225 or "225") and the variable-wind tokens. Returns
    VARIABLE for variable winds and None when nothing matches.
    """
    if token is None:
        return None

    if isinstance(token, (int, float)):
        if math.isnan(token):
            return None
        return degrees_to_compass(float(token))

    text = token.strip().upper()
    if not text:
        return None

    if text in _VARIABLE_TOKENS:
        return VARIABLE

    if re.fullmatch(r"\d+(\.\d+)?", text):
        return degrees_to_compass(float(text))

    if text in COMPASS_POINTS:
        return text

    collapsed = re.sub(r"[\s\-]", "", text)
    if collapsed in _WORDS:
        return _WORDS[collapsed]
    if collapsed in COMPASS_POINTS:
        return collapsed

    logger.debug(f"[normalize_direction] Unrecognized direction token: {token!r}")
    return None


def vector_to_degrees(u: float, v: float) -> float:
    """
    Meteorological direction (where the wind blows FROM) of a u/v vector.

    u is the eastward component and v the northward one, so a pure
    southerly flow (u=0, v>0) comes from 180 degrees.
    """
    return (math.degrees(math.atan2(-u, -v)) + 360.0) % 360.0


def vector_to_compass(u: float, v: float) -> str:
    return degrees_to_compass(vector_to_degrees(u, v))
