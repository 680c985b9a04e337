"""
Conditions assembly: observations in, one outbound conditions record out.

Runs the blender over every quantity, rates the result, and renders the
human-facing text (surf report line, conditions sentence, recommendations,
1-10 rating). Shared by current conditions and by every forecast bucket so
both produce records of the same shape.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from superior_surf.blender import ConfidenceBlender
from superior_surf.likelihood import SurfLikelihoodEngine
from superior_surf.models import BlendedEstimate, Observation, Quantity, SurfLikelihood
from superior_surf.spots import SpotConfig

logger = logging.getLogger(__name__)

WAVE_DISPLAY_MARGIN_FT = 0.5
COLD_WATER_F = 45.0


@dataclass
class Assessment:
    """Blended estimates, verdict and rendered record for one spot and time."""
    timestamp: datetime
    estimates: Dict[Quantity, BlendedEstimate]
    likelihood: SurfLikelihood
    notes: List[str]
    record: Dict[str, Any] = field(default_factory=dict)

    def estimate(self, quantity: Quantity) -> BlendedEstimate:
        return self.estimates.get(quantity) or BlendedEstimate()


def _round(value: Optional[float], digits: int = 1) -> Optional[float]:
    return round(value, digits) if value is not None else None


def wave_range(estimate: BlendedEstimate) -> Dict[str, float]:
    """Display range: the source range when one exists, else value +/- 0.5 ft."""
    if estimate.value is None:
        return {"min": 0.0, "max": 0.0}
    if estimate.low is not None and estimate.high is not None:
        return {"min": round(estimate.low, 1), "max": round(estimate.high, 1)}
    return {
        "min": round(max(0.0, estimate.value - WAVE_DISPLAY_MARGIN_FT), 1),
        "max": round(estimate.value + WAVE_DISPLAY_MARGIN_FT, 1),
    }


def surf_rating(
    wave_height: Optional[float],
    wind_speed: Optional[float],
    favorable_direction: bool,
    likelihood: SurfLikelihood,
) -> int:
    """1-10 score. Wrong wind direction costs 4 points, strong wind 1-2."""
    height = wave_height or 0.0
    speed = wind_speed or 0.0

    if height > 3:
        rating = 8
    elif height > 2:
        rating = 6
    elif height > 1:
        rating = 4
    elif height > 0.5:
        rating = 2
    else:
        rating = 1

    if not favorable_direction:
        rating = max(1, rating - 4)
    elif speed > 20:
        rating = max(1, rating - 2)
    elif speed > 15:
        rating = max(1, rating - 1)

    if likelihood == SurfLikelihood.BLOWN_OUT:
        rating = min(rating, 2)
    return rating


def surf_report(
    likelihood: SurfLikelihood,
    waves: Dict[str, float],
    period: Optional[float],
    wind_speed: Optional[float],
    wind_direction: str,
) -> str:
    """One-line summary for the spot list."""
    span = f"{waves['min']:.1f}-{waves['max']:.1f}ft"
    at_period = f" @ {period:.0f}s." if period else "."

    if likelihood == SurfLikelihood.FLAT:
        if waves["max"] < 0.5:
            return "Lake Superior is calm today. No surfable waves expected."
        return f"Small waves ({span}) with {wind_direction} winds. Conditions may improve later."
    if likelihood == SurfLikelihood.MAYBE_SURF:
        return f"Small surfable waves ({span}){at_period} {wind_direction} winds."
    if likelihood == SurfLikelihood.GOOD:
        return f"Good waves ({span}){at_period} {wind_direction} winds."
    if likelihood == SurfLikelihood.FIRING:
        return f"Epic conditions! {span} waves{at_period} {wind_direction} winds."
    if likelihood == SurfLikelihood.BLOWN_OUT:
        return f"Blown out. {wind_speed or 0:.0f} mph {wind_direction} winds are too strong to surf."
    return "Check conditions before heading out."


def conditions_description(
    wave_height: Optional[float],
    wind_speed: Optional[float],
    wind_direction: str,
    water_temp_f: Optional[float],
) -> str:
    if wave_height is None:
        return "No wave data available right now."
    if wave_height < 0.5:
        return "Flat conditions - no waves today. Lake Superior is calm."

    if wave_height < 1:
        description = "Small waves"
    elif wave_height < 2:
        description = "Moderate waves"
    elif wave_height < 3:
        description = "Good waves"
    elif wave_height < 5:
        description = "Big waves"
    else:
        description = "Very big waves"
    description += f" ({wave_height:.1f}ft)"

    if wind_speed is not None:
        if wind_speed < 5:
            description += " with light winds"
        elif wind_speed < 10:
            description += " with light breeze"
        elif wind_speed < 15:
            description += " with moderate winds"
        elif wind_speed < 20:
            description += " with strong winds"
        else:
            description += " with very strong winds"
        description += f" from the {wind_direction}"

    if water_temp_f is not None:
        description += f". Water temperature {round(water_temp_f)}°F"
    return description


def recommendations(
    wave_height: Optional[float], wind_speed: Optional[float], water_temp_f: Optional[float]
) -> List[str]:
    recs = []
    height = wave_height or 0.0

    if height < 0.5:
        recs += ["Lake Superior is flat today - no surfable waves", "Check back later when wind picks up"]
    elif height < 1:
        recs += ["Small waves - good for beginners", "Bring a longboard for easier catching"]
    elif height < 2:
        recs += ["Moderate waves - good for all skill levels", "Check wind direction for best spots"]
    elif height < 3:
        recs += ["Good waves - experienced surfers will enjoy", "Watch for changing conditions"]
    else:
        recs += ["Big waves - experienced surfers only", "Check safety conditions before paddling out"]

    if wind_speed is not None and wind_speed > 20:
        recs.append("Strong winds - consider wind direction for spot selection")
    if water_temp_f is not None and water_temp_f < COLD_WATER_F:
        recs.append("Cold water - wear proper wetsuit")
    return recs


class ConditionsAssembler:
    """
    Blend -> rate -> render for one spot at one time.

    Pure: no I/O, no state beyond the injected blender and engine.
    """

    def __init__(
        self,
        blender: Optional[ConfidenceBlender] = None,
        engine: Optional[SurfLikelihoodEngine] = None,
    ):
        self.blender = blender or ConfidenceBlender()
        self.engine = engine or SurfLikelihoodEngine()

    def assess(
        self,
        observations: Iterable[Observation],
        spot: SpotConfig,
        timestamp: Optional[datetime] = None,
        water_level: Optional[Dict[str, Any]] = None,
        extra_notes: Iterable[str] = (),
    ) -> Assessment:
        obs = list(observations)
        timestamp = timestamp or datetime.now(timezone.utc)
        estimates = self.blender.blend_all(obs)

        waves = estimates[Quantity.WAVE_HEIGHT]
        period = estimates[Quantity.WAVE_PERIOD]
        wind = estimates[Quantity.WIND_SPEED]
        direction = estimates[Quantity.WIND_DIRECTION]
        gust = estimates[Quantity.WIND_GUST]
        water = estimates[Quantity.WATER_TEMP]

        likelihood, notes = self.engine.rate(waves, period, wind, direction, spot.profile, gust)
        notes = notes + [n for n in extra_notes if n]

        if not obs:
            logger.warning(f"[ConditionsAssembler] No observations for {spot.id} - reporting flat")

        record = self._render(spot, timestamp, estimates, likelihood, notes, water_level)
        return Assessment(timestamp, estimates, likelihood, notes, record)

    def _render(
        self,
        spot: SpotConfig,
        timestamp: datetime,
        estimates: Dict[Quantity, BlendedEstimate],
        likelihood: SurfLikelihood,
        notes: List[str],
        water_level: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        waves = estimates[Quantity.WAVE_HEIGHT]
        period = estimates[Quantity.WAVE_PERIOD]
        wind = estimates[Quantity.WIND_SPEED]
        direction = estimates[Quantity.WIND_DIRECTION]
        gust = estimates[Quantity.WIND_GUST]
        wave_dir = estimates[Quantity.WAVE_DIRECTION]
        water = estimates[Quantity.WATER_TEMP]

        direction_label = direction.label or "unknown"
        wave_span = wave_range(waves)
        favorable = self.engine.swell_favorable(
            direction.label if direction.label else None, spot.profile
        )

        record: Dict[str, Any] = {
            "spotId": spot.id,
            "spotName": spot.name,
            "timestamp": timestamp.astimezone(timezone.utc).isoformat(),
            "waveHeight": {
                **wave_span,
                "unit": "ft",
                "confidence": round(waves.confidence, 2),
                "sources": waves.sources,
                "conflicts": waves.conflicts,
            },
            "wind": {
                "speed": _round(wind.value) if wind.value is not None else 0.0,
                "direction": direction_label,
                "gust": _round(gust.value),
                "unit": "mph",
                "confidence": round(wind.confidence, 2),
                "sources": list(dict.fromkeys(wind.sources + direction.sources)),
                "conflicts": wind.conflicts + direction.conflicts,
            },
            "swell": [],
            "rating": surf_rating(waves.value, wind.value, favorable, likelihood),
            "surfLikelihood": likelihood.value,
            "surfReport": surf_report(likelihood, wave_span, period.value, wind.value, direction_label),
            "notes": notes,
            "conditions": conditions_description(waves.value, wind.value, direction_label, water.value),
            "recommendations": recommendations(waves.value, wind.value, water.value),
        }

        if waves.value is not None:
            record["swell"].append({
                "height": _round(waves.value),
                "period": _round(period.value),
                "direction": wave_dir.label or direction.label,
                "sources": waves.sources,
            })

        if water.value is not None:
            record["waterTemp"] = {
                "value": _round(water.value),
                "unit": "F",
                "confidence": round(water.confidence, 2),
                "sources": water.sources,
            }

        if water_level:
            record["waterLevel"] = water_level

        return record
