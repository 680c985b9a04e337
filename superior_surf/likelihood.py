"""
Surf-Likelihood Engine for Superior Surf

Deterministic state machine from a bundle of blended estimates plus the
spot's directional profile to a SurfLikelihood and advisory notes.

ORDER OF EVALUATION:
1. Conservative gate: minimum wave height < 0.8 ft, or period missing / < 3 s -> FLAT
2. Swell gate: wind sector not in the spot's ideal or marginal sectors -> FLAT
   (missing or VARIABLE direction counts as favorable)
3. Local wind: > 18 mph STRONG; blocked sector ONSHORE; clean sector CLEAN;
   anything else CLEAN up to 12 mph, ONSHORE above
4. Base tier from the wave-height band, stepping down while the band's
   period/wind requirement fails; failing every band -> BLOWN_OUT

       band          height (ft)    period   wind
       MAYBE_SURF    [0.8, 1.5)     >= 3 s   < 18 mph
       GOOD          [1.5, 3.0)     >= 5 s   < 15 mph
       FIRING        [3.0, inf)     >= 6 s   < 15 mph

5. CLEAN keeps the tier, ONSHORE drops one (saturating at FLAT),
   STRONG forces BLOWN_OUT

Notes are computed separately and never feed back into the rating.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from superior_surf.compass import VARIABLE, normalize_direction
from superior_surf.models import BlendedEstimate, LocalWind, SurfLikelihood
from superior_surf.spots import DirectionalProfile

logger = logging.getLogger(__name__)

Scalar = Union[float, int, BlendedEstimate, None]
Direction = Union[str, float, int, BlendedEstimate, None]


@dataclass(frozen=True)
class Band:
    tier: SurfLikelihood
    min_height: float
    max_height: float
    min_period: float
    max_wind: float


class SurfLikelihoodEngine:
    """Rates one time slot at one spot."""

    MIN_SURF_HEIGHT_FT = 0.8
    MIN_PERIOD_S = 3.0

    STRONG_WIND_MPH = 18.0
    LIGHT_WIND_MPH = 12.0

    # Highest first; each band is half-open on wave height
    BANDS = [
        Band(SurfLikelihood.FIRING, 3.0, math.inf, 6.0, 15.0),
        Band(SurfLikelihood.GOOD, 1.5, 3.0, 5.0, 15.0),
        Band(SurfLikelihood.MAYBE_SURF, 0.8, 1.5, 3.0, 18.0),
    ]

    def rate(
        self,
        wave_estimate: BlendedEstimate,
        wave_period: Scalar,
        wind_speed: Scalar,
        wind_direction: Direction,
        profile: DirectionalProfile,
        wind_gust: Scalar = None,
    ) -> Tuple[SurfLikelihood, List[str]]:
        period = _scalar(wave_period)
        speed = _scalar(wind_speed)
        direction = _direction(wind_direction)
        notes = self.notes(wave_estimate, period, speed, direction, profile, _scalar(wind_gust))

        min_height = wave_estimate.minimum if wave_estimate is not None else None
        if min_height is None or min_height < self.MIN_SURF_HEIGHT_FT:
            return SurfLikelihood.FLAT, notes
        if period is None or period < self.MIN_PERIOD_S:
            return SurfLikelihood.FLAT, notes

        if not self.swell_favorable(direction, profile):
            logger.debug(f"[SurfLikelihoodEngine] {direction} is not a swell sector for {profile.name}")
            return SurfLikelihood.FLAT, notes

        local = self.classify_local_wind(speed, direction, profile)
        height = wave_estimate.value if wave_estimate.value is not None else min_height
        base = self.base_tier(height, period, speed or 0.0)

        if local == LocalWind.STRONG:
            result = SurfLikelihood.BLOWN_OUT
        elif local == LocalWind.ONSHORE:
            result = base.downgrade()
        else:
            result = base

        logger.debug(f"[SurfLikelihoodEngine] {profile.name}: h={height:.1f}ft p={period:.0f}s "
                     f"w={speed} {direction} local={local.value} base={base.value} -> {result.value}")
        return result, notes

    def swell_favorable(self, direction: Optional[str], profile: DirectionalProfile) -> bool:
        if direction is None or direction == VARIABLE:
            return True
        return direction in profile.favorable_swell_sectors

    def classify_local_wind(
        self, speed: Optional[float], direction: Optional[str], profile: DirectionalProfile
    ) -> LocalWind:
        speed = speed or 0.0
        if speed > self.STRONG_WIND_MPH:
            return LocalWind.STRONG
        if direction in profile.blocked_local_wind_sectors:
            return LocalWind.ONSHORE
        if direction in profile.clean_local_wind_sectors:
            return LocalWind.CLEAN
        return LocalWind.CLEAN if speed <= self.LIGHT_WIND_MPH else LocalWind.ONSHORE

    def base_tier(self, height: float, period: float, speed: float) -> SurfLikelihood:
        """Tier of the band containing `height`, stepping down while requirements fail."""
        start = next((i for i, b in enumerate(self.BANDS) if b.min_height <= height < b.max_height), None)
        if start is None:
            return SurfLikelihood.FLAT

        for band in self.BANDS[start:]:
            if period >= band.min_period and speed < band.max_wind:
                return band.tier
        return SurfLikelihood.BLOWN_OUT

    def notes(
        self,
        wave_estimate: Optional[BlendedEstimate],
        period: Optional[float],
        speed: Optional[float],
        direction: Optional[str],
        profile: DirectionalProfile,
        gust: Optional[float] = None,
    ) -> List[str]:
        notes = []

        if speed is not None:
            if speed > 25:
                notes.append("High winds - challenging conditions")
            elif speed > 15:
                notes.append("Strong wind - may cause chop")
        if gust is not None and gust > 25:
            notes.append("Gusts > 25 mph")

        height = wave_estimate.value if wave_estimate is not None else None
        if height is not None:
            if height < 0.5:
                notes.append("Very small waves - minimal surf")
            elif height > 3:
                notes.append("Large waves - experienced surfers only")

        if period is not None:
            if period < 4:
                notes.append("Short period - choppy conditions")
            elif period > 8:
                notes.append("Long period - clean waves")

        directional = self.directional_note(speed, direction, profile)
        if directional:
            notes.append(directional)
        return notes

    def directional_note(
        self, speed: Optional[float], direction: Optional[str], profile: DirectionalProfile
    ) -> Optional[str]:
        if direction is None:
            return None
        if direction == VARIABLE:
            return "Variable winds - no clear swell direction."

        if direction in profile.ideal_swell_sectors:
            note = f"Ideal wind direction ({direction}) for {profile.name}."
        elif direction in profile.marginal_swell_sectors:
            note = f"Marginal wind direction ({direction}) - may produce waves with enough fetch."
        elif direction in profile.blocked_local_wind_sectors:
            return f"Unfavorable wind direction ({direction}) for {profile.name}."
        else:
            return f"Wind direction ({direction}) does not build swell at {profile.name}."

        local = self.classify_local_wind(speed, direction, profile)
        if local == LocalWind.CLEAN:
            return note + " Swell and local wind are both favorable."
        if local == LocalWind.ONSHORE:
            return note + " Local wind will be choppy."
        return note + " Wind too strong at the break."


def _scalar(value: Scalar) -> Optional[float]:
    if isinstance(value, BlendedEstimate):
        value = value.value
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


def _direction(value: Direction) -> Optional[str]:
    if isinstance(value, BlendedEstimate):
        value = value.label if value.label else value.value
    return normalize_direction(value)


_default_engine = SurfLikelihoodEngine()


def rate(
    wave_estimate: BlendedEstimate,
    wave_period: Scalar,
    wind_speed: Scalar,
    wind_direction: Direction,
    profile: DirectionalProfile,
    wind_gust: Scalar = None,
) -> Tuple[SurfLikelihood, List[str]]:
    """Rate with the default thresholds. See SurfLikelihoodEngine.rate."""
    return _default_engine.rate(wave_estimate, wave_period, wind_speed, wind_direction, profile, wind_gust)
