"""
Confidence Blender for Superior Surf

Merges observations of the same quantity from disagreeing sources into one
BlendedEstimate with a confidence score and conflict notes.

Key Features:
1. Confidence-weighted mean (buoy/station telemetry 0.9, gridded model 0.7)
2. Conflict detection on max-min spread, per-quantity thresholds
3. Variance penalty: confidence = mean(conf) - min(stdev * k, cap), floored at 0.1
4. Directions blended by majority vote, never averaged
5. Water temperature blended by source priority, never averaged across tiers

CONFLICT THRESHOLDS:
- Wave height: spread > 2.0 ft (k=0.1, cap=0.3)
- Wind speed/gust: spread > 15 mph (k=0.05, cap=0.2)
- Wave period: spread > 3 s
- Air temperature: spread > 10 F

Conflicts are flagged, never excluded: this is a "warn only" blender.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List

import numpy as np

from superior_surf.compass import compass_to_degrees
from superior_surf.models import BlendedEstimate, Observation, Quantity, SourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlendRule:
    spread_threshold: float
    penalty_k: float
    penalty_cap: float
    unit: str


class ConfidenceBlender:
    """
    Confidence-weighted blender for one quantity at a time.

    Stateless: a single instance can be shared across spots and buckets.
    """

    RULES = {
        Quantity.WAVE_HEIGHT: BlendRule(2.0, 0.1, 0.3, "ft"),
        Quantity.WIND_SPEED: BlendRule(15.0, 0.05, 0.2, "mph"),
        Quantity.WIND_GUST: BlendRule(15.0, 0.05, 0.2, "mph"),
        Quantity.WAVE_PERIOD: BlendRule(3.0, 0.05, 0.2, "s"),
        Quantity.AIR_TEMP: BlendRule(10.0, 0.05, 0.2, "F"),
    }

    DIRECTION_QUANTITIES = (Quantity.WIND_DIRECTION, Quantity.WAVE_DIRECTION)

    MIN_CONFIDENCE = 0.1
    WATER_TEMP_MIN_F = 30.0
    WATER_TEMP_MAX_F = 85.0

    def blend(self, quantity: Quantity, observations: Iterable[Observation]) -> BlendedEstimate:
        """
        Blend every observation of `quantity` into one estimate.

        Observations of other quantities are ignored, so the full
        observation set of a fetch cycle can be passed straight in.
        """
        obs = [o for o in observations if o.quantity == quantity]

        if quantity in self.DIRECTION_QUANTITIES:
            return self.blend_direction(obs)
        if quantity == Quantity.WATER_TEMP:
            return self.blend_water_temperature(obs)

        obs = [o for o in obs if o.value is not None and math.isfinite(o.value)]

        if not obs:
            return BlendedEstimate()

        if len(obs) == 1:
            only = obs[0]
            return BlendedEstimate(
                value=only.value,
                confidence=only.confidence,
                sources=[only.source],
                low=only.low,
                high=only.high,
                label=only.label,
                method="single",
            )

        rule = self.RULES.get(quantity, BlendRule(math.inf, 0.05, 0.2, ""))

        values = np.array([o.value for o in obs], dtype=float)
        weights = np.array([o.confidence for o in obs], dtype=float)
        if weights.sum() <= 0:
            weights = np.ones_like(values)

        value = float(np.average(values, weights=weights))
        stdev = float(np.std(values))
        spread = float(np.max(values) - np.min(values))

        conflicts = []
        if spread > rule.spread_threshold:
            detail = ", ".join(f"{o.source}={o.value:.1f}" for o in obs)
            conflicts.append(
                f"{quantity.value} sources disagree by {spread:.1f} {rule.unit} ({detail})"
            )
            logger.warning(f"[ConfidenceBlender] CONFLICT: {conflicts[-1]}")

        penalty = min(stdev * rule.penalty_k, rule.penalty_cap)
        mean_conf = float(np.mean([o.confidence for o in obs]))
        # Floor never lifts confidence above what the sources reported
        confidence = max(mean_conf - penalty, min(self.MIN_CONFIDENCE, mean_conf))

        low = high = None
        if any(o.low is not None or o.high is not None for o in obs):
            # Envelope over every source; point sources contribute their value
            low = float(np.min([o.low if o.low is not None else o.value for o in obs]))
            high = float(np.max([o.high if o.high is not None else o.value for o in obs]))

        logger.debug(f"[ConfidenceBlender] {quantity.value}: {value:.2f} "
                     f"(stdev={stdev:.2f}, spread={spread:.2f}, conf={confidence:.2f}, n={len(obs)})")

        return BlendedEstimate(
            value=value,
            confidence=confidence,
            sources=_unique_sources(obs),
            conflicts=conflicts,
            low=low,
            high=high,
            method="weighted-mean",
        )

    def blend_direction(self, observations: Iterable[Observation]) -> BlendedEstimate:
        """
        Most frequent compass point among the sources, ties to the first seen.

        The result is always one of the reported points. A VARIABLE-only
        vote yields label "VAR" with no numeric value.
        """
        obs = [o for o in observations if o.label]
        if not obs:
            return BlendedEstimate()

        if len(obs) == 1:
            only = obs[0]
            return BlendedEstimate(
                value=compass_to_degrees(only.label),
                confidence=only.confidence,
                sources=[only.source],
                label=only.label,
                method="single",
            )

        counts = Counter(o.label for o in obs)
        top = max(counts.values())
        # Counter preserves insertion order, so the first key at `top` is the first seen
        winner = next(label for label, n in counts.items() if n == top)

        conflicts = []
        if len(counts) > 1:
            votes = ", ".join(f"{label} ({n})" for label, n in counts.items())
            conflicts.append(f"{obs[0].quantity.value} sources disagree: {votes}")

        agreeing = [o.confidence for o in obs if o.label == winner]
        share_conf = float(np.mean(agreeing)) * (len(agreeing) / len(obs))
        confidence = max(share_conf, min(self.MIN_CONFIDENCE, float(np.mean(agreeing))))

        return BlendedEstimate(
            value=compass_to_degrees(winner),
            confidence=confidence,
            sources=_unique_sources(obs),
            conflicts=conflicts,
            label=winner,
            method="mode",
        )

    def blend_water_temperature(self, observations: Iterable[Observation]) -> BlendedEstimate:
        """
        Priority-based water temperature.

        1. nearest wave buoy reporting 30-85 F
        2. else the nearest tide station reporting in range
        3. else the average of in-range secondary sensors
        4. else not available (value None), never a made-up default
        """
        in_range = [
            o for o in observations
            if o.value is not None and math.isfinite(o.value)
            and self.WATER_TEMP_MIN_F <= o.value <= self.WATER_TEMP_MAX_F
        ]

        for kind, method in ((SourceKind.WAVE_BUOY, "nearest-buoy"),
                             (SourceKind.TIDE_STATION, "tide-station")):
            candidates = [o for o in in_range if o.kind == kind]
            if candidates:
                best = min(candidates, key=_distance)
                return BlendedEstimate(
                    value=best.value,
                    confidence=best.confidence,
                    sources=[best.source],
                    method=method,
                )

        secondary = [o for o in in_range if o.kind not in (SourceKind.WAVE_BUOY, SourceKind.TIDE_STATION)]
        if secondary:
            return BlendedEstimate(
                value=float(np.mean([o.value for o in secondary])),
                confidence=float(np.mean([o.confidence for o in secondary])),
                sources=_unique_sources(secondary),
                method="secondary-average",
            )

        return BlendedEstimate()

    def blend_all(self, observations: Iterable[Observation]) -> Dict[Quantity, BlendedEstimate]:
        """One estimate per quantity, including empty ones for missing quantities."""
        obs = list(observations)
        return {quantity: self.blend(quantity, obs) for quantity in Quantity}


def _distance(obs: Observation) -> float:
    return obs.distance_miles if obs.distance_miles is not None else math.inf


def _unique_sources(observations: List[Observation]) -> List[str]:
    return list(dict.fromkeys(o.source for o in observations))
