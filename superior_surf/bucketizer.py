"""
Forecast Bucketizer for Superior Surf

Merges heterogeneous forecast series into per-timestamp buckets:
- Windy GFS / GFS Wave: hourly (or 3-hourly) model steps
- NWS marine prose: day/night periods pinned to 12:00 and 21:00 local

Every distinct UTC timestamp becomes its own bucket built only from the
samples stamped with exactly that time. No resampling, no interpolation:
a 21:00 prose period does not leak into the 20:00 model step.

Each bucket is blended and rated independently, then the list is sorted
ascending by time.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from superior_surf.conditions import ConditionsAssembler
from superior_surf.models import ForecastBucket, Observation, Quantity
from superior_surf.spots import SpotConfig

logger = logging.getLogger(__name__)

LOOKBACK = timedelta(hours=3)


def buoy_context_note(observations: Iterable[Observation]) -> Optional[str]:
    """'Buoy context: 2.1ft waves, 12mph wind' from the nearest buoy's latest reading."""
    buoy_obs = [o for o in observations if o.source.startswith("ndbc-")]
    if not buoy_obs:
        return None

    def pick(quantity):
        candidates = [o for o in buoy_obs if o.quantity == quantity]
        if not candidates:
            return None
        return min(candidates, key=lambda o: o.distance_miles if o.distance_miles is not None else 1e9).value

    waves = pick(Quantity.WAVE_HEIGHT)
    wind = pick(Quantity.WIND_SPEED)
    if waves is None and wind is None:
        return None

    parts = []
    if waves is not None:
        parts.append(f"{waves:.1f}ft waves")
    if wind is not None:
        parts.append(f"{wind:.0f}mph wind")
    return "Buoy context: " + ", ".join(parts)


class ForecastBucketizer:
    """
    Groups forecast observations by exact timestamp and assesses each group.
    """

    def __init__(self, assembler: Optional[ConditionsAssembler] = None):
        self.assembler = assembler or ConditionsAssembler()

    def to_frame(self, observations: Sequence[Observation]) -> pd.DataFrame:
        """One row per observation, timestamps normalized to UTC."""
        frame = pd.DataFrame({
            "timestamp": [o.timestamp for o in observations],
            "source": [o.source for o in observations],
            "quantity": [o.quantity.value for o in observations],
            "obs": list(observations),
        })
        if not frame.empty:
            frame["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True)
        return frame

    def window(
        self, observations: Iterable[Observation], now: datetime, hours: int
    ) -> List[Observation]:
        """Samples between now - 3h and now + hours."""
        start, end = now - LOOKBACK, now + timedelta(hours=hours)
        return [o for o in observations if start <= o.timestamp <= end]

    def bucketize(
        self,
        observations: Iterable[Observation],
        spot: SpotConfig,
        extra_notes: Iterable[str] = (),
    ) -> List[ForecastBucket]:
        obs = list(observations)
        extra_notes = list(extra_notes)
        frame = self.to_frame(obs)

        if frame.empty:
            logger.warning(f"[ForecastBucketizer] No forecast samples for {spot.id}")
            return []

        buckets = []
        for ts, group in frame.groupby("timestamp", sort=True):
            when = ts.to_pydatetime()
            assessment = self.assembler.assess(group["obs"].tolist(), spot, when, extra_notes=extra_notes)
            buckets.append(ForecastBucket(
                timestamp=when,
                wind_estimate=assessment.estimate(Quantity.WIND_SPEED),
                wave_estimate=assessment.estimate(Quantity.WAVE_HEIGHT),
                water_temp_estimate=assessment.estimate(Quantity.WATER_TEMP),
                likelihood=assessment.likelihood,
                notes=assessment.notes,
                period_estimate=assessment.estimate(Quantity.WAVE_PERIOD),
                direction_estimate=assessment.estimate(Quantity.WIND_DIRECTION),
                record=assessment.record,
            ))

        buckets.sort(key=lambda b: b.timestamp)
        logger.info(f"[ForecastBucketizer] {spot.id}: {len(obs)} samples -> {len(buckets)} buckets "
                    f"from {frame['source'].nunique()} sources")
        return buckets
