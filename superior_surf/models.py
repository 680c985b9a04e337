"""
Core data model for Superior Surf.

Observations are the normalized unit every provider parser emits. The
blender folds same-quantity observations into a BlendedEstimate, the
likelihood engine turns a bundle of estimates into a SurfLikelihood, and
the bucketizer packs one bundle per forecast timestamp into a ForecastBucket.

Nothing here is mutated after creation; every fetch cycle builds fresh
objects.
"""

import functools
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Quantity(Enum):
    """Physical quantities the fusion core understands."""
    WAVE_HEIGHT = "wave_height"        # feet
    WAVE_PERIOD = "wave_period"        # seconds
    WAVE_DIRECTION = "wave_direction"  # degrees, label carries compass point
    WIND_SPEED = "wind_speed"          # mph
    WIND_GUST = "wind_gust"            # mph
    WIND_DIRECTION = "wind_direction"  # degrees, label carries compass point
    WATER_TEMP = "water_temp"          # Fahrenheit
    AIR_TEMP = "air_temp"              # Fahrenheit


class SourceKind(Enum):
    """Provider families, each with a fixed reliability confidence."""
    WAVE_BUOY = "wave_buoy"
    WEATHER_STATION = "weather_station"
    MARINE_FORECAST = "marine_forecast"
    GRIDDED_MODEL = "gridded_model"
    TIDE_STATION = "tide_station"

    @property
    def confidence(self) -> float:
        return SOURCE_CONFIDENCE[self]


SOURCE_CONFIDENCE = {
    SourceKind.WAVE_BUOY: 0.9,        # direct telemetry
    SourceKind.WEATHER_STATION: 0.9,  # direct telemetry
    SourceKind.TIDE_STATION: 0.8,
    SourceKind.GRIDDED_MODEL: 0.7,
    SourceKind.MARINE_FORECAST: 0.6,  # regex over prose
}


@dataclass(frozen=True)
class Observation:
    """One normalized reading of one quantity from one provider."""
    quantity: Quantity
    value: float
    source: str
    confidence: float
    timestamp: datetime
    kind: Optional[SourceKind] = None
    low: Optional[float] = None      # range bounds, e.g. "2 to 4 feet"
    high: Optional[float] = None
    label: Optional[str] = None      # compass point for direction quantities
    distance_miles: Optional[float] = None


@dataclass
class BlendedEstimate:
    """
    Result of blending N observations of a single quantity.

    confidence is 0 whenever sources is empty, and value is None only
    when nothing qualified.
    """
    value: Optional[float] = None
    confidence: float = 0.0
    sources: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    low: Optional[float] = None
    high: Optional[float] = None
    label: Optional[str] = None
    method: str = "none"

    @property
    def available(self) -> bool:
        return self.value is not None or self.label is not None

    @property
    def minimum(self) -> Optional[float]:
        """Conservative lower bound: range low when present, else value."""
        return self.low if self.low is not None else self.value

    @property
    def maximum(self) -> Optional[float]:
        return self.high if self.high is not None else self.value


@functools.total_ordering
class SurfLikelihood(Enum):
    """
    Discrete surf verdict.

    FLAT < MAYBE_SURF < GOOD < FIRING. BLOWN_OUT sits outside that scale:
    ordering comparisons involving it raise TypeError.
    """
    FLAT = "Flat"
    MAYBE_SURF = "Maybe Surf"
    GOOD = "Good"
    FIRING = "Firing"
    BLOWN_OUT = "Blown Out"

    @property
    def rank(self) -> Optional[int]:
        return _LIKELIHOOD_RANK.get(self)

    def downgrade(self) -> "SurfLikelihood":
        """One tier down, saturating at FLAT. BLOWN_OUT stays put."""
        if self is SurfLikelihood.BLOWN_OUT:
            return self
        return _LIKELIHOOD_ORDER[max(0, self.rank - 1)]

    def __lt__(self, other):
        if not isinstance(other, SurfLikelihood):
            return NotImplemented
        if self.rank is None or other.rank is None:
            raise TypeError("BLOWN_OUT is not comparable on the surf quality scale")
        return self.rank < other.rank


_LIKELIHOOD_ORDER = [
    SurfLikelihood.FLAT,
    SurfLikelihood.MAYBE_SURF,
    SurfLikelihood.GOOD,
    SurfLikelihood.FIRING,
]
_LIKELIHOOD_RANK = {tier: i for i, tier in enumerate(_LIKELIHOOD_ORDER)}


class LocalWind(Enum):
    """Quality of the wind at the break itself."""
    CLEAN = "clean"
    ONSHORE = "onshore"
    STRONG = "strong"


@dataclass
class ForecastBucket:
    """Everything the pipeline knows about one forecast timestamp."""
    timestamp: datetime
    wind_estimate: BlendedEstimate
    wave_estimate: BlendedEstimate
    water_temp_estimate: BlendedEstimate
    likelihood: SurfLikelihood
    notes: List[str] = field(default_factory=list)
    period_estimate: BlendedEstimate = field(default_factory=BlendedEstimate)
    direction_estimate: BlendedEstimate = field(default_factory=BlendedEstimate)
    record: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Outbound record for this bucket (same shape as current conditions)."""
        return dict(self.record)
