"""
VDOT fitness index and training pace model.

Uses the Daniels/Gilbert oxygen cost and time-to-exhaustion equations to turn
a race result into a VDOT score, and inverts the oxygen cost equation to derive
training paces at fixed fractions of VDOT.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .benchmarks import format_pace, parse_time

logger = logging.getLogger(__name__)


class RaceDistance(Enum):
    """Supported race distances for fitness estimation."""
    FIVE_K = "5K"
    TEN_K = "10K"
    HALF_MARATHON = "HALF"
    MARATHON = "MARATHON"

    @property
    def meters(self) -> float:
        return RACE_DISTANCE_METERS[self]

    @classmethod
    def parse(cls, value: str) -> "RaceDistance":
        key = value.strip().upper().replace(" ", "")
        aliases = {"5KM": "5K", "10KM": "10K", "HALF_MARATHON": "HALF", "HALFMARATHON": "HALF",
                   "21K": "HALF", "42K": "MARATHON", "FULL": "MARATHON"}
        return cls(aliases.get(key, key))


RACE_DISTANCE_METERS = {
    RaceDistance.FIVE_K: 5000.0,
    RaceDistance.TEN_K: 10000.0,
    RaceDistance.HALF_MARATHON: 21097.5,
    RaceDistance.MARATHON: 42195.0,
}


class PaceConfidence(Enum):
    """How much a pace model can be trusted."""
    VERY_HIGH = "very_high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Fraction of VDOT each training pace is run at
PACE_FRACTIONS = {
    "easy_min": 0.62,
    "easy_max": 0.72,
    "marathon": 0.81,
    "threshold": 0.88,
    "interval": 0.975,
    "repetition": 1.05,
}

# Oxygen cost: VO2 = a*v^2 + b*v + c, v in m/min
_A = 0.000104
_B = 0.182258
_C = -4.60


@dataclass(frozen=True)
class PaceModel:
    """
    Training pace bands in seconds per km.

    easy_min is the slow end of the easy band and easy_max the fast end; each
    following band is faster than the one before.
    """
    easy_min: float
    easy_max: float
    marathon: float
    threshold: float
    interval: float
    repetition: float
    confidence: PaceConfidence = PaceConfidence.MEDIUM
    source: str = "unknown"
    vdot: Optional[float] = None

    def is_valid(self) -> bool:
        """All bands positive and ordered from slowest to fastest."""
        bands = [self.easy_min, self.easy_max, self.marathon,
                 self.threshold, self.interval, self.repetition]
        if any(b is None or not math.isfinite(b) or b <= 0 for b in bands):
            return False
        return all(slower >= faster for slower, faster in zip(bands, bands[1:]))

    def to_dict(self) -> Dict:
        return {
            "easy_min": self.easy_min,
            "easy_max": self.easy_max,
            "marathon": self.marathon,
            "threshold": self.threshold,
            "interval": self.interval,
            "repetition": self.repetition,
            "confidence": self.confidence.value,
            "source": self.source,
            "vdot": self.vdot,
        }

    def formatted(self) -> Dict[str, str]:
        """Bands as M:SS/km strings."""
        return {
            "easy": f"{format_pace(self.easy_max)} - {format_pace(self.easy_min)}",
            "marathon": format_pace(self.marathon),
            "threshold": format_pace(self.threshold),
            "interval": format_pace(self.interval),
            "repetition": format_pace(self.repetition),
        }

    @classmethod
    def from_dict(cls, data: Dict, source: str = "provider") -> "PaceModel":
        """
        Build a pace model from provider data.

        Bands may be seconds or "M:SS" strings. Raises ValueError or KeyError
        on malformed data.
        """
        bands = {}
        for name in PACE_FRACTIONS:
            value = parse_time(data[name])
            if value is None:
                raise ValueError(f"Unparseable pace for {name}: {data[name]!r}")
            bands[name] = value

        confidence = data.get("confidence", PaceConfidence.MEDIUM.value)
        vdot = data.get("vdot")
        return cls(
            confidence=PaceConfidence(confidence),
            source=data.get("source", source),
            vdot=float(vdot) if vdot is not None else None,
            **bands,
        )


def percent_max(duration_minutes: float) -> float:
    """Fraction of VO2max sustainable for a race of the given duration."""
    return (0.8
            + 0.1894393 * math.exp(-0.012778 * duration_minutes)
            + 0.2989558 * math.exp(-0.1932605 * duration_minutes))


def oxygen_cost(velocity: float) -> float:
    """VO2 in ml/kg/min for a velocity in metres per minute."""
    return _A * velocity ** 2 + _B * velocity + _C


def calculate_vdot(distance_m: float, time_seconds: float) -> Optional[float]:
    """
    VDOT for a race result, rounded to one decimal.

    Returns None for non-positive distance or time.
    """
    if distance_m <= 0 or time_seconds <= 0:
        return None

    minutes = time_seconds / 60
    velocity = distance_m / minutes
    vdot = oxygen_cost(velocity) / percent_max(minutes)
    return round(vdot, 1)


def velocity_for_vo2(vo2: float) -> float:
    """Invert the oxygen cost equation: metres per minute at a given VO2."""
    discriminant = _B ** 2 - 4 * _A * (_C - vo2)
    return (-_B + math.sqrt(discriminant)) / (2 * _A)


def pace_at_fraction(vdot: float, fraction: float) -> float:
    """Pace in seconds per km when running at a fraction of VDOT."""
    velocity = velocity_for_vo2(vdot * fraction)
    return round(60000 / velocity, 1)


def training_paces(vdot: float,
                   source: str = "vdot",
                   confidence: PaceConfidence = PaceConfidence.VERY_HIGH) -> PaceModel:
    """Build a full pace model from a VDOT score."""
    bands = {name: pace_at_fraction(vdot, fraction) for name, fraction in PACE_FRACTIONS.items()}
    return PaceModel(confidence=confidence, source=source, vdot=vdot, **bands)


def pace_model_from_race(distance: RaceDistance, time_seconds: float) -> Optional[PaceModel]:
    """Pace model from a race result, or None when the result is unusable."""
    vdot = calculate_vdot(distance.meters, time_seconds)
    if vdot is None or vdot <= 0:
        logger.warning(f"Cannot derive paces from {distance.value} in {time_seconds}s")
        return None
    return training_paces(vdot, source=f"{distance.value} race")
