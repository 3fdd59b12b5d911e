"""
HYROX Benchmark Data

Reference tables for running and station performance by gender and level,
plus helpers built on them: station weakness analysis, race-time estimation,
performance level lookup and strength requirements by division.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..config import config

logger = logging.getLogger(__name__)


class Gender(Enum):
    """Athlete gender for benchmark lookups."""
    MALE = "male"
    FEMALE = "female"


class PerformanceLevel(Enum):
    """Benchmark levels, fastest first."""
    WORLD_CLASS = "world_class"
    ELITE = "elite"
    ADVANCED = "advanced"
    INTERMEDIATE = "intermediate"
    BEGINNER = "beginner"


class Station(Enum):
    """The eight HYROX stations in race order."""
    SKIERG = "skierg"
    SLED_PUSH = "sled_push"
    SLED_PULL = "sled_pull"
    BURPEE_BROAD_JUMP = "burpee_broad_jump"
    ROWING = "rowing"
    FARMERS_CARRY = "farmers_carry"
    SANDBAG_LUNGE = "sandbag_lunge"
    WALL_BALLS = "wall_balls"

    @property
    def label(self) -> str:
        return STATION_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "Station":
        """Parse a station name such as 'sledPull', 'sled-pull' or 'Sled Pull'."""
        key = re.sub(r"(?<=[a-z])(?=[A-Z])", "_", value.strip())
        key = re.sub(r"[\s\-]+", "_", key).lower()
        aliases = {"ski_erg": "skierg", "row": "rowing", "bbj": "burpee_broad_jump",
                   "farmers": "farmers_carry", "lunges": "sandbag_lunge", "wallballs": "wall_balls"}
        key = aliases.get(key, key)
        return cls(key)


class Division(Enum):
    """HYROX race divisions."""
    OPEN = "open"
    PRO = "pro"
    DOUBLES = "doubles"


STATION_LABELS = {
    Station.SKIERG: "SkiErg",
    Station.SLED_PUSH: "Sled Push",
    Station.SLED_PULL: "Sled Pull",
    Station.BURPEE_BROAD_JUMP: "Burpee Broad Jump",
    Station.ROWING: "Rowing",
    Station.FARMERS_CARRY: "Farmers Carry",
    Station.SANDBAG_LUNGE: "Sandbag Lunges",
    Station.WALL_BALLS: "Wall Balls",
}

# Stations where most athletes lose the largest amount of time
TIME_SINK_STATIONS = [Station.SLED_PULL, Station.WALL_BALLS]

STATION_PRIORITY = {
    Station.SLED_PULL: "high",
    Station.WALL_BALLS: "high",
    Station.SANDBAG_LUNGE: "high",
    Station.SLED_PUSH: "medium",
    Station.BURPEE_BROAD_JUMP: "medium",
    Station.FARMERS_CARRY: "medium",
    Station.SKIERG: "low",
    Station.ROWING: "low",
}

# A station counts as weak when it is this much slower than the benchmark midpoint
WEAK_STATION_RATIO = 1.15


@dataclass(frozen=True)
class Band:
    """A benchmark time band in seconds."""
    min: float
    max: float

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


@dataclass(frozen=True)
class RunningBenchmark:
    """Running benchmark for one gender and level."""
    average_pace: float       # seconds per km across the 8 race runs
    total_run_time: float     # seconds for all 8 km
    target_race_time: float   # seconds, upper bound of the level


def _minutes(value: float) -> float:
    return value * 60


RUNNING_BENCHMARKS: Dict[Gender, Dict[PerformanceLevel, RunningBenchmark]] = {
    Gender.MALE: {
        PerformanceLevel.WORLD_CLASS: RunningBenchmark(215, _minutes(29), _minutes(55)),
        PerformanceLevel.ELITE: RunningBenchmark(225, _minutes(30.5), _minutes(60)),
        PerformanceLevel.ADVANCED: RunningBenchmark(255, _minutes(34), _minutes(70)),
        PerformanceLevel.INTERMEDIATE: RunningBenchmark(315, _minutes(42), _minutes(82.5)),
        PerformanceLevel.BEGINNER: RunningBenchmark(375, _minutes(50), _minutes(100)),
    },
    Gender.FEMALE: {
        PerformanceLevel.WORLD_CLASS: RunningBenchmark(240, _minutes(32), _minutes(60)),
        PerformanceLevel.ELITE: RunningBenchmark(260, _minutes(34.5), _minutes(65)),
        PerformanceLevel.ADVANCED: RunningBenchmark(300, _minutes(40), _minutes(75)),
        PerformanceLevel.INTERMEDIATE: RunningBenchmark(345, _minutes(46), _minutes(92.5)),
        PerformanceLevel.BEGINNER: RunningBenchmark(420, _minutes(56), _minutes(110)),
    },
}


def _bands(*pairs: Tuple[float, float]) -> Dict[Station, Band]:
    return {station: Band(*pair) for station, pair in zip(Station, pairs)}


# Station order: skierg, sled push, sled pull, burpee broad jump, rowing,
# farmers carry, sandbag lunge, wall balls
STATION_BENCHMARKS: Dict[Gender, Dict[PerformanceLevel, Dict[Station, Band]]] = {
    Gender.MALE: {
        PerformanceLevel.ELITE: _bands(
            (210, 225), (150, 170), (180, 200), (140, 160), (210, 225), (75, 90), (150, 180), (180, 210)),
        PerformanceLevel.ADVANCED: _bands(
            (230, 250), (180, 210), (240, 270), (210, 240), (230, 250), (105, 135), (210, 255), (270, 330)),
        PerformanceLevel.INTERMEDIATE: _bands(
            (255, 285), (225, 270), (330, 390), (300, 360), (270, 300), (150, 180), (300, 360), (390, 480)),
        PerformanceLevel.BEGINNER: _bands(
            (300, 360), (300, 400), (480, 600), (420, 540), (330, 420), (210, 300), (420, 540), (540, 720)),
    },
    Gender.FEMALE: {
        PerformanceLevel.ELITE: _bands(
            (240, 260), (150, 180), (200, 240), (160, 190), (240, 260), (90, 110), (180, 210), (150, 180)),
        PerformanceLevel.ADVANCED: _bands(
            (270, 300), (200, 240), (270, 330), (240, 300), (270, 300), (120, 150), (240, 300), (210, 270)),
        PerformanceLevel.INTERMEDIATE: _bands(
            (300, 360), (270, 330), (390, 480), (360, 420), (300, 360), (180, 210), (360, 420), (330, 420)),
        PerformanceLevel.BEGINNER: _bands(
            (360, 480), (360, 480), (540, 720), (480, 600), (390, 480), (240, 330), (480, 600), (480, 600)),
    },
}


@dataclass(frozen=True)
class StrengthStandard:
    """Minimum lift relative to bodyweight, with an optional absolute floor in kg."""
    multiplier: float
    minimum_kg: float = 0.0

    def required(self, bodyweight_kg: float) -> float:
        return max(bodyweight_kg * self.multiplier, self.minimum_kg)


# competitor floor: open division; pro safe zone: pro division
STRENGTH_BENCHMARKS = {
    Gender.MALE: {
        Division.OPEN: {"deadlift": StrengthStandard(1.5), "squat": StrengthStandard(1.25)},
        Division.PRO: {"deadlift": StrengthStandard(1.8, 180), "squat": StrengthStandard(1.5, 150)},
    },
    Gender.FEMALE: {
        Division.OPEN: {"deadlift": StrengthStandard(1.25), "squat": StrengthStandard(1.0)},
        Division.PRO: {"deadlift": StrengthStandard(1.5, 120), "squat": StrengthStandard(1.25, 90)},
    },
}


class BenchmarkProvider:
    """Lookup interface over the benchmark tables."""

    def station_benchmark(self, gender: Gender, level: PerformanceLevel, station: Station) -> Band:
        """Benchmark band for one station. World class athletes are compared against elite bands."""
        if level == PerformanceLevel.WORLD_CLASS:
            level = PerformanceLevel.ELITE
        return STATION_BENCHMARKS[gender][level][station]

    def running_benchmark(self, gender: Gender, level: PerformanceLevel) -> RunningBenchmark:
        return RUNNING_BENCHMARKS[gender][level]


default_benchmarks = BenchmarkProvider()


@dataclass
class StationComparison:
    """One station compared against its benchmark band."""
    station: Station
    time: float
    benchmark: Band
    ratio: float  # time / benchmark midpoint
    status: str   # "weak", "average" or "strong"

    def to_dict(self) -> Dict:
        return {
            "station": self.station.value,
            "time": self.time,
            "benchmark": {"min": self.benchmark.min, "max": self.benchmark.max},
            "ratio": round(self.ratio, 3),
            "status": self.status,
        }


@dataclass
class WeaknessAnalysis:
    """Result of comparing station times against benchmarks."""
    weak_stations: List[Station] = field(default_factory=list)
    strong_stations: List[Station] = field(default_factory=list)
    comparisons: List[StationComparison] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


def analyze_station_weaknesses(station_times: Dict[Station, float],
                               gender: Gender,
                               target_level: PerformanceLevel,
                               provider: BenchmarkProvider = default_benchmarks) -> WeaknessAnalysis:
    """
    Compare supplied station times against the target level benchmarks.

    A station is weak when its time exceeds the benchmark midpoint by more than
    15%, and strong when it beats the band minimum. Weak stations are ordered
    worst first (ties keep race order).

    Args:
        station_times: Seconds per station; stations without a time are skipped
        gender: Benchmark gender
        target_level: Level to compare against

    Returns:
        WeaknessAnalysis with disjoint weak and strong lists
    """
    analysis = WeaknessAnalysis()

    for station in Station:
        time = station_times.get(station)
        if time is None:
            continue

        band = provider.station_benchmark(gender, target_level, station)
        ratio = time / band.midpoint
        if time > band.midpoint * WEAK_STATION_RATIO:
            status = "weak"
        elif time < band.min:
            status = "strong"
        else:
            status = "average"

        analysis.comparisons.append(StationComparison(station, time, band, ratio, status))

    weak = [c for c in analysis.comparisons if c.status == "weak"]
    weak.sort(key=lambda c: -c.ratio)
    analysis.weak_stations = [c.station for c in weak]
    analysis.strong_stations = [c.station for c in analysis.comparisons if c.status == "strong"]

    for station in TIME_SINK_STATIONS:
        if station in analysis.weak_stations:
            analysis.recommendations.append(
                f"{station.label} is a major time sink - prioritize it in station sessions"
            )
    for station in analysis.weak_stations:
        if station not in TIME_SINK_STATIONS:
            analysis.recommendations.append(
                f"{station.label}: {STATION_PRIORITY[station]} priority weakness"
            )

    return analysis


@dataclass
class RaceEstimate:
    """Estimated race time with its breakdown in seconds."""
    total: float
    running: float
    stations: float
    transitions: float

    def to_dict(self) -> Dict:
        return {
            "total": self.total,
            "running": self.running,
            "stations": self.stations,
            "transitions": self.transitions,
        }


def estimate_race_time(station_times: Dict[Station, float],
                       run_pace: float,
                       transition_seconds: Optional[float] = None) -> RaceEstimate:
    """Estimate a full race: 8 x 1 km at run_pace, the supplied stations and 8 transitions."""
    if transition_seconds is None:
        transition_seconds = config.TRANSITION_SECONDS

    running = run_pace * config.RUN_SEGMENTS
    stations = float(sum(station_times.values()))
    transitions = transition_seconds * config.RUN_SEGMENTS
    return RaceEstimate(
        total=round(running + stations + transitions),
        running=running,
        stations=stations,
        transitions=transitions,
    )


def get_performance_level(race_time: float, gender: Gender) -> PerformanceLevel:
    """Performance level for a finished race time, by target race time of each level."""
    for level, benchmark in RUNNING_BENCHMARKS[gender].items():
        if race_time <= benchmark.target_race_time:
            return level
    return PerformanceLevel.BEGINNER


@dataclass
class StrengthRequirement:
    """Minimum lift for a division compared against the athlete's current max."""
    lift: str
    required_kg: float
    current_kg: Optional[float]

    @property
    def gap_kg(self) -> Optional[float]:
        if self.current_kg is None:
            return None
        return max(self.required_kg - self.current_kg, 0.0)

    @property
    def is_met(self) -> Optional[bool]:
        if self.current_kg is None:
            return None
        return self.current_kg >= self.required_kg

    def to_dict(self) -> Dict:
        return {
            "lift": self.lift,
            "required_kg": self.required_kg,
            "current_kg": self.current_kg,
            "gap_kg": self.gap_kg,
            "is_met": self.is_met,
        }


def get_strength_requirements(gender: Gender,
                              division: Division,
                              bodyweight_kg: float,
                              deadlift: Optional[float] = None,
                              squat: Optional[float] = None) -> List[StrengthRequirement]:
    """Deadlift and squat minimums for a division. Doubles uses the open standard."""
    table = STRENGTH_BENCHMARKS[gender][Division.PRO if division == Division.PRO else Division.OPEN]
    current = {"deadlift": deadlift, "squat": squat}
    return [
        StrengthRequirement(lift, round(standard.required(bodyweight_kg), 1), current[lift])
        for lift, standard in table.items()
    ]


def parse_time(value) -> Optional[float]:
    """
    Parse a time into seconds.

    Accepts numbers (already seconds) and "MM:SS" or "H:MM:SS" strings.
    Returns None for anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)

    parts = str(value).strip().split(":")
    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        return None

    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds
    if len(numbers) == 1:
        return numbers[0]
    return None


def format_time(seconds: float) -> str:
    """Format seconds as M:SS, or H:MM:SS from one hour."""
    total = int(round(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_pace(seconds_per_km: float) -> str:
    """Format a pace as M:SS/km."""
    return f"{format_time(seconds_per_km)}/km"
