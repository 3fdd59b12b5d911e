"""
HYROX Athlete Profiler

Classifies an athlete from sparse benchmark data: runner type from a race
result, station type from station times, the combined athlete type that
drives programming, a weekly volume recommendation and a goal time
feasibility assessment.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from ..config import config
from .benchmarks import (
    BenchmarkProvider,
    Gender,
    PerformanceLevel,
    Station,
    analyze_station_weaknesses,
    default_benchmarks,
    estimate_race_time,
    format_time,
    parse_time,
)
from .vdot import RaceDistance, calculate_vdot

logger = logging.getLogger(__name__)


class ExperienceLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class RunnerType(Enum):
    FAST = "fast"
    AVERAGE = "average"
    SLOW = "slow"


class StationType(Enum):
    STRONG = "strong"
    AVERAGE = "average"
    WEAK = "weak"


class AthleteType(Enum):
    """Combined running/station classification that drives programming."""
    FAST_WEAK = "fast_weak"        # strong runner, loses time on stations
    SLOW_STRONG = "slow_strong"    # strong on stations, loses time running
    BALANCED = "balanced"
    NEEDS_BOTH = "needs_both"


class PaceDegradationLevel(Enum):
    ELITE = "elite"
    ADVANCED = "advanced"
    INTERMEDIATE = "intermediate"
    BEGINNER = "beginner"


class FeasibilityTier(Enum):
    ALREADY_UNDER_GOAL = "already_under_goal"
    ACHIEVABLE = "achievable"
    AMBITIOUS = "ambitious"
    VERY_AMBITIOUS = "very_ambitious"
    UNREALISTIC = "unrealistic"
    INSUFFICIENT_DATA = "insufficient_data"


# Runner type thresholds: (fast, average). VDOT is "at least", pace is "at most".
VDOT_THRESHOLDS = {
    Gender.MALE: (50.0, 42.0),
    Gender.FEMALE: (45.0, 38.0),
}
PACE_THRESHOLDS = {
    Gender.MALE: (270.0, 315.0),
    Gender.FEMALE: (300.0, 360.0),
}

# Composite station score: at most 90 is strong, at most 110 average
STATION_SCORE_THRESHOLDS = (90.0, 110.0)

# Ordered tiers: first upper bound that holds wins
DEGRADATION_TIERS: List[Tuple[float, PaceDegradationLevel]] = [
    (5.0, PaceDegradationLevel.ELITE),
    (10.0, PaceDegradationLevel.ADVANCED),
    (20.0, PaceDegradationLevel.INTERMEDIATE),
    (math.inf, PaceDegradationLevel.BEGINNER),
]

# Benchmark level an athlete is measured against, by experience
TARGET_LEVELS = {
    None: PerformanceLevel.ADVANCED,
    ExperienceLevel.BEGINNER: PerformanceLevel.INTERMEDIATE,
    ExperienceLevel.INTERMEDIATE: PerformanceLevel.ADVANCED,
    ExperienceLevel.ADVANCED: PerformanceLevel.ELITE,
}

# Recommended weekly running km (min, max) per athlete type
WEEKLY_KM_RECOMMENDATIONS = {
    AthleteType.FAST_WEAK: (40.0, 50.0),
    AthleteType.SLOW_STRONG: (50.0, 70.0),
    AthleteType.BALANCED: (45.0, 60.0),
    AthleteType.NEEDS_BOTH: (40.0, 55.0),
}

# Scale factor bands: (ratio multiplier, low, high)
SCALE_BANDS = {
    AthleteType.FAST_WEAK: (1.0, 0.7, 1.1),
    AthleteType.SLOW_STRONG: (1.1, 0.8, 1.4),
    AthleteType.BALANCED: (1.0, 0.7, 1.3),
    AthleteType.NEEDS_BOTH: (1.0, 0.7, 1.3),
}
SCALE_FACTOR_LIMITS = (0.7, 1.4)

STATION_SESSIONS_PER_WEEK = {
    AthleteType.FAST_WEAK: 3,
    AthleteType.SLOW_STRONG: 1,
    AthleteType.BALANCED: 2,
    AthleteType.NEEDS_BOTH: 2,
}

# HYROX running is slower than open running on fresh legs
HYROX_PACE_INFLATION = 1.10

# Ordered feasibility tiers on the gap as a percent of the current estimate
FEASIBILITY_TIERS: List[Tuple[float, FeasibilityTier, bool, str]] = [
    (0.0, FeasibilityTier.ALREADY_UNDER_GOAL, True,
     "Estimated time is already at or under the goal - consider a faster target"),
    (5.0, FeasibilityTier.ACHIEVABLE, True,
     "Goal is achievable with focused training"),
    (10.0, FeasibilityTier.AMBITIOUS, True,
     "Goal is ambitious but realistic with consistent training"),
    (15.0, FeasibilityTier.VERY_AMBITIOUS, False,
     "Goal is very ambitious - expect it to take more than one training block"),
    (math.inf, FeasibilityTier.UNREALISTIC, False,
     "Goal is unrealistic for this block - pick a nearer target"),
]

PROFILE_DESCRIPTIONS = {
    AthleteType.FAST_WEAK: "Strong runner who loses time on the stations",
    AthleteType.SLOW_STRONG: "Strong on the stations, loses time on the runs",
    AthleteType.BALANCED: "Balanced profile between running and stations",
    AthleteType.NEEDS_BOTH: "Room to improve both running and stations",
}

TRAINING_FOCUS = {
    AthleteType.FAST_WEAK: [
        "Maintain running volume, do not build it further",
        "Prioritize station technique and station-specific strength",
        "Practice running on fatigued legs after stations",
    ],
    AthleteType.SLOW_STRONG: [
        "Build aerobic running volume",
        "Add threshold work to raise sustainable pace",
        "Keep stations sharp with one session per week",
    ],
    AthleteType.BALANCED: [
        "Develop running and stations in parallel",
        "Use race simulations to practice transitions",
    ],
    AthleteType.NEEDS_BOTH: [
        "Build an aerobic base before adding intensity",
        "Learn efficient technique on every station",
        "Progress volume gradually to stay healthy",
    ],
}

DEGRADATION_INSIGHTS = {
    PaceDegradationLevel.ADVANCED: "Running holds up well under fatigue; compromised runs keep it there",
    PaceDegradationLevel.INTERMEDIATE: "Pace drops noticeably after stations - add compromised running",
    PaceDegradationLevel.BEGINNER: "Large pace drop after stations - compromised running is a priority",
}


@dataclass
class AthleteProfileInput:
    """Sparse athlete data. Every field except gender is optional."""
    gender: Gender
    race_distance: Optional[RaceDistance] = None
    race_time_seconds: Optional[float] = None
    hyrox_run_pace: Optional[float] = None
    station_times: Optional[Dict[Station, float]] = None
    current_weekly_km: Optional[float] = None
    experience_level: Optional[ExperienceLevel] = None
    goal_time_seconds: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "AthleteProfileInput":
        """Build input from JSON-style data with "MM:SS" times and station names."""
        stations = data.get("station_times")
        station_times = None
        if stations:
            station_times = {Station.parse(name): parse_time(value) for name, value in stations.items()}

        distance = data.get("race_distance")
        experience = data.get("experience_level")
        weekly_km = data.get("current_weekly_km")
        return cls(
            gender=Gender(str(data["gender"]).lower()),
            race_distance=RaceDistance.parse(distance) if distance else None,
            race_time_seconds=parse_time(data.get("race_time")),
            hyrox_run_pace=parse_time(data.get("hyrox_run_pace")),
            station_times=station_times,
            current_weekly_km=float(weekly_km) if weekly_km is not None else None,
            experience_level=ExperienceLevel(experience) if experience else None,
            goal_time_seconds=parse_time(data.get("goal_time")),
        )


@dataclass(frozen=True)
class VolumeRecommendation:
    current_weekly_km: Optional[float]
    recommended_weekly_km: float
    scale_factor: float
    band: Tuple[float, float]

    @property
    def adjustment_percent(self) -> int:
        return int(round((self.scale_factor - 1) * 100))

    def to_dict(self) -> Dict:
        return {
            "current_weekly_km": self.current_weekly_km,
            "recommended_weekly_km": self.recommended_weekly_km,
            "scale_factor": self.scale_factor,
            "band": list(self.band),
        }


@dataclass(frozen=True)
class GoalFeasibility:
    goal_time_seconds: Optional[float]
    estimated_current_time: Optional[float]
    gap_seconds: Optional[float]
    gap_percent: Optional[float]
    tier: FeasibilityTier
    is_realistic: Optional[bool]
    assessment: str

    def to_dict(self) -> Dict:
        return {
            "goal_time_seconds": self.goal_time_seconds,
            "estimated_current_time": self.estimated_current_time,
            "gap_seconds": self.gap_seconds,
            "gap_percent": self.gap_percent,
            "tier": self.tier.value,
            "is_realistic": self.is_realistic,
            "assessment": self.assessment,
        }


@dataclass(frozen=True)
class HyroxAthleteProfile:
    """Classification of one athlete, derived once per request."""
    gender: Gender
    experience_level: Optional[ExperienceLevel]
    target_level: PerformanceLevel

    runner_type: RunnerType
    vdot: Optional[float]
    pure_run_pace: Optional[float]
    hyrox_run_pace: Optional[float]
    pace_degradation: Optional[float]
    pace_degradation_level: Optional[PaceDegradationLevel]
    running_score: int

    station_type: StationType
    station_score: int
    weak_stations: Tuple[Station, ...]
    strong_stations: Tuple[Station, ...]
    station_recommendations: Tuple[str, ...]
    estimated_station_time: Optional[float]

    athlete_type: AthleteType
    description: str
    training_focus: Tuple[str, ...]
    station_sessions_per_week: int
    volume: VolumeRecommendation
    goal: GoalFeasibility

    def to_dict(self) -> Dict:
        return {
            "gender": self.gender.value,
            "experience_level": self.experience_level.value if self.experience_level else None,
            "target_level": self.target_level.value,
            "running": {
                "runner_type": self.runner_type.value,
                "vdot": self.vdot,
                "pure_run_pace": self.pure_run_pace,
                "hyrox_run_pace": self.hyrox_run_pace,
                "pace_degradation": self.pace_degradation,
                "pace_degradation_level": (self.pace_degradation_level.value
                                           if self.pace_degradation_level else None),
                "running_score": self.running_score,
            },
            "stations": {
                "station_type": self.station_type.value,
                "station_score": self.station_score,
                "weak_stations": [s.value for s in self.weak_stations],
                "strong_stations": [s.value for s in self.strong_stations],
                "recommendations": list(self.station_recommendations),
                "estimated_station_time": self.estimated_station_time,
            },
            "athlete_type": self.athlete_type.value,
            "description": self.description,
            "training_focus": list(self.training_focus),
            "station_sessions_per_week": self.station_sessions_per_week,
            "volume": self.volume.to_dict(),
            "goal": self.goal.to_dict(),
        }


@dataclass
class _Signals:
    """Intermediate classification inputs for the athlete type rules."""
    runner_type: RunnerType
    station_type: StationType
    running_score: float
    station_score: float


AthleteTypeRule = Tuple[str, Callable[[_Signals], bool], AthleteType]


def _balanced_gap(s: _Signals) -> float:
    # Station score grows with slowness; mirror it so both scores point the same way
    return abs(s.running_score - (100 - (s.station_score - 100)))


# First matching rule wins
ATHLETE_TYPE_RULES: List[AthleteTypeRule] = [
    ("fast runner, weak stations",
     lambda s: s.runner_type == RunnerType.FAST and s.station_type == StationType.WEAK,
     AthleteType.FAST_WEAK),
    ("fast runner, stations far behind",
     lambda s: s.runner_type == RunnerType.FAST and s.station_score > config.FAST_WEAK_STATION_SCORE,
     AthleteType.FAST_WEAK),
    ("slow runner, strong stations",
     lambda s: s.runner_type == RunnerType.SLOW and s.station_type == StationType.STRONG,
     AthleteType.SLOW_STRONG),
    ("slow runner, stations well ahead",
     lambda s: s.runner_type == RunnerType.SLOW and s.station_score < config.SLOW_STRONG_STATION_SCORE,
     AthleteType.SLOW_STRONG),
    ("scores close together",
     lambda s: (_balanced_gap(s) <= config.BALANCED_SCORE_GAP
                and s.running_score >= config.BALANCED_MIN_RUNNING_SCORE
                and s.station_score <= config.BALANCED_MAX_STATION_SCORE),
     AthleteType.BALANCED),
    ("not fast, weak stations",
     lambda s: s.runner_type != RunnerType.FAST and s.station_type == StationType.WEAK,
     AthleteType.NEEDS_BOTH),
    ("both scores behind",
     lambda s: (s.running_score < config.BALANCED_MIN_RUNNING_SCORE
                and s.station_score > config.BALANCED_MAX_STATION_SCORE),
     AthleteType.NEEDS_BOTH),
]
DEFAULT_ATHLETE_TYPE = AthleteType.BALANCED


def _positive(value: Optional[float], name: str) -> Optional[float]:
    """Return value when it is a usable positive number, otherwise None."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {name}: {value!r}")
        return None
    if not math.isfinite(number) or number <= 0:
        logger.warning(f"Ignoring non-positive {name}: {value!r}")
        return None
    return number


def classify_runner(gender: Gender, vdot: Optional[float], pace: Optional[float]) -> RunnerType:
    """Runner type from VDOT when known, else from pure running pace, else average."""
    if vdot is not None:
        fast, average = VDOT_THRESHOLDS[gender]
        if vdot >= fast:
            return RunnerType.FAST
        if vdot >= average:
            return RunnerType.AVERAGE
        return RunnerType.SLOW

    if pace is not None:
        fast, average = PACE_THRESHOLDS[gender]
        if pace <= fast:
            return RunnerType.FAST
        if pace <= average:
            return RunnerType.AVERAGE
        return RunnerType.SLOW

    return RunnerType.AVERAGE


def classify_degradation(pure_pace: float, hyrox_pace: float) -> Tuple[float, PaceDegradationLevel]:
    """Percent slowdown of HYROX running over pure running and its tier."""
    degradation = round((hyrox_pace - pure_pace) / pure_pace * 100, 1)
    for upper, level in DEGRADATION_TIERS:
        if degradation <= upper:
            return degradation, level
    return degradation, PaceDegradationLevel.BEGINNER


def classify_stations(score: float) -> StationType:
    strong, average = STATION_SCORE_THRESHOLDS
    if score <= strong:
        return StationType.STRONG
    if score <= average:
        return StationType.AVERAGE
    return StationType.WEAK


def classify_athlete_type(runner_type: RunnerType,
                          station_type: StationType,
                          running_score: float,
                          station_score: float) -> AthleteType:
    """Apply the ordered athlete type rules."""
    signals = _Signals(runner_type, station_type, running_score, station_score)
    for name, predicate, athlete_type in ATHLETE_TYPE_RULES:
        if predicate(signals):
            logger.debug(f"Athlete type rule matched: {name}")
            return athlete_type
    return DEFAULT_ATHLETE_TYPE


def recommend_volume(athlete_type: AthleteType,
                     current_weekly_km: Optional[float],
                     experience_level: Optional[ExperienceLevel]) -> VolumeRecommendation:
    """
    Recommended weekly running volume and the factor that scales template volume.

    Beginners are pointed at the low end of the band, advanced athletes at the
    high end, everyone else at the midpoint. The scale factor is the ratio of
    current to recommended volume, clamped to the athlete type's band.
    """
    low, high = WEEKLY_KM_RECOMMENDATIONS[athlete_type]
    if experience_level == ExperienceLevel.BEGINNER:
        recommended = low
    elif experience_level == ExperienceLevel.ADVANCED:
        recommended = high
    else:
        recommended = (low + high) / 2

    if current_weekly_km is None:
        return VolumeRecommendation(None, recommended, 1.0, (low, high))

    current = max(float(current_weekly_km), 0.0)
    multiplier, band_low, band_high = SCALE_BANDS[athlete_type]
    ratio = current / recommended * multiplier
    scale = float(np.clip(ratio, band_low, band_high))
    scale = float(np.clip(scale, *SCALE_FACTOR_LIMITS))
    return VolumeRecommendation(current, recommended, round(scale, 2), (low, high))


def assess_goal(goal_time: Optional[float], estimated_time: Optional[float]) -> GoalFeasibility:
    """Compare a goal race time against the estimated current race time."""
    if goal_time is None:
        return GoalFeasibility(None, estimated_time, None, None,
                               FeasibilityTier.INSUFFICIENT_DATA, None,
                               "Insufficient data for goal time")
    if estimated_time is None:
        return GoalFeasibility(goal_time, None, None, None,
                               FeasibilityTier.INSUFFICIENT_DATA, None,
                               "Insufficient data for goal time: add station times and a running result")

    gap = estimated_time - goal_time
    gap_percent = round(gap / estimated_time * 100, 1)
    for upper, tier, realistic, message in FEASIBILITY_TIERS:
        if gap_percent <= upper:
            break

    assessment = f"{message} (estimated {format_time(estimated_time)}, goal {format_time(goal_time)})"
    return GoalFeasibility(goal_time, estimated_time, gap, gap_percent, tier, realistic, assessment)


def estimate_current_time(station_times: Optional[Dict[Station, float]],
                          pure_pace: Optional[float],
                          hyrox_pace: Optional[float]) -> Optional[float]:
    """Race estimate from stations plus HYROX pace (or inflated pure pace), if both are known."""
    if not station_times:
        return None
    run_pace = hyrox_pace if hyrox_pace is not None else (
        pure_pace * HYROX_PACE_INFLATION if pure_pace is not None else None)
    if run_pace is None:
        return None
    return estimate_race_time(station_times, run_pace).total


class AthleteProfiler:
    """Builds HyroxAthleteProfile instances from sparse athlete input."""

    def __init__(self, benchmarks: BenchmarkProvider = default_benchmarks):
        self.benchmarks = benchmarks
        self.logger = logging.getLogger(__name__)

    def analyze(self, data: AthleteProfileInput) -> HyroxAthleteProfile:
        """Classify an athlete. Never raises for missing or invalid athlete values."""
        gender = data.gender
        experience = data.experience_level
        target_level = TARGET_LEVELS[experience]

        # Running
        vdot = None
        pure_pace = None
        race_time = _positive(data.race_time_seconds, "race time")
        if data.race_distance is not None and race_time is not None:
            vdot = calculate_vdot(data.race_distance.meters, race_time)
            pure_pace = round(race_time / (data.race_distance.meters / 1000), 1)

        hyrox_pace = _positive(data.hyrox_run_pace, "HYROX run pace")
        runner_type = classify_runner(gender, vdot, pure_pace)

        degradation = None
        degradation_level = None
        if pure_pace is not None and hyrox_pace is not None:
            degradation, degradation_level = classify_degradation(pure_pace, hyrox_pace)

        running_score = 100
        score_pace = hyrox_pace if hyrox_pace is not None else pure_pace
        if score_pace is not None:
            benchmark = self.benchmarks.running_benchmark(gender, target_level)
            running_score = int(round(benchmark.average_pace / score_pace * 100))

        # Stations
        station_times = self._clean_station_times(data.station_times)
        station_score = 100
        weak: List[Station] = []
        strong: List[Station] = []
        recommendations: List[str] = []
        station_total = None
        if station_times:
            analysis = analyze_station_weaknesses(station_times, gender, target_level, self.benchmarks)
            station_score = int(round(float(np.mean([c.ratio * 100 for c in analysis.comparisons]))))
            weak = [s for s in analysis.weak_stations if s not in analysis.strong_stations]
            strong = list(analysis.strong_stations)
            recommendations = list(analysis.recommendations)
            station_total = float(sum(station_times.values()))
        station_type = classify_stations(station_score)

        athlete_type = classify_athlete_type(runner_type, station_type, running_score, station_score)

        weekly_km = data.current_weekly_km
        if weekly_km is not None and not math.isfinite(float(weekly_km)):
            self.logger.warning(f"Ignoring non-finite weekly distance: {weekly_km!r}")
            weekly_km = None
        volume = recommend_volume(athlete_type, weekly_km, experience)

        goal_time = _positive(data.goal_time_seconds, "goal time")
        estimated = estimate_current_time(station_times, pure_pace, hyrox_pace)
        goal = assess_goal(goal_time, estimated)

        focus = list(TRAINING_FOCUS[athlete_type])
        if weak:
            focus.insert(0, "Priority stations: " + ", ".join(s.label for s in weak))
        if degradation_level in DEGRADATION_INSIGHTS:
            focus.append(DEGRADATION_INSIGHTS[degradation_level])

        self.logger.info(
            f"Profiled athlete: {athlete_type.value} (runner {runner_type.value}, "
            f"stations {station_type.value}, scale {volume.scale_factor})"
        )

        return HyroxAthleteProfile(
            gender=gender,
            experience_level=experience,
            target_level=target_level,
            runner_type=runner_type,
            vdot=vdot,
            pure_run_pace=pure_pace,
            hyrox_run_pace=hyrox_pace,
            pace_degradation=degradation,
            pace_degradation_level=degradation_level,
            running_score=running_score,
            station_type=station_type,
            station_score=station_score,
            weak_stations=tuple(weak),
            strong_stations=tuple(strong),
            station_recommendations=tuple(recommendations),
            estimated_station_time=station_total,
            athlete_type=athlete_type,
            description=PROFILE_DESCRIPTIONS[athlete_type],
            training_focus=tuple(focus),
            station_sessions_per_week=STATION_SESSIONS_PER_WEEK[athlete_type],
            volume=volume,
            goal=goal,
        )

    def _clean_station_times(self, station_times: Optional[Dict[Station, float]]) -> Dict[Station, float]:
        if not station_times:
            return {}
        cleaned = {}
        for station, time in station_times.items():
            value = _positive(time, f"{station.value} time")
            if value is not None:
                cleaned[station] = value
        return cleaned


def analyze_profile(data: AthleteProfileInput,
                    benchmarks: BenchmarkProvider = default_benchmarks) -> HyroxAthleteProfile:
    """Convenience wrapper around AthleteProfiler.analyze."""
    return AthleteProfiler(benchmarks).analyze(data)


@dataclass(frozen=True)
class ProgressivePaces:
    """Session paces for one week, in seconds per km."""
    tempo: float
    interval: float
    easy: float


def calculate_progressive_paces(current_pace: float,
                                goal_pace: float,
                                phase: str,
                                week_in_phase: int,
                                weeks_in_phase: int) -> ProgressivePaces:
    """
    Move session paces from current ability towards goal race pace over a block.

    BASE keeps tempo at current pace, BUILD closes half the gap progressively,
    PEAK trains just faster than goal pace and TAPER sits at goal pace.
    """
    phase = phase.upper()
    gap = current_pace - goal_pace
    progress = week_in_phase / weeks_in_phase if weeks_in_phase > 0 else 1.0

    if phase == "BUILD":
        tempo = current_pace - gap * 0.5 * progress
        return ProgressivePaces(tempo=tempo, interval=tempo - 15, easy=current_pace + 50)
    if phase == "PEAK":
        return ProgressivePaces(tempo=goal_pace * 0.98, interval=goal_pace - 20, easy=goal_pace + 45)
    if phase in ("TAPER", "RACE"):
        return ProgressivePaces(tempo=goal_pace, interval=goal_pace - 10, easy=current_pace + 70)
    return ProgressivePaces(tempo=current_pace, interval=current_pace - 15, easy=current_pace + 60)
