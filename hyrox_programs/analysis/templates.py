"""
HYROX Program Templates

HYROX race format: 8 x 1 km runs, each followed by a functional station
(SkiErg, Sled Push, Sled Pull, Burpee Broad Jump, Rowing, Farmers Carry,
Sandbag Lunges, Wall Balls).

Templates are static week-by-week plans that the generator maps onto an
athlete's calendar and scales to their profile.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional

from .benchmarks import Station

logger = logging.getLogger(__name__)


class ProgramGenerationError(Exception):
    """Base error for program generation failures."""
    pass


class TemplateError(ProgramGenerationError):
    """Raised when template data is malformed."""
    pass


class TemplateWorkoutType(Enum):
    RUNNING = "running"
    STRENGTH = "strength"
    STATION_PRACTICE = "station_practice"
    HYROX_SIMULATION = "hyrox_simulation"
    INTERVAL = "interval"
    ENDURANCE = "endurance"
    RECOVERY = "recovery"
    MIXED = "mixed"


class TemplateIntensity(Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    RACE_PACE = "race_pace"


RUNNING_TYPES = {TemplateWorkoutType.RUNNING, TemplateWorkoutType.INTERVAL, TemplateWorkoutType.ENDURANCE}

# Phase labels a template week may carry
TEMPLATE_PHASES = ("BASE", "BUILD", "PEAK", "TAPER", "RACE", "RECOVERY")
_PHASE_ORDER = {"BASE": 0, "BUILD": 1, "PEAK": 2, "TAPER": 3, "RACE": 3}

# Minutes per km used to estimate run duration from distance
_MINUTES_PER_KM = {
    TemplateIntensity.EASY: 6.0,
    TemplateIntensity.MODERATE: 5.0,
}
_DEFAULT_MINUTES_PER_KM = 4.5

_RUN_DESCRIPTIONS = {
    TemplateIntensity.EASY: "Conversational aerobic running",
    TemplateIntensity.MODERATE: "Steady running at a controlled effort",
    TemplateIntensity.HARD: "Hard running around threshold",
    TemplateIntensity.RACE_PACE: "Running at HYROX race pace",
}


@dataclass(frozen=True)
class TemplateWorkout:
    type: TemplateWorkoutType
    name: str
    description: str
    duration_min: int
    intensity: TemplateIntensity
    stations: tuple = ()
    running_distance_m: Optional[float] = None
    structure: str = ""

    @property
    def is_running(self) -> bool:
        return self.type in RUNNING_TYPES


@dataclass(frozen=True)
class TemplateDay:
    day_number: int
    workouts: tuple = ()
    is_rest_day: bool = False


@dataclass(frozen=True)
class TemplateWeek:
    week_number: int
    phase: str
    focus: str
    total_hours: float
    days: tuple = ()


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    description: str
    duration_weeks: int
    target_level: str
    target_time: str = ""
    weeks: tuple = ()


def running(name: str, distance_m: float, intensity: TemplateIntensity, structure: str = "") -> TemplateWorkout:
    minutes_per_km = _MINUTES_PER_KM.get(intensity, _DEFAULT_MINUTES_PER_KM)
    duration = int(round(distance_m / 1000 * minutes_per_km))
    return TemplateWorkout(
        type=TemplateWorkoutType.RUNNING,
        name=name,
        description=_RUN_DESCRIPTIONS[intensity],
        duration_min=duration,
        intensity=intensity,
        running_distance_m=distance_m,
        structure=structure,
    )


def station_practice(name: str, stations: List[Station], intensity: TemplateIntensity,
                     duration: int, description: str) -> TemplateWorkout:
    return TemplateWorkout(
        type=TemplateWorkoutType.STATION_PRACTICE,
        name=name,
        description=description,
        duration_min=duration,
        intensity=intensity,
        stations=tuple(stations),
    )


def strength(name: str, duration: int, intensity: TemplateIntensity, structure: str) -> TemplateWorkout:
    return TemplateWorkout(
        type=TemplateWorkoutType.STRENGTH,
        name=name,
        description="Strength training for HYROX",
        duration_min=duration,
        intensity=intensity,
        structure=structure,
    )


def simulation(name: str, duration: int, structure: str, description: str = "HYROX simulation",
               stations: Optional[List[Station]] = None) -> TemplateWorkout:
    return TemplateWorkout(
        type=TemplateWorkoutType.HYROX_SIMULATION,
        name=name,
        description=description,
        duration_min=duration,
        intensity=TemplateIntensity.RACE_PACE,
        stations=tuple(stations if stations is not None else Station),
        structure=structure,
    )


def rest(day_number: int) -> TemplateDay:
    return TemplateDay(day_number=day_number, workouts=(), is_rest_day=True)


def day(day_number: int, *workouts: TemplateWorkout) -> TemplateDay:
    return TemplateDay(day_number=day_number, workouts=tuple(workouts))


EASY = TemplateIntensity.EASY
MODERATE = TemplateIntensity.MODERATE
HARD = TemplateIntensity.HARD

S = Station


# ---------------------------------------------------------------------------
# 12-week beginner program
# ---------------------------------------------------------------------------

HYROX_BEGINNER_12_WEEK = Template(
    id="hyrox-beginner-12",
    name="HYROX Beginner Plan",
    description="12 weeks to a first HYROX. Builds running capacity and introduces every station gradually.",
    duration_weeks=12,
    target_level="beginner",
    target_time="Finish under 90 min",
    weeks=(
        TemplateWeek(1, "BASE", "Introduction to the HYROX format", 5, (
            day(1, running("Easy run", 4000, EASY)),
            day(2, strength("Foundation strength", 45, MODERATE, "3x10 squats, push-ups, rows, lunges")),
            rest(3),
            day(4, running("Interval session", 3000, MODERATE, "6x400m with 90s rest")),
            day(5, station_practice("SkiErg & Row intro", [S.SKIERG, S.ROWING], EASY, 30,
                                    "Technique focus on SkiErg and rower")),
            day(6, running("Long easy run", 6000, EASY)),
            rest(7),
        )),
        TemplateWeek(2, "BASE", "Running base and station technique", 5.5, (
            day(1, running("Tempo run", 4000, MODERATE)),
            day(2, strength("Lower body", 45, MODERATE, "4x8 goblet squats, RDL, step-ups, wall balls intro")),
            rest(3),
            day(4, running("Fartlek", 5000, MODERATE, "5 min easy, 2 min hard x 4")),
            day(5, station_practice("Sled & Farmers Carry", [S.SLED_PUSH, S.SLED_PULL, S.FARMERS_CARRY],
                                    MODERATE, 35, "Introduction to sled and carry work")),
            day(6, running("Long easy run", 7000, EASY)),
            rest(7),
        )),
        TemplateWeek(3, "BASE", "All stations introduced", 6, (
            day(1, running("Easy run", 5000, EASY)),
            day(2, strength("Full body", 50, MODERATE, "Circuit: squats, push-ups, lunges, planks x 4 rounds")),
            day(3, station_practice("Burpee Broad Jump & Lunges", [S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGE],
                                    MODERATE, 30, "Burpee broad jump and walking lunge technique")),
            rest(4),
            day(5, running("Interval session", 4000, HARD, "8x400m with 60s rest")),
            day(6, running("Long easy run", 8000, EASY)),
            rest(7),
        )),
        TemplateWeek(4, "BASE", "Recovery week", 4, (
            day(1, running("Light run", 4000, EASY)),
            day(2, strength("Light strength", 30, EASY, "Mobility and light exercises")),
            rest(3),
            day(4, running("Easy run", 5000, EASY)),
            day(5, station_practice("Wall Balls intro", [S.WALL_BALLS], EASY, 20,
                                    "5x10 wall balls with a technique focus")),
            day(6, running("Light run", 5000, EASY)),
            rest(7),
        )),
        TemplateWeek(5, "BUILD", "Raise intensity and volume", 6.5, (
            day(1, running("Tempo", 5000, MODERATE)),
            day(2, strength("HYROX strength", 50, MODERATE, "Wall balls, farmers carry, sled work")),
            day(3, station_practice("Half HYROX", [S.SKIERG, S.SLED_PUSH, S.ROWING, S.WALL_BALLS],
                                    MODERATE, 45, "4 stations + 4x1km running")),
            rest(4),
            day(5, running("Intervals", 5000, HARD, "5x1km with 2 min rest")),
            day(6, running("Long run", 10000, EASY)),
            rest(7),
        )),
        TemplateWeek(6, "BUILD", "Station endurance", 7, (
            day(1, running("Fartlek", 6000, MODERATE, "1km easy, 500m hard x 4")),
            day(2, strength("Upper body & core", 45, MODERATE, "Pull-ups, push-ups, KB swings, planks")),
            day(3, station_practice("Roxzone training",
                                    [S.SKIERG, S.SLED_PUSH, S.SLED_PULL, S.BURPEE_BROAD_JUMP],
                                    HARD, 40, "Stations 1-4 at race pace")),
            rest(4),
            day(5, running("Tempo", 6000, MODERATE)),
            day(6, running("Long run", 12000, EASY)),
            rest(7),
        )),
        TemplateWeek(7, "BUILD", "Race simulation", 7, (
            day(1, running("Tempo intervals", 5000, MODERATE, "5x1km @ race pace")),
            day(2, strength("HYROX specific", 50, MODERATE, "Focus on weak stations")),
            day(3, station_practice("Roxzone stations 5-8",
                                    [S.ROWING, S.FARMERS_CARRY, S.SANDBAG_LUNGE, S.WALL_BALLS],
                                    HARD, 45, "Stations 5-8 at race pace")),
            rest(4),
            day(5, running("Intervals", 6000, HARD, "6x1km with 90s rest")),
            day(6, running("Long run", 14000, EASY)),
            rest(7),
        )),
        TemplateWeek(8, "BUILD", "Recovery week", 5, (
            day(1, running("Light run", 5000, EASY)),
            day(2, strength("Light strength", 35, EASY, "Mobility and technique work")),
            rest(3),
            day(4, running("Easy run", 6000, EASY)),
            day(5, station_practice("Technique focus", [S.WALL_BALLS, S.BURPEE_BROAD_JUMP], EASY, 25,
                                    "Focus on efficient technique")),
            day(6, running("Light long run", 8000, EASY)),
            rest(7),
        )),
        TemplateWeek(9, "PEAK", "Full HYROX simulation", 8, (
            day(1, running("Race pace run", 6000, HARD, "6x1km @ goal pace")),
            day(2, strength("HYROX prep", 45, MODERATE, "All station muscle groups")),
            rest(3),
            day(4, simulation("Full HYROX sim", 90, "Complete HYROX with 8x1km + all stations")),
            rest(5),
            day(6, running("Recovery run", 5000, EASY)),
            rest(7),
        )),
        TemplateWeek(10, "PEAK", "Sharpen race strategy", 7, (
            day(1, running("Tempo", 5000, MODERATE)),
            day(2, station_practice("Race pace stations", [S.SLED_PUSH, S.SLED_PULL, S.FARMERS_CARRY],
                                    HARD, 35, "Focus on the weakest stations")),
            rest(3),
            day(4, running("Intervals", 5000, HARD, "10x500m")),
            day(5, strength("Maintenance strength", 40, MODERATE, "Light but effective")),
            day(6, running("Long run", 12000, EASY)),
            rest(7),
        )),
        TemplateWeek(11, "TAPER", "Taper - keep intensity, cut volume", 5, (
            day(1, running("Race pace", 4000, HARD, "4x1km @ goal pace")),
            day(2, station_practice("Station run-through", [S.SKIERG, S.ROWING, S.WALL_BALLS], MODERATE, 25,
                                    "Short, intense intervals")),
            rest(3),
            day(4, running("Light tempo", 4000, MODERATE)),
            day(5, strength("Activation", 25, EASY, "Light activation exercises")),
            day(6, running("Short run", 3000, EASY)),
            rest(7),
        )),
        TemplateWeek(12, "RACE", "Race week", 3, (
            day(1, running("Easy shakeout", 2000, EASY)),
            day(2, station_practice("Mini activation", [S.WALL_BALLS], EASY, 15, "2x10 wall balls, easy jog")),
            rest(3),
            day(4, running("Openers", 2000, MODERATE, "4x200m strides")),
            rest(5),
            day(6, simulation("HYROX RACE DAY", 90, "Full HYROX Race", "Race day!")),
            rest(7),
        )),
    ),
)


# ---------------------------------------------------------------------------
# 16-week intermediate program
# ---------------------------------------------------------------------------

def _base_week_days(week: int) -> tuple:
    recovery = week == 4
    multiplier = 0.7 if recovery else 0.8 + week * 0.05
    return (
        day(1, running("Tempo run", round(6000 * multiplier), EASY if recovery else MODERATE)),
        day(2, strength("HYROX strength A", 35 if recovery else 50, EASY if recovery else MODERATE,
                        "Squats, deadlifts, push-ups, pull-ups")),
        day(3, station_practice("Station training", [S.SKIERG, S.ROWING], EASY if recovery else MODERATE,
                                25 if recovery else 40, "SkiErg and rowing intervals")),
        rest(4),
        day(5, running("Intervals", round(5000 * multiplier), MODERATE if recovery else HARD,
                       "4x800m" if recovery else "6x1km")),
        day(6,
            running("Long run", round(14000 * multiplier), EASY),
            strength("HYROX strength B", 25 if recovery else 40, MODERATE, "Wall balls, farmers carry, lunges")),
        rest(7),
    )


def _build_week_days(week: int) -> tuple:
    recovery = week == 8
    reps = 4 if recovery else 6
    return (
        day(1, running("Race pace intervals", 4000 if recovery else 6000, MODERATE if recovery else HARD,
                       f"{reps}x1km @ race pace")),
        day(2, strength("Specific strength", 35 if recovery else 55, EASY if recovery else MODERATE,
                        "HYROX station musculature")),
        day(3, station_practice("Light station work" if recovery else "Half HYROX",
                                [S.SKIERG, S.SLED_PUSH, S.SLED_PULL, S.BURPEE_BROAD_JUMP],
                                EASY if recovery else HARD, 30 if recovery else 50,
                                "Technique focus" if recovery else "Stations 1-4 + 4x1km running")),
        rest(4),
        day(5,
            running("Tempo", 5000 if recovery else 8000, EASY if recovery else MODERATE),
            station_practice("Stations 5-8", [S.ROWING, S.FARMERS_CARRY, S.SANDBAG_LUNGE, S.WALL_BALLS],
                             EASY if recovery else MODERATE, 25 if recovery else 40,
                             "Focus on the later stations")),
        day(6, running("Long run", 10000 if recovery else 16000, EASY)),
        rest(7),
    )


def _peak_week_days(week: int) -> tuple:
    full_simulation = week in (11, 14)
    return (
        day(1, running("Race pace", 5000, HARD, "5x1km @ goal pace")),
        day(2, strength("Activation", 40, MODERATE, "Explosive strength")),
        day(3, simulation("Full HYROX", 85, "Complete race simulation") if full_simulation
            else station_practice("Race pace stations", [S.SLED_PUSH, S.SLED_PULL, S.WALL_BALLS], HARD, 45,
                                  "Focus on weak stations")),
        rest(4),
        day(5, running("Fartlek", 6000, MODERATE, "Varied pace")),
        day(6, running("Recovery run", 5000, EASY) if full_simulation else running("Long run", 12000, EASY)),
        rest(7),
    )


def _taper_week_days() -> tuple:
    return (
        day(1, running("Race pace openers", 4000, HARD, "4x1km")),
        day(2, station_practice("Station activation", [S.SKIERG, S.WALL_BALLS], MODERATE, 25,
                                "Short, fast intervals")),
        rest(3),
        day(4, running("Light tempo", 4000, MODERATE)),
        day(5, strength("Activation", 20, EASY, "Dynamic exercises")),
        day(6, running("Shakeout", 3000, EASY)),
        rest(7),
    )


def _race_week_days() -> tuple:
    return (
        day(1, running("Easy jog", 2500, EASY)),
        day(2, station_practice("Mini activation", [S.WALL_BALLS], EASY, 15, "3x8 wall balls")),
        rest(3),
        day(4, running("Strides", 2000, MODERATE, "6x100m")),
        rest(5),
        day(6, simulation("HYROX RACE DAY", 75, "Full HYROX Race", "Race day - go for your goal time!")),
        rest(7),
    )


def _intermediate_weeks() -> tuple:
    weeks = []
    for i in range(1, 5):
        weeks.append(TemplateWeek(i, "BASE", "Recovery" if i == 4 else "Aerobic base",
                                  5 if i == 4 else 7 + (i - 1) * 0.5, _base_week_days(i)))
    for i in range(5, 11):
        weeks.append(TemplateWeek(i, "BUILD", "Recovery" if i == 8 else "HYROX-specific training",
                                  5.5 if i == 8 else 8 + (i - 5) * 0.3, _build_week_days(i)))
    for i in range(11, 15):
        weeks.append(TemplateWeek(i, "PEAK", "Final simulation" if i == 14 else "Maximum HYROX preparation",
                                  9 - (i - 11) * 0.5, _peak_week_days(i)))
    weeks.append(TemplateWeek(15, "TAPER", "Taper with maintained intensity", 5, _taper_week_days()))
    weeks.append(TemplateWeek(16, "RACE", "Race week - perform!", 3, _race_week_days()))
    return tuple(weeks)


HYROX_INTERMEDIATE_16_WEEK = Template(
    id="hyrox-intermediate-16",
    name="HYROX Intermediate Plan",
    description="16 weeks for experienced athletes improving their HYROX time, focused on weaknesses and race strategy.",
    duration_weeks=16,
    target_level="intermediate",
    target_time="Sub 75 min",
    weeks=_intermediate_weeks(),
)

HYROX_TEMPLATES: Dict[str, Template] = {
    HYROX_BEGINNER_12_WEEK.id: HYROX_BEGINNER_12_WEEK,
    HYROX_INTERMEDIATE_16_WEEK.id: HYROX_INTERMEDIATE_16_WEEK,
}


def get_template(template_id: str) -> Template:
    """Look up a template by id. Raises TemplateError for unknown ids."""
    try:
        return HYROX_TEMPLATES[template_id]
    except KeyError:
        raise TemplateError(f"Unknown template: {template_id}")


def validate_template(template: Template) -> None:
    """
    Check structural integrity of a template.

    Raises:
        TemplateError: on non-contiguous weeks, bad day numbering, unknown or
            regressing phases, or negative distances and durations
    """
    if not template.weeks:
        raise TemplateError(f"Template {template.id} has no weeks")

    previous_rank = -1
    for index, week in enumerate(template.weeks, start=1):
        if week.week_number != index:
            raise TemplateError(
                f"Template {template.id}: expected week {index}, found week {week.week_number}"
            )
        if week.phase not in TEMPLATE_PHASES:
            raise TemplateError(f"Template {template.id} week {index}: unknown phase {week.phase!r}")

        rank = _PHASE_ORDER.get(week.phase)
        if rank is not None:
            if rank < previous_rank:
                raise TemplateError(f"Template {template.id} week {index}: phase {week.phase} regresses")
            previous_rank = rank

        day_numbers = [d.day_number for d in week.days]
        if day_numbers != list(range(1, 8)):
            raise TemplateError(f"Template {template.id} week {index}: days must be numbered 1..7")

        for template_day in week.days:
            for workout in template_day.workouts:
                if workout.duration_min < 0:
                    raise TemplateError(f"Template {template.id} week {index}: negative duration in {workout.name}")
                if workout.running_distance_m is not None and workout.running_distance_m < 0:
                    raise TemplateError(f"Template {template.id} week {index}: negative distance in {workout.name}")


def fit_to_duration(template: Template, duration_weeks: int) -> List[TemplateWeek]:
    """
    Fit template weeks to a requested program length.

    Shorter programs keep the trailing weeks so taper and race week stay
    aligned with race day. Longer programs repeat the first week at the start.
    Weeks are renumbered from 1.
    """
    if duration_weeks <= 0:
        raise TemplateError(f"Cannot fit template to {duration_weeks} weeks")

    weeks = list(template.weeks)
    if duration_weeks < len(weeks):
        weeks = weeks[-duration_weeks:]
        logger.info(f"Trimmed {template.id} to its last {duration_weeks} weeks")
    elif duration_weeks > len(weeks):
        extra = duration_weeks - len(weeks)
        weeks = [weeks[0]] * extra + weeks
        logger.info(f"Extended {template.id} with {extra} extra base weeks")

    return [replace(week, week_number=number) for number, week in enumerate(weeks, start=1)]
