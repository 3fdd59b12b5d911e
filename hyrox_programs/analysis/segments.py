"""
Running workout segments

Turns a running workout into warmup, work and cooldown segments with pace
and heart-rate zone targets from the athlete's pace model. Workouts get no
segments when no valid pace model exists.
"""

import logging
import re
from typing import List, Optional, Tuple

from ..models import Segment, SegmentType, Workout, WorkoutIntensity, WorkoutType
from .benchmarks import format_pace
from .vdot import PaceModel

logger = logging.getLogger(__name__)

# "6x400m", "5 x 1km", "4×1.5 km"
INTERVAL_PATTERN = re.compile(r"(\d+)\s*[x×]\s*(\d+(?:\.\d+)?)\s*(km|m)\b", re.IGNORECASE)

# Pace model band used for each intensity
INTENSITY_PACE_BANDS = {
    WorkoutIntensity.RECOVERY: "easy_min",
    WorkoutIntensity.EASY: "easy_max",
    WorkoutIntensity.MODERATE: "marathon",
    WorkoutIntensity.THRESHOLD: "threshold",
    WorkoutIntensity.INTERVAL: "interval",
    WorkoutIntensity.MAX: "repetition",
}

INTENSITY_ZONES = {
    WorkoutIntensity.RECOVERY: 1,
    WorkoutIntensity.EASY: 1,
    WorkoutIntensity.MODERATE: 2,
    WorkoutIntensity.THRESHOLD: 3,
    WorkoutIntensity.INTERVAL: 4,
    WorkoutIntensity.MAX: 5,
}

WARMUP_MINUTES = 10
COOLDOWN_MINUTES = 5
WARMUP_ZONE = 2
SHORT_REP_ZONE = 4
SHORT_REP_MAX_KM = 1.0
LONG_EASY_RUN_KM = 8.0


def parse_intervals(structure: str) -> Optional[Tuple[int, float]]:
    """Repetitions and rep distance in km from a structure string, or None."""
    if not structure:
        return None
    match = INTERVAL_PATTERN.search(structure)
    if not match:
        return None
    reps = int(match.group(1))
    distance = float(match.group(2))
    if match.group(3).lower() == "m":
        distance /= 1000
    if reps <= 0 or distance <= 0:
        return None
    return reps, distance


def build_segments(workout: Workout, pace_model: Optional[PaceModel]) -> List[Segment]:
    """
    Build pace-targeted segments for a running workout.

    Returns an empty list for non-running workouts and when the pace model is
    missing or invalid.
    """
    if workout.type != WorkoutType.RUNNING:
        return []
    if pace_model is None or not pace_model.is_valid():
        return []

    main_pace = getattr(pace_model, INTENSITY_PACE_BANDS[workout.intensity])
    main_zone = INTENSITY_ZONES[workout.intensity]

    intervals = parse_intervals(workout.instructions)
    if intervals is not None:
        reps, rep_km = intervals
        short_reps = rep_km <= SHORT_REP_MAX_KM
        rep_pace = pace_model.interval if short_reps else main_pace
        rep_zone = SHORT_REP_ZONE if short_reps else main_zone
        return [
            Segment(
                order=1,
                type=SegmentType.WARMUP,
                zone=WARMUP_ZONE,
                description="Easy warmup",
                duration_min=WARMUP_MINUTES,
                pace=format_pace(pace_model.easy_min),
                pace_seconds=pace_model.easy_min,
            ),
            Segment(
                order=2,
                type=SegmentType.INTERVAL,
                zone=rep_zone,
                description=f"{reps} x {rep_km:g} km",
                distance_km=rep_km,
                reps=reps,
                pace=format_pace(rep_pace),
                pace_seconds=rep_pace,
            ),
            Segment(
                order=3,
                type=SegmentType.COOLDOWN,
                zone=WARMUP_ZONE,
                description="Easy cooldown",
                duration_min=COOLDOWN_MINUTES,
                pace=format_pace(pace_model.easy_min),
                pace_seconds=pace_model.easy_min,
            ),
        ]

    distance = workout.distance_km
    if (workout.intensity == WorkoutIntensity.EASY
            and distance is not None and distance > LONG_EASY_RUN_KM):
        # Long easy runs get the whole easy band
        return [Segment(
            order=1,
            type=SegmentType.WORK,
            zone=1,
            description=workout.name,
            duration_min=workout.duration_min,
            distance_km=distance,
            pace=f"{format_pace(pace_model.easy_max)} - {format_pace(pace_model.easy_min)}",
            pace_range=(pace_model.easy_max, pace_model.easy_min),
        )]

    return [Segment(
        order=1,
        type=SegmentType.WORK,
        zone=main_zone,
        description=workout.name,
        duration_min=workout.duration_min,
        distance_km=distance,
        pace=format_pace(main_pace),
        pace_seconds=main_pace,
    )]
