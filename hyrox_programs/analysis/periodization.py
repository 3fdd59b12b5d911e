"""Template selection, phase mapping and running volume scaling."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..config import config
from ..models import TrainingPhase
from .athlete_profiler import AthleteType, ExperienceLevel, SCALE_FACTOR_LIMITS
from .templates import (
    HYROX_BEGINNER_12_WEEK,
    HYROX_INTERMEDIATE_16_WEEK,
    HYROX_TEMPLATES,
    ProgramGenerationError,
    Template,
    TemplateDay,
    TemplateError,
    TemplateWeek,
)

logger = logging.getLogger(__name__)


class ProgramParamsError(ProgramGenerationError, ValueError):
    """Raised when a program request is invalid."""
    pass


CUSTOM_GOAL = "custom"
BEGINNER_GOALS = {"beginner", "first-race", "first_race"}
INTERMEDIATE_GOALS = {"intermediate", "advanced", "pro", "age-group", "age_group", "doubles", "improve-time"}

# Template phase labels to running phases. Race week is treated as the end of the taper.
PHASE_LABELS = {
    "BASE": TrainingPhase.BASE,
    "BUILD": TrainingPhase.BUILD,
    "PEAK": TrainingPhase.PEAK,
    "TAPER": TrainingPhase.TAPER,
    "RACE": TrainingPhase.TAPER,
    "RECOVERY": TrainingPhase.RECOVERY,
}

PHASE_VOLUME_MULTIPLIERS = {
    TrainingPhase.BASE: 0.85,
    TrainingPhase.BUILD: 1.0,
    TrainingPhase.PEAK: 0.95,
    TrainingPhase.TAPER: 0.6,
    TrainingPhase.RECOVERY: 0.6,
}

ATHLETE_TYPE_VOLUME_MULTIPLIERS = {
    AthleteType.FAST_WEAK: 0.9,
    AthleteType.SLOW_STRONG: 1.15,
    AthleteType.BALANCED: 1.0,
    AthleteType.NEEDS_BOTH: 0.95,
}

ATHLETE_TYPE_FOCUS = {
    AthleteType.FAST_WEAK: "station emphasis",
    AthleteType.SLOW_STRONG: "running volume emphasis",
}

# Custom shell phases by fraction of the program completed
CUSTOM_PHASE_PROGRESS: List[Tuple[float, str, str]] = [
    (0.3, "BASE", "Base building"),
    (0.7, "BUILD", "Build phase"),
    (0.9, "PEAK", "Peak phase"),
    (1.01, "TAPER", "Taper"),
]


@dataclass(frozen=True)
class PhasePosition:
    """Where a week sits inside its phase block (1-based)."""
    phase: TrainingPhase
    week_in_phase: int
    weeks_in_phase: int


def select_template(goal: str, experience_level: Optional[ExperienceLevel] = None) -> Optional[Template]:
    """
    Choose a template for a goal label and experience level.

    Returns None for a custom goal, meaning an empty program shell. Unknown
    goals fall back to the configured default template.

    Raises:
        ProgramParamsError: unknown goal and no fallback template configured
    """
    label = (goal or "").strip().lower()

    if label == CUSTOM_GOAL:
        return None
    if label in BEGINNER_GOALS or experience_level == ExperienceLevel.BEGINNER:
        return HYROX_BEGINNER_12_WEEK
    if label in INTERMEDIATE_GOALS or experience_level in (ExperienceLevel.INTERMEDIATE, ExperienceLevel.ADVANCED):
        return HYROX_INTERMEDIATE_16_WEEK

    fallback = config.get_default_template_id()
    if fallback is None:
        raise ProgramParamsError(f"Unknown goal {goal!r} and no fallback template configured")
    if fallback not in HYROX_TEMPLATES:
        raise TemplateError(f"Configured fallback template {fallback!r} does not exist")

    logger.info(f"Unknown goal {goal!r}, using fallback template {fallback}")
    return HYROX_TEMPLATES[fallback]


def normalize_phase(label: str) -> TrainingPhase:
    """Map a template phase label to a running phase."""
    try:
        return PHASE_LABELS[label.upper()]
    except KeyError:
        raise TemplateError(f"Unknown phase label: {label!r}")


def phase_positions(weeks: List[TemplateWeek]) -> List[PhasePosition]:
    """Week-in-phase and phase length for every week, counting consecutive runs of one phase."""
    phases = [normalize_phase(week.phase) for week in weeks]

    positions: List[PhasePosition] = []
    start = 0
    while start < len(phases):
        end = start
        while end < len(phases) and phases[end] == phases[start]:
            end += 1
        length = end - start
        for offset in range(length):
            positions.append(PhasePosition(phases[start], offset + 1, length))
        start = end
    return positions


def progression_factor(week_in_phase: int, weeks_in_phase: int) -> float:
    """Volume progression within a phase, from 0.9 towards 1.1 at the end of the block."""
    if weeks_in_phase <= 0:
        return 1.0
    ratio = float(np.clip(week_in_phase / weeks_in_phase, 0.0, 1.0))
    return 0.9 + 0.2 * ratio


def scale_running_distance(distance_km: float,
                           scale_factor: float,
                           phase: TrainingPhase,
                           week_in_phase: int,
                           weeks_in_phase: int,
                           athlete_type: Optional[AthleteType] = None) -> float:
    """
    Scale a template running distance to an athlete.

    distance x scale factor x phase multiplier x progression x athlete type
    multiplier. Negative distances are treated as zero and the scale factor is
    clamped to its allowed band.
    """
    distance = max(float(distance_km), 0.0)
    scale = float(np.clip(scale_factor, *SCALE_FACTOR_LIMITS))
    phase_multiplier = PHASE_VOLUME_MULTIPLIERS[phase]
    type_multiplier = ATHLETE_TYPE_VOLUME_MULTIPLIERS.get(athlete_type, 1.0)
    return distance * scale * phase_multiplier * progression_factor(week_in_phase, weeks_in_phase) * type_multiplier


def week_focus(focus: str, athlete_type: Optional[AthleteType]) -> str:
    suffix = ATHLETE_TYPE_FOCUS.get(athlete_type)
    if suffix:
        return f"{focus} ({suffix})"
    return focus


def build_custom_weeks(duration_weeks: int) -> List[TemplateWeek]:
    """An empty program shell with phases assigned by progress through the program."""
    if duration_weeks <= 0:
        raise ProgramParamsError("duration_weeks must be at least 1")

    weeks = []
    for number in range(1, duration_weeks + 1):
        progress = (number - 1) / duration_weeks
        for upper, phase, focus in CUSTOM_PHASE_PROGRESS:
            if progress < upper:
                break
        days = tuple(TemplateDay(day_number=d) for d in range(1, 8))
        weeks.append(TemplateWeek(number, phase, focus, 0, days))
    return weeks


def custom_template(duration_weeks: int) -> Template:
    weeks = build_custom_weeks(duration_weeks)
    return Template(
        id="custom",
        name="Custom HYROX Plan",
        description="Empty program shell for a coach to fill in",
        duration_weeks=duration_weeks,
        target_level="custom",
        weeks=tuple(weeks),
    )


def phase_summary(positions: List[PhasePosition]) -> Dict[TrainingPhase, int]:
    """Number of weeks per phase."""
    summary: Dict[TrainingPhase, int] = {}
    for position in positions:
        summary[position.phase] = summary.get(position.phase, 0) + 1
    return summary
