"""
Strength day selection.

Strength sessions are kept off hard running days and off the day after a
hard running day. When a week has too few such days the constraint is
relaxed step by step and every relaxed choice is reported.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config import config
from ..models import Day, DayFlag, WorkoutIntensity, WorkoutType

logger = logging.getLogger(__name__)

HARD_INTENSITIES = {WorkoutIntensity.THRESHOLD, WorkoutIntensity.INTERVAL, WorkoutIntensity.MAX}

# Day indexes (0 = Monday) in order of preference
PREFERRED_PATTERNS = {
    1: [[1], [3], [5], [2], [4], [0], [6]],
    2: [[1, 4], [0, 3], [2, 5]],
    3: [[0, 2, 4], [1, 3, 5]],
}


@dataclass
class DaySelection:
    """Chosen strength days and any constraint relaxations."""
    days: List[int] = field(default_factory=list)
    hard_days: List[int] = field(default_factory=list)
    suitable_days: List[int] = field(default_factory=list)
    relaxed: Dict[int, DayFlag] = field(default_factory=dict)


def is_hard_running_day(day: Optional[Day]) -> bool:
    """A day with a high-intensity or long running workout."""
    if day is None:
        return False
    return any(
        workout.type == WorkoutType.RUNNING
        and (workout.intensity in HARD_INTENSITIES or workout.duration_min >= config.LONG_RUN_MINUTES)
        for workout in day.workouts
    )


def select_strength_days(days: List[Day],
                         sessions_needed: int,
                         previous_week_last_day: Optional[Day] = None) -> DaySelection:
    """
    Pick the days of a week that get a strength session.

    Args:
        days: The week's seven days, Monday first
        sessions_needed: Number of strength sessions this week
        previous_week_last_day: Sunday of the prior week, for the Monday check

    Returns:
        DaySelection with the chosen day indexes in ascending order
    """
    count = min(max(sessions_needed, 0), len(days))
    hard = [is_hard_running_day(day) for day in days]
    after_hard = [
        hard[i - 1] if i > 0 else is_hard_running_day(previous_week_last_day)
        for i in range(len(days))
    ]

    suitable = [i for i in range(len(days)) if not hard[i] and not after_hard[i]]
    selection = DaySelection(
        hard_days=[i for i, is_hard in enumerate(hard) if is_hard],
        suitable_days=list(suitable),
    )
    if count == 0:
        return selection

    chosen = None
    for pattern in PREFERRED_PATTERNS.get(count, []):
        if all(i in suitable for i in pattern):
            chosen = list(pattern)
            break

    if chosen is None:
        # Fill from the strict pool first, then the day after a hard day, then hard days
        candidates = (
            suitable
            + [i for i in range(len(days)) if not hard[i] and after_hard[i]]
            + [i for i in range(len(days)) if hard[i]]
        )
        chosen = candidates[:count]

    for i in chosen:
        if hard[i]:
            selection.relaxed[i] = DayFlag.STRENGTH_ON_HARD_DAY
        elif after_hard[i]:
            selection.relaxed[i] = DayFlag.STRENGTH_AFTER_HARD_DAY

    if selection.relaxed:
        logger.warning(
            f"Only {len(suitable)} unconstrained strength days for {count} sessions; "
            f"relaxed days: {sorted(selection.relaxed)}"
        )

    selection.days = sorted(chosen)
    return selection
