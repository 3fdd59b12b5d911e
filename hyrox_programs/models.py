"""Program structure produced by the generator."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class TrainingPhase(Enum):
    """Periodization phases of the running program."""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    TAPER = "taper"
    RECOVERY = "recovery"


class WorkoutType(Enum):
    RUNNING = "running"
    STRENGTH = "strength"
    STATION = "station"
    RECOVERY = "recovery"


class WorkoutIntensity(Enum):
    RECOVERY = "recovery"
    EASY = "easy"
    MODERATE = "moderate"
    THRESHOLD = "threshold"
    INTERVAL = "interval"
    MAX = "max"


class SegmentType(Enum):
    WARMUP = "warmup"
    WORK = "work"
    INTERVAL = "interval"
    COOLDOWN = "cooldown"


class DayFlag(Enum):
    """Marks a day where a scheduling constraint had to be relaxed."""
    STRENGTH_AFTER_HARD_DAY = "strength_after_hard_day"
    STRENGTH_ON_HARD_DAY = "strength_on_hard_day"


@dataclass
class Segment:
    """One block of a running workout."""
    order: int
    type: SegmentType
    zone: int
    description: str = ""
    duration_min: Optional[float] = None
    distance_km: Optional[float] = None
    reps: Optional[int] = None
    pace: Optional[str] = None                      # display form, "4:15/km" or "5:00/km - 5:38/km"
    pace_seconds: Optional[float] = None            # point pace
    pace_range: Optional[Tuple[float, float]] = None  # (fast, slow) seconds per km

    def to_dict(self) -> Dict:
        return {
            "order": self.order,
            "type": self.type.value,
            "zone": self.zone,
            "description": self.description,
            "duration_min": self.duration_min,
            "distance_km": self.distance_km,
            "reps": self.reps,
            "pace": self.pace,
            "pace_seconds": self.pace_seconds,
            "pace_range": list(self.pace_range) if self.pace_range else None,
        }


@dataclass
class Workout:
    """A single session on a day."""
    type: WorkoutType
    name: str
    intensity: WorkoutIntensity
    duration_min: int
    description: str = ""
    distance_km: Optional[float] = None
    instructions: str = ""
    segments: List[Segment] = field(default_factory=list)
    exercises: List[Any] = field(default_factory=list)  # StrengthExercise for strength sessions

    def to_dict(self) -> Dict:
        return {
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "intensity": self.intensity.value,
            "duration_min": self.duration_min,
            "distance_km": self.distance_km,
            "instructions": self.instructions,
            "segments": [s.to_dict() for s in self.segments],
            "exercises": [e.to_dict() for e in self.exercises],
        }


@dataclass
class Day:
    day_number: int  # 1 = first day of the program week
    date: date
    workouts: List[Workout] = field(default_factory=list)
    notes: str = ""
    flags: List[DayFlag] = field(default_factory=list)

    @property
    def is_rest_day(self) -> bool:
        return not self.workouts

    def to_dict(self) -> Dict:
        return {
            "day_number": self.day_number,
            "date": self.date.isoformat(),
            "notes": self.notes,
            "workouts": [w.to_dict() for w in self.workouts],
            "flags": [f.value for f in self.flags],
        }


@dataclass
class Week:
    week_number: int
    start_date: date
    phase: TrainingPhase
    focus: str
    volume_km: float = 0.0
    running_minutes: int = 0
    days: List[Day] = field(default_factory=list)
    pace_targets: Optional[Any] = None  # ProgressivePaces when a goal pace is known

    def to_dict(self) -> Dict:
        targets = None
        if self.pace_targets is not None:
            targets = {
                "tempo": self.pace_targets.tempo,
                "interval": self.pace_targets.interval,
                "easy": self.pace_targets.easy,
            }
        return {
            "week_number": self.week_number,
            "start_date": self.start_date.isoformat(),
            "phase": self.phase.value,
            "focus": self.focus,
            "volume_km": self.volume_km,
            "running_minutes": self.running_minutes,
            "pace_targets": targets,
            "days": [d.to_dict() for d in self.days],
        }


@dataclass
class Program:
    """A complete periodized training program."""
    client_id: str
    coach_id: str
    name: str
    goal: str
    template_id: Optional[str]
    start_date: date
    end_date: date
    notes: str
    weeks: List[Week] = field(default_factory=list)
    profile: Optional[Any] = None      # HyroxAthleteProfile
    pace_model: Optional[Any] = None   # PaceModel

    def to_dict(self) -> Dict:
        """Convert to dictionary for persistence."""
        return {
            "client_id": self.client_id,
            "coach_id": self.coach_id,
            "name": self.name,
            "goal": self.goal,
            "template_id": self.template_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "notes": self.notes,
            "profile": self.profile.to_dict() if self.profile else None,
            "pace_model": self.pace_model.to_dict() if self.pace_model else None,
            "weeks": [w.to_dict() for w in self.weeks],
        }
