"""
Strength Training Planner Module

Periodized strength sessions for HYROX athletes, aligned with the running
phases and biased towards the stations an athlete loses time on.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from ..config import config
from ..models import TrainingPhase, Workout, WorkoutIntensity, WorkoutType
from .benchmarks import TIME_SINK_STATIONS, Station

logger = logging.getLogger(__name__)


class StrengthPhase(Enum):
    """Strength training phases aligned with running periodization."""
    ANATOMICAL_ADAPTATION = "anatomical_adaptation"  # high volume, low intensity
    MAXIMUM_STRENGTH = "maximum_strength"            # low volume, high intensity
    POWER = "power"                                  # explosive, light loads
    MAINTENANCE = "maintenance"                      # hold strength while running peaks
    TAPER = "taper"                                  # minimal fatigue before race day
    RECOVERY = "recovery"                            # active recovery, minimal load


class SessionType(Enum):
    LOWER = "lower"
    UPPER = "upper"
    FULL_BODY = "full_body"
    POWER = "power"
    STATION_SPECIFIC = "station_specific"


SESSION_NAMES = {
    SessionType.LOWER: "Lower Body Strength",
    SessionType.UPPER: "Upper Body & Pull",
    SessionType.FULL_BODY: "Full Body Strength",
    SessionType.POWER: "Power & Explosiveness",
    SessionType.STATION_SPECIFIC: "Station-Specific Strength",
}

PEAK_POWER_WEEKS = 3


@dataclass(frozen=True)
class PhaseProtocol:
    """Loading parameters for a strength phase, as (min, max) ranges."""
    sets: Tuple[int, int]
    reps: Tuple[int, int]
    intensity: Tuple[int, int]   # percent of 1RM
    rest_seconds: Tuple[int, int]
    tempo: str

    @staticmethod
    def _mid(bounds: Tuple[int, int]) -> int:
        return int(math.floor((bounds[0] + bounds[1]) / 2 + 0.5))

    @property
    def target_sets(self) -> int:
        return self._mid(self.sets)

    @property
    def target_reps(self) -> int:
        return self._mid(self.reps)

    @property
    def target_intensity(self) -> int:
        return self._mid(self.intensity)

    @property
    def target_rest(self) -> int:
        return self._mid(self.rest_seconds)


PHASE_PROTOCOLS = {
    StrengthPhase.ANATOMICAL_ADAPTATION: PhaseProtocol((2, 3), (12, 20), (40, 60), (30, 60), "2-0-2-0"),
    StrengthPhase.MAXIMUM_STRENGTH: PhaseProtocol((3, 5), (3, 6), (80, 95), (120, 180), "3-1-1-0"),
    StrengthPhase.POWER: PhaseProtocol((3, 5), (3, 6), (30, 60), (90, 120), "X-0-X-0"),
    StrengthPhase.MAINTENANCE: PhaseProtocol((2, 3), (5, 8), (70, 85), (90, 120), "2-0-1-0"),
    StrengthPhase.TAPER: PhaseProtocol((2, 3), (5, 8), (70, 85), (90, 120), "2-0-1-0"),
    StrengthPhase.RECOVERY: PhaseProtocol((2, 2), (15, 20), (40, 50), (30, 45), "2-0-2-0"),
}

PHASE_WORKOUT_INTENSITY = {
    StrengthPhase.ANATOMICAL_ADAPTATION: WorkoutIntensity.MODERATE,
    StrengthPhase.MAXIMUM_STRENGTH: WorkoutIntensity.THRESHOLD,
    StrengthPhase.POWER: WorkoutIntensity.INTERVAL,
    StrengthPhase.MAINTENANCE: WorkoutIntensity.MODERATE,
    StrengthPhase.TAPER: WorkoutIntensity.EASY,
    StrengthPhase.RECOVERY: WorkoutIntensity.RECOVERY,
}


@dataclass
class StrengthPRs:
    """One-rep maxes in kg, plus max strict pull-ups."""
    deadlift: Optional[float] = None
    back_squat: Optional[float] = None
    bench_press: Optional[float] = None
    overhead_press: Optional[float] = None
    barbell_row: Optional[float] = None
    pull_ups: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "StrengthPRs":
        return cls(**{k: data.get(k) for k in cls.__dataclass_fields__})


# Exercise id -> (1RM it is loaded from, fraction of that 1RM it corresponds to)
PR_SOURCES = {
    "back_squat": ("back_squat", 1.0),
    "front_squat": ("back_squat", 0.85),
    "goblet_squat": ("back_squat", 0.40),
    "jump_squat": ("back_squat", 1.0),
    "deadlift": ("deadlift", 1.0),
    "romanian_deadlift": ("deadlift", 0.75),
    "bench_press": ("bench_press", 1.0),
    "overhead_press": ("overhead_press", 1.0),
    "barbell_row": ("barbell_row", 1.0),
}


@dataclass(frozen=True)
class StationExercise:
    id: str
    name: str
    primary: bool
    notes: str = ""


STATION_EXERCISES: Dict[Station, List[StationExercise]] = {
    Station.SKIERG: [
        StationExercise("lat_pulldown", "Lat Pulldown", True),
        StationExercise("straight_arm_pulldown", "Straight Arm Pulldown", True),
        StationExercise("pull_ups", "Pull-ups", False),
        StationExercise("barbell_row", "Barbell Row", False),
    ],
    Station.SLED_PUSH: [
        StationExercise("back_squat", "Back Squat", True),
        StationExercise("leg_press", "Leg Press", True),
        StationExercise("goblet_squat", "Goblet Squat", False),
        StationExercise("wall_sit", "Wall Sit", False, "Isometric hold"),
    ],
    Station.SLED_PULL: [
        StationExercise("deadlift", "Deadlift", True),
        StationExercise("romanian_deadlift", "Romanian Deadlift", True),
        StationExercise("barbell_row", "Barbell Row", True),
        StationExercise("cable_row", "Seated Cable Row", False),
    ],
    Station.BURPEE_BROAD_JUMP: [
        StationExercise("box_jump", "Box Jump", True),
        StationExercise("broad_jump", "Standing Broad Jump", True),
        StationExercise("burpee", "Burpee", True),
        StationExercise("jump_squat", "Jump Squat", False),
    ],
    Station.ROWING: [
        StationExercise("barbell_row", "Barbell Row", True),
        StationExercise("seated_row", "Seated Cable Row", True),
        StationExercise("single_arm_row", "Single Arm Dumbbell Row", False),
        StationExercise("hip_thrust", "Barbell Hip Thrust", False, "For drive power"),
    ],
    Station.FARMERS_CARRY: [
        StationExercise("farmers_walk", "Farmer's Walk", True),
        StationExercise("deadlift", "Deadlift", True),
        StationExercise("plate_pinch", "Plate Pinch", False, "Grip strength"),
        StationExercise("shrugs", "Barbell Shrugs", False),
    ],
    Station.SANDBAG_LUNGE: [
        StationExercise("walking_lunge", "Walking Lunge", True),
        StationExercise("bulgarian_split_squat", "Bulgarian Split Squat", True),
        StationExercise("front_squat", "Front Squat", False),
        StationExercise("sandbag_carry", "Sandbag Front Carry", True),
    ],
    Station.WALL_BALLS: [
        StationExercise("front_squat", "Front Squat", True),
        StationExercise("overhead_press", "Overhead Press", True),
        StationExercise("thruster", "Thruster", True),
        StationExercise("wall_ball", "Wall Ball", True),
    ],
}


def primary_exercise(station: Station) -> StationExercise:
    return next(e for e in STATION_EXERCISES[station] if e.primary)


@dataclass(frozen=True)
class WarmupBlock:
    cardio: str
    cardio_minutes: int
    activation: Tuple[Tuple[str, int, int], ...]   # (exercise, sets, reps)
    ramp_up: Tuple[Tuple[int, int], ...] = ()      # (percent of 1RM, reps)

    def to_dict(self) -> Dict:
        return {
            "cardio": self.cardio,
            "cardio_minutes": self.cardio_minutes,
            "activation": [{"exercise": e, "sets": s, "reps": r} for e, s, r in self.activation],
            "ramp_up": [{"percent_1rm": p, "reps": r} for p, r in self.ramp_up],
        }


WARMUPS = {
    SessionType.LOWER: WarmupBlock(
        "Rowing or SkiErg", 5,
        (("Band walks", 2, 10), ("Glute bridges", 2, 12), ("Walking lunges", 1, 10), ("Leg swings", 1, 10)),
        ((40, 8), (60, 5), (75, 3)),
    ),
    SessionType.UPPER: WarmupBlock(
        "SkiErg or rowing", 5,
        (("Band pull-aparts", 2, 15), ("Scapular push-ups", 2, 10), ("Cat-cow stretch", 1, 10),
         ("Arm circles", 1, 10)),
        ((40, 8), (60, 5), (75, 3)),
    ),
    SessionType.FULL_BODY: WarmupBlock(
        "Mixed machine (row/ski)", 6,
        (("World's greatest stretch", 1, 6), ("Inchworms", 2, 5), ("Band walks", 1, 10),
         ("Band pull-aparts", 1, 15)),
        ((40, 6), (55, 4), (70, 2)),
    ),
    SessionType.POWER: WarmupBlock(
        "Dynamic warm-up circuit", 5,
        (("High knees", 2, 20), ("Butt kicks", 2, 20), ("A-skips", 2, 15), ("Pogo jumps", 2, 10)),
        ((30, 5), (45, 4), (55, 3)),
    ),
}
WARMUPS[SessionType.STATION_SPECIFIC] = WARMUPS[SessionType.FULL_BODY]


@dataclass(frozen=True)
class Finisher:
    name: str
    format: str
    exercises: Tuple[Tuple[str, str], ...]  # (exercise, reps)

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "format": self.format,
            "exercises": [{"exercise": e, "reps": r} for e, r in self.exercises],
        }


# No finisher in max strength (keeps neural quality) or taper/recovery
FINISHERS = {
    StrengthPhase.ANATOMICAL_ADAPTATION: Finisher(
        "Metabolic Circuit", "3 rounds", (("Wall Ball", "15"), ("Rowing", "200m"), ("Burpee", "8"))),
    StrengthPhase.POWER: Finisher(
        "HYROX Simulation", "EMOM 10", (("Odd: SkiErg", "15 cal"), ("Even: Burpee Broad Jump", "5"))),
    StrengthPhase.MAINTENANCE: Finisher(
        "Station Practice", "2 rounds", (("SkiErg", "200m"), ("Wall Ball", "10"), ("Row", "200m"))),
}


@dataclass
class StrengthExercise:
    """Individual exercise prescription."""
    id: str
    name: str
    sets: int
    reps: Union[int, str]
    rest_seconds: int
    target_station: Optional[Station] = None
    percent_1rm: Optional[int] = None
    working_weight_kg: Optional[float] = None
    tempo: Optional[str] = None
    notes: str = ""
    priority: bool = False

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "sets": self.sets,
            "reps": self.reps,
            "rest_seconds": self.rest_seconds,
            "target_station": self.target_station.value if self.target_station else None,
            "percent_1rm": self.percent_1rm,
            "working_weight_kg": self.working_weight_kg,
            "tempo": self.tempo,
            "notes": self.notes,
            "priority": self.priority,
        }

    def prescription(self) -> str:
        """Human-readable line, e.g. 'Back Squat: 4 x 5 @ 88% (105 kg)'."""
        text = f"{self.name}: {self.sets} x {self.reps}"
        if self.percent_1rm is not None:
            text += f" @ {self.percent_1rm}%"
        if self.working_weight_kg is not None:
            text += f" ({self.working_weight_kg:g} kg)"
        if self.notes:
            text += f" - {self.notes}"
        return text


@dataclass
class StrengthSession:
    """Complete strength training session."""
    name: str
    session_type: SessionType
    phase: StrengthPhase
    warmup: WarmupBlock
    exercises: List[StrengthExercise] = field(default_factory=list)
    finisher: Optional[Finisher] = None
    duration_min: int = 0

    def to_workout(self) -> Workout:
        """Convert to a program workout."""
        lines = [exercise.prescription() for exercise in self.exercises]
        if self.finisher:
            lines.append(f"Finisher: {self.finisher.name} ({self.finisher.format})")
        return Workout(
            type=WorkoutType.STRENGTH,
            name=self.name,
            description=f"{self.phase.value.replace('_', ' ').title()} - {self.session_type.value.replace('_', ' ')}",
            intensity=PHASE_WORKOUT_INTENSITY[self.phase],
            duration_min=self.duration_min,
            instructions="\n".join(lines),
            exercises=list(self.exercises),
        )

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "session_type": self.session_type.value,
            "phase": self.phase.value,
            "warmup": self.warmup.to_dict(),
            "exercises": [e.to_dict() for e in self.exercises],
            "finisher": self.finisher.to_dict() if self.finisher else None,
            "duration_min": self.duration_min,
        }


def calculate_working_weight(exercise_id: str, percent: Optional[float], prs: Optional[StrengthPRs]) -> Optional[float]:
    """
    Working weight for an exercise from the athlete's 1RMs.

    1RM x exercise adjustment x percent / 100, rounded to the nearest plate
    increment. None when the exercise has no 1RM source or the 1RM is unknown.
    """
    if prs is None or percent is None or exercise_id not in PR_SOURCES:
        return None
    source, adjustment = PR_SOURCES[exercise_id]
    one_rep_max = getattr(prs, source)
    if not one_rep_max or one_rep_max <= 0:
        return None

    step = config.WEIGHT_ROUNDING_KG
    raw = one_rep_max * adjustment * percent / 100
    return math.floor(raw / step + 0.5) * step


class StrengthPlanner:
    """
    Plans periodized strength sessions for HYROX athletes.

    Key principles:
    - Strength phases follow the running phases
    - Weak stations get extra volume and priority
    - Loads come from 1RMs when known, otherwise percentages only
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def align_with_running_phase(self,
                                 running_phase: TrainingPhase,
                                 week_in_phase: int,
                                 weeks_in_phase: int) -> StrengthPhase:
        """
        Map a running phase to a strength phase.

        Args:
            running_phase: Current running phase
            week_in_phase: Week within the phase, from 1
            weeks_in_phase: Length of the phase in weeks

        Returns:
            Strength phase for the week
        """
        if running_phase == TrainingPhase.BASE:
            if week_in_phase <= weeks_in_phase / 2:
                return StrengthPhase.ANATOMICAL_ADAPTATION
            return StrengthPhase.MAXIMUM_STRENGTH
        if running_phase == TrainingPhase.BUILD:
            return StrengthPhase.MAXIMUM_STRENGTH
        if running_phase == TrainingPhase.PEAK:
            if week_in_phase <= PEAK_POWER_WEEKS:
                return StrengthPhase.POWER
            return StrengthPhase.MAINTENANCE
        if running_phase == TrainingPhase.TAPER:
            return StrengthPhase.TAPER
        return StrengthPhase.RECOVERY

    def session_types(self, sessions_per_week: int, phase: StrengthPhase) -> List[SessionType]:
        """Session type for each of the week's strength sessions, in order."""
        if sessions_per_week == 1:
            return [SessionType.FULL_BODY]

        types = []
        for index in range(sessions_per_week):
            if phase == StrengthPhase.POWER:
                types.append(SessionType.POWER if index == 0 else SessionType.STATION_SPECIFIC)
            elif phase == StrengthPhase.TAPER:
                types.append(SessionType.FULL_BODY)
            elif index == 0:
                types.append(SessionType.LOWER)
            elif index == 1:
                types.append(SessionType.UPPER)
            else:
                types.append(SessionType.STATION_SPECIFIC)
        return types

    def create_session(self,
                       phase: StrengthPhase,
                       session_type: SessionType,
                       prs: Optional[StrengthPRs] = None,
                       weak_stations: Optional[List[Station]] = None) -> StrengthSession:
        """Build one strength session."""
        protocol = PHASE_PROTOCOLS[phase]
        weak = list(weak_stations or [])

        builders = {
            SessionType.LOWER: self._lower_body,
            SessionType.UPPER: self._upper_body,
            SessionType.FULL_BODY: self._full_body,
            SessionType.POWER: self._power,
            SessionType.STATION_SPECIFIC: self._station_specific,
        }
        exercises = builders[session_type](phase, protocol, prs, weak)
        if session_type not in (SessionType.STATION_SPECIFIC, SessionType.POWER):
            self._prioritize_weak_stations(exercises, weak)

        warmup = WARMUPS[session_type]
        session = StrengthSession(
            name=SESSION_NAMES[session_type],
            session_type=session_type,
            phase=phase,
            warmup=warmup,
            exercises=exercises,
            finisher=FINISHERS.get(phase),
        )
        session.duration_min = self.estimate_duration(exercises, warmup)
        return session

    def estimate_duration(self, exercises: List[StrengthExercise], warmup: WarmupBlock) -> int:
        """Session minutes: warmup plus roughly 3 s per rep and the prescribed rest."""
        minutes = warmup.cardio_minutes + len(warmup.activation) * 1.5 + len(warmup.ramp_up) * 2
        for exercise in exercises:
            rep_seconds = exercise.reps * 3 if isinstance(exercise.reps, int) else 30
            minutes += exercise.sets * (rep_seconds + exercise.rest_seconds) / 60
        return int(round(minutes))

    def _loaded(self, exercise_id: str, name: str, station: Optional[Station],
                protocol: PhaseProtocol, prs: Optional[StrengthPRs],
                percent: Optional[int] = None) -> StrengthExercise:
        """Main barbell lift at the phase's target sets, reps and intensity."""
        if percent is None:
            percent = protocol.target_intensity
        return StrengthExercise(
            id=exercise_id,
            name=name,
            sets=protocol.target_sets,
            reps=protocol.target_reps,
            rest_seconds=protocol.target_rest,
            target_station=station,
            percent_1rm=percent,
            working_weight_kg=calculate_working_weight(exercise_id, percent, prs),
            tempo=protocol.tempo,
        )

    def _lower_body(self, phase, protocol, prs, weak) -> List[StrengthExercise]:
        exercises = [
            self._loaded("back_squat", "Back Squat", Station.SLED_PUSH, protocol, prs),
            self._loaded("romanian_deadlift", "Romanian Deadlift", Station.SLED_PULL, protocol, prs),
        ]
        if Station.SANDBAG_LUNGE in weak:
            exercises.append(StrengthExercise(
                id="bulgarian_split_squat",
                name="Bulgarian Split Squat",
                sets=protocol.target_sets + 1,
                reps="6 each leg" if phase == StrengthPhase.MAXIMUM_STRENGTH else "10 each leg",
                rest_seconds=protocol.target_rest,
                target_station=Station.SANDBAG_LUNGE,
                tempo=protocol.tempo,
                notes="Priority exercise - weak station",
                priority=True,
            ))
        else:
            exercises.append(StrengthExercise(
                id="walking_lunge",
                name="Walking Lunge",
                sets=protocol.target_sets,
                reps="10 each leg",
                rest_seconds=max(protocol.target_rest - 30, 30),
                target_station=Station.SANDBAG_LUNGE,
                tempo=protocol.tempo,
            ))
        exercises.append(StrengthExercise("front_plank", "Front Plank", 3, "30-45 sec", 45))
        return exercises

    def _upper_body(self, phase, protocol, prs, weak) -> List[StrengthExercise]:
        exercises = [
            self._loaded("barbell_row", "Barbell Row", Station.ROWING, protocol, prs),
            self._loaded("overhead_press", "Overhead Press", Station.WALL_BALLS, protocol, prs),
            StrengthExercise(
                id="lat_pulldown",
                name="Lat Pulldown",
                sets=protocol.target_sets,
                reps=protocol.target_reps + 2,
                rest_seconds=max(protocol.target_rest - 30, 30),
                target_station=Station.SKIERG,
                tempo="2-0-2-0",
            ),
        ]
        max_pull_ups = prs.pull_ups if prs else None
        if max_pull_ups and max_pull_ups >= 5:
            exercises.append(StrengthExercise(
                id="pull_ups",
                name="Pull-ups",
                sets=protocol.target_sets,
                reps=max(3, int(max_pull_ups * 0.6)),
                rest_seconds=protocol.target_rest,
                target_station=Station.SKIERG,
                notes=f"Based on max: {max_pull_ups} reps",
            ))
        exercises.append(StrengthExercise(
            "farmers_hold", "Farmer's Hold", 3, "30-45 sec", 60, Station.FARMERS_CARRY,
            notes="Heavy as possible with good posture",
        ))
        return exercises

    def _full_body(self, phase, protocol, prs, weak) -> List[StrengthExercise]:
        return [
            self._loaded("deadlift", "Deadlift", Station.SLED_PULL, protocol, prs),
            self._loaded("front_squat", "Front Squat", Station.WALL_BALLS, protocol, prs),
            self._loaded("bench_press", "Bench Press", None, protocol, prs),
            self._loaded("barbell_row", "Barbell Row", Station.ROWING, protocol, prs),
            StrengthExercise("dead_bug", "Dead Bug", 3, "10 each side", 45),
        ]

    def _power(self, phase, protocol, prs, weak) -> List[StrengthExercise]:
        jump_squat_weight = calculate_working_weight("jump_squat", 30, prs)
        return [
            StrengthExercise("box_jump", "Box Jump", 4, 5, 90, Station.BURPEE_BROAD_JUMP,
                             tempo="X-0-X-0", notes="Explosive hip extension, step down"),
            StrengthExercise("jump_squat", "Jump Squat", 4, 6, 90, Station.BURPEE_BROAD_JUMP,
                             percent_1rm=30, working_weight_kg=jump_squat_weight, tempo="X-0-X-0",
                             notes="" if jump_squat_weight is not None else "Bodyweight or light load"),
            StrengthExercise("broad_jump", "Standing Broad Jump", 4, 5, 90, Station.BURPEE_BROAD_JUMP,
                             tempo="X-0-X-0", notes="Max effort each rep"),
            StrengthExercise("med_ball_slam", "Med Ball Slam", 3, 8, 60, Station.WALL_BALLS,
                             notes="Explosive overhead throw to ground"),
            StrengthExercise("kb_swing", "Kettlebell Swing", 4, 12, 60, Station.SLED_PULL,
                             notes="Powerful hip snap"),
        ]

    def _station_specific(self, phase, protocol, prs, weak) -> List[StrengthExercise]:
        exercises = []
        if weak:
            for station in weak[:3]:
                exercise = primary_exercise(station)
                percent = protocol.target_intensity if exercise.id in PR_SOURCES else None
                exercises.append(StrengthExercise(
                    id=exercise.id,
                    name=exercise.name,
                    sets=4,
                    reps=protocol.reps[1],
                    rest_seconds=protocol.target_rest,
                    target_station=station,
                    percent_1rm=percent,
                    working_weight_kg=calculate_working_weight(exercise.id, percent, prs),
                    tempo=protocol.tempo,
                    notes=f"Priority: weak station - {station.label}",
                    priority=True,
                ))
        else:
            for station in TIME_SINK_STATIONS:
                exercise = primary_exercise(station)
                percent = protocol.target_intensity if exercise.id in PR_SOURCES else None
                exercises.append(StrengthExercise(
                    id=exercise.id,
                    name=exercise.name,
                    sets=protocol.target_sets,
                    reps=protocol.target_reps,
                    rest_seconds=protocol.target_rest,
                    target_station=station,
                    percent_1rm=percent,
                    working_weight_kg=calculate_working_weight(exercise.id, percent, prs),
                    tempo=protocol.tempo,
                ))

        if not any(e.id == "farmers_walk" for e in exercises):
            exercises.append(StrengthExercise(
                "farmers_walk", "Farmer's Walk", 4, "40m", 90, Station.FARMERS_CARRY,
                notes="Heavy, controlled pace",
            ))
        return exercises

    def _prioritize_weak_stations(self, exercises: List[StrengthExercise], weak: List[Station]) -> None:
        """Extra set and a priority note for exercises that carry over to a weak station."""
        for exercise in exercises:
            if exercise.priority or exercise.target_station not in weak:
                continue
            exercise.sets += 1
            exercise.priority = True
            exercise.notes = "Priority exercise - weak station"
