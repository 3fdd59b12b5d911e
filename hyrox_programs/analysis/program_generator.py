"""
HYROX Program Generator

Assembles a complete periodized program: profiles the athlete, resolves
training paces, maps a template onto the calendar, scales running volume,
adds pace-targeted segments and interleaves strength sessions.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Dict, List, Optional

from ..config import config
from ..models import Day, Program, Week, Workout, WorkoutIntensity, WorkoutType
from .athlete_profiler import (
    HYROX_PACE_INFLATION,
    AthleteProfileInput,
    AthleteProfiler,
    ExperienceLevel,
    HyroxAthleteProfile,
    calculate_progressive_paces,
)
from .benchmarks import (
    BenchmarkProvider,
    Division,
    default_benchmarks,
    format_time,
    get_performance_level,
    get_strength_requirements,
)
from .periodization import (
    PhasePosition,
    ProgramParamsError,
    custom_template,
    phase_positions,
    phase_summary,
    scale_running_distance,
    select_template,
    week_focus,
)
from .segments import build_segments
from .strength_planner import StrengthPlanner, StrengthPRs
from .strength_scheduler import select_strength_days
from .templates import (
    ProgramGenerationError,
    Template,
    TemplateError,
    TemplateIntensity,
    TemplateWeek,
    TemplateWorkout,
    TemplateWorkoutType,
    fit_to_duration,
    validate_template,
)
from .vdot import PaceModel, training_paces

if TYPE_CHECKING:
    from ..api.pace_client import ElitePaceClient

logger = logging.getLogger(__name__)

WORKOUT_TYPES = {
    TemplateWorkoutType.RUNNING: WorkoutType.RUNNING,
    TemplateWorkoutType.INTERVAL: WorkoutType.RUNNING,
    TemplateWorkoutType.ENDURANCE: WorkoutType.RUNNING,
    TemplateWorkoutType.STRENGTH: WorkoutType.STRENGTH,
    TemplateWorkoutType.STATION_PRACTICE: WorkoutType.STATION,
    TemplateWorkoutType.HYROX_SIMULATION: WorkoutType.STATION,
    TemplateWorkoutType.MIXED: WorkoutType.STATION,
    TemplateWorkoutType.RECOVERY: WorkoutType.RECOVERY,
}

WORKOUT_INTENSITIES = {
    TemplateIntensity.EASY: WorkoutIntensity.EASY,
    TemplateIntensity.MODERATE: WorkoutIntensity.MODERATE,
    TemplateIntensity.HARD: WorkoutIntensity.THRESHOLD,
    TemplateIntensity.RACE_PACE: WorkoutIntensity.INTERVAL,
}

# Race day is day 6 of the final week
RACE_DAY_INDEX = 5
MAX_STRENGTH_SESSIONS = 7
REST_DAY_NOTE = "Rest day"

__all__ = [
    "ProgramGenerator",
    "ProgramParams",
    "ProgramParamsError",
    "ProgramGenerationError",
    "TemplateError",
    "generate_program",
]


@dataclass
class ProgramParams:
    """A program request."""
    client_id: str
    coach_id: str
    goal: str
    duration_weeks: int
    sessions_per_week: int = 5
    start_date: Optional[date] = None
    target_date: Optional[date] = None
    experience_level: Optional[ExperienceLevel] = None
    include_strength: bool = False
    strength_sessions_per_week: int = 2
    strength_prs: Optional[StrengthPRs] = None
    notes: Optional[str] = None
    division: Optional[Division] = None
    bodyweight_kg: Optional[float] = None
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict) -> "ProgramParams":
        """Build params from JSON-style data with ISO dates."""
        def _date(key: str) -> Optional[date]:
            value = data.get(key)
            return date.fromisoformat(value) if value else None

        experience = data.get("experience_level")
        division = data.get("division")
        prs = data.get("strength_prs")
        bodyweight = data.get("bodyweight_kg")
        try:
            return cls(
                client_id=str(data["client_id"]),
                coach_id=str(data["coach_id"]),
                goal=str(data.get("goal", "")),
                duration_weeks=int(data["duration_weeks"]),
                sessions_per_week=int(data.get("sessions_per_week", 5)),
                start_date=_date("start_date"),
                target_date=_date("target_date"),
                experience_level=ExperienceLevel(experience) if experience else None,
                include_strength=bool(data.get("include_strength", False)),
                strength_sessions_per_week=int(data.get("strength_sessions_per_week", 2)),
                strength_prs=StrengthPRs.from_dict(prs) if prs else None,
                notes=data.get("notes"),
                division=Division(division) if division else None,
                bodyweight_kg=float(bodyweight) if bodyweight is not None else None,
                name=data.get("name"),
            )
        except KeyError as e:
            raise ProgramParamsError(f"Missing required field: {e}")
        except (TypeError, ValueError) as e:
            raise ProgramParamsError(f"Invalid program parameters: {e}")


class ProgramGenerator:
    """Generates HYROX training programs."""

    def __init__(self,
                 benchmarks: BenchmarkProvider = default_benchmarks,
                 pace_client: Optional["ElitePaceClient"] = None):
        self.profiler = AthleteProfiler(benchmarks)
        self.strength_planner = StrengthPlanner()
        self.pace_client = pace_client
        self.logger = logging.getLogger(__name__)

    def generate(self,
                 params: ProgramParams,
                 athlete: Optional[AthleteProfileInput] = None,
                 pace_model: Optional[PaceModel] = None) -> Program:
        """
        Generate a complete program.

        Args:
            params: Program request
            athlete: Optional athlete benchmarks for profiling and personalization
            pace_model: Optional pace model that overrides provider and VDOT paces

        Returns:
            Program with structured weeks, days, workouts and segments

        Raises:
            ProgramParamsError: invalid request
            TemplateError: malformed template data
        """
        self.validate_params(params)
        start = self.resolve_start_date(params)

        profile = self.profiler.analyze(athlete) if athlete is not None else None
        paces = self.resolve_pace_model(params, profile, pace_model)

        experience = params.experience_level
        if experience is None and athlete is not None:
            experience = athlete.experience_level

        template = select_template(params.goal, experience)
        if template is None:
            template = custom_template(params.duration_weeks)
            template_id = None
        else:
            template_id = template.id
        validate_template(template)

        template_weeks = fit_to_duration(template, params.duration_weeks)
        positions = phase_positions(template_weeks)
        self.logger.info(
            f"Generating {params.duration_weeks}-week program from {template.id} for client {params.client_id}"
        )

        weeks = [
            self._map_week(template_week, position, start, params, profile, paces)
            for template_week, position in zip(template_weeks, positions)
        ]

        if params.include_strength:
            self._add_strength(weeks, positions, params, profile)

        for week in weeks:
            self._summarize_week(week)

        end = start + timedelta(days=7 * len(weeks) - 1)
        return Program(
            client_id=params.client_id,
            coach_id=params.coach_id,
            name=params.name or template.name,
            goal=params.goal,
            template_id=template_id,
            start_date=start,
            end_date=end,
            notes=self._build_notes(params, template, positions, profile, paces),
            weeks=weeks,
            profile=profile,
            pace_model=paces,
        )

    def validate_params(self, params: ProgramParams) -> None:
        """Raise ProgramParamsError for requests that cannot produce a program."""
        if not params.client_id or not params.coach_id:
            raise ProgramParamsError("client_id and coach_id are required")
        if params.duration_weeks is None or params.duration_weeks < 1:
            raise ProgramParamsError(f"duration_weeks must be at least 1, got {params.duration_weeks}")
        if params.sessions_per_week < 1:
            raise ProgramParamsError(f"sessions_per_week must be at least 1, got {params.sessions_per_week}")
        if params.include_strength and not 1 <= params.strength_sessions_per_week <= MAX_STRENGTH_SESSIONS:
            raise ProgramParamsError(
                f"strength_sessions_per_week must be between 1 and {MAX_STRENGTH_SESSIONS}, "
                f"got {params.strength_sessions_per_week}"
            )
        if params.start_date and params.target_date and params.target_date < params.start_date:
            raise ProgramParamsError("target_date is before start_date")
        if params.bodyweight_kg is not None and params.bodyweight_kg <= 0:
            raise ProgramParamsError("bodyweight_kg must be positive")

    def resolve_start_date(self, params: ProgramParams) -> date:
        """Explicit start date, or the date that puts race day of the last week on the target date."""
        if params.start_date is not None:
            return params.start_date
        if params.target_date is not None:
            return params.target_date - timedelta(days=7 * (params.duration_weeks - 1) + RACE_DAY_INDEX)
        raise ProgramParamsError("Either start_date or target_date is required")

    def resolve_pace_model(self,
                           params: ProgramParams,
                           profile: Optional[HyroxAthleteProfile],
                           explicit: Optional[PaceModel] = None) -> Optional[PaceModel]:
        """Explicit paces, then paces from the athlete's race result, then the elite provider."""
        if explicit is not None:
            if explicit.is_valid():
                return explicit
            self.logger.warning("Ignoring invalid pace model supplied with the request")

        if profile is not None and profile.vdot is not None:
            return training_paces(profile.vdot, source=f"VDOT {profile.vdot}")

        if self.pace_client is not None:
            paces = self.pace_client.fetch_paces(params.client_id)
            if paces is not None:
                return paces

        self.logger.info(f"No pace data for client {params.client_id}; running workouts get no pace targets")
        return None

    def _map_week(self,
                  template_week: TemplateWeek,
                  position: PhasePosition,
                  program_start: date,
                  params: ProgramParams,
                  profile: Optional[HyroxAthleteProfile],
                  paces: Optional[PaceModel]) -> Week:
        week_start = program_start + timedelta(days=7 * (template_week.week_number - 1))
        athlete_type = profile.athlete_type if profile else None

        days = []
        for template_day in template_week.days:
            workouts = []
            for template_workout in template_day.workouts:
                if params.include_strength and template_workout.type == TemplateWorkoutType.STRENGTH:
                    continue
                workouts.append(self._convert_workout(template_workout, position, profile, paces))
            days.append(Day(
                day_number=template_day.day_number,
                date=week_start + timedelta(days=template_day.day_number - 1),
                workouts=workouts,
                notes=REST_DAY_NOTE if template_day.is_rest_day else "",
            ))

        week = Week(
            week_number=template_week.week_number,
            start_date=week_start,
            phase=position.phase,
            focus=week_focus(template_week.focus, athlete_type),
            days=days,
        )
        week.pace_targets = self._pace_targets(profile, position)
        self.logger.debug(
            f"Week {week.week_number}: {position.phase.value} "
            f"{position.week_in_phase}/{position.weeks_in_phase}"
        )
        return week

    def _convert_workout(self,
                         template_workout: TemplateWorkout,
                         position: PhasePosition,
                         profile: Optional[HyroxAthleteProfile],
                         paces: Optional[PaceModel]) -> Workout:
        workout_type = WORKOUT_TYPES[template_workout.type]
        description = template_workout.description
        if template_workout.stations:
            description += " (stations: " + ", ".join(s.label for s in template_workout.stations) + ")"

        workout = Workout(
            type=workout_type,
            name=template_workout.name,
            description=description,
            intensity=WORKOUT_INTENSITIES[template_workout.intensity],
            duration_min=template_workout.duration_min,
            instructions=template_workout.structure,
        )

        if workout_type == WorkoutType.RUNNING and template_workout.running_distance_m is not None:
            template_km = template_workout.running_distance_m / 1000
            scale = profile.volume.scale_factor if profile else 1.0
            athlete_type = profile.athlete_type if profile else None
            scaled_km = scale_running_distance(template_km, scale, position.phase,
                                               position.week_in_phase, position.weeks_in_phase,
                                               athlete_type)
            workout.distance_km = round(scaled_km, 2)
            workout.description = f"{description} ({workout.distance_km:g} km)"
            if template_km > 0:
                workout.duration_min = int(round(template_workout.duration_min * scaled_km / template_km))

        workout.segments = build_segments(workout, paces)
        return workout

    def _pace_targets(self, profile: Optional[HyroxAthleteProfile], position: PhasePosition):
        """Weekly tempo/interval/easy paces progressing from current towards goal race pace."""
        if profile is None or profile.goal.goal_time_seconds is None or not profile.estimated_station_time:
            return None

        current = profile.hyrox_run_pace
        if current is None and profile.pure_run_pace is not None:
            current = profile.pure_run_pace * HYROX_PACE_INFLATION
        if current is None:
            return None

        transitions = config.TRANSITION_SECONDS * config.RUN_SEGMENTS
        goal_pace = (profile.goal.goal_time_seconds - profile.estimated_station_time - transitions) / config.RUN_SEGMENTS
        if goal_pace <= 0:
            return None
        return calculate_progressive_paces(current, goal_pace, position.phase.value,
                                           position.week_in_phase, position.weeks_in_phase)

    def _add_strength(self,
                      weeks: List[Week],
                      positions: List[PhasePosition],
                      params: ProgramParams,
                      profile: Optional[HyroxAthleteProfile]) -> None:
        sessions = params.strength_sessions_per_week
        weak = list(profile.weak_stations) if profile else []
        previous_last_day = None

        for week, position in zip(weeks, positions):
            phase = self.strength_planner.align_with_running_phase(
                position.phase, position.week_in_phase, position.weeks_in_phase
            )
            selection = select_strength_days(week.days, sessions, previous_last_day)
            session_types = self.strength_planner.session_types(sessions, phase)

            for session_type, day_index in zip(session_types, selection.days):
                session = self.strength_planner.create_session(phase, session_type, params.strength_prs, weak)
                day = week.days[day_index]
                day.workouts.append(session.to_workout())
                if day_index in selection.relaxed:
                    day.flags.append(selection.relaxed[day_index])

            previous_last_day = week.days[-1]

        self.logger.info(f"Added {sessions} strength sessions per week to {len(weeks)} weeks")

    def _summarize_week(self, week: Week) -> None:
        running = [w for day in week.days for w in day.workouts if w.type == WorkoutType.RUNNING]
        week.volume_km = round(sum(w.distance_km or 0.0 for w in running), 1)
        week.running_minutes = sum(w.duration_min for w in running)

        for day in week.days:
            if day.notes == REST_DAY_NOTE and day.workouts:
                day.notes = ""
            if day.flags:
                day.notes = "Strength placed next to hard running: no other day was available"

    def _build_notes(self,
                     params: ProgramParams,
                     template: Template,
                     positions: List[PhasePosition],
                     profile: Optional[HyroxAthleteProfile],
                     paces: Optional[PaceModel]) -> str:
        lines = []
        if params.notes:
            lines.append(params.notes)
        lines.append(f"Template: {template.name}")
        phases = phase_summary(positions)
        lines.append("Phases: " + ", ".join(f"{phase.value} {weeks} wk" for phase, weeks in phases.items()))

        if profile is not None:
            label = profile.athlete_type.value.replace("_", " ").title()
            lines.append(f"Athlete profile: {label} - {profile.description}")
            if profile.weak_stations:
                lines.append("Priority stations: " + ", ".join(s.label for s in profile.weak_stations))
            lines.extend(profile.station_recommendations)
            if profile.volume.scale_factor != 1.0:
                lines.append(
                    f"Running volume adjusted {profile.volume.adjustment_percent:+d}% "
                    f"(scale factor {profile.volume.scale_factor})"
                )
            estimated = profile.goal.estimated_current_time
            if estimated is not None:
                level = get_performance_level(estimated, profile.gender)
                lines.append(f"Estimated race time: {format_time(estimated)} ({level.value.replace('_', ' ')} level)")
            lines.append(f"Goal: {profile.goal.assessment}")
            lines.extend(self._strength_requirement_notes(params, profile))

        if paces is not None:
            lines.append(f"Training paces from {paces.source} ({paces.confidence.value} confidence)")
        else:
            lines.append("No pace data: running workouts have no pace targets")

        if params.include_strength:
            lines.append(
                f"Strength: {params.strength_sessions_per_week} sessions per week, periodized with the running phases"
            )
        return "\n".join(lines)

    def _strength_requirement_notes(self, params: ProgramParams, profile: HyroxAthleteProfile) -> List[str]:
        if params.bodyweight_kg is None:
            return []
        division = params.division or Division.OPEN
        prs = params.strength_prs or StrengthPRs()
        notes = []
        for requirement in get_strength_requirements(profile.gender, division, params.bodyweight_kg,
                                                     prs.deadlift, prs.back_squat):
            if requirement.current_kg is None:
                notes.append(f"{division.value.title()} division target {requirement.lift}: "
                             f"at least {requirement.required_kg:g} kg")
            elif not requirement.is_met:
                notes.append(f"Increase {requirement.lift}: {requirement.current_kg:g} -> "
                             f"{requirement.required_kg:g} kg for the {division.value} division")
        return notes


def generate_program(params: ProgramParams,
                     athlete: Optional[AthleteProfileInput] = None,
                     pace_model: Optional[PaceModel] = None,
                     pace_client: Optional["ElitePaceClient"] = None) -> Program:
    """Generate a program with the default benchmark tables."""
    return ProgramGenerator(pace_client=pace_client).generate(params, athlete, pace_model)
