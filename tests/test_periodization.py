"""Tests for templates, phase mapping and running volume scaling."""

from dataclasses import replace

import pytest

from hyrox_programs.analysis.athlete_profiler import AthleteType, ExperienceLevel
from hyrox_programs.analysis.periodization import (
    ProgramParamsError,
    build_custom_weeks,
    custom_template,
    normalize_phase,
    phase_positions,
    phase_summary,
    progression_factor,
    scale_running_distance,
    select_template,
    week_focus,
)
from hyrox_programs.analysis.templates import (
    HYROX_BEGINNER_12_WEEK,
    HYROX_INTERMEDIATE_16_WEEK,
    TemplateError,
    fit_to_duration,
    get_template,
    rest,
    validate_template,
)
from hyrox_programs.config import Config
from hyrox_programs.models import TrainingPhase


class TestTemplateSelection:
    """Test goal to template mapping."""

    def test_known_goals(self):
        """Test goal labels map to their templates."""
        assert select_template("beginner") is HYROX_BEGINNER_12_WEEK
        assert select_template("First-Race") is HYROX_BEGINNER_12_WEEK
        assert select_template("pro") is HYROX_INTERMEDIATE_16_WEEK

    def test_custom_goal(self):
        """Test a custom goal gives no template."""
        assert select_template("custom") is None

    def test_experience_decides_unknown_goal(self):
        """Test experience level picks the template for unlabelled goals."""
        assert select_template("get fitter", ExperienceLevel.BEGINNER) is HYROX_BEGINNER_12_WEEK
        assert select_template("get fitter", ExperienceLevel.ADVANCED) is HYROX_INTERMEDIATE_16_WEEK

    def test_unknown_goal_uses_fallback(self):
        """Test the configured fallback template."""
        assert select_template("something else") is HYROX_INTERMEDIATE_16_WEEK

    def test_unknown_goal_without_fallback(self, monkeypatch):
        """Test an unknown goal is rejected when no fallback is configured."""
        monkeypatch.setattr(Config, "DEFAULT_TEMPLATE_ID", "")
        with pytest.raises(ProgramParamsError):
            select_template("something else")

    def test_missing_fallback_template(self, monkeypatch):
        """Test a fallback that names no template."""
        monkeypatch.setattr(Config, "DEFAULT_TEMPLATE_ID", "hyrox-elite-20")
        with pytest.raises(TemplateError):
            select_template("something else")

    def test_get_template(self):
        """Test lookup by id."""
        assert get_template("hyrox-beginner-12") is HYROX_BEGINNER_12_WEEK
        with pytest.raises(TemplateError):
            get_template("nope")


class TestTemplateValidation:
    """Test template integrity checks."""

    def test_builtin_templates_are_valid(self):
        """Test shipped templates pass validation."""
        validate_template(HYROX_BEGINNER_12_WEEK)
        validate_template(HYROX_INTERMEDIATE_16_WEEK)
        validate_template(custom_template(10))

    def test_week_gap(self):
        """Test non-contiguous week numbers."""
        weeks = list(HYROX_BEGINNER_12_WEEK.weeks)
        weeks[3] = replace(weeks[3], week_number=9)
        with pytest.raises(TemplateError):
            validate_template(replace(HYROX_BEGINNER_12_WEEK, weeks=tuple(weeks)))

    def test_bad_day_numbers(self):
        """Test days must be numbered 1 to 7."""
        weeks = list(HYROX_BEGINNER_12_WEEK.weeks)
        weeks[0] = replace(weeks[0], days=weeks[0].days[:6] + (rest(8),))
        with pytest.raises(TemplateError):
            validate_template(replace(HYROX_BEGINNER_12_WEEK, weeks=tuple(weeks)))

    def test_phase_regression(self):
        """Test phases cannot go backwards."""
        weeks = list(HYROX_BEGINNER_12_WEEK.weeks)
        weeks[5] = replace(weeks[5], phase="BASE")
        with pytest.raises(TemplateError):
            validate_template(replace(HYROX_BEGINNER_12_WEEK, weeks=tuple(weeks)))

    def test_unknown_phase(self):
        """Test unknown phase labels."""
        weeks = list(HYROX_BEGINNER_12_WEEK.weeks)
        weeks[0] = replace(weeks[0], phase="OFFSEASON")
        with pytest.raises(TemplateError):
            validate_template(replace(HYROX_BEGINNER_12_WEEK, weeks=tuple(weeks)))


class TestFitToDuration:
    """Test fitting templates to a program length."""

    def test_shorter_keeps_trailing_weeks(self):
        """Test trimming keeps the race week at the end."""
        weeks = fit_to_duration(HYROX_BEGINNER_12_WEEK, 8)

        assert len(weeks) == 8
        assert [w.week_number for w in weeks] == list(range(1, 9))
        assert weeks[0].phase == "BUILD"
        assert weeks[-1].phase == "RACE"

    def test_longer_repeats_first_week(self):
        """Test extension adds base weeks at the start."""
        weeks = fit_to_duration(HYROX_BEGINNER_12_WEEK, 14)

        assert len(weeks) == 14
        assert [w.week_number for w in weeks] == list(range(1, 15))
        assert weeks[0].days == weeks[2].days == HYROX_BEGINNER_12_WEEK.weeks[0].days

    def test_exact_length(self):
        """Test an exact fit keeps every week."""
        weeks = fit_to_duration(HYROX_INTERMEDIATE_16_WEEK, 16)
        assert [w.focus for w in weeks] == [w.focus for w in HYROX_INTERMEDIATE_16_WEEK.weeks]

    def test_zero_weeks(self):
        """Test an empty duration is rejected."""
        with pytest.raises(TemplateError):
            fit_to_duration(HYROX_BEGINNER_12_WEEK, 0)


class TestPhasePositions:
    """Test phase normalization and week-in-phase counting."""

    def test_race_is_taper(self):
        """Test race week normalizes to taper."""
        assert normalize_phase("RACE") == TrainingPhase.TAPER
        assert normalize_phase("build") == TrainingPhase.BUILD
        with pytest.raises(TemplateError):
            normalize_phase("OFFSEASON")

    def test_beginner_positions(self):
        """Test positions across the beginner template."""
        positions = phase_positions(list(HYROX_BEGINNER_12_WEEK.weeks))

        assert positions[0].phase == TrainingPhase.BASE
        assert (positions[0].week_in_phase, positions[0].weeks_in_phase) == (1, 4)
        assert (positions[5].phase, positions[5].week_in_phase) == (TrainingPhase.BUILD, 2)
        # Taper and race week form one block
        assert (positions[11].phase, positions[11].week_in_phase, positions[11].weeks_in_phase) == \
            (TrainingPhase.TAPER, 2, 2)

    def test_phase_summary(self):
        """Test weeks per phase."""
        summary = phase_summary(phase_positions(list(HYROX_INTERMEDIATE_16_WEEK.weeks)))
        assert summary == {
            TrainingPhase.BASE: 4,
            TrainingPhase.BUILD: 6,
            TrainingPhase.PEAK: 4,
            TrainingPhase.TAPER: 2,
        }


class TestVolumeScaling:
    """Test running distance scaling."""

    def test_build_week_two_of_four(self):
        """Test a 10 km run in build week 2 of 4 with a 1.2 scale factor."""
        assert scale_running_distance(10, 1.2, TrainingPhase.BUILD, 2, 4) == pytest.approx(12.0)
        assert scale_running_distance(10, 1.2, TrainingPhase.BUILD, 2, 4, AthleteType.BALANCED) == \
            pytest.approx(12.0)
        assert scale_running_distance(10, 1.2, TrainingPhase.BUILD, 2, 4, AthleteType.FAST_WEAK) == \
            pytest.approx(10.8)

    def test_scale_factor_clamped(self):
        """Test out-of-range scale factors are clamped."""
        assert scale_running_distance(10, 2.0, TrainingPhase.BUILD, 2, 4) == pytest.approx(14.0)
        assert scale_running_distance(10, 0.1, TrainingPhase.BUILD, 2, 4) == pytest.approx(7.0)

    def test_negative_distance(self):
        """Test negative distances scale to zero."""
        assert scale_running_distance(-5, 1.0, TrainingPhase.BASE, 1, 4) == 0

    def test_phase_multipliers(self):
        """Test taper cuts volume."""
        build = scale_running_distance(10, 1.0, TrainingPhase.BUILD, 1, 1)
        taper = scale_running_distance(10, 1.0, TrainingPhase.TAPER, 1, 1)
        assert taper < build

    def test_progression_factor(self):
        """Test progression within a phase."""
        assert progression_factor(1, 4) == pytest.approx(0.95)
        assert progression_factor(4, 4) == pytest.approx(1.1)
        assert progression_factor(1, 0) == 1.0

    def test_week_focus(self):
        """Test athlete type emphasis on the weekly focus."""
        assert week_focus("Aerobic base", AthleteType.FAST_WEAK) == "Aerobic base (station emphasis)"
        assert week_focus("Aerobic base", AthleteType.BALANCED) == "Aerobic base"
        assert week_focus("Aerobic base", None) == "Aerobic base"


class TestCustomWeeks:
    """Test the empty custom program shell."""

    def test_phases_by_progress(self):
        """Test phase assignment across a 10 week shell."""
        weeks = build_custom_weeks(10)
        assert [w.phase for w in weeks] == ["BASE"] * 3 + ["BUILD"] * 4 + ["PEAK"] * 2 + ["TAPER"]

    def test_days_are_empty(self):
        """Test every day has no workouts."""
        for week in build_custom_weeks(4):
            assert len(week.days) == 7
            assert all(not d.workouts for d in week.days)

    def test_zero_weeks(self):
        """Test an empty shell is rejected."""
        with pytest.raises(ProgramParamsError):
            build_custom_weeks(0)
