"""Tests for HYROX athlete profiling."""

import itertools

import pytest

from hyrox_programs.analysis.athlete_profiler import (
    ATHLETE_TYPE_RULES,
    AthleteProfileInput,
    AthleteProfiler,
    AthleteType,
    ExperienceLevel,
    FeasibilityTier,
    PaceDegradationLevel,
    RunnerType,
    StationType,
    assess_goal,
    calculate_progressive_paces,
    classify_athlete_type,
    classify_degradation,
    classify_runner,
    recommend_volume,
)
from hyrox_programs.analysis.benchmarks import Gender, PerformanceLevel, Station, default_benchmarks
from hyrox_programs.analysis.vdot import RaceDistance


def advanced_station_times(factor):
    """Advanced male station times scaled from the band midpoints."""
    return {
        station: default_benchmarks.station_benchmark(Gender.MALE, PerformanceLevel.ADVANCED, station).midpoint * factor
        for station in Station
    }


class TestAthleteProfiler:
    """Test end-to-end athlete classification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.profiler = AthleteProfiler()

    def test_fast_runner_without_station_data(self):
        """Test a 40 minute 10K runner with nothing else known."""
        profile = self.profiler.analyze(AthleteProfileInput(
            gender=Gender.MALE,
            race_distance=RaceDistance.TEN_K,
            race_time_seconds=2400,
        ))

        assert profile.vdot == pytest.approx(51.9, abs=0.1)
        assert profile.runner_type == RunnerType.FAST
        assert profile.station_type == StationType.AVERAGE
        assert profile.athlete_type == AthleteType.BALANCED
        assert profile.volume.scale_factor == 1.0
        assert profile.weak_stations == ()
        assert profile.goal.tier == FeasibilityTier.INSUFFICIENT_DATA
        assert profile.goal.assessment == "Insufficient data for goal time"

    def test_fast_runner_with_weak_stations(self):
        """Test a fast runner who is 20% slower than benchmark on every station."""
        profile = self.profiler.analyze(AthleteProfileInput(
            gender=Gender.MALE,
            race_distance=RaceDistance.TEN_K,
            race_time_seconds=2160,
            station_times=advanced_station_times(1.2),
            current_weekly_km=80,
        ))

        assert profile.runner_type == RunnerType.FAST
        assert profile.station_type == StationType.WEAK
        assert profile.athlete_type == AthleteType.FAST_WEAK
        assert profile.volume.scale_factor <= 1.1
        assert profile.volume.scale_factor == pytest.approx(1.1)
        assert set(profile.weak_stations) == set(Station)
        assert profile.station_sessions_per_week == 3
        assert profile.training_focus[0].startswith("Priority stations")

    def test_goal_equal_to_estimate(self):
        """Test a goal exactly at the estimated race time."""
        athlete = AthleteProfileInput(
            gender=Gender.MALE,
            race_distance=RaceDistance.TEN_K,
            race_time_seconds=2400,
            station_times=advanced_station_times(1.0),
        )
        estimate = self.profiler.analyze(athlete).goal.estimated_current_time
        assert estimate is not None

        athlete.goal_time_seconds = estimate
        goal = self.profiler.analyze(athlete).goal

        assert goal.tier == FeasibilityTier.ALREADY_UNDER_GOAL
        assert goal.gap_seconds == 0
        assert goal.is_realistic is True

    def test_goal_without_estimate(self):
        """Test a goal with no station data to estimate from."""
        profile = self.profiler.analyze(AthleteProfileInput(
            gender=Gender.FEMALE,
            race_distance=RaceDistance.FIVE_K,
            race_time_seconds=1320,
            goal_time_seconds=80 * 60,
        ))
        assert profile.goal.tier == FeasibilityTier.INSUFFICIENT_DATA
        assert profile.goal.assessment.startswith("Insufficient data for goal time")

    def test_invalid_values_are_ignored(self):
        """Test negative and non-finite values never raise."""
        profile = self.profiler.analyze(AthleteProfileInput(
            gender=Gender.MALE,
            race_distance=RaceDistance.TEN_K,
            race_time_seconds=-5,
            hyrox_run_pace=float("nan"),
            station_times={Station.SKIERG: -10},
            current_weekly_km=float("inf"),
        ))

        assert profile.vdot is None
        assert profile.runner_type == RunnerType.AVERAGE
        assert profile.station_score == 100
        assert profile.volume.scale_factor == 1.0

    def test_pace_degradation(self):
        """Test degradation from pure to HYROX running pace."""
        profile = self.profiler.analyze(AthleteProfileInput(
            gender=Gender.MALE,
            race_distance=RaceDistance.TEN_K,
            race_time_seconds=2400,
            hyrox_run_pace=264,
        ))
        assert profile.pace_degradation == pytest.approx(10.0)
        assert profile.pace_degradation_level == PaceDegradationLevel.ADVANCED

    def test_from_dict(self):
        """Test JSON-style input parsing."""
        athlete = AthleteProfileInput.from_dict({
            "gender": "Male",
            "race_distance": "10K",
            "race_time": "40:00",
            "station_times": {"sledPull": "5:00", "wall-balls": 330},
            "experience_level": "intermediate",
        })

        assert athlete.gender == Gender.MALE
        assert athlete.race_time_seconds == 2400
        assert athlete.station_times == {Station.SLED_PULL: 300, Station.WALL_BALLS: 330}
        assert athlete.experience_level == ExperienceLevel.INTERMEDIATE

    def test_profile_to_dict(self):
        """Test profile serialization."""
        profile = self.profiler.analyze(AthleteProfileInput(gender=Gender.FEMALE))
        data = profile.to_dict()
        assert data["athlete_type"] == "balanced"
        assert data["stations"]["weak_stations"] == []
        assert data["stations"]["recommendations"] == []

    def test_station_recommendations(self):
        """Test time-sink stations lead the station recommendations."""
        profile = self.profiler.analyze(AthleteProfileInput(
            gender=Gender.MALE,
            station_times=advanced_station_times(1.2),
        ))

        recommendations = profile.station_recommendations
        assert len(recommendations) == len(Station)
        assert recommendations[0].startswith("Sled Pull is a major time sink")
        assert recommendations[1].startswith("Wall Balls is a major time sink")
        assert "Sandbag Lunges: high priority weakness" in recommendations
        assert profile.to_dict()["stations"]["recommendations"] == list(recommendations)



class TestClassification:
    """Test the individual classification steps."""

    def test_runner_type_from_pace(self):
        """Test runner type falls back to pace when VDOT is unknown."""
        assert classify_runner(Gender.FEMALE, None, 290) == RunnerType.FAST
        assert classify_runner(Gender.FEMALE, None, 340) == RunnerType.AVERAGE
        assert classify_runner(Gender.FEMALE, None, 400) == RunnerType.SLOW
        assert classify_runner(Gender.FEMALE, None, None) == RunnerType.AVERAGE

    def test_degradation_tiers(self):
        """Test degradation tier boundaries."""
        assert classify_degradation(240, 252)[1] == PaceDegradationLevel.ELITE
        assert classify_degradation(240, 264)[1] == PaceDegradationLevel.ADVANCED
        assert classify_degradation(240, 280)[1] == PaceDegradationLevel.INTERMEDIATE
        assert classify_degradation(240, 300)[1] == PaceDegradationLevel.BEGINNER

    def test_rule_order(self):
        """Test the first matching rule wins."""
        # Also balanced by score gap, but the fast/weak rule comes first
        assert classify_athlete_type(RunnerType.FAST, StationType.WEAK, 100, 112) == AthleteType.FAST_WEAK
        assert classify_athlete_type(RunnerType.SLOW, StationType.STRONG, 85, 88) == AthleteType.SLOW_STRONG
        assert classify_athlete_type(RunnerType.AVERAGE, StationType.WEAK, 80, 125) == AthleteType.NEEDS_BOTH

    def test_default_type(self):
        """Test the fallback when no rule matches."""
        assert classify_athlete_type(RunnerType.AVERAGE, StationType.AVERAGE, 130, 100) == AthleteType.BALANCED

    def test_every_combination_classified(self):
        """Test every signal combination maps to an athlete type."""
        scores = [60, 90, 100, 115, 121, 140]
        for runner, station, running, stations in itertools.product(RunnerType, StationType, scores, scores):
            assert classify_athlete_type(runner, station, running, stations) in AthleteType

    def test_rules_are_named(self):
        """Test every rule has a name and a target type."""
        for name, predicate, athlete_type in ATHLETE_TYPE_RULES:
            assert name
            assert callable(predicate)
            assert athlete_type in AthleteType


class TestVolume:
    """Test running volume recommendations."""

    def test_scale_factor_bounds(self):
        """Test the scale factor stays within 0.7 to 1.4."""
        for athlete_type in AthleteType:
            for km in [-20, 0, 10, 45, 80, 200]:
                volume = recommend_volume(athlete_type, km, None)
                assert 0.7 <= volume.scale_factor <= 1.4

    def test_missing_volume(self):
        """Test no current volume gives a neutral scale factor."""
        volume = recommend_volume(AthleteType.BALANCED, None, None)
        assert volume.recommended_weekly_km == 52.5
        assert volume.scale_factor == 1.0

    def test_slow_strong_floor(self):
        """Test slow/strong athletes never drop below 0.8."""
        assert recommend_volume(AthleteType.SLOW_STRONG, 0, None).scale_factor == 0.8

    def test_experience_targets(self):
        """Test experience picks the end of the recommended band."""
        volume = recommend_volume(AthleteType.SLOW_STRONG, 60, ExperienceLevel.ADVANCED)
        assert volume.recommended_weekly_km == 70
        assert volume.scale_factor == pytest.approx(0.94)
        assert recommend_volume(AthleteType.BALANCED, 45, ExperienceLevel.BEGINNER).scale_factor == 1.0


class TestGoalFeasibility:
    """Test goal assessment tiers."""

    def test_tiers(self):
        """Test tiers by gap percentage."""
        assert assess_goal(4800, 5000).tier == FeasibilityTier.ACHIEVABLE
        assert assess_goal(4600, 5000).tier == FeasibilityTier.AMBITIOUS
        assert assess_goal(4300, 5000).tier == FeasibilityTier.VERY_AMBITIOUS
        assert assess_goal(4000, 5000).tier == FeasibilityTier.UNREALISTIC
        assert assess_goal(5200, 5000).tier == FeasibilityTier.ALREADY_UNDER_GOAL

    def test_unrealistic_goal(self):
        """Test the unrealistic message and flag."""
        goal = assess_goal(4000, 5000)
        assert goal.gap_percent == 20.0
        assert goal.is_realistic is False
        assert "nearer target" in goal.assessment

    def test_tier_boundaries(self):
        """Test gaps on a tier limit fall in the lower tier."""
        assert assess_goal(5000, 5000).tier == FeasibilityTier.ALREADY_UNDER_GOAL
        assert assess_goal(4750, 5000).tier == FeasibilityTier.ACHIEVABLE
        assert assess_goal(4250, 5000).tier == FeasibilityTier.VERY_AMBITIOUS
        assert assess_goal(1000, 5000).assessment.endswith("(estimated 1:23:20, goal 16:40)")


class TestProgressivePaces:
    """Test weekly pace progression towards goal pace."""

    def test_base(self):
        """Test base phase holds current pace."""
        paces = calculate_progressive_paces(300, 270, "BASE", 1, 4)
        assert paces.tempo == 300
        assert paces.interval == 285
        assert paces.easy == 360

    def test_build_midway(self):
        """Test build closes part of the gap."""
        paces = calculate_progressive_paces(300, 270, "BUILD", 2, 4)
        assert paces.tempo == pytest.approx(292.5)
        assert paces.interval == pytest.approx(277.5)
        assert paces.easy == 350

    def test_peak_and_taper(self):
        """Test peak and taper target goal pace."""
        peak = calculate_progressive_paces(300, 270, "PEAK", 1, 2)
        assert peak.tempo == pytest.approx(264.6)
        assert peak.interval == 250

        taper = calculate_progressive_paces(300, 270, "taper", 1, 1)
        assert taper.tempo == 270
        assert taper.easy == 370
