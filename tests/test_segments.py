"""Tests for running workout segments."""

from hyrox_programs.analysis.segments import build_segments, parse_intervals
from hyrox_programs.analysis.vdot import PaceModel, training_paces
from hyrox_programs.models import SegmentType, Workout, WorkoutIntensity, WorkoutType


def run(name, intensity, distance_km, structure="", duration=30):
    return Workout(
        type=WorkoutType.RUNNING,
        name=name,
        intensity=intensity,
        duration_min=duration,
        distance_km=distance_km,
        instructions=structure,
    )


class TestParseIntervals:
    """Test interval structure parsing."""

    def test_formats(self):
        """Test metres, kilometres and spacing variants."""
        assert parse_intervals("6x400m with 90s rest") == (6, 0.4)
        assert parse_intervals("5 x 1km") == (5, 1.0)
        assert parse_intervals("4×1.5 km") == (4, 1.5)

    def test_no_intervals(self):
        """Test strings without a rep structure."""
        assert parse_intervals("") is None
        assert parse_intervals("5 min easy, 2 min hard x 4") is None


class TestBuildSegments:
    """Test segment building from a pace model."""

    def setup_method(self):
        """Set up test fixtures."""
        self.model = training_paces(50.0)

    def test_no_pace_model(self):
        """Test workouts without paces get no segments."""
        assert build_segments(run("Tempo", WorkoutIntensity.MODERATE, 6), None) == []

    def test_invalid_pace_model(self):
        """Test an invalid model is treated as missing."""
        invalid = PaceModel(easy_min=300, easy_max=330, marathon=280, threshold=260,
                            interval=240, repetition=225)
        assert build_segments(run("Tempo", WorkoutIntensity.MODERATE, 6), invalid) == []

    def test_non_running_workout(self):
        """Test station work gets no segments."""
        workout = Workout(type=WorkoutType.STATION, name="Sleds", intensity=WorkoutIntensity.THRESHOLD,
                          duration_min=40)
        assert build_segments(workout, self.model) == []

    def test_short_intervals(self):
        """Test 1 km repeats run at interval pace in zone 4."""
        segments = build_segments(run("Intervals", WorkoutIntensity.THRESHOLD, 6, "6x1km"), self.model)

        assert [s.type for s in segments] == [SegmentType.WARMUP, SegmentType.INTERVAL, SegmentType.COOLDOWN]
        assert [s.order for s in segments] == [1, 2, 3]

        warmup, work, cooldown = segments
        assert warmup.duration_min == 10
        assert warmup.zone == 2
        assert warmup.pace_seconds == self.model.easy_min
        assert work.reps == 6
        assert work.distance_km == 1.0
        assert work.zone == 4
        assert work.pace_seconds == self.model.interval
        assert cooldown.duration_min == 5

    def test_long_intervals(self):
        """Test longer repeats keep the workout's own pace and zone."""
        segments = build_segments(run("Cruise", WorkoutIntensity.THRESHOLD, 8, "3x2km"), self.model)
        work = segments[1]
        assert work.distance_km == 2.0
        assert work.zone == 3
        assert work.pace_seconds == self.model.threshold

    def test_long_easy_run(self):
        """Test long easy runs get the easy band as a range."""
        segments = build_segments(run("Long run", WorkoutIntensity.EASY, 12), self.model)

        assert len(segments) == 1
        segment = segments[0]
        assert segment.type == SegmentType.WORK
        assert segment.zone == 1
        assert segment.pace_range == (self.model.easy_max, self.model.easy_min)
        assert segment.pace_seconds is None
        assert segment.distance_km == 12

    def test_steady_run(self):
        """Test a steady run gets one work segment at its intensity pace."""
        segments = build_segments(
            run("Fartlek", WorkoutIntensity.MODERATE, 5, "5 min easy, 2 min hard x 4"), self.model
        )

        assert len(segments) == 1
        assert segments[0].zone == 2
        assert segments[0].pace_seconds == self.model.marathon
        assert segments[0].pace.endswith("/km")

    def test_short_easy_run(self):
        """Test short easy runs use a single pace."""
        segments = build_segments(run("Easy run", WorkoutIntensity.EASY, 5), self.model)
        assert segments[0].pace_seconds == self.model.easy_max
        assert segments[0].pace_range is None
