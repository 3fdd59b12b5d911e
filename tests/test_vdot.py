"""Tests for VDOT and training pace calculations."""

import pytest

from hyrox_programs.analysis.vdot import (
    PaceConfidence,
    PaceModel,
    RaceDistance,
    calculate_vdot,
    pace_model_from_race,
    training_paces,
)


class TestVdot:
    """Test VDOT from race results."""

    def test_ten_k_in_forty_minutes(self):
        """Test the reference 10K result."""
        assert calculate_vdot(10000, 2400) == pytest.approx(51.9, abs=0.1)

    def test_faster_result_gives_higher_vdot(self):
        """Test VDOT rises with faster times."""
        assert calculate_vdot(10000, 2160) > calculate_vdot(10000, 2400)
        assert calculate_vdot(10000, 2160) == pytest.approx(58.8, abs=0.2)

    def test_non_positive_inputs(self):
        """Test invalid results give no VDOT."""
        assert calculate_vdot(10000, 0) is None
        assert calculate_vdot(0, 2400) is None
        assert calculate_vdot(10000, -60) is None

    def test_rounded_to_one_decimal(self):
        """Test VDOT is rounded."""
        vdot = calculate_vdot(5000, 1200)
        assert vdot == round(vdot, 1)

    def test_race_distance_parse(self):
        """Test race distance aliases."""
        assert RaceDistance.parse("10k") == RaceDistance.TEN_K
        assert RaceDistance.parse("half marathon") == RaceDistance.HALF_MARATHON
        assert RaceDistance.TEN_K.meters == 10000
        with pytest.raises(ValueError):
            RaceDistance.parse("15K")


class TestTrainingPaces:
    """Test pace models derived from VDOT."""

    def setup_method(self):
        """Set up test fixtures."""
        self.model = training_paces(50.0)

    def test_bands_ordered_slowest_to_fastest(self):
        """Test pace band ordering."""
        assert self.model.is_valid()
        assert self.model.easy_min > self.model.easy_max > self.model.marathon
        assert self.model.marathon > self.model.threshold > self.model.interval > self.model.repetition

    def test_threshold_pace(self):
        """Test threshold pace for VDOT 50."""
        # Roughly 4:15/km
        assert 250 <= self.model.threshold <= 260

    def test_confidence_and_source(self):
        """Test derived paces carry their origin."""
        assert self.model.confidence == PaceConfidence.VERY_HIGH
        assert self.model.vdot == 50.0

    def test_model_from_race(self):
        """Test pace model from a race result."""
        model = pace_model_from_race(RaceDistance.TEN_K, 2400)
        assert model is not None
        assert model.source == "10K race"
        assert pace_model_from_race(RaceDistance.TEN_K, 0) is None

    def test_formatted(self):
        """Test display form of the bands."""
        formatted = self.model.formatted()
        assert formatted["threshold"].endswith("/km")
        assert " - " in formatted["easy"]


class TestPaceModel:
    """Test pace model validation and parsing."""

    def test_invalid_when_not_monotonic(self):
        """Test a model with a threshold slower than marathon pace."""
        model = PaceModel(easy_min=360, easy_max=330, marathon=280, threshold=290,
                          interval=240, repetition=225)
        assert not model.is_valid()

    def test_invalid_when_non_positive(self):
        """Test non-positive bands."""
        model = PaceModel(easy_min=360, easy_max=330, marathon=280, threshold=260,
                          interval=240, repetition=0)
        assert not model.is_valid()

    def test_from_dict_accepts_pace_strings(self):
        """Test M:SS strings and seconds are both accepted."""
        model = PaceModel.from_dict({
            "easy_min": "6:00",
            "easy_max": "5:30",
            "marathon": "4:40",
            "threshold": 260,
            "interval": "4:00",
            "repetition": "3:45",
            "confidence": "high",
        }, source="coach")

        assert model.easy_min == 360
        assert model.threshold == 260
        assert model.confidence == PaceConfidence.HIGH
        assert model.source == "coach"
        assert model.is_valid()

    def test_from_dict_missing_band(self):
        """Test missing bands raise."""
        with pytest.raises(KeyError):
            PaceModel.from_dict({"easy_min": 360})

    def test_from_dict_unparseable_band(self):
        """Test unparseable bands raise."""
        data = {name: 300 for name in ("easy_min", "easy_max", "marathon", "threshold", "interval")}
        data["repetition"] = "fast"
        with pytest.raises(ValueError):
            PaceModel.from_dict(data)
