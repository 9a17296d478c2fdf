"""
Emotional Mapping Tests

Answers + Context -> EmotionalProfile: per-axis averaging, neutral defaults,
context shifts, clamping, confidence and description templates.

Run:
    pytest tests/test_emotional_mapping.py -v
"""

import pytest

from engine.catalog import StaticQuestionCatalog
from engine.errors import UnknownOptionError, UnknownQuestionError
from engine.models.context import Context, DayType, TimeOfDay
from engine.models.profile import AXES, NEUTRAL, EmotionalProfile
from engine.stages.emotional_mapping import compute_confidence, describe, explain, map_emotions

from .conftest import COZY_ANSWERS, EVENING_WEEKDAY, INTENSE_ANSWERS, LATE_NIGHT_WEEKDAY


class TestAxisAveraging:
    """Each axis is the mean of the weights that address it."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.catalog = StaticQuestionCatalog()
        self.questions = self.catalog.questions_for_flow("standard", EVENING_WEEKDAY)

    def test_intense_answers(self):
        profile = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)

        assert profile.value("complexity") == pytest.approx(0.8)
        assert profile.value("focus") == pytest.approx(0.85)
        assert profile.value("energy") == pytest.approx(0.8)
        assert profile.value("darkness") == pytest.approx(0.8)
        assert profile.value("mood") == pytest.approx(0.6)
        # (0.6 + 0.8 + 0.9) / 3 plus the evening shift
        assert profile.value("openness") == pytest.approx(0.8167, abs=1e-4)
        # 0.1 plus evening and weekday comfort shifts
        assert profile.value("comfort") == pytest.approx(0.2)

    def test_axes_without_contributions_stay_neutral(self):
        profile = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)
        assert profile.value("humor") == NEUTRAL

    def test_every_axis_present_and_in_range(self):
        profile = map_emotions(COZY_ANSWERS, self.questions, LATE_NIGHT_WEEKDAY)
        assert set(profile.axes) == set(AXES)
        for value in profile.axes.values():
            assert 0.0 <= value <= 1.0

    def test_context_shift_clamps_at_one(self):
        # uplifting comfort 0.9 + late night 0.15 + weekday 0.05
        questions = self.catalog.questions_for_flow("standard", LATE_NIGHT_WEEKDAY)
        profile = map_emotions({"emotional_tone": "uplifting"}, questions, LATE_NIGHT_WEEKDAY)
        assert profile.value("comfort") == 1.0

    def test_no_weights_is_neutral_except_context(self):
        ctx = Context(time_of_day=TimeOfDay.AFTERNOON, day_type=DayType.WEEKDAY)
        questions = self.catalog.questions_for_flow("quick", ctx)
        profile = map_emotions({"time_commitment": "standard"}, questions, ctx)
        for axis in AXES:
            expected = 0.55 if axis == "comfort" else NEUTRAL
            assert profile.value(axis) == pytest.approx(expected)

    def test_late_night_raises_comfort(self):
        late_q = self.catalog.questions_for_flow("standard", LATE_NIGHT_WEEKDAY)
        evening = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)
        late = map_emotions(INTENSE_ANSWERS, late_q, LATE_NIGHT_WEEKDAY)
        assert late.value("comfort") > evening.value("comfort")
        assert late.value("energy") < evening.value("energy")

    def test_deterministic(self):
        a = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)
        b = map_emotions(dict(INTENSE_ANSWERS), self.questions, EVENING_WEEKDAY)
        assert a == b


class TestConfidenceAndDescription:

    @pytest.fixture(autouse=True)
    def setup(self):
        self.questions = StaticQuestionCatalog().questions_for_flow("standard", EVENING_WEEKDAY)

    def test_full_flow_is_full_confidence(self):
        profile = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)
        assert profile.confidence == 100

    def test_partial_answers_scale_confidence(self):
        partial = {"cognitive_load": "challenge", "emotional_tone": "intense"}
        profile = map_emotions(partial, self.questions, EVENING_WEEKDAY)
        assert profile.confidence == 40

    @pytest.mark.parametrize("answered,total,expected", [(0, 5, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (4, 0, 0)])
    def test_compute_confidence(self, answered, total, expected):
        assert compute_confidence(answered, total) == expected

    def test_description_uses_two_dominant_axes(self):
        profile = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)
        # focus (0.85) is furthest from neutral, then openness (0.8167)
        assert profile.description == "Locked in and ready to be absorbed; curious and up for the unexpected"
        assert profile.emoji == "🎯"

    def test_balanced_profile(self):
        text, emoji = describe(EmotionalProfile())
        assert text == "Balanced and open to a good story"
        assert emoji == "🎬"

    def test_explanation_mentions_context(self):
        profile = map_emotions(INTENSE_ANSWERS, self.questions, EVENING_WEEKDAY)
        assert profile.explanation == explain(profile, EVENING_WEEKDAY)
        assert profile.explanation.startswith("You're high energy, ready for intensity")
        assert profile.explanation.endswith("this evening weekday")


class TestUnknownIds:

    @pytest.fixture(autouse=True)
    def setup(self):
        self.questions = StaticQuestionCatalog().questions_for_flow("standard", EVENING_WEEKDAY)

    def test_unknown_question(self):
        with pytest.raises(UnknownQuestionError):
            map_emotions({"favourite_colour": "blue"}, self.questions, EVENING_WEEKDAY)

    def test_unknown_option(self):
        with pytest.raises(UnknownOptionError):
            map_emotions({"emotional_tone": "furious"}, self.questions, EVENING_WEEKDAY)
