"""
Emotional Mapping: answers + Context -> EmotionalProfile.

Each answered option contributes axis weights; contributions are averaged per
axis (axes stay independent, never normalised against each other), shifted by
context and clamped to [0,1]. Axes nobody spoke to stay neutral. The
description comes from fixed templates keyed by the two dominant axes.
"""

from typing import Dict, List, Mapping, Tuple

from ..errors import UnknownOptionError, UnknownQuestionError
from ..models.context import Context, DayType, TimeOfDay
from ..models.profile import AXES, NEUTRAL, EmotionalProfile, clamp
from ..models.question import Question

_TIME_SHIFTS: Dict[TimeOfDay, Dict[str, float]] = {
    TimeOfDay.MORNING: {"energy": 0.05, "mood": 0.05},
    TimeOfDay.AFTERNOON: {},
    TimeOfDay.EVENING: {"comfort": 0.05, "openness": 0.05},
    TimeOfDay.LATE_NIGHT: {"comfort": 0.15, "energy": -0.10, "darkness": 0.05},
}

_DAY_SHIFTS: Dict[DayType, Dict[str, float]] = {
    DayType.WEEKDAY: {"comfort": 0.05},
    DayType.FRIDAY: {"energy": 0.05, "humor": 0.05},
    DayType.WEEKEND: {"openness": 0.05, "focus": 0.05},
}

# (axis, "high" | "low") -> (description, emoji)
_TEMPLATES: Dict[Tuple[str, str], Tuple[str, str]] = {
    ("energy", "high"): ("Charged up and ready for something that moves", "⚡"),
    ("energy", "low"): ("Running low and looking to recharge", "🔋"),
    ("mood", "high"): ("In a bright mood that wants more of the same", "☀️"),
    ("mood", "low"): ("In a reflective, bittersweet headspace", "🌧️"),
    ("openness", "high"): ("Curious and up for the unexpected", "🧭"),
    ("openness", "low"): ("Craving the familiar and reliable", "🏡"),
    ("focus", "high"): ("Locked in and ready to be absorbed", "🎯"),
    ("focus", "low"): ("Half-present, after something easy to drift with", "☁️"),
    ("darkness", "high"): ("Drawn to the shadows tonight", "🌑"),
    ("darkness", "low"): ("Steering clear of anything too heavy", "🌤️"),
    ("comfort", "high"): ("Looking for a warm blanket of a watch", "🛋️"),
    ("comfort", "low"): ("Happy to be taken out of your comfort zone", "🎢"),
    ("complexity", "high"): ("Hungry for something layered and demanding", "🧩"),
    ("complexity", "low"): ("Keeping it simple and straightforward", "🍿"),
    ("humor", "high"): ("Ready to laugh", "😄"),
    ("humor", "low"): ("In a serious frame of mind", "🎭"),
}

_BALANCED = ("Balanced and open to a good story", "🎬")

# Core-axis state phrases for the one-line explanation.
_EXPLANATIONS: Dict[str, Dict[str, str]] = {
    "energy": {"low": "low energy, seeking comfort", "mid": "balanced energy",
               "high": "high energy, ready for intensity"},
    "mood": {"low": "thoughtful and introspective", "mid": "positive and relaxed",
             "high": "seeking new experiences"},
    "openness": {"low": "preferring familiar territory", "mid": "open to discovery",
                 "high": "craving the unconventional"},
    "focus": {"low": "light attention available", "mid": "moderately engaged",
              "high": "ready for deep focus"},
}


def _accumulate(answers: Mapping[str, str], questions: List[Question]) -> Dict[str, float]:
    by_id = {q.id: q for q in questions}
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for qid, option_id in answers.items():
        question = by_id.get(qid)
        if question is None:
            raise UnknownQuestionError(f"Unknown question {qid!r}")
        option = question.option(option_id)
        if option is None:
            raise UnknownOptionError(f"Unknown option {option_id!r} for question {qid!r}")
        for axis, weight in option.weights.items():
            if axis not in AXES:
                continue
            totals[axis] = totals.get(axis, 0.0) + weight
            counts[axis] = counts.get(axis, 0) + 1
    return {a: (totals[a] / counts[a] if a in counts else NEUTRAL) for a in AXES}


def _apply_context(axes: Dict[str, float], context: Context) -> Dict[str, float]:
    shifted = dict(axes)
    for shifts in (_TIME_SHIFTS.get(context.time_of_day, {}), _DAY_SHIFTS.get(context.day_type, {})):
        for axis, delta in shifts.items():
            shifted[axis] = shifted[axis] + delta
    return {a: round(clamp(v), 4) for a, v in shifted.items()}


def compute_confidence(answered: int, total: int) -> int:
    """Share of the flow answered, scaled to [0,100]."""
    if total <= 0:
        return 0
    return round(100 * min(answered, total) / total)


def describe(profile: EmotionalProfile, low: float = 0.35, high: float = 0.65) -> Tuple[str, str]:
    """Pick (description, emoji) for the dominant axis; second axis adds a qualifier."""
    dominant = [a for a in profile.dominant_axes(2) if profile.level(a, low, high) != "mid"]
    if not dominant:
        return _BALANCED
    text, emoji = _TEMPLATES[(dominant[0], profile.level(dominant[0], low, high))]
    if len(dominant) > 1:
        second = _TEMPLATES[(dominant[1], profile.level(dominant[1], low, high))][0]
        text = f"{text}; {second[0].lower()}{second[1:]}"
    return text, emoji


def explain(profile: EmotionalProfile, context: Context) -> str:
    parts = [_EXPLANATIONS[axis][profile.level(axis)] for axis in ("energy", "mood", "openness", "focus")]
    return f"You're {', '.join(parts)} this {context.label()}"


def map_emotions(
    answers: Mapping[str, str],
    questions: List[Question],
    context: Context,
) -> EmotionalProfile:
    """
    Build the EmotionalProfile for a completed (or partially completed) answer set.

    Deterministic: identical answers and context always produce an identical profile.
    Raises UnknownQuestionError / UnknownOptionError for ids outside the flow.
    """
    axes = _apply_context(_accumulate(answers, questions), context)
    profile = EmotionalProfile(
        axes=axes,
        confidence=compute_confidence(len(answers), len(questions)),
    )
    description, emoji = describe(profile)
    return profile.model_copy(
        update={
            "description": description,
            "emoji": emoji,
            "explanation": explain(profile, context),
        }
    )
