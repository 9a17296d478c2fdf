"""
Static question catalog: the standard, quick and deep flows.

Options carry axis weights (see models/profile.AXES) and a phrase for the
deterministic preference template. Some option labels vary with Context.
"""

from typing import Dict, List

from .models.context import Context, TimeOfDay
from .models.question import Question, QuestionOption

GREETINGS: Dict[TimeOfDay, str] = {
    TimeOfDay.MORNING: "Good morning! How are you starting your day?",
    TimeOfDay.AFTERNOON: "Good afternoon! How's your day going?",
    TimeOfDay.EVENING: "Good evening! Ready to unwind?",
    TimeOfDay.LATE_NIGHT: "Late night viewing? Let's find something perfect.",
}

_TIME_MODIFIERS: Dict[TimeOfDay, str] = {
    TimeOfDay.MORNING: "to kickstart your day",
    TimeOfDay.AFTERNOON: "for your afternoon",
    TimeOfDay.EVENING: "for tonight",
    TimeOfDay.LATE_NIGHT: "for late-night watching",
}

_ENERGY_PROMPTS: Dict[TimeOfDay, str] = {
    TimeOfDay.MORNING: "What's your morning energy like?",
    TimeOfDay.AFTERNOON: "How's your afternoon energy?",
    TimeOfDay.EVENING: "How are you feeling this evening?",
    TimeOfDay.LATE_NIGHT: "Still up? What's your late-night mood?",
}


def _opt(id, label, emoji=None, phrase=None, **weights) -> QuestionOption:
    return QuestionOption(id=id, label=label, emoji=emoji, phrase=phrase, weights=weights)


def _cognitive_load(ctx: Context) -> Question:
    return Question(
        id="cognitive_load",
        text=f"What kind of mental engagement do you want {_TIME_MODIFIERS[ctx.time_of_day]}?",
        options=[
            _opt("challenge", "Mind-bending & thought-provoking", "🧠",
                 "something intellectually challenging",
                 complexity=0.8, focus=0.8, openness=0.6),
            _opt("easy", "Easy entertainment & fun", "🍿",
                 "easy, fun entertainment",
                 complexity=0.2, focus=0.3, humor=0.6, comfort=0.6),
        ],
    )


EMOTIONAL_TONE = Question(
    id="emotional_tone",
    text="How do you want to feel while watching?",
    options=[
        _opt("intense", "Gripped & on edge", "😰", "intense and suspenseful",
             darkness=0.8, energy=0.8, comfort=0.1),
        _opt("uplifting", "Happy & inspired", "😊", "happy and inspiring",
             darkness=0.1, humor=0.8, comfort=0.9, mood=0.9),
        _opt("contemplative", "Thoughtful & reflective", "🤔", "thoughtful and reflective",
             complexity=0.8, energy=0.3, mood=0.4),
        _opt("escapist", "Transported to another world", "🌟", "transporting me to another world",
             openness=0.8, energy=0.7, darkness=0.3),
    ],
)

PERSONAL_CONTEXT = Question(
    id="personal_context",
    text="What resonates with where you are in life right now?",
    options=[
        _opt("exploring", "Figuring things out", "🧭", "about exploring and self-discovery",
             openness=0.8, mood=0.6),
        _opt("building", "Building something meaningful", "🏗️", "about ambition and relationships",
             focus=0.6, mood=0.6),
        _opt("reflecting", "Looking back & understanding", "🪞", "about looking back and life lessons",
             complexity=0.7, mood=0.4, energy=0.3),
        _opt("escaping", "Need a break from reality", "🏝️", "that offers a break from reality",
             openness=0.7, comfort=0.7, darkness=0.2),
    ],
)

_ATTENTION_LABELS = {
    "default": ("Full attention, bring it on", "Engaged but not overthinking",
                "Something I can partly multitask with"),
    TimeOfDay.LATE_NIGHT: ("Still wide awake", "Getting sleepy but engaged",
                           "Need something to drift off to"),
}


def _attention_level(ctx: Context) -> Question:
    full, moderate, background = _ATTENTION_LABELS.get(ctx.time_of_day, _ATTENTION_LABELS["default"])
    return Question(
        id="attention_level",
        text=_ENERGY_PROMPTS[ctx.time_of_day],
        options=[
            _opt("full_focus", full, "👁️", "that rewards full attention",
                 focus=0.9, complexity=0.8),
            _opt("moderate", moderate, "👀", "that is easy to follow",
                 focus=0.5, complexity=0.5),
            _opt("background", background, "📱", "that is familiar, comfortable viewing",
                 focus=0.2, comfort=0.9, complexity=0.2),
        ],
    )


DISCOVERY_MODE = Question(
    id="discovery_mode",
    text="Are you feeling adventurous with your choice?",
    options=[
        _opt("surprise", "Surprise me with something different", "🎲",
             "that is unconventional and different", openness=0.9),
        _opt("reliable", "Something I know I'll probably like", "✅",
             "that is a popular, safe bet", openness=0.2, comfort=0.7),
    ],
)

NARRATIVE_STYLE = Question(
    id="narrative_style",
    text="What kind of storytelling appeals to you?",
    options=[
        _opt("linear", "Clear, straightforward narrative", None, "with a clear, straightforward story",
             complexity=0.2),
        _opt("complex", "Layered, non-linear storytelling", None, "with layered, non-linear storytelling",
             complexity=0.9, focus=0.8),
        _opt("character", "Deep character studies", None, "built around a deep character study",
             complexity=0.6, mood=0.4),
        _opt("visual", "Visual storytelling over dialogue", None, "with striking visual storytelling",
             energy=0.6, openness=0.6),
    ],
)

ERA = Question(
    id="era",
    text="Any era calling to you?",
    options=[
        _opt("classic", "Golden-age classics", "🎞️", "from the classic era"),
        _opt("80s-90s", "80s and 90s", "📼", "from the 80s or 90s"),
        _opt("2000s", "The 2000s", "💿", "from the 2000s"),
        _opt("recent", "Recent releases", "✨", "released recently"),
        _opt("any", "Doesn't matter", "🤷"),
    ],
)

MOOD_CHECK = Question(
    id="mood_check",
    text="Quick vibe check - what are you feeling?",
    options=[
        _opt("energetic", "Pumped up", "⚡", "high-energy", energy=0.9, mood=0.8),
        _opt("chill", "Relaxed", "😌", "relaxed and easygoing", energy=0.2, comfort=0.8),
        _opt("emotional", "In my feels", "🥺", "emotional and moving",
             mood=0.3, darkness=0.5, complexity=0.6),
        _opt("adventurous", "Ready for anything", "🎲", "adventurous", openness=0.9, energy=0.7),
    ],
)

TIME_COMMITMENT = Question(
    id="time_commitment",
    text="How much time do you have?",
    options=[
        _opt("short", "Under 90 minutes", "⏱️", "under 90 minutes long"),
        _opt("standard", "About 2 hours", "🕐"),
        _opt("long", "All the time needed", "🌙", "that can take its time"),
    ],
)

SURPRISE_ME = Question(
    id="surprise_me",
    text="Play it safe or take a chance?",
    options=[
        _opt("safe", "Something reliable", "✅", "that is a reliable crowd-pleaser",
             openness=0.2, comfort=0.7),
        _opt("surprise", "Surprise me!", "🎁", "that takes a chance", openness=0.9),
    ],
)


def _standard(ctx: Context) -> List[Question]:
    return [_cognitive_load(ctx), EMOTIONAL_TONE, PERSONAL_CONTEXT, _attention_level(ctx), DISCOVERY_MODE]


FLOWS = {
    "standard": _standard,
    "quick": lambda ctx: [MOOD_CHECK, TIME_COMMITMENT, SURPRISE_ME],
    "deep": lambda ctx: _standard(ctx) + [NARRATIVE_STYLE, ERA],
}


class StaticQuestionCatalog:
    """In-process question catalog."""

    def flows(self) -> List[str]:
        return list(FLOWS)

    def questions_for_flow(self, flow: str, context: Context) -> List[Question]:
        build = FLOWS.get(flow, FLOWS["standard"])
        return build(context)

    def greeting(self, context: Context) -> str:
        return GREETINGS[context.time_of_day]
