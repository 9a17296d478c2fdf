"""Data models for the moment-to-recommendation engine."""

from .adjustments import AdjustmentPreset, QuickAdjustment, RefineAction, RefinementPlan, RefinementStrategy
from .config import DEFAULT_CONFIG, EngineConfig, resolve_config
from .context import Context, DayType, Season, TimeOfDay
from .filters import SearchFilters
from .profile import AXES, EmotionalProfile
from .question import Question, QuestionOption
from .recommendation import Feedback, Reaction, Recommendation, SearchHit, parse_reaction
from .session import Answer, Session, SessionState

__all__ = [
    "AXES",
    "AdjustmentPreset",
    "Answer",
    "Context",
    "DEFAULT_CONFIG",
    "DayType",
    "EmotionalProfile",
    "EngineConfig",
    "Feedback",
    "QuickAdjustment",
    "Question",
    "QuestionOption",
    "Reaction",
    "Recommendation",
    "RefineAction",
    "RefinementPlan",
    "RefinementStrategy",
    "SearchFilters",
    "SearchHit",
    "Season",
    "Session",
    "SessionState",
    "TimeOfDay",
    "parse_reaction",
    "resolve_config",
]
