"""
Results returned by SessionOrchestrator operations.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .profile import EmotionalProfile
from .question import Question
from .recommendation import Recommendation


class Progress(BaseModel):
    answered: int
    total: int
    percent: int


class StartResult(BaseModel):
    session_id: str
    flow: str
    greeting: str
    context_label: str
    first_question: Question
    progress: Progress


class AnswerResult(BaseModel):
    type: Literal["question", "recommendations"]
    session_id: str
    progress: Progress
    next_question: Optional[Question] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
    moment: Optional[EmotionalProfile] = None
    preference_text: Optional[str] = None


class RecommendationResult(BaseModel):
    session_id: str
    recommendations: List[Recommendation]
    moment: Optional[EmotionalProfile] = None
    preference_text: str
    strategy: Optional[str] = None
    explanation: Optional[str] = None
    refinement_count: int = 0
    last_adjustment: Optional[str] = None
    degraded: bool = False


class MomentAck(BaseModel):
    session_id: str
    score: int
    needs_follow_up: bool
    message: str


class AdjustmentInfo(BaseModel):
    name: str
    label: str
    icon: str
    description: str


