"""Session-related Pydantic models."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from engine.models.context import Context
from engine.models.profile import EmotionalProfile
from engine.models.recommendation import Recommendation
from engine.models.session import Session


class StartSessionRequest(BaseModel):
    domain: str = "movies"
    flow: str = "standard"  # standard | quick | deep
    # Client-supplied moment context; the server clock is used when omitted
    context: Optional[Context] = None


class AnswerRequest(BaseModel):
    question_id: str
    option_id: str


class FeedbackItem(BaseModel):
    item_id: str
    reaction: str  # like | dislike | neutral (love/hate accepted)


class RefineRequest(BaseModel):
    feedback: List[FeedbackItem] = []
    action: Optional[str] = None  # more_like_this | too_intense | try_different


class AdjustRequest(BaseModel):
    adjustment: str


class MomentFeedbackRequest(BaseModel):
    # Validated by the engine so out-of-range scores map to INVALID_FEEDBACK
    score: int
    comment: Optional[str] = Field(default=None, max_length=2000)


class SessionResponse(BaseModel):
    session_id: str
    state: str
    flow: str
    domain: str
    created_at: datetime
    expires_at: datetime
    progress: Dict[str, int]
    answers: Dict[str, str]
    moment: Optional[EmotionalProfile] = None
    preference_text: Optional[str] = None
    recommendations: List[Recommendation] = []
    refinement_count: int = 0
    last_adjustment: Optional[str] = None
    last_strategy: Optional[str] = None
    moment_score: Optional[int] = None

    @classmethod
    def from_session(cls, session: Session, now: Optional[datetime] = None) -> "SessionResponse":
        return cls(
            session_id=session.session_id,
            state=session.current_state(now).value,
            flow=session.flow,
            domain=session.domain,
            created_at=session.created_at,
            expires_at=session.expires_at,
            progress=session.progress(),
            answers=session.answer_map(),
            moment=session.active_profile,
            preference_text=session.preference_text,
            recommendations=session.recommendations,
            refinement_count=session.refinement_count,
            last_adjustment=session.last_adjustment,
            last_strategy=session.last_strategy,
            moment_score=session.moment_score,
        )
