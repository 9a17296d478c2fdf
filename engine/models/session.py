"""
Session model: one short-lived moment session and its state machine position.
"""

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .context import Context
from .filters import SearchFilters
from .profile import EmotionalProfile
from .recommendation import Feedback, Recommendation


class SessionState(str, Enum):
    CREATED = "created"
    QUESTIONING = "questioning"
    RECOMMENDED = "recommended"
    REFINING = "refining"
    EXPIRED = "expired"


class Answer(BaseModel):
    question_id: str
    option_id: str
    answered_at: datetime


def new_session_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """Session record as persisted by a SessionStore."""

    session_id: str = Field(default_factory=new_session_id)
    created_at: datetime
    expires_at: datetime
    domain: str = "movies"
    flow: str = "standard"
    context: Context = Field(default_factory=Context)
    state: SessionState = SessionState.CREATED

    # Keyed by question id: a resubmission replaces, never duplicates.
    answers: Dict[str, Answer] = Field(default_factory=dict)
    total_questions: int = 0

    profile: Optional[EmotionalProfile] = None
    active_profile: Optional[EmotionalProfile] = None
    base_preference_text: Optional[str] = None
    preference_text: Optional[str] = None
    base_filters: SearchFilters = Field(default_factory=SearchFilters)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    recommendations: List[Recommendation] = Field(default_factory=list)

    feedback_history: List[Feedback] = Field(default_factory=list)
    refinement_count: int = 0
    last_adjustment: Optional[str] = None
    last_strategy: Optional[str] = None
    moment_score: Optional[int] = None

    # Incremented on every successful write; used for compare-and-swap.
    version: int = 0

    @classmethod
    def create(
        cls,
        domain: str,
        flow: str,
        context: Context,
        total_questions: int,
        ttl_seconds: int,
        now: Optional[datetime] = None,
    ) -> "Session":
        now = now or utcnow()
        return cls(
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
            domain=domain,
            flow=flow,
            context=context,
            total_questions=total_questions,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def progress(self) -> Dict[str, int]:
        total = self.total_questions
        return {
            "answered": self.answered_count,
            "total": total,
            "percent": round(100 * self.answered_count / total) if total else 0,
        }

    def answer_map(self) -> Dict[str, str]:
        """question id -> chosen option id."""
        return {qid: a.option_id for qid, a in self.answers.items()}

    def recommendation(self, item_id: str) -> Optional[Recommendation]:
        for rec in self.recommendations:
            if rec.item_id == item_id:
                return rec
        return None

    def current_state(self, now: Optional[datetime] = None) -> SessionState:
        """EXPIRED is derived from the deadline; it is never written back."""
        if self.is_expired(now):
            return SessionState.EXPIRED
        return self.state
