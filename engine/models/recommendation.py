"""
Candidate and recommendation models.

SearchHit is what the similarity index returns; Recommendation is what the
engine hands back (and stores on the session) after surprise injection.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SearchHit(BaseModel):
    """One ranked result from the similarity index."""

    item_id: str
    score: float
    title: Optional[str] = None
    year: Optional[int] = None
    genres: List[str] = Field(default_factory=list)
    rating: Optional[float] = None
    runtime: Optional[int] = None
    # Axis-named traits in [0,1] (e.g. darkness, energy) attached at index time.
    traits: Dict[str, float] = Field(default_factory=dict)


class Recommendation(SearchHit):
    is_surprise: bool = False
    surprise_reason: Optional[str] = None
    strategy: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_hit(cls, hit: SearchHit, **extra) -> "Recommendation":
        return cls(**hit.model_dump(), **extra)


class Reaction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    NEUTRAL = "neutral"


# Stronger reactions some clients send collapse onto the three-valued scale.
_REACTION_ALIASES = {"love": Reaction.LIKE, "hate": Reaction.DISLIKE}


def parse_reaction(value: str) -> Reaction:
    key = (value or "").strip().lower()
    if key in _REACTION_ALIASES:
        return _REACTION_ALIASES[key]
    return Reaction(key)


class Feedback(BaseModel):
    item_id: str
    reaction: Reaction
