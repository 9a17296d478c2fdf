"""
Closed sets of quick adjustments, refine actions and refinement strategies,
plus the plan a strategy produces.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .filters import SearchFilters


class QuickAdjustment(str, Enum):
    LIGHTER = "lighter"
    DEEPER = "deeper"
    WEIRDER = "weirder"
    SAFER = "safer"
    SHORTER = "shorter"
    LONGER = "longer"


class RefinementStrategy(str, Enum):
    """Feedback strategies, declared in detection priority order."""

    TOO_INTENSE = "too_intense"
    WRONG_ENERGY = "wrong_energy"
    GENRE_MISMATCH = "genre_mismatch"
    HIDDEN_DESIRE = "hidden_desire"
    AUTO = "auto"


class RefineAction(str, Enum):
    MORE_LIKE_THIS = "more_like_this"
    TOO_INTENSE = "too_intense"
    TRY_DIFFERENT = "try_different"


class AdjustmentPreset(BaseModel):
    name: QuickAdjustment
    label: str
    icon: str
    description: str
    delta: Dict[str, float] = Field(default_factory=dict)
    filters: SearchFilters = Field(default_factory=SearchFilters)


class RefinementPlan(BaseModel):
    """Vector delta + filter delta selected for one refine call."""

    strategy: RefinementStrategy
    delta: Dict[str, float] = Field(default_factory=dict)
    filters: SearchFilters = Field(default_factory=SearchFilters)
    explanation: str
    # Cluster that triggered the strategy, when one did.
    cluster: Optional[str] = None
    matched_items: List[str] = Field(default_factory=list)
