"""
Question model: immutable catalog content.

Each option carries a partial axis-weight contribution (axis -> [0,1]) and an
optional phrase used by the deterministic preference-text template.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QuestionOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    emoji: Optional[str] = None
    weights: Dict[str, float] = Field(default_factory=dict)
    phrase: Optional[str] = None

    @field_validator("weights")
    @classmethod
    def weights_in_unit_range(cls, v: Dict[str, float]) -> Dict[str, float]:
        for axis, w in v.items():
            if not 0.0 <= w <= 1.0:
                raise ValueError(f"Option weight for {axis!r} must be in [0,1], got {w}")
        return v


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    options: List[QuestionOption]
    subtitle: Optional[str] = None

    def option(self, option_id: str) -> Optional[QuestionOption]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None
