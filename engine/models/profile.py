"""
EmotionalProfile model: independent axes in [0,1] plus confidence and description.
"""

from typing import Dict, List, Mapping

from pydantic import BaseModel, Field

# Fixed axis order. Every ordered operation (enhancement phrases, tie-breaks,
# dominant-axis selection) iterates in this order.
AXES = (
    "energy",
    "mood",
    "openness",
    "focus",
    "darkness",
    "comfort",
    "complexity",
    "humor",
)

NEUTRAL = 0.5


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


class EmotionalProfile(BaseModel):
    """The inferred moment: one value per axis, confidence in [0,100], and a summary."""

    axes: Dict[str, float] = Field(default_factory=lambda: {a: NEUTRAL for a in AXES})
    confidence: int = 0
    description: str = ""
    emoji: str = ""
    explanation: str = ""
    degraded: bool = False

    def value(self, axis: str) -> float:
        return self.axes.get(axis, NEUTRAL)

    def level(self, axis: str, low: float = 0.35, high: float = 0.65) -> str:
        v = self.value(axis)
        if v >= high:
            return "high"
        if v <= low:
            return "low"
        return "mid"

    def dominant_axes(self, n: int = 2) -> List[str]:
        """Axes ordered by distance from neutral, ties broken by AXES order."""
        ranked = sorted(
            AXES,
            key=lambda a: (-abs(self.value(a) - NEUTRAL), AXES.index(a)),
        )
        return ranked[:n]

    def with_delta(self, delta: Mapping[str, float]) -> "EmotionalProfile":
        """Return a copy with delta added per axis and values clamped to [0,1]."""
        axes = dict(self.axes)
        for axis in AXES:
            if axis in delta:
                axes[axis] = round(clamp(self.value(axis) + delta[axis]), 4)
        return self.model_copy(update={"axes": axes})

    def vector(self) -> List[float]:
        return [self.value(a) for a in AXES]
