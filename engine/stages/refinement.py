"""
Refinement Engine: quick adjustments and feedback-driven strategy selection.

Quick adjustments are fixed presets applied to the base profile. Feedback
refinement runs the detectors in RefinementStrategy declaration order; the
first one that matches wins, AUTO otherwise. An explicit RefineAction skips
detection.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence

from ..errors import InvalidFeedbackError
from ..models.adjustments import (
    AdjustmentPreset,
    QuickAdjustment,
    RefineAction,
    RefinementPlan,
    RefinementStrategy,
)
from ..models.config import EngineConfig
from ..models.filters import SearchFilters
from ..models.profile import AXES, NEUTRAL, EmotionalProfile
from ..models.recommendation import Feedback, Reaction, Recommendation
from ..utils.genres import (
    GENRE_CLUSTERS,
    cluster_genres,
    clusters_of,
    dominant_cluster,
    primary_cluster,
    signature_axis,
)

logger = logging.getLogger(__name__)

QUICK_ADJUSTMENTS: Dict[QuickAdjustment, AdjustmentPreset] = {
    QuickAdjustment.LIGHTER: AdjustmentPreset(
        name=QuickAdjustment.LIGHTER, label="Lighter", icon="☀️",
        description="More upbeat and positive",
        delta={"darkness": -0.4, "energy": -0.1, "mood": 0.3, "humor": 0.3, "comfort": 0.3},
    ),
    QuickAdjustment.DEEPER: AdjustmentPreset(
        name=QuickAdjustment.DEEPER, label="Deeper", icon="🌊",
        description="More profound and meaningful",
        delta={"complexity": 0.4, "focus": 0.3, "humor": -0.2},
    ),
    QuickAdjustment.WEIRDER: AdjustmentPreset(
        name=QuickAdjustment.WEIRDER, label="Weirder", icon="🎭",
        description="More unusual and unexpected",
        delta={"openness": 0.5, "comfort": -0.3},
    ),
    QuickAdjustment.SAFER: AdjustmentPreset(
        name=QuickAdjustment.SAFER, label="Safer", icon="🏠",
        description="More familiar and comfortable",
        delta={"openness": -0.4, "comfort": 0.3},
        filters=SearchFilters(min_rating=7.0),
    ),
    QuickAdjustment.SHORTER: AdjustmentPreset(
        name=QuickAdjustment.SHORTER, label="Shorter", icon="⏱️",
        description="Quicker watches",
        filters=SearchFilters(max_runtime=100),
    ),
    QuickAdjustment.LONGER: AdjustmentPreset(
        name=QuickAdjustment.LONGER, label="Epic", icon="🎬",
        description="Epic length films",
        filters=SearchFilters(min_runtime=150),
    ),
}

EXPLANATIONS: Dict[RefinementStrategy, str] = {
    RefinementStrategy.TOO_INTENSE: "Making things lighter and more comfortable",
    RefinementStrategy.WRONG_ENERGY: "Adjusting the pace to match your mood",
    RefinementStrategy.GENRE_MISMATCH: "Avoiding genres that don't resonate",
    RefinementStrategy.HIDDEN_DESIRE: "Finding more of what you loved",
    RefinementStrategy.AUTO: "Fine-tuning based on your reactions",
}

TRY_DIFFERENT_EXPLANATION = "Adding more diversity to your recommendations"


def parse_quick_adjustment(name: str) -> QuickAdjustment:
    try:
        return QuickAdjustment((name or "").strip().lower())
    except ValueError:
        raise InvalidFeedbackError(f"Unknown quick adjustment {name!r}") from None


def parse_action(name: Optional[str]) -> Optional[RefineAction]:
    if not name:
        return None
    try:
        return RefineAction(name.strip().lower())
    except ValueError:
        raise InvalidFeedbackError(f"Unknown refine action {name!r}") from None


# ---------------------------------------------------------------------------
# Batch view
# ---------------------------------------------------------------------------


class _Batch:
    """Feedback joined with the item metadata of the last recommendation list."""

    def __init__(self, feedback: Sequence[Feedback], items: Dict[str, Recommendation]):
        self.size = len(feedback)
        self.likes: List[Recommendation] = []
        self.dislikes: List[Recommendation] = []
        for fb in feedback:
            item = items.get(fb.item_id)
            if item is None:
                logger.info("[refine] UNKNOWN_ITEM %s ignored for detection", fb.item_id)
                continue
            if fb.reaction == Reaction.LIKE:
                self.likes.append(item)
            elif fb.reaction == Reaction.DISLIKE:
                self.dislikes.append(item)


def _is_dark(item: Recommendation, config: EngineConfig) -> bool:
    if "darkness" in item.traits:
        return item.traits["darkness"] >= config.dark_trait_threshold
    return primary_cluster(item.genres) == "dark_thrills"


def _dominant_trait_axis(item: Recommendation) -> Optional[str]:
    known = [a for a in AXES if a in item.traits]
    if not known:
        return None
    return max(known, key=lambda a: (abs(item.traits[a] - NEUTRAL), -AXES.index(a)))


# ---------------------------------------------------------------------------
# Detectors (each returns a plan or None)
# ---------------------------------------------------------------------------


def _too_intense_plan(matched: List[str]) -> RefinementPlan:
    return RefinementPlan(
        strategy=RefinementStrategy.TOO_INTENSE,
        delta={"darkness": -0.4, "energy": -0.1, "comfort": 0.4, "humor": 0.2},
        filters=SearchFilters(exclude_genres=["Horror", "Thriller"]),
        explanation=EXPLANATIONS[RefinementStrategy.TOO_INTENSE],
        matched_items=matched,
    )


def detect_too_intense(batch: _Batch, profile: EmotionalProfile, safe, config: EngineConfig):
    if batch.size == 0 or len(batch.dislikes) <= config.too_intense_dislike_share * batch.size:
        return None
    dark = [i.item_id for i in batch.dislikes if _is_dark(i, config)]
    if len(dark) < config.too_intense_dark_share * len(batch.dislikes):
        return None
    return _too_intense_plan(dark)


def detect_wrong_energy(batch: _Batch, profile: EmotionalProfile, safe, config: EngineConfig):
    rated = [i for i in batch.dislikes if "energy" in i.traits]
    if len(rated) < config.wrong_energy_min_dislikes:
        return None
    current = profile.value("energy")
    gaps = [i.traits["energy"] - current for i in rated]
    if not (all(g > 0 for g in gaps) or all(g < 0 for g in gaps)):
        return None
    wide = [g for g in gaps if abs(g) >= config.wrong_energy_gap]
    if len(wide) < config.wrong_energy_share * len(rated):
        return None
    mean_disliked = sum(i.traits["energy"] for i in rated) / len(rated)
    target = 1.0 - mean_disliked
    return RefinementPlan(
        strategy=RefinementStrategy.WRONG_ENERGY,
        delta={"energy": round(target - current, 4)},
        explanation=EXPLANATIONS[RefinementStrategy.WRONG_ENERGY],
        matched_items=[i.item_id for i in rated],
    )


def detect_genre_mismatch(batch: _Batch, profile: EmotionalProfile, safe, config: EngineConfig):
    if not batch.dislikes:
        return None
    liked = set()
    for item in batch.likes:
        liked.update(clusters_of(item.genres))
    counts = {c: 0 for c in GENRE_CLUSTERS}
    for item in batch.dislikes:
        for c in clusters_of(item.genres):
            counts[c] += 1
    eligible = [
        c for c in GENRE_CLUSTERS
        if counts[c] >= config.genre_mismatch_min_count
        and counts[c] >= config.genre_mismatch_share * len(batch.dislikes)
        and c not in liked
    ]
    if not eligible:
        return None
    cluster = max(eligible, key=lambda c: (counts[c], -list(GENRE_CLUSTERS).index(c)))
    return RefinementPlan(
        strategy=RefinementStrategy.GENRE_MISMATCH,
        delta={signature_axis(cluster): -config.auto_step},
        filters=SearchFilters(exclude_genres=cluster_genres(cluster)),
        explanation=EXPLANATIONS[RefinementStrategy.GENRE_MISMATCH],
        cluster=cluster,
        matched_items=[i.item_id for i in batch.dislikes if cluster in clusters_of(i.genres)],
    )


def _hidden_desire_plan(cluster: str, matched: List[str], config: EngineConfig) -> RefinementPlan:
    return RefinementPlan(
        strategy=RefinementStrategy.HIDDEN_DESIRE,
        delta={signature_axis(cluster): config.hidden_desire_boost},
        filters=SearchFilters(genres=cluster_genres(cluster)[:2]),
        explanation=EXPLANATIONS[RefinementStrategy.HIDDEN_DESIRE],
        cluster=cluster,
        matched_items=matched,
    )


def detect_hidden_desire(batch: _Batch, profile: EmotionalProfile, safe, config: EngineConfig):
    if len(batch.likes) < config.hidden_desire_min_likes:
        return None
    clusters = {primary_cluster(i.genres) for i in batch.likes}
    if len(clusters) != 1 or None in clusters:
        return None
    cluster = clusters.pop()
    if cluster == dominant_cluster(i.genres for i in safe):
        return None
    return _hidden_desire_plan(cluster, [i.item_id for i in batch.likes], config)


def auto_plan(batch: _Batch, config: EngineConfig, explanation: Optional[str] = None) -> RefinementPlan:
    """Step away from disliked items' dominant axes (or toward liked ones when none were disliked)."""
    delta: Dict[str, float] = {}
    source, step = (batch.dislikes, -config.auto_step) if batch.dislikes else (batch.likes, config.auto_like_step)
    for item in source:
        axis = _dominant_trait_axis(item)
        if axis is None:
            continue
        direction = 1.0 if item.traits[axis] >= NEUTRAL else -1.0
        delta[axis] = round(delta.get(axis, 0.0) + step * direction, 4)
    return RefinementPlan(
        strategy=RefinementStrategy.AUTO,
        delta=delta,
        explanation=explanation or EXPLANATIONS[RefinementStrategy.AUTO],
        matched_items=[i.item_id for i in source],
    )


DETECTORS: Dict[RefinementStrategy, Callable] = {
    RefinementStrategy.TOO_INTENSE: detect_too_intense,
    RefinementStrategy.WRONG_ENERGY: detect_wrong_energy,
    RefinementStrategy.GENRE_MISMATCH: detect_genre_mismatch,
    RefinementStrategy.HIDDEN_DESIRE: detect_hidden_desire,
}


def _plan_for_action(action: RefineAction, batch: _Batch, config: EngineConfig) -> RefinementPlan:
    if action == RefineAction.TOO_INTENSE:
        return _too_intense_plan([i.item_id for i in batch.dislikes])
    if action == RefineAction.MORE_LIKE_THIS:
        cluster = dominant_cluster(i.genres for i in batch.likes)
        if cluster is not None:
            return _hidden_desire_plan(cluster, [i.item_id for i in batch.likes], config)
        return auto_plan(batch, config, EXPLANATIONS[RefinementStrategy.HIDDEN_DESIRE])
    plan = auto_plan(batch, config, TRY_DIFFERENT_EXPLANATION)
    plan.delta["openness"] = round(plan.delta.get("openness", 0.0) + config.auto_step, 4)
    return plan


def select_strategy(
    feedback: Sequence[Feedback],
    items: Dict[str, Recommendation],
    profile: EmotionalProfile,
    config: EngineConfig,
    action: Optional[RefineAction] = None,
) -> RefinementPlan:
    """
    Pick exactly one refinement plan for a feedback batch.

    items maps item id -> the recommendation the user reacted to (the session's
    last list). Non-surprise items in it form the safe set for "unexpected"
    category checks.
    """
    batch = _Batch(feedback, items)
    safe = [i for i in items.values() if not i.is_surprise]
    if action is not None:
        plan = _plan_for_action(action, batch, config)
        logger.info("[refine] action=%s strategy=%s", action.value, plan.strategy.value)
        return plan
    for strategy, detect in DETECTORS.items():
        plan = detect(batch, profile, safe, config)
        if plan is not None:
            logger.info("[refine] strategy=%s matched=%d", strategy.value, len(plan.matched_items))
            return plan
    plan = auto_plan(batch, config)
    logger.info("[refine] strategy=auto delta=%s", plan.delta)
    return plan
