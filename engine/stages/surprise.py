"""
Surprise Engine: safe set + broader pool -> final list with a fixed surprise quota.

Each surprise slot draws one of three strategies by weight:
- controlled_chaos: uniform pick from the broader pool
- adjacent_discovery: pool item outside the safe set's dominant genre cluster
  or decade, closest in traits to the safe set (or the profile)
- wildcard: the pool item with the lowest similarity score

If the drawn strategy has nothing eligible, the others are tried in that
order. Items are never duplicated; a short pool yields fewer surprises.
"""

import logging
import random
from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence

from ..models.config import EngineConfig
from ..models.profile import EmotionalProfile, NEUTRAL
from ..models.recommendation import Recommendation, SearchHit
from ..utils.genres import dominant_cluster, primary_cluster
from ..utils.similarity import centroid, cosine_similarity, trait_vector

logger = logging.getLogger(__name__)

STRATEGY_ORDER = ("controlled_chaos", "adjacent_discovery", "wildcard")

_CLUSTER_LABELS = {
    "dark_thrills": "dark thrillers",
    "light": "light comedies",
    "serious": "serious dramas",
    "escapist": "escapist fantasy",
    "action": "action adventures",
}


def _decade(year: Optional[int]) -> Optional[int]:
    return (year // 10) * 10 if year else None


def _dominant_decade(items: Sequence[SearchHit]) -> Optional[int]:
    decades = Counter(_decade(i.year) for i in items if i.year)
    if not decades:
        return None
    return decades.most_common(1)[0][0]


def _pick_chaos(pool: List[SearchHit], safe: List[SearchHit], profile: EmotionalProfile, rng: random.Random):
    return rng.choice(pool) if pool else None


def _pick_adjacent(pool: List[SearchHit], safe: List[SearchHit], profile: EmotionalProfile, rng: random.Random):
    cluster = dominant_cluster(i.genres for i in safe)
    decade = _dominant_decade(safe)
    if cluster is None and decade is None:
        return None
    eligible = [
        i for i in pool
        if (cluster is not None and primary_cluster(i.genres) not in (None, cluster))
        or (decade is not None and _decade(i.year) not in (None, decade))
    ]
    if not eligible:
        return None
    safe_traits = [trait_vector(i.traits) for i in safe if i.traits]
    reference = centroid(safe_traits) if safe_traits else [v - NEUTRAL for v in profile.vector()]
    # max() keeps the first of equal scores, i.e. the index's order.
    return max(eligible, key=lambda i: cosine_similarity(trait_vector(i.traits), reference))


def _pick_wildcard(pool: List[SearchHit], safe: List[SearchHit], profile: EmotionalProfile, rng: random.Random):
    if not pool:
        return None
    return min(reversed(pool), key=lambda i: i.score)


PICKERS: Dict[str, Callable] = {
    "controlled_chaos": _pick_chaos,
    "adjacent_discovery": _pick_adjacent,
    "wildcard": _pick_wildcard,
}


def surprise_reason(strategy: str, item: SearchHit, safe: Sequence[SearchHit]) -> str:
    """One sentence explaining why a surprise was injected."""
    if strategy == "adjacent_discovery":
        cluster = dominant_cluster(i.genres for i in safe)
        label = _CLUSTER_LABELS.get(cluster, "picks")
        return f"Adjacent discovery: close to your mood, but a step away from the usual {label}."
    if strategy == "wildcard":
        return "Wildcard pick: a long shot, because sometimes magic happens."
    return "Controlled chaos: a random find from just beyond your top matches."


def _draw_order(weights: Dict[str, float], rng: random.Random) -> List[str]:
    names = list(STRATEGY_ORDER)
    first = rng.choices(names, weights=[weights[n] for n in names], k=1)[0]
    return [first] + [n for n in names if n != first]


def choose_surprises(
    safe: List[SearchHit],
    pool: List[SearchHit],
    profile: EmotionalProfile,
    config: EngineConfig,
    rng: random.Random,
) -> List[Recommendation]:
    remaining = list(pool)
    picked: List[Recommendation] = []
    for _ in range(config.surprise_quota):
        if not remaining:
            break
        for strategy in _draw_order(config.strategy_weights, rng):
            item = PICKERS[strategy](remaining, safe, profile, rng)
            if item is None:
                continue
            remaining = [i for i in remaining if i.item_id != item.item_id]
            picked.append(Recommendation.from_hit(
                item,
                is_surprise=True,
                strategy=strategy,
                surprise_reason=surprise_reason(strategy, item, safe),
            ))
            break
    return picked


def insert_surprises(
    safe: List[Recommendation],
    surprises: List[Recommendation],
    positions: Sequence[int],
) -> List[Recommendation]:
    final = list(safe)
    for idx, item in enumerate(surprises):
        pos = positions[idx] if idx < len(positions) else len(final)
        final.insert(min(pos, len(final)), item)
    return final


def inject_surprises(
    candidates: List[SearchHit],
    profile: EmotionalProfile,
    config: EngineConfig,
    rng: random.Random,
) -> List[Recommendation]:
    """
    Build the final recommendation list: the first safe_count candidates in the
    index's order, plus up to surprise_quota surprises drawn from the rest.
    """
    safe_hits = candidates[:config.safe_count]
    pool = candidates[config.safe_count:]
    surprises = choose_surprises(safe_hits, pool, profile, config, rng)
    if len(surprises) < config.surprise_quota:
        logger.info(
            "[surprise] SHORT_POOL quota=%d injected=%d pool=%d",
            config.surprise_quota, len(surprises), len(pool),
        )
    safe = [Recommendation.from_hit(h) for h in safe_hits]
    return insert_surprises(safe, surprises, config.surprise_positions)
