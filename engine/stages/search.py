"""
Similarity Search Orchestrator.

Derives soft filters from specific answers, queries the similarity index with
the synthesized text, and returns the index's own order truncated to K.
Timeouts and upstream errors degrade to an empty list.
"""

import asyncio
import logging
from typing import Dict, List, Mapping, Tuple

from ..collaborators import SimilarityIndex
from ..errors import UpstreamSearchUnavailable
from ..models.config import EngineConfig
from ..models.context import Context, DayType, TimeOfDay
from ..models.filters import SearchFilters
from ..models.recommendation import SearchHit

logger = logging.getLogger(__name__)

ERA_RANGES: Dict[str, Tuple[int, int]] = {
    "classic": (1940, 1979),
    "80s-90s": (1980, 1999),
    "2000s": (2000, 2010),
    "recent": (2011, 2024),
}

RATING_FLOORS: Dict[str, float] = {
    "highly-rated": 7.5,
    "decent": 6.0,
}

# (question id, option id) -> filter fields. Unlisted answers add nothing.
ANSWER_FILTERS: Dict[Tuple[str, str], Dict] = {
    ("time_commitment", "short"): {"max_runtime": 90},
    ("time_commitment", "standard"): {"max_runtime": 130},
    ("surprise_me", "safe"): {"min_rating": RATING_FLOORS["highly-rated"]},
    ("discovery_mode", "reliable"): {"min_rating": RATING_FLOORS["decent"]},
    ("mood_check", "energetic"): {"genres": ["Action"]},
    ("mood_check", "chill"): {"genres": ["Comedy"]},
    ("mood_check", "emotional"): {"genres": ["Drama"]},
    ("mood_check", "adventurous"): {"genres": ["Adventure"]},
}

LATE_NIGHT_MAX_RUNTIME = 150


def build_filters(answers: Mapping[str, str], context: Context) -> SearchFilters:
    """Deterministic soft filters for an answer set."""
    filters = SearchFilters()
    era = answers.get("era")
    if era in ERA_RANGES:
        year_min, year_max = ERA_RANGES[era]
        filters = filters.merged(SearchFilters(year_min=year_min, year_max=year_max))
    for qid, option_id in answers.items():
        rule = ANSWER_FILTERS.get((qid, option_id))
        if rule:
            filters = filters.merged(SearchFilters(**rule))
    if context.time_of_day == TimeOfDay.LATE_NIGHT and context.day_type != DayType.WEEKEND:
        cap = LATE_NIGHT_MAX_RUNTIME
        if filters.max_runtime is not None:
            cap = min(cap, filters.max_runtime)
        filters = filters.merged(SearchFilters(max_runtime=cap))
    return filters


async def _query(index: SimilarityIndex, text: str, filters: SearchFilters, config: EngineConfig) -> List[SearchHit]:
    try:
        return await asyncio.wait_for(
            index.search(text, filters, config.search_top_k),
            timeout=config.search_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamSearchUnavailable(f"search timed out after {config.search_timeout_seconds}s") from e
    except Exception as e:
        raise UpstreamSearchUnavailable(f"{type(e).__name__}: {e}") from e


async def search_candidates(
    index: SimilarityIndex,
    text: str,
    filters: SearchFilters,
    config: EngineConfig,
) -> Tuple[List[SearchHit], bool]:
    """
    Return (candidates, degraded).

    candidates keep the index's order (never re-sorted), deduplicated by item id
    and truncated to search_top_k. degraded is True when the index was
    unavailable and the list is empty because of it.
    """
    try:
        hits = await _query(index, text, filters, config)
    except UpstreamSearchUnavailable as e:
        logger.warning("[search] UPSTREAM_UNAVAILABLE %s", e)
        return [], True
    seen = set()
    out = []
    for hit in hits or []:
        if hit.item_id in seen:
            continue
        seen.add(hit.item_id)
        out.append(hit)
        if len(out) >= config.search_top_k:
            break
    if len(out) < config.safe_count:
        logger.info("[search] SHORT_RESULTS got=%d requested=%d", len(out), config.search_top_k)
    return out, False
