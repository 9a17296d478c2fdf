"""
Moment Validation: a 1-5 satisfaction score that only decides whether to ask for follow-up feedback.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from ..collaborators import MomentFeedbackStore
from ..errors import InvalidFeedbackError, ValidationStorageFailure
from ..models.config import EngineConfig

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 5


def validate_score(score: Any) -> int:
    if isinstance(score, bool) or not isinstance(score, int) or not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidFeedbackError(f"Moment score must be an integer in [{MIN_SCORE},{MAX_SCORE}], got {score!r}")
    return score


def needs_follow_up(score: int, config: EngineConfig) -> bool:
    return score < config.follow_up_threshold


async def persist_moment_feedback(
    store: Optional[MomentFeedbackStore],
    record: Dict[str, Any],
    config: EngineConfig,
) -> bool:
    """Best-effort write. Returns False (after logging) instead of raising."""
    if store is None:
        return False
    try:
        await asyncio.wait_for(store.save(record), timeout=config.enrichment_timeout_seconds)
        return True
    except Exception as e:
        err = ValidationStorageFailure(f"{type(e).__name__}: {e}", session_id=record.get("session_id"))
        logger.warning("[moment] VALIDATION_STORAGE_FAILURE session=%s %s", err.session_id, err)
        return False
