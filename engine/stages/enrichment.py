"""
Enrichment: attach display metadata to recommendations. Never fatal.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..collaborators import EnrichmentService
from ..errors import EnrichmentUnavailable
from ..models.config import EngineConfig
from ..models.recommendation import Recommendation

logger = logging.getLogger(__name__)


async def fetch_details(
    service: Optional[EnrichmentService],
    item_ids: List[str],
    config: EngineConfig,
) -> Dict[str, Dict[str, Any]]:
    if service is None or not item_ids:
        return {}
    try:
        return await asyncio.wait_for(service.enrich(item_ids), timeout=config.enrichment_timeout_seconds) or {}
    except Exception as e:
        err = EnrichmentUnavailable(f"{type(e).__name__}: {e}")
        logger.warning("[enrich] ENRICHMENT_UNAVAILABLE items=%d %s", len(item_ids), err)
        return {}


def apply_details(recs: List[Recommendation], details: Dict[str, Dict[str, Any]]) -> List[Recommendation]:
    out = []
    for rec in recs:
        extra = details.get(rec.item_id)
        out.append(rec.model_copy(update={"details": {**rec.details, **extra}}) if extra else rec)
    return out
