"""
TMDB enrichment: poster, overview and tagline per item id.

Item ids are TMDB movie ids. Requests run in worker threads so the event loop
stays free; individual misses are skipped, whole-call failures are handled by
the engine's enrichment stage.
"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

TMDB_API_BASE = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"
REQUEST_TIMEOUT = 4.0


class TmdbEnrichmentService:
    def __init__(self, api_key: Optional[str] = None, base_url: str = TMDB_API_BASE):
        self._api_key = (api_key or os.environ.get("TMDB_API_KEY") or "").strip()
        if not self._api_key:
            raise ValueError("TMDB_API_KEY is required for TmdbEnrichmentService")
        self._base_url = base_url.rstrip("/")
        self._http = requests.Session()

    def _fetch_one(self, item_id: str) -> Optional[Dict[str, Any]]:
        resp = self._http.get(
            f"{self._base_url}/movie/{item_id}",
            params={"api_key": self._api_key},
            timeout=REQUEST_TIMEOUT,
        )
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        data = resp.json()
        poster = data.get("poster_path")
        return {
            "overview": data.get("overview"),
            "tagline": data.get("tagline"),
            "poster_url": f"{TMDB_IMAGE_BASE}{poster}" if poster else None,
            "vote_average": data.get("vote_average"),
            "release_date": data.get("release_date"),
        }

    async def enrich(self, item_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        results = await asyncio.gather(
            *(asyncio.to_thread(self._fetch_one, item_id) for item_id in item_ids),
            return_exceptions=True,
        )
        out: Dict[str, Dict[str, Any]] = {}
        for item_id, result in zip(item_ids, results):
            if isinstance(result, Exception):
                logger.info("[enrich] item %s skipped: %s", item_id, result)
            elif result:
                out[item_id] = result
        return out
