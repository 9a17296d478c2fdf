"""
Pinecone similarity index.

Requires pinecone[asyncio]. Queries embed the preference text with OpenAI, then
run an IndexAsyncio query with metadata so hits carry year, genres and traits.
"""

import logging
import os
from typing import List, Optional

from pinecone import Pinecone

from engine.models.filters import SearchFilters
from engine.models.recommendation import SearchHit

from ..index_filters import build_pinecone_filter, hit_from_metadata
from .embedding_client import OpenAIEmbedder

logger = logging.getLogger(__name__)

PINECONE_ASYNC_REQUIRED_MSG = (
    "Pinecone asyncio support is required. Install with: pip install 'pinecone[asyncio]'"
)


class PineconeSimilarityIndex:
    """
    Catalog items in a Pinecone index, one vector per item id.

    Uses PINECONE_API_KEY from env. Index name from PINECONE_INDEX_NAME or default.
    """

    DEFAULT_INDEX_NAME = "whatnext-movies"

    def __init__(
        self,
        embedder: OpenAIEmbedder,
        api_key: Optional[str] = None,
        index_name: Optional[str] = None,
        namespace: str = "",
        index_host: Optional[str] = None,
    ):
        self._api_key = (api_key or os.environ.get("PINECONE_API_KEY") or "").strip()
        if not self._api_key:
            raise ValueError("PINECONE_API_KEY is required for PineconeSimilarityIndex")
        self._index_name = (index_name or os.environ.get("PINECONE_INDEX_NAME") or self.DEFAULT_INDEX_NAME).strip()
        self._namespace = namespace
        self._index_host = index_host
        self._embedder = embedder
        self._client: Optional[Pinecone] = None

    @property
    def client(self) -> Pinecone:
        if self._client is None:
            self._client = Pinecone(api_key=self._api_key)
        return self._client

    def _get_index_host(self) -> str:
        """Resolve index host for async queries (cached)."""
        if self._index_host is not None:
            return self._index_host
        try:
            desc = self.client.describe_index(self._index_name)
        except Exception as e:
            raise RuntimeError(f"Could not resolve Pinecone index host for {self._index_name!r}: {e}") from e
        host = getattr(desc, "host", None) or (desc.get("host") if isinstance(desc, dict) else None)
        if not host:
            raise RuntimeError(f"Pinecone index {self._index_name!r} has no host; check index exists and API key.")
        self._index_host = host
        logger.info("[pinecone] index host resolved: %r", host)
        return host

    def is_available(self) -> bool:
        try:
            self.client.list_indexes()
            return True
        except Exception as e:
            logger.warning("[pinecone] not reachable: %s", e)
            return False

    async def search(self, text: str, filters: SearchFilters, top_k: int) -> List[SearchHit]:
        """Query by embedded text. Errors propagate; the engine treats them as unavailable."""
        vector = await self._embedder.embed(text)
        host = self._get_index_host()
        try:
            async with self.client.IndexAsyncio(host=host) as idx:
                result = await idx.query(
                    vector=vector,
                    top_k=top_k,
                    namespace=self._namespace,
                    filter=build_pinecone_filter(filters),
                    include_values=False,
                    include_metadata=True,
                )
        except Exception as e:
            err_msg = str(e).lower()
            if "asyncio" in err_msg or "additional dependencies" in err_msg:
                raise ImportError(PINECONE_ASYNC_REQUIRED_MSG) from e
            raise
        matches = result.matches if getattr(result, "matches", None) else []
        return [hit_from_metadata(m.id, m.score, getattr(m, "metadata", None)) for m in matches]
