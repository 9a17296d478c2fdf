"""
Qdrant similarity index.

Works against a Qdrant server (QDRANT_URL) or an in-process ":memory:" store.
Point ids are UUIDv5 of the item id; the item id itself lives in the payload.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from qdrant_client import AsyncQdrantClient, models

from engine.models.filters import SearchFilters
from engine.models.recommendation import SearchHit

from ..index_filters import build_qdrant_filter, hit_from_metadata
from .embedding_client import DEFAULT_DIMENSIONS, OpenAIEmbedder

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "whatnext_movies"


def point_id(item_id: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"whatnext:{item_id}"))


class QdrantSimilarityIndex:
    """Catalog items in a Qdrant collection with cosine distance."""

    def __init__(
        self,
        embedder: OpenAIEmbedder,
        url: Optional[str] = None,
        collection: str = DEFAULT_COLLECTION,
        dimensions: int = DEFAULT_DIMENSIONS,
    ):
        self._embedder = embedder
        self._collection = collection
        self._dimensions = dimensions
        self.client = AsyncQdrantClient(url=url) if url else AsyncQdrantClient(location=":memory:")

    async def ensure_collection(self, recreate: bool = False) -> None:
        exists = await self.client.collection_exists(self._collection)
        if exists and recreate:
            await self.client.delete_collection(self._collection)
            exists = False
        if not exists:
            await self.client.create_collection(
                collection_name=self._collection,
                vectors_config=models.VectorParams(size=self._dimensions, distance=models.Distance.COSINE),
            )
            logger.info("[qdrant] created collection %s", self._collection)

    async def upsert_items(self, items: List[Dict[str, Any]], vectors: List[List[float]]) -> int:
        """Write items (dicts with item_id, title, year, genres, rating, runtime, traits) with their vectors."""
        await self.ensure_collection()
        points = [
            models.PointStruct(id=point_id(item["item_id"]), vector=vector, payload=item)
            for item, vector in zip(items, vectors)
        ]
        if points:
            await self.client.upsert(collection_name=self._collection, points=points)
        return len(points)

    async def search(self, text: str, filters: SearchFilters, top_k: int) -> List[SearchHit]:
        vector = await self._embedder.embed(text)
        response = await self.client.query_points(
            collection_name=self._collection,
            query=vector,
            query_filter=build_qdrant_filter(filters),
            limit=top_k,
            with_payload=True,
        )
        return [hit_from_metadata(str(p.id), p.score, p.payload) for p in response.points]

    async def is_available(self) -> bool:
        try:
            return await self.client.collection_exists(self._collection)
        except Exception as e:
            logger.warning("[qdrant] not reachable: %s", e)
            return False
