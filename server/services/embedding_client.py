"""
OpenAI embedding client used by the similarity index adapters.

The index owns its embedding: the engine only ever passes preference text.
"""

import os
import time
from typing import List, Optional

from openai import AsyncOpenAI, OpenAI

# Defaults (can be overridden)
DEFAULT_MODEL = "text-embedding-3-small"
DEFAULT_DIMENSIONS = 1536


class OpenAIEmbedder:
    """Async single-text embedding for queries, batched sync embedding for index population."""

    BATCH_SIZE = 100
    DELAY_BETWEEN_BATCHES = 0.5

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        dimensions: int = DEFAULT_DIMENSIONS,
    ):
        self._api_key = (api_key or os.environ.get("OPENAI_API_KEY") or "").strip()
        if not self._api_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAIEmbedder")
        self.model = model
        self.dimensions = dimensions
        self._async_client: Optional[AsyncOpenAI] = None
        self._client: Optional[OpenAI] = None

    @property
    def async_client(self) -> AsyncOpenAI:
        if self._async_client is None:
            self._async_client = AsyncOpenAI(api_key=self._api_key)
        return self._async_client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key)
        return self._client

    async def embed(self, text: str) -> List[float]:
        response = await self.async_client.embeddings.create(
            model=self.model,
            input=[text],
            dimensions=self.dimensions,
        )
        return response.data[0].embedding

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed many texts in BATCH_SIZE chunks, pausing between chunks."""
        vectors: List[List[float]] = []
        for i in range(0, len(texts), self.BATCH_SIZE):
            chunk = texts[i:i + self.BATCH_SIZE]
            response = self.client.embeddings.create(
                model=self.model,
                input=chunk,
                dimensions=self.dimensions,
            )
            vectors.extend(item.embedding for item in response.data)
            if i + self.BATCH_SIZE < len(texts):
                time.sleep(self.DELAY_BETWEEN_BATCHES)
        return vectors


def check_openai_available() -> tuple[bool, str]:
    """
    Check if OpenAI is configured.

    Returns:
        (is_available, message)
    """
    if not os.environ.get("OPENAI_API_KEY"):
        return False, "OPENAI_API_KEY environment variable not set"
    return True, "OpenAI configured and ready"
