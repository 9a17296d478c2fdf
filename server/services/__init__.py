"""Collaborator adapters: session stores, similarity indexes, enrichment, preference text, analytics."""

from .analytics import FirestoreEventWriter, InMemoryMomentFeedbackStore, LoggingAnalyticsSink
from .embedding_client import OpenAIEmbedder, check_openai_available
from .enrichment import TmdbEnrichmentService
from .pinecone_index import PineconeSimilarityIndex
from .preference_text import LLMPreferenceTextService
from .qdrant_index import QdrantSimilarityIndex
from .session_store import FirestoreSessionStore, InMemorySessionStore

__all__ = [
    "FirestoreEventWriter",
    "FirestoreSessionStore",
    "InMemoryMomentFeedbackStore",
    "InMemorySessionStore",
    "LLMPreferenceTextService",
    "LoggingAnalyticsSink",
    "OpenAIEmbedder",
    "PineconeSimilarityIndex",
    "QdrantSimilarityIndex",
    "TmdbEnrichmentService",
    "check_openai_available",
]
