"""Application state: collaborators and the shared SessionOrchestrator."""

from pathlib import Path
from typing import Any, Optional

from engine.catalog import StaticQuestionCatalog
from engine.orchestrator import SessionOrchestrator

from .config import ServerConfig, get_config
from .services import (
    FirestoreEventWriter,
    FirestoreSessionStore,
    InMemoryMomentFeedbackStore,
    InMemorySessionStore,
    LLMPreferenceTextService,
    LoggingAnalyticsSink,
    OpenAIEmbedder,
    PineconeSimilarityIndex,
    QdrantSimilarityIndex,
    TmdbEnrichmentService,
)


class AppState:
    """Global application state."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self.engine_config = config.engine_config()

        # Query embeddings: required by both index backends
        self.embedder = OpenAIEmbedder(api_key=config.openai_api_key)

        # Similarity index: Pinecone when a key is set, else Qdrant
        self.index = self._create_index(config)
        print(f"[startup] Similarity index: {type(self.index).__name__}")

        self.session_store = self._create_session_store(config)
        print(f"[startup] Session store: {type(self.session_store).__name__}")

        self.enrichment = self._create_enrichment(config)
        print(f"[startup] Enrichment: {type(self.enrichment).__name__ if self.enrichment else 'disabled'}")

        self.preference_service = self._create_preference_service(config)
        _ps = type(self.preference_service).__name__ if self.preference_service else "template only"
        print(f"[startup] Preference text: {_ps}")

        self.analytics, self.moment_store = self._create_event_sinks(config)
        print(f"[startup] Moment feedback store: {type(self.moment_store).__name__}")

        self.orchestrator = SessionOrchestrator(
            store=self.session_store,
            catalog=StaticQuestionCatalog(),
            index=self.index,
            enrichment=self.enrichment,
            preference_service=self.preference_service,
            analytics=self.analytics,
            moment_store=self.moment_store,
            config=self.engine_config,
        )

    def _create_index(self, config: ServerConfig) -> Any:
        if config.pinecone_api_key:
            return PineconeSimilarityIndex(
                embedder=self.embedder,
                api_key=config.pinecone_api_key,
                index_name=config.pinecone_index_name,
                namespace=config.pinecone_namespace,
                index_host=config.pinecone_index_host,
            )
        if config.qdrant_url:
            # ":memory:" gives an in-process collection (local runs)
            return QdrantSimilarityIndex(
                embedder=self.embedder,
                url=config.qdrant_url,
                collection=config.qdrant_collection,
            )
        raise ValueError(
            "No similarity index configured. Set PINECONE_API_KEY (Pinecone) or QDRANT_URL (Qdrant) in .env."
        )

    def _create_session_store(self, config: ServerConfig) -> Any:
        """Firestore when selected and the credentials file exists, else in-memory."""
        if config.session_backend == "firestore":
            cred_path = Path(config.firebase_credentials_path) if config.firebase_credentials_path else None
            if cred_path is None or not cred_path.is_file():
                raise ValueError(
                    f"WHATNEXT_SESSION_BACKEND=firestore but credentials file not found: {cred_path}"
                )
            return FirestoreSessionStore(
                project_id=config.firebase_project_id,
                credentials_path=cred_path,
            )
        return InMemorySessionStore()

    def _create_enrichment(self, config: ServerConfig) -> Optional[Any]:
        if not config.tmdb_api_key:
            return None
        return TmdbEnrichmentService(api_key=config.tmdb_api_key)

    def _create_preference_service(self, config: ServerConfig) -> Optional[Any]:
        if not config.preference_text_provider:
            return None
        try:
            return LLMPreferenceTextService(
                provider=config.preference_text_provider,
                model=config.preference_text_model,
            )
        except ValueError as e:
            print(f"[startup] Preference text LLM disabled: {e}")
            return None

    def _create_event_sinks(self, config: ServerConfig) -> tuple:
        """Firestore collections when credentials are set, else log lines and an in-memory list."""
        cred_path = config.firebase_credentials_path
        if cred_path and Path(cred_path).is_file():
            try:
                return (
                    FirestoreEventWriter(
                        "analytics_events",
                        project_id=config.firebase_project_id,
                        credentials_path=cred_path,
                    ),
                    FirestoreEventWriter(
                        "moment_feedback",
                        project_id=config.firebase_project_id,
                        credentials_path=cred_path,
                    ),
                )
            except Exception as e:
                print(f"[startup] Firestore event writers init failed: {e}, using local sinks")
        return LoggingAnalyticsSink(), InMemoryMomentFeedbackStore()


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def get_orchestrator() -> SessionOrchestrator:
    """FastAPI dependency; tests override it with an orchestrator over fakes."""
    return get_state().orchestrator
