"""
Collaborator contracts consumed by the engine.

Implementations live in server/services (cloud and in-memory) and in
tests/fakes.py. The engine depends only on these Protocols.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol

from .models.context import Context
from .models.filters import SearchFilters
from .models.question import Question
from .models.recommendation import SearchHit
from .models.session import Session


class SessionStore(Protocol):
    """Session persistence with compare-and-swap on Session.version."""

    async def get(self, session_id: str) -> Optional[Session]:
        """Return the stored session (expired or not), or None."""
        ...

    async def put(
        self,
        session: Session,
        ttl_seconds: int,
        expected_version: Optional[int] = None,
    ) -> Session:
        """
        Write session. When expected_version is given and the stored version
        differs, raise SessionConflictError. Returns the written record with its
        version incremented.
        """
        ...

    async def delete(self, session_id: str) -> bool:
        ...


class QuestionCatalog(Protocol):
    def flows(self) -> List[str]:
        ...

    def questions_for_flow(self, flow: str, context: Context) -> List[Question]:
        ...

    def greeting(self, context: Context) -> str:
        ...


class SimilarityIndex(Protocol):
    async def search(
        self,
        text: str,
        filters: SearchFilters,
        top_k: int,
    ) -> List[SearchHit]:
        """Ranked by descending score. Filters are advisory."""
        ...


class EnrichmentService(Protocol):
    async def enrich(self, item_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        ...


class PreferenceTextService(Protocol):
    async def preference_text(
        self,
        answers: Mapping[str, str],
        questions: List[Question],
        domain: str,
    ) -> str:
        ...


class AnalyticsSink(Protocol):
    async def record(self, event: Dict[str, Any]) -> None:
        ...


class MomentFeedbackStore(Protocol):
    async def save(self, record: Dict[str, Any]) -> None:
        ...
