"""
Analytics sinks and moment-feedback stores.

Everything here is best-effort: the engine runs these calls as background
tasks and only logs their failures.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .session_store import _project_id_from_credentials_file

logger = logging.getLogger(__name__)


class LoggingAnalyticsSink:
    """Writes each event as one log line."""

    async def record(self, event: Dict[str, Any]) -> None:
        logger.info("[analytics] %s", event)


class InMemoryMomentFeedbackStore:
    """Keeps records in a list (local runs and tests)."""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []

    async def save(self, record: Dict[str, Any]) -> None:
        self.records.append(dict(record))


class FirestoreEventWriter:
    """
    Appends documents to a Firestore collection. Used both as an analytics sink
    (`analytics_events`) and as a moment-feedback store (`moment_feedback`).
    """

    def __init__(
        self,
        collection: str,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        from google.cloud.firestore import AsyncClient
        from google.oauth2 import service_account

        if not credentials_path:
            raise ValueError("FirestoreEventWriter requires credentials_path")
        path = str(Path(credentials_path).resolve())
        creds = service_account.Credentials.from_service_account_file(path)
        self._db = AsyncClient(project=project_id or _project_id_from_credentials_file(path), credentials=creds)
        self._collection = collection

    async def _add(self, data: Dict[str, Any]) -> None:
        await self._db.collection(self._collection).add(dict(data))

    async def record(self, event: Dict[str, Any]) -> None:
        await self._add(event)

    async def save(self, record: Dict[str, Any]) -> None:
        await self._add(record)
