"""
Session stores: in-memory (default) and Firestore.

Both implement engine.collaborators.SessionStore with compare-and-swap on
Session.version. Records outlive their session deadline by a grace period so
the engine can report "expired" rather than "not found".
"""

import asyncio
import json
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from engine.errors import SessionConflictError
from engine.models.session import Session

# Expired sessions are kept this long past their TTL before being purged.
EXPIRED_GRACE_SECONDS = 3600


def _project_id_from_credentials_file(credentials_path: Union[Path, str]) -> Optional[str]:
    """Read project_id from a Google service account JSON file if present."""
    try:
        path = Path(credentials_path)
        if not path.is_file():
            return None
        with open(path) as f:
            data = json.load(f)
        return data.get("project_id") or data.get("projectId")
    except (OSError, ValueError):
        return None


class InMemorySessionStore:
    """
    Process-local store. Records are kept as JSON-mode dicts so callers never
    share mutable objects with the store.
    """

    def __init__(self, grace_seconds: int = EXPIRED_GRACE_SECONDS, clock=time.monotonic):
        self._records: Dict[str, Tuple[Dict[str, Any], float]] = {}
        self._lock = asyncio.Lock()
        self._grace = grace_seconds
        self._clock = clock

    def _purge(self) -> None:
        now = self._clock()
        for sid in [sid for sid, (_, purge_at) in self._records.items() if purge_at <= now]:
            del self._records[sid]

    async def get(self, session_id: str) -> Optional[Session]:
        async with self._lock:
            self._purge()
            entry = self._records.get(session_id)
        if entry is None:
            return None
        return Session.model_validate(entry[0])

    async def put(
        self,
        session: Session,
        ttl_seconds: int,
        expected_version: Optional[int] = None,
    ) -> Session:
        async with self._lock:
            if expected_version is not None:
                entry = self._records.get(session.session_id)
                current = entry[0]["version"] if entry else None
                if current != expected_version:
                    raise SessionConflictError(
                        f"Session {session.session_id} version {current} != expected {expected_version}",
                        session_id=session.session_id,
                    )
            written = session.model_copy(update={"version": session.version + 1})
            purge_at = self._clock() + ttl_seconds + self._grace
            self._records[session.session_id] = (written.model_dump(mode="json"), purge_at)
        return written

    async def delete(self, session_id: str) -> bool:
        async with self._lock:
            return self._records.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)


class FirestoreSessionStore:
    """
    Sessions in the `sessions` collection, one document per session id.

    Compare-and-swap runs inside a Firestore transaction. Each document carries
    `purge_at` so a Firestore TTL policy can remove it after the grace period.
    """

    COLLECTION = "sessions"

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        collection: Optional[str] = None,
        grace_seconds: int = EXPIRED_GRACE_SECONDS,
    ):
        from google.cloud.firestore import AsyncClient
        from google.oauth2 import service_account

        if not credentials_path:
            raise ValueError("FirestoreSessionStore requires credentials_path")
        self._credentials_path = str(Path(credentials_path).resolve())
        creds = service_account.Credentials.from_service_account_file(self._credentials_path)
        proj = project_id or _project_id_from_credentials_file(self._credentials_path)
        self._db = AsyncClient(project=proj, credentials=creds)
        self._collection = collection or self.COLLECTION
        self._grace = grace_seconds

    def _ref(self, session_id: str):
        return self._db.collection(self._collection).document(session_id)

    async def get(self, session_id: str) -> Optional[Session]:
        snap = await self._ref(session_id).get()
        if not snap.exists:
            return None
        data = snap.to_dict()
        data.pop("purge_at", None)
        return Session.model_validate(data)

    async def put(
        self,
        session: Session,
        ttl_seconds: int,
        expected_version: Optional[int] = None,
    ) -> Session:
        from google.cloud.firestore import async_transactional

        written = session.model_copy(update={"version": session.version + 1})
        data = written.model_dump(mode="json")
        data["purge_at"] = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds + self._grace)
        ref = self._ref(session.session_id)

        if expected_version is None:
            await ref.set(data)
            return written

        @async_transactional
        async def _compare_and_set(transaction):
            snap = await ref.get(transaction=transaction)
            current = snap.to_dict().get("version") if snap.exists else None
            if current != expected_version:
                raise SessionConflictError(
                    f"Session {session.session_id} version {current} != expected {expected_version}",
                    session_id=session.session_id,
                )
            transaction.set(ref, data)

        await _compare_and_set(self._db.transaction())
        return written

    async def delete(self, session_id: str) -> bool:
        ref = self._ref(session_id)
        snap = await ref.get()
        if not snap.exists:
            return False
        await ref.delete()
        return True
