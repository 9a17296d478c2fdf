"""
In-process collaborators for engine and API tests.

FakeIndex serves a fixed synthetic catalog. Its ranking depends on the query
text and honors the runtime, rating and excluded-genre filters, so tests can
observe how preference text and filters flow into search.
"""

import asyncio
import zlib
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from engine.errors import SessionConflictError
from engine.models.filters import SearchFilters
from engine.models.recommendation import SearchHit
from server.services.session_store import InMemorySessionStore

# (title stem, genres, year, runtime, rating, traits)
_TEMPLATES = [
    ("Night Terror", ["Horror", "Thriller"], 1982, 98, 6.8,
     {"energy": 0.7, "darkness": 0.95, "comfort": 0.05, "humor": 0.05}),
    ("Cold Case", ["Crime", "Mystery"], 1995, 121, 7.4,
     {"energy": 0.5, "darkness": 0.8, "complexity": 0.7, "focus": 0.8}),
    ("Sunny Side", ["Comedy", "Family"], 2004, 92, 6.9,
     {"energy": 0.6, "mood": 0.9, "humor": 0.9, "comfort": 0.9, "darkness": 0.1}),
    ("Quiet Hours", ["Drama", "History"], 2012, 134, 7.9,
     {"energy": 0.25, "mood": 0.35, "complexity": 0.85, "focus": 0.85, "darkness": 0.5}),
    ("Star Drift", ["Science Fiction", "Fantasy"], 2019, 141, 7.2,
     {"energy": 0.65, "openness": 0.9, "complexity": 0.6, "darkness": 0.35}),
    ("Full Throttle", ["Action", "Adventure"], 2008, 115, 6.5,
     {"energy": 0.98, "mood": 0.6, "darkness": 0.4, "complexity": 0.2}),
]

CATALOG_SIZE = 36


def build_catalog(size: int = CATALOG_SIZE) -> List[Dict[str, Any]]:
    items = []
    for n in range(size):
        title, genres, year, runtime, rating, traits = _TEMPLATES[n % len(_TEMPLATES)]
        items.append({
            "item_id": f"m{n:03d}",
            "title": f"{title} {n // len(_TEMPLATES) + 1}",
            "genres": list(genres),
            "year": year + n // len(_TEMPLATES),
            "runtime": runtime + (n % 4) * 5,
            "rating": round(rating + (n % 3) * 0.2, 1),
            "traits": dict(traits),
        })
    return items


def _passes(item: Dict[str, Any], filters: Optional[SearchFilters]) -> bool:
    if filters is None:
        return True
    if filters.exclude_genres and set(item["genres"]) & set(filters.exclude_genres):
        return False
    if filters.max_runtime is not None and item["runtime"] > filters.max_runtime:
        return False
    if filters.min_runtime is not None and item["runtime"] < filters.min_runtime:
        return False
    if filters.min_rating is not None and item["rating"] < filters.min_rating:
        return False
    return True


class FakeIndex:
    """Deterministic similarity index: same text and filters give the same ranking."""

    def __init__(self, items: Optional[List[Dict[str, Any]]] = None):
        self.items = items if items is not None else build_catalog()
        self.calls: List[Dict[str, Any]] = []

    async def search(self, text: str, filters: SearchFilters, top_k: int) -> List[SearchHit]:
        self.calls.append({"text": text, "filters": filters, "top_k": top_k})
        seed = zlib.crc32(text.encode("utf-8"))
        eligible = [i for i in self.items if _passes(i, filters)]
        ranked = sorted(eligible, key=lambda i: zlib.crc32(f"{seed}:{i['item_id']}".encode()))
        hits = []
        for rank, item in enumerate(ranked[:top_k]):
            hits.append(SearchHit(score=round(0.95 - rank * 0.01, 4), **item))
        return hits

    @property
    def last_text(self) -> Optional[str]:
        return self.calls[-1]["text"] if self.calls else None

    @property
    def last_filters(self) -> Optional[SearchFilters]:
        return self.calls[-1]["filters"] if self.calls else None


class FailingIndex:
    async def search(self, text, filters, top_k):
        raise ConnectionError("index unreachable")


class SlowIndex:
    def __init__(self, delay: float = 1.0):
        self.delay = delay

    async def search(self, text, filters, top_k):
        await asyncio.sleep(self.delay)
        return []


class FixedPreferenceText:
    def __init__(self, text: str = "A tense, clever thriller with a dark streak."):
        self.text = text
        self.calls = 0

    async def preference_text(self, answers, questions, domain):
        self.calls += 1
        return self.text


class FailingPreferenceText:
    async def preference_text(self, answers, questions, domain):
        raise RuntimeError("llm down")


class FakeEnrichment:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.requested: List[List[str]] = []

    async def enrich(self, item_ids):
        self.requested.append(list(item_ids))
        if self.fail:
            raise TimeoutError("tmdb slow")
        return {i: {"poster_url": f"https://img.example/{i}.jpg"} for i in item_ids}


class RecordingAnalytics:
    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def record(self, event):
        self.events.append(event)

    def names(self) -> List[str]:
        return [e["event"] for e in self.events]


class FailingMomentStore:
    async def save(self, record):
        raise OSError("disk full")


class ConflictingSessionStore(InMemorySessionStore):
    """Before each of the next `conflicts` guarded writes, a rival writer bumps the version."""

    def __init__(self, conflicts: int = 1, **kwargs):
        super().__init__(**kwargs)
        self.conflicts = conflicts
        self.guarded_writes = 0

    async def put(self, session, ttl_seconds, expected_version=None):
        if expected_version is not None:
            self.guarded_writes += 1
            if self.conflicts > 0:
                self.conflicts -= 1
                rival = await self.get(session.session_id)
                await super().put(rival, ttl_seconds, expected_version=rival.version)
        return await super().put(session, ttl_seconds, expected_version=expected_version)


class FixedClock:
    """Callable clock the tests move by hand."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 3, 14, 20, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class UnwritableSessionStore(InMemorySessionStore):
    """Guarded writes fail once `fail_writes` is set; reads keep working."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.fail_writes = False

    async def put(self, session, ttl_seconds, expected_version=None):
        if self.fail_writes:
            raise RuntimeError("session store unavailable")
        return await super().put(session, ttl_seconds, expected_version=expected_version)
