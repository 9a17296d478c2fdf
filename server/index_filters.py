"""Build index metadata filters (Pinecone and Qdrant) from engine SearchFilters."""

from typing import Any, Dict, List, Optional

from qdrant_client import models

from engine.models.filters import SearchFilters
from engine.models.recommendation import SearchHit

# Pinecone $in / $nin accept max 10,000 values
MAX_IN_VALUES = 10_000


def build_pinecone_filter(filters: Optional[SearchFilters]) -> Optional[dict]:
    """
    Build a Pinecone metadata filter. Vectors must have metadata:
    year, rating, runtime (numbers) and genres (list of strings).
    Returns None when no filter applies.
    """
    if filters is None:
        return None
    clauses: List[Dict[str, Any]] = []
    if filters.year_min is not None:
        clauses.append({"year": {"$gte": filters.year_min}})
    if filters.year_max is not None:
        clauses.append({"year": {"$lte": filters.year_max}})
    if filters.min_rating is not None:
        clauses.append({"rating": {"$gte": filters.min_rating}})
    if filters.min_runtime is not None:
        clauses.append({"runtime": {"$gte": filters.min_runtime}})
    if filters.max_runtime is not None:
        clauses.append({"runtime": {"$lte": filters.max_runtime}})
    if filters.genres:
        clauses.append({"genres": {"$in": filters.genres[:MAX_IN_VALUES]}})
    if filters.exclude_genres:
        clauses.append({"genres": {"$nin": filters.exclude_genres[:MAX_IN_VALUES]}})

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def _range(key: str, gte=None, lte=None) -> models.FieldCondition:
    return models.FieldCondition(key=key, range=models.Range(gte=gte, lte=lte))


def build_qdrant_filter(filters: Optional[SearchFilters]) -> Optional[models.Filter]:
    """Same semantics as build_pinecone_filter, except the genre hint is a `should` clause."""
    if filters is None:
        return None
    must: List[models.FieldCondition] = []
    if filters.year_min is not None or filters.year_max is not None:
        must.append(_range("year", filters.year_min, filters.year_max))
    if filters.min_rating is not None:
        must.append(_range("rating", gte=filters.min_rating))
    if filters.min_runtime is not None or filters.max_runtime is not None:
        must.append(_range("runtime", filters.min_runtime, filters.max_runtime))
    should = []
    if filters.genres:
        should.append(models.FieldCondition(key="genres", match=models.MatchAny(any=filters.genres)))
    must_not = []
    if filters.exclude_genres:
        must_not.append(models.FieldCondition(key="genres", match=models.MatchAny(any=filters.exclude_genres)))
    if not (must or should or must_not):
        return None
    return models.Filter(must=must or None, should=should or None, must_not=must_not or None)


def hit_from_metadata(item_id: str, score: float, metadata: Optional[Dict[str, Any]]) -> SearchHit:
    """Map index metadata (as written by server/scripts/populate_index.py) to a SearchHit."""
    md = metadata or {}
    traits = md.get("traits") or {}
    if not traits:
        # Pinecone metadata is flat: traits are stored as trait_<axis> numbers.
        traits = {k[len("trait_"):]: float(v) for k, v in md.items() if k.startswith("trait_")}
    return SearchHit(
        item_id=str(md.get("item_id") or item_id),
        score=float(score or 0.0),
        title=md.get("title"),
        year=int(md["year"]) if md.get("year") is not None else None,
        genres=list(md.get("genres") or []),
        rating=float(md["rating"]) if md.get("rating") is not None else None,
        runtime=int(md["runtime"]) if md.get("runtime") is not None else None,
        traits=traits,
    )
