"""
Soft search filters. Advisory only: the similarity index may ignore or partially honor them.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class SearchFilters(BaseModel):
    year_min: Optional[int] = None
    year_max: Optional[int] = None
    genres: List[str] = Field(default_factory=list)
    exclude_genres: List[str] = Field(default_factory=list)
    min_rating: Optional[float] = None
    min_runtime: Optional[int] = None
    max_runtime: Optional[int] = None

    def merged(self, delta: "SearchFilters") -> "SearchFilters":
        """
        Overlay delta on top of self. Scalar fields set in delta win; genre lists
        are unioned in first-seen order. An excluded genre is dropped from genres.
        A bound set in delta clears the opposite bound of self when the two
        would leave an empty or single-value range.
        """
        data = self.model_dump()
        for name in ("year_min", "year_max", "min_rating", "min_runtime", "max_runtime"):
            value = getattr(delta, name)
            if value is not None:
                data[name] = value
        for low, high in _RANGES:
            if data[low] is None or data[high] is None or data[low] < data[high]:
                continue
            if getattr(delta, low) is not None and getattr(delta, high) is None:
                data[high] = None
            elif getattr(delta, high) is not None and getattr(delta, low) is None:
                data[low] = None
        exclude = _union(self.exclude_genres, delta.exclude_genres)
        genres = [g for g in _union(self.genres, delta.genres) if g not in exclude]
        data["exclude_genres"] = exclude
        data["genres"] = genres
        return SearchFilters(**data)

    def is_empty(self) -> bool:
        return self == SearchFilters()


# (lower bound, upper bound) field pairs
_RANGES = [("year_min", "year_max"), ("min_runtime", "max_runtime")]


def _union(a: List[str], b: List[str]) -> List[str]:
    out = list(a)
    for g in b:
        if g not in out:
            out.append(g)
    return out
