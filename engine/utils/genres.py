"""
Genre clusters: named groups of genres, each with a signature axis.

Used by adjacent discovery (stay near, but outside, the safe set's cluster)
and by feedback pattern detection (genre mismatch, hidden desire).
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

# cluster -> (genres, signature axis)
GENRE_CLUSTERS: Dict[str, Tuple[Tuple[str, ...], str]] = {
    "dark_thrills": (("Horror", "Thriller", "Crime", "Mystery"), "darkness"),
    "light": (("Comedy", "Family", "Animation", "Romance", "Music"), "humor"),
    "serious": (("Drama", "History", "War", "Documentary"), "complexity"),
    "escapist": (("Fantasy", "Science Fiction", "Sci-Fi"), "openness"),
    "action": (("Action", "Adventure", "Western"), "energy"),
}

_GENRE_TO_CLUSTER = {
    genre.lower(): name
    for name, (genres, _) in GENRE_CLUSTERS.items()
    for genre in genres
}


def cluster_of_genre(genre: str) -> Optional[str]:
    return _GENRE_TO_CLUSTER.get((genre or "").strip().lower())


def clusters_of(genres: Iterable[str]) -> List[str]:
    """Distinct clusters for a genre list, in first-seen order."""
    out = []
    for g in genres:
        c = cluster_of_genre(g)
        if c and c not in out:
            out.append(c)
    return out


def primary_cluster(genres: Iterable[str]) -> Optional[str]:
    found = clusters_of(genres)
    return found[0] if found else None


def dominant_cluster(genre_lists: Iterable[Iterable[str]]) -> Optional[str]:
    """Most common primary cluster across items; ties go to first seen."""
    counts = Counter()
    order = []
    for genres in genre_lists:
        c = primary_cluster(genres)
        if c is None:
            continue
        if c not in counts:
            order.append(c)
        counts[c] += 1
    if not counts:
        return None
    return max(order, key=lambda c: (counts[c], -order.index(c)))


def cluster_genres(cluster: str) -> List[str]:
    return list(GENRE_CLUSTERS[cluster][0])


def signature_axis(cluster: str) -> str:
    return GENRE_CLUSTERS[cluster][1]
