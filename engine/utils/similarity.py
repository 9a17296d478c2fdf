"""
Similarity utilities: cosine similarity and centroids over axis trait vectors.
"""

from typing import List, Mapping, Sequence

import numpy as np

from ..models.profile import AXES, NEUTRAL


def cosine_similarity(v1: List[float], v2: List[float]) -> float:
    """Compute cosine similarity between two vectors."""
    if not v1 or not v2:
        return 0.0
    v1 = np.array(v1)
    v2 = np.array(v2)
    dot_product = np.dot(v1, v2)
    norm_product = np.linalg.norm(v1) * np.linalg.norm(v2)
    return float(dot_product / norm_product) if norm_product > 0 else 0.0


def trait_vector(traits: Mapping[str, float]) -> List[float]:
    """Traits in AXES order, neutral where missing. Centered so neutral items score 0."""
    return [traits.get(a, NEUTRAL) - NEUTRAL for a in AXES]


def centroid(vectors: Sequence[List[float]]) -> List[float]:
    if not vectors:
        return []
    return np.mean(np.array(vectors), axis=0).tolist()
