"""Shared utilities for similarity, genre clusters and background tasks."""

from .genres import GENRE_CLUSTERS, cluster_genres, clusters_of, dominant_cluster, primary_cluster, signature_axis
from .similarity import centroid, cosine_similarity, trait_vector
from .tasks import fire_and_forget

__all__ = [
    "GENRE_CLUSTERS",
    "centroid",
    "cluster_genres",
    "clusters_of",
    "cosine_similarity",
    "dominant_cluster",
    "fire_and_forget",
    "primary_cluster",
    "signature_axis",
    "trait_vector",
]
