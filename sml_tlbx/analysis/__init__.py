"""Exploratory analysis: dimension reduction and clustering."""

from .clustering import (
    HierarchicalClusterer,
    HierarchicalResult,
    KMeansAnalyzer,
    KMeansResult,
    choose_k,
    cluster_sizes,
)
from .pca_analyzer import PCAAnalyzer, PCAResult
from .tsne_analyzer import TSNEAnalyzer, TSNEResult


__all__ = [
    "HierarchicalClusterer",
    "HierarchicalResult",
    "KMeansAnalyzer",
    "KMeansResult",
    "PCAAnalyzer",
    "PCAResult",
    "TSNEAnalyzer",
    "TSNEResult",
    "choose_k",
    "cluster_sizes",
]
