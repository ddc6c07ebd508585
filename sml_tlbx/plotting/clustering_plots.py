"""Clustering diagnostics: elbow, silhouette, dendrogram, and cluster scatter plots."""

from __future__ import annotations

from collections.abc import Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure
from scipy.cluster.hierarchy import dendrogram
from sklearn.metrics import silhouette_samples

from sml_tlbx.analysis.clustering import HierarchicalResult


def plot_elbow_curve(
    diagnostics: pd.DataFrame,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Plot within-cluster inertia across candidate k to find the elbow.

    Expects the output of :func:`sml_tlbx.analysis.clustering.choose_k`.
    """
    ax = ax or plt.gca()
    ax.plot(diagnostics["k"], diagnostics["inertia"], marker="o")
    ax.set_xlabel("k")
    ax.set_ylabel("Inertia (within-cluster SSE)")
    ax.set_title("Elbow Plot")
    ax.grid(alpha=0.2)
    return ax


def plot_silhouette_scores(
    diagnostics: pd.DataFrame,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Average silhouette score per k (output of :func:`~sml_tlbx.analysis.clustering.choose_k`)."""
    ax = ax or plt.gca()
    ax.plot(diagnostics["k"], diagnostics["silhouette"], marker="o")
    ax.set_xlabel("k")
    ax.set_ylabel("Average silhouette score")
    ax.set_title("Silhouette Scores by k")
    ax.grid(alpha=0.2)
    return ax


def plot_silhouette_bars(
    data: pd.DataFrame | np.ndarray,
    labels: pd.Series | np.ndarray,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Per-sample silhouette values as bars, grouped by cluster.

    Computes per-point values with [:func:`sklearn.metrics.silhouette_samples`](https://scikit-learn.org/stable/modules/generated/sklearn.metrics.silhouette_samples.html)
    and draws stacked bars with Matplotlib.
    """
    ax = ax or plt.gca()
    labels = np.asarray(labels)
    clusters = np.unique(labels)
    palette = sns.color_palette("husl", len(clusters))
    sil_vals = silhouette_samples(np.asarray(data, dtype=float), labels)
    y_lower = 10
    for i, cluster in enumerate(clusters):
        cluster_vals = np.sort(sil_vals[labels == cluster])
        size = cluster_vals.shape[0]
        y_upper = y_lower + size
        ax.fill_betweenx(np.arange(y_lower, y_upper), 0, cluster_vals, facecolor=palette[i], alpha=0.7)
        ax.text(-0.05, y_lower + 0.5 * size, str(cluster))
        y_lower = y_upper + 10
    ax.axvline(np.mean(sil_vals), color="red", linestyle="--", label="Average silhouette")
    ax.set_xlabel("Silhouette coefficient")
    ax.set_ylabel("Samples (grouped by cluster)")
    ax.set_title("Silhouette Plot per Cluster")
    ax.legend()
    return ax


def plot_dendrogram(
    result: HierarchicalResult,
    *,
    cut_heights: Sequence[float] = (),
    show_labels: bool = False,
    ax: plt.Axes | None = None,
) -> Figure:
    """Hierarchical clustering dendrogram with optional horizontal cut lines.

    Calls [:func:`scipy.cluster.hierarchy.dendrogram`](https://docs.scipy.org/doc/scipy/reference/generated/scipy.cluster.hierarchy.dendrogram.html)
    on the linkage matrix of ``result``.
    """
    ax = ax or plt.gca()
    dendrogram(
        result.linkage_matrix,
        labels=[str(label) for label in result.labels] if show_labels else None,
        no_labels=not show_labels,
        color_threshold=0,
        above_threshold_color="black",
        ax=ax,
    )
    palette = sns.color_palette("husl", max(len(cut_heights), 1))
    for h, color in zip(cut_heights, palette, strict=False):
        ax.axhline(h, color=color, linestyle="--", label=f"h = {h:g}")
    if cut_heights:
        ax.legend()
    ax.set_xlabel("Observations")
    ax.set_ylabel("Height")
    ax.set_title(f"Dendrogram ({result.method}, {result.metric})")
    return ax.figure


def plot_cluster_scatter(
    data: pd.DataFrame,
    labels: pd.Series,
    *,
    x: str | None = None,
    y: str | None = None,
    centers: pd.DataFrame | None = None,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Scatter of two feature columns (default: the first two) colored by cluster label."""
    x = x or data.columns[0]
    y = y or data.columns[1]
    ax = ax or plt.gca()
    hue = labels.reindex(data.index).astype(str)
    sns.scatterplot(x=data[x], y=data[y], hue=hue, palette="husl", alpha=0.7, s=25, ax=ax)
    if centers is not None:
        ax.scatter(centers[x], centers[y], marker="X", s=150, color="black", label="center")
    ax.legend(title="cluster")
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.set_title(f"Clusters (n = {labels.nunique()})")
    return ax
