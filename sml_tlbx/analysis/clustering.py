"""K-means and hierarchical clustering of observations."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Self

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import fcluster, linkage
from scipy.spatial.distance import pdist
from sklearn.cluster import KMeans
from sklearn.metrics import silhouette_score

from sml_tlbx.data.views import DatasetView
from sml_tlbx.errors import InvalidHyperparameterError, NotFittedError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


def cluster_sizes(labels: pd.Series) -> pd.DataFrame:
    """Number and share of observations per cluster (columns ``cluster``, ``n``, ``prop``)."""
    counts = labels.value_counts().sort_index()
    return pd.DataFrame({"cluster": counts.index, "n": counts.to_numpy(), "prop": counts.to_numpy() / len(labels)})


def _check_n_clusters(k: int, n: int) -> None:
    if int(k) != k or k < 1:
        raise InvalidHyperparameterError("n_clusters", k, "an integer >= 1")
    if k > n:
        raise InvalidHyperparameterError("n_clusters", k, f"at most the number of observations ({n})")


@dataclass(frozen=True)
class KMeansResult:
    """K-means partition.

    Attributes:
        labels: Cluster (1..k) per observation, same index as the view.
        centers: Cluster centroids; index = cluster, columns = features.
        sizes: Output of :func:`cluster_sizes`.
        inertia: Total within-cluster sum of squares.
        data: Clustered feature matrix (for scatter plots).
        target: Outcome values aligned with ``labels``, if the view carried one.
    """

    labels: pd.Series
    centers: pd.DataFrame
    sizes: pd.DataFrame
    inertia: float
    data: pd.DataFrame
    target: pd.Series | None = None

    def plot(self, **kwargs: object):
        """Scatter of the first two features colored by cluster."""
        from sml_tlbx.plotting.clustering_plots import plot_cluster_scatter  # noqa: PLC0415

        return plot_cluster_scatter(self.data, self.labels, centers=self.centers, **kwargs)


class KMeansAnalyzer(BaseAnalyser):
    """Lloyd's k-means with ``n_init`` random restarts.

    Example:
        >>> pca = ds.make_pca_analyzer(columns=ds.Col.measurement_columns()).fit()
        >>> km = KMeansAnalyzer(pca.result().scores_view(2), n_clusters=3, random_state=1).fit()
        >>> km.result().sizes
    """

    def __init__(
        self,
        view: DatasetView,
        n_clusters: int,
        random_state: int | None = None,
        n_init: int = 10,
    ):
        self._view = view
        self._n_clusters = n_clusters
        self._random_state = random_state
        self._n_init = n_init
        self._result: KMeansResult | None = None

    def fit(self) -> Self:
        features = self._view.features
        _check_n_clusters(self._n_clusters, len(features))

        model = KMeans(n_clusters=self._n_clusters, n_init=self._n_init, random_state=self._random_state)
        codes = model.fit_predict(features.to_numpy(dtype=float))
        labels = pd.Series(codes + 1, index=features.index, name="cluster")
        centers = pd.DataFrame(
            model.cluster_centers_,
            index=pd.Index(range(1, self._n_clusters + 1), name="cluster"),
            columns=features.columns,
        )
        logger.info("k-means with k=%d: inertia %.3f", self._n_clusters, model.inertia_)

        self._result = KMeansResult(
            labels=labels,
            centers=centers,
            sizes=cluster_sizes(labels),
            inertia=float(model.inertia_),
            data=features,
            target=self._view.target,
        )
        return self

    def result(self) -> KMeansResult:
        if self._result is None:
            raise NotFittedError("k-means not fitted. Call fit() first.")
        return self._result


def choose_k(
    view: DatasetView,
    k_range: Iterable[int] = range(2, 11),
    *,
    random_state: int | None = None,
) -> pd.DataFrame:
    """Inertia and average silhouette width of k-means for each candidate ``k``.

    Uses [:func:`sklearn.metrics.silhouette_score`](https://scikit-learn.org/stable/modules/generated/sklearn.metrics.silhouette_score.html);
    the silhouette is undefined (NaN) for ``k = 1``.

    Returns:
        DataFrame with columns ``k``, ``inertia``, ``silhouette``.
    """
    data = view.features.to_numpy(dtype=float)
    rows = []
    for k in k_range:
        _check_n_clusters(k, len(data))
        model = KMeans(n_clusters=k, n_init=10, random_state=random_state)
        labels = model.fit_predict(data)
        silhouette = silhouette_score(data, labels) if 1 < k < len(data) else np.nan
        rows.append({"k": k, "inertia": float(model.inertia_), "silhouette": float(silhouette)})
    return pd.DataFrame(rows)


@dataclass(frozen=True)
class HierarchicalResult:
    """Agglomerative clustering tree.

    Attributes:
        linkage_matrix: SciPy linkage matrix (``n - 1`` merges, heights in column 2).
        labels: Row labels of the clustered observations (leaf order of the input).
        method: Linkage method.
        metric: Distance metric.
    """

    linkage_matrix: np.ndarray
    labels: pd.Index
    method: str
    metric: str

    @property
    def heights(self) -> np.ndarray:
        """Merge heights, ascending."""
        return self.linkage_matrix[:, 2]

    def cut(self, h: float | None = None, k: int | None = None) -> pd.Series:
        """Cut the tree at height ``h`` or into ``k`` groups (exactly one must be given).

        Clusters are numbered 1..m in order of first appearance in the data.
        """
        if (h is None) == (k is None):
            raise ValueError("Specify exactly one of h (height) or k (number of clusters)")
        if k is not None:
            _check_n_clusters(k, len(self.labels))
            raw = fcluster(self.linkage_matrix, t=k, criterion="maxclust")
        else:
            raw = fcluster(self.linkage_matrix, t=h, criterion="distance")
        # renumber by first appearance
        _, first = np.unique(raw, return_index=True)
        order = {raw[i]: rank + 1 for rank, i in enumerate(sorted(first))}
        return pd.Series([order[label] for label in raw], index=self.labels, name="cluster")

    def plot_dendrogram(self, **kwargs: object):
        """Dendrogram with optional cut-height lines."""
        from sml_tlbx.plotting.clustering_plots import plot_dendrogram  # noqa: PLC0415

        return plot_dendrogram(self, **kwargs)


class HierarchicalClusterer(BaseAnalyser):
    r"""Agglomerative hierarchical clustering of observations.

    **Procedure:**

    1. Pairwise distances between observations with
       [:func:`scipy.spatial.distance.pdist`](https://docs.scipy.org/doc/scipy/reference/generated/scipy.spatial.distance.pdist.html)
       (Euclidean by default).
    2. Start with every observation as its own cluster and repeatedly merge the
       two closest clusters with
       [:func:`scipy.cluster.hierarchy.linkage`](https://docs.scipy.org/doc/scipy/reference/generated/scipy.cluster.hierarchy.linkage.html).
       With **complete linkage** the distance between clusters A and B is the
       largest pairwise distance between their members.
    3. Cut the tree at a height or into a fixed number of groups with
       [:func:`scipy.cluster.hierarchy.fcluster`](https://docs.scipy.org/doc/scipy/reference/generated/scipy.cluster.hierarchy.fcluster.html).

    Example:
        >>> tree = HierarchicalClusterer(pca.result().scores_view(2)).fit().result()
        >>> clusters = tree.cut(h=5)
        >>> cluster_sizes(clusters)
    """

    def __init__(self, view: DatasetView, method: str = "complete", metric: str = "euclidean"):
        self._view = view
        self._method = method
        self._metric = metric
        self._result: HierarchicalResult | None = None

    def fit(self) -> Self:
        features = self._view.features
        if len(features) < 2:  # noqa: PLR2004
            raise ValueError("Hierarchical clustering needs at least 2 observations")
        distances = pdist(features.to_numpy(dtype=float), metric=self._metric)
        self._result = HierarchicalResult(
            linkage_matrix=linkage(distances, method=self._method),
            labels=features.index,
            method=self._method,
            metric=self._metric,
        )
        return self

    def result(self) -> HierarchicalResult:
        if self._result is None:
            raise NotFittedError("Hierarchical clustering not fitted. Call fit() first.")
        return self._result
