"""Two-dimensional t-SNE embedding."""

import logging
from dataclasses import dataclass
from typing import Self

import pandas as pd
from sklearn.manifold import TSNE

from sml_tlbx.data.views import DatasetView
from sml_tlbx.errors import NotFittedError

from .base_analyser import BaseAnalyser


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TSNEResult:
    """t-SNE embedding.

    Attributes:
        embedding: Columns ``tsne_x``/``tsne_y``, same index as the view.
        perplexity: Perplexity actually used.
        kl_divergence: Final Kullback-Leibler divergence of the optimization.
        target: Outcome values aligned with ``embedding``, if the view carried one.
    """

    embedding: pd.DataFrame
    perplexity: float
    kl_divergence: float
    target: pd.Series | None = None

    def plot(self, **kwargs: object):
        """Scatter of the embedding colored by the outcome."""
        from sml_tlbx.plotting.pca_plots import plot_tsne_embedding  # noqa: PLC0415

        return plot_tsne_embedding(self, **kwargs)


class TSNEAnalyzer(BaseAnalyser):
    """t-distributed stochastic neighbour embedding of the numeric features.

    Uses [:class:`sklearn.manifold.TSNE`](https://scikit-learn.org/stable/modules/generated/sklearn.manifold.TSNE.html)
    with random initialization and no PCA pre-reduction. The embedding is only
    reproducible for a fixed ``random_state``.
    """

    def __init__(self, view: DatasetView, perplexity: float = 30.0, random_state: int | None = None):
        self._view = view
        self._perplexity = perplexity
        self._random_state = random_state
        self._result: TSNEResult | None = None

    def fit(self) -> Self:
        features = self._view.features
        n = len(features)
        if n < 3:  # noqa: PLR2004
            raise ValueError(f"t-SNE needs at least 3 complete rows, got {n}")

        # perplexity must stay below the number of samples
        perplexity = min(self._perplexity, (n - 1) / 3)
        if perplexity != self._perplexity:
            logger.warning("Perplexity %.1f too large for %d rows; using %.1f", self._perplexity, n, perplexity)

        model = TSNE(n_components=2, perplexity=perplexity, init="random", random_state=self._random_state)
        coords = model.fit_transform(features.to_numpy(dtype=float))
        self._result = TSNEResult(
            embedding=pd.DataFrame(coords, columns=["tsne_x", "tsne_y"], index=features.index),
            perplexity=perplexity,
            kl_divergence=float(model.kl_divergence_),
            target=self._view.target,
        )
        return self

    def result(self) -> TSNEResult:
        if self._result is None:
            raise NotFittedError("t-SNE not fitted. Call fit() first.")
        return self._result
