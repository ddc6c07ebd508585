"""PCA analysis for dimensionality reduction and feature interpretation."""

from dataclasses import dataclass
from typing import Literal, Self

import pandas as pd
from sklearn.decomposition import PCA
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from sml_tlbx.data.views import DatasetView
from sml_tlbx.errors import NotFittedError

from .base_analyser import BaseAnalyser


@dataclass(frozen=True)
class PCAResult:
    """PCA outputs packaged for downstream visualization and reporting.

    Attributes:
        scores: Observation coordinates w.r.t. the principal components; columns `PC1..PCk`, same index as the input data.
        loadings: Feature loadings; index = feature names, columns `PC1..PCk`. Each column is the unit-length
            eigenvector of the sample covariance (correlation, when scaled) matrix for the i-th largest eigenvalue.
            The signs of the loadings are arbitrary.
        explained_variance: Columns `PC`, `variance`, `explained_ratio`, `cumulative_ratio` per component.
        top_features_global: Features ranked by overall loading strength (L2 across PCs).
        top_features_per_pc: Per-component ranking by absolute loading.
        target: Outcome values aligned with ``scores`` (for coloring), if the view carried one.
        pretty_by_col: Display names of the features.
    """

    scores: pd.DataFrame
    loadings: pd.DataFrame
    explained_variance: pd.DataFrame
    top_features_global: pd.Index
    top_features_per_pc: dict[str, pd.Index]
    target: pd.Series | None = None
    pretty_by_col: dict[str, str] | None = None

    def scores_view(self, n_components: int = 2) -> DatasetView:
        """Leading component scores as a view, e.g. for clustering in PC space."""
        cols = self.scores.columns[:n_components].tolist()
        frame = self.scores.loc[:, cols]
        target_col = None
        if self.target is not None:
            target_col = str(self.target.name)
            frame = frame.join(self.target)
        return DatasetView(
            df=frame,
            pretty_by_col={col: col for col in frame.columns},
            numeric_cols=cols,
            target_col=target_col,
            is_standardized=False,
        )

    # ------------------------------------------------------------------ plotting shortcuts
    def plot_explained_variance(self, **kwargs: object):
        """Plot explained variance using shared plotting helper."""
        from sml_tlbx.plotting.pca_plots import plot_explained_variance  # noqa: PLC0415

        return plot_explained_variance(self, **kwargs)

    def plot_scores(self, **kwargs: object):
        """Scatter of two principal components colored by the outcome."""
        from sml_tlbx.plotting.pca_plots import plot_pca_scores  # noqa: PLC0415

        return plot_pca_scores(self, **kwargs)

    def plot_biplot(self, **kwargs: object):
        """Interactive 2D biplot."""
        from sml_tlbx.plotting.pca_plots import plot_biplot_plotly  # noqa: PLC0415

        return plot_biplot_plotly(self, **kwargs)


class PCAAnalyzer(BaseAnalyser):
    """Analyzer for Principal Component Analysis (PCA), the equivalent of ``prcomp(x, scale = TRUE)``.

    Example:
        >>> from sml_tlbx.data import ChdDataset
        >>> from sml_tlbx.plotting import plot_explained_variance
        >>> ds = ChdDataset.from_file(complete_cases=True)
        >>> pca = ds.make_pca_analyzer(columns=ds.Col.measurement_columns()).fit()
        >>> pca.result().explained_variance.head()
        >>> fig = plot_explained_variance(pca.result())
        >>> chd_with_pca = pca.augment(ds.df)
    """

    def __init__(self, view: DatasetView, *, scale: bool | None = None):
        """Initialize the PCA analyzer.

        Args:
            view: Data to decompose (numeric feature columns are used).
            scale: Scale features to unit variance before PCA. Defaults to ``True``
                unless the view is already standardized.
        """
        self._view = view
        self._scale = (not view.is_standardized) if scale is None else scale
        self._pipeline = None
        self._pca_model: PCA | None = None
        self._feature_names: list[str] = []

    def fit(
        self,
        n_components: int | None = None,
        exclude_cols: list[str] | None = None,
    ) -> Self:
        r"""Fit a PCA model using :class:`sklearn.decomposition.PCA`.

        Principal Component Analysis projects the data matrix **X** onto a new orthonormal
        basis of maximal variance. The columns of this basis are eigenvectors of Cov(**X**, **X**), ordered by
        descending eigenvalue; each successive component explains the largest remaining variance while staying
        orthogonal to the previous ones.
        """
        features = self._view.features.drop(columns=exclude_cols or [], errors="ignore")

        if features.empty:
            raise ValueError("No features remaining after exclusions for PCA fitting.")

        self._feature_names = features.columns.tolist()
        self._pca_model = PCA(n_components=n_components)
        steps = [StandardScaler(), self._pca_model] if self._scale else [self._pca_model]
        self._pipeline = make_pipeline(*steps).fit(features)

        return self

    @property
    def model(self) -> PCA:
        """Return the fitted scikit-learn PCA model."""
        if self._pca_model is None:
            raise NotFittedError("PCA model not fitted. Call fit() first.")
        return self._pca_model

    def transform(self, df: pd.DataFrame | None = None, n_components: int | None = None) -> pd.DataFrame:
        """Project observations (default: the fitted view) into principal-component space."""
        if self._pipeline is None:
            raise NotFittedError("PCA model not fitted. Call fit() first.")

        df = self._view.df if df is None else df
        transformed = self._pipeline.transform(df.loc[:, self._feature_names])

        if n_components is not None:
            transformed = transformed[:, :n_components]

        return pd.DataFrame(
            transformed,
            columns=[f"PC{i + 1}" for i in range(transformed.shape[1])],
            index=df.index,
        )

    def augment(self, df: pd.DataFrame | None = None, n_components: int | None = None) -> pd.DataFrame:
        """Return ``df`` (default: the fitted view) with the ``PC1..PCk`` score columns appended.

        Rows with missing feature values get missing scores.
        """
        df = self._view.df if df is None else df
        complete = df.loc[:, self._feature_names].notna().all(axis=1)
        scores = self.transform(df.loc[complete], n_components=n_components)
        return df.join(scores.drop(columns=scores.columns.intersection(df.columns)))

    def get_explained_variance(self) -> pd.DataFrame:
        """Summarize component-wise variance contributions and cumulative totals."""
        model = self.model
        n_components = len(model.explained_variance_ratio_)

        return pd.DataFrame(
            {
                "PC": [f"PC{i + 1}" for i in range(n_components)],
                "variance": model.explained_variance_,
                "explained_ratio": model.explained_variance_ratio_,
                "cumulative_ratio": model.explained_variance_ratio_.cumsum(),
            },
        )

    def get_loading_vectors(self, component: int | None = None) -> pd.DataFrame | pd.Series:
        """Return PCA loading vectors linking original features to component axes."""
        model = self.model
        loadings_df = pd.DataFrame(
            model.components_.T,
            index=self._feature_names,
            columns=[f"PC{i}" for i in range(1, model.n_components_ + 1)],
        )

        if component is None:
            return loadings_df

        pc_name = f"PC{component}"
        if pc_name not in loadings_df.columns:
            raise ValueError(f"Component {component} not found. Available: PC1-PC{model.n_components_}")
        return loadings_df[pc_name]

    def get_top_loading_features(
        self,
        n_components: int = 3,
        method: Literal["max", "l2"] = "l2",
    ) -> pd.Index:
        """Rank features by aggregated loading strength across leading components."""
        loadings = self.get_loading_vectors()
        pc_cols = [f"PC{i + 1}" for i in range(min(n_components, loadings.shape[1]))]

        if method == "max":
            importance = loadings[pc_cols].abs().max(axis=1)
        elif method == "l2":
            importance = (loadings[pc_cols] ** 2).sum(axis=1).pow(0.5)
        else:
            raise ValueError("method must be one of {'max', 'l2'}")

        return importance.sort_values(ascending=False).index

    def result(self) -> PCAResult:
        """Collect PCA scores, loadings, and variance diagnostics for downstream use."""
        scores = self.transform()
        loadings = self.get_loading_vectors()
        return PCAResult(
            scores=scores,
            loadings=loadings,
            explained_variance=self.get_explained_variance(),
            top_features_global=self.get_top_loading_features(n_components=loadings.shape[1]),
            top_features_per_pc={pc: loadings[pc].abs().sort_values(ascending=False).index for pc in loadings.columns},
            target=self._view.target,
            pretty_by_col=dict(self._view.pretty_by_col),
        )
