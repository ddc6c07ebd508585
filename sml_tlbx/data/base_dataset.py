"""Base dataset class for all dataset implementations."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Self

import pandas as pd
from sklearn.impute import SimpleImputer
from sklearn.preprocessing import StandardScaler


if TYPE_CHECKING:
    from sml_tlbx.analysis.clustering import HierarchicalClusterer, KMeansAnalyzer
    from sml_tlbx.analysis.pca_analyzer import PCAAnalyzer
    from sml_tlbx.analysis.tsne_analyzer import TSNEAnalyzer
    from sml_tlbx.modeling.resampling import Resamples
    from sml_tlbx.modeling.splitting import Split

from .base_columns import BaseColumn
from .views import DatasetView


class BaseDataset(ABC):
    """Abstract base class for dataset handlers used throughout the toolbox.

    A dataset wraps one immutable DataFrame. Every transformation returns a new
    instance (see :meth:`with_df`); nothing mutates ``df`` in place.
    """

    identifier_columns: Sequence[str] = ()
    Col: type[BaseColumn]

    def __init__(self, df: pd.DataFrame | None = None) -> None:
        """Initialize the base dataset.

        Args:
            df: Pre-loaded and cleaned DataFrame (optional)
        """
        self._df: pd.DataFrame | None = df
        self._df_standardized: pd.DataFrame | None = None

    @classmethod
    @abstractmethod
    def from_file(cls, path: str | Path | None = None, **kwargs: object) -> "BaseDataset":
        """Load dataset from a tabular file.

        Args:
            path: Path to the file (CSV, TSV, Excel, Parquet or pickle)
            **kwargs: Additional loading parameters

        Returns:
            Dataset instance with loaded data
        """
        ...

    def with_df(self, df: pd.DataFrame) -> Self:
        """Return a new dataset of the same concrete class wrapping ``df``."""
        return type(self)(df=df)

    @property
    def df(self) -> pd.DataFrame:
        """Get the raw/cleaned DataFrame.

        Raises:
            ValueError: If dataset not loaded
        """
        if self._df is None:
            raise ValueError("Dataset not loaded. Use from_file() to load data.")
        return self._df

    @property
    def df_pretty(self) -> pd.DataFrame:
        """Get the DataFrame with pretty column names."""
        return self.df.rename(columns={col: self.get_pretty_name(col) for col in self.df.columns})

    @property
    def numeric_cols(self) -> pd.Index:
        """Get numeric column names (identifiers and booleans excluded).

        Subclasses can override for custom behavior.
        """
        numeric = self.df.select_dtypes(include=["number"]).columns
        return numeric.difference(list(self.Col.identifier_columns()), sort=False)

    @property
    def df_standardized(self) -> pd.DataFrame:
        """Get the standardized DataFrame.

        X <- (X - E[X]) / sd(X)
        """
        if self._df_standardized is None:
            self._df_standardized = self.standardize()
        return self._df_standardized

    def standardize(self, df: pd.DataFrame | None = None) -> pd.DataFrame:
        """Compute a standardized copy of the numeric columns using [sklearn's StandardScaler](https://scikit-learn.org/stable/modules/generated/sklearn.preprocessing.StandardScaler.html).

        This is whole-table standardization for exploratory work (PCA, clustering).
        For modeling use a :class:`~sml_tlbx.modeling.recipes.Recipe`, which learns
        the statistics on the training split only.

        Returns:
            DataFrame with numeric columns scaled to mean=0, std=1 and other columns unchanged
        """
        if df is None:
            df = self.df

        cols = [col for col in self.numeric_cols if col in df.columns]
        scaled = StandardScaler().fit_transform(df[cols])
        return df.assign(**{col: scaled[:, i] for i, col in enumerate(cols)})

    def get_pretty_names(self, column_names: list[str] | None = None) -> list[str]:
        """Convert multiple column names to pretty names."""
        return [self.get_pretty_name(name) for name in column_names or self.df.columns.to_list()]

    def get_pretty_name(self, column_name: str) -> str:
        """Convert column name to pretty name for visualization."""
        try:
            col_enum = self.Col(column_name)
        except ValueError:
            # Fallback: capitalize and replace underscores if not in enum
            return str(column_name).replace("_", " ").title()
        else:
            return str(col_enum.pretty_name)

    def view(
        self,
        columns: Iterable[str] | None = None,
        standardized: bool = False,
        target_col: str | None = None,
        missing_strategy: Literal["drop", "global_impute"] = "drop",
    ) -> DatasetView:
        """Build an immutable dataset view for analyzers and plotting layers.

        Args:
            columns: Columns to include in the view (defaults to all)
            standardized: Use standardized dataframe
            target_col: Optional outcome column carried along (not part of the features)
            missing_strategy: Strategy to handle missing values ("drop" or "global_impute")

        Returns:
            DatasetView containing selected data and metadata
        """
        if missing_strategy not in ("drop", "global_impute"):
            raise ValueError(
                f"Invalid missing_strategy='{missing_strategy}'. Use 'drop' or 'global_impute'.",
            )

        frame = self.df_standardized if standardized else self.df
        selected_cols = list(columns or frame.columns.to_list())
        carry = [target_col] if target_col and target_col in frame.columns and target_col not in selected_cols else []
        frame = frame.loc[:, [*selected_cols, *carry]]

        numeric_cols = [col for col in selected_cols if col in self.numeric_cols]
        if missing_strategy == "global_impute" and numeric_cols:
            # column-wise median over the whole table
            imputed = SimpleImputer(strategy="median").fit_transform(frame[numeric_cols])
            frame = frame.assign(**{col: imputed[:, i] for i, col in enumerate(numeric_cols)})

        frame = frame.dropna(axis=0, how="any")

        return DatasetView(
            df=frame,
            pretty_by_col={col: self.get_pretty_name(col) for col in frame.columns},
            numeric_cols=numeric_cols,
            target_col=target_col,
            is_standardized=standardized,
        )

    def feature_columns(
        self,
        include_target: bool = False,
        extra_exclude: Iterable[str] | None = None,
    ) -> list[str]:
        """Return numeric feature columns, optionally excluding identifiers and target."""
        exclude = set(self.Col.identifier_columns())
        if extra_exclude:
            exclude.update(extra_exclude)
        if not include_target and self.Col.TARGET:
            exclude.add(self.Col.TARGET)
        return [col for col in self.numeric_cols if col not in exclude]

    def analyzer_view(
        self,
        columns: Iterable[str] | None = None,
        standardized: bool = True,
        missing_strategy: Literal["drop", "global_impute"] = "drop",
    ) -> DatasetView:
        """Build a dataset view tailored for downstream analyzers (target carried, not a feature)."""
        return self.view(
            columns=columns if columns is not None else self.feature_columns(),
            standardized=standardized,
            target_col=self.Col.TARGET,
            missing_strategy=missing_strategy,
        )

    # ------------------------------------------------------------------ modeling shortcuts
    def initial_split(self, prop: float = 0.75, *, stratify: bool = True, seed: int | None = None) -> "Split":
        """Split rows into training/testing sets, stratified by the target by default."""
        from sml_tlbx.modeling.splitting import initial_split  # noqa: PLC0415

        return initial_split(self.df, prop, strata=self.Col.TARGET if stratify else None, seed=seed)

    def vfold_cv(self, v: int = 10, *, stratify: bool = True, seed: int | None = None) -> "Resamples":
        """V-fold cross-validation resamples over all rows, stratified by the target by default."""
        from sml_tlbx.modeling.resampling import vfold_cv  # noqa: PLC0415

        return vfold_cv(self.df, v, strata=self.Col.TARGET if stratify else None, seed=seed)

    # ------------------------------------------------------------------ analyzer factories
    def make_pca_analyzer(
        self,
        columns: Iterable[str] | None = None,
        standardized: bool = True,
    ) -> "PCAAnalyzer":
        """Instantiate a PCA analyzer configured for this dataset (rows with missing values dropped)."""
        from sml_tlbx.analysis.pca_analyzer import PCAAnalyzer  # noqa: PLC0415

        return PCAAnalyzer(self.analyzer_view(columns=columns, standardized=standardized))

    def make_tsne_analyzer(
        self,
        columns: Iterable[str] | None = None,
        standardized: bool = False,
        perplexity: float = 30.0,
        random_state: int | None = None,
    ) -> "TSNEAnalyzer":
        """Instantiate a t-SNE analyzer configured for this dataset."""
        from sml_tlbx.analysis.tsne_analyzer import TSNEAnalyzer  # noqa: PLC0415

        return TSNEAnalyzer(
            self.analyzer_view(columns=columns, standardized=standardized),
            perplexity=perplexity,
            random_state=random_state,
        )

    def make_kmeans_analyzer(
        self,
        n_clusters: int,
        columns: Iterable[str] | None = None,
        standardized: bool = True,
        random_state: int | None = None,
    ) -> "KMeansAnalyzer":
        """Instantiate a k-means analyzer configured for this dataset."""
        from sml_tlbx.analysis.clustering import KMeansAnalyzer  # noqa: PLC0415

        return KMeansAnalyzer(
            self.analyzer_view(columns=columns, standardized=standardized),
            n_clusters=n_clusters,
            random_state=random_state,
        )

    def make_hierarchical_clusterer(
        self,
        columns: Iterable[str] | None = None,
        standardized: bool = True,
        method: str = "complete",
    ) -> "HierarchicalClusterer":
        """Instantiate a hierarchical clusterer configured for this dataset."""
        from sml_tlbx.analysis.clustering import HierarchicalClusterer  # noqa: PLC0415

        return HierarchicalClusterer(
            self.analyzer_view(columns=columns, standardized=standardized),
            method=method,
        )
