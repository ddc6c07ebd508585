"""Tests for PCAAnalyzer."""

import numpy as np
import pandas as pd
import pytest

from sml_tlbx.analysis.pca_analyzer import PCAAnalyzer, PCAResult
from sml_tlbx.data.views import DatasetView
from sml_tlbx.errors import NotFittedError


class TestPCAAnalyzer:
    """Test PCAAnalyzer functionality."""

    @pytest.fixture
    def sample_view(self) -> DatasetView:
        """Create a sample DatasetView for testing."""
        # Create data with known variance structure
        rng = np.random.default_rng(42)
        n_samples = 100
        # First component has high variance
        comp1 = rng.normal(0, 3, n_samples)
        # Second component has medium variance
        comp2 = rng.normal(0, 1, n_samples)
        # Third component has low variance
        comp3 = rng.normal(0, 0.5, n_samples)

        data = pd.DataFrame(
            {
                "feature1": comp1 + 0.5 * comp2,
                "feature2": comp1 - 0.5 * comp2,
                "feature3": comp2 + 0.3 * comp3,
                "feature4": comp3,
                "outcome": comp1 > 0,
            },
        )

        return DatasetView(
            df=data,
            pretty_by_col={
                "feature1": "Feature 1",
                "feature2": "Feature 2",
                "feature3": "Feature 3",
                "feature4": "Feature 4",
            },
            numeric_cols=["feature1", "feature2", "feature3", "feature4"],
            target_col="outcome",
        )

    def test_fit_returns_self(self, sample_view: DatasetView) -> None:
        """Test that fit returns self for chaining."""
        analyzer = PCAAnalyzer(sample_view)
        assert analyzer.fit(n_components=2) is analyzer

    def test_transform_before_fit_raises_error(self, sample_view: DatasetView) -> None:
        """Test that transform before fit raises error."""
        analyzer = PCAAnalyzer(sample_view)

        with pytest.raises(NotFittedError, match=r"PCA model not fitted"):
            analyzer.transform()

    def test_result_before_fit_raises_error(self, sample_view: DatasetView) -> None:
        """Test that result before fit raises a ValueError subclass."""
        with pytest.raises(ValueError, match=r"PCA model not fitted"):
            PCAAnalyzer(sample_view).result()

    def test_transform_reduces_dimensions(self, sample_view: DatasetView) -> None:
        """Test that transform reduces dimensions."""
        transformed = PCAAnalyzer(sample_view).fit(n_components=2).transform()

        assert transformed.shape == (100, 2)
        assert list(transformed.columns) == ["PC1", "PC2"]

    def test_n_components_none(self, sample_view: DatasetView) -> None:
        """Test n_components=None keeps one component per feature."""
        transformed = PCAAnalyzer(sample_view).fit(n_components=None).transform()
        assert transformed.shape[1] == 4

    def test_scale_defaults_to_unstandardized_view(self, sample_view: DatasetView) -> None:
        """Unstandardized views are scaled, like prcomp(scale = TRUE)."""
        analyzer = PCAAnalyzer(sample_view).fit()
        corr_eigenvalues = np.sort(np.linalg.eigvalsh(sample_view.features.corr().to_numpy()))[::-1]

        np.testing.assert_allclose(
            analyzer.get_explained_variance()["explained_ratio"],
            corr_eigenvalues / corr_eigenvalues.sum(),
            rtol=1e-8,
        )

    def test_get_explained_variance(self, sample_view: DatasetView) -> None:
        """Test getting explained variance."""
        variance_df = PCAAnalyzer(sample_view).fit(n_components=3).get_explained_variance()

        assert list(variance_df.columns) == ["PC", "variance", "explained_ratio", "cumulative_ratio"]
        assert len(variance_df) == 3
        # Variance should be decreasing, cumulative share increasing
        assert variance_df["explained_ratio"].is_monotonic_decreasing
        assert variance_df["cumulative_ratio"].is_monotonic_increasing
        assert variance_df.iloc[0]["explained_ratio"] > 0.3

    def test_get_loading_vectors(self, sample_view: DatasetView) -> None:
        """Test loadings are unit-length columns indexed by feature."""
        loadings = PCAAnalyzer(sample_view).fit(n_components=2).get_loading_vectors()

        assert loadings.shape == (4, 2)
        assert list(loadings.columns) == ["PC1", "PC2"]
        np.testing.assert_allclose((loadings**2).sum(axis=0), 1.0)

    def test_get_loading_vectors_specific_component(self, sample_view: DatasetView) -> None:
        """Test getting loading vectors for specific component."""
        analyzer = PCAAnalyzer(sample_view).fit(n_components=3)
        loadings = analyzer.get_loading_vectors(component=1)

        assert isinstance(loadings, pd.Series)
        assert loadings.name == "PC1"
        with pytest.raises(ValueError, match="Component 5 not found"):
            analyzer.get_loading_vectors(component=5)

    @pytest.mark.parametrize("method", ["l2", "max"])
    def test_get_top_loading_features(self, sample_view: DatasetView, method: str) -> None:
        """Test ranking features by loading strength."""
        top_features = PCAAnalyzer(sample_view).fit(n_components=2).get_top_loading_features(2, method=method)

        assert isinstance(top_features, pd.Index)
        assert set(top_features) == {"feature1", "feature2", "feature3", "feature4"}

    def test_get_top_loading_features_invalid_method(self, sample_view: DatasetView) -> None:
        """Test unknown aggregation methods are rejected."""
        with pytest.raises(ValueError, match="method"):
            PCAAnalyzer(sample_view).fit().get_top_loading_features(method="sum")  # type: ignore[arg-type]

    def test_result_carries_target(self, sample_view: DatasetView) -> None:
        """Test that result bundles scores, loadings and the outcome."""
        result = PCAAnalyzer(sample_view).fit(n_components=2).result()

        assert isinstance(result, PCAResult)
        assert result.scores.index.equals(sample_view.df.index)
        assert result.target.name == "outcome"
        assert list(result.top_features_per_pc) == ["PC1", "PC2"]

    def test_scores_view(self, sample_view: DatasetView) -> None:
        """Test the leading scores can be analysed further as a view."""
        view = PCAAnalyzer(sample_view).fit().result().scores_view(2)

        assert view.numeric_cols == ["PC1", "PC2"]
        assert list(view.features.columns) == ["PC1", "PC2"]
        assert view.target_col == "outcome"

    def test_multiple_transforms(self, sample_view: DatasetView) -> None:
        """Test that transform can be called multiple times."""
        analyzer = PCAAnalyzer(sample_view).fit(n_components=2)
        pd.testing.assert_frame_equal(analyzer.transform(), analyzer.transform())

    def test_exclude_cols(self, sample_view: DatasetView) -> None:
        """Test excluded features are left out of the fit."""
        loadings = PCAAnalyzer(sample_view).fit(exclude_cols=["feature4"]).get_loading_vectors()
        assert list(loadings.index) == ["feature1", "feature2", "feature3"]


class TestPCAOnChd:
    """PCA of the CHD measurements."""

    def test_augment_appends_scores(self, chd_df_missing) -> None:
        """Scores are appended to every row; incomplete rows get missing scores."""
        from sml_tlbx.data import ChdDataset

        ds = ChdDataset(df=chd_df_missing)
        view = ds.view(columns=ds.Col.measurement_columns(), target_col=ds.Col.TARGET)
        analyzer = PCAAnalyzer(view).fit()
        augmented = analyzer.augment(chd_df_missing, n_components=2)

        assert len(augmented) == len(chd_df_missing)
        assert {"PC1", "PC2"} <= set(augmented.columns)
        incomplete = chd_df_missing[ds.Col.measurement_columns()].isna().any(axis=1)
        assert augmented.loc[incomplete, "PC1"].isna().all()
        assert augmented.loc[~incomplete, "PC1"].notna().all()

    def test_dataset_factory(self, chd_dataset) -> None:
        """The dataset factory builds a standardized view and skips rescaling."""
        analyzer = chd_dataset.make_pca_analyzer(columns=chd_dataset.Col.measurement_columns()).fit()
        result = analyzer.result()
        assert list(result.loadings.index) == ["sbp", "dbp", "scl", "age", "bmi"]
        assert result.explained_variance["cumulative_ratio"].iloc[-1] == pytest.approx(1.0)
