"""Smoke tests for the plotting helpers."""

import matplotlib.pyplot as plt
import pandas as pd
import plotly.graph_objects as go
import pytest
from matplotlib.figure import Figure

from sml_tlbx.analysis import HierarchicalClusterer, KMeansAnalyzer, PCAAnalyzer, TSNEAnalyzer, choose_k
from sml_tlbx.data import ChdDataset
from sml_tlbx.data.views import DatasetView
from sml_tlbx.errors import MissingRequiredColumnError
from sml_tlbx.modeling import LinearReg, LogisticReg, RandForest, Recipe, Workflow, metric_set
from sml_tlbx.modeling.tuning import TuneResult
from sml_tlbx.plotting import (
    plot_actual_vs_predicted,
    plot_biplot_plotly,
    plot_cluster_scatter,
    plot_coefficients,
    plot_dendrogram,
    plot_elbow_curve,
    plot_explained_variance,
    plot_histograms,
    plot_loadings_heatmap,
    plot_mapping,
    plot_pairs,
    plot_pca_scores,
    plot_probability_boxplot,
    plot_residual_histogram,
    plot_roc_curve,
    plot_silhouette_bars,
    plot_silhouette_scores,
    plot_standardization_comparison,
    plot_tsne_embedding,
    plot_tuning_curve,
    plot_variable_importance,
)
from sml_tlbx.utils.plotting_config import PlottingConfig, save_figure


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture(scope="module")
def pca_result(chd_dataset):
    """PCA of the CHD measurements."""
    return chd_dataset.make_pca_analyzer(columns=chd_dataset.Col.measurement_columns()).fit().result()


@pytest.fixture(scope="module")
def logistic_augmented(chd_df):
    """Logistic predictions appended to the cohort."""
    rec = Recipe(outcome="chdfate").update_role("id", "followup").step_dummy().step_normalize()
    return Workflow(rec, LogisticReg()).fit(chd_df).augment(chd_df)


@pytest.fixture(scope="module")
def linear_fit(chd_df):
    """Linear model of systolic blood pressure."""
    rec = Recipe(outcome="sbp", predictors=("dbp", "age", "bmi"))
    return Workflow(rec, LinearReg()).fit(chd_df)


class TestModelPlots:
    """Plots of fitted models and their predictions."""

    def test_coefficients(self, linear_fit) -> None:
        """Intercept is dropped by default."""
        ax = plot_coefficients(linear_fit.tidy())
        assert {label.get_text() for label in ax.get_yticklabels()} == {"dbp", "age", "bmi"}

    def test_coefficients_without_std_error(self) -> None:
        """Penalized tables without standard errors still plot."""
        tidy = pd.DataFrame({"term": ["(Intercept)", "x"], "estimate": [1.0, 0.5]})
        ax = plot_coefficients(tidy, drop_intercept=False)
        assert ax.get_xlabel() == "Estimate"

    def test_regression_diagnostics(self, linear_fit, chd_df) -> None:
        """Actual-vs-predicted and residual histogram."""
        augmented = linear_fit.augment(chd_df)
        _, axs = plt.subplots(1, 2)
        plot_actual_vs_predicted(augmented, "sbp", ax=axs[0])
        plot_residual_histogram(augmented, "sbp", bins=20, ax=axs[1])
        assert axs[0].get_ylabel() == "sbp"

    def test_probability_boxplot(self, logistic_augmented) -> None:
        """Event probabilities split by the observed class."""
        ax = plot_probability_boxplot(logistic_augmented, "chdfate")
        assert ax.get_ylabel() == "P(True)"

    def test_roc_curve(self, logistic_augmented) -> None:
        """The title carries the AUC."""
        ax = plot_roc_curve(logistic_augmented, "chdfate")
        assert ax.get_title().startswith("ROC curve (AUC = ")

    def test_roc_curve_needs_class_predictions(self, linear_fit, chd_df) -> None:
        """Regression predictions cannot be drawn as a ROC curve."""
        with pytest.raises(ValueError, match=".pred_class"):
            plot_roc_curve(linear_fit.augment(chd_df), "sbp")

    def test_tuning_curve(self) -> None:
        """Penalty is drawn on a log axis."""
        metrics = pd.DataFrame(
            {
                "penalty": [0.001, 0.001, 0.01, 0.01, 0.1, 0.1],
                ".config": ["Model1", "Model1", "Model2", "Model2", "Model3", "Model3"],
                "id": ["Fold1", "Fold2"] * 3,
                "metric": ["roc_auc"] * 6,
                "estimator": ["binary"] * 6,
                "estimate": [0.7, 0.72, 0.74, 0.76, 0.6, 0.62],
            },
        )
        result = TuneResult(
            metrics=metrics,
            grid=pd.DataFrame({"penalty": [0.001, 0.01, 0.1]}),
            param_names=("penalty",),
            metric_set=metric_set("roc_auc"),
        )
        ax = plot_tuning_curve(result)
        assert ax.get_xscale() == "log"

    def test_variable_importance(self, chd_df, chd_recipe) -> None:
        """Bars for the most important predictors."""
        fitted = Workflow(chd_recipe, RandForest(trees=20, seed=1)).fit(chd_df)
        ax = plot_variable_importance(fitted.variable_importance(), top_n=3)
        assert len(ax.patches) == 3


class TestPCAPlots:
    """Dimension reduction plots."""

    def test_explained_variance(self, pca_result) -> None:
        """Figure-level helper and result shortcut."""
        assert isinstance(plot_explained_variance(pca_result), Figure)
        assert isinstance(pca_result.plot_explained_variance(bar="explained_ratio"), Figure)

    def test_loadings_heatmap(self, pca_result) -> None:
        """Heatmap of the leading loadings."""
        assert isinstance(plot_loadings_heatmap(pca_result, n_components=3), Figure)

    def test_scores(self, pca_result) -> None:
        """Scores scatter of two chosen components."""
        ax = plot_pca_scores(pca_result, pc_axes=(1, 3))
        assert (ax.get_xlabel(), ax.get_ylabel()) == ("PC1", "PC3")
        pca_result.plot_scores()

    def test_biplot(self, pca_result) -> None:
        """Interactive biplot, directly and through the result."""
        fig = plot_biplot_plotly(pca_result, top_features=3)
        assert isinstance(fig, go.Figure)
        assert isinstance(pca_result.plot_biplot(), go.Figure)

    def test_tsne_embedding(self, chd_dataset) -> None:
        """Embedding scatter, directly and through the result."""
        result = TSNEAnalyzer(
            chd_dataset.analyzer_view(columns=chd_dataset.Col.measurement_columns(), standardized=True),
            perplexity=10,
            random_state=0,
        ).fit().result()
        plot_tsne_embedding(result)
        result.plot()


class TestClusteringPlots:
    """Clustering diagnostics."""

    @pytest.fixture(scope="class")
    def scores_view(self, chd_df):
        """Leading two principal component scores of the cohort."""
        ds = ChdDataset(df=chd_df)
        view = ds.view(columns=ds.Col.measurement_columns(), target_col=ds.Col.TARGET)
        return PCAAnalyzer(view).fit().result().scores_view(2)

    def test_choose_k_plots(self, scores_view) -> None:
        """Elbow and silhouette curves over candidate k."""
        diagnostics = choose_k(scores_view, range(1, 5), random_state=1)
        _, axs = plt.subplots(1, 2)
        plot_elbow_curve(diagnostics, ax=axs[0])
        plot_silhouette_scores(diagnostics, ax=axs[1])
        assert len(axs[0].lines) == 1

    def test_kmeans_plots(self, scores_view) -> None:
        """Cluster scatter with centers and silhouette bars."""
        result = KMeansAnalyzer(scores_view, n_clusters=3, random_state=1).fit().result()
        ax = plot_cluster_scatter(result.data, result.labels, centers=result.centers)
        assert ax.get_title() == "Clusters (n = 3)"
        plot_silhouette_bars(result.data, result.labels)
        result.plot()

    def test_dendrogram(self, scores_view) -> None:
        """Dendrogram with cut lines returns its figure."""
        small = scores_view.df.head(40)
        result = HierarchicalClusterer(
            DatasetView(df=small, pretty_by_col={}, numeric_cols=["PC1", "PC2"]),
        ).fit().result()
        fig = plot_dendrogram(result, cut_heights=[1.0, 2.0], show_labels=True)
        assert isinstance(fig, Figure)
        assert isinstance(result.plot_dendrogram(), Figure)


class TestDatasetPlots:
    """Exploratory plots of raw data."""

    @pytest.mark.parametrize(
        ("y", "kind", "color"),
        [
            ("sbp", "scatter", "sex"),
            ("sbp", "box", None),
            (None, "hist", "chdfate"),
            (None, "bar", None),
        ],
    )
    def test_plot_mapping(self, chd_df, y, kind, color) -> None:
        """Each geometry returns a figure."""
        x = "sex" if kind in ("box", "bar") else "age"
        assert isinstance(plot_mapping(chd_df, x, y, color=color, kind=kind), Figure)

    def test_plot_mapping_facet(self, chd_df) -> None:
        """One panel per facet level."""
        fig = plot_mapping(chd_df, "age", "sbp", facet="sex", height=2.0)
        assert len(fig.axes) == 2

    def test_plot_mapping_missing_column(self, chd_df) -> None:
        """Mapped columns must exist."""
        with pytest.raises(MissingRequiredColumnError, match="nope"):
            plot_mapping(chd_df, "age", "nope")

    def test_plot_mapping_needs_y(self, chd_df) -> None:
        """Scatter plots need a y mapping."""
        with pytest.raises(ValueError, match="needs a y"):
            plot_mapping(chd_df, "age")

    def test_pairs_and_histograms(self, chd_df) -> None:
        """Pairs plot and histogram grid over a few columns."""
        plot_pairs(chd_df.head(100), ["sbp", "dbp", "age"], hue="sex")
        fig = plot_histograms(chd_df, ["sbp", "dbp", "age", "bmi"], ncols=3)
        assert sum(ax.get_visible() for ax in fig.axes) == 4

    def test_histograms_need_columns(self) -> None:
        """A frame without numeric columns has nothing to draw."""
        with pytest.raises(ValueError, match="No numeric columns"):
            plot_histograms(pd.DataFrame({"a": ["x", "y"]}))

    def test_standardization_comparison(self, chd_dataset) -> None:
        """Two stacked boxplot panels."""
        fig = plot_standardization_comparison(chd_dataset)
        assert len(fig.axes) == 2


class TestPlottingConfig:
    """Styling and export."""

    def test_apply_restores_rc_params(self) -> None:
        """Temporary styling is undone on exit."""
        before = plt.rcParams["axes.titlesize"]
        with PlottingConfig(title_size=31).apply():
            assert plt.rcParams["axes.titlesize"] == 31
        assert plt.rcParams["axes.titlesize"] == before

    def test_save_matplotlib_figure(self, tmp_path) -> None:
        """Parent directories are created."""
        fig, ax = plt.subplots()
        ax.plot([0, 1], [0, 1])
        path = save_figure(fig, tmp_path / "figs" / "line.png", dpi=50)
        assert path.exists()

    def test_save_plotly_html(self, tmp_path, pca_result) -> None:
        """Plotly figures are written as HTML."""
        path = save_figure(pca_result.plot_biplot(), tmp_path / "biplot.html")
        assert path.read_text(encoding="utf-8").lstrip().lower().startswith("<html")
