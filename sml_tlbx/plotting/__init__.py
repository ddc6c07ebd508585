"""Plotting utilities for data visualization."""

from .clustering_plots import (
    plot_cluster_scatter,
    plot_dendrogram,
    plot_elbow_curve,
    plot_silhouette_bars,
    plot_silhouette_scores,
)
from .dataset_plots import (
    plot_histograms,
    plot_mapping,
    plot_pairs,
    plot_standardization_comparison,
)
from .model_plots import (
    plot_actual_vs_predicted,
    plot_coefficients,
    plot_probability_boxplot,
    plot_residual_histogram,
    plot_roc_curve,
    plot_tuning_curve,
    plot_variable_importance,
)
from .pca_plots import (
    plot_biplot_plotly,
    plot_explained_variance,
    plot_loadings_heatmap,
    plot_pca_scores,
    plot_tsne_embedding,
)


__all__ = [
    "plot_actual_vs_predicted",
    "plot_biplot_plotly",
    "plot_cluster_scatter",
    "plot_coefficients",
    "plot_dendrogram",
    "plot_elbow_curve",
    "plot_explained_variance",
    "plot_histograms",
    "plot_loadings_heatmap",
    "plot_mapping",
    "plot_pairs",
    "plot_pca_scores",
    "plot_probability_boxplot",
    "plot_residual_histogram",
    "plot_roc_curve",
    "plot_silhouette_bars",
    "plot_silhouette_scores",
    "plot_standardization_comparison",
    "plot_tsne_embedding",
    "plot_tuning_curve",
    "plot_variable_importance",
]
