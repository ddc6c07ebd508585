"""PCA and t-SNE visualization functions."""

from collections.abc import Sequence
from typing import Literal

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.graph_objects as go
import seaborn as sns
from matplotlib.figure import Figure

from sml_tlbx.analysis.pca_analyzer import PCAResult
from sml_tlbx.analysis.tsne_analyzer import TSNEResult


def _normalize_pc_name(pc: str | int) -> str:
    """Convert component identifiers to canonical 'PCk' strings."""
    if isinstance(pc, int):
        return f"PC{pc}"
    pc_str = str(pc)
    return pc_str if pc_str.upper().startswith("PC") else f"PC{pc_str}"


def _select_pc_columns(
    available: pd.Index,
    n_components: int,
    pc_subset: Sequence[str | int] | None = None,
    required_len: int | None = None,
) -> list[str]:
    """Resolve which PC columns to use, validating availability and length."""
    if pc_subset is None:
        pc_cols = [f"PC{i}" for i in range(1, n_components + 1)]
    else:
        pc_cols = [_normalize_pc_name(pc) for pc in pc_subset]

    if required_len is not None and len(pc_cols) != required_len:
        raise ValueError(f"Expected {required_len} components, got {len(pc_cols)}")

    missing = [pc for pc in pc_cols if pc not in available]
    if missing:
        raise ValueError(f"Requested components {missing} not available. Available: {list(available)}")

    return pc_cols


def _scatter_by_outcome(
    coords: pd.DataFrame,
    x: str,
    y: str,
    target: pd.Series | None,
    ax: plt.Axes,
) -> None:
    hue = target.reindex(coords.index).astype(str) if target is not None else None
    sns.scatterplot(x=coords[x], y=coords[y], hue=hue, alpha=0.7, s=25, ax=ax)
    if target is not None:
        ax.legend(title=str(target.name))


def plot_explained_variance(
    result: PCAResult,
    figsize: tuple[int, int] = (10, 6),
    bar: Literal["explained_ratio", "variance"] = "variance",
) -> Figure:
    """Plot explained variance (or explained ratio) with cumulative curve.

    Combines [:func:`seaborn.barplot`](https://seaborn.pydata.org/generated/seaborn.barplot.html) and
    [:func:`seaborn.lineplot`](https://seaborn.pydata.org/generated/seaborn.lineplot.html) to mirror the
    classic PCA scree plot.
    """
    fig, ax1 = plt.subplots(figsize=figsize)
    x = np.arange(len(result.explained_variance))
    sns.barplot(x=x, y=result.explained_variance[bar], ax=ax1, color="skyblue")
    ax1.set_xlabel("Principal Component")
    ax1.set_ylabel(bar.replace("_", " ").title(), color="blue")
    ax1.tick_params(axis="y", labelcolor="blue")

    ax2 = ax1.twinx()
    sns.lineplot(x=x, y=result.explained_variance["cumulative_ratio"], marker="o", color="red", ax=ax2)
    ax2.set_ylabel("Cumulative Variance Explained", color="red")
    ax2.set_yticks(np.arange(0, 1.1, 0.1))
    ax2.tick_params(axis="y", labelcolor="red")

    ax1.set_xticks(x)
    ax1.set_xticklabels(result.explained_variance["PC"])
    ax1.set_title("PCA Explained Variance")
    ax1.grid(True, alpha=0.2)
    fig.tight_layout()
    return fig


def plot_loadings_heatmap(
    result: PCAResult,
    n_components: int = 3,
    figsize: tuple[int, int] = (8, 5),
) -> Figure:
    """Heatmap of loadings ordered by overall loading strength."""
    pc_cols = _select_pc_columns(result.loadings.columns, min(n_components, result.loadings.shape[1]))
    loadings = result.loadings.loc[result.top_features_global, pc_cols]

    fig, ax = plt.subplots(figsize=figsize)
    sns.heatmap(loadings, annot=True, fmt=".2f", cmap="coolwarm", center=0, ax=ax)
    ax.set_title("PCA Loadings")
    fig.tight_layout()
    return fig


def plot_pca_scores(
    result: PCAResult,
    pc_axes: Sequence[str | int] = (1, 2),
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Scatter of two principal components, colored by the outcome when the result carries one."""
    x, y = _select_pc_columns(result.scores.columns, 2, pc_subset=pc_axes, required_len=2)
    ax = ax or plt.gca()
    _scatter_by_outcome(result.scores, x, y, result.target, ax)
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.set_title(f"PCA scores ({x} vs {y})")
    return ax


def plot_tsne_embedding(
    result: TSNEResult,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Scatter of the 2-D t-SNE embedding, colored by the outcome when the result carries one."""
    ax = ax or plt.gca()
    _scatter_by_outcome(result.embedding, "tsne_x", "tsne_y", result.target, ax)
    ax.set_xlabel("t-SNE 1")
    ax.set_ylabel("t-SNE 2")
    ax.set_title(f"t-SNE (perplexity {result.perplexity:g})")
    return ax


def plot_biplot_plotly(
    result: PCAResult,
    *,
    pc_axes: Sequence[str | int] | None = None,
    top_features: int | None = 8,
    color: pd.Series | np.ndarray | None = None,
    color_palette: str | list | None = "orrd",
    height: int = 700,
    width: int = 900,
) -> go.Figure:
    """Interactive 2D biplot: scores as points, loadings as arrows scaled to the score range.

    Implemented with Plotly's [:class:`plotly.graph_objects.Scatter`](https://plotly.com/python/line-and-scatter/).
    Points are colored by ``color`` or, if not given, by the outcome carried in ``result``.
    """
    scores, loadings = result.scores, result.loadings
    pc_cols = _select_pc_columns(loadings.columns, 2, pc_subset=pc_axes, required_len=2)

    if top_features is not None:
        loadings = loadings.loc[result.top_features_global[:top_features]]

    score_span = float(np.abs(scores[pc_cols].to_numpy()).max() or 1.0)
    loading_span = float(np.abs(loadings[pc_cols].to_numpy()).max() or 1.0)
    scale = (score_span / loading_span) * 0.85 if loading_span else 1.0

    if color is None and result.target is not None:
        target = result.target.reindex(scores.index)
        if pd.api.types.is_numeric_dtype(target) or pd.api.types.is_bool_dtype(target):
            color = target.astype(float).to_numpy()
        else:
            color = pd.factorize(target, sort=True)[0]

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=scores[pc_cols[0]],
            y=scores[pc_cols[1]],
            mode="markers",
            marker=dict(
                color=color,
                colorscale=color_palette if color is not None else None,
                size=7,
                opacity=0.8,
            ),
            name="Scores",
        ),
    )
    for feat, row in loadings.iterrows():
        lx, ly = row[pc_cols[0]] * scale, row[pc_cols[1]] * scale
        label = (result.pretty_by_col or {}).get(feat, feat)
        fig.add_trace(
            go.Scatter(
                x=[0, lx],
                y=[0, ly],
                mode="lines",
                line=dict(color="firebrick", width=2),
                showlegend=False,
            ),
        )
        fig.add_trace(
            go.Scatter(
                x=[lx],
                y=[ly],
                mode="markers+text",
                marker=dict(color="firebrick", size=6),
                text=[label],
                textposition="top center",
                showlegend=False,
            ),
        )
    fig.update_xaxes(title=pc_cols[0])
    fig.update_yaxes(title=pc_cols[1])
    fig.update_layout(
        title="PCA Biplot",
        width=width,
        height=height,
        template="plotly_white",
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig
