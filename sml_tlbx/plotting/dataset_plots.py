"""Dataset visualization functions."""

from collections.abc import Sequence
from typing import Literal

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from sml_tlbx.data.base_dataset import BaseDataset
from sml_tlbx.errors import MissingRequiredColumnError


PlotKind = Literal["scatter", "box", "hist", "bar"]


def plot_mapping(
    df: pd.DataFrame,
    x: str,
    y: str | None = None,
    *,
    color: str | None = None,
    kind: PlotKind = "scatter",
    facet: str | None = None,
    height: float = 4.0,
) -> Figure:
    """Declarative plot: map columns to aesthetics and pick a geometry.

    Wraps seaborn's figure-level functions
    ([:func:`seaborn.relplot`](https://seaborn.pydata.org/generated/seaborn.relplot.html),
    [:func:`seaborn.catplot`](https://seaborn.pydata.org/generated/seaborn.catplot.html),
    [:func:`seaborn.displot`](https://seaborn.pydata.org/generated/seaborn.displot.html)) so one
    call covers the scatter / box / histogram / bar plots of exploratory work, with an
    optional facet per level of ``facet``. Rows with missing mapped values are not drawn.

    Args:
        df: Data to plot.
        x: Column on the x axis.
        y: Column on the y axis (required for ``scatter`` and ``box``; for ``bar`` without
            ``y`` the bars show counts).
        color: Column mapped to color (hue).
        kind: Geometry.
        facet: Column whose levels get one panel each.
        height: Height of each panel in inches.

    Raises:
        MissingRequiredColumnError: If a mapped column is not in ``df``.
        ValueError: If ``kind`` needs a ``y`` mapping that was not given.
    """
    mapped = [col for col in (x, y, color, facet) if col is not None]
    missing = [col for col in mapped if col not in df.columns]
    if missing:
        raise MissingRequiredColumnError(missing, role="plot mapping")
    if kind in ("scatter", "box") and y is None:
        raise ValueError(f"kind='{kind}' needs a y mapping")

    common = dict(data=df, x=x, hue=color, col=facet, height=height)
    if kind == "scatter":
        grid = sns.relplot(y=y, kind="scatter", alpha=0.6, **common)
    elif kind == "box":
        grid = sns.catplot(y=y, kind="box", **common)
    elif kind == "hist":
        grid = sns.displot(kind="hist", multiple="stack" if color else "layer", **common)
    elif kind == "bar":
        grid = sns.catplot(kind="count", **common) if y is None else sns.catplot(y=y, kind="bar", **common)
    else:
        raise ValueError(f"Unknown kind '{kind}'. Use 'scatter', 'box', 'hist' or 'bar'.")

    return grid.figure


def plot_pairs(
    df: pd.DataFrame,
    columns: Sequence[str] | None = None,
    hue: str | None = None,
) -> Figure:
    """Pairs plot: scatter for every pair of columns, densities on the diagonal.

    Uses [:func:`seaborn.pairplot`](https://seaborn.pydata.org/generated/seaborn.pairplot.html).
    """
    columns = list(columns) if columns is not None else df.select_dtypes("number").columns.tolist()
    frame = df.loc[:, [*columns, hue] if hue and hue not in columns else columns].dropna()
    grid = sns.pairplot(frame, vars=columns, hue=hue, corner=True, plot_kws={"alpha": 0.5, "s": 15})
    return grid.figure


def plot_histograms(
    df: pd.DataFrame,
    columns: Sequence[str] | None = None,
    *,
    bins: int = 30,
    ncols: int = 3,
    figsize_per_plot: tuple[float, float] = (4.0, 3.0),
) -> Figure:
    """Histogram per numeric column on a grid of subplots."""
    columns = list(columns) if columns is not None else df.select_dtypes("number").columns.tolist()
    if not columns:
        raise ValueError("No numeric columns to plot")

    nrows = int(np.ceil(len(columns) / ncols))
    fig, axs = plt.subplots(
        nrows,
        ncols,
        figsize=(figsize_per_plot[0] * ncols, figsize_per_plot[1] * nrows),
        squeeze=False,
    )
    for ax, col in zip(axs.flat, columns, strict=False):
        sns.histplot(df[col].dropna(), bins=bins, ax=ax)
        ax.set_title(col)
        ax.set_xlabel("")
    for ax in axs.flat[len(columns) :]:
        ax.set_visible(False)

    fig.tight_layout()
    return fig


def plot_standardization_comparison(
    dataset: BaseDataset,
    figsize: tuple[int, int] = (12, 8),
) -> Figure:
    """Plot boxplots comparing non-standardized vs standardized data.

    Args:
        dataset: Dataset instance with data to visualize
        figsize: Figure size (width, height)

    Returns:
        matplotlib Figure object
    """
    numeric_cols = list(dataset.numeric_cols)

    fig, axs = plt.subplots(2, 1, figsize=figsize)

    sns.boxplot(data=dataset.df[numeric_cols], ax=axs[0])
    axs[0].set_title("Non-Standardized")

    sns.boxplot(data=dataset.df_standardized[numeric_cols], ax=axs[1])
    axs[1].set_title("Standardized")

    fig.tight_layout()

    return fig
