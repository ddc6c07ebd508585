"""Plotting helpers for fitted models, predictions and tuning results."""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from sml_tlbx.modeling.metrics import roc_curve, score


if TYPE_CHECKING:
    from sml_tlbx.modeling.metrics import EventLevel
    from sml_tlbx.modeling.tuning import TuneResult


def _event_column(augmented: pd.DataFrame, event_level: EventLevel) -> str:
    if ".pred_class" not in augmented.columns:
        raise ValueError("Expected classification predictions with a '.pred_class' column")
    levels = list(augmented[".pred_class"].cat.categories)
    return f".pred_{levels[-1] if event_level == 'second' else levels[0]}"


def plot_coefficients(
    coefficients: pd.DataFrame,
    *,
    drop_intercept: bool = True,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Horizontal dot plot of coefficient estimates with +/- 1 standard error bars.

    Expects a ``tidy()`` table (``term``, ``estimate`` and, for unpenalized fits, ``std_error``).
    """
    ax = ax or plt.gca()
    table = coefficients
    if drop_intercept:
        table = table.loc[table["term"] != "(Intercept)"]
    table = table.iloc[::-1]
    xerr = table["std_error"] if "std_error" in table.columns else None
    ax.errorbar(table["estimate"], table["term"], xerr=xerr, fmt="o", capsize=3)
    ax.axvline(0, color="grey", linestyle="--", linewidth=1)
    ax.set_xlabel("Estimate (+/- 1 SE)" if xerr is not None else "Estimate")
    ax.set_ylabel("")
    ax.set_title("Coefficients")
    ax.grid(axis="x", alpha=0.2)
    return ax


def plot_actual_vs_predicted(
    augmented: pd.DataFrame,
    outcome: str,
    *,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Observed outcome against ``.pred`` with the identity line."""
    ax = ax or plt.gca()
    sns.scatterplot(x=augmented[".pred"], y=augmented[outcome], alpha=0.5, ax=ax)
    lo = np.nanmin([augmented[".pred"].min(), augmented[outcome].min()])
    hi = np.nanmax([augmented[".pred"].max(), augmented[outcome].max()])
    ax.plot([lo, hi], [lo, hi], color="red", linestyle="--", linewidth=1)
    ax.set_xlabel("Predicted")
    ax.set_ylabel(f"Observed {outcome}")
    ax.set_title("Observed vs Predicted")
    return ax


def plot_residual_histogram(
    augmented: pd.DataFrame,
    outcome: str,
    *,
    bins: int = 30,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Histogram of residuals ``outcome - .pred``."""
    ax = ax or plt.gca()
    residuals = (augmented[outcome] - augmented[".pred"]).dropna()
    sns.histplot(residuals, bins=bins, kde=True, ax=ax)
    ax.axvline(0, color="red", linestyle="--", linewidth=1)
    ax.set_xlabel("Residual")
    ax.set_title("Residual Distribution")
    return ax


def plot_probability_boxplot(
    augmented: pd.DataFrame,
    outcome: str,
    *,
    event_level: EventLevel = "second",
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Predicted event probability per observed class."""
    ax = ax or plt.gca()
    prob_col = _event_column(augmented, event_level)
    sns.boxplot(x=augmented[outcome].astype(str), y=augmented[prob_col], ax=ax)
    ax.set_xlabel(f"Observed {outcome}")
    ax.set_ylabel(f"P({prob_col.removeprefix('.pred_')})")
    ax.set_title("Predicted Probabilities by Class")
    return ax


def plot_roc_curve(
    augmented: pd.DataFrame,
    outcome: str,
    *,
    event_level: EventLevel = "second",
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """ROC curve of the event probability, with the AUC in the title."""
    ax = ax or plt.gca()
    prob_col = _event_column(augmented, event_level)
    curve = roc_curve(augmented[outcome], augmented[prob_col], event_level=event_level)
    auc = score(augmented, outcome, ["roc_auc"], event_level=event_level)["roc_auc"]

    ax.plot(1 - curve["specificity"], curve["sensitivity"], drawstyle="steps-post")
    ax.plot([0, 1], [0, 1], color="grey", linestyle="--", linewidth=1)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal")
    ax.set_xlabel("1 - Specificity")
    ax.set_ylabel("Sensitivity")
    ax.set_title(f"ROC curve (AUC = {auc:.3f})")
    return ax


def plot_tuning_curve(
    result: TuneResult,
    metric: str | None = None,
    *,
    param: str | None = None,
    log_x: bool | None = None,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Mean resampled metric (+/- 1 std_err band) against one tuned hyperparameter.

    ``log_x`` defaults to a log axis for ``penalty``. With several tuned parameters the
    remaining ones are shown as separate lines.
    """
    ax = ax or plt.gca()
    metric = metric or result.metric_set.first
    param = param or result.param_names[0]
    summary = result.collect_metrics()
    summary = summary.loc[summary["metric"] == metric]
    others = [name for name in result.param_names if name != param]

    groups = summary.groupby(others, sort=False) if others else [("", summary)]
    for key, group in groups:
        group = group.sort_values(param)
        label = ", ".join(f"{n}={v}" for n, v in zip(others, np.atleast_1d(key), strict=False)) or None
        line = ax.plot(group[param], group["mean"], marker="o", markersize=3, label=label)[0]
        ax.fill_between(
            group[param],
            group["mean"] - group["std_err"],
            group["mean"] + group["std_err"],
            color=line.get_color(),
            alpha=0.2,
        )

    if log_x if log_x is not None else param == "penalty":
        ax.set_xscale("log")
    if others:
        ax.legend()
    ax.set_xlabel(param)
    ax.set_ylabel(f"mean {metric}")
    ax.set_title(f"Tuning: {metric} vs {param}")
    ax.grid(alpha=0.2)
    return ax


def plot_variable_importance(
    importance: pd.Series,
    *,
    top_n: int | None = 10,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Horizontal bar chart of variable importance (largest on top)."""
    ax = ax or plt.gca()
    ranked = importance.sort_values(ascending=False)
    if top_n is not None:
        ranked = ranked.head(top_n)
    sns.barplot(x=ranked.to_numpy(), y=ranked.index.astype(str), color="steelblue", ax=ax)
    ax.set_xlabel("Importance")
    ax.set_ylabel("")
    ax.set_title("Variable Importance")
    return ax
