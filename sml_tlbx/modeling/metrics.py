"""Performance metrics for regression and binary classification.

Metrics are registered with their kind and optimisation direction:

- ``numeric`` metrics compare a ``.pred`` column with a numeric truth,
- ``class`` metrics compare ``.pred_class`` with the observed class,
- ``prob`` metrics rank the event probability ``.pred_<event>``.

The event is the second class level by default (``True`` for a boolean
outcome); pass ``event_level="first"`` to flip it. Pairs where either the truth
or the estimate is missing are dropped before computing a metric.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    f1_score,
    matthews_corrcoef,
    mean_absolute_error,
    mean_squared_error,
    precision_score,
    r2_score,
    recall_score,
    roc_auc_score,
)
from sklearn.metrics import roc_curve as sk_roc_curve

from ..errors import MetricUndefinedError
from .models import class_levels


MetricKind = Literal["numeric", "class", "prob"]
Direction = Literal["maximize", "minimize"]
EventLevel = Literal["first", "second"]

DEFAULT_REGRESSION_METRICS = ("rmse", "rsq")
DEFAULT_CLASSIFICATION_METRICS = ("roc_auc", "accuracy")


@dataclass(frozen=True)
class MetricInfo:
    """Registry entry of one metric."""

    name: str
    kind: MetricKind
    direction: Direction
    fn: Callable[..., float]


# --------------------------------------------------------------------------- numeric metrics
def rmse(truth: np.ndarray, estimate: np.ndarray) -> float:
    r"""Root mean squared error :math:`\sqrt{\frac{1}{n}\sum_i (y_i - \hat{y}_i)^2}`."""
    return float(np.sqrt(mean_squared_error(truth, estimate)))


def rsq(truth: np.ndarray, estimate: np.ndarray) -> float:
    r"""Coefficient of determination :math:`1 - SS_{res}/SS_{tot}`."""
    if np.ptp(truth) == 0:
        raise MetricUndefinedError("rsq", "the truth has zero variance")
    return float(r2_score(truth, estimate))


def mae(truth: np.ndarray, estimate: np.ndarray) -> float:
    r"""Mean absolute error :math:`\frac{1}{n}\sum_i |y_i - \hat{y}_i|`."""
    return float(mean_absolute_error(truth, estimate))


# --------------------------------------------------------------------------- class metrics
# Class metrics receive integer level codes and the code of the event level.
def accuracy(truth: np.ndarray, estimate: np.ndarray, event: int) -> float:
    return float(accuracy_score(truth, estimate))


def mcc(truth: np.ndarray, estimate: np.ndarray, event: int) -> float:
    """Matthews correlation coefficient (0 when a confusion-matrix margin is empty)."""
    return float(matthews_corrcoef(truth, estimate))


def f_meas(truth: np.ndarray, estimate: np.ndarray, event: int) -> float:
    """F1 score of the event level."""
    return float(f1_score(truth, estimate, pos_label=event, average="binary", zero_division=0))


def precision(truth: np.ndarray, estimate: np.ndarray, event: int) -> float:
    return float(precision_score(truth, estimate, pos_label=event, average="binary", zero_division=0))


def recall(truth: np.ndarray, estimate: np.ndarray, event: int) -> float:
    """Sensitivity of the event level."""
    return float(recall_score(truth, estimate, pos_label=event, average="binary", zero_division=0))


def roc_auc(truth: np.ndarray, prob: np.ndarray, event: int) -> float:
    """Area under the ROC curve of the event probability.

    Trapezoidal integration: tied scores share credit, so identical scores for
    all rows give exactly 0.5 and a perfect ranking gives 1.0.
    """
    is_event = truth == event
    if is_event.all() or not is_event.any():
        raise MetricUndefinedError("roc_auc", "the truth contains a single class")
    return float(roc_auc_score(is_event, prob))


METRICS: dict[str, MetricInfo] = {
    info.name: info
    for info in (
        MetricInfo("rmse", "numeric", "minimize", rmse),
        MetricInfo("rsq", "numeric", "maximize", rsq),
        MetricInfo("mae", "numeric", "minimize", mae),
        MetricInfo("accuracy", "class", "maximize", accuracy),
        MetricInfo("mcc", "class", "maximize", mcc),
        MetricInfo("f_meas", "class", "maximize", f_meas),
        MetricInfo("precision", "class", "maximize", precision),
        MetricInfo("recall", "class", "maximize", recall),
        MetricInfo("roc_auc", "prob", "maximize", roc_auc),
    )
}


def metric_info(name: str) -> MetricInfo:
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(f"Unknown metric '{name}'. Use one of: {', '.join(METRICS)}.") from None


# --------------------------------------------------------------------------- scoring
def _truth_series(predictions: pd.DataFrame, truth: pd.Series | str) -> pd.Series:
    if isinstance(truth, str):
        return predictions[truth]
    truth = pd.Series(truth)
    if len(truth) != len(predictions):
        raise ValueError(f"truth has {len(truth)} values but there are {len(predictions)} predictions")
    return truth.set_axis(predictions.index)


def _levels(predictions: pd.DataFrame, truth: pd.Series) -> tuple[Any, ...]:
    if ".pred_class" in predictions.columns and isinstance(predictions[".pred_class"].dtype, pd.CategoricalDtype):
        return tuple(predictions[".pred_class"].cat.categories)
    return class_levels(truth)


def _event_code(levels: Sequence[Any], event_level: EventLevel) -> int:
    if len(levels) != 2:  # noqa: PLR2004
        raise MetricUndefinedError("class metrics", f"need exactly two outcome levels, got {tuple(levels)}")
    if event_level not in ("first", "second"):
        raise ValueError(f"event_level must be 'first' or 'second', got {event_level!r}")
    return 0 if event_level == "first" else 1


def _codes(values: pd.Series, levels: Sequence[Any]) -> np.ndarray:
    return pd.Categorical(values.astype(object), categories=list(levels)).codes.astype(int)


def score(
    predictions: pd.DataFrame,
    truth: pd.Series | str,
    metric_names: Sequence[str],
    *,
    event_level: EventLevel = "second",
) -> dict[str, float]:
    """Compute the requested metrics.

    Args:
        predictions: Output of ``predict``/``augment`` (``.pred`` or ``.pred_class`` + ``.pred_<level>``).
        truth: Observed outcome values (aligned by position) or the name of a column of ``predictions``.
        metric_names: Registered metric names, e.g. ``["accuracy", "roc_auc"]``.
        event_level: Which class level is the event.

    Returns:
        Mapping from metric name to value, in the requested order.

    Raises:
        MetricUndefinedError: If a metric cannot be computed (empty input, single-class
            truth for ``roc_auc``, zero-variance truth for ``rsq``).
    """
    truth = _truth_series(predictions, truth)
    results: dict[str, float] = {}
    for name in metric_names:
        info = metric_info(name)
        if info.kind == "numeric":
            estimate = predictions[".pred"]
            keep = (truth.notna() & estimate.notna()).to_numpy()
            if not keep.any():
                raise MetricUndefinedError(name, "no non-missing truth/estimate pairs")
            results[name] = info.fn(truth.to_numpy(dtype=float)[keep], estimate.to_numpy(dtype=float)[keep])
            continue

        levels = _levels(predictions, truth)
        event = _event_code(levels, event_level)
        truth_codes = _codes(truth, levels)
        if info.kind == "class":
            estimate_codes = _codes(predictions[".pred_class"], levels)
            keep = (truth_codes >= 0) & (estimate_codes >= 0)
            if not keep.any():
                raise MetricUndefinedError(name, "no non-missing truth/estimate pairs")
            results[name] = info.fn(truth_codes[keep], estimate_codes[keep], event)
        else:
            prob = predictions[f".pred_{levels[event]}"].to_numpy(dtype=float)
            keep = (truth_codes >= 0) & ~np.isnan(prob)
            if not keep.any():
                raise MetricUndefinedError(name, "no non-missing truth/estimate pairs")
            results[name] = info.fn(truth_codes[keep], prob[keep], event)
    return results


@dataclass(frozen=True)
class MetricSet:
    """A fixed collection of metrics computed together into a tidy table."""

    names: tuple[str, ...]

    def __post_init__(self) -> None:
        for name in self.names:
            metric_info(name)

    def __call__(
        self,
        predictions: pd.DataFrame,
        truth: pd.Series | str,
        *,
        event_level: EventLevel = "second",
    ) -> pd.DataFrame:
        """Tidy frame with one row per metric (``metric``, ``estimator``, ``estimate``)."""
        values = score(predictions, truth, self.names, event_level=event_level)
        return pd.DataFrame(
            {
                "metric": list(values),
                "estimator": ["standard" if METRICS[name].kind == "numeric" else "binary" for name in values],
                "estimate": list(values.values()),
            },
        )

    @property
    def first(self) -> str:
        return self.names[0]


def metric_set(*names: str) -> MetricSet:
    """Bundle metrics, e.g. ``metric_set("accuracy", "mcc", "f_meas")``."""
    if not names:
        raise ValueError("metric_set needs at least one metric name")
    return MetricSet(tuple(names))


def default_metric_set(mode: str) -> MetricSet:
    """``rmse`` + ``rsq`` for regression, ``roc_auc`` + ``accuracy`` for classification."""
    return MetricSet(DEFAULT_REGRESSION_METRICS if mode == "regression" else DEFAULT_CLASSIFICATION_METRICS)


def roc_curve(
    truth: pd.Series,
    prob: pd.Series | np.ndarray,
    *,
    event_level: EventLevel = "second",
) -> pd.DataFrame:
    """ROC curve points of an event probability.

    Returns:
        DataFrame with ``threshold``, ``specificity`` and ``sensitivity``, ordered by
        increasing ``1 - specificity``.
    """
    truth = pd.Series(truth).reset_index(drop=True)
    prob = np.asarray(prob, dtype=float)
    levels = class_levels(truth)
    event = _event_code(levels, event_level)
    codes = _codes(truth, levels)
    keep = (codes >= 0) & ~np.isnan(prob)
    is_event = codes[keep] == event
    if is_event.all() or not is_event.any():
        raise MetricUndefinedError("roc_curve", "the truth contains a single class")

    fpr, tpr, thresholds = sk_roc_curve(is_event, prob[keep], drop_intermediate=False)
    return pd.DataFrame({"threshold": thresholds, "specificity": 1 - fpr, "sensitivity": tpr})


__all__ = [
    "METRICS",
    "MetricInfo",
    "MetricSet",
    "accuracy",
    "default_metric_set",
    "f_meas",
    "mae",
    "mcc",
    "metric_info",
    "metric_set",
    "precision",
    "recall",
    "roc_auc",
    "roc_curve",
    "rmse",
    "rsq",
    "score",
]
