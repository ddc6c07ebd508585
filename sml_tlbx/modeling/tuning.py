"""Grid search over model hyperparameters with cross-validation.

Parameter helpers describe a range (optionally on a log10 scale) and
:func:`grid_regular` crosses evenly spaced levels of each into a grid
``DataFrame`` (first parameter varying fastest). :func:`tune_grid` runs full
v-fold cross-validation for every grid row; :class:`TuneResult` summarises the
folds and picks the best configuration, breaking ties by grid order.

Example:
    >>> wf = Workflow(rec, LogisticReg(penalty=tune(), mixture=1))
    >>> grid = grid_regular(penalty(), levels=50)
    >>> res = tune_grid(wf, vfold_cv(train, v=10, strata="chdfate", seed=1), grid)
    >>> best = res.select_best("roc_auc")
    >>> final = last_fit(finalize_workflow(wf, best), split, df)
    >>> final.collect_metrics()
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
import pandas as pd
from joblib import delayed

from ..errors import InvalidHyperparameterError
from .metrics import EventLevel, MetricSet, default_metric_set, metric_info
from .models import tune
from .resampling import FoldOutcome, Resamples, fit_fold, run_units, summarize_metrics
from .splitting import Split
from .workflow import FittedWorkflow, Workflow


logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- parameters
@dataclass(frozen=True)
class Parameter:
    """A tunable hyperparameter range.

    Attributes:
        name: Hyperparameter name of the model specification.
        range: Lower/upper bound, on the transformed scale.
        transform: ``"log10"`` when ``range`` holds exponents of 10.
        integer: Round values to unique integers.
    """

    name: str
    range: tuple[float, float]
    transform: Literal["identity", "log10"] = "identity"
    integer: bool = False

    def values(self, levels: int) -> np.ndarray:
        """``levels`` evenly spaced values over the range (fewer when integers collide)."""
        if levels < 1:
            raise InvalidHyperparameterError("levels", levels, "an integer >= 1")
        lower, upper = self.range
        grid = np.linspace(lower, upper, levels) if levels > 1 else np.array([lower])
        if self.transform == "log10":
            grid = 10.0**grid
        if self.integer:
            grid = np.unique(np.round(grid).astype(int))
        return grid


def penalty(range: tuple[float, float] = (-10.0, 0.0)) -> Parameter:  # noqa: A002
    """Penalty strength; ``range`` is in log10 units (default ``1e-10`` to ``1``)."""
    return Parameter("penalty", range, transform="log10")


def mixture(range: tuple[float, float] = (0.0, 1.0)) -> Parameter:  # noqa: A002
    """Elastic-net mixing proportion (0 = ridge, 1 = lasso)."""
    return Parameter("mixture", range)


def mtry(range: tuple[int, int]) -> Parameter:  # noqa: A002
    """Number of candidate predictors per split; the upper bound depends on the data, so it is required."""
    return Parameter("mtry", range, integer=True)


def trees(range: tuple[int, int] = (1, 2000)) -> Parameter:  # noqa: A002
    return Parameter("trees", range, integer=True)


def min_n(range: tuple[int, int] = (2, 40)) -> Parameter:  # noqa: A002
    return Parameter("min_n", range, integer=True)


def grid_regular(*params: Parameter, levels: int | Sequence[int] = 3) -> pd.DataFrame:
    """Regular grid crossing ``levels`` values of every parameter.

    Args:
        *params: Parameter ranges (e.g. ``penalty()``, ``mtry((2, 8))``).
        levels: Number of values per parameter (one int for all, or one per parameter).

    Returns:
        DataFrame with one column per parameter; the first parameter varies fastest.
    """
    if not params:
        raise ValueError("grid_regular needs at least one parameter")
    per_param = [levels] * len(params) if isinstance(levels, int) else list(levels)
    if len(per_param) != len(params):
        raise ValueError(f"Got {len(per_param)} levels for {len(params)} parameters")

    values = [param.values(n) for param, n in zip(params, per_param, strict=True)]
    rows = [combo[::-1] for combo in itertools.product(*values[::-1])]
    return pd.DataFrame(rows, columns=[param.name for param in params])


# --------------------------------------------------------------------------- tuning
def _config_ids(n: int) -> list[str]:
    width = len(str(n))
    return [f"Model{i + 1:0{width}d}" for i in range(n)]


@dataclass(frozen=True, eq=False)
class TuneResult:
    """Per-fold metrics of every grid configuration.

    Attributes:
        metrics: Long table with the parameter columns, ``.config``, ``id``, ``metric``,
            ``estimator`` and ``estimate``.
        grid: The evaluated grid (with a ``.config`` column).
        param_names: Names of the tuned hyperparameters.
        metric_set: Metrics computed on every fold.
        predictions: Assessment-set predictions when ``save_pred=True``.
    """

    metrics: pd.DataFrame
    grid: pd.DataFrame
    param_names: tuple[str, ...]
    metric_set: MetricSet
    predictions: pd.DataFrame | None = None

    def collect_metrics(self, *, summarize: bool = True) -> pd.DataFrame:
        """Mean, n and std_err per configuration and metric (grid order), or the raw fold table."""
        if not summarize:
            return self.metrics
        return summarize_metrics(self.metrics, by=[*self.param_names, ".config"])

    def show_best(self, metric: str | None = None, n: int = 5) -> pd.DataFrame:
        """Top ``n`` configurations for ``metric`` (ties keep grid order)."""
        metric = self._metric(metric)
        summary = self.collect_metrics()
        summary = summary.loc[summary["metric"] == metric]
        key = summary["mean"].to_numpy(dtype=float)
        if metric_info(metric).direction == "maximize":
            key = -key
        # lexsort: last key is primary, grid position breaks ties
        order = np.lexsort((np.arange(len(summary)), key))
        return summary.iloc[order].head(n).reset_index(drop=True)

    def select_best(self, metric: str | None = None) -> dict[str, Any]:
        """Parameters of the best configuration (plus its ``.config`` id)."""
        best = self.show_best(metric, n=1).iloc[0]
        return {name: _scalar(best[name]) for name in [*self.param_names, ".config"]}

    def _metric(self, metric: str | None) -> str:
        if metric is None:
            metric = self.metric_set.first
            logger.warning("No metric given; selecting on the first metric of the set ('%s')", metric)
        if metric not in self.metric_set.names:
            raise ValueError(f"Metric '{metric}' was not computed; available: {', '.join(self.metric_set.names)}")
        return metric

    def collect_predictions(self) -> pd.DataFrame:
        if self.predictions is None:
            raise ValueError("Predictions were not saved; rerun with save_pred=True.")
        return self.predictions


def _scalar(value: Any) -> Any:
    return value.item() if hasattr(value, "item") else value


def tune_grid(
    workflow: Workflow,
    resamples: Resamples,
    grid: pd.DataFrame,
    *,
    metrics: MetricSet | None = None,
    n_jobs: int = 1,
    save_pred: bool = False,
    event_level: EventLevel = "second",
) -> TuneResult:
    """Cross-validate ``workflow`` for every row of ``grid``.

    The grid columns must be exactly the hyperparameters marked with ``tune()``.
    Every (configuration, fold) pair is an independent unit; with ``n_jobs != 1``
    they run in parallel and are reordered by (grid index, fold index) afterwards.

    Raises:
        InvalidHyperparameterError: If the grid and the ``tune()`` placeholders disagree.
    """
    tunable = workflow.tunable()
    extra = [col for col in grid.columns if col not in tunable]
    missing = [name for name in tunable if name not in grid.columns]
    if extra:
        raise InvalidHyperparameterError(extra[0], "grid column", f"one of the tune() parameters {tunable}")
    if missing:
        raise InvalidHyperparameterError(missing[0], tune(), "a grid column")
    if grid.empty:
        raise ValueError("The tuning grid has no rows.")

    metrics = metrics or default_metric_set(workflow.mode)
    grid = grid.reset_index(drop=True).loc[:, tunable].assign(**{".config": _config_ids(len(grid))})

    units = []
    for i, row in grid.iterrows():
        params = row.to_dict()
        candidate = workflow.finalize(params)
        units.extend(
            delayed(_fit_config_fold)(
                candidate,
                fold,
                resamples.data,
                metrics,
                params,
                order=(i, k),
                save_pred=save_pred,
                event_level=event_level,
            )
            for k, fold in enumerate(resamples)
        )
    logger.info(
        "Tuning %s over %d configurations x %d resamples (n_jobs=%d)",
        workflow.model.kind,
        len(grid),
        len(resamples),
        n_jobs,
    )
    outcomes = run_units(units, n_jobs)

    per_fold = pd.concat([outcome.metrics for outcome in outcomes], ignore_index=True)
    per_fold = per_fold.loc[:, [*tunable, ".config", "id", "metric", "estimator", "estimate"]]
    predictions = None
    if save_pred:
        predictions = pd.concat([outcome.predictions for outcome in outcomes])
    return TuneResult(
        metrics=per_fold,
        grid=grid,
        param_names=tuple(tunable),
        metric_set=metrics,
        predictions=predictions,
    )


def _fit_config_fold(
    workflow: Workflow,
    fold: Any,
    data: pd.DataFrame,
    metrics: MetricSet,
    params: Mapping[str, Any],
    **kwargs: Any,
) -> FoldOutcome:
    try:
        outcome = fit_fold(workflow, fold, data, metrics, **kwargs)
    except Exception as exc:
        exc.add_note(f"with grid configuration {dict(params)}")
        raise
    labels = dict(params)
    predictions = outcome.predictions.assign(**labels) if outcome.predictions is not None else None
    return FoldOutcome(order=outcome.order, metrics=outcome.metrics.assign(**labels), predictions=predictions)


# --------------------------------------------------------------------------- final fit
@dataclass(frozen=True, eq=False)
class LastFitResult:
    """Fit on the training side of a split, evaluated once on the testing side."""

    fitted: FittedWorkflow
    metrics: pd.DataFrame
    predictions: pd.DataFrame

    def collect_metrics(self) -> pd.DataFrame:
        return self.metrics

    def collect_predictions(self) -> pd.DataFrame:
        return self.predictions


def last_fit(
    workflow: Workflow,
    split: Split,
    df: pd.DataFrame,
    *,
    metrics: MetricSet | None = None,
    event_level: EventLevel = "second",
) -> LastFitResult:
    """Train ``workflow`` on ``split.training(df)`` and score it on ``split.testing(df)``."""
    workflow.model.check_resolved()
    metrics = metrics or default_metric_set(workflow.mode)
    fitted = workflow.fit(split.training(df))
    augmented = fitted.augment(split.testing(df))
    result = metrics(augmented, workflow.outcome, event_level=event_level)
    logger.info(
        "Final fit of %s on %d training rows, scored on %d testing rows",
        workflow.model.kind,
        len(split.train_idx),
        len(split.test_idx),
    )

    pred_cols = [col for col in augmented.columns if col.startswith(".pred")]
    return LastFitResult(
        fitted=fitted,
        metrics=result,
        predictions=augmented.loc[:, [*pred_cols, workflow.outcome]],
    )


__all__ = [
    "LastFitResult",
    "Parameter",
    "TuneResult",
    "grid_regular",
    "last_fit",
    "min_n",
    "mixture",
    "mtry",
    "penalty",
    "trees",
    "tune_grid",
]
