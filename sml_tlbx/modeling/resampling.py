"""V-fold cross-validation.

:func:`vfold_cv` partitions the rows into ``v`` disjoint assessment folds.
Rows are shuffled (within each stratum when stratifying) and dealt round-robin,
continuing across strata, so every fold holds ``floor(n / v)`` or
``ceil(n / v)`` rows and each stratum is spread evenly over the folds.

:func:`fit_resamples` trains a :class:`~sml_tlbx.modeling.workflow.Workflow` on
the analysis rows of every fold and scores it on the assessment rows. Folds can
run in parallel with joblib; results are always recombined in fold order, so
parallel and sequential runs give identical summaries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..errors import InvalidHyperparameterError, MissingRequiredColumnError
from .metrics import EventLevel, MetricSet, default_metric_set
from .splitting import make_strata
from .workflow import Workflow


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Fold:
    """One analysis/assessment pair of row positions."""

    id: str
    analysis_idx: np.ndarray
    assessment_idx: np.ndarray

    def analysis(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rows used for fitting."""
        return df.iloc[self.analysis_idx]

    def assessment(self, df: pd.DataFrame) -> pd.DataFrame:
        """Held-out rows used for scoring."""
        return df.iloc[self.assessment_idx]

    def __repr__(self) -> str:
        return f"Fold({self.id}: <{len(self.analysis_idx)}/{len(self.assessment_idx)}>)"


@dataclass(frozen=True, eq=False)
class Resamples:
    """Folds of one table (kept alongside the folds so loops can slice it)."""

    data: pd.DataFrame
    folds: tuple[Fold, ...]
    v: int
    repeats: int = 1
    strata: str | None = None

    def __len__(self) -> int:
        return len(self.folds)

    def __iter__(self) -> Iterator[Fold]:
        return iter(self.folds)

    def __getitem__(self, i: int) -> Fold:
        return self.folds[i]

    def __repr__(self) -> str:
        return f"#  {self.v}-fold cross-validation x {self.repeats} ({len(self.data)} rows, strata={self.strata})"


def _fold_assignment(codes: np.ndarray, v: int, rng: np.random.Generator) -> np.ndarray:
    assignment = np.empty(len(codes), dtype=int)
    offset = 0
    for code in np.unique(codes):
        rows = rng.permutation(np.flatnonzero(codes == code))
        assignment[rows] = (offset + np.arange(len(rows))) % v
        offset += len(rows)
    return assignment


def vfold_cv(
    df: pd.DataFrame,
    v: int = 10,
    *,
    strata: str | None = None,
    seed: int | None = None,
    repeats: int = 1,
    breaks: int = 4,
) -> Resamples:
    """Create ``v`` cross-validation folds (optionally stratified and repeated).

    Raises:
        InvalidHyperparameterError: If ``v < 2``, ``v > len(df)`` or ``repeats < 1``.
        MissingRequiredColumnError: If ``strata`` is not a column of ``df``.
        StratifyColumnError: If ``strata`` is unusable for stratification.
    """
    if int(v) != v or v < 2:  # noqa: PLR2004
        raise InvalidHyperparameterError("v", v, "an integer >= 2")
    if v > len(df):
        raise InvalidHyperparameterError("v", v, f"at most the number of rows ({len(df)})")
    if int(repeats) != repeats or repeats < 1:
        raise InvalidHyperparameterError("repeats", repeats, "an integer >= 1")

    if strata is None:
        codes = np.zeros(len(df), dtype=int)
    else:
        if strata not in df.columns:
            raise MissingRequiredColumnError([strata], role="strata")
        codes = make_strata(df[strata], breaks=breaks, name=str(strata))

    rng = np.random.default_rng(seed)
    width = len(str(v))
    positions = np.arange(len(df))
    folds: list[Fold] = []
    for repeat in range(1, repeats + 1):
        assignment = _fold_assignment(codes, int(v), rng)
        for k in range(int(v)):
            fold_id = f"Fold{k + 1:0{width}d}" if repeats == 1 else f"Repeat{repeat}_Fold{k + 1:0{width}d}"
            folds.append(
                Fold(
                    id=fold_id,
                    analysis_idx=positions[assignment != k],
                    assessment_idx=positions[assignment == k],
                ),
            )

    logger.info("Created %d-fold CV x %d on %d rows (strata=%s)", v, repeats, len(df), strata)
    return Resamples(data=df, folds=tuple(folds), v=int(v), repeats=int(repeats), strata=strata)


# --------------------------------------------------------------------------- fitting
@dataclass(frozen=True)
class FoldOutcome:
    """Metrics (and optionally predictions) of one workflow on one fold."""

    order: tuple[int, int]
    metrics: pd.DataFrame
    predictions: pd.DataFrame | None = None


def fit_fold(
    workflow: Workflow,
    fold: Fold,
    data: pd.DataFrame,
    metrics: MetricSet,
    *,
    order: tuple[int, int] = (0, 0),
    save_pred: bool = False,
    event_level: EventLevel = "second",
) -> FoldOutcome:
    """Fit on the analysis rows, score on the assessment rows.

    Errors propagate with a note naming the fold.
    """
    try:
        fitted = workflow.fit(fold.analysis(data))
        augmented = fitted.augment(fold.assessment(data))
        fold_metrics = metrics(augmented, workflow.outcome, event_level=event_level)
    except Exception as exc:
        exc.add_note(f"while fitting resample {fold.id}")
        raise
    logger.info(
        "Resample %s: %s",
        fold.id,
        ", ".join(f"{m}={e:.4f}" for m, e in zip(fold_metrics["metric"], fold_metrics["estimate"], strict=True)),
    )

    predictions = None
    if save_pred:
        pred_cols = [col for col in augmented.columns if col.startswith(".pred")]
        predictions = augmented.loc[:, [*pred_cols, workflow.outcome]].assign(id=fold.id)
    return FoldOutcome(order=order, metrics=fold_metrics.assign(id=fold.id), predictions=predictions)


def summarize_metrics(per_fold: pd.DataFrame, by: list[str] | None = None) -> pd.DataFrame:
    """Mean, count and standard error (``sd / sqrt(n)``) of each metric across folds."""
    keys = [*(by or []), "metric", "estimator"]
    grouped = per_fold.groupby(keys, sort=False, dropna=False)["estimate"]
    summary = grouped.agg(mean="mean", n="count", std="std").reset_index()
    summary["std_err"] = summary["std"] / np.sqrt(summary["n"])
    return summary.drop(columns="std")


@dataclass(frozen=True, eq=False)
class ResampleResult:
    """Per-fold results of :func:`fit_resamples`."""

    metrics: pd.DataFrame
    predictions: pd.DataFrame | None = None

    def collect_metrics(self, *, summarize: bool = True) -> pd.DataFrame:
        """Mean/n/std_err per metric, or the raw per-fold table with ``summarize=False``."""
        return summarize_metrics(self.metrics) if summarize else self.metrics

    def collect_predictions(self) -> pd.DataFrame:
        if self.predictions is None:
            raise ValueError("Predictions were not saved; rerun with save_pred=True.")
        return self.predictions


def run_units(units: list, n_jobs: int) -> list[FoldOutcome]:
    """Execute delayed fold fits sequentially or with joblib, sorted by (grid index, fold index)."""
    if n_jobs == 1:
        outcomes = [fn(*args, **kwargs) for fn, args, kwargs in units]
    else:
        outcomes = Parallel(n_jobs=n_jobs)(units)
    return sorted(outcomes, key=lambda outcome: outcome.order)


def fit_resamples(
    workflow: Workflow,
    resamples: Resamples,
    *,
    metrics: MetricSet | None = None,
    n_jobs: int = 1,
    save_pred: bool = False,
    event_level: EventLevel = "second",
) -> ResampleResult:
    """Fit and score ``workflow`` on every fold of ``resamples``."""
    workflow.model.check_resolved()
    metrics = metrics or default_metric_set(workflow.mode)
    units = [
        delayed(fit_fold)(
            workflow,
            fold,
            resamples.data,
            metrics,
            order=(0, i),
            save_pred=save_pred,
            event_level=event_level,
        )
        for i, fold in enumerate(resamples)
    ]
    logger.info("Fitting %s on %d resamples (n_jobs=%d)", workflow.model.kind, len(units), n_jobs)
    outcomes = run_units(units, n_jobs)

    per_fold = pd.concat([outcome.metrics for outcome in outcomes], ignore_index=True)
    per_fold = per_fold.loc[:, ["id", "metric", "estimator", "estimate"]]
    predictions = None
    if save_pred:
        predictions = pd.concat([outcome.predictions for outcome in outcomes])
    return ResampleResult(metrics=per_fold, predictions=predictions)


__all__ = [
    "Fold",
    "FoldOutcome",
    "ResampleResult",
    "Resamples",
    "fit_fold",
    "fit_resamples",
    "summarize_metrics",
    "vfold_cv",
]
