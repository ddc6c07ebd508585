"""Workflows: a preprocessing recipe bundled with a model specification.

A :class:`Workflow` is what the resampling and tuning loops repeat: prep the
recipe on the analysis rows, fit the model on the baked analysis rows, bake and
predict the assessment rows. Fitting returns a :class:`FittedWorkflow`, which can
be persisted with joblib.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import joblib
import pandas as pd

from ..errors import InvalidHyperparameterError
from .metrics import EventLevel, MetricSet, default_metric_set
from .models import FittedModel, ModelSpec, fit_model
from .recipes import PreppedRecipe, Recipe


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workflow:
    """Recipe + model specification, fitted as one unit."""

    recipe: Recipe
    model: ModelSpec

    def __post_init__(self) -> None:
        if self.recipe.outcome is None:
            raise ValueError("A workflow needs a recipe with an outcome column.")

    @property
    def outcome(self) -> str:
        return str(self.recipe.outcome)

    @property
    def mode(self) -> str:
        return self.model.mode

    def tunable(self) -> list[str]:
        """Model hyperparameters still marked with ``tune()``."""
        return self.model.tunable()

    def finalize(self, params: Mapping[str, Any]) -> Workflow:
        """Replace ``tune()`` placeholders by concrete values (extra keys such as ``.config`` are ignored)."""
        values = {name: _as_python(params[name]) for name in self.tunable() if name in params}
        missing = [name for name in self.tunable() if name not in params]
        if missing:
            raise InvalidHyperparameterError(missing[0], None, "a value in the finalizing parameters")
        return Workflow(recipe=self.recipe, model=self.model.set_args(**values))

    def fit(self, train: pd.DataFrame) -> FittedWorkflow:
        """Prep the recipe on ``train`` and fit the model on the baked training table."""
        prepped = self.recipe.prep(train)
        baked = prepped.juice()
        model = fit_model(baked, self.outcome, self.model, predictors=prepped.predictors)
        return FittedWorkflow(workflow=self, prepped=prepped, model=model)


def _as_python(value: Any) -> Any:
    # grid values come out of DataFrames as numpy scalars
    return value.item() if hasattr(value, "item") else value


def finalize_workflow(workflow: Workflow, params: Mapping[str, Any]) -> Workflow:
    """Substitute tuned hyperparameters (e.g. from ``TuneResult.select_best``)."""
    return workflow.finalize(params)


@dataclass(frozen=True, eq=False)
class FittedWorkflow:
    """A workflow with its prepped recipe and fitted model."""

    workflow: Workflow
    prepped: PreppedRecipe
    model: FittedModel

    @property
    def outcome(self) -> str:
        return self.workflow.outcome

    def _predict_rows(self, df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
        # baked rows are labelled by position in df
        predictions = self.model.predict(self.prepped.bake(df.reset_index(drop=True)))
        rows = df.iloc[predictions.index.to_numpy()]
        return rows, predictions.set_axis(rows.index)

    def predict(self, df: pd.DataFrame) -> pd.DataFrame:
        """Bake ``df`` with the training parameters and predict (one row per row kept by the recipe)."""
        return self._predict_rows(df)[1]

    def augment(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rows of ``df`` kept by the recipe with prediction columns appended."""
        rows, predictions = self._predict_rows(df)
        augmented = pd.concat([rows.reset_index(drop=True), predictions.reset_index(drop=True)], axis=1)
        return augmented.set_axis(rows.index)

    def evaluate(
        self,
        df: pd.DataFrame,
        metrics: MetricSet | None = None,
        *,
        event_level: EventLevel = "second",
    ) -> pd.DataFrame:
        """Tidy metrics of the predictions for ``df`` against its outcome column."""
        metrics = metrics or default_metric_set(self.workflow.mode)
        return metrics(self.augment(df), self.outcome, event_level=event_level)

    def tidy(self) -> pd.DataFrame:
        return self.model.tidy()

    def variable_importance(self) -> pd.Series:
        return self.model.variable_importance()

    def save(self, path: str | Path) -> Path:
        """Persist with :func:`joblib.dump`."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self, path)
        logger.info("Saved fitted %s workflow to %s", self.workflow.model.kind, path)
        return path


def load_workflow(path: str | Path) -> FittedWorkflow:
    """Load a workflow written by :meth:`FittedWorkflow.save`."""
    obj = joblib.load(Path(path))
    if not isinstance(obj, FittedWorkflow):
        raise TypeError(f"{path} does not contain a FittedWorkflow (got {type(obj).__name__})")
    logger.info("Loaded fitted %s workflow from %s", obj.workflow.model.kind, path)
    return obj


__all__ = ["FittedWorkflow", "Workflow", "finalize_workflow", "load_workflow"]
