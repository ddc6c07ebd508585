"""Model specifications and fitted models.

The model kind is a closed set (:class:`ModelKind`), each kind with one frozen
specification dataclass holding its hyperparameters:

- :class:`LinearReg`: ordinary least squares with intercept (statsmodels ``OLS``).
- :class:`LogisticReg`: binary logistic regression. ``penalty == 0`` is plain
  maximum likelihood (statsmodels ``GLM`` with a ``Binomial`` family);
  ``penalty > 0`` fits the glmnet elastic-net objective

  .. math:: -\\frac{1}{n}\\ell(\\beta) + \\lambda\\left[\\frac{1-\\alpha}{2}\\|\\beta\\|_2^2 + \\alpha\\|\\beta\\|_1\\right]

  with ``GLM.fit_regularized(method="elastic_net")`` (intercept unpenalized).
- :class:`RandForest`: scikit-learn random forest with bootstrap rows and an
  out-of-bag error estimate.

Any hyperparameter may be a :func:`tune` placeholder; such a spec can only be
fitted after the placeholders are replaced (see :mod:`sml_tlbx.modeling.tuning`).
"""

from __future__ import annotations

import logging
import math
import warnings
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from enum import StrEnum
from typing import Any, ClassVar, Literal, Self

import numpy as np
import pandas as pd
import statsmodels.api as sm
from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from ..errors import (
    InvalidHyperparameterError,
    InvalidOutcomeError,
    MissingRequiredColumnError,
    NotFittedError,
    SingularFitError,
)
from .recipes import is_nominal_column, ordered_levels


logger = logging.getLogger(__name__)

Mode = Literal["regression", "classification"]

_INTERCEPT = "(Intercept)"


class ModelKind(StrEnum):
    """Supported model kinds."""

    LINEAR_REG = "linear_reg"
    LOGISTIC_REG = "logistic_reg"
    RAND_FOREST = "rand_forest"


@dataclass(frozen=True)
class Tune:
    """Placeholder for a hyperparameter whose value is chosen by grid search."""

    id: str | None = None

    def __repr__(self) -> str:
        return f"tune({self.id!r})" if self.id else "tune()"


def tune(id: str | None = None) -> Tune:  # noqa: A002
    """Mark a hyperparameter for tuning."""
    return Tune(id)


@contextmanager
def _log_convergence_warnings(kind: str) -> Iterator[None]:
    """Route engine convergence warnings to the module logger, re-emit everything else."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        yield
    for warning in caught:
        if issubclass(warning.category, ConvergenceWarning):
            logger.warning("%s: %s", kind, warning.message)
        else:
            warnings.warn_explicit(warning.message, warning.category, warning.filename, warning.lineno)


# --------------------------------------------------------------------------- specifications
@dataclass(frozen=True)
class ModelSpec(ABC):
    """Common interface of all model specifications."""

    kind: ClassVar[ModelKind]

    @property
    @abstractmethod
    def mode(self) -> Mode: ...

    @property
    def hyperparameters(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def tunable(self) -> list[str]:
        """Names of hyperparameters still set to :func:`tune`."""
        return [name for name, value in self.hyperparameters.items() if isinstance(value, Tune)]

    def set_args(self, **values: Any) -> Self:
        """Return a copy with some hyperparameters replaced."""
        unknown = [name for name in values if name not in self.hyperparameters]
        if unknown:
            raise InvalidHyperparameterError(
                unknown[0], values[unknown[0]], f"one of {sorted(self.hyperparameters)} for {self.kind}"
            )
        return replace(self, **values)

    def check_resolved(self) -> None:
        for name in self.tunable():
            raise InvalidHyperparameterError(name, getattr(self, name), "a concrete value (finalize the workflow first)")

    def outcome_levels(self, y: pd.Series) -> tuple[Any, ...] | None:
        """Class levels of the outcome (``None`` for regression)."""
        if self.mode == "regression":
            if not pd.api.types.is_numeric_dtype(y) or pd.api.types.is_bool_dtype(y):
                raise InvalidOutcomeError(str(y.name), f"must be numeric for {self.kind} (got dtype {y.dtype})")
            return None
        return class_levels(y)

    @abstractmethod
    def validate(self, n_features: int) -> Self:
        """Check hyperparameter ranges and fill data-dependent defaults."""
        ...

    @abstractmethod
    def fit_engine(self, X: pd.DataFrame, y: pd.Series, levels: tuple[Any, ...] | None) -> Any: ...

    @abstractmethod
    def predict_engine(self, engine: Any, X: pd.DataFrame) -> np.ndarray:
        """Numeric predictions (regression) or class probabilities with one column per level."""
        ...

    @abstractmethod
    def tidy_engine(self, engine: Any, predictors: Sequence[str]) -> pd.DataFrame: ...

    @abstractmethod
    def importance_engine(self, engine: Any, predictors: Sequence[str]) -> pd.Series: ...


def class_levels(y: pd.Series) -> tuple[Any, ...]:
    """Observed class levels in order: ``(False, True)`` for booleans, category order, else sorted."""
    return ordered_levels(y)


def _design(X: pd.DataFrame) -> pd.DataFrame:
    return sm.add_constant(X, has_constant="add").rename(columns={"const": _INTERCEPT})


def _coefficient_table(engine: Any) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "term": engine.params.index,
            "estimate": engine.params.to_numpy(),
            "std_error": engine.bse.to_numpy(),
            "statistic": engine.tvalues.to_numpy(),
            "p_value": engine.pvalues.to_numpy(),
        },
    )


def _abs_coefficients(engine: Any) -> pd.Series:
    params = pd.Series(engine.params)
    return params.drop(_INTERCEPT, errors="ignore").abs().sort_values(ascending=False).rename("importance")


@dataclass(frozen=True)
class LinearReg(ModelSpec):
    """Ordinary least squares with intercept; numeric outcome only."""

    kind: ClassVar[ModelKind] = ModelKind.LINEAR_REG

    @property
    def mode(self) -> Mode:
        return "regression"

    def validate(self, n_features: int) -> Self:
        return self

    def fit_engine(self, X: pd.DataFrame, y: pd.Series, levels: tuple[Any, ...] | None) -> Any:
        design = _design(X)
        rank = int(np.linalg.matrix_rank(design.to_numpy()))
        if rank < design.shape[1]:
            raise SingularFitError(_aliased_columns(design), rank, design.shape[1])
        return sm.OLS(y.astype(float), design).fit()

    def predict_engine(self, engine: Any, X: pd.DataFrame) -> np.ndarray:
        return np.asarray(engine.predict(_design(X)))

    def tidy_engine(self, engine: Any, predictors: Sequence[str]) -> pd.DataFrame:
        return _coefficient_table(engine)

    def importance_engine(self, engine: Any, predictors: Sequence[str]) -> pd.Series:
        return _abs_coefficients(engine)


def _aliased_columns(design: pd.DataFrame) -> list[str]:
    """Columns that do not increase the rank when added left to right."""
    aliased: list[str] = []
    kept: list[str] = []
    for col in design.columns:
        candidate = [*kept, col]
        if np.linalg.matrix_rank(design[candidate].to_numpy()) > len(kept):
            kept.append(col)
        else:
            aliased.append(str(col))
    return aliased


@dataclass(frozen=True)
class LogisticReg(ModelSpec):
    """Binary logistic regression, optionally elastic-net penalized.

    Args:
        penalty: Penalty strength :math:`\\lambda \\ge 0` (0 = maximum likelihood).
        mixture: Elastic-net mixing :math:`\\alpha \\in [0, 1]` (1 = lasso, 0 = ridge).
    """

    penalty: float | Tune = 0.0
    mixture: float | Tune = 1.0

    kind: ClassVar[ModelKind] = ModelKind.LOGISTIC_REG

    @property
    def mode(self) -> Mode:
        return "classification"

    def validate(self, n_features: int) -> Self:
        if not np.isfinite(self.penalty) or self.penalty < 0:
            raise InvalidHyperparameterError("penalty", self.penalty, "a finite number >= 0")
        if not 0 <= self.mixture <= 1:
            raise InvalidHyperparameterError("mixture", self.mixture, "a number in [0, 1]")
        return self

    def outcome_levels(self, y: pd.Series) -> tuple[Any, ...]:
        levels = class_levels(y)
        if len(levels) != 2:  # noqa: PLR2004
            raise InvalidOutcomeError(str(y.name), f"must have exactly two levels for logistic regression, got {levels}")
        return levels

    def fit_engine(self, X: pd.DataFrame, y: pd.Series, levels: tuple[Any, ...] | None) -> Any:
        event = (y == levels[1]).astype(float)
        model = sm.GLM(event, _design(X), family=sm.families.Binomial())
        with _log_convergence_warnings("logistic_reg"):
            if self.penalty == 0:
                return model.fit()
            alpha = np.full(X.shape[1] + 1, float(self.penalty))
            alpha[0] = 0.0
            return model.fit_regularized(method="elastic_net", alpha=alpha, L1_wt=float(self.mixture))

    def predict_engine(self, engine: Any, X: pd.DataFrame) -> np.ndarray:
        prob = np.asarray(engine.model.predict(np.asarray(engine.params), _design(X)))
        return np.column_stack([1 - prob, prob])

    def tidy_engine(self, engine: Any, predictors: Sequence[str]) -> pd.DataFrame:
        if self.penalty == 0:
            return _coefficient_table(engine)
        return pd.DataFrame(
            {
                "term": [_INTERCEPT, *predictors],
                "estimate": np.asarray(engine.params),
                "penalty": float(self.penalty),
            },
        )

    def importance_engine(self, engine: Any, predictors: Sequence[str]) -> pd.Series:
        params = pd.Series(np.asarray(engine.params), index=[_INTERCEPT, *predictors])
        return params.drop(_INTERCEPT).abs().sort_values(ascending=False).rename("importance")


@dataclass(frozen=True)
class RandForest(ModelSpec):
    """Random forest (bootstrap rows, ``mtry`` candidate features per split).

    Args:
        trees: Number of trees (>= 1).
        mtry: Features considered at each split, in ``[1, n_features]``. Defaults to
            ``floor(sqrt(p))`` for classification and ``max(floor(p / 3), 1)`` for regression.
        min_n: Minimum node size required to attempt a split (scikit-learn's ``min_samples_split``).
        mode: ``"classification"`` (majority vote) or ``"regression"`` (mean).
        seed: Random state of the engine.
    """

    trees: int | Tune = 500
    mtry: int | Tune | None = None
    min_n: int | Tune | None = None
    mode: Mode = "classification"
    seed: int | None = None

    kind: ClassVar[ModelKind] = ModelKind.RAND_FOREST

    def validate(self, n_features: int) -> Self:
        if self.mode not in ("classification", "regression"):
            raise InvalidHyperparameterError("mode", self.mode, "'classification' or 'regression'")
        if int(self.trees) != self.trees or self.trees < 1:
            raise InvalidHyperparameterError("trees", self.trees, "an integer >= 1")
        mtry = self.mtry
        if mtry is None:
            mtry = math.isqrt(n_features) if self.mode == "classification" else max(n_features // 3, 1)
        if int(mtry) != mtry or not 1 <= mtry <= n_features:
            raise InvalidHyperparameterError("mtry", mtry, f"an integer in [1, {n_features}]")
        if self.min_n is not None and (int(self.min_n) != self.min_n or self.min_n < 1):
            raise InvalidHyperparameterError("min_n", self.min_n, "an integer >= 1")
        return replace(self, trees=int(self.trees), mtry=int(mtry))

    def fit_engine(self, X: pd.DataFrame, y: pd.Series, levels: tuple[Any, ...] | None) -> Any:
        params = {
            "n_estimators": self.trees,
            "max_features": self.mtry,
            "min_samples_split": max(int(self.min_n or 2), 2),
            "bootstrap": True,
            "oob_score": True,
            "random_state": self.seed,
        }
        with warnings.catch_warnings():
            # few trees leave some rows without out-of-bag predictions
            warnings.filterwarnings("ignore", message="Some inputs do not have OOB scores")
            if self.mode == "regression":
                return RandomForestRegressor(**params).fit(X.to_numpy(), y.to_numpy(dtype=float))
            codes = pd.Categorical(y, categories=list(levels or ())).codes
            return RandomForestClassifier(**params).fit(X.to_numpy(), codes)

    def predict_engine(self, engine: Any, X: pd.DataFrame) -> np.ndarray:
        if self.mode == "regression":
            return engine.predict(X.to_numpy())
        return engine.predict_proba(X.to_numpy())

    def tidy_engine(self, engine: Any, predictors: Sequence[str]) -> pd.DataFrame:
        importance = self.importance_engine(engine, predictors)
        return pd.DataFrame({"term": importance.index, "importance": importance.to_numpy()})

    def importance_engine(self, engine: Any, predictors: Sequence[str]) -> pd.Series:
        return (
            pd.Series(engine.feature_importances_, index=list(predictors), name="importance")
            .sort_values(ascending=False)
        )

    def oob_error(self, engine: Any, y: pd.Series) -> float:
        """Out-of-bag misclassification rate (classification) or mean squared error (regression)."""
        if self.mode == "classification":
            return float(1 - engine.oob_score_)
        return float(np.nanmean((np.ravel(engine.oob_prediction_) - y.to_numpy(dtype=float)) ** 2))


_SPECS: dict[ModelKind, type[ModelSpec]] = {
    ModelKind.LINEAR_REG: LinearReg,
    ModelKind.LOGISTIC_REG: LogisticReg,
    ModelKind.RAND_FOREST: RandForest,
}


def make_spec(kind: ModelKind | str, **hyperparameters: Any) -> ModelSpec:
    """Build the specification for ``kind`` (``"linear_reg"``, ``"logistic_reg"`` or ``"rand_forest"``)."""
    try:
        spec_cls = _SPECS[ModelKind(kind)]
    except ValueError:
        raise ValueError(f"Unknown model kind '{kind}'. Use one of: {', '.join(ModelKind)}.") from None
    return spec_cls().set_args(**hyperparameters)


# --------------------------------------------------------------------------- fitted model
@dataclass(frozen=True, eq=False)
class FittedModel:
    """Immutable result of :func:`fit_model`.

    Attributes:
        spec: Specification with data-dependent defaults filled in (e.g. ``mtry``).
        outcome: Outcome column name.
        predictors: Predictor column names, in design order.
        levels: Class levels (classification) in order; the second level is the event.
        engine: Underlying statsmodels / scikit-learn fit object.
        n_obs: Number of complete rows used for fitting.
        oob_error: Out-of-bag error estimate (forests only).
    """

    spec: ModelSpec
    outcome: str
    predictors: tuple[str, ...]
    levels: tuple[Any, ...] | None
    engine: Any
    n_obs: int
    oob_error: float | None = None

    @property
    def mode(self) -> Mode:
        return self.spec.mode

    def predict(self, table: pd.DataFrame) -> pd.DataFrame:
        """One prediction per row of ``table`` (index aligned).

        Regression returns ``.pred``; classification returns ``.pred_class`` and
        one ``.pred_<level>`` probability column per class. Rows with a missing
        predictor value get missing predictions.
        """
        X = _predictor_matrix(table, self.predictors)
        complete = X.notna().all(axis=1).to_numpy()
        raw = self.spec.predict_engine(self.engine, X.loc[complete]) if complete.any() else None

        if self.levels is None:
            pred = np.full(len(X), np.nan)
            if raw is not None:
                pred[complete] = raw
            return pd.DataFrame({".pred": pred}, index=table.index)

        proba = np.full((len(X), len(self.levels)), np.nan)
        if raw is not None:
            proba[complete] = raw
        codes = np.where(complete, np.argmax(np.where(complete[:, None], proba, 0.0), axis=1), -1)
        out = {".pred_class": pd.Categorical.from_codes(codes, categories=list(self.levels))}
        out |= {f".pred_{level}": proba[:, i] for i, level in enumerate(self.levels)}
        return pd.DataFrame(out, index=table.index)

    def tidy(self) -> pd.DataFrame:
        """Coefficient table (``term``, ``estimate``, ...) or variable importance for forests."""
        return self.spec.tidy_engine(self.engine, self.predictors)

    def variable_importance(self) -> pd.Series:
        """Importance per predictor, sorted descending."""
        return self.spec.importance_engine(self.engine, self.predictors)


def _predictor_matrix(table: pd.DataFrame, predictors: Sequence[str]) -> pd.DataFrame:
    missing = [col for col in predictors if col not in table.columns]
    if missing:
        raise MissingRequiredColumnError(missing, role="predictor")
    nominal = [col for col in predictors if is_nominal_column(table[col])]
    if nominal:
        raise TypeError(f"Predictor(s) {nominal} are not numeric; add step_dummy() to the recipe.")
    X = table.loc[:, list(predictors)]
    return pd.DataFrame(X.to_numpy(dtype=float, na_value=np.nan), index=table.index, columns=list(predictors))


def fit_model(
    table: pd.DataFrame,
    outcome: str,
    model: ModelSpec | ModelKind | str,
    hyperparameters: Mapping[str, Any] | None = None,
    *,
    predictors: Sequence[str] | None = None,
) -> FittedModel:
    """Fit ``model`` to predict ``outcome`` from ``predictors`` (default: all other columns).

    Rows with a missing predictor or outcome value are left out of the fit.

    Raises:
        MissingRequiredColumnError: If the outcome or a predictor column is absent.
        InvalidOutcomeError: If the outcome type does not suit the model kind.
        InvalidHyperparameterError: If a hyperparameter is out of range or still ``tune()``.
        SingularFitError: If linear regression predictors are perfectly collinear.
    """
    if isinstance(model, ModelSpec):
        spec = model.set_args(**hyperparameters) if hyperparameters else model
    else:
        spec = make_spec(model, **(hyperparameters or {}))
    spec.check_resolved()

    if outcome not in table.columns:
        raise MissingRequiredColumnError([outcome], role="outcome")
    predictors = tuple(col for col in table.columns if col != outcome) if predictors is None else tuple(predictors)

    X = _predictor_matrix(table, predictors)
    y = table[outcome]
    spec = spec.validate(len(predictors))

    complete = (X.notna().all(axis=1) & y.notna()).to_numpy()
    if not complete.all():
        logger.info("Leaving %d incomplete row(s) out of the %s fit", int((~complete).sum()), spec.kind)
    if not complete.any():
        raise ValueError(f"No complete rows to fit {spec.kind} on.")
    levels = spec.outcome_levels(y.loc[complete])

    engine = spec.fit_engine(X.loc[complete], y.loc[complete], levels)
    oob_error = spec.oob_error(engine, y.loc[complete]) if isinstance(spec, RandForest) else None
    logger.debug("Fitted %s on %d rows x %d predictors", spec.kind, int(complete.sum()), len(predictors))
    return FittedModel(
        spec=spec,
        outcome=outcome,
        predictors=predictors,
        levels=levels,
        engine=engine,
        n_obs=int(complete.sum()),
        oob_error=oob_error,
    )


def predict(model: FittedModel, table: pd.DataFrame) -> pd.DataFrame:
    """Predictions of ``model`` for ``table`` (see :meth:`FittedModel.predict`)."""
    if not isinstance(model, FittedModel):
        raise NotFittedError("predict() needs a FittedModel; call fit_model() first")
    return model.predict(table)


def augment(model: FittedModel, table: pd.DataFrame) -> pd.DataFrame:
    """``table`` with the prediction columns appended."""
    predictions = predict(model, table).reset_index(drop=True)
    return pd.concat([table.reset_index(drop=True), predictions], axis=1).set_axis(table.index)


__all__ = [
    "FittedModel",
    "LinearReg",
    "LogisticReg",
    "ModelKind",
    "ModelSpec",
    "RandForest",
    "Tune",
    "augment",
    "class_levels",
    "fit_model",
    "make_spec",
    "predict",
    "tune",
]
