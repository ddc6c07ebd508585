"""Declarative preprocessing recipes with a prep (fit) / bake (apply) interface.

A :class:`Recipe` is an immutable description: the outcome, the predictor set,
extra column roles and an ordered tuple of steps. Builder methods never modify
the recipe; each returns a new one.

:meth:`Recipe.prep` learns every step's parameters from one training table. The
steps are prepped in order, each one on the training table as transformed by all
earlier steps. The result is a :class:`PreppedRecipe` whose parameters are frozen:
:meth:`PreppedRecipe.bake` applies them verbatim to any table and never re-learns,
so statistics of the baked table never leak into the transformation.

Example:
    >>> rec = (
    ...     Recipe(outcome="chdfate")
    ...     .update_role("id", "followup")
    ...     .step_naomit()
    ...     .step_dummy()
    ...     .step_zv()
    ...     .step_normalize()
    ... )
    >>> prepped = rec.prep(train_df)
    >>> prepped.bake(test_df).head()
"""

from __future__ import annotations

import logging
import warnings
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import ClassVar, Literal, Self

import numpy as np
import pandas as pd
from sklearn.impute import SimpleImputer
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from ..errors import MissingRequiredColumnError, NotFittedError, UnknownCategoryAtApplyTime


logger = logging.getLogger(__name__)

OnUnknown = Literal["ignore", "warn"]


class Selector(StrEnum):
    """Role/type based column selectors resolved against the table at prep time."""

    ALL_PREDICTORS = "all_predictors"
    ALL_NUMERIC_PREDICTORS = "all_numeric_predictors"
    ALL_NOMINAL_PREDICTORS = "all_nominal_predictors"
    ALL_OUTCOMES = "all_outcomes"
    ALL_PREDICTORS_AND_OUTCOMES = "all_predictors_and_outcomes"


ALL_PREDICTORS = Selector.ALL_PREDICTORS
ALL_NUMERIC_PREDICTORS = Selector.ALL_NUMERIC_PREDICTORS
ALL_NOMINAL_PREDICTORS = Selector.ALL_NOMINAL_PREDICTORS
ALL_OUTCOMES = Selector.ALL_OUTCOMES
ALL_PREDICTORS_AND_OUTCOMES = Selector.ALL_PREDICTORS_AND_OUTCOMES

ColumnSelection = Selector | Sequence[str]


def is_numeric_column(values: pd.Series) -> bool:
    """Numeric or boolean column (booleans are treated as 0/1 predictors)."""
    return pd.api.types.is_numeric_dtype(values) or pd.api.types.is_bool_dtype(values)


def is_nominal_column(values: pd.Series) -> bool:
    """Categorical, string or object column."""
    if isinstance(values.dtype, pd.CategoricalDtype):
        return True
    return not is_numeric_column(values) and (
        pd.api.types.is_object_dtype(values) or pd.api.types.is_string_dtype(values)
    )


@dataclass(frozen=True)
class Roles:
    """Column roles of a table at one point of the step sequence."""

    outcome: str | None
    predictors: tuple[str, ...]
    others: Mapping[str, str] = field(default_factory=dict)

    def resolve(self, selection: ColumnSelection, df: pd.DataFrame) -> list[str]:
        """Column names of ``df`` picked by ``selection``, in table order."""
        if not isinstance(selection, Selector):
            columns = [selection] if isinstance(selection, str) else list(selection)
            missing = [col for col in columns if col not in df.columns]
            if missing:
                raise MissingRequiredColumnError(missing, role="selected")
            return columns

        outcomes = [self.outcome] if self.outcome is not None and self.outcome in df.columns else []
        predictors = [col for col in df.columns if col in self.predictors]
        resolved = {
            Selector.ALL_PREDICTORS: predictors,
            Selector.ALL_NUMERIC_PREDICTORS: [col for col in predictors if is_numeric_column(df[col])],
            Selector.ALL_NOMINAL_PREDICTORS: [col for col in predictors if is_nominal_column(df[col])],
            Selector.ALL_OUTCOMES: outcomes,
            Selector.ALL_PREDICTORS_AND_OUTCOMES: [*predictors, *outcomes],
        }
        return resolved[selection]

    def after(self, df: pd.DataFrame) -> Roles:
        """Roles for the table produced by a step: every non-outcome, non-role column is a predictor."""
        predictors = tuple(col for col in df.columns if col != self.outcome and col not in self.others)
        return replace(self, predictors=predictors)


# --------------------------------------------------------------------------- steps
@dataclass(frozen=True)
class Step(ABC):
    """One column-level operation; ``prep`` returns a trained copy holding the learned parameters."""

    trained: bool = field(default=False, kw_only=True)

    name: ClassVar[str] = "step"

    @abstractmethod
    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        """Learn parameters from the (partially transformed) training table."""
        ...

    @abstractmethod
    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame: ...

    @abstractmethod
    def _params(self) -> list[tuple[str, str, object]]: ...

    def bake(self, df: pd.DataFrame, *, on_unknown: OnUnknown = "ignore") -> pd.DataFrame:
        """Apply the learned parameters to ``df`` (returns a new table)."""
        if not self.trained:
            raise NotFittedError(f"step_{self.name} has not been prepped")
        return self._apply(df, on_unknown=on_unknown)

    def tidy(self) -> pd.DataFrame:
        """Learned parameters as a tidy table (``column``, ``parameter``, ``value``)."""
        return pd.DataFrame(self._params(), columns=["column", "parameter", "value"])


@dataclass(frozen=True)
class StepRm(Step):
    selection: ColumnSelection = ()
    columns: tuple[str, ...] = ()
    name: ClassVar[str] = "rm"

    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        return replace(self, columns=tuple(roles.resolve(self.selection, df)), trained=True)

    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame:
        return df.drop(columns=[col for col in self.columns if col in df.columns])

    def _params(self) -> list[tuple[str, str, object]]:
        return [(col, "removed", True) for col in self.columns]


@dataclass(frozen=True)
class StepNaomit(Step):
    """Drop rows with a missing value in any selected column, on every table baked."""

    selection: ColumnSelection = ALL_PREDICTORS_AND_OUTCOMES
    columns: tuple[str, ...] = ()
    name: ClassVar[str] = "naomit"

    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        return replace(self, columns=tuple(roles.resolve(self.selection, df)), trained=True)

    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame:
        # the outcome may be absent when baking new data
        present = [col for col in self.columns if col in df.columns]
        kept = df.dropna(subset=present)
        n_dropped = len(df) - len(kept)
        if n_dropped and n_dropped > len(df) / 2:
            logger.warning("step_naomit dropped %d of %d rows", n_dropped, len(df))
        elif n_dropped:
            logger.debug("step_naomit dropped %d of %d rows", n_dropped, len(df))
        return kept

    def _params(self) -> list[tuple[str, str, object]]:
        return [(col, "checked", True) for col in self.columns]


@dataclass(frozen=True)
class StepImpute(Step):
    """Fill missing values with a training statistic (mean, median or mode).

    The statistic is learned by a :class:`~sklearn.impute.SimpleImputer`; ``mode``
    uses its ``most_frequent`` strategy and also accepts nominal columns, which
    keep their dtype after filling.
    """

    selection: ColumnSelection = ALL_NUMERIC_PREDICTORS
    statistic: Literal["mean", "median", "mode"] = "mean"
    columns: tuple[str, ...] = ()
    imputer: SimpleImputer | None = None

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"impute_{self.statistic}"

    def _frame(self, df: pd.DataFrame) -> pd.DataFrame:
        frame = df.reindex(columns=list(self.columns))
        if self.statistic == "mode":
            frame = frame.astype(object)
            return frame.where(frame.notna(), np.nan)
        return frame.astype(float)

    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        columns = tuple(roles.resolve(self.selection, df))
        if self.statistic != "mode":
            not_numeric = [col for col in columns if not is_numeric_column(df[col])]
            if not_numeric:
                raise ValueError(f"step_impute_{self.statistic} needs numeric columns; got {not_numeric}")
        step = replace(self, columns=columns, trained=True)
        if not columns:
            return step
        strategy = "most_frequent" if self.statistic == "mode" else self.statistic
        imputer = SimpleImputer(strategy=strategy, keep_empty_features=True)
        return replace(step, imputer=imputer.fit(step._frame(df)))

    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame:
        present = [col for col in self.columns if col in df.columns]
        if self.imputer is None or not present:
            return df
        filled = pd.DataFrame(self.imputer.transform(self._frame(df)), index=df.index, columns=list(self.columns))
        return df.assign(**{col: _restore_dtype(filled[col], df[col]).array for col in present})

    def _params(self) -> list[tuple[str, str, object]]:
        if self.imputer is None:
            return []
        return [(col, self.statistic, value) for col, value in zip(self.columns, self.imputer.statistics_, strict=True)]


def _restore_dtype(filled: pd.Series, original: pd.Series) -> pd.Series:
    if is_nominal_column(original):
        return filled.astype(original.dtype)
    return filled.astype(float)


def ordered_levels(values: pd.Series) -> tuple[object, ...]:
    """Observed levels of ``values``: category order for categoricals, ``False < True`` for booleans, sorted otherwise.

    Numbers sort numerically; only a column mixing unorderable types falls back to sorting by text.
    """
    observed = set(values.dropna().unique())
    if pd.api.types.is_bool_dtype(values):
        return tuple(level for level in (False, True) if level in observed)
    if isinstance(values.dtype, pd.CategoricalDtype):
        return tuple(level for level in values.cat.categories if level in observed)
    try:
        return tuple(sorted(observed))
    except TypeError:
        return tuple(sorted(observed, key=str))


@dataclass(frozen=True)
class StepDummy(Step):
    """Expand nominal columns into numeric indicator columns named ``<column>_<level>``.

    Levels are the categories observed in the training table (see
    :func:`ordered_levels`) and are fixed as the categories of a
    :class:`~sklearn.preprocessing.OneHotEncoder`. Reference coding drops the
    first level; ``one_hot=True`` keeps all of them. A level unseen at prep time
    becomes an all-zero indicator row and a missing value becomes ``NaN`` indicators.
    """

    selection: ColumnSelection = ALL_NOMINAL_PREDICTORS
    one_hot: bool = False
    levels: Mapping[str, tuple[object, ...]] = field(default_factory=dict)
    encoder: OneHotEncoder | None = None
    name: ClassVar[str] = "dummy"

    @property
    def encoded(self) -> list[str]:
        """Columns with at least one training level."""
        return [col for col, levels in self.levels.items() if levels]

    def _frame(self, df: pd.DataFrame) -> pd.DataFrame:
        frame = df.reindex(columns=self.encoded).astype(object)
        return frame.where(frame.notna(), np.nan)

    def _encode(self, frame: pd.DataFrame) -> np.ndarray:
        # unknown levels and missing values are all-zero rows for the encoder
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", message="Found unknown categories")
            return self.encoder.transform(frame)

    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        levels = {col: ordered_levels(df[col]) for col in roles.resolve(self.selection, df)}
        step = replace(self, levels=levels, trained=True)
        if not step.encoded:
            return step
        encoder = OneHotEncoder(
            categories=[np.array(levels[col], dtype=object) for col in step.encoded],
            drop=None if self.one_hot else "first",
            handle_unknown="ignore",
            sparse_output=False,
            dtype=float,
        )
        return replace(step, encoder=encoder.fit(step._frame(df)))

    def indicator_levels(self, column: str) -> tuple[object, ...]:
        levels = self.levels[column]
        return levels if self.one_hot else levels[1:]

    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame:
        for col, levels in self.levels.items():
            if col not in df.columns:
                continue
            unseen = sorted({str(v) for v in df[col].dropna().astype(object) if v not in levels})
            if unseen:
                logger.debug("step_dummy: unseen level(s) %s in column '%s' encoded as zeros", unseen, col)
                if on_unknown == "warn":
                    warnings.warn(
                        f"Column '{col}' has level(s) {unseen} not seen during prep; encoded as all-zero indicators",
                        UnknownCategoryAtApplyTime,
                        stacklevel=4,
                    )

        baked = df.drop(columns=[col for col in self.levels if col in df.columns])
        present = [col for col in self.encoded if col in df.columns]
        if self.encoder is None or not present:
            return baked

        frame = self._frame(df)
        encoded = self._encode(frame)
        names = self.encoder.get_feature_names_out()
        indicators: dict[str, np.ndarray] = {}
        start = 0
        for col in self.encoded:
            stop = start + len(self.indicator_levels(col))
            if col in present:
                block = encoded[:, start:stop]
                block[frame[col].isna().to_numpy()] = np.nan
                indicators |= {str(name): block[:, i] for i, name in enumerate(names[start:stop])}
            start = stop
        return baked.assign(**indicators) if indicators else baked

    def _params(self) -> list[tuple[str, str, object]]:
        return [
            (col, "level" if level in self.indicator_levels(col) else "reference", level)
            for col, levels in self.levels.items()
            for level in levels
        ]


@dataclass(frozen=True)
class StepZv(Step):
    """Drop columns with a single distinct non-missing value in the training table."""

    selection: ColumnSelection = ALL_PREDICTORS
    removed: tuple[str, ...] = ()
    name: ClassVar[str] = "zv"

    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        removed = tuple(col for col in roles.resolve(self.selection, df) if df[col].nunique(dropna=True) <= 1)
        if removed:
            logger.debug("step_zv removes zero-variance column(s): %s", ", ".join(removed))
        return replace(self, removed=removed, trained=True)

    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame:
        return df.drop(columns=[col for col in self.removed if col in df.columns])

    def _params(self) -> list[tuple[str, str, object]]:
        return [(col, "removed", True) for col in self.removed]


@dataclass(frozen=True)
class StepNormalize(Step):
    """Center and/or scale numeric columns with the training mean and sample sd (``ddof=1``).

    The statistics live in a fitted :class:`~sklearn.preprocessing.StandardScaler`
    whose scale is switched to the sample sd. Columns whose training standard
    deviation is zero or undefined are centered but not scaled.
    """

    selection: ColumnSelection = ALL_NUMERIC_PREDICTORS
    center: bool = True
    scale: bool = True
    columns: tuple[str, ...] = ()
    scaler: StandardScaler | None = None

    @property
    def name(self) -> str:  # type: ignore[override]
        if self.center and self.scale:
            return "normalize"
        return "center" if self.center else "scale"

    def prep(self, df: pd.DataFrame, roles: Roles) -> Self:
        columns = tuple(roles.resolve(self.selection, df))
        not_numeric = [col for col in columns if not is_numeric_column(df[col])]
        if not_numeric:
            raise ValueError(f"step_{self.name} needs numeric columns; got {not_numeric} (add step_dummy() first)")
        step = replace(self, columns=columns, trained=True)
        if not columns or not (self.center or self.scale):
            return step

        scaler = StandardScaler(with_mean=self.center, with_std=self.scale).fit(df[list(columns)].astype(float))
        if self.scale:
            sd = _sample_sd(scaler)
            # spread within rounding of the mean counts as constant
            tolerance = 10 * np.finfo(float).eps * np.maximum(np.abs(scaler.mean_), 1.0)
            scaler.scale_ = np.where(sd > tolerance, sd, 1.0)
        return replace(step, scaler=scaler)

    def _apply(self, df: pd.DataFrame, *, on_unknown: OnUnknown) -> pd.DataFrame:
        present = [col for col in self.columns if col in df.columns]
        if self.scaler is None or not present:
            return df
        frame = df.reindex(columns=list(self.columns)).astype(float)
        transformed = pd.DataFrame(self.scaler.transform(frame), index=df.index, columns=list(self.columns))
        return df.assign(**{col: transformed[col].to_numpy() for col in present})

    @property
    def means(self) -> dict[str, float]:
        if self.scaler is None or not self.center:
            return {}
        return dict(zip(self.columns, self.scaler.mean_.tolist(), strict=True))

    @property
    def sds(self) -> dict[str, float]:
        if self.scaler is None or not self.scale:
            return {}
        return dict(zip(self.columns, _sample_sd(self.scaler).tolist(), strict=True))

    def _params(self) -> list[tuple[str, str, object]]:
        return [
            *((col, "mean", value) for col, value in self.means.items()),
            *((col, "sd", value) for col, value in self.sds.items()),
        ]


def _sample_sd(scaler: StandardScaler) -> np.ndarray:
    """Sample standard deviation per column from a scaler fitted with the population variance."""
    n = np.broadcast_to(scaler.n_samples_seen_, scaler.var_.shape).astype(float)
    with np.errstate(invalid="ignore", divide="ignore"):
        return np.sqrt(scaler.var_ * n / np.maximum(n - 1, 1))


# --------------------------------------------------------------------------- recipe
@dataclass(frozen=True)
class Recipe:
    """Immutable preprocessing specification.

    Args:
        outcome: Outcome column (``None`` for unsupervised preprocessing).
        predictors: Predictor columns; defaults to every column that is neither
            the outcome nor assigned another role with :meth:`update_role`.
    """

    outcome: str | None = None
    predictors: tuple[str, ...] | None = None
    roles: Mapping[str, str] = field(default_factory=dict)
    steps: tuple[Step, ...] = ()

    def __post_init__(self) -> None:
        if self.predictors is not None and not isinstance(self.predictors, tuple):
            object.__setattr__(self, "predictors", tuple(self.predictors))

    def _add(self, step: Step) -> Recipe:
        return replace(self, steps=(*self.steps, step))

    def update_role(self, *columns: str, new_role: str = "ID") -> Recipe:
        """Keep ``columns`` in baked tables but exclude them from the predictors."""
        return replace(self, roles={**self.roles, **dict.fromkeys(columns, new_role)})

    def step_rm(self, *columns: str) -> Recipe:
        return self._add(StepRm(selection=columns))

    def step_naomit(self, selection: ColumnSelection = ALL_PREDICTORS_AND_OUTCOMES) -> Recipe:
        return self._add(StepNaomit(selection=selection))

    def step_impute_mean(self, selection: ColumnSelection = ALL_NUMERIC_PREDICTORS) -> Recipe:
        return self._add(StepImpute(selection=selection, statistic="mean"))

    def step_impute_median(self, selection: ColumnSelection = ALL_NUMERIC_PREDICTORS) -> Recipe:
        return self._add(StepImpute(selection=selection, statistic="median"))

    def step_impute_mode(self, selection: ColumnSelection = ALL_NOMINAL_PREDICTORS) -> Recipe:
        return self._add(StepImpute(selection=selection, statistic="mode"))

    def step_dummy(self, selection: ColumnSelection = ALL_NOMINAL_PREDICTORS, *, one_hot: bool = False) -> Recipe:
        return self._add(StepDummy(selection=selection, one_hot=one_hot))

    def step_zv(self, selection: ColumnSelection = ALL_PREDICTORS) -> Recipe:
        return self._add(StepZv(selection=selection))

    def step_center(self, selection: ColumnSelection = ALL_NUMERIC_PREDICTORS) -> Recipe:
        return self._add(StepNormalize(selection=selection, center=True, scale=False))

    def step_scale(self, selection: ColumnSelection = ALL_NUMERIC_PREDICTORS) -> Recipe:
        return self._add(StepNormalize(selection=selection, center=False, scale=True))

    def step_normalize(self, selection: ColumnSelection = ALL_NUMERIC_PREDICTORS) -> Recipe:
        return self._add(StepNormalize(selection=selection, center=True, scale=True))

    def input_roles(self, df: pd.DataFrame) -> Roles:
        """Resolve the initial roles against ``df``.

        Raises:
            MissingRequiredColumnError: If the outcome, a declared predictor or a role column is absent.
        """
        if self.outcome is not None and self.outcome not in df.columns:
            raise MissingRequiredColumnError([self.outcome], role="outcome")
        missing_roles = [col for col in self.roles if col not in df.columns]
        if missing_roles:
            raise MissingRequiredColumnError(missing_roles, role="ID")

        if self.predictors is None:
            predictors = tuple(col for col in df.columns if col != self.outcome and col not in self.roles)
        else:
            missing = [col for col in self.predictors if col not in df.columns]
            if missing:
                raise MissingRequiredColumnError(missing, role="predictor")
            predictors = self.predictors
        return Roles(outcome=self.outcome, predictors=predictors, others=dict(self.roles))

    def prep(self, train: pd.DataFrame) -> PreppedRecipe:
        """Learn all step parameters from ``train`` and return the frozen result."""
        roles = self.input_roles(train)
        keep = {*roles.predictors, *roles.others, *([self.outcome] if self.outcome is not None else [])}
        current = train.loc[:, [col for col in train.columns if col in keep]]
        input_roles = roles

        trained: list[Step] = []
        for step in self.steps:
            fitted = step.prep(current, roles)
            logger.debug("Prepped step_%s: %s", fitted.name, fitted.tidy().to_dict("records"))
            current = fitted.bake(current)
            roles = roles.after(current)
            trained.append(fitted)

        return PreppedRecipe(
            recipe=self,
            steps=tuple(trained),
            input_roles=input_roles,
            roles=roles,
            training=current,
        )


@dataclass(frozen=True, eq=False)
class PreppedRecipe:
    """A recipe whose step parameters were learned from one training table.

    Attributes:
        recipe: The specification that was prepped.
        steps: Trained steps holding their parameters.
        input_roles: Roles of the raw columns (what :meth:`bake` requires).
        roles: Roles of the baked columns.
        training: The baked training table (see :meth:`juice`).
    """

    recipe: Recipe
    steps: tuple[Step, ...]
    input_roles: Roles
    roles: Roles
    training: pd.DataFrame

    @property
    def outcome(self) -> str | None:
        return self.roles.outcome

    @property
    def predictors(self) -> list[str]:
        """Predictor columns of the baked table."""
        return list(self.roles.predictors)

    def juice(self) -> pd.DataFrame:
        """Baked training table."""
        return self.training

    def bake(self, df: pd.DataFrame, *, on_unknown: OnUnknown = "ignore") -> pd.DataFrame:
        """Apply the learned transformation to ``df``.

        Every raw predictor seen at prep time must be present; the outcome and
        role columns are optional (new data for prediction may lack them).

        Args:
            df: Table to transform.
            on_unknown: ``"warn"`` emits :class:`UnknownCategoryAtApplyTime` for
                category levels unseen at prep time; ``"ignore"`` stays silent.
        """
        missing = [col for col in self.input_roles.predictors if col not in df.columns]
        if missing:
            raise MissingRequiredColumnError(missing, role="predictor")

        keep = {*self.input_roles.predictors, *self.input_roles.others, self.input_roles.outcome}
        current = df.loc[:, [col for col in df.columns if col in keep]]
        for step in self.steps:
            current = step.bake(current, on_unknown=on_unknown)
        return current

    def params(self) -> pd.DataFrame:
        """Parameters of all steps as one tidy table (``number``, ``step``, ``column``, ``parameter``, ``value``)."""
        frames = [
            step.tidy().assign(number=number, step=step.name)
            for number, step in enumerate(self.steps, start=1)
        ]
        columns = ["number", "step", "column", "parameter", "value"]
        if not frames:
            return pd.DataFrame(columns=columns)
        return pd.concat(frames, ignore_index=True).loc[:, columns]


def prep(recipe: Recipe, train: pd.DataFrame) -> PreppedRecipe:
    """Learn ``recipe`` on ``train``."""
    return recipe.prep(train)


def bake(prepped: PreppedRecipe, df: pd.DataFrame, *, on_unknown: OnUnknown = "ignore") -> pd.DataFrame:
    """Apply a prepped recipe to ``df``."""
    return prepped.bake(df, on_unknown=on_unknown)


__all__ = [
    "ALL_NOMINAL_PREDICTORS",
    "ALL_NUMERIC_PREDICTORS",
    "ALL_OUTCOMES",
    "ALL_PREDICTORS",
    "ALL_PREDICTORS_AND_OUTCOMES",
    "PreppedRecipe",
    "Recipe",
    "Roles",
    "Selector",
    "Step",
    "StepDummy",
    "StepImpute",
    "StepNaomit",
    "StepNormalize",
    "StepRm",
    "StepZv",
    "bake",
    "ordered_levels",
    "prep",
]
