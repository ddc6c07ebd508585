"""Exception taxonomy shared by the modeling workflow.

Every error carries the offending column name or value in its message so the
input can be fixed and the analysis re-run. Domain errors also subclass the
closest built-in exception, so ``except ValueError`` keeps working for callers
that do not know about this module.
"""

from __future__ import annotations

from collections.abc import Iterable


class SmlTlbxError(Exception):
    """Base class for all toolbox errors."""


class InvalidFractionError(SmlTlbxError, ValueError):
    """Training fraction outside the open interval (0, 1)."""

    def __init__(self, prop: float) -> None:
        self.prop = prop
        super().__init__(f"Split fraction must lie strictly between 0 and 1, got prop={prop!r}.")


class StratifyColumnError(SmlTlbxError, ValueError):
    """Stratification column is unusable (entirely missing or a single level)."""

    def __init__(self, column: str, reason: str) -> None:
        self.column = column
        super().__init__(f"Cannot stratify on column '{column}': {reason}.")


class SingularFitError(SmlTlbxError, ValueError):
    """Linear regression design matrix is rank-deficient."""

    def __init__(self, aliased: Iterable[str], rank: int, n_columns: int) -> None:
        self.aliased = list(aliased)
        super().__init__(
            f"Design matrix is singular (rank {rank} < {n_columns} columns); "
            f"perfectly collinear predictors: {', '.join(self.aliased) or '<unknown>'}.",
        )


class MissingRequiredColumnError(SmlTlbxError, KeyError):
    """A declared predictor, outcome or strata column is absent from the table."""

    def __init__(self, columns: Iterable[str], role: str = "required") -> None:
        self.columns = list(columns)
        self.role = role
        super().__init__(f"Missing {role} column(s): {', '.join(map(str, self.columns))}.")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class MetricUndefinedError(SmlTlbxError, ValueError):
    """Metric cannot be computed for the given truth/estimate pair."""

    def __init__(self, metric: str, reason: str) -> None:
        self.metric = metric
        super().__init__(f"Metric '{metric}' is undefined: {reason}.")


class InvalidHyperparameterError(SmlTlbxError, ValueError):
    """Hyperparameter outside its valid range or left as an unresolved ``tune()`` placeholder."""

    def __init__(self, name: str, value: object, expected: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid hyperparameter {name}={value!r}: expected {expected}.")


class InvalidOutcomeError(SmlTlbxError, ValueError):
    """Outcome column type does not match the requested model kind."""

    def __init__(self, outcome: str, reason: str) -> None:
        self.outcome = outcome
        super().__init__(f"Outcome '{outcome}' {reason}.")


class NotFittedError(SmlTlbxError, ValueError):
    """Results requested before the object was fitted or prepped."""


class UnknownCategoryAtApplyTime(UserWarning):
    """Category level seen at bake time but not at prep time.

    Unseen levels are encoded as an all-zero indicator row. This warning is only
    emitted when baking with ``on_unknown="warn"``; by default it stays silent.
    """


__all__ = [
    "InvalidFractionError",
    "InvalidHyperparameterError",
    "InvalidOutcomeError",
    "MetricUndefinedError",
    "MissingRequiredColumnError",
    "NotFittedError",
    "SingularFitError",
    "SmlTlbxError",
    "StratifyColumnError",
    "UnknownCategoryAtApplyTime",
]
