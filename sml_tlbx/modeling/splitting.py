"""Train/test splitting with optional stratification.

The split is positional: a :class:`Split` stores two sorted, disjoint arrays of
row positions that together cover the table. Stratified splits are drawn
independently within each level of the strata column (rows with a missing
strata value form their own level) and then concatenated, so every level keeps
its share in both sides up to rounding.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..errors import InvalidFractionError, MissingRequiredColumnError, StratifyColumnError


logger = logging.getLogger(__name__)

# floor(0.29 * 100) would otherwise give 28
_FLOOR_EPS = 1e-9


@dataclass(frozen=True, eq=False)
class Split:
    """Disjoint training/testing row positions of one table.

    Attributes:
        train_idx: Sorted positional indices of the training rows.
        test_idx: Sorted positional indices of the testing rows.
        prop: Requested training fraction.
        strata: Name of the stratification column (``None`` if unstratified).
    """

    train_idx: np.ndarray
    test_idx: np.ndarray
    prop: float
    strata: str | None = None

    @property
    def n(self) -> int:
        return len(self.train_idx) + len(self.test_idx)

    def training(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rows of ``df`` on the training side (original index preserved)."""
        self._check_table(df)
        return df.iloc[self.train_idx]

    def testing(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rows of ``df`` on the testing side (original index preserved)."""
        self._check_table(df)
        return df.iloc[self.test_idx]

    def _check_table(self, df: pd.DataFrame) -> None:
        if len(df) != self.n:
            raise ValueError(f"Split was drawn for {self.n} rows but the table has {len(df)} rows.")

    def __repr__(self) -> str:
        return f"<Training/Testing/Total>\n<{len(self.train_idx)}/{len(self.test_idx)}/{self.n}>"


def make_strata(values: pd.Series, *, breaks: int = 4, name: str | None = None) -> np.ndarray:
    """Integer stratum codes for ``values``.

    Numeric (non-boolean) columns with more than ``breaks`` distinct values are
    binned into ``breaks`` quantile bins first. Missing values get a code of their own.

    Raises:
        StratifyColumnError: If all values are missing or only one level is observed.
    """
    name = name or str(values.name)
    if values.isna().all():
        raise StratifyColumnError(name, "all values are missing")
    if values.nunique(dropna=True) < 2:  # noqa: PLR2004
        raise StratifyColumnError(name, f"only one observed level ({values.dropna().iloc[0]!r})")

    if (
        pd.api.types.is_numeric_dtype(values)
        and not pd.api.types.is_bool_dtype(values)
        and values.nunique(dropna=True) > breaks
    ):
        values = pd.qcut(values, q=breaks, duplicates="drop")

    codes, _ = pd.factorize(values, sort=True, use_na_sentinel=False)
    return codes


def initial_split(
    df: pd.DataFrame,
    prop: float = 0.75,
    *,
    strata: str | None = None,
    seed: int | None = None,
    breaks: int = 4,
) -> Split:
    """Randomly split the rows of ``df`` into a training and a testing set.

    Args:
        df: Table to split.
        prop: Fraction of rows assigned to training, strictly between 0 and 1.
            Within every stratum ``floor(prop * n_stratum)`` rows go to training.
        strata: Optional column whose level proportions are preserved on both sides.
        seed: Seed for :func:`numpy.random.default_rng`; identical seeds give identical splits.
        breaks: Number of quantile bins used when ``strata`` is numeric.

    Returns:
        Split with sorted, disjoint row positions covering ``df``.

    Raises:
        InvalidFractionError: If ``prop`` is not in (0, 1).
        MissingRequiredColumnError: If ``strata`` is not a column of ``df``.
        StratifyColumnError: If ``strata`` is unusable for stratification.
    """
    if not isinstance(prop, numbers.Real) or not 0 < prop < 1:
        raise InvalidFractionError(prop)

    rng = np.random.default_rng(seed)
    if strata is None:
        groups = [np.arange(len(df))]
    else:
        if strata not in df.columns:
            raise MissingRequiredColumnError([strata], role="strata")
        codes = make_strata(df[strata], breaks=breaks, name=str(strata))
        groups = [np.flatnonzero(codes == code) for code in np.unique(codes)]

    train_parts: list[np.ndarray] = []
    test_parts: list[np.ndarray] = []
    for rows in groups:
        shuffled = rng.permutation(rows)
        n_train = math.floor(prop * len(rows) + _FLOOR_EPS)
        train_parts.append(shuffled[:n_train])
        test_parts.append(shuffled[n_train:])

    split = Split(
        train_idx=np.sort(np.concatenate(train_parts)),
        test_idx=np.sort(np.concatenate(test_parts)),
        prop=float(prop),
        strata=None if strata is None else str(strata),
    )
    logger.info(
        "Split %d rows into %d training / %d testing (prop=%.2f, strata=%s)",
        split.n,
        len(split.train_idx),
        len(split.test_idx),
        prop,
        split.strata,
    )
    return split


def training(split: Split, df: pd.DataFrame) -> pd.DataFrame:
    """Training rows of ``df`` for ``split``."""
    return split.training(df)


def testing(split: Split, df: pd.DataFrame) -> pd.DataFrame:
    """Testing rows of ``df`` for ``split``."""
    return split.testing(df)


__all__ = ["Split", "initial_split", "make_strata", "testing", "training"]
