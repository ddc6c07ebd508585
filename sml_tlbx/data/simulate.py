"""Synthetic stand-in for the workshop CHD cohort.

The real cohort file is not redistributed with the package; ``simulate_chd``
produces a table with the same columns, plausible marginal distributions and an
outcome that depends on the clinical measurements, so the whole workflow can be
exercised (and tested) without it.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from .chd_columns import ChdColumn as Col


def simulate_chd(
    n: int = 500,
    *,
    seed: int | None = None,
    positive_rate: float = 0.1,
    missing_rate: float = 0.0,
) -> pd.DataFrame:
    """Simulate a CHD-like cohort.

    Args:
        n: Number of participants (rows).
        seed: Seed for :func:`numpy.random.default_rng`.
        positive_rate: Share of participants with ``chdfate == True``. The outcome
            is obtained by thresholding a noisy risk score at its
            ``1 - positive_rate`` quantile, so the realised share is exact up to rounding.
        missing_rate: Probability of blanking each measurement value (``sbp``, ``dbp``,
            ``scl``, ``bmi``) to exercise missing-value handling.

    Returns:
        DataFrame with the columns of :class:`ChdColumn`.
    """
    if not 0 < positive_rate < 1:
        raise ValueError(f"positive_rate must lie in (0, 1), got {positive_rate}")
    if not 0 <= missing_rate < 1:
        raise ValueError(f"missing_rate must lie in [0, 1), got {missing_rate}")

    rng = np.random.default_rng(seed)
    male = rng.random(n) < 0.45
    age = rng.uniform(30, 68, n).round()
    sbp = (rng.normal(130, 20, n) + 0.6 * (age - 50)).clip(80, 260).round()
    dbp = (0.45 * sbp + rng.normal(23, 8, n)).clip(50, 150).round()
    scl = rng.normal(230, 42, n).clip(110, 560).round()
    bmi = (rng.normal(25.5, 4, n) + 0.7 * male).clip(15, 55).round(1)

    risk = (
        0.06 * (age - 50)
        + 0.025 * (sbp - 130)
        + 0.01 * (scl - 230)
        + 0.05 * (bmi - 25.5)
        + 0.8 * male
        + rng.logistic(0, 1, n)
    )
    n_pos = int(round(positive_rate * n))
    order = np.argsort(-risk, kind="stable")
    chdfate = np.zeros(n, dtype=bool)
    chdfate[order[:n_pos]] = True

    followup = np.where(
        chdfate,
        rng.uniform(30, 10_000, n),
        rng.uniform(5_000, 11_000, n),
    ).round()

    df = pd.DataFrame(
        {
            Col.ID: np.arange(1, n + 1),
            Col.SEX: pd.Categorical(np.where(male, "Male", "Female"), categories=["Female", "Male"]),
            Col.SBP: sbp,
            Col.DBP: dbp,
            Col.SCL: scl,
            Col.AGE: age,
            Col.BMI: bmi,
            Col.MONTH: rng.integers(1, 13, n),
            Col.FOLLOWUP: followup,
            Col.TARGET: chdfate,
        },
    ).rename(columns=str)

    if missing_rate > 0:
        for col in (Col.SBP, Col.DBP, Col.SCL, Col.BMI):
            df.loc[rng.random(n) < missing_rate, col] = np.nan

    return df


__all__ = ["simulate_chd"]
