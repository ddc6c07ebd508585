"""Utility helpers for dataset reporting and metadata."""

from __future__ import annotations

import pandas as pd


def skim(df: pd.DataFrame) -> pd.DataFrame:
    """Compact per-column summary of a table (``skimr::skim`` style).

    Every column gets its type, the number of missing values and the complete rate.
    Numeric columns additionally get mean, standard deviation and the five-number
    summary; other columns get the number of distinct levels and the most frequent ones.

    Returns:
        One row per column of ``df``, in column order.
    """
    rows: list[dict[str, object]] = []
    n = len(df)
    for col in df.columns:
        values = df[col]
        n_missing = int(values.isna().sum())
        row: dict[str, object] = {
            "column": col,
            "type": _skim_type(values),
            "n_missing": n_missing,
            "complete_rate": 1 - n_missing / n if n else float("nan"),
        }
        if row["type"] == "numeric":
            q = values.quantile([0, 0.25, 0.5, 0.75, 1.0])
            row |= {
                "mean": values.mean(),
                "sd": values.std(),
                "p0": q.iloc[0],
                "p25": q.iloc[1],
                "p50": q.iloc[2],
                "p75": q.iloc[3],
                "p100": q.iloc[4],
            }
        else:
            counts = values.value_counts(dropna=True)
            row |= {
                "n_unique": int(counts.size),
                "top_counts": ", ".join(f"{level}: {count}" for level, count in counts.head(4).items()),
            }
        rows.append(row)
    return pd.DataFrame(rows)


def _skim_type(values: pd.Series) -> str:
    if pd.api.types.is_bool_dtype(values):
        return "logical"
    if isinstance(values.dtype, pd.CategoricalDtype):
        return "factor"
    if pd.api.types.is_numeric_dtype(values):
        return "numeric"
    return "character"


def count_proportions(df: pd.DataFrame, *columns: str, normalize_within: str | None = None) -> pd.DataFrame:
    """Count rows per combination of ``columns`` and add their proportions.

    Args:
        df: Input table.
        *columns: Grouping columns (missing values form their own group).
        normalize_within: Optional column among ``columns``; proportions are then
            computed within each of its levels instead of over the whole table.

    Returns:
        DataFrame with the grouping columns, ``n`` and ``prop``.
    """
    if not columns:
        raise ValueError("count_proportions needs at least one column")
    if normalize_within is not None and normalize_within not in columns:
        raise ValueError(f"normalize_within='{normalize_within}' must be one of the grouping columns {columns}")

    counts = df.groupby(list(columns), dropna=False, observed=True).size().rename("n").reset_index()
    if normalize_within is None:
        return counts.assign(prop=counts["n"] / counts["n"].sum())
    totals = counts.groupby(normalize_within, dropna=False, observed=True)["n"].transform("sum")
    return counts.assign(prop=counts["n"] / totals)


def parse_column_docstrings(doc: str | None) -> pd.DataFrame:
    """Parse column docstrings into a structured table.

    Args:
        doc: Docstring containing lines in the format
            ``- ``column``: dtype - description``.

    Returns:
        DataFrame with columns ``column``, ``type``, and ``description``.
    """
    rows: list[dict[str, str]] = []
    for raw_line in (doc or "").splitlines():
        line = raw_line.strip()
        if not line.startswith("- ``") or " - " not in line:
            continue
        left, desc = line.split(" - ", 1)
        name_part, dtype_part = left.split(": ", 1)
        name = name_part.replace("- ``", "").replace("``", "").strip()
        rows.append(
            {"column": name, "type": dtype_part.strip(), "description": desc.strip()},
        )
    return pd.DataFrame(rows)


__all__ = ["count_proportions", "parse_column_docstrings", "skim"]
