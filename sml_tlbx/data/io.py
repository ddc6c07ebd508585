"""Tabular file I/O with schema inference and explicit type overrides.

Readers are dispatched on the file suffix and delegate to pandas; the header row
provides column names and pandas infers the per-column types. ``column_types``
lets the caller force a column to ``bool``, ``category``, ``numeric`` or
``string`` afterwards (the equivalent of ``as.logical()`` / ``as.factor()`` in
the workshop scripts).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

import numpy as np
import pandas as pd

from ..errors import MissingRequiredColumnError
from .base_columns import ColumnKind


logger = logging.getLogger(__name__)

_DELIMITED = {".csv": ",", ".tsv": "\t", ".txt": "\t", ".tab": "\t"}
_EXCEL = {".xlsx", ".xls"}
_PARQUET = {".parquet", ".pq"}
_PICKLE = {".pkl", ".pickle"}

# R-style logical spellings accepted by as.logical()
_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "f", "no", "n", "0"}


def _suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in {*_DELIMITED, *_EXCEL, *_PARQUET, *_PICKLE}:
        raise ValueError(
            f"Unsupported table format '{suffix}' for {path}. "
            f"Use one of: {', '.join(sorted({*_DELIMITED, *_EXCEL, *_PARQUET, *_PICKLE}))}.",
        )
    return suffix


def read_table(
    path: str | Path,
    *,
    column_types: Mapping[str, ColumnKind] | None = None,
    sheet_name: str | int = 0,
    delimiter: str | None = None,
) -> pd.DataFrame:
    """Read a table from CSV, TSV, Excel, Parquet or pickle.

    Args:
        path: File to read; the suffix selects the reader.
        column_types: Optional per-column type overrides applied after reading.
        sheet_name: Excel sheet to read (ignored for other formats).
        delimiter: Override the delimiter for text formats.

    Returns:
        Freshly read DataFrame.
    """
    path = Path(path)
    suffix = _suffix(path)

    if suffix in _DELIMITED:
        df = pd.read_csv(path, sep=delimiter or _DELIMITED[suffix])
    elif suffix in _EXCEL:
        df = pd.read_excel(path, sheet_name=sheet_name)
    elif suffix in _PARQUET:
        df = pd.read_parquet(path)
    else:
        df = pd.read_pickle(path)

    logger.info("Read %d rows x %d columns from %s", df.shape[0], df.shape[1], path)
    return apply_column_types(df, column_types) if column_types else df


def write_table(df: pd.DataFrame, path: str | Path, *, delimiter: str | None = None) -> Path:
    """Write ``df`` in the format implied by the suffix of ``path`` (without the index).

    Returns:
        The path written to.
    """
    path = Path(path)
    suffix = _suffix(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix in _DELIMITED:
        df.to_csv(path, sep=delimiter or _DELIMITED[suffix], index=False)
    elif suffix in _EXCEL:
        df.to_excel(path, index=False)
    elif suffix in _PARQUET:
        df.to_parquet(path, index=False)
    else:
        df.to_pickle(path)

    logger.info("Wrote %d rows x %d columns to %s", df.shape[0], df.shape[1], path)
    return path


def as_logical(values: pd.Series) -> pd.Series:
    """Coerce a Series to pandas' nullable boolean dtype.

    Accepts booleans, 0/1 numbers and the usual textual spellings
    (``TRUE``/``FALSE``/``T``/``F``/``yes``/``no``). Anything else becomes ``<NA>``.
    """
    if pd.api.types.is_bool_dtype(values):
        return values.astype("boolean")
    if pd.api.types.is_numeric_dtype(values):
        return values.map(lambda v: pd.NA if pd.isna(v) or v not in (0, 1) else bool(v)).astype("boolean")

    def parse(value: object) -> object:
        if value is None or (isinstance(value, float) and np.isnan(value)):
            return pd.NA
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return pd.NA

    return values.map(parse).astype("boolean")


def apply_column_types(df: pd.DataFrame, column_types: Mapping[str, ColumnKind]) -> pd.DataFrame:
    """Return a copy of ``df`` with the requested columns coerced to the given kinds.

    Raises:
        MissingRequiredColumnError: If a column named in ``column_types`` is absent.
        ValueError: If an unknown kind is requested.
    """
    missing = [col for col in column_types if col not in df.columns]
    if missing:
        raise MissingRequiredColumnError(missing, role="typed")

    converters = {
        "bool": as_logical,
        "category": lambda s: s.astype("category"),
        "numeric": lambda s: pd.to_numeric(s, errors="coerce"),
        "string": lambda s: s.astype("string"),
    }
    unknown = {kind for kind in column_types.values() if kind not in converters}
    if unknown:
        raise ValueError(f"Unknown column kind(s) {sorted(unknown)}; use one of {sorted(converters)}.")

    return df.assign(**{col: converters[kind](df[col]) for col, kind in column_types.items()})


__all__ = ["apply_column_types", "as_logical", "read_table", "write_table"]
