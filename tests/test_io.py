"""Tests for table reading/writing and type coercion."""

import pandas as pd
import pytest

from sml_tlbx.data.io import apply_column_types, as_logical, read_table, write_table
from sml_tlbx.errors import MissingRequiredColumnError


@pytest.mark.parametrize("suffix", [".csv", ".tsv", ".pkl"])
def test_write_then_read_preserves_values(tmp_path, suffix) -> None:
    """Delimited and pickle formats read back the same values (without an index column)."""
    df = pd.DataFrame({"x": [1.5, 2.5, None], "label": ["a", "b", "c"]})
    path = write_table(df, tmp_path / f"table{suffix}")

    back = read_table(path)
    assert list(back.columns) == ["x", "label"]
    pd.testing.assert_series_equal(back["x"], df["x"])


def test_unsupported_suffix(tmp_path) -> None:
    """Unknown formats are rejected with the supported list."""
    with pytest.raises(ValueError, match="Unsupported table format"):
        read_table(tmp_path / "table.json")


def test_read_missing_file(tmp_path) -> None:
    """A missing file surfaces pandas' FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        read_table(tmp_path / "nope.csv")


def test_as_logical_accepts_r_spellings() -> None:
    """TRUE/FALSE/T/F strings become booleans; other values become missing."""
    result = as_logical(pd.Series(["TRUE", "F", "t", "false", "maybe", None]))
    assert str(result.dtype) == "boolean"
    assert result.tolist()[:4] == [True, False, True, False]
    assert result.isna().tolist()[4:] == [True, True]


def test_as_logical_numeric() -> None:
    """0/1 numbers are accepted."""
    assert as_logical(pd.Series([0, 1, 1])).tolist() == [False, True, True]


def test_column_types_applied_on_read(tmp_path) -> None:
    """column_types coerces after reading."""
    path = tmp_path / "chd.csv"
    pd.DataFrame({"sex": ["Male", "Female"], "chdfate": ["TRUE", "FALSE"], "sbp": ["120", "x"]}).to_csv(
        path,
        index=False,
    )
    df = read_table(path, column_types={"sex": "category", "chdfate": "bool", "sbp": "numeric"})

    assert isinstance(df["sex"].dtype, pd.CategoricalDtype)
    assert df["chdfate"].tolist() == [True, False]
    assert df["sbp"].iloc[0] == 120
    assert pd.isna(df["sbp"].iloc[1])


def test_apply_column_types_errors() -> None:
    """Absent columns and unknown kinds are reported."""
    df = pd.DataFrame({"a": [1]})
    with pytest.raises(MissingRequiredColumnError, match="b"):
        apply_column_types(df, {"b": "numeric"})
    with pytest.raises(ValueError, match="Unknown column kind"):
        apply_column_types(df, {"a": "date"})  # type: ignore[dict-item]
