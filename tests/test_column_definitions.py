"""Tests for column definition modules."""

import pytest

from sml_tlbx.data.base_columns import ColumnMetadata
from sml_tlbx.data.chd_columns import ChdColumn
from sml_tlbx.data.utils import parse_column_docstrings


class TestColumnMetadata:
    """Test ColumnMetadata dataclass."""

    def test_column_metadata_creation(self) -> None:
        """Test creating column metadata."""
        metadata = ColumnMetadata(
            original_name="SBP",
            cleaned_name="sbp",
            kind="numeric",
            pretty_name="Systolic blood pressure",
            unit="mmHg",
        )
        assert metadata.original_name == "SBP"
        assert metadata.cleaned_name == "sbp"
        assert metadata.kind == "numeric"
        assert metadata.unit == "mmHg"

    def test_column_metadata_is_frozen(self) -> None:
        """Test that ColumnMetadata is immutable."""
        metadata = ColumnMetadata("Test", "test", "string", "Test")
        with pytest.raises(AttributeError):
            metadata.original_name = "Changed"  # type: ignore[misc]


class TestChdColumn:
    """Test ChdColumn enum."""

    def test_target_column_exists(self) -> None:
        """Test that TARGET column is defined."""
        assert ChdColumn.TARGET.value == "chdfate"
        assert ChdColumn.CHDFATE is ChdColumn.TARGET

    def test_enum_values_are_snake_case(self) -> None:
        """Test that all enum values are valid snake_case identifiers."""
        for col in ChdColumn:
            assert col.value.islower()
            assert " " not in col.value

    def test_every_column_has_metadata(self) -> None:
        """Test that metadata is defined for every member."""
        for col in ChdColumn:
            assert isinstance(col.metadata(), ColumnMetadata)
            assert col.metadata().cleaned_name == col.value

    def test_pretty_name_property(self) -> None:
        """Test pretty_name appends the unit when present."""
        assert ChdColumn.SBP.pretty_name == "Systolic blood pressure (mmHg)"
        assert ChdColumn.SEX.pretty_name == "Sex"

    def test_column_types(self) -> None:
        """Test column_types maps the outcome to bool and sex to category."""
        types = ChdColumn.column_types()
        assert types["chdfate"] == "bool"
        assert types["sex"] == "category"
        assert types["scl"] == "numeric"
        assert set(types) == {col.value for col in ChdColumn}

    def test_numeric_columns_exclude_identifiers(self) -> None:
        """Test numeric_columns leaves out the id and follow-up columns."""
        numeric = ChdColumn.numeric_columns()
        assert "sbp" in numeric
        assert "id" not in numeric
        assert "followup" not in numeric
        assert "sex" not in numeric

    def test_feature_columns(self) -> None:
        """Test feature_columns with and without the target."""
        assert "chdfate" in ChdColumn.feature_columns()
        assert "chdfate" not in ChdColumn.feature_columns(exclude_target=True)
        assert "id" not in ChdColumn.feature_columns()

    def test_measurement_columns(self) -> None:
        """Test the continuous measurements used for dimension reduction."""
        assert ChdColumn.measurement_columns() == ["sbp", "dbp", "scl", "age", "bmi"]


def test_parse_column_docstrings() -> None:
    """The class docstring lists every column with its type."""
    table = parse_column_docstrings(ChdColumn.__doc__)
    assert set(table["column"]) == {col.value for col in ChdColumn}
    assert table.set_index("column").loc["chdfate", "type"] == "bool"
