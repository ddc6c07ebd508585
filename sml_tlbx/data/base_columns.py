"""Base column definitions and metadata structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal


ColumnKind = Literal["numeric", "category", "bool", "string"]


@dataclass(frozen=True)
class ColumnMetadata:
    """Metadata for a dataset column.

    Attributes:
        cleaned_name: Standardized column name used in DataFrames.
        kind: Semantic column type used when reading files (``numeric``, ``category``, ``bool``, ``string``).
        pretty_name: Human-readable name for use in plots and visualizations.
        unit: Optional measurement unit appended to axis labels.
    """

    original_name: str
    """Column name as it appears in the raw workshop file."""
    cleaned_name: str
    kind: ColumnKind
    pretty_name: str
    unit: str | None = None


class BaseColumn(StrEnum):
    """Base class for dataset column enums.

    All derived column enums must define a TARGET member to specify
    the outcome variable for the dataset.

    Subclasses must implement:
    - metadata(): Return ColumnMetadata for each enum member
    - identifier_columns(): Return list of identifier column names
    """

    TARGET: str

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement metadata() method")

    @classmethod
    def identifier_columns(cls) -> list[str]:
        """Get identifier column names.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{cls.__name__} must implement identifier_columns() method")

    @classmethod
    def column_types(cls) -> dict[str, ColumnKind]:
        """Mapping from column name to semantic kind, suitable for ``read_table(column_types=...)``."""
        return {str(col): col.metadata().kind for col in cls}

    @classmethod
    def numeric_columns(cls) -> list[str]:
        """Get all numeric column names (identifiers excluded)."""
        ids = set(cls.identifier_columns())
        return [str(col) for col in cls if col.metadata().kind == "numeric" and col not in ids]

    @classmethod
    def feature_columns(cls, *, exclude_target: bool = False) -> list[str]:
        """Get all predictor column names (identifiers excluded).

        Args:
            exclude_target: If True, exclude the outcome column.
        """
        ids = set(cls.identifier_columns())
        features = [str(col) for col in cls if col not in ids]
        if exclude_target:
            features = list(filter(lambda f: f != cls.TARGET, features))
        return features

    @property
    def pretty_name(self) -> str:
        """Get the human-readable name for plots and visualizations."""
        meta = self.metadata()
        return f"{meta.pretty_name} ({meta.unit})" if meta.unit else meta.pretty_name

    @property
    def original_name(self) -> str:
        """Get the original column name from the raw file."""
        return self.metadata().original_name

    @property
    def kind(self) -> ColumnKind:
        """Get the semantic column kind."""
        return self.metadata().kind
