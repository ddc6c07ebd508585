"""Dataset class for the workshop CHD cohort."""

from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import pandas as pd

from sml_tlbx.utils.paths import get_dataset_path

from .base_columns import ColumnKind
from .base_dataset import BaseDataset
from .chd_columns import ChdColumn as Col
from .io import apply_column_types, read_table
from .simulate import simulate_chd


class ChdDataset(BaseDataset):
    """Loading and light cleaning for the coronary heart disease (CHD) cohort.

    **Example workflow**:
    >>> from sml_tlbx.data import ChdDataset
    >>> from sml_tlbx.modeling import RandForest, Recipe, Workflow, last_fit
    >>> ds = ChdDataset.from_file(complete_cases=True)
    >>> split = ds.initial_split(prop=0.9, seed=123)
    >>> rec = (
    ...     Recipe(outcome=ds.Col.TARGET)
    ...     .update_role(ds.Col.ID, ds.Col.FOLLOWUP)
    ...     .step_dummy()
    ...     .step_zv()
    ...     .step_normalize()
    ... )
    >>> final = last_fit(Workflow(rec, RandForest(trees=500, seed=1)), split, ds.df)
    >>> final.collect_metrics()
    """

    Col = Col

    @classmethod
    def from_file(
        cls,
        path: str | Path | None = None,
        *,
        dataset: Literal["chd_full", "chd_500"] = "chd_500",
        column_types: Mapping[str, ColumnKind] | None = None,
        complete_cases: bool = False,
    ) -> "ChdDataset":
        """Load the CHD cohort from a tabular file.

        - Apply the declared column kinds (``chdfate`` as logical, ``sex`` as factor)
        - Optionally drop rows with any missing value (``na.omit``)

        Args:
            path: File to read. Defaults to ``dataset`` inside the data directory.
            dataset: Known dataset key used when ``path`` is not given.
            column_types: Overrides merged over :meth:`ChdColumn.column_types`.
            complete_cases: If True, drop rows with missing values.

        Returns:
            ChdDataset instance with loaded data
        """
        path = get_dataset_path(dataset) if path is None else Path(path)
        df = read_table(path)

        types = {col: kind for col, kind in Col.column_types().items() if col in df.columns}
        types.update(column_types or {})
        df = cls._convert_data_types(df, types)

        if complete_cases:
            df = df.dropna().reset_index(drop=True)

        return cls(df=df)

    @classmethod
    def simulated(cls, n: int = 500, *, seed: int | None = None, **kwargs: float) -> "ChdDataset":
        """Dataset backed by :func:`~sml_tlbx.data.simulate.simulate_chd`."""
        return cls(df=simulate_chd(n, seed=seed, **kwargs))

    @staticmethod
    def _convert_data_types(df: pd.DataFrame, types: Mapping[str, ColumnKind]) -> pd.DataFrame:
        """Set data types for each column and fix the sex level order (Female < Male)."""
        df = apply_column_types(df, types)
        if Col.SEX in df.columns and isinstance(df[Col.SEX].dtype, pd.CategoricalDtype):
            levels = sorted(df[Col.SEX].cat.categories)
            df = df.assign(**{str(Col.SEX): df[Col.SEX].cat.set_categories(levels)})
        return df
