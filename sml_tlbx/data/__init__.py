"""Data module for dataset classes."""

from .chd_columns import ChdColumn
from .chd_columns import ChdColumn as ChdCol
from .chd_dataset import ChdDataset
from .io import read_table, write_table
from .simulate import simulate_chd
from .utils import count_proportions, skim


__all__ = [
    "ChdCol",
    "ChdColumn",
    "ChdDataset",
    "count_proportions",
    "read_table",
    "simulate_chd",
    "skim",
    "write_table",
]
