"""Statistical machine learning toolbox: data handling, exploratory analysis and the modeling workflow."""

from .data import ChdCol, ChdDataset
from .errors import SmlTlbxError
from .modeling import (
    LinearReg,
    LogisticReg,
    RandForest,
    Recipe,
    Workflow,
    fit_resamples,
    initial_split,
    last_fit,
    tune_grid,
    vfold_cv,
)


__all__ = [
    "ChdCol",
    "ChdDataset",
    "LinearReg",
    "LogisticReg",
    "RandForest",
    "Recipe",
    "SmlTlbxError",
    "Workflow",
    "fit_resamples",
    "initial_split",
    "last_fit",
    "tune_grid",
    "vfold_cv",
]
