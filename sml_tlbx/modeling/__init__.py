"""Split -> preprocess -> fit -> evaluate workflow, with resampling and grid search."""

from .metrics import MetricSet, metric_set, roc_curve, score
from .models import (
    FittedModel,
    LinearReg,
    LogisticReg,
    ModelKind,
    ModelSpec,
    RandForest,
    augment,
    fit_model,
    make_spec,
    predict,
    tune,
)
from .recipes import (
    ALL_NOMINAL_PREDICTORS,
    ALL_NUMERIC_PREDICTORS,
    ALL_OUTCOMES,
    ALL_PREDICTORS,
    ALL_PREDICTORS_AND_OUTCOMES,
    PreppedRecipe,
    Recipe,
    bake,
    prep,
)
from .resampling import Resamples, ResampleResult, fit_resamples, vfold_cv
from .splitting import Split, initial_split, testing, training
from .tuning import (
    LastFitResult,
    TuneResult,
    grid_regular,
    last_fit,
    min_n,
    mixture,
    mtry,
    penalty,
    trees,
    tune_grid,
)
from .workflow import FittedWorkflow, Workflow, finalize_workflow, load_workflow


__all__ = [
    "ALL_NOMINAL_PREDICTORS",
    "ALL_NUMERIC_PREDICTORS",
    "ALL_OUTCOMES",
    "ALL_PREDICTORS",
    "ALL_PREDICTORS_AND_OUTCOMES",
    "FittedModel",
    "FittedWorkflow",
    "LastFitResult",
    "LinearReg",
    "LogisticReg",
    "MetricSet",
    "ModelKind",
    "ModelSpec",
    "PreppedRecipe",
    "RandForest",
    "Recipe",
    "ResampleResult",
    "Resamples",
    "Split",
    "TuneResult",
    "Workflow",
    "augment",
    "bake",
    "finalize_workflow",
    "fit_model",
    "fit_resamples",
    "grid_regular",
    "initial_split",
    "last_fit",
    "load_workflow",
    "make_spec",
    "metric_set",
    "min_n",
    "mixture",
    "mtry",
    "penalty",
    "predict",
    "prep",
    "roc_curve",
    "score",
    "testing",
    "training",
    "trees",
    "tune",
    "tune_grid",
    "vfold_cv",
]
