"""Command line entry point: summarize, split, cross-validate and tune from a table on disk.

Examples:
    sml-tlbx skim _data/chd_500.csv
    sml-tlbx split _data/chd_500.csv --outcome chdfate --prop 0.75 --seed 1 --out-dir splits/
    sml-tlbx cv _data/chd_500.csv --outcome chdfate --model logistic_reg --id-cols id followup
    sml-tlbx tune _data/chd_500.csv --outcome chdfate --model rand_forest --mtry-range 2 8 --levels 7
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from .data.io import read_table, write_table
from .data.utils import skim
from .errors import SmlTlbxError
from .modeling import (
    ModelKind,
    Recipe,
    Workflow,
    fit_resamples,
    grid_regular,
    initial_split,
    make_spec,
    mtry,
    penalty,
    tune,
    tune_grid,
    vfold_cv,
)


logger = logging.getLogger(__name__)


def _load(args: argparse.Namespace) -> pd.DataFrame:
    column_types = dict.fromkeys(args.logical or [], "bool") | dict.fromkeys(args.factor or [], "category")
    return read_table(args.path, column_types=column_types or None)


def _write_or_print(df: pd.DataFrame, out: Path | None) -> None:
    if out is None:
        print(df.to_string(index=False))
    else:
        write_table(df, out)


def _default_recipe(args: argparse.Namespace) -> Recipe:
    recipe = Recipe(outcome=args.outcome)
    if args.id_cols:
        recipe = recipe.update_role(*args.id_cols)
    return recipe.step_naomit().step_dummy().step_zv().step_normalize()


def _strata(args: argparse.Namespace) -> str | None:
    return None if args.no_strata else (args.strata or args.outcome)


def cmd_skim(args: argparse.Namespace) -> int:
    _write_or_print(skim(_load(args)), args.out)
    return 0


def cmd_split(args: argparse.Namespace) -> int:
    df = _load(args)
    split = initial_split(df, args.prop, strata=_strata(args), seed=args.seed)
    out_dir = Path(args.out_dir)
    suffix = Path(args.path).suffix
    write_table(split.training(df), out_dir / f"training{suffix}")
    write_table(split.testing(df), out_dir / f"testing{suffix}")
    print(split)
    return 0


def cmd_cv(args: argparse.Namespace) -> int:
    df = _load(args)
    workflow = Workflow(_default_recipe(args), make_spec(args.model))
    folds = vfold_cv(df, args.v, strata=_strata(args), seed=args.seed)
    result = fit_resamples(workflow, folds, n_jobs=args.n_jobs)
    _write_or_print(result.collect_metrics(), args.out)
    return 0


def cmd_tune(args: argparse.Namespace) -> int:
    df = _load(args)
    if args.model == ModelKind.LOGISTIC_REG:
        model = make_spec(args.model, penalty=tune(), mixture=args.mixture)
        grid = grid_regular(penalty(), levels=args.levels)
    elif args.model == ModelKind.RAND_FOREST:
        model = make_spec(args.model, trees=args.trees, mtry=tune(), seed=args.seed)
        grid = grid_regular(mtry(tuple(args.mtry_range)), levels=args.levels)
    else:
        raise SmlTlbxError(f"Model '{args.model}' has no tunable hyperparameters")

    folds = vfold_cv(df, args.v, strata=_strata(args), seed=args.seed)
    result = tune_grid(Workflow(_default_recipe(args), model), folds, grid, n_jobs=args.n_jobs)
    best = result.show_best(args.metric, n=args.top)
    _write_or_print(best, args.out)
    logger.info("Best configuration by %s: %s", args.metric, result.select_best(args.metric))
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", type=Path, help="Input table (.csv, .tsv, .xlsx, .parquet, .pkl)")
    parser.add_argument("--logical", nargs="*", metavar="COL", help="Columns to coerce to boolean")
    parser.add_argument("--factor", nargs="*", metavar="COL", help="Columns to coerce to categorical")
    parser.add_argument("--out", type=Path, default=None, help="Write the result table here instead of printing")


def _add_modeling(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--outcome", required=True, help="Outcome column")
    parser.add_argument("--id-cols", nargs="*", metavar="COL", help="Columns kept out of the predictors")
    parser.add_argument("--strata", default=None, help="Stratification column (default: the outcome)")
    parser.add_argument("--no-strata", action="store_true", help="Do not stratify")
    parser.add_argument("--seed", type=int, default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sml-tlbx", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_skim = sub.add_parser("skim", help="Per-column summary of a table")
    _add_common(p_skim)
    p_skim.set_defaults(func=cmd_skim)

    p_split = sub.add_parser("split", help="Write a training/testing split")
    _add_common(p_split)
    _add_modeling(p_split)
    p_split.add_argument("--prop", type=float, default=0.75, help="Training fraction")
    p_split.add_argument("--out-dir", default=".", help="Directory for training/testing tables")
    p_split.set_defaults(func=cmd_split)

    models = [str(kind) for kind in ModelKind]
    p_cv = sub.add_parser("cv", help="Cross-validated metrics of a model")
    _add_common(p_cv)
    _add_modeling(p_cv)
    p_cv.add_argument("--model", choices=models, required=True)
    p_cv.add_argument("-k", "--v", type=int, default=10, help="Number of folds")
    p_cv.add_argument("--n-jobs", type=int, default=1)
    p_cv.set_defaults(func=cmd_cv)

    p_tune = sub.add_parser("tune", help="Grid search with cross-validation")
    _add_common(p_tune)
    _add_modeling(p_tune)
    p_tune.add_argument("--model", choices=[str(ModelKind.LOGISTIC_REG), str(ModelKind.RAND_FOREST)], required=True)
    p_tune.add_argument("-k", "--v", type=int, default=10, help="Number of folds")
    p_tune.add_argument("--levels", type=int, default=10, help="Grid levels per parameter")
    p_tune.add_argument("--metric", default="roc_auc")
    p_tune.add_argument("--top", type=int, default=5, help="Number of configurations to report")
    p_tune.add_argument("--mixture", type=float, default=1.0, help="Elastic-net mixing (logistic_reg)")
    p_tune.add_argument("--trees", type=int, default=500, help="Number of trees (rand_forest)")
    p_tune.add_argument("--mtry-range", type=int, nargs=2, default=(2, 8), metavar=("LOW", "HIGH"))
    p_tune.add_argument("--n-jobs", type=int, default=1)
    p_tune.set_defaults(func=cmd_tune)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s: %(message)s")
    try:
        return args.func(args)
    except (SmlTlbxError, FileNotFoundError) as exc:
        logger.error("%s", exc)  # noqa: TRY400
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
