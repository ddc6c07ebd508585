"""Global random seeding for interactive sessions."""

import random

import numpy as np


def set_global_rnd_seed(seed: int) -> None:
    """Seed Python's and NumPy's global random generators.

    Library functions take an explicit ``seed`` argument and never rely on global
    state; this helper is for notebooks that call NumPy directly.
    """
    random.seed(seed)
    np.random.seed(seed)  # noqa: NPY002


__all__ = ["set_global_rnd_seed"]
