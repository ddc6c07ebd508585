"""Test configuration for the SML toolbox."""

from pathlib import Path
import sys

import matplotlib
import pytest


matplotlib.use("Agg")

# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(scope="session")
def chd_df():
    """Simulated CHD cohort: 500 rows, 10% events, no missing values."""
    from sml_tlbx.data import simulate_chd

    return simulate_chd(500, seed=1)


@pytest.fixture(scope="session")
def chd_df_missing():
    """Simulated CHD cohort with ~5% of the measurements blanked."""
    from sml_tlbx.data import simulate_chd

    return simulate_chd(300, seed=2, missing_rate=0.05)


@pytest.fixture(scope="session")
def chd_csv(tmp_path_factory, chd_df) -> Path:
    """The simulated cohort written to a CSV file."""
    from sml_tlbx.data import write_table

    return write_table(chd_df, tmp_path_factory.mktemp("data") / "chd_500.csv")


@pytest.fixture(scope="session")
def chd_dataset(chd_csv):
    """ChdDataset loaded from the simulated CSV file."""
    from sml_tlbx.data import ChdDataset

    return ChdDataset.from_file(chd_csv)


@pytest.fixture
def chd_recipe():
    """The workshop preprocessing recipe for the CHD outcome."""
    from sml_tlbx.data import ChdCol
    from sml_tlbx.modeling import Recipe

    return (
        Recipe(outcome=ChdCol.TARGET)
        .update_role(ChdCol.ID, ChdCol.FOLLOWUP)
        .step_naomit()
        .step_dummy()
        .step_zv()
        .step_normalize()
    )
