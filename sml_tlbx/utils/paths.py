import os
from pathlib import Path
from typing import Literal


__all__ = ["DATA_DIR_ENV", "get_data_dir", "get_dataset_path"]


DATA_DIR_ENV = "SML_TLBX_DATA_DIR"

_DATASET_MAP: dict[str, str] = {
    "chd_full": "chd_full.csv",
    "chd_500": "chd_500.csv",
    "chd_pca": "d_w_pca.tsv",
}


def get_data_dir() -> Path:
    """Get the path to the data directory.

    Uses ``$SML_TLBX_DATA_DIR`` when set, otherwise ``_data/`` at the repository root.

    Returns:
        Path to the data directory

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    override = os.environ.get(DATA_DIR_ENV)
    data_dir = Path(override) if override else Path(__file__).parents[2] / "_data"
    data_dir = data_dir.resolve()
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory not found at {data_dir} (set ${DATA_DIR_ENV} to override)")
    return data_dir


def get_dataset_path(filename: Literal["chd_full", "chd_500", "chd_pca"] | str) -> Path:  # noqa: PYI051
    """Get the full path to a dataset file in the data directory.

    Args:
        filename: Key to known dataset or custom filename

    Returns:
        Full path to the dataset file inside the data directory

    Supported keys: chd_full (chd_full.csv), chd_500 (chd_500.csv), chd_pca (d_w_pca.tsv)
    """
    ds_path = get_data_dir() / _DATASET_MAP.get(filename, filename)
    if not ds_path.exists():
        raise FileNotFoundError(f"Dataset file '{filename}' not found at {ds_path}")
    return ds_path
