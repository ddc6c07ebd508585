from .paths import get_data_dir, get_dataset_path
from .plotting_config import DEFAULT_PLOT_CFG, PlottingConfig, save_figure
from .seed import set_global_rnd_seed


__all__ = [
    "DEFAULT_PLOT_CFG",
    "PlottingConfig",
    "get_data_dir",
    "get_dataset_path",
    "save_figure",
    "set_global_rnd_seed",
]
