"""Shared plotting configuration (style, palette, font sizes) and figure export."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib as mpl
import plotly.graph_objects as go
import plotly.io as pio
import seaborn as sns
from matplotlib.figure import Figure


logger = logging.getLogger(__name__)

_RC_KEYS = (
    "axes.titlesize",
    "axes.labelsize",
    "xtick.labelsize",
    "ytick.labelsize",
    "figure.dpi",
    "savefig.dpi",
    "axes.prop_cycle",
    "font.family",
)


@dataclass
class PlottingConfig:
    """Reusable plotting style that can be applied across figures.

    The defaults approximate the ``theme_classic``/Brewer look of the workshop
    handouts: white background, light grid, qualitative ``Set2`` palette.
    """

    style: str = "whitegrid"
    palette: str | list[str] = "Set2"
    font_family: str = "DejaVu Sans"
    font_scale: float = 1.0
    title_size: int = 14
    label_size: int = 12
    tick_size: int = 10
    figure_dpi: int = 100
    save_dpi: int = 300
    context: str = "notebook"
    plotly_template: str = "plotly_white"
    plotly_colorway: list[str] | None = None
    seaborn_kwargs: dict[str, Any] = field(default_factory=dict)

    def _rc_updates(self) -> dict[str, Any]:
        palette_colors = sns.color_palette(self.palette)
        return {
            "axes.titlesize": self.title_size,
            "axes.labelsize": self.label_size,
            "xtick.labelsize": self.tick_size,
            "ytick.labelsize": self.tick_size,
            "figure.dpi": self.figure_dpi,
            "savefig.dpi": self.save_dpi,
            "axes.prop_cycle": mpl.cycler(color=palette_colors),
            "font.family": [self.font_family],
        }

    def _set_theme(self) -> None:
        sns.set_theme(
            style=self.style,
            palette=sns.color_palette(self.palette),
            context=self.context,
            font_scale=self.font_scale,
            **self.seaborn_kwargs,
        )
        mpl.rcParams.update(self._rc_updates())
        pio.templates.default = self.plotly_template
        if self.plotly_colorway is not None:
            pio.templates[self.plotly_template].layout.colorway = self.plotly_colorway

    def apply_global(self) -> None:
        """Apply plotting style globally (no automatic restore).

        Intended to be called once at the top of a notebook or workshop script.
        For temporary styling use :meth:`apply` instead.
        """
        self._set_theme()

    @contextmanager
    def apply(self) -> Generator[None]:
        """Apply style within a context, restoring previous rcParams afterwards."""
        prev_rc = {k: mpl.rcParams[k] for k in _RC_KEYS}
        prev_plotly_template = pio.templates.default
        prev_plotly_colorway = getattr(pio.templates[self.plotly_template].layout, "colorway", None)

        self._set_theme()
        try:
            yield
        finally:
            pio.templates.default = prev_plotly_template
            pio.templates[self.plotly_template].layout.colorway = prev_plotly_colorway
            mpl.rcParams.update(prev_rc)


# Default configuration used across plotting functions
DEFAULT_PLOT_CFG = PlottingConfig()


def save_figure(
    fig: Figure | go.Figure,
    path: str | Path,
    *,
    dpi: int | None = None,
    config: PlottingConfig = DEFAULT_PLOT_CFG,
) -> Path:
    """Export a matplotlib or plotly figure, creating parent directories.

    Matplotlib figures are written with ``savefig`` (format from the suffix);
    plotly figures are written as HTML for ``.html`` and via ``write_image``
    otherwise (requires kaleido).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(fig, go.Figure):
        if path.suffix.lower() == ".html":
            fig.write_html(path)
        else:
            fig.write_image(path)
    else:
        fig.savefig(path, dpi=dpi or config.save_dpi, bbox_inches="tight")
    logger.info("Saved figure to %s", path)
    return path


__all__ = ["DEFAULT_PLOT_CFG", "PlottingConfig", "save_figure"]
