"""Shared plotting style settings for deterministic figure outputs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import matplotlib
import matplotlib.pyplot as plt
import numpy as np


@dataclass(frozen=True)
class PlotStyle:
    """Centralized plotting defaults used across pipeline figures."""

    dpi: int = 200
    figsize_bar: tuple[float, float] = (8.0, 5.0)
    figsize_stacked: tuple[float, float] = (8.5, 5.0)
    figsize_distribution: tuple[float, float] = (9.0, 5.0)
    figsize_heatmap: tuple[float, float] = (9.0, 6.5)
    bar_edgecolor: str = "black"
    bar_linewidth: float = 0.6
    default_color: str = "#808080"
    point_size: float = 9.0
    point_alpha: float = 0.6
    jitter_width: float = 0.25
    legend_fontsize: int = 8
    tick_fontsize: int = 8
    annotation_fontsize: int = 7
    axis_label_fontsize: int = 10
    title_fontsize: int = 11
    tick_rotation: float = 45.0
    cmap_heat: str = "viridis"
    cmap_categories: str = "Blues"


DEFAULT_PLOT_STYLE = PlotStyle()


def apply_plot_style(style: PlotStyle = DEFAULT_PLOT_STYLE) -> None:
    """Apply deterministic matplotlib rcParams for pipeline plots."""
    plt.rcParams.update(
        {
            "figure.dpi": style.dpi,
            "savefig.dpi": style.dpi,
            "savefig.facecolor": "white",
            "font.family": "DejaVu Sans",
            "axes.titlesize": style.title_fontsize,
            "axes.labelsize": style.axis_label_fontsize,
            "legend.fontsize": style.legend_fontsize,
            "axes.grid": False,
            "axes.spines.top": False,
            "axes.spines.right": False,
        }
    )


def plot_style_dict(style: PlotStyle = DEFAULT_PLOT_STYLE) -> dict[str, Any]:
    """Return style + dependency versions for metadata manifests."""
    d = asdict(style)
    d["matplotlib_version"] = str(matplotlib.__version__)
    d["numpy_version"] = str(np.__version__)
    return d
