"""Plotting API for pbtaviz summary tables."""

from pbtaviz.plotting.bars import plot_group_composition, plot_group_proportions
from pbtaviz.plotting.distributions import plot_group_distribution, plot_group_heatmap
from pbtaviz.plotting.styles import (
    DEFAULT_PLOT_STYLE,
    PlotStyle,
    apply_plot_style,
    plot_style_dict,
)
from pbtaviz.plotting.utils import resolve_colors, sanitize_label, save_figure

__all__ = [
    "PlotStyle",
    "DEFAULT_PLOT_STYLE",
    "apply_plot_style",
    "plot_style_dict",
    "save_figure",
    "sanitize_label",
    "resolve_colors",
    "plot_group_proportions",
    "plot_group_composition",
    "plot_group_distribution",
    "plot_group_heatmap",
]
