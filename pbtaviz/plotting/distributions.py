"""Per-group distribution and heatmap figure factories."""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from pbtaviz.core.utils import require_columns
from pbtaviz.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from pbtaviz.plotting.utils import resolve_colors


def plot_group_distribution(
    values: pd.DataFrame,
    summary: pd.DataFrame,
    *,
    group_col: str,
    value_col: str,
    color_col: str | None = None,
    title: str = "",
    ylabel: str | None = None,
    log_scale: bool = False,
    seed: int = 0,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> tuple[plt.Figure, plt.Axes]:
    """Box + jittered strip plot of `value_col`, one column per summary group.

    Groups are drawn in the order of `summary` (see `summarize_numeric`);
    groups absent from `summary` are not drawn.
    """
    require_columns(values, [group_col, value_col], "values")
    require_columns(summary, [group_col, color_col], "summary")

    groups = summary[group_col].tolist()
    if color_col is not None:
        colors = resolve_colors(summary[color_col], style=style)
    else:
        colors = [style.default_color] * len(groups)

    nums = pd.to_numeric(values[value_col], errors="coerce")
    data: list[np.ndarray] = []
    for group in groups:
        mask = (values[group_col] == group) & nums.notna()
        data.append(nums[mask].to_numpy(dtype=float))

    rng = np.random.default_rng(int(seed))
    fig, ax = plt.subplots(figsize=style.figsize_distribution)
    positions = np.arange(1, len(groups) + 1, dtype=float)
    ax.boxplot(
        data,
        positions=positions,
        widths=0.6,
        showfliers=False,
        medianprops={"color": "black", "linewidth": 1.2},
    )
    for pos, vals, color in zip(positions, data, colors):
        if vals.size == 0:
            continue
        jitter = rng.uniform(-style.jitter_width, style.jitter_width, size=vals.size)
        ax.scatter(
            pos + jitter,
            vals,
            s=style.point_size,
            alpha=style.point_alpha,
            color=color,
            linewidths=0,
        )

    if log_scale:
        ax.set_yscale("symlog", linthresh=0.1)
    ax.set_xticks(positions)
    ax.set_xticklabels(
        [str(g) for g in groups],
        rotation=style.tick_rotation,
        ha="right",
        fontsize=style.tick_fontsize,
    )
    ax.set_ylabel(ylabel or value_col)
    if title:
        ax.set_title(title)
    ax.grid(axis="y", alpha=0.20, linewidth=0.6)
    fig.tight_layout()
    return fig, ax


def plot_group_heatmap(
    matrix: pd.DataFrame,
    *,
    title: str = "",
    colorbar_label: str = "value",
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> tuple[plt.Figure, plt.Axes]:
    """Heatmap of a groups x columns matrix, drawn in the given row/column order."""
    vals = matrix.to_numpy(dtype=float)
    fig, ax = plt.subplots(figsize=style.figsize_heatmap)
    im = ax.imshow(vals, aspect="auto", cmap=style.cmap_heat)
    ax.set_xticks(np.arange(matrix.shape[1]))
    ax.set_xticklabels(
        [str(c) for c in matrix.columns],
        rotation=style.tick_rotation,
        ha="right",
        fontsize=style.tick_fontsize,
    )
    ax.set_yticks(np.arange(matrix.shape[0]))
    ax.set_yticklabels([str(i) for i in matrix.index], fontsize=style.tick_fontsize)
    if title:
        ax.set_title(title)
    cbar = fig.colorbar(im, ax=ax, shrink=0.8)
    cbar.set_label(colorbar_label, fontsize=style.axis_label_fontsize)
    fig.tight_layout()
    return fig, ax
