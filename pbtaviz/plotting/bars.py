"""Bar chart factories for group proportion and composition summaries."""

from __future__ import annotations

from typing import Any, Mapping

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from pbtaviz.core.utils import require_columns
from pbtaviz.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from pbtaviz.plotting.utils import resolve_colors


def plot_group_proportions(
    summary: pd.DataFrame,
    *,
    group_col: str,
    color_col: str | None = None,
    title: str = "",
    ylabel: str = "Proportion of samples",
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> tuple[plt.Figure, plt.Axes]:
    """Draw one bar per summary row in the row order given, labelled "k / n".

    The summary is drawn as-is: ordering and filtering belong to
    `summarize_groups`.
    """
    require_columns(summary, [group_col, "proportion", "label", color_col], "summary")

    n = summary.shape[0]
    x = np.arange(n, dtype=float)
    heights = summary["proportion"].to_numpy(dtype=float)
    if color_col is not None:
        colors = resolve_colors(summary[color_col], style=style)
    else:
        colors = [style.default_color] * n

    fig, ax = plt.subplots(figsize=style.figsize_bar)
    ax.bar(
        x,
        heights,
        color=colors,
        edgecolor=style.bar_edgecolor,
        linewidth=style.bar_linewidth,
    )
    for xi, h, label in zip(x, heights, summary["label"].astype(str)):
        ax.text(
            xi,
            h + 0.01,
            label,
            ha="center",
            va="bottom",
            fontsize=style.annotation_fontsize,
        )

    ax.set_xticks(x)
    ax.set_xticklabels(
        summary[group_col].astype(str),
        rotation=style.tick_rotation,
        ha="right",
        fontsize=style.tick_fontsize,
    )
    ax.set_ylim(0.0, min(1.1, max(0.1, float(heights.max()) + 0.1)) if n else 1.0)
    ax.set_ylabel(ylabel)
    ax.set_xlabel("")
    if title:
        ax.set_title(title)
    ax.grid(axis="y", alpha=0.25, linewidth=0.6)
    fig.tight_layout()
    return fig, ax


def _category_colors(
    categories: list[Any],
    palette: Mapping[Any, str] | None,
    style: PlotStyle,
) -> list[Any]:
    if palette is not None:
        return resolve_colors([palette.get(c) for c in categories], style=style)
    cmap = plt.get_cmap(style.cmap_categories)
    if len(categories) == 1:
        return [cmap(0.6)]
    return [cmap(0.25 + 0.7 * i / (len(categories) - 1)) for i in range(len(categories))]


def plot_group_composition(
    composition: pd.DataFrame,
    *,
    group_col: str,
    category_col: str,
    palette: Mapping[Any, str] | None = None,
    title: str = "",
    ylabel: str = "Fraction of samples",
    legend_title: str | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> tuple[plt.Figure, plt.Axes]:
    """Draw filled stacked bars from `summarize_composition` output."""
    require_columns(composition, [group_col, category_col, "fraction", "total"], "composition")

    groups = list(pd.unique(composition[group_col]))
    categories = list(pd.unique(composition[category_col]))
    table = composition.pivot_table(
        index=group_col,
        columns=category_col,
        values="fraction",
        aggfunc="sum",
        fill_value=0.0,
        observed=False,
    ).reindex(index=groups, columns=categories, fill_value=0.0)
    totals = composition.groupby(group_col, sort=False)["total"].first().reindex(groups)

    x = np.arange(len(groups), dtype=float)
    bottoms = np.zeros(len(groups), dtype=float)
    colors = _category_colors(categories, palette, style)

    fig, ax = plt.subplots(figsize=style.figsize_stacked)
    for category, color in zip(categories, colors):
        heights = table[category].to_numpy(dtype=float)
        ax.bar(
            x,
            heights,
            bottom=bottoms,
            color=color,
            edgecolor=style.bar_edgecolor,
            linewidth=style.bar_linewidth,
            label=str(category),
        )
        bottoms += heights

    for xi, total in zip(x, totals.to_numpy()):
        ax.text(
            xi,
            1.01,
            f"n={int(total)}",
            ha="center",
            va="bottom",
            fontsize=style.annotation_fontsize,
        )

    ax.set_xticks(x)
    ax.set_xticklabels(
        [str(g) for g in groups],
        rotation=style.tick_rotation,
        ha="right",
        fontsize=style.tick_fontsize,
    )
    ax.set_ylim(0.0, 1.08)
    ax.set_ylabel(ylabel)
    if title:
        ax.set_title(title)
    ax.legend(
        title=legend_title or category_col,
        loc="upper left",
        bbox_to_anchor=(1.01, 1.0),
        frameon=False,
        fontsize=style.legend_fontsize,
    )
    fig.tight_layout()
    return fig, ax
