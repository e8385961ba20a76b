"""Chromothripsis summaries: proportions and region composition per histology group."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib

# Use a non-interactive backend for reproducible headless runs.
matplotlib.use("Agg")
import pandas as pd

from pbtaviz._version import __version__
from pbtaviz.config import AnalysisConfig
from pbtaviz.core.aggregate import (
    bin_counts,
    coerce_predicate,
    join_labels,
    summarize_composition,
    summarize_groups,
)
from pbtaviz.pipeline.io import (
    ensure_dir,
    now_utc_iso,
    read_tsv,
    setup_logger,
    write_json,
    write_table,
)
from pbtaviz.plotting.bars import plot_group_composition, plot_group_proportions
from pbtaviz.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle, apply_plot_style, plot_style_dict
from pbtaviz.plotting.utils import save_figure

ANY_COL = "any_regions_logical"
HIGH_COL = "high_conf_regions_logical"
COUNT_COL = "count_regions_any_conf"
DISPLAY_GROUP = "display_group"
CANCER_GROUP = "cancer_group"

CONFIDENCE_ORDER = ["High", "Low", "None"]
CONFIDENCE_COLORS = {"High": "#08306b", "Low": "#6baed6", "None": "#f0f0f0"}


def confidence_levels(joined: pd.DataFrame) -> pd.Series:
    """Highest-confidence chromothripsis call per sample: High, Low or None."""
    any_call = coerce_predicate(joined[ANY_COL]).to_numpy()
    high_call = coerce_predicate(joined[HIGH_COL]).to_numpy()
    levels = pd.Series("None", index=joined.index, name="confidence", dtype=object)
    levels[any_call] = "Low"
    levels[high_call] = "High"
    return levels


def _scope_dirs(outdir: Path) -> dict[str, Path]:
    root = outdir / "chromothripsis"
    dirs = {
        "root": root,
        "plots": root / "plots",
        "tables": root / "tables",
        "logs": root / "logs",
    }
    for path in dirs.values():
        ensure_dir(path)
    return dirs


def run_chromothripsis(
    config: AnalysisConfig,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> dict[str, Any]:
    """Summarize per-sample chromothripsis calls by display and cancer group.

    Reads the `calls` input and the palette table named in `config`, writes
    plots, tables and a `metadata.json` manifest, and returns the manifest.
    """
    display_ascending = bool(config.options.get("display_ascending", False))
    cancer_ascending = bool(config.options.get("cancer_ascending", True))
    region_cap = int(config.options.get("region_cap", 3))

    dirs = _scope_dirs(config.outdir)
    logger = setup_logger(dirs["logs"] / "chromothripsis.log", "pbtaviz.chromothripsis")
    apply_plot_style(style)

    calls = read_tsv(
        config.input_path("calls"),
        required=[config.id_col, ANY_COL, HIGH_COL, COUNT_COL],
    )
    palette = read_tsv(
        config.palette_path,
        required=[config.id_col, DISPLAY_GROUP, CANCER_GROUP, config.color_col],
    )
    label_cols = [DISPLAY_GROUP, CANCER_GROUP, config.color_col]
    order_col = config.order_col if config.order_col in palette.columns else None
    if order_col is not None:
        label_cols.append(order_col)

    joined = join_labels(calls, palette, id_col=config.id_col, label_cols=label_cols)
    n_dropped = int(calls.shape[0] - joined.shape[0])
    logger.info("Loaded %d samples; %d joined to palette, %d dropped.", calls.shape[0], joined.shape[0], n_dropped)

    display = summarize_groups(
        joined,
        group_col=DISPLAY_GROUP,
        predicate_col=ANY_COL,
        ascending=display_ascending,
        color_col=config.color_col,
        order_col=order_col,
    )
    cancer = summarize_groups(
        joined,
        group_col=CANCER_GROUP,
        predicate_col=ANY_COL,
        min_group_size=config.min_group_size,
        ascending=cancer_ascending,
        color_col=config.color_col,
        order_col=order_col,
    )
    n_cancer_groups = int(joined[CANCER_GROUP].dropna().nunique())
    logger.info(
        "cancer_group: kept %d of %d groups with n >= %d.",
        cancer.shape[0],
        n_cancer_groups,
        config.min_group_size,
    )

    with_bins = joined.assign(regions=bin_counts(joined[COUNT_COL], cap=region_cap))
    regions = summarize_composition(
        with_bins,
        group_col=DISPLAY_GROUP,
        category_col="regions",
        group_order=display[DISPLAY_GROUP].tolist(),
    )
    with_conf = joined.assign(confidence=confidence_levels(joined))
    confidence = summarize_composition(
        with_conf,
        group_col=DISPLAY_GROUP,
        category_col="confidence",
        group_order=display[DISPLAY_GROUP].tolist(),
        category_order=CONFIDENCE_ORDER,
    )

    artifacts: dict[str, str] = {}
    tables = {
        "display_group_proportion": display,
        "cancer_group_proportion": cancer,
        "display_group_region_counts": regions,
        "display_group_confidence": confidence,
    }
    for name, table in tables.items():
        artifacts[f"{name}_tsv"] = write_table(table, dirs["tables"] / f"{name}.tsv").as_posix()

    fig, _ = plot_group_proportions(
        display,
        group_col=DISPLAY_GROUP,
        color_col=config.color_col,
        title="Chromothripsis by display group",
        ylabel="Proportion of tumors with chromothripsis",
        style=style,
    )
    artifacts["display_group_proportion_png"] = save_figure(
        fig, dirs["plots"] / "display_group_proportion.png", style=style
    ).as_posix()

    fig, _ = plot_group_proportions(
        cancer,
        group_col=CANCER_GROUP,
        color_col=config.color_col,
        title=f"Chromothripsis by cancer group (n >= {config.min_group_size})",
        ylabel="Proportion of tumors with chromothripsis",
        style=style,
    )
    artifacts["cancer_group_proportion_png"] = save_figure(
        fig, dirs["plots"] / "cancer_group_proportion.png", style=style
    ).as_posix()

    fig, _ = plot_group_composition(
        regions,
        group_col=DISPLAY_GROUP,
        category_col="regions",
        title="Chromothripsis regions per tumor",
        legend_title="# regions",
        style=style,
    )
    artifacts["display_group_region_counts_png"] = save_figure(
        fig, dirs["plots"] / "display_group_region_counts.png", style=style
    ).as_posix()

    fig, _ = plot_group_composition(
        confidence,
        group_col=DISPLAY_GROUP,
        category_col="confidence",
        palette=CONFIDENCE_COLORS,
        title="Chromothripsis call confidence",
        legend_title="Confidence",
        style=style,
    )
    artifacts["display_group_confidence_png"] = save_figure(
        fig, dirs["plots"] / "display_group_confidence.png", style=style
    ).as_posix()

    for key, path in sorted(artifacts.items()):
        logger.info("Wrote %s: %s", key, path)

    metadata: dict[str, Any] = {
        "analysis": "chromothripsis",
        "version": __version__,
        "timestamp_utc": now_utc_iso(),
        "config": config.to_manifest(),
        "n_samples": int(calls.shape[0]),
        "n_joined": int(joined.shape[0]),
        "n_dropped": n_dropped,
        "sort": {"display_group_ascending": display_ascending, "cancer_group_ascending": cancer_ascending},
        "artifacts": artifacts,
        "plot_style": plot_style_dict(style),
    }
    write_json(dirs["root"] / "metadata.json", metadata)
    return metadata
