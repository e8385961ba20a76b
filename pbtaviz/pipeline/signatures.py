"""Mutational-signature exposures scaled to mutations per Mb, summarized by group."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import matplotlib

# Use a non-interactive backend for reproducible headless runs.
matplotlib.use("Agg")
import pandas as pd

from pbtaviz._version import __version__
from pbtaviz.config import AnalysisConfig
from pbtaviz.core.aggregate import join_labels, summarize_groups
from pbtaviz.core.rates import exposures_per_mb, summarize_numeric
from pbtaviz.pipeline.io import (
    ensure_dir,
    now_utc_iso,
    read_exposure_matrix,
    read_tsv,
    setup_logger,
    write_json,
    write_table,
)
from pbtaviz.plotting.distributions import plot_group_distribution, plot_group_heatmap
from pbtaviz.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle, apply_plot_style, plot_style_dict
from pbtaviz.plotting.utils import sanitize_label, save_figure


def _scope_dirs(outdir: Path) -> dict[str, Path]:
    root = outdir / "signatures"
    dirs = {
        "root": root,
        "plots": root / "plots",
        "tables": root / "tables",
        "logs": root / "logs",
    }
    for path in dirs.values():
        ensure_dir(path)
    return dirs


def group_mean_matrix(
    joined: pd.DataFrame,
    *,
    group_col: str,
    id_col: str,
    min_group_size: int,
) -> pd.DataFrame:
    """Groups x signatures mean mutations per Mb, groups with enough samples only."""
    sizes = joined.groupby(group_col)[id_col].nunique()
    keep = sorted(str(g) for g in sizes.index[sizes >= int(min_group_size)])
    matrix = joined.pivot_table(
        index=group_col,
        columns="signature",
        values="mut_per_mb",
        aggfunc="mean",
    )
    matrix.index = matrix.index.astype(str)
    signatures = list(pd.unique(joined["signature"]))
    out = matrix.reindex(index=keep, columns=signatures)
    out.index.name = group_col
    out.columns.name = None
    return out


def run_signatures(
    config: AnalysisConfig,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> dict[str, Any]:
    """Summarize per-signature mutations per Mb by histology group.

    Reads the `exposures` matrix, the `tmb` table and the palette named in
    `config`, writes plots, tables and a `metadata.json` manifest, and
    returns the manifest.
    """
    group_col = str(config.options.get("group_col", "display_group"))
    tmb_col = str(config.options.get("tmb_col", "tmb"))
    stat = str(config.options.get("stat", "median"))
    ascending = bool(config.options.get("ascending", False))
    wanted = config.options.get("signatures")

    dirs = _scope_dirs(config.outdir)
    logger = setup_logger(dirs["logs"] / "signatures.log", "pbtaviz.signatures")
    apply_plot_style(style)

    exposures = read_exposure_matrix(config.input_path("exposures"))
    if wanted:
        missing = [s for s in wanted if s not in exposures.columns]
        if missing:
            raise KeyError(f"Signatures not found in exposure matrix: {missing}")
        exposures = exposures.loc[:, list(wanted)]
    tmb = read_tsv(config.input_path("tmb"), required=[config.id_col, tmb_col])
    palette = read_tsv(config.palette_path, required=[config.id_col, group_col, config.color_col])

    long = exposures_per_mb(exposures, tmb, id_col=config.id_col, tmb_col=tmb_col)
    joined = join_labels(long, palette, id_col=config.id_col, label_cols=[group_col, config.color_col])
    n_samples = int(joined[config.id_col].nunique())
    logger.info(
        "Exposure matrix %d samples x %d signatures; %d samples with TMB and labels.",
        exposures.shape[0],
        exposures.shape[1],
        n_samples,
    )

    group_colors = joined.groupby(group_col, sort=False)[config.color_col].first()
    artifacts: dict[str, str] = {}
    for signature in pd.unique(joined["signature"]):
        stem = sanitize_label(signature)
        sub = joined.loc[joined["signature"] == signature]

        rates = summarize_numeric(
            sub,
            group_col=group_col,
            value_col="mut_per_mb",
            min_group_size=config.min_group_size,
            ascending=ascending,
            stat=stat,
        )
        rates[config.color_col] = rates[group_col].map(group_colors)
        artifacts[f"{stem}_per_mb_tsv"] = write_table(
            rates, dirs["tables"] / f"{stem}_per_mb.tsv"
        ).as_posix()

        nonzero = summarize_groups(
            sub,
            group_col=group_col,
            predicate_col="exposure",
            min_group_size=config.min_group_size,
            ascending=ascending,
            color_col=config.color_col,
        )
        artifacts[f"{stem}_nonzero_tsv"] = write_table(
            nonzero, dirs["tables"] / f"{stem}_nonzero.tsv"
        ).as_posix()

        fig, _ = plot_group_distribution(
            sub,
            rates,
            group_col=group_col,
            value_col="mut_per_mb",
            color_col=config.color_col,
            title=f"{signature}: mutations per Mb",
            ylabel="Mutations per Mb",
            log_scale=True,
            style=style,
        )
        artifacts[f"{stem}_per_mb_png"] = save_figure(
            fig, dirs["plots"] / f"{stem}_per_mb.png", style=style
        ).as_posix()
        logger.info("%s: %d groups summarized by %s.", signature, rates.shape[0], stat)

    matrix = group_mean_matrix(
        joined,
        group_col=group_col,
        id_col=config.id_col,
        min_group_size=config.min_group_size,
    )
    if matrix.empty:
        logger.warning("No %s group has >= %d samples; heatmap skipped.", group_col, config.min_group_size)
    else:
        artifacts["mean_exposure_tsv"] = write_table(
            matrix.reset_index(), dirs["tables"] / "mean_exposure.tsv"
        ).as_posix()
        fig, _ = plot_group_heatmap(
            matrix,
            title="Mean mutations per Mb by signature",
            colorbar_label="Mutations per Mb",
            style=style,
        )
        artifacts["mean_exposure_heatmap_png"] = save_figure(
            fig, dirs["plots"] / "mean_exposure_heatmap.png", style=style
        ).as_posix()

    for key, path in sorted(artifacts.items()):
        logger.info("Wrote %s: %s", key, path)

    metadata: dict[str, Any] = {
        "analysis": "signatures",
        "version": __version__,
        "timestamp_utc": now_utc_iso(),
        "config": config.to_manifest(),
        "n_exposure_samples": int(exposures.shape[0]),
        "n_joined_samples": n_samples,
        "signatures": [str(s) for s in pd.unique(joined["signature"])],
        "group_col": group_col,
        "stat": stat,
        "ascending": ascending,
        "artifacts": artifacts,
        "plot_style": plot_style_dict(style),
    }
    write_json(dirs["root"] / "metadata.json", metadata)
    return metadata
