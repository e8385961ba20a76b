"""Per-megabase mutation rates and numeric group summaries."""

from __future__ import annotations

import numpy as np
import pandas as pd

from pbtaviz.core.errors import EmptySummaryError, SchemaMismatchError
from pbtaviz.core.utils import require_columns

NUMERIC_STATS = ("mean", "median")


def exposures_per_mb(
    exposures: pd.DataFrame,
    tmb: pd.DataFrame,
    *,
    id_col: str,
    tmb_col: str = "tmb",
) -> pd.DataFrame:
    """Scale signature weights by each sample's mutations per Mb.

    `exposures` is indexed by sample id with one column per signature and
    holds per-sample weights. Returns a long table with columns `id_col`,
    `signature`, `exposure` and `mut_per_mb`, one row per sample and
    signature. Samples with no TMB value are dropped.
    """
    require_columns(tmb, [id_col, tmb_col], "tmb")
    if exposures.shape[1] == 0:
        raise SchemaMismatchError("Exposure matrix has no signature columns.")

    weights = exposures.apply(pd.to_numeric, errors="raise")
    weights.index = weights.index.astype(str)
    if weights.index.duplicated().any():
        raise SchemaMismatchError("Exposure matrix has duplicated sample ids.")

    tmb = tmb.loc[tmb[id_col].notna()]
    tmb_ids = tmb[id_col].astype(str)
    duplicated = tmb_ids[tmb_ids.duplicated()]
    if not duplicated.empty:
        raise SchemaMismatchError(
            f"TMB table has duplicated '{id_col}' values: "
            f"{', '.join(sorted(set(duplicated))[:5])}"
        )
    burden = tmb.assign(**{id_col: tmb_ids}).set_index(id_col)[tmb_col]
    burden = pd.to_numeric(burden, errors="coerce").dropna()

    shared = [sid for sid in weights.index if sid in burden.index]
    if not shared:
        raise SchemaMismatchError(
            f"No exposure samples have a '{tmb_col}' value "
            f"(exposures={weights.shape[0]}, tmb={burden.shape[0]})."
        )

    w = weights.loc[shared]
    rates = w.mul(burden.loc[shared], axis=0)
    long = pd.DataFrame(
        {
            id_col: np.repeat(np.asarray(shared, dtype=object), w.shape[1]),
            "signature": np.tile(np.asarray(w.columns, dtype=object), len(shared)),
            "exposure": w.to_numpy(dtype=float).ravel(),
            "mut_per_mb": rates.to_numpy(dtype=float).ravel(),
        }
    )
    return long


def summarize_numeric(
    df: pd.DataFrame,
    *,
    group_col: str,
    value_col: str,
    min_group_size: int | None = None,
    ascending: bool = False,
    stat: str = "median",
) -> pd.DataFrame:
    """Per-group `n`, `mean` and `median` of `value_col`, ordered by `stat`."""
    if stat not in NUMERIC_STATS:
        raise ValueError(f"stat must be one of {NUMERIC_STATS}, got '{stat}'.")
    require_columns(df, [group_col, value_col], "table")

    values = pd.to_numeric(df[value_col], errors="coerce")
    mask = df[group_col].notna() & values.notna()
    frame = pd.DataFrame(
        {"group": df.loc[mask, group_col].to_numpy(), "value": values[mask].to_numpy(dtype=float)}
    )
    summary = frame.groupby("group", sort=False)["value"].agg(["size", "mean", "median"])
    summary = summary.rename(columns={"size": "n"})
    if min_group_size is not None:
        summary = summary.loc[summary["n"] >= int(min_group_size)].copy()
    if summary.empty:
        raise EmptySummaryError(
            f"No '{group_col}' group left to summarize (min_group_size={min_group_size})."
        )

    summary["n"] = summary["n"].astype(int)
    summary = summary.sort_values(stat, ascending=bool(ascending), kind="mergesort")
    out = summary.reset_index().rename(columns={"group": group_col})
    out["rank"] = np.arange(1, out.shape[0] + 1, dtype=int)
    return out.loc[:, [group_col, "n", "mean", "median", "rank"]]
