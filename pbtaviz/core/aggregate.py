"""Join per-sample calls to histology labels and summarize them per group."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from pbtaviz.core.errors import EmptySummaryError, SchemaMismatchError
from pbtaviz.core.utils import format_fraction_label, require_columns

TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})

SUMMARY_COLUMNS = ["count_true", "total", "proportion", "label", "rank"]


def join_labels(
    samples: pd.DataFrame,
    labels: pd.DataFrame,
    *,
    id_col: str,
    label_cols: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Inner-join sample records against the label table on `id_col`.

    Samples without a label row are dropped, and rows with a missing id on
    either side never match. Label columns replace sample columns of the
    same name. Row order follows `samples`.
    """
    require_columns(samples, [id_col], "samples")
    if label_cols is None:
        keep = [str(c) for c in labels.columns if c != id_col]
    else:
        keep = [str(c) for c in label_cols if c != id_col]
    require_columns(labels, [id_col, *keep], "labels")

    samples = samples.loc[samples[id_col].notna()]
    labels = labels.loc[labels[id_col].notna()]
    label_ids = labels[id_col].astype(str)
    duplicated = label_ids[label_ids.duplicated()]
    if not duplicated.empty:
        raise SchemaMismatchError(
            f"Label table has duplicated '{id_col}' values: "
            f"{', '.join(sorted(set(duplicated))[:5])}"
        )

    left = samples.drop(columns=[c for c in keep if c in samples.columns])
    left = left.assign(**{id_col: left[id_col].astype(str)})
    right = labels.loc[:, [id_col, *keep]].assign(**{id_col: label_ids})

    joined = left.merge(right, how="inner", on=id_col, sort=False)
    if joined.empty:
        raise SchemaMismatchError(
            f"No rows matched on '{id_col}' "
            f"(samples={samples.shape[0]}, labels={labels.shape[0]})."
        )
    return joined.reset_index(drop=True)


def coerce_predicate(
    values: Iterable[Any] | pd.Series,
    *,
    true_values: Iterable[Any] | None = None,
) -> pd.Series:
    """Reduce a boolean-like or categorical column to a boolean Series."""
    s = values if isinstance(values, pd.Series) else pd.Series(list(values))
    if true_values is not None:
        return s.isin(list(true_values)) & s.notna()
    if s.isna().any():
        raise ValueError(
            f"Predicate '{s.name}' has {int(s.isna().sum())} missing value(s)."
        )
    if pd.api.types.is_bool_dtype(s):
        return s.astype(bool)
    if pd.api.types.is_numeric_dtype(s):
        return s > 0

    text = s.astype(str).str.strip().str.lower()
    unknown = ~text.isin(TRUE_STRINGS | FALSE_STRINGS)
    if unknown.any():
        examples = sorted(set(s[unknown].astype(str)))[:5]
        raise ValueError(
            f"Predicate '{s.name}' is not boolean-like; unrecognized values: {examples}"
        )
    return text.isin(TRUE_STRINGS)


def summarize_groups(
    joined: pd.DataFrame,
    *,
    group_col: str,
    predicate_col: str,
    min_group_size: int | None = None,
    ascending: bool = False,
    true_values: Iterable[Any] | None = None,
    color_col: str | None = None,
    order_col: str | None = None,
) -> pd.DataFrame:
    """Count predicate hits per group and order groups by proportion.

    Returns one row per group with columns `group_col`, `count_true`,
    `total`, `proportion`, `label` ("k / n") and `rank` (1-based), plus
    `color_col` when given. Rows with a missing group value are excluded,
    as are groups with fewer than `min_group_size` members. Groups start in
    order of first appearance (or ascending `order_col`) and are then
    stable-sorted on `proportion`, so ties keep that base order.
    """
    require_columns(joined, [group_col, predicate_col, color_col, order_col], "joined")

    work = joined.loc[joined[group_col].notna()]
    flags = coerce_predicate(work[predicate_col], true_values=true_values)
    frame = pd.DataFrame(
        {"group": work[group_col].to_numpy(), "flag": flags.to_numpy(dtype=bool)}
    )
    agg: dict[str, tuple[str, str]] = {
        "count_true": ("flag", "sum"),
        "total": ("flag", "size"),
    }
    if color_col is not None:
        frame["color"] = work[color_col].to_numpy()
        agg["color"] = ("color", "first")
    if order_col is not None:
        frame["order_key"] = pd.to_numeric(work[order_col], errors="coerce").to_numpy()
        agg["order_key"] = ("order_key", "first")

    summary = frame.groupby("group", sort=False).agg(**agg)
    if min_group_size is not None:
        summary = summary.loc[summary["total"] >= int(min_group_size)].copy()
    if summary.empty:
        raise EmptySummaryError(
            f"No '{group_col}' group left to summarize "
            f"(rows={joined.shape[0]}, min_group_size={min_group_size})."
        )

    if order_col is not None:
        summary = summary.sort_values("order_key", kind="mergesort", na_position="last")
        summary = summary.drop(columns=["order_key"])

    summary["count_true"] = summary["count_true"].astype(int)
    summary["total"] = summary["total"].astype(int)
    summary["proportion"] = summary["count_true"] / summary["total"]
    summary = summary.sort_values("proportion", ascending=bool(ascending), kind="mergesort")

    out = summary.reset_index().rename(columns={"group": group_col})
    out["label"] = [
        format_fraction_label(k, n) for k, n in zip(out["count_true"], out["total"])
    ]
    out["rank"] = np.arange(1, out.shape[0] + 1, dtype=int)

    columns = [group_col, *SUMMARY_COLUMNS]
    if color_col is not None:
        out = out.rename(columns={"color": color_col})
        columns.append(color_col)
    return out.loc[:, columns]


def summarize_composition(
    joined: pd.DataFrame,
    *,
    group_col: str,
    category_col: str,
    min_group_size: int | None = None,
    group_order: Sequence[Any] | None = None,
    category_order: Sequence[Any] | None = None,
) -> pd.DataFrame:
    """Long-format category counts per group for stacked/filled bar charts."""
    require_columns(joined, [group_col, category_col], "joined")
    work = joined.loc[joined[group_col].notna()]
    if work[category_col].isna().any():
        raise ValueError(
            f"Column '{category_col}' has missing values; fill them before summarizing."
        )

    present = list(pd.unique(work[group_col]))
    if group_order is None:
        groups = present
    else:
        present_set = set(present)
        groups = [g for g in group_order if g in present_set]

    observed = list(pd.unique(work[category_col]))
    if category_order is None:
        if isinstance(work[category_col].dtype, pd.CategoricalDtype):
            categories = list(work[category_col].cat.categories)
        else:
            categories = sorted(observed, key=str)
    else:
        categories = list(category_order)
        known = set(categories)
        extra = [c for c in observed if c not in known]
        if extra:
            raise ValueError(
                f"Values of '{category_col}' missing from category_order: {extra[:5]}"
            )

    counts = pd.crosstab(
        work[group_col].astype(object), work[category_col].astype(object)
    ).reindex(index=groups, columns=categories, fill_value=0)
    totals = counts.sum(axis=1)
    if min_group_size is not None:
        counts = counts.loc[totals >= int(min_group_size)]
    if counts.empty:
        raise EmptySummaryError(
            f"No '{group_col}' group left to summarize (min_group_size={min_group_size})."
        )

    records: list[dict[str, Any]] = []
    for group in counts.index:
        total = int(totals[group])
        for category in counts.columns:
            n = int(counts.at[group, category])
            records.append(
                {
                    group_col: group,
                    category_col: category,
                    "count": n,
                    "total": total,
                    "fraction": n / total,
                }
            )
    return pd.DataFrame(records, columns=[group_col, category_col, "count", "total", "fraction"])


def bin_counts(values: Iterable[Any] | pd.Series, *, cap: int = 3) -> pd.Series:
    """Bin non-negative counts into ordered labels "0", "1", ..., "<cap>+"."""
    if int(cap) <= 0:
        raise ValueError("cap must be a positive integer.")
    s = values if isinstance(values, pd.Series) else pd.Series(list(values))
    num = pd.to_numeric(s, errors="raise")
    if num.isna().any():
        raise ValueError(f"Counts '{s.name}' contain missing values.")
    if (num < 0).any():
        raise ValueError(f"Counts '{s.name}' must be non-negative.")

    cap_i = int(cap)
    top = f"{cap_i}+"
    labels = [str(i) for i in range(cap_i)] + [top]
    binned = np.where(num >= cap_i, top, num.astype(int).astype(str))
    return pd.Series(
        pd.Categorical(binned, categories=labels, ordered=True),
        index=s.index,
        name=s.name,
    )
