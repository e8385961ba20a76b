"""Shared plotting utilities used by figure factories."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import matplotlib.colors as mcolors
import matplotlib.figure
import matplotlib.pyplot as plt
import pandas as pd

from pbtaviz.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle


def sanitize_label(label: str, max_len: int = 64) -> str:
    """Create deterministic filesystem-safe stems for group or signature labels."""
    clean = "".join(ch if (ch.isalnum() or ch == "_") else "_" for ch in str(label))
    clean = clean.strip("_") or "unnamed"
    return clean[:max_len]


def resolve_colors(
    values: Iterable[Any], *, style: PlotStyle = DEFAULT_PLOT_STYLE
) -> list[str]:
    """Map palette entries to valid matplotlib colors, falling back to grey."""
    out: list[str] = []
    for v in values:
        if v is None or (isinstance(v, float) and pd.isna(v)):
            out.append(style.default_color)
            continue
        text = str(v).strip()
        out.append(text if mcolors.is_color_like(text) else style.default_color)
    return out


def save_figure(
    fig: matplotlib.figure.Figure,
    out_path: Path,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
    bbox_tight: bool = True,
    close: bool = True,
) -> Path:
    """Save figure deterministically and optionally close it."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    save_kwargs: dict[str, object] = {
        "dpi": style.dpi,
        "facecolor": "white",
        "pad_inches": 0.02,
    }
    if bbox_tight:
        save_kwargs["bbox_inches"] = "tight"
    fig.savefig(out_path, **save_kwargs)
    if close:
        plt.close(fig)
    return out_path
