"""Pipeline I/O, logging, and utility helpers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from pbtaviz.core.utils import require_columns


def ensure_dir(path: str | Path) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=str)


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def setup_logger(log_path: Path, logger_name: str) -> logging.Logger:
    ensure_dir(log_path.parent)
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)
    return logger


def read_tsv(path: str | Path, *, required: Iterable[str] = ()) -> pd.DataFrame:
    """Read a tab-separated table and check for required columns."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file '{p}' not found.")
    df = pd.read_csv(p, sep="\t")
    require_columns(df, list(required), p.name)
    return df


def read_exposure_matrix(path: str | Path) -> pd.DataFrame:
    """Read a samples x signatures matrix; the first column holds sample ids."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file '{p}' not found.")
    sep = "," if p.suffix.lower() == ".csv" else "\t"
    df = pd.read_csv(p, sep=sep, index_col=0)
    df.index = df.index.astype(str)
    return df


def write_table(df: pd.DataFrame, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out, sep="\t", index=False)
    return out
