"""Small pure helpers for table validation."""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from pbtaviz.core.errors import MissingColumnError


def require_columns(df: pd.DataFrame, columns: Iterable[str | None], table: str = "table") -> None:
    missing = [str(c) for c in columns if c is not None and c not in df.columns]
    if missing:
        raise MissingColumnError(table, missing)


def format_fraction_label(count: int, total: int) -> str:
    return f"{int(count)} / {int(total)}"
