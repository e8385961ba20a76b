"""Exception types raised by the aggregation layer."""

from __future__ import annotations


class MissingColumnError(KeyError):
    """A required column is absent from an input table."""

    def __init__(self, table: str, columns: list[str]):
        self.table = table
        self.columns = list(columns)
        super().__init__(f"{table} is missing required column(s): {', '.join(self.columns)}")

    def __str__(self) -> str:
        return str(self.args[0])


class SchemaMismatchError(ValueError):
    """Two tables cannot be joined into a usable result."""


class EmptySummaryError(ValueError):
    """No group survived filtering."""
