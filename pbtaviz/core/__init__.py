"""Core aggregation subpackage."""

from pbtaviz.core.aggregate import (
    bin_counts,
    coerce_predicate,
    join_labels,
    summarize_composition,
    summarize_groups,
)
from pbtaviz.core.errors import EmptySummaryError, MissingColumnError, SchemaMismatchError
from pbtaviz.core.rates import exposures_per_mb, summarize_numeric

__all__ = [
    "MissingColumnError",
    "SchemaMismatchError",
    "EmptySummaryError",
    "join_labels",
    "coerce_predicate",
    "summarize_groups",
    "summarize_composition",
    "bin_counts",
    "exposures_per_mb",
    "summarize_numeric",
]
