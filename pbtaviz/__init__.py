"""pbtaviz public API."""

from pbtaviz._version import __version__
from pbtaviz.config import AnalysisConfig, load_analysis_config
from pbtaviz.core.aggregate import (
    bin_counts,
    coerce_predicate,
    join_labels,
    summarize_composition,
    summarize_groups,
)
from pbtaviz.core.errors import EmptySummaryError, MissingColumnError, SchemaMismatchError
from pbtaviz.core.rates import exposures_per_mb, summarize_numeric


def run_chromothripsis(*args, **kwargs):
    """Lazy wrapper to avoid importing plotting dependencies at import time."""
    from pbtaviz.pipeline.chromothripsis import run_chromothripsis as _run

    return _run(*args, **kwargs)


def run_signatures(*args, **kwargs):
    """Lazy wrapper to avoid importing plotting dependencies at import time."""
    from pbtaviz.pipeline.signatures import run_signatures as _run

    return _run(*args, **kwargs)


__all__ = [
    "__version__",
    "AnalysisConfig",
    "load_analysis_config",
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
    "run_chromothripsis",
    "run_signatures",
]
