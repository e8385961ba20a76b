from __future__ import annotations

import pandas as pd
import pytest

from pbtaviz.core.errors import EmptySummaryError, MissingColumnError, SchemaMismatchError
from pbtaviz.core.rates import exposures_per_mb, summarize_numeric


def _exposures() -> pd.DataFrame:
    return pd.DataFrame(
        {"Signature.1": [0.5, 0.0, 0.25], "Signature.3": [0.5, 1.0, 0.75]},
        index=["s1", "s2", "s3"],
    )


def test_exposures_per_mb_scales_by_tmb_and_drops_missing():
    tmb = pd.DataFrame({"id": ["s1", "s2", "s4"], "tmb": [2.0, 10.0, 1.0]})
    long = exposures_per_mb(_exposures(), tmb, id_col="id")
    assert long["id"].tolist() == ["s1", "s1", "s2", "s2"]
    assert long["signature"].tolist() == ["Signature.1", "Signature.3"] * 2
    assert long["mut_per_mb"].tolist() == pytest.approx([1.0, 1.0, 0.0, 10.0])
    assert long["exposure"].tolist() == pytest.approx([0.5, 0.5, 0.0, 1.0])


def test_exposures_per_mb_errors():
    with pytest.raises(SchemaMismatchError):
        exposures_per_mb(_exposures(), pd.DataFrame({"id": ["zz"], "tmb": [1.0]}), id_col="id")
    with pytest.raises(MissingColumnError):
        exposures_per_mb(_exposures(), pd.DataFrame({"id": ["s1"]}), id_col="id")
    with pytest.raises(SchemaMismatchError, match="duplicated"):
        exposures_per_mb(
            _exposures(), pd.DataFrame({"id": ["s1", "s1"], "tmb": [1.0, 2.0]}), id_col="id"
        )


def test_summarize_numeric_orders_by_median():
    df = pd.DataFrame(
        {
            "group": ["A", "A", "A", "B", "B", "C", None],
            "value": [1.0, 2.0, 30.0, 5.0, 7.0, 100.0, 999.0],
        }
    )
    out = summarize_numeric(df, group_col="group", value_col="value")
    assert out["group"].tolist() == ["C", "B", "A"]
    assert out["n"].tolist() == [1, 2, 3]
    assert out["median"].tolist() == pytest.approx([100.0, 6.0, 2.0])
    assert out["mean"].tolist() == pytest.approx([100.0, 6.0, 11.0])

    by_mean = summarize_numeric(df, group_col="group", value_col="value", stat="mean", ascending=True)
    assert by_mean["group"].tolist() == ["B", "A", "C"]

    filtered = summarize_numeric(df, group_col="group", value_col="value", min_group_size=2)
    assert filtered["group"].tolist() == ["B", "A"]
    with pytest.raises(EmptySummaryError):
        summarize_numeric(df, group_col="group", value_col="value", min_group_size=4)
    with pytest.raises(ValueError, match="stat"):
        summarize_numeric(df, group_col="group", value_col="value", stat="mode")
