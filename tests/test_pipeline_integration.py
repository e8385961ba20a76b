from __future__ import annotations

import json
from pathlib import Path

import matplotlib
import numpy as np
import pandas as pd
import pytest

from pbtaviz.config import AnalysisConfig
from pbtaviz.core.errors import SchemaMismatchError
from pbtaviz.pipeline.chromothripsis import confidence_levels, run_chromothripsis
from pbtaviz.pipeline.signatures import run_signatures

matplotlib.use("Agg")

# (display_group, cancer_group, display_order, color, any flags)
GROUPS = [
    ("Low-grade glioma", "Pilocytic astrocytoma", 1, "#8f8fbf", [1, 1, 0, 0, 0, 0, 0, 0]),
    ("Low-grade glioma", "Ganglioglioma", 1, "#8f8fbf", [1, 0]),
    ("High-grade glioma", "Diffuse midline glioma", 2, "#ff0000", [1, 1, 1, 1, 1, 1, 0, 0, 0, 0]),
    ("Embryonal tumor", "Medulloblastoma", 3, "#2200ff", [1, 0, 0, 0, 0, 0]),
]


def _make_tables() -> tuple[pd.DataFrame, pd.DataFrame]:
    palette_rows = []
    call_rows = []
    i = 0
    for display, cancer, order, color, flags in GROUPS:
        for flag in flags:
            sid = f"BS_{i:04d}"
            palette_rows.append(
                {
                    "Kids_First_Biospecimen_ID": sid,
                    "display_group": display,
                    "cancer_group": cancer,
                    "display_order": order,
                    "hex_codes": color,
                }
            )
            n_regions = (i % 4) + 1 if flag else 0
            call_rows.append(
                {
                    "Kids_First_Biospecimen_ID": sid,
                    "count_regions_any_conf": n_regions,
                    "count_regions_high_conf": 1 if flag and i % 2 == 0 else 0,
                    "count_regions_low_conf": n_regions,
                    "any_regions_logical": "TRUE" if flag else "FALSE",
                    "high_conf_regions_logical": "TRUE" if flag and i % 2 == 0 else "FALSE",
                }
            )
            i += 1
    # Normal sample with no histology label, and a label-only sample.
    call_rows.append(
        {
            "Kids_First_Biospecimen_ID": "BS_orphan",
            "count_regions_any_conf": 0,
            "count_regions_high_conf": 0,
            "count_regions_low_conf": 0,
            "any_regions_logical": "FALSE",
            "high_conf_regions_logical": "FALSE",
        }
    )
    palette_rows.append(
        {
            "Kids_First_Biospecimen_ID": "BS_label_only",
            "display_group": "Other",
            "cancer_group": None,
            "display_order": 9,
            "hex_codes": "#b5b5b5",
        }
    )
    return pd.DataFrame(call_rows), pd.DataFrame(palette_rows)


def _write_project(tmp_path: Path) -> tuple[pd.DataFrame, pd.DataFrame]:
    calls, palette = _make_tables()
    data = tmp_path / "data"
    data.mkdir()
    calls.to_csv(data / "calls.tsv", sep="\t", index=False)
    palette.to_csv(data / "palette.tsv", sep="\t", index=False)
    return calls, palette


def _chromo_config(tmp_path: Path, **options) -> AnalysisConfig:
    return AnalysisConfig.from_dict(
        {
            "palette_path": "data/palette.tsv",
            "outdir": "plots",
            "inputs": {"calls": "data/calls.tsv"},
            "min_group_size": 3,
            **options,
        },
        base_dir=tmp_path,
    )


def test_chromothripsis_pipeline_writes_sorted_tables_and_plots(tmp_path) -> None:
    _write_project(tmp_path)
    metadata = run_chromothripsis(_chromo_config(tmp_path))

    root = tmp_path / "plots" / "chromothripsis"
    for name in [
        "display_group_proportion",
        "cancer_group_proportion",
        "display_group_region_counts",
        "display_group_confidence",
    ]:
        assert (root / "plots" / f"{name}.png").exists()
        assert (root / "tables" / f"{name}.tsv").exists()

    display = pd.read_csv(root / "tables" / "display_group_proportion.tsv", sep="\t")
    assert display["display_group"].tolist() == [
        "High-grade glioma",
        "Low-grade glioma",
        "Embryonal tumor",
    ]
    assert display["label"].tolist() == ["6 / 10", "3 / 10", "1 / 6"]
    assert int(display["total"].sum()) == 26

    cancer = pd.read_csv(root / "tables" / "cancer_group_proportion.tsv", sep="\t")
    assert cancer["cancer_group"].tolist() == [
        "Medulloblastoma",
        "Pilocytic astrocytoma",
        "Diffuse midline glioma",
    ]
    assert "Ganglioglioma" not in set(cancer["cancer_group"])

    regions = pd.read_csv(root / "tables" / "display_group_region_counts.tsv", sep="\t", dtype={"regions": str})
    assert regions["regions"].unique().tolist() == ["0", "1", "2", "3+"]
    assert regions.groupby("display_group")["count"].sum().to_dict() == {
        "Embryonal tumor": 6,
        "High-grade glioma": 10,
        "Low-grade glioma": 10,
    }

    meta = json.loads((root / "metadata.json").read_text(encoding="utf-8"))
    assert meta["n_samples"] == 27
    assert meta["n_joined"] == 26
    assert meta["n_dropped"] == 1
    assert meta == json.loads(json.dumps(metadata, default=str))
    assert (root / "logs" / "chromothripsis.log").exists()


def test_chromothripsis_sort_directions_configurable(tmp_path) -> None:
    _write_project(tmp_path)
    run_chromothripsis(_chromo_config(tmp_path, display_ascending=True, cancer_ascending=False))
    root = tmp_path / "plots" / "chromothripsis" / "tables"
    display = pd.read_csv(root / "display_group_proportion.tsv", sep="\t")
    cancer = pd.read_csv(root / "cancer_group_proportion.tsv", sep="\t")
    assert display["display_group"].tolist()[0] == "Embryonal tumor"
    assert cancer["cancer_group"].tolist()[0] == "Diffuse midline glioma"


def test_chromothripsis_missing_input_aborts(tmp_path) -> None:
    _write_project(tmp_path)
    (tmp_path / "data" / "calls.tsv").unlink()
    with pytest.raises(FileNotFoundError):
        run_chromothripsis(_chromo_config(tmp_path))


def test_chromothripsis_no_overlap_aborts(tmp_path) -> None:
    calls, palette = _write_project(tmp_path)
    palette["Kids_First_Biospecimen_ID"] = "X_" + palette["Kids_First_Biospecimen_ID"]
    palette.to_csv(tmp_path / "data" / "palette.tsv", sep="\t", index=False)
    with pytest.raises(SchemaMismatchError):
        run_chromothripsis(_chromo_config(tmp_path))


def test_confidence_levels() -> None:
    df = pd.DataFrame(
        {
            "any_regions_logical": [True, True, False],
            "high_conf_regions_logical": [True, False, False],
        }
    )
    assert confidence_levels(df).tolist() == ["High", "Low", "None"]


def test_signatures_pipeline(tmp_path) -> None:
    _, palette = _write_project(tmp_path)
    ids = palette["Kids_First_Biospecimen_ID"].tolist()[:-1]
    rng = np.random.default_rng(0)
    weights = rng.dirichlet([1.0, 1.0, 1.0], size=len(ids))
    weights[:5, 0] = 0.0
    exposures = pd.DataFrame(weights, index=ids, columns=["Signature.1", "Signature.3", "Signature.8"])
    exposures.to_csv(tmp_path / "data" / "exposures.tsv", sep="\t")
    tmb = pd.DataFrame({"Kids_First_Biospecimen_ID": ids[:-2], "tmb": rng.uniform(0.5, 20.0, size=len(ids) - 2)})
    tmb.to_csv(tmp_path / "data" / "tmb.tsv", sep="\t", index=False)

    config = AnalysisConfig.from_dict(
        {
            "palette_path": "data/palette.tsv",
            "outdir": "plots",
            "inputs": {"exposures": "data/exposures.tsv", "tmb": "data/tmb.tsv"},
            "min_group_size": 3,
            "signatures": ["Signature.1", "Signature.3"],
        },
        base_dir=tmp_path,
    )
    metadata = run_signatures(config)

    root = tmp_path / "plots" / "signatures"
    assert metadata["signatures"] == ["Signature.1", "Signature.3"]
    assert metadata["n_joined_samples"] == len(ids) - 2
    for stem in ["Signature_1", "Signature_3"]:
        assert (root / "plots" / f"{stem}_per_mb.png").exists()
        rates = pd.read_csv(root / "tables" / f"{stem}_per_mb.tsv", sep="\t")
        assert list(rates["median"]) == sorted(rates["median"], reverse=True)
        assert (rates["n"] >= 3).all()
        nonzero = pd.read_csv(root / "tables" / f"{stem}_nonzero.tsv", sep="\t")
        assert (nonzero["count_true"] <= nonzero["total"]).all()
    assert not (root / "plots" / "Signature_8_per_mb.png").exists()

    heat = pd.read_csv(root / "tables" / "mean_exposure.tsv", sep="\t")
    assert heat.columns.tolist() == ["display_group", "Signature.1", "Signature.3"]
    assert heat["display_group"].tolist() == sorted(heat["display_group"])
    assert (root / "plots" / "mean_exposure_heatmap.png").exists()


def test_signatures_unknown_signature_rejected(tmp_path) -> None:
    _, palette = _write_project(tmp_path)
    ids = palette["Kids_First_Biospecimen_ID"].tolist()
    pd.DataFrame({"Signature.1": [1.0] * len(ids)}, index=ids).to_csv(
        tmp_path / "data" / "exposures.tsv", sep="\t"
    )
    pd.DataFrame({"Kids_First_Biospecimen_ID": ids, "tmb": [1.0] * len(ids)}).to_csv(
        tmp_path / "data" / "tmb.tsv", sep="\t", index=False
    )
    config = AnalysisConfig.from_dict(
        {
            "palette_path": "data/palette.tsv",
            "inputs": {"exposures": "data/exposures.tsv", "tmb": "data/tmb.tsv"},
            "signatures": ["Signature.99"],
        },
        base_dir=tmp_path,
    )
    with pytest.raises(KeyError, match="Signature.99"):
        run_signatures(config)
