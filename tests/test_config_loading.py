from __future__ import annotations

import json
from pathlib import Path

import pytest

from pbtaviz.config import AnalysisConfig, load_analysis_config, load_json_config


def test_load_project_configs():
    root = Path(__file__).resolve().parents[1]
    chromo_cfg = load_analysis_config(root / "configs" / "chromothripsis.json")
    sigs_cfg = load_analysis_config(root / "configs" / "signatures.json")
    assert "calls" in chromo_cfg.inputs
    assert chromo_cfg.options["cancer_ascending"] is True
    assert set(sigs_cfg.inputs) == {"exposures", "tmb"}
    assert chromo_cfg.palette_path == sigs_cfg.palette_path
    assert chromo_cfg.root_dir.resolve() == root


def test_invalid_json_reports_line_and_column(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"a": 1,}\n', encoding="utf-8")
    with pytest.raises(ValueError, match=r"line \d+, column \d+"):
        load_json_config(bad)


def test_non_object_json_config_rejected(tmp_path: Path):
    bad = tmp_path / "list.json"
    bad.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError, match="expected JSON object"):
        load_json_config(bad)


def test_non_json_extension_rejected(tmp_path: Path):
    bad = tmp_path / "cfg.yaml"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Use a .json config file"):
        load_json_config(bad)


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_json_config(tmp_path / "absent.json")


def test_relative_paths_resolve_against_root(tmp_path: Path):
    cfg = AnalysisConfig.from_dict(
        {
            "root_dir": "project",
            "palette_path": "data/palette.tsv",
            "outdir": "/abs/out",
            "inputs": {"calls": "data/calls.tsv"},
            "min_group_size": 5,
            "display_ascending": True,
        },
        base_dir=tmp_path,
    )
    assert cfg.root_dir == tmp_path / "project"
    assert cfg.palette_path == tmp_path / "project" / "data" / "palette.tsv"
    assert cfg.input_path("calls") == tmp_path / "project" / "data" / "calls.tsv"
    assert cfg.outdir == Path("/abs/out")
    assert cfg.min_group_size == 5
    assert cfg.options == {"display_ascending": True}
    with pytest.raises(KeyError):
        cfg.input_path("exposures")


def test_required_keys_and_bounds():
    with pytest.raises(ValueError, match="palette_path"):
        AnalysisConfig.from_dict({"inputs": {}})
    with pytest.raises(ValueError, match="min_group_size"):
        AnalysisConfig.from_dict({"palette_path": "p.tsv", "inputs": {}, "min_group_size": 0})
