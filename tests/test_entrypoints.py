from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

from pbtaviz import cli


def _load_script_module(script_name: str):
    root = Path(__file__).resolve().parents[1]
    script_path = root / "scripts" / script_name
    spec = importlib.util.spec_from_file_location(script_name.replace(".py", ""), script_path)
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Unable to load script module: {script_path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_chromothripsis_script_calls_pipeline(monkeypatch):
    module = _load_script_module("chromothripsis_plots.py")
    called: list[str] = []

    monkeypatch.setattr(module, "load_analysis_config", lambda path: f"cfg:{path}")
    monkeypatch.setattr(module, "run_chromothripsis", lambda cfg: called.append(cfg))
    monkeypatch.setattr(sys, "argv", ["chromothripsis_plots.py", "--config", "tiny.json"])

    rc = module.main()
    assert rc == 0
    assert called == ["cfg:tiny.json"]


def test_signature_script_default_config(monkeypatch):
    module = _load_script_module("signature_plots.py")
    called: list[str] = []

    monkeypatch.setattr(module, "load_analysis_config", lambda path: path)
    monkeypatch.setattr(module, "run_signatures", lambda cfg: called.append(cfg))

    assert module.main([]) == 0
    assert called == ["configs/signatures.json"]


def test_cli_download_uses_environment_defaults(monkeypatch, tmp_path):
    captured: dict[str, object] = {}

    class _Report:
        release = "r1"
        fetched: list[str] = []
        skipped: list[str] = ["a.tsv"]
        verified: list[str] = ["a.tsv"]

    def _fake_download(base_url, release, data_dir, **kwargs):
        captured.update(base_url=base_url, release=release, data_dir=data_dir)
        return _Report()

    monkeypatch.setenv("BASEURL", "http://mirror.example/data")
    monkeypatch.setenv("REL", "r1")
    monkeypatch.setattr(cli, "download_release", _fake_download)

    rc = cli.main(["download", "--data-dir", str(tmp_path)])
    assert rc == 0
    assert captured == {
        "base_url": "http://mirror.example/data",
        "release": "r1",
        "data_dir": str(tmp_path),
    }
    assert (tmp_path / "logs" / "download.log").exists()


def test_cli_dispatches_analysis(monkeypatch, tmp_path):
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(
        '{"palette_path": "p.tsv", "inputs": {"calls": "c.tsv"}}', encoding="utf-8"
    )
    seen = []

    def _fake_run(config):
        seen.append(config)
        return {"artifacts": {"x": "y"}}

    monkeypatch.setattr("pbtaviz.pipeline.chromothripsis.run_chromothripsis", _fake_run)
    assert cli.main(["chromothripsis", "--config", str(cfg_path)]) == 0
    assert seen[0].input_path("calls") == tmp_path / "c.tsv"
