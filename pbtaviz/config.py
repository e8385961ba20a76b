"""Configuration loading utilities for pbtaviz pipelines."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

DEFAULT_ID_COL = "Kids_First_Biospecimen_ID"
DEFAULT_COLOR_COL = "hex_codes"
DEFAULT_ORDER_COL = "display_order"
DEFAULT_MIN_GROUP_SIZE = 3

_KNOWN_KEYS = {
    "root_dir",
    "palette_path",
    "outdir",
    "id_col",
    "color_col",
    "order_col",
    "min_group_size",
    "inputs",
}


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a pipeline config from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return data


@dataclass(frozen=True)
class AnalysisConfig:
    """Resolved paths and column names shared by the plot pipelines.

    Relative paths are resolved against `root_dir`; `root_dir` itself is
    resolved against the directory holding the config file.
    """

    root_dir: Path
    palette_path: Path
    outdir: Path
    inputs: dict[str, Path]
    id_col: str = DEFAULT_ID_COL
    color_col: str = DEFAULT_COLOR_COL
    order_col: str | None = DEFAULT_ORDER_COL
    min_group_size: int = DEFAULT_MIN_GROUP_SIZE
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, base_dir: str | Path = ".") -> "AnalysisConfig":
        for key in ("palette_path", "inputs"):
            if key not in data:
                raise ValueError(f"Config is missing required key '{key}'.")
        if not isinstance(data["inputs"], Mapping):
            raise ValueError("Config key 'inputs' must be an object of name -> path.")

        root = Path(data.get("root_dir", "."))
        if not root.is_absolute():
            root = Path(base_dir) / root

        def _resolve(value: str | Path) -> Path:
            p = Path(value)
            return p if p.is_absolute() else root / p

        min_group_size = int(data.get("min_group_size", DEFAULT_MIN_GROUP_SIZE))
        if min_group_size < 1:
            raise ValueError("min_group_size must be >= 1.")

        return cls(
            root_dir=root,
            palette_path=_resolve(data["palette_path"]),
            outdir=_resolve(data.get("outdir", "plots")),
            inputs={str(k): _resolve(v) for k, v in data["inputs"].items()},
            id_col=str(data.get("id_col", DEFAULT_ID_COL)),
            color_col=str(data.get("color_col", DEFAULT_COLOR_COL)),
            order_col=data.get("order_col", DEFAULT_ORDER_COL),
            min_group_size=min_group_size,
            options={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def input_path(self, name: str) -> Path:
        if name not in self.inputs:
            raise KeyError(f"Config inputs has no entry '{name}'.")
        return self.inputs[name]

    def to_manifest(self) -> dict[str, Any]:
        return {
            "root_dir": self.root_dir.as_posix(),
            "palette_path": self.palette_path.as_posix(),
            "outdir": self.outdir.as_posix(),
            "inputs": {k: v.as_posix() for k, v in sorted(self.inputs.items())},
            "id_col": self.id_col,
            "color_col": self.color_col,
            "order_col": self.order_col,
            "min_group_size": self.min_group_size,
            "options": dict(self.options),
        }


def load_analysis_config(path: str | Path) -> AnalysisConfig:
    config_path = Path(path)
    return AnalysisConfig.from_dict(load_json_config(config_path), base_dir=config_path.parent)
