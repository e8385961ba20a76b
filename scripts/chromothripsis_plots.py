#!/usr/bin/env python3
"""CLI entrypoint for the chromothripsis summary plots."""

from __future__ import annotations

import argparse

from pbtaviz.config import load_analysis_config
from pbtaviz.pipeline.chromothripsis import run_chromothripsis


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plot chromothripsis proportions by histology group.")
    parser.add_argument(
        "--config",
        default="configs/chromothripsis.json",
        help="Path to JSON config",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    run_chromothripsis(load_analysis_config(args.config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
