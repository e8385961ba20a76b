#!/usr/bin/env python3
"""CLI entrypoint for the mutational signature summary plots."""

from __future__ import annotations

import argparse

from pbtaviz.config import load_analysis_config
from pbtaviz.pipeline.signatures import run_signatures


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plot signature mutations per Mb by histology group.")
    parser.add_argument(
        "--config",
        default="configs/signatures.json",
        help="Path to JSON config",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    run_signatures(load_analysis_config(args.config))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
