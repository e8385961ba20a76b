"""Command-line interfaces for pbtaviz."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

from pbtaviz.config import load_analysis_config
from pbtaviz.download import download_release, release_settings
from pbtaviz.pipeline.io import setup_logger


def download_main(argv: Iterable[str] | None = None) -> int:
    """Download and verify a data release.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    base_url, release = release_settings()
    parser = argparse.ArgumentParser(description="Download an OpenPBTA data release")
    parser.add_argument("--base-url", default=base_url, help="Bucket URL (env BASEURL)")
    parser.add_argument("--release", default=release, help="Release tag (env REL)")
    parser.add_argument("--data-dir", default="data", help="Local data directory")
    parser.add_argument("--timeout", type=float, default=60.0, help="Per-request timeout (s)")
    args = parser.parse_args(list(argv) if argv is not None else None)

    logger = setup_logger(Path(args.data_dir) / "logs" / "download.log", "pbtaviz.download")
    report = download_release(
        args.base_url,
        args.release,
        args.data_dir,
        logger=logger,
        timeout=args.timeout,
    )
    logger.info(
        "release=%s fetched=%d skipped=%d verified=%d",
        report.release,
        len(report.fetched),
        len(report.skipped),
        len(report.verified),
    )
    return 0


def _analysis_main(name: str, argv: Iterable[str] | None) -> int:
    parser = argparse.ArgumentParser(description=f"pbtaviz {name} plots")
    parser.add_argument("--config", required=True, help="Path to JSON config")
    args = parser.parse_args(list(argv) if argv is not None else None)

    config = load_analysis_config(args.config)
    if name == "chromothripsis":
        from pbtaviz.pipeline.chromothripsis import run_chromothripsis

        metadata = run_chromothripsis(config)
    else:
        from pbtaviz.pipeline.signatures import run_signatures

        metadata = run_signatures(config)
    logging.getLogger(f"pbtaviz.{name}").info(
        "Done: %d artifact(s) under %s", len(metadata["artifacts"]), config.outdir
    )
    return 0


def chromothripsis_main(argv: Iterable[str] | None = None) -> int:
    return _analysis_main("chromothripsis", argv)


def signatures_main(argv: Iterable[str] | None = None) -> int:
    return _analysis_main("signatures", argv)


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(description="pbtaviz CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("download", help="Download and verify a data release")
    sub.add_parser("chromothripsis", help="Chromothripsis summary plots")
    sub.add_parser("signatures", help="Mutational signature summary plots")

    args, remainder = parser.parse_known_args(list(argv) if argv is not None else None)
    if args.command == "download":
        return download_main(remainder)
    if args.command == "chromothripsis":
        return chromothripsis_main(remainder)
    if args.command == "signatures":
        return signatures_main(remainder)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
