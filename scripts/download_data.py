#!/usr/bin/env python3
"""Download the configured data release (env BASEURL / REL) into data/."""

from __future__ import annotations

from pbtaviz.cli import download_main


def main(argv: list[str] | None = None) -> int:
    return download_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
