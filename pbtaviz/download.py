"""Download a versioned data release and verify it against its md5 manifest.

The manifest (`md5sum.txt`, in `md5sum` output format) lists every file in a
release. Each file is fetched only when the server copy is newer than the
local one, all manifest entries are checked, and stable symlinks
`<data_dir>/<file>` are pointed at `<data_dir>/<release>/<file>`.
"""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass, field
from email.utils import formatdate, parsedate_to_datetime
from pathlib import Path
from typing import Mapping

import requests

DEFAULT_BASE_URL = "https://s3.amazonaws.com/kf-openaccess-us-east-1-prd-pbta/data"
DEFAULT_RELEASE = "release-v2-20190809"
MANIFEST_NAME = "md5sum.txt"
RELEASE_NOTES = "release-notes.md"

_LOGGER = logging.getLogger(__name__)


class ChecksumMismatchError(RuntimeError):
    """One or more release files failed md5 verification."""

    def __init__(self, failures: dict[str, str]):
        self.failures = dict(failures)
        detail = ", ".join(f"{name} ({reason})" for name, reason in sorted(self.failures.items()))
        super().__init__(f"md5 verification failed for {len(self.failures)} file(s): {detail}")


@dataclass
class DownloadReport:
    release: str
    release_dir: Path
    fetched: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    verified: list[str] = field(default_factory=list)
    links: list[str] = field(default_factory=list)


def release_settings(environ: Mapping[str, str] | None = None) -> tuple[str, str]:
    """Return `(base_url, release)` from `BASEURL`/`REL`, with project defaults."""
    env = os.environ if environ is None else environ
    return env.get("BASEURL") or DEFAULT_BASE_URL, env.get("REL") or DEFAULT_RELEASE


def md5_file(path: Path) -> str:
    h = hashlib.md5()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def parse_manifest(text: str) -> list[tuple[str, str]]:
    """Parse `md5sum` output into `(filename, md5)` pairs, in file order."""
    entries: list[tuple[str, str]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        parts = line.split()
        if not parts:
            continue
        if len(parts) < 2:
            raise ValueError(f"Malformed manifest line {lineno}: '{line.strip()}'")
        digest, name = parts[0].lower(), parts[1].lstrip("*")
        entries.append((name, digest))
    return entries


def fetch_if_newer(
    session: requests.Session,
    url: str,
    dest: Path,
    *,
    timeout: float = 60.0,
) -> bool:
    """GET `url` into `dest` unless the server reports it unmodified.

    Sends `If-Modified-Since` from the local file's mtime. Returns True when a
    body was written. The local mtime is set from `Last-Modified` so later
    runs compare against the server's timestamp. HTTP errors propagate and
    partially written files are left in place.
    """
    headers: dict[str, str] = {}
    if dest.exists():
        headers["If-Modified-Since"] = formatdate(dest.stat().st_mtime, usegmt=True)

    with session.get(url, headers=headers, stream=True, timeout=timeout) as resp:
        if resp.status_code == 304:
            return False
        resp.raise_for_status()
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("wb") as fh:
            for chunk in resp.iter_content(chunk_size=1024 * 1024):
                if chunk:
                    fh.write(chunk)
        last_modified = resp.headers.get("Last-Modified")

    if last_modified:
        ts = parsedate_to_datetime(last_modified).timestamp()
        os.utime(dest, (ts, ts))
    return True


def verify_manifest(release_dir: Path, entries: list[tuple[str, str]]) -> list[str]:
    """Check every manifest entry; raise `ChecksumMismatchError` listing all failures."""
    failures: dict[str, str] = {}
    verified: list[str] = []
    for name, expected in entries:
        path = release_dir / name
        if not path.exists():
            failures[name] = "missing"
            continue
        actual = md5_file(path)
        if actual != expected:
            failures[name] = f"expected {expected}, got {actual}"
            continue
        verified.append(name)
    if failures:
        raise ChecksumMismatchError(failures)
    return verified


def link_release(data_dir: Path, release: str, files: list[str]) -> list[str]:
    """Point `<data_dir>/<file>` at the versioned copy, replacing old links."""
    links: list[str] = []
    for name in files:
        link = data_dir / name
        target = data_dir / release / name
        if link.is_symlink() or link.is_file():
            link.unlink()
        elif link.exists():
            raise FileExistsError(f"Refusing to replace directory '{link}' with a symlink.")
        link.parent.mkdir(parents=True, exist_ok=True)
        link.symlink_to(os.path.relpath(target, link.parent))
        links.append(link.as_posix())
    return links


def download_release(
    base_url: str = DEFAULT_BASE_URL,
    release: str = DEFAULT_RELEASE,
    data_dir: str | Path = "data",
    *,
    session: requests.Session | None = None,
    logger: logging.Logger | None = None,
    timeout: float = 60.0,
) -> DownloadReport:
    """Fetch, verify and link one data release."""
    log = logger or _LOGGER
    data_root = Path(data_dir)
    release_dir = data_root / release
    report = DownloadReport(release=release, release_dir=release_dir)
    base = f"{base_url.rstrip('/')}/{release}"

    own_session = session is None
    http = requests.Session() if own_session else session
    try:
        manifest_path = release_dir / MANIFEST_NAME
        fetched = fetch_if_newer(http, f"{base}/{MANIFEST_NAME}", manifest_path, timeout=timeout)
        log.info("%s %s", "Fetched" if fetched else "Up to date:", MANIFEST_NAME)

        entries = parse_manifest(manifest_path.read_text(encoding="utf-8"))
        files = [name for name, _ in entries] + [RELEASE_NOTES]
        for name in files:
            if fetch_if_newer(http, f"{base}/{name}", release_dir / name, timeout=timeout):
                report.fetched.append(name)
                log.info("Fetched %s", name)
            else:
                report.skipped.append(name)
                log.info("Up to date: %s", name)
    finally:
        if own_session:
            http.close()

    report.verified = verify_manifest(release_dir, entries)
    log.info("Verified %d file(s) against %s", len(report.verified), MANIFEST_NAME)

    report.links = link_release(data_root, release, files)
    log.info("Linked %d file(s) in %s to %s", len(report.links), data_root, release)
    return report
