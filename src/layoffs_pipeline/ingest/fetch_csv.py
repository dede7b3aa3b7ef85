"""Utilities to download the raw layoffs CSV into a local cache."""

from __future__ import annotations

import logging
from pathlib import Path

import requests

log = logging.getLogger(__name__)


def fetch_layoffs_csv(url: str, out_dir: Path, filename: str = "layoffs.csv") -> Path:
    """Download or return the cached raw layoffs CSV.

    Args:
        url: HTTP(S) location of the CSV export.
        out_dir: Local directory to cache the downloaded file.
        filename: Name of the cached file inside `out_dir`.

    Returns:
        Path to the downloaded (or cached) CSV file.

    Raises:
        requests.HTTPError if the remote request fails (non-2xx status).
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / filename

    if out_path.exists() and out_path.stat().st_size > 0:
        log.info("Cache hit: %s", out_path)
        return out_path

    log.info("Downloading %s", url)
    r = requests.get(url, timeout=60)
    r.raise_for_status()
    out_path.write_bytes(r.content)
    log.info("Saved: %s (%d bytes)", out_path, out_path.stat().st_size)
    return out_path
