"""Shared URL utilities — read target lists and derive stable snapshot filenames."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".snapshot.txt"
INDEX_SENTINEL = "index"
PATH_SEPARATOR = "-"


class MalformedTargetError(ValueError):
    """Raised when a target is not an absolute URL."""


def _parse_target(url: str):
    try:
        parsed = urlparse(url.strip())
    except ValueError as e:
        raise MalformedTargetError(f"Invalid URL: {url!r} ({e})") from e
    if not parsed.scheme or not parsed.netloc:
        raise MalformedTargetError(f"Invalid URL: {url!r}")
    return parsed


def snapshot_filename_from_url(url: str) -> str:
    """Derive the on-disk snapshot filename for a URL.

    ``https://x.com/demo/accordion/`` becomes ``demo-accordion.snapshot.txt``
    and the site root becomes ``index.snapshot.txt``.
    """
    path = _parse_target(url).path
    if path.startswith("/"):
        path = path[1:]
    if path.endswith("/"):
        path = path[:-1]
    name = path.replace("/", PATH_SEPARATOR) or INDEX_SENTINEL
    return f"{name}{SNAPSHOT_SUFFIX}"


def read_urls(path: str | Path) -> list[str]:
    """Read target URLs from a text file, skipping blank lines and # comments."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"URL list not found: {path}")
    with open(path, encoding="utf-8") as f:
        lines = [line.strip() for line in f]
    urls = [line for line in lines if line and not line.startswith("#")]
    logger.debug("Read %d URLs from %s", len(urls), path)
    return urls


def match_urls(urls: list[str], pattern: str) -> list[str]:
    """Select URLs matching a pattern: exact, substring, or case-insensitive regex."""
    try:
        regex = re.compile(pattern, re.IGNORECASE)
    except re.error:
        regex = None

    matches = []
    for url in urls:
        if url == pattern or pattern in url:
            matches.append(url)
        elif regex is not None and regex.search(url):
            matches.append(url)
    return matches
