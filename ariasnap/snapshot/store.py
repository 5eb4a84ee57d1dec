"""Snapshot store — flat directory of raw ARIA snapshot text files.

Runs are assumed to be single-writer: nothing prevents two concurrent batch
runs from writing the same directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ariasnap.url_utils import SNAPSHOT_SUFFIX

logger = logging.getLogger(__name__)


class StorageIOFailure(OSError):
    """Raised when a snapshot file cannot be read or written."""


class SnapshotStore:
    """Reads and writes baselines keyed by snapshot filename."""

    def __init__(self, snapshot_dir: str | Path):
        self.snapshot_dir = Path(snapshot_dir)

    def path_for(self, filename: str) -> Path:
        return self.snapshot_dir / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def read(self, filename: str) -> str:
        path = self.path_for(filename)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise StorageIOFailure(f"Could not read snapshot {path}: {e}") from e

    def write(self, filename: str, content: str) -> Path:
        """Write a snapshot, replacing any previous baseline with the same name."""
        path = self.path_for(filename)
        try:
            self.snapshot_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise StorageIOFailure(f"Could not write snapshot {path}: {e}") from e
        logger.debug("Saved snapshot %s (%d chars)", path, len(content))
        return path

    def list_snapshots(self) -> list[str]:
        if not self.snapshot_dir.exists():
            return []
        return sorted(p.name for p in self.snapshot_dir.glob(f"*{SNAPSHOT_SUFFIX}"))
