"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from ariasnap.models.config import SnapshotConfig, ViewportConfig
from ariasnap.models.snapshot_result import (
    CAPTURED,
    ERROR,
    FAIL,
    MISSING,
    MODE_CAPTURE,
    MODE_VALIDATE,
    PASS,
    BatchResult,
    DiffDetails,
    TaskOutcome,
)
from ariasnap.snapshot.store import SnapshotStore


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def snapshot_config(tmp_path: Path) -> SnapshotConfig:
    """Create a config rooted in a temporary directory with no settle delay."""
    return SnapshotConfig(
        urls_file=str(tmp_path / "public_urls.txt"),
        snapshot_dir=str(tmp_path / "snapshot_latest"),
        report_dir=str(tmp_path / "test-results"),
        max_concurrent=3,
        navigation_timeout_ms=5000,
        settle_delay_ms=0,
        viewport=ViewportConfig(width=1280, height=720),
    )


@pytest.fixture
def urls_file(snapshot_config: SnapshotConfig) -> Path:
    """Write a small URL list with a comment and blank lines."""
    path = Path(snapshot_config.urls_file)
    path.write_text(
        "# demo pages\n"
        "https://example.com/\n"
        "\n"
        "https://example.com/demo/accordion/\n"
        "  https://example.com/demo/advanced-heading/  \n"
        "# https://example.com/skipped/\n",
        encoding="utf-8",
    )
    return path


# ============================================================================
# Snapshot Fixtures
# ============================================================================


SAMPLE_SNAPSHOT = """- banner:
  - link "Home"
- main:
  - heading "Accordion" [level=1]
  - button "Section one"
  - button "Section two"
- contentinfo:
  - text: Footer
"""


@pytest.fixture
def sample_snapshot() -> str:
    return SAMPLE_SNAPSHOT


@pytest.fixture
def store(snapshot_config: SnapshotConfig) -> SnapshotStore:
    return SnapshotStore(snapshot_config.snapshot_dir)


# ============================================================================
# Mock Browser Fixtures
# ============================================================================


@pytest.fixture
def mock_renderer(sample_snapshot: str) -> AsyncMock:
    """Renderer stand-in that returns the sample snapshot for every URL."""
    renderer = AsyncMock()
    renderer.render_region = AsyncMock(return_value=sample_snapshot)
    return renderer


# ============================================================================
# Result Fixtures
# ============================================================================


def make_outcome(url="https://example.com/demo/accordion/", status=PASS, index=0, **kwargs) -> TaskOutcome:
    defaults = {"filename": "demo-accordion.snapshot.txt"}
    defaults.update(kwargs)
    return TaskOutcome(url=url, status=status, index=index, **defaults)


@pytest.fixture
def validation_result() -> BatchResult:
    """A validation batch with one outcome of each status."""
    return BatchResult(
        mode=MODE_VALIDATE,
        total_urls=4,
        started_at="2025-01-01T00:00:00Z",
        completed_at="2025-01-01T00:00:08Z",
        duration_seconds=8.0,
        outcomes=(
            make_outcome("https://example.com/", PASS, 0,
                         filename="index.snapshot.txt", similarity=100.0),
            make_outcome("https://example.com/demo/accordion/", FAIL, 1,
                         error="Snapshot mismatch (50.00% similar, threshold: 95%)",
                         similarity=50.0,
                         details=DiffDetails(expected_lines=10, actual_lines=12,
                                             line_diff_percentage=16.67,
                                             similarity=50.0, threshold=95.0)),
            make_outcome("https://example.com/demo/new/", MISSING, 2,
                         filename="demo-new.snapshot.txt",
                         error="Snapshot file not found"),
            make_outcome("https://example.com/demo/broken/", ERROR, 3,
                         filename="demo-broken.snapshot.txt",
                         error="Timeout 180000ms exceeded"),
        ),
    )


@pytest.fixture
def capture_result() -> BatchResult:
    """A capture batch with two successes and one failure."""
    return BatchResult(
        mode=MODE_CAPTURE,
        total_urls=3,
        started_at="2025-01-01T00:00:00Z",
        completed_at="2025-01-01T00:00:06Z",
        duration_seconds=6.0,
        outcomes=(
            make_outcome("https://example.com/", CAPTURED, 0, filename="index.snapshot.txt"),
            make_outcome("https://example.com/demo/accordion/", CAPTURED, 1),
            make_outcome("https://example.com/demo/broken/", ERROR, 2,
                         filename="demo-broken.snapshot.txt",
                         error="net::ERR_NAME_NOT_RESOLVED"),
        ),
    )
