"""Snapshot orchestrator — coordinates URL loading, batch capture/validation, and reporting."""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from pathlib import Path

from ariasnap.browser.renderer import AriaRenderer
from ariasnap.models.config import SnapshotConfig
from ariasnap.models.snapshot_result import (
    MODE_CAPTURE,
    MODE_VALIDATE,
    BatchResult,
)
from ariasnap.reporter.reporter import Reporter
from ariasnap.runner.batch import run_batch
from ariasnap.runner.tasks import capture_snapshot, validate_snapshot
from ariasnap.snapshot.store import SnapshotStore
from ariasnap.url_utils import match_urls, read_urls, snapshot_filename_from_url

logger = logging.getLogger(__name__)


class SnapshotOrchestrator:
    """Runs capture and validation batches over the configured URL list."""

    def __init__(self, config: SnapshotConfig):
        self.config = config
        self.store = SnapshotStore(config.snapshot_dir)
        self.reporter = Reporter(config)

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def create_all(self, sequential: bool = False, concurrency: int | None = None) -> dict:
        """Capture baselines for every URL in the URL list."""
        urls = self.load_urls()
        logger.info("Starting batch snapshot update: %d URLs", len(urls))
        limit = 1 if sequential else (concurrency or self.config.max_concurrent)
        return asyncio.run(self._run(urls, MODE_CAPTURE, limit))

    def create_one(self, url: str) -> dict:
        """Capture (or refresh) the baseline for a single URL."""
        return asyncio.run(self._run([url], MODE_CAPTURE, 1, write_reports=False))

    def update_matching(self, pattern: str) -> dict:
        """Refresh baselines for URLs matching an exact URL, substring, or regex."""
        urls = self.load_urls()
        matches = match_urls(urls, pattern)
        if not matches:
            logger.warning("No URLs found matching: %r", pattern)
            logger.info("Tip: try a substring such as 'accordion' or 'advanced-heading'")
            now = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
            empty = BatchResult(mode=MODE_CAPTURE, started_at=now, completed_at=now)
            return {"result": empty, "reports": {}}

        logger.info("Found %d matching URL(s)", len(matches))
        for i, url in enumerate(matches, 1):
            logger.info("  %d. %s", i, url)
        return asyncio.run(self._run(matches, MODE_CAPTURE, 1, write_reports=False))

    def validate_all(self, concurrency: int | None = None) -> dict:
        """Validate every URL in the URL list against its stored baseline."""
        urls = self.load_urls()
        logger.info("Starting snapshot validation: %d URLs", len(urls))
        limit = concurrency or self.config.max_concurrent
        return asyncio.run(self._run(urls, MODE_VALIDATE, limit))

    def render_latest_report(self) -> Path:
        return self.reporter.render_latest_html()

    def load_urls(self) -> list[str]:
        return read_urls(self.config.urls_file)

    # ------------------------------------------------------------------
    # Batch execution
    # ------------------------------------------------------------------

    async def _run(
        self, urls: list[str], mode: str, concurrency: int, write_reports: bool = True,
    ) -> dict:
        # Malformed targets abort before anything is scheduled
        for url in urls:
            snapshot_filename_from_url(url)

        task_fn = capture_snapshot if mode == MODE_CAPTURE else validate_snapshot
        logger.info("Concurrency: %s", "sequential" if concurrency == 1 else f"{concurrency} parallel")

        async with AriaRenderer(self.config) as renderer:
            task = functools.partial(
                task_fn, renderer=renderer, store=self.store, config=self.config,
            )
            result = await run_batch(urls, concurrency, task, mode)

        self._log_summary(result)

        reports: dict[str, str] = {}
        if write_reports:
            reports = self.reporter.generate_reports(result)
        return {"result": result, "reports": reports}

    @staticmethod
    def _log_summary(result: BatchResult) -> None:
        if result.mode == MODE_CAPTURE:
            logger.info("Summary: %d captured, %d failed of %d (%.2fs, %.2f snapshots/sec)",
                        len(result.captured), len(result.unsuccessful), result.total_urls,
                        result.duration_seconds, result.throughput)
            for outcome in result.unsuccessful:
                logger.warning("Failed: %s (%s)", outcome.url, outcome.error)
            return

        logger.info(
            "Validation summary: %d passed, %d failed, %d missing, %d errors of %d "
            "(%.2fs, %.2f validations/sec, %.2f%% success rate)",
            len(result.passed), len(result.failed), len(result.missing), len(result.errors),
            result.total_urls, result.duration_seconds, result.throughput, result.success_rate,
        )
        for outcome in result.missing:
            logger.warning("Missing snapshot: %s (file: %s)", outcome.url, outcome.filename)
        for outcome in result.failed:
            details = outcome.details
            logger.warning("Failed: %s: %s (expected %d lines, got %d)",
                           outcome.url, outcome.error,
                           details.expected_lines if details else 0,
                           details.actual_lines if details else 0)
        for outcome in result.errors:
            logger.warning("Error: %s: %s", outcome.url, outcome.error)
