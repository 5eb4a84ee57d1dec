"""Bounded batch runner — executes per-URL tasks in fixed-size concurrent waves."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from ariasnap.models.snapshot_result import ERROR, BatchResult, TaskOutcome
from ariasnap.url_utils import snapshot_filename_from_url

logger = logging.getLogger(__name__)

SnapshotTask = Callable[[str], Awaitable[TaskOutcome]]
ProgressCallback = Callable[[int, int, TaskOutcome], None]


def _iso_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def _filename_or_none(url: str) -> Optional[str]:
    try:
        return snapshot_filename_from_url(url)
    except ValueError:
        return None


class BatchAccumulator:
    """Collects outcomes for one batch run and seals them into a BatchResult.

    Owned by a single ``run_batch`` call; not shared between runs.
    """

    def __init__(self, mode: str, total: int):
        self.mode = mode
        self.total = total
        self.started_at = _iso_now()
        self._start = time.monotonic()
        self._outcomes: dict[int, TaskOutcome] = {}

    @property
    def completed(self) -> int:
        return len(self._outcomes)

    @property
    def progress_percent(self) -> float:
        if not self.total:
            return 100.0
        return round(self.completed / self.total * 100, 1)

    def record(self, index: int, outcome: TaskOutcome) -> TaskOutcome:
        """Record the outcome for the target at ``index``; each index exactly once."""
        if index in self._outcomes:
            raise ValueError(f"Outcome for target #{index + 1} already recorded")
        if not 0 <= index < self.total:
            raise ValueError(f"Target index {index} out of range for {self.total} targets")
        outcome = outcome.model_copy(update={"index": index})
        self._outcomes[index] = outcome
        return outcome

    def seal(self) -> BatchResult:
        duration = time.monotonic() - self._start
        return BatchResult(
            mode=self.mode,
            total_urls=self.total,
            started_at=self.started_at,
            completed_at=_iso_now(),
            duration_seconds=round(duration, 2),
            outcomes=tuple(self._outcomes[i] for i in sorted(self._outcomes)),
        )


def chunk_targets(urls: list[str], size: int) -> list[list[tuple[int, str]]]:
    """Split targets into consecutive waves of at most ``size``, keeping original indices."""
    if size < 1:
        raise ValueError("concurrency must be at least 1")
    indexed = list(enumerate(urls))
    return [indexed[i:i + size] for i in range(0, len(indexed), size)]


async def run_batch(
    urls: list[str],
    concurrency: int,
    task: SnapshotTask,
    mode: str,
    on_progress: Optional[ProgressCallback] = None,
) -> BatchResult:
    """Run ``task`` over every URL with at most ``concurrency`` in flight.

    Each wave is awaited in full before the next starts. Every URL yields
    exactly one outcome even if its task raises.
    """
    waves = chunk_targets(urls, concurrency)
    accumulator = BatchAccumulator(mode, len(urls))
    total = len(urls)
    logger.info("Processing %d URLs in %d wave(s) (concurrency=%d)",
                total, len(waves), concurrency)

    async def _run_one(index: int, url: str) -> None:
        try:
            outcome = await task(url)
        except Exception as e:
            logger.error("Task for %s raised unexpectedly: %s", url, e)
            outcome = TaskOutcome(
                url=url, filename=_filename_or_none(url), status=ERROR, error=str(e),
            )
        outcome = accumulator.record(index, outcome)

        logger.info("[#%d/%d] (%.1f%% done) %s - %s",
                    index + 1, total, accumulator.progress_percent,
                    outcome.status, url)
        if on_progress is not None:
            try:
                on_progress(accumulator.completed, total, outcome)
            except Exception as e:
                logger.warning("Progress callback failed for %s: %s", url, e)

    for wave_number, wave in enumerate(waves, 1):
        logger.debug("Starting wave %d/%d (%d tasks)", wave_number, len(waves), len(wave))
        await asyncio.gather(*(_run_one(i, url) for i, url in wave))

    result = accumulator.seal()
    logger.info("Batch complete: %d URLs in %.2fs", total, result.duration_seconds)
    return result
