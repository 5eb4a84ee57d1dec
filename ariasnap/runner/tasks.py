"""Per-URL snapshot tasks — capture a baseline or validate against one.

Both tasks convert every failure into a TaskOutcome so that one broken page
never aborts the other tasks running alongside it.
"""

from __future__ import annotations

import logging
import math
import time

from ariasnap.models.config import SnapshotConfig
from ariasnap.models.snapshot_result import (
    CAPTURED,
    ERROR,
    FAIL,
    MISSING,
    PASS,
    DiffDetails,
    TaskOutcome,
)
from ariasnap.snapshot.similarity import score
from ariasnap.snapshot.store import SnapshotStore
from ariasnap.url_utils import snapshot_filename_from_url

logger = logging.getLogger(__name__)


def _reported_similarity(percentage: float, passed: bool, threshold: float) -> float:
    """Two-decimal similarity that never reads as passing for a failed check."""
    similarity = round(percentage, 2)
    if not passed and similarity >= threshold:
        similarity = math.floor(percentage * 100) / 100
    return similarity


async def capture_snapshot(
    url: str, renderer, store: SnapshotStore, config: SnapshotConfig,
) -> TaskOutcome:
    """Render the capture region of ``url`` and store it as the new baseline."""
    start = time.time()
    filename = None
    logger.info("Creating snapshot for: %s", url)
    try:
        filename = snapshot_filename_from_url(url)
        snapshot = await renderer.render_region(
            url, config.capture_selector, config.settle_delay_ms,
        )
        store.write(filename, snapshot)
    except Exception as e:
        logger.warning("Error creating snapshot for %s: %s", url, e)
        return TaskOutcome(
            url=url, filename=filename, status=ERROR, error=str(e),
            duration_seconds=round(time.time() - start, 2),
        )

    logger.debug("Snapshot saved: %s", filename)
    return TaskOutcome(
        url=url, filename=filename, status=CAPTURED,
        duration_seconds=round(time.time() - start, 2),
    )


async def validate_snapshot(
    url: str, renderer, store: SnapshotStore, config: SnapshotConfig,
) -> TaskOutcome:
    """Compare a fresh render of the validation region against the stored baseline."""
    start = time.time()
    filename = None
    logger.info("Validating: %s", url)

    def _elapsed() -> float:
        return round(time.time() - start, 2)

    try:
        filename = snapshot_filename_from_url(url)

        if not store.exists(filename):
            return TaskOutcome(
                url=url, filename=filename, status=MISSING,
                error="Snapshot file not found", duration_seconds=_elapsed(),
            )

        baseline = store.read(filename)
        current = await renderer.render_region(
            url, config.validate_selector, config.settle_delay_ms,
        )
        result = score(baseline, current)
    except Exception as e:
        logger.warning("Error validating %s: %s", url, e)
        return TaskOutcome(
            url=url, filename=filename, status=ERROR, error=str(e),
            duration_seconds=_elapsed(),
        )

    threshold = config.similarity_threshold
    passed = result.passes(threshold)
    similarity = _reported_similarity(result.percentage, passed, threshold)
    if passed:
        return TaskOutcome(
            url=url, filename=filename, status=PASS, similarity=similarity,
            duration_seconds=_elapsed(),
        )

    return TaskOutcome(
        url=url,
        filename=filename,
        status=FAIL,
        error=f"Snapshot mismatch ({similarity:.2f}% similar, threshold: {threshold:g}%)",
        similarity=similarity,
        details=DiffDetails(
            expected_lines=result.expected_line_count,
            actual_lines=result.actual_line_count,
            line_diff_percentage=result.line_diff_percentage,
            similarity=similarity,
            threshold=threshold,
        ),
        duration_seconds=_elapsed(),
    )
