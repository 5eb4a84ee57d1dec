"""Tests for the bounded batch runner — wave scheduling, isolation, and accounting."""

import asyncio

import pytest

from ariasnap.models.snapshot_result import (
    ERROR,
    MODE_CAPTURE,
    MODE_VALIDATE,
    PASS,
    TaskOutcome,
)
from ariasnap.runner.batch import BatchAccumulator, chunk_targets, run_batch


def _urls(n: int) -> list[str]:
    return [f"https://example.com/page-{i}/" for i in range(n)]


class TestChunkTargets:
    """Tests for splitting targets into waves."""

    def test_chunks_keep_order_and_indices(self):
        waves = chunk_targets(["a", "b", "c", "d", "e"], 2)
        assert waves == [[(0, "a"), (1, "b")], [(2, "c"), (3, "d")], [(4, "e")]]

    def test_concurrency_larger_than_targets(self):
        assert chunk_targets(["a", "b"], 10) == [[(0, "a"), (1, "b")]]

    def test_empty(self):
        assert chunk_targets([], 3) == []

    def test_rejects_zero(self):
        with pytest.raises(ValueError):
            chunk_targets(["a"], 0)


class TestBatchAccumulator:
    """Tests for the per-run outcome accumulator."""

    def test_records_index_and_seals_in_order(self):
        acc = BatchAccumulator(MODE_VALIDATE, 3)
        acc.record(2, TaskOutcome(url="c", status=PASS))
        acc.record(0, TaskOutcome(url="a", status=PASS))
        acc.record(1, TaskOutcome(url="b", status=ERROR))

        result = acc.seal()

        assert [o.url for o in result.outcomes] == ["a", "b", "c"]
        assert [o.index for o in result.outcomes] == [0, 1, 2]
        assert result.total_urls == 3
        assert result.duration_seconds >= 0

    def test_completed_counter(self):
        acc = BatchAccumulator(MODE_VALIDATE, 2)
        assert acc.completed == 0
        acc.record(0, TaskOutcome(url="a", status=PASS))
        assert acc.completed == 1
        assert acc.progress_percent == 50.0

    def test_duplicate_record_rejected(self):
        acc = BatchAccumulator(MODE_VALIDATE, 2)
        acc.record(0, TaskOutcome(url="a", status=PASS))
        with pytest.raises(ValueError):
            acc.record(0, TaskOutcome(url="a", status=PASS))

    def test_out_of_range_rejected(self):
        acc = BatchAccumulator(MODE_VALIDATE, 1)
        with pytest.raises(ValueError):
            acc.record(1, TaskOutcome(url="b", status=PASS))


class TestRunBatch:
    """Tests for run_batch scheduling and failure isolation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("n,concurrency", [(0, 3), (1, 1), (5, 2), (7, 3), (4, 10)])
    async def test_every_target_yields_exactly_one_outcome(self, n, concurrency):
        urls = _urls(n)

        async def task(url):
            await asyncio.sleep(0)
            return TaskOutcome(url=url, status=PASS)

        result = await run_batch(urls, concurrency, task, MODE_VALIDATE)

        assert result.total_urls == n
        assert [o.url for o in result.outcomes] == urls
        assert [o.index for o in result.outcomes] == list(range(n))

    @pytest.mark.asyncio
    async def test_concurrency_never_exceeds_limit(self):
        in_flight = 0
        peak = 0

        async def task(url):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return TaskOutcome(url=url, status=PASS)

        await run_batch(_urls(10), 3, task, MODE_VALIDATE)

        assert peak == 3

    @pytest.mark.asyncio
    async def test_waves_run_to_completion_before_next_starts(self):
        started: list[int] = []
        finished: list[int] = []
        urls = _urls(4)

        async def task(url):
            i = urls.index(url)
            started.append(i)
            # The first task of each wave is the slow one
            await asyncio.sleep(0.03 if i % 2 == 0 else 0)
            finished.append(i)
            return TaskOutcome(url=url, status=PASS)

        await run_batch(urls, 2, task, MODE_VALIDATE)

        assert set(started[:2]) == {0, 1}
        # Wave 2 starts only after both wave-1 tasks finish
        assert set(finished[:2]) == {0, 1}
        assert started.index(2) >= 2

    @pytest.mark.asyncio
    async def test_raising_task_does_not_stop_others(self):
        urls = _urls(6)

        async def task(url):
            if url == urls[1]:
                raise RuntimeError("browser crashed")
            return TaskOutcome(url=url, status=PASS)

        result = await run_batch(urls, 2, task, MODE_VALIDATE)

        assert len(result.outcomes) == 6
        assert len(result.passed) == 5
        error = result.errors[0]
        assert error.url == urls[1]
        assert error.index == 1
        assert error.error == "browser crashed"
        assert error.filename == "page-1.snapshot.txt"

    @pytest.mark.asyncio
    async def test_outcomes_ordered_by_index_not_arrival(self):
        urls = _urls(3)

        async def task(url):
            # Later targets finish first
            await asyncio.sleep(0.01 * (3 - urls.index(url)))
            return TaskOutcome(url=url, status=PASS)

        arrival: list[str] = []
        result = await run_batch(
            urls, 3, task, MODE_VALIDATE,
            on_progress=lambda done, total, outcome: arrival.append(outcome.url),
        )

        assert arrival == list(reversed(urls))
        assert [o.url for o in result.outcomes] == urls

    @pytest.mark.asyncio
    async def test_progress_reported_after_each_task(self):
        calls = []

        async def task(url):
            return TaskOutcome(url=url, status=PASS)

        await run_batch(
            _urls(5), 2, task, MODE_CAPTURE,
            on_progress=lambda done, total, outcome: calls.append((done, total)),
        )

        assert calls == [(1, 5), (2, 5), (3, 5), (4, 5), (5, 5)]

    @pytest.mark.asyncio
    @pytest.mark.asyncio
    async def test_raising_progress_callback_does_not_stop_batch(self):
        async def task(url):
            return TaskOutcome(url=url, status=PASS)

        def on_progress(done, total, outcome):
            raise RuntimeError("display closed")

        result = await run_batch(_urls(4), 2, task, MODE_CAPTURE, on_progress=on_progress)

        assert len(result.outcomes) == 4
        assert all(o.status == PASS for o in result.outcomes)

    @pytest.mark.asyncio
    async def test_result_is_sealed_with_timing(self):
        async def task(url):
            await asyncio.sleep(0.01)
            return TaskOutcome(url=url, status=PASS)

        result = await run_batch(_urls(2), 2, task, MODE_CAPTURE)

        assert result.mode == MODE_CAPTURE
        assert result.started_at <= result.completed_at
        assert result.duration_seconds >= 0.0

    @pytest.mark.asyncio
    async def test_invalid_concurrency(self):
        async def task(url):
            return TaskOutcome(url=url, status=PASS)

        with pytest.raises(ValueError):
            await run_batch(_urls(2), 0, task, MODE_CAPTURE)
