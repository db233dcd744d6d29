# File: tests/test_batch.py
import asyncio

import pytest
from index_scout.batch import chunked, run_batches


def test_chunked():
    assert chunked(["a", "b", "c", "d", "e"], 2) == [["a", "b"], ["c", "d"], ["e"]]
    assert chunked([], 3) == []


@pytest.mark.parametrize("size", [0, -1])
def test_chunked_rejects_bad_size(size):
    with pytest.raises(ValueError):
        chunked(["a"], size)


@pytest.mark.asyncio()
async def test_batch_callbacks_and_result_order():
    calls = []

    async def task(item):
        await asyncio.sleep(0.01 if item in ("a", "c") else 0)
        return item.upper()

    results = await run_batches(
        task, ["a", "b", "c", "d", "e"], 2, lambda i, n: calls.append((i, n))
    )

    assert calls == [(0, 3), (1, 3), (2, 3)]
    assert results == ["A", "B", "C", "D", "E"]


@pytest.mark.asyncio()
async def test_batches_are_bounded_and_sequential():
    in_flight = 0
    peak = 0
    finished = []

    async def task(item):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        finished.append(item)

    await run_batches(task, list(range(7)), batch_size=3)

    assert peak == 3
    # every item of a chunk finishes before the next chunk starts
    assert set(finished[:3]) == {0, 1, 2}
    assert set(finished[3:6]) == {3, 4, 5}
    assert finished[6] == 6


@pytest.mark.asyncio()
async def test_failure_stops_remaining_chunks():
    started = []
    calls = []

    async def task(item):
        started.append(item)
        if item == "c":
            raise RuntimeError("boom")
        await asyncio.sleep(0)
        return item

    with pytest.raises(RuntimeError, match="boom"):
        await run_batches(task, ["a", "b", "c", "d", "e"], 2, lambda i, n: calls.append((i, n)))

    assert calls == [(0, 3)]
    assert "e" not in started


@pytest.mark.asyncio()
async def test_failure_cancels_chunk_siblings():
    cancelled = []

    async def task(item):
        if item == "fail":
            raise ValueError(item)
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(item)
            raise

    with pytest.raises(ValueError):
        await asyncio.wait_for(run_batches(task, ["slow", "fail"], 2), timeout=5)

    assert cancelled == ["slow"]


@pytest.mark.asyncio()
async def test_empty_items():
    calls = []

    async def task(item):  # pragma: no cover
        raise AssertionError("should not run")

    assert await run_batches(task, [], 50, lambda i, n: calls.append((i, n))) == []
    assert calls == []
