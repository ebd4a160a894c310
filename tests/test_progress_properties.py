"""Property-based tests for batch progress and cancellation tokens."""

import asyncio
import threading

import pytest
from hypothesis import given, settings, strategies as st

from feedhub.errors import FetchCancelled
from feedhub.ingestion import CancelToken
from feedhub.pipeline import BatchProgress, get_default_progress


# Feature: feedhub, Property: Only one batch can hold the running flag
def test_try_start_admits_one_thread():
    progress = BatchProgress()
    barrier = threading.Barrier(8)
    admitted = []

    def contender():
        barrier.wait()
        admitted.append(progress.try_start())

    threads = [threading.Thread(target=contender) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert admitted.count(True) == 1
    assert progress.snapshot().running is True


# Feature: feedhub, Property: Concurrent increments are never lost
@settings(max_examples=20, deadline=None)
@given(
    workers=st.integers(min_value=1, max_value=8),
    per_worker=st.integers(min_value=1, max_value=200),
)
def test_increments_are_not_lost(workers, per_worker):
    progress = BatchProgress()
    progress.try_start()
    progress.begin(workers * per_worker)

    def work():
        for _ in range(per_worker):
            progress.increment()

    threads = [threading.Thread(target=work) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = progress.snapshot()
    assert snapshot.current == snapshot.total == workers * per_worker


def test_lifecycle():
    progress = BatchProgress()
    assert progress.snapshot().running is False

    assert progress.try_start()
    progress.begin(3)
    progress.increment()
    assert progress.snapshot().model_dump() == {"total": 3, "current": 1, "running": True}

    progress.finish()
    assert progress.snapshot().running is False

    # A new batch starts counting from zero
    assert progress.try_start()
    assert progress.snapshot().current == 0


# Feature: feedhub, Property: A new batch never reports the previous batch's total
@settings(max_examples=25, deadline=None)
@given(previous=st.integers(min_value=1, max_value=500), done=st.integers(min_value=0, max_value=500))
def test_try_start_resets_total(previous, done):
    progress = BatchProgress()
    progress.try_start()
    progress.begin(previous)
    for _ in range(min(done, previous)):
        progress.increment()
    progress.finish()

    assert progress.try_start()
    assert progress.snapshot().model_dump() == {"total": 0, "current": 0, "running": True}


def test_default_progress_is_shared():
    assert get_default_progress() is get_default_progress()


class TestCancelToken:
    """Cancellation signalling and racing."""

    def test_raise_if_cancelled(self):
        token = CancelToken()
        token.raise_if_cancelled()
        token.cancel()
        assert token.cancelled
        with pytest.raises(FetchCancelled):
            token.raise_if_cancelled()

    def test_race_returns_result(self):
        async def work():
            await asyncio.sleep(0.01)
            return "done"

        assert asyncio.run(CancelToken().race(work())) == "done"

    def test_race_propagates_errors(self):
        async def work():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            asyncio.run(CancelToken().race(work()))

    def test_race_abandons_work_on_cancel(self):
        token = CancelToken(poll_interval=0.01)
        state = {"cancelled": False}

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                state["cancelled"] = True
                raise

        async def scenario():
            asyncio.get_running_loop().call_later(0.05, token.cancel)
            await token.race(work())

        with pytest.raises(FetchCancelled):
            asyncio.run(scenario())
        assert state["cancelled"]

    def test_race_on_cancelled_token_does_not_start_work(self):
        token = CancelToken()
        token.cancel()
        started = []

        async def work():
            started.append(True)

        async def scenario():
            coro = work()
            try:
                await token.race(coro)
            finally:
                coro.close()

        with pytest.raises(FetchCancelled):
            asyncio.run(scenario())
        assert started == []

    def test_cancel_from_another_thread(self):
        token = CancelToken(poll_interval=0.01)

        async def scenario():
            threading.Timer(0.05, token.cancel).start()
            await asyncio.wait_for(token.wait(), timeout=5)

        asyncio.run(scenario())
        assert token.cancelled
