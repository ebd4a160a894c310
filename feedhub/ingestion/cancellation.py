"""Cooperative cancellation for fetch batches."""

import asyncio
import threading
from typing import Awaitable, TypeVar

from ..errors import FetchCancelled

T = TypeVar("T")


class CancelToken:
    """Cancellation signal shared by every task of one batch.

    Cancelling is advisory: tasks look at the token at their checkpoints, and
    in-flight network fetches are abandoned through :meth:`race`. The token is
    backed by a ``threading.Event`` so it can be cancelled from a signal
    handler or another thread.
    """

    def __init__(self, poll_interval: float = 0.05) -> None:
        self._event = threading.Event()
        self.poll_interval = poll_interval

    def cancel(self) -> None:
        """Signal cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been signalled."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise FetchCancelled when cancellation has been signalled."""
        if self.cancelled:
            raise FetchCancelled("Fetch cancelled")

    async def wait(self) -> None:
        """Wait until cancellation is signalled."""
        while not self._event.is_set():
            await asyncio.sleep(self.poll_interval)

    async def race(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        Raises:
            FetchCancelled: If the token is cancelled before the awaitable
                finishes. The awaitable is cancelled in that case.
        """
        self.raise_if_cancelled()

        work = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(self.wait())
        try:
            done, _ = await asyncio.wait(
                {work, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            work.cancel()
            raise
        finally:
            watcher.cancel()

        if work in done:
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)
        raise FetchCancelled("Fetch cancelled")
