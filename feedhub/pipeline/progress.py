"""Batch progress shared between fetch workers and pollers."""

import threading
from typing import Optional

from pydantic import BaseModel, Field


class ProgressSnapshot(BaseModel):
    """Read-only view of batch progress."""

    total: int = Field(0, description="Sources in the current batch")
    current: int = Field(0, description="Sources finished so far")
    running: bool = Field(False, description="Whether a batch is running")


class BatchProgress:
    """Lock-guarded progress of the fetch batch.

    Holds the only mutable state shared by concurrent fetch tasks. All reads
    and writes go through one lock, so a poller on another thread never sees
    a half-updated value.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._current = 0
        self._running = False

    def try_start(self) -> bool:
        """Mark a batch as running; False if one already is."""
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._current = 0
            self._total = 0
            return True

    def begin(self, total: int) -> None:
        """Set the size of the running batch."""
        with self._lock:
            self._total = total
            self._current = 0

    def increment(self) -> None:
        """Count one finished source."""
        with self._lock:
            self._current += 1

    def finish(self) -> None:
        """Mark the batch as no longer running."""
        with self._lock:
            self._running = False

    def snapshot(self) -> ProgressSnapshot:
        """Consistent copy of the current progress."""
        with self._lock:
            return ProgressSnapshot(
                total=self._total,
                current=self._current,
                running=self._running,
            )


_default_progress: Optional[BatchProgress] = None
_default_lock = threading.Lock()


def get_default_progress() -> BatchProgress:
    """Get the process-wide BatchProgress."""
    global _default_progress
    with _default_lock:
        if _default_progress is None:
            _default_progress = BatchProgress()
        return _default_progress
