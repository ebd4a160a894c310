"""Batch refresh of all subscriptions."""

from .hooks import PostFetchHook
from .orchestrator import BatchOutcome, BatchResult, FetchOrchestrator
from .progress import BatchProgress, ProgressSnapshot, get_default_progress

__all__ = [
    "BatchOutcome",
    "BatchProgress",
    "BatchResult",
    "FetchOrchestrator",
    "PostFetchHook",
    "ProgressSnapshot",
    "get_default_progress",
]
