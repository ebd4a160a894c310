"""Synchronization with external feed readers."""

from .freshrss import (
    FreshRSSClient,
    FreshRSSSync,
    RemoteArticle,
    RemoteSubscription,
    SyncResult,
)

__all__ = [
    "FreshRSSClient",
    "FreshRSSSync",
    "RemoteArticle",
    "RemoteSubscription",
    "SyncResult",
]
