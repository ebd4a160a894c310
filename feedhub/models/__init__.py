"""Data models for feedhub."""

from .article import Article
from .subscription import SCRIPT_URL_PREFIX, SYNCED_URL, Subscription

__all__ = ["Article", "Subscription", "SCRIPT_URL_PREFIX", "SYNCED_URL"]
