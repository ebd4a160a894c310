"""Feed ingestion: parsing, scripts, fetching and normalization."""

from .cancellation import CancelToken
from .feed_parser import FeedParser
from .fetcher import SubscriptionFetcher
from .models import Enclosure, RawEntry, RawFeedDocument
from .normalizer import (
    NO_TRANSLATION,
    TranslationOptions,
    normalize_entries,
    normalize_entry,
    resolve_image,
)
from .script_runner import INTERPRETERS, ScriptRunner

__all__ = [
    "CancelToken",
    "Enclosure",
    "FeedParser",
    "INTERPRETERS",
    "NO_TRANSLATION",
    "RawEntry",
    "RawFeedDocument",
    "ScriptRunner",
    "SubscriptionFetcher",
    "TranslationOptions",
    "normalize_entries",
    "normalize_entry",
    "resolve_image",
]
