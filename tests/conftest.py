"""Shared fakes for feedhub tests.

The in-memory store and fake feed parser stand in for Postgres and the
network so the fetch pipeline can be exercised deterministically.
"""

import asyncio
import threading
from typing import Callable, Dict, List, Optional, Union

import pytest

from feedhub.errors import PersistenceFailed
from feedhub.ingestion import FeedParser, RawEntry, RawFeedDocument
from feedhub.models import Article, Subscription


class InMemoryStore:
    """Thread-safe Store implementation kept in dictionaries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_subscription_id = 1
        self._next_article_id = 1
        self.subscriptions: Dict[int, Subscription] = {}
        self.articles: Dict[int, Article] = {}
        self.settings: Dict[str, str] = {}
        self.save_calls: List[List[Article]] = []
        self.flag_updates: List[tuple] = []
        self.fail_list = False
        self.fail_save_for: set = set()

    def add(self, **fields) -> Subscription:
        """Create a subscription directly and return it with its ID."""
        fields.setdefault("title", "Feed")
        subscription_id = self.create_subscription(Subscription(**fields))
        return self.subscriptions[subscription_id]

    def list_subscriptions(self) -> List[Subscription]:
        if self.fail_list:
            raise PersistenceFailed("database unavailable")
        with self._lock:
            return [s.model_copy() for s in self.subscriptions.values()]

    def get_subscription(self, subscription_id: int) -> Optional[Subscription]:
        with self._lock:
            subscription = self.subscriptions.get(subscription_id)
            return subscription.model_copy() if subscription else None

    def create_subscription(self, subscription: Subscription) -> int:
        with self._lock:
            subscription_id = self._next_subscription_id
            self._next_subscription_id += 1
            self.subscriptions[subscription_id] = subscription.model_copy(
                update={"id": subscription_id}
            )
            return subscription_id

    def delete_subscription(self, subscription_id: int) -> bool:
        with self._lock:
            return self.subscriptions.pop(subscription_id, None) is not None

    def update_subscription(
        self,
        subscription_id: int,
        title: str,
        url: str,
        category: str,
        script_path: str,
    ) -> bool:
        with self._lock:
            subscription = self.subscriptions.get(subscription_id)
            if subscription is None:
                return False
            self.subscriptions[subscription_id] = subscription.model_copy(
                update={"title": title, "url": url, "category": category, "script_path": script_path}
            )
            return True

    def _update(self, subscription_id: int, **fields) -> None:
        with self._lock:
            subscription = self.subscriptions[subscription_id]
            self.subscriptions[subscription_id] = subscription.model_copy(update=fields)

    def record_fetch_error(self, subscription_id: int, message: str) -> None:
        self._update(subscription_id, last_error=message)

    def update_cached_image(self, subscription_id: int, url: str) -> None:
        self._update(subscription_id, image_url=url)

    def update_cached_link(self, subscription_id: int, url: str) -> None:
        self._update(subscription_id, link=url)

    def bulk_save_articles(self, articles: List[Article]) -> List[Article]:
        if any(a.subscription_id in self.fail_save_for for a in articles):
            raise PersistenceFailed("disk full")
        with self._lock:
            self.save_calls.append(list(articles))
            known_urls = {a.url for a in self.articles.values()}
            saved = []
            for article in articles:
                if article.url in known_urls:
                    continue
                article = article.model_copy(update={"id": self._next_article_id})
                self._next_article_id += 1
                self.articles[article.id] = article
                known_urls.add(article.url)
                saved.append(article)
            return saved

    def query_recent_articles(self, subscription_id: int, limit: int) -> List[Article]:
        with self._lock:
            articles = [a for a in self.articles.values() if a.subscription_id == subscription_id]
        articles.sort(key=lambda a: (a.published_at, a.id), reverse=True)
        return articles[:limit]

    def update_article_flags(
        self,
        article_id: int,
        is_read: Optional[bool] = None,
        is_favorite: Optional[bool] = None,
        is_hidden: Optional[bool] = None,
    ) -> None:
        updates = {
            name: value
            for name, value in (
                ("is_read", is_read),
                ("is_favorite", is_favorite),
                ("is_hidden", is_hidden),
            )
            if value is not None
        }
        with self._lock:
            self.flag_updates.append((article_id, updates))
            self.articles[article_id] = self.articles[article_id].model_copy(update=updates)

    def get_setting(self, key: str) -> str:
        with self._lock:
            return self.settings.get(key, "")

    def set_setting(self, key: str, value: str) -> None:
        with self._lock:
            self.settings[key] = value


Outcome = Union[RawFeedDocument, Exception]


class FakeFeedParser(FeedParser):
    """Feed parser serving canned documents, with concurrency instrumentation.

    Attributes:
        responses: URL -> document or exception to raise
        delay: Seconds each fetch takes
        gate: When set, fetches wait for this event before answering
        on_fetch: Called with the URL right before a fetch answers
        active: Fetches currently in flight
        max_active: Highest value ``active`` reached
    """

    def __init__(self, responses: Optional[Dict[str, Outcome]] = None, delay: float = 0.0) -> None:
        super().__init__()
        self.responses = responses or {}
        self.delay = delay
        self.gate: Optional[asyncio.Event] = None
        self.on_fetch: Optional[Callable[[str], None]] = None
        self.active = 0
        self.max_active = 0
        self.fetched: List[str] = []

    async def fetch_and_parse(self, url: str) -> RawFeedDocument:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.gate is not None:
                await self.gate.wait()
            self.fetched.append(url)
            if self.on_fetch is not None:
                self.on_fetch(url)
            outcome = self.responses.get(url, make_document(url))
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.active -= 1


def make_document(url: str, count: int = 2, **fields) -> RawFeedDocument:
    """Build a document with ``count`` entries whose links derive from ``url``."""
    entries = [
        RawEntry(
            title=f"Entry {i} of {url}",
            link=f"{url}/entry-{i}",
            description=f"Description {i}",
        )
        for i in range(count)
    ]
    fields.setdefault("title", f"Feed at {url}")
    return RawFeedDocument(entries=entries, **fields)


RSS_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>{title}</title>
    <link>https://example.com/</link>
    <description>Example feed</description>
    <image>
      <url>https://example.com/logo.png</url>
      <title>{title}</title>
      <link>https://example.com/</link>
    </image>
    <item>
      <title>First post</title>
      <link>https://example.com/first</link>
      <description>Short description</description>
      <content:encoded><![CDATA[<p>Body <img src="https://example.com/inline.jpg"></p>]]></content:encoded>
      <pubDate>Mon, 06 Jan 2025 10:30:00 GMT</pubDate>
      <enclosure url="https://example.com/cover.jpg" type="image/jpeg" length="1234"/>
    </item>
    <item>
      <title>Second post</title>
      <link>https://example.com/second</link>
      <description>No date here</description>
      <media:thumbnail url="https://example.com/thumb.png"/>
    </item>
  </channel>
</rss>
"""


def rss_document(title: str = "Example Feed") -> str:
    """A small RSS 2.0 document."""
    return RSS_TEMPLATE.format(title=title)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def fake_parser() -> FakeFeedParser:
    return FakeFeedParser()
