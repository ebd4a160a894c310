"""FreshRSS client over the Google Reader API, and subscription/article sync."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
import pendulum
from pydantic import BaseModel, Field

from ..db import Store
from ..errors import PersistenceFailed, SyncFailed
from ..ingestion import RawEntry, normalize_entry
from ..models import SYNCED_URL, Subscription

logger = logging.getLogger(__name__)

API_SUFFIX = "/api/greader.php"
READ_TAG = "user/-/state/com.google/read"
READING_LIST = "user/-/state/com.google/reading-list"
DEFAULT_MAX_ITEMS = 100


class RemoteSubscription(BaseModel):
    """A feed subscribed on the FreshRSS server."""

    id: str = Field(..., description="Stream ID, e.g. feed/12")
    title: str = Field("", description="Feed title")
    url: str = Field("", description="Feed URL")
    categories: List[str] = Field(default_factory=list, description="Category labels")


class RemoteArticle(BaseModel):
    """An item from the FreshRSS reading list."""

    id: str = Field(..., description="Item ID")
    title: str = Field("", description="Item title")
    url: str = Field("", description="Canonical item URL")
    content: str = Field("", description="Item summary HTML")
    published: Optional[datetime] = Field(None, description="Publication time")


class SyncResult(BaseModel):
    """Counts from one sync run."""

    feeds_added: int = Field(0, description="Remote feeds added locally")
    feeds_pushed: int = Field(0, description="Local feeds subscribed on the server")
    articles_saved: int = Field(0, description="New articles stored")
    marked_read: int = Field(0, description="Items marked read on the server")


class FreshRSSClient:
    """Minimal Google Reader API client for a FreshRSS server."""

    def __init__(
        self,
        server_url: str,
        username: str,
        password: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Initialize FreshRSS client.

        Args:
            server_url: Server base URL; /api/greader.php is appended if missing
            username: FreshRSS user name
            password: API password set in the FreshRSS profile
            timeout: Request timeout in seconds
            transport: Custom httpx transport
        """
        if not server_url.endswith(API_SUFFIX):
            server_url = server_url.rstrip("/") + API_SUFFIX
        self.base_url = server_url
        self.username = username
        self.password = password
        self.timeout = timeout
        self.transport = transport
        self.auth_token = ""

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = kwargs.pop("headers", {})
        if self.auth_token:
            headers["Authorization"] = f"GoogleLogin auth={self.auth_token}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, self.base_url + path, headers=headers, **kwargs)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise SyncFailed(
                f"FreshRSS request {path} failed with HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise SyncFailed(f"FreshRSS request {path} failed: {e}") from e

    def _require_login(self) -> None:
        if not self.auth_token:
            raise SyncFailed("Not authenticated with FreshRSS")

    def login(self) -> None:
        """Authenticate and keep the auth token for later requests."""
        response = self._request(
            "POST",
            "/accounts/ClientLogin",
            data={"Email": self.username, "Passwd": self.password},
        )
        # Body is "SID=...\nLSID=...\nAuth=..."
        for line in response.text.splitlines():
            if line.startswith("Auth="):
                self.auth_token = line[len("Auth="):].strip()
                if self.auth_token:
                    return
        raise SyncFailed("FreshRSS login response has no auth token")

    def get_token(self) -> str:
        """Get a short-lived write token for modifying requests."""
        self._require_login()
        return self._request("GET", "/reader/api/0/token").text.strip()

    def _json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        self._require_login()
        response = self._request("GET", path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise SyncFailed(f"FreshRSS returned invalid JSON for {path}: {e}") from e

    def get_subscriptions(self) -> List[RemoteSubscription]:
        """List the feeds subscribed on the server."""
        data = self._json("/reader/api/0/subscription/list", {"output": "json"})
        return [
            RemoteSubscription(
                id=item.get("id", ""),
                title=item.get("title") or "",
                url=item.get("url") or "",
                categories=[c.get("label", "") for c in item.get("categories") or []],
            )
            for item in data.get("subscriptions", [])
        ]

    def get_unread_articles(self, max_items: int = DEFAULT_MAX_ITEMS) -> List[RemoteArticle]:
        """Fetch up to ``max_items`` unread items from the reading list."""
        data = self._json(
            f"/reader/api/0/stream/contents/{READING_LIST}",
            {"output": "json", "n": max_items, "xt": READ_TAG},
        )
        articles = []
        for item in data.get("items", []):
            canonical = item.get("canonical") or []
            published = item.get("published")
            articles.append(
                RemoteArticle(
                    id=item.get("id", ""),
                    title=item.get("title") or "",
                    url=canonical[0].get("href", "") if canonical else "",
                    content=(item.get("summary") or {}).get("content", ""),
                    published=pendulum.from_timestamp(int(published)) if published else None,
                )
            )
        return articles

    def mark_as_read(self, article_ids: List[str]) -> None:
        """Tag items as read on the server."""
        if not article_ids:
            return
        token = self.get_token()
        # A list value sends one "i" field per item
        data = {"T": token, "a": READ_TAG, "i": list(article_ids)}
        self._request("POST", "/reader/api/0/edit-tag", data=data)

    def subscribe(self, feed_url: str, title: str = "") -> None:
        """Subscribe the server to a feed URL."""
        token = self.get_token()
        data = {"T": token, "s": f"feed/{feed_url}", "ac": "subscribe"}
        if title:
            data["t"] = title
        self._request("POST", "/reader/api/0/subscription/edit", data=data)


class FreshRSSSync:
    """Pull FreshRSS subscriptions and unread items into the local store."""

    def __init__(self, client: FreshRSSClient, store: Store) -> None:
        self.client = client
        self.store = store

    def _synced_subscription(self, subscriptions: List[Subscription]) -> Subscription:
        for subscription in subscriptions:
            if subscription.is_synced:
                return subscription

        subscription = Subscription(
            title="FreshRSS Synced Articles",
            url=SYNCED_URL,
            description="Articles synced from FreshRSS server",
            category="FreshRSS",
        )
        subscription_id = self.store.create_subscription(subscription)
        return subscription.model_copy(update={"id": subscription_id})

    def sync(
        self,
        max_items: int = DEFAULT_MAX_ITEMS,
        push_local: bool = False,
        mark_read: bool = False,
    ) -> SyncResult:
        """
        Run one sync.

        Missing remote feeds are added locally, then unread items are stored
        under the FreshRSS placeholder subscription.

        Args:
            max_items: Most unread items to pull
            push_local: Also subscribe the server to local URL feeds it lacks
            mark_read: Mark pulled items as read on the server

        Raises:
            SyncFailed: If the server cannot be reached or rejects a request
            PersistenceFailed: If the local store fails outside adding feeds
        """
        result = SyncResult()
        self.client.login()
        remote = self.client.get_subscriptions()
        local = self.store.list_subscriptions()
        local_urls = {s.url for s in local}

        for feed in remote:
            if not feed.url or feed.url in local_urls:
                continue
            subscription = Subscription(
                title=feed.title or feed.url,
                url=feed.url,
                category=feed.categories[0] if feed.categories else "",
            )
            try:
                self.store.create_subscription(subscription)
            except PersistenceFailed as e:
                logger.warning(f"Failed to add feed {feed.url}: {e}")
                continue
            local_urls.add(feed.url)
            result.feeds_added += 1
            logger.info(f"Added feed from FreshRSS: {subscription.title}")

        if push_local:
            remote_urls = {feed.url for feed in remote}
            for subscription in local:
                if subscription.uses_script or subscription.is_synced or subscription.url in remote_urls:
                    continue
                self.client.subscribe(subscription.url, subscription.title)
                result.feeds_pushed += 1

        items = self.client.get_unread_articles(max_items)
        synced = self._synced_subscription(local)
        now = pendulum.now("UTC")
        articles = [
            normalize_entry(
                synced,
                RawEntry(title=item.title, link=item.url, content=item.content, published=item.published),
                now=now,
            )
            for item in items
            if item.url
        ]
        if articles:
            result.articles_saved = len(self.store.bulk_save_articles(articles))
            logger.info(f"Synced {result.articles_saved} new articles from FreshRSS")

        if mark_read:
            ids = [item.id for item in items if item.url]
            self.client.mark_as_read(ids)
            result.marked_read = len(ids)

        return result
