"""Store interface used by the fetch pipeline, and its Postgres implementation."""

from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Protocol, runtime_checkable

import psycopg

from ..errors import PersistenceFailed
from ..models import Article, Subscription
from .articles import ArticleStorage
from .connection import get_connection
from .settings import SettingsManager
from .subscriptions import SubscriptionManager


@runtime_checkable
class Store(Protocol):
    """Persistence operations the fetch pipeline depends on.

    Implementations must be safe to call from several threads at once.
    Failures are raised as PersistenceFailed.
    """

    def list_subscriptions(self) -> List[Subscription]:
        ...

    def get_subscription(self, subscription_id: int) -> Optional[Subscription]:
        ...

    def create_subscription(self, subscription: Subscription) -> int:
        ...

    def delete_subscription(self, subscription_id: int) -> bool:
        ...

    def update_subscription(
        self,
        subscription_id: int,
        title: str,
        url: str,
        category: str,
        script_path: str,
    ) -> bool:
        """Replace title, URL, category and script path; False if missing."""
        ...

    def record_fetch_error(self, subscription_id: int, message: str) -> None:
        ...

    def update_cached_image(self, subscription_id: int, url: str) -> None:
        ...

    def update_cached_link(self, subscription_id: int, url: str) -> None:
        ...

    def bulk_save_articles(self, articles: List[Article]) -> List[Article]:
        """Save articles; return the newly inserted ones with IDs set."""
        ...

    def query_recent_articles(self, subscription_id: int, limit: int) -> List[Article]:
        ...

    def update_article_flags(
        self,
        article_id: int,
        is_read: Optional[bool] = None,
        is_favorite: Optional[bool] = None,
        is_hidden: Optional[bool] = None,
    ) -> None:
        ...

    def get_setting(self, key: str) -> str:
        ...

    def set_setting(self, key: str, value: str) -> None:
        ...


class PostgresStore:
    """Store backed by the Postgres connection pool."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        """Initialize store with a database configuration dict."""
        self.db_config = db_config
        self.subscriptions = SubscriptionManager()
        self.articles = ArticleStorage()
        self.settings = SettingsManager()

    @contextmanager
    def _connection(self) -> Generator[psycopg.Connection, None, None]:
        try:
            with get_connection(self.db_config) as conn:
                yield conn
        except psycopg.Error as e:
            raise PersistenceFailed(f"Database error: {e}") from e

    def list_subscriptions(self) -> List[Subscription]:
        with self._connection() as conn:
            return self.subscriptions.list_subscriptions(conn)

    def get_subscription(self, subscription_id: int) -> Optional[Subscription]:
        with self._connection() as conn:
            return self.subscriptions.get_subscription(conn, subscription_id)

    def create_subscription(self, subscription: Subscription) -> int:
        with self._connection() as conn:
            return self.subscriptions.create_subscription(conn, subscription)

    def delete_subscription(self, subscription_id: int) -> bool:
        with self._connection() as conn:
            return self.subscriptions.delete_subscription(conn, subscription_id)

    def update_subscription(
        self,
        subscription_id: int,
        title: str,
        url: str,
        category: str,
        script_path: str,
    ) -> bool:
        with self._connection() as conn:
            return self.subscriptions.update_subscription(
                conn, subscription_id, title, url, category, script_path
            )

    def record_fetch_error(self, subscription_id: int, message: str) -> None:
        with self._connection() as conn:
            self.subscriptions.record_fetch_error(conn, subscription_id, message)

    def update_cached_image(self, subscription_id: int, url: str) -> None:
        with self._connection() as conn:
            self.subscriptions.update_cached_image(conn, subscription_id, url)

    def update_cached_link(self, subscription_id: int, url: str) -> None:
        with self._connection() as conn:
            self.subscriptions.update_cached_link(conn, subscription_id, url)

    def bulk_save_articles(self, articles: List[Article]) -> List[Article]:
        with self._connection() as conn:
            return self.articles.save_articles(conn, articles)

    def query_recent_articles(self, subscription_id: int, limit: int) -> List[Article]:
        with self._connection() as conn:
            return self.articles.get_recent_articles(conn, subscription_id, limit)

    def update_article_flags(
        self,
        article_id: int,
        is_read: Optional[bool] = None,
        is_favorite: Optional[bool] = None,
        is_hidden: Optional[bool] = None,
    ) -> None:
        with self._connection() as conn:
            self.articles.update_flags(conn, article_id, is_read, is_favorite, is_hidden)

    def get_setting(self, key: str) -> str:
        with self._connection() as conn:
            return self.settings.get_setting(conn, key)

    def set_setting(self, key: str, value: str) -> None:
        with self._connection() as conn:
            self.settings.set_setting(conn, key, value)
