"""Subscription management in database."""

from typing import List, Optional

from psycopg import Connection

from ..models import Subscription


class SubscriptionManager:
    """Manage subscriptions in database."""

    def list_subscriptions(self, conn: Connection) -> List[Subscription]:
        """Get all subscriptions."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT * FROM subscriptions
                ORDER BY category, title, id
                """
            )
            return [Subscription(**row) for row in cur.fetchall()]

    def get_subscription(self, conn: Connection, subscription_id: int) -> Optional[Subscription]:
        """Get a subscription by ID."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM subscriptions WHERE id = %s", (subscription_id,))
            row = cur.fetchone()
        return Subscription(**row) if row else None

    def create_subscription(self, conn: Connection, subscription: Subscription) -> int:
        """
        Insert a new subscription.

        Returns:
            Subscription ID
        """
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO subscriptions (
                    title, url, link, description, category, image_url, script_path
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING id
                """,
                (
                    subscription.title,
                    subscription.url,
                    subscription.link,
                    subscription.description,
                    subscription.category,
                    subscription.image_url,
                    subscription.script_path,
                ),
            )
            subscription_id = cur.fetchone()["id"]

        conn.commit()
        return subscription_id

    def delete_subscription(self, conn: Connection, subscription_id: int) -> bool:
        """Delete a subscription and its articles. Returns False if it did not exist."""
        with conn.cursor() as cur:
            cur.execute("DELETE FROM subscriptions WHERE id = %s", (subscription_id,))
            deleted = cur.rowcount > 0
        conn.commit()
        return deleted

    def update_subscription(
        self,
        conn: Connection,
        subscription_id: int,
        title: str,
        url: str,
        category: str,
        script_path: str,
    ) -> bool:
        """Replace the user-editable fields. Returns False if it did not exist."""
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE subscriptions
                SET title = %s, url = %s, category = %s, script_path = %s
                WHERE id = %s
                """,
                (title, url, category, script_path, subscription_id),
            )
            updated = cur.rowcount > 0
        conn.commit()
        return updated

    def record_fetch_error(self, conn: Connection, subscription_id: int, message: str) -> None:
        """Set the last fetch error; an empty message clears it."""
        self._update_column(conn, subscription_id, "last_error", message)

    def update_cached_image(self, conn: Connection, subscription_id: int, url: str) -> None:
        """Store the feed image URL."""
        self._update_column(conn, subscription_id, "image_url", url)

    def update_cached_link(self, conn: Connection, subscription_id: int, url: str) -> None:
        """Store the feed website link."""
        self._update_column(conn, subscription_id, "link", url)

    def _update_column(self, conn: Connection, subscription_id: int, column: str, value: str) -> None:
        # column names come from this module only
        with conn.cursor() as cur:
            cur.execute(
                f"UPDATE subscriptions SET {column} = %s WHERE id = %s",
                (value, subscription_id),
            )
        conn.commit()
