"""Article storage and management."""

from typing import List, Optional

from psycopg import Connection

from ..models import Article


class ArticleStorage:
    """Handle article storage and deduplication."""

    def save_articles(self, conn: Connection, articles: List[Article]) -> List[Article]:
        """
        Insert articles in one transaction, skipping URLs already stored.

        Returns:
            The newly inserted articles with their IDs set
        """
        saved: List[Article] = []

        with conn.cursor() as cur:
            for article in articles:
                cur.execute(
                    """
                    INSERT INTO articles (
                        subscription_id, title, url, image_url, content,
                        published_at, translated_title
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (url) DO NOTHING
                    RETURNING id
                    """,
                    (
                        article.subscription_id,
                        article.title,
                        article.url,
                        article.image_url,
                        article.content,
                        article.published_at,
                        article.translated_title,
                    ),
                )
                row = cur.fetchone()
                if row:
                    saved.append(article.model_copy(update={"id": row["id"]}))

        conn.commit()
        return saved

    def get_recent_articles(
        self,
        conn: Connection,
        subscription_id: int,
        limit: int = 50,
    ) -> List[Article]:
        """Get the most recently published articles of a subscription."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT
                    id, subscription_id, title, url, image_url, content,
                    published_at, translated_title, is_read, is_favorite,
                    is_hidden, created_at
                FROM articles
                WHERE subscription_id = %s
                ORDER BY published_at DESC, id DESC
                LIMIT %s
                """,
                (subscription_id, limit),
            )
            return [Article(**row) for row in cur.fetchall()]

    def update_flags(
        self,
        conn: Connection,
        article_id: int,
        is_read: Optional[bool] = None,
        is_favorite: Optional[bool] = None,
        is_hidden: Optional[bool] = None,
    ) -> None:
        """Update article state flags; None leaves a flag unchanged."""
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE articles
                SET
                    is_read = COALESCE(%s, is_read),
                    is_favorite = COALESCE(%s, is_favorite),
                    is_hidden = COALESCE(%s, is_hidden)
                WHERE id = %s
                """,
                (is_read, is_favorite, is_hidden, article_id),
            )
        conn.commit()
