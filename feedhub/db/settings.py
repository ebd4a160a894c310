"""Key/value settings in database."""

from psycopg import Connection

# Setting keys read by the fetch pipeline
TRANSLATION_ENABLED = "translation_enabled"
TARGET_LANGUAGE = "target_language"
TRANSLATION_PROVIDER = "translation_provider"
DEEPL_API_KEY = "deepl_api_key"
OPENAI_API_KEY = "openai_api_key"
LAST_ARTICLE_UPDATE = "last_article_update"

# FreshRSS sync
FRESHRSS_ENABLED = "freshrss_enabled"
FRESHRSS_SERVER_URL = "freshrss_server_url"
FRESHRSS_USERNAME = "freshrss_username"
FRESHRSS_API_PASSWORD = "freshrss_api_password"


class SettingsManager:
    """Read and write settings."""

    def get_setting(self, conn: Connection, key: str) -> str:
        """Get a setting, empty string when unset."""
        with conn.cursor() as cur:
            cur.execute("SELECT value FROM settings WHERE key = %s", (key,))
            row = cur.fetchone()
        return row["value"] if row else ""

    def set_setting(self, conn: Connection, key: str, value: str) -> None:
        """Create or replace a setting."""
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO settings (key, value)
                VALUES (%s, %s)
                ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value
                """,
                (key, value),
            )
        conn.commit()
