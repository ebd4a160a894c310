"""Feed parsing and network fetching on top of feedparser."""

import io
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

import feedparser
import httpx

from ..errors import FeedParseFailed, NetworkFetchFailed
from .models import Enclosure, RawEntry, RawFeedDocument

logger = logging.getLogger(__name__)


class FeedParser:
    """Parse RSS/Atom documents and fetch them over HTTP."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: str = "feedhub/1.0 (RSS reader)",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize feed parser.

        Args:
            timeout: Per-request timeout in seconds, None to wait indefinitely
            user_agent: User-Agent header sent with every request
            transport: Custom httpx transport (for testing)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    def parse_document(self, document: Union[str, bytes]) -> RawFeedDocument:
        """Parse an RSS/Atom document into a RawFeedDocument."""
        # feedparser opens anything that looks like a URL or file name; a stream
        # is always read as content
        if isinstance(document, str):
            document = document.encode("utf-8")

        parsed = feedparser.parse(io.BytesIO(document))

        if not parsed.get("version") or (parsed.bozo and not parsed.entries):
            reason = parsed.get("bozo_exception") or "unrecognized feed format"
            raise FeedParseFailed(f"Failed to parse feed: {reason}")

        feed = parsed.feed
        return RawFeedDocument(
            title=feed.get("title", ""),
            link=feed.get("link", ""),
            description=feed.get("subtitle", "") or feed.get("description", ""),
            image_url=(feed.get("image") or {}).get("href"),
            entries=[self._parse_entry(entry) for entry in parsed.entries],
        )

    async def fetch_and_parse(self, url: str) -> RawFeedDocument:
        """Fetch a feed URL and parse the response body."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkFetchFailed(f"HTTP {e.response.status_code} fetching {url}") from e
        except httpx.HTTPError as e:
            raise NetworkFetchFailed(f"HTTP error fetching {url}: {e}") from e

        return self.parse_document(response.content)

    def _parse_entry(self, entry: Any) -> RawEntry:
        """Convert a feedparser entry into a RawEntry."""
        content = ""
        if entry.get("content"):
            content = entry.content[0].get("value", "")

        enclosures: List[Enclosure] = []
        for enclosure in entry.get("enclosures", []):
            href = enclosure.get("href")
            if href:
                enclosures.append(Enclosure(url=href, type=enclosure.get("type", "")))

        return RawEntry(
            title=entry.get("title", ""),
            link=entry.get("link", ""),
            description=entry.get("summary", ""),
            content=content,
            image_url=self._entry_image(entry),
            enclosures=enclosures,
            published=self._entry_published(entry),
        )

    def _entry_image(self, entry: Any) -> Optional[str]:
        """Find the structured image of an entry (itunes/media tags)."""
        image = entry.get("image")
        if image and image.get("href"):
            return image["href"]

        for thumbnail in entry.get("media_thumbnail", []):
            if thumbnail.get("url"):
                return thumbnail["url"]

        for media in entry.get("media_content", []):
            if media.get("medium") == "image" and media.get("url"):
                return media["url"]

        return None

    def _entry_published(self, entry: Any) -> Optional[datetime]:
        """Get the entry publication time as an aware UTC datetime."""
        parsed_time = entry.get("published_parsed") or entry.get("updated_parsed")
        if not parsed_time:
            return None
        try:
            return datetime(*parsed_time[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError) as e:
            logger.debug(f"Ignoring unusable entry date {parsed_time}: {e}")
            return None
