"""Fetch a subscription's feed by URL or script."""

import asyncio
import logging
from typing import Optional

from ..db import Store
from ..errors import FeedHubError, FetchCancelled, ScriptExecutionFailed
from ..models import SCRIPT_URL_PREFIX, Subscription
from .cancellation import CancelToken
from .feed_parser import FeedParser
from .models import RawFeedDocument
from .script_runner import DEFAULT_SCRIPT_TIMEOUT, ScriptRunner

logger = logging.getLogger(__name__)


class SubscriptionFetcher:
    """Resolve subscriptions to parsed feeds and add new subscriptions."""

    def __init__(
        self,
        store: Store,
        parser: Optional[FeedParser] = None,
        script_runner: Optional[ScriptRunner] = None,
    ) -> None:
        """
        Initialize subscription fetcher.

        Args:
            store: Store used to record errors and cached feed metadata
            parser: Feed parser for URL subscriptions
            script_runner: Runner for script subscriptions, None disables them
        """
        self.store = store
        self.parser = parser or FeedParser()
        self.script_runner = script_runner

    async def _load(self, subscription: Subscription, token: CancelToken) -> RawFeedDocument:
        if subscription.is_synced:
            # Filled by FreshRSS sync, not by fetching
            return RawFeedDocument(title=subscription.title)
        if subscription.uses_script:
            if self.script_runner is None:
                raise ScriptExecutionFailed("Script runner not configured")
            # A spawned script is bounded by its own timeout, not by cancellation
            return await self.script_runner.run(subscription.script_path)
        return await token.race(self.parser.fetch_and_parse(subscription.url))

    async def fetch_subscription(
        self,
        subscription: Subscription,
        token: CancelToken,
    ) -> Optional[RawFeedDocument]:
        """
        Fetch and parse one subscription.

        Source errors are recorded on the subscription and swallowed.

        Returns:
            Parsed document, or None when the fetch failed

        Raises:
            FetchCancelled: If the batch was cancelled during the fetch
        """
        try:
            document = await self._load(subscription, token)
        except FetchCancelled:
            raise
        except FeedHubError as e:
            logger.warning(f"Error fetching feed {subscription.title} ({subscription.locator}): {e}")
            await asyncio.to_thread(self.store.record_fetch_error, subscription.id, str(e))
            return None

        await asyncio.to_thread(self.store.record_fetch_error, subscription.id, "")

        if not subscription.image_url and document.image_url:
            await asyncio.to_thread(self.store.update_cached_image, subscription.id, document.image_url)

        if not subscription.link and document.link:
            await asyncio.to_thread(self.store.update_cached_link, subscription.id, document.link)

        return document

    async def add_subscription(
        self,
        url: str,
        category: str = "",
        title: Optional[str] = None,
    ) -> int:
        """Fetch a feed URL once and store it as a new subscription."""
        document = await self.parser.fetch_and_parse(url)
        subscription = Subscription(
            title=title or document.title or url,
            url=url,
            link=document.link,
            description=document.description,
            category=category,
            image_url=document.image_url or "",
        )
        subscription_id = await asyncio.to_thread(self.store.create_subscription, subscription)
        logger.info(f"Added subscription {subscription.title} ({subscription_id})")
        return subscription_id

    async def add_script_subscription(
        self,
        script_path: str,
        category: str = "",
        title: Optional[str] = None,
    ) -> int:
        """Run a feed script once and store it as a new subscription."""
        if self.script_runner is None:
            raise ScriptExecutionFailed("Script runner not configured")

        document = await self.script_runner.run(script_path, deadline=DEFAULT_SCRIPT_TIMEOUT)
        subscription = Subscription(
            title=title or document.title or script_path,
            url=SCRIPT_URL_PREFIX + script_path,
            link=document.link,
            description=document.description,
            category=category,
            image_url=document.image_url or "",
            script_path=script_path,
        )
        subscription_id = await asyncio.to_thread(self.store.create_subscription, subscription)
        logger.info(f"Added script subscription {subscription.title} ({subscription_id})")
        return subscription_id

    def import_subscription(self, title: str, url: str, category: str = "") -> int:
        """Store a subscription without fetching it; link and image fill in on first fetch."""
        return self.store.create_subscription(
            Subscription(title=title, url=url, category=category)
        )

    def edit_subscription(
        self,
        subscription_id: int,
        title: Optional[str] = None,
        url: Optional[str] = None,
        category: Optional[str] = None,
        script_path: Optional[str] = None,
    ) -> Optional[Subscription]:
        """
        Change a subscription's title, source or category.

        Fields left as None keep their value. A new script path turns the
        subscription into a script feed; a new URL turns it back into a
        URL feed. Nothing is fetched.

        Returns:
            Updated subscription, or None if it does not exist

        Raises:
            InvalidPath: If the script path leaves the scripts directory
            ScriptExecutionFailed: If script feeds are not configured
        """
        subscription = self.store.get_subscription(subscription_id)
        if subscription is None:
            return None

        changes = {}
        if title is not None:
            changes["title"] = title
        if category is not None:
            changes["category"] = category
        if script_path:
            if self.script_runner is None:
                raise ScriptExecutionFailed("Script runner not configured")
            self.script_runner.resolve_script(script_path)
            changes["script_path"] = script_path
            changes["url"] = SCRIPT_URL_PREFIX + script_path
        elif url:
            changes["script_path"] = ""
            changes["url"] = url

        updated = subscription.model_copy(update=changes)
        if not self.store.update_subscription(
            subscription_id, updated.title, updated.url, updated.category, updated.script_path
        ):
            return None

        logger.info(f"Updated subscription {updated.title} ({subscription_id})")
        return updated
