"""Fetch orchestrator that refreshes every subscription with bounded concurrency."""

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

import pendulum
from pydantic import BaseModel, Field

from ..db import Store
from ..db.settings import (
    DEEPL_API_KEY,
    LAST_ARTICLE_UPDATE,
    OPENAI_API_KEY,
    TARGET_LANGUAGE,
    TRANSLATION_ENABLED,
    TRANSLATION_PROVIDER,
)
from ..errors import FeedHubError, FetchCancelled, PersistenceFailed
from ..ingestion import (
    NO_TRANSLATION,
    CancelToken,
    SubscriptionFetcher,
    TranslationOptions,
    normalize_entries,
)
from ..models import Subscription
from ..rules import RuleEngine
from ..translation import Translator, select_translator
from .hooks import PostFetchHook
from .progress import BatchProgress, ProgressSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT = 5


class BatchOutcome(str, Enum):
    """How a fetch_all call ended."""

    ALREADY_RUNNING = "already_running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class BatchResult(BaseModel):
    """Summary of one fetch_all call."""

    outcome: BatchOutcome = Field(..., description="How the batch ended")
    total: int = Field(0, description="Subscriptions in the batch snapshot")
    completed: int = Field(0, description="Subscriptions that finished, including failures")
    failed: int = Field(0, description="Subscriptions whose fetch or save failed")
    articles_saved: int = Field(0, description="New articles stored")
    duration: float = Field(0.0, description="Batch duration in seconds")


class FetchOrchestrator:
    """Fan out subscription fetches over a fixed-size pool of slots."""

    def __init__(
        self,
        store: Store,
        fetcher: SubscriptionFetcher,
        progress: BatchProgress,
        rule_engine: Optional[RuleEngine] = None,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        translator_factory: Callable[..., Translator] = select_translator,
    ) -> None:
        """
        Initialize fetch orchestrator.

        Args:
            store: Store holding subscriptions, articles and settings
            fetcher: Resolves a subscription to a parsed feed
            progress: Process-wide batch progress
            rule_engine: Rules applied to newly saved articles
            max_concurrent: Number of subscriptions fetched at the same time;
                the application always runs with the default of 5
            translator_factory: Builds a translator from provider settings
        """
        self.store = store
        self.fetcher = fetcher
        self.progress = progress
        self.hook = PostFetchHook(rule_engine)
        self.max_concurrent = max_concurrent
        self.translator_factory = translator_factory

    def get_progress(self) -> ProgressSnapshot:
        """Get current batch progress."""
        return self.progress.snapshot()

    def _translation_options(self) -> TranslationOptions:
        """Read translation settings and pick the translator for this batch."""
        try:
            enabled = self.store.get_setting(TRANSLATION_ENABLED) == "true"
            if not enabled:
                return NO_TRANSLATION
            translator = self.translator_factory(
                self.store.get_setting(TRANSLATION_PROVIDER),
                deepl_api_key=self.store.get_setting(DEEPL_API_KEY),
                openai_api_key=self.store.get_setting(OPENAI_API_KEY),
            )
            target_language = self.store.get_setting(TARGET_LANGUAGE) or "en"
        except PersistenceFailed as e:
            logger.warning(f"Could not read translation settings, translation disabled: {e}")
            return NO_TRANSLATION

        return TranslationOptions(
            enabled=True,
            target_language=target_language,
            translator=translator,
        )

    async def fetch_all(self, token: Optional[CancelToken] = None) -> BatchResult:
        """
        Fetch every subscription once.

        Only one batch runs at a time; calling this while a batch is running
        returns immediately with ``BatchOutcome.ALREADY_RUNNING``.

        Args:
            token: Cancellation token for this batch

        Returns:
            Batch summary
        """
        if token is None:
            token = CancelToken()

        if not self.progress.try_start():
            logger.info("Feed refresh already running, ignoring request")
            return BatchResult(outcome=BatchOutcome.ALREADY_RUNNING)

        start_time = time.monotonic()
        result = BatchResult(outcome=BatchOutcome.COMPLETED)

        try:
            translation = await asyncio.to_thread(self._translation_options)

            try:
                subscriptions = await asyncio.to_thread(self.store.list_subscriptions)
            except FeedHubError as e:
                logger.error(f"Error getting subscriptions: {e}")
                result.outcome = BatchOutcome.ABORTED
                return result

            result.total = len(subscriptions)
            self.progress.begin(len(subscriptions))

            await self._dispatch(subscriptions, token, translation, result)

            if token.cancelled:
                logger.info("Feed refresh cancelled")
                result.outcome = BatchOutcome.CANCELLED

            try:
                await asyncio.to_thread(
                    self.store.set_setting,
                    LAST_ARTICLE_UPDATE,
                    pendulum.now("UTC").to_iso8601_string(),
                )
            except PersistenceFailed as e:
                logger.error(f"Error recording last update time: {e}")

            return result
        finally:
            self.progress.finish()
            result.duration = time.monotonic() - start_time

    def fetch_all_sync(self, token: Optional[CancelToken] = None) -> BatchResult:
        """Synchronous wrapper for fetch_all."""
        return asyncio.run(self.fetch_all(token))

    async def _dispatch(
        self,
        subscriptions: List[Subscription],
        token: CancelToken,
        translation: TranslationOptions,
        result: BatchResult,
    ) -> None:
        """Start one task per subscription, at most max_concurrent at a time."""
        semaphore = asyncio.Semaphore(self.max_concurrent)
        tasks = []

        for subscription in subscriptions:
            if token.cancelled:
                logger.info("Feed refresh cancelled, not dispatching remaining feeds")
                break

            # Blocks while every slot is taken; the task releases it
            await semaphore.acquire()
            tasks.append(
                asyncio.create_task(
                    self._run_source(subscription, semaphore, token, translation, result)
                )
            )

        await asyncio.gather(*tasks)

    async def _run_source(
        self,
        subscription: Subscription,
        semaphore: asyncio.Semaphore,
        token: CancelToken,
        translation: TranslationOptions,
        result: BatchResult,
    ) -> None:
        """Process one subscription inside a pool slot."""
        try:
            if token.cancelled:
                return

            saved = await self._process_subscription(subscription, token, translation)
            if saved is None:
                result.failed += 1
            else:
                result.articles_saved += saved
            result.completed += 1
            self.progress.increment()
        except FetchCancelled:
            logger.debug(f"Fetch of {subscription.title} cancelled")
        except Exception:
            logger.exception(f"Unexpected error refreshing feed {subscription.title}")
            result.failed += 1
            result.completed += 1
            self.progress.increment()
        finally:
            semaphore.release()

    async def _process_subscription(
        self,
        subscription: Subscription,
        token: CancelToken,
        translation: TranslationOptions,
    ) -> Optional[int]:
        """
        Fetch, normalize and save one subscription.

        Returns:
            Number of new articles, or None if the fetch or save failed
        """
        document = await self.fetcher.fetch_subscription(subscription, token)
        if document is None:
            return None

        articles = await asyncio.to_thread(
            normalize_entries, subscription, document, translation
        )

        # Last checkpoint before writing
        token.raise_if_cancelled()

        if not articles:
            logger.info(f"Updated feed: {subscription.title} (no entries)")
            return 0

        try:
            saved = await asyncio.to_thread(self.store.bulk_save_articles, articles)
        except PersistenceFailed as e:
            logger.error(f"Error saving articles for feed {subscription.title}: {e}")
            return None

        if saved:
            await asyncio.to_thread(self.hook.run, subscription, saved)

        logger.info(f"Updated feed: {subscription.title} ({len(saved)} new articles)")
        return len(saved)
