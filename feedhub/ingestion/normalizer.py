"""Map parsed feed entries onto articles."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import pendulum

from ..models import Article, Subscription
from ..translation import Translator
from ..utils import clean_html, find_first_image
from .models import RawEntry, RawFeedDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationOptions:
    """Title translation settings in effect for one fetch.

    Attributes:
        enabled: Whether titles should be translated
        target_language: Language code to translate into
        translator: Translator to use, None disables translation
    """

    enabled: bool = False
    target_language: str = "en"
    translator: Optional[Translator] = None

    @property
    def active(self) -> bool:
        return self.enabled and self.translator is not None


NO_TRANSLATION = TranslationOptions()


def resolve_image(entry: RawEntry) -> Optional[str]:
    """Pick the article image.

    Order: structured entry image, first image enclosure, first <img> in the
    content, first <img> in the description.
    """
    if entry.image_url:
        return entry.image_url

    for enclosure in entry.enclosures:
        if enclosure.type.lower().startswith("image/"):
            return enclosure.url

    return find_first_image(entry.content) or find_first_image(entry.description)


def translate_title(title: str, translation: TranslationOptions) -> Optional[str]:
    """Translate a title, returning None when disabled or on any failure."""
    if not translation.active or not title:
        return None
    try:
        return translation.translator.translate(title, translation.target_language)
    except Exception as e:
        logger.debug(f"Title translation failed for {title!r}: {e}")
        return None


def normalize_entry(
    subscription: Subscription,
    entry: RawEntry,
    translation: TranslationOptions = NO_TRANSLATION,
    now: Optional[datetime] = None,
) -> Article:
    """
    Convert a raw feed entry into an Article for a subscription.

    Args:
        subscription: Subscription the entry was fetched for
        entry: Parsed entry
        translation: Title translation settings
        now: Fallback publication time, defaults to the current UTC time

    Returns:
        Unsaved Article
    """
    published_at = entry.published or now or pendulum.now("UTC")

    return Article(
        subscription_id=subscription.id,
        title=entry.title,
        url=entry.link,
        image_url=resolve_image(entry),
        content=clean_html(entry.content or entry.description),
        published_at=published_at,
        translated_title=translate_title(entry.title, translation),
    )


def normalize_entries(
    subscription: Subscription,
    document: RawFeedDocument,
    translation: TranslationOptions = NO_TRANSLATION,
) -> List[Article]:
    """Normalize every entry of a document, sharing one fallback timestamp."""
    now = pendulum.now("UTC")
    return [
        normalize_entry(subscription, entry, translation, now=now)
        for entry in document.entries
    ]
