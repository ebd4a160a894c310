"""Keyword rules applied to newly fetched articles."""

import logging
import re
from typing import Dict, List, Optional, Pattern, Protocol, runtime_checkable

from ..config import RuleConfig
from ..db import Store
from ..models import Article

logger = logging.getLogger(__name__)

ACTION_FLAGS: Dict[str, str] = {
    "mark_read": "is_read",
    "favorite": "is_favorite",
    "hide": "is_hidden",
}


@runtime_checkable
class RuleEngine(Protocol):
    """Evaluates rules against a set of articles."""

    def apply_to_articles(self, articles: List[Article]) -> int:
        """Apply rules and return the number of articles changed."""
        ...


class KeywordRule:
    """A compiled keyword rule."""

    def __init__(self, config: RuleConfig) -> None:
        self.name = config.name
        self.field = config.field
        self.flag = ACTION_FLAGS[config.action]
        # Not inside a word, so "ai" does not match "said"; lookarounds instead
        # of \b so keywords like "c++" or ".net" still match
        self.pattern: Pattern[str] = re.compile(
            r"(?<!\w)(?:" + "|".join(re.escape(k.lower()) for k in config.keywords) + r")(?!\w)"
        )

    def _text(self, article: Article) -> str:
        if self.field == "title":
            return article.title
        if self.field == "content":
            return article.content
        return f"{article.title}\n{article.content}"

    def matches(self, article: Article) -> bool:
        """Whether the article triggers this rule."""
        return self.pattern.search(self._text(article).lower()) is not None


class KeywordRuleEngine:
    """Set article flags when configured keywords appear."""

    def __init__(self, store: Store, rules: Optional[List[RuleConfig]] = None) -> None:
        """
        Initialize rule engine.

        Args:
            store: Store used to persist flag changes
            rules: Rule configurations, evaluated in order
        """
        self.store = store
        self.rules = [KeywordRule(rule) for rule in (rules or [])]

    def flags_for(self, article: Article) -> Dict[str, bool]:
        """Compute the flags the rules would set on an article."""
        flags: Dict[str, bool] = {}
        for rule in self.rules:
            if rule.matches(article):
                logger.debug(f"Rule '{rule.name}' matched article {article.id}")
                flags[rule.flag] = True
        return flags

    def apply_to_articles(self, articles: List[Article]) -> int:
        """Apply rules to articles and persist flag changes."""
        affected = 0
        for article in articles:
            if article.id is None:
                continue
            flags = {
                flag: value
                for flag, value in self.flags_for(article).items()
                if getattr(article, flag) != value
            }
            if not flags:
                continue
            self.store.update_article_flags(article.id, **flags)
            affected += 1
        return affected
