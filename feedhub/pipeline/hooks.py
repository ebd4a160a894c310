"""Post-fetch processing of newly saved articles."""

import logging
from typing import List, Optional

from ..models import Article, Subscription
from ..rules import RuleEngine

logger = logging.getLogger(__name__)


class PostFetchHook:
    """Run the rule engine on articles just saved for a subscription.

    Best-effort: failures are logged and never reach the batch.
    """

    def __init__(self, rule_engine: Optional[RuleEngine] = None) -> None:
        self.rule_engine = rule_engine

    def run(self, subscription: Subscription, articles: List[Article]) -> int:
        """Apply rules and return the number of affected articles (0 on failure)."""
        if self.rule_engine is None or not articles:
            return 0
        try:
            affected = self.rule_engine.apply_to_articles(articles)
        except Exception as e:
            logger.error(f"Error applying rules for feed {subscription.title}: {e}")
            return 0

        if affected > 0:
            logger.info(f"Applied rules to {affected} articles in feed {subscription.title}")
        return affected
