"""Article rules."""

from .engine import KeywordRule, KeywordRuleEngine, RuleEngine

__all__ = ["KeywordRule", "KeywordRuleEngine", "RuleEngine"]
