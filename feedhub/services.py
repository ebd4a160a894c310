"""Wire feedhub components together from configuration."""

from dataclasses import dataclass

from .config import Config
from .db import PostgresStore
from .ingestion import FeedParser, ScriptRunner, SubscriptionFetcher
from .pipeline import FetchOrchestrator, get_default_progress
from .rules import KeywordRuleEngine


@dataclass
class Services:
    """Components built from one configuration."""

    store: PostgresStore
    fetcher: SubscriptionFetcher
    orchestrator: FetchOrchestrator


def build_services(config: Config) -> Services:
    """Create the store, fetcher and orchestrator described by ``config``."""
    fetch_config = config.fetch

    store = PostgresStore(config.get_db_config())
    parser = FeedParser(
        timeout=fetch_config.request_timeout,
        user_agent=fetch_config.user_agent,
    )
    script_runner = ScriptRunner(
        config.scripts_dir,
        parser=parser,
        timeout=fetch_config.script_timeout,
    )
    fetcher = SubscriptionFetcher(store, parser=parser, script_runner=script_runner)
    orchestrator = FetchOrchestrator(
        store,
        fetcher,
        get_default_progress(),
        rule_engine=KeywordRuleEngine(store, config.rules),
    )
    return Services(store=store, fetcher=fetcher, orchestrator=orchestrator)
