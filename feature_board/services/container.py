# feature_board/services/container.py
"""
Wiring of stores, collaborators and services for one process.
"""

import logging
from dataclasses import dataclass

from feature_board.agents.llm_agent import ChatAgent, FeedbackTagger, InsightAgent
from feature_board.config.settings import Settings
from feature_board.data_access.memory_store import InMemoryFeedbackStore
from feature_board.data_access.postgres_client import PostgresFeedbackStore
from feature_board.data_access.resilient_store import ResilientFeedbackStore
from feature_board.pipelines.automation import AutomationRunner
from feature_board.pipelines.export import SheetsExporter
from feature_board.pipelines.insights import InsightAggregator
from feature_board.services.feedback_service import FeedbackService
from feature_board.services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    store: ResilientFeedbackStore
    feedback: FeedbackService
    users: UserStore
    runner: AutomationRunner
    primary: PostgresFeedbackStore

    def close(self) -> None:
        self.primary.close()


def build_container(settings: Settings) -> ServiceContainer:
    """Build the default object graph: PostgreSQL with an in-memory fallback."""
    primary = PostgresFeedbackStore(settings)
    if settings.postgres_configured():
        try:
            primary.initialize_schema()
        except Exception as e:
            logger.warning(f"Could not initialize PostgreSQL schema, fallback store will serve requests: {e}")
    else:
        logger.info("PostgreSQL is not configured, using the in-memory store")

    store = ResilientFeedbackStore(
        primary,
        InMemoryFeedbackStore(seed=settings.seed_fallback_store),
        availability_ttl_seconds=settings.availability_ttl_seconds,
    )

    chat_agent = ChatAgent(settings)
    runner = AutomationRunner(
        settings,
        store,
        tagger=FeedbackTagger(settings, agent=chat_agent),
        aggregator=InsightAggregator(InsightAgent(settings, agent=chat_agent)),
        exporter=SheetsExporter(settings),
    )

    return ServiceContainer(
        settings=settings,
        store=store,
        feedback=FeedbackService(store),
        users=UserStore(),
        runner=runner,
        primary=primary,
    )
