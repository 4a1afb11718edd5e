"""Shared fixtures for the feature board tests."""
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from feature_board.config.settings import Settings
from feature_board.data_access.memory_store import InMemoryFeedbackStore
from feature_board.models.schemas import FeedbackItem

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_item(
    feedback_id: str,
    voters: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    days: int = 0,
    **overrides,
) -> FeedbackItem:
    """Build a feedback item submitted ``days`` after BASE_TIME."""
    submitted = BASE_TIME + timedelta(days=days)
    data = dict(
        id=feedback_id,
        title=f"Feature request {feedback_id}",
        description=f"Detailed description for request {feedback_id}",
        category="POS",
        sub_category="Payments",
        voted_by=list(voters or []),
        votes=len(voters or []),
        tags=list(tags or []),
        ai_processing_status="completed" if tags else "pending",
        submitted_at=submitted,
        updated_at=submitted,
    )
    data.update(overrides)
    return FeedbackItem(**data)


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from any local .env file, with no delays."""
    return Settings(
        _env_file=None,
        openai_api_key=None,
        postgres_host=None,
        postgres_database=None,
        postgres_username=None,
        postgres_password=None,
        cron_secret="test-secret",
        tagging_delay_seconds=0,
        insight_delay_seconds=0,
        job_timeout_seconds=5,
        export_dir=str(tmp_path / "exports"),
        seed_fallback_store=False,
    )


@pytest.fixture
def store():
    return InMemoryFeedbackStore()


@pytest.fixture
def seeded_store():
    return InMemoryFeedbackStore(seed=True)


@pytest.fixture
def item_factory():
    return make_item
