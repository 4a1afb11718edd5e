# feature_board/pipelines/insights.py
"""
Theme grouping and insight aggregation.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from feature_board.models.schemas import AiInsight, FeedbackItem

logger = logging.getLogger(__name__)

MIN_PRIORITY = 1
MAX_PRIORITY = 10
MAX_SAMPLE_IDS = 3


def clamp_priority(value: Any) -> int:
    """Coerce a score to an int in [1, 10]; anything non-numeric becomes 1."""
    if isinstance(value, bool):
        return MIN_PRIORITY
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_PRIORITY
    if math.isnan(number):
        return MIN_PRIORITY
    if math.isinf(number):
        return MAX_PRIORITY if number > 0 else MIN_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, int(number)))


def group_by_theme(items: List[FeedbackItem]) -> Dict[str, List[FeedbackItem]]:
    """Group items by their first tag, keeping input order. Untagged items are ignored."""
    themes: Dict[str, List[FeedbackItem]] = {}
    for item in items:
        if item.primary_tag:
            themes.setdefault(item.primary_tag, []).append(item)
    return themes


def sample_ids(items: List[FeedbackItem]) -> List[str]:
    return [item.id for item in items[:MAX_SAMPLE_IDS]]


def insight_key(theme: str, feedback_count: int, sample_feedback_ids: List[str]) -> Tuple[str, int, Tuple[str, ...]]:
    """Identity of the item set an insight was generated from."""
    return theme, feedback_count, tuple(sample_feedback_ids)


class InsightAggregator:
    """Turn one theme into exactly one AiInsight."""

    def __init__(self, insight_agent):
        self.insight_agent = insight_agent

    def aggregate(self, theme: str, items: List[FeedbackItem]) -> AiInsight:
        """
        Build the insight for a theme.

        Uses the collaborator's summary and score when it succeeds; otherwise a
        deterministic summary and a vote-density score.

        Args:
            theme: Theme label (primary tag)
            items: Non-empty list of feedback items in the theme

        Returns:
            AiInsight with a priority score in [1, 10]
        """
        if not items:
            raise ValueError(f"Theme '{theme}' has no feedback items")

        total_votes = sum(item.votes for item in items)
        result = self.insight_agent.generate_insight(theme, items)

        if result.success and result.insight_summary:
            summary = result.insight_summary
            priority = clamp_priority(result.priority_score)
        else:
            logger.warning(f"Using fallback insight for theme '{theme}': {result.error}")
            summary = self.fallback_summary(theme, len(items), total_votes)
            priority = clamp_priority(total_votes // len(items))

        return AiInsight(
            theme=theme,
            insight_summary=summary,
            priority_score=priority,
            feedback_count=len(items),
            sample_feedback_ids=sample_ids(items),
            generated_at=datetime.now(timezone.utc),
        )

    @staticmethod
    def fallback_summary(theme: str, count: int, total_votes: int) -> str:
        return (
            f"Users are requesting improvements in {theme}. This theme has {count} requests "
            f"with {total_votes} total votes, indicating significant user interest."
        )
