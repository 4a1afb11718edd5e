# feature_board/services/analytics.py
"""
Admin analytics over the approved board: breakdowns, top items, tag
frequency, recent trends, the untagged backlog and a full JSON export.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from feature_board.config import constants
from feature_board.models.schemas import FeedbackItem, Status

logger = logging.getLogger(__name__)

TOP_VOTED_LIMIT = 10
TAGGED_SAMPLE_LIMIT = 20
UNTAGGED_LIMIT = 20
RECENT_WINDOW_DAYS = 30

STATUS_BREAKDOWN_KEYS = {
    Status.UNDER_REVIEW.value: "underReview",
    Status.IN_PROGRESS.value: "inProgress",
    Status.COMPLETED.value: "completed",
    Status.DECLINED.value: "declined",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def status_breakdown(items: List[FeedbackItem]) -> Dict[str, int]:
    counts = Counter(item.status for item in items)
    return {key: counts.get(status, 0) for status, key in STATUS_BREAKDOWN_KEYS.items()}


def category_breakdown(items: List[FeedbackItem]) -> Dict[str, int]:
    counts = Counter(item.category for item in items)
    return {category: counts.get(category, 0) for category in constants.CATEGORY_OPTIONS}


def tag_frequency(items: List[FeedbackItem]) -> Dict[str, Any]:
    tagged = [item for item in items if item.tags]
    counts = Counter(tag for item in tagged for tag in item.tags)
    return {
        "counts": dict(counts),
        "totalTaggedItems": len(tagged),
        "totalUntaggedItems": len(items) - len(tagged),
        "taggedFeedback": [
            {"id": item.id, "title": item.title, "votes": item.votes, "tags": list(item.tags)}
            for item in tagged[:TAGGED_SAMPLE_LIMIT]
        ],
    }


def recent_trends(items: List[FeedbackItem], now: datetime) -> Dict[str, Any]:
    """Activity of items submitted within the last RECENT_WINDOW_DAYS."""
    since = now - timedelta(days=RECENT_WINDOW_DAYS)
    recent = [item for item in items if item.submitted_at > since]
    votes = sum(item.votes for item in recent)
    most_active = Counter(item.category for item in recent).most_common(1)
    return {
        "recentSubmissions": len(recent),
        "recentVotes": votes,
        "averageVotesPerItem": votes / len(recent) if recent else 0,
        "mostActiveCategory": most_active[0][0] if most_active else "None",
    }


class AnalyticsService:
    """Read-only reporting over a FeedbackStore."""

    def __init__(self, store, clock=_utcnow):
        self.store = store
        self._clock = clock

    def overview(self) -> Dict[str, Any]:
        """Aggregate board statistics for the admin dashboard."""
        items = self.store.get_all()
        now = self._clock()
        logger.info(f"Building analytics overview over {len(items)} items")

        # get_all is already ordered by votes
        top_voted = [
            {
                "id": item.id,
                "title": item.title,
                "description": item.description,
                "votes": item.votes,
                "category": item.category,
                "tags": list(item.tags),
            }
            for item in items[:TOP_VOTED_LIMIT]
        ]

        return {
            "data": {
                "totalFeedback": len(items),
                "approvedFeedback": sum(1 for item in items if item.is_approved),
                "totalVotes": sum(item.votes for item in items),
                "statusBreakdown": status_breakdown(items),
                "categoryBreakdown": category_breakdown(items),
                "topVotedItems": top_voted,
                "tagFrequency": tag_frequency(items),
                "recentTrends": recent_trends(items, now),
            },
            "meta": {
                "generatedAt": now.isoformat(),
                "dataPoints": len(items),
            },
        }

    def untagged(self, limit: int = UNTAGGED_LIMIT) -> Dict[str, Any]:
        """Approved items without tags, most voted first."""
        items = [item for item in self.store.get_all() if not item.tags][:limit]
        if items:
            message = f"Found {len(items)} feedback items ready for AI tagging"
        else:
            message = "No untagged feedback found"
        return {
            "data": [
                item.model_dump(
                    mode="json",
                    by_alias=True,
                    include={"id", "title", "description", "category", "sub_category", "submitted_at", "votes"},
                )
                for item in items
            ],
            "meta": {
                "count": len(items),
                "timestamp": self._clock().isoformat(),
                "message": message,
            },
        }

    def export(self) -> Dict[str, Any]:
        """Every approved item with voter details, plus summary counts."""
        items = self.store.get_all()
        data = []
        for item in items:
            row = item.model_dump(
                mode="json",
                by_alias=True,
                include={
                    "id", "title", "description", "status", "votes", "tags", "category",
                    "sub_category", "submitted_at", "updated_at", "is_approved", "voted_by",
                },
            )
            row["voteCount"] = len(item.voted_by)
            data.append(row)

        return {
            "data": data,
            "meta": {
                "totalCount": len(items),
                "exportTimestamp": self._clock().isoformat(),
                "statuses": status_breakdown(items),
                "categories": category_breakdown(items),
                "totalVotes": sum(item.votes for item in items),
            },
        }
