# feature_board/data_access/base.py
"""
Storage contract implemented by every feedback backend.
"""

from datetime import datetime
from typing import List, Optional, Protocol

from feature_board.models.schemas import (
    AiInsight,
    AutomationLog,
    AutomationStatus,
    AutomationTaskType,
    FeedbackItem,
    FeedbackSubmission,
    Status,
    TriggeredBy,
    VoteResult,
)


class FeedbackStore(Protocol):
    """Uniform read/write interface over interchangeable storage backends."""

    name: str

    def is_available(self) -> bool:
        """Configuration present and a live round-trip succeeds. Never raises."""
        ...

    def get_all(self) -> List[FeedbackItem]:
        """Approved items, votes descending then newest submission first."""
        ...

    def get_by_id(self, feedback_id: str) -> Optional[FeedbackItem]:
        ...

    def create(self, submission: FeedbackSubmission) -> FeedbackItem:
        ...

    def toggle_vote(self, feedback_id: str, user_id: str) -> VoteResult:
        """Raises NotFoundError when the item does not exist."""
        ...

    def update_status(self, feedback_id: str, status: Status) -> FeedbackItem:
        ...

    def set_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        """Manual tags from an admin."""
        ...

    def get_pending_tagging(self, limit: int) -> List[FeedbackItem]:
        """Approved items whose AI processing status is pending."""
        ...

    def claim_pending_tagging(self, limit: int, stale_after_seconds: float) -> List[FeedbackItem]:
        """
        Atomically mark up to ``limit`` pending items as processing and return
        them oldest first. Items claimed longer ago than ``stale_after_seconds``
        count as pending. Concurrent callers never receive the same item.
        """
        ...

    def release_tagging(self, feedback_id: str) -> None:
        """Put a processing item back to pending."""
        ...

    def update_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        """Store AI tags and mark the item's AI processing completed."""
        ...

    def get_tagged(self) -> List[FeedbackItem]:
        """Approved items with at least one tag, oldest submission first."""
        ...

    def insert_insight(self, insight: AiInsight) -> AiInsight:
        ...

    def get_unexported_insights(self) -> List[AiInsight]:
        ...

    def mark_insights_exported(self, insight_ids: List[str], exported_at: datetime) -> None:
        ...

    def insert_automation_log(self, task_type: AutomationTaskType, triggered_by: TriggeredBy) -> str:
        """Create a running log row and return its id."""
        ...

    def update_automation_log(
        self,
        log_id: str,
        status: AutomationStatus,
        items_processed: int,
        error_message: Optional[str] = None,
        items_failed: int = 0,
    ) -> None:
        ...

    def get_latest_automation_log(self, task_type: AutomationTaskType) -> Optional[AutomationLog]:
        ...


def sort_for_board(items: List[FeedbackItem]) -> List[FeedbackItem]:
    """Order items for the public board: votes desc, newest first, then id."""
    by_id = sorted(items, key=lambda f: f.id)
    by_date = sorted(by_id, key=lambda f: f.submitted_at, reverse=True)
    return sorted(by_date, key=lambda f: f.votes, reverse=True)
