# feature_board/data_access/resilient_store.py
"""
Primary/fallback store composition.

Callers see one FeedbackStore. When the primary backend is unreachable or a
call on it fails for infrastructure reasons, the same call is served by the
fallback backend and a warning is logged.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, List, Optional

from feature_board.errors import NotFoundError, StoreBusyError, ValidationError
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

logger = logging.getLogger(__name__)

# Domain errors describe the request, not the backend; they are never retried.
# A saturated pool is load on a healthy primary, not an outage.
PASS_THROUGH_ERRORS = (ValidationError, NotFoundError, StoreBusyError)


class ResilientFeedbackStore:
    """FeedbackStore that prefers ``primary`` and falls back transparently."""

    name = "resilient"

    def __init__(
        self,
        primary,
        fallback,
        availability_ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.primary = primary
        self.fallback = fallback
        self.availability_ttl_seconds = availability_ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._primary_ok: Optional[bool] = None
        self._checked_at = 0.0

    def primary_available(self) -> bool:
        """Cached availability of the primary backend."""
        with self._lock:
            fresh = (
                self._primary_ok is not None
                and self._clock() - self._checked_at < self.availability_ttl_seconds
            )
            if fresh:
                return self._primary_ok

        available = self.primary.is_available()
        with self._lock:
            if self._primary_ok is not False and not available:
                logger.warning(f"Primary store '{self.primary.name}' unavailable, using '{self.fallback.name}'")
            self._primary_ok = available
            self._checked_at = self._clock()
        return available

    def active_backend(self) -> str:
        return self.primary.name if self.primary_available() else self.fallback.name

    def is_available(self) -> bool:
        return self.primary_available() or self.fallback.is_available()

    def _mark_primary_unavailable(self) -> None:
        with self._lock:
            self._primary_ok = False
            self._checked_at = self._clock()

    def _call(self, operation: str, *args, **kwargs):
        if self.primary_available():
            try:
                return getattr(self.primary, operation)(*args, **kwargs)
            except PASS_THROUGH_ERRORS:
                raise
            except Exception as e:
                logger.warning(
                    f"Primary store '{self.primary.name}' failed on {operation}: {e}. "
                    f"Falling back to '{self.fallback.name}'"
                )
                self._mark_primary_unavailable()
        return getattr(self.fallback, operation)(*args, **kwargs)

    def get_all(self) -> List[FeedbackItem]:
        return self._call("get_all")

    def get_by_id(self, feedback_id: str) -> Optional[FeedbackItem]:
        return self._call("get_by_id", feedback_id)

    def create(self, submission: FeedbackSubmission) -> FeedbackItem:
        return self._call("create", submission)

    def toggle_vote(self, feedback_id: str, user_id: str) -> VoteResult:
        return self._call("toggle_vote", feedback_id, user_id)

    def update_status(self, feedback_id: str, status: Status) -> FeedbackItem:
        return self._call("update_status", feedback_id, status)

    def set_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        return self._call("set_tags", feedback_id, tags)

    def get_pending_tagging(self, limit: int) -> List[FeedbackItem]:
        return self._call("get_pending_tagging", limit)

    def claim_pending_tagging(self, limit: int, stale_after_seconds: float) -> List[FeedbackItem]:
        return self._call("claim_pending_tagging", limit, stale_after_seconds)

    def release_tagging(self, feedback_id: str) -> None:
        return self._call("release_tagging", feedback_id)

    def update_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        return self._call("update_tags", feedback_id, tags)

    def get_tagged(self) -> List[FeedbackItem]:
        return self._call("get_tagged")

    def insert_insight(self, insight: AiInsight) -> AiInsight:
        return self._call("insert_insight", insight)

    def get_unexported_insights(self) -> List[AiInsight]:
        return self._call("get_unexported_insights")

    def mark_insights_exported(self, insight_ids: List[str], exported_at: datetime) -> None:
        return self._call("mark_insights_exported", insight_ids, exported_at)

    def insert_automation_log(self, task_type: AutomationTaskType, triggered_by: TriggeredBy) -> str:
        return self._call("insert_automation_log", task_type, triggered_by)

    def update_automation_log(
        self,
        log_id: str,
        status: AutomationStatus,
        items_processed: int,
        error_message: Optional[str] = None,
        items_failed: int = 0,
    ) -> None:
        return self._call(
            "update_automation_log", log_id, status, items_processed,
            error_message=error_message, items_failed=items_failed
        )

    def get_latest_automation_log(self, task_type: AutomationTaskType) -> Optional[AutomationLog]:
        return self._call("get_latest_automation_log", task_type)
