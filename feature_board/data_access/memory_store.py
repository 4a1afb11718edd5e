# feature_board/data_access/memory_store.py
"""
In-memory feedback store used as the fallback backend.

Vote counts are never stored on the items themselves; every read projects
``votes`` and ``voted_by`` from the vote ledger.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from feature_board.config import constants
from feature_board.data_access.base import sort_for_board
from feature_board.data_access.seed_data import SEED_FEEDBACK
from feature_board.errors import NotFoundError
from feature_board.models.schemas import (
    AiInsight,
    AiProcessingStatus,
    AutomationLog,
    AutomationStatus,
    AutomationTaskType,
    FeedbackItem,
    FeedbackSubmission,
    Status,
    TriggeredBy,
    VoteResult,
)
from feature_board.voting.ledger import VoteLedger

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryFeedbackStore:
    """Thread-safe process-local store. Always available."""

    name = "memory"

    def __init__(self, seed: bool = False, clock: Callable[[], datetime] = _utcnow):
        self._lock = threading.RLock()
        self._clock = clock
        self._items: Dict[str, FeedbackItem] = {}
        self._ledger = VoteLedger()
        self._insights: Dict[str, AiInsight] = {}
        self._logs: Dict[str, AutomationLog] = {}
        self._claims: Dict[str, datetime] = {}

        if seed:
            self.load(SEED_FEEDBACK)

    def load(self, records: List[dict]) -> None:
        """Load raw feedback records, e.g. the demo catalogue."""
        for record in records:
            data = dict(record)
            data.setdefault("ai_processing_status",
                            AiProcessingStatus.COMPLETED if data.get("tags") else AiProcessingStatus.PENDING)
            self.add_item(FeedbackItem(**data))
        logger.info(f"Loaded {len(records)} feedback records into memory store")

    def add_item(self, item: FeedbackItem) -> FeedbackItem:
        """Insert a fully formed item; its ``voted_by`` seeds the ledger."""
        with self._lock:
            self._ledger.register(item.id, item.voted_by)
            self._items[item.id] = item.model_copy(deep=True)
            return self._project(self._items[item.id])

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Public board
    # ------------------------------------------------------------------

    def get_all(self) -> List[FeedbackItem]:
        with self._lock:
            items = [self._project(i) for i in self._items.values() if i.is_approved]
        return sort_for_board(items)

    def get_by_id(self, feedback_id: str) -> Optional[FeedbackItem]:
        with self._lock:
            item = self._items.get(feedback_id)
            return self._project(item) if item else None

    def create(self, submission: FeedbackSubmission) -> FeedbackItem:
        now = self._clock()
        item = FeedbackItem(
            id=uuid.uuid4().hex,
            title=submission.title,
            description=submission.description,
            category=submission.category,
            sub_category=submission.sub_category,
            status=Status.UNDER_REVIEW,
            tags=[],
            ai_processing_status=AiProcessingStatus.PENDING,
            submitted_at=now,
            updated_at=now,
            is_approved=True,
        )
        logger.info(f"Created feedback {item.id} in memory store: {item.title}")
        return self.add_item(item)

    def toggle_vote(self, feedback_id: str, user_id: str) -> VoteResult:
        with self._lock:
            item = self._require(feedback_id)
            vote_casted = self._ledger.toggle(feedback_id, user_id)
            item.updated_at = self._clock()
            return VoteResult(updated_item=self._project(item), vote_casted=vote_casted)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def update_status(self, feedback_id: str, status: Status) -> FeedbackItem:
        with self._lock:
            item = self._require(feedback_id)
            item.status = Status(status).value
            item.updated_at = self._clock()
            return self._project(item)

    def set_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        with self._lock:
            item = self._require(feedback_id)
            item.tags = list(tags)
            item.ai_processing_status = AiProcessingStatus.COMPLETED.value
            self._claims.pop(feedback_id, None)
            item.updated_at = self._clock()
            return self._project(item)

    # ------------------------------------------------------------------
    # Automation
    # ------------------------------------------------------------------

    def get_pending_tagging(self, limit: int) -> List[FeedbackItem]:
        with self._lock:
            pending = [
                self._project(i) for i in self._items.values()
                if i.is_approved and i.ai_processing_status == AiProcessingStatus.PENDING
            ]
        pending.sort(key=lambda f: (f.submitted_at, f.id))
        return pending[:limit]

    def claim_pending_tagging(self, limit: int, stale_after_seconds: float) -> List[FeedbackItem]:
        with self._lock:
            now = self._clock()
            stale_before = now - timedelta(seconds=stale_after_seconds)
            candidates = [
                i for i in self._items.values()
                if i.is_approved and (
                    i.ai_processing_status == AiProcessingStatus.PENDING
                    or (i.ai_processing_status == AiProcessingStatus.PROCESSING
                        and self._claims.get(i.id, now) < stale_before)
                )
            ]
            candidates.sort(key=lambda f: (f.submitted_at, f.id))
            claimed = candidates[:limit]
            for item in claimed:
                item.ai_processing_status = AiProcessingStatus.PROCESSING.value
                self._claims[item.id] = now
            return [self._project(i) for i in claimed]

    def release_tagging(self, feedback_id: str) -> None:
        with self._lock:
            item = self._items.get(feedback_id)
            if item is not None and item.ai_processing_status == AiProcessingStatus.PROCESSING:
                item.ai_processing_status = AiProcessingStatus.PENDING.value
            self._claims.pop(feedback_id, None)

    def update_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        with self._lock:
            item = self._require(feedback_id)
            now = self._clock()
            item.tags = list(tags)
            item.ai_processing_status = AiProcessingStatus.COMPLETED.value
            self._claims.pop(feedback_id, None)
            item.ai_tagged_at = now
            item.updated_at = now
            return self._project(item)

    def get_tagged(self) -> List[FeedbackItem]:
        with self._lock:
            tagged = [self._project(i) for i in self._items.values() if i.is_approved and i.tags]
        tagged.sort(key=lambda f: (f.submitted_at, f.id))
        return tagged

    def insert_insight(self, insight: AiInsight) -> AiInsight:
        stored = insight.model_copy(update={"id": insight.id or uuid.uuid4().hex}, deep=True)
        with self._lock:
            self._insights[stored.id] = stored
        return stored.model_copy(deep=True)

    def get_unexported_insights(self) -> List[AiInsight]:
        with self._lock:
            pending = [i.model_copy(deep=True) for i in self._insights.values() if i.exported_at is None]
        pending.sort(key=lambda i: i.generated_at)
        return pending

    def mark_insights_exported(self, insight_ids: List[str], exported_at: datetime) -> None:
        with self._lock:
            for insight_id in insight_ids:
                if insight_id in self._insights:
                    self._insights[insight_id].exported_at = exported_at

    def insert_automation_log(self, task_type: AutomationTaskType, triggered_by: TriggeredBy) -> str:
        log = AutomationLog(
            id=uuid.uuid4().hex,
            task_type=task_type,
            status=AutomationStatus.RUNNING,
            started_at=self._clock(),
            triggered_by=triggered_by,
        )
        with self._lock:
            self._logs[log.id] = log
        return log.id

    def update_automation_log(
        self,
        log_id: str,
        status: AutomationStatus,
        items_processed: int,
        error_message: Optional[str] = None,
        items_failed: int = 0,
    ) -> None:
        with self._lock:
            log = self._logs.get(log_id)
            if log is None:
                raise NotFoundError(f"Automation log {log_id} not found", entity_id=log_id)
            log.status = AutomationStatus(status).value
            log.items_processed = items_processed
            log.items_failed = items_failed
            log.error_message = error_message
            if log.status != AutomationStatus.RUNNING:
                log.completed_at = self._clock()

    def get_latest_automation_log(self, task_type: AutomationTaskType) -> Optional[AutomationLog]:
        task_type = AutomationTaskType(task_type).value
        with self._lock:
            logs = [log for log in self._logs.values() if log.task_type == task_type]
        if not logs:
            return None
        return max(logs, key=lambda log: log.started_at).model_copy(deep=True)

    # ------------------------------------------------------------------

    def _require(self, feedback_id: str) -> FeedbackItem:
        item = self._items.get(feedback_id)
        if item is None:
            raise NotFoundError(constants.FEEDBACK_NOT_FOUND, entity_id=feedback_id)
        return item

    def _project(self, item: FeedbackItem) -> FeedbackItem:
        voters = self._ledger.voters(item.id)
        return item.model_copy(update={"votes": len(voters), "voted_by": voters}, deep=True)
