# feature_board/data_access/postgres_client.py
"""
PostgreSQL feedback store (primary backend).
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from feature_board.config import constants
from feature_board.config.settings import Settings
from feature_board.data_access.base import sort_for_board
from feature_board.errors import NotFoundError, StoreBusyError, ValidationError
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

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS feedback (
    id VARCHAR(64) PRIMARY KEY,
    title VARCHAR(100) NOT NULL,
    description VARCHAR(1000) NOT NULL,
    category VARCHAR(50) NOT NULL,
    sub_category VARCHAR(50),
    status VARCHAR(20) NOT NULL DEFAULT 'Under Review',
    votes INTEGER NOT NULL DEFAULT 0 CHECK (votes >= 0),
    tags TEXT[] NOT NULL DEFAULT '{}',
    ai_processing_status VARCHAR(20) NOT NULL DEFAULT 'pending',
    ai_tagged_at TIMESTAMPTZ,
    ai_claimed_at TIMESTAMPTZ,
    is_approved BOOLEAN NOT NULL DEFAULT TRUE,
    moderated_at TIMESTAMPTZ,
    moderated_by VARCHAR(255),
    admin_notes TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

ALTER TABLE feedback ADD COLUMN IF NOT EXISTS ai_claimed_at TIMESTAMPTZ;

CREATE TABLE IF NOT EXISTS votes (
    id BIGSERIAL PRIMARY KEY,
    user_id VARCHAR(255) NOT NULL,
    feedback_id VARCHAR(64) NOT NULL REFERENCES feedback(id) ON DELETE CASCADE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (user_id, feedback_id)
);

CREATE TABLE IF NOT EXISTS ai_insights (
    id VARCHAR(64) PRIMARY KEY,
    theme VARCHAR(255) NOT NULL,
    insight_summary TEXT NOT NULL,
    priority_score INTEGER NOT NULL CHECK (priority_score BETWEEN 1 AND 10),
    feedback_count INTEGER NOT NULL DEFAULT 0,
    sample_feedback_ids TEXT[] NOT NULL DEFAULT '{}',
    generated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    exported_at TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS automation_logs (
    id VARCHAR(64) PRIMARY KEY,
    task_type VARCHAR(50) NOT NULL,
    status VARCHAR(20) NOT NULL,
    started_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    completed_at TIMESTAMPTZ,
    items_processed INTEGER NOT NULL DEFAULT 0,
    items_failed INTEGER NOT NULL DEFAULT 0,
    error_message TEXT,
    triggered_by VARCHAR(20) NOT NULL DEFAULT 'auto'
);

CREATE INDEX IF NOT EXISTS feedback_votes_idx ON feedback(votes DESC, created_at DESC);
CREATE INDEX IF NOT EXISTS feedback_ai_status_idx ON feedback(ai_processing_status);
CREATE INDEX IF NOT EXISTS votes_feedback_idx ON votes(feedback_id);
CREATE INDEX IF NOT EXISTS ai_insights_exported_idx ON ai_insights(exported_at);
CREATE INDEX IF NOT EXISTS automation_logs_task_idx ON automation_logs(task_type, started_at DESC);
"""

# voted_by is always read from the votes table
FEEDBACK_COLUMNS = """
    f.id, f.title, f.description, f.category, f.sub_category, f.status,
    f.votes, f.tags, f.ai_processing_status, f.ai_tagged_at, f.is_approved,
    f.moderated_at, f.moderated_by, f.admin_notes, f.created_at, f.updated_at,
    ARRAY(
        SELECT v.user_id FROM votes v
        WHERE v.feedback_id = f.id
        ORDER BY v.created_at, v.id
    ) AS voted_by
"""


class PostgresFeedbackStore:
    """PostgreSQL-backed feedback store using a thread-safe connection pool."""

    name = "postgres"

    def __init__(self, config: Settings):
        self.config = config
        self.pool = None
        self._pool_lock = threading.Lock()
        # ThreadedConnectionPool raises instead of waiting when exhausted
        self._slots = threading.BoundedSemaphore(config.postgres_pool_size)

    def connect(self) -> None:
        """Create the connection pool once."""
        with self._pool_lock:
            if self.pool is not None:
                return
            self.pool = ThreadedConnectionPool(
                minconn=1,
                maxconn=self.config.postgres_pool_size,
                host=self.config.postgres_host,
                port=self.config.postgres_port,
                database=self.config.postgres_database,
                user=self.config.postgres_username,
                password=self.config.postgres_password,
                sslmode=self.config.postgres_sslmode,
            )
        logger.info(f"Connected to PostgreSQL at {self.config.postgres_host}:{self.config.postgres_port}")

    def close(self) -> None:
        """Close every pooled connection."""
        with self._pool_lock:
            if self.pool:
                self.pool.closeall()
                self.pool = None

    @contextmanager
    def _transaction(self) -> Iterator:
        """
        Yield a dict cursor; commit on success, roll back on any error.

        Waits up to postgres_pool_timeout_seconds for a free connection.

        Raises:
            StoreBusyError: no connection became free in time
        """
        if self.pool is None:
            self.connect()

        if not self._slots.acquire(timeout=self.config.postgres_pool_timeout_seconds):
            raise StoreBusyError("All PostgreSQL connections are in use")
        try:
            pool = self.pool
            conn = pool.getconn()
            try:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                pool.putconn(conn)
        finally:
            self._slots.release()

    def initialize_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        with self._transaction() as cursor:
            cursor.execute(SCHEMA_SQL)
        logger.info("PostgreSQL schema initialized")

    def is_available(self) -> bool:
        if not self.config.postgres_configured():
            return False
        try:
            with self._transaction() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            return True
        except StoreBusyError:
            # saturated, not down
            return True
        except Exception as e:
            logger.warning(f"PostgreSQL availability check failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Public board
    # ------------------------------------------------------------------

    def get_all(self) -> List[FeedbackItem]:
        query = f"""
            SELECT {FEEDBACK_COLUMNS}
            FROM feedback f
            WHERE f.is_approved = TRUE
            ORDER BY f.votes DESC, f.created_at DESC, f.id
        """
        with self._transaction() as cursor:
            cursor.execute(query)
            rows = cursor.fetchall()
        return sort_for_board([self._row_to_feedback(r) for r in rows])

    def get_by_id(self, feedback_id: str) -> Optional[FeedbackItem]:
        with self._transaction() as cursor:
            return self._fetch_feedback(cursor, feedback_id)

    def create(self, submission: FeedbackSubmission) -> FeedbackItem:
        query = """
            INSERT INTO feedback (id, title, description, category, sub_category, status, tags, ai_processing_status)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        """
        feedback_id = uuid.uuid4().hex
        with self._transaction() as cursor:
            cursor.execute(query, (
                feedback_id,
                submission.title,
                submission.description,
                submission.category,
                submission.sub_category,
                Status.UNDER_REVIEW.value,
                [],
                AiProcessingStatus.PENDING.value,
            ))
            item = self._fetch_feedback(cursor, feedback_id)
        logger.info(f"Created feedback {feedback_id} in PostgreSQL: {submission.title}")
        return item

    def toggle_vote(self, feedback_id: str, user_id: str) -> VoteResult:
        """
        Toggle a vote inside one transaction.

        The feedback row is locked, membership is flipped in the votes table and
        the stored count is recomputed from it before commit.

        Args:
            feedback_id: Item identifier
            user_id: Voter identifier

        Returns:
            VoteResult with the updated item and whether a vote was cast
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise ValidationError({"userId": constants.VOTE_IDS_REQUIRED})

        with self._transaction() as cursor:
            cursor.execute("SELECT id FROM feedback WHERE id = %s FOR UPDATE", (feedback_id,))
            if cursor.fetchone() is None:
                raise NotFoundError(constants.FEEDBACK_NOT_FOUND, entity_id=feedback_id)

            cursor.execute(
                "DELETE FROM votes WHERE feedback_id = %s AND user_id = %s RETURNING id",
                (feedback_id, user_id)
            )
            vote_casted = cursor.fetchone() is None
            if vote_casted:
                cursor.execute(
                    "INSERT INTO votes (user_id, feedback_id) VALUES (%s, %s)",
                    (user_id, feedback_id)
                )

            cursor.execute("""
                UPDATE feedback
                SET votes = (SELECT COUNT(*) FROM votes WHERE feedback_id = %s),
                    updated_at = NOW()
                WHERE id = %s
            """, (feedback_id, feedback_id))
            item = self._fetch_feedback(cursor, feedback_id)

        return VoteResult(updated_item=item, vote_casted=vote_casted)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def update_status(self, feedback_id: str, status: Status) -> FeedbackItem:
        return self._update_returning(
            feedback_id,
            "status = %s, updated_at = NOW()",
            (Status(status).value,)
        )

    def set_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        return self._update_returning(
            feedback_id,
            "tags = %s, ai_processing_status = %s, ai_claimed_at = NULL, updated_at = NOW()",
            (list(tags), AiProcessingStatus.COMPLETED.value)
        )

    # ------------------------------------------------------------------
    # Automation
    # ------------------------------------------------------------------

    def get_pending_tagging(self, limit: int) -> List[FeedbackItem]:
        query = f"""
            SELECT {FEEDBACK_COLUMNS}
            FROM feedback f
            WHERE f.is_approved = TRUE AND f.ai_processing_status = %s
            ORDER BY f.created_at ASC, f.id
            LIMIT %s
        """
        with self._transaction() as cursor:
            cursor.execute(query, (AiProcessingStatus.PENDING.value, limit))
            rows = cursor.fetchall()
        return [self._row_to_feedback(r) for r in rows]

    def claim_pending_tagging(self, limit: int, stale_after_seconds: float) -> List[FeedbackItem]:
        """
        Move up to ``limit`` pending items to processing and return them.

        Rows locked by a concurrent claim are skipped. Claims older than
        ``stale_after_seconds`` are treated as pending again.
        """
        query = f"""
            UPDATE feedback f
            SET ai_processing_status = %s, ai_claimed_at = NOW()
            WHERE f.id IN (
                SELECT c.id FROM feedback c
                WHERE c.is_approved = TRUE
                  AND (c.ai_processing_status = %s
                       OR (c.ai_processing_status = %s
                           AND c.ai_claimed_at < NOW() - make_interval(secs => %s)))
                ORDER BY c.created_at ASC, c.id
                LIMIT %s
                FOR UPDATE SKIP LOCKED
            )
            RETURNING {FEEDBACK_COLUMNS}
        """
        with self._transaction() as cursor:
            cursor.execute(query, (
                AiProcessingStatus.PROCESSING.value,
                AiProcessingStatus.PENDING.value,
                AiProcessingStatus.PROCESSING.value,
                stale_after_seconds,
                limit,
            ))
            rows = cursor.fetchall()
        items = [self._row_to_feedback(r) for r in rows]
        return sorted(items, key=lambda f: (f.submitted_at, f.id))

    def release_tagging(self, feedback_id: str) -> None:
        """Return a claimed item to pending."""
        with self._transaction() as cursor:
            cursor.execute(
                """
                UPDATE feedback
                SET ai_processing_status = %s, ai_claimed_at = NULL
                WHERE id = %s AND ai_processing_status = %s
                """,
                (AiProcessingStatus.PENDING.value, feedback_id, AiProcessingStatus.PROCESSING.value)
            )

    def update_tags(self, feedback_id: str, tags: List[str]) -> FeedbackItem:
        return self._update_returning(
            feedback_id,
            "tags = %s, ai_processing_status = %s, ai_tagged_at = NOW(), ai_claimed_at = NULL, updated_at = NOW()",
            (list(tags), AiProcessingStatus.COMPLETED.value)
        )

    def get_tagged(self) -> List[FeedbackItem]:
        query = f"""
            SELECT {FEEDBACK_COLUMNS}
            FROM feedback f
            WHERE f.is_approved = TRUE AND cardinality(f.tags) > 0
            ORDER BY f.created_at ASC, f.id
        """
        with self._transaction() as cursor:
            cursor.execute(query)
            rows = cursor.fetchall()
        return [self._row_to_feedback(r) for r in rows]

    def insert_insight(self, insight: AiInsight) -> AiInsight:
        query = """
            INSERT INTO ai_insights
                (id, theme, insight_summary, priority_score, feedback_count, sample_feedback_ids, generated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
        """
        stored = insight.model_copy(update={"id": insight.id or uuid.uuid4().hex})
        with self._transaction() as cursor:
            cursor.execute(query, (
                stored.id,
                stored.theme,
                stored.insight_summary,
                stored.priority_score,
                stored.feedback_count,
                list(stored.sample_feedback_ids),
                stored.generated_at,
            ))
        return stored

    def get_unexported_insights(self) -> List[AiInsight]:
        query = """
            SELECT id, theme, insight_summary, priority_score, feedback_count,
                   sample_feedback_ids, generated_at, exported_at
            FROM ai_insights
            WHERE exported_at IS NULL
            ORDER BY generated_at ASC
        """
        with self._transaction() as cursor:
            cursor.execute(query)
            rows = cursor.fetchall()
        return [AiInsight(**dict(r)) for r in rows]

    def mark_insights_exported(self, insight_ids: List[str], exported_at: datetime) -> None:
        if not insight_ids:
            return
        with self._transaction() as cursor:
            cursor.execute(
                "UPDATE ai_insights SET exported_at = %s WHERE id = ANY(%s)",
                (exported_at, list(insight_ids))
            )

    def insert_automation_log(self, task_type: AutomationTaskType, triggered_by: TriggeredBy) -> str:
        log_id = uuid.uuid4().hex
        with self._transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO automation_logs (id, task_type, status, triggered_by)
                VALUES (%s, %s, %s, %s)
                """,
                (
                    log_id,
                    AutomationTaskType(task_type).value,
                    AutomationStatus.RUNNING.value,
                    TriggeredBy(triggered_by).value,
                )
            )
        return log_id

    def update_automation_log(
        self,
        log_id: str,
        status: AutomationStatus,
        items_processed: int,
        error_message: Optional[str] = None,
        items_failed: int = 0,
    ) -> None:
        status = AutomationStatus(status).value
        query = """
            UPDATE automation_logs
            SET status = %s,
                items_processed = %s,
                items_failed = %s,
                error_message = %s,
                completed_at = CASE WHEN %s THEN NOW() ELSE completed_at END
            WHERE id = %s
        """
        with self._transaction() as cursor:
            cursor.execute(query, (
                status,
                items_processed,
                items_failed,
                error_message,
                status != AutomationStatus.RUNNING.value,
                log_id,
            ))

    def get_latest_automation_log(self, task_type: AutomationTaskType) -> Optional[AutomationLog]:
        query = """
            SELECT id, task_type, status, started_at, completed_at,
                   items_processed, items_failed, error_message, triggered_by
            FROM automation_logs
            WHERE task_type = %s
            ORDER BY started_at DESC
            LIMIT 1
        """
        with self._transaction() as cursor:
            cursor.execute(query, (AutomationTaskType(task_type).value,))
            row = cursor.fetchone()
        return AutomationLog(**dict(row)) if row else None

    # ------------------------------------------------------------------

    def _update_returning(self, feedback_id: str, assignments: str, params: tuple) -> FeedbackItem:
        with self._transaction() as cursor:
            cursor.execute(
                f"UPDATE feedback SET {assignments} WHERE id = %s RETURNING id",
                params + (feedback_id,)
            )
            if cursor.fetchone() is None:
                raise NotFoundError(constants.FEEDBACK_NOT_FOUND, entity_id=feedback_id)
            return self._fetch_feedback(cursor, feedback_id)

    def _fetch_feedback(self, cursor, feedback_id: str) -> Optional[FeedbackItem]:
        cursor.execute(f"SELECT {FEEDBACK_COLUMNS} FROM feedback f WHERE f.id = %s", (feedback_id,))
        row = cursor.fetchone()
        return self._row_to_feedback(row) if row else None

    @staticmethod
    def _row_to_feedback(row: dict) -> FeedbackItem:
        voted_by = list(row.get("voted_by") or [])
        return FeedbackItem(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            category=row["category"],
            sub_category=row.get("sub_category"),
            status=row["status"],
            votes=len(voted_by),
            voted_by=voted_by,
            tags=list(row.get("tags") or []),
            ai_processing_status=row["ai_processing_status"],
            ai_tagged_at=row.get("ai_tagged_at"),
            submitted_at=row["created_at"],
            updated_at=row["updated_at"],
            is_approved=row["is_approved"],
            moderated_at=row.get("moderated_at"),
            moderated_by=row.get("moderated_by"),
            admin_notes=row.get("admin_notes"),
        )
