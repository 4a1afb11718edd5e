# feature_board/pipelines/automation.py
"""
Scheduled automation jobs: AI tagging, insight generation and sheet export.

Every run is tracked in an automation log row and bounded by a wall-clock
deadline. Usage:

    python -m feature_board.pipelines.automation --task ai_tagging
    python -m feature_board.pipelines.automation --task all
"""

import argparse
import hmac
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from feature_board.config import constants
from feature_board.config.settings import Settings
from feature_board.errors import JobTimeoutError, MisconfigurationError, UnauthorizedError
from feature_board.logging_config import configure_logging
from feature_board.models.schemas import AutomationStatus, AutomationTaskType, TriggeredBy
from feature_board.pipelines.insights import group_by_theme, insight_key, sample_ids

logger = logging.getLogger(__name__)


class JobAbandoned(Exception):
    """Raised inside a worker whose run has already timed out."""


class JobContext:
    """Handle a running job uses to report progress and observe abandonment."""

    def __init__(self, store, log_id: Optional[str] = None, abandon: Optional[threading.Event] = None):
        self.store = store
        self.log_id = log_id
        self.abandon = abandon or threading.Event()

    def checkpoint(self) -> None:
        if self.abandon.is_set():
            raise JobAbandoned(f"Run {self.log_id} abandoned after timeout")

    def progress(self, processed: int, failed: int = 0) -> None:
        """Write intermediate counts while the run is still live."""
        if self.log_id is None or self.abandon.is_set():
            return
        try:
            self.store.update_automation_log(
                self.log_id, AutomationStatus.RUNNING, processed, items_failed=failed
            )
        except Exception as e:
            logger.warning(f"Could not record progress for run {self.log_id}: {e}")


@dataclass
class TaggingResult:
    success: bool
    processed: int = 0
    failed: int = 0
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "TaggingResult":
        return cls(success=False, error=error)

    @property
    def items_processed(self) -> int:
        return self.processed

    @property
    def items_failed(self) -> int:
        return self.failed

    def message(self) -> str:
        if self.success:
            return f"Processed {self.processed} items, {self.failed} failed"
        return f"Processing failed: {self.error}"

    def to_dict(self) -> dict:
        body = {"success": self.success, "processed": self.processed, "failed": self.failed}
        if self.error:
            body["error"] = self.error
        return body


@dataclass
class InsightResult:
    success: bool
    insights: int = 0
    themes: int = 0
    failed: int = 0
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "InsightResult":
        return cls(success=False, error=error)

    @property
    def items_processed(self) -> int:
        return self.insights

    @property
    def items_failed(self) -> int:
        return self.failed

    def message(self) -> str:
        if self.success:
            return f"Generated {self.insights} insights from {self.themes} themes"
        return f"Insight generation failed: {self.error}"

    def to_dict(self) -> dict:
        body = {"success": self.success, "insights": self.insights, "themes": self.themes}
        if self.error:
            body["error"] = self.error
        return body


@dataclass
class ExportResult:
    success: bool
    feedback_rows: int = 0
    insight_rows: int = 0
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ExportResult":
        return cls(success=False, error=error)

    @property
    def items_processed(self) -> int:
        return self.feedback_rows + self.insight_rows

    @property
    def items_failed(self) -> int:
        return 0

    def message(self) -> str:
        if self.success:
            return f"Exported {self.feedback_rows} feedback rows and {self.insight_rows} insight rows"
        return f"Export failed: {self.error}"

    def to_dict(self) -> dict:
        body = {
            "success": self.success,
            "feedbackRows": self.feedback_rows,
            "insightRows": self.insight_rows,
        }
        if self.error:
            body["error"] = self.error
        return body


RESULT_TYPES = {
    AutomationTaskType.AI_TAGGING: TaggingResult,
    AutomationTaskType.INSIGHT_GENERATION: InsightResult,
    AutomationTaskType.SHEETS_EXPORT: ExportResult,
}

STATUS_KEYS = {
    AutomationTaskType.AI_TAGGING: "aiTagging",
    AutomationTaskType.INSIGHT_GENERATION: "insights",
    AutomationTaskType.SHEETS_EXPORT: "export",
}


def verify_cron_secret(authorization: Optional[str], config: Settings) -> None:
    """
    Check a scheduler request's bearer token.

    Raises:
        MisconfigurationError: no cron secret is configured
        UnauthorizedError: header missing or not ``Bearer <secret>``
    """
    if not config.cron_secret:
        logger.error("CRON_SECRET is not configured")
        raise MisconfigurationError(constants.SERVER_CONFIGURATION_ERROR)

    expected = f"Bearer {config.cron_secret}"
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        logger.warning("Unauthorized automation request: invalid secret")
        raise UnauthorizedError(constants.UNAUTHORIZED)


class AutomationRunner:
    """Runs automation jobs against a feedback store."""

    def __init__(
        self,
        config: Settings,
        store,
        tagger,
        aggregator,
        exporter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.store = store
        self.tagger = tagger
        self.aggregator = aggregator
        self.exporter = exporter
        self._sleep = sleep
        self._jobs = {
            AutomationTaskType.AI_TAGGING: self.run_tagging,
            AutomationTaskType.INSIGHT_GENERATION: self.run_insights,
            AutomationTaskType.SHEETS_EXPORT: self.run_export,
        }

    def run(self, task_type, triggered_by=TriggeredBy.AUTO):
        """
        Execute one job under a tracked, time-bounded run.

        Args:
            task_type: AutomationTaskType (or its string value)
            triggered_by: Who started the run

        Returns:
            The job's result object. A job that raised yields ``success=False``.

        Raises:
            JobTimeoutError: the job did not finish within job_timeout_seconds;
                the run is recorded as failed before raising
        """
        task_type = AutomationTaskType(task_type)
        triggered_by = TriggeredBy(triggered_by)
        result_type = RESULT_TYPES[task_type]
        timeout = self.config.job_timeout_seconds

        log_id = self.store.insert_automation_log(task_type, triggered_by)
        job = JobContext(self.store, log_id)
        logger.info(f"Starting {task_type.value} run {log_id} (triggered by {triggered_by.value})")

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"automation-{task_type.value}")
        future = executor.submit(self._jobs[task_type], job)
        try:
            result = future.result(timeout=timeout)
        except FutureTimeoutError:
            job.abandon.set()
            message = f"Operation timed out after {timeout:g} seconds"
            logger.error(f"{task_type.value} run {log_id} failed: {message}")
            self._finish_log(log_id, AutomationStatus.FAILED, 0, error_message=message)
            raise JobTimeoutError(message)
        except Exception as e:
            logger.error(f"{task_type.value} run {log_id} failed: {e}", exc_info=True)
            self._finish_log(log_id, AutomationStatus.FAILED, 0, error_message=str(e))
            return result_type.failure(str(e))
        finally:
            executor.shutdown(wait=False)

        self._finish_log(
            log_id,
            AutomationStatus.COMPLETED,
            result.items_processed,
            items_failed=result.items_failed,
        )
        logger.info(f"{task_type.value} run {log_id} completed: {result.message()}")
        return result

    def _finish_log(self, log_id: str, status: AutomationStatus, items_processed: int,
                    error_message: Optional[str] = None, items_failed: int = 0) -> None:
        """Write a run's terminal state; a store failure here never discards the job's outcome."""
        try:
            self.store.update_automation_log(
                log_id, status, items_processed, error_message=error_message, items_failed=items_failed
            )
        except Exception as e:
            logger.warning(f"Could not record final state of run {log_id}: {e}")

    def run_tagging(self, job: Optional[JobContext] = None) -> TaggingResult:
        """
        Tag approved feedback still pending AI processing.

        Items are claimed before tagging so overlapping runs never share one.
        Claims that do not end in stored tags are released back to pending and
        picked up by a later run.
        """
        job = job or JobContext(self.store)
        items = self.store.claim_pending_tagging(
            self.config.tagging_batch_size, self.config.tagging_claim_timeout_seconds
        )
        logger.info(f"Found {len(items)} items to tag")

        processed = 0
        failed = 0
        unfinished = [item.id for item in items]
        try:
            for index, item in enumerate(items):
                if index:
                    self._sleep(self.config.tagging_delay_seconds)
                job.checkpoint()

                try:
                    result = self.tagger.generate_tags(item.title, item.description)
                    if result.success and result.tags:
                        self.store.update_tags(item.id, result.tags)
                        unfinished.remove(item.id)
                        processed += 1
                        logger.info(f"Tagged feedback {item.id}: {', '.join(result.tags)}")
                        job.progress(processed, failed)
                    else:
                        failed += 1
                        logger.error(f"Failed to tag feedback {item.id}: {result.error or 'no tags returned'}")
                except Exception as e:
                    failed += 1
                    logger.error(f"Error processing feedback {item.id}: {e}")
        finally:
            self._release_claims(unfinished)

        logger.info(f"AI tagging finished: {processed} processed, {failed} failed")
        return TaggingResult(success=True, processed=processed, failed=failed)

    def _release_claims(self, feedback_ids: List[str]) -> None:
        for feedback_id in feedback_ids:
            try:
                self.store.release_tagging(feedback_id)
            except Exception as e:
                # the claim expires after tagging_claim_timeout_seconds
                logger.warning(f"Could not release tagging claim on {feedback_id}: {e}")

    def run_insights(self, job: Optional[JobContext] = None) -> InsightResult:
        """
        Generate one insight per theme with at least min_theme_size items.

        A theme whose unexported insight already covers the same items is skipped,
        so repeated runs over unchanged data add nothing.
        """
        job = job or JobContext(self.store)
        themes = group_by_theme(self.store.get_tagged())
        covered = {insight_key(i.theme, i.feedback_count, i.sample_feedback_ids)
                   for i in self.store.get_unexported_insights()}
        logger.info(f"Found {len(themes)} themes to analyze")

        insights = 0
        analyzed = 0
        failed = 0
        for theme, items in themes.items():
            if len(items) < self.config.min_theme_size:
                logger.info(f"Skipping theme {theme}: only {len(items)} item(s)")
                continue
            if insight_key(theme, len(items), sample_ids(items)) in covered:
                logger.info(f"Skipping theme {theme}: unexported insight already covers it")
                continue

            if analyzed:
                self._sleep(self.config.insight_delay_seconds)
            job.checkpoint()
            analyzed += 1

            try:
                insight = self.aggregator.aggregate(theme, items)
                self.store.insert_insight(insight)
                insights += 1
                logger.info(f"Generated insight for {theme}: priority {insight.priority_score}")
                job.progress(insights, failed)
            except Exception as e:
                failed += 1
                logger.error(f"Error analyzing theme {theme}: {e}")

        logger.info(f"Insight generation finished: {insights} insights from {analyzed} themes")
        return InsightResult(success=True, insights=insights, themes=analyzed, failed=failed)

    def run_export(self, job: Optional[JobContext] = None) -> ExportResult:
        """Export approved feedback and unexported insights, then mark the insights."""
        job = job or JobContext(self.store)
        items = self.store.get_all()
        insights = self.store.get_unexported_insights()
        logger.info(f"Exporting {len(items)} feedback items and {len(insights)} insights")

        if not items and not insights:
            return ExportResult(success=True)

        job.checkpoint()
        self.exporter.export(items, insights)
        job.checkpoint()
        if insights:
            self.store.mark_insights_exported([i.id for i in insights], datetime.now(timezone.utc))

        return ExportResult(success=True, feedback_rows=len(items), insight_rows=len(insights))

    def status_summary(self) -> Dict[str, dict]:
        """Latest run of every task type."""
        summary = {}
        for task_type, key in STATUS_KEYS.items():
            log = self.store.get_latest_automation_log(task_type)
            summary[key] = {
                "lastRun": log.started_at.isoformat() if log else None,
                "status": log.status if log else None,
                "itemsProcessed": log.items_processed if log else 0,
                "errorMessage": log.error_message if log else None,
            }
        return summary


def main():
    """Main entry point for manual automation runs."""
    from feature_board.services.container import build_container

    parser = argparse.ArgumentParser(description="Run feature board automation jobs")
    parser.add_argument(
        "--task",
        choices=[t.value for t in AutomationTaskType] + ["all"],
        default="all",
        help="Job to run",
    )
    args = parser.parse_args()

    config = Settings()
    configure_logging(config.log_level)
    container = build_container(config)

    tasks = list(AutomationTaskType) if args.task == "all" else [AutomationTaskType(args.task)]
    exit_code = 0
    try:
        for task_type in tasks:
            try:
                result = container.runner.run(task_type, TriggeredBy.MANUAL)
            except JobTimeoutError as e:
                logger.error(f"{task_type.value}: {e}")
                exit_code = 1
                continue
            print(f"{task_type.value}: {result.message()}")
            if not result.success:
                exit_code = 1
    finally:
        container.close()

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
