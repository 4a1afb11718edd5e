# feature_board/api/routers/admin.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from feature_board.api.dependencies import (
    get_analytics_service,
    get_container,
    get_feedback_service,
    get_runner,
    require_cron_secret,
)
from feature_board.api.errors import ApiError
from feature_board.api.routers.cron import run_scheduled
from feature_board.config import constants
from feature_board.models.schemas import AutomationTaskType, TriggeredBy
from feature_board.pipelines.automation import AutomationRunner
from feature_board.services.analytics import AnalyticsService
from feature_board.services.container import ServiceContainer
from feature_board.services.feedback_service import FeedbackService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_cron_secret)])

DATABASE_SAMPLE_SIZE = 2


@router.get("/automation/status")
def automation_status(runner: AutomationRunner = Depends(get_runner)):
    return {"success": True, "data": runner.status_summary()}


@router.post("/automation/{task_type}")
def trigger_automation(task_type: str, runner: AutomationRunner = Depends(get_runner)):
    try:
        task = AutomationTaskType(task_type)
    except ValueError:
        raise ApiError(400, "invalid_request", f"Unknown task type: {task_type}")
    return run_scheduled(runner, task, TriggeredBy.ADMIN)


@router.patch("/feedback/{feedback_id}/tags")
def update_tags(
    feedback_id: str,
    payload: Dict[str, Any] = Body(...),
    service: FeedbackService = Depends(get_feedback_service),
):
    item = service.set_tags(feedback_id, payload.get("tags"))
    return {"success": True, "data": item.model_dump(mode="json", by_alias=True)}


@router.patch("/feedback/{feedback_id}/status")
def update_status(
    feedback_id: str,
    payload: Dict[str, Any] = Body(...),
    service: FeedbackService = Depends(get_feedback_service),
):
    item = service.set_status(feedback_id, payload.get("status"))
    return {"success": True, "data": item.model_dump(mode="json", by_alias=True)}


@router.get("/analytics/insights")
def analytics_insights(analytics: AnalyticsService = Depends(get_analytics_service)):
    return {"success": True, **analytics.overview()}


@router.get("/analytics/untagged")
def analytics_untagged(analytics: AnalyticsService = Depends(get_analytics_service)):
    return {"success": True, **analytics.untagged()}


@router.get("/analytics/export")
def analytics_export(analytics: AnalyticsService = Depends(get_analytics_service)):
    return {"success": True, **analytics.export()}


@router.get("/test-database")
def check_database(container: ServiceContainer = Depends(get_container)):
    """Round-trip the primary store directly, bypassing the fallback."""
    if not container.primary.is_available():
        raise ApiError(503, "backend_unavailable", constants.DATABASE_CONNECTION_FAILED)

    items = container.primary.get_all()
    return {
        "success": True,
        "message": constants.DATABASE_CONNECTION_OK,
        "data": {
            "connected": True,
            "feedbackCount": len(items),
            "sampleFeedback": [
                item.model_dump(mode="json", by_alias=True) for item in items[:DATABASE_SAMPLE_SIZE]
            ],
        },
    }
