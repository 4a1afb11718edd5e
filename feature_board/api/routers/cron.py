# feature_board/api/routers/cron.py
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from feature_board.api.dependencies import get_runner, require_cron_secret
from feature_board.errors import JobTimeoutError
from feature_board.models.schemas import AutomationTaskType, TriggeredBy
from feature_board.pipelines.automation import RESULT_TYPES, AutomationRunner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(require_cron_secret)])


def run_scheduled(runner: AutomationRunner, task_type: AutomationTaskType, triggered_by: TriggeredBy):
    """Run a job and shape the scheduler response, including the timeout case."""
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        result = runner.run(task_type, triggered_by)
    except JobTimeoutError as e:
        body = RESULT_TYPES[task_type].failure(e.message).to_dict()
        body["timestamp"] = timestamp
        return JSONResponse(status_code=500, content=body)

    body = result.to_dict()
    body["message"] = result.message()
    body["timestamp"] = timestamp
    return body


@router.post("/ai-tagging")
def cron_ai_tagging(runner: AutomationRunner = Depends(get_runner)):
    return run_scheduled(runner, AutomationTaskType.AI_TAGGING, TriggeredBy.AUTO)


@router.post("/generate-insights")
def cron_generate_insights(runner: AutomationRunner = Depends(get_runner)):
    return run_scheduled(runner, AutomationTaskType.INSIGHT_GENERATION, TriggeredBy.AUTO)


@router.post("/export-sheets")
def cron_export_sheets(runner: AutomationRunner = Depends(get_runner)):
    return run_scheduled(runner, AutomationTaskType.SHEETS_EXPORT, TriggeredBy.AUTO)
