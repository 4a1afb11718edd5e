# feature_board/api/routers/feedback.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from feature_board.api.dependencies import get_feedback_service
from feature_board.config import constants
from feature_board.services.feedback_service import FeedbackService

router = APIRouter(tags=["feedback"])


@router.get("/feedback")
def list_feedback(service: FeedbackService = Depends(get_feedback_service)):
    items = service.list_feedback()
    return {
        "success": True,
        "data": [item.model_dump(mode="json", by_alias=True) for item in items],
        "message": f"Found {len(items)} feedback items",
    }


@router.post("/feedback", status_code=201)
def submit_feedback(
    payload: Dict[str, Any] = Body(...),
    service: FeedbackService = Depends(get_feedback_service),
):
    item = service.submit(payload)
    return {
        "success": True,
        "data": item.model_dump(mode="json", by_alias=True),
        "message": constants.FEEDBACK_SUBMITTED,
    }
