# feature_board/api/routers/votes.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from feature_board.api.dependencies import get_feedback_service
from feature_board.services.feedback_service import FeedbackService

router = APIRouter(tags=["votes"])


@router.post("/votes")
def toggle_vote(
    payload: Dict[str, Any] = Body(...),
    service: FeedbackService = Depends(get_feedback_service),
):
    result = service.vote(payload.get("feedbackId"), payload.get("userId"))
    item = result.updated_item
    return {
        "success": True,
        "data": {"id": item.id, "votes": item.votes, "voted": result.vote_casted},
    }
