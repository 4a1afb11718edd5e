# feature_board/services/feedback_service.py
"""
Board operations shared by the HTTP routes and the command line.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from feature_board.config import constants
from feature_board.errors import NotFoundError, ValidationError
from feature_board.models.schemas import FeedbackItem, FeedbackSubmission, Status, VoteResult

logger = logging.getLogger(__name__)


def _text(payload: Mapping[str, Any], *keys: str) -> str:
    """First string value found under any of ``keys``, trimmed."""
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str):
            return value.strip()
    return ""


def validate_submission(payload: Mapping[str, Any]) -> FeedbackSubmission:
    """
    Validate a raw feedback submission.

    Args:
        payload: Request body; accepts camelCase or snake_case keys

    Returns:
        FeedbackSubmission with trimmed fields

    Raises:
        ValidationError: with one message per offending field
    """
    errors: Dict[str, str] = {}

    title = _text(payload, "title")
    if not title:
        errors["title"] = constants.TITLE_REQUIRED
    elif len(title) < constants.TITLE_MIN_LENGTH:
        errors["title"] = constants.TITLE_TOO_SHORT
    elif len(title) > constants.TITLE_MAX_LENGTH:
        errors["title"] = constants.TITLE_TOO_LONG

    description = _text(payload, "description")
    if not description:
        errors["description"] = constants.DESCRIPTION_REQUIRED
    elif len(description) < constants.DESCRIPTION_MIN_LENGTH:
        errors["description"] = constants.DESCRIPTION_TOO_SHORT
    elif len(description) > constants.DESCRIPTION_MAX_LENGTH:
        errors["description"] = constants.DESCRIPTION_TOO_LONG

    category = _text(payload, "category")
    sub_category = _text(payload, "subCategory", "sub_category") or None
    if not category:
        errors["category"] = constants.CATEGORY_REQUIRED
    elif category not in constants.CATEGORY_OPTIONS:
        errors["category"] = constants.CATEGORY_INVALID

    # Unknown categories are not known to lack sub-categories
    options = constants.SUBCATEGORY_OPTIONS.get(category)
    if options is None or options:
        if not sub_category:
            errors["subCategory"] = constants.SUBCATEGORY_REQUIRED
        elif options and sub_category not in options:
            errors["subCategory"] = constants.SUBCATEGORY_INVALID
    else:
        sub_category = None

    if errors:
        raise ValidationError(errors, constants.VALIDATION_FAILED)

    return FeedbackSubmission(
        title=title,
        description=description,
        category=category,
        sub_category=sub_category,
    )


def clean_tags(tags: Any, limit: int = constants.MAX_MANUAL_TAGS) -> List[str]:
    """Trim manual tags, drop blanks and duplicates, cap at ``limit``."""
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValidationError({"tags": constants.TAGS_INVALID})
    cleaned = list(dict.fromkeys(t.strip() for t in tags if t.strip()))[:limit]
    if not cleaned:
        raise ValidationError({"tags": constants.TAGS_REQUIRED})
    return cleaned


class FeedbackService:
    """Validation and lookup rules on top of a FeedbackStore."""

    def __init__(self, store):
        self.store = store

    def list_feedback(self) -> List[FeedbackItem]:
        return self.store.get_all()

    def get(self, feedback_id: str) -> FeedbackItem:
        item = self.store.get_by_id(feedback_id)
        if item is None:
            raise NotFoundError(constants.FEEDBACK_NOT_FOUND, entity_id=feedback_id)
        return item

    def submit(self, payload: Mapping[str, Any]) -> FeedbackItem:
        submission = validate_submission(payload)
        item = self.store.create(submission)
        logger.info(f"Feedback {item.id} submitted in {item.category}")
        return item

    def vote(self, feedback_id: Optional[str], user_id: Optional[str]) -> VoteResult:
        """
        Toggle ``user_id``'s vote on an approved item.

        Raises:
            ValidationError: either id missing or blank
            NotFoundError: item unknown or not approved
        """
        errors = {}
        if not isinstance(feedback_id, str) or not feedback_id.strip():
            errors["feedbackId"] = constants.VOTE_IDS_REQUIRED
        if not isinstance(user_id, str) or not user_id.strip():
            errors["userId"] = constants.VOTE_IDS_REQUIRED
        if errors:
            raise ValidationError(errors, constants.VOTE_IDS_REQUIRED)

        item = self.store.get_by_id(feedback_id)
        if item is None or not item.is_approved:
            raise NotFoundError(constants.FEEDBACK_NOT_FOUND, entity_id=feedback_id)

        result = self.store.toggle_vote(feedback_id, user_id.strip())
        action = "cast" if result.vote_casted else "withdrawn"
        logger.info(f"Vote {action} on {feedback_id}, now {result.updated_item.votes}")
        return result

    def set_status(self, feedback_id: str, status: Any) -> FeedbackItem:
        try:
            status = Status(status)
        except ValueError:
            raise ValidationError({"status": constants.STATUS_INVALID})
        return self.store.update_status(feedback_id, status)

    def set_tags(self, feedback_id: str, tags: Any) -> FeedbackItem:
        cleaned = clean_tags(tags)
        item = self.store.set_tags(feedback_id, cleaned)
        logger.info(f"Manual tags set on {feedback_id}: {cleaned}")
        return item
