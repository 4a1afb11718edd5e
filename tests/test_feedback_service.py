"""Unit tests for submission validation and the feedback service."""
import pytest

from feature_board.config import constants
from feature_board.errors import NotFoundError, ValidationError
from feature_board.services.feedback_service import FeedbackService, clean_tags, validate_submission

VALID = {
    "title": "Export sales reports",
    "description": "Allow exporting the sales report to CSV.",
    "category": "BackOffice",
    "subCategory": "Reports",
}


def _errors(payload):
    with pytest.raises(ValidationError) as exc_info:
        validate_submission(payload)
    return exc_info.value.field_errors


class TestValidateSubmission:
    """Test submission validation rules."""

    def test_valid_submission(self):
        """Test a valid payload is trimmed and accepted."""
        submission = validate_submission({**VALID, "title": "  Export sales reports  "})
        assert submission.title == "Export sales reports"
        assert submission.sub_category == "Reports"

    def test_title_too_short(self):
        """Test a two character title is too short."""
        assert _errors({**VALID, "title": "AB"})["title"] == constants.TITLE_TOO_SHORT

    def test_title_too_long(self):
        """Test a 101 character title is too long."""
        assert _errors({**VALID, "title": "x" * 101})["title"] == constants.TITLE_TOO_LONG

    def test_title_boundaries_accepted(self):
        """Test titles of exactly 5 and 100 characters are accepted."""
        validate_submission({**VALID, "title": "x" * 5})
        validate_submission({**VALID, "title": "x" * 100})

    def test_missing_fields(self):
        """Test every missing required field is reported at once."""
        errors = _errors({})
        assert errors["title"] == constants.TITLE_REQUIRED
        assert errors["description"] == constants.DESCRIPTION_REQUIRED
        assert errors["category"] == constants.CATEGORY_REQUIRED

    def test_description_bounds(self):
        """Test description length limits."""
        assert _errors({**VALID, "description": "short"})["description"] == constants.DESCRIPTION_TOO_SHORT
        assert _errors({**VALID, "description": "x" * 1001})["description"] == constants.DESCRIPTION_TOO_LONG

    def test_unknown_category_requires_subcategory(self):
        """Test category Other with no sub-category reports both problems."""
        errors = _errors({**VALID, "category": "Other", "subCategory": ""})
        assert errors["category"] == constants.CATEGORY_INVALID
        assert errors["subCategory"] == constants.SUBCATEGORY_REQUIRED

    def test_subcategory_required(self):
        """Test categories with sub-categories require one."""
        errors = _errors({**VALID, "category": "POS", "subCategory": None})
        assert errors["subCategory"] == constants.SUBCATEGORY_REQUIRED

    def test_subcategory_must_match_category(self):
        """Test a sub-category from another category is rejected."""
        errors = _errors({**VALID, "category": "POS", "subCategory": "Reports"})
        assert errors["subCategory"] == constants.SUBCATEGORY_INVALID

    def test_beep_needs_no_subcategory(self):
        """Test Beep accepts no sub-category and drops any given."""
        assert validate_submission({**VALID, "category": "Beep", "subCategory": None}).sub_category is None
        assert validate_submission({**VALID, "category": "Beep", "subCategory": "Reports"}).sub_category is None


class TestFeedbackService:
    """Test service operations over the in-memory store."""

    def test_submit_creates_item(self, store):
        """Test a valid submission is stored."""
        service = FeedbackService(store)
        item = service.submit(VALID)
        assert service.get(item.id).title == VALID["title"]

    def test_submit_invalid_stores_nothing(self, store):
        """Test invalid submissions never reach the store."""
        service = FeedbackService(store)
        with pytest.raises(ValidationError):
            service.submit({**VALID, "title": "AB"})
        assert store.get_all() == []

    @pytest.mark.parametrize("feedback_id,user_id", [("", "u1"), ("f1", ""), (None, None)])
    def test_vote_requires_ids(self, store, feedback_id, user_id):
        """Test blank ids are rejected before any lookup."""
        with pytest.raises(ValidationError):
            FeedbackService(store).vote(feedback_id, user_id)

    def test_vote_unknown_item(self, store):
        """Test voting on an unknown item raises NotFoundError."""
        with pytest.raises(NotFoundError):
            FeedbackService(store).vote("missing", "u1")

    def test_vote_unapproved_item(self, store, item_factory):
        """Test unapproved items cannot be voted on."""
        store.add_item(item_factory("hidden", is_approved=False))
        with pytest.raises(NotFoundError):
            FeedbackService(store).vote("hidden", "u1")

    def test_vote_toggles(self, store, item_factory):
        """Test voting twice casts then withdraws."""
        store.add_item(item_factory("f1", voters=["u1"]))
        service = FeedbackService(store)

        first = service.vote("f1", "u2")
        second = service.vote("f1", "u2")

        assert (first.vote_casted, first.updated_item.votes) == (True, 2)
        assert (second.vote_casted, second.updated_item.votes) == (False, 1)

    def test_set_status_invalid(self, store, item_factory):
        """Test unknown statuses are rejected."""
        store.add_item(item_factory("f1"))
        with pytest.raises(ValidationError):
            FeedbackService(store).set_status("f1", "Shipped")

    def test_set_tags(self, store, item_factory):
        """Test manual tags are cleaned and stored."""
        store.add_item(item_factory("f1"))
        item = FeedbackService(store).set_tags("f1", [" UI/UX ", "", "Mobile", "UI/UX"])
        assert item.tags == ["UI/UX", "Mobile"]
        assert item.ai_processing_status == "completed"


class TestCleanTags:
    """Test manual tag cleaning."""

    def test_capped_at_five(self):
        """Test at most five manual tags are kept."""
        assert len(clean_tags([f"t{i}" for i in range(8)])) == 5

    @pytest.mark.parametrize("tags", [None, "UI/UX", [1, 2]])
    def test_not_a_string_list(self, tags):
        """Test anything but a list of strings is invalid."""
        with pytest.raises(ValidationError) as exc_info:
            clean_tags(tags)
        assert exc_info.value.field_errors["tags"] == constants.TAGS_INVALID

    def test_all_blank(self):
        """Test at least one non-blank tag is required."""
        with pytest.raises(ValidationError) as exc_info:
            clean_tags(["", "  "])
        assert exc_info.value.field_errors["tags"] == constants.TAGS_REQUIRED
