"""Unit tests for data schemas."""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from feature_board.models.schemas import (
    AiInsight,
    AutomationLog,
    FeedbackItem,
    TagGenerationResult,
)

NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


class TestFeedbackItem:
    """Test FeedbackItem schema."""

    def test_defaults(self):
        """Test a minimal item gets board defaults."""
        item = FeedbackItem(
            id="1", title="Dark mode", description="Please add dark mode",
            category="POS", submitted_at=NOW, updated_at=NOW,
        )
        assert item.status == "Under Review"
        assert item.votes == 0
        assert item.voted_by == []
        assert item.ai_processing_status == "pending"
        assert item.is_approved is True
        assert item.primary_tag is None

    def test_camel_case_serialization(self):
        """Test the JSON surface uses camelCase keys."""
        item = FeedbackItem(
            id="1", title="Dark mode", description="Please add dark mode",
            category="POS", sub_category="Hardware", voted_by=["a@example.com"], votes=1,
            submitted_at=NOW, updated_at=NOW,
        )
        data = item.model_dump(mode="json", by_alias=True)
        assert data["subCategory"] == "Hardware"
        assert data["votedBy"] == ["a@example.com"]
        assert data["aiProcessingStatus"] == "pending"
        assert "submittedAt" in data

    def test_accepts_camel_case_input(self):
        """Test items can be built from camelCase payloads."""
        item = FeedbackItem.model_validate({
            "id": "2", "title": "Export", "description": "Export to CSV please",
            "category": "BackOffice", "subCategory": "Reports",
            "submittedAt": NOW.isoformat(), "updatedAt": NOW.isoformat(),
        })
        assert item.sub_category == "Reports"

    def test_negative_votes_rejected(self):
        """Test votes can never be negative."""
        with pytest.raises(ValidationError):
            FeedbackItem(
                id="1", title="Dark mode", description="Please add dark mode",
                category="POS", votes=-1, submitted_at=NOW, updated_at=NOW,
            )

    def test_unknown_category_rejected(self):
        """Test category is a closed set."""
        with pytest.raises(ValidationError):
            FeedbackItem(
                id="1", title="Dark mode", description="Please add dark mode",
                category="Other", submitted_at=NOW, updated_at=NOW,
            )

    def test_primary_tag(self):
        """Test the primary tag is the first tag."""
        item = FeedbackItem(
            id="1", title="Dark mode", description="Please add dark mode",
            category="POS", tags=["UI/UX", "Mobile"], submitted_at=NOW, updated_at=NOW,
        )
        assert item.primary_tag == "UI/UX"


class TestAiInsight:
    """Test AiInsight schema."""

    @pytest.mark.parametrize("score", [0, 11])
    def test_priority_out_of_range_rejected(self, score):
        """Test priority scores outside 1..10 are rejected."""
        with pytest.raises(ValidationError):
            AiInsight(
                theme="Export", insight_summary="Users want exports",
                priority_score=score, feedback_count=2, generated_at=NOW,
            )

    def test_sample_ids_limited_to_three(self):
        """Test at most three sample ids are stored."""
        with pytest.raises(ValidationError):
            AiInsight(
                theme="Export", insight_summary="Users want exports", priority_score=5,
                feedback_count=4, sample_feedback_ids=["1", "2", "3", "4"], generated_at=NOW,
            )


class TestAutomationLog:
    """Test AutomationLog schema."""

    def test_log_defaults(self):
        """Test a new log has zero counts and auto trigger."""
        log = AutomationLog(id="log-1", task_type="ai_tagging", status="running", started_at=NOW)
        assert log.items_processed == 0
        assert log.items_failed == 0
        assert log.triggered_by == "auto"
        assert log.completed_at is None


class TestTagGenerationResult:
    """Test TagGenerationResult schema."""

    def test_more_than_four_tags_rejected(self):
        """Test the collaborator contract caps tags at four."""
        with pytest.raises(ValidationError):
            TagGenerationResult(success=True, tags=["a", "b", "c", "d", "e"])
