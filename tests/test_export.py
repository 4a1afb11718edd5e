"""Unit tests for the CSV sheet exporter."""
from datetime import datetime, timezone
from unittest.mock import patch

import pandas as pd
import pytest

from feature_board.config import constants
from feature_board.models.schemas import AiInsight
from feature_board.pipelines.export import SheetsExporter

NOW = datetime(2024, 1, 15, tzinfo=timezone.utc)


@pytest.fixture
def insight():
    return AiInsight(
        id="i1", theme="Export", insight_summary="Merchants want exports.", priority_score=6,
        feedback_count=2, sample_feedback_ids=["1", "2"], generated_at=NOW,
    )


class TestSheetsExporter:
    """Test SheetsExporter."""

    def test_writes_both_sheets(self, settings, item_factory, insight):
        """Test feedback and insight sheets are written with their headers."""
        items = [item_factory("1", voters=["a@example.com", "b@example.com"], tags=["Export", "Data"])]

        paths = SheetsExporter(settings).export(items, [insight])

        feedback = pd.read_csv(paths["feedback"])
        insights = pd.read_csv(paths["insights"])
        assert list(feedback.columns) == constants.FEEDBACK_SHEET_HEADERS
        assert list(insights.columns) == constants.INSIGHT_SHEET_HEADERS
        assert feedback.loc[0, "Votes"] == 2
        assert feedback.loc[0, "Tags"] == "Export, Data"
        assert insights.loc[0, "Sample Feedback IDs"] == "1, 2"

    def test_failure_leaves_previous_files(self, settings, item_factory, insight):
        """Test a failed export replaces neither file."""
        exporter = SheetsExporter(settings)
        paths = exporter.export([item_factory("1")], [insight])
        before = paths["feedback"].read_text()

        with patch("feature_board.pipelines.export.insight_frame", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError):
                exporter.export([item_factory("1"), item_factory("2")], [insight])

        assert paths["feedback"].read_text() == before
        assert not list(paths["feedback"].parent.glob("*.tmp"))

    def test_insight_sheet_keeps_earlier_rows(self, settings, insight):
        """Test a second export appends to the insight sheet instead of replacing it."""
        exporter = SheetsExporter(settings)
        later = insight.model_copy(update={
            "id": "i2", "theme": "API", "generated_at": NOW.replace(day=16),
        })

        exporter.export([], [insight])
        paths = exporter.export([], [later])

        sheet = pd.read_csv(paths["insights"])
        assert list(sheet["Theme"]) == ["Export", "API"]
        assert list(sheet["Priority Score"]) == [6, 6]

    def test_repeated_insight_written_once(self, settings, insight):
        """Test re-exporting the same insight does not duplicate its row."""
        exporter = SheetsExporter(settings)

        exporter.export([], [insight])
        paths = exporter.export([], [insight])

        assert len(pd.read_csv(paths["insights"])) == 1

    def test_feedback_sheet_is_a_snapshot(self, settings, item_factory, insight):
        """Test the feedback sheet only holds the latest board."""
        exporter = SheetsExporter(settings)

        exporter.export([item_factory("1"), item_factory("2")], [insight])
        paths = exporter.export([item_factory("3")], [])

        assert list(pd.read_csv(paths["feedback"])["ID"]) == [3]
