# feature_board/pipelines/export.py
"""
Spreadsheet export of the board and generated insights.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from feature_board.config import constants
from feature_board.config.settings import Settings
from feature_board.models.schemas import AiInsight, FeedbackItem

logger = logging.getLogger(__name__)

FEEDBACK_FILE = "feedback.csv"
INSIGHTS_FILE = "insights.csv"

# an insight row is identified by its theme and generation time
INSIGHT_IDENTITY_COLUMNS = ["Theme", "Generated At"]


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def feedback_frame(items: List[FeedbackItem]) -> pd.DataFrame:
    """Feedback rows with the sheet column headers."""
    rows = [
        [
            item.id,
            item.title,
            item.description,
            item.category,
            item.sub_category or "",
            item.status,
            item.votes,
            _iso(item.submitted_at),
            _iso(item.updated_at),
            item.is_approved,
            _iso(item.moderated_at),
            item.moderated_by or "",
            item.admin_notes or "",
            ", ".join(item.tags),
            ", ".join(item.voted_by),
        ]
        for item in items
    ]
    return pd.DataFrame(rows, columns=constants.FEEDBACK_SHEET_HEADERS)


def insight_frame(insights: List[AiInsight]) -> pd.DataFrame:
    rows = [
        [
            insight.theme,
            insight.insight_summary,
            insight.priority_score,
            insight.feedback_count,
            ", ".join(insight.sample_feedback_ids),
            _iso(insight.generated_at),
        ]
        for insight in insights
    ]
    return pd.DataFrame(rows, columns=constants.INSIGHT_SHEET_HEADERS)


def append_insights(path: Path, frame: pd.DataFrame) -> pd.DataFrame:
    """Existing insight rows followed by new ones; a repeated row is kept once."""
    if not path.exists():
        return frame
    previous = pd.read_csv(path, dtype=str, keep_default_na=False)
    combined = pd.concat([previous, frame.astype(str)], ignore_index=True)
    return combined.drop_duplicates(subset=INSIGHT_IDENTITY_COLUMNS, keep="first", ignore_index=True)


class SheetsExporter:
    """Write the feedback and insight sheets as CSV files."""

    def __init__(self, config: Settings):
        self.config = config
        self.output_dir = config.export_path()

    def export(self, items: List[FeedbackItem], insights: List[AiInsight]) -> Dict[str, Path]:
        """
        Export both sheets. Either both files are replaced or neither is.

        The feedback sheet is a full snapshot of the board. The insights sheet
        accumulates: earlier rows are kept and the new insights appended.

        Args:
            items: Approved feedback items
            insights: Insights not yet exported

        Returns:
            Mapping of sheet name to written file path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        targets = {
            "feedback": (feedback_frame(items), self.output_dir / FEEDBACK_FILE),
            "insights": (
                append_insights(self.output_dir / INSIGHTS_FILE, insight_frame(insights)),
                self.output_dir / INSIGHTS_FILE,
            ),
        }

        staged = {name: path.with_suffix(path.suffix + ".tmp") for name, (_, path) in targets.items()}
        try:
            for name, (frame, _) in targets.items():
                frame.to_csv(staged[name], index=False)
        except Exception:
            for tmp_path in staged.values():
                tmp_path.unlink(missing_ok=True)
            raise

        for name, tmp_path in staged.items():
            os.replace(tmp_path, targets[name][1])

        logger.info(
            f"Exported {len(items)} feedback rows and {len(insights)} insight rows to {self.output_dir}"
        )
        return {name: path for name, (_, path) in targets.items()}
