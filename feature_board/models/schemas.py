from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional, List
from enum import Enum


class Status(str, Enum):
    UNDER_REVIEW = "Under Review"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    DECLINED = "Declined"


class Category(str, Enum):
    BACKOFFICE = "BackOffice"
    POS = "POS"
    BEEP = "Beep"


class AiProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AutomationTaskType(str, Enum):
    AI_TAGGING = "ai_tagging"
    INSIGHT_GENERATION = "insight_generation"
    SHEETS_EXPORT = "sheets_export"


class AutomationStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class TriggeredBy(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    ADMIN = "admin"


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys on the HTTP surface."""
    model_config = ConfigDict(
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FeedbackItem(CamelModel):
    """A feature request on the board.

    ``votes`` and ``voted_by`` are projections of the vote ledger and are
    never written independently.
    """

    id: str
    title: str
    description: str
    category: Category
    sub_category: Optional[str] = None
    status: Status = Status.UNDER_REVIEW
    votes: int = Field(default=0, ge=0)
    voted_by: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    ai_processing_status: AiProcessingStatus = AiProcessingStatus.PENDING
    ai_tagged_at: Optional[datetime] = None
    submitted_at: datetime
    updated_at: datetime
    is_approved: bool = True
    moderated_at: Optional[datetime] = None
    moderated_by: Optional[str] = None
    admin_notes: Optional[str] = None

    @property
    def primary_tag(self) -> Optional[str]:
        return self.tags[0] if self.tags else None


class FeedbackSubmission(CamelModel):
    """Validated payload for a new feedback item."""
    title: str
    description: str
    category: Category
    sub_category: Optional[str] = None


class VoteResult(BaseModel):
    """Outcome of a vote toggle."""
    updated_item: FeedbackItem
    vote_casted: bool


class AiInsight(CamelModel):
    """Prioritised summary of one theme."""
    id: Optional[str] = None
    theme: str
    insight_summary: str
    priority_score: int = Field(..., ge=1, le=10)
    feedback_count: int = Field(..., ge=0)
    sample_feedback_ids: List[str] = Field(default_factory=list, max_length=3)
    generated_at: datetime
    exported_at: Optional[datetime] = None


class AutomationLog(CamelModel):
    """One automation run, tracked start to finish."""
    id: str
    task_type: AutomationTaskType
    status: AutomationStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    items_processed: int = 0
    items_failed: int = 0
    error_message: Optional[str] = None
    triggered_by: TriggeredBy = TriggeredBy.AUTO


class TagGenerationResult(BaseModel):
    """Tagging collaborator response."""
    success: bool
    tags: List[str] = Field(default_factory=list, max_length=4)
    error: Optional[str] = None


class InsightGenerationResult(BaseModel):
    """Insight collaborator response."""
    success: bool
    insight_summary: Optional[str] = None
    priority_score: Optional[float] = None
    reasoning: Optional[str] = None
    error: Optional[str] = None


class User(CamelModel):
    id: str
    username: str
    email: str
    created_at: datetime
