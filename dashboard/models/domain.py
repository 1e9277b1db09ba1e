"""Records held by the store and returned by the API."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from dashboard.config.roles import UserRole

ContentType = Literal["text", "image", "video"]
ModerationStatus = Literal["pending", "approved", "rejected", "flagged"]
DecisionAction = Literal["approve", "reject", "review"]
Severity = Literal["high", "medium", "low"]

# Content status set by a moderator decision
DECISION_STATUS: Dict[str, str] = {
    "approve": "approved",
    "reject": "rejected",
    "review": "flagged",
}


class UserPublic(BaseModel):
    """User as exposed over the API (no credentials)."""

    id: int
    username: str
    name: str
    email: str
    role: UserRole = UserRole.AGENT
    status: str = "offline"
    team_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserRecord(UserPublic):
    """Stored user, including the password hash."""

    password_hash: str

    def public(self) -> UserPublic:
        return UserPublic(**self.model_dump(exclude={"password_hash"}))


class Team(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    manager_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ContentRegion(BaseModel):
    """Area of an image or frame that triggered a category."""

    type: str
    confidence: float
    x: int = 0
    y: int = 0
    width: int = 100
    height: int = 100


class TimelineEntry(BaseModel):
    """One point of a video's moderation timeline."""

    time: float = Field(..., ge=0.0, description="Seconds from the start of the video")
    confidence: Dict[str, float] = Field(default_factory=dict)
    thumbnail: Optional[str] = Field(None, description="Public URL of the frame thumbnail")
    severity: Severity = "low"
    warnings: List[str] = Field(
        default_factory=list,
        description="Categories above the warning threshold, highest score first",
    )


class ModerationResult(BaseModel):
    """Normalised outcome of a classifier call."""

    status: ModerationStatus
    regions: List[ContentRegion] = Field(default_factory=list)
    ai_confidence: Dict[str, float] = Field(default_factory=dict)
    timeline: Optional[List[TimelineEntry]] = None
    provider: Optional[str] = None
    duration: Optional[float] = None


class Classification(BaseModel):
    category: str
    confidence: float = 0.0
    suggested_action: DecisionAction


class ContentFlag(BaseModel):
    type: str
    severity: float
    details: str = ""


class AIAnalysis(BaseModel):
    """LLM review summary attached to a content item."""

    classification: Classification
    content_flags: List[ContentFlag] = Field(default_factory=list)
    risk_score: float = 0.0


class ContentMetadata(BaseModel):
    original_metadata: Dict[str, Any] = Field(default_factory=dict)
    ai_analysis: Optional[AIAnalysis] = None


class ContentItem(BaseModel):
    id: int
    name: Optional[str] = None
    content: str = Field(..., description="Text body, or /uploads/... URL for media")
    type: ContentType
    status: ModerationStatus = "pending"
    priority: int = 1
    assigned_to: Optional[int] = None
    created_at: datetime
    moderated_at: Optional[datetime] = None
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)
    ai_confidence: Dict[str, float] = Field(default_factory=dict)
    regions: List[ContentRegion] = Field(default_factory=list)
    timeline: List[TimelineEntry] = Field(default_factory=list)
    ai_decision: Optional[ModerationStatus] = None
    human_decision: Optional[ModerationStatus] = None
    feedback_provided: bool = False
    feedback_correct: Optional[bool] = None
    feedback_notes: Optional[str] = None
    feedback_timestamp: Optional[datetime] = None

    @property
    def is_media(self) -> bool:
        return self.type in ("image", "video")

    @property
    def max_confidence(self) -> float:
        return max(self.ai_confidence.values(), default=0.0)


class Case(BaseModel):
    id: int
    content_id: int
    agent_id: Optional[int] = None
    status: Literal["open", "closed"] = "open"
    notes: Optional[str] = None
    decision: Optional[DecisionAction] = None
    created_at: datetime
