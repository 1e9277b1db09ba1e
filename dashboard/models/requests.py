"""Request schemas for the dashboard API."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from dashboard.config.roles import MODERATION_PROVIDERS, UserRole
from dashboard.models.domain import ContentType, DecisionAction, ModerationStatus


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


class StatusUpdate(BaseModel):
    status: Literal["online", "away", "busy", "offline"]


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole = UserRole.AGENT
    team_id: Optional[int] = None


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    team_id: Optional[int] = None
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("name", "email", "role", "password")
    @classmethod
    def reject_null(cls, v, info):
        """Omit a field to leave it unchanged; null is not a value for it."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    manager_id: Optional[int] = None


class ContentCreate(BaseModel):
    """Text (or externally hosted) content submitted for review."""

    content: str = Field(..., min_length=1)
    type: ContentType = "text"
    name: Optional[str] = Field(None, max_length=120)
    priority: int = Field(1, ge=1, le=5)
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Arbitrary source metadata, stored as original_metadata",
    )


class ContentUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=120)
    status: Optional[ModerationStatus] = None
    priority: Optional[int] = Field(None, ge=1, le=5)
    assigned_to: Optional[int] = None

    @field_validator("status", "priority")
    @classmethod
    def reject_null(cls, v, info):
        """Only ``name`` and ``assigned_to`` may be cleared."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class BulkDeleteRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)


class FeedbackRequest(BaseModel):
    is_correct: bool
    notes: Optional[str] = None


class CaseCreate(BaseModel):
    content_id: int
    notes: Optional[str] = None
    decision: Optional[DecisionAction] = None


class DecisionRequest(BaseModel):
    content_id: int
    decision: DecisionAction
    notes: Optional[str] = None


class ModerationSettings(BaseModel):
    moderation_service: str

    @field_validator("moderation_service")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Only the two supported classifier providers are accepted."""
        if v not in MODERATION_PROVIDERS:
            raise ValueError(f"moderation_service must be one of {MODERATION_PROVIDERS}")
        return v


class ContentQuery(BaseModel):
    """Filters, ordering and paging for the content table."""

    type: Optional[ContentType] = None
    status: Optional[ModerationStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    warning_types: Optional[List[str]] = None
    search: Optional[str] = None
    assigned_to: Optional[int] = None
    sort_by: Literal[
        "created_at", "moderated_at", "status", "type", "name", "priority", "warnings"
    ] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1, le=100)
