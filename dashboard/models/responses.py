"""Response schemas for the dashboard API."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from dashboard.models.domain import ContentItem, UserPublic


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    user: UserPublic
    token: str = Field(..., description="Session token; also set as an HttpOnly cookie")
    permissions: List[str] = Field(default_factory=list)


class ContentItemDetail(ContentItem):
    """Content item with the assigned moderator resolved."""

    assigned_user: Optional[UserPublic] = None


class BulkDeleteResponse(BaseModel):
    deleted: List[int] = Field(default_factory=list)
    skipped: Dict[str, str] = Field(
        default_factory=dict, description="Content id -> reason it was not deleted"
    )


class ContentPage(BaseModel):
    """One page of the content table."""

    items: List[ContentItemDetail]
    total: int = Field(..., description="Items matching the filters, across all pages")
    page: int
    page_size: int
    pages: int

    class Config:
        json_schema_extra = {
            "example": {
                "items": [],
                "total": 42,
                "page": 2,
                "page_size": 10,
                "pages": 5,
            }
        }


class TrendPoint(BaseModel):
    date: str
    approved: int = 0
    rejected: int = 0
    flagged: int = 0


class TypeDistribution(BaseModel):
    type: str
    count: int
    avg_processing_time_ms: float


class FeedbackStats(BaseModel):
    total_feedback: int
    agreement_rate: float
    disagreement_rate: float


class QueueStats(BaseModel):
    """Aggregate queue metrics for the reports page."""

    by_status: Dict[str, int]
    by_type: Dict[str, int]
    total: int
    avg_processing_time_ms: float
    ai_accuracy: float
    flagged_content_ratio: float
    moderation_trends: List[TrendPoint]
    content_type_distribution: List[TypeDistribution]
    ai_feedback_stats: FeedbackStats


class ComponentStatus(BaseModel):
    """Status information for a single component."""

    status: str = Field(..., description="Component status")
    latency_ms: Optional[int] = Field(None, description="Component latency in milliseconds")
    name: Optional[str] = Field(None, description="Component name")

    model_config = {"exclude_none": True}


class HealthResponse(BaseModel):
    """Response schema for GET /api/health endpoint."""

    status: str = Field(..., description="Overall system status")
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")
    uptime_seconds: float = Field(..., description="API uptime in seconds")
    components: Dict[str, ComponentStatus] = Field(..., description="Component statuses")
    version: str = Field(..., description="API version")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-09-29T22:10:05.123Z",
                "uptime_seconds": 3600,
                "components": {
                    "api": {"status": "operational"},
                    "redis": {"status": "operational", "latency_ms": 2},
                    "ffprobe": {"status": "available", "name": "ffprobe"},
                    "thehive": {"status": "configured"},
                },
                "version": "1.0.0",
            }
        }
