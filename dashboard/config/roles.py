"""Roles, permissions and the fixed vocabularies used across the dashboard."""

from enum import Enum
from typing import Dict, List


class UserRole(str, Enum):
    AGENT = "agent"
    SR_AGENT = "sr_agent"
    QUEUE_MANAGER = "queue_manager"
    ADMIN = "admin"


class Permission(str, Enum):
    REVIEW_CONTENT = "review_content"
    ASSIGN_CONTENT = "assign_content"
    MANAGE_USERS = "manage_users"
    VIEW_REPORTS = "view_reports"
    MANAGE_SETTINGS = "manage_settings"
    OVERRIDE_DECISIONS = "override_decisions"


ROLE_PERMISSIONS: Dict[UserRole, List[Permission]] = {
    UserRole.AGENT: [
        Permission.REVIEW_CONTENT,
    ],
    UserRole.SR_AGENT: [
        Permission.REVIEW_CONTENT,
        Permission.OVERRIDE_DECISIONS,
    ],
    UserRole.QUEUE_MANAGER: [
        Permission.REVIEW_CONTENT,
        Permission.ASSIGN_CONTENT,
        Permission.VIEW_REPORTS,
    ],
    UserRole.ADMIN: list(Permission),
}

# Lowest to highest
ROLE_HIERARCHY: List[UserRole] = [
    UserRole.AGENT,
    UserRole.SR_AGENT,
    UserRole.QUEUE_MANAGER,
    UserRole.ADMIN,
]

CONTENT_TYPES = ["text", "image", "video"]

MODERATION_STATUSES = ["pending", "approved", "rejected", "flagged"]

MODERATION_PROVIDERS = ["openai", "thehive"]
