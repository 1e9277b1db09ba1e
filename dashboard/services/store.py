"""In-process repository for users, teams, content items, cases and settings."""

import logging
import threading
from typing import Any, Dict, List, Optional

from dashboard.config.roles import UserRole
from dashboard.config.settings import settings
from dashboard.models.domain import (
    Case,
    ContentItem,
    ContentMetadata,
    ModerationResult,
    Team,
    UserRecord,
)
from dashboard.models.responses import ContentItemDetail
from dashboard.services.auth import hash_password
from dashboard.services.exceptions import NotFoundError
from dashboard.utils.timing import utc_now

logger = logging.getLogger(__name__)

SEED_USERS = [
    {"username": "admin", "password": "password", "name": "Ada Admin",
     "email": "admin@example.com", "role": UserRole.ADMIN},
    {"username": "manager1", "password": "password", "name": "Quinn Manager",
     "email": "manager1@example.com", "role": UserRole.QUEUE_MANAGER},
    {"username": "agent1", "password": "password", "name": "John Agent",
     "email": "agent1@example.com", "role": UserRole.AGENT},
    {"username": "agent2", "password": "password", "name": "Jane Agent",
     "email": "agent2@example.com", "role": UserRole.AGENT},
]

SEED_CONTENT = [
    {"content": "This is inappropriate content #1", "type": "text", "priority": 2,
     "original_metadata": {"source": "social_media", "report_count": 3}},
    {"content": "This is inappropriate content #2", "type": "text", "priority": 1,
     "original_metadata": {"source": "comments", "report_count": 1}},
]


class MemoryStore:
    """
    Thread-safe in-memory storage.

    Records are pydantic models; updates replace the stored model with an
    updated copy, so objects handed out are never mutated behind a caller.
    """

    def __init__(self, seed: bool = True):
        self._lock = threading.RLock()
        self.reset(seed=seed)

    def reset(self, seed: bool = True) -> None:
        with self._lock:
            self._users: Dict[int, UserRecord] = {}
            self._teams: Dict[int, Team] = {}
            self._content: Dict[int, ContentItem] = {}
            self._cases: Dict[int, Case] = {}
            self._settings: Dict[str, str] = {"moderation_service": settings.moderation_service}
            self._ids = {"users": 1, "teams": 1, "content": 1, "cases": 1}
            if seed:
                self._seed()

    def _next_id(self, table: str) -> int:
        value = self._ids[table]
        self._ids[table] += 1
        return value

    def _seed(self) -> None:
        for user in SEED_USERS:
            self.create_user(**user)
        team = self.create_team("Trust & Safety", "Default moderation team", manager_id=2)
        for user_id in list(self._users):
            self.update_user(user_id, team_id=team.id)
        for item in SEED_CONTENT:
            self.create_content(**item)

    # Users

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return next((u for u in self._users.values() if u.username == username), None)

    def list_users(self) -> List[UserRecord]:
        with self._lock:
            return list(self._users.values())

    def create_user(
        self,
        username: str,
        password: str,
        name: str,
        email: str,
        role: UserRole = UserRole.AGENT,
        team_id: Optional[int] = None,
    ) -> UserRecord:
        with self._lock:
            user = UserRecord(
                id=self._next_id("users"),
                username=username,
                password_hash=hash_password(password),
                name=name,
                email=email,
                role=role,
                team_id=team_id,
                created_at=utc_now(),
            )
            self._users[user.id] = user
            return user

    def update_user(self, user_id: int, **updates: Any) -> UserRecord:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError("User not found")
            password = updates.pop("password", None)
            if password:
                updates["password_hash"] = hash_password(password)
            updated = user.model_copy(update={**updates, "updated_at": utc_now()})
            self._users[user_id] = updated
            return updated

    def update_user_status(self, user_id: int, status: str) -> UserRecord:
        return self.update_user(user_id, status=status)

    def delete_user(self, user_id: int) -> None:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                raise NotFoundError("User not found")
            for item_id, item in list(self._content.items()):
                if item.assigned_to == user_id:
                    self._content[item_id] = item.model_copy(update={"assigned_to": None})

    # Teams

    def list_teams(self) -> List[Team]:
        with self._lock:
            return list(self._teams.values())

    def get_team(self, team_id: int) -> Optional[Team]:
        with self._lock:
            return self._teams.get(team_id)

    def create_team(
        self, name: str, description: Optional[str] = None, manager_id: Optional[int] = None
    ) -> Team:
        with self._lock:
            team = Team(
                id=self._next_id("teams"),
                name=name,
                description=description,
                manager_id=manager_id,
                created_at=utc_now(),
            )
            self._teams[team.id] = team
            return team

    # Content

    def list_content(self) -> List[ContentItem]:
        with self._lock:
            return list(self._content.values())

    def get_content(self, content_id: int) -> Optional[ContentItem]:
        with self._lock:
            return self._content.get(content_id)

    def with_assigned_user(self, item: ContentItem) -> ContentItemDetail:
        assigned = self.get_user(item.assigned_to) if item.assigned_to else None
        return ContentItemDetail(
            **item.model_dump(),
            assigned_user=assigned.public() if assigned else None,
        )

    def create_content(
        self,
        content: str,
        type: str,
        priority: int = 1,
        name: Optional[str] = None,
        original_metadata: Optional[Dict[str, Any]] = None,
    ) -> ContentItem:
        with self._lock:
            item = ContentItem(
                id=self._next_id("content"),
                name=name,
                content=content,
                type=type,
                priority=priority,
                created_at=utc_now(),
                metadata=ContentMetadata(original_metadata=original_metadata or {}),
            )
            self._content[item.id] = item
            return item

    def update_content(self, content_id: int, **updates: Any) -> ContentItem:
        """
        Apply field updates to a content item.

        A status change made here is a human decision: it stamps
        ``moderated_at`` and records ``human_decision``.
        """
        with self._lock:
            item = self._content.get(content_id)
            if item is None:
                raise NotFoundError("Content not found")
            status = updates.get("status")
            if status and status != "pending":
                updates.setdefault("moderated_at", utc_now())
                updates.setdefault("human_decision", status)
            updated = item.model_copy(update=updates)
            self._content[content_id] = updated
            return updated

    def apply_moderation_result(self, content_id: int, result: ModerationResult) -> ContentItem:
        """Store a classifier result; the item stays in the queue for a human."""
        return self._replace_content(
            content_id,
            ai_confidence=result.ai_confidence,
            regions=result.regions,
            timeline=result.timeline or [],
            ai_decision=result.status,
        )

    def set_ai_analysis(self, content_id: int, analysis) -> ContentItem:
        with self._lock:
            item = self._require_content(content_id)
            metadata = item.metadata.model_copy(update={"ai_analysis": analysis})
            return self._replace_content(content_id, metadata=metadata)

    def submit_ai_feedback(self, content_id: int, is_correct: bool, notes: Optional[str] = None) -> ContentItem:
        return self._replace_content(
            content_id,
            feedback_provided=True,
            feedback_correct=is_correct,
            feedback_notes=notes,
            feedback_timestamp=utc_now(),
        )

    def delete_content(self, content_id: int) -> ContentItem:
        """Remove an item and its cases."""
        with self._lock:
            item = self._content.pop(content_id, None)
            if item is None:
                raise NotFoundError("Content not found")
            for case_id in [c.id for c in self._cases.values() if c.content_id == content_id]:
                del self._cases[case_id]
            return item

    def get_next_content_item(self) -> Optional[ContentItem]:
        """Highest-priority pending, unassigned item; oldest first within a priority."""
        with self._lock:
            candidates = [
                item for item in self._content.values()
                if item.status == "pending" and item.assigned_to is None
            ]
            if not candidates:
                return None
            return min(candidates, key=lambda item: (-item.priority, item.created_at, item.id))

    def _require_content(self, content_id: int) -> ContentItem:
        item = self._content.get(content_id)
        if item is None:
            raise NotFoundError("Content not found")
        return item

    def _replace_content(self, content_id: int, **updates: Any) -> ContentItem:
        with self._lock:
            updated = self._require_content(content_id).model_copy(update=updates)
            self._content[content_id] = updated
            return updated

    # Cases

    def list_cases(self) -> List[Case]:
        with self._lock:
            return list(self._cases.values())

    def find_open_case(self, content_id: int, agent_id: int) -> Optional[Case]:
        """An undecided case for this item held by this agent."""
        with self._lock:
            return next(
                (
                    c for c in self._cases.values()
                    if c.content_id == content_id and c.agent_id == agent_id and c.decision is None
                ),
                None,
            )

    def create_case(
        self,
        content_id: int,
        agent_id: Optional[int],
        notes: Optional[str] = None,
        decision: Optional[str] = None,
        status: str = "open",
    ) -> Case:
        with self._lock:
            if content_id not in self._content:
                raise NotFoundError("Content not found")
            case = Case(
                id=self._next_id("cases"),
                content_id=content_id,
                agent_id=agent_id,
                notes=notes,
                decision=decision,
                status=status,
                created_at=utc_now(),
            )
            self._cases[case.id] = case
            return case

    def update_case(self, case_id: int, **updates: Any) -> Case:
        with self._lock:
            case = self._cases.get(case_id)
            if case is None:
                raise NotFoundError("Case not found")
            updated = case.model_copy(update=updates)
            self._cases[case_id] = updated
            return updated

    # Settings

    def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._settings.get(key, default)

    def set_setting(self, key: str, value: str) -> None:
        with self._lock:
            self._settings[key] = value
            logger.info(f"Setting {key} = {value}")


# Global store instance
store = MemoryStore()
