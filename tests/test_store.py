"""Tests for the in-memory store and review workflow."""

import pytest

from dashboard.config.roles import UserRole
from dashboard.models.domain import ModerationResult, TimelineEntry
from dashboard.services.auth import verify_password
from dashboard.services.exceptions import ConflictError, NotFoundError
from dashboard.services.review import (
    check_deletable,
    claim_item,
    delete_item,
    media_files,
    record_decision,
)
from dashboard.services.store import MemoryStore


@pytest.fixture
def db():
    return MemoryStore()


@pytest.fixture
def agent1(db):
    return db.get_user_by_username("agent1")


@pytest.fixture
def agent2(db):
    return db.get_user_by_username("agent2")


class TestSeedData:
    """Test cases for the demo data."""

    def test_seeded_users(self, db):
        usernames = {u.username for u in db.list_users()}

        assert {"admin", "manager1", "agent1", "agent2"} <= usernames
        admin = db.get_user_by_username("admin")
        assert admin.role == UserRole.ADMIN
        assert verify_password("password", admin.password_hash)
        assert "password_hash" not in admin.public().model_dump()

    def test_seeded_content_and_team(self, db):
        assert len(db.list_content()) == 2
        assert all(item.status == "pending" for item in db.list_content())
        assert db.list_teams()[0].name == "Trust & Safety"

    def test_empty_store(self):
        db = MemoryStore(seed=False)

        assert db.list_users() == []
        assert db.get_next_content_item() is None


class TestContent:
    """Test cases for content records."""

    def test_next_item_by_priority_then_age(self, db):
        urgent = db.create_content("urgent", "text", priority=5)
        db.create_content("also urgent, but newer", "text", priority=5)

        assert db.get_next_content_item().id == urgent.id

    def test_next_item_skips_assigned_and_decided(self, db, agent1):
        db.reset(seed=False)
        first = db.create_content("a", "text", priority=3)
        second = db.create_content("b", "text", priority=2)
        third = db.create_content("c", "text", priority=1)
        db.update_content(first.id, assigned_to=agent1.id)
        db.update_content(second.id, status="approved")

        assert db.get_next_content_item().id == third.id

    def test_status_change_records_human_decision(self, db):
        item = db.list_content()[0]

        updated = db.update_content(item.id, status="rejected")

        assert updated.human_decision == "rejected"
        assert updated.moderated_at is not None

    def test_moderation_result_leaves_item_pending(self, db):
        item = db.list_content()[0]
        result = ModerationResult(
            status="rejected",
            ai_confidence={"hate": 0.95},
            timeline=[TimelineEntry(time=1.0, confidence={"hate": 0.95})],
        )

        updated = db.apply_moderation_result(item.id, result)

        assert updated.status == "pending"
        assert updated.ai_decision == "rejected"
        assert updated.timeline[0].time == 1.0

    def test_records_are_not_mutated_in_place(self, db):
        item = db.list_content()[0]

        db.update_content(item.id, name="renamed")

        assert item.name is None
        assert db.get_content(item.id).name == "renamed"

    def test_feedback(self, db):
        item = db.list_content()[0]

        updated = db.submit_ai_feedback(item.id, False, "missed the slur")

        assert updated.feedback_provided is True
        assert updated.feedback_correct is False
        assert updated.feedback_timestamp is not None

    def test_missing_content(self, db):
        with pytest.raises(NotFoundError):
            db.update_content(999, name="x")
        with pytest.raises(NotFoundError):
            db.delete_content(999)

    def test_deleting_user_releases_content(self, db, agent1):
        item = db.list_content()[0]
        db.update_content(item.id, assigned_to=agent1.id)

        db.delete_user(agent1.id)

        assert db.get_content(item.id).assigned_to is None


class TestReviewWorkflow:
    """Test cases for claiming, deciding and deleting."""

    def test_claim_opens_case(self, db, agent1):
        item = db.list_content()[0]

        claimed = claim_item(db, item, agent1)

        assert claimed.assigned_to == agent1.id
        assert db.find_open_case(item.id, agent1.id) is not None

    def test_claim_leaves_held_items_alone(self, db, agent1, agent2):
        item = claim_item(db, db.list_content()[0], agent1)

        again = claim_item(db, item, agent2)

        assert again.assigned_to == agent1.id
        assert db.find_open_case(item.id, agent2.id) is None

    def test_decision_closes_case_and_releases(self, db, agent1):
        item = claim_item(db, db.list_content()[0], agent1)

        case = record_decision(db, item.id, agent1, "review", "needs a second look")

        assert case.status == "closed"
        assert case.decision == "review"
        assert len([c for c in db.list_cases() if c.content_id == item.id]) == 1
        updated = db.get_content(item.id)
        assert updated.status == "flagged"
        assert updated.assigned_to is None

    def test_decision_without_open_case(self, db, agent1):
        item = db.list_content()[0]

        case = record_decision(db, item.id, agent1, "approve")

        assert case.status == "closed"
        assert db.get_content(item.id).status == "approved"

    def test_delete_blocked_by_other_moderator(self, db, agent1, agent2):
        item = claim_item(db, db.list_content()[0], agent1)

        with pytest.raises(ConflictError, match="John Agent"):
            check_deletable(db, db.get_content(item.id), agent2)

    def test_delete_blocked_by_open_case(self, db, agent1, agent2):
        item = db.list_content()[0]
        db.create_case(item.id, agent1.id)

        with pytest.raises(ConflictError, match="pending moderation cases"):
            delete_item(db, item.id, agent2)

    def test_holder_can_delete(self, db, agent1):
        item = claim_item(db, db.list_content()[0], agent1)

        delete_item(db, item.id, agent1)

        assert db.get_content(item.id) is None
        assert not [c for c in db.list_cases() if c.content_id == item.id]

    def test_delete_removes_media_files(self, db, agent1, upload_dir):
        (upload_dir / "thumbnails").mkdir()
        (upload_dir / "clip.mp4").write_bytes(b"video")
        (upload_dir / "thumbnails" / "clip_0.00.jpg").write_bytes(b"jpg")
        item = db.create_content("/uploads/clip.mp4", "video")
        db.apply_moderation_result(item.id, ModerationResult(
            status="approved",
            timeline=[
                TimelineEntry(time=0.0, thumbnail="/uploads/thumbnails/clip_0.00.jpg"),
                TimelineEntry(time=5.0, thumbnail="/uploads/thumbnails/clip_5.00.jpg"),
                TimelineEntry(time=9.0),
            ],
        ))

        assert len(media_files(db.get_content(item.id))) == 3
        delete_item(db, item.id, agent1)

        assert not (upload_dir / "clip.mp4").exists()
        assert not (upload_dir / "thumbnails" / "clip_0.00.jpg").exists()

    def test_text_items_have_no_files(self, db):
        assert media_files(db.list_content()[0]) == []
