"""Tests for the /api/cases endpoints."""

from dashboard.services.store import store


class TestCases:
    """Test cases for opening and deciding cases."""

    def test_open_case_assigns_item(self, client, agent_headers):
        item = store.list_content()[0]

        response = client.post("/api/cases", json={"content_id": item.id, "notes": "looking"}, headers=agent_headers)

        assert response.status_code == 201
        case = response.json()
        assert case["status"] == "open"
        assert case["decision"] is None
        assert store.get_content(item.id).assigned_to == case["agent_id"]

    def test_open_case_is_reused(self, client, agent_headers):
        item = store.list_content()[0]

        first = client.post("/api/cases", json={"content_id": item.id}, headers=agent_headers).json()
        second = client.post("/api/cases", json={"content_id": item.id}, headers=agent_headers).json()

        assert first["id"] == second["id"]
        assert len(store.list_cases()) == 1

    def test_decision_closes_case(self, client, agent_headers):
        item = store.list_content()[0]
        client.get(f"/api/content/{item.id}", headers=agent_headers)

        response = client.post(
            "/api/cases",
            json={"content_id": item.id, "decision": "reject", "notes": "slur"},
            headers=agent_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "closed"
        assert len(store.list_cases()) == 1
        updated = store.get_content(item.id)
        assert updated.status == "rejected"
        assert updated.assigned_to is None

    def test_unknown_content(self, client, agent_headers):
        response = client.post("/api/cases", json={"content_id": 999}, headers=agent_headers)

        assert response.status_code == 404

    def test_patch_decision(self, client, agent_headers):
        item = store.list_content()[1]

        response = client.patch(
            "/api/cases/decision",
            json={"content_id": item.id, "decision": "review"},
            headers=agent_headers,
        )

        assert response.status_code == 200
        assert response.json()["decision"] == "review"
        assert store.get_content(item.id).status == "flagged"

    def test_redeciding_needs_override(self, client, agent_headers, login):
        item = store.list_content()[0]
        client.patch("/api/cases/decision", json={"content_id": item.id, "decision": "approve"}, headers=agent_headers)

        denied = client.patch(
            "/api/cases/decision", json={"content_id": item.id, "decision": "reject"}, headers=agent_headers
        )
        allowed = client.patch(
            "/api/cases/decision", json={"content_id": item.id, "decision": "reject"}, headers=login("admin")
        )

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert store.get_content(item.id).status == "rejected"

    def test_list_own_cases(self, client, agent_headers, login):
        first, second = store.list_content()
        client.post("/api/cases", json={"content_id": first.id}, headers=agent_headers)
        client.post("/api/cases", json={"content_id": second.id}, headers=login("agent2"))

        response = client.get("/api/cases", headers=agent_headers)

        assert response.status_code == 200
        assert [case["content_id"] for case in response.json()] == [first.id]
