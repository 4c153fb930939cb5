"""
BTSim API Tests

Endpoint tests through the FastAPI test client.
"""

import pytest
from fastapi.testclient import TestClient

from btsim.api.dependencies import find_planner, get_state_store, reset_dependencies
from btsim.config import get_settings
from btsim.main import app
from btsim.services.storage import InMemoryStateStore
from btsim.utils.exceptions import StorageError

OPERATOR_KEY = "operator-test-key"


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("STORAGE_TYPE", "memory")
    monkeypatch.setenv("RED_TEAM_API_KEY", OPERATOR_KEY)
    monkeypatch.setenv("ENABLE_RED_TEAM", "true")
    get_settings.cache_clear()
    reset_dependencies()

    yield TestClient(app)

    get_settings.cache_clear()
    reset_dependencies()


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    def test_component_health(self, client):
        response = client.get("/api/v1/health")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["checks"]["detection_engine"]["rules_loaded"] == 14
        assert data["checks"]["storage"]["type"] == "InMemoryStateStore"
        assert data["checks"]["red_team"]["status"] == "enabled"


class TestContextEndpoints:

    def test_store_and_analyze(self, client):
        response = client.post("/api/v1/context/user-1", json={"site": "github", "username": "octocat"})
        assert response.status_code == 200
        assert response.json()["sites"] == ["github"]

        response = client.post("/api/v1/context/user-1", json={
            "site": "linkedin",
            "organization": "Acme",
            "connections": [{"name": "Bob"}],
        })
        assert response.json()["sites"] == ["github", "linkedin"]

        analysis = client.get("/api/v1/context/user-1/analysis").json()
        assert analysis["key_contacts"] == ["Bob"]
        assert analysis["organizations"] == ["Acme"]
        assert analysis["personalization_score"] > 0

    def test_unknown_user_gets_default_analysis(self, client):
        analysis = client.get("/api/v1/context/nobody/analysis").json()

        assert analysis["primary_site"] == "unknown"
        assert analysis["suggested_attack_vectors"] == ["credential_harvest"]


class TestDetectionEndpoints:

    def test_analyze(self, client):
        response = client.post("/api/v1/detection/analyze", json={
            "form_fields": [{"type": "password", "name": "password", "is_password": True}],
            "url": "http://192.168.1.10/login",
            "page_content": "Urgent: confirm now",
            "user_behavior": {"time_on_page": 30000, "mouse_movements": 40, "keystrokes": 5},
        })
        data = response.json()

        assert response.status_code == 200
        assert data["is_credential_entry"] is True
        assert data["confidence"] == pytest.approx(0.85)
        assert data["detection_method"] == "heuristic"
        assert "Never enter passwords on non-encrypted (non-HTTPS) pages." in data["recommendations"]

    def test_analyze_without_password(self, client):
        data = client.post("/api/v1/detection/analyze", json={"url": "http://10.0.0.1/"}).json()

        assert data["is_credential_entry"] is False

    def test_feedback(self, client):
        response = client.post("/api/v1/detection/feedback", json={
            "input": {"url": "https://github.com/login"},
            "is_credential_entry": False,
        })
        data = response.json()

        assert response.status_code == 200
        assert data["accepted"] is True
        assert data["retrained"] is False
        assert data["pending_examples"] >= 1


class TestSimulationEndpoints:

    def test_plan_and_revoke(self, client):
        response = client.post("/api/v1/simulations/user-1/plan", json={"site": "github"})
        simulation = response.json()

        assert response.status_code == 200
        assert simulation["target_site"] == "github"
        assert simulation["metadata"]["difficulty"] == "easy"
        assert simulation["metadata"]["red_team"] is False

        response = client.delete(f"/api/v1/simulations/user-1/{simulation['id']}")
        assert response.status_code == 200
        assert response.json()["kind"] == "simulation_dismissed"

        response = client.delete(f"/api/v1/simulations/user-1/{simulation['id']}")
        assert response.status_code == 404

    def test_plan_uses_stored_context(self, client):
        client.post("/api/v1/context/user-2", json={"site": "github", "username": "octocat"})
        simulation = client.post(
            "/api/v1/simulations/user-2/plan",
            json={"site": "github", "difficulty": "expert"},
        ).json()

        assert simulation["attack_type"] == "oauth_grant"
        assert simulation["metadata"]["content_strategy"] == "enriched"

    def test_evaluate_respects_interval(self, client):
        first = client.post("/api/v1/simulations/user-3/evaluate", json={"site": "gmail"})
        second = client.post("/api/v1/simulations/user-3/evaluate", json={"site": "gmail"})

        assert first.status_code == 200
        assert second.json() == {"triggered": False, "simulation": None}

    def test_revoke_unknown_user_creates_no_planner(self, client):
        for i in range(5):
            response = client.delete(f"/api/v1/simulations/ghost-{i}/sim-missing")
            assert response.status_code == 404

        assert all(find_planner(f"ghost-{i}") is None for i in range(5))

    def test_planners_are_bounded(self, client, monkeypatch):
        monkeypatch.setenv("MAX_SESSION_PLANNERS", "2")
        get_settings.cache_clear()

        for user in ["user-a", "user-b", "user-c"]:
            client.post(f"/api/v1/simulations/{user}/plan", json={"site": "gmail"})

        assert find_planner("user-a") is None
        assert find_planner("user-b") is not None
        assert find_planner("user-c") is not None

    def test_storage_failure_is_503(self, client):
        class FailingStore(InMemoryStateStore):
            async def get_contexts(self, user_id):
                raise StorageError("disk unavailable")

        app.dependency_overrides[get_state_store] = FailingStore
        try:
            plan = client.post("/api/v1/simulations/user-1/plan", json={"site": "gmail"})
            evaluate = client.post("/api/v1/simulations/user-1/evaluate", json={"site": "gmail"})
        finally:
            app.dependency_overrides.pop(get_state_store, None)

        assert plan.status_code == 503
        assert evaluate.status_code == 503


class TestRedTeamEndpoints:

    def payload(self, **kwargs):
        body = {
            "target_identity": "alice",
            "vector": "Business Email Compromise",
            "payload": "Pay this invoice",
        }
        body.update(kwargs)
        return body

    def test_requires_operator_key(self, client):
        response = client.post("/api/v1/redteam/simulations", json=self.payload())
        assert response.status_code == 403

        response = client.post(
            "/api/v1/redteam/simulations", json=self.payload(), headers={"X-API-Key": "wrong"},
        )
        assert response.status_code == 403

    def test_literal_simulation(self, client):
        response = client.post(
            "/api/v1/redteam/simulations", json=self.payload(), headers={"X-API-Key": OPERATOR_KEY},
        )
        simulation = response.json()

        assert response.status_code == 200
        assert simulation["content"]["title"] == "Internal: Pay this invoice"
        assert simulation["content"]["body"] == "Hi alice,\n\nPay this invoice"
        assert simulation["metadata"]["red_team"] is True
        assert simulation["metadata"]["difficulty"] == "expert"

    def test_blank_target(self, client):
        response = client.post(
            "/api/v1/redteam/simulations",
            json=self.payload(target_identity="   "),
            headers={"X-API-Key": OPERATOR_KEY},
        )
        assert response.status_code == 422

    def test_disabled(self, client, monkeypatch):
        monkeypatch.setenv("ENABLE_RED_TEAM", "false")
        get_settings.cache_clear()

        response = client.post(
            "/api/v1/redteam/simulations", json=self.payload(), headers={"X-API-Key": OPERATOR_KEY},
        )
        assert response.status_code == 403


class TestEventEndpoints:

    def test_record_and_dedupe(self, client):
        event = {"id": "evt-1", "simulation_id": "sim-1", "kind": "link_clicked", "timestamp": 1}

        first = client.post("/api/v1/events/user-1", json=event).json()
        assert first["accepted"] is True
        assert first["stats"]["risk_score"] == 75

        second = client.post("/api/v1/events/user-1", json=event).json()
        assert second["accepted"] is False
        assert second["duplicate"] is True
        assert second["stats"]["risk_score"] == 75

        stats = client.get("/api/v1/stats/user-1").json()
        assert stats["simulations_clicked"] == 1

    def test_same_event_id_for_other_user(self, client):
        event = {"id": "evt-1", "kind": "simulation_detected", "timestamp": 1, "detection_time_ms": 4000}

        client.post("/api/v1/events/user-a", json=event)
        response = client.post("/api/v1/events/user-b", json=event).json()

        assert response["accepted"] is True
        assert response["stats"]["average_detection_time"] == 4000

    def test_unknown_user_stats(self, client):
        stats = client.get("/api/v1/stats/nobody").json()

        assert stats["user_id"] == "nobody"
        assert stats["risk_score"] == 50
