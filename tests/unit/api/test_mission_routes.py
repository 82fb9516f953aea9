"""Unit tests for the mission API routes.

Routes run against a LifecycleEngine over the in-memory store, injected
through dependency_overrides.
"""

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from smartfunds.api.dependencies.mission import get_lifecycle_engine
from smartfunds.api.main import create_app
from smartfunds.api.middleware import CORRELATION_HEADER
from smartfunds.application.services.lifecycle_engine import LifecycleEngine
from smartfunds.config import TEST_MISSION_ENGINE_CONFIG

CREATE_BODY = {
    "offering_name": "Growth Fund I",
    "asset_type": "Equity",
    "target_raise": 5_000_000,
    "jurisdiction": "Delaware",
    "actor": "operator",
}

FORWARD_PATH = [
    "LEGAL_STRUCTURING",
    "COMPOSITION",
    "IMPLEMENTATION",
    "PR_GATE",
    "VERIFICATION",
    "HUMAN_CHECKPOINT",
    "APPROVED",
    "LAUNCHED",
    "ARCHIVED",
]


@pytest.fixture
def app(lifecycle_engine: LifecycleEngine) -> FastAPI:
    application = create_app(TEST_MISSION_ENGINE_CONFIG)
    application.dependency_overrides[get_lifecycle_engine] = lambda: lifecycle_engine
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _create(client: TestClient) -> dict:
    response = client.post("/v1/missions", json=CREATE_BODY)
    assert response.status_code == 201
    return response.json()


def _transition(client: TestClient, mission_id: str, to_status: str, **extra):
    return client.post(
        f"/v1/missions/{mission_id}/transition",
        json={"to_status": to_status, "actor": "operator", **extra},
    )


class TestHealthEndpoint:
    """Tests for GET /v1/health."""

    def test_health_returns_ok(self, client: TestClient) -> None:
        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_correlation_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={CORRELATION_HEADER: "req-123"})

        assert response.headers[CORRELATION_HEADER] == "req-123"

    def test_correlation_id_is_generated(self, client: TestClient) -> None:
        response = client.get("/v1/health")

        assert response.headers[CORRELATION_HEADER]


class TestCreateMission:
    """Tests for POST /v1/missions."""

    def test_create_returns_201(self, client: TestClient) -> None:
        body = _create(client)

        assert body["status"] == "INTAKE"
        assert body["exemption_type"] == "506C"
        assert body["target_raise"] == 5_000_000
        assert body["created_at"] == "2026-01-01T00:00:00.000Z"
        assert body["created_at"] == body["updated_at"]

    def test_blank_field_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/v1/missions", json={**CREATE_BODY, "offering_name": ""}
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["status"] == 400
        assert detail["detail"] == "offering_name is required"
        assert detail["details"] == {"field": "offering_name"}

    def test_non_positive_target_raise_returns_400(self, client: TestClient) -> None:
        response = client.post("/v1/missions", json={**CREATE_BODY, "target_raise": 0})

        assert response.status_code == 400
        assert response.json()["detail"]["detail"] == (
            "target_raise must be a number greater than 0"
        )

    def test_missing_field_returns_400(self, client: TestClient) -> None:
        body = {k: v for k, v in CREATE_BODY.items() if k != "jurisdiction"}

        response = client.post("/v1/missions", json=body)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["status"] == 400
        assert detail["details"]["field"] == "jurisdiction"

    def test_mistyped_field_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/v1/missions", json={**CREATE_BODY, "target_raise": "lots"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "target_raise"

    def test_missing_body_returns_400(self, client: TestClient) -> None:
        response = client.post("/v1/missions")

        assert response.status_code == 400


class TestGetMission:
    """Tests for GET /v1/missions and GET /v1/missions/{id}."""

    def test_get_existing_mission(self, client: TestClient) -> None:
        created = _create(client)

        response = client.get(f"/v1/missions/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown_mission_returns_404(self, client: TestClient) -> None:
        response = client.get("/v1/missions/missing")

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["detail"] == "Mission not found: missing"
        assert detail["details"] == {"mission_id": "missing"}

    def test_list_missions(self, client: TestClient) -> None:
        first = _create(client)
        second = _create(client)

        response = client.get("/v1/missions")

        assert response.status_code == 200
        assert [m["id"] for m in response.json()] == [first["id"], second["id"]]


class TestTransitionMission:
    """Tests for POST /v1/missions/{id}/transition."""

    def test_valid_transition(self, client: TestClient) -> None:
        created = _create(client)

        response = _transition(client, created["id"], "LEGAL_STRUCTURING")

        assert response.status_code == 200
        assert response.json()["status"] == "LEGAL_STRUCTURING"
        assert response.json()["updated_at"] > created["updated_at"]

    def test_invalid_transition_returns_400_with_edge(self, client: TestClient) -> None:
        created = _create(client)

        response = _transition(client, created["id"], "IMPLEMENTATION")

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["detail"] == "Invalid transition from INTAKE to IMPLEMENTATION"
        assert detail["details"] == {"from": "INTAKE", "to": "IMPLEMENTATION"}

    def test_unknown_status_returns_400(self, client: TestClient) -> None:
        created = _create(client)

        response = _transition(client, created["id"], "SHIPPED")

        assert response.status_code == 400
        assert response.json()["detail"]["detail"] == "Invalid to_status"

    def test_unknown_mission_returns_404(self, client: TestClient) -> None:
        response = _transition(client, "missing", "LEGAL_STRUCTURING")

        assert response.status_code == 404
        assert response.json()["detail"]["details"] == {"mission_id": "missing"}

    def test_missing_actor_returns_400(self, client: TestClient) -> None:
        created = _create(client)

        response = client.post(
            f"/v1/missions/{created['id']}/transition",
            json={"to_status": "LEGAL_STRUCTURING"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"]["field"] == "actor"

    def test_blank_actor_returns_400(self, client: TestClient) -> None:
        created = _create(client)

        response = client.post(
            f"/v1/missions/{created['id']}/transition",
            json={"to_status": "LEGAL_STRUCTURING", "actor": ""},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["details"] == {"field": "actor"}

    def test_archived_mission_rejects_further_transitions(
        self, client: TestClient
    ) -> None:
        created = _create(client)
        for status in FORWARD_PATH:
            assert _transition(client, created["id"], status).status_code == 200

        response = _transition(client, created["id"], "INTAKE")

        assert response.status_code == 400
        assert response.json()["detail"]["details"] == {"from": "ARCHIVED", "to": "INTAKE"}


class TestAuditLog:
    """Tests for GET /v1/missions/{id}/audit."""

    def test_audit_log_records_metadata(self, client: TestClient) -> None:
        created = _create(client)
        _transition(client, created["id"], "LEGAL_STRUCTURING", metadata={"note": "ready"})

        response = client.get(f"/v1/missions/{created['id']}/audit")

        assert response.status_code == 200
        entries = response.json()
        assert len(entries) == 2
        assert entries[0]["from_status"] is None
        assert entries[0]["to_status"] == "INTAKE"
        assert entries[0]["metadata"] is None
        assert entries[1]["from_status"] == "INTAKE"
        assert entries[1]["to_status"] == "LEGAL_STRUCTURING"
        assert entries[1]["metadata"] == {"note": "ready"}
        assert entries[0]["timestamp"] < entries[1]["timestamp"]

    def test_audit_log_unknown_mission_returns_404(self, client: TestClient) -> None:
        response = client.get("/v1/missions/nonexistent-id/audit")

        assert response.status_code == 404
        assert response.json()["detail"]["detail"] == "Mission not found: nonexistent-id"


class TestApplicationLifespan:
    """The lifespan builds the mission engine from configuration."""

    @pytest.fixture
    def live_client(self) -> Iterator[TestClient]:
        with TestClient(create_app(TEST_MISSION_ENGINE_CONFIG)) as client:
            yield client

    def test_engine_is_wired(self, live_client: TestClient) -> None:
        created = _create(live_client)

        response = live_client.get(f"/v1/missions/{created['id']}/audit")

        assert response.status_code == 200
        assert len(response.json()) == 1
