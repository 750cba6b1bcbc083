import json

import pytest
from fastapi.testclient import TestClient

from scalingo_dashboard.api.endpoints import get_client
from scalingo_dashboard.config import Settings
from scalingo_dashboard.errors import ConfigurationError, InvalidAction, NotFoundError, ScalingoAPIError
from scalingo_dashboard.main import app
from scalingo_dashboard.models.application import Application
from scalingo_dashboard.models.deployment import DeploymentOutput, DeploymentsPage
from scalingo_dashboard.models.domain import Domain
from scalingo_dashboard.services.log_parser import LogParser
from scalingo_dashboard.services.pagination import Paginator
from scalingo_dashboard.services.scalingo_client import ScalingoClient

APP_ID = "my-web-app"


def make_app(i):
    return Application(
        id=f"app-{i:03d}",
        name=f"app-{i}",
        created_at="2024-01-15T10:30:00Z",
        status="running",
        region="osc-fr1",
    )


class FakeClient:
    def __init__(self, error=None, debug=False):
        self.settings = Settings(api_token="x", debug=debug)
        self.error = error
        self.actions = []

    def _maybe_fail(self):
        if self.error:
            raise self.error

    async def list_applications(self):
        self._maybe_fail()
        return [make_app(i) for i in range(25)]

    async def get_application(self, app_id):
        self._maybe_fail()
        return make_app(1) if app_id == APP_ID else None

    async def perform_action(self, app_id, action):
        self._maybe_fail()
        if action not in ("start", "stop", "restart"):
            raise InvalidAction(action)
        self.actions.append((app_id, action))
        return True

    async def fetch_logs(self, app_id, lines=None):
        self._maybe_fail()
        return LogParser.parse_logs(
            "2025-07-15 12:10:47.951404 +0200 CEST [web-1] Database connection established"
        )

    async def fetch_deployments(self, app_id, page=1):
        self._maybe_fail()
        return DeploymentsPage(
            deployments=[],
            meta={"pagination": Paginator.paginate(45, page, 20)},
        )

    async def fetch_deployment_output(self, app_id, deployment_id):
        self._maybe_fail()
        if deployment_id == "missing":
            raise NotFoundError("Deployment not found or output not available")
        return DeploymentOutput(output="-----> Build complete")

    async def fetch_domains(self, app_id):
        self._maybe_fail()
        return [
            Domain(id="d1", name="plain.example.com"),
            Domain(id="d2", name="www.example.com", ssl=True),
        ]


@pytest.fixture
def fake():
    return FakeClient()


@pytest.fixture
def client(fake):
    app.dependency_overrides[get_client] = lambda: fake
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_list_applications_paged(client):
    response = client.get("/api/applications", params={"page": 3, "limit": 10})
    assert response.status_code == 200
    data = response.json()
    assert len(data["applications"]) == 5
    assert data["meta"]["pagination"] == {
        "current_page": 3,
        "prev_page": 2,
        "next_page": None,
        "total_pages": 3,
        "total_count": 25,
    }


def test_list_applications_bad_limit(client):
    assert client.get("/api/applications", params={"limit": 0}).status_code == 400


def test_get_application(client):
    response = client.get(f"/api/applications/{APP_ID}")
    assert response.status_code == 200
    assert response.json()["application"]["name"] == "app-1"


def test_get_application_not_found(client):
    assert client.get("/api/applications/other-app").status_code == 404


def test_invalid_application_id(client):
    assert client.get("/api/applications/abc").status_code == 400
    assert client.get("/api/applications/bad$id!/logs").status_code == 400


def test_perform_action(client, fake):
    response = client.post(f"/api/applications/{APP_ID}", json={"action": "restart"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Application restart initiated"}
    assert fake.actions == [(APP_ID, "restart")]


def test_perform_invalid_action(client):
    response = client.post(f"/api/applications/{APP_ID}", json={"action": "destroy"})
    assert response.status_code == 400


def test_logs(client):
    response = client.get(f"/api/applications/{APP_ID}/logs")
    assert response.status_code == 200
    [entry] = response.json()["logs"]
    assert entry["timestamp"] == "12:10:47"
    assert entry["level"] == "info"
    assert entry["source"] == "[web-1]"


def test_logs_bad_lines(client):
    assert client.get(f"/api/applications/{APP_ID}/logs", params={"lines": 0}).status_code == 400


def test_deployments(client):
    response = client.get(f"/api/applications/{APP_ID}/deployments", params={"page": 2})
    assert response.status_code == 200
    pagination = response.json()["meta"]["pagination"]
    assert pagination["current_page"] == 2
    assert pagination["next_page"] == 3
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_deployments_bad_page(client):
    response = client.get(f"/api/applications/{APP_ID}/deployments", params={"page": 1001})
    assert response.status_code == 400


def test_deployment_output(client):
    response = client.get(f"/api/applications/{APP_ID}/deployments/dep-1/output")
    assert response.status_code == 200
    assert response.json() == {"output": "-----> Build complete"}


def test_deployment_output_not_found(client):
    response = client.get(f"/api/applications/{APP_ID}/deployments/missing/output")
    assert response.status_code == 404
    assert "not available" in response.json()["detail"]


def test_domains(client):
    response = client.get(f"/api/applications/{APP_ID}/domains")
    assert response.status_code == 200
    data = response.json()
    assert len(data["domains"]) == 2
    assert data["primary_domain"]["name"] == "www.example.com"
    assert data["primary_url"] == "https://www.example.com"


def test_upstream_error_hides_details(client, fake):
    fake.error = ScalingoAPIError("boom", status=500)
    response = client.get(f"/api/applications/{APP_ID}/domains")
    assert response.status_code == 502
    assert "boom" not in response.json()["detail"]


def test_upstream_error_details_in_debug(client, fake):
    fake.error = ScalingoAPIError("boom", status=500)
    fake.settings = Settings(api_token="x", debug=True)
    response = client.get(f"/api/applications/{APP_ID}/logs")
    assert response.status_code == 502
    assert "boom" in response.json()["detail"]


def test_missing_configuration(client, fake):
    fake.error = ConfigurationError("SCALINGO_API_TOKEN is not set")
    assert client.get("/api/applications").status_code == 500


def scalingo_client_returning(monkeypatch, deployments_body):
    """Настоящий `ScalingoClient`, у которого HTTP‑уровень отвечает заготовками."""
    real = ScalingoClient(Settings(api_token="tk-us-secret", api_url="https://api.example.test"))

    async def send(method, url, *, headers=None, params=None, auth=None):
        if url.endswith("/v1/tokens/exchange"):
            return 200, json.dumps({"token": "bearer-123"})
        return 200, json.dumps(deployments_body)

    monkeypatch.setattr(real, "_send", send)
    app.dependency_overrides[get_client] = lambda: real
    return TestClient(app)


def test_deployments_still_building(monkeypatch):
    body = {
        "deployments": [{
            "id": "dep-2",
            "created_at": "2024-01-20T14:22:00Z",
            "status": "building",
            "image_size": None,
            "git_ref": None,
            "pusher": None,
        }],
        "meta": {"total_count": None},
    }
    try:
        response = scalingo_client_returning(monkeypatch, body).get(f"/api/applications/{APP_ID}/deployments")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 200
    data = response.json()
    assert data["deployments"][0]["image_size"] is None
    assert data["meta"]["pagination"]["total_count"] == 1


@pytest.mark.parametrize("body", [
    {"deployments": [{"status": "success"}]},
    {"deployments": [], "meta": {"total_count": "many"}},
])
def test_deployments_unexpected_shape_is_bad_gateway(monkeypatch, body):
    try:
        response = scalingo_client_returning(monkeypatch, body).get(f"/api/applications/{APP_ID}/deployments")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code == 502
