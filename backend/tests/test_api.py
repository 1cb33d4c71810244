"""HTTP-level tests: routing, envelopes and error mapping."""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.api.grid import get_grid_service
from app.api.integrations import get_integration_service
from app.api.sync import get_sync_service
from app.database.mongo import get_db
from app.entities.integration import Integration
from app.entities.timeline import CommentedEvent
from app.main import app
from app.services.errors import NotFoundError, UpstreamError
from app.services.grid_service import GridService
from app.services.sync_service import SyncService

from conftest import make_repository


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = lambda: MagicMock()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sync_service():
    service = MagicMock(spec=SyncService)
    app.dependency_overrides[get_sync_service] = lambda: service
    return service


@pytest.fixture
def grid_service():
    service = GridService(MagicMock())
    service._repositories = {"organizations": MagicMock(), "repositories": MagicMock()}
    app.dependency_overrides[get_grid_service] = lambda: service
    return service


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client):
    response = client.get("/api/health")

    assert len(response.headers["X-Request-ID"]) == 32


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nowhere")

    body = response.json()
    assert response.status_code == 404
    assert body["success"] is False
    assert body["code"] == "NOT_FOUND"
    assert body["request_id"]


class TestErrorMapping:
    def test_missing_user_id_is_bad_request(self, client):
        app.dependency_overrides[get_sync_service] = lambda: SyncService(MagicMock())

        response = client.post("/api/integrations/github/sync/organization/acme")

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"] == "userId is required"
        assert body["code"] == "BAD_REQUEST"
        assert "timestamp" in body

    def test_not_found(self, client, sync_service):
        sync_service.get_stored_repository.side_effect = NotFoundError(
            "Repository not found in database"
        )

        response = client.get(
            "/api/integrations/github/stored/repositories/acme/widgets",
            params={"userId": "user-1"},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Repository not found in database"
        assert response.json()["code"] == "NOT_FOUND"

    def test_upstream_failure(self, client, sync_service):
        sync_service.sync_repository.side_effect = UpstreamError(
            "Failed to fetch repository: Not Found"
        )

        response = client.post(
            "/api/integrations/github/sync/repository/acme/widgets",
            json={"userId": "user-1"},
        )

        assert response.status_code == 500
        assert response.json()["code"] == "UPSTREAM_ERROR"
        assert response.json()["error"] == "Failed to fetch repository: Not Found"

    def test_invalid_query_parameter(self, client, grid_service):
        response = client.get(
            "/api/integrations/github/grid-data/repositories",
            params={"userId": "user-1", "page": 0},
        )

        body = response.json()
        assert response.status_code == 400
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "query -> page"


class TestOAuthRoutes:
    def test_auth_url_requires_user_id(self, client):
        response = client.get("/api/integrations/github/auth")

        assert response.status_code == 400
        assert response.json()["error"] == "User ID is required"

    def test_callback_without_code_redirects_with_error(self, client):
        response = client.get(
            "/api/integrations/github/callback", follow_redirects=False
        )

        assert response.status_code in (302, 307)
        assert response.headers["location"].endswith("/integrations?error=missing_params")


class TestIntegrationRoutes:
    def test_status_never_exposes_tokens(self, client):
        service = MagicMock()
        service.get_status.return_value = {
            "connected": True,
            "count": 1,
            "integrations": [
                Integration(
                    id=ObjectId(),
                    user_id="user-1",
                    provider_user_id="99",
                    username="alice",
                    access_token="gho_secret",
                )
            ],
        }
        app.dependency_overrides[get_integration_service] = lambda: service

        response = client.get("/api/integrations/status/user-1")

        body = response.json()
        assert response.status_code == 200
        assert body["connected"] is True
        assert body["integrations"][0]["username"] == "alice"
        assert "_id" in body["integrations"][0]
        assert "gho_secret" not in response.text
        assert "access_token" not in response.text

    def test_disconnect_unknown(self, client):
        service = MagicMock()
        service.disconnect.side_effect = NotFoundError("Integration not found")
        app.dependency_overrides[get_integration_service] = lambda: service

        response = client.delete("/api/integrations/user-1/github")

        assert response.status_code == 404
        assert response.json()["error"] == "Integration not found"

    def test_endpoint_catalogue(self, client):
        response = client.get("/api/integrations")

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestSyncRoutes:
    def test_cached_timeline(self, client, sync_service):
        sync_service.sync_issue_timeline.return_value = {
            "cached": True,
            "timeline": [CommentedEvent(body="hi")],
        }

        response = client.post(
            "/api/integrations/github/sync/issue-timeline/acme/widgets/7",
            json={"userId": "user-1"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["cached"] is True
        assert body["count"] == 1
        assert body["data"][0]["event"] == "commented"
        sync_service.sync_issue_timeline.assert_called_once_with(
            "user-1", "acme", "widgets", 7
        )

    def test_repository_sync_envelope(self, client, sync_service):
        sync_service.sync_repository.return_value = {
            "repository": make_repository(),
            "sync_stats": {
                "repository": "widgets",
                "commits": 3,
                "pull_requests": 0,
                "issues": 0,
                "timelines_fetched": 0,
                "failed": ["pull_requests"],
            },
        }

        response = client.post(
            "/api/integrations/github/sync/repository/acme/widgets",
            json={"userId": "user-1", "includeIssues": False},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Repository data partially synced"
        assert body["syncStats"]["commits"] == 3
        assert body["data"]["name"] == "widgets"
        assert sync_service.sync_repository.call_args.kwargs["include_issues"] is False

    def test_repository_sync_with_every_kind_failed(self, client, sync_service):
        sync_service.sync_repository.return_value = {
            "repository": make_repository(sync_status="failed"),
            "sync_stats": {
                "repository": "widgets",
                "commits": 0,
                "pull_requests": 0,
                "issues": 0,
                "timelines_fetched": 0,
                "failed": ["commits", "pull_requests", "issues"],
            },
        }

        response = client.post(
            "/api/integrations/github/sync/repository/acme/widgets",
            json={"userId": "user-1"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Repository data sync failed"

    def test_stored_repositories_omit_children(self, client, sync_service):
        sync_service.list_stored_repositories.return_value = [make_repository()]

        response = client.get(
            "/api/integrations/github/stored/organizations/acme/repositories",
            params={"userId": "user-1"},
        )

        row = response.json()["data"][0]
        assert response.json()["count"] == 1
        assert "commits" not in row
        assert row["name"] == "widgets"


class TestGridRoutes:
    def test_unknown_collection(self, client, grid_service):
        response = client.get(
            "/api/integrations/github/grid-data/commits", params={"userId": "user-1"}
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid collection")

    def test_pagination_is_camel_case(self, client, grid_service):
        grid_service._repositories["repositories"].paginate.return_value = ([], 250)

        response = client.get(
            "/api/integrations/github/grid-data/repositories",
            params={"userId": "user-1", "page": 3, "pageSize": 100},
        )

        assert response.status_code == 200
        assert response.json()["pagination"] == {
            "page": 3,
            "pageSize": 100,
            "totalCount": 250,
            "totalPages": 3,
            "hasNextPage": False,
            "hasPrevPage": True,
        }

    def test_schema_uses_header_name(self, client, grid_service):
        response = client.get(
            "/api/integrations/github/collection-schema/organizations",
            params={"userId": "user-1"},
        )

        fields = response.json()["fields"]
        assert fields[0]["headerName"] == "Github Id"
