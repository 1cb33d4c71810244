"""Tests for the GitHub OAuth round trip."""

import asyncio
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.config import settings
from app.entities.oauth_state import OAuthState
from app.services.errors import ValidationError
from app.services.github import github_oauth
from app.services.github.exceptions import GithubOAuthError


@pytest.fixture(autouse=True)
def oauth_app():
    with patch.object(settings, "GITHUB_CLIENT_ID", "client-123"), patch.object(
        settings, "GITHUB_CLIENT_SECRET", "secret-456"
    ):
        yield


@pytest.fixture
def state_repo():
    with patch.object(github_oauth, "OAuthStateRepository") as repo_cls:
        yield repo_cls.return_value


@pytest.fixture
def integration_repo():
    with patch.object(github_oauth, "IntegrationRepository") as repo_cls:
        repo_cls.return_value.find_or_create.side_effect = lambda data: MagicMock(
            username=data["username"]
        )
        yield repo_cls.return_value


def github_transport(token_body, user_body, emails=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login/oauth/access_token":
            return httpx.Response(200, json=token_body)
        if request.url.path == "/user":
            return httpx.Response(200, json=user_body)
        if request.url.path == "/user/emails":
            return httpx.Response(200, json=emails or [])
        return httpx.Response(404, json={"message": "Not Found"})

    return httpx.MockTransport(handler)


def exchange(code, state, transport=None):
    return asyncio.run(
        github_oauth.exchange_code_for_token(MagicMock(), code, state, transport=transport)
    )


def test_authorize_url_carries_state_and_scopes():
    url = github_oauth.build_authorize_url("abc123")

    query = parse_qs(urlparse(url).query)
    assert url.startswith("https://github.com/login/oauth/authorize?")
    assert query["state"] == ["abc123"]
    assert query["client_id"] == ["client-123"]
    assert query["scope"] == ["user:email repo read:org"]


def test_create_state_requires_user_id(state_repo):
    with pytest.raises(ValidationError) as exc_info:
        github_oauth.create_oauth_state(MagicMock(), None)

    assert exc_info.value.message == "User ID is required"
    state_repo.create_state.assert_not_called()


def test_create_state_requires_credentials(state_repo):
    with patch.object(settings, "GITHUB_CLIENT_ID", None):
        with pytest.raises(ValidationError):
            github_oauth.create_oauth_state(MagicMock(), "user-1")


def test_create_state_binds_user(state_repo):
    github_oauth.create_oauth_state(MagicMock(), "user-1")

    state, user_id = state_repo.create_state.call_args.args
    assert user_id == "user-1"
    assert len(state) == 32


class TestExchange:
    def test_missing_params(self, state_repo):
        with pytest.raises(GithubOAuthError) as exc_info:
            exchange("", "state-1")

        assert exc_info.value.reason == "missing_params"
        state_repo.consume.assert_not_called()

    def test_unknown_or_reused_state(self, state_repo):
        state_repo.consume.return_value = None

        with pytest.raises(GithubOAuthError) as exc_info:
            exchange("code-1", "state-1")

        assert exc_info.value.reason == "invalid_state"

    def test_no_access_token(self, state_repo, integration_repo):
        state_repo.consume.return_value = OAuthState(state="state-1", user_id="user-1")
        transport = github_transport(
            {"error": "bad_verification_code"}, {"login": "alice"}
        )

        with pytest.raises(GithubOAuthError) as exc_info:
            exchange("code-1", "state-1", transport)

        assert exc_info.value.reason == "no_token"
        assert "bad_verification_code" in str(exc_info.value)
        integration_repo.find_or_create.assert_not_called()

    def test_upstream_failure(self, state_repo, integration_repo):
        state_repo.consume.return_value = OAuthState(state="state-1", user_id="user-1")
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(GithubOAuthError) as exc_info:
            exchange("code-1", "state-1", transport)

        assert exc_info.value.reason == "auth_failed"

    def test_success_stores_integration(self, state_repo, integration_repo):
        state_repo.consume.return_value = OAuthState(state="state-1", user_id="user-1")
        transport = github_transport(
            {"access_token": "gho_abc", "token_type": "bearer", "scope": "repo"},
            {"id": 99, "login": "alice", "name": "Alice", "email": None, "bio": "Hi"},
            emails=[
                {"email": "alt@example.com", "primary": False},
                {"email": "alice@example.com", "primary": True},
            ],
        )

        integration = exchange("code-1", "state-1", transport)

        assert integration.username == "alice"
        state_repo.consume.assert_called_once_with("state-1")
        data = integration_repo.find_or_create.call_args.args[0]
        assert data["user_id"] == "user-1"
        assert data["provider_user_id"] == "99"
        assert data["access_token"] == "gho_abc"
        assert data["email"] == "alice@example.com"
        assert data["display_name"] == "Alice"
        assert data["metadata"]["bio"] == "Hi"
