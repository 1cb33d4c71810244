"""Tests for the GitHub REST client using an in-memory transport."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.services.errors import NotFoundError
from app.services.github.exceptions import GithubConfigurationError
from app.services.github.github_client import GitHubClient, get_user_github_client


def make_client(routes, calls=None):
    """
    Build a client whose transport answers from ``routes``.

    ``routes`` maps a request path to either a (status, json) tuple or a
    callable returning an ``httpx.Response``. Unknown paths answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    return GitHubClient(
        token="gho_test",
        api_url="https://api.github.test",
        transport=httpx.MockTransport(handler),
    )


USER = {
    "login": "alice",
    "id": 1,
    "avatar_url": "https://avatars/alice",
    "html_url": "https://github.com/alice",
    "bio": None,
}


def test_requires_token():
    with pytest.raises(GithubConfigurationError):
        GitHubClient(token="")


def test_sends_bearer_token_and_api_version():
    calls = []
    client = make_client({"/user": (200, USER)}, calls)

    result = client.get_authenticated_user()

    assert result.success
    assert calls[0].headers["Authorization"] == "Bearer gho_test"
    assert calls[0].headers["Accept"] == "application/vnd.github+json"
    assert calls[0].headers["X-GitHub-Api-Version"] == "2022-11-28"


class TestListOrganizations:
    def test_personal_account_comes_first(self):
        client = make_client(
            {
                "/user": (200, USER),
                "/user/orgs": (200, [{"login": "acme", "id": 10}]),
            }
        )

        result = client.list_organizations()

        assert result.success
        assert [o["login"] for o in result.data] == ["alice", "acme"]
        personal = result.data[0]
        assert personal["type"] == "User"
        assert personal["description"] == "Personal Account"
        assert personal["url"] == "https://github.com/alice"

    def test_bio_is_used_as_description(self):
        client = make_client(
            {"/user": (200, {**USER, "bio": "Builder"}), "/user/orgs": (200, [])}
        )

        assert client.list_organizations().data[0]["description"] == "Builder"

    def test_fails_when_user_lookup_fails(self):
        client = make_client(
            {
                "/user": (401, {"message": "Bad credentials"}),
                "/user/orgs": (200, [{"login": "acme"}]),
            }
        )

        result = client.list_organizations()

        assert not result.success
        assert result.error == "Bad credentials"
        assert result.status_code == 401


class TestErrors:
    def test_remote_message_is_passed_through(self):
        client = make_client({"/repos/acme/gone": (404, {"message": "Not Found"})})

        result = client.get_repository("acme", "gone")

        assert not result.success
        assert result.error == "Not Found"
        assert result.status_code == 404

    def test_status_code_message_without_body(self):
        client = make_client(
            {"/repos/acme/widgets": lambda request: httpx.Response(502, text="bad gateway")}
        )

        result = client.get_repository("acme", "widgets")

        assert result.error == "Request failed with status code 502"

    def test_transport_error_is_returned_not_raised(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client({"/user": boom})

        result = client.get_authenticated_user()

        assert not result.success
        assert "connection refused" in result.error
        assert result.status_code is None


class TestRepositoryListing:
    def test_falls_back_to_user_repositories(self):
        calls = []
        client = make_client(
            {"/users/alice/repos": (200, [{"name": "dotfiles"}])}, calls
        )

        result = client.list_organization_repositories("alice")

        assert result.success
        assert result.data == [{"name": "dotfiles"}]
        assert [c.url.path for c in calls] == ["/orgs/alice/repos", "/users/alice/repos"]

    def test_default_paging_params(self):
        calls = []
        client = make_client({"/repos/acme/widgets/issues": (200, [])}, calls)

        client.list_issues("acme", "widgets", {"per_page": 50, "page": None})

        params = calls[0].url.params
        assert params["state"] == "all"
        assert params["per_page"] == "50"
        assert params["sort"] == "updated"
        assert "page" not in params


def test_timeline_uses_preview_media_type():
    calls = []
    client = make_client({"/repos/acme/widgets/issues/7/timeline": (200, [])}, calls)

    result = client.list_issue_timeline("acme", "widgets", 7)

    assert result.success
    assert calls[0].headers["Accept"] == "application/vnd.github.mockingbird-preview+json"


class TestCompleteOrganization:
    def test_partial_failures_leave_sections_empty(self):
        calls = []
        issues = [{"number": n} for n in (1, 2, 3, 4)]
        client = make_client(
            {
                "/orgs/acme": (200, {"login": "acme"}),
                "/orgs/acme/repos": (200, [{"name": "widgets"}, {"name": "gears"}]),
                "/repos/acme/widgets/commits": (200, [{"sha": "a1"}]),
                "/repos/acme/widgets/pulls": (500, {"message": "Server Error"}),
                "/repos/acme/widgets/issues": (200, issues),
                "/repos/acme/widgets/issues/1/timeline": (200, [{"event": "closed"}]),
                "/repos/acme/widgets/issues/2/timeline": (200, []),
                "/orgs/acme/members": (200, [{"login": "alice", "id": 1}]),
                "/orgs/acme/teams": (403, {"message": "Forbidden"}),
            },
            calls,
        )

        snapshot = client.fetch_complete_organization(
            "acme", repo_limit=1, items_per_kind=10, timeline_issues=2
        )

        assert snapshot["organization"] == {"login": "acme"}
        assert len(snapshot["repos"]) == 2
        assert list(snapshot["details"]) == ["widgets"]

        details = snapshot["details"]["widgets"]
        assert details["commits"] == [{"sha": "a1"}]
        assert details["pull_requests"] == []
        assert details["issues"][0]["timeline"] == [{"event": "closed"}]
        assert "timeline" not in details["issues"][2]

        assert snapshot["members"] == [{"login": "alice", "id": 1}]
        assert snapshot["teams"] == []

        timeline_calls = [c for c in calls if c.url.path.endswith("/timeline")]
        assert len(timeline_calls) == 2


class TestUserClientFactory:
    def test_missing_integration_raises_not_found(self):
        with patch(
            "app.services.github.github_client.IntegrationRepository"
        ) as repo_cls:
            repo_cls.return_value.find_active.return_value = None

            with pytest.raises(NotFoundError) as exc_info:
                get_user_github_client(MagicMock(), "user-1")

        assert "connect your GitHub account" in exc_info.value.message

    def test_uses_stored_access_token(self):
        with patch(
            "app.services.github.github_client.IntegrationRepository"
        ) as repo_cls:
            repo_cls.return_value.find_active.return_value = MagicMock(
                access_token="gho_stored"
            )

            client = get_user_github_client(MagicMock(), "user-1")

        assert client._token == "gho_stored"
        client.close()
