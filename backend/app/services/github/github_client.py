from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from pymongo.database import Database

from app.config import settings
from app.repositories.integration import IntegrationRepository
from app.services.errors import NotFoundError
from app.services.github.exceptions import GithubConfigurationError

API_HEADERS = {
    "Accept": "application/vnd.github+json",
}

# The issue timeline is served under a preview media type
TIMELINE_PREVIEW_HEADERS = {
    "Accept": "application/vnd.github.mockingbird-preview+json",
}

logger = logging.getLogger(__name__)


@dataclass
class ApiResult:
    """
    Uniform outcome of a GitHub API call.

    Call sites must check ``success`` before touching ``data``.
    """

    success: bool
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, data: Any, status_code: int | None = 200) -> "ApiResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: int | None = None) -> "ApiResult":
        return cls(success=False, error=error, status_code=status_code)


class GitHubClient:
    """
    Thin REST client bound to one access token.

    Constructed per request; every public method returns an ``ApiResult``
    and never raises for transport or HTTP errors. There is no retry, no
    backoff and no rate-limit handling: a 4xx/5xx surfaces as the remote
    message.
    """

    def __init__(
        self,
        token: str,
        api_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._token = token

        if not self._token:
            raise GithubConfigurationError("GitHub token is required to call the API")

        self._api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self._rest = httpx.Client(
            base_url=self._api_url,
            timeout=settings.GITHUB_HTTP_TIMEOUT,
            transport=transport,
        )

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        headers.update(API_HEADERS)
        if extra:
            headers.update(extra)
        return headers

    def _get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ApiResult:
        try:
            response = self._rest.get(path, params=params, headers=self._headers(headers))
        except httpx.HTTPError as exc:
            logger.warning(f"GitHub API Error: {path} {exc}")
            return ApiResult.fail(str(exc) or exc.__class__.__name__)

        if response.is_error:
            message = self._error_message(response)
            logger.warning(
                f"GitHub API Error: {path} status={response.status_code} {message}"
            )
            return ApiResult.fail(message, status_code=response.status_code)

        try:
            return ApiResult.ok(response.json(), status_code=response.status_code)
        except ValueError:
            return ApiResult.fail(
                f"Invalid JSON from GitHub for {path}", status_code=response.status_code
            )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"Request failed with status code {response.status_code}"

    @staticmethod
    def _page_params(
        params: Optional[Dict[str, Any]], defaults: Dict[str, Any]
    ) -> Dict[str, Any]:
        merged = dict(defaults)
        merged.update({k: v for k, v in (params or {}).items() if v is not None})
        return merged

    # ------------------------------------------------------------------
    # Users and organizations
    # ------------------------------------------------------------------

    def get_authenticated_user(self) -> ApiResult:
        return self._get("/user")

    def get_user(self, username: str) -> ApiResult:
        return self._get(f"/users/{username}")

    def list_user_organizations(self) -> ApiResult:
        return self._get("/user/orgs")

    def list_organizations(self) -> ApiResult:
        """
        List the caller's personal account followed by their organizations.

        The personal account is synthesized as a pseudo-organization with
        ``type="User"`` and always comes first.
        """
        orgs_result = self.list_user_organizations()
        user_result = self.get_authenticated_user()

        if not orgs_result.success or not user_result.success:
            return ApiResult.fail(
                orgs_result.error or user_result.error,
                status_code=orgs_result.status_code or user_result.status_code,
            )

        user = user_result.data or {}
        organizations: List[Dict[str, Any]] = [
            {
                "login": user.get("login"),
                "id": user.get("id"),
                "avatar_url": user.get("avatar_url"),
                "description": user.get("bio") or "Personal Account",
                "url": user.get("html_url"),
                "type": "User",
            }
        ]
        organizations.extend(orgs_result.data or [])
        return ApiResult.ok(organizations)

    def get_organization(self, org: str) -> ApiResult:
        return self._get(f"/orgs/{org}")

    def list_organization_members(
        self, org: str, params: Optional[Dict[str, Any]] = None
    ) -> ApiResult:
        return self._get(
            f"/orgs/{org}/members", params=self._page_params(params, {"per_page": 100})
        )

    def list_organization_teams(self, org: str) -> ApiResult:
        return self._get(f"/orgs/{org}/teams")

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def get_repository(self, owner: str, repo: str) -> ApiResult:
        return self._get(f"/repos/{owner}/{repo}")

    def list_organization_repositories(
        self, org: str, params: Optional[Dict[str, Any]] = None
    ) -> ApiResult:
        """
        List repositories of an organization.

        When the org-scoped endpoint fails the name may belong to a personal
        account, so the user-scoped listing is tried before reporting failure.
        """
        query = self._page_params(params, {"per_page": 100, "sort": "updated"})
        result = self._get(f"/orgs/{org}/repos", params=query)
        if not result.success:
            logger.info(f"Org repo listing failed for {org}, trying user repos")
            result = self._get(f"/users/{org}/repos", params=query)
        return result

    def list_commits(
        self, owner: str, repo: str, params: Optional[Dict[str, Any]] = None
    ) -> ApiResult:
        return self._get(
            f"/repos/{owner}/{repo}/commits",
            params=self._page_params(params, {"per_page": 100}),
        )

    def list_pull_requests(
        self, owner: str, repo: str, params: Optional[Dict[str, Any]] = None
    ) -> ApiResult:
        return self._get(
            f"/repos/{owner}/{repo}/pulls",
            params=self._page_params(
                params, {"state": "all", "per_page": 100, "sort": "updated"}
            ),
        )

    def list_issues(
        self, owner: str, repo: str, params: Optional[Dict[str, Any]] = None
    ) -> ApiResult:
        return self._get(
            f"/repos/{owner}/{repo}/issues",
            params=self._page_params(
                params, {"state": "all", "per_page": 100, "sort": "updated"}
            ),
        )

    def list_issue_timeline(self, owner: str, repo: str, number: int) -> ApiResult:
        return self._get(
            f"/repos/{owner}/{repo}/issues/{number}/timeline",
            headers=TIMELINE_PREVIEW_HEADERS,
        )

    def fetch_complete_organization(
        self,
        org: str,
        repo_limit: int | None = None,
        items_per_kind: int | None = None,
        timeline_issues: int | None = None,
    ) -> Dict[str, Any]:
        """
        Snapshot an organization in one call.

        Fetches the org, its repositories and, for the first ``repo_limit``
        repositories, a small page of commits, pull requests and issues with
        the timeline of the first few issues; then members and teams. A
        failed call leaves its section empty instead of failing the snapshot.
        """
        repo_limit = repo_limit or settings.SNAPSHOT_REPO_LIMIT
        items_per_kind = items_per_kind or settings.SNAPSHOT_ITEMS_PER_KIND
        timeline_issues = timeline_issues or settings.SNAPSHOT_TIMELINE_ISSUES

        snapshot: Dict[str, Any] = {
            "organization": None,
            "repos": [],
            "members": [],
            "teams": [],
            "details": {},
        }

        org_result = self.get_organization(org)
        if org_result.success:
            snapshot["organization"] = org_result.data

        repos_result = self.list_organization_repositories(org)
        if repos_result.success:
            snapshot["repos"] = repos_result.data or []

            for repo in snapshot["repos"][:repo_limit]:
                name = repo.get("name")
                details = {"commits": [], "pull_requests": [], "issues": []}
                page = {"per_page": items_per_kind}

                commits = self.list_commits(org, name, page)
                if commits.success:
                    details["commits"] = commits.data

                pulls = self.list_pull_requests(org, name, page)
                if pulls.success:
                    details["pull_requests"] = pulls.data

                issues = self.list_issues(org, name, page)
                if issues.success:
                    details["issues"] = issues.data or []
                    for issue in details["issues"][:timeline_issues]:
                        timeline = self.list_issue_timeline(org, name, issue["number"])
                        if timeline.success:
                            issue["timeline"] = timeline.data

                snapshot["details"][name] = details

        members_result = self.list_organization_members(org)
        if members_result.success:
            snapshot["members"] = members_result.data

        teams_result = self.list_organization_teams(org)
        if teams_result.success:
            snapshot["teams"] = teams_result.data

        return snapshot

    def close(self) -> None:
        self._rest.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def get_user_github_client(db: Database, user_id: str) -> GitHubClient:
    """
    Get a GitHub client using the user's OAuth token.

    Raises NotFoundError when the user has no active GitHub integration.
    """
    integration = IntegrationRepository(db).find_active(user_id)
    if not integration or not integration.access_token:
        raise NotFoundError(
            "GitHub integration not found. Please connect your GitHub account first."
        )
    return GitHubClient(token=integration.access_token)
