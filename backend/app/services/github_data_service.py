"""Live GitHub reads for a connected user, returned as GitHub sends them."""

import logging
from typing import Any, Callable, Dict, List, Optional

from pymongo.database import Database

from app.services.errors import UpstreamError, require_fields
from app.services.github.github_client import (
    ApiResult,
    GitHubClient,
    get_user_github_client,
)

logger = logging.getLogger(__name__)


class GithubDataService:
    def __init__(
        self,
        db: Database,
        client_factory: Optional[Callable[[Database, str], GitHubClient]] = None,
    ):
        self.db = db
        self.client_factory = client_factory or get_user_github_client

    def _call(self, user_id: str, fetch: Callable[[GitHubClient], ApiResult]) -> List[Any]:
        require_fields({"userId": user_id}, ["userId"])
        with self.client_factory(self.db, user_id) as client:
            result = fetch(client)
        if not result.success:
            raise UpstreamError(result.error or "GitHub request failed")
        return result.data or []

    def list_organizations(self, user_id: str) -> List[Dict[str, Any]]:
        return self._call(user_id, lambda client: client.list_organizations())

    def list_organization_repositories(self, user_id: str, org: str) -> List[Dict[str, Any]]:
        return self._call(
            user_id, lambda client: client.list_organization_repositories(org)
        )

    def list_organization_members(self, user_id: str, org: str) -> List[Dict[str, Any]]:
        return self._call(user_id, lambda client: client.list_organization_members(org))

    def list_commits(
        self, user_id: str, owner: str, repo: str, per_page: int = 100, page: int = 1
    ) -> List[Dict[str, Any]]:
        return self._call(
            user_id,
            lambda client: client.list_commits(
                owner, repo, {"per_page": per_page, "page": page}
            ),
        )

    def list_pull_requests(
        self,
        user_id: str,
        owner: str,
        repo: str,
        state: str = "all",
        per_page: int = 100,
        page: int = 1,
    ) -> List[Dict[str, Any]]:
        return self._call(
            user_id,
            lambda client: client.list_pull_requests(
                owner, repo, {"state": state, "per_page": per_page, "page": page}
            ),
        )

    def list_issues(
        self,
        user_id: str,
        owner: str,
        repo: str,
        state: str = "all",
        per_page: int = 100,
        page: int = 1,
    ) -> List[Dict[str, Any]]:
        return self._call(
            user_id,
            lambda client: client.list_issues(
                owner, repo, {"state": state, "per_page": per_page, "page": page}
            ),
        )

    def list_issue_timeline(
        self, user_id: str, owner: str, repo: str, issue_number: int
    ) -> List[Dict[str, Any]]:
        return self._call(
            user_id, lambda client: client.list_issue_timeline(owner, repo, issue_number)
        )

    def get_complete_organization(self, user_id: str, org: str) -> Dict[str, Any]:
        require_fields({"userId": user_id, "orgName": org}, ["userId", "orgName"])
        with self.client_factory(self.db, user_id) as client:
            snapshot = client.fetch_complete_organization(org)
        logger.info(
            f"Fetched snapshot of {org}: {len(snapshot['repos'])} repos, "
            f"{len(snapshot['members'])} members"
        )
        return snapshot
