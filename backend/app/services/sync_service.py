"""
Sync GitHub organizations and repositories into MongoDB.

Each public method builds its own GitHub client from the user's stored
integration, so nothing holding a credential outlives the call.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional, Sequence

from pymongo.database import Database

from app.config import settings
from app.entities.enums import (
    OrganizationSyncStatus,
    RepositorySyncStatus,
    SyncKind,
)
from app.entities.organization import Organization
from app.entities.repository import Repository
from app.repositories.organization import OrganizationRepository
from app.repositories.repository import RepositoryRepository
from app.services.errors import (
    NotFoundError,
    PersistenceError,
    UpstreamError,
    require_fields,
)
from app.services.github.github_client import GitHubClient, get_user_github_client
from app.services.sync.mappers import (
    map_organization,
    map_repository_fields,
    map_timeline,
)
from app.services.sync.merge import mark_failed, merge_kind

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Database, str], GitHubClient]

ALL_KINDS = (SyncKind.COMMITS, SyncKind.PULL_REQUESTS, SyncKind.ISSUES)


class SyncService:
    def __init__(self, db: Database, client_factory: Optional[ClientFactory] = None):
        self.db = db
        self.client_factory = client_factory or get_user_github_client
        self.organizations = OrganizationRepository(db)
        self.repositories = RepositoryRepository(db)

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def sync_organization(self, user_id: str, org_login: str) -> Dict[str, Any]:
        require_fields({"userId": user_id, "orgName": org_login}, ["userId", "orgName"])

        with self.client_factory(self.db, user_id) as client:
            organization, members_count = self._sync_organization(client, user_id, org_login)

        logger.info(
            f"Synced organization {org_login} for user {user_id} "
            f"({members_count} members)"
        )
        return {
            "organization": organization,
            "sync_stats": {"members_count": members_count},
        }

    def _sync_organization(
        self, client: GitHubClient, user_id: str, org_login: str
    ) -> tuple[Organization, int]:
        details = client.get_organization(org_login)
        if not details.success:
            # The login may be a personal account rather than an organization
            details = client.get_user(org_login)
        if not details.success:
            raise UpstreamError(f"Failed to fetch organization details: {details.error}")

        members_result = client.list_organization_members(org_login)
        members = members_result.data if members_result.success else []

        fields = map_organization(details.data, members)
        fields.pop("login", None)
        organization = self.organizations.upsert_by_login(
            user_id,
            details.data.get("login") or org_login,
            {
                **fields,
                "sync_status": OrganizationSyncStatus.COMPLETED.value,
                "sync_error": None,
            },
        )
        return organization, len(members or [])

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def sync_repository(
        self,
        user_id: str,
        owner: str,
        repo: str,
        include_commits: bool = True,
        include_pulls: bool = True,
        include_issues: bool = True,
    ) -> Dict[str, Any]:
        require_fields(
            {"userId": user_id, "owner": owner, "repo": repo},
            ["userId", "owner", "repo"],
        )

        kinds = [
            kind
            for kind, enabled in (
                (SyncKind.COMMITS, include_commits),
                (SyncKind.PULL_REQUESTS, include_pulls),
                (SyncKind.ISSUES, include_issues),
            )
            if enabled
        ]

        with self.client_factory(self.db, user_id) as client:
            repo_result = client.get_repository(owner, repo)
            if not repo_result.success:
                raise UpstreamError(f"Failed to fetch repository: {repo_result.error}")

            repository = self.repositories.upsert_base(
                user_id,
                owner,
                repo_result.data.get("name") or repo,
                {
                    **map_repository_fields(repo_result.data),
                    "sync_status": RepositorySyncStatus.SYNCING.value,
                },
            )

            try:
                stats = self._sync_kinds(
                    client,
                    repository,
                    owner,
                    repository.name,
                    kinds,
                    per_page=settings.SYNC_PER_PAGE,
                    prefetch_timelines=True,
                )
            except Exception as exc:
                self._record_sync_failure(repository, exc)
                raise

        reloaded = self.repositories.find_by_name(user_id, owner, repository.name)
        logger.info(f"Synced repository {owner}/{repository.name} for user {user_id}: {stats}")
        return {"repository": reloaded or repository, "sync_stats": stats}

    def sync_org_repositories(
        self,
        user_id: str,
        org_login: str,
        limit: Optional[int] = None,
        include_details: bool = True,
    ) -> Dict[str, Any]:
        require_fields({"userId": user_id, "orgName": org_login}, ["userId", "orgName"])
        limit = limit or settings.SYNC_ALL_DEFAULT_LIMIT

        with self.client_factory(self.db, user_id) as client:
            try:
                self._sync_organization(client, user_id, org_login)
            except UpstreamError as exc:
                logger.warning(f"Organization {org_login} not synced: {exc.message}")

            repos_result = client.list_organization_repositories(
                org_login, {"per_page": settings.SYNC_PER_PAGE}
            )
            if not repos_result.success:
                raise UpstreamError(f"Failed to fetch repositories: {repos_result.error}")

            all_repos = repos_result.data or []
            repos = all_repos[:limit]
            results: List[Dict[str, Any]] = []

            for repo_data in repos:
                name = repo_data.get("name")
                try:
                    repository = self.repositories.upsert_base(
                        user_id,
                        org_login,
                        name,
                        {
                            **map_repository_fields(repo_data),
                            "sync_status": RepositorySyncStatus.COMPLETED.value,
                        },
                    )
                    entry: Dict[str, Any] = {
                        "name": repository.name,
                        "synced": True,
                        "commits": 0,
                        "pull_requests": 0,
                        "issues": 0,
                    }
                    if include_details:
                        owner = (repo_data.get("owner") or {}).get("login") or org_login
                        stats = self._sync_kinds(
                            client,
                            repository,
                            owner,
                            repository.name,
                            ALL_KINDS,
                            per_page=settings.SYNC_ALL_PER_PAGE,
                            prefetch_timelines=False,
                        )
                        entry.update({kind.value: stats[kind.value] for kind in ALL_KINDS})
                        if stats["failed"]:
                            entry["failed"] = stats["failed"]
                    results.append(entry)
                except Exception as exc:
                    logger.error(f"Failed to sync {org_login}/{name}: {exc}")
                    results.append({"name": name, "synced": False, "error": str(exc)})

        self.organizations.update_repository_count(user_id, org_login, len(repos))

        synced = sum(1 for r in results if r["synced"])
        return {
            "message": f"Synced {synced} of {len(repos)} repositories",
            "organization": org_login,
            "total_repos": len(all_repos),
            "synced_repos": synced,
            "repositories": results,
        }

    def _sync_kinds(
        self,
        client: GitHubClient,
        repository: Repository,
        owner: str,
        repo: str,
        kinds: Sequence[SyncKind],
        per_page: int,
        prefetch_timelines: bool,
    ) -> Dict[str, Any]:
        """
        Fetch and merge each data kind one after another, then save once.

        A failed fetch marks that kind failed and moves on; an empty page is
        skipped without touching its sync details.
        """
        fetchers = {
            SyncKind.COMMITS: lambda: client.list_commits(owner, repo, {"per_page": per_page}),
            SyncKind.PULL_REQUESTS: lambda: client.list_pull_requests(
                owner, repo, {"state": "all", "per_page": per_page}
            ),
            SyncKind.ISSUES: lambda: client.list_issues(
                owner, repo, {"state": "all", "per_page": per_page}
            ),
        }

        stats: Dict[str, Any] = {
            "repository": repo,
            "commits": 0,
            "pull_requests": 0,
            "issues": 0,
            "timelines_fetched": 0,
            "failed": [],
        }
        errors: List[str] = []

        for kind in kinds:
            result = fetchers[kind]()
            if not result.success:
                logger.warning(f"Failed to fetch {kind.value} for {owner}/{repo}: {result.error}")
                mark_failed(repository, kind, result.error)
                stats["failed"].append(kind.value)
                errors.append(f"{kind.value}: {result.error}")
                continue

            records = result.data or []
            if not records:
                continue

            if kind == SyncKind.ISSUES and prefetch_timelines:
                stats["timelines_fetched"] = self.prefetch_issue_timelines(
                    client, owner, repo, records
                )

            detail = merge_kind(repository, kind, records)
            stats[kind.value] = detail.count

        if not errors:
            repository.sync_status = RepositorySyncStatus.COMPLETED.value
        elif len(errors) == len(kinds):
            repository.sync_status = RepositorySyncStatus.FAILED.value
        else:
            repository.sync_status = RepositorySyncStatus.PARTIAL.value
        repository.sync_error = "; ".join(errors) if errors else None
        self.repositories.save(repository)
        return stats

    def _record_sync_failure(self, repository: Repository, exc: Exception) -> None:
        """Move a repository out of ``syncing`` after an aborted sync."""
        logger.error(f"Sync of {repository.full_name or repository.name} aborted: {exc}")
        try:
            self.repositories.update_one(
                repository.id,
                {
                    "sync_status": RepositorySyncStatus.FAILED.value,
                    "sync_error": str(exc),
                },
            )
        except PersistenceError as write_exc:
            logger.error(f"Could not record sync failure for {repository.name}: {write_exc}")

    def prefetch_issue_timelines(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        issues: List[Dict[str, Any]],
    ) -> int:
        """
        Attach timelines to the first issues of a fetched page.

        Runs in groups of ``TIMELINE_PREFETCH_BATCH_SIZE`` concurrent calls;
        a group starts only after the previous one has fully settled. A
        failure is logged and that issue is merged without a timeline.

        Returns:
            Number of issues that received a timeline
        """
        candidates = issues[: settings.TIMELINE_PREFETCH_LIMIT]
        batch_size = settings.TIMELINE_PREFETCH_BATCH_SIZE
        fetched = 0

        with ThreadPoolExecutor(max_workers=batch_size) as executor:
            for start in range(0, len(candidates), batch_size):
                batch = candidates[start : start + batch_size]
                futures = {
                    executor.submit(
                        client.list_issue_timeline, owner, repo, issue["number"]
                    ): issue
                    for issue in batch
                }

                for future in as_completed(futures):
                    issue = futures[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        logger.error(
                            f"Failed to fetch timeline for issue #{issue['number']}: {e}"
                        )
                        continue

                    if result.success and result.data is not None:
                        issue["timeline"] = result.data
                        fetched += 1
                    else:
                        logger.warning(
                            f"Failed to fetch timeline for issue #{issue['number']}: "
                            f"{result.error}"
                        )

        return fetched

    # ------------------------------------------------------------------
    # On-demand timeline
    # ------------------------------------------------------------------

    def sync_issue_timeline(
        self, user_id: str, owner: str, repo: str, issue_number: int
    ) -> Dict[str, Any]:
        """
        Return an issue's timeline, fetching and storing it on first request.

        A stored non-empty timeline is returned with ``cached=True`` without
        calling GitHub.
        """
        require_fields({"userId": user_id}, ["userId"])

        repository = self.repositories.find_by_owner(user_id, owner, repo)
        if not repository:
            raise NotFoundError("Repository not found in database")

        issue = repository.find_issue(issue_number)
        if not issue:
            raise NotFoundError("Issue not found in repository")

        if issue.timeline:
            return {"cached": True, "timeline": issue.timeline}

        with self.client_factory(self.db, user_id) as client:
            result = client.list_issue_timeline(owner, repo, issue_number)

        if not result.success or result.data is None:
            raise UpstreamError(f"Failed to fetch timeline from GitHub: {result.error}")

        timeline = map_timeline(result.data)
        issue.timeline = timeline
        issue.timeline_count = len(timeline)
        self.repositories.save(repository)

        logger.info(
            f"Stored {len(timeline)} timeline events for {owner}/{repo}#{issue_number}"
        )
        return {"cached": False, "timeline": timeline}

    # ------------------------------------------------------------------
    # Stored data
    # ------------------------------------------------------------------

    def list_stored_organizations(self, user_id: str) -> List[Organization]:
        require_fields({"userId": user_id}, ["userId"])
        return self.organizations.list_by_user(user_id)

    def list_stored_repositories(self, user_id: str, org_login: str) -> List[Repository]:
        require_fields({"userId": user_id}, ["userId"])
        return self.repositories.list_by_organization(user_id, org_login)

    def get_stored_repository(self, user_id: str, owner: str, repo: str) -> Repository:
        require_fields({"userId": user_id}, ["userId"])
        repository = self.repositories.find_by_owner(user_id, owner, repo)
        if not repository:
            raise NotFoundError("Repository not found in database")
        return repository
