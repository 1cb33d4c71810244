"""Sync GitHub data into MongoDB and read back what is stored."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from pymongo.database import Database

from app.database.mongo import get_db
from app.dtos import (
    DataResponse,
    ListResponse,
    SyncOrgRepositoriesRequest,
    SyncRepositoryRequest,
    SyncResponse,
    TimelineSyncResponse,
    UserScopedRequest,
    to_payload,
)
from app.entities.enums import RepositorySyncStatus
from app.repositories.repository import CHILD_COLLECTIONS
from app.services.sync_service import SyncService

router = APIRouter(prefix="/integrations/github", tags=["GitHub Sync"])


def get_sync_service(db: Database = Depends(get_db)) -> SyncService:
    return SyncService(db)


# =============================================================================
# Sync
# =============================================================================


@router.post("/sync/organization/{org_name}", response_model=SyncResponse)
def sync_organization(
    org_name: str,
    payload: Optional[UserScopedRequest] = Body(default=None),
    service: SyncService = Depends(get_sync_service),
):
    """Fetch an organization (or personal account) and its members and store them."""
    payload = payload or UserScopedRequest()
    result = service.sync_organization(payload.user_id, org_name)
    return SyncResponse(
        message="Organization data synced successfully",
        data=to_payload(result["organization"]),
        sync_stats=result["sync_stats"],
    )


@router.post("/sync/repository/{owner}/{repo}", response_model=SyncResponse)
def sync_repository(
    owner: str,
    repo: str,
    payload: Optional[SyncRepositoryRequest] = Body(default=None),
    service: SyncService = Depends(get_sync_service),
):
    """Sync a repository with its commits, pull requests and issues."""
    payload = payload or SyncRepositoryRequest()
    result = service.sync_repository(
        payload.user_id,
        owner,
        repo,
        include_commits=payload.include_commits,
        include_pulls=payload.include_pulls,
        include_issues=payload.include_issues,
    )
    message = "Repository data synced successfully"
    if result["repository"].sync_status == RepositorySyncStatus.FAILED.value:
        message = "Repository data sync failed"
    elif result["sync_stats"]["failed"]:
        message = "Repository data partially synced"
    return SyncResponse(
        message=message,
        data=to_payload(result["repository"]),
        sync_stats=result["sync_stats"],
    )


@router.post("/sync/organization/{org_name}/repositories", response_model=DataResponse)
def sync_organization_repositories(
    org_name: str,
    payload: Optional[SyncOrgRepositoriesRequest] = Body(default=None),
    service: SyncService = Depends(get_sync_service),
):
    """Sync up to ``limit`` repositories of an organization."""
    payload = payload or SyncOrgRepositoriesRequest()
    result = service.sync_org_repositories(
        payload.user_id,
        org_name,
        limit=payload.limit,
        include_details=payload.include_details,
    )
    message = result.pop("message")
    return DataResponse(message=message, data=result)


@router.post(
    "/sync/issue-timeline/{owner}/{repo}/{issue_number}",
    response_model=TimelineSyncResponse,
)
def sync_issue_timeline(
    owner: str,
    repo: str,
    issue_number: int,
    payload: Optional[UserScopedRequest] = Body(default=None),
    service: SyncService = Depends(get_sync_service),
):
    """Return an issue's timeline, fetching it from GitHub only if not yet stored."""
    payload = payload or UserScopedRequest()
    result = service.sync_issue_timeline(payload.user_id, owner, repo, issue_number)
    timeline = to_payload(result["timeline"])
    return TimelineSyncResponse(
        message=(
            "Timeline already cached" if result["cached"] else "Timeline fetched and stored"
        ),
        cached=result["cached"],
        count=len(timeline),
        data=timeline,
    )


# =============================================================================
# Stored data
# =============================================================================


@router.get("/stored/organizations/{user_id}", response_model=ListResponse)
def get_stored_organizations(
    user_id: str,
    service: SyncService = Depends(get_sync_service),
):
    organizations = service.list_stored_organizations(user_id)
    return ListResponse(count=len(organizations), data=to_payload(organizations))


@router.get("/stored/organizations/{org_name}/repositories", response_model=ListResponse)
def get_stored_organization_repositories(
    org_name: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: SyncService = Depends(get_sync_service),
):
    """List stored repositories without their commits, pull requests and issues."""
    repositories = service.list_stored_repositories(user_id, org_name)
    data = [
        repository.model_dump(mode="json", by_alias=True, exclude=set(CHILD_COLLECTIONS))
        for repository in repositories
    ]
    return ListResponse(count=len(data), data=data)


@router.get("/stored/repositories/{owner}/{repo}", response_model=DataResponse)
def get_stored_repository(
    owner: str,
    repo: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: SyncService = Depends(get_sync_service),
):
    repository = service.get_stored_repository(user_id, owner, repo)
    return DataResponse(data=to_payload(repository))
