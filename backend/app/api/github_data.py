"""Live GitHub data endpoints (passthrough, nothing is stored)."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pymongo.database import Database

from app.database.mongo import get_db
from app.dtos import DataResponse, ListResponse
from app.services.github_data_service import GithubDataService

router = APIRouter(prefix="/integrations/github/data", tags=["GitHub Data"])


def get_github_data_service(db: Database = Depends(get_db)) -> GithubDataService:
    return GithubDataService(db)


def _list(data: list) -> ListResponse:
    return ListResponse(count=len(data), data=data)


@router.get("/organizations/{user_id}", response_model=ListResponse)
def get_organizations(
    user_id: str,
    service: GithubDataService = Depends(get_github_data_service),
):
    """List the user's personal account followed by their organizations."""
    return _list(service.list_organizations(user_id))


@router.get("/organizations/{org_name}/repos", response_model=ListResponse)
def get_organization_repos(
    org_name: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: GithubDataService = Depends(get_github_data_service),
):
    return _list(service.list_organization_repositories(user_id, org_name))


@router.get("/organizations/{org_name}/members", response_model=ListResponse)
def get_organization_members(
    org_name: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: GithubDataService = Depends(get_github_data_service),
):
    return _list(service.list_organization_members(user_id, org_name))


@router.get("/organizations/{org_name}/complete", response_model=DataResponse)
def get_complete_organization(
    org_name: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: GithubDataService = Depends(get_github_data_service),
):
    """Snapshot an organization with sample repository data, members and teams."""
    return DataResponse(data=service.get_complete_organization(user_id, org_name))


@router.get("/repos/{owner}/{repo}/commits", response_model=ListResponse)
def get_repo_commits(
    owner: str,
    repo: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    per_page: int = Query(100, ge=1, le=100),
    page: int = Query(1, ge=1),
    service: GithubDataService = Depends(get_github_data_service),
):
    return _list(service.list_commits(user_id, owner, repo, per_page=per_page, page=page))


@router.get("/repos/{owner}/{repo}/pulls", response_model=ListResponse)
def get_repo_pulls(
    owner: str,
    repo: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    state: str = Query("all"),
    per_page: int = Query(100, ge=1, le=100),
    page: int = Query(1, ge=1),
    service: GithubDataService = Depends(get_github_data_service),
):
    return _list(
        service.list_pull_requests(
            user_id, owner, repo, state=state, per_page=per_page, page=page
        )
    )


@router.get("/repos/{owner}/{repo}/issues", response_model=ListResponse)
def get_repo_issues(
    owner: str,
    repo: str,
    user_id: Optional[str] = Query(None, alias="userId"),
    state: str = Query("all"),
    per_page: int = Query(100, ge=1, le=100),
    page: int = Query(1, ge=1),
    service: GithubDataService = Depends(get_github_data_service),
):
    return _list(
        service.list_issues(user_id, owner, repo, state=state, per_page=per_page, page=page)
    )


@router.get("/repos/{owner}/{repo}/issues/{issue_number}/timeline", response_model=ListResponse)
def get_issue_timeline(
    owner: str,
    repo: str,
    issue_number: int,
    user_id: Optional[str] = Query(None, alias="userId"),
    service: GithubDataService = Depends(get_github_data_service),
):
    return _list(service.list_issue_timeline(user_id, owner, repo, issue_number))
