"""GitHub data and sync DTOs"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def to_payload(value: Any) -> Any:
    """Convert entities (or lists of them) into JSON-ready dicts."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [to_payload(item) for item in value]
    return value


# =============================================================================
# Requests
# =============================================================================


class UserScopedRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")


class SyncRepositoryRequest(UserScopedRequest):
    include_commits: bool = Field(True, alias="includeCommits")
    include_pulls: bool = Field(True, alias="includePulls")
    include_issues: bool = Field(True, alias="includeIssues")


class SyncOrgRepositoriesRequest(UserScopedRequest):
    limit: Optional[int] = Field(None, ge=1)
    include_details: bool = Field(True, alias="includeDetails")


# =============================================================================
# Responses
# =============================================================================


class ListResponse(BaseModel):
    success: bool = True
    count: int
    data: List[Any]


class DataResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: Any


class SyncResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    data: Any
    sync_stats: Dict[str, Any] = Field(..., alias="syncStats")


class TimelineSyncResponse(BaseModel):
    success: bool = True
    message: str
    cached: bool
    count: int
    data: List[Any]
